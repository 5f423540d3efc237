"""
Pytest Configuration and Fixtures

Provides reusable fixtures for testing the Academy Backend: an in-memory
backend double, sample course data and an authenticated API client.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from academy.backends.base import Backend
from academy.models.enums import CertificateStatus, UserRole
from academy.schemas.records import (
    CertificateRecord,
    CourseCompletionRecord,
    EnrollmentRecord,
    LessonProgressRecord,
    LessonRecord,
    ProfileRecord,
    QuizAttemptRecord,
)


BASE_TIME = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


# ==================== Backend Double ====================

class FakeBackend(Backend):
    """In-memory Backend keyed the same way the real tables are."""

    def __init__(self):
        self.profiles: Dict[uuid.UUID, ProfileRecord] = {}
        self.enrollments: List[EnrollmentRecord] = []
        self.lessons: Dict[uuid.UUID, LessonRecord] = {}
        self.progress: Dict[tuple, LessonProgressRecord] = {}
        self.attempts: List[QuizAttemptRecord] = []
        self.completions: List[CourseCompletionRecord] = []
        self.certificates: Dict[tuple, CertificateRecord] = {}
        self.course_teachers: Dict[uuid.UUID, uuid.UUID] = {}
        self.touched: List[uuid.UUID] = []
        self.clock = BASE_TIME

    # ---------- Seeding helpers ----------

    def add_profile(self, role: UserRole = UserRole.STUDENT, **kwargs) -> ProfileRecord:
        profile = ProfileRecord(id=kwargs.pop("id", uuid.uuid4()), role=role, **kwargs)
        self.profiles[profile.id] = profile
        return profile

    def add_course(self, lesson_count: int, teacher_id: Optional[uuid.UUID] = None) -> tuple:
        course_id = uuid.uuid4()
        chapter_id = uuid.uuid4()
        lessons = []
        for index in range(lesson_count):
            lesson = LessonRecord(
                id=uuid.uuid4(),
                course_id=course_id,
                chapter_id=chapter_id,
                title=f"Lesson {index + 1}",
                order_index=index,
            )
            self.lessons[lesson.id] = lesson
            lessons.append(lesson)
        if teacher_id is not None:
            self.course_teachers[course_id] = teacher_id
        return course_id, lessons

    def enroll(self, student_id: uuid.UUID, course_id: uuid.UUID, title: str = "Course") -> None:
        self.enrollments.append(EnrollmentRecord(
            student_id=student_id,
            course_id=course_id,
            course_title=title,
            enrolled_at=BASE_TIME,
        ))

    # ---------- Backend interface ----------

    async def get_profile(self, user_id):
        return self.profiles.get(user_id)

    async def get_profiles(self, role=None):
        return [p for p in self.profiles.values() if role is None or p.role == role]

    async def touch_activity(self, user_id):
        self.touched.append(user_id)

    async def get_enrollments(self, student_id=None, course_id=None):
        return [
            e for e in self.enrollments
            if (student_id is None or e.student_id == student_id)
            and (course_id is None or e.course_id == course_id)
        ]

    async def get_course_lessons(self, course_ids: Sequence[uuid.UUID]):
        wanted = set(course_ids)
        return [lesson for lesson in self.lessons.values() if lesson.course_id in wanted]

    async def get_lesson(self, lesson_id):
        return self.lessons.get(lesson_id)

    async def get_lesson_progress(self, student_id=None, course_id=None):
        rows = []
        for row in self.progress.values():
            if student_id is not None and row.student_id != student_id:
                continue
            lesson = self.lessons.get(row.lesson_id)
            if course_id is not None and (lesson is None or lesson.course_id != course_id):
                continue
            rows.append(row)
        return rows

    async def upsert_lesson_progress(self, student_id, lesson_id, is_completed):
        self.clock += timedelta(minutes=1)
        key = (student_id, lesson_id)
        existing = self.progress.get(key)
        completed_at = None
        if is_completed:
            completed_at = (existing.completed_at if existing else None) or self.clock
        row = LessonProgressRecord(
            student_id=student_id,
            lesson_id=lesson_id,
            is_completed=is_completed,
            completed_at=completed_at,
        )
        self.progress[key] = row
        return row

    async def get_quiz_attempts(self, teacher_id=None, student_id=None):
        if teacher_id is not None:
            return [
                a for a in self.attempts
                if self.course_teachers.get(a.course_id) == teacher_id
            ]
        if student_id is not None:
            return [a for a in self.attempts if a.student_id == student_id]
        return list(self.attempts)

    async def get_course_completions(self):
        return list(self.completions)

    async def get_certificate(self, student_id, course_id):
        return self.certificates.get((student_id, course_id))

    async def get_certificates(self, student_id):
        return [c for c in self.certificates.values() if c.student_id == student_id]

    async def approve_certificate(self, student_id, course_id, certificate_url, notes):
        certificate = CertificateRecord(
            id=uuid.uuid4(),
            student_id=student_id,
            course_id=course_id,
            status=CertificateStatus.APPROVED,
            certificate_url=certificate_url,
            approved_at=self.clock,
            notes=notes,
        )
        self.certificates[(student_id, course_id)] = certificate
        return certificate


# ==================== Backend Fixtures ====================

@pytest.fixture
def backend() -> FakeBackend:
    """Empty in-memory backend."""
    return FakeBackend()


@pytest.fixture
def student(backend: FakeBackend) -> ProfileRecord:
    return backend.add_profile(full_name="Ada Lovelace", email="ada@example.com")


@pytest.fixture
def admin(backend: FakeBackend) -> ProfileRecord:
    return backend.add_profile(UserRole.ADMIN, full_name="Grace Admin", email="admin@example.com")


@pytest.fixture
def teacher(backend: FakeBackend) -> ProfileRecord:
    return backend.add_profile(UserRole.TEACHER, full_name="Tom Teacher", email="tom@example.com")


@pytest.fixture
def five_lesson_course(backend: FakeBackend, student: ProfileRecord, teacher: ProfileRecord):
    """A five-lesson course the sample student is enrolled in."""
    course_id, lessons = backend.add_course(5, teacher_id=teacher.id)
    backend.enroll(student.id, course_id, title="Python Basics")
    return course_id, lessons


@pytest.fixture
def make_attempt():
    """
    Factory fixture to create quiz attempts.

    Usage:
        attempt = make_attempt(score=8, total_points=10, passed=True)
    """
    def _create(
        score: int,
        total_points: int = 10,
        passed: bool = True,
        student_id: Optional[uuid.UUID] = None,
        course_id: Optional[uuid.UUID] = None,
        **kwargs,
    ) -> QuizAttemptRecord:
        return QuizAttemptRecord(
            id=uuid.uuid4(),
            student_id=student_id or uuid.uuid4(),
            lesson_id=uuid.uuid4(),
            score=score,
            total_points=total_points,
            passed=passed,
            submitted_at=kwargs.pop("submitted_at", BASE_TIME),
            course_id=course_id,
            **kwargs,
        )
    return _create


# ==================== Database Fixtures ====================

@pytest.fixture
def mock_async_session() -> AsyncMock:
    """
    Create a mock async database session.

    Returns:
        AsyncMock configured to behave like AsyncSession.
    """
    session = AsyncMock(spec=AsyncSession)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.execute = AsyncMock()
    return session


# ==================== HTTP Client Fixtures ====================

@pytest.fixture
def mock_httpx_response():
    """
    Factory fixture to create mock httpx responses.

    Usage:
        response = mock_httpx_response(status_code=200, json_data={"key": "value"})
    """
    def _create_response(status_code: int = 200, json_data=None, text: str = ""):
        response = MagicMock()
        response.status_code = status_code
        response.json.return_value = json_data if json_data is not None else []
        response.content = b"[]" if json_data is None else b"x"
        response.text = text
        return response
    return _create_response


@pytest.fixture
def mock_httpx_client(mock_httpx_response):
    """
    Create a mock httpx.AsyncClient.

    Returns:
        AsyncMock configured for HTTP operations.
    """
    client = AsyncMock()
    client.get = AsyncMock(return_value=mock_httpx_response())
    client.post = AsyncMock(return_value=mock_httpx_response())
    return client


# ==================== API Fixtures ====================

@pytest.fixture
def api_client(backend: FakeBackend):
    """TestClient whose requests run against the in-memory backend."""
    from academy.api.deps import get_backend
    from academy.main import app

    app.dependency_overrides[get_backend] = lambda: backend
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """
    Factory fixture building bearer headers for a profile.

    Usage:
        headers = auth_headers(student)
    """
    from academy.core.security import create_access_token

    def _headers(profile: ProfileRecord) -> dict:
        return {"Authorization": f"Bearer {create_access_token(profile.id)}"}
    return _headers
