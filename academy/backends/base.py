"""
Backend Gateway

Abstract interface to the managed backend. Services receive a Backend at
construction, so tests can hand them an in-memory double.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional, Sequence, Type

from academy.models.enums import UserRole
from academy.schemas.records import (
    CertificateRecord,
    CourseCompletionRecord,
    EnrollmentRecord,
    LessonProgressRecord,
    LessonRecord,
    ProfileRecord,
    QuizAttemptRecord,
    R,
    parse_rows,
)

logger = logging.getLogger(__name__)


def parse_logged(model: Type[R], rows: Iterable[Any]) -> List[R]:
    """Parse rows, logging and dropping the malformed ones."""
    records, errors = parse_rows(model, rows)
    for error in errors:
        logger.warning("Skipping malformed backend row: %s", error)
    return records


class Backend(ABC):
    """
    Read/write operations the services need from the backend.

    Reads never mutate. Writes are single atomic calls; uniqueness
    (one progress row per student and lesson) is enforced by the backend.
    """

    # ---------- Profiles ----------

    @abstractmethod
    async def get_profile(self, user_id: uuid.UUID) -> Optional[ProfileRecord]:
        """Get one profile, or None."""

    @abstractmethod
    async def get_profiles(self, role: Optional[UserRole] = None) -> List[ProfileRecord]:
        """List profiles, optionally restricted to one role."""

    @abstractmethod
    async def touch_activity(self, user_id: uuid.UUID) -> None:
        """Record that the user is active now."""

    # ---------- Courses & enrollments ----------

    @abstractmethod
    async def get_enrollments(
        self,
        student_id: Optional[uuid.UUID] = None,
        course_id: Optional[uuid.UUID] = None,
    ) -> List[EnrollmentRecord]:
        """List enrollments, filtered by student and/or course."""

    @abstractmethod
    async def get_course_lessons(self, course_ids: Sequence[uuid.UUID]) -> List[LessonRecord]:
        """List the current lessons of the given courses."""

    @abstractmethod
    async def get_lesson(self, lesson_id: uuid.UUID) -> Optional[LessonRecord]:
        """Get one lesson with its course id, or None."""

    # ---------- Lesson progress ----------

    @abstractmethod
    async def get_lesson_progress(
        self,
        student_id: Optional[uuid.UUID] = None,
        course_id: Optional[uuid.UUID] = None,
    ) -> List[LessonProgressRecord]:
        """List progress rows; student_id None means every student."""

    @abstractmethod
    async def upsert_lesson_progress(
        self,
        student_id: uuid.UUID,
        lesson_id: uuid.UUID,
        is_completed: bool,
    ) -> LessonProgressRecord:
        """Insert or update the single progress row for (student, lesson)."""

    # ---------- Quizzes ----------

    @abstractmethod
    async def get_quiz_attempts(
        self,
        teacher_id: Optional[uuid.UUID] = None,
        student_id: Optional[uuid.UUID] = None,
    ) -> List[QuizAttemptRecord]:
        """List attempts, newest first, scoped to a teacher's courses or a student."""

    # ---------- Certificates ----------

    @abstractmethod
    async def get_course_completions(self) -> List[CourseCompletionRecord]:
        """Read the backend's precomputed completion rollup."""

    @abstractmethod
    async def get_certificate(
        self,
        student_id: uuid.UUID,
        course_id: uuid.UUID,
    ) -> Optional[CertificateRecord]:
        """Get the certificate for (student, course), or None."""

    @abstractmethod
    async def get_certificates(self, student_id: uuid.UUID) -> List[CertificateRecord]:
        """List every certificate row for a student."""

    @abstractmethod
    async def approve_certificate(
        self,
        student_id: uuid.UUID,
        course_id: uuid.UUID,
        certificate_url: str,
        notes: Optional[str],
    ) -> CertificateRecord:
        """Mark the certificate approved with the given URL."""
