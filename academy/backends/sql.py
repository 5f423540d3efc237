"""
SQL Backend

Backend gateway over the Postgres database using async SQLAlchemy.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence

from sqlalchemy import func, select, text, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from academy.backends.base import Backend, parse_logged
from academy.core.exceptions import BackendError
from academy.models.certificate import Certificate
from academy.models.course import Chapter, Course
from academy.models.enrollment import Enrollment
from academy.models.enums import CertificateStatus, UserRole
from academy.models.lesson import Lesson
from academy.models.lesson_progress import LessonProgress
from academy.models.profile import Profile
from academy.models.quiz_attempt import QuizAttempt
from academy.schemas.records import (
    CertificateRecord,
    CourseCompletionRecord,
    EnrollmentRecord,
    LessonProgressRecord,
    LessonRecord,
    ProfileRecord,
    QuizAttemptRecord,
)

logger = logging.getLogger(__name__)


def _rows(result: Any) -> List[dict]:
    return [dict(row) for row in result.mappings().all()]


class SqlBackend(Backend):
    """Backend gateway bound to one AsyncSession."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _execute(self, statement: Any) -> Any:
        try:
            return await self.session.execute(statement)
        except SQLAlchemyError as e:
            logger.error("Backend query failed: %s", e)
            raise BackendError("Backend query failed") from e

    async def _write(self, statement: Any) -> Any:
        """Execute a write and commit it; roll back on failure."""
        try:
            result = await self.session.execute(statement)
            await self.session.commit()
            return result
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Backend write failed: %s", e)
            raise BackendError("Backend write failed") from e

    # ---------- Profiles ----------

    async def get_profile(self, user_id: uuid.UUID) -> Optional[ProfileRecord]:
        result = await self._execute(select(Profile).where(Profile.id == user_id))
        profile = result.scalar_one_or_none()
        if profile is None:
            return None
        records = parse_logged(ProfileRecord, [profile])
        return records[0] if records else None

    async def get_profiles(self, role: Optional[UserRole] = None) -> List[ProfileRecord]:
        query = select(Profile).order_by(Profile.full_name)
        if role is not None:
            query = query.where(Profile.role == role)
        result = await self._execute(query)
        return parse_logged(ProfileRecord, result.scalars().all())

    async def touch_activity(self, user_id: uuid.UUID) -> None:
        await self._write(
            update(Profile)
            .where(Profile.id == user_id)
            .values(last_activity=func.now())
        )

    # ---------- Courses & enrollments ----------

    async def get_enrollments(
        self,
        student_id: Optional[uuid.UUID] = None,
        course_id: Optional[uuid.UUID] = None,
    ) -> List[EnrollmentRecord]:
        query = (
            select(
                Enrollment.student_id,
                Enrollment.course_id,
                Enrollment.cohort_name,
                Enrollment.enrolled_at,
                Course.title.label("course_title"),
            )
            .join(Course, Course.id == Enrollment.course_id)
            .order_by(Enrollment.enrolled_at)
        )
        if student_id is not None:
            query = query.where(Enrollment.student_id == student_id)
        if course_id is not None:
            query = query.where(Enrollment.course_id == course_id)

        result = await self._execute(query)
        return parse_logged(EnrollmentRecord, _rows(result))

    def _lesson_query(self):
        return (
            select(
                Lesson.id,
                Chapter.course_id,
                Lesson.chapter_id,
                Lesson.title,
                Lesson.content_type,
                Lesson.order_index,
            )
            .join(Chapter, Chapter.id == Lesson.chapter_id)
        )

    async def get_course_lessons(self, course_ids: Sequence[uuid.UUID]) -> List[LessonRecord]:
        if not course_ids:
            return []
        query = (
            self._lesson_query()
            .where(Chapter.course_id.in_(list(course_ids)))
            .order_by(Chapter.order_index, Lesson.order_index)
        )
        result = await self._execute(query)
        return parse_logged(LessonRecord, _rows(result))

    async def get_lesson(self, lesson_id: uuid.UUID) -> Optional[LessonRecord]:
        result = await self._execute(self._lesson_query().where(Lesson.id == lesson_id))
        row = result.mappings().one_or_none()
        if row is None:
            return None
        records = parse_logged(LessonRecord, [dict(row)])
        return records[0] if records else None

    # ---------- Lesson progress ----------

    async def get_lesson_progress(
        self,
        student_id: Optional[uuid.UUID] = None,
        course_id: Optional[uuid.UUID] = None,
    ) -> List[LessonProgressRecord]:
        query = select(LessonProgress)
        if student_id is not None:
            query = query.where(LessonProgress.student_id == student_id)
        if course_id is not None:
            query = (
                query.join(Lesson, Lesson.id == LessonProgress.lesson_id)
                .join(Chapter, Chapter.id == Lesson.chapter_id)
                .where(Chapter.course_id == course_id)
            )
        result = await self._execute(query)
        return parse_logged(LessonProgressRecord, result.scalars().all())

    async def upsert_lesson_progress(
        self,
        student_id: uuid.UUID,
        lesson_id: uuid.UUID,
        is_completed: bool,
    ) -> LessonProgressRecord:
        now = datetime.now(timezone.utc)
        statement = insert(LessonProgress).values(
            id=uuid.uuid4(),
            student_id=student_id,
            lesson_id=lesson_id,
            is_completed=is_completed,
            completed_at=now if is_completed else None,
        )
        # Re-completing keeps the original completion time
        completed_at = (
            func.coalesce(LessonProgress.__table__.c.completed_at, statement.excluded.completed_at)
            if is_completed
            else None
        )
        statement = statement.on_conflict_do_update(
            index_elements=["student_id", "lesson_id"],
            set_={
                "is_completed": statement.excluded.is_completed,
                "completed_at": completed_at,
            },
        ).returning(
            LessonProgress.student_id,
            LessonProgress.lesson_id,
            LessonProgress.is_completed,
            LessonProgress.completed_at,
        )

        result = await self._write(statement)
        return LessonProgressRecord.model_validate(dict(result.mappings().one()))

    # ---------- Quizzes ----------

    async def get_quiz_attempts(
        self,
        teacher_id: Optional[uuid.UUID] = None,
        student_id: Optional[uuid.UUID] = None,
    ) -> List[QuizAttemptRecord]:
        query = (
            select(
                QuizAttempt.id,
                QuizAttempt.student_id,
                QuizAttempt.lesson_id,
                QuizAttempt.score,
                QuizAttempt.total_points,
                QuizAttempt.passed,
                QuizAttempt.submitted_at,
                Profile.full_name.label("student_name"),
                Profile.email.label("student_email"),
                Lesson.title.label("lesson_title"),
                Chapter.title.label("chapter_title"),
                Course.id.label("course_id"),
                Course.title.label("course_title"),
            )
            .join(Profile, Profile.id == QuizAttempt.student_id, isouter=True)
            .join(Lesson, Lesson.id == QuizAttempt.lesson_id, isouter=True)
            .join(Chapter, Chapter.id == Lesson.chapter_id, isouter=True)
            .join(Course, Course.id == Chapter.course_id, isouter=True)
            .order_by(QuizAttempt.submitted_at.desc())
        )
        if teacher_id is not None:
            query = query.where(Course.teacher_id == teacher_id)
        elif student_id is not None:
            query = query.where(QuizAttempt.student_id == student_id)

        result = await self._execute(query)
        return parse_logged(QuizAttemptRecord, _rows(result))

    # ---------- Certificates ----------

    async def get_course_completions(self) -> List[CourseCompletionRecord]:
        result = await self._execute(text("SELECT * FROM get_course_completions()"))
        return parse_logged(CourseCompletionRecord, _rows(result))

    async def get_certificate(
        self,
        student_id: uuid.UUID,
        course_id: uuid.UUID,
    ) -> Optional[CertificateRecord]:
        result = await self._execute(
            select(Certificate).where(
                Certificate.student_id == student_id,
                Certificate.course_id == course_id,
            )
        )
        certificate = result.scalar_one_or_none()
        if certificate is None:
            return None
        records = parse_logged(CertificateRecord, [certificate])
        return records[0] if records else None

    async def get_certificates(self, student_id: uuid.UUID) -> List[CertificateRecord]:
        result = await self._execute(
            select(Certificate)
            .where(Certificate.student_id == student_id)
            .order_by(Certificate.approved_at.desc())
        )
        return parse_logged(CertificateRecord, result.scalars().all())

    async def approve_certificate(
        self,
        student_id: uuid.UUID,
        course_id: uuid.UUID,
        certificate_url: str,
        notes: Optional[str],
    ) -> CertificateRecord:
        statement = insert(Certificate).values(
            id=uuid.uuid4(),
            student_id=student_id,
            course_id=course_id,
            status=CertificateStatus.APPROVED,
            certificate_url=certificate_url,
            approved_at=func.now(),
            notes=notes,
        )
        statement = statement.on_conflict_do_update(
            index_elements=["student_id", "course_id"],
            set_={
                "status": statement.excluded.status,
                "certificate_url": statement.excluded.certificate_url,
                "approved_at": statement.excluded.approved_at,
                "notes": statement.excluded.notes,
            },
        ).returning(
            Certificate.id,
            Certificate.student_id,
            Certificate.course_id,
            Certificate.status,
            Certificate.certificate_url,
            Certificate.approved_at,
            Certificate.notes,
        )

        result = await self._write(statement)
        return CertificateRecord.model_validate(dict(result.mappings().one()))
