"""
Lesson Progress Model

Completion marker for one student on one lesson.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from academy.core.database import Base


class LessonProgress(Base):
    """
    Lesson progress model.

    At most one row per (student, lesson); writes are upserts on that pair.

    Attributes:
        student_id: Foreign key to profiles.
        lesson_id: Foreign key to course_lessons.
        is_completed: Whether the lesson is marked complete.
        completed_at: When it was marked complete (cleared on un-complete).
    """

    __tablename__ = "student_lesson_progress"

    __table_args__ = (
        UniqueConstraint("student_id", "lesson_id", name="uq_lesson_progress_student_lesson"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    student_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    lesson_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("course_lessons.id", ondelete="CASCADE"),
        nullable=False,
    )
    is_completed: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<LessonProgress(student_id={self.student_id}, lesson_id={self.lesson_id}, done={self.is_completed})>"
