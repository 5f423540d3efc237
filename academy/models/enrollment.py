"""
Enrollment Model

Student-course association with optional cohort.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from academy.core.database import Base

if TYPE_CHECKING:
    from academy.models.course import Course
    from academy.models.profile import Profile


class Enrollment(Base):
    """
    Enrollment model representing a student taking a course.

    Unique constraint ensures a student can only enroll once per course.

    Attributes:
        id: UUID primary key.
        student_id: Foreign key to profiles.
        course_id: Foreign key to courses.
        cohort_name: Optional cohort the student was placed in.
        enrolled_at: When the student enrolled.
    """

    __tablename__ = "course_enrollments"

    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_enrollment_student_course"),
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
    course_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
    )
    cohort_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    enrolled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    # Relationships
    student: Mapped["Profile"] = relationship(
        "Profile",
        back_populates="enrollments",
    )
    course: Mapped["Course"] = relationship(
        "Course",
        back_populates="enrollments",
    )

    def __repr__(self) -> str:
        return f"<Enrollment(id={self.id}, student_id={self.student_id}, course_id={self.course_id})>"
