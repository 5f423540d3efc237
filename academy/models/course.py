"""
Course Models

Course container and its chapters.
"""

import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from academy.core.database import Base

if TYPE_CHECKING:
    from academy.models.enrollment import Enrollment
    from academy.models.lesson import Lesson


class Course(Base):
    """
    Course model.

    Attributes:
        id: UUID primary key.
        title: Course title.
        teacher_id: Profile of the teacher who owns the course.
    """

    __tablename__ = "courses"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )
    teacher_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Relationships
    chapters: Mapped[list["Chapter"]] = relationship(
        "Chapter",
        back_populates="course",
        order_by="Chapter.order_index",
        cascade="all, delete-orphan",
    )
    enrollments: Mapped[list["Enrollment"]] = relationship(
        "Enrollment",
        back_populates="course",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, title={self.title[:30]})>"


class Chapter(Base):
    """Chapter grouping lessons inside a course."""

    __tablename__ = "course_chapters"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    course_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )
    order_index: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    course: Mapped["Course"] = relationship(
        "Course",
        back_populates="chapters",
    )
    lessons: Mapped[list["Lesson"]] = relationship(
        "Lesson",
        back_populates="chapter",
        order_by="Lesson.order_index",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Chapter(id={self.id}, course_id={self.course_id})>"
