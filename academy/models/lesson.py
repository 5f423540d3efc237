"""
Lesson Model

Single unit of content inside a chapter.
"""

import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from academy.core.database import Base

if TYPE_CHECKING:
    from academy.models.course import Chapter


class Lesson(Base):
    """
    Lesson model.

    Attributes:
        id: UUID primary key.
        chapter_id: Foreign key to course_chapters.
        title: Lesson title (the quiz name for quiz lessons).
        content_type: video, pdf, document, url, quiz, assignment or any
            other label the content editor stores.
        order_index: Position inside the chapter.
        duration: Optional duration in minutes.
    """

    __tablename__ = "course_lessons"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    chapter_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("course_chapters.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )
    content_type: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )
    order_index: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    duration: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )

    chapter: Mapped["Chapter"] = relationship(
        "Chapter",
        back_populates="lessons",
    )

    def __repr__(self) -> str:
        return f"<Lesson(id={self.id}, type={self.content_type})>"
