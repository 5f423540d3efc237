"""
Certificate Model

Course completion certificates approved by an administrator.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from academy.core.database import Base
from academy.models.enums import CertificateStatus


class Certificate(Base):
    """
    Certificate model for course completion.

    A row is pending until an administrator approves it with a URL.

    Attributes:
        id: UUID primary key.
        student_id: Foreign key to profiles.
        course_id: Foreign key to courses.
        status: pending or approved.
        certificate_url: Durable URL of the issued certificate.
        approved_at: When the certificate was approved.
        notes: Optional admin notes.
    """

    __tablename__ = "certificates"

    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_certificate_student_course"),
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
    status: Mapped[CertificateStatus] = mapped_column(
        Enum(CertificateStatus, name="certificate_status", values_callable=lambda e: [m.value for m in e]),
        default=CertificateStatus.PENDING,
        nullable=False,
    )
    certificate_url: Mapped[Optional[str]] = mapped_column(
        String(1000),
        nullable=True,
    )
    approved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Certificate(id={self.id}, status={self.status})>"
