"""
Profile Model

Public profile row for every authenticated user.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Enum, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from academy.core.database import Base
from academy.models.enums import UserRole

if TYPE_CHECKING:
    from academy.models.enrollment import Enrollment


class Profile(Base):
    """
    Profile model representing students, teachers and admins.

    The id matches the auth provider's user id (the JWT subject).

    Attributes:
        id: UUID primary key.
        email: Email address.
        full_name: Display name.
        role: student, teacher or admin.
        last_activity: Last heartbeat received from the user.
    """

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    full_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        default=UserRole.STUDENT,
        nullable=False,
    )
    last_activity: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    enrollments: Mapped[list["Enrollment"]] = relationship(
        "Enrollment",
        back_populates="student",
    )

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, email={self.email}, role={self.role})>"
