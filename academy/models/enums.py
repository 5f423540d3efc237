"""
Database Enums

Python Enums matching the values stored by the backend.
"""

import enum


class UserRole(str, enum.Enum):
    """User role enumeration."""
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class ContentType(str, enum.Enum):
    """Lesson content type enumeration."""
    VIDEO = "video"
    PDF = "pdf"
    DOCUMENT = "document"
    URL = "url"
    QUIZ = "quiz"
    ASSIGNMENT = "assignment"


class CertificateStatus(str, enum.Enum):
    """Certificate issuance status enumeration."""
    PENDING = "pending"
    APPROVED = "approved"


class CompletionState(str, enum.Enum):
    """Course completion state for one student, derived and never stored."""
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CERTIFICATE_APPROVED = "CERTIFICATE_APPROVED"
