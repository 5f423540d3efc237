"""
Academy Backend - Models Module

SQLAlchemy models mapped onto the backend's existing tables.
"""

from academy.core.database import Base

# Enums
from academy.models.enums import (
    UserRole,
    ContentType,
    CertificateStatus,
    CompletionState,
)

# Models
from academy.models.profile import Profile
from academy.models.course import Course, Chapter
from academy.models.lesson import Lesson
from academy.models.enrollment import Enrollment
from academy.models.lesson_progress import LessonProgress
from academy.models.quiz_attempt import QuizAttempt
from academy.models.certificate import Certificate

__all__ = [
    # Base
    "Base",
    # Enums
    "UserRole",
    "ContentType",
    "CertificateStatus",
    "CompletionState",
    # Models
    "Profile",
    "Course",
    "Chapter",
    "Lesson",
    "Enrollment",
    "LessonProgress",
    "QuizAttempt",
    "Certificate",
]
