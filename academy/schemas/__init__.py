"""
Academy Backend - Schemas Module

Pydantic models for backend records and request/response validation.
"""

from academy.schemas.records import (
    CertificateRecord,
    CourseCompletionRecord,
    EnrollmentRecord,
    LessonProgressRecord,
    LessonRecord,
    ProfileRecord,
    QuizAttemptRecord,
    parse_rows,
)
from academy.schemas.progress import CourseProgress, StudentProgress
from academy.schemas.certificate import CertificateApproval, CompletionStatus
from academy.schemas.grades import GradeSummary, QuizGrade

__all__ = [
    # Records
    "CertificateRecord",
    "CourseCompletionRecord",
    "EnrollmentRecord",
    "LessonProgressRecord",
    "LessonRecord",
    "ProfileRecord",
    "QuizAttemptRecord",
    "parse_rows",
    # Progress
    "CourseProgress",
    "StudentProgress",
    # Certificates
    "CertificateApproval",
    "CompletionStatus",
    # Grades
    "GradeSummary",
    "QuizGrade",
]
