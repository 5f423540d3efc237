"""
Backend Records

Pydantic models describing rows returned by the backend. Every payload is
parsed on receipt so aggregation code only ever sees typed records.
"""

import uuid
from datetime import datetime
from typing import Any, Iterable, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError, field_validator

from academy.models.enums import CertificateStatus, ContentType, UserRole


class Record(BaseModel):
    """Base for backend records: reads ORM objects, ignores unknown keys."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")


class ProfileRecord(Record):
    id: uuid.UUID
    email: str = ""
    full_name: Optional[str] = None
    role: UserRole = UserRole.STUDENT
    last_activity: Optional[datetime] = None


class EnrollmentRecord(Record):
    student_id: uuid.UUID
    course_id: uuid.UUID
    course_title: Optional[str] = None
    cohort_name: Optional[str] = None
    enrolled_at: Optional[datetime] = None


class LessonRecord(Record):
    """A lesson with its course id. Only id and course_id are required, so every
    lesson counts towards course totals whatever its other columns hold."""

    id: uuid.UUID
    course_id: uuid.UUID
    chapter_id: Optional[uuid.UUID] = None
    title: Optional[str] = None
    content_type: Optional[ContentType] = None
    order_index: Optional[int] = None

    @field_validator("content_type", mode="before")
    @classmethod
    def _known_content_type(cls, value: Any) -> Optional[ContentType]:
        try:
            return ContentType(value)
        except (ValueError, TypeError):
            return None


class LessonProgressRecord(Record):
    student_id: uuid.UUID
    lesson_id: uuid.UUID
    is_completed: bool = False
    completed_at: Optional[datetime] = None


class QuizAttemptRecord(Record):
    """A quiz attempt flattened with its student, lesson, chapter and course."""

    id: uuid.UUID
    student_id: uuid.UUID
    lesson_id: uuid.UUID
    score: int
    total_points: int
    passed: bool
    submitted_at: datetime
    student_name: Optional[str] = None
    student_email: Optional[str] = None
    lesson_title: Optional[str] = None
    chapter_title: Optional[str] = None
    course_id: Optional[uuid.UUID] = None
    course_title: Optional[str] = None


class CertificateRecord(Record):
    student_id: uuid.UUID
    course_id: uuid.UUID
    id: Optional[uuid.UUID] = None
    status: CertificateStatus = CertificateStatus.PENDING
    certificate_url: Optional[str] = None
    approved_at: Optional[datetime] = None
    notes: Optional[str] = None


class CourseCompletionRecord(Record):
    """One row of the backend's precomputed completion rollup."""

    student_id: uuid.UUID
    course_id: uuid.UUID
    enrollment_id: Optional[uuid.UUID] = None
    student_name: Optional[str] = None
    student_email: Optional[str] = None
    course_title: Optional[str] = None
    teacher_name: Optional[str] = None
    completed: bool = False
    completion_date: Optional[datetime] = None
    progress_percentage: int = 0
    certificate_id: Optional[uuid.UUID] = None
    certificate_status: Optional[CertificateStatus] = None
    certificate_url: Optional[str] = None
    certificate_approved_at: Optional[datetime] = None


R = TypeVar("R", bound=Record)


def parse_rows(model: Type[R], rows: Iterable[Any]) -> Tuple[List[R], List[str]]:
    """
    Parse raw backend rows into records.

    Args:
        model: Record class to validate each row against.
        rows: Dicts (REST) or ORM objects/mappings (SQL).

    Returns:
        Tuple of (parsed_records, list_of_parse_errors). A row that fails
        validation is reported once in the error list and left out.
    """
    records: List[R] = []
    errors: List[str] = []

    for index, row in enumerate(rows):
        try:
            records.append(model.model_validate(row))
        except PydanticValidationError as e:
            fields = ", ".join(
                ".".join(str(part) for part in err["loc"]) or "<row>"
                for err in e.errors()
            )
            errors.append(f"{model.__name__} row {index}: invalid {fields}")

    return records, errors
