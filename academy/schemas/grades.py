"""
Grade Schemas

Pydantic models for quiz grade reporting.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class QuizGrade(BaseModel):
    """A single row in the grades table."""

    id: uuid.UUID
    student_id: uuid.UUID
    student_name: str = Field(..., description="Full name of the student")
    student_email: str = Field(..., description="Email of the student")
    course_id: Optional[uuid.UUID] = None
    course_title: str
    chapter_title: str
    lesson_title: str = Field(..., description="Quiz (lesson) title")
    score: int
    total_points: int
    percentage: int = Field(..., description="Rounded score / total_points * 100")
    passed: bool
    submitted_at: datetime


class GradeSummary(BaseModel):
    """Descriptive statistics over a set of quiz attempts."""

    total_attempts: int = 0
    average_percentage: int = 0
    pass_rate: int = 0


class CourseOption(BaseModel):
    """Course entry for the grades course filter."""

    id: Optional[uuid.UUID] = None
    title: str


class GradesResponse(BaseModel):
    """Schema for the grades table response."""

    summary: GradeSummary
    courses: List[CourseOption]
    grades: List[QuizGrade]
