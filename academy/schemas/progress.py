"""
Progress Schemas

Pydantic models for lesson completion and progress rollups.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class LessonCompletionUpdate(BaseModel):
    """Schema for marking a lesson complete or incomplete."""

    is_completed: bool = Field(True, description="Whether the lesson is completed")


class LessonProgressResponse(BaseModel):
    """Schema for the stored lesson progress row."""

    lesson_id: uuid.UUID
    is_completed: bool
    completed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CourseProgress(BaseModel):
    """Completion of one course by one student."""

    student_id: uuid.UUID
    course_id: uuid.UUID
    course_title: Optional[str] = None
    cohort_name: Optional[str] = None
    enrolled_at: Optional[datetime] = None
    total_lessons: int = Field(..., ge=0)
    completed_lessons: int = Field(..., ge=0)
    progress_percentage: int = Field(..., ge=0, le=100)
    last_activity: Optional[datetime] = None


class StudentProgress(BaseModel):
    """A student's progress summed across every enrolled course."""

    student_id: uuid.UUID
    full_name: Optional[str] = None
    email: Optional[str] = None
    total_courses: int = 0
    total_lessons: int = 0
    completed_lessons: int = 0
    overall_percentage: int = Field(0, ge=0, le=100)
    last_activity: Optional[datetime] = None
    courses: List[CourseProgress] = Field(default_factory=list)


class StudentProgressListResponse(BaseModel):
    """Schema for the admin student progress table."""

    total_students: int
    active_students: int = Field(0, description="Students with any recorded activity")
    average_progress: int
    students: List[StudentProgress]
