"""
Progress Routes

Endpoints for lesson completion and progress reports.
"""

import uuid
from typing import Optional

from fastapi import APIRouter

from academy.api.deps import BackendDep, CurrentAdmin, CurrentStudent
from academy.schemas.progress import (
    LessonCompletionUpdate,
    LessonProgressResponse,
    StudentProgress,
    StudentProgressListResponse,
)
from academy.services.progress_service import ProgressService


router = APIRouter(tags=["Progress"])


@router.get(
    "/progress/me",
    response_model=StudentProgress,
    summary="Get my course progress",
)
async def get_my_progress(
    current_user: CurrentStudent,
    backend: BackendDep,
    course_id: Optional[uuid.UUID] = None,
) -> StudentProgress:
    """
    Get the current student's progress in every enrolled course.

    Pass `course_id` to restrict the report to one course.
    """
    return await ProgressService(backend).get_student_progress(
        student_id=current_user.id,
        course_id=course_id,
    )


@router.post(
    "/progress/lessons/{lesson_id}",
    response_model=LessonProgressResponse,
    summary="Mark a lesson complete or incomplete",
)
async def mark_lesson(
    lesson_id: uuid.UUID,
    data: LessonCompletionUpdate,
    current_user: CurrentStudent,
    backend: BackendDep,
) -> LessonProgressResponse:
    """
    Mark a lesson complete (or incomplete) for the current student.

    Repeating the same call is harmless: there is one progress row per
    student and lesson.
    """
    record = await ProgressService(backend).mark_lesson(
        student_id=current_user.id,
        lesson_id=lesson_id,
        is_completed=data.is_completed,
    )
    return LessonProgressResponse.model_validate(record)


@router.get(
    "/admin/progress",
    response_model=StudentProgressListResponse,
    summary="List progress for all students",
)
async def list_student_progress(
    admin: CurrentAdmin,
    backend: BackendDep,
    search: Optional[str] = None,
    course_id: Optional[uuid.UUID] = None,
) -> StudentProgressListResponse:
    """
    Get progress for every student.

    **Filters:**
    - `search`: name or email
    - `course_id`: only students enrolled in this course
    """
    return await ProgressService(backend).get_all_student_progress(
        search=search,
        course_id=course_id,
    )


@router.get(
    "/admin/progress/{student_id}",
    response_model=StudentProgress,
    summary="Get one student's progress",
)
async def get_student_progress(
    student_id: uuid.UUID,
    admin: CurrentAdmin,
    backend: BackendDep,
) -> StudentProgress:
    """Get the per-course breakdown for one student."""
    return await ProgressService(backend).get_student_progress(student_id=student_id)
