"""
Progress Service

Rolls lesson completion up into course and student progress, and records
lesson completion for students.

The aggregation functions are pure: given the same snapshot of enrollments,
lessons and progress rows they return the same result and touch nothing.
Both the admin list view and the student detail view are built from them.
"""

import logging
import uuid
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from academy.backends.base import Backend
from academy.core.exceptions import NotFoundError
from academy.models.enums import UserRole
from academy.schemas.progress import (
    CourseProgress,
    StudentProgress,
    StudentProgressListResponse,
)
from academy.schemas.records import (
    EnrollmentRecord,
    LessonProgressRecord,
    LessonRecord,
    ProfileRecord,
)

logger = logging.getLogger(__name__)


# ============== Rounding ==============

def ratio_percentage(numerator: int, denominator: int, clamp: bool = True) -> int:
    """
    numerator / denominator as a whole percentage, rounded half up.

    Integer arithmetic keeps .5 cases exact. A zero or negative
    denominator yields 0. Negative numerators count as 0, and with clamp
    the result is also capped at 100.
    """
    if denominator <= 0:
        return 0
    numerator = max(0, numerator)
    if clamp:
        numerator = min(numerator, denominator)
    return (200 * numerator + denominator) // (2 * denominator)


def progress_percentage(completed_lessons: int, total_lessons: int) -> int:
    """Course progress percentage; 0 for a course with no lessons."""
    return ratio_percentage(completed_lessons, total_lessons)


def rounded_mean(values: Sequence[int]) -> int:
    """Mean of whole numbers rounded half up; 0 for an empty sequence."""
    if not values:
        return 0
    count = len(values)
    return (2 * sum(values) + count) // (2 * count)


# ============== Aggregation ==============

def aggregate_course_progress(
    enrollments: Iterable[EnrollmentRecord],
    lessons: Iterable[LessonRecord],
    progress_rows: Iterable[LessonProgressRecord],
) -> List[CourseProgress]:
    """
    Compute one CourseProgress per enrollment.

    Only completed rows for lessons currently in the course count, and each
    lesson counts once, so completed_lessons never exceeds total_lessons.

    Args:
        enrollments: Enrollments to report on (output keeps their order).
        lessons: Lesson universe for the enrolled courses.
        progress_rows: LessonProgress snapshot.

    Returns:
        List of CourseProgress rows.
    """
    lessons_by_course: Dict[uuid.UUID, set] = {}
    for lesson in lessons:
        lessons_by_course.setdefault(lesson.course_id, set()).add(lesson.id)

    completed_by_student: Dict[uuid.UUID, Dict[uuid.UUID, Optional[datetime]]] = {}
    for row in progress_rows:
        if not row.is_completed:
            continue
        done = completed_by_student.setdefault(row.student_id, {})
        previous = done.get(row.lesson_id)
        if previous is None or (row.completed_at is not None and row.completed_at > previous):
            done[row.lesson_id] = row.completed_at

    results: List[CourseProgress] = []
    for enrollment in enrollments:
        lesson_ids = lessons_by_course.get(enrollment.course_id, set())
        done = completed_by_student.get(enrollment.student_id, {})
        completed_ids = [lesson_id for lesson_id in lesson_ids if lesson_id in done]
        timestamps = [done[lesson_id] for lesson_id in completed_ids if done[lesson_id] is not None]

        results.append(CourseProgress(
            student_id=enrollment.student_id,
            course_id=enrollment.course_id,
            course_title=enrollment.course_title,
            cohort_name=enrollment.cohort_name,
            enrolled_at=enrollment.enrolled_at,
            total_lessons=len(lesson_ids),
            completed_lessons=len(completed_ids),
            progress_percentage=progress_percentage(len(completed_ids), len(lesson_ids)),
            last_activity=max(timestamps, default=None),
        ))

    return results


def aggregate_student_progress(
    course_progress: Iterable[CourseProgress],
    profiles: Optional[Iterable[ProfileRecord]] = None,
) -> List[StudentProgress]:
    """
    Sum course progress per student.

    Every enrollment contributes its lessons to the running totals
    independently. When profiles are given, each of them gets a row (with
    zeros if the student has no enrollments) in profile order; students
    only present in course_progress follow in first-seen order.

    Args:
        course_progress: Output of aggregate_course_progress.
        profiles: Optional profiles to name and order the rows.

    Returns:
        List of StudentProgress rows.
    """
    by_student: Dict[uuid.UUID, List[CourseProgress]] = {}
    for course in course_progress:
        by_student.setdefault(course.student_id, []).append(course)

    profile_map: Dict[uuid.UUID, ProfileRecord] = {}
    order: List[uuid.UUID] = []
    for profile in profiles or []:
        if profile.id not in profile_map:
            profile_map[profile.id] = profile
            order.append(profile.id)
    order.extend(student_id for student_id in by_student if student_id not in profile_map)

    results: List[StudentProgress] = []
    for student_id in order:
        courses = by_student.get(student_id, [])
        profile = profile_map.get(student_id)
        total = sum(c.total_lessons for c in courses)
        completed = sum(c.completed_lessons for c in courses)
        timestamps = [c.last_activity for c in courses if c.last_activity is not None]

        results.append(StudentProgress(
            student_id=student_id,
            full_name=(profile.full_name or "Unknown") if profile else None,
            email=profile.email if profile else None,
            total_courses=len(courses),
            total_lessons=total,
            completed_lessons=completed,
            overall_percentage=progress_percentage(completed, total),
            last_activity=max(timestamps, default=None),
            courses=courses,
        ))

    return results


def _matches(student: StudentProgress, search: str) -> bool:
    needle = search.lower()
    return (
        needle in (student.full_name or "").lower()
        or needle in (student.email or "").lower()
    )


# ============== Service ==============

class ProgressService:
    """Progress reads and lesson completion writes over a Backend."""

    def __init__(self, backend: Backend):
        self.backend = backend

    async def _course_progress(
        self,
        enrollments: List[EnrollmentRecord],
        student_id: Optional[uuid.UUID] = None,
        course_id: Optional[uuid.UUID] = None,
    ) -> List[CourseProgress]:
        course_ids = sorted({e.course_id for e in enrollments}, key=str)
        lessons = await self.backend.get_course_lessons(course_ids)
        progress_rows = await self.backend.get_lesson_progress(student_id, course_id)
        return aggregate_course_progress(enrollments, lessons, progress_rows)

    async def get_course_progress(
        self,
        student_id: uuid.UUID,
        course_id: uuid.UUID,
    ) -> CourseProgress:
        """
        Get a student's current progress in one course.

        Raises:
            NotFoundError: If the student is not enrolled in the course.
        """
        enrollments = await self.backend.get_enrollments(student_id=student_id, course_id=course_id)
        if not enrollments:
            raise NotFoundError("Not enrolled in this course", code="not_enrolled")
        courses = await self._course_progress(enrollments[:1], student_id, course_id)
        return courses[0]

    async def get_student_progress(
        self,
        student_id: uuid.UUID,
        course_id: Optional[uuid.UUID] = None,
    ) -> StudentProgress:
        """
        Get one student's progress across enrolled courses.

        Args:
            student_id: Student profile ID.
            course_id: Optional course to restrict the report to.

        Raises:
            NotFoundError: If course_id is given and the student is not enrolled.
        """
        enrollments = await self.backend.get_enrollments(student_id=student_id, course_id=course_id)
        if course_id is not None and not enrollments:
            raise NotFoundError("Not enrolled in this course", code="not_enrolled")

        courses = await self._course_progress(enrollments, student_id, course_id)
        profile = await self.backend.get_profile(student_id)
        rows = aggregate_student_progress(courses, [profile] if profile else None)

        if rows:
            return rows[0]
        return StudentProgress(student_id=student_id)

    async def get_all_student_progress(
        self,
        search: Optional[str] = None,
        course_id: Optional[uuid.UUID] = None,
    ) -> StudentProgressListResponse:
        """
        Get progress for every student (admin view).

        Args:
            search: Case-insensitive filter over name and email.
            course_id: Only report on enrollments in this course.
        """
        profiles = await self.backend.get_profiles(role=UserRole.STUDENT)
        enrollments = await self.backend.get_enrollments(course_id=course_id)
        courses = await self._course_progress(enrollments, None, course_id)

        students = aggregate_student_progress(courses, profiles)
        if course_id is not None:
            students = [s for s in students if s.total_courses > 0]
        if search:
            students = [s for s in students if _matches(s, search)]

        active = {p.id for p in profiles if p.last_activity is not None}

        return StudentProgressListResponse(
            total_students=len(students),
            active_students=sum(1 for s in students if s.student_id in active),
            average_progress=rounded_mean([s.overall_percentage for s in students]),
            students=students,
        )

    async def mark_lesson(
        self,
        student_id: uuid.UUID,
        lesson_id: uuid.UUID,
        is_completed: bool = True,
    ) -> LessonProgressRecord:
        """
        Mark a lesson complete (or incomplete) for a student.

        Idempotent: repeating the call leaves a single progress row.

        Raises:
            NotFoundError: If the lesson does not exist or the student is
                not enrolled in its course.
        """
        lesson = await self.backend.get_lesson(lesson_id)
        if lesson is None:
            raise NotFoundError(f"Lesson {lesson_id} not found")

        enrollments = await self.backend.get_enrollments(
            student_id=student_id,
            course_id=lesson.course_id,
        )
        if not enrollments:
            raise NotFoundError("Not enrolled in this course", code="not_enrolled")

        record = await self.backend.upsert_lesson_progress(student_id, lesson_id, is_completed)
        logger.info(
            "Lesson %s marked %s for student %s",
            lesson_id, "complete" if is_completed else "incomplete", student_id,
        )
        return record
