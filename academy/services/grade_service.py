"""
Grade Service

Quiz grade reporting: flattens attempts into table rows, filters them in
memory and computes summary statistics on every filter change.
"""

import uuid
from typing import Iterable, List, Optional

from academy.backends.base import Backend
from academy.schemas.grades import CourseOption, GradeSummary, GradesResponse, QuizGrade
from academy.schemas.records import QuizAttemptRecord
from academy.services.progress_service import ratio_percentage, rounded_mean


def attempt_percentage(score: int, total_points: int) -> int:
    """Score as a whole percentage of total points; 0 when total_points is 0."""
    # Scores above total_points are reported as-is
    return ratio_percentage(score, total_points, clamp=False)


def to_grade(attempt: QuizAttemptRecord) -> QuizGrade:
    """Flatten an attempt into a grades-table row with display defaults."""
    return QuizGrade(
        id=attempt.id,
        student_id=attempt.student_id,
        student_name=attempt.student_name or "Unknown",
        student_email=attempt.student_email or "",
        course_id=attempt.course_id,
        course_title=attempt.course_title or "Unknown Course",
        chapter_title=attempt.chapter_title or "Unknown Chapter",
        lesson_title=attempt.lesson_title or "Unknown Quiz",
        score=attempt.score,
        total_points=attempt.total_points,
        percentage=attempt_percentage(attempt.score, attempt.total_points),
        passed=attempt.passed,
        submitted_at=attempt.submitted_at,
    )


def filter_grades(
    grades: Iterable[QuizGrade],
    search: Optional[str] = None,
    course_id: Optional[uuid.UUID] = None,
) -> List[QuizGrade]:
    """
    Filter grades by free text (student, course or quiz name) and course.
    """
    rows = list(grades)

    if search:
        needle = search.lower()
        rows = [
            g for g in rows
            if needle in g.student_name.lower()
            or needle in g.course_title.lower()
            or needle in g.lesson_title.lower()
        ]

    if course_id is not None:
        rows = [g for g in rows if g.course_id == course_id]

    return rows


def summarize_grades(grades: Iterable[QuizGrade]) -> GradeSummary:
    """
    Compute total attempts, average percentage and pass rate.

    All three are 0 for an empty collection.
    """
    rows = list(grades)
    passed = sum(1 for g in rows if g.passed)

    return GradeSummary(
        total_attempts=len(rows),
        average_percentage=rounded_mean([g.percentage for g in rows]),
        pass_rate=ratio_percentage(passed, len(rows)),
    )


def course_options(grades: Iterable[QuizGrade]) -> List[CourseOption]:
    """Distinct courses present in the grades, in first-seen order."""
    seen = {}
    for g in grades:
        key = g.course_id or g.course_title
        if key not in seen:
            seen[key] = CourseOption(id=g.course_id, title=g.course_title)
    return list(seen.values())


class GradeService:
    """Fetches quiz attempts once and reports over them in memory."""

    def __init__(self, backend: Backend):
        self.backend = backend

    async def fetch_grades(
        self,
        teacher_id: Optional[uuid.UUID] = None,
        student_id: Optional[uuid.UUID] = None,
    ) -> List[QuizGrade]:
        """Fetch attempts scoped to a teacher's courses or a student."""
        attempts = await self.backend.get_quiz_attempts(teacher_id=teacher_id, student_id=student_id)
        return [to_grade(a) for a in attempts]

    async def get_grades(
        self,
        teacher_id: Optional[uuid.UUID] = None,
        student_id: Optional[uuid.UUID] = None,
        search: Optional[str] = None,
        course_id: Optional[uuid.UUID] = None,
    ) -> GradesResponse:
        """
        Get the grades table with its summary.

        The course list covers every fetched grade so the filter control
        keeps all options while a course is selected.
        """
        grades = await self.fetch_grades(teacher_id=teacher_id, student_id=student_id)
        filtered = filter_grades(grades, search=search, course_id=course_id)

        return GradesResponse(
            summary=summarize_grades(filtered),
            courses=course_options(grades),
            grades=filtered,
        )
