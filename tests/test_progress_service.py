"""
Progress Service Unit Tests

Tests for percentage rounding, progress aggregation and lesson completion.
"""

import uuid

import pytest

from academy.core.exceptions import NotFoundError
from academy.models.enums import UserRole
from academy.schemas.records import EnrollmentRecord, LessonProgressRecord, LessonRecord
from academy.services.progress_service import (
    ProgressService,
    aggregate_course_progress,
    aggregate_student_progress,
    progress_percentage,
    ratio_percentage,
    rounded_mean,
)


class TestPercentages:
    """Tests for the rounding helpers."""

    def test_zero_lessons_is_zero_percent(self):
        assert progress_percentage(0, 0) == 0
        assert progress_percentage(3, 0) == 0

    def test_rounds_half_up(self):
        assert ratio_percentage(1, 8) == 13  # 12.5
        assert ratio_percentage(1, 3) == 33
        assert ratio_percentage(2, 3) == 67
        assert ratio_percentage(1, 200) == 1  # 0.5

    def test_clamped_to_bounds(self):
        assert ratio_percentage(7, 5) == 100
        assert ratio_percentage(-1, 5) == 0

    def test_unclamped_keeps_values_above_100(self):
        assert ratio_percentage(12, 10, clamp=False) == 120
        assert ratio_percentage(12, 10) == 100
        assert ratio_percentage(-3, 10, clamp=False) == 0
        assert ratio_percentage(4, 0, clamp=False) == 0

    def test_full_completion(self):
        assert progress_percentage(5, 5) == 100

    def test_bounded_and_monotonic(self):
        for total in range(0, 30):
            previous = 0
            for completed in range(0, total + 1):
                value = progress_percentage(completed, total)
                assert 0 <= value <= 100
                assert value >= previous
                previous = value
            if total:
                assert progress_percentage(total, total) == 100

    def test_rounded_mean(self):
        assert rounded_mean([]) == 0
        assert rounded_mean([80, 40]) == 60
        assert rounded_mean([1, 2]) == 2  # 1.5


class TestAggregateCourseProgress:
    """Tests for the per-enrollment rollup."""

    def _course(self, lesson_count: int):
        course_id = uuid.uuid4()
        lessons = [
            LessonRecord(id=uuid.uuid4(), course_id=course_id, order_index=i)
            for i in range(lesson_count)
        ]
        return course_id, lessons

    def test_counts_completed_lessons(self):
        student_id = uuid.uuid4()
        course_id, lessons = self._course(5)
        enrollment = EnrollmentRecord(student_id=student_id, course_id=course_id)
        progress = [
            LessonProgressRecord(student_id=student_id, lesson_id=lesson.id, is_completed=True)
            for lesson in lessons[:3]
        ]

        [result] = aggregate_course_progress([enrollment], lessons, progress)

        assert result.total_lessons == 5
        assert result.completed_lessons == 3
        assert result.progress_percentage == 60

    def test_ignores_incomplete_duplicate_and_foreign_rows(self):
        """completed_lessons never exceeds total_lessons."""
        student_id = uuid.uuid4()
        course_id, lessons = self._course(2)
        _, other_lessons = self._course(3)
        enrollment = EnrollmentRecord(student_id=student_id, course_id=course_id)
        progress = [
            LessonProgressRecord(student_id=student_id, lesson_id=lessons[0].id, is_completed=True),
            LessonProgressRecord(student_id=student_id, lesson_id=lessons[0].id, is_completed=True),
            LessonProgressRecord(student_id=student_id, lesson_id=lessons[1].id, is_completed=False),
            LessonProgressRecord(student_id=student_id, lesson_id=other_lessons[0].id, is_completed=True),
            LessonProgressRecord(student_id=uuid.uuid4(), lesson_id=lessons[1].id, is_completed=True),
            # Lesson deleted from the course
            LessonProgressRecord(student_id=student_id, lesson_id=uuid.uuid4(), is_completed=True),
        ]

        [result] = aggregate_course_progress([enrollment], lessons + other_lessons, progress)

        assert result.total_lessons == 2
        assert result.completed_lessons == 1
        assert result.progress_percentage == 50

    def test_lessons_of_any_type_count_towards_total(self):
        student_id = uuid.uuid4()
        course_id = uuid.uuid4()
        lesson_rows = [
            {"id": str(uuid.uuid4()), "course_id": str(course_id), "content_type": content_type}
            for content_type in ("video", "text", None)
        ]
        lessons = [LessonRecord.model_validate(row) for row in lesson_rows]
        enrollment = EnrollmentRecord(student_id=student_id, course_id=course_id)
        progress = [
            LessonProgressRecord(student_id=student_id, lesson_id=lesson.id, is_completed=True)
            for lesson in lessons[:2]
        ]

        [result] = aggregate_course_progress([enrollment], lessons, progress)

        assert result.total_lessons == 3
        assert result.completed_lessons == 2
        assert result.progress_percentage == 67

    def test_course_without_lessons(self):
        enrollment = EnrollmentRecord(student_id=uuid.uuid4(), course_id=uuid.uuid4())

        [result] = aggregate_course_progress([enrollment], [], [])

        assert result.total_lessons == 0
        assert result.completed_lessons == 0
        assert result.progress_percentage == 0

    def test_last_activity_is_latest_completion(self, backend):
        student_id = uuid.uuid4()
        course_id, lessons = self._course(2)
        enrollment = EnrollmentRecord(student_id=student_id, course_id=course_id)
        early = backend.clock
        late = backend.clock.replace(hour=17)
        progress = [
            LessonProgressRecord(student_id=student_id, lesson_id=lessons[0].id, is_completed=True, completed_at=late),
            LessonProgressRecord(student_id=student_id, lesson_id=lessons[1].id, is_completed=True, completed_at=early),
        ]

        [result] = aggregate_course_progress([enrollment], lessons, progress)

        assert result.last_activity == late


class TestAggregateStudentProgress:
    """Tests for the per-student rollup."""

    def test_sums_courses_and_keeps_profiles_without_enrollments(self, backend):
        enrolled = backend.add_profile(full_name="Enrolled")
        idle = backend.add_profile(full_name=None)
        course_a, lessons_a = backend.add_course(4)
        course_b, lessons_b = backend.add_course(6)
        enrollments = [
            EnrollmentRecord(student_id=enrolled.id, course_id=course_a),
            EnrollmentRecord(student_id=enrolled.id, course_id=course_b),
        ]
        progress = [
            LessonProgressRecord(student_id=enrolled.id, lesson_id=lesson.id, is_completed=True)
            for lesson in lessons_a + lessons_b[:1]
        ]
        courses = aggregate_course_progress(enrollments, lessons_a + lessons_b, progress)

        rows = aggregate_student_progress(courses, [enrolled, idle])

        assert [r.student_id for r in rows] == [enrolled.id, idle.id]
        assert rows[0].total_courses == 2
        assert rows[0].total_lessons == 10
        assert rows[0].completed_lessons == 5
        assert rows[0].overall_percentage == 50
        assert rows[1].full_name == "Unknown"
        assert rows[1].total_courses == 0
        assert rows[1].overall_percentage == 0

    def test_rollups_are_repeatable_and_leave_inputs_alone(self, backend):
        first = backend.add_profile(full_name="First")
        second = backend.add_profile(full_name="Second")
        course_a, lessons_a = backend.add_course(3)
        course_b, lessons_b = backend.add_course(4)
        enrollments = [
            EnrollmentRecord(student_id=first.id, course_id=course_a),
            EnrollmentRecord(student_id=first.id, course_id=course_b),
            EnrollmentRecord(student_id=second.id, course_id=course_b),
        ]
        lessons = lessons_a + lessons_b
        progress = [
            LessonProgressRecord(student_id=first.id, lesson_id=lessons_a[0].id, is_completed=True),
            LessonProgressRecord(student_id=first.id, lesson_id=lessons_b[1].id, is_completed=True),
            LessonProgressRecord(student_id=second.id, lesson_id=lessons_b[1].id, is_completed=False),
            LessonProgressRecord(student_id=second.id, lesson_id=lessons_b[2].id, is_completed=True),
        ]
        profiles = [first, second]
        snapshot = [
            [r.model_copy(deep=True) for r in rows]
            for rows in (enrollments, lessons, progress, profiles)
        ]

        courses_once = aggregate_course_progress(enrollments, lessons, progress)
        courses_twice = aggregate_course_progress(enrollments, lessons, progress)
        students_once = aggregate_student_progress(courses_once, profiles)
        students_twice = aggregate_student_progress(courses_twice, profiles)

        assert courses_once == courses_twice
        assert students_once == students_twice
        assert [enrollments, lessons, progress, profiles] == snapshot


class TestProgressService:
    """Tests for ProgressService against the in-memory backend."""

    @pytest.mark.asyncio
    async def test_completing_lessons_moves_progress(self, backend, student, five_lesson_course):
        course_id, lessons = five_lesson_course
        service = ProgressService(backend)

        for lesson in lessons[:3]:
            await service.mark_lesson(student.id, lesson.id)
        progress = await service.get_course_progress(student.id, course_id)
        assert progress.completed_lessons == 3
        assert progress.progress_percentage == 60

        for lesson in lessons[3:]:
            await service.mark_lesson(student.id, lesson.id)
        progress = await service.get_course_progress(student.id, course_id)
        assert progress.completed_lessons == 5
        assert progress.progress_percentage == 100

    @pytest.mark.asyncio
    async def test_mark_lesson_is_idempotent(self, backend, student, five_lesson_course):
        course_id, lessons = five_lesson_course
        service = ProgressService(backend)

        first = await service.mark_lesson(student.id, lessons[0].id)
        second = await service.mark_lesson(student.id, lessons[0].id)

        assert len(backend.progress) == 1
        assert second.completed_at == first.completed_at
        progress = await service.get_course_progress(student.id, course_id)
        assert progress.completed_lessons == 1

    @pytest.mark.asyncio
    async def test_mark_lesson_incomplete(self, backend, student, five_lesson_course):
        course_id, lessons = five_lesson_course
        service = ProgressService(backend)

        await service.mark_lesson(student.id, lessons[0].id)
        record = await service.mark_lesson(student.id, lessons[0].id, is_completed=False)

        assert record.is_completed is False
        assert record.completed_at is None
        progress = await service.get_course_progress(student.id, course_id)
        assert progress.completed_lessons == 0

    @pytest.mark.asyncio
    async def test_mark_unknown_lesson(self, backend, student):
        with pytest.raises(NotFoundError):
            await ProgressService(backend).mark_lesson(student.id, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_mark_lesson_requires_enrollment(self, backend, student):
        _, lessons = backend.add_course(2)

        with pytest.raises(NotFoundError) as exc_info:
            await ProgressService(backend).mark_lesson(student.id, lessons[0].id)

        assert exc_info.value.code == "not_enrolled"
        assert backend.progress == {}

    @pytest.mark.asyncio
    async def test_course_progress_requires_enrollment(self, backend, student):
        course_id, _ = backend.add_course(2)

        with pytest.raises(NotFoundError):
            await ProgressService(backend).get_course_progress(student.id, course_id)

    @pytest.mark.asyncio
    async def test_added_lessons_lower_progress(self, backend, student, five_lesson_course):
        course_id, lessons = five_lesson_course
        service = ProgressService(backend)
        for lesson in lessons:
            await service.mark_lesson(student.id, lesson.id)

        extra = LessonRecord(id=uuid.uuid4(), course_id=course_id, order_index=5)
        backend.lessons[extra.id] = extra

        progress = await service.get_course_progress(student.id, course_id)
        assert progress.total_lessons == 6
        assert progress.completed_lessons == 5
        assert progress.progress_percentage == 83

    @pytest.mark.asyncio
    async def test_student_progress_across_courses(self, backend, student, five_lesson_course):
        course_id, lessons = five_lesson_course
        other_course, other_lessons = backend.add_course(5)
        backend.enroll(student.id, other_course, title="Data Science")
        service = ProgressService(backend)
        await service.mark_lesson(student.id, lessons[0].id)
        await service.mark_lesson(student.id, other_lessons[0].id)

        result = await service.get_student_progress(student.id)

        assert result.full_name == "Ada Lovelace"
        assert result.total_courses == 2
        assert result.total_lessons == 10
        assert result.completed_lessons == 2
        assert result.overall_percentage == 20

        only_one = await service.get_student_progress(student.id, course_id=course_id)
        assert only_one.total_courses == 1
        assert only_one.overall_percentage == 20

    @pytest.mark.asyncio
    async def test_all_student_progress(self, backend, student, admin, five_lesson_course):
        course_id, lessons = five_lesson_course
        idle = backend.add_profile(full_name="Idle Student", email="idle@example.com")
        backend.profiles[student.id] = student.model_copy(update={"last_activity": backend.clock})
        service = ProgressService(backend)
        for lesson in lessons[:4]:
            await service.mark_lesson(student.id, lesson.id)

        result = await service.get_all_student_progress()

        assert {s.student_id for s in result.students} == {student.id, idle.id}
        assert result.total_students == 2
        assert result.active_students == 1
        assert result.average_progress == 40  # (80 + 0) / 2

        filtered = await service.get_all_student_progress(course_id=course_id)
        assert [s.student_id for s in filtered.students] == [student.id]

        searched = await service.get_all_student_progress(search="IDLE@")
        assert [s.student_id for s in searched.students] == [idle.id]

    @pytest.mark.asyncio
    async def test_admins_are_not_listed(self, backend, admin):
        result = await ProgressService(backend).get_all_student_progress()

        assert all(
            backend.profiles[s.student_id].role == UserRole.STUDENT for s in result.students
        )
        assert result.average_progress == 0
