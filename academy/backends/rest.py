"""
REST Backend

Backend gateway over the PostgREST/RPC interface of the hosted backend.

Requests carry the caller's own access token so the backend's row-level
security applies exactly as it does for the browser client.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import httpx

from academy.backends.base import Backend, parse_logged
from academy.core.exceptions import BackendError
from academy.core.http_client import get_with_retry
from academy.models.enums import CertificateStatus, UserRole
from academy.schemas.records import (
    CertificateRecord,
    CourseCompletionRecord,
    EnrollmentRecord,
    LessonProgressRecord,
    LessonRecord,
    ProfileRecord,
    QuizAttemptRecord,
)

logger = logging.getLogger(__name__)


PROFILE_COLUMNS = "id,email,full_name,role,last_activity"
PROGRESS_COLUMNS = "student_id,lesson_id,is_completed,completed_at"
CERTIFICATE_COLUMNS = "id,student_id,course_id,status,certificate_url,approved_at,notes"
QUIZ_ATTEMPT_SELECT = (
    "id,student_id,lesson_id,score,total_points,passed,submitted_at,"
    "student:student_id(full_name,email),"
    "lesson:lesson_id!inner(title,chapter:chapter_id!inner(title,course:course_id!inner(id,title,teacher_id)))"
)


def _in_filter(values: Sequence[Any]) -> str:
    return "in.(" + ",".join(str(v) for v in values) + ")"


def _flatten_lesson(row: Dict[str, Any]) -> Dict[str, Any]:
    chapter = row.get("chapter") or {}
    return {**row, "course_id": chapter.get("course_id")}


def _flatten_enrollment(row: Dict[str, Any]) -> Dict[str, Any]:
    course = row.get("course") or {}
    return {**row, "course_title": course.get("title")}


def _flatten_attempt(row: Dict[str, Any]) -> Dict[str, Any]:
    student = row.get("student") or {}
    lesson = row.get("lesson") or {}
    chapter = lesson.get("chapter") or {}
    course = chapter.get("course") or {}
    return {
        **row,
        "student_name": student.get("full_name"),
        "student_email": student.get("email"),
        "lesson_title": lesson.get("title"),
        "chapter_title": chapter.get("title"),
        "course_id": course.get("id"),
        "course_title": course.get("title"),
    }


class RestBackend(Backend):
    """
    Backend gateway talking to `<base_url>/rest/v1`.

    Args:
        client: Shared httpx client.
        base_url: Project URL of the hosted backend.
        api_key: Public (anon) API key.
        access_token: The caller's JWT, forwarded as the bearer token.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        api_key: str,
        access_token: str,
    ):
        self.client = client
        self.rest_url = base_url.rstrip("/") + "/rest/v1"
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

    # ---------- Transport ----------

    def _check(self, response: httpx.Response, what: str) -> Any:
        if response.status_code >= 400:
            logger.error("Backend %s failed with %s: %s", what, response.status_code, response.text)
            raise BackendError(f"Backend {what} failed ({response.status_code})")
        if not response.content:
            return None
        return response.json()

    async def _select(self, table: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        try:
            response = await get_with_retry(
                self.client,
                f"{self.rest_url}/{table}",
                params=params,
                headers=self.headers,
            )
        except httpx.HTTPError as e:
            logger.error("Backend read of %s failed: %s", table, e)
            raise BackendError(f"Backend read of {table} failed") from e
        return self._check(response, f"read of {table}") or []

    async def _post(
        self,
        path: str,
        payload: Dict[str, Any],
        params: Optional[Dict[str, str]] = None,
        prefer: Optional[str] = None,
    ) -> Any:
        headers = dict(self.headers)
        if prefer:
            headers["Prefer"] = prefer
        try:
            response = await self.client.post(
                f"{self.rest_url}/{path}",
                json=payload,
                params=params,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.error("Backend call %s failed: %s", path, e)
            raise BackendError(f"Backend call {path} failed") from e
        return self._check(response, f"call {path}")

    async def _rpc(self, function: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        return await self._post(f"rpc/{function}", payload or {})

    # ---------- Profiles ----------

    async def get_profile(self, user_id: uuid.UUID) -> Optional[ProfileRecord]:
        rows = await self._select("profiles", {"select": PROFILE_COLUMNS, "id": f"eq.{user_id}"})
        records = parse_logged(ProfileRecord, rows)
        return records[0] if records else None

    async def get_profiles(self, role: Optional[UserRole] = None) -> List[ProfileRecord]:
        params = {"select": PROFILE_COLUMNS, "order": "full_name"}
        if role is not None:
            params["role"] = f"eq.{role.value}"
        return parse_logged(ProfileRecord, await self._select("profiles", params))

    async def touch_activity(self, user_id: uuid.UUID) -> None:
        # The RPC resolves the user from the forwarded token
        await self._rpc("update_user_activity")

    # ---------- Courses & enrollments ----------

    async def get_enrollments(
        self,
        student_id: Optional[uuid.UUID] = None,
        course_id: Optional[uuid.UUID] = None,
    ) -> List[EnrollmentRecord]:
        params = {
            "select": "student_id,course_id,cohort_name,enrolled_at,course:courses(title)",
            "order": "enrolled_at",
        }
        if student_id is not None:
            params["student_id"] = f"eq.{student_id}"
        if course_id is not None:
            params["course_id"] = f"eq.{course_id}"
        rows = await self._select("course_enrollments", params)
        return parse_logged(EnrollmentRecord, [_flatten_enrollment(r) for r in rows])

    async def get_course_lessons(self, course_ids: Sequence[uuid.UUID]) -> List[LessonRecord]:
        if not course_ids:
            return []
        params = {
            "select": "id,chapter_id,title,content_type,order_index,chapter:course_chapters!inner(course_id)",
            "chapter.course_id": _in_filter(course_ids),
            "order": "order_index",
        }
        rows = await self._select("course_lessons", params)
        return parse_logged(LessonRecord, [_flatten_lesson(r) for r in rows])

    async def get_lesson(self, lesson_id: uuid.UUID) -> Optional[LessonRecord]:
        params = {
            "select": "id,chapter_id,title,content_type,order_index,chapter:course_chapters!inner(course_id)",
            "id": f"eq.{lesson_id}",
        }
        rows = await self._select("course_lessons", params)
        records = parse_logged(LessonRecord, [_flatten_lesson(r) for r in rows])
        return records[0] if records else None

    # ---------- Lesson progress ----------

    async def get_lesson_progress(
        self,
        student_id: Optional[uuid.UUID] = None,
        course_id: Optional[uuid.UUID] = None,
    ) -> List[LessonProgressRecord]:
        params = {"select": PROGRESS_COLUMNS}
        if student_id is not None:
            params["student_id"] = f"eq.{student_id}"
        if course_id is not None:
            params["select"] = (
                PROGRESS_COLUMNS
                + ",lesson:course_lessons!inner(chapter:course_chapters!inner(course_id))"
            )
            params["lesson.chapter.course_id"] = f"eq.{course_id}"
        rows = await self._select("student_lesson_progress", params)
        return parse_logged(LessonProgressRecord, rows)

    async def upsert_lesson_progress(
        self,
        student_id: uuid.UUID,
        lesson_id: uuid.UUID,
        is_completed: bool,
    ) -> LessonProgressRecord:
        payload = {
            "student_id": str(student_id),
            "lesson_id": str(lesson_id),
            "is_completed": is_completed,
        }
        payload["completed_at"] = (
            datetime.now(timezone.utc).isoformat() if is_completed else None
        )
        rows = await self._post(
            "student_lesson_progress",
            payload,
            params={"on_conflict": "student_id,lesson_id", "select": PROGRESS_COLUMNS},
            prefer="resolution=merge-duplicates,return=representation",
        )
        if not rows:
            raise BackendError("Backend returned no progress row")
        return LessonProgressRecord.model_validate(rows[0])

    # ---------- Quizzes ----------

    async def get_quiz_attempts(
        self,
        teacher_id: Optional[uuid.UUID] = None,
        student_id: Optional[uuid.UUID] = None,
    ) -> List[QuizAttemptRecord]:
        params = {"select": QUIZ_ATTEMPT_SELECT, "order": "submitted_at.desc"}
        if teacher_id is not None:
            params["lesson.chapter.course.teacher_id"] = f"eq.{teacher_id}"
        elif student_id is not None:
            params["student_id"] = f"eq.{student_id}"
        rows = await self._select("student_quiz_attempts", params)
        return parse_logged(QuizAttemptRecord, [_flatten_attempt(r) for r in rows])

    # ---------- Certificates ----------

    async def get_course_completions(self) -> List[CourseCompletionRecord]:
        rows = await self._rpc("get_course_completions")
        return parse_logged(CourseCompletionRecord, rows or [])

    async def get_certificate(
        self,
        student_id: uuid.UUID,
        course_id: uuid.UUID,
    ) -> Optional[CertificateRecord]:
        params = {
            "select": CERTIFICATE_COLUMNS,
            "student_id": f"eq.{student_id}",
            "course_id": f"eq.{course_id}",
        }
        records = parse_logged(CertificateRecord, await self._select("certificates", params))
        return records[0] if records else None

    async def get_certificates(self, student_id: uuid.UUID) -> List[CertificateRecord]:
        params = {
            "select": CERTIFICATE_COLUMNS,
            "student_id": f"eq.{student_id}",
            "order": "approved_at.desc.nullslast",
        }
        return parse_logged(CertificateRecord, await self._select("certificates", params))

    async def approve_certificate(
        self,
        student_id: uuid.UUID,
        course_id: uuid.UUID,
        certificate_url: str,
        notes: Optional[str],
    ) -> CertificateRecord:
        await self._rpc(
            "approve_certificate",
            {
                "p_student_id": str(student_id),
                "p_course_id": str(course_id),
                "p_certificate_url": certificate_url,
                "p_notes": notes,
            },
        )
        certificate = await self.get_certificate(student_id, course_id)
        if certificate is None:
            # The RPC succeeded but the row is not visible to this caller
            return CertificateRecord(
                student_id=student_id,
                course_id=course_id,
                status=CertificateStatus.APPROVED,
                certificate_url=certificate_url,
                notes=notes,
            )
        return certificate
