"""
Certificate Service

Decides whether a student has completed a course and handles certificate
approval.

State machine per (student, course):

    NOT_STARTED -> IN_PROGRESS -> COMPLETED -> CERTIFICATE_APPROVED

The state is always derived from the current lessons and progress rows.
Approval is the only write, and it re-checks completion against the
backend instead of trusting what the caller saw.
"""

import logging
import uuid
from typing import Iterable, List, Optional

from academy.backends.base import Backend
from academy.core.exceptions import ValidationError
from academy.models.enums import CertificateStatus, CompletionState
from academy.schemas.certificate import CompletionListResponse, CompletionStatus
from academy.schemas.progress import CourseProgress
from academy.schemas.records import CertificateRecord, CourseCompletionRecord
from academy.services.progress_service import ProgressService

logger = logging.getLogger(__name__)


STATUS_FILTERS = ("all", "pending", "approved")


def is_approved(certificate: Optional[CertificateRecord]) -> bool:
    return (
        certificate is not None
        and certificate.status == CertificateStatus.APPROVED
        and bool(certificate.certificate_url)
    )


def evaluate_state(
    progress: CourseProgress,
    certificate: Optional[CertificateRecord] = None,
) -> CompletionState:
    """
    Derive the completion state from course progress and certificate.

    An approved certificate stays approved even if lessons are added to the
    course later; the progress numbers still show the current recount.
    """
    if is_approved(certificate):
        return CompletionState.CERTIFICATE_APPROVED
    if progress.total_lessons > 0 and progress.completed_lessons >= progress.total_lessons:
        return CompletionState.COMPLETED
    if progress.completed_lessons > 0:
        return CompletionState.IN_PROGRESS
    return CompletionState.NOT_STARTED


def _is_pending(completion: CourseCompletionRecord) -> bool:
    return completion.certificate_status in (None, CertificateStatus.PENDING)


def filter_completions(
    completions: Iterable[CourseCompletionRecord],
    search: Optional[str] = None,
    course_id: Optional[uuid.UUID] = None,
    status: str = "all",
) -> List[CourseCompletionRecord]:
    """
    Filter the completion rollup in memory.

    Args:
        completions: Rows from the backend rollup.
        search: Case-insensitive match on student name, email or course title.
        course_id: Only rows for this course.
        status: "all", "pending" (no certificate yet counts as pending) or "approved".
    """
    rows = list(completions)

    if search:
        needle = search.lower()
        rows = [
            c for c in rows
            if needle in (c.student_name or "").lower()
            or needle in (c.student_email or "").lower()
            or needle in (c.course_title or "").lower()
        ]

    if course_id is not None:
        rows = [c for c in rows if c.course_id == course_id]

    if status == "pending":
        rows = [c for c in rows if _is_pending(c)]
    elif status == "approved":
        rows = [c for c in rows if c.certificate_status == CertificateStatus.APPROVED]

    return rows


class CertificateService:
    """Completion evaluation and certificate approval over a Backend."""

    def __init__(self, backend: Backend):
        self.backend = backend
        self.progress = ProgressService(backend)

    async def evaluate(self, student_id: uuid.UUID, course_id: uuid.UUID) -> CompletionStatus:
        """
        Evaluate a student's completion state for a course. Never writes.

        Raises:
            NotFoundError: If the student is not enrolled in the course.
        """
        progress = await self.progress.get_course_progress(student_id, course_id)
        certificate = await self.backend.get_certificate(student_id, course_id)

        return CompletionStatus(
            student_id=student_id,
            course_id=course_id,
            state=evaluate_state(progress, certificate),
            total_lessons=progress.total_lessons,
            completed_lessons=progress.completed_lessons,
            progress_percentage=progress.progress_percentage,
            certificate_status=certificate.status if certificate else None,
            certificate_url=certificate.certificate_url if certificate else None,
        )

    async def approve(
        self,
        student_id: uuid.UUID,
        course_id: uuid.UUID,
        certificate_url: Optional[str],
        notes: Optional[str] = None,
    ) -> CertificateRecord:
        """
        Approve the certificate for a completed course.

        Args:
            student_id: Student profile ID.
            course_id: Course ID.
            certificate_url: Durable URL of the issued certificate.
            notes: Optional admin notes.

        Returns:
            The approved certificate.

        Raises:
            ValidationError: If the URL is empty or the course is not completed.
            NotFoundError: If the student is not enrolled in the course.
            BackendError: If the backend rejects the write.
        """
        url = (certificate_url or "").strip()
        if not url:
            raise ValidationError(
                "Please provide a certificate URL",
                code="certificate_url_required",
            )

        status = await self.evaluate(student_id, course_id)
        # Gate on the current recount; an earlier approval does not carry over
        if status.total_lessons == 0 or status.completed_lessons < status.total_lessons:
            raise ValidationError(
                f"Course not completed yet ({status.completed_lessons}/"
                f"{status.total_lessons} lessons, {status.progress_percentage}%)",
                code="course_not_completed",
            )

        certificate = await self.backend.approve_certificate(
            student_id,
            course_id,
            url,
            (notes or "").strip() or None,
        )
        logger.info("Certificate approved for student %s in course %s", student_id, course_id)
        return certificate

    async def list_completions(
        self,
        search: Optional[str] = None,
        course_id: Optional[uuid.UUID] = None,
        status: str = "all",
    ) -> CompletionListResponse:
        """
        Get the admin completions table.

        Counts are taken over every row, before filtering.

        Raises:
            ValidationError: If status is not one of all/pending/approved.
        """
        if status not in STATUS_FILTERS:
            raise ValidationError(
                f"Unknown status filter '{status}'",
                code="invalid_status_filter",
            )

        completions = await self.backend.get_course_completions()

        return CompletionListResponse(
            pending_count=sum(1 for c in completions if _is_pending(c)),
            approved_count=sum(
                1 for c in completions if c.certificate_status == CertificateStatus.APPROVED
            ),
            completions=filter_completions(completions, search, course_id, status),
        )

    async def list_student_certificates(self, student_id: uuid.UUID) -> List[CertificateRecord]:
        """Get a student's approved certificates."""
        certificates = await self.backend.get_certificates(student_id)
        return [c for c in certificates if is_approved(c)]
