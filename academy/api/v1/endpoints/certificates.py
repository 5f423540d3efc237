"""
Certificate Routes

Endpoints for completion status, certificate listing and approval.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter
from fastapi.responses import Response

from academy.api.deps import BackendDep, CurrentAdmin, CurrentStudent
from academy.schemas.certificate import (
    CertificateApproval,
    CertificateResponse,
    CompletionListResponse,
    CompletionStatus,
)
from academy.services import export_service
from academy.services.certificate_service import CertificateService


router = APIRouter(tags=["Certificates"])


@router.get(
    "/certificates/me",
    response_model=List[CertificateResponse],
    summary="List my certificates",
)
async def list_my_certificates(
    current_user: CurrentStudent,
    backend: BackendDep,
) -> List[CertificateResponse]:
    """Get the current student's approved certificates."""
    certificates = await CertificateService(backend).list_student_certificates(current_user.id)
    return [CertificateResponse.model_validate(c) for c in certificates]


@router.get(
    "/certificates/status/{course_id}",
    response_model=CompletionStatus,
    summary="Get my completion status for a course",
)
async def get_completion_status(
    course_id: uuid.UUID,
    current_user: CurrentStudent,
    backend: BackendDep,
) -> CompletionStatus:
    """
    Get the completion state for a course.

    **States:** NOT_STARTED, IN_PROGRESS, COMPLETED, CERTIFICATE_APPROVED
    """
    return await CertificateService(backend).evaluate(current_user.id, course_id)


@router.get(
    "/admin/certificates",
    response_model=CompletionListResponse,
    summary="List course completions",
)
async def list_completions(
    admin: CurrentAdmin,
    backend: BackendDep,
    search: Optional[str] = None,
    course_id: Optional[uuid.UUID] = None,
    status: str = "all",
) -> CompletionListResponse:
    """
    Get course completions with certificate status.

    **Filters:**
    - `search`: student name, email or course title
    - `course_id`: one course
    - `status`: all, pending or approved
    """
    return await CertificateService(backend).list_completions(
        search=search,
        course_id=course_id,
        status=status,
    )


@router.get(
    "/admin/certificates/export",
    summary="Export course completions as XLSX",
)
async def export_completions(
    admin: CurrentAdmin,
    backend: BackendDep,
    search: Optional[str] = None,
    course_id: Optional[uuid.UUID] = None,
    status: str = "all",
) -> Response:
    """Download the filtered completions table as a spreadsheet."""
    result = await CertificateService(backend).list_completions(
        search=search,
        course_id=course_id,
        status=status,
    )
    return Response(
        content=export_service.completions_to_xlsx(result.completions),
        media_type=export_service.XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="completions.xlsx"'},
    )


@router.post(
    "/admin/certificates/approve",
    response_model=CertificateResponse,
    summary="Approve a certificate",
)
async def approve_certificate(
    data: CertificateApproval,
    admin: CurrentAdmin,
    backend: BackendDep,
) -> CertificateResponse:
    """
    Approve the certificate for a completed course.

    **Requirements:**
    - A non-empty certificate URL.
    - Every lesson of the course completed at the time of approval.
    """
    certificate = await CertificateService(backend).approve(
        student_id=data.student_id,
        course_id=data.course_id,
        certificate_url=data.certificate_url,
        notes=data.notes,
    )
    return CertificateResponse.model_validate(certificate)
