"""
Grade Routes

Quiz grade table and exports, scoped by the caller's role.
"""

import uuid
from typing import Literal, Optional

from fastapi import APIRouter
from fastapi.responses import Response

from academy.api.deps import BackendDep, CurrentUser
from academy.models.enums import UserRole
from academy.schemas.grades import GradesResponse
from academy.schemas.records import ProfileRecord
from academy.services import export_service
from academy.services.grade_service import GradeService


router = APIRouter(prefix="/grades", tags=["Grades"])


def _scope(user: ProfileRecord) -> dict:
    """Teachers see their courses, students their own attempts, admins everything."""
    if user.role == UserRole.TEACHER:
        return {"teacher_id": user.id}
    if user.role == UserRole.STUDENT:
        return {"student_id": user.id}
    return {}


@router.get(
    "",
    response_model=GradesResponse,
    summary="Get quiz grades",
)
async def get_grades(
    current_user: CurrentUser,
    backend: BackendDep,
    search: Optional[str] = None,
    course_id: Optional[uuid.UUID] = None,
) -> GradesResponse:
    """
    Get quiz grades with average score and pass rate.

    **Filters:**
    - `search`: student, course or quiz name
    - `course_id`: one course
    """
    return await GradeService(backend).get_grades(
        search=search,
        course_id=course_id,
        **_scope(current_user),
    )


@router.get(
    "/export",
    summary="Export quiz grades",
)
async def export_grades(
    current_user: CurrentUser,
    backend: BackendDep,
    format: Literal["csv", "xlsx"] = "csv",
    search: Optional[str] = None,
    course_id: Optional[uuid.UUID] = None,
) -> Response:
    """Download the filtered grades as CSV or XLSX."""
    result = await GradeService(backend).get_grades(
        search=search,
        course_id=course_id,
        **_scope(current_user),
    )

    if format == "xlsx":
        content = export_service.grades_to_xlsx(result.grades)
        media_type = export_service.XLSX_MEDIA_TYPE
    else:
        content = export_service.grades_to_csv(result.grades)
        media_type = export_service.CSV_MEDIA_TYPE

    filename = export_service.grades_filename(format)
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
