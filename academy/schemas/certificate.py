"""
Certificate Schemas

Pydantic models for completion status and certificate approval.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from academy.models.enums import CertificateStatus, CompletionState
from academy.schemas.records import CourseCompletionRecord


class CertificateApproval(BaseModel):
    """Schema for approving a certificate."""

    student_id: uuid.UUID
    course_id: uuid.UUID
    # Empty values are rejected by CertificateService.approve
    certificate_url: str = Field("", description="Durable URL of the issued certificate")
    notes: Optional[str] = Field(None, description="Optional notes for the record")


class CompletionStatus(BaseModel):
    """Completion state of one course for one student."""

    student_id: uuid.UUID
    course_id: uuid.UUID
    state: CompletionState
    total_lessons: int
    completed_lessons: int
    progress_percentage: int
    certificate_status: Optional[CertificateStatus] = None
    certificate_url: Optional[str] = None


class CertificateResponse(BaseModel):
    """Schema for an issued or pending certificate."""

    student_id: uuid.UUID
    course_id: uuid.UUID
    status: CertificateStatus
    certificate_url: Optional[str] = None
    approved_at: Optional[datetime] = None
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class CompletionListResponse(BaseModel):
    """Schema for the admin certificates table."""

    pending_count: int
    approved_count: int
    completions: List[CourseCompletionRecord]
