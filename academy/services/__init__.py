"""
Academy Backend - Services Module

Business logic layer.
"""

from academy.services import activity_service
from academy.services import certificate_service
from academy.services import export_service
from academy.services import grade_service
from academy.services import progress_service

__all__ = [
    "activity_service",
    "certificate_service",
    "export_service",
    "grade_service",
    "progress_service",
]
