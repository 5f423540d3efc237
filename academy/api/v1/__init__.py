"""
API v1 Router

Aggregates all v1 endpoint routers.
"""

from fastapi import APIRouter

from academy.api.v1.endpoints import activity, certificates, grades, progress

router = APIRouter()

# Include progress routes
router.include_router(progress.router)

# Include certificate routes
router.include_router(certificates.router)

# Include grade routes
router.include_router(grades.router)

# Include activity routes
router.include_router(activity.router)
