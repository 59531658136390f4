"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from preschool.api.v1.dependencies (no manual repo/service construction).
"""

from fastapi import APIRouter

from preschool.api.v1.endpoints import health, invitations, members, onboarding_requests

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(
    onboarding_requests.router, prefix="/onboarding-requests", tags=["onboarding"]
)
api_router.include_router(invitations.router, prefix="/invitations", tags=["invitations"])
api_router.include_router(members.router, prefix="/members", tags=["members"])
