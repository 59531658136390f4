"""Pydantic request/response schemas for the API."""

from preschool.schemas.health import HealthResponse
from preschool.schemas.invitation import (
    InvitationCreateRequest,
    InvitationPreviewResponse,
    InvitationResponse,
    RedeemRequest,
    RedeemResponse,
    ResendResponse,
)
from preschool.schemas.member import OkResponse, PasswordResetResponse
from preschool.schemas.onboarding import (
    ApprovalResponse,
    OnboardingRequestCreateRequest,
    OnboardingRequestCreateResponse,
    OnboardingRequestResponse,
    RejectRequest,
)

__all__ = [
    "ApprovalResponse",
    "HealthResponse",
    "InvitationCreateRequest",
    "InvitationPreviewResponse",
    "InvitationResponse",
    "OkResponse",
    "OnboardingRequestCreateRequest",
    "OnboardingRequestCreateResponse",
    "OnboardingRequestResponse",
    "PasswordResetResponse",
    "RedeemRequest",
    "RedeemResponse",
    "ResendResponse",
]
