"""Application DTOs (read-models and command payloads)."""

from preschool.application.dtos.identity import IdentityRef
from preschool.application.dtos.invitation import InvitationPreview, RedemptionResult
from preschool.application.dtos.onboarding import ApprovalResult, OnboardingRequestCreate
from preschool.application.dtos.profile import UserProfileResult
from preschool.application.dtos.tenant import TenantResult

__all__ = [
    "ApprovalResult",
    "IdentityRef",
    "InvitationPreview",
    "OnboardingRequestCreate",
    "RedemptionResult",
    "TenantResult",
    "UserProfileResult",
]
