"""Persistence models: ORM entities and mixins."""

from preschool.infrastructure.persistence.models.identity_account import IdentityAccount
from preschool.infrastructure.persistence.models.invitation_code import InvitationCode
from preschool.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    TimestampMixin,
)
from preschool.infrastructure.persistence.models.onboarding_request import (
    OnboardingRequest,
)
from preschool.infrastructure.persistence.models.tenant import Tenant
from preschool.infrastructure.persistence.models.user_profile import UserProfile

__all__ = [
    "CreatedAtMixin",
    "CuidMixin",
    "IdentityAccount",
    "InvitationCode",
    "OnboardingRequest",
    "Tenant",
    "TimestampMixin",
    "UserProfile",
]
