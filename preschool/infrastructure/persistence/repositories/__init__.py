"""Repositories (record store client)."""

from preschool.infrastructure.persistence.repositories.base import BaseRepository
from preschool.infrastructure.persistence.repositories.invitation_code_repo import (
    InvitationCodeRepository,
)
from preschool.infrastructure.persistence.repositories.onboarding_request_repo import (
    OnboardingRequestRepository,
)
from preschool.infrastructure.persistence.repositories.record_store import SqlRecordStore
from preschool.infrastructure.persistence.repositories.tenant_repo import TenantRepository
from preschool.infrastructure.persistence.repositories.user_profile_repo import (
    UserProfileRepository,
)

__all__ = [
    "BaseRepository",
    "InvitationCodeRepository",
    "OnboardingRequestRepository",
    "SqlRecordStore",
    "TenantRepository",
    "UserProfileRepository",
]
