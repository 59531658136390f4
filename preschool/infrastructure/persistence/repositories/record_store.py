"""SQL record store: the four repositories sharing one session factory."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from preschool.infrastructure.persistence.repositories.invitation_code_repo import (
    InvitationCodeRepository,
)
from preschool.infrastructure.persistence.repositories.onboarding_request_repo import (
    OnboardingRequestRepository,
)
from preschool.infrastructure.persistence.repositories.tenant_repo import TenantRepository
from preschool.infrastructure.persistence.repositories.user_profile_repo import (
    UserProfileRepository,
)


class SqlRecordStore:
    """Record store client backed by SQLAlchemy (implements IRecordStore)."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.requests = OnboardingRequestRepository(session_factory)
        self.tenants = TenantRepository(session_factory)
        self.profiles = UserProfileRepository(session_factory)
        self.invitations = InvitationCodeRepository(session_factory)
