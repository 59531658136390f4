"""Repository interfaces (ports) for the application layer.

Protocols define contracts that the record store implementation must fulfill
(DIP). All types reference application DTOs or domain entities only; no
infrastructure imports. Every method is its own short transaction: the
provisioning pipelines commit step by step and compensate explicitly.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

from preschool.domain.enums import (
    OnboardingRequestStatus,
    TenantOnboardingStatus,
    UserRole,
)

if TYPE_CHECKING:
    from preschool.application.dtos.onboarding import OnboardingRequestCreate
    from preschool.application.dtos.profile import UserProfileResult
    from preschool.application.dtos.tenant import TenantResult
    from preschool.domain.entities import InvitationCodeEntity, OnboardingRequestEntity


class IOnboardingRequestRepository(Protocol):
    """Protocol for onboarding request persistence."""

    async def create_request(self, data: OnboardingRequestCreate) -> OnboardingRequestEntity:
        """Persist a new pending request."""

    async def get_by_id(self, request_id: str) -> OnboardingRequestEntity | None:
        """Return request by ID."""

    async def list_requests(
        self,
        status: OnboardingRequestStatus | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[OnboardingRequestEntity]:
        """Return requests (newest first), optionally filtered by status."""

    async def mark_reviewed(
        self,
        request_id: str,
        status: OnboardingRequestStatus,
        reviewed_by: str,
        reviewed_at: datetime,
        tenant_id: str | None = None,
        rejection_reason: str | None = None,
    ) -> bool:
        """Record the review outcome only while reviewed_at is null. Return whether applied."""


class ITenantRepository(Protocol):
    """Protocol for tenant persistence."""

    async def create_tenant(
        self,
        tenant_id: str,
        name: str,
        slug: str,
        contact_email: str,
        subscription_plan: str,
        onboarding_request_id: str,
    ) -> TenantResult:
        """Insert a tenant with onboarding_status=pending. Raises ConflictException on unique violation."""

    async def get_by_id(self, tenant_id: str) -> TenantResult | None:
        """Return tenant by ID."""

    async def get_by_onboarding_request_id(self, request_id: str) -> TenantResult | None:
        """Return the tenant provisioned for an onboarding request."""

    async def contact_email_in_use(self, email: str) -> bool:
        """Return True if an active tenant already uses this contact email."""

    async def set_onboarding_status(
        self, tenant_id: str, status: TenantOnboardingStatus
    ) -> bool:
        """Update onboarding_status. Return False if the tenant is gone."""

    async def delete(self, tenant_id: str) -> bool:
        """Hard-delete a tenant (approval rollback only)."""


class IUserProfileRepository(Protocol):
    """Protocol for user profile persistence."""

    async def get_by_id(self, profile_id: str) -> UserProfileResult | None:
        """Return profile by ID."""

    async def get_by_identity_id(self, identity_id: str) -> UserProfileResult | None:
        """Return the profile bound to a directory account."""

    async def get_principal_for_tenant(self, tenant_id: str) -> UserProfileResult | None:
        """Return the principal profile of a tenant, if any."""

    async def create_profile(
        self,
        identity_id: str,
        email: str,
        name: str,
        role: UserRole,
        tenant_id: str | None,
    ) -> UserProfileResult:
        """Insert an active profile. Raises ConflictException if identity_id is taken."""

    async def update_grant(
        self,
        profile_id: str,
        role: UserRole,
        tenant_id: str | None,
        is_active: bool,
        name: str | None = None,
    ) -> UserProfileResult | None:
        """Overwrite role, tenant, active flag (and name when given). None if missing."""

    async def set_active(self, profile_id: str, is_active: bool) -> bool:
        """Set is_active. Return False if the profile is gone."""

    async def delete(self, profile_id: str) -> bool:
        """Hard-delete a profile (compensation only)."""


class IInvitationCodeRepository(Protocol):
    """Protocol for invitation code persistence."""

    async def create_code(
        self,
        code: str,
        tenant_id: str,
        role: UserRole,
        invited_by: str,
        expires_at: datetime,
        target_email: str | None = None,
    ) -> InvitationCodeEntity:
        """Insert a code. Raises ConflictException on collision."""

    async def get_by_code(self, code: str) -> InvitationCodeEntity | None:
        """Return code by value."""

    async def list_by_tenant(
        self, tenant_id: str, skip: int = 0, limit: int = 100
    ) -> list[InvitationCodeEntity]:
        """Return codes for a tenant (newest first)."""

    async def mark_used(self, code: str, used_by: str, used_at: datetime) -> bool:
        """Set used_at/used_by only while used_at is null. Return whether applied."""

    async def revoke(self, code: str, now: datetime) -> bool:
        """Set expires_at=now only while used_at is null. Return whether applied."""


class IRecordStore(Protocol):
    """The record store client: one repository per table."""

    requests: IOnboardingRequestRepository
    tenants: ITenantRepository
    profiles: IUserProfileRepository
    invitations: IInvitationCodeRepository
