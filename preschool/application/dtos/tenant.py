"""DTOs for tenant use cases (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime

from preschool.domain.enums import TenantOnboardingStatus


@dataclass(frozen=True)
class TenantResult:
    """Tenant read-model (result of get_by_id, create_tenant, etc.)."""

    id: str
    name: str
    slug: str
    contact_email: str
    subscription_plan: str
    subscription_status: str
    onboarding_status: TenantOnboardingStatus
    onboarding_request_id: str | None
    created_at: datetime
