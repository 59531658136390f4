"""DTOs for invitation use cases (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime

from preschool.domain.enums import InvitationState, UserRole


@dataclass(frozen=True)
class RedemptionResult:
    """Role and tenant granted by a successful redemption."""

    role: UserRole
    tenant_id: str
    profile_id: str


@dataclass(frozen=True)
class InvitationPreview:
    """Public view of a code for the join-with-code page (no target email disclosed)."""

    code: str
    role: UserRole
    tenant_id: str
    tenant_name: str
    expires_at: datetime
    state: InvitationState
    email_restricted: bool
