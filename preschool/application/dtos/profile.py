"""DTOs for user profile use cases (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime

from preschool.domain.enums import UserRole


@dataclass(frozen=True)
class UserProfileResult:
    """User profile read-model. The authoritative source of role and tenant."""

    id: str
    identity_id: str
    email: str
    name: str
    role: UserRole
    tenant_id: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime
