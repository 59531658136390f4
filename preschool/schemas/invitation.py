"""Invitation code API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from preschool.domain.entities import InvitationCodeEntity
from preschool.domain.enums import InvitationState, UserRole


class InvitationCreateRequest(BaseModel):
    """Request body for issuing an invitation code.

    role must be admin, teacher or parent. ttl_hours defaults to the
    configured lifetime (7 days) when omitted.
    """

    tenant_id: str = Field(..., min_length=1)
    role: UserRole
    target_email: str | None = Field(
        default=None,
        max_length=320,
        description="Restrict redemption to this address (case-insensitive)",
    )
    ttl_hours: int | None = Field(default=None, ge=1, description="Lifetime in hours")


class InvitationResponse(BaseModel):
    """Invitation code as seen by its issuer."""

    code: str
    tenant_id: str
    role: UserRole
    invited_by: str
    target_email: str | None
    expires_at: datetime
    used_at: datetime | None
    used_by: str | None
    state: InvitationState
    created_at: datetime

    @classmethod
    def from_entity(cls, entity: InvitationCodeEntity) -> "InvitationResponse":
        return cls(
            code=entity.code,
            tenant_id=entity.tenant_id,
            role=entity.role,
            invited_by=entity.invited_by,
            target_email=entity.target_email,
            expires_at=entity.expires_at,
            used_at=entity.used_at,
            used_by=entity.used_by,
            state=entity.state(),
            created_at=entity.created_at,
        )


class InvitationPreviewResponse(BaseModel):
    """Public preview of a code; never discloses the target email."""

    model_config = ConfigDict(from_attributes=True)

    code: str
    role: UserRole
    tenant_id: str
    tenant_name: str
    expires_at: datetime
    state: InvitationState
    email_restricted: bool


class RedeemRequest(BaseModel):
    """Request body for redeeming a code.

    password creates the account when the email is new; for an existing
    account it proves control of it.
    """

    code: str = Field(..., min_length=1, max_length=64)
    email: str = Field(..., min_length=3, max_length=320)
    name: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=1024)


class RedeemResponse(BaseModel):
    """Role and tenant granted by a redemption."""

    model_config = ConfigDict(from_attributes=True)

    role: UserRole
    tenant_id: str
    profile_id: str


class ResendResponse(BaseModel):
    """Whether the invitation email was handed to the notifier."""

    sent: bool
