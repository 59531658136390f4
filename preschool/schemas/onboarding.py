"""Onboarding request API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from preschool.domain.enums import OnboardingRequestStatus


class OnboardingRequestCreateRequest(BaseModel):
    """Request body for an anonymous onboarding request.

    admin_email is normalized (trimmed, lowercased) and checked for shape by
    the workflow layer, which answers VALIDATION_ERROR on a bad address.
    """

    tenant_name: str = Field(..., min_length=1, max_length=255, description="School name")
    admin_name: str = Field(..., min_length=1, max_length=255)
    admin_email: str = Field(..., min_length=3, max_length=320)
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = Field(default=None, max_length=500)
    student_count: int | None = Field(default=None, ge=0)
    teacher_count: int | None = Field(default=None, ge=0)
    message: str | None = Field(default=None, max_length=2000)


class OnboardingRequestCreateResponse(BaseModel):
    """Response after submitting an onboarding request."""

    request_id: str
    status: OnboardingRequestStatus = OnboardingRequestStatus.PENDING


class OnboardingRequestResponse(BaseModel):
    """Onboarding request as seen by a superadmin reviewer."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_name: str
    admin_name: str
    admin_email: str
    phone: str | None
    address: str | None
    student_count: int | None
    teacher_count: int | None
    message: str | None
    status: OnboardingRequestStatus
    reviewed_by: str | None
    reviewed_at: datetime | None
    tenant_id: str | None
    rejection_reason: str | None
    created_at: datetime


class ApprovalResponse(BaseModel):
    """Response after approving a request.

    temp_password is returned once, on the call that created the principal
    account; repeated approvals return null.
    """

    model_config = ConfigDict(from_attributes=True)

    tenant_id: str
    admin_email: str
    temp_password: str | None = None
    already_provisioned: bool = False


class RejectRequest(BaseModel):
    """Request body for rejecting an onboarding request."""

    reason: str | None = Field(default=None, max_length=1000)
