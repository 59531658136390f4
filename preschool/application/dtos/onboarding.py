"""DTOs for onboarding use cases (no dependency on ORM)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class OnboardingRequestCreate:
    """Fields submitted by a prospective school (anonymous)."""

    tenant_name: str
    admin_name: str
    admin_email: str
    phone: str | None = None
    address: str | None = None
    student_count: int | None = None
    teacher_count: int | None = None
    message: str | None = None


@dataclass(frozen=True)
class ApprovalResult:
    """Outcome of approving an onboarding request.

    temp_password is only present on the invocation that created the
    principal account; idempotent re-approvals return None.
    """

    tenant_id: str
    admin_email: str
    temp_password: str | None = None
    already_provisioned: bool = False
