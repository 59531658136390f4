"""Application services (provisioning pipelines and helpers)."""

from preschool.application.services.credentials import (
    generate_invitation_code,
    generate_temp_password,
)
from preschool.application.services.external_calls import (
    ExternalCallPolicy,
    call_external,
    notify_best_effort,
)
from preschool.application.services.invitation_service import InvitationService
from preschool.application.services.member_admin_service import MemberAdminService
from preschool.application.services.tenant_approval_service import TenantApprovalService

__all__ = [
    "ExternalCallPolicy",
    "InvitationService",
    "MemberAdminService",
    "TenantApprovalService",
    "call_external",
    "generate_invitation_code",
    "generate_temp_password",
    "notify_best_effort",
]
