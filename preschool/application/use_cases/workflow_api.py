"""Workflow API: the authorized entry points to the provisioning pipelines.

Each operation takes the caller's profile id explicitly, resolves it against
the record store (the sole authority for role and tenant), checks the role
rule and validates input shape before delegating to a service. No ambient
session state is consulted.
"""

from __future__ import annotations

from datetime import timedelta
from functools import partial
from typing import TYPE_CHECKING

from preschool.application.dtos.onboarding import OnboardingRequestCreate
from preschool.application.services.external_calls import ExternalCallPolicy
from preschool.domain.enums import (
    INVITABLE_ROLES,
    ISSUER_ROLES,
    ROLE_RANK,
    OnboardingRequestStatus,
    UserRole,
)
from preschool.domain.exceptions import (
    InvalidCodeException,
    UnauthorizedException,
    ValidationException,
)
from preschool.domain.value_objects import normalize_email, normalize_invitation_code

if TYPE_CHECKING:
    from preschool.application.dtos.invitation import InvitationPreview, RedemptionResult
    from preschool.application.dtos.onboarding import ApprovalResult
    from preschool.application.dtos.profile import UserProfileResult
    from preschool.application.interfaces.repositories import IRecordStore
    from preschool.application.services.invitation_service import InvitationService
    from preschool.application.services.member_admin_service import MemberAdminService
    from preschool.application.services.tenant_approval_service import (
        TenantApprovalService,
    )
    from preschool.domain.entities import InvitationCodeEntity, OnboardingRequestEntity

MIN_INVITATION_TTL = timedelta(hours=1)
DEFAULT_MAX_INVITATION_TTL = timedelta(days=90)


def _required(value: str | None, field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationException(f"{field} is required", field=field)
    return text


def _optional(value: str | None) -> str | None:
    text = (value or "").strip()
    return text or None


def _email(value: str | None, field: str) -> str:
    try:
        return normalize_email(_required(value, field))
    except ValueError as e:
        raise ValidationException(str(e), field=field) from e


def _code(value: str | None) -> str:
    try:
        return normalize_invitation_code(value or "")
    except ValueError:
        raise InvalidCodeException() from None


def _non_negative(value: int | None, field: str) -> int | None:
    if value is not None and value < 0:
        raise ValidationException(f"{field} must not be negative", field=field)
    return value


class WorkflowApi:
    """Façade over the approval, invitation and member admin services."""

    def __init__(
        self,
        store: IRecordStore,
        approvals: TenantApprovalService,
        invitations: InvitationService,
        members: MemberAdminService,
        policy: ExternalCallPolicy | None = None,
        max_invitation_ttl: timedelta = DEFAULT_MAX_INVITATION_TTL,
    ) -> None:
        self._store = store
        self._approvals = approvals
        self._invitations = invitations
        self._members = members
        self._policy = policy or ExternalCallPolicy()
        self._max_invitation_ttl = max_invitation_ttl

    # Onboarding

    async def request_onboarding(
        self,
        tenant_name: str,
        admin_name: str,
        admin_email: str,
        phone: str | None = None,
        address: str | None = None,
        student_count: int | None = None,
        teacher_count: int | None = None,
        message: str | None = None,
    ) -> str:
        """Anonymous: submit a school's onboarding request. Returns the request id."""
        data = OnboardingRequestCreate(
            tenant_name=_required(tenant_name, "tenant_name"),
            admin_name=_required(admin_name, "admin_name"),
            admin_email=_email(admin_email, "admin_email"),
            phone=_optional(phone),
            address=_optional(address),
            student_count=_non_negative(student_count, "student_count"),
            teacher_count=_non_negative(teacher_count, "teacher_count"),
            message=_optional(message),
        )
        return await self._approvals.request_onboarding(data)

    async def list_onboarding_requests(
        self,
        caller_profile_id: str,
        status: OnboardingRequestStatus | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[OnboardingRequestEntity]:
        await self._require_superadmin(caller_profile_id, "list_onboarding_requests")
        return await self._approvals.list_requests(status, skip, limit)

    async def approve_onboarding(
        self, caller_profile_id: str, request_id: str
    ) -> ApprovalResult:
        caller = await self._require_superadmin(caller_profile_id, "approve_onboarding")
        return await self._approvals.approve(_required(request_id, "request_id"), caller.id)

    async def reject_onboarding(
        self, caller_profile_id: str, request_id: str, reason: str | None = None
    ) -> None:
        caller = await self._require_superadmin(caller_profile_id, "reject_onboarding")
        await self._approvals.reject(
            _required(request_id, "request_id"), caller.id, _optional(reason)
        )

    # Invitations

    async def issue_invitation(
        self,
        caller_profile_id: str,
        tenant_id: str,
        role: UserRole | str,
        target_email: str | None = None,
        ttl: timedelta | None = None,
    ) -> InvitationCodeEntity:
        tenant_id = _required(tenant_id, "tenant_id")
        caller = await self._require_issuer(caller_profile_id, tenant_id, "issue_invitation")
        try:
            role = UserRole(role)
        except ValueError:
            raise ValidationException(f"Unknown role: {role}", field="role") from None
        if role not in INVITABLE_ROLES:
            raise ValidationException(
                f"Role {role.value!r} cannot be granted by invitation", field="role"
            )
        if ttl is not None and not MIN_INVITATION_TTL <= ttl <= self._max_invitation_ttl:
            raise ValidationException(
                "Invitation lifetime must be between 1 hour and "
                f"{int(self._max_invitation_ttl.total_seconds() // 3600)} hours",
                field="ttl_hours",
            )
        target = _email(target_email, "target_email") if _optional(target_email) else None
        return await self._invitations.issue(tenant_id, role, caller.id, target, ttl)

    async def redeem_invitation(
        self, code: str, email: str, name: str, password: str
    ) -> RedemptionResult:
        """Anonymous: redeem a code, creating or upgrading the caller's account."""
        code = _code(code)
        email = _email(email, "email")
        name = _required(name, "name")
        if not password:
            raise ValidationException("password is required", field="password")
        return await self._invitations.redeem(code, email, name, password)

    async def revoke_invitation(self, caller_profile_id: str, code: str) -> None:
        invitation = await self._invitations.get_code(_code(code))
        caller = await self._require_issuer(
            caller_profile_id, invitation.tenant_id, "revoke_invitation"
        )
        await self._invitations.revoke(invitation.code, caller.id)

    async def resend_invitation(self, caller_profile_id: str, code: str) -> bool:
        invitation = await self._invitations.get_code(_code(code))
        caller = await self._require_issuer(
            caller_profile_id, invitation.tenant_id, "resend_invitation"
        )
        return await self._invitations.resend(invitation.code, caller.id)

    async def preview_invitation(self, code: str) -> InvitationPreview:
        """Anonymous: what a code grants, for the join-with-code page."""
        return await self._invitations.preview(_code(code))

    async def list_invitations(
        self, caller_profile_id: str, tenant_id: str, skip: int = 0, limit: int = 100
    ) -> list[InvitationCodeEntity]:
        tenant_id = _required(tenant_id, "tenant_id")
        await self._require_issuer(caller_profile_id, tenant_id, "list_invitations")
        return await self._invitations.list_for_tenant(tenant_id, skip, limit)

    # Members

    async def reset_member_password(
        self, caller_profile_id: str, target_profile_id: str
    ) -> bool:
        """Email the member a fresh temporary password. Returns whether the email was sent."""
        caller, target = await self._require_member_admin(
            caller_profile_id, target_profile_id, "reset_member_password"
        )
        return await self._members.reset_password(target.id, caller.id)

    async def deactivate_member(self, caller_profile_id: str, target_profile_id: str) -> None:
        caller, target = await self._require_member_admin(
            caller_profile_id, target_profile_id, "deactivate_member"
        )
        if caller.id == target.id:
            raise UnauthorizedException(
                action="deactivate_member", message="Callers cannot deactivate themselves"
            )
        await self._members.deactivate(target.id, caller.id)

    # Authorization

    async def _caller(self, caller_profile_id: str | None, action: str) -> UserProfileResult:
        """Resolve the caller. Unknown or inactive callers are unauthorized."""
        if not caller_profile_id:
            raise UnauthorizedException(action=action, message="Caller identity is required")
        caller = await self._policy.run(
            partial(self._store.profiles.get_by_id, caller_profile_id),
            "record_store",
            "get_profile",
        )
        if caller is None or not caller.is_active:
            raise UnauthorizedException(action=action)
        return caller

    async def _require_superadmin(
        self, caller_profile_id: str | None, action: str
    ) -> UserProfileResult:
        caller = await self._caller(caller_profile_id, action)
        if caller.role != UserRole.SUPERADMIN:
            raise UnauthorizedException(action=action)
        return caller

    async def _require_issuer(
        self, caller_profile_id: str | None, tenant_id: str, action: str
    ) -> UserProfileResult:
        """Superadmin, or principal/admin of tenant_id."""
        caller = await self._caller(caller_profile_id, action)
        if caller.role == UserRole.SUPERADMIN:
            return caller
        if caller.role in ISSUER_ROLES and caller.tenant_id == tenant_id:
            return caller
        raise UnauthorizedException(action=action)

    async def _require_member_admin(
        self, caller_profile_id: str | None, target_profile_id: str, action: str
    ) -> tuple[UserProfileResult, UserProfileResult]:
        """Superadmin, or principal/admin of the target's tenant acting on a lower-ranked member."""
        caller = await self._caller(caller_profile_id, action)
        target = await self._members.get_profile(_required(target_profile_id, "profile_id"))
        if caller.role == UserRole.SUPERADMIN:
            return caller, target
        if (
            caller.role in ISSUER_ROLES
            and caller.tenant_id is not None
            and caller.tenant_id == target.tenant_id
            and ROLE_RANK[target.role] < ROLE_RANK[caller.role]
        ):
            return caller, target
        raise UnauthorizedException(action=action)
