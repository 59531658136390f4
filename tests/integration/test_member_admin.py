"""Integration tests for member password reset and deactivation."""

from unittest.mock import AsyncMock

import pytest

from preschool.application.dtos import UserProfileResult
from preschool.application.services import ExternalCallPolicy, MemberAdminService
from preschool.application.use_cases import WorkflowApi
from preschool.domain.exceptions import (
    InvalidStateException,
    ResourceNotFoundException,
    UnauthorizedException,
)
from preschool.infrastructure.identity.sql_directory import SqlIdentityDirectory
from preschool.infrastructure.persistence.repositories import SqlRecordStore
from tests.conftest import RecordingNotifier

PASSWORD = "Member!Pass1"


async def _teacher(workflow: WorkflowApi, principal: UserProfileResult, email: str = "t@school.test") -> str:
    code = await workflow.issue_invitation(principal.id, principal.tenant_id, "teacher")
    result = await workflow.redeem_invitation(code.code, email, "Tess Teacher", PASSWORD)
    return result.profile_id


async def test_reset_password_emails_temp_password_only_to_member(
    workflow: WorkflowApi,
    directory: SqlIdentityDirectory,
    notifier: RecordingNotifier,
    principal: UserProfileResult,
) -> None:
    teacher_id = await _teacher(workflow, principal)

    sent = await workflow.reset_member_password(principal.id, teacher_id)

    assert sent is True
    reset = notifier.of("password_reset")
    assert len(reset) == 1
    assert reset[0][0] == "t@school.test"
    temp_password = reset[0][2]["temp_password"]
    assert reset[0][2] == {"name": "Tess Teacher", "temp_password": temp_password}
    assert len(temp_password) >= 12
    assert await directory.verify_password("t@school.test", temp_password) is not None
    assert await directory.verify_password("t@school.test", PASSWORD) is None


async def test_reset_password_reports_undelivered_email(
    store: SqlRecordStore,
    directory: SqlIdentityDirectory,
    policy: ExternalCallPolicy,
    workflow: WorkflowApi,
    principal: UserProfileResult,
) -> None:
    teacher_id = await _teacher(workflow, principal)
    notifier = AsyncMock()
    notifier.send.side_effect = RuntimeError("mail api down")
    members = MemberAdminService(store, directory, notifier, policy=policy)

    assert await members.reset_password(teacher_id, principal.id) is False


async def test_admin_cannot_take_over_principal(
    workflow: WorkflowApi,
    store: SqlRecordStore,
    directory: SqlIdentityDirectory,
    notifier: RecordingNotifier,
    principal: UserProfileResult,
) -> None:
    admin_code = await workflow.issue_invitation(principal.id, principal.tenant_id, "admin")
    admin = await workflow.redeem_invitation(admin_code.code, "adm@school.test", "Adm", PASSWORD)
    other_code = await workflow.issue_invitation(principal.id, principal.tenant_id, "admin")
    other_admin = await workflow.redeem_invitation(other_code.code, "adm2@school.test", "Adm2", PASSWORD)

    with pytest.raises(UnauthorizedException):
        await workflow.reset_member_password(admin.profile_id, principal.id)
    with pytest.raises(UnauthorizedException):
        await workflow.deactivate_member(admin.profile_id, principal.id)
    with pytest.raises(UnauthorizedException):
        await workflow.reset_member_password(admin.profile_id, other_admin.profile_id)

    assert notifier.of("password_reset") == []
    assert (await store.profiles.get_by_id(principal.id)).is_active is True

    # Admins still manage lower-ranked members.
    teacher_id = await _teacher(workflow, principal)
    assert await workflow.reset_member_password(admin.profile_id, teacher_id) is True


async def test_deactivate_member(
    workflow: WorkflowApi, store: SqlRecordStore, principal: UserProfileResult
) -> None:
    teacher_id = await _teacher(workflow, principal)

    await workflow.deactivate_member(principal.id, teacher_id)
    await workflow.deactivate_member(principal.id, teacher_id)

    profile = await store.profiles.get_by_id(teacher_id)
    assert profile is not None
    assert profile.is_active is False
    with pytest.raises(InvalidStateException):
        await workflow.reset_member_password(principal.id, teacher_id)


async def test_deactivated_member_loses_access(
    workflow: WorkflowApi, principal: UserProfileResult
) -> None:
    admin_code = await workflow.issue_invitation(principal.id, principal.tenant_id, "admin")
    admin = await workflow.redeem_invitation(admin_code.code, "adm@school.test", "Adm", PASSWORD)
    await workflow.deactivate_member(principal.id, admin.profile_id)

    with pytest.raises(UnauthorizedException):
        await workflow.issue_invitation(admin.profile_id, principal.tenant_id, "parent")


async def test_member_admin_is_scoped_to_own_tenant(
    workflow: WorkflowApi,
    store: SqlRecordStore,
    superadmin: UserProfileResult,
    principal: UserProfileResult,
) -> None:
    teacher_id = await _teacher(workflow, principal)
    other_request = await workflow.request_onboarding("Little Stars", "Lee", "lee@stars.test")
    other = await workflow.approve_onboarding(superadmin.id, other_request)
    other_principal = await store.profiles.get_principal_for_tenant(other.tenant_id)

    with pytest.raises(UnauthorizedException):
        await workflow.reset_member_password(other_principal.id, teacher_id)
    with pytest.raises(UnauthorizedException):
        await workflow.deactivate_member(other_principal.id, teacher_id)
    with pytest.raises(UnauthorizedException):
        await workflow.reset_member_password(teacher_id, principal.id)
    with pytest.raises(UnauthorizedException):
        await workflow.deactivate_member(principal.id, superadmin.id)

    # Superadmins may act on any tenant.
    await workflow.deactivate_member(superadmin.id, teacher_id)


async def test_callers_cannot_deactivate_themselves(
    workflow: WorkflowApi, principal: UserProfileResult
) -> None:
    with pytest.raises(UnauthorizedException):
        await workflow.deactivate_member(principal.id, principal.id)


async def test_unknown_member_is_not_found(
    workflow: WorkflowApi, principal: UserProfileResult
) -> None:
    with pytest.raises(ResourceNotFoundException):
        await workflow.reset_member_password(principal.id, "no-such-profile")
