"""Integration tests for the SQL record store and identity directory."""

import asyncio
from datetime import timedelta

import pytest

from preschool.application.dtos import OnboardingRequestCreate
from preschool.domain.enums import OnboardingRequestStatus, TenantOnboardingStatus, UserRole
from preschool.domain.exceptions import (
    ConflictException,
    EmailTakenException,
    IdentityProviderException,
    WeakPasswordException,
)
from preschool.infrastructure.identity.sql_directory import SqlIdentityDirectory
from preschool.infrastructure.persistence.repositories import SqlRecordStore
from preschool.shared.utils import utc_now


async def _tenant(store: SqlRecordStore, tenant_id: str = "tenant-1", slug: str = "sunshine-prep"):
    return await store.tenants.create_tenant(
        tenant_id=tenant_id,
        name="Sunshine Prep",
        slug=slug,
        contact_email="ada@sunshine.test",
        subscription_plan="trial",
        onboarding_request_id=f"req-{tenant_id}",
    )


async def test_tenant_slug_and_request_id_are_unique(store: SqlRecordStore) -> None:
    tenant = await _tenant(store)
    assert tenant.onboarding_status == TenantOnboardingStatus.PENDING
    assert tenant.created_at.tzinfo is not None

    with pytest.raises(ConflictException):
        await _tenant(store, tenant_id="tenant-2")
    assert (await store.tenants.get_by_onboarding_request_id("req-tenant-1")).id == "tenant-1"
    assert await store.tenants.contact_email_in_use("ada@sunshine.test")
    assert not await store.tenants.contact_email_in_use("nobody@sunshine.test")


async def test_mark_reviewed_applies_once(store: SqlRecordStore) -> None:
    request = await store.requests.create_request(
        OnboardingRequestCreate("Sunshine Prep", "Ada Obi", "ada@sunshine.test")
    )

    results = await asyncio.gather(
        *(
            store.requests.mark_reviewed(
                request.id, OnboardingRequestStatus.REJECTED, f"reviewer-{i}", utc_now()
            )
            for i in range(5)
        )
    )

    assert results.count(True) == 1
    stored = await store.requests.get_by_id(request.id)
    assert stored.status == OnboardingRequestStatus.REJECTED
    assert stored.reviewed_by == f"reviewer-{results.index(True)}"


async def test_mark_used_applies_once(store: SqlRecordStore) -> None:
    await _tenant(store)
    await store.invitations.create_code(
        code="ABCDEFGH2345",
        tenant_id="tenant-1",
        role=UserRole.PARENT,
        invited_by="principal-1",
        expires_at=utc_now() + timedelta(days=1),
    )

    first = await store.invitations.mark_used("ABCDEFGH2345", "a@x.test", utc_now())
    second = await store.invitations.mark_used("ABCDEFGH2345", "b@x.test", utc_now())
    revoked = await store.invitations.revoke("ABCDEFGH2345", utc_now())

    assert (first, second, revoked) == (True, False, False)
    assert (await store.invitations.get_by_code("ABCDEFGH2345")).used_by == "a@x.test"


async def test_profile_update_grant_and_set_active(store: SqlRecordStore) -> None:
    await _tenant(store)
    profile = await store.profiles.create_profile(
        identity_id="uid-1", email="p@x.test", name="Pat", role=UserRole.PARENT, tenant_id="tenant-1"
    )
    with pytest.raises(ConflictException):
        await store.profiles.create_profile(
            identity_id="uid-1", email="p@x.test", name="Pat", role=UserRole.PARENT, tenant_id="tenant-1"
        )

    updated = await store.profiles.update_grant(profile.id, UserRole.ADMIN, "tenant-1", True)
    assert updated.role == UserRole.ADMIN
    assert updated.name == "Pat"
    assert await store.profiles.update_grant("missing", UserRole.ADMIN, "tenant-1", True) is None

    assert await store.profiles.set_active(profile.id, False)
    assert (await store.profiles.get_by_id(profile.id)).is_active is False


async def test_tenant_member_profile_requires_tenant(store: SqlRecordStore) -> None:
    with pytest.raises(ConflictException):
        await store.profiles.create_profile(
            identity_id="uid-9", email="t@x.test", name="T", role=UserRole.TEACHER, tenant_id=None
        )


async def test_identity_directory_create_find_verify(directory: SqlIdentityDirectory) -> None:
    created = await directory.create_account("Ada@Sunshine.test", "Password123!", True)

    assert created.email == "ada@sunshine.test"
    assert (await directory.find_by_email("ADA@sunshine.test")).id == created.id
    assert (await directory.verify_password("ada@sunshine.test", "Password123!")).id == created.id
    assert await directory.verify_password("ada@sunshine.test", "nope") is None
    assert await directory.verify_password("ghost@sunshine.test", "Password123!") is None

    with pytest.raises(EmailTakenException):
        await directory.create_account("ada@sunshine.test", "Password123!", True)
    with pytest.raises(WeakPasswordException):
        await directory.create_account("bo@sunshine.test", "short", True)


async def test_identity_directory_request_key_replay(directory: SqlIdentityDirectory) -> None:
    first = await directory.create_account("ada@sunshine.test", "Password123!", True, "approve:req-1")
    again = await directory.create_account("ada@sunshine.test", "Other!Pass99", True, "approve:req-1")

    assert again == first
    assert await directory.verify_password("ada@sunshine.test", "Password123!") is not None


async def test_identity_directory_delete_and_set_password(directory: SqlIdentityDirectory) -> None:
    created = await directory.create_account("ada@sunshine.test", "Password123!", True)

    await directory.set_password(created.id, "Brand!New123")
    assert await directory.verify_password("ada@sunshine.test", "Brand!New123") is not None

    await directory.delete_account(created.id)
    assert await directory.find_by_email("ada@sunshine.test") is None
    with pytest.raises(IdentityProviderException):
        await directory.set_password(created.id, "Brand!New123")
