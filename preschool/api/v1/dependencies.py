"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the record store, external adapters and the
workflow API. Everything is built from infrastructure implementations here;
routes depend only on these dependencies, not on infra directly.

The caller's profile id is read from a request header set by the trusted
gateway in front of this service; authorization itself happens in the
workflow layer against the record store.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Annotated

import httpx
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from preschool.application.interfaces import IIdentityDirectory, INotifier, IRecordStore
from preschool.application.services import (
    ExternalCallPolicy,
    InvitationService,
    MemberAdminService,
    TenantApprovalService,
)
from preschool.application.use_cases import WorkflowApi
from preschool.core.config import Settings, get_settings
from preschool.infrastructure.external.email.factory import build_notifier
from preschool.infrastructure.identity.factory import build_identity_directory
from preschool.infrastructure.persistence.database import get_session_factory
from preschool.infrastructure.persistence.repositories import SqlRecordStore


def get_app_settings() -> Settings:
    return get_settings()


def get_db_session_factory() -> async_sessionmaker[AsyncSession]:
    return get_session_factory()


def get_http_client(request: Request) -> httpx.AsyncClient | None:
    """Shared outbound client created in the lifespan (None outside it)."""
    return getattr(request.app.state, "http_client", None)


def get_record_store(
    session_factory: Annotated[
        async_sessionmaker[AsyncSession], Depends(get_db_session_factory)
    ],
) -> IRecordStore:
    return SqlRecordStore(session_factory)


def get_identity_directory(
    settings: Annotated[Settings, Depends(get_app_settings)],
    session_factory: Annotated[
        async_sessionmaker[AsyncSession], Depends(get_db_session_factory)
    ],
    http_client: Annotated[httpx.AsyncClient | None, Depends(get_http_client)],
) -> IIdentityDirectory:
    return build_identity_directory(settings, session_factory, http_client)


def get_notifier(
    settings: Annotated[Settings, Depends(get_app_settings)],
    http_client: Annotated[httpx.AsyncClient | None, Depends(get_http_client)],
) -> INotifier:
    return build_notifier(settings, http_client)


def get_call_policy(
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> ExternalCallPolicy:
    return ExternalCallPolicy.from_settings(settings)


def get_tenant_approval_service(
    settings: Annotated[Settings, Depends(get_app_settings)],
    store: Annotated[IRecordStore, Depends(get_record_store)],
    directory: Annotated[IIdentityDirectory, Depends(get_identity_directory)],
    notifier: Annotated[INotifier, Depends(get_notifier)],
    policy: Annotated[ExternalCallPolicy, Depends(get_call_policy)],
) -> TenantApprovalService:
    return TenantApprovalService(
        store,
        directory,
        notifier,
        policy=policy,
        temp_password_length=settings.temp_password_length,
        subscription_plan=settings.default_subscription_plan,
    )


def get_invitation_service(
    settings: Annotated[Settings, Depends(get_app_settings)],
    store: Annotated[IRecordStore, Depends(get_record_store)],
    directory: Annotated[IIdentityDirectory, Depends(get_identity_directory)],
    notifier: Annotated[INotifier, Depends(get_notifier)],
    policy: Annotated[ExternalCallPolicy, Depends(get_call_policy)],
) -> InvitationService:
    return InvitationService(
        store,
        directory,
        notifier,
        policy=policy,
        default_ttl=timedelta(hours=settings.invitation_default_ttl_hours),
        require_identity_proof=settings.redeem_require_identity_proof,
    )


def get_member_admin_service(
    settings: Annotated[Settings, Depends(get_app_settings)],
    store: Annotated[IRecordStore, Depends(get_record_store)],
    directory: Annotated[IIdentityDirectory, Depends(get_identity_directory)],
    notifier: Annotated[INotifier, Depends(get_notifier)],
    policy: Annotated[ExternalCallPolicy, Depends(get_call_policy)],
) -> MemberAdminService:
    return MemberAdminService(
        store,
        directory,
        notifier,
        policy=policy,
        temp_password_length=settings.temp_password_length,
    )


def get_workflow_api(
    settings: Annotated[Settings, Depends(get_app_settings)],
    store: Annotated[IRecordStore, Depends(get_record_store)],
    approvals: Annotated[TenantApprovalService, Depends(get_tenant_approval_service)],
    invitations: Annotated[InvitationService, Depends(get_invitation_service)],
    members: Annotated[MemberAdminService, Depends(get_member_admin_service)],
    policy: Annotated[ExternalCallPolicy, Depends(get_call_policy)],
) -> WorkflowApi:
    return WorkflowApi(
        store,
        approvals,
        invitations,
        members,
        policy=policy,
        max_invitation_ttl=timedelta(hours=settings.invitation_max_ttl_hours),
    )


def get_caller_profile_id(
    request: Request,
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> str | None:
    """Caller profile id from the configured header; None for anonymous calls."""
    value = request.headers.get(settings.caller_header_name)
    return value.strip() if value and value.strip() else None


WorkflowApiDep = Annotated[WorkflowApi, Depends(get_workflow_api)]
CallerProfileId = Annotated[str | None, Depends(get_caller_profile_id)]
