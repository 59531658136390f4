"""Tenant approval pipeline: turns a pending onboarding request into a live school.

Steps run in strict order and each one is idempotency-checked so a retried
or resumed approval converges on the same tenant:

1. create tenant (keyed by onboarding_request_id)
2. generate temporary password
3. create directory account (request key approve:<request_id>)
4. create principal profile
   -- commit point --
5. tenant.onboarding_status = completed
6. request status = approved (guarded by reviewed_at IS NULL)
7. notify the new principal (best-effort)

Before the commit point a failure rolls back what this invocation created.
After it the pipeline shields itself from cancellation and either finishes
or reports PartialFailureException naming the fields that did not persist.
"""

from __future__ import annotations

import asyncio
from functools import partial

from preschool.application.dtos.identity import IdentityRef
from preschool.application.dtos.onboarding import ApprovalResult, OnboardingRequestCreate
from preschool.application.dtos.profile import UserProfileResult
from preschool.application.dtos.tenant import TenantResult
from preschool.application.interfaces.repositories import IRecordStore
from preschool.application.interfaces.services import IIdentityDirectory, INotifier
from preschool.application.services.credentials import (
    TEMP_PASSWORD_MIN_LENGTH,
    generate_temp_password,
)
from preschool.application.services.external_calls import (
    ExternalCallPolicy,
    notify_best_effort,
)
from preschool.domain.entities import OnboardingRequestEntity
from preschool.domain.enums import (
    OnboardingRequestStatus,
    TenantOnboardingStatus,
    UserRole,
)
from preschool.domain.exceptions import (
    ConflictException,
    InvalidStateException,
    PartialFailureException,
    ResourceNotFoundException,
)
from preschool.domain.value_objects import TenantSlug
from preschool.shared.telemetry.logging import get_logger
from preschool.shared.telemetry.tracing import add_span_attributes, traced
from preschool.shared.utils import generate_cuid, utc_now

logger = get_logger(__name__)

RECORD_STORE = "record_store"
IDENTITY_DIRECTORY = "identity_directory"

# Slug candidates tried before giving up: base, base-2, ... base-50.
MAX_SLUG_CANDIDATES = 50


class TenantApprovalService:
    """Reviews onboarding requests and provisions tenants with their principal."""

    def __init__(
        self,
        store: IRecordStore,
        directory: IIdentityDirectory,
        notifier: INotifier,
        policy: ExternalCallPolicy | None = None,
        temp_password_length: int = TEMP_PASSWORD_MIN_LENGTH,
        subscription_plan: str = "trial",
    ) -> None:
        self.store = store
        self.directory = directory
        self.notifier = notifier
        self.policy = policy or ExternalCallPolicy()
        self.temp_password_length = temp_password_length
        self.subscription_plan = subscription_plan

    @traced("onboarding.request")
    async def request_onboarding(self, data: OnboardingRequestCreate) -> str:
        """Persist a pending request from an anonymous applicant. Returns its id."""
        request = await self.policy.run_once(
            partial(self.store.requests.create_request, data),
            RECORD_STORE,
            "create_request",
        )
        logger.info("Onboarding request %s received for %r", request.id, request.tenant_name)
        await notify_best_effort(
            self.notifier,
            self.policy,
            request.admin_email,
            "onboarding_received",
            {"admin_name": request.admin_name, "tenant_name": request.tenant_name},
        )
        return request.id

    async def list_requests(
        self,
        status: OnboardingRequestStatus | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[OnboardingRequestEntity]:
        return await self.policy.run(
            partial(self.store.requests.list_requests, status, skip, limit),
            RECORD_STORE,
            "list_requests",
        )

    @traced("onboarding.approve")
    async def approve(self, request_id: str, reviewer_profile_id: str) -> ApprovalResult:
        """Approve a pending request and provision its tenant and principal.

        Approving an already-approved request returns the recorded tenant with
        temp_password=None and changes nothing. A rejected request raises
        InvalidStateException.
        """
        add_span_attributes(request_id=request_id, reviewer_profile_id=reviewer_profile_id)
        request = await self._get_request(request_id)

        if request.is_approved:
            tenant_id = request.tenant_id or await self._tenant_id_for(request.id)
            logger.info("Onboarding request %s already approved (tenant %s)", request.id, tenant_id)
            return ApprovalResult(
                tenant_id=tenant_id,
                admin_email=request.admin_email,
                temp_password=None,
                already_provisioned=True,
            )
        request.ensure_reviewable()

        existing = await self.policy.run(
            partial(self.store.tenants.get_by_onboarding_request_id, request.id),
            RECORD_STORE,
            "get_tenant_by_request",
        )
        if existing is not None:
            principal = await self.policy.run(
                partial(self.store.profiles.get_principal_for_tenant, existing.id),
                RECORD_STORE,
                "get_principal",
            )
            if principal is None:
                raise InvalidStateException(
                    "Approval of this onboarding request is already in progress",
                    request_id=request.id,
                )
            logger.info(
                "Onboarding request %s: tenant %s passed the commit point earlier, resuming",
                request.id,
                existing.id,
            )
            return await asyncio.shield(
                self._finalize(request, existing.id, reviewer_profile_id, None, True)
            )

        tenant = await self._create_tenant(request)
        logger.info("Onboarding request %s: step 1 tenant %s created", request.id, tenant.id)
        add_span_attributes(tenant_id=tenant.id)

        temp_password = generate_temp_password(self.temp_password_length)

        try:
            identity = await self.policy.run(
                partial(
                    self.directory.create_account,
                    request.admin_email,
                    temp_password,
                    True,
                    f"approve:{request.id}",
                ),
                IDENTITY_DIRECTORY,
                "create_account",
            )
        except BaseException:
            logger.error(
                "Onboarding request %s: step 3 identity creation failed, rolling back tenant %s",
                request.id,
                tenant.id,
            )
            await asyncio.shield(self._rollback(request.id, tenant.id, None))
            raise
        logger.info("Onboarding request %s: step 3 directory account created", request.id)

        try:
            await self._create_principal(request, identity, tenant.id)
        except BaseException:
            logger.error(
                "Onboarding request %s: step 4 profile creation failed, rolling back",
                request.id,
            )
            await asyncio.shield(self._rollback(request.id, tenant.id, identity.id))
            raise
        logger.info("Onboarding request %s: step 4 principal profile created", request.id)

        return await asyncio.shield(
            self._finalize(request, tenant.id, reviewer_profile_id, temp_password, False)
        )

    @traced("onboarding.reject")
    async def reject(
        self, request_id: str, reviewer_profile_id: str, reason: str | None = None
    ) -> None:
        """Move a pending request to rejected and tell the applicant."""
        request = await self._get_request(request_id)
        request.ensure_reviewable()

        in_flight = await self.policy.run(
            partial(self.store.tenants.get_by_onboarding_request_id, request.id),
            RECORD_STORE,
            "get_tenant_by_request",
        )
        if in_flight is not None:
            raise InvalidStateException(
                "Approval of this onboarding request is already in progress",
                request_id=request.id,
            )

        applied = await self.policy.run(
            partial(
                self.store.requests.mark_reviewed,
                request.id,
                OnboardingRequestStatus.REJECTED,
                reviewer_profile_id,
                utc_now(),
                rejection_reason=reason,
            ),
            RECORD_STORE,
            "mark_reviewed",
        )
        if not applied:
            current = await self._get_request(request.id)
            # A timed-out write that landed before the retry reads back as ours.
            if not (
                current.status == OnboardingRequestStatus.REJECTED
                and current.reviewed_by == reviewer_profile_id
            ):
                raise InvalidStateException(
                    f"Onboarding request is already {current.status.value}",
                    request_id=request.id,
                    status=current.status.value,
                )
        logger.info("Onboarding request %s rejected by %s", request.id, reviewer_profile_id)

        await notify_best_effort(
            self.notifier,
            self.policy,
            request.admin_email,
            "onboarding_rejected",
            {
                "admin_name": request.admin_name,
                "tenant_name": request.tenant_name,
                "reason": reason,
            },
        )

    async def _get_request(self, request_id: str) -> OnboardingRequestEntity:
        request = await self.policy.run(
            partial(self.store.requests.get_by_id, request_id),
            RECORD_STORE,
            "get_request",
        )
        if request is None:
            raise ResourceNotFoundException("onboarding_request", request_id)
        return request

    async def _tenant_id_for(self, request_id: str) -> str:
        tenant = await self.policy.run(
            partial(self.store.tenants.get_by_onboarding_request_id, request_id),
            RECORD_STORE,
            "get_tenant_by_request",
        )
        if tenant is None:
            raise InvalidStateException(
                "Approved onboarding request has no tenant", request_id=request_id
            )
        return tenant.id

    @traced("onboarding.approve.create_tenant")
    async def _create_tenant(self, request: OnboardingRequestEntity) -> TenantResult:
        """Step 1: insert the tenant under a fresh id, trying slug suffixes on collision.

        A unique conflict is resolved by looking the tenant up by request id:
        our own id means a timed-out insert landed; another id means a
        concurrent approval won; nothing means the slug is taken.
        """
        tenant_id = generate_cuid()
        base = TenantSlug.from_name(request.tenant_name)

        in_use = await self.policy.run(
            partial(self.store.tenants.contact_email_in_use, request.admin_email),
            RECORD_STORE,
            "contact_email_in_use",
        )
        if in_use:
            logger.warning(
                "Onboarding request %s: contact email already used by another active tenant",
                request.id,
            )

        for n in range(1, MAX_SLUG_CANDIDATES + 1):
            slug = base if n == 1 else base.with_suffix(n)
            try:
                return await self.policy.run(
                    partial(
                        self.store.tenants.create_tenant,
                        tenant_id=tenant_id,
                        name=request.tenant_name,
                        slug=slug.value,
                        contact_email=request.admin_email,
                        subscription_plan=self.subscription_plan,
                        onboarding_request_id=request.id,
                    ),
                    RECORD_STORE,
                    "create_tenant",
                )
            except ConflictException:
                existing = await self.policy.run(
                    partial(self.store.tenants.get_by_onboarding_request_id, request.id),
                    RECORD_STORE,
                    "get_tenant_by_request",
                )
                if existing is not None:
                    if existing.id == tenant_id:
                        return existing
                    raise InvalidStateException(
                        "Approval of this onboarding request is already in progress",
                        request_id=request.id,
                    ) from None
                logger.info("Slug %r taken, trying next suffix", slug.value)
        raise ConflictException("tenant", "Could not derive a unique tenant slug")

    @traced("onboarding.approve.create_principal")
    async def _create_principal(
        self, request: OnboardingRequestEntity, identity: IdentityRef, tenant_id: str
    ) -> UserProfileResult:
        """Step 4: principal profile. A conflict on identity_id is our own earlier write."""
        try:
            return await self.policy.run(
                partial(
                    self.store.profiles.create_profile,
                    identity_id=identity.id,
                    email=identity.email,
                    name=request.admin_name,
                    role=UserRole.PRINCIPAL,
                    tenant_id=tenant_id,
                ),
                RECORD_STORE,
                "create_profile",
            )
        except ConflictException:
            existing = await self.policy.run(
                partial(self.store.profiles.get_by_identity_id, identity.id),
                RECORD_STORE,
                "get_profile_by_identity",
            )
            if (
                existing is not None
                and existing.role == UserRole.PRINCIPAL
                and existing.tenant_id == tenant_id
            ):
                return existing
            raise

    @traced("onboarding.approve.rollback")
    async def _rollback(
        self, request_id: str, tenant_id: str, identity_id: str | None
    ) -> None:
        """Undo steps 1 and 3 (identity first, then tenant). Failures are logged only."""
        if identity_id is not None:
            try:
                await self.policy.run(
                    partial(self.directory.delete_account, identity_id),
                    IDENTITY_DIRECTORY,
                    "delete_account",
                )
            except Exception:
                logger.error(
                    "Onboarding request %s: rollback could not delete directory account",
                    request_id,
                    exc_info=True,
                )
        try:
            await self.policy.run(
                partial(self.store.tenants.delete, tenant_id),
                RECORD_STORE,
                "delete_tenant",
            )
        except Exception:
            logger.error(
                "Onboarding request %s: rollback could not delete tenant %s",
                request_id,
                tenant_id,
                exc_info=True,
            )
        else:
            logger.info("Onboarding request %s: rolled back tenant %s", request_id, tenant_id)

    @traced("onboarding.approve.finalize")
    async def _finalize(
        self,
        request: OnboardingRequestEntity,
        tenant_id: str,
        reviewer_profile_id: str,
        temp_password: str | None,
        already_provisioned: bool,
    ) -> ApprovalResult:
        """Steps 5-7, run after the commit point."""
        unpersisted: list[str] = []
        extra: dict[str, str] = {}

        try:
            updated = await self.policy.run(
                partial(
                    self.store.tenants.set_onboarding_status,
                    tenant_id,
                    TenantOnboardingStatus.COMPLETED,
                ),
                RECORD_STORE,
                "set_onboarding_status",
            )
            if not updated:
                unpersisted.append("tenant.onboarding_status")
        except Exception:
            logger.error(
                "Onboarding request %s: step 5 failed for tenant %s",
                request.id,
                tenant_id,
                exc_info=True,
            )
            unpersisted.append("tenant.onboarding_status")

        try:
            applied = await self.policy.run(
                partial(
                    self.store.requests.mark_reviewed,
                    request.id,
                    OnboardingRequestStatus.APPROVED,
                    reviewer_profile_id,
                    utc_now(),
                    tenant_id=tenant_id,
                ),
                RECORD_STORE,
                "mark_reviewed",
            )
            if not applied:
                current = await self._get_request(request.id)
                if not (current.is_approved and current.tenant_id == tenant_id):
                    logger.error(
                        "Onboarding request %s: reviewed concurrently as %s",
                        request.id,
                        current.status.value,
                    )
                    unpersisted.append("onboarding_request.status")
                    extra["current_status"] = current.status.value
        except Exception:
            logger.error(
                "Onboarding request %s: step 6 failed", request.id, exc_info=True
            )
            unpersisted.append("onboarding_request.status")

        await notify_best_effort(
            self.notifier,
            self.policy,
            request.admin_email,
            "onboarding_approved",
            {
                "admin_name": request.admin_name,
                "tenant_name": request.tenant_name,
                "login_email": request.admin_email,
                "temp_password": temp_password,
            },
        )

        if unpersisted:
            logger.error(
                "Onboarding request %s: partial failure, unpersisted %s (tenant %s)",
                request.id,
                unpersisted,
                tenant_id,
            )
            raise PartialFailureException(
                "onboarding_request",
                request.id,
                unpersisted,
                tenant_id=tenant_id,
                **extra,
            )

        logger.info("Onboarding request %s approved, tenant %s live", request.id, tenant_id)
        return ApprovalResult(
            tenant_id=tenant_id,
            admin_email=request.admin_email,
            temp_password=temp_password,
            already_provisioned=already_provisioned,
        )
