"""Invitation lifecycle: issue, redeem, revoke, preview, list and resend codes.

Redemption provisions in three steps: find-or-create the directory account,
create-or-update the profile, then mark the code used with a conditional
update (used_at IS NULL). That conditional update is the only
linearization point: of N concurrent redemptions exactly one applies it and
the others compensate their grants and get AlreadyUsedException.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from functools import partial

from preschool.application.dtos.identity import IdentityRef
from preschool.application.dtos.invitation import InvitationPreview, RedemptionResult
from preschool.application.dtos.profile import UserProfileResult
from preschool.application.interfaces.repositories import IRecordStore
from preschool.application.interfaces.services import IIdentityDirectory, INotifier
from preschool.application.services.credentials import generate_invitation_code
from preschool.application.services.external_calls import (
    ExternalCallPolicy,
    notify_best_effort,
)
from preschool.domain.entities import InvitationCodeEntity
from preschool.domain.enums import INVITABLE_ROLES, InvitationState, UserRole
from preschool.domain.exceptions import (
    AlreadyUsedException,
    ConflictException,
    EmailTakenException,
    InvalidCodeException,
    InvalidStateException,
    PartialFailureException,
    ProviderUnavailableException,
    ResourceNotFoundException,
    UnauthorizedException,
    ValidationException,
)
from preschool.domain.value_objects import normalize_email, normalize_invitation_code
from preschool.shared.telemetry.logging import get_logger, mask_code
from preschool.shared.telemetry.tracing import add_span_attributes, traced
from preschool.shared.utils import expires_after, utc_now

logger = get_logger(__name__)

RECORD_STORE = "record_store"
IDENTITY_DIRECTORY = "identity_directory"

CODE_GENERATION_ATTEMPTS = 3
DEFAULT_INVITATION_TTL = timedelta(days=7)


class InvitationService:
    """Issues and redeems single-use invitation codes granting {role, tenant}."""

    def __init__(
        self,
        store: IRecordStore,
        directory: IIdentityDirectory,
        notifier: INotifier,
        policy: ExternalCallPolicy | None = None,
        default_ttl: timedelta = DEFAULT_INVITATION_TTL,
        require_identity_proof: bool = True,
    ) -> None:
        self.store = store
        self.directory = directory
        self.notifier = notifier
        self.policy = policy or ExternalCallPolicy()
        self.default_ttl = default_ttl
        self.require_identity_proof = require_identity_proof

    @traced("invitation.issue")
    async def issue(
        self,
        tenant_id: str,
        role: UserRole,
        issuer_profile_id: str,
        target_email: str | None = None,
        ttl: timedelta | None = None,
    ) -> InvitationCodeEntity:
        """Create a code for tenant_id granting role; email it to target_email when set."""
        if role not in INVITABLE_ROLES:
            raise ValidationException(f"Role {role.value!r} cannot be granted by invitation", field="role")
        ttl = ttl or self.default_ttl
        if ttl <= timedelta(0):
            raise ValidationException("Invitation lifetime must be positive", field="ttl_hours")
        if target_email is not None:
            try:
                target_email = normalize_email(target_email)
            except ValueError as e:
                raise ValidationException(str(e), field="target_email") from e

        tenant = await self.policy.run(
            partial(self.store.tenants.get_by_id, tenant_id), RECORD_STORE, "get_tenant"
        )
        if tenant is None:
            raise ResourceNotFoundException("tenant", tenant_id)

        expires_at = expires_after(ttl)
        invitation = await self._insert_code(
            tenant_id, role, issuer_profile_id, expires_at, target_email
        )
        logger.info(
            "Invitation %s issued for tenant %s role %s by %s",
            mask_code(invitation.code),
            tenant_id,
            role.value,
            issuer_profile_id,
        )

        if target_email:
            await self._send_invitation(invitation, tenant.name)
        return invitation

    @traced("invitation.redeem")
    async def redeem(
        self,
        code: str,
        email: str,
        name: str | None,
        password: str,
    ) -> RedemptionResult:
        """Redeem code for email, granting its role and tenant.

        Validation fails fast in order: InvalidCode, AlreadyUsed, Expired,
        EmailMismatch. Losing a concurrent race raises AlreadyUsedException
        after this invocation's grant has been undone.
        """
        try:
            code = normalize_invitation_code(code)
        except ValueError:
            raise InvalidCodeException() from None
        try:
            email = normalize_email(email)
        except ValueError as e:
            raise ValidationException(str(e), field="email") from e

        invitation = await self._get_code(code)
        invitation.ensure_redeemable(email, utc_now())
        add_span_attributes(tenant_id=invitation.tenant_id, role=invitation.role.value)

        identity, created_identity = await self._resolve_identity(code, email, password)

        try:
            profile, previous = await self._grant(identity, invitation, name)
        except BaseException:
            if created_identity:
                logger.error(
                    "Invitation %s: profile write failed, deleting new directory account",
                    mask_code(code),
                )
                await asyncio.shield(self._delete_identity(code, identity.id))
            raise

        try:
            applied = await self.policy.run_once(
                partial(self.store.invitations.mark_used, code, email, utc_now()),
                RECORD_STORE,
                "mark_used",
            )
        except ProviderUnavailableException:
            logger.warning(
                "Invitation %s: mark-used outcome unknown, re-reading", mask_code(code)
            )
            return await asyncio.shield(
                self._settle_unknown_mark(
                    invitation, email, identity, created_identity, profile, previous
                )
            )

        if not applied:
            await asyncio.shield(
                self._lost_race(code, email, identity, created_identity, profile, previous)
            )
            raise AlreadyUsedException()

        logger.info(
            "Invitation %s redeemed: profile %s granted %s in tenant %s",
            mask_code(code),
            profile.id,
            invitation.role.value,
            invitation.tenant_id,
        )
        return RedemptionResult(
            role=invitation.role, tenant_id=invitation.tenant_id, profile_id=profile.id
        )

    @traced("invitation.revoke")
    async def revoke(self, code: str, issuer_profile_id: str) -> None:
        """Expire an issued code now. Used or already expired codes raise InvalidStateException."""
        invitation = await self.get_code(code)
        now = utc_now()
        invitation.ensure_revocable(now)
        applied = await self.policy.run_once(
            partial(self.store.invitations.revoke, invitation.code, now),
            RECORD_STORE,
            "revoke",
        )
        if not applied:
            raise InvalidStateException("Invitation code is already used", state="used")
        logger.info("Invitation %s revoked by %s", mask_code(invitation.code), issuer_profile_id)

    async def preview(self, code: str) -> InvitationPreview:
        """Public summary of a code for the join-with-code page."""
        invitation = await self.get_code(code)
        tenant = await self.policy.run(
            partial(self.store.tenants.get_by_id, invitation.tenant_id),
            RECORD_STORE,
            "get_tenant",
        )
        return InvitationPreview(
            code=invitation.code,
            role=invitation.role,
            tenant_id=invitation.tenant_id,
            tenant_name=tenant.name if tenant else "",
            expires_at=invitation.expires_at,
            state=invitation.state(),
            email_restricted=invitation.target_email is not None,
        )

    async def list_for_tenant(
        self, tenant_id: str, skip: int = 0, limit: int = 100
    ) -> list[InvitationCodeEntity]:
        return await self.policy.run(
            partial(self.store.invitations.list_by_tenant, tenant_id, skip, limit),
            RECORD_STORE,
            "list_codes",
        )

    @traced("invitation.resend")
    async def resend(self, code: str, issuer_profile_id: str) -> bool:
        """Re-send the invitation email. Only issued codes with a target email qualify."""
        invitation = await self.get_code(code)
        if invitation.state() != InvitationState.ISSUED:
            raise InvalidStateException(
                f"Invitation code is {invitation.state().value}",
                state=invitation.state().value,
            )
        if not invitation.target_email:
            raise InvalidStateException("Invitation code has no target email")
        tenant = await self.policy.run(
            partial(self.store.tenants.get_by_id, invitation.tenant_id),
            RECORD_STORE,
            "get_tenant",
        )
        logger.info("Invitation %s resend requested by %s", mask_code(invitation.code), issuer_profile_id)
        return await self._send_invitation(invitation, tenant.name if tenant else "")

    async def get_code(self, code: str) -> InvitationCodeEntity:
        """Return the code (normalized). Malformed or unknown raises InvalidCodeException."""
        try:
            code = normalize_invitation_code(code)
        except ValueError:
            raise InvalidCodeException() from None
        return await self._get_code(code)

    async def _get_code(self, code: str) -> InvitationCodeEntity:
        invitation = await self.policy.run(
            partial(self.store.invitations.get_by_code, code), RECORD_STORE, "get_code"
        )
        if invitation is None:
            raise InvalidCodeException()
        return invitation

    async def _insert_code(
        self,
        tenant_id: str,
        role: UserRole,
        issuer_profile_id: str,
        expires_at: datetime,
        target_email: str | None,
    ) -> InvitationCodeEntity:
        """Insert under a fresh random code; regenerate on the rare collision."""
        for _ in range(CODE_GENERATION_ATTEMPTS):
            code = generate_invitation_code()
            try:
                return await self.policy.run(
                    partial(
                        self.store.invitations.create_code,
                        code=code,
                        tenant_id=tenant_id,
                        role=role,
                        invited_by=issuer_profile_id,
                        expires_at=expires_at,
                        target_email=target_email,
                    ),
                    RECORD_STORE,
                    "create_code",
                )
            except ConflictException:
                existing = await self.policy.run(
                    partial(self.store.invitations.get_by_code, code),
                    RECORD_STORE,
                    "get_code",
                )
                # A timed-out insert that landed before the retry.
                if (
                    existing is not None
                    and existing.tenant_id == tenant_id
                    and existing.invited_by == issuer_profile_id
                    and existing.expires_at == expires_at
                ):
                    return existing
                logger.warning("Invitation code collision, regenerating")
        raise ConflictException("invitation_code", "Could not generate a unique invitation code")

    async def _send_invitation(self, invitation: InvitationCodeEntity, tenant_name: str) -> bool:
        return await notify_best_effort(
            self.notifier,
            self.policy,
            invitation.target_email,
            "invitation_issued",
            {
                "code": invitation.code,
                "role": invitation.role.value,
                "tenant_name": tenant_name,
                "expires_at": invitation.expires_at.isoformat(),
            },
        )

    @traced("invitation.redeem.resolve_identity")
    async def _resolve_identity(
        self, code: str, email: str, password: str
    ) -> tuple[IdentityRef, bool]:
        """Find or create the directory account. Returns (identity, created_by_us)."""
        existing = await self.policy.run(
            partial(self.directory.find_by_email, email), IDENTITY_DIRECTORY, "find_by_email"
        )
        if existing is not None:
            await self._prove_control(email, password)
            return existing, False
        try:
            created = await self.policy.run(
                partial(
                    self.directory.create_account,
                    email,
                    password,
                    True,
                    f"redeem:{code}:{email}",
                ),
                IDENTITY_DIRECTORY,
                "create_account",
            )
        except EmailTakenException:
            # Signed up concurrently between lookup and create.
            existing = await self.policy.run(
                partial(self.directory.find_by_email, email),
                IDENTITY_DIRECTORY,
                "find_by_email",
            )
            if existing is None:
                raise
            await self._prove_control(email, password)
            return existing, False
        logger.info("Invitation %s: directory account created", mask_code(code))
        return created, True

    async def _prove_control(self, email: str, password: str) -> None:
        """A pre-existing account may only be upgraded by someone who knows its password."""
        if not self.require_identity_proof:
            return
        verified = await self.policy.run(
            partial(self.directory.verify_password, email, password),
            IDENTITY_DIRECTORY,
            "verify_password",
        )
        if verified is None:
            raise UnauthorizedException(
                action="redeem_invitation",
                message="An account already exists for this email; the password does not match",
            )

    @traced("invitation.redeem.grant")
    async def _grant(
        self, identity: IdentityRef, invitation: InvitationCodeEntity, name: str | None
    ) -> tuple[UserProfileResult, UserProfileResult | None]:
        """Create or update the profile. Returns (profile, previous_state_or_None_if_created)."""
        previous = await self.policy.run(
            partial(self.store.profiles.get_by_identity_id, identity.id),
            RECORD_STORE,
            "get_profile_by_identity",
        )
        if previous is None:
            try:
                profile = await self.policy.run_once(
                    partial(
                        self.store.profiles.create_profile,
                        identity_id=identity.id,
                        email=identity.email,
                        name=name or identity.email,
                        role=invitation.role,
                        tenant_id=invitation.tenant_id,
                    ),
                    RECORD_STORE,
                    "create_profile",
                )
                return profile, None
            except ConflictException:
                previous = await self.policy.run(
                    partial(self.store.profiles.get_by_identity_id, identity.id),
                    RECORD_STORE,
                    "get_profile_by_identity",
                )
                if previous is None:
                    raise

        if previous.role == UserRole.SUPERADMIN:
            raise InvalidStateException("Superadmin accounts cannot redeem invitation codes")
        profile = await self.policy.run(
            partial(
                self.store.profiles.update_grant,
                previous.id,
                invitation.role,
                invitation.tenant_id,
                True,
                name,
            ),
            RECORD_STORE,
            "update_grant",
        )
        if profile is None:
            raise ResourceNotFoundException("user_profile", previous.id)
        return profile, previous

    @traced("invitation.redeem.settle_unknown_mark")
    async def _settle_unknown_mark(
        self,
        invitation: InvitationCodeEntity,
        email: str,
        identity: IdentityRef,
        created_identity: bool,
        profile: UserProfileResult,
        previous: UserProfileResult | None,
    ) -> RedemptionResult:
        """Resolve a mark-used write whose outcome is unknown by re-reading the code."""
        code = invitation.code
        try:
            current = await self.policy.run(
                partial(self.store.invitations.get_by_code, code),
                RECORD_STORE,
                "get_code",
            )
        except Exception as e:
            logger.error(
                "Invitation %s: cannot confirm mark-used; profile %s granted",
                mask_code(code),
                profile.id,
                exc_info=True,
            )
            raise PartialFailureException(
                "invitation_code", code, ["used_at"], profile_id=profile.id
            ) from e

        if current is not None and current.used_at is not None:
            if current.used_by == email:
                logger.info("Invitation %s: mark-used had landed", mask_code(code))
                return RedemptionResult(
                    role=invitation.role,
                    tenant_id=invitation.tenant_id,
                    profile_id=profile.id,
                )
            await self._compensate(code, identity, created_identity, profile, previous)
            raise AlreadyUsedException()

        await self._compensate(code, identity, created_identity, profile, previous)
        raise ProviderUnavailableException(RECORD_STORE, "mark_used")

    @traced("invitation.redeem.lost_race")
    async def _lost_race(
        self,
        code: str,
        email: str,
        identity: IdentityRef,
        created_identity: bool,
        profile: UserProfileResult,
        previous: UserProfileResult | None,
    ) -> None:
        """Another redemption applied mark-used first; undo this invocation's grant."""
        current = await self.policy.run(
            partial(self.store.invitations.get_by_code, code), RECORD_STORE, "get_code"
        )
        if current is not None and current.used_by == email:
            # The winner redeemed for the same email: the grant is theirs too.
            logger.info("Invitation %s: concurrent redemption by the same email", mask_code(code))
            return
        logger.info("Invitation %s: lost concurrent redemption, compensating", mask_code(code))
        await self._compensate(code, identity, created_identity, profile, previous)

    @traced("invitation.redeem.compensate")
    async def _compensate(
        self,
        code: str,
        identity: IdentityRef,
        created_identity: bool,
        profile: UserProfileResult,
        previous: UserProfileResult | None,
    ) -> None:
        """Restore or delete the profile, then delete a directory account we created."""
        try:
            if previous is None:
                await self.policy.run(
                    partial(self.store.profiles.delete, profile.id),
                    RECORD_STORE,
                    "delete_profile",
                )
            else:
                await self.policy.run(
                    partial(
                        self.store.profiles.update_grant,
                        previous.id,
                        previous.role,
                        previous.tenant_id,
                        previous.is_active,
                        previous.name,
                    ),
                    RECORD_STORE,
                    "update_grant",
                )
        except Exception:
            logger.error(
                "Invitation %s: could not undo grant on profile %s",
                mask_code(code),
                profile.id,
                exc_info=True,
            )
        if created_identity:
            await self._delete_identity(code, identity.id)

    async def _delete_identity(self, code: str, identity_id: str) -> None:
        try:
            await self.policy.run(
                partial(self.directory.delete_account, identity_id),
                IDENTITY_DIRECTORY,
                "delete_account",
            )
        except Exception:
            logger.error(
                "Invitation %s: could not delete directory account during rollback",
                mask_code(code),
                exc_info=True,
            )
