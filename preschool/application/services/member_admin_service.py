"""Member administration: password reset and deactivation of tenant members."""

from __future__ import annotations

from functools import partial

from preschool.application.dtos.profile import UserProfileResult
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
from preschool.domain.exceptions import InvalidStateException, ResourceNotFoundException
from preschool.shared.telemetry.logging import get_logger
from preschool.shared.telemetry.tracing import add_span_attributes, traced

logger = get_logger(__name__)


class MemberAdminService:
    """Account maintenance on behalf of tenant administrators. Authorization is the caller's job."""

    def __init__(
        self,
        store: IRecordStore,
        directory: IIdentityDirectory,
        notifier: INotifier,
        policy: ExternalCallPolicy | None = None,
        temp_password_length: int = TEMP_PASSWORD_MIN_LENGTH,
    ) -> None:
        self.store = store
        self.directory = directory
        self.notifier = notifier
        self.policy = policy or ExternalCallPolicy()
        self.temp_password_length = temp_password_length

    async def get_profile(self, profile_id: str) -> UserProfileResult:
        profile = await self.policy.run(
            partial(self.store.profiles.get_by_id, profile_id),
            "record_store",
            "get_profile",
        )
        if profile is None:
            raise ResourceNotFoundException("user_profile", profile_id)
        return profile

    @traced("member.reset_password")
    async def reset_password(self, target_profile_id: str, caller_profile_id: str) -> bool:
        """Set a new temporary password and email it to the member.

        The password is only ever delivered to the member's own address; the
        return value says whether the notifier accepted the message.
        """
        target = await self.get_profile(target_profile_id)
        add_span_attributes(profile_id=target.id, tenant_id=target.tenant_id or "")
        if not target.is_active:
            raise InvalidStateException("Member is deactivated", profile_id=target.id)

        temp_password = generate_temp_password(self.temp_password_length)
        await self.policy.run(
            partial(self.directory.set_password, target.identity_id, temp_password),
            "identity_directory",
            "set_password",
        )
        logger.info("Password reset for profile %s by %s", target.id, caller_profile_id)

        sent = await notify_best_effort(
            self.notifier,
            self.policy,
            target.email,
            "password_reset",
            {"name": target.name, "temp_password": temp_password},
        )
        if not sent:
            logger.warning("Password reset email for profile %s was not delivered", target.id)
        return sent

    @traced("member.deactivate")
    async def deactivate(self, target_profile_id: str, caller_profile_id: str) -> None:
        """Mark the member inactive. Profiles are never deleted."""
        target = await self.get_profile(target_profile_id)
        add_span_attributes(profile_id=target.id, tenant_id=target.tenant_id or "")
        if not target.is_active:
            return
        updated = await self.policy.run(
            partial(self.store.profiles.set_active, target.id, False),
            "record_store",
            "set_active",
        )
        if not updated:
            raise ResourceNotFoundException("user_profile", target.id)
        logger.info("Profile %s deactivated by %s", target.id, caller_profile_id)
