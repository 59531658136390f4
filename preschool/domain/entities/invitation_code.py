"""Invitation code domain entity.

A single-use, time-bounded grant of {role, tenant}. State is derived from
used_at and expires_at: issued → used (redeemed) or issued → expired
(revoked or timed out). used and expired are terminal.
"""

from dataclasses import dataclass
from datetime import datetime

from preschool.domain.enums import InvitationState, UserRole
from preschool.domain.exceptions import (
    AlreadyUsedException,
    EmailMismatchException,
    ExpiredException,
    InvalidStateException,
)
from preschool.domain.value_objects import emails_match
from preschool.shared.utils import is_past, utc_now


@dataclass
class InvitationCodeEntity:
    """Domain entity for an invitation code."""

    code: str
    tenant_id: str
    role: UserRole
    invited_by: str
    expires_at: datetime
    created_at: datetime
    target_email: str | None = None
    used_at: datetime | None = None
    used_by: str | None = None

    def state(self, now: datetime | None = None) -> InvitationState:
        """Return the derived lifecycle state. used wins over expired."""
        if self.used_at is not None:
            return InvitationState.USED
        if is_past(self.expires_at, now):
            return InvitationState.EXPIRED
        return InvitationState.ISSUED

    def ensure_redeemable(self, email: str, now: datetime | None = None) -> None:
        """Validate a redemption attempt, failing fast in a fixed order.

        Order: already used, expired, target email mismatch. Existence is
        checked by the caller (InvalidCode) before the entity exists.
        """
        now = now or utc_now()
        if self.used_at is not None:
            raise AlreadyUsedException()
        if is_past(self.expires_at, now):
            raise ExpiredException()
        if self.target_email and not emails_match(self.target_email, email):
            raise EmailMismatchException()

    def ensure_revocable(self, now: datetime | None = None) -> None:
        """Only issued codes can be revoked."""
        current = self.state(now)
        if current != InvitationState.ISSUED:
            raise InvalidStateException(
                f"Invitation code is already {current.value}", state=current.value
            )
