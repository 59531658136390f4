"""Service interfaces (ports) for the application layer.

Protocols define contracts for the external collaborators (DIP): the
identity directory that stores credentials, and the notifier that sends
transactional email.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from preschool.application.dtos.identity import IdentityRef


class IIdentityDirectory(Protocol):
    """Protocol for the identity directory (credentials only; never consulted for role/tenant)."""

    async def find_by_email(self, email: str) -> IdentityRef | None:
        """Return the account for email (normalized), or None."""

    async def create_account(
        self,
        email: str,
        password: str,
        pre_confirmed: bool,
        request_key: str | None = None,
    ) -> IdentityRef:
        """Create an account.

        Raises EmailTakenException, WeakPasswordException or
        ProviderUnavailableException. Re-sending the same request_key returns
        the account created by an earlier attempt instead of EmailTaken.
        """

    async def delete_account(self, identity_id: str) -> None:
        """Delete an account (rollback only)."""

    async def verify_password(self, email: str, password: str) -> IdentityRef | None:
        """Return the account if password matches, else None."""

    async def set_password(self, identity_id: str, password: str) -> None:
        """Replace the account password (admin reset)."""


class INotifier(Protocol):
    """Protocol for transactional email."""

    async def send(
        self, to_email: str, template_id: str, template_data: dict[str, Any]
    ) -> None:
        """Render template_id with template_data and deliver to to_email."""
