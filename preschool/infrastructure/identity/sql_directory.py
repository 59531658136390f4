"""Self-hosted identity directory backed by the identity_account table.

Stores bcrypt hashes only. Used for local development and tests, and for
deployments that do not run a managed auth provider.
"""

from __future__ import annotations

import asyncio

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from preschool.application.dtos.identity import IdentityRef
from preschool.domain.exceptions import (
    ConflictException,
    EmailTakenException,
    IdentityProviderException,
    ValidationException,
    WeakPasswordException,
)
from preschool.domain.value_objects import normalize_email
from preschool.infrastructure.persistence.models.identity_account import IdentityAccount
from preschool.infrastructure.persistence.repositories.base import BaseRepository
from preschool.infrastructure.security.password import PasswordHasher
from preschool.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class IdentityAccountRepository(BaseRepository[IdentityAccount, IdentityRef]):
    resource_type = "identity_account"
    provider = "identity_directory"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(session_factory, IdentityAccount)

    def _to_result(self, obj: IdentityAccount) -> IdentityRef:
        return IdentityRef(id=obj.id, email=obj.email)

    async def get_account(self, **criteria: str) -> IdentityAccount | None:
        stmt = select(IdentityAccount).filter_by(**criteria)
        async with self.transaction() as session:
            return (await session.execute(stmt)).scalar_one_or_none()

    async def set_hash(self, identity_id: str, hashed_password: str) -> bool:
        stmt = (
            update(IdentityAccount)
            .where(IdentityAccount.id == identity_id)
            .values(hashed_password=hashed_password)
            .execution_options(synchronize_session=False)
        )
        async with self.transaction() as session:
            return (await session.execute(stmt)).rowcount == 1


class SqlIdentityDirectory:
    """Identity directory over SQL (implements IIdentityDirectory)."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        hasher: PasswordHasher | None = None,
        min_password_length: int = 8,
    ) -> None:
        self.accounts = IdentityAccountRepository(session_factory)
        self.hasher = hasher or PasswordHasher()
        self.min_password_length = min_password_length

    @staticmethod
    def _email(value: str) -> str:
        try:
            return normalize_email(value)
        except ValueError as e:
            raise ValidationException(str(e), field="email") from e

    async def find_by_email(self, email: str) -> IdentityRef | None:
        account = await self.accounts.get_account(email=self._email(email))
        return IdentityRef(id=account.id, email=account.email) if account else None

    async def create_account(
        self,
        email: str,
        password: str,
        pre_confirmed: bool,
        request_key: str | None = None,
    ) -> IdentityRef:
        email = self._email(email)
        if len(password or "") < self.min_password_length:
            raise WeakPasswordException(self.min_password_length)

        if request_key:
            replay = await self._replayed(request_key, email)
            if replay is not None:
                return replay

        hashed = await asyncio.to_thread(self.hasher.hash, password)
        try:
            return await self.accounts.create(
                IdentityAccount(
                    email=email,
                    hashed_password=hashed,
                    email_confirmed=pre_confirmed,
                    request_key=request_key,
                )
            )
        except ConflictException:
            if request_key:
                replay = await self._replayed(request_key, email)
                if replay is not None:
                    return replay
            raise EmailTakenException() from None

    async def _replayed(self, request_key: str, email: str) -> IdentityRef | None:
        """Return the account an earlier call with request_key created, if any."""
        account = await self.accounts.get_account(request_key=request_key)
        if account is None or account.email != email:
            return None
        logger.info("Identity create replayed for an existing request key")
        return IdentityRef(id=account.id, email=account.email)

    async def delete_account(self, identity_id: str) -> None:
        await self.accounts.delete(identity_id)

    async def verify_password(self, email: str, password: str) -> IdentityRef | None:
        account = await self.accounts.get_account(email=self._email(email))
        if account is None:
            await asyncio.to_thread(self._verify_dummy, password)
            return None
        if not await asyncio.to_thread(self.hasher.verify, password, account.hashed_password):
            return None
        return IdentityRef(id=account.id, email=account.email)

    def _verify_dummy(self, password: str) -> None:
        self.hasher.verify(password, self.hasher.dummy_hash())

    async def set_password(self, identity_id: str, password: str) -> None:
        if len(password or "") < self.min_password_length:
            raise WeakPasswordException(self.min_password_length)
        hashed = await asyncio.to_thread(self.hasher.hash, password)
        if not await self.accounts.set_hash(identity_id, hashed):
            raise IdentityProviderException("set_password")
