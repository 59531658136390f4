"""Invitation code repository. Returns domain entities."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from preschool.domain.entities import InvitationCodeEntity
from preschool.domain.enums import UserRole
from preschool.infrastructure.persistence.models.invitation_code import InvitationCode
from preschool.infrastructure.persistence.repositories.base import BaseRepository
from preschool.shared.utils import ensure_utc


class InvitationCodeRepository(BaseRepository[InvitationCode, InvitationCodeEntity]):
    resource_type = "invitation_code"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(session_factory, InvitationCode)

    def _to_result(self, obj: InvitationCode) -> InvitationCodeEntity:
        return InvitationCodeEntity(
            code=obj.code,
            tenant_id=obj.tenant_id,
            role=UserRole(obj.role),
            invited_by=obj.invited_by,
            expires_at=ensure_utc(obj.expires_at),
            created_at=ensure_utc(obj.created_at),
            target_email=obj.target_email,
            used_at=ensure_utc(obj.used_at),
            used_by=obj.used_by,
        )

    async def create_code(
        self,
        code: str,
        tenant_id: str,
        role: UserRole,
        invited_by: str,
        expires_at: datetime,
        target_email: str | None = None,
    ) -> InvitationCodeEntity:
        return await self.create(
            InvitationCode(
                code=code,
                tenant_id=tenant_id,
                role=role.value,
                invited_by=invited_by,
                expires_at=expires_at,
                target_email=target_email,
            )
        )

    async def get_by_code(self, code: str) -> InvitationCodeEntity | None:
        return await self.get_by_id(code)

    async def list_by_tenant(
        self, tenant_id: str, skip: int = 0, limit: int = 100
    ) -> list[InvitationCodeEntity]:
        stmt = (
            select(InvitationCode)
            .where(InvitationCode.tenant_id == tenant_id)
            .order_by(InvitationCode.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        async with self.transaction() as session:
            result = await session.execute(stmt)
            return [self._to_result(obj) for obj in result.scalars().all()]

    async def mark_used(self, code: str, used_by: str, used_at: datetime) -> bool:
        """The redemption linearization point: applies only while used_at IS NULL."""
        return await self.conditional_update(
            code, {"used_at": used_at, "used_by": used_by}, when_null="used_at"
        )

    async def revoke(self, code: str, now: datetime) -> bool:
        """Soft revocation: expire now, unless already used."""
        return await self.conditional_update(code, {"expires_at": now}, when_null="used_at")
