"""User profile repository. Returns application DTOs."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from preschool.application.dtos.profile import UserProfileResult
from preschool.domain.enums import UserRole
from preschool.infrastructure.persistence.models.user_profile import UserProfile
from preschool.infrastructure.persistence.repositories.base import BaseRepository
from preschool.shared.utils import ensure_utc


class UserProfileRepository(BaseRepository[UserProfile, UserProfileResult]):
    resource_type = "user_profile"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(session_factory, UserProfile)

    def _to_result(self, obj: UserProfile) -> UserProfileResult:
        return UserProfileResult(
            id=obj.id,
            identity_id=obj.identity_id,
            email=obj.email,
            name=obj.name,
            role=UserRole(obj.role),
            tenant_id=obj.tenant_id,
            is_active=obj.is_active,
            created_at=ensure_utc(obj.created_at),
            updated_at=ensure_utc(obj.updated_at),
        )

    async def _get_one(self, *criteria: Any) -> UserProfileResult | None:
        stmt = select(UserProfile).where(*criteria).order_by(UserProfile.created_at).limit(1)
        async with self.transaction() as session:
            obj = (await session.execute(stmt)).scalar_one_or_none()
            return self._to_result(obj) if obj is not None else None

    async def get_by_identity_id(self, identity_id: str) -> UserProfileResult | None:
        return await self._get_one(UserProfile.identity_id == identity_id)

    async def get_principal_for_tenant(self, tenant_id: str) -> UserProfileResult | None:
        return await self._get_one(
            UserProfile.tenant_id == tenant_id,
            UserProfile.role == UserRole.PRINCIPAL.value,
        )

    async def create_profile(
        self,
        identity_id: str,
        email: str,
        name: str,
        role: UserRole,
        tenant_id: str | None,
    ) -> UserProfileResult:
        return await self.create(
            UserProfile(
                identity_id=identity_id,
                email=email,
                name=name,
                role=role.value,
                tenant_id=tenant_id,
                is_active=True,
            )
        )

    async def update_grant(
        self,
        profile_id: str,
        role: UserRole,
        tenant_id: str | None,
        is_active: bool,
        name: str | None = None,
    ) -> UserProfileResult | None:
        values: dict[str, Any] = {
            "role": role.value,
            "tenant_id": tenant_id,
            "is_active": is_active,
        }
        if name:
            values["name"] = name
        stmt = (
            update(UserProfile)
            .where(UserProfile.id == profile_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        async with self.transaction() as session:
            result = await session.execute(stmt)
            if result.rowcount != 1:
                return None
            obj = await session.get(UserProfile, profile_id, populate_existing=True)
            return self._to_result(obj) if obj is not None else None

    async def set_active(self, profile_id: str, is_active: bool) -> bool:
        return await self.update_fields(profile_id, {"is_active": is_active})
