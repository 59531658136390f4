"""Tenant repository. Returns application DTOs."""

from __future__ import annotations

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from preschool.application.dtos.tenant import TenantResult
from preschool.domain.enums import TenantOnboardingStatus
from preschool.infrastructure.persistence.models.tenant import Tenant
from preschool.infrastructure.persistence.repositories.base import BaseRepository
from preschool.shared.utils import ensure_utc


class TenantRepository(BaseRepository[Tenant, TenantResult]):
    resource_type = "tenant"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(session_factory, Tenant)

    def _to_result(self, obj: Tenant) -> TenantResult:
        return TenantResult(
            id=obj.id,
            name=obj.name,
            slug=obj.slug,
            contact_email=obj.contact_email,
            subscription_plan=obj.subscription_plan,
            subscription_status=obj.subscription_status,
            onboarding_status=TenantOnboardingStatus(obj.onboarding_status),
            onboarding_request_id=obj.onboarding_request_id,
            created_at=ensure_utc(obj.created_at),
        )

    async def create_tenant(
        self,
        tenant_id: str,
        name: str,
        slug: str,
        contact_email: str,
        subscription_plan: str,
        onboarding_request_id: str,
    ) -> TenantResult:
        return await self.create(
            Tenant(
                id=tenant_id,
                name=name,
                slug=slug,
                contact_email=contact_email,
                subscription_plan=subscription_plan,
                subscription_status="active",
                onboarding_status=TenantOnboardingStatus.PENDING.value,
                onboarding_request_id=onboarding_request_id,
            )
        )

    async def get_by_onboarding_request_id(self, request_id: str) -> TenantResult | None:
        async with self.transaction() as session:
            result = await session.execute(
                select(Tenant).where(Tenant.onboarding_request_id == request_id)
            )
            obj = result.scalar_one_or_none()
            return self._to_result(obj) if obj is not None else None

    async def contact_email_in_use(self, email: str) -> bool:
        stmt = select(
            exists().where(
                Tenant.contact_email == email, Tenant.subscription_status == "active"
            )
        )
        async with self.transaction() as session:
            return bool(await session.scalar(stmt))

    async def set_onboarding_status(
        self, tenant_id: str, status: TenantOnboardingStatus
    ) -> bool:
        return await self.update_fields(tenant_id, {"onboarding_status": status.value})
