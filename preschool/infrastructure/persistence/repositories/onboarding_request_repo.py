"""Onboarding request repository. Returns domain entities."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from preschool.application.dtos.onboarding import OnboardingRequestCreate
from preschool.domain.entities import OnboardingRequestEntity
from preschool.domain.enums import OnboardingRequestStatus
from preschool.infrastructure.persistence.models.onboarding_request import (
    OnboardingRequest,
)
from preschool.infrastructure.persistence.repositories.base import BaseRepository
from preschool.shared.utils import ensure_utc


class OnboardingRequestRepository(
    BaseRepository[OnboardingRequest, OnboardingRequestEntity]
):
    resource_type = "onboarding_request"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(session_factory, OnboardingRequest)

    def _to_result(self, obj: OnboardingRequest) -> OnboardingRequestEntity:
        return OnboardingRequestEntity(
            id=obj.id,
            tenant_name=obj.tenant_name,
            admin_name=obj.admin_name,
            admin_email=obj.admin_email,
            status=OnboardingRequestStatus(obj.status),
            created_at=ensure_utc(obj.created_at),
            phone=obj.phone,
            address=obj.address,
            student_count=obj.student_count,
            teacher_count=obj.teacher_count,
            message=obj.message,
            reviewed_by=obj.reviewed_by,
            reviewed_at=ensure_utc(obj.reviewed_at),
            tenant_id=obj.tenant_id,
            rejection_reason=obj.rejection_reason,
        )

    async def create_request(self, data: OnboardingRequestCreate) -> OnboardingRequestEntity:
        return await self.create(
            OnboardingRequest(
                tenant_name=data.tenant_name,
                admin_name=data.admin_name,
                admin_email=data.admin_email,
                phone=data.phone,
                address=data.address,
                student_count=data.student_count,
                teacher_count=data.teacher_count,
                message=data.message,
                status=OnboardingRequestStatus.PENDING.value,
            )
        )

    async def list_requests(
        self,
        status: OnboardingRequestStatus | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[OnboardingRequestEntity]:
        stmt = select(OnboardingRequest)
        if status is not None:
            stmt = stmt.where(OnboardingRequest.status == status.value)
        stmt = (
            stmt.order_by(OnboardingRequest.created_at.desc(), OnboardingRequest.id)
            .offset(skip)
            .limit(limit)
        )
        async with self.transaction() as session:
            result = await session.execute(stmt)
            return [self._to_result(obj) for obj in result.scalars().all()]

    async def mark_reviewed(
        self,
        request_id: str,
        status: OnboardingRequestStatus,
        reviewed_by: str,
        reviewed_at: datetime,
        tenant_id: str | None = None,
        rejection_reason: str | None = None,
    ) -> bool:
        """Single guarded write: applies only while reviewed_at IS NULL."""
        values: dict[str, Any] = {
            "status": status.value,
            "reviewed_by": reviewed_by,
            "reviewed_at": reviewed_at,
        }
        if tenant_id is not None:
            values["tenant_id"] = tenant_id
        if rejection_reason is not None:
            values["rejection_reason"] = rejection_reason
        return await self.conditional_update(request_id, values, when_null="reviewed_at")
