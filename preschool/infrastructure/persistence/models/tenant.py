"""Tenant ORM model. One row per school; created only by onboarding approval."""

from sqlalchemy import CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from preschool.domain.enums import TenantOnboardingStatus
from preschool.infrastructure.persistence.database import Base
from preschool.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    check_in,
)


class Tenant(CuidMixin, CreatedAtMixin, Base):
    """Table: tenant. Unique slug; unique onboarding_request_id (approval idempotency key)."""

    __tablename__ = "tenant"

    name: Mapped[str] = mapped_column(String, nullable=False)
    slug: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    contact_email: Mapped[str] = mapped_column(String, nullable=False, index=True)
    subscription_plan: Mapped[str] = mapped_column(String, nullable=False, default="trial")
    subscription_status: Mapped[str] = mapped_column(
        String, nullable=False, default="active"
    )
    onboarding_status: Mapped[str] = mapped_column(
        String, nullable=False, default=TenantOnboardingStatus.PENDING.value
    )
    # No FK: onboarding_request.tenant_id already references tenant.
    onboarding_request_id: Mapped[str | None] = mapped_column(
        String, unique=True, nullable=True
    )

    __table_args__ = (
        CheckConstraint(
            check_in("onboarding_status", TenantOnboardingStatus.values()),
            name="tenant_onboarding_status_check",
        ),
    )
