"""Onboarding request ORM model. Never deleted."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from preschool.domain.enums import OnboardingRequestStatus
from preschool.infrastructure.persistence.database import Base
from preschool.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    check_in,
)


class OnboardingRequest(CuidMixin, CreatedAtMixin, Base):
    """Table: onboarding_request."""

    __tablename__ = "onboarding_request"

    tenant_name: Mapped[str] = mapped_column(String, nullable=False)
    admin_name: Mapped[str] = mapped_column(String, nullable=False)
    admin_email: Mapped[str] = mapped_column(String, nullable=False, index=True)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
    address: Mapped[str | None] = mapped_column(String, nullable=True)
    student_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    teacher_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String,
        nullable=False,
        default=OnboardingRequestStatus.PENDING.value,
        index=True,
    )
    reviewed_by: Mapped[str | None] = mapped_column(String, nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    tenant_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("tenant.id", ondelete="SET NULL"), nullable=True
    )
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            check_in("status", OnboardingRequestStatus.values()),
            name="onboarding_request_status_check",
        ),
        CheckConstraint(
            "(reviewed_by IS NULL) = (reviewed_at IS NULL)",
            name="onboarding_request_reviewed_pair_check",
        ),
    )
