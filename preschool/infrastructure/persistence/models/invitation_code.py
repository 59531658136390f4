"""Invitation code ORM model. Revoked codes are expired in place, never deleted."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from preschool.domain.enums import INVITABLE_ROLES
from preschool.infrastructure.persistence.database import Base
from preschool.infrastructure.persistence.models.mixins import CreatedAtMixin, check_in


class InvitationCode(CreatedAtMixin, Base):
    """Table: invitation_code. Primary key is the code itself."""

    __tablename__ = "invitation_code"

    code: Mapped[str] = mapped_column(String(32), primary_key=True)
    tenant_id: Mapped[str] = mapped_column(
        String, ForeignKey("tenant.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[str] = mapped_column(String, nullable=False)
    invited_by: Mapped[str] = mapped_column(String, nullable=False)
    target_email: Mapped[str | None] = mapped_column(String, nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    used_by: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        CheckConstraint(
            check_in("role", sorted(r.value for r in INVITABLE_ROLES)),
            name="invitation_code_role_check",
        ),
    )
