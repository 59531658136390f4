"""User profile ORM model: the authority for role and tenant."""

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, String, text
from sqlalchemy.orm import Mapped, mapped_column

from preschool.domain.enums import UserRole
from preschool.infrastructure.persistence.database import Base
from preschool.infrastructure.persistence.models.mixins import (
    CuidMixin,
    TimestampMixin,
    check_in,
)


class UserProfile(CuidMixin, TimestampMixin, Base):
    """Table: user_profile. One profile per directory account (unique identity_id)."""

    __tablename__ = "user_profile"

    identity_id: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[str] = mapped_column(String, nullable=False)
    tenant_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("tenant.id", ondelete="CASCADE"), nullable=True, index=True
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )

    __table_args__ = (
        CheckConstraint(check_in("role", UserRole.values()), name="user_profile_role_check"),
        CheckConstraint(
            "tenant_id IS NOT NULL OR role = 'superadmin'",
            name="user_profile_tenant_required_check",
        ),
    )
