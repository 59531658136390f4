"""Identity account ORM model backing the self-hosted identity directory."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from preschool.infrastructure.persistence.database import Base
from preschool.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class IdentityAccount(CuidMixin, TimestampMixin, Base):
    """Table: identity_account. Credentials only; role and tenant live on user_profile."""

    __tablename__ = "identity_account"

    email: Mapped[str] = mapped_column(String, unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String, nullable=False)
    email_confirmed: Mapped[bool] = mapped_column(default=False, nullable=False)
    # Idempotency key of the create call that produced this row.
    request_key: Mapped[str | None] = mapped_column(String, unique=True, nullable=True)
