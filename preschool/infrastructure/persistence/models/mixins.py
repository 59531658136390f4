"""SQLAlchemy mixins for common model patterns.

Provides: CuidMixin, CreatedAtMixin, TimestampMixin. Timestamps use a
Python-side UTC default so rows written through SQLite and PostgreSQL read
back identically.
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from preschool.shared.utils import generate_cuid, utc_now


def check_in(column: str, values: list[str]) -> str:
    """SQL for a CHECK constraint restricting column to values."""
    quoted = ", ".join("'{}'".format(v.replace("'", "''")) for v in values)
    return f"{column} IN ({quoted})"


class CuidMixin:
    """Mixin for models using CUID as primary key."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class CreatedAtMixin:
    """Mixin for an immutable created_at."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)


class TimestampMixin(CreatedAtMixin):
    """Mixin for created_at and updated_at (timezone-aware)."""

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            default=utc_now,
            onupdate=utc_now,
            nullable=False,
        )
