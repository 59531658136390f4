"""Shared utilities: logging setup, datetime and id helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from preschool.shared.utils import (
    ensure_utc,
    generate_cuid,
    utc_now,
)

__all__ = [
    "generate_cuid",
    "utc_now",
    "ensure_utc",
]
