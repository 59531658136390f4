"""Cross-cutting helpers (UTC datetimes, id generation)."""

from preschool.shared.utils.datetime import ensure_utc, expires_after, is_past, utc_now
from preschool.shared.utils.generators import generate_cuid

__all__ = ["ensure_utc", "expires_after", "generate_cuid", "is_past", "utc_now"]
