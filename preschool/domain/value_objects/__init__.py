"""Domain value objects."""

from preschool.domain.value_objects.core import (
    SLUG_MAX_LENGTH,
    TenantSlug,
    emails_match,
    normalize_email,
    normalize_invitation_code,
    slugify,
)

__all__ = [
    "SLUG_MAX_LENGTH",
    "TenantSlug",
    "emails_match",
    "normalize_email",
    "normalize_invitation_code",
    "slugify",
]
