"""Domain value objects for the provisioning workflows.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

import re
from dataclasses import dataclass

# Shared slug pattern: lowercase alphanumeric with optional hyphens (e.g. sunshine-prep).
_SLUG_RE = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")
_NON_SLUG_CHARS_RE = re.compile(r"[^a-z0-9]+")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_CODE_RE = re.compile(r"^[A-Z0-9]{6,32}$")

SLUG_MAX_LENGTH = 50
_FALLBACK_SLUG = "school"


def slugify(name: str) -> str:
    """Derive a slug from a display name.

    Lowercases, collapses every run of non-alphanumerics into a single
    hyphen, trims hyphens from both ends and truncates to SLUG_MAX_LENGTH.
    Names with no usable characters fall back to 'school'.
    """
    slug = _NON_SLUG_CHARS_RE.sub("-", (name or "").lower()).strip("-")
    slug = slug[:SLUG_MAX_LENGTH].rstrip("-")
    return slug or _FALLBACK_SLUG


@dataclass(frozen=True)
class TenantSlug:
    """Value object for a tenant slug (unique, lowercase, hyphenated).

    Use from_name() to derive one from a school name and with_suffix() to
    disambiguate when the base slug is taken ('sunshine-prep-2').
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("Tenant slug must be a non-empty string")
        if len(self.value) > SLUG_MAX_LENGTH:
            raise ValueError(f"Tenant slug must not exceed {SLUG_MAX_LENGTH} characters")
        if not _SLUG_RE.match(self.value):
            raise ValueError(
                "Tenant slug must be lowercase alphanumeric with optional hyphens "
                "(e.g., 'sunshine-prep')"
            )

    @classmethod
    def from_name(cls, name: str) -> "TenantSlug":
        return cls(slugify(name))

    def with_suffix(self, n: int) -> "TenantSlug":
        """Return the n-th disambiguated variant, keeping within the length limit."""
        suffix = f"-{n}"
        base = self.value[: SLUG_MAX_LENGTH - len(suffix)].rstrip("-")
        return TenantSlug(f"{base}{suffix}")


def normalize_email(value: str) -> str:
    """Strip and lowercase an email address. Raises ValueError if malformed."""
    email = (value or "").strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValueError("Email address is not well-formed")
    return email


def emails_match(left: str | None, right: str | None) -> bool:
    """Case-insensitive, whitespace-tolerant email comparison."""
    if not left or not right:
        return False
    return left.strip().lower() == right.strip().lower()


def normalize_invitation_code(value: str) -> str:
    """Upper-case and strip an invitation code. Raises ValueError if malformed.

    Codes are 6-32 characters of A-Z and 0-9; issued codes use a 12
    character unambiguous subset but older shorter codes remain valid input.
    """
    code = (value or "").strip().upper()
    if not _CODE_RE.match(code):
        raise ValueError("Invitation code is not well-formed")
    return code
