"""DTOs for the identity directory (credential store only; no roles)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class IdentityRef:
    """Reference to a directory account. id is internal and never returned to API callers."""

    id: str
    email: str
