"""Security: password hashing."""

from preschool.infrastructure.security.password import PasswordHasher

__all__ = ["PasswordHasher"]
