"""Identity directory adapters (credential store only)."""

from preschool.infrastructure.identity.factory import build_identity_directory
from preschool.infrastructure.identity.http_directory import HttpIdentityDirectory
from preschool.infrastructure.identity.sql_directory import SqlIdentityDirectory

__all__ = ["HttpIdentityDirectory", "SqlIdentityDirectory", "build_identity_directory"]
