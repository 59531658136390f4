"""Bootstrap a platform superadmin (identity account + profile).

Usage:
    uv run python -m scripts.create_superadmin <email> <name> <password>
Superadmins cannot be provisioned through the API; run this once per operator.
"""

import asyncio
import sys

import httpx

from preschool.core.config import get_settings
from preschool.domain.enums import UserRole
from preschool.domain.exceptions import PreschoolException
from preschool.infrastructure.identity.factory import build_identity_directory
from preschool.infrastructure.persistence.database import (
    dispose_engine,
    get_session_factory,
)
from preschool.infrastructure.persistence.repositories import SqlRecordStore


async def main() -> None:
    """Create the superadmin named on the command line."""
    if len(sys.argv) < 4:
        print(
            "Usage: uv run python -m scripts.create_superadmin <email> <name> <password>",
            file=sys.stderr,
        )
        sys.exit(1)
    email, name, password = sys.argv[1], sys.argv[2], sys.argv[3]

    settings = get_settings()
    session_factory = get_session_factory()
    store = SqlRecordStore(session_factory)
    try:
        async with httpx.AsyncClient(timeout=settings.external_call_timeout_seconds) as client:
            directory = build_identity_directory(settings, session_factory, client)
            identity = await directory.create_account(email, password, True)
            profile = await store.profiles.create_profile(
                identity_id=identity.id,
                email=identity.email,
                name=name,
                role=UserRole.SUPERADMIN,
                tenant_id=None,
            )
    except PreschoolException as exc:
        print(f"Could not create superadmin: {exc.message}", file=sys.stderr)
        sys.exit(1)
    finally:
        await dispose_engine()
    print(f"Superadmin created: profile {profile.id} ({profile.email})")


if __name__ == "__main__":
    asyncio.run(main())
