"""Build the configured identity directory."""

from __future__ import annotations

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from preschool.application.interfaces.services import IIdentityDirectory
from preschool.core.config import Settings
from preschool.infrastructure.identity.http_directory import HttpIdentityDirectory
from preschool.infrastructure.identity.sql_directory import SqlIdentityDirectory


def build_identity_directory(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    http_client: httpx.AsyncClient | None = None,
) -> IIdentityDirectory:
    """Return the http directory when configured, else the SQL one."""
    if settings.identity_backend == "http":
        if http_client is None:
            raise ValueError("identity_backend 'http' requires a shared httpx client")
        assert settings.identity_api_url and settings.identity_service_key
        return HttpIdentityDirectory(
            http_client,
            settings.identity_api_url,
            settings.identity_service_key.get_secret_value(),
            min_password_length=settings.identity_min_password_length,
        )
    return SqlIdentityDirectory(
        session_factory, min_password_length=settings.identity_min_password_length
    )
