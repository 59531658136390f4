"""Build the configured notifier."""

from __future__ import annotations

import httpx

from preschool.application.interfaces.services import INotifier
from preschool.core.config import Settings
from preschool.infrastructure.external.email.notifier import HttpEmailNotifier, LogOnlyNotifier


def build_notifier(
    settings: Settings, http_client: httpx.AsyncClient | None = None
) -> INotifier:
    """Return the HTTP email notifier when configured, else the log-only one."""
    if settings.notifier_backend == "http":
        if http_client is None:
            raise ValueError("notifier_backend 'http' requires a shared httpx client")
        assert settings.email_api_url
        return HttpEmailNotifier(
            http_client,
            settings.email_api_url,
            settings.email_from,
            api_key=(
                settings.email_api_key.get_secret_value()
                if settings.email_api_key
                else None
            ),
        )
    return LogOnlyNotifier()
