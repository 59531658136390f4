"""Notifier adapters: log-only and HTTP email API."""

from __future__ import annotations

from typing import Any

import httpx

from preschool.domain.exceptions import ProviderUnavailableException
from preschool.infrastructure.external.email.templates import EmailTemplateRenderer
from preschool.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class LogOnlyNotifier:
    """INotifier that renders and logs instead of sending.

    Bodies may carry temporary passwords and codes, so only the template id,
    recipient and subject are logged.
    """

    def __init__(self, renderer: EmailTemplateRenderer | None = None) -> None:
        self.renderer = renderer or EmailTemplateRenderer()

    async def send(
        self, to_email: str, template_id: str, template_data: dict[str, Any]
    ) -> None:
        subject, _ = self.renderer.render(template_id, template_data)
        logger.info("Email %s would be sent to %s (subject=%r)", template_id, to_email, subject[:80])


class HttpEmailNotifier:
    """INotifier that POSTs the rendered message to a transactional email API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_url: str,
        from_email: str,
        api_key: str | None = None,
        renderer: EmailTemplateRenderer | None = None,
    ) -> None:
        self._client = client
        self._api_url = api_url
        self._from = from_email
        self._api_key = api_key
        self.renderer = renderer or EmailTemplateRenderer()

    async def send(
        self, to_email: str, template_id: str, template_data: dict[str, Any]
    ) -> None:
        subject, body = self.renderer.render(template_id, template_data)
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        try:
            resp = await self._client.post(
                self._api_url,
                json={
                    "from": self._from,
                    "to": [to_email],
                    "subject": subject,
                    "text": body,
                    "tags": [{"name": "template", "value": template_id}],
                },
                headers=headers,
            )
        except httpx.TransportError as e:
            raise ProviderUnavailableException("notifier", template_id) from e
        if resp.status_code >= 500 or resp.status_code == 429:
            raise ProviderUnavailableException("notifier", template_id)
        resp.raise_for_status()
        logger.info("Email %s sent to %s", template_id, to_email)
