"""Identity directory over a managed auth provider's admin REST API (GoTrue-style).

Endpoints used: POST/GET/PUT/DELETE /admin/users and POST
/token?grant_type=password. Authenticates with the service key. Provider
error text and account ids never leave this module inside exception messages.
"""

from __future__ import annotations

from typing import Any

import httpx

from preschool.application.dtos.identity import IdentityRef
from preschool.domain.exceptions import (
    EmailTakenException,
    IdentityProviderException,
    ProviderUnavailableException,
    ValidationException,
    WeakPasswordException,
)
from preschool.domain.value_objects import normalize_email
from preschool.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

PROVIDER = "identity_directory"
_PAGE_SIZE = 200
_MAX_PAGES = 10
_RETRY_STATUSES = frozenset({429, 502, 503, 504})


def _error_text(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text.lower()
    if isinstance(body, dict):
        parts = [str(body.get(k, "")) for k in ("error_code", "code", "msg", "message", "error")]
        return " ".join(parts).lower()
    return str(body).lower()


def _to_ref(user: dict[str, Any]) -> IdentityRef:
    return IdentityRef(id=str(user["id"]), email=str(user.get("email", "")).lower())


class HttpIdentityDirectory:
    """Identity directory over HTTP (implements IIdentityDirectory)."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        service_key: str,
        min_password_length: int = 8,
    ) -> None:
        self._client = client
        self._base = base_url.rstrip("/")
        self._key = service_key
        self.min_password_length = min_password_length

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._key}",
            "apikey": self._key,
            "Content-Type": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send a request. Transport failures and 5xx/429 raise ProviderUnavailableException."""
        try:
            resp = await self._client.request(
                method,
                f"{self._base}{path}",
                json=json,
                params=params,
                headers=self._headers(headers),
            )
        except httpx.TransportError as e:
            logger.warning("Identity provider %s failed: %s", operation, type(e).__name__)
            raise ProviderUnavailableException(PROVIDER, operation) from e
        if resp.status_code >= 500 or resp.status_code in _RETRY_STATUSES:
            logger.warning("Identity provider %s returned %d", operation, resp.status_code)
            raise ProviderUnavailableException(PROVIDER, operation)
        return resp

    @staticmethod
    def _email(value: str) -> str:
        try:
            return normalize_email(value)
        except ValueError as e:
            raise ValidationException(str(e), field="email") from e

    async def find_by_email(self, email: str) -> IdentityRef | None:
        email = self._email(email)
        for page in range(1, _MAX_PAGES + 1):
            resp = await self._request(
                "GET",
                "/admin/users",
                "find_by_email",
                params={"page": page, "per_page": _PAGE_SIZE, "filter": email},
            )
            if resp.status_code != 200:
                raise IdentityProviderException("find_by_email")
            users = resp.json().get("users", [])
            for user in users:
                if str(user.get("email", "")).lower() == email:
                    return _to_ref(user)
            if len(users) < _PAGE_SIZE:
                break
        return None

    async def create_account(
        self,
        email: str,
        password: str,
        pre_confirmed: bool,
        request_key: str | None = None,
    ) -> IdentityRef:
        email = self._email(email)
        if len(password or "") < self.min_password_length:
            raise WeakPasswordException(self.min_password_length)
        resp = await self._request(
            "POST",
            "/admin/users",
            "create_account",
            json={"email": email, "password": password, "email_confirm": pre_confirmed},
            headers={"Idempotency-Key": request_key} if request_key else None,
        )
        if resp.status_code in (200, 201):
            return _to_ref(resp.json())
        text = _error_text(resp)
        if resp.status_code in (400, 409, 422):
            # Replays of request_key are answered by the provider with the original 200.
            if "email_exists" in text or "already" in text or "exists" in text:
                raise EmailTakenException()
            if "weak_password" in text or "password" in text:
                raise WeakPasswordException(self.min_password_length)
        logger.error("Identity provider rejected create_account with %d", resp.status_code)
        raise IdentityProviderException("create_account")

    async def delete_account(self, identity_id: str) -> None:
        resp = await self._request("DELETE", f"/admin/users/{identity_id}", "delete_account")
        if resp.status_code not in (200, 204, 404):
            raise IdentityProviderException("delete_account")

    async def verify_password(self, email: str, password: str) -> IdentityRef | None:
        resp = await self._request(
            "POST",
            "/token",
            "verify_password",
            params={"grant_type": "password"},
            json={"email": self._email(email), "password": password},
        )
        if resp.status_code == 200:
            return _to_ref(resp.json()["user"])
        if resp.status_code in (400, 401, 422):
            return None
        raise IdentityProviderException("verify_password")

    async def set_password(self, identity_id: str, password: str) -> None:
        if len(password or "") < self.min_password_length:
            raise WeakPasswordException(self.min_password_length)
        resp = await self._request(
            "PUT",
            f"/admin/users/{identity_id}",
            "set_password",
            json={"password": password},
        )
        if resp.status_code != 200:
            raise IdentityProviderException("set_password")
