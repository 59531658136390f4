"""Tests for the managed-provider identity directory adapter (httpx.MockTransport)."""

import json

import httpx
import pytest

from preschool.domain.exceptions import (
    EmailTakenException,
    IdentityProviderException,
    ProviderUnavailableException,
    WeakPasswordException,
)
from preschool.infrastructure.identity.http_directory import HttpIdentityDirectory

BASE_URL = "https://auth.example.test/auth/v1"


def _directory(handler) -> tuple[HttpIdentityDirectory, httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpIdentityDirectory(client, BASE_URL, "service-key"), client


async def test_create_account_sends_idempotency_key() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "uid-1", "email": "ada@sunshine.test"})

    directory, client = _directory(handler)
    async with client:
        ref = await directory.create_account(
            "Ada@Sunshine.test", "Temp!Passw0rd", True, request_key="approve:req-1"
        )

    assert ref.id == "uid-1"
    assert ref.email == "ada@sunshine.test"
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/auth/v1/admin/users"
    assert request.headers["Idempotency-Key"] == "approve:req-1"
    assert request.headers["Authorization"] == "Bearer service-key"
    body = json.loads(request.content)
    assert body == {
        "email": "ada@sunshine.test",
        "password": "Temp!Passw0rd",
        "email_confirm": True,
    }


async def test_create_account_maps_email_exists() -> None:
    directory, client = _directory(
        lambda request: httpx.Response(422, json={"error_code": "email_exists", "msg": "x"})
    )
    async with client:
        with pytest.raises(EmailTakenException):
            await directory.create_account("a@x.test", "Password123!", True)


async def test_create_account_maps_weak_password() -> None:
    directory, client = _directory(
        lambda request: httpx.Response(422, json={"error_code": "weak_password"})
    )
    async with client:
        with pytest.raises(WeakPasswordException):
            await directory.create_account("a@x.test", "Password123!", True)


async def test_create_account_checks_length_before_calling_provider() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("provider must not be called")

    directory, client = _directory(handler)
    async with client:
        with pytest.raises(WeakPasswordException):
            await directory.create_account("a@x.test", "short", True)


async def test_create_account_unexpected_rejection_hides_provider_text() -> None:
    directory, client = _directory(
        lambda request: httpx.Response(403, json={"msg": "uid-secret forbidden"})
    )
    async with client:
        with pytest.raises(IdentityProviderException) as exc_info:
            await directory.create_account("a@x.test", "Password123!", True)
    assert "uid-secret" not in exc_info.value.message


@pytest.mark.parametrize("status", [429, 500, 503])
async def test_transient_statuses_are_provider_unavailable(status: int) -> None:
    directory, client = _directory(lambda request: httpx.Response(status))
    async with client:
        with pytest.raises(ProviderUnavailableException):
            await directory.find_by_email("a@x.test")


async def test_transport_error_is_provider_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    directory, client = _directory(handler)
    async with client:
        with pytest.raises(ProviderUnavailableException):
            await directory.delete_account("uid-1")


async def test_find_by_email_matches_exact_address() -> None:
    users = [
        {"id": "uid-1", "email": "ada@sunshine.test.other"},
        {"id": "uid-2", "email": "Ada@Sunshine.test"},
    ]
    directory, client = _directory(lambda request: httpx.Response(200, json={"users": users}))
    async with client:
        ref = await directory.find_by_email("ada@sunshine.test")
    assert ref is not None and ref.id == "uid-2"


async def test_find_by_email_returns_none_when_absent() -> None:
    directory, client = _directory(lambda request: httpx.Response(200, json={"users": []}))
    async with client:
        assert await directory.find_by_email("nobody@x.test") is None


async def test_verify_password() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["grant_type"] == "password"
        body = json.loads(request.content)
        if body["password"] == "right-password":
            return httpx.Response(
                200, json={"access_token": "t", "user": {"id": "uid-1", "email": "a@x.test"}}
            )
        return httpx.Response(400, json={"error": "invalid_grant"})

    directory, client = _directory(handler)
    async with client:
        assert (await directory.verify_password("a@x.test", "right-password")).id == "uid-1"
        assert await directory.verify_password("a@x.test", "wrong-password") is None


async def test_delete_account_tolerates_missing_user() -> None:
    directory, client = _directory(lambda request: httpx.Response(404))
    async with client:
        await directory.delete_account("uid-gone")


async def test_set_password_puts_new_password() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "uid-1"})

    directory, client = _directory(handler)
    async with client:
        await directory.set_password("uid-1", "NewTemp!Pass1")
    assert seen[0].method == "PUT"
    assert seen[0].url.path == "/auth/v1/admin/users/uid-1"
    assert json.loads(seen[0].content) == {"password": "NewTemp!Pass1"}
