"""Operator bootstrap script: first superadmin."""

import sys

import pytest

from preschool.domain.enums import UserRole
from scripts.create_superadmin import main
from tests.conftest import ApiEnv


async def test_creates_account_and_superadmin_profile(
    api_env: ApiEnv, monkeypatch, capsys
) -> None:
    monkeypatch.setattr(
        sys, "argv", ["create_superadmin", "Root@Platform.test", "Platform Admin", "RootPassword1!"]
    )

    await main()

    identity = await api_env.directory.find_by_email("root@platform.test")
    assert identity is not None
    profile = await api_env.store.profiles.get_by_identity_id(identity.id)
    assert profile is not None
    assert profile.role == UserRole.SUPERADMIN
    assert profile.tenant_id is None
    assert "Superadmin created" in capsys.readouterr().out


async def test_weak_password_exits_with_error(api_env: ApiEnv, monkeypatch, capsys) -> None:
    monkeypatch.setattr(sys, "argv", ["create_superadmin", "root@platform.test", "Root", "short"])

    with pytest.raises(SystemExit) as exc_info:
        await main()

    assert exc_info.value.code == 1
    assert "Could not create superadmin" in capsys.readouterr().err
    assert await api_env.directory.find_by_email("root@platform.test") is None


async def test_missing_arguments_prints_usage(monkeypatch, capsys) -> None:
    monkeypatch.setattr(sys, "argv", ["create_superadmin", "root@platform.test"])

    with pytest.raises(SystemExit):
        await main()

    assert "Usage:" in capsys.readouterr().err
