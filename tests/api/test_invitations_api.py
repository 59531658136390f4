"""HTTP tests for invitation issue, preview, redeem, revoke, resend and member admin."""

from httpx import AsyncClient

from tests.conftest import ApiEnv, make_superadmin

PASSWORD = "Teacher!Pass1"


async def _school(client: AsyncClient, api_env: ApiEnv) -> tuple[str, dict[str, str]]:
    """Approve Sunshine Prep; return (tenant_id, principal caller headers)."""
    root = await make_superadmin(api_env.store, api_env.directory)
    submitted = await client.post(
        "/api/v1/onboarding-requests",
        json={"tenant_name": "Sunshine Prep", "admin_name": "Ada", "admin_email": "ada@sunshine.test"},
    )
    request_id = submitted.json()["request_id"]
    approved = await client.post(
        f"/api/v1/onboarding-requests/{request_id}/approve",
        headers={"X-Caller-Profile-ID": root.id},
    )
    tenant_id = approved.json()["tenant_id"]
    principal = await api_env.store.profiles.get_principal_for_tenant(tenant_id)
    return tenant_id, {"X-Caller-Profile-ID": principal.id}


async def test_invitation_round_trip_over_http(client: AsyncClient, api_env: ApiEnv) -> None:
    tenant_id, headers = await _school(client, api_env)

    issued = await client.post(
        "/api/v1/invitations",
        headers=headers,
        json={"tenant_id": tenant_id, "role": "teacher", "target_email": "Tom@School.test", "ttl_hours": 48},
    )
    assert issued.status_code == 201, issued.text
    code = issued.json()["code"]
    assert issued.json()["state"] == "issued"
    assert issued.json()["target_email"] == "tom@school.test"

    preview = await client.get(f"/api/v1/invitations/{code.lower()}")
    assert preview.status_code == 200
    assert preview.json()["tenant_name"] == "Sunshine Prep"
    assert preview.json()["email_restricted"] is True
    assert "target_email" not in preview.json()

    redeemed = await client.post(
        "/api/v1/invitations/redeem",
        json={"code": code, "email": "tom@school.test", "name": "Tom", "password": PASSWORD},
    )
    assert redeemed.status_code == 200, redeemed.text
    assert redeemed.json()["role"] == "teacher"
    assert redeemed.json()["tenant_id"] == tenant_id

    again = await client.post(
        "/api/v1/invitations/redeem",
        json={"code": code, "email": "tom@school.test", "name": "Tom", "password": PASSWORD},
    )
    assert again.status_code == 409
    assert again.json()["error"] == "ALREADY_USED"

    listed = await client.get("/api/v1/invitations", params={"tenant_id": tenant_id}, headers=headers)
    assert listed.status_code == 200
    assert listed.json()[0]["state"] == "used"
    assert listed.json()[0]["used_by"] == "tom@school.test"


async def test_redeem_error_statuses(client: AsyncClient, api_env: ApiEnv) -> None:
    tenant_id, headers = await _school(client, api_env)
    targeted = (
        await client.post(
            "/api/v1/invitations",
            headers=headers,
            json={"tenant_id": tenant_id, "role": "parent", "target_email": "p@x.test"},
        )
    ).json()["code"]

    mismatch = await client.post(
        "/api/v1/invitations/redeem",
        json={"code": targeted, "email": "q@x.test", "name": "Q", "password": PASSWORD},
    )
    assert mismatch.status_code == 403
    assert mismatch.json()["error"] == "EMAIL_MISMATCH"

    revoked = await client.post(f"/api/v1/invitations/{targeted}/revoke", headers=headers)
    assert revoked.status_code == 200
    expired = await client.post(
        "/api/v1/invitations/redeem",
        json={"code": targeted, "email": "p@x.test", "name": "P", "password": PASSWORD},
    )
    assert expired.status_code == 410
    assert expired.json()["error"] == "EXPIRED"

    unknown = await client.post(
        "/api/v1/invitations/redeem",
        json={"code": "NOSUCHCODE99", "email": "p@x.test", "name": "P", "password": PASSWORD},
    )
    assert unknown.status_code == 400
    assert unknown.json()["error"] == "INVALID_CODE"


async def test_issue_requires_issuer(client: AsyncClient, api_env: ApiEnv) -> None:
    tenant_id, _ = await _school(client, api_env)

    anonymous = await client.post(
        "/api/v1/invitations", json={"tenant_id": tenant_id, "role": "teacher"}
    )
    assert anonymous.status_code == 403

    bad_role = await client.post(
        "/api/v1/invitations",
        headers={"X-Caller-Profile-ID": "anyone"},
        json={"tenant_id": tenant_id, "role": "janitor"},
    )
    assert bad_role.status_code == 422


async def test_resend_and_member_admin_over_http(client: AsyncClient, api_env: ApiEnv) -> None:
    tenant_id, headers = await _school(client, api_env)
    code = (
        await client.post(
            "/api/v1/invitations",
            headers=headers,
            json={"tenant_id": tenant_id, "role": "teacher", "target_email": "t@school.test"},
        )
    ).json()["code"]

    resent = await client.post(f"/api/v1/invitations/{code}/resend", headers=headers)
    assert resent.status_code == 200
    assert resent.json() == {"sent": True}

    teacher = (
        await client.post(
            "/api/v1/invitations/redeem",
            json={"code": code, "email": "t@school.test", "name": "Tess", "password": PASSWORD},
        )
    ).json()

    reset = await client.post(
        f"/api/v1/members/{teacher['profile_id']}/reset-password", headers=headers
    )
    assert reset.status_code == 200
    assert reset.json() == {"profile_id": teacher["profile_id"], "sent": True}
    temp_password = api_env.notifier.of("password_reset")[-1][2]["temp_password"]
    assert await api_env.directory.verify_password("t@school.test", temp_password) is not None

    deactivated = await client.post(
        f"/api/v1/members/{teacher['profile_id']}/deactivate", headers=headers
    )
    assert deactivated.status_code == 200
    assert (await api_env.store.profiles.get_by_id(teacher["profile_id"])).is_active is False

    forbidden = await client.post(
        f"/api/v1/members/{teacher['profile_id']}/reset-password",
        headers={"X-Caller-Profile-ID": teacher["profile_id"]},
    )
    assert forbidden.status_code == 403


async def test_admin_cannot_reset_or_deactivate_principal_over_http(
    client: AsyncClient, api_env: ApiEnv
) -> None:
    tenant_id, headers = await _school(client, api_env)
    code = (
        await client.post(
            "/api/v1/invitations", headers=headers, json={"tenant_id": tenant_id, "role": "admin"}
        )
    ).json()["code"]
    admin = (
        await client.post(
            "/api/v1/invitations/redeem",
            json={"code": code, "email": "adm@school.test", "name": "Adm", "password": PASSWORD},
        )
    ).json()
    principal_id = headers["X-Caller-Profile-ID"]
    admin_headers = {"X-Caller-Profile-ID": admin["profile_id"]}

    reset = await client.post(f"/api/v1/members/{principal_id}/reset-password", headers=admin_headers)
    deactivate = await client.post(f"/api/v1/members/{principal_id}/deactivate", headers=admin_headers)

    assert reset.status_code == 403
    assert "temp_password" not in reset.text
    assert deactivate.status_code == 403
    assert api_env.notifier.of("password_reset") == []
    assert (await api_env.store.profiles.get_by_id(principal_id)).is_active is True
