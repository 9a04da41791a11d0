import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_admin_requires_api_key(client: AsyncClient, applicant):
    missing = await client.post("/api/admin/principals/applicant/A1/archive")
    wrong = await client.post(
        "/api/admin/principals/applicant/A1/archive", headers={"X-Admin-API-Key": "nope"}
    )

    assert missing.status_code == 401
    assert wrong.status_code == 401
    assert wrong.json()["error"] == "Invalid admin API key."


@pytest.mark.asyncio
async def test_revoke_sessions_signs_out_everywhere(client: AsyncClient, applicant, admin_headers):
    body = {"applicantId": "A1", "applicantKey": "applicant-key-A1"}
    phone = (await client.post("/api/applicant/mobile/auth/exchange", json=body)).json()
    tablet = (await client.post("/api/applicant/mobile/auth/exchange", json=body)).json()

    response = await client.post(
        "/api/admin/principals/applicant/A1/revoke-sessions", headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json() == {"ok": True, "principalId": "A1", "revokedCount": 2}
    for issued in (phone, tablet):
        refresh = await client.post(
            "/api/applicant/mobile/auth/refresh", json={"refreshToken": issued["refreshToken"]}
        )
        assert refresh.status_code == 401

    again = await client.post(
        "/api/admin/principals/applicant/A1/revoke-sessions", headers=admin_headers
    )
    assert again.json()["revokedCount"] == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("action", ["rotate-token-epoch", "revoke-sessions", "archive"])
async def test_unknown_principal(client: AsyncClient, admin_headers, action):
    response = await client.post(f"/api/admin/principals/referrer/R404/{action}", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["code"] == "PRINCIPAL_NOT_FOUND"


@pytest.mark.asyncio
async def test_unknown_principal_type(client: AsyncClient, admin_headers):
    response = await client.post("/api/admin/principals/founder/F1/archive", headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_REQUEST"
