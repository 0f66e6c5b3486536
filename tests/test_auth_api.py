"""
Admin login and bearer-token protection of the mutating endpoints.
"""
from datetime import datetime, timedelta, timezone

import jwt
import pytest

pytestmark = pytest.mark.anyio


async def test_login_returns_24h_token_with_username_claim(client):
    response = await client.post("/api/auth/login", json={"username": "admin", "password": "secret"})

    assert response.status_code == 200
    payload = jwt.decode(response.json()["token"], "test-jwt-secret", algorithms=["HS256"])
    assert payload["username"] == "admin"
    expires_in = payload["exp"] - datetime.now(timezone.utc).timestamp()
    assert timedelta(hours=23, minutes=59).total_seconds() < expires_in <= timedelta(hours=24).total_seconds()


@pytest.mark.parametrize("body", [{}, {"username": "admin"}, {"password": "secret"}, {"username": "", "password": ""}])
async def test_login_requires_username_and_password(client, body):
    response = await client.post("/api/auth/login", json=body)

    assert response.status_code == 400
    assert response.json()["detail"] == "Username and password are required"


async def test_login_rejects_wrong_credentials(client):
    response = await client.post("/api/auth/login", json={"username": "admin", "password": "wrong"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid username or password"


async def test_login_without_configured_credentials_is_a_server_error(client, settings):
    settings.admin_password = None

    response = await client.post("/api/auth/login", json={"username": "admin", "password": "secret"})

    assert response.status_code == 500
    assert response.json()["detail"] == "Server configuration error"


async def test_me_returns_token_holder(client, auth_headers):
    response = await client.get("/api/auth/me", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"username": "admin"}


async def test_mutations_require_a_token(client):
    responses = [
        await client.post("/api/menu-items", data={"category": "kebaplar", "name": "Urfa", "price": "300"}),
        await client.put("/api/menu-items", data={"category": "kebaplar", "id": "1", "name": "Urfa", "price": "300"}),
        await client.delete("/api/menu-items", params={"category": "kebaplar", "id": "1"}),
        await client.post("/api/categories", json={"name": "meze"}),
        await client.delete("/api/categories/kebaplar"),
    ]

    assert [r.status_code for r in responses] == [401] * 5
    assert responses[0].headers["www-authenticate"] == "Bearer"


async def test_expired_token_is_rejected(client):
    token = jwt.encode(
        {"username": "admin", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
        "test-jwt-secret",
        algorithm="HS256",
    )

    response = await client.post("/api/categories", json={"name": "meze"}, headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Token has expired"


async def test_token_signed_with_another_secret_is_rejected(client):
    token = jwt.encode({"username": "admin"}, "some-other-secret", algorithm="HS256")

    response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid authentication token"


async def test_public_reads_need_no_token(client):
    assert (await client.get("/api/menu-items")).status_code == 200
    assert (await client.get("/api/menu/public")).status_code == 200


async def test_health_reports_storage(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["services"]["storage"] == "healthy"


async def test_malformed_content_length_is_rejected(client):
    response = await client.get("/", headers={"Content-Length": "abc"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid Content-Length header"


async def test_oversized_request_is_rejected(client):
    response = await client.get("/", headers={"Content-Length": str(16 * 1024 * 1024)})

    assert response.status_code == 413
