from httpx import AsyncClient

from level.server.services import AccountService

SIGN_UP = {
    "email": "Dana@Example.com",
    "password": "correct-horse",
    "first_name": "Dana",
    "last_name": "Scully",
    "handle": "dana",
}


async def test_sign_up(client: AsyncClient, session):
    response = await client.post("/api/v1/users", json=SIGN_UP)

    assert response.status_code == 201
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["expires_in"] > 0
    assert data["user"]["handle"] == "dana"
    assert data["user"]["time_zone"] == "UTC"
    assert "password" not in data["user"]
    user = await AccountService(session).verify_token(data["token"])
    assert user.id == data["user"]["id"]


async def test_sign_up_validation(client: AsyncClient):
    response = await client.post("/api/v1/users", json={**SIGN_UP, "password": "123", "handle": "no spaces"})

    assert response.status_code == 422
    errors = {(e["attribute"], e["message"]) for e in response.json()["errors"]}
    assert ("password", "should be at least 6 character(s)") in errors
    assert ("handle", "must contain letters, numbers, and dashes only") in errors


async def test_sign_up_taken_email(client: AsyncClient):
    await client.post("/api/v1/users", json=SIGN_UP)

    response = await client.post("/api/v1/users", json={**SIGN_UP, "handle": "other", "email": "dana@example.com"})

    assert response.status_code == 422
    assert response.json()["errors"][0]["attribute"] == "email"


async def test_sign_up_missing_fields(client: AsyncClient):
    response = await client.post("/api/v1/users", json={"email": "x@example.com"})
    assert response.status_code == 422
