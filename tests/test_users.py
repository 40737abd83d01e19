"""
User endpoint tests — registration, login and reading one's own profile.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mingle.models import User
from mingle.stores.sql import SqlUserStore


# ---------------------------------------------------------------------------
# Register
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_register_user(async_client: AsyncClient):
    """Registering returns 201 with the user, a token and an auth cookie."""
    resp = await async_client.post("/users/register", json={
        "email": "a@b.com",
        "firstName": "A",
        "lastName": "B",
        "password": "pw",
    })
    assert resp.status_code == 201
    user = resp.json()
    assert user["email"] == "a@b.com"
    assert user["firstName"] == "A"
    assert user["lastName"] == "B"
    assert "id" in user
    assert "createdAt" in user
    assert user["token"]
    assert "password" not in user
    assert resp.cookies.get("Authorization") == user["token"]


@pytest.mark.asyncio
async def test_register_stores_hashed_password(async_client: AsyncClient, db_session: AsyncSession):
    resp = await async_client.post("/users/register", json={
        "email": "hash@mingle.io", "firstName": "H", "lastName": "S", "password": "plain-secret",
    })
    assert resp.status_code == 201

    stored = (await db_session.execute(select(User.password))).scalar_one()
    assert stored != "plain-secret"
    assert stored.startswith("$2")


@pytest.mark.asyncio
async def test_register_duplicate_email(async_client: AsyncClient, db_session: AsyncSession):
    """Reusing an email returns 400 and no second row is written."""
    payload = {"email": "dup@mingle.io", "firstName": "D", "lastName": "U", "password": "pw"}
    resp1 = await async_client.post("/users/register", json=payload)
    assert resp1.status_code == 201

    resp2 = await async_client.post("/users/register", json={**payload, "firstName": "Other"})
    assert resp2.status_code == 400
    assert "already exists" in resp2.json()["message"]

    count = (await db_session.execute(select(func.count()).select_from(User))).scalar_one()
    assert count == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {"firstName": "A", "lastName": "B", "password": "pw"},
    {"email": "not-an-email", "firstName": "A", "lastName": "B", "password": "pw"},
    {"email": "x@mingle.io", "lastName": "B", "password": "pw"},
    {"email": "x@mingle.io", "firstName": "A", "lastName": "B"},
    {"email": "x@mingle.io", "firstName": "", "lastName": "B", "password": "pw"},
])
async def test_register_invalid_payload(async_client: AsyncClient, payload: dict):
    resp = await async_client.post("/users/register", json=payload)
    assert resp.status_code == 400
    body = resp.json()
    assert set(body) == {"timestamp", "message"}


@pytest.mark.asyncio
async def test_register_malformed_json(async_client: AsyncClient):
    resp = await async_client.post(
        "/users/register",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_login_returns_working_token(async_client: AsyncClient, register_user):
    user_id, _ = await register_user("login", email="login@mingle.io")

    resp = await async_client.post("/users/login", json={"email": "login@mingle.io", "password": "pw"})
    assert resp.status_code == 200
    token = resp.json()["token"]
    assert resp.cookies.get("Authorization") == token

    me = await async_client.get(f"/users/{user_id}", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize("email,password", [
    ("login@mingle.io", "wrong"),
    ("nobody@mingle.io", "pw"),
])
async def test_login_failures_are_uniform(async_client: AsyncClient, register_user, email, password):
    await register_user("login", email="login@mingle.io")

    resp = await async_client.post("/users/login", json={"email": email, "password": password})
    assert resp.status_code == 401
    assert resp.json()["message"] == "user is not authorized"


# ---------------------------------------------------------------------------
# Get user
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_get_self(async_client: AsyncClient):
    """A registered user can read back their own profile, never the password."""
    reg = await async_client.post("/users/register", json={
        "email": "self@mingle.io", "firstName": "Self", "lastName": "Reader", "password": "pw",
    })
    body = reg.json()

    resp = await async_client.get(
        f"/users/{body['id']}", headers={"Authorization": f"Bearer {body['token']}"}
    )
    assert resp.status_code == 200
    user = resp.json()
    assert user["id"] == body["id"]
    assert user["email"] == "self@mingle.io"
    assert user["firstName"] == "Self"
    assert user["lastName"] == "Reader"
    assert "password" not in user


@pytest.mark.asyncio
async def test_get_other_user_forbidden(async_client: AsyncClient, register_user):
    alice_id, _ = await register_user("alice")
    _, bob_headers = await register_user("bob")

    resp = await async_client.get(f"/users/{alice_id}", headers=bob_headers)
    assert resp.status_code == 403
    assert resp.json()["message"] == "access denied"


@pytest.mark.asyncio
async def test_get_user_requires_auth(async_client: AsyncClient, register_user):
    user_id, _ = await register_user()

    resp = await async_client.get(f"/users/{user_id}")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_get_user_bad_id(async_client: AsyncClient, register_user):
    _, headers = await register_user()

    resp = await async_client.get("/users/abc", headers=headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_register_duplicate_email_caught_by_unique_constraint(
    async_client: AsyncClient,
    db_session: AsyncSession,
    monkeypatch,
):
    """Two registrations that both pass the email pre-check still yield one row."""
    async def _no_match(self, email):
        return None

    monkeypatch.setattr(SqlUserStore, "get_by_email", _no_match)

    payload = {"email": "race@mingle.io", "firstName": "R", "lastName": "C", "password": "pw"}
    assert (await async_client.post("/users/register", json=payload)).status_code == 201

    resp = await async_client.post("/users/register", json=payload)
    assert resp.status_code == 400
    assert "already exists" in resp.json()["message"]

    count = (await db_session.execute(select(func.count()).select_from(User))).scalar_one()
    assert count == 1
