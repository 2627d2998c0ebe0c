from __future__ import annotations

from typing import Any

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestClient, TestServer

from conftest import make_settings
from volmatch.config import AppConfig, RateLimit
from volmatch.container import build_container
from volmatch.web.app import create_app


@pytest_asyncio.fixture
async def client(container):
    async with TestClient(TestServer(create_app(container, close_container=False))) as cl:
        yield cl


async def signup(client: TestClient, username: str, role: str = "volunteer", **extra: Any) -> dict[str, str]:
    body = {
        "name": username.title(),
        "username": username,
        "email": f"{username}@example.org",
        "password": "secret123",
        "role": role,
        **extra,
    }
    resp = await client.post("/api/auth/register", json=body)
    assert resp.status == 201, await resp.text()
    data = await resp.json()
    return {"Authorization": f"Bearer {data['token']}"}


async def post_opportunity(client: TestClient, headers: dict[str, str], **body: Any) -> dict[str, Any]:
    body.setdefault("description", "Help out")
    resp = await client.post("/api/opportunities", json=body, headers=headers)
    assert resp.status == 201, await resp.text()
    return (await resp.json())["opportunity"]


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status == 200
    assert await resp.text() == "OK"


@pytest.mark.asyncio
async def test_register_login_me(client):
    await signup(client, "alice", skills=["python"])
    resp = await client.post("/api/auth/login", json={"email": "alice@example.org", "password": "secret123"})
    assert resp.status == 200
    data = await resp.json()
    assert "password" not in data["user"] and "passwordHash" not in data["user"]

    resp = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
    me = (await resp.json())["user"]
    assert me["username"] == "alice" and me["role"] == "volunteer" and me["skills"] == ["python"]


@pytest.mark.asyncio
async def test_auth_errors(client):
    resp = await client.get("/api/opportunities/recommended")
    assert resp.status == 401
    assert (await resp.json())["code"] == "unauthenticated"

    resp = await client.get("/api/opportunities/recommended", headers={"Authorization": "Bearer nope"})
    assert resp.status == 401

    resp = await client.get("/api/auth/me", headers={"Authorization": "Basic abc"})
    assert resp.status == 401

    resp = await client.post("/api/auth/login", json={"email": "x@example.org", "password": "whatever"})
    assert resp.status == 401


@pytest.mark.asyncio
async def test_bad_token_on_public_route_is_anonymous(client):
    np_h = await signup(client, "helpers", role="nonprofit")
    opp = await post_opportunity(client, np_h, title="Garden")
    bad_token = {"Authorization": "Bearer not.a.jwt"}

    resp = await client.get("/api/opportunities", headers=bad_token)
    assert resp.status == 200
    assert [o["id"] for o in (await resp.json())["opportunities"]] == [opp["id"]]
    resp = await client.get(f"/api/opportunities/{opp['id']}", headers={"Authorization": "Basic abc"})
    assert resp.status == 200

    resp = await client.get("/api/opportunities/my", headers=bad_token)
    assert resp.status == 401
    assert (await resp.json())["message"] == "Not authorized, token failed"


@pytest.mark.asyncio
async def test_invalid_payloads(client):
    resp = await client.post("/api/auth/register", data="{not json", headers={"Content-Type": "application/json"})
    assert resp.status == 400

    resp = await client.post("/api/auth/register", json={"name": "A", "role": "volunteer"})
    assert resp.status == 400
    body = await resp.json()
    assert body["code"] == "invalid" and body["errors"]

    resp = await client.get("/api/opportunities", params={"status": "archived"})
    assert resp.status == 400


@pytest.mark.asyncio
async def test_duplicate_user(client):
    await signup(client, "alice")
    resp = await client.post(
        "/api/auth/register",
        json={"name": "A", "username": "alice", "email": "other@example.org", "password": "secret123", "role": "volunteer"},
    )
    assert resp.status == 409


@pytest.mark.asyncio
async def test_recommended_opportunities(client):
    np_h = await signup(client, "helpers", role="nonprofit")
    vol_h = await signup(client, "alice", skills=["python", "design"], interests=["education"])
    o1 = await post_opportunity(
        client, np_h, title="Coding club", description="Education outreach", skillsRequired=["python", "writing"]
    )
    o2 = await post_opportunity(client, np_h, title="Poster help", skillsRequired=["design"])

    resp = await client.get("/api/opportunities/recommended", headers=vol_h)
    assert resp.status == 200
    out = (await resp.json())["opportunities"]
    assert [(o["id"], o["matchScore"]) for o in out] == [(o1["id"], 2), (o2["id"], 1)]
    assert out[0]["nonprofit"]["username"] == "helpers"
    assert "email" not in out[0]["nonprofit"]

    resp = await client.get("/api/opportunities/recommended", headers=np_h)
    assert resp.status == 403
    assert (await resp.json())["code"] == "forbidden"


@pytest.mark.asyncio
async def test_recommended_volunteers_redacted(client):
    np_h = await signup(client, "helpers", role="nonprofit")
    other_h = await signup(client, "others", role="nonprofit")
    await signup(client, "alice", skills=["python"], interests=["animals"])
    opp = await post_opportunity(client, np_h, title="Site", skillsRequired=["python"])

    resp = await client.get(f"/api/opportunities/{opp['id']}/recommended-volunteers", headers=np_h)
    assert resp.status == 200
    vols = (await resp.json())["volunteers"]
    assert vols[0]["username"] == "alice" and vols[0]["matchScore"] == 1
    for private in ("email", "resume", "volunteerForm", "socialLinks", "matchingProfile", "password"):
        assert private not in vols[0]

    resp = await client.get(f"/api/opportunities/{opp['id']}/recommended-volunteers", headers=other_h)
    assert resp.status == 403
    resp = await client.get(f"/api/opportunities/{opp['id'] + 50}/recommended-volunteers", headers=np_h)
    assert resp.status == 404


@pytest.mark.asyncio
async def test_opportunity_lifecycle(client):
    np_h = await signup(client, "helpers", role="nonprofit")
    vol_h = await signup(client, "alice")
    opp = await post_opportunity(client, np_h, title="Garden", description="Plant <b>trees</b> &amp; shrubs")
    assert opp["description"] == "Plant <b>trees</b> &amp; shrubs"
    assert "trees" in opp["keywords"]

    resp = await client.post("/api/opportunities", json={"title": "X", "description": "Y"}, headers=vol_h)
    assert resp.status == 403

    resp = await client.put(f"/api/opportunities/{opp['id']}", json={"title": "Orchard"}, headers=np_h)
    assert resp.status == 200
    assert "orchard" in (await resp.json())["opportunity"]["keywords"]

    resp = await client.get(f"/api/opportunities/{opp['id']}")
    detail = (await resp.json())["opportunity"]
    assert detail["title"] == "Orchard"
    assert "organizationDescription" in detail["nonprofit"]

    resp = await client.get("/api/opportunities/my", headers=np_h)
    assert [o["id"] for o in (await resp.json())["opportunities"]] == [opp["id"]]

    resp = await client.post(f"/api/opportunities/{opp['id']}/close", headers=np_h)
    assert (await resp.json())["opportunity"]["status"] == "closed"
    resp = await client.get("/api/opportunities", params={"status": "open"})
    assert (await resp.json())["opportunities"] == []

    resp = await client.delete(f"/api/opportunities/{opp['id']}", headers=vol_h)
    assert resp.status == 403
    resp = await client.delete(f"/api/opportunities/{opp['id']}", headers=np_h)
    assert resp.status == 200
    resp = await client.get(f"/api/opportunities/{opp['id']}")
    assert resp.status == 404


@pytest.mark.asyncio
async def test_applications(client):
    np_h = await signup(client, "helpers", role="nonprofit")
    vol_h = await signup(client, "alice")
    opp = await post_opportunity(client, np_h, title="Garden")

    resp = await client.post(f"/api/opportunities/{opp['id']}/applications", headers=vol_h)
    assert resp.status == 201
    app = (await resp.json())["application"]
    resp = await client.post(f"/api/opportunities/{opp['id']}/applications", headers=vol_h)
    assert resp.status == 409

    resp = await client.get("/api/applications/mine", headers=vol_h)
    assert [a["opportunityTitle"] for a in (await resp.json())["applications"]] == ["Garden"]

    resp = await client.get(f"/api/opportunities/{opp['id']}/applications", headers=vol_h)
    assert resp.status == 403
    resp = await client.get(f"/api/opportunities/{opp['id']}/applications", headers=np_h)
    listed = (await resp.json())["applications"]
    assert listed[0]["volunteer"]["email"] == "alice@example.org"

    resp = await client.post(f"/api/applications/{app['id']}/reject", headers=np_h)
    assert (await resp.json())["application"]["status"] == "rejected"
    resp = await client.post(f"/api/applications/{app['id']}/accept", headers=np_h)
    assert resp.status == 409


@pytest.mark.asyncio
async def test_profiles(client):
    vol_h = await signup(client, "alice", skills=["python"])
    np_h = await signup(client, "helpers", role="nonprofit")
    me = (await (await client.get("/api/auth/me", headers=vol_h)).json())["user"]

    resp = await client.get(f"/api/users/{me['id']}", headers=np_h)
    public = (await resp.json())["user"]
    assert public["username"] == "alice" and "email" not in public

    resp = await client.put(f"/api/users/{me['id']}", json={"school": "MIT"}, headers=np_h)
    assert resp.status == 403
    resp = await client.put(f"/api/users/{me['id']}", json={"school": "MIT", "profilePhoto": "p.png"}, headers=vol_h)
    user = (await resp.json())["user"]
    assert user["school"] == "MIT" and user["profilePhoto"] == "p.png" and user["email"] == "alice@example.org"

    resp = await client.get("/api/users/volunteers", headers=np_h)
    assert [v["username"] for v in (await resp.json())["volunteers"]] == ["alice"]


@pytest.mark.asyncio
async def test_rate_limit():
    c = await build_container(make_settings(), AppConfig(ratelimit=RateLimit(per_user_per_minute=3)))
    async with TestClient(TestServer(create_app(c))) as client:
        statuses = [(await client.get("/health")).status for _ in range(5)]
    assert statuses == [200, 200, 200, 429, 429]


@pytest.mark.asyncio
async def test_rejected_tokens_count_against_rate_limit():
    c = await build_container(make_settings(), AppConfig(ratelimit=RateLimit(per_user_per_minute=2)))
    bad = {"Authorization": "Bearer forged"}
    async with TestClient(TestServer(create_app(c))) as client:
        statuses = [(await client.get("/api/auth/me", headers=bad)).status for _ in range(4)]
    assert statuses == [401, 401, 429, 429]
