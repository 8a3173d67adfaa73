"""
JSON API: registration, login, `/api/me` and administrator actions.

Scenarios follow the teacher onboarding flow end to end: register (pending),
admin approves, teacher logs in and lands on the teacher home.
"""
from __future__ import annotations

import httpx
import pytest
from httpx import ASGITransport

from educa.identity_access.domain import SEED_ADMIN, UserStatus
from educa.web.main import create_app

pytestmark = pytest.mark.anyio


def _client(platform) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=ASGITransport(app=create_app(platform)), base_url="http://test")


def _assert_private(r: httpx.Response) -> None:
    cc = r.headers.get("Cache-Control", "")
    assert "private" in cc and "no-store" in cc


async def test_me_without_session(platform):
    async with _client(platform) as c:
        r = await c.get("/api/me")
    assert r.status_code == 200
    assert r.json() == {"user": None, "verdict": "DENY_UNAUTHENTICATED", "view": "AUTH"}
    _assert_private(r)


async def test_student_registration_logs_in(platform):
    async with _client(platform) as c:
        r = await c.post(
            "/api/auth/register",
            json={"role": "STUDENT", "name": "Leo", "email": "leo@x.com", "grade": "5° Ano"},
        )
        me = await c.get("/api/me")
    assert r.status_code == 201
    body = r.json()
    assert body["outcome"] == "SESSION_STARTED"
    assert body["view"] == "STUDENT_HOME"
    assert me.json()["user"]["email"] == "leo@x.com"


async def test_teacher_onboarding_flow(platform):
    async with _client(platform) as c:
        r = await c.post(
            "/api/auth/register",
            json={
                "role": "TEACHER",
                "name": "Ana",
                "email": "ana@x.com",
                "teaching_grades": ["5° Ano"],
                "teaching_subjects": ["Matemática"],
            },
        )
        assert r.status_code == 202
        teacher_id = r.json()["user"]["id"]
        assert r.json()["user"]["status"] == "PENDING"
        assert (await c.get("/api/me")).json()["user"] is None

        r = await c.post("/api/auth/login", json={"email": "ana@x.com"})
        assert r.json()["view"] == "PENDING_APPROVAL"
        r = await c.get("/api/materials")
        assert r.status_code == 403 and r.json()["detail"] == "pending_approval"

        await c.post("/api/auth/login", json={"email": SEED_ADMIN.email})
        pending = await c.get("/api/admin/users", params={"status": "pending"})
        assert [u["id"] for u in pending.json()] == [teacher_id]
        r = await c.post(f"/api/admin/users/{teacher_id}/approve")
        assert r.status_code == 200 and r.json()["status"] == "ACTIVE"

        r = await c.post("/api/auth/login", json={"email": "ana@x.com"})
        assert r.json()["verdict"] == "ALLOW"
        assert r.json()["view"] == "TEACHER_HOME"
    assert platform.repo.get_user(teacher_id).status is UserStatus.ACTIVE


async def test_register_refusals(platform):
    async with _client(platform) as c:
        admin = await c.post("/api/auth/register", json={"role": "ADMIN", "name": "X", "email": "x@x.com"})
        dup = await c.post("/api/auth/register", json={"role": "STUDENT", "name": "Y", "email": SEED_ADMIN.email})
        bad = await c.post(
            "/api/auth/register", json={"role": "STUDENT", "name": "Z", "email": "z@x.com", "grade": "12° Ano"}
        )
        blank = await c.post("/api/auth/register", json={"role": "STUDENT", "name": "  ", "email": "b@x.com"})
    assert admin.status_code == 403 and admin.json()["detail"] == "admin_reserved"
    assert dup.status_code == 409 and dup.json()["detail"] == "duplicate_email"
    assert bad.status_code == 400
    assert blank.status_code == 422
    _assert_private(dup)


async def test_login_unknown_email_and_logout(platform):
    async with _client(platform) as c:
        r = await c.post("/api/auth/login", json={"email": "nobody@x.com"})
        assert r.status_code == 401 and r.json() == {"error": "invalid_credentials"}
        await c.post("/api/auth/login", json={"email": SEED_ADMIN.email})
        r = await c.post("/api/auth/logout")
        assert r.status_code == 204
        assert (await c.get("/api/me")).json()["view"] == "AUTH"


async def test_login_matches_email_exactly(platform):
    async with _client(platform) as c:
        padded = await c.post("/api/auth/login", json={"email": f" {SEED_ADMIN.email} "})
        upper = await c.post("/api/auth/login", json={"email": SEED_ADMIN.email.upper()})
        me = await c.get("/api/me")
    assert padded.status_code == 401 and upper.status_code == 401
    assert me.json()["view"] == "AUTH"


async def test_admin_routes_require_admin(platform, student):
    platform.sessions.register(student)
    async with _client(platform) as c:
        r = await c.get("/api/admin/users")
        assert r.status_code == 403 and r.json() == {"error": "forbidden"}
        await c.post("/api/auth/logout")
        r = await c.get("/api/admin/users")
        assert r.status_code == 401


async def test_admin_action_errors(platform, teacher):
    platform.sessions.register(teacher)
    platform.sessions.login(SEED_ADMIN.email)
    async with _client(platform) as c:
        unknown_action = await c.post(f"/api/admin/users/{teacher.id}/promote")
        unknown_user = await c.post("/api/admin/users/missing/approve")
        admin_target = await c.post(f"/api/admin/users/{SEED_ADMIN.id}/suspend")
        await c.post(f"/api/admin/users/{teacher.id}/reject")
        rejected = await c.post(f"/api/admin/users/{teacher.id}/approve")
        search = await c.get("/api/admin/users", params={"q": "carlos"})
    assert unknown_action.status_code == 400
    assert unknown_user.status_code == 404
    assert admin_target.status_code == 409 and admin_target.json()["detail"] == "admin_immutable"
    assert rejected.status_code == 409 and rejected.json()["detail"] == "invalid_transition"
    assert [u["email"] for u in search.json()] == [teacher.email]
