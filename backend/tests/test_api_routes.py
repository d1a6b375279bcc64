from __future__ import annotations

import uuid
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from yda_portal.api.deps.auth import CurrentSession, get_current_session
from yda_portal.core.database import get_db
from yda_portal.main import app
from yda_portal.models import Program
from yda_portal.models.user import AppRole
from yda_portal.services.content_store import ContentConflict, content_store


async def _no_db():
    yield None


@pytest.fixture
def client():
    app.dependency_overrides[get_db] = _no_db
    # No context manager: lifespan (database, redis) stays off
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


def _signed_in(role):
    session = CurrentSession(
        user=SimpleNamespace(id=uuid.uuid4(), email="editor@yda.test"),
        role=role,
        session_id="s-1",
        access_token="token",
    )

    async def _override():
        return session

    app.dependency_overrides[get_current_session] = _override
    return session


def test_unknown_route_gets_envelope_with_fallbacks(client):
    response = client.get("/api/v1/no-such-page")

    assert response.status_code == 404
    body = response.json()
    assert body["ok"] is False
    assert body["error"]["code"] == "not_found"
    paths = [link["path"] for link in body["error"]["details"]["fallbacks"]]
    assert paths == ["/ar", "/en", "/api/v1/public/ar/home", "/api/v1/public/en/home"]


def test_unsupported_locale_redirects_to_arabic(client):
    response = client.get("/api/v1/public/fr/programs?page=2", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"] == "/api/v1/public/ar/programs?page=2"


def test_public_list_carries_locale_meta(client, monkeypatch):
    program = Program(
        id=uuid.uuid4(),
        slug="camps",
        title={"ar": "مخيمات", "en": "Camps"},
        status="published",
    )

    async def select(db, model, **kwargs):
        return [program]

    monkeypatch.setattr(content_store, "select", select)
    response = client.get("/api/v1/public/ar/programs")

    assert response.status_code == 200
    body = response.json()
    assert body["meta"]["locale"] == "ar"
    assert body["meta"]["direction"] == "rtl"
    assert body["meta"]["alternate"] == "en"
    assert body["meta"]["total"] == 1


def test_admin_route_without_token_is_401(client):
    response = client.get("/api/v1/admin/menu")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "not_authenticated"


def test_account_without_role_gets_role_required(client):
    _signed_in(None)
    response = client.get("/api/v1/admin/overview")

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "role_required"


def test_viewer_cannot_write_content(client):
    _signed_in(AppRole.VIEWER)
    response = client.post(
        "/api/v1/admin/programs",
        json={"title": {"ar": "برنامج", "en": "Program"}},
    )

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "forbidden"


def test_menu_for_role_without_access_is_empty(client):
    _signed_in(None)
    response = client.get("/api/v1/admin/menu")

    assert response.status_code == 200
    assert response.json()["data"]["items"] == []


def test_duplicate_slug_maps_to_409(client, monkeypatch):
    _signed_in(AppRole.EDITOR)

    async def insert(*args, **kwargs):
        raise ContentConflict("program violates a unique constraint")

    monkeypatch.setattr(content_store, "insert", insert)
    response = client.post(
        "/api/v1/admin/programs",
        json={"title": {"ar": "برنامج", "en": "Program"}},
    )

    assert response.status_code == 409
    assert response.json()["error"]["details"]["fields"] == {"slug": "Slug already in use"}


def test_invalid_admin_payload_reports_fields(client):
    _signed_in(AppRole.SUPERADMIN)
    response = client.post(
        "/api/v1/admin/events",
        json={
            "title": {"ar": "يوم", "en": "Day"},
            "slug": "Not A Slug",
            "start_at": "2026-11-14T10:00:00Z",
            "end_at": "2026-11-14T09:00:00Z",
        },
    )

    assert response.status_code == 422
    fields = response.json()["error"]["details"]["fields"]
    assert set(fields) == {"slug", "end_at"}


def test_contact_form_with_bad_email(client):
    response = client.post(
        "/api/v1/public/en/contact",
        json={"name": "Sara", "email": "not-an-email", "message": "Hello there, I need help."},
    )

    assert response.status_code == 422
    body = response.json()
    assert body["error"]["code"] == "validation_error"
    assert "email" in body["error"]["details"]["fields"]


def test_live_stream_rejects_unknown_tables(client):
    response = client.get("/api/v1/admin/live?tables=kpis,secrets")

    assert response.status_code == 400
    body = response.json()
    assert body["error"]["code"] == "unknown_table"
    assert "kpis" in body["error"]["details"]["allowed"]


def test_health_and_request_ids(client):
    response = client.get("/health", headers={"x-request-id": "req-abc"})

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.headers["x-request-id"] == "req-abc"
