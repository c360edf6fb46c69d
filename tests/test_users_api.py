"""
HTTP-level tests: the FastAPI app wired to a mongomock client.
"""
from __future__ import annotations

import sys
from pathlib import Path

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import restapi.app as app_module  # noqa: E402
from restapi.app import create_app  # noqa: E402
from restapi.core import config as core_config  # noqa: E402

USER = {"firstname": "A", "lastname": "B", "email": "a@b.com", "dob": "2000-01-01", "bio": "x"}
FIELDS = tuple(USER)


@pytest.fixture()
def mongo_client():
    return mongomock.MongoClient()


@pytest.fixture()
def client(monkeypatch, mongo_client):
    monkeypatch.setenv("MONGO_DB_NAME", "restapi_test")
    core_config.get_settings.cache_clear()
    app = create_app(mongo_client=mongo_client)
    with TestClient(app) as test_client:
        yield test_client
    core_config.get_settings.cache_clear()


@pytest.fixture()
def users_collection(mongo_client):
    return mongo_client["restapi_test"]["users"]


def _create(client, **overrides) -> dict:
    resp = client.post("/users", json={**USER, **overrides})
    assert resp.status_code == 201
    users = client.get("/users").json()
    return users[-1]


def test_root(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json() == {"message": "RESTAPI root"}


def test_create_then_list(client):
    resp = client.post("/users", json=USER)
    assert resp.status_code == 201
    assert resp.json() == {"success": True, "message": "New user account created"}

    listing = client.get("/users")
    assert listing.status_code == 200
    users = listing.json()
    assert len(users) == 1
    for name in FIELDS:
        assert users[0][name] == USER[name]
    assert ObjectId.is_valid(users[0]["_id"])


def test_create_accepts_urlencoded_form(client):
    resp = client.post("/users", data=USER)
    assert resp.status_code == 201
    assert client.get("/users").json()[0]["email"] == "a@b.com"


@pytest.mark.parametrize("field", FIELDS)
def test_create_missing_field_is_400_and_adds_nothing(client, field):
    payload = {k: v for k, v in USER.items() if k != field}
    resp = client.post("/users", json=payload)
    assert resp.status_code == 400
    assert resp.json() == {"error": "All fields are required", "fields": [field]}
    assert client.get("/users").json() == []


def test_create_with_malformed_json_is_400(client):
    resp = client.post("/users", content=b"{not json", headers={"content-type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Malformed JSON body"


def test_create_with_empty_body_is_400(client):
    resp = client.post("/users")
    assert resp.status_code == 400


def test_get_user(client):
    created = _create(client)
    resp = client.get(f"/users/{created['_id']}")
    assert resp.status_code == 200
    assert resp.json() == created


@pytest.mark.parametrize("method", ["get", "patch", "delete"])
def test_malformed_id_is_400_without_mutation(client, method, users_collection):
    _create(client)
    kwargs = {"json": {"bio": "changed"}} if method == "patch" else {}
    resp = getattr(client, method)("/users/not-an-id", **kwargs)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid user ID"}
    assert users_collection.count_documents({}) == 1
    assert users_collection.find_one()["bio"] == "x"


@pytest.mark.parametrize("method", ["get", "patch", "delete"])
def test_unknown_id_is_404(client, method):
    kwargs = {"json": {"bio": "changed"}} if method == "patch" else {}
    resp = getattr(client, method)(f"/users/{ObjectId()}", **kwargs)
    assert resp.status_code == 404
    assert resp.json() == {"error": "User not found"}


def test_patch_changes_exactly_one_field(client):
    created = _create(client)
    before = client.get(f"/users/{created['_id']}").json()

    resp = client.patch(f"/users/{created['_id']}", json={"lastname": "C"})
    assert resp.status_code == 200
    assert resp.json()["lastname"] == "C"

    after = client.get(f"/users/{created['_id']}").json()
    changed = [name for name in FIELDS if before[name] != after[name]]
    assert changed == ["lastname"]
    assert after["_id"] == before["_id"]


def test_patch_with_empty_value_is_400(client):
    created = _create(client)
    resp = client.patch(f"/users/{created['_id']}", json={"firstname": ""})
    assert resp.status_code == 400
    assert client.get(f"/users/{created['_id']}").json()["firstname"] == "A"


def test_delete_user_then_404(client):
    created = _create(client)
    resp = client.delete(f"/users/{created['_id']}")
    assert resp.status_code == 200
    assert resp.json() == {"message": "user deleted"}
    assert client.get(f"/users/{created['_id']}").status_code == 404
    assert client.delete(f"/users/{created['_id']}").status_code == 404


@pytest.mark.parametrize("count", [0, 1, 3])
def test_delete_all_users(client, count):
    for i in range(count):
        _create(client, firstname=f"user{i}")
    resp = client.delete("/users")
    assert resp.status_code == 200
    assert resp.json() == {"message": "all users deleted"}
    assert client.get("/users").json() == []


def test_email_is_not_unique(client):
    _create(client)
    _create(client)
    assert len(client.get("/users").json()) == 2


def test_unknown_route_uses_error_shape(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not Found"}


def test_database_failure_is_500_with_message(client, monkeypatch):
    svc = client.app.state.user_service

    def boom():
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(svc.repository, "list_users", boom)
    resp = client.get("/users")
    assert resp.status_code == 500
    assert resp.json() == {"error": "database unavailable"}


def test_create_ignores_body_without_json_content_type(client):
    resp = client.post("/users", content=b'{"firstname": "A"}', headers={"content-type": "text/plain"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "All fields are required"
    assert client.get("/users").json() == []


def test_patch_unknown_id_with_empty_value_is_404(client):
    resp = client.patch(f"/users/{ObjectId()}", json={"firstname": ""})
    assert resp.status_code == 404
    assert resp.json() == {"error": "User not found"}


def test_patch_accepts_urlencoded_form(client):
    created = _create(client)
    resp = client.patch(f"/users/{created['_id']}", data={"bio": "from a form"})
    assert resp.status_code == 200
    assert resp.json()["bio"] == "from a form"
    assert resp.json()["firstname"] == "A"


def test_fallback_500_carries_cors_headers(monkeypatch, mongo_client):
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test")
    core_config.get_settings.cache_clear()
    app = create_app(mongo_client=mongo_client)

    def boom():
        raise RuntimeError("database unavailable")

    with TestClient(app) as test_client:
        monkeypatch.setattr(app.state.user_service.repository, "list_users", boom)
        resp = test_client.get("/users", headers={"Origin": "http://a.test"})
    core_config.get_settings.cache_clear()

    assert resp.status_code == 500
    assert resp.json() == {"error": "database unavailable"}
    assert resp.headers["access-control-allow-origin"] == "http://a.test"


class TrackingClient(mongomock.MongoClient):
    closed = False

    def close(self):
        self.closed = True


def test_lifespan_builds_and_closes_its_own_client(monkeypatch):
    monkeypatch.setenv("MONGO_DB_NAME", "restapi_test")
    core_config.get_settings.cache_clear()
    created = []

    def fake_create_client(settings):
        created.append(TrackingClient())
        return created[-1]

    monkeypatch.setattr(app_module, "create_client", fake_create_client)
    app = create_app()
    with TestClient(app) as test_client:
        assert test_client.post("/users", json=USER).status_code == 201
        assert app.state.mongo_client is created[0]
        assert created[0]["restapi_test"]["users"].count_documents({}) == 1
    core_config.get_settings.cache_clear()

    assert len(created) == 1
    assert created[0].closed is True


def test_lifespan_leaves_injected_client_open():
    injected = TrackingClient()
    with TestClient(create_app(mongo_client=injected)) as test_client:
        assert test_client.get("/").status_code == 200
    assert injected.closed is False
