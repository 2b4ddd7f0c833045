import json
import string

import pytest
from flask import Flask

from notely.database import NoteRecord, Queries, connect
from notely.handlers import ApiConfig, generate_api_key, readiness

SCHEMA = """
CREATE TABLE users (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    name TEXT NOT NULL,
    api_key TEXT UNIQUE NOT NULL
);
CREATE TABLE notes (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    note TEXT NOT NULL,
    user_id TEXT NOT NULL
);
"""


@pytest.fixture
def app():
    return Flask(__name__)


@pytest.fixture
def queries():
    conn = connect(":memory:")
    conn.executescript(SCHEMA)
    yield Queries(conn)
    conn.close()


@pytest.fixture
def cfg(queries):
    return ApiConfig(queries)


def _body(response):
    return json.loads(response.get_data(as_text=True))


def _create_user(app, cfg, name="alice"):
    with app.test_request_context("/v1/users", method="POST", json={"name": name}):
        response = cfg.users_create()
    assert response.status_code == 201
    return _body(response)


def test_generate_api_key_is_hex_sha256():
    key = generate_api_key()
    assert len(key) == 64
    assert set(key) <= set(string.hexdigits.lower())
    assert generate_api_key() != key


def test_readiness(app):
    with app.test_request_context("/v1/healthz"):
        response = readiness()
    assert response.status_code == 200
    assert _body(response) == {"status": "ok"}


def test_users_create_stores_user(app, cfg, queries):
    body = _create_user(app, cfg, "alice")
    assert body["name"] == "alice"
    stored = queries.get_user(body["api_key"])
    assert stored.id == body["id"]
    assert body["created_at"].endswith("Z")
    assert body["created_at"] == stored.created_at


def test_users_create_missing_name_is_empty(app, cfg):
    with app.test_request_context("/v1/users", method="POST", json={}):
        response = cfg.users_create()
    assert response.status_code == 201
    assert _body(response)["name"] == ""


def test_users_create_matches_key_case_insensitively(app, cfg):
    with app.test_request_context("/v1/users", method="POST", data='{"NAME": "bob"}'):
        response = cfg.users_create()
    assert _body(response)["name"] == "bob"


@pytest.mark.parametrize("data", ["", "not json", "[1, 2]", '{"name": 5}'])
def test_users_create_bad_body(app, cfg, data):
    with app.test_request_context("/v1/users", method="POST", data=data):
        response = cfg.users_create()
    assert response.status_code == 500
    assert _body(response) == {"error": "Couldn't decode parameters"}


def test_users_create_without_table_fails():
    cfg = ApiConfig(Queries(connect(":memory:")))
    app = Flask(__name__)
    with app.test_request_context("/v1/users", method="POST", json={"name": "x"}):
        response = cfg.users_create()
    assert response.status_code == 500
    assert _body(response) == {"error": "Couldn't create user"}


def test_require_auth_without_header(app, cfg):
    with app.test_request_context("/v1/users"):
        response = cfg.require_auth(cfg.users_get)()
    assert response.status_code == 401
    assert _body(response) == {"error": "Couldn't find api key"}


def test_require_auth_malformed_header(app, cfg):
    with app.test_request_context("/v1/users", headers={"Authorization": "Bearer token"}):
        response = cfg.require_auth(cfg.users_get)()
    assert response.status_code == 401


def test_require_auth_unknown_key(app, cfg):
    with app.test_request_context("/v1/users", headers={"Authorization": "ApiKey placeholder"}):
        response = cfg.require_auth(cfg.users_get)()
    assert response.status_code == 404
    assert _body(response) == {"error": "Couldn't get user"}


def test_users_get_returns_authenticated_user(app, cfg):
    created = _create_user(app, cfg, "carol")
    headers = {"Authorization": f"ApiKey {created['api_key']}"}
    with app.test_request_context("/v1/users", headers=headers):
        response = cfg.require_auth(cfg.users_get)()
    assert response.status_code == 200
    assert _body(response) == created


def test_notes_round_trip(app, cfg):
    created = _create_user(app, cfg)
    headers = {"Authorization": f"ApiKey {created['api_key']}"}
    with app.test_request_context("/v1/notes", method="POST", headers=headers, json={"note": "hello"}):
        response = cfg.require_auth(cfg.notes_create)()
    assert response.status_code == 201
    note = _body(response)
    assert note["note"] == "hello"
    assert note["user_id"] == created["id"]

    with app.test_request_context("/v1/notes", headers=headers):
        response = cfg.require_auth(cfg.notes_get)()
    assert response.status_code == 200
    assert _body(response) == [note]


def test_notes_get_empty(app, cfg):
    created = _create_user(app, cfg)
    headers = {"Authorization": f"ApiKey {created['api_key']}"}
    with app.test_request_context("/v1/notes", headers=headers):
        response = cfg.require_auth(cfg.notes_get)()
    assert _body(response) == []


def test_notes_get_bad_timestamp(app, cfg, queries):
    created = _create_user(app, cfg)
    queries.create_note(NoteRecord("n1", "yesterday", "yesterday", "x", created["id"]))
    headers = {"Authorization": f"ApiKey {created['api_key']}"}
    with app.test_request_context("/v1/notes", headers=headers):
        response = cfg.require_auth(cfg.notes_get)()
    assert response.status_code == 500
    assert _body(response) == {"error": "Couldn't convert posts"}


def test_notes_create_bad_body(app, cfg):
    created = _create_user(app, cfg)
    headers = {"Authorization": f"ApiKey {created['api_key']}"}
    with app.test_request_context("/v1/notes", method="POST", headers=headers, data="{"):
        response = cfg.require_auth(cfg.notes_create)()
    assert response.status_code == 500
    assert _body(response) == {"error": "Couldn't decode parameters"}