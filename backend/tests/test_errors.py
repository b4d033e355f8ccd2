"""Error normalization, bearer-token gate and response shape tests."""

import json
import logging
from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId
from bson.errors import InvalidId
from fastapi.testclient import TestClient
from jose import ExpiredSignatureError, JWTError, jwt
from pymongo.errors import DuplicateKeyError

from tasktracker.core import error_handlers
from tasktracker.core.config import get_settings
from tasktracker.core.errors import AppError, ErrorKind, normalize_error
from tasktracker.core.observability import JSONFormatter
from tasktracker.main import app
from tasktracker.routers import tasks as tasks_router


def _token(**claims) -> str:
    s = get_settings()
    return jwt.encode(claims, s.jwt_secret, algorithm=s.jwt_algorithm)


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


# ───────────────────────── normalize_error ─────────────────────────

@pytest.mark.parametrize(
    "exc, status, message",
    [
        (DuplicateKeyError("E11000 duplicate key", code=11000), 409, "Duplicate field value entered"),
        (InvalidId("bad"), 400, "Invalid Id format"),
        (ExpiredSignatureError("expired"), 401, "Token expired"),
        (JWTError("bad signature"), 401, "Invalid token"),
        (RuntimeError("boom"), 500, "boom"),
    ],
)
def test_normalize_error_mapping(exc, status, message):
    error = normalize_error(exc)
    assert error.status_code == status
    assert error.message == message


def test_normalize_error_passes_app_errors_through():
    original = AppError("Task not found", ErrorKind.NOT_FOUND)
    assert normalize_error(original) is original


# ─────────────────────────── bearer gate ───────────────────────────

@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": "Basic dXNlcjpwYXNz"},
        {"Authorization": "Bearer"},
        {"Authorization": "Bearer    "},
        {"Authorization": "tokenwithoutscheme"},
    ],
)
def test_missing_token(client, headers):
    response = client.get("/tasks", headers=headers)
    assert response.status_code == 401
    assert response.json()["message"] == "Authorization token missing"


def test_garbage_token(client):
    response = client.get("/tasks", headers=_bearer("not.a.jwt"))
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


def test_wrong_signature(client):
    forged = jwt.encode({"sub": str(ObjectId())}, "x" * 40, algorithm="HS256")
    response = client.get("/tasks", headers=_bearer(forged))
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


def test_expired_token(client):
    past = datetime.now(timezone.utc) - timedelta(minutes=5)
    response = client.get("/tasks", headers=_bearer(_token(sub=str(ObjectId()), exp=past)))
    assert response.status_code == 401
    assert response.json()["message"] == "Token expired"


def test_token_without_subject(client):
    response = client.get("/tasks", headers=_bearer(_token(email="a@example.com")))
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


def test_token_with_non_object_id_subject(client):
    response = client.get("/tasks", headers=_bearer(_token(sub="42")))
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


def test_identities_do_not_leak_between_requests(client, auth_headers, other_headers):
    client.post("/tasks", headers=auth_headers, json={"title": "a"})
    client.post("/tasks", headers=other_headers, json={"title": "b"})
    client.post("/tasks", headers=auth_headers, json={"title": "c"})

    mine = client.get("/tasks", headers=auth_headers).json()["tasks"]
    theirs = client.get("/tasks", headers=other_headers).json()["tasks"]
    assert {t["userId"] for t in mine} == {auth_headers.user_id}
    assert {t["userId"] for t in theirs} == {other_headers.user_id}


# ───────────────────────── response shapes ─────────────────────────

def test_unknown_route(client):
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.json() == {"error": "NOT_FOUND", "message": "Route GET /nope not found"}


def test_client_errors_carry_stack_in_development(client):
    response = client.post("/auth/login", json={})
    body = response.json()
    assert response.status_code == 400
    assert body["error"] == "CLIENT_ERROR"
    assert "Traceback" in body["stack"]


@pytest.fixture
def exploding_client(db, monkeypatch, auth_headers):
    async def _boom(*args, **kwargs):
        raise RuntimeError("database on fire")

    monkeypatch.setattr(tasks_router.svc, "list_tasks", _boom)
    # Exception handlers for bare Exception re-raise after responding
    return TestClient(app, raise_server_exceptions=False)


def test_unexpected_error_in_development(exploding_client, auth_headers):
    response = exploding_client.get("/tasks", headers=auth_headers)
    body = response.json()
    assert response.status_code == 500
    assert body["error"] == "INTERNAL_SERVER_ERROR"
    assert body["message"] == "database on fire"
    assert "RuntimeError" in body["stack"]


def test_unexpected_error_in_production(exploding_client, auth_headers, monkeypatch):
    prod = get_settings().model_copy(update={"environment": "production"})
    monkeypatch.setattr(error_handlers, "get_settings", lambda: prod)

    response = exploding_client.get("/tasks", headers=auth_headers)
    body = response.json()
    assert response.status_code == 500
    assert body == {"error": "INTERNAL_SERVER_ERROR", "message": "Internal Server Error"}


def test_staging_never_returns_a_stack(exploding_client, client, auth_headers, monkeypatch):
    staging = get_settings().model_copy(update={"environment": "staging"})
    monkeypatch.setattr(error_handlers, "get_settings", lambda: staging)

    server_error = exploding_client.get("/tasks", headers=auth_headers).json()
    client_error = client.post("/auth/login", json={}).json()
    assert "stack" not in server_error
    assert "stack" not in client_error
    # only production hides the 5xx text
    assert server_error["message"] == "database on fire"


def test_client_errors_keep_message_in_production(client, monkeypatch):
    prod = get_settings().model_copy(update={"environment": "production"})
    monkeypatch.setattr(error_handlers, "get_settings", lambda: prod)

    response = client.post("/auth/login", json={"email": "x@example.com", "password": "nope"})
    assert response.json() == {"error": "CLIENT_ERROR", "message": "Invalid email or password"}


def test_log_severity_follows_status(exploding_client, client, auth_headers, caplog):
    logger_name = error_handlers.logger.name
    with caplog.at_level(logging.WARNING, logger=logger_name):
        client.get("/tasks")
        exploding_client.get("/tasks", headers=auth_headers)

    records = [r for r in caplog.records if r.name == logger_name]
    assert [(r.levelno, r.status_code) for r in records] == [
        (logging.WARNING, 401),
        (logging.ERROR, 500),
    ]
    assert records[1].original_message == "database on fire"
    assert records[1].exc_info is not None


# ─────────────────────────── log format ────────────────────────────

def test_json_formatter_surfaces_request_fields():
    record = logging.LogRecord(
        "tasktracker.test", logging.WARNING, __file__, 1, "Client error", None, None,
    )
    record.status_code = 404
    record.path = "/tasks/x"
    record.unrelated = "dropped"

    out = json.loads(JSONFormatter().format(record))
    assert out["level"] == "WARNING"
    assert out["message"] == "Client error"
    assert out["status_code"] == 404
    assert out["path"] == "/tasks/x"
    assert "unrelated" not in out
