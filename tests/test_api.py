"""
API Dispatch Tests
==================

Route table resolution, error envelopes, CORS preflight and app wiring.
"""

import dataclasses
import os

import pytest
from flask import Flask

from etmsite import EtmSite
from etmsite.core.errors import MethodNotAllowed, NotFound
from etmsite.modules.api import RouteKind, parse_path


# ---------------------------------------------------------------------------
# 1. Extension wiring
# ---------------------------------------------------------------------------

def test_extension_registers_itself(app, ext):
    assert app.extensions["etmsite"] is ext
    assert ext.get_registered_modules() == ["auth", "records", "uploads", "api"]
    assert "api" in app.blueprints


def test_tables_created_on_startup(app, ext):
    with app.app_context():
        tables = ext.db.existing_tables()
    assert tables == ["admins", "auth_tokens", "projects", "partners", "certificates", "app_logs"]


def test_database_dir_is_created(tmp_dir):
    nested = os.path.join(tmp_dir, "nested", "db")
    app = Flask(__name__)
    app.config["DATABASE_URL"] = "sqlite:///" + os.path.join(nested, "etmsite.db")
    app.config["UPLOAD_DIR"] = os.path.join(tmp_dir, "uploads")
    EtmSite(app)

    assert os.path.isdir(nested)
    with app.app_context():
        app.extensions["etmsite"].db.dispose()


# ---------------------------------------------------------------------------
# 2. Route resolution
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("path,expected", [
    ("", ("", None)),
    ("projects", ("projects", None)),
    ("/projects/", ("projects", None)),
    ("projects/12", ("projects", "12")),
    ("auth/login", ("auth", "login")),
])
def test_parse_path(path, expected):
    assert parse_path(path) == expected


def test_parse_path_rejects_nested():
    with pytest.raises(NotFound):
        parse_path("projects/1/images")


def test_route_table_is_tagged(ext):
    kinds = {(route.method, route.resource): route.kind for route in ext.router.routes}

    assert kinds[("POST", "auth/login")] is RouteKind.AUTH
    assert kinds[("GET", "auth/check")] is RouteKind.AUTH
    assert kinds[("POST", "upload")] is RouteKind.UPLOAD
    for resource in ("projects", "partners", "certificates"):
        for method in ("GET", "POST", "PUT", "DELETE"):
            assert kinds[(method, resource)] is RouteKind.RECORDS


def test_only_writes_are_gated(ext):
    for route in ext.router.routes:
        expected = route.kind is not RouteKind.AUTH and route.method != "GET"
        assert route.auth_required is expected, (route.method, route.resource)


def test_resolve_wrong_method(ext):
    with pytest.raises(MethodNotAllowed):
        ext.router.resolve("GET", "auth/login")


# ---------------------------------------------------------------------------
# 3. Error envelopes
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("path", ["/api/", "/api/users", "/api/projects/1/images"])
def test_unknown_route(client, path):
    resp = client.get(path)
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Маршрут не найден"}


def test_unknown_auth_action(client):
    resp = client.post("/api/auth/register", json={})
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Неизвестное действие"}


@pytest.mark.parametrize("method,path", [
    ("patch", "/api/projects/1"),
    ("get", "/api/auth/login"),
    ("post", "/api/auth/check"),
])
def test_method_not_allowed(client, method, path):
    resp = getattr(client, method)(path)
    assert resp.status_code == 405
    assert resp.get_json() == {"error": "Метод не разрешён"}


def test_non_api_path_is_json(client):
    resp = client.get("/nothing-here")
    assert resp.status_code == 404
    assert "error" in resp.get_json()


def test_unexpected_error_is_generic(client, ext, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("secret connection string")

    monkeypatch.setattr(ext.resources["projects"], "list", boom)
    resp = client.get("/api/projects")

    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Внутренняя ошибка сервера"}


def test_unexpected_error_detail_in_debug_mode(client, ext, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(ext.resources["projects"], "list", boom)
    monkeypatch.setattr(ext, "settings", dataclasses.replace(ext.settings, debug_mode=True))
    resp = client.get("/api/projects")

    assert resp.status_code == 500
    assert resp.get_json()["detail"] == "kaboom"


def test_unexpected_error_is_logged(app, client, ext, monkeypatch):
    from sqlalchemy import select
    from etmsite.core.database import app_logs

    def boom(*args, **kwargs):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(ext.resources["partners"], "list", boom)
    client.get("/api/partners")

    with app.app_context():
        rows = ext.db.fetch_all(select(app_logs).where(app_logs.c.level == "ERROR"))
    assert len(rows) == 1
    assert "RuntimeError" in rows[0]["message"]
    assert rows[0]["request_path"] == "/api/partners"


# ---------------------------------------------------------------------------
# 4. CORS
# ---------------------------------------------------------------------------

def test_preflight_allowed_origin(client):
    resp = client.options("/api/projects", headers={
        "Origin": "https://etm-murmansk.ru",
        "Access-Control-Request-Method": "POST",
        "Access-Control-Request-Headers": "Authorization, Content-Type",
    })

    assert resp.status_code == 204
    assert resp.data == b""
    assert resp.headers["Access-Control-Allow-Origin"] == "https://etm-murmansk.ru"


def test_preflight_on_unknown_route_still_answers(client):
    """Preflight short-circuits before routing."""
    resp = client.options("/api/whatever", headers={"Origin": "http://localhost"})
    assert resp.status_code == 204


def test_disallowed_origin_gets_no_cors_headers(client):
    resp = client.get("/api/projects", headers={"Origin": "https://evil.example"})
    assert resp.status_code == 200
    assert "Access-Control-Allow-Origin" not in resp.headers


def test_allowed_origin_on_simple_request(client):
    resp = client.get("/api/projects", headers={"Origin": "http://localhost"})
    assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost"


# ---------------------------------------------------------------------------
# 5. Health
# ---------------------------------------------------------------------------

def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "database": True}


def test_health_reports_database_outage(client, ext, monkeypatch):
    monkeypatch.setattr(ext.db, "ping", lambda: False)
    resp = client.get("/health")
    assert resp.status_code == 503
    assert resp.get_json()["database"] is False
