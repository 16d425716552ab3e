"""
Shared fixtures for the etmsite test suite.

Run with: pytest -v

The `client` and `config` fixtures come from pytest-flask, built on the
`app` fixture below.

NOTE: pytest, pytest-flask and responses are listed under
extras_require["dev"] in setup.py. Install with: pip install -e ".[dev]"
"""

import io
import os
import shutil
import tempfile
from datetime import datetime, timedelta

import pytest
from flask import Flask
from PIL import Image

from etmsite import EtmSite

ADMIN_LOGIN = "admin"
ADMIN_PASSWORD = "correct-horse"


class FakeClock:
    """Callable clock returning a settable naive-UTC datetime."""

    def __init__(self, now=None):
        self.now = now or datetime(2026, 3, 15, 12, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


def make_image(fmt="PNG", size=(4, 4)):
    """Encode a tiny solid image in memory."""
    buf = io.BytesIO()
    Image.new("RGB", size, (200, 30, 30)).save(buf, format=fmt)
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_dir():
    """Create a temporary directory for the database and uploads, cleaned up after."""
    d = tempfile.mkdtemp(prefix="etmsite-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def app(tmp_dir, clock):
    """Flask app with EtmSite initialised against a throwaway SQLite file."""
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret"
    app.config["DB_DIR"] = tmp_dir
    app.config["DATABASE_URL"] = "sqlite:///" + os.path.join(tmp_dir, "etmsite.db")
    app.config["UPLOAD_DIR"] = os.path.join(tmp_dir, "uploads")
    app.config["LOGIN_DELAY_RANGE"] = (0, 0)
    app.config["CORS_ORIGINS"] = "https://etm-murmansk.ru,http://localhost"

    EtmSite(app, clock=clock)
    yield app

    with app.app_context():
        app.extensions["etmsite"].db.dispose()


@pytest.fixture
def ext(app):
    return app.extensions["etmsite"]


@pytest.fixture
def admin(app, ext):
    """A stored administrator; returns its login, password and id."""
    with app.app_context():
        admin_id = ext.credentials.create_admin(ADMIN_LOGIN, ADMIN_PASSWORD)
    return {"login": ADMIN_LOGIN, "password": ADMIN_PASSWORD, "id": admin_id}


@pytest.fixture
def token(client, admin):
    resp = client.post("/api/auth/login", json={"login": admin["login"], "password": admin["password"]})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["token"]


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def png_bytes():
    return make_image("PNG")
