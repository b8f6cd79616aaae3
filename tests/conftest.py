"""Shared fixtures: a Flask app on a throwaway SQLite file, plus Flask-free session core pieces."""
from __future__ import annotations

import itertools
from datetime import timedelta
from types import SimpleNamespace

import pytest

from api import create_app
from models import storage
from models.credential_store import MemoryCredentialStore
from utils.exceptions import Conflict
from utils.security import CredentialHasher, TokenCodec, TokenConfig
from utils.sessions import SessionManager

REFRESH_COOKIE = "refresh_token"


# --- HTTP helpers ---

def refresh_cookie_header(response) -> str | None:
    """Return the raw Set-Cookie header for the refresh cookie, if any."""
    for header in response.headers.getlist("Set-Cookie"):
        if header.startswith(f"{REFRESH_COOKIE}="):
            return header
    return None


def refresh_token_from(response) -> str | None:
    header = refresh_cookie_header(response)
    if header is None:
        return None
    return header.split(";", 1)[0].split("=", 1)[1] or None


def with_cookie(token: str) -> dict:
    return {"Cookie": f"{REFRESH_COOKIE}={token}"}


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def make_app(tmp_path, config_name="testing", **overrides):
    settings = {
        "DATABASE_URL": f"sqlite:///{tmp_path / 'test.db'}",
        "UPLOAD_FOLDER": str(tmp_path / "uploads"),
    }
    settings.update(overrides)
    return create_app(config_name, settings)


@pytest.fixture
def app(tmp_path):
    app = make_app(tmp_path)
    yield app
    storage.drop_all()


@pytest.fixture
def client(app):
    # Cookies are passed explicitly: the refresh cookie is path-scoped to /auth/refresh
    return app.test_client(use_cookies=False)


@pytest.fixture
def register(client):
    """Register a user through the API; returns (response json, refresh token)."""
    def _register(username="alice", email=None, password="correct-horse"):
        resp = client.post(
            "/auth/register",
            json={"email": email or f"{username}@example.com", "username": username, "password": password},
        )
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json(), refresh_token_from(resp)
    return _register


@pytest.fixture
def alice(register):
    body, refresh = register("alice")
    return SimpleNamespace(
        id=body["user"]["id"],
        access=body["accessToken"],
        refresh=refresh,
        headers=bearer(body["accessToken"]),
    )


# --- Flask-free session core ---

class FakeAccounts:
    """In-memory stand-in for AccountService."""

    def __init__(self, hasher):
        self.hasher = hasher
        self.users = {}
        self._ids = itertools.count(1)

    def create(self, email, username, password):
        if any(u.email == email or u.username == username for u in self.users.values()):
            raise Conflict("taken")
        user = SimpleNamespace(
            id=f"user-{next(self._ids)}", email=email, username=username,
            password_hash=self.hasher.hash(password),
        )
        self.users[user.id] = user
        return user

    def authenticate(self, email, password):
        for user in self.users.values():
            if user.email == email and self.hasher.verify(password, user.password_hash):
                return user
        return None

    def get(self, user_id):
        return self.users.get(user_id)


@pytest.fixture
def token_config():
    return TokenConfig(
        access_secret="unit-access-secret",
        refresh_secret="unit-refresh-secret",
        access_ttl=timedelta(minutes=15),
        refresh_ttl=timedelta(days=7),
    )


@pytest.fixture
def codec(token_config):
    return TokenCodec(token_config)


@pytest.fixture
def hasher():
    return CredentialHasher(time_cost=1, memory_cost=1024, parallelism=1)


@pytest.fixture
def store():
    return MemoryCredentialStore()


@pytest.fixture
def sessions(codec, store, hasher):
    return SessionManager(codec, store, hasher, FakeAccounts(hasher))
