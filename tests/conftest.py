"""
Shared fixtures: a fresh app (in-memory SQLite, fixed signing secrets) per
test, its test client, and helpers to register/login users.
"""
from datetime import timedelta

import pytest

from api import create_app
from models import storage
from models.user import User
from utils.security import TokenConfig, TokenService

PASSWORD = "password123"


@pytest.fixture
def app():
    app = create_app("testing")
    yield app
    with app.app_context():
        storage.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def register(client, username, email=None, password=PASSWORD):
    return client.post(
        "/auth/register",
        json={"username": username, "email": email or f"{username}@example.com", "password": password},
    )


def login(client, email, password=PASSWORD):
    return client.post("/auth/login", json={"email": email, "password": password})


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def ledger(app, user_id):
    """Current refresh-token ledger of a user, read straight from the database."""
    with app.app_context():
        user = storage.get(User, user_id)
        return list(user.refresh_tokens) if user else None


def expired_token_service(app):
    """A TokenService sharing the app's secrets whose tokens are born expired."""
    return TokenService(
        TokenConfig(
            access_secret=app.config["JWT_SECRET"],
            refresh_secret=app.config["REFRESH_SECRET"],
            algorithm=app.config["JWT_ALGORITHM"],
            issuer=app.config["JWT_ISSUER"],
            access_expires=timedelta(seconds=-20),
            refresh_expires=timedelta(seconds=-10),
        )
    )


def _session_for(client, username):
    res = register(client, username)
    assert res.status_code == 201, res.get_json()
    data = res.get_json()["data"]
    return {
        "id": data["user"]["id"],
        "email": data["user"]["email"],
        "access": data["accessToken"],
        "refresh": data["refreshToken"],
    }


@pytest.fixture
def alice(client):
    return _session_for(client, "alice")


@pytest.fixture
def bob(client):
    return _session_for(client, "bob")
