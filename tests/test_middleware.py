"""
Bearer-token gate on protected routes.
"""
from flask import Blueprint

from api import create_app
from models import storage
from utils.decorators import AuthContext, current_identity, jwt_required

from conftest import bearer, expired_token_service, register


def test_valid_token(client, alice):
    assert client.get("/posts", headers=bearer(alice["access"])).status_code == 200


def test_missing_header(client):
    res = client.get("/posts")
    assert res.status_code == 401
    assert res.get_json()["error"] == "UNAUTHORIZED"


def test_malformed_header_without_scheme(client, alice):
    assert client.get("/posts", headers={"Authorization": alice["access"]}).status_code == 401


def test_wrong_scheme(client, alice):
    assert client.get("/posts", headers={"Authorization": f"Basic {alice['access']}"}).status_code == 401


def test_empty_bearer(client):
    assert client.get("/posts", headers={"Authorization": "Bearer "}).status_code == 401


def test_invalid_token(client):
    res = client.get("/posts", headers=bearer("invalid_token"))
    assert res.status_code == 403
    assert res.get_json()["error"] == "FORBIDDEN"


def test_expired_token(app, client, alice):
    expired = expired_token_service(app).issue_pair(alice["id"]).access_token
    res = client.get("/posts", headers=bearer(expired))
    assert res.status_code == 403
    assert res.get_json()["message"] == "Token expired"


def test_refresh_token_is_not_an_access_token(client, alice):
    assert client.get("/posts", headers=bearer(alice["refresh"])).status_code == 403


def test_access_token_survives_session_revocation(client, alice):
    # the gate does not look at the ledger: revoked sessions keep their
    # access tokens until those expire
    client.post("/auth/refresh", json={"refreshToken": alice["refresh"]})
    assert client.post("/auth/refresh", json={"refreshToken": alice["refresh"]}).status_code == 403
    assert client.get("/posts", headers=bearer(alice["access"])).status_code == 200


def test_identity_is_threaded_to_the_view():
    app = create_app("testing")
    bp = Blueprint("whoami", __name__)

    @bp.get("/whoami")
    @jwt_required()
    def whoami():
        identity = current_identity()
        assert isinstance(identity, AuthContext)
        return {"userId": identity.user_id, "tokenId": identity.token_id}

    # blueprints must be registered before the first request
    app.register_blueprint(bp)
    client = app.test_client()
    try:
        data = register(client, "alice").get_json()["data"]
        res = client.get("/whoami", headers=bearer(data["accessToken"]))
        assert res.status_code == 200
        body = res.get_json()
        assert body["userId"] == data["user"]["id"]
        assert body["tokenId"]
    finally:
        with app.app_context():
            storage.drop_all()
