"""
End-to-end walk through a user's session lifecycle.
"""
from conftest import bearer, ledger, login, register


def test_session_lifecycle(app, client):
    res = register(client, "alice", "alice@example.com")
    assert res.status_code == 201
    alice_id = res.get_json()["data"]["user"]["id"]

    assert login(client, "alice@example.com", "wrong-password").status_code == 401

    res = login(client, "alice@example.com")
    assert res.status_code == 200
    tokens = res.get_json()["data"]

    res = client.post("/posts", json={"title": "Hello", "text": "world"}, headers=bearer(tokens["accessToken"]))
    assert res.status_code == 201
    assert res.get_json()["data"]["userId"] == alice_id

    res = client.post("/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert res.status_code == 200
    rotated = res.get_json()["data"]
    assert rotated["refreshToken"] != tokens["refreshToken"]

    # replaying the consumed token ends every session of the account
    res = client.post("/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert res.status_code == 403
    assert ledger(app, alice_id) == []
    assert client.post("/auth/refresh", json={"refreshToken": rotated["refreshToken"]}).status_code == 403

    # access tokens are not tracked: the stale one works until it expires
    res = client.get("/posts", headers=bearer(tokens["accessToken"]))
    assert res.status_code == 200
    assert res.get_json()["meta"]["total"] == 1

    # a fresh login starts over
    res = login(client, "alice@example.com")
    assert res.status_code == 200
    assert ledger(app, alice_id) == [res.get_json()["data"]["refreshToken"]]


def test_health_and_docs(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.get_json()["status"] == "ok"
    assert client.get("/swagger.json").status_code == 200
    res = client.get("/no-such-route")
    assert res.status_code == 404
    assert res.get_json()["error"] == "NOT_FOUND"
