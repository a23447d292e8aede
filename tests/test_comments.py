"""
/comments CRUD with ownership checks.
"""
import pytest

from conftest import bearer


@pytest.fixture
def post(client, alice):
    res = client.post("/posts", json={"title": "Test Post", "text": "body"}, headers=bearer(alice["access"]))
    return res.get_json()["data"]


def add_comment(client, session, post_id, content="This is a test comment"):
    return client.post("/comments", json={"postId": post_id, "content": content}, headers=bearer(session["access"]))


def test_create_stamps_commenter(client, post, bob):
    res = add_comment(client, bob, post["id"])
    assert res.status_code == 201
    data = res.get_json()["data"]
    assert data["postId"] == post["id"]
    assert data["commenter"] == bob["id"]
    assert data["content"] == "This is a test comment"


def test_create_on_missing_post(client, alice):
    assert add_comment(client, alice, "no-such-post").status_code == 404


@pytest.mark.parametrize("body", [{}, {"content": "orphan"}, {"postId": "x", "content": "   "}])
def test_create_validation(client, alice, body):
    assert client.post("/comments", json=body, headers=bearer(alice["access"])).status_code == 400


def test_content_limit(client, post, alice):
    assert add_comment(client, alice, post["id"], "x" * 500).status_code == 201
    assert add_comment(client, alice, post["id"], "x" * 501).status_code == 400


def test_create_requires_token(client, post):
    res = client.post("/comments", json={"postId": post["id"], "content": "hi"})
    assert res.status_code == 401


def test_create_with_invalid_token(client, post):
    res = client.post("/comments", json={"postId": post["id"], "content": "hi"}, headers=bearer("invalid_token"))
    assert res.status_code == 403


def test_list_for_post(client, post, alice, bob):
    add_comment(client, alice, post["id"], "first")
    add_comment(client, bob, post["id"], "second")
    res = client.get(f"/comments/{post['id']}", headers=bearer(alice["access"]))
    assert res.status_code == 200
    body = res.get_json()
    assert body["meta"]["total"] == 2
    assert {c["content"] for c in body["data"]} == {"first", "second"}


def test_list_for_post_without_comments(client, post, alice):
    res = client.get(f"/comments/{post['id']}", headers=bearer(alice["access"]))
    assert res.status_code == 200
    assert res.get_json()["data"] == []


def test_list_for_missing_post(client, alice):
    assert client.get("/comments/no-such-post", headers=bearer(alice["access"])).status_code == 404


def test_owner_can_update(client, post, bob):
    comment = add_comment(client, bob, post["id"]).get_json()["data"]
    res = client.put(f"/comments/{comment['id']}", json={"content": "edited"}, headers=bearer(bob["access"]))
    assert res.status_code == 200
    assert res.get_json()["data"]["content"] == "edited"


def test_update_by_other_user(client, post, alice, bob):
    comment = add_comment(client, bob, post["id"]).get_json()["data"]
    # owning the post does not make you the commenter
    res = client.put(f"/comments/{comment['id']}", json={"content": "edited"}, headers=bearer(alice["access"]))
    assert res.status_code == 403


def test_update_validation(client, post, bob):
    comment = add_comment(client, bob, post["id"]).get_json()["data"]
    res = client.put(f"/comments/{comment['id']}", json={}, headers=bearer(bob["access"]))
    assert res.status_code == 400


def test_update_missing(client, alice):
    res = client.put("/comments/nope", json={"content": "x"}, headers=bearer(alice["access"]))
    assert res.status_code == 404


def test_owner_can_delete(client, post, bob):
    comment = add_comment(client, bob, post["id"]).get_json()["data"]
    res = client.delete(f"/comments/{comment['id']}", headers=bearer(bob["access"]))
    assert res.status_code == 200
    assert res.get_json()["data"]["id"] == comment["id"]
    assert client.get(f"/comments/{post['id']}", headers=bearer(bob["access"])).get_json()["data"] == []


def test_delete_by_other_user(client, post, alice, bob):
    comment = add_comment(client, bob, post["id"]).get_json()["data"]
    assert client.delete(f"/comments/{comment['id']}", headers=bearer(alice["access"])).status_code == 403


def test_delete_missing(client, alice):
    assert client.delete("/comments/nope", headers=bearer(alice["access"])).status_code == 404


def test_timestamps_match_between_create_and_list(client, post, bob):
    created = add_comment(client, bob, post["id"]).get_json()["data"]
    listed = client.get(f"/comments/{post['id']}", headers=bearer(bob["access"])).get_json()["data"][0]
    assert listed["createdAt"] == created["createdAt"]
    assert listed["updatedAt"] == created["updatedAt"]
    assert created["createdAt"].endswith("+00:00")
