"""
Refresh-token ledger helpers on the User model.
"""
import pytest

from models.user import User


def _user(*tokens):
    return User(username="carol", email="carol@example.com", password_hash="x", refresh_tokens=list(tokens))


def test_add_keeps_order():
    user = _user()
    user.add_refresh_token("t1")
    user.add_refresh_token("t2")
    assert user.refresh_tokens == ["t1", "t2"]
    assert user.has_refresh_token("t1")


def test_remove_only_that_token():
    user = _user("t1", "t2", "t3")
    assert user.remove_refresh_token("t2") is True
    assert user.refresh_tokens == ["t1", "t3"]


def test_remove_unknown_token():
    user = _user("t1")
    assert user.remove_refresh_token("nope") is False
    assert user.refresh_tokens == ["t1"]


def test_revoke_all():
    user = _user("t1", "t2")
    assert user.revoke_all_refresh_tokens() == 2
    assert user.refresh_tokens == []
    assert not user.has_refresh_token("t1")


def test_prune_drops_dead_entries():
    user = _user("live-1", "dead", "live-2")
    assert user.prune_refresh_tokens(lambda t: t.startswith("live")) == 1
    assert user.refresh_tokens == ["live-1", "live-2"]


def test_password_is_write_only():
    with pytest.raises(AttributeError):
        _user().password
