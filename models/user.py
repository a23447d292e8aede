"""
User model and its refresh-token ledger.

The ledger (`refresh_tokens`) is the ordered list of refresh tokens that are
still honored for this user. Every helper below is a plain read-modify-write
on the JSON column: no row lock, no version check. Two refreshes racing on
the same user can therefore lose an update (last commit wins).
"""
from typing import Callable

from sqlalchemy import Column, String, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.orm.attributes import flag_modified

from models.base_model import Base, BaseModel


class User(BaseModel, Base):
    __tablename__ = "users"
    username = Column(String(30), nullable=False, unique=True, index=True)
    # stored lower-cased, see UserCreateSchema
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    refresh_tokens = Column(JSON, nullable=False, default=list)

    posts = relationship("Post", back_populates="author", passive_deletes=True)

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")

    def _ledger(self) -> list:
        return list(self.refresh_tokens or [])

    def _set_ledger(self, tokens: list) -> None:
        self.refresh_tokens = tokens
        flag_modified(self, "refresh_tokens")

    def has_refresh_token(self, token: str) -> bool:
        return token in (self.refresh_tokens or [])

    def add_refresh_token(self, token: str) -> None:
        tokens = self._ledger()
        tokens.append(token)
        self._set_ledger(tokens)

    def remove_refresh_token(self, token: str) -> bool:
        """Drop one token; returns False if it was not in the ledger."""
        tokens = self._ledger()
        if token not in tokens:
            return False
        self._set_ledger([t for t in tokens if t != token])
        return True

    def revoke_all_refresh_tokens(self) -> int:
        """Empty the ledger, ending every session. Returns how many were revoked."""
        revoked = len(self.refresh_tokens or [])
        self._set_ledger([])
        return revoked

    def prune_refresh_tokens(self, is_live: Callable[[str], bool]) -> int:
        """Drop entries that can never be honored again (expired). Returns count dropped."""
        tokens = self._ledger()
        kept = [t for t in tokens if is_live(t)]
        if len(kept) != len(tokens):
            self._set_ledger(kept)
        return len(tokens) - len(kept)
