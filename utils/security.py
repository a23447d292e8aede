"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT
- JTI generation for token identifiers

Token settings are read once at startup into a TokenConfig and handed to a
TokenService (see api.create_app); nothing here reads the environment.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from flask import current_app

from utils.exceptions import ConfigurationError

ph = PasswordHasher()

ACCESS = "access"
REFRESH = "refresh"


class TokenError(Exception):
    """Token failed verification. Callers decide which status this maps to."""


class InvalidTokenError(TokenError):
    pass


class TokenExpiredError(TokenError):
    pass


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


_dummy_hash: str | None = None


def dummy_password_hash() -> str:
    """A throwaway argon2 hash, so an unknown email costs one verify like a known one."""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = ph.hash(generate_jti())
    return _dummy_hash


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TokenConfig:
    access_secret: str | None
    refresh_secret: str | None
    algorithm: str = "HS256"
    issuer: str = "social-network-api"
    access_expires: timedelta = timedelta(minutes=15)
    refresh_expires: timedelta = timedelta(days=7)

    def __post_init__(self):
        if self.access_expires >= self.refresh_expires:
            raise ValueError("access token lifetime must be shorter than refresh token lifetime")

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "TokenConfig":
        """Build from a Flask config (or any mapping using the same keys)."""
        return cls(
            access_secret=config.get("JWT_SECRET") or None,
            refresh_secret=config.get("REFRESH_SECRET") or None,
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER", "social-network-api"),
            access_expires=config.get("ACCESS_TOKEN_EXPIRES", timedelta(minutes=15)),
            refresh_expires=config.get("REFRESH_TOKEN_EXPIRES", timedelta(days=7)),
        )

    @property
    def is_complete(self) -> bool:
        return bool(self.access_secret and self.refresh_secret)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenService:
    """Mints and verifies access/refresh JWTs for one TokenConfig."""

    def __init__(self, config: TokenConfig):
        self.config = config

    def _secret(self, token_type: str) -> str:
        secret = self.config.access_secret if token_type == ACCESS else self.config.refresh_secret
        if not secret:
            name = "JWT_SECRET" if token_type == ACCESS else "REFRESH_SECRET"
            raise ConfigurationError(f"{name} is not configured")
        return secret

    def _lifetime(self, token_type: str) -> timedelta:
        return self.config.access_expires if token_type == ACCESS else self.config.refresh_expires

    def _encode(self, subject: str, token_type: str) -> str:
        now = _now()
        payload = {
            "iss": self.config.issuer,
            "sub": str(subject),
            "iat": now,
            "exp": now + self._lifetime(token_type),
            "type": token_type,
            "jti": generate_jti(),
        }
        return jwt.encode(payload, self._secret(token_type), algorithm=self.config.algorithm)

    def issue_pair(self, user_id: str) -> TokenPair:
        """
        Issue a fresh access/refresh pair for user_id.
        Raises ConfigurationError if either signing secret is missing, so no
        half-pair is ever handed out.
        """
        self._secret(ACCESS)
        self._secret(REFRESH)
        return TokenPair(
            access_token=self._encode(user_id, ACCESS),
            refresh_token=self._encode(user_id, REFRESH),
        )

    def _decode(self, token: str, token_type: str, verify_exp: bool = True) -> Dict[str, Any]:
        secret = self._secret(token_type)
        try:
            decoded = jwt.decode(
                token,
                secret,
                algorithms=[self.config.algorithm],
                issuer=self.config.issuer,
                options={"verify_exp": verify_exp, "require": ["sub", "exp", "type"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token expired")
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError(f"Invalid token: {exc}")

        if decoded.get("type") != token_type:
            raise InvalidTokenError("Wrong token type")
        return decoded

    def decode_access(self, token: str) -> Dict[str, Any]:
        return self._decode(token, ACCESS)

    def decode_refresh(self, token: str, verify_exp: bool = True) -> Dict[str, Any]:
        return self._decode(token, REFRESH, verify_exp=verify_exp)

    def is_refresh_live(self, token: str) -> bool:
        """True while a refresh token could still be honored (signature and expiry valid)."""
        try:
            self.decode_refresh(token)
        except TokenError:
            return False
        return True

    @property
    def access_expires_in(self) -> int:
        return int(self.config.access_expires.total_seconds())


def get_token_service() -> TokenService:
    """The TokenService bound to the current app (set up in create_app)."""
    return current_app.extensions["token_service"]
