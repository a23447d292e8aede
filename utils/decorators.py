from __future__ import annotations

from dataclasses import dataclass
from functools import wraps

from flask import g, has_request_context, request

from utils.exceptions import AuthenticationError, AuthorizationError
from utils.security import TokenExpiredError, TokenError, get_token_service


@dataclass(frozen=True)
class AuthContext:
    """Identity of the caller, as proven by a verified access token."""
    user_id: str
    token_id: str | None = None


def current_identity() -> AuthContext:
    """
    The AuthContext of the current request.
    Only valid inside a view wrapped by jwt_required().
    """
    auth = getattr(g, "auth", None) if has_request_context() else None
    if auth is None:
        raise AuthenticationError("Missing or invalid Authorization header")
    return auth


def _bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise AuthenticationError("Missing or invalid Authorization header")
    return token.strip()


def jwt_required():
    """
    Gate a view behind a bearer access token.
    - no header / other scheme -> 401
    - bad or expired token     -> 403
    The token is checked cryptographically only; the refresh-token ledger is
    not consulted, so an access token stays usable until it expires.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = _bearer_token()
            try:
                decoded = get_token_service().decode_access(token)
            except TokenExpiredError:
                raise AuthorizationError("Token expired")
            except TokenError:
                raise AuthorizationError("Invalid token")

            g.auth = AuthContext(user_id=decoded["sub"], token_id=decoded.get("jti"))
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def ensure_owner(owner_id: str, message: str = "Not authorized to modify this resource") -> None:
    """Raise 403 unless the acting identity owns the record."""
    if owner_id != current_identity().user_id:
        raise AuthorizationError(message)
