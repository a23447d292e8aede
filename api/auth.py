"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh
- POST /auth/logout
- GET  /auth/me

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues short-lived access tokens and longer-lived refresh tokens (JWTs, separate secrets)
- Keeps every live refresh token in the owner's ledger (User.refresh_tokens) so
  tokens are single-use: /auth/refresh consumes the presented token, and a
  token that is presented again revokes every session of that user
"""
from __future__ import annotations

import logging

from flask import Blueprint, request, jsonify

from models import storage
from models.user import User
from models.schemas.user import UserCreateSchema, UserOutSchema, UserLoginSchema, RefreshTokenSchema

from utils.decorators import current_identity, jwt_required
from utils.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from utils.security import (
    TokenError,
    TokenPair,
    dummy_password_hash,
    get_token_service,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__, url_prefix="/auth")

user_create_schema = UserCreateSchema()
user_out_schema = UserOutSchema()
user_login_schema = UserLoginSchema()
refresh_token_schema = RefreshTokenSchema()


def _token_payload(pair: TokenPair) -> dict:
    return {
        "accessToken": pair.access_token,
        "refreshToken": pair.refresh_token,
        "tokenType": "bearer",
        "expiresIn": get_token_service().access_expires_in,
    }


def _start_session(user: User) -> TokenPair:
    """Issue a pair and record its refresh token in the ledger (not committed)."""
    service = get_token_service()
    pair = service.issue_pair(user.id)
    user.prune_refresh_tokens(service.is_refresh_live)
    user.add_refresh_token(pair.refresh_token)
    return pair


@bp.post("/register")
def register():
    """
    Register a new user and open a first session.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [username, email, password]
          properties:
            username: { type: string, minLength: 3, maxLength: 30 }
            email: { type: string, format: email }
            password: { type: string, minLength: 6 }
    responses:
      201:
        description: Created (returns the user and a token pair)
      400:
        description: Missing/invalid field, or email/username already registered
      500:
        description: Signing secrets not configured
    """
    payload = request.get_json(silent=True) or {}
    data = user_create_schema.load(payload)

    session = storage.get_session()
    if session.query(User).filter(User.email == data["email"]).first():
        raise ValidationError("Email already registered")
    if session.query(User).filter(User.username == data["username"]).first():
        raise ValidationError("Username already taken")

    user = User(
        username=data["username"],
        email=data["email"],
        password_hash=hash_password(data["password"]),
        refresh_tokens=[],
    )
    # Tokens are minted before anything is committed: a ConfigurationError
    # leaves no half-registered user behind.
    pair = _start_session(user)

    storage.new(user)
    storage.save()
    logger.info("registered user %s", user.id)

    body = {"user": user_out_schema.dump(user)}
    body.update(_token_payload(pair))
    return jsonify({"data": body}), 201


@bp.post("/login")
def login():
    """
    Login: return accessToken and refreshToken
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         required: true
         schema:
           type: object
           required: [email, password]
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      400:
        description: Missing email or password
      401:
        description: Invalid credentials
    """
    payload = request.get_json(silent=True) or {}
    data = user_login_schema.load(payload)

    session = storage.get_session()
    user: User | None = session.query(User).filter(User.email == data["email"]).first()
    # Same answer, and the same argon2 work, for unknown email and wrong password
    password_hash = user.password_hash if user else dummy_password_hash()
    if not verify_password(data["password"], password_hash) or user is None:
        logger.info("failed login attempt")
        raise AuthenticationError("Invalid credentials")

    pair = _start_session(user)
    storage.new(user)
    storage.save()
    logger.info("user %s logged in (%d active sessions)", user.id, len(user.refresh_tokens))

    return jsonify({"data": _token_payload(pair)}), 200


@bp.post("/refresh")
def refresh():
    """
    Exchange a refresh token for a new pair (single-use rotation)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         required: true
         schema:
           type: object
           required: [refreshToken]
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: New accessToken and refreshToken
      400:
        description: Missing refreshToken
      403:
        description: Invalid, expired or already used refresh token
    """
    payload = request.get_json(silent=True) or {}
    token = refresh_token_schema.load(payload)["refresh_token"]

    service = get_token_service()
    try:
        decoded = service.decode_refresh(token)
    except TokenError as exc:
        raise AuthorizationError(f"Invalid refresh token: {exc}")

    user = storage.get(User, decoded["sub"])
    if user is None:
        raise AuthorizationError("Invalid refresh token")

    if not user.has_refresh_token(token):
        # Already consumed or revoked: assume it leaked and end every session
        revoked = user.revoke_all_refresh_tokens()
        storage.new(user)
        storage.save()
        logger.warning("refresh token reuse detected for user %s, revoked %d sessions", user.id, revoked)
        raise AuthorizationError("Refresh token reuse detected; all sessions revoked")

    pair = service.issue_pair(user.id)
    user.remove_refresh_token(token)
    user.prune_refresh_tokens(service.is_refresh_live)
    user.add_refresh_token(pair.refresh_token)
    storage.new(user)
    storage.save()
    logger.info("rotated refresh token for user %s", user.id)

    return jsonify({"data": _token_payload(pair)}), 200


@bp.post("/logout")
def logout():
    """
    logout: revokes one refresh token (the other sessions stay open)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         required: true
         schema:
           type: object
           required: [refreshToken]
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: Logged out
      400:
        description: Missing, malformed or unknown refresh token
    """
    payload = request.get_json(silent=True) or {}
    token = refresh_token_schema.load(payload)["refresh_token"]

    try:
        # An expired token may still be sitting in the ledger; let it be removed
        decoded = get_token_service().decode_refresh(token, verify_exp=False)
    except TokenError:
        raise ValidationError("Invalid refresh token")

    user = storage.get(User, decoded["sub"])
    if user is None or not user.remove_refresh_token(token):
        raise ValidationError("Invalid refresh token")

    storage.new(user)
    storage.save()
    logger.info("user %s logged out (%d sessions left)", user.id, len(user.refresh_tokens))

    return jsonify({"message": "Logged out successfully"}), 200


@bp.get("/me")
@jwt_required()
def me():
    """
    Get current user info.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Missing token
      403:
        description: Invalid or expired token
      404:
        description: User no longer exists
    """
    user = storage.get(User, current_identity().user_id)
    if user is None:
        raise NotFoundError("User not found")
    return jsonify({"data": user_out_schema.dump(user)}), 200
