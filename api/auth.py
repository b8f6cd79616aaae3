"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh
- POST /auth/logout
- GET  /auth/me

The access token travels in the JSON body and comes back as
`Authorization: Bearer <token>`. The refresh token only ever travels in the
`refresh_token` cookie, scoped to /auth/refresh and HTTP-only.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, current_app

from models.schemas.user import UserRegisterSchema, UserLoginSchema, UserOutSchema
from utils.decorators import jwt_required
from utils.exceptions import NotFound

bp = Blueprint("auth", __name__, url_prefix="/auth")

user_register_schema = UserRegisterSchema()
user_login_schema = UserLoginSchema()
user_out_schema = UserOutSchema()


def _sessions():
    return current_app.extensions["sessions"]


def _cookie_options() -> dict:
    cfg = current_app.config
    return {
        "httponly": True,
        "secure": cfg["REFRESH_COOKIE_SECURE"],
        "samesite": cfg["REFRESH_COOKIE_SAMESITE"],
        "path": cfg["REFRESH_COOKIE_PATH"],
    }


def set_refresh_cookie(response, token: str):
    max_age = int(current_app.config["REFRESH_TOKEN_EXPIRES"].total_seconds())
    response.set_cookie(current_app.config["REFRESH_COOKIE_NAME"], token, max_age=max_age, **_cookie_options())
    return response


def clear_refresh_cookie(response):
    response.delete_cookie(current_app.config["REFRESH_COOKIE_NAME"], **_cookie_options())
    return response


def _refresh_cookie() -> str | None:
    return request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"]) or None


@bp.post("/register")
def register():
    """
    Register a new user and start a session.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            email: { type: string }
            username: { type: string }
            password: { type: string }
    responses:
      201:
        description: Created; body has user and accessToken, refresh_token cookie is set
      400:
        description: Invalid input
      409:
        description: Email or username already in use
    """
    data = user_register_schema.load(request.get_json(silent=True) or {})
    user, pair = _sessions().register(data["email"], data["username"], data["password"])

    response = jsonify({"user": user_out_schema.dump(user), "accessToken": pair.access_token})
    response.status_code = 201
    return set_refresh_cookie(response, pair.refresh_token)


@bp.post("/login")
def login():
    """
    Login with email and password
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            email: { type: string }
            password: { type: string }
    responses:
      200:
        description: OK; body has user and accessToken, refresh_token cookie is set
      400:
        description: Invalid input
      401:
        description: Invalid credentials
    """
    data = user_login_schema.load(request.get_json(silent=True) or {})
    user, pair = _sessions().login(data["email"], data["password"])

    response = jsonify({"user": user_out_schema.dump(user), "accessToken": pair.access_token})
    return set_refresh_cookie(response, pair.refresh_token)


@bp.post("/refresh")
def refresh():
    """
    Rotate the refresh cookie and return a new access token
    ---
    tags:
      - Auth
    responses:
      200:
        description: OK; body has accessToken, refresh_token cookie is replaced
      401:
        description: Missing, invalid, expired or revoked refresh token
    """
    pair = _sessions().refresh(_refresh_cookie())
    return set_refresh_cookie(jsonify({"accessToken": pair.access_token}), pair.refresh_token)


@bp.post("/logout")
def logout():
    """
    End the refresh session. Always succeeds.
    ---
    tags:
      - Auth
    responses:
      200:
        description: OK; refresh_token cookie is cleared
    """
    _sessions().logout(_refresh_cookie())
    return clear_refresh_cookie(jsonify({"ok": True}))


@bp.get("/me")
@jwt_required()
def me():
    """
    Current user
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    user = current_app.extensions["accounts"].get(g.current_identity.id)
    if user is None:
        raise NotFound(f"user {g.current_identity.id} no longer exists")
    return jsonify({"user": user_out_schema.dump(user)}), 200
