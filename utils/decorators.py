from __future__ import annotations
from functools import wraps
from flask import request, g, current_app


def bearer_token() -> str | None:
    """Return the token from `Authorization: Bearer <token>`, or None."""
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    return auth[len("Bearer "):].strip() or None


def jwt_required():
    """
    Require a valid access token. Sets g.current_identity (utils.security.Identity).
    Failures raise Unauthenticated/InvalidToken, rendered as 401 by api.errors.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            sessions = current_app.extensions["sessions"]
            g.current_identity = sessions.verify_access(bearer_token())
            return fn(*args, **kwargs)

        return wrapper

    return decorator
