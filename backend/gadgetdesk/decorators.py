# Overview: Request decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import session_service


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def current_salesperson() -> str | None:
    """Display name of the logged-in user, for SaleRecord.salesperson."""
    user = getattr(g, "current_user", None)
    return user.display_name if user is not None else None


def require_auth(f):
    """
    Require a valid bearer token.

    Sets g.current_user to the authenticated User.

    Returns 401 if:
    - No Authorization header
    - Invalid, expired or revoked token
    - User account deactivated
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if not token:
            return jsonify({"ok": False, "error": "Authentication required"}), 401

        user = session_service.validate_session(token)
        if user is None:
            return jsonify({"ok": False, "error": "Invalid or expired token"}), 401

        g.current_user = user
        return f(*args, **kwargs)

    return decorated_function
