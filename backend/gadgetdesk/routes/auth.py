# backend/gadgetdesk/routes/auth.py
"""Login / logout / current-user routes."""

from flask import Blueprint, request, jsonify, g, current_app

from ..services import auth_service, session_service
from ..validation import StoreError
from ..decorators import bearer_token, require_auth

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login_route():
    """
    Exchange username + password for a bearer token.

    Returns 401 for bad credentials or inactive accounts.
    """
    data = request.get_json(silent=True) or {}
    username = data.get("username")
    password = data.get("password")

    if not isinstance(username, str) or not isinstance(password, str) or not username or not password:
        return jsonify({"ok": False, "error": "username and password required"}), 400

    try:
        user = auth_service.authenticate(username, password)
        if user is None:
            return jsonify({"ok": False, "error": "Invalid credentials"}), 401

        session, token = session_service.create_session(
            user_id=user.id,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )
    except StoreError as e:
        current_app.logger.exception("Failed to login user")
        return jsonify({"ok": False, "error": str(e)}), 500

    return jsonify({
        "ok": True,
        "user": user.to_dict(),
        "token": token,
        "session": session.to_dict(),
    }), 200


@auth_bp.post("/logout")
def logout_route():
    """Revoke the presented bearer token."""
    token = bearer_token()
    if not token:
        return jsonify({"ok": False, "error": "Authorization header required"}), 401

    try:
        revoked = session_service.revoke_session(token, reason="User logout")
    except StoreError as e:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"ok": False, "error": str(e)}), 500

    if not revoked:
        return jsonify({"ok": False, "error": "Invalid or expired token"}), 401

    return jsonify({"ok": True}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({"ok": True, "user": g.current_user.to_dict()}), 200
