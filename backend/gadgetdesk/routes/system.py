# backend/gadgetdesk/routes/system.py
"""
Liveness and version endpoints.

/healthz is public so load balancers can probe it without a token.
"""

import sys

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from gadgetdesk.time_utils import utcnow

system_bp = Blueprint("system", __name__)

API_VERSION = "1.0.0"


@system_bp.get("/healthz")
def healthz():
    """
    Report database reachability.

    Returns:
    - 200 {ok: true, db_time}
    - 500 {ok: false, error}
    """
    try:
        db_time = db.session.execute(text("SELECT CURRENT_TIMESTAMP")).scalar()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Database health check failed")
        return {"ok": False, "error": str(getattr(e, "orig", None) or e)}, 500

    return {"ok": True, "db_time": str(db_time)}, 200


@system_bp.get("/version")
def version():
    """
    Non-sensitive deployment info: API version, environment, Python version,
    server time.
    """
    env = "production" if not current_app.debug else "development"

    return {
        "api_version": API_VERSION,
        "environment": env,
        "python_version": sys.version.split()[0],
        "server_time": utcnow().isoformat() + "Z",
    }
