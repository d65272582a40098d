# Overview: Service-layer operations for session; encapsulates business logic and database work.

"""
Session Token Management Service

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage
- Absolute timeout of SESSION_TTL_HOURS
- Revocable on logout
"""

import hashlib
import secrets
from datetime import timedelta

from flask import current_app

from ..extensions import db
from ..models import SessionToken, User
from gadgetdesk.time_utils import utcnow
from .concurrency import commit_or_raise


def generate_token() -> str:
    """Return a 64-character hex token (32 bytes of entropy)."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """
    Hash token for database storage using SHA-256.

    Tokens are already high-entropy, so a fast hash is sufficient.
    """
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def create_session(
    user_id: int,
    user_agent: str | None = None,
    ip_address: str | None = None
) -> tuple[SessionToken, str]:
    """
    Create new session token for user.

    Returns (session_record, plaintext_token).
    Client receives plaintext_token, database stores only the hash.
    """
    user = db.session.get(User, user_id)
    if not user:
        raise ValueError("User not found")

    plaintext_token = generate_token()
    now = utcnow()
    ttl = timedelta(hours=current_app.config.get("SESSION_TTL_HOURS", 12))

    session = SessionToken(
        user_id=user_id,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        last_used_at=now,
        expires_at=now + ttl,
        user_agent=(user_agent or "")[:255] or None,
        ip_address=ip_address,
        is_revoked=False
    )

    db.session.add(session)
    commit_or_raise()

    return session, plaintext_token


def validate_session(token: str) -> User | None:
    """
    Return the user behind a live token, or None if the token is unknown,
    expired, revoked, or belongs to a deactivated user.

    Updates last_used_at on success.
    """
    now = utcnow()

    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False
    ).first()

    if not session:
        return None

    if session.expires_at < now:
        return None

    user = session.user
    if not user or not user.is_active:
        session.is_revoked = True
        session.revoked_at = now
        session.revoked_reason = "User account deactivated"
        commit_or_raise()
        return None

    session.last_used_at = now
    commit_or_raise()
    return user


def revoke_session(token: str, reason: str = "User logout") -> bool:
    """
    Revoke session token.

    Returns True if session was revoked, False if not found.
    """
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False
    ).first()

    if not session:
        return False

    session.is_revoked = True
    session.revoked_at = utcnow()
    session.revoked_reason = reason

    commit_or_raise()
    return True
