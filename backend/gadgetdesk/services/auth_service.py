# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

Every sale records who served the customer. Uses bcrypt for password
hashing and validates password strength.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 8 characters; upper, lower, digit and special char required
- Session tokens managed separately (see session_service.py)
"""

import re

import bcrypt

from ..extensions import db
from ..models import User
from ..validation import ConflictError
from gadgetdesk.time_utils import utcnow
from .concurrency import commit_or_raise


class PasswordValidationError(Exception):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Raises PasswordValidationError if requirements not met.
    """
    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not re.search(r"[!@#$%^&*(),.'\":{}|<>_\-]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Hash password using bcrypt.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    bcrypt.checkpw() is timing-safe. A malformed hash counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def create_user(
    username: str,
    email: str,
    password: str,
    full_name: str | None = None,
    rounds: int = 12,
) -> User:
    """
    Create a staff user.

    Raises:
        PasswordValidationError: weak password
        ConflictError: username or email already taken
    """
    username = username.strip()
    email = email.strip().lower()

    if db.session.query(User).filter_by(username=username).first():
        raise ConflictError(f"Username {username} already exists")
    if db.session.query(User).filter_by(email=email).first():
        raise ConflictError(f"Email {email} already exists")

    user = User(
        username=username,
        email=email,
        full_name=(full_name or "").strip() or None,
        password_hash=hash_password(password, rounds=rounds),
        is_active=True,
    )
    db.session.add(user)
    commit_or_raise()
    return user


def authenticate(username: str, password: str) -> User | None:
    """
    Return the user for valid credentials, None otherwise.

    Inactive users never authenticate.
    """
    user = db.session.query(User).filter_by(username=(username or "").strip()).first()
    if user is None or not user.is_active:
        return None
    if not verify_password(password or "", user.password_hash):
        return None

    user.last_login_at = utcnow()
    commit_or_raise()
    return user
