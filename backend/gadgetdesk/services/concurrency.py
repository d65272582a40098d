# Overview: Row-locking helper shared by the sale coordinator and inventory store.

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..validation import StoreError


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def commit_or_raise() -> None:
    """
    Commit the current session; on failure roll back and raise StoreError
    carrying the driver's message.
    """
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StoreError(str(getattr(exc, "orig", None) or exc)) from exc
