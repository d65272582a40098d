# Overview: Shared filter/pagination plumbing for the list endpoints.

"""
List query helpers.

Every list screen takes the same parameters:
- q: case-insensitive substring, OR-ed across the resource's search columns
- status: READY / SOLD (ALL or empty = no filter)
- from / to: inclusive YYYY-MM-DD bounds on the resource's date column
- page: 1-indexed; pageSize: default 20, clamped to 1..100

total is always the count of matching rows before paging.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from flask import current_app
from sqlalchemy import func, or_

from ..validation import ValidationError, UNIT_STATUSES
from ..time_utils import parse_iso_date

# SQLite and Postgres bind LIMIT/OFFSET as signed 64-bit integers.
MAX_OFFSET = 2**63 - 1


@dataclass(frozen=True)
class ListParams:
    q: str = ""
    status: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    page: int = 1
    page_size: int = 20

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def _parse_date_arg(args, name: str) -> date | None:
    raw = args.get(name)
    try:
        return parse_iso_date(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a date (YYYY-MM-DD)")


def parse_list_args(args, *, with_status: bool = True) -> ListParams:
    """
    Build ListParams from a werkzeug MultiDict (request.args).

    with_status=False ignores the status parameter (sales have no status).
    """
    default_size = current_app.config.get("LIST_DEFAULT_PAGE_SIZE", 20)
    max_size = current_app.config.get("LIST_MAX_PAGE_SIZE", 100)

    page = args.get("page", type=int) or 1
    page_size = args.get("pageSize", type=int)
    if page_size is None:
        page_size = default_size

    status = (args.get("status") or "").strip().upper() if with_status else ""
    if status in ("", "ALL"):
        status = None
    elif status not in UNIT_STATUSES:
        raise ValidationError("status must be READY, SOLD or ALL")

    date_from = _parse_date_arg(args, "from")
    date_to = _parse_date_arg(args, "to")
    if date_from and date_to and date_from > date_to:
        raise ValidationError("from must not be after to")

    page = max(page, 1)
    page_size = min(max(page_size, 1), max_size)
    if (page - 1) * page_size > MAX_OFFSET:
        raise ValidationError("page is too large")

    return ListParams(
        q=(args.get("q") or "").strip().lower(),
        status=status,
        date_from=date_from,
        date_to=date_to,
        page=page,
        page_size=page_size,
    )


def _like_pattern(q: str) -> str:
    escaped = q.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def apply_search(query, q: str, columns):
    if not q:
        return query
    pattern = _like_pattern(q)
    return query.filter(
        or_(*[func.lower(col).like(pattern, escape="\\") for col in columns])
    )


def apply_date_range(query, column, date_from: date | None, date_to: date | None):
    if date_from is not None:
        query = query.filter(column >= date_from)
    if date_to is not None:
        query = query.filter(column <= date_to)
    return query


def paginate(query, params: ListParams) -> tuple[list, int]:
    total = query.order_by(None).count()
    rows = query.offset(params.offset).limit(params.page_size).all()
    return rows, total


def list_payload(rows, total: int, params: ListParams) -> dict:
    return {
        "ok": True,
        "data": [r.to_dict() for r in rows],
        "page": params.page,
        "pageSize": params.page_size,
        "total": total,
    }
