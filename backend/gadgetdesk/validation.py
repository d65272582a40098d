from __future__ import annotations
from datetime import date, datetime
from gadgetdesk.time_utils import parse_iso_datetime, parse_iso_date

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Boolean, Integer, String, Text, Date, DateTime
from sqlalchemy.orm import DeclarativeMeta


# Largest price/cost accepted, in whole currency units (IDR has no minor unit).
# Keeps values well inside a 32-bit signed integer column.
MAX_AMOUNT = 2_000_000_000

# Largest accessory count accepted on intake or edit.
MAX_QUANTITY = 1_000_000

SALE_KINDS = ("UNIT", "AKSESORIS")
UNIT_STATUSES = ("READY", "SOLD")


class ValidationError(ValueError):
    """400-level input problem."""


class ReferenceNotFoundError(ValidationError):
    """400: a sale points at an inventory key that does not exist."""


class NotFoundError(LookupError):
    """404: the addressed row does not exist."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate SKU)."""


class StoreError(RuntimeError):
    """500: the database rejected or failed a statement."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        # Already an int (but not bool which is a subclass of int)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        # String input - must be plain digits (with optional leading minus)
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValidationError(f"{col.key} must be an integer")
            if 'e' in stripped.lower():
                raise ValidationError(f"{col.key} must be a plain integer (scientific notation not allowed)")
            if '.' in stripped:
                raise ValidationError(f"{col.key} must be an integer (no decimals)")
            try:
                return int(stripped)
            except ValueError:
                raise ValidationError(f"{col.key} must be an integer")
        # Whole-number floats come from JS clients doing Number("1200000")
        if isinstance(value, float):
            if value.is_integer():
                return int(value)
            raise ValidationError(f"{col.key} must be an integer, not a decimal")
        raise ValidationError(f"{col.key} must be an integer")

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        return bool(value)

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            if dt is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            return dt
        raise ValidationError(f"{col.key} must be a datetime")

    # Calendar dates ("YYYY-MM-DD")
    if isinstance(coltype, Date):
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                d = parse_iso_date(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be a date (YYYY-MM-DD)")
            if d is None:
                raise ValidationError(f"{col.key} must be a date (YYYY-MM-DD)")
            return d
        raise ValidationError(f"{col.key} must be a date (YYYY-MM-DD)")

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(
            f for f in required
            if payload.get(f) is None or (isinstance(payload.get(f), str) and not payload[f].strip())
        )
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        if isinstance(col.type, (String, Text)):
            if isinstance(val, str) and val == "":
                if not col.nullable:
                    raise ValidationError(f"{k} cannot be blank")
                # Empty form inputs are stored as NULL so unique columns stay unique
                val = None

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def drop_unset(payload: dict | None) -> dict:
    """
    Partial-update semantics for edit forms: a key sent as null means
    "leave as is", same as omitting it.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return {k: v for k, v in payload.items() if v is not None}


def _check_amount(patch: dict, field: str, *, allow_zero: bool) -> None:
    if field not in patch or patch[field] is None:
        return
    amount = patch[field]
    if amount < 0 or (amount == 0 and not allow_zero):
        raise ValidationError(f"{field} must be {'>= 0' if allow_zero else '> 0'}")
    if amount > MAX_AMOUNT:
        raise ValidationError(f"{field} cannot exceed {MAX_AMOUNT:,}")


def enforce_rules_unit(patch: dict) -> None:
    _check_amount(patch, "cost", allow_zero=True)
    if "status" in patch:
        status = (patch["status"] or "").upper()
        if status not in UNIT_STATUSES:
            raise ValidationError("status must be READY or SOLD")
        patch["status"] = status


def enforce_rules_accessory(patch: dict) -> None:
    _check_amount(patch, "cost", allow_zero=True)
    quantity = patch.get("quantity")
    if quantity is None:
        return
    if quantity < 0:
        raise ValidationError("quantity must be >= 0")
    if quantity > MAX_QUANTITY:
        raise ValidationError(f"quantity cannot exceed {MAX_QUANTITY:,}")


def enforce_rules_sale(patch: dict) -> None:
    if "kind" in patch:
        if patch["kind"] not in SALE_KINDS:
            raise ValidationError("kind must be UNIT or AKSESORIS")
    _check_amount(patch, "sell_price", allow_zero=False)
