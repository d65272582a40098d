# Overview: Service-layer operations for inventory; encapsulates business logic and database work.

# backend/gadgetdesk/services/inventory_service.py
"""
Inventory Store

Two kinds of stock:
- InventoryUnit: serialized, one row per device, status READY/SOLD
- InventoryAccessory: fungible, counted by quantity

Business invariants:
- A unit moves READY -> SOLD only through mark_sold, and only from READY.
- mark_ready is a no-op unless the unit is SOLD.
- Accessory quantity never goes below zero through decrement unless
  ALLOW_NEGATIVE_ACCESSORY_STOCK is enabled.
- Every mutation is a single-row update keyed by the unique serial/IMEI/SKU.
- Units may only be deleted while READY; accessories have no delete guard.

Sale-side mutations accept commit=False so the sale coordinator can keep the
ledger insert and the inventory change in one transaction.
"""
from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from ..extensions import db
from ..models import InventoryUnit, InventoryAccessory
from ..validation import ConflictError, NotFoundError, ValidationError, SALE_KINDS
from .concurrency import lock_for_update, commit_or_raise
from .listing import ListParams, apply_search, apply_date_range, paginate

UNIT_MUTABLE_FIELDS = {
    "product_name", "serial_number", "imei", "storage", "color",
    "warranty", "origin", "cost", "intake_date", "status",
}
ACCESSORY_MUTABLE_FIELDS = {
    "sku", "product_name", "storage", "color", "warranty",
    "origin", "cost", "quantity", "intake_date",
}

UNIT_SEARCH_COLUMNS = (
    InventoryUnit.product_name,
    InventoryUnit.serial_number,
    InventoryUnit.imei,
    InventoryUnit.storage,
    InventoryUnit.color,
    InventoryUnit.warranty,
    InventoryUnit.origin,
)
ACCESSORY_SEARCH_COLUMNS = (
    InventoryAccessory.product_name,
    InventoryAccessory.sku,
    InventoryAccessory.storage,
    InventoryAccessory.color,
    InventoryAccessory.warranty,
    InventoryAccessory.origin,
)


class InvalidStateError(ConflictError):
    """Unit is not in the state the operation requires (e.g. selling a SOLD unit)."""


class InsufficientStockError(ConflictError):
    """Accessory quantity would go negative."""


@dataclass(frozen=True)
class StockLevel:
    """What the sale coordinator needs to know about an inventory item."""
    kind: str
    key: str
    cost: int
    product_name: str
    status: str
    quantity: int | None = None


def _apply_patch(row, patch: dict, allowed: set[str]) -> None:
    for k, v in patch.items():
        if k not in allowed:
            continue
        setattr(row, k, v)


# =============================================================================
# KEY LOOKUP (used by the sale coordinator)
# =============================================================================

def get_unit_by_key(key: str, *, lock: bool = False) -> InventoryUnit | None:
    """Serial number wins over IMEI when both would match different rows."""
    for column in (InventoryUnit.serial_number, InventoryUnit.imei):
        query = db.session.query(InventoryUnit).filter(column == key)
        if lock:
            query = lock_for_update(query)
        unit = query.first()
        if unit is not None:
            return unit
    return None


def get_accessory_by_sku(sku: str, *, lock: bool = False) -> InventoryAccessory | None:
    query = db.session.query(InventoryAccessory).filter(InventoryAccessory.sku == sku)
    if lock:
        query = lock_for_update(query)
    return query.first()


def find_by_key(kind: str, key: str) -> StockLevel:
    """
    Resolve a sale reference key to cost and current stock state.

    Raises:
        ValidationError: unknown kind
        NotFoundError: no inventory row has this key
    """
    if kind not in SALE_KINDS:
        raise ValidationError("kind must be UNIT or AKSESORIS")

    if kind == "UNIT":
        unit = get_unit_by_key(key)
        if unit is None:
            raise NotFoundError(f"Serial/IMEI {key} not found")
        return StockLevel(
            kind=kind,
            key=key,
            cost=unit.cost,
            product_name=unit.product_name,
            status=unit.status,
        )

    accessory = get_accessory_by_sku(key)
    if accessory is None:
        raise NotFoundError(f"SKU {key} not found")
    return StockLevel(
        kind=kind,
        key=key,
        cost=accessory.cost,
        product_name=accessory.product_name,
        status=accessory.status,
        quantity=accessory.quantity,
    )


def mark_sold(key: str, *, commit: bool = True) -> InventoryUnit:
    unit = get_unit_by_key(key, lock=True)
    if unit is None:
        raise NotFoundError(f"Serial/IMEI {key} not found")
    if unit.status != "READY":
        raise InvalidStateError(f"Unit {key} is {unit.status}, not READY")

    unit.status = "SOLD"
    if commit:
        commit_or_raise()
    return unit


def mark_ready(key: str, *, commit: bool = True) -> bool:
    """
    Return a SOLD unit to stock.

    Returns True if the status changed, False if the unit was not SOLD.
    """
    unit = get_unit_by_key(key, lock=True)
    if unit is None:
        raise NotFoundError(f"Serial/IMEI {key} not found")
    if unit.status != "SOLD":
        return False

    unit.status = "READY"
    if commit:
        commit_or_raise()
    return True


def decrement(key: str, *, commit: bool = True) -> InventoryAccessory:
    accessory = get_accessory_by_sku(key, lock=True)
    if accessory is None:
        raise NotFoundError(f"SKU {key} not found")

    allow_negative = current_app.config.get("ALLOW_NEGATIVE_ACCESSORY_STOCK", False)
    if accessory.quantity - 1 < 0 and not allow_negative:
        raise InsufficientStockError(f"SKU {key} is out of stock")

    accessory.quantity = accessory.quantity - 1
    if commit:
        commit_or_raise()
    return accessory


def increment(key: str, *, commit: bool = True) -> InventoryAccessory:
    accessory = get_accessory_by_sku(key, lock=True)
    if accessory is None:
        raise NotFoundError(f"SKU {key} not found")

    accessory.quantity = accessory.quantity + 1
    if commit:
        commit_or_raise()
    return accessory


# =============================================================================
# UNITS: intake / edit
# =============================================================================

def _ensure_unit_identity_free(patch: dict, exclude_id: int | None = None) -> None:
    for field in ("serial_number", "imei"):
        value = patch.get(field)
        if not value:
            continue
        column = getattr(InventoryUnit, field)
        query = db.session.query(InventoryUnit).filter(column == value)
        if exclude_id is not None:
            query = query.filter(InventoryUnit.id != exclude_id)
        if query.first():
            raise ConflictError(f"{field} {value} already exists")


def get_unit(unit_id: int) -> InventoryUnit:
    unit = db.session.get(InventoryUnit, unit_id)
    if unit is None:
        raise NotFoundError("Unit not found")
    return unit


def list_units(params: ListParams) -> tuple[list[InventoryUnit], int]:
    query = db.session.query(InventoryUnit)
    if params.status:
        query = query.filter(InventoryUnit.status == params.status)
    query = apply_search(query, params.q, UNIT_SEARCH_COLUMNS)
    query = apply_date_range(query, InventoryUnit.intake_date, params.date_from, params.date_to)
    query = query.order_by(InventoryUnit.created_at.desc(), InventoryUnit.id.desc())
    return paginate(query, params)


def create_unit(patch: dict) -> InventoryUnit:
    """New units always start READY regardless of what the form sent."""
    _ensure_unit_identity_free(patch)

    unit = InventoryUnit(cost=0)
    _apply_patch(unit, patch, UNIT_MUTABLE_FIELDS)
    unit.status = "READY"
    if unit.cost is None:
        unit.cost = 0

    db.session.add(unit)
    commit_or_raise()
    return unit


def update_unit(unit_id: int, patch: dict) -> InventoryUnit:
    unit = get_unit(unit_id)
    _ensure_unit_identity_free(patch, exclude_id=unit.id)

    _apply_patch(unit, patch, UNIT_MUTABLE_FIELDS)
    commit_or_raise()
    return unit


def delete_unit(unit_id: int) -> int:
    unit = get_unit(unit_id)
    if unit.status != "READY":
        raise ConflictError(f"Only READY units can be deleted (unit is {unit.status})")

    db.session.delete(unit)
    commit_or_raise()
    return unit_id


# =============================================================================
# ACCESSORIES: intake / edit
# =============================================================================

def _ensure_sku_free(sku: str | None, exclude_id: int | None = None) -> None:
    if not sku:
        return
    query = db.session.query(InventoryAccessory).filter(InventoryAccessory.sku == sku)
    if exclude_id is not None:
        query = query.filter(InventoryAccessory.id != exclude_id)
    if query.first():
        raise ConflictError(f"SKU {sku} already exists")


def get_accessory(accessory_id: int) -> InventoryAccessory:
    accessory = db.session.get(InventoryAccessory, accessory_id)
    if accessory is None:
        raise NotFoundError("Accessory not found")
    return accessory


def list_accessories(params: ListParams) -> tuple[list[InventoryAccessory], int]:
    query = db.session.query(InventoryAccessory)
    if params.status == "READY":
        query = query.filter(InventoryAccessory.quantity > 0)
    elif params.status == "SOLD":
        query = query.filter(InventoryAccessory.quantity <= 0)
    query = apply_search(query, params.q, ACCESSORY_SEARCH_COLUMNS)
    query = apply_date_range(query, InventoryAccessory.intake_date, params.date_from, params.date_to)
    query = query.order_by(
        InventoryAccessory.intake_date.desc(),
        InventoryAccessory.created_at.desc(),
        InventoryAccessory.id.desc(),
    )
    return paginate(query, params)


def create_accessory(patch: dict) -> InventoryAccessory:
    _ensure_sku_free(patch.get("sku"))

    accessory = InventoryAccessory(quantity=1)
    _apply_patch(accessory, patch, ACCESSORY_MUTABLE_FIELDS)
    if accessory.quantity is None:
        accessory.quantity = 1

    db.session.add(accessory)
    commit_or_raise()
    return accessory


def update_accessory(accessory_id: int, patch: dict) -> InventoryAccessory:
    accessory = get_accessory(accessory_id)
    _ensure_sku_free(patch.get("sku"), exclude_id=accessory.id)

    _apply_patch(accessory, patch, ACCESSORY_MUTABLE_FIELDS)
    commit_or_raise()
    return accessory


def delete_accessory(accessory_id: int) -> int:
    accessory = get_accessory(accessory_id)
    db.session.delete(accessory)
    commit_or_raise()
    return accessory_id
