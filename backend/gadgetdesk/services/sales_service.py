"""
Sale Transaction Coordinator

Recording a sale:
1. Resolve the reference key (serial/IMEI or SKU) to cost and stock state.
   Unknown key -> ReferenceNotFoundError, nothing written.
2. Snapshot cost, compute profit = sell_price - cost_snapshot.
3. Insert the SaleRecord.
4. Mutate inventory: unit READY -> SOLD, accessory quantity - 1.

Deleting a sale runs the steps backwards: drop the SaleRecord, then put the
item back (unit SOLD -> READY only if currently SOLD, accessory quantity + 1).

SALE_INVENTORY_MODE decides how steps 3 and 4 relate:
- "atomic" (default): one DB transaction; if the inventory step fails the
  sale is rolled back and the error propagates (409 for state conflicts).
- "best_effort": the SaleRecord commits first; a failing inventory step is
  rolled back on its own, logged, and recorded as inventory_synced=False.

cost_snapshot is never written after creation. profit is recomputed on a
sell_price edit only when RECOMPUTE_PROFIT_ON_PRICE_EDIT is enabled.
"""
from __future__ import annotations

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import SaleRecord
from ..validation import ConflictError, NotFoundError, ReferenceNotFoundError, StoreError
from . import inventory_service
from .inventory_service import InvalidStateError, InsufficientStockError, StockLevel
from .concurrency import lock_for_update, commit_or_raise
from .listing import ListParams, apply_search, apply_date_range, paginate

INVENTORY_MODES = ("atomic", "best_effort")

SALE_CREATE_FIELDS = {
    "invoice_id", "kind", "reference_key", "sale_date", "product_name",
    "color", "storage", "warranty", "sell_price",
    "buyer_name", "buyer_address", "buyer_phone", "referral",
}
SALE_MUTABLE_FIELDS = {"sale_date", "buyer_name", "sell_price", "referral"}

SALE_SEARCH_COLUMNS = (
    SaleRecord.invoice_id,
    SaleRecord.product_name,
    SaleRecord.reference_key,
    SaleRecord.buyer_name,
    SaleRecord.salesperson,
    SaleRecord.referral,
)

UNKNOWN_SALESPERSON = "UNKNOWN"


def _inventory_mode() -> str:
    return current_app.config.get("SALE_INVENTORY_MODE", "atomic")


def _resolve_salesperson(salesperson: str | None) -> str:
    name = (salesperson or "").strip()
    return name or UNKNOWN_SALESPERSON


def _ensure_sellable(stock: StockLevel) -> None:
    """Reject before anything is written; the locked mutation re-checks."""
    if stock.kind == "UNIT":
        if stock.status != "READY":
            raise InvalidStateError(f"Unit {stock.key} is {stock.status}, not READY")
        return

    allow_negative = current_app.config.get("ALLOW_NEGATIVE_ACCESSORY_STOCK", False)
    if (stock.quantity or 0) - 1 < 0 and not allow_negative:
        raise InsufficientStockError(f"SKU {stock.key} is out of stock")


def _apply_sale_to_inventory(kind: str, key: str) -> None:
    if kind == "UNIT":
        inventory_service.mark_sold(key, commit=False)
    else:
        inventory_service.decrement(key, commit=False)


def _reverse_sale_in_inventory(kind: str, key: str) -> None:
    try:
        if kind == "UNIT":
            inventory_service.mark_ready(key, commit=False)
        else:
            inventory_service.increment(key, commit=False)
    except NotFoundError:
        # Inventory row was deleted or re-keyed since the sale; nothing to put back.
        current_app.logger.info("No inventory row for %s %s; skipping reversal", kind, key)


def get_sale(sale_id: int) -> SaleRecord:
    sale = db.session.get(SaleRecord, sale_id)
    if sale is None:
        raise NotFoundError("Sale not found")
    return sale


def record_sale(patch: dict, salesperson: str | None = None) -> SaleRecord:
    """
    Record a sale against inventory.

    Args:
        patch: validated sale fields (see SALE_CREATE_FIELDS)
        salesperson: display name of the authenticated user; "UNKNOWN" if absent

    Raises:
        ReferenceNotFoundError: reference_key not in inventory (nothing written)
        InvalidStateError: unit is not READY
        InsufficientStockError: accessory has no stock
        StoreError: database failure
    """
    kind = patch["kind"]
    key = patch["reference_key"]

    try:
        stock = inventory_service.find_by_key(kind, key)
    except NotFoundError as e:
        raise ReferenceNotFoundError(str(e)) from e

    _ensure_sellable(stock)

    sale = SaleRecord(
        **{k: v for k, v in patch.items() if k in SALE_CREATE_FIELDS},
        cost_snapshot=stock.cost,
        profit=patch["sell_price"] - stock.cost,
        salesperson=_resolve_salesperson(salesperson),
        inventory_synced=True,
    )
    db.session.add(sale)

    if _inventory_mode() == "atomic":
        try:
            db.session.flush()
            _apply_sale_to_inventory(kind, key)
        except NotFoundError as e:
            # Inventory row vanished between lookup and the locked update.
            db.session.rollback()
            raise ReferenceNotFoundError(str(e)) from e
        except ConflictError:
            db.session.rollback()
            raise
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StoreError(str(getattr(exc, "orig", None) or exc)) from exc
        commit_or_raise()
        current_app.logger.info(
            "Recorded sale id=%s invoice=%s %s %s profit=%s",
            sale.id, sale.invoice_id, kind, key, sale.profit,
        )
        return sale

    commit_or_raise()
    try:
        _apply_sale_to_inventory(kind, key)
        commit_or_raise()
    except (ConflictError, NotFoundError, StoreError, SQLAlchemyError) as exc:
        db.session.rollback()
        current_app.logger.warning(
            "Sale id=%s recorded but inventory not updated for %s %s: %s",
            sale.id, kind, key, exc,
        )
        sale.inventory_synced = False
        commit_or_raise()

    current_app.logger.info(
        "Recorded sale id=%s invoice=%s %s %s profit=%s synced=%s",
        sale.id, sale.invoice_id, kind, key, sale.profit, sale.inventory_synced,
    )
    return sale


def update_sale(sale_id: int, patch: dict) -> SaleRecord:
    """
    Edit the mutable fields of a sale (date, buyer, sell price, referral).

    cost_snapshot is never touched. profit follows sell_price only when
    RECOMPUTE_PROFIT_ON_PRICE_EDIT is enabled.
    """
    sale = get_sale(sale_id)

    for k, v in patch.items():
        if k not in SALE_MUTABLE_FIELDS:
            continue
        setattr(sale, k, v)

    if "sell_price" in patch and current_app.config.get("RECOMPUTE_PROFIT_ON_PRICE_EDIT", False):
        sale.profit = sale.sell_price - sale.cost_snapshot

    commit_or_raise()
    return sale


def delete_sale(sale_id: int) -> bool:
    """
    Delete a sale and put its item back into inventory.

    Returns True when the inventory side is consistent afterwards, False when
    the best-effort reversal failed (the sale is gone either way).

    A sale that never reached inventory (inventory_synced=False) is not
    reversed, so accessory counts are not inflated.
    """
    sale = lock_for_update(db.session.query(SaleRecord).filter_by(id=sale_id)).first()
    if sale is None:
        raise NotFoundError("Sale not found")

    kind, key = sale.kind, sale.reference_key
    needs_reversal = bool(sale.inventory_synced)
    db.session.delete(sale)

    if _inventory_mode() == "atomic":
        try:
            if needs_reversal:
                _reverse_sale_in_inventory(kind, key)
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StoreError(str(getattr(exc, "orig", None) or exc)) from exc
        commit_or_raise()
        current_app.logger.info("Deleted sale id=%s (%s %s)", sale_id, kind, key)
        return True

    commit_or_raise()
    if not needs_reversal:
        return True
    try:
        _reverse_sale_in_inventory(kind, key)
        commit_or_raise()
    except (StoreError, SQLAlchemyError) as exc:
        db.session.rollback()
        current_app.logger.warning(
            "Sale id=%s deleted but inventory not restored for %s %s: %s",
            sale_id, kind, key, exc,
        )
        return False

    current_app.logger.info("Deleted sale id=%s (%s %s)", sale_id, kind, key)
    return True


def _filtered_sales_query(params: ListParams):
    query = db.session.query(SaleRecord)
    query = apply_search(query, params.q, SALE_SEARCH_COLUMNS)
    return apply_date_range(query, SaleRecord.sale_date, params.date_from, params.date_to)


def list_sales(params: ListParams) -> tuple[list[SaleRecord], int]:
    query = _filtered_sales_query(params).order_by(
        SaleRecord.sale_date.desc(),
        SaleRecord.created_at.desc(),
        SaleRecord.id.desc(),
    )
    return paginate(query, params)


def summarize_sales(params: ListParams) -> dict:
    """Totals over every sale matching q/from/to (not just one page)."""
    filtered = _filtered_sales_query(params).subquery()
    row = db.session.query(
        func.count(filtered.c.id).label("count"),
        func.coalesce(func.sum(filtered.c.sell_price), 0).label("revenue"),
        func.coalesce(func.sum(filtered.c.cost_snapshot), 0).label("cost"),
        func.coalesce(func.sum(filtered.c.profit), 0).label("profit"),
    ).one()

    return {
        "count": int(row.count or 0),
        "revenue": int(row.revenue or 0),
        "cost": int(row.cost or 0),
        "profit": int(row.profit or 0),
    }
