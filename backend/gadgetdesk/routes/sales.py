# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/gadgetdesk/routes/sales.py
"""
Sales ledger routes.

SECURITY: All routes require authentication. The salesperson written on a
new sale is the logged-in user's display name.
"""
from flask import Blueprint, request, current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import SaleRecord
from ..services import sales_service
from ..services.listing import parse_list_args, list_payload
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    drop_unset,
    enforce_rules_sale,
    ValidationError,
    NotFoundError,
    ConflictError,
    StoreError,
)
from ..decorators import require_auth, current_salesperson

sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")

SALE_CREATE_POLICY = ModelValidationPolicy(
    writable_fields=set(sales_service.SALE_CREATE_FIELDS),
    required_on_create={"invoice_id", "kind", "reference_key", "sale_date", "product_name", "sell_price"},
)

SALE_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields=set(sales_service.SALE_MUTABLE_FIELDS),
)


@sales_bp.get("")
@require_auth
def list_sales_route():
    """
    Sales history.

    Query params: q, from, to (on sale_date), page, pageSize. status is ignored.
    """
    try:
        params = parse_list_args(request.args, with_status=False)
        rows, total = sales_service.list_sales(params)
    except ValidationError as e:
        return {"ok": False, "error": str(e)}, 400
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Failed to list sales")
        return {"ok": False, "error": str(e)}, 500

    return list_payload(rows, total, params), 200


@sales_bp.get("/summary")
@require_auth
def sales_summary_route():
    """Count, revenue, cost and profit over all sales matching q/from/to."""
    try:
        params = parse_list_args(request.args, with_status=False)
        summary = sales_service.summarize_sales(params)
    except ValidationError as e:
        return {"ok": False, "error": str(e)}, 400
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Failed to summarize sales")
        return {"ok": False, "error": str(e)}, 500

    return {"ok": True, "data": summary}, 200


@sales_bp.post("")
@require_auth
def record_sale_route():
    """
    Record a sale against a unit (serial/IMEI) or accessory (SKU).

    400: missing fields, bad kind, unknown reference_key
    409: unit not READY, accessory out of stock
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=SaleRecord, payload=payload, policy=SALE_CREATE_POLICY, partial=False)
        enforce_rules_sale(patch)
        sale = sales_service.record_sale(patch, salesperson=current_salesperson())
    except ValidationError as e:
        return {"ok": False, "error": str(e)}, 400
    except ConflictError as e:
        return {"ok": False, "error": str(e)}, 409
    except (StoreError, SQLAlchemyError) as e:
        db.session.rollback()
        current_app.logger.exception("Failed to record sale")
        return {"ok": False, "error": str(e)}, 500

    return {
        "ok": True,
        "id": sale.id,
        "profit": sale.profit,
        "inventory_synced": sale.inventory_synced,
        "sale": sale.to_dict(),
    }, 201


@sales_bp.get("/<int:sale_id>")
@require_auth
def get_sale_route(sale_id: int):
    try:
        sale = sales_service.get_sale(sale_id)
    except NotFoundError as e:
        return {"ok": False, "error": str(e)}, 404

    return {"ok": True, "data": sale.to_dict()}, 200


@sales_bp.patch("/<int:sale_id>")
@require_auth
def update_sale_route(sale_id: int):
    """Only sale_date, buyer_name, sell_price and referral are editable."""
    try:
        payload = drop_unset(request.get_json(silent=True) or {})
        patch = validate_payload(model=SaleRecord, payload=payload, policy=SALE_UPDATE_POLICY, partial=True)
        enforce_rules_sale(patch)
        sale = sales_service.update_sale(sale_id, patch)
    except ValidationError as e:
        return {"ok": False, "error": str(e)}, 400
    except NotFoundError as e:
        return {"ok": False, "error": str(e)}, 404
    except (StoreError, SQLAlchemyError) as e:
        db.session.rollback()
        current_app.logger.exception("Failed to update sale")
        return {"ok": False, "error": str(e)}, 500

    return {"ok": True, "id": sale.id, "sale": sale.to_dict()}, 200


@sales_bp.delete("/<int:sale_id>")
@require_auth
def delete_sale_route(sale_id: int):
    """Delete a sale and return its item to inventory."""
    try:
        synced = sales_service.delete_sale(sale_id)
    except NotFoundError as e:
        return {"ok": False, "error": str(e)}, 404
    except (StoreError, SQLAlchemyError) as e:
        db.session.rollback()
        current_app.logger.exception("Failed to delete sale")
        return {"ok": False, "error": str(e)}, 500

    return {"ok": True, "id": sale_id, "inventory_synced": synced}, 200
