# backend/gadgetdesk/routes/accessories.py
"""
Accessory (quantity-tracked) stock routes.

SECURITY: All routes require authentication.

status filter: READY = quantity > 0, SOLD = quantity 0.
Deletion is unguarded.
"""
from flask import Blueprint, request, current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import InventoryAccessory
from ..services import inventory_service
from ..services.listing import parse_list_args, list_payload
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    drop_unset,
    enforce_rules_accessory,
    ValidationError,
    NotFoundError,
    ConflictError,
    StoreError,
)
from ..decorators import require_auth

accessories_bp = Blueprint("accessories", __name__, url_prefix="/api/accessories")

ACCESSORY_POLICY = ModelValidationPolicy(
    writable_fields={
        "sku", "product_name", "storage", "color", "warranty",
        "origin", "cost", "quantity", "intake_date",
    },
    required_on_create={"sku", "product_name", "cost", "intake_date"},
)


@accessories_bp.get("")
@require_auth
def list_accessories_route():
    """
    List accessories.

    Query params: q, status (READY|SOLD|ALL), from, to, page, pageSize
    """
    try:
        params = parse_list_args(request.args)
        rows, total = inventory_service.list_accessories(params)
    except ValidationError as e:
        return {"ok": False, "error": str(e)}, 400
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Failed to list accessories")
        return {"ok": False, "error": str(e)}, 500

    return list_payload(rows, total, params), 200


@accessories_bp.post("")
@require_auth
def create_accessory_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(
            model=InventoryAccessory, payload=payload, policy=ACCESSORY_POLICY, partial=False
        )
        enforce_rules_accessory(patch)
        accessory = inventory_service.create_accessory(patch)
    except ValidationError as e:
        return {"ok": False, "error": str(e)}, 400
    except ConflictError as e:
        return {"ok": False, "error": str(e)}, 409
    except (StoreError, SQLAlchemyError) as e:
        db.session.rollback()
        current_app.logger.exception("Failed to create accessory")
        return {"ok": False, "error": str(e)}, 500

    return {"ok": True, "id": accessory.id, "accessory": accessory.to_dict()}, 201


@accessories_bp.get("/<int:accessory_id>")
@require_auth
def get_accessory_route(accessory_id: int):
    try:
        accessory = inventory_service.get_accessory(accessory_id)
    except NotFoundError as e:
        return {"ok": False, "error": str(e)}, 404

    return {"ok": True, "data": accessory.to_dict()}, 200


@accessories_bp.patch("/<int:accessory_id>")
@require_auth
def update_accessory_route(accessory_id: int):
    try:
        payload = drop_unset(request.get_json(silent=True) or {})
        patch = validate_payload(
            model=InventoryAccessory, payload=payload, policy=ACCESSORY_POLICY, partial=True
        )
        enforce_rules_accessory(patch)
        accessory = inventory_service.update_accessory(accessory_id, patch)
    except ValidationError as e:
        return {"ok": False, "error": str(e)}, 400
    except NotFoundError as e:
        return {"ok": False, "error": str(e)}, 404
    except ConflictError as e:
        return {"ok": False, "error": str(e)}, 409
    except (StoreError, SQLAlchemyError) as e:
        db.session.rollback()
        current_app.logger.exception("Failed to update accessory")
        return {"ok": False, "error": str(e)}, 500

    return {"ok": True, "id": accessory.id, "accessory": accessory.to_dict()}, 200


@accessories_bp.delete("/<int:accessory_id>")
@require_auth
def delete_accessory_route(accessory_id: int):
    try:
        deleted_id = inventory_service.delete_accessory(accessory_id)
    except NotFoundError as e:
        return {"ok": False, "error": str(e)}, 404
    except (StoreError, SQLAlchemyError) as e:
        db.session.rollback()
        current_app.logger.exception("Failed to delete accessory")
        return {"ok": False, "error": str(e)}, 500

    return {"ok": True, "id": deleted_id}, 200
