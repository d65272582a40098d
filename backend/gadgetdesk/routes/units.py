# backend/gadgetdesk/routes/units.py
"""
Serialized stock (handsets, tablets) routes.

SECURITY: All routes require authentication.

Partial update semantics: fields omitted or sent as null keep their value.
Deleting a unit is only allowed while it is READY (409 otherwise).
"""
from flask import Blueprint, request, current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import InventoryUnit
from ..services import inventory_service
from ..services.listing import parse_list_args, list_payload
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    drop_unset,
    enforce_rules_unit,
    ValidationError,
    NotFoundError,
    ConflictError,
    StoreError,
)
from ..decorators import require_auth

units_bp = Blueprint("units", __name__, url_prefix="/api/units")

UNIT_FIELDS = {
    "product_name", "serial_number", "imei", "storage", "color",
    "warranty", "origin", "cost", "intake_date",
}

UNIT_CREATE_POLICY = ModelValidationPolicy(
    writable_fields=UNIT_FIELDS,
    required_on_create={"product_name"},
)

UNIT_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields=UNIT_FIELDS | {"status"},
)


@units_bp.get("")
@require_auth
def list_units_route():
    """
    List units.

    Query params: q, status (READY|SOLD|ALL), from, to, page, pageSize
    """
    try:
        params = parse_list_args(request.args)
        rows, total = inventory_service.list_units(params)
    except ValidationError as e:
        return {"ok": False, "error": str(e)}, 400
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Failed to list units")
        return {"ok": False, "error": str(e)}, 500

    return list_payload(rows, total, params), 200


@units_bp.post("")
@require_auth
def create_unit_route():
    """Record a unit intake. New units start READY."""
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=InventoryUnit, payload=payload, policy=UNIT_CREATE_POLICY, partial=False)
        enforce_rules_unit(patch)
        unit = inventory_service.create_unit(patch)
    except ValidationError as e:
        return {"ok": False, "error": str(e)}, 400
    except ConflictError as e:
        return {"ok": False, "error": str(e)}, 409
    except (StoreError, SQLAlchemyError) as e:
        db.session.rollback()
        current_app.logger.exception("Failed to create unit")
        return {"ok": False, "error": str(e)}, 500

    return {"ok": True, "id": unit.id, "unit": unit.to_dict()}, 201


@units_bp.get("/<int:unit_id>")
@require_auth
def get_unit_route(unit_id: int):
    try:
        unit = inventory_service.get_unit(unit_id)
    except NotFoundError as e:
        return {"ok": False, "error": str(e)}, 404

    return {"ok": True, "data": unit.to_dict()}, 200


@units_bp.patch("/<int:unit_id>")
@require_auth
def update_unit_route(unit_id: int):
    """Partial update; status may be set to READY or SOLD by hand."""
    try:
        payload = drop_unset(request.get_json(silent=True) or {})
        patch = validate_payload(model=InventoryUnit, payload=payload, policy=UNIT_UPDATE_POLICY, partial=True)
        enforce_rules_unit(patch)
        unit = inventory_service.update_unit(unit_id, patch)
    except ValidationError as e:
        return {"ok": False, "error": str(e)}, 400
    except NotFoundError as e:
        return {"ok": False, "error": str(e)}, 404
    except ConflictError as e:
        return {"ok": False, "error": str(e)}, 409
    except (StoreError, SQLAlchemyError) as e:
        db.session.rollback()
        current_app.logger.exception("Failed to update unit")
        return {"ok": False, "error": str(e)}, 500

    return {"ok": True, "id": unit.id, "unit": unit.to_dict()}, 200


@units_bp.delete("/<int:unit_id>")
@require_auth
def delete_unit_route(unit_id: int):
    """Delete a READY unit. SOLD units return 409."""
    try:
        deleted_id = inventory_service.delete_unit(unit_id)
    except NotFoundError as e:
        return {"ok": False, "error": str(e)}, 404
    except ConflictError as e:
        return {"ok": False, "error": str(e)}, 409
    except (StoreError, SQLAlchemyError) as e:
        db.session.rollback()
        current_app.logger.exception("Failed to delete unit")
        return {"ok": False, "error": str(e)}, 500

    return {"ok": True, "id": deleted_id}, 200
