# Overview: Flask API routes for accessory inventory; parses input and returns JSON responses.

from flask import Blueprint, request, current_app

from ..models import Accessory, ACCESSORY_TYPES
from ..services import accessories_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_accessory,
    ValidationError,
    NotFoundError,
)
from ..decorators import require_unlocked

ACCESSORY_POLICY = ModelValidationPolicy(
    writable_fields={"name", "type", "quantity", "price_cents"},
    required_on_create={"name", "type", "quantity", "price_cents"},
)

accessories_bp = Blueprint("accessories", __name__, url_prefix="/api/accessories")


@accessories_bp.get("")
@require_unlocked
def list_accessories_route():
    """
    Query params:
    - type: case | screen-protector | cable (optional)
    """
    accessory_type = request.args.get("type") or None
    if accessory_type is not None and accessory_type not in ACCESSORY_TYPES:
        return {"error": f"type must be one of: {', '.join(ACCESSORY_TYPES)}"}, 400
    return accessories_service.list_accessories(type=accessory_type)


@accessories_bp.get("/<int:accessory_id>")
@require_unlocked
def get_accessory_route(accessory_id: int):
    try:
        return accessories_service.get_accessory(accessory_id).to_dict()
    except NotFoundError as e:
        return {"error": str(e)}, 404


@accessories_bp.post("")
@require_unlocked
def create_accessory_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Accessory, payload=payload, policy=ACCESSORY_POLICY, partial=False)
        enforce_rules_accessory(patch, creating=True)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        created = accessories_service.create_accessory(patch=patch)
    except Exception:
        current_app.logger.exception("Failed to create accessory")
        return {"error": "Internal server error"}, 500

    return created, 201


@accessories_bp.put("/<int:accessory_id>")
@require_unlocked
def update_accessory_route(accessory_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Accessory, payload=payload, policy=ACCESSORY_POLICY, partial=True)
        enforce_rules_accessory(patch, creating=False)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        updated = accessories_service.update_accessory(accessory_id=accessory_id, patch=patch)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except Exception:
        current_app.logger.exception("Failed to update accessory")
        return {"error": "Internal server error"}, 500

    return updated, 200


@accessories_bp.delete("/<int:accessory_id>")
@require_unlocked
def delete_accessory_route(accessory_id: int):
    try:
        accessories_service.delete_accessory(accessory_id=accessory_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except Exception:
        current_app.logger.exception("Failed to delete accessory")
        return {"error": "Internal server error"}, 500

    return {"ok": True}, 200
