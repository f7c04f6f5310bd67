# Overview: Flask API routes for debts; parses input and returns JSON responses.

from flask import Blueprint, request, current_app

from ..models import Debt
from ..services import debts_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_debt,
    ValidationError,
    NotFoundError,
)
from ..decorators import require_unlocked

DEBT_POLICY = ModelValidationPolicy(
    writable_fields={"description", "amount_cents", "date"},
    required_on_create={"description", "amount_cents"},
)

debts_bp = Blueprint("debts", __name__, url_prefix="/api/debts")


@debts_bp.get("")
@require_unlocked
def list_debts_route():
    return debts_service.list_debts()


@debts_bp.get("/<int:debt_id>")
@require_unlocked
def get_debt_route(debt_id: int):
    try:
        return debts_service.get_debt(debt_id).to_dict()
    except NotFoundError as e:
        return {"error": str(e)}, 404


@debts_bp.post("")
@require_unlocked
def create_debt_route():
    """date defaults to today."""
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Debt, payload=payload, policy=DEBT_POLICY, partial=False)
        enforce_rules_debt(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        created = debts_service.create_debt(patch=patch)
    except Exception:
        current_app.logger.exception("Failed to create debt")
        return {"error": "Internal server error"}, 500

    return created, 201


@debts_bp.put("/<int:debt_id>")
@require_unlocked
def update_debt_route(debt_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Debt, payload=payload, policy=DEBT_POLICY, partial=True)
        enforce_rules_debt(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        updated = debts_service.update_debt(debt_id=debt_id, patch=patch)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except Exception:
        current_app.logger.exception("Failed to update debt")
        return {"error": "Internal server error"}, 500

    return updated, 200


@debts_bp.delete("/<int:debt_id>")
@require_unlocked
def delete_debt_route(debt_id: int):
    try:
        debts_service.delete_debt(debt_id=debt_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except Exception:
        current_app.logger.exception("Failed to delete debt")
        return {"error": "Internal server error"}, 500

    return {"ok": True}, 200
