# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/phoneledger/routes/sales.py
"""Sales API routes"""

from flask import Blueprint, request, jsonify, current_app

from ..models import Sale
from ..services import sales_service
from ..services.sales_service import SaleError
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_sale,
    ValidationError,
    ConflictError,
    NotFoundError,
)
from ..decorators import require_unlocked

SALE_CREATE_POLICY = ModelValidationPolicy(
    writable_fields={
        "product_id", "customer_name", "sale_date", "imei",
        "sale_price_cents", "cost_cents", "quantity",
    },
    required_on_create={"product_id", "customer_name", "sale_price_cents"},
)

SALE_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"customer_name", "sale_date", "imei", "sale_price_cents", "cost_cents"},
)

sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.get("")
@require_unlocked
def list_sales_route():
    """
    Sales, most recent sale date first.

    Query params:
    - product_id: int (optional)
    """
    product_id = request.args.get("product_id", type=int)
    return sales_service.list_sales(product_id=product_id)


@sales_bp.post("")
@require_unlocked
def create_sale_route():
    """
    Record a sale.

    Body: product_id, customer_name, sale_price_cents, and optionally
    cost_cents, quantity, sale_date, imei, accessories
    ([{"accessory_id": 1, "quantity": 1}]).
    """
    payload = dict(request.get_json(silent=True) or {})
    accessories = payload.pop("accessories", None) or []
    if not isinstance(accessories, list):
        return jsonify({"error": "accessories must be a list"}), 400

    try:
        patch = validate_payload(model=Sale, payload=payload, policy=SALE_CREATE_POLICY, partial=False)
        enforce_rules_sale(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        sale = sales_service.record_sale(
            product_id=patch["product_id"],
            customer_name=patch["customer_name"],
            sale_price_cents=patch["sale_price_cents"],
            cost_cents=patch.get("cost_cents") or 0,
            quantity=patch.get("quantity") or 1,
            sale_date=patch.get("sale_date"),
            imei=patch.get("imei"),
            accessories=accessories,
        )
    except SaleError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to record sale")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"sale": sales_service.sale_with_details(sale)}), 201


@sales_bp.get("/<int:sale_id>")
@require_unlocked
def get_sale_route(sale_id: int):
    try:
        sale = sales_service.get_sale(sale_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"sale": sales_service.sale_with_details(sale)}), 200


@sales_bp.put("/<int:sale_id>")
@require_unlocked
def update_sale_route(sale_id: int):
    """
    Edit a sale; net profit is recomputed.
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Sale, payload=payload, policy=SALE_UPDATE_POLICY, partial=True)
        enforce_rules_sale(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        sale = sales_service.update_sale(sale_id=sale_id, patch=patch)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to update sale")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"sale": sales_service.sale_with_details(sale)}), 200


@sales_bp.delete("/<int:sale_id>")
@require_unlocked
def delete_sale_route(sale_id: int):
    """Delete a sale. Stock is not restored."""
    try:
        sales_service.delete_sale(sale_id=sale_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete sale")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"ok": True}), 200
