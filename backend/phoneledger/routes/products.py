# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/phoneledger/routes/products.py
"""
Product intake and stock routes.

All routes require an unlocked gate session.
"""
from flask import Blueprint, request, current_app
from ..services import products_service
from ..models import Product
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    ValidationError,
    NotFoundError,
)
from ..services.accounting import parse_month_year
from ..decorators import require_unlocked

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "purchase_price_cents", "quantity"},
    required_on_create={"name", "purchase_price_cents"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def parse_bool_arg(name: str) -> bool | None:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    value = raw.strip().lower()
    if value in ("1", "true", "yes"):
        return True
    if value in ("0", "false", "no"):
        return False
    raise ValidationError(f"{name} must be true or false")


@products_bp.get("")
@require_unlocked
def list_products():
    """
    List products, newest first.

    Query params:
    - is_sold: true|false (optional) - sold out vs. in stock
    - month_year: YYYY-MM (optional) - stock period
    """
    try:
        is_sold = parse_bool_arg("is_sold")
        month_year = request.args.get("month_year") or None
        if month_year is not None:
            parse_month_year(month_year)
    except ValueError as e:
        return {"error": str(e)}, 400

    return products_service.list_products(is_sold=is_sold, month_year=month_year)


@products_bp.get("/<int:product_id>")
@require_unlocked
def get_product_route(product_id: int):
    try:
        return products_service.get_product(product_id).to_dict()
    except NotFoundError as e:
        return {"error": str(e)}, 404


@products_bp.post("")
@require_unlocked
def create_product_route():
    """
    Create a new product. The code and stock period are assigned here.
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch, creating=True)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        created = products_service.create_product(patch=patch)
    except Exception:
        current_app.logger.exception("Failed to create product")
        return {"error": "Internal server error"}, 500

    return created, 201


@products_bp.put("/<int:product_id>")
@require_unlocked
def update_product_route(product_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch, creating=False)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        updated = products_service.update_product(product_id=product_id, patch=patch)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except Exception:
        current_app.logger.exception("Failed to update product")
        return {"error": "Internal server error"}, 500

    return updated, 200


@products_bp.delete("/<int:product_id>")
@require_unlocked
def delete_product_route(product_id: int):
    """
    Delete a product. Its sales are kept.
    """
    try:
        products_service.delete_product(product_id=product_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except Exception:
        current_app.logger.exception("Failed to delete product")
        return {"error": "Internal server error"}, 500

    return {"ok": True}, 200
