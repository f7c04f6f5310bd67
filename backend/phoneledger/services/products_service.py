# backend/phoneledger/services/products_service.py
"""
Products Service

Product intake, edits and stock enumeration.

- create_product assigns the code and the stock period (current month)
- update_product keeps is_sold in step with quantity
- delete_product is a hard delete; sales referencing the product stay
"""
from __future__ import annotations

from ..extensions import db
from ..models import Product
from ..validation import NotFoundError
from .accounting import current_month_year
from .code_service import next_product_code

PRODUCT_MUTABLE_FIELDS = {"name", "purchase_price_cents", "quantity"}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)

    if "quantity" in patch:
        p.is_sold = p.quantity == 0


def list_products(
    *,
    is_sold: bool | None = None,
    month_year: str | None = None,
) -> dict:
    """
    Products, newest first.

    Args:
        is_sold: True -> sold out, False -> still in stock, None -> all
        month_year: restrict to one stock period ("YYYY-MM")

    Returns:
        Dict with 'items' and 'count'.
    """
    query = db.session.query(Product)
    if is_sold is not None:
        query = query.filter(Product.is_sold == is_sold)
    if month_year is not None:
        query = query.filter(Product.month_year == month_year)

    products = query.order_by(Product.created_at.desc(), Product.id.desc()).all()
    return {
        "items": [p.to_dict() for p in products],
        "count": len(products),
    }


def get_product(product_id: int) -> Product:
    p = db.session.get(Product, product_id)
    if p is None:
        raise NotFoundError("Product not found")
    return p


def create_product(*, patch: dict, month_year: str | None = None) -> dict:
    """
    Create product using a validated patch dict.

    Args:
        patch: name, purchase_price_cents, quantity (defaults to 1)
        month_year: stock period; defaults to the current calendar month

    Returns:
        Created product dict (including the generated code)
    """
    month_year = month_year or current_month_year()

    p = Product(
        month_year=month_year,
        code=next_product_code(month_year),
        quantity=1,
        is_sold=False,
    )
    apply_product_patch(p, patch)

    db.session.add(p)
    db.session.commit()
    return p.to_dict()


def update_product(*, product_id: int, patch: dict) -> dict:
    """
    Update a product.

    Raises:
        NotFoundError: If the product does not exist
    """
    p = get_product(product_id)
    apply_product_patch(p, patch)
    db.session.commit()
    return p.to_dict()


def delete_product(*, product_id: int) -> None:
    """
    Delete a product. Sales keep their product_id; readers show the product
    as unknown.

    Raises:
        NotFoundError: If the product does not exist
    """
    p = get_product(product_id)
    db.session.delete(p)
    db.session.commit()
