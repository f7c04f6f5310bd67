"""
Sales Service - records sales and keeps stock and profit in step.

A sale touches three tables: it inserts the Sale (with its accessory usage
rows), decrements accessory stock and decrements the product quantity.
All checks run before the first write, and the writes share one session
commit, so a failure leaves the ledger exactly as it was.
"""

from __future__ import annotations

from datetime import date

from flask import current_app

from ..extensions import db
from ..models import Sale, SaleAccessory, Product, Accessory
from ..validation import ConflictError, NotFoundError, ValidationError
from .accounting import calculate_net_profit
from phoneledger.time_utils import today

UNKNOWN_PRODUCT_NAME = "Unknown product"

SALE_MUTABLE_FIELDS = {"customer_name", "sale_price_cents", "cost_cents", "sale_date", "imei"}


class SaleError(ValidationError):
    """Raised for sale operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def _merge_accessory_requests(requests: list[dict]) -> dict[int, int]:
    totals: dict[int, int] = {}
    for req in requests:
        if not isinstance(req, dict):
            raise SaleError("each accessory must be an object")
        accessory_id = req.get("accessory_id")
        qty = req.get("quantity")
        if not isinstance(accessory_id, int) or isinstance(accessory_id, bool):
            raise SaleError("accessory_id must be an integer")
        if not isinstance(qty, int) or isinstance(qty, bool) or qty < 1:
            raise SaleError("accessory quantity must be an integer >= 1",
                            details={"accessory_id": accessory_id})
        totals[accessory_id] = totals.get(accessory_id, 0) + qty
    return totals


def _load_accessories(totals: dict[int, int]) -> dict[int, Accessory]:
    accessories: dict[int, Accessory] = {}
    missing = []
    insufficient = []
    for accessory_id, qty in totals.items():
        acc = db.session.get(Accessory, accessory_id)
        if acc is None:
            missing.append(accessory_id)
            continue
        if acc.quantity < qty:
            insufficient.append({
                "accessory_id": accessory_id,
                "requested_quantity": qty,
                "on_hand": acc.quantity,
            })
        accessories[accessory_id] = acc

    if missing:
        raise SaleError("Accessory not found", details={"accessory_ids": missing})
    if insufficient:
        raise SaleError("Insufficient accessory stock", details={"items": insufficient})
    return accessories


def record_sale(
    *,
    product_id: int,
    customer_name: str,
    sale_price_cents: int,
    cost_cents: int = 0,
    quantity: int = 1,
    sale_date: date | None = None,
    imei: str | None = None,
    accessories: list[dict] | None = None,
) -> Sale:
    """
    Sell `quantity` units of a product.

    accessories: [{"accessory_id": int, "quantity": int}, ...]

    Raises:
        NotFoundError: product does not exist
        ConflictError: product already sold
        SaleError: not enough product or accessory stock, bad accessory input
    """
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    if product.is_sold:
        raise ConflictError("Product is already sold")
    if quantity < 1:
        raise SaleError("quantity must be >= 1")
    if product.quantity < quantity:
        raise SaleError(
            "Insufficient product stock",
            details={
                "product_id": product.id,
                "requested_quantity": quantity,
                "on_hand": product.quantity,
            },
        )

    totals = _merge_accessory_requests(accessories or [])
    stock = _load_accessories(totals)

    # Prices are snapshotted now; later accessory price edits do not move profit
    usages = [
        SaleAccessory(
            accessory_id=accessory_id,
            quantity=qty,
            unit_price_cents=stock[accessory_id].price_cents,
        )
        for accessory_id, qty in totals.items()
    ]

    sale = Sale(
        product_id=product.id,
        customer_name=customer_name,
        sale_date=sale_date or today(),
        imei=imei,
        sale_price_cents=sale_price_cents,
        cost_cents=cost_cents,
        quantity=quantity,
        net_profit_cents=calculate_net_profit(
            sale_price_cents,
            product.purchase_price_cents,
            cost_cents,
            quantity=quantity,
            accessories=usages,
        ),
        accessories=usages,
    )

    try:
        db.session.add(sale)

        for accessory_id, qty in totals.items():
            acc = stock[accessory_id]
            acc.quantity = max(acc.quantity - qty, 0)

        product.quantity = product.quantity - quantity
        if product.quantity == 0:
            product.is_sold = True

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        "Sale %s recorded: product=%s qty=%s net_profit_cents=%s",
        sale.id, product.id, quantity, sale.net_profit_cents,
    )
    return sale


def get_sale(sale_id: int) -> Sale:
    sale = db.session.get(Sale, sale_id)
    if sale is None:
        raise NotFoundError("Sale not found")
    return sale


def _product_names(product_ids: set[int]) -> dict[int, str]:
    if not product_ids:
        return {}
    rows = (
        db.session.query(Product.id, Product.name)
        .filter(Product.id.in_(product_ids))
        .all()
    )
    return {pid: name for pid, name in rows}


def sale_with_details(sale: Sale, names: dict[int, str] | None = None) -> dict:
    if names is None:
        names = _product_names({sale.product_id})
    data = sale.to_dict()
    data["product_name"] = names.get(sale.product_id, UNKNOWN_PRODUCT_NAME)
    return data


def list_sales(*, product_id: int | None = None, limit: int | None = None) -> dict:
    """
    Sales in reverse-chronological order (sale_date, then newest row).
    Each item carries the product name, or "Unknown product" if it was deleted.
    """
    query = db.session.query(Sale)
    if product_id is not None:
        query = query.filter(Sale.product_id == product_id)
    query = query.order_by(Sale.sale_date.desc(), Sale.id.desc())
    if limit is not None:
        query = query.limit(limit)
    sales = query.all()

    names = _product_names({s.product_id for s in sales})
    items = [sale_with_details(s, names) for s in sales]
    return {
        "items": items,
        "count": len(items),
        "total_revenue_cents": sum(s.sale_price_cents for s in sales),
        "total_profit_cents": sum(s.net_profit_cents for s in sales),
    }


def update_sale(*, sale_id: int, patch: dict) -> Sale:
    """
    Edit a sale and recompute its net profit.

    Uses the product's current purchase price and the accessory prices
    snapshotted when the sale was made. Quantity and accessories are fixed
    once recorded.

    Raises:
        NotFoundError: sale does not exist
        ConflictError: the sold product has since been deleted
    """
    sale = get_sale(sale_id)
    product = db.session.get(Product, sale.product_id)
    if product is None:
        raise ConflictError("Product for this sale no longer exists")

    for k, v in patch.items():
        if k not in SALE_MUTABLE_FIELDS:
            continue
        setattr(sale, k, v)

    sale.net_profit_cents = calculate_net_profit(
        sale.sale_price_cents,
        product.purchase_price_cents,
        sale.cost_cents,
        quantity=sale.quantity,
        accessories=sale.accessories,
    )
    db.session.commit()
    return sale


def delete_sale(*, sale_id: int) -> None:
    """Delete a sale record. Stock is not restored."""
    sale = get_sale(sale_id)
    db.session.delete(sale)
    db.session.commit()
