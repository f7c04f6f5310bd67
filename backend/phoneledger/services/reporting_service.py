# Overview: Dashboard figures derived from the ledger tables.

from __future__ import annotations

from sqlalchemy import func

from ..extensions import db
from ..models import Product, Sale
from .accessories_service import accessory_stock_value_cents
from .accounting import current_month_year, month_year_of
from .debts_service import total_debt_cents
from .sales_service import list_sales

RECENT_SALES_LIMIT = 5


def get_dashboard_stats(current_month: str | None = None) -> dict:
    """
    - stock_value_cents: purchase price x quantity over unsold products
    - total_profit_cents: net profit over all sales
    - monthly_profit_cents: net profit of sales dated in current_month
    - recent_sales: latest sales with product names
    """
    current = current_month or current_month_year()

    total_products = db.session.query(func.count(Product.id)).scalar() or 0
    sold_products = (
        db.session.query(func.count(Product.id))
        .filter(Product.is_sold.is_(True))
        .scalar()
    ) or 0
    stock_value = (
        db.session.query(
            func.coalesce(func.sum(Product.purchase_price_cents * Product.quantity), 0)
        )
        .filter(Product.is_sold.is_(False))
        .scalar()
    )

    total_profit = 0
    monthly_profit = 0
    for sale_date, net in db.session.query(Sale.sale_date, Sale.net_profit_cents).all():
        total_profit += net
        if month_year_of(sale_date) == current:
            monthly_profit += net

    return {
        "current_month": current,
        "total_products": int(total_products),
        "sold_products": int(sold_products),
        "stock_value_cents": int(stock_value or 0),
        "total_profit_cents": total_profit,
        "monthly_profit_cents": monthly_profit,
        "accessory_stock_value_cents": accessory_stock_value_cents(),
        "total_debt_cents": total_debt_cents(),
        "recent_sales": list_sales(limit=RECENT_SALES_LIMIT)["items"],
    }
