# Overview: Product code allocation from a per-month sequence.

from __future__ import annotations

from flask import current_app
from sqlalchemy import update

from ..extensions import db
from ..models import Product, ProductCodeSequence
from .accounting import format_product_code


def _take_number(month_year: str) -> int:
    stmt = (
        update(ProductCodeSequence)
        .where(ProductCodeSequence.month_year == month_year)
        .values(next_number=ProductCodeSequence.next_number + 1)
    )
    result = db.session.execute(stmt)
    if result.rowcount:
        db.session.flush()
        current = (
            db.session.query(ProductCodeSequence.next_number)
            .filter_by(month_year=month_year)
            .scalar()
        )
        return current - 1

    seq = ProductCodeSequence(month_year=month_year, next_number=2)
    db.session.add(seq)
    db.session.flush()
    return 1


def next_product_code(month_year: str, prefix: str | None = None) -> str:
    """
    Allocate the next unused product code for month_year.

    Does not commit: the caller commits together with the product row.
    Codes already present (e.g. restored from a backup) are skipped.
    """
    if prefix is None:
        prefix = current_app.config.get("PRODUCT_CODE_PREFIX", "AOGZ")

    while True:
        code = format_product_code(month_year, _take_number(month_year), prefix=prefix)
        taken = db.session.query(Product.id).filter(Product.code == code).first()
        if not taken:
            return code
