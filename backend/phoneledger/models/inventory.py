from __future__ import annotations

from ..extensions import db
from phoneledger.time_utils import to_utc_z, utcnow


ACCESSORY_TYPES = ("case", "screen-protector", "cable")


class Product(db.Model):
    """
    A purchased device (or batch of identical devices) waiting to be sold.

    CODE DESIGN DECISION:
    Product.code is allocated from ProductCodeSequence, one counter per
    month, so codes are unique: UniqueConstraint("code").

    PERIOD:
    month_year is the stock period the product currently belongs to. It is
    set at intake and overwritten by the monthly rollover while the product
    is unsold. It is a label, not a history.

    SOLD FLAG:
    is_sold flips to True when quantity reaches 0 through a sale.
    Deleting a product does not touch its sales.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.UniqueConstraint("code", name="uq_products_code"),
        db.Index("ix_products_sold_month", "is_sold", "month_year"),
        db.CheckConstraint("quantity >= 0", name="ck_products_quantity_nonneg"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False, index=True)
    code = db.Column(db.String(32), nullable=False)

    # Authoritative storage in cents (frontend may only format for display)
    purchase_price_cents = db.Column(db.Integer, nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=1)

    is_sold = db.Column(db.Boolean, nullable=False, default=False, index=True)
    month_year = db.Column(db.String(7), nullable=False, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def __repr__(self) -> str:
        return f"<Product id={self.id} code={self.code!r} name={self.name!r} qty={self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "purchase_price_cents": self.purchase_price_cents,
            "quantity": self.quantity,
            "is_sold": self.is_sold,
            "month_year": self.month_year,
            "created_at": to_utc_z(self.created_at),
        }


class ProductCodeSequence(db.Model):
    """
    Per-month counter for product codes.

    next_number is the number the next product created in month_year gets.
    """
    __tablename__ = "product_code_sequences"
    __table_args__ = (
        db.UniqueConstraint("month_year", name="uq_product_code_sequences_month"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    month_year = db.Column(db.String(7), nullable=False)
    next_number = db.Column(db.Integer, nullable=False, default=1)

    def __repr__(self) -> str:
        return f"<ProductCodeSequence month_year={self.month_year!r} next={self.next_number}>"


class Accessory(db.Model):
    """Cases, screen protectors and cables kept in stock and bundled with sales."""
    __tablename__ = "accessories"
    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="ck_accessories_quantity_nonneg"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    type = db.Column(db.String(32), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    price_cents = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def __repr__(self) -> str:
        return f"<Accessory id={self.id} name={self.name!r} type={self.type} qty={self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "quantity": self.quantity,
            "price_cents": self.price_cents,
            "created_at": to_utc_z(self.created_at),
        }
