from __future__ import annotations

from ..extensions import db
from phoneledger.time_utils import to_iso_date, to_utc_z, utcnow


class Sale(db.Model):
    """
    A completed sale of one product (possibly several units) to a customer.

    product_id is a plain reference, not a foreign key: deleting a product
    leaves its sales in place.

    net_profit_cents is computed when the sale is written and recomputed
    only when the sale is edited:
        sale_price - (purchase_price * quantity + cost + accessory cost)
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_sale_date", "sale_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    product_id = db.Column(db.Integer, nullable=False, index=True)

    customer_name = db.Column(db.String(255), nullable=False, index=True)
    sale_date = db.Column(db.Date, nullable=False)
    imei = db.Column(db.String(64), nullable=True)

    sale_price_cents = db.Column(db.Integer, nullable=False)
    # Shipping and other incidental costs entered at sale time
    cost_cents = db.Column(db.Integer, nullable=False, default=0)
    net_profit_cents = db.Column(db.Integer, nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    accessories = db.relationship(
        "SaleAccessory",
        backref="sale",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="SaleAccessory.id",
    )

    def __repr__(self) -> str:
        return f"<Sale id={self.id} product_id={self.product_id} net={self.net_profit_cents}>"

    @property
    def accessory_cost_cents(self) -> int:
        return sum(a.unit_price_cents * a.quantity for a in self.accessories)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "customer_name": self.customer_name,
            "sale_date": to_iso_date(self.sale_date),
            "imei": self.imei,
            "sale_price_cents": self.sale_price_cents,
            "cost_cents": self.cost_cents,
            "net_profit_cents": self.net_profit_cents,
            "quantity": self.quantity,
            "accessories": [a.to_dict() for a in self.accessories],
            "created_at": to_utc_z(self.created_at),
        }


class SaleAccessory(db.Model):
    """
    Accessory usage embedded in a sale.

    unit_price_cents is the accessory price at the time of sale. It is never
    re-derived from the current Accessory row, which may have changed or
    been deleted since.
    """
    __tablename__ = "sale_accessories"
    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)

    accessory_id = db.Column(db.Integer, nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)

    def to_dict(self) -> dict:
        return {
            "accessory_id": self.accessory_id,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
        }
