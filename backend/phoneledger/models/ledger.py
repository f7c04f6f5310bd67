from __future__ import annotations

from ..extensions import db
from phoneledger.time_utils import to_iso_date, to_utc_z, utcnow


class MonthlyPeriod(db.Model):
    """
    Marks which month is "current" for stock rollover.

    A rollover inserts an active row for the next month and deactivates the
    row of the month being closed (if one exists).
    """
    __tablename__ = "monthly_periods"
    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    month_year = db.Column(db.String(7), nullable=False, index=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def __repr__(self) -> str:
        return f"<MonthlyPeriod id={self.id} month_year={self.month_year!r} active={self.is_active}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "month_year": self.month_year,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


class Debt(db.Model):
    __tablename__ = "debts"
    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    description = db.Column(db.String(255), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    date = db.Column(db.Date, nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Debt id={self.id} amount={self.amount_cents} date={self.date}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "amount_cents": self.amount_cents,
            "date": to_iso_date(self.date),
            "created_at": to_utc_z(self.created_at),
        }
