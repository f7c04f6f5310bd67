"""
Monthly periods and the stock rollover.

Rollover relabels every unsold product with the next month. It does not
move or copy rows, keeps no undo log and cannot be reversed; take a backup
first. All of its writes are committed together.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from flask import current_app

from ..extensions import db
from ..models import MonthlyPeriod, Product
from .accounting import current_month_year, next_month_year, parse_month_year
from .settings_service import LAST_ROLLOVER_KEY, get_setting, set_setting
from phoneledger.time_utils import to_utc_z, utcnow

NOTHING_TO_ROLL_OVER = "Nothing to roll over"


@dataclass
class RolloverResult:
    current_month: str
    next_month: str
    rolled_count: int
    message: str
    product_ids: list[int] = field(default_factory=list)
    period: MonthlyPeriod | None = None

    @property
    def performed(self) -> bool:
        return self.rolled_count > 0

    def to_dict(self) -> dict:
        return {
            "current_month": self.current_month,
            "next_month": self.next_month,
            "rolled_count": self.rolled_count,
            "performed": self.performed,
            "message": self.message,
            "product_ids": self.product_ids,
            "period": self.period.to_dict() if self.period else None,
        }


def list_periods() -> dict:
    periods = (
        db.session.query(MonthlyPeriod)
        .order_by(MonthlyPeriod.created_at.desc(), MonthlyPeriod.id.desc())
        .all()
    )
    return {"items": [p.to_dict() for p in periods], "count": len(periods)}


def get_active_period() -> MonthlyPeriod | None:
    return (
        db.session.query(MonthlyPeriod)
        .filter(MonthlyPeriod.is_active.is_(True))
        .order_by(MonthlyPeriod.created_at.desc(), MonthlyPeriod.id.desc())
        .first()
    )


def get_period(month_year: str) -> MonthlyPeriod | None:
    return (
        db.session.query(MonthlyPeriod)
        .filter(MonthlyPeriod.month_year == month_year)
        .order_by(MonthlyPeriod.id.asc())
        .first()
    )


def ensure_period(month_year: str) -> MonthlyPeriod:
    """Return the period row for month_year, creating an active one if absent."""
    parse_month_year(month_year)
    period = get_period(month_year)
    if period:
        return period
    period = MonthlyPeriod(month_year=month_year, is_active=True)
    db.session.add(period)
    db.session.commit()
    return period


def _unsold_products() -> list[Product]:
    return (
        db.session.query(Product)
        .filter(Product.is_sold.is_(False))
        .order_by(Product.id.asc())
        .all()
    )


def preview_rollover(current_month: str | None = None) -> dict:
    current = current_month or current_month_year()
    unsold = _unsold_products()
    return {
        "current_month": current,
        "next_month": next_month_year(current),
        "unsold_count": len(unsold),
        "unsold_products": [p.to_dict() for p in unsold],
        "last_rollover_at": get_setting(LAST_ROLLOVER_KEY),
    }


def perform_rollover(current_month: str | None = None) -> RolloverResult:
    """
    Close current_month (default: this calendar month) and move every unsold
    product to the next month.

    With no unsold products nothing is written.
    """
    current = current_month or current_month_year()
    nxt = next_month_year(current)

    unsold = _unsold_products()
    if not unsold:
        return RolloverResult(
            current_month=current,
            next_month=nxt,
            rolled_count=0,
            message=NOTHING_TO_ROLL_OVER,
        )

    try:
        period = MonthlyPeriod(month_year=nxt, is_active=True)
        db.session.add(period)

        current_period = get_period(current)
        if current_period is not None:
            current_period.is_active = False

        for p in unsold:
            p.month_year = nxt

        set_setting(LAST_ROLLOVER_KEY, to_utc_z(utcnow()), commit=False)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info("Rolled %d unsold products from %s to %s", len(unsold), current, nxt)
    return RolloverResult(
        current_month=current,
        next_month=nxt,
        rolled_count=len(unsold),
        message=f"Rolled over {len(unsold)} products to {nxt}",
        product_ids=[p.id for p in unsold],
        period=period,
    )
