# Overview: Service-layer operations for debts; encapsulates business logic and database work.

from __future__ import annotations

from sqlalchemy import func

from ..extensions import db
from ..models import Debt
from ..validation import NotFoundError
from phoneledger.time_utils import today

DEBT_MUTABLE_FIELDS = {"description", "amount_cents", "date"}


def apply_debt_patch(d: Debt, patch: dict) -> None:
    for k, v in patch.items():
        if k not in DEBT_MUTABLE_FIELDS:
            continue
        setattr(d, k, v)


def list_debts() -> dict:
    """Debts, most recent date first."""
    debts = (
        db.session.query(Debt)
        .order_by(Debt.date.desc(), Debt.id.desc())
        .all()
    )
    return {
        "items": [d.to_dict() for d in debts],
        "count": len(debts),
        "total_cents": sum(d.amount_cents for d in debts),
    }


def total_debt_cents() -> int:
    total = db.session.query(func.coalesce(func.sum(Debt.amount_cents), 0)).scalar()
    return int(total or 0)


def get_debt(debt_id: int) -> Debt:
    d = db.session.get(Debt, debt_id)
    if d is None:
        raise NotFoundError("Debt not found")
    return d


def create_debt(*, patch: dict) -> dict:
    d = Debt(date=today())
    apply_debt_patch(d, patch)
    db.session.add(d)
    db.session.commit()
    return d.to_dict()


def update_debt(*, debt_id: int, patch: dict) -> dict:
    d = get_debt(debt_id)
    apply_debt_patch(d, patch)
    db.session.commit()
    return d.to_dict()


def delete_debt(*, debt_id: int) -> None:
    d = get_debt(debt_id)
    db.session.delete(d)
    db.session.commit()
