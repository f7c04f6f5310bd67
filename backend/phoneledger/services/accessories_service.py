# Overview: Service-layer operations for accessories; encapsulates business logic and database work.

from __future__ import annotations

from sqlalchemy import func

from ..extensions import db
from ..models import Accessory
from ..validation import NotFoundError

ACCESSORY_MUTABLE_FIELDS = {"name", "type", "quantity", "price_cents"}


def apply_accessory_patch(a: Accessory, patch: dict) -> None:
    for k, v in patch.items():
        if k not in ACCESSORY_MUTABLE_FIELDS:
            continue
        setattr(a, k, v)


def list_accessories(*, type: str | None = None) -> dict:
    """Accessories, newest first, optionally limited to one type."""
    query = db.session.query(Accessory)
    if type is not None:
        query = query.filter(Accessory.type == type)
    accessories = query.order_by(Accessory.created_at.desc(), Accessory.id.desc()).all()
    return {
        "items": [a.to_dict() for a in accessories],
        "count": len(accessories),
        "total_value_cents": sum(a.price_cents * a.quantity for a in accessories),
    }


def accessory_stock_value_cents() -> int:
    total = db.session.query(
        func.coalesce(func.sum(Accessory.price_cents * Accessory.quantity), 0)
    ).scalar()
    return int(total or 0)


def get_accessory(accessory_id: int) -> Accessory:
    a = db.session.get(Accessory, accessory_id)
    if a is None:
        raise NotFoundError("Accessory not found")
    return a


def create_accessory(*, patch: dict) -> dict:
    a = Accessory()
    apply_accessory_patch(a, patch)
    db.session.add(a)
    db.session.commit()
    return a.to_dict()


def update_accessory(*, accessory_id: int, patch: dict) -> dict:
    a = get_accessory(accessory_id)
    apply_accessory_patch(a, patch)
    db.session.commit()
    return a.to_dict()


def delete_accessory(*, accessory_id: int) -> None:
    """
    Delete an accessory. Past sales keep their usage rows with the
    snapshotted price.
    """
    a = get_accessory(accessory_id)
    db.session.delete(a)
    db.session.commit()
