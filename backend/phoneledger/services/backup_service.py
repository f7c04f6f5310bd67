"""
Whole-store backup and restore.

Backup document layout (JSON):

    {
      "products": [...], "sales": [...], "monthlyData": [...],
      "debts": [...], "accessories": [...],
      "exportDate": "2024-05-01T10:00:00Z", "version": "2.0"
    }

Rows are the entities' to_dict() forms. Import requires products, sales
and monthlyData; debts and accessories are optional (older backups did not
have them). Every row is parsed before anything is cleared, and the clear
plus re-insert is one transaction. Identities are preserved.
"""

from __future__ import annotations

from typing import Any, Callable

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Accessory, Debt, MonthlyPeriod, Product, Sale, SaleAccessory
from ..validation import (
    ValidationError,
    coerce_int,
    enforce_rules_accessory,
    enforce_rules_debt,
    enforce_rules_product,
    enforce_rules_sale,
    enforce_rules_sale_accessory,
)
from .accounting import parse_month_year
from phoneledger.time_utils import parse_iso_date, parse_iso_datetime, to_utc_z, utcnow

BACKUP_VERSION = "2.0"

REQUIRED_SECTIONS = ("products", "sales", "monthlyData")
OPTIONAL_SECTIONS = ("debts", "accessories")


class BackupFormatError(ValidationError):
    """The document is not a usable backup. Nothing was changed."""


def export_backup() -> dict:
    def rows(model):
        return [r.to_dict() for r in db.session.query(model).order_by(model.id.asc()).all()]

    return {
        "products": rows(Product),
        "sales": rows(Sale),
        "monthlyData": rows(MonthlyPeriod),
        "debts": rows(Debt),
        "accessories": rows(Accessory),
        "exportDate": to_utc_z(utcnow()),
        "version": BACKUP_VERSION,
    }


def _field(row: dict, key: str, section: str, index: int) -> Any:
    if key not in row:
        raise BackupFormatError(f"{section}[{index}] is missing {key}")
    return row[key]


def _int(row: dict, key: str, section: str, index: int) -> int:
    try:
        return coerce_int(key, _field(row, key, section, index))
    except ValidationError as e:
        raise BackupFormatError(f"{section}[{index}]: {e}")


def _text(
    row: dict,
    key: str,
    section: str,
    index: int,
    *,
    nullable: bool = False,
    max_length: int | None = None,
) -> str | None:
    value = row.get(key) if nullable else _field(row, key, section, index)
    if value is None:
        if nullable:
            return None
        raise BackupFormatError(f"{section}[{index}]: {key} cannot be null")
    value = str(value).strip()
    if not value and not nullable:
        raise BackupFormatError(f"{section}[{index}]: {key} cannot be blank")
    if max_length is not None and len(value) > max_length:
        raise BackupFormatError(f"{section}[{index}]: {key} exceeds max length {max_length}")
    return value


def _month(row: dict, key: str, section: str, index: int) -> str:
    value = _text(row, key, section, index)
    try:
        parse_month_year(value)
    except ValueError as e:
        raise BackupFormatError(f"{section}[{index}]: {e}")
    return value


def _bool(row: dict, key: str, section: str, index: int) -> bool:
    value = _field(row, key, section, index)
    if not isinstance(value, bool):
        raise BackupFormatError(f"{section}[{index}]: {key} must be true or false")
    return value


def _datetime(row: dict, key: str, section: str, index: int):
    value = row.get(key)
    if value is None:
        return utcnow()
    try:
        return parse_iso_datetime(str(value))
    except ValueError:
        raise BackupFormatError(f"{section}[{index}]: {key} must be an ISO-8601 datetime")


def _date(row: dict, key: str, section: str, index: int):
    try:
        value = parse_iso_date(str(_field(row, key, section, index)))
    except ValueError:
        value = None
    if value is None:
        raise BackupFormatError(f"{section}[{index}]: {key} must be an ISO-8601 date")
    return value


def _rules(rule: Callable[..., None], patch: dict, section: str, index: int, **kwargs) -> None:
    """Apply the same business rules the API applies to new rows."""
    try:
        rule(patch, **kwargs)
    except ValidationError as e:
        raise BackupFormatError(f"{section}[{index}]: {e}")


def _product_from_row(row: dict, i: int) -> Product:
    s = "products"
    product = Product(
        id=_int(row, "id", s, i),
        name=_text(row, "name", s, i, max_length=255),
        code=_text(row, "code", s, i, max_length=32),
        purchase_price_cents=_int(row, "purchase_price_cents", s, i),
        quantity=_int(row, "quantity", s, i),
        is_sold=_bool(row, "is_sold", s, i),
        month_year=_month(row, "month_year", s, i),
        created_at=_datetime(row, "created_at", s, i),
    )
    _rules(
        enforce_rules_product,
        {"purchase_price_cents": product.purchase_price_cents, "quantity": product.quantity},
        s, i, creating=False,
    )
    return product


def _sale_from_row(row: dict, i: int) -> Sale:
    s = "sales"
    usages = []
    for j, usage in enumerate(row.get("accessories") or []):
        if not isinstance(usage, dict):
            raise BackupFormatError(f"sales[{i}].accessories[{j}] must be an object")
        section = f"sales[{i}].accessories"
        item = SaleAccessory(
            accessory_id=_int(usage, "accessory_id", section, j),
            quantity=_int(usage, "quantity", section, j),
            unit_price_cents=_int(usage, "unit_price_cents", section, j),
        )
        _rules(
            enforce_rules_sale_accessory,
            {"quantity": item.quantity, "unit_price_cents": item.unit_price_cents},
            section, j,
        )
        usages.append(item)
    sale = Sale(
        id=_int(row, "id", s, i),
        product_id=_int(row, "product_id", s, i),
        customer_name=_text(row, "customer_name", s, i, max_length=255),
        sale_date=_date(row, "sale_date", s, i),
        imei=_text(row, "imei", s, i, nullable=True, max_length=64),
        sale_price_cents=_int(row, "sale_price_cents", s, i),
        cost_cents=_int(row, "cost_cents", s, i),
        net_profit_cents=_int(row, "net_profit_cents", s, i),
        quantity=_int(row, "quantity", s, i),
        created_at=_datetime(row, "created_at", s, i),
        accessories=usages,
    )
    _rules(
        enforce_rules_sale,
        {
            "sale_price_cents": sale.sale_price_cents,
            "cost_cents": sale.cost_cents,
            "quantity": sale.quantity,
        },
        s, i,
    )
    return sale


def _period_from_row(row: dict, i: int) -> MonthlyPeriod:
    s = "monthlyData"
    return MonthlyPeriod(
        id=_int(row, "id", s, i),
        month_year=_month(row, "month_year", s, i),
        is_active=_bool(row, "is_active", s, i),
        created_at=_datetime(row, "created_at", s, i),
    )


def _debt_from_row(row: dict, i: int) -> Debt:
    s = "debts"
    debt = Debt(
        id=_int(row, "id", s, i),
        description=_text(row, "description", s, i, max_length=255),
        amount_cents=_int(row, "amount_cents", s, i),
        date=_date(row, "date", s, i),
        created_at=_datetime(row, "created_at", s, i),
    )
    _rules(enforce_rules_debt, {"amount_cents": debt.amount_cents}, s, i)
    return debt


def _accessory_from_row(row: dict, i: int) -> Accessory:
    s = "accessories"
    accessory = Accessory(
        id=_int(row, "id", s, i),
        name=_text(row, "name", s, i, max_length=255),
        type=_text(row, "type", s, i),
        quantity=_int(row, "quantity", s, i),
        price_cents=_int(row, "price_cents", s, i),
        created_at=_datetime(row, "created_at", s, i),
    )
    _rules(
        enforce_rules_accessory,
        {"type": accessory.type, "quantity": accessory.quantity, "price_cents": accessory.price_cents},
        s, i, creating=False,
    )
    return accessory


PARSERS: dict[str, Callable[[dict, int], Any]] = {
    "products": _product_from_row,
    "sales": _sale_from_row,
    "monthlyData": _period_from_row,
    "debts": _debt_from_row,
    "accessories": _accessory_from_row,
}


def _check_unique(section: str, rows: list, attr: str) -> None:
    seen: set = set()
    for i, row in enumerate(rows):
        value = getattr(row, attr)
        if value in seen:
            raise BackupFormatError(f"{section}[{i}]: duplicate {attr} {value!r}")
        seen.add(value)


def parse_backup(document: Any) -> dict[str, list]:
    """
    Validate a backup document and build (unsaved) model rows for it.

    Rows must satisfy the same rules as rows created through the API, and
    ids (and product codes) must be unique within their section.

    Raises:
        BackupFormatError: missing required sections or malformed rows
    """
    if not isinstance(document, dict):
        raise BackupFormatError("Backup must be a JSON object")

    missing = [k for k in REQUIRED_SECTIONS if document.get(k) is None]
    if missing:
        raise BackupFormatError(f"Invalid backup: missing {', '.join(missing)}")

    parsed: dict[str, list] = {}
    for section in REQUIRED_SECTIONS + OPTIONAL_SECTIONS:
        rows = document.get(section) or []
        if not isinstance(rows, list):
            raise BackupFormatError(f"{section} must be a list")
        items = []
        for i, row in enumerate(rows):
            if not isinstance(row, dict):
                raise BackupFormatError(f"{section}[{i}] must be an object")
            items.append(PARSERS[section](row, i))
        _check_unique(section, items, "id")
        parsed[section] = items

    _check_unique("products", parsed["products"], "code")
    return parsed


def import_backup(document: Any) -> dict[str, int]:
    """
    Replace every ledger table with the contents of a backup document.

    Returns the number of rows restored per section.
    """
    parsed = parse_backup(document)

    try:
        db.session.query(SaleAccessory).delete()
        db.session.query(Sale).delete()
        db.session.query(Product).delete()
        db.session.query(MonthlyPeriod).delete()
        db.session.query(Debt).delete()
        db.session.query(Accessory).delete()
        db.session.flush()
        # Restored rows reuse ids; drop stale instances from the identity map
        db.session.expunge_all()

        for section in REQUIRED_SECTIONS + OPTIONAL_SECTIONS:
            db.session.add_all(parsed[section])
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        raise BackupFormatError(f"Backup violates a database constraint: {e.orig}")
    except Exception:
        db.session.rollback()
        raise

    counts = {section: len(rows) for section, rows in parsed.items()}
    current_app.logger.info("Backup restored: %s", counts)
    return counts
