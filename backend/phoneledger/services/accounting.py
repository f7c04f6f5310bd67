# Overview: Pure accounting helpers (codes, profit, month arithmetic). No database access.

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Iterable, Optional

from phoneledger.time_utils import today

MONTH_YEAR_RE = re.compile(r"^(\d{4})-(\d{2})$")


def parse_month_year(month_year: str) -> tuple[int, int]:
    """Split "YYYY-MM" into (year, month). Raises ValueError on malformed input."""
    m = MONTH_YEAR_RE.match(month_year or "")
    if not m:
        raise ValueError(f"Invalid month {month_year!r}, expected YYYY-MM")
    year, month = int(m.group(1)), int(m.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month {month_year!r}, month must be 01-12")
    return year, month


def month_year_of(value: date | datetime) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def current_month_year(on: Optional[date] = None) -> str:
    return month_year_of(on or today())


def next_month_year(month_year: str) -> str:
    """
    "2024-05" -> "2024-06", "2024-12" -> "2025-01".
    """
    year, month = parse_month_year(month_year)
    if month == 12:
        return f"{year + 1:04d}-01"
    return f"{year:04d}-{month + 1:02d}"


def format_product_code(month_year: str, number: int, prefix: str = "AOGZ") -> str:
    """
    PREFIX-YYYYMM-XXXX, e.g. AOGZ-202405-0007.

    number comes from the per-month code sequence; it is zero-padded to four
    digits and simply grows wider past 9999.
    """
    year, month = parse_month_year(month_year)
    if number < 1:
        raise ValueError("number must be >= 1")
    return f"{prefix}-{year:04d}{month:02d}-{number:04d}"


def accessory_cost_cents(accessories: Iterable) -> int:
    """
    Total cost of accessory usages. Accepts SaleAccessory rows or dicts with
    unit_price_cents and quantity.
    """
    total = 0
    for a in accessories:
        if isinstance(a, dict):
            total += a["unit_price_cents"] * a["quantity"]
        else:
            total += a.unit_price_cents * a.quantity
    return total


def calculate_net_profit(
    sale_price_cents: int,
    purchase_price_cents: int,
    cost_cents: int,
    *,
    quantity: int = 1,
    accessories: Iterable = (),
) -> int:
    """
    sale - (purchase * quantity + cost + sum(accessory price * accessory qty))

    With the defaults this is the simple form: sale - (purchase + cost).
    """
    return sale_price_cents - (
        purchase_price_cents * quantity + cost_cents + accessory_cost_cents(accessories)
    )
