"""Price lookups and order totals."""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from models.catalog import Catalog


CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def unit_price(catalog: Catalog, item_name: Optional[str]) -> Decimal:
    """Price of ``item_name``; zero when nothing (or an unknown item) is selected."""
    item = catalog.find(item_name)
    if item is None:
        return ZERO
    return item.price


def line_total(catalog: Catalog, item_name: Optional[str], quantity: int) -> Decimal:
    """
    Unit price x quantity, rounded to cents.

    This is the value frozen into a history entry at submission time.
    """
    total = unit_price(catalog, item_name) * max(quantity, 0)
    return total.quantize(CENTS, rounding=ROUND_HALF_UP)
