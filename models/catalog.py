"""
Static menu catalog.

The catalog is a read-only lookup table; the item name is the key used by
drafts, history entries and the HTTP layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Any, List, Optional, Tuple


@dataclass(frozen=True)
class CatalogItem:
    """An orderable menu item."""

    name: str
    """Unique item name (join key)."""

    price: Decimal
    """Unit price, non-negative."""

    emoji: str = ""
    category: str = ""
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "name": self.name,
            "price": float(self.price),
            "emoji": self.emoji,
            "category": self.category,
            "description": self.description,
        }


MENU: Tuple[CatalogItem, ...] = (
    CatalogItem("Pizza", Decimal("12.99"), "🍕", "Italian", "Classic cheese pizza with tomato sauce"),
    CatalogItem("Burger", Decimal("8.99"), "🍔", "American", "Juicy beef burger with lettuce and tomato"),
    CatalogItem("Pasta", Decimal("10.99"), "🍝", "Italian", "Creamy Alfredo pasta with parmesan"),
    CatalogItem("Salad", Decimal("7.99"), "🥗", "Healthy", "Fresh garden salad with vinaigrette"),
    CatalogItem("Sandwich", Decimal("6.99"), "🥪", "American", "Turkey and cheese sandwich"),
    CatalogItem("Sushi", Decimal("15.99"), "🍣", "Japanese", "Fresh salmon and tuna rolls"),
    CatalogItem("Taco", Decimal("9.99"), "🌮", "Mexican", "Beef tacos with salsa and cheese"),
    CatalogItem("Ramen", Decimal("11.99"), "🍜", "Japanese", "Hot ramen noodles with broth"),
)


class Catalog:
    """
    Ordered, immutable collection of CatalogItem with lookup by name.

    Lookups never raise; an unknown or empty name yields None.
    """

    def __init__(self, items: Tuple[CatalogItem, ...] = MENU):
        self._items = tuple(items)
        self._by_name = {item.name: item for item in self._items}
        if len(self._by_name) != len(self._items):
            raise ValueError("Catalog item names must be unique")

    def __iter__(self):
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    @property
    def items(self) -> Tuple[CatalogItem, ...]:
        return self._items

    def find(self, name: Optional[str]) -> Optional[CatalogItem]:
        """Return the item called ``name`` or None."""
        if not name:
            return None
        return self._by_name.get(name)

    def search(self, term: Optional[str]) -> List[CatalogItem]:
        """
        Filter items by a case-insensitive substring of name or category.

        An empty term returns the whole catalog in menu order.
        """
        needle = (term or "").strip().lower()
        if not needle:
            return list(self._items)
        return [
            item for item in self._items
            if needle in item.name.lower() or needle in item.category.lower()
        ]
