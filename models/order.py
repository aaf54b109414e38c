"""
Order data models.

These models represent the user's food order as it moves through the
wizard: item selection -> delivery details -> submission.

Thread Safety:
    - DraftOrder is mutable and owned by the wizard (guarded by its lock)
    - Use DraftOrder.freeze() to create the immutable OrderSnapshot that is
      handed to the submission thread and stored in the history
"""

from __future__ import annotations

from dataclasses import dataclass, asdict, replace
from typing import Dict, Any, Optional


MIN_QUANTITY = 1
MAX_QUANTITY = 20

# Free-text fields the wizard lets the user overwrite.
EDITABLE_FIELDS = ("name", "address", "phone", "special_instructions")


def _is_valid_quantity(value: Any) -> bool:
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and MIN_QUANTITY <= value <= MAX_QUANTITY
    )


@dataclass
class DraftOrder:
    """
    The in-progress order being edited by the user.

    Lifecycle:
        1. Created empty when the wizard starts (or on new order)
        2. item set on menu selection
        3. quantity and contact fields edited on the delivery step
        4. Frozen into an OrderSnapshot on submission
    """

    item: Optional[str] = None
    """Selected catalog item name (None before selection)."""

    quantity: int = MIN_QUANTITY
    """Number of portions, always within [MIN_QUANTITY, MAX_QUANTITY]."""

    name: str = ""
    """Customer name."""

    address: str = ""
    """Delivery address."""

    phone: str = ""
    """Contact phone number."""

    special_instructions: str = ""
    """Optional notes for the kitchen or courier."""

    def copy(self) -> "DraftOrder":
        return replace(self)

    def freeze(self) -> "OrderSnapshot":
        """Create an immutable snapshot of this draft."""
        return OrderSnapshot(
            item=self.item or "",
            quantity=self.quantity,
            name=self.name,
            address=self.address,
            phone=self.phone,
            special_instructions=self.special_instructions,
        )

    @classmethod
    def from_snapshot(cls, snapshot: "OrderSnapshot") -> "DraftOrder":
        """Seed a new draft from a past order (used by reorder)."""
        quantity = snapshot.quantity if _is_valid_quantity(snapshot.quantity) else MIN_QUANTITY
        return cls(
            item=snapshot.item or None,
            quantity=quantity,
            name=snapshot.name,
            address=snapshot.address,
            phone=snapshot.phone,
            special_instructions=snapshot.special_instructions,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON responses."""
        return asdict(self)


@dataclass(frozen=True)
class OrderSnapshot:
    """
    Immutable copy of a draft at submission time.

    Stored inside history entries; never modified after creation.
    """

    item: str
    quantity: int
    name: str
    address: str
    phone: str
    special_instructions: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the persisted ``orderData`` object.

        ``specialInstructions`` is omitted when empty.
        """
        data: Dict[str, Any] = {
            "item": self.item,
            "quantity": self.quantity,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
        }
        if self.special_instructions:
            data["specialInstructions"] = self.special_instructions
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrderSnapshot":
        """
        Create from a persisted ``orderData`` object.

        Raises:
            ValueError: If the data is not an object, has a non-string text
                field, or a quantity outside the allowed range
        """
        if not isinstance(data, dict):
            raise ValueError("orderData must be an object")

        quantity = data.get("quantity")
        if not _is_valid_quantity(quantity):
            raise ValueError(f"invalid quantity: {quantity!r}")

        fields = {}
        for key, attr in (
            ("item", "item"),
            ("name", "name"),
            ("address", "address"),
            ("phone", "phone"),
            ("specialInstructions", "special_instructions"),
        ):
            value = data.get(key, "")
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise ValueError(f"{key} must be a string")
            fields[attr] = value

        return cls(quantity=quantity, **fields)
