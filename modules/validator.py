"""Delivery-details validation for draft orders."""

from __future__ import annotations

import re
from typing import Dict

from models.order import DraftOrder


# Optional leading "+", then at least 10 ASCII digits, spaces, hyphens or parentheses.
PHONE_PATTERN = re.compile(r"\+?[0-9\s\-()]{10,}")

MIN_NAME_LENGTH = 2
MIN_ADDRESS_LENGTH = 10


def validate(draft: DraftOrder) -> Dict[str, str]:
    """
    Map a draft to its field errors.

    Every rule runs on every call, so one bad field never hides another.
    An empty result means the draft can be submitted.

    Args:
        draft: The order being edited

    Returns:
        Field name -> human-readable message
    """
    errors: Dict[str, str] = {}

    name = draft.name.strip()
    if not name:
        errors["name"] = "Name is required"
    elif len(name) < MIN_NAME_LENGTH:
        errors["name"] = f"Name must be at least {MIN_NAME_LENGTH} characters"

    address = draft.address.strip()
    if not address:
        errors["address"] = "Address is required"
    elif len(address) < MIN_ADDRESS_LENGTH:
        errors["address"] = "Please enter a complete address"

    if not draft.phone.strip():
        errors["phone"] = "Phone number is required"
    elif not PHONE_PATTERN.fullmatch(draft.phone):
        errors["phone"] = "Please enter a valid phone number"

    return errors
