"""
Delivery details routes (step 2).

Handles quantity changes, contact detail edits and going back to the menu.
Every edit re-runs validation inside the wizard; the response carries the
fresh errors and the submit gate.
"""

import html
from typing import Any, Optional

import bleach
from flask import Blueprint, current_app

from logging_config import get_logger
from routes.helpers import get_wizard, request_payload


# Module logger
logger = get_logger(__name__)

delivery_bp = Blueprint("delivery", __name__)

# Accepted request keys -> draft field names
FIELD_ALIASES = {
    "name": "name",
    "address": "address",
    "phone": "phone",
    "special_instructions": "special_instructions",
    "specialInstructions": "special_instructions",
}


def _sanitize_text(text: Any, max_length: Optional[int] = None) -> str:
    """Sanitize user input text."""
    if text is None:
        return ""
    text = str(text)
    # bleach entity-encodes &, < and >; store the plain text the user typed
    text = html.unescape(bleach.clean(text, tags=[], strip=True))
    if max_length and len(text) > max_length:
        text = text[:max_length]
    return text


def _parse_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


@delivery_bp.route("/delivery/quantity", methods=["POST"])
def quantity():
    """
    Change the quantity.

    Body: ``{"delta": +1}`` to step (clamped to 1..20) or
    ``{"quantity": 3}`` to set (ignored when out of range).
    """
    payload = request_payload()
    wizard = get_wizard()

    if "delta" in payload:
        delta = _parse_int(payload.get("delta"))
        if delta is not None:
            wizard.change_quantity(delta)
    elif "quantity" in payload:
        value = _parse_int(payload.get("quantity"))
        if value is not None:
            wizard.set_quantity(value)

    return {"quantity": wizard.draft.quantity, "wizard": wizard.view()}


@delivery_bp.route("/delivery/fields", methods=["POST"])
def fields():
    """
    Update any of name, address, phone and special instructions.

    Fields not present in the body are left unchanged. Text is stripped of
    markup and capped in length before it reaches the draft; surrounding
    whitespace is kept so the validator sees what the user typed.
    """
    payload = request_payload()
    wizard = get_wizard()

    max_field = current_app.config.get("MAX_FIELD_LENGTH", 200)
    max_notes = current_app.config.get("MAX_INSTRUCTIONS_LENGTH", 1000)

    updated = []
    for key, field in FIELD_ALIASES.items():
        if key not in payload:
            continue
        limit = max_notes if field == "special_instructions" else max_field
        wizard.update_field(field, _sanitize_text(payload[key], max_length=limit))
        updated.append(field)

    logger.debug(f"Updated delivery fields: {updated}")
    return {"updated": updated, "wizard": wizard.view()}


@delivery_bp.route("/delivery/back", methods=["POST"])
def back():
    """Return to the menu, keeping the draft."""
    wizard = get_wizard()
    accepted = wizard.go_back()
    return {"accepted": accepted, "wizard": wizard.view()}
