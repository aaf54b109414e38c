"""
Menu routes (step 1).

Handles catalog search and item selection.
"""

from flask import Blueprint, request

from logging_config import get_logger
from routes.helpers import get_wizard, request_payload


# Module logger
logger = get_logger(__name__)

menu_bp = Blueprint("menu", __name__)

MAX_QUERY_LENGTH = 100


@menu_bp.route("/menu", methods=["GET"])
def menu():
    """
    List menu items, optionally filtered by ``q`` (name or category).
    """
    query = request.args.get("q", "")[:MAX_QUERY_LENGTH]
    wizard = get_wizard()
    items = wizard.search(query)
    return {
        "query": query,
        "items": [item.to_dict() for item in items],
        "selected": wizard.draft.item,
    }


@menu_bp.route("/menu/select", methods=["POST"])
def select():
    """
    Select an item and advance to the delivery step.

    Unknown items and selections outside step 1 are ignored; the response
    reports whether the selection was applied.
    """
    payload = request_payload()
    item_name = payload.get("item")

    wizard = get_wizard()
    accepted = isinstance(item_name, str) and wizard.select_item(item_name)
    if not accepted:
        logger.debug(f"Selection of {item_name!r} not applied")

    return {"accepted": accepted, "wizard": wizard.view()}
