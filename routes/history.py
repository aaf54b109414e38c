"""
Order history routes.

Handles viewing the history, toggling the history screen, reordering a
past order and clearing the history.
"""

from flask import Blueprint

from logging_config import get_logger
from routes.helpers import get_service, get_wizard


# Module logger
logger = get_logger(__name__)

history_bp = Blueprint("history", __name__)


@history_bp.route("/history", methods=["GET"])
def history():
    """All stored orders, newest first."""
    store = get_service("HISTORY_STORE")
    entries = store.entries()
    return {
        "count": len(entries),
        "capacity": store.capacity,
        "orders": [entry.to_dict() for entry in entries],
    }


@history_bp.route("/history/open", methods=["POST"])
def open_history():
    wizard = get_wizard()
    accepted = wizard.open_history()
    return {"accepted": accepted, "wizard": wizard.view()}


@history_bp.route("/history/close", methods=["POST"])
def close_history():
    wizard = get_wizard()
    accepted = wizard.close_history()
    return {"accepted": accepted, "wizard": wizard.view()}


@history_bp.route("/history/<entry_id>/reorder", methods=["POST"])
def reorder(entry_id: str):
    """
    Copy a past order into the draft and jump to the delivery step.

    404 if the entry is not (or no longer) in the history.
    """
    store = get_service("HISTORY_STORE")
    wizard = get_wizard()

    entry = store.get(entry_id)
    if entry is None:
        return {"error": f"Order {entry_id} not found", "wizard": wizard.view()}, 404

    accepted = wizard.reorder(entry)
    return {"accepted": accepted, "wizard": wizard.view()}


@history_bp.route("/history/clear", methods=["POST"])
def clear_history():
    """Delete every stored order."""
    store = get_service("HISTORY_STORE")
    store.clear()
    logger.info("History cleared by user")
    return {"count": 0}
