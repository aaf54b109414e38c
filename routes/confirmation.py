"""
Confirmation routes (step 3).

Shows the order that was just placed and starts a new one.
"""

from flask import Blueprint

from models.wizard_state import WizardState
from logging_config import get_logger
from routes.helpers import get_wizard


# Module logger
logger = get_logger(__name__)

confirmation_bp = Blueprint("confirmation", __name__)


@confirmation_bp.route("/confirmation", methods=["GET"])
def confirmation():
    """The confirmed order, or 404 when no order has just been placed."""
    wizard = get_wizard()
    entry = wizard.last_order

    if wizard.state.underlying is not WizardState.CONFIRMED or entry is None:
        return {"error": "Submit an order to see the confirmation"}, 404

    item = wizard.catalog.find(entry.order.item)
    return {
        "order": entry.to_dict(),
        "item": item.to_dict() if item else None,
    }


@confirmation_bp.route("/confirmation/new", methods=["POST"])
def new_order():
    """Clear the draft and go back to the menu."""
    wizard = get_wizard()
    accepted = wizard.start_new_order()
    if accepted:
        logger.info("Starting a new order")
    return {"accepted": accepted, "wizard": wizard.view()}
