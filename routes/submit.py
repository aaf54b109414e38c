"""
Order submission routes.

POST /submit starts the asynchronous submission (the wizard spawns the
submission thread). Clients then poll GET /status until ``complete``.
"""

from flask import Blueprint

from models.wizard_state import WizardState
from logging_config import get_logger
from routes.helpers import get_wizard


# Module logger
logger = get_logger(__name__)

submit_bp = Blueprint("submit", __name__)


@submit_bp.route("/submit", methods=["POST"])
def submit():
    """
    Submit the current draft.

    Returns 202 when a submission was started, 409 when it was rejected
    (wrong step, invalid fields, or a submission already in flight).
    """
    wizard = get_wizard()
    accepted = wizard.submit()
    if accepted:
        return {"accepted": True, "wizard": wizard.view()}, 202

    return {
        "accepted": False,
        "errors": wizard.errors,
        "wizard": wizard.view(),
    }, 409


@submit_bp.route("/status", methods=["GET"])
def status():
    """
    Poll submission progress.

    ``status`` is ``processing`` while the simulated delay runs, then
    ``confirmed`` with the recorded order, or ``failed`` if recording
    raised unexpectedly. ``idle`` means nothing was submitted.
    """
    wizard = get_wizard()
    state = wizard.state.underlying

    if state is WizardState.SUBMITTING:
        return {
            "status": "processing",
            "message": "Processing your order...",
            "complete": False,
            "error": False,
        }

    if state is WizardState.CONFIRMED and wizard.last_order:
        return {
            "status": "confirmed",
            "message": "Order confirmed",
            "complete": True,
            "error": False,
            "order": wizard.last_order.to_dict(),
        }

    if wizard.last_error:
        return {
            "status": "failed",
            "message": wizard.last_error,
            "complete": True,
            "error": True,
        }

    return {
        "status": "idle",
        "message": "No order in progress",
        "complete": True,
        "error": False,
    }
