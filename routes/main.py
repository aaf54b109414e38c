"""
Main routes (home).

The home route returns the whole wizard view so a client can render the
current step without knowing how it got there.
"""

from flask import Blueprint

from routes.helpers import get_wizard

main_bp = Blueprint("main", __name__)


@main_bp.route("/", methods=["GET"])
def index():
    """Current wizard state, draft, errors and totals."""
    return get_wizard().view()
