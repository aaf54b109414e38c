"""
Flask route blueprints for Quick Order.

This module contains all route handlers organized by wizard step:
- main: Current wizard view
- menu: Catalog search and item selection (step 1)
- delivery: Quantity and contact details (step 2)
- submit: Order submission and status polling
- confirmation: Placed order and new order (step 3)
- history: Order history, reorder, clear
- api: Health check

Each blueprint is registered with the Flask app in create_app().
"""

from .main import main_bp
from .menu import menu_bp
from .delivery import delivery_bp
from .submit import submit_bp
from .confirmation import confirmation_bp
from .history import history_bp
from .api import api_bp

__all__ = [
    "main_bp",
    "menu_bp",
    "delivery_bp",
    "submit_bp",
    "confirmation_bp",
    "history_bp",
    "api_bp",
]


def register_blueprints(app):
    """
    Register all blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(main_bp)
    app.register_blueprint(menu_bp)
    app.register_blueprint(delivery_bp)
    app.register_blueprint(submit_bp)
    app.register_blueprint(confirmation_bp)
    app.register_blueprint(history_bp)
    app.register_blueprint(api_bp)
