"""
Quick Order - Flask Application Entry Point.

This is a slim app factory that:
1. Configures logging
2. Opens the history persistence backend and loads the order history
3. Starts the status scheduler (separate thread)
4. Creates the order wizard (submission thread per order)
5. Registers route blueprints and JSON error handlers

ARCHITECTURE:
    Main Thread
    ├── Flask request handling -> OrderWizard
    └── Cleanup on shutdown (scheduler stop, submission join)

    StatusScheduler Thread (background)
    └── 30-second tick: OrderHistoryStore.advance_all()

    Submission Thread (at most one at a time)
    └── simulated delay, then OrderHistoryStore.record()

Both background threads mutate history only through OrderHistoryStore,
which serializes them.
"""

from __future__ import annotations

import atexit
import functools
import logging
import os
from typing import Optional

from flask import Flask
from werkzeug.exceptions import HTTPException

from logging_config import setup_logging, get_logger
from core.exceptions import ServiceUnavailableError
from core.persistence import PersistenceAdapter, InMemoryPersistence, JsonFilePersistence
from services.history_store import OrderHistoryStore
from services.status_scheduler import StatusScheduler
from services.order_wizard import OrderWizard
from routes import register_blueprints


# Module logger (configured after setup_logging)
logger = get_logger(__name__)

EXIT_HOOK_KEY = "quick_order_exit_hook"


def _create_persistence(app: Flask) -> PersistenceAdapter:
    backend = app.config.get("HISTORY_BACKEND", "file")
    if backend == "memory":
        logger.info("Using in-memory order history")
        return InMemoryPersistence()
    if backend != "file":
        logger.warning(f"Unknown HISTORY_BACKEND {backend!r}, using file storage")

    history_file = app.config["HISTORY_FILE"]
    logger.info(f"Using order history file {history_file}")
    return JsonFilePersistence(history_file)


def create_app(
    config_object: str = "config.Config",
    persistence: Optional[PersistenceAdapter] = None,
) -> Flask:
    """
    Application factory - creates and configures Flask app.

    Args:
        config_object: Import path of the config class
        persistence: Blob store to use instead of the configured backend

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Configure logging
    log_level = logging.DEBUG if app.config.get("DEBUG") else logging.INFO
    enable_file_logging = app.config.get("ENVIRONMENT") == "production"

    root_logger = setup_logging(
        log_level=log_level,
        enable_file_logging=enable_file_logging
    )
    app.logger.handlers = root_logger.handlers
    app.logger.setLevel(log_level)

    logger.info(f"Starting Quick Order in {app.config.get('ENVIRONMENT')} mode")

    # =========================================================================
    # SERVICES INITIALIZATION
    # =========================================================================

    if persistence is None:
        persistence = _create_persistence(app)

    history_store = OrderHistoryStore(
        persistence,
        key=app.config.get("HISTORY_KEY", "orderHistory"),
        capacity=app.config.get("HISTORY_CAPACITY", 10),
    )
    app.config["HISTORY_STORE"] = history_store

    status_scheduler = StatusScheduler(
        history_store,
        interval_seconds=app.config.get("STATUS_INTERVAL_SECONDS", 30.0),
    )
    app.config["STATUS_SCHEDULER"] = status_scheduler
    if app.config.get("START_STATUS_SCHEDULER", True):
        status_scheduler.start()
        logger.info("Status scheduler started")

    order_wizard = OrderWizard(
        history_store,
        submission_delay_seconds=app.config.get("SUBMISSION_DELAY_SECONDS", 2.0),
    )
    app.config["ORDER_WIZARD"] = order_wizard

    # =========================================================================
    # CLEANUP REGISTRATION
    # =========================================================================

    exit_hook = functools.partial(_shutdown_at_exit, app)
    app.extensions[EXIT_HOOK_KEY] = exit_hook
    atexit.register(exit_hook)

    register_blueprints(app)

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.errorhandler(ServiceUnavailableError)
    def handle_service_unavailable(e):
        logger.error(f"Service unavailable: {e}")
        return {"error": e.message}, 503

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return {"error": e.description, "code": e.code}, e.code

    @app.errorhandler(Exception)
    def handle_server_error(e):
        logger.error(f"500 error: {e}", exc_info=True)
        return {"error": "An unexpected error occurred. Please try again."}, 500

    logger.info("Application initialized successfully")
    return app


def shutdown_services(app: Flask) -> None:
    """
    Stop background work for ``app``.

    Stops the scheduler (no ticks after this returns) and abandons a
    submission still inside its delay. Safe to call more than once.
    """
    exit_hook = app.extensions.pop(EXIT_HOOK_KEY, None)
    if exit_hook is not None:
        atexit.unregister(exit_hook)

    logger.info("Shutting down...")

    status_scheduler = app.config.get("STATUS_SCHEDULER")
    if status_scheduler:
        status_scheduler.stop()

    order_wizard = app.config.get("ORDER_WIZARD")
    if order_wizard:
        order_wizard.shutdown()

    logger.info("Shutdown complete")


def _shutdown_at_exit(app: Flask) -> None:
    # Already running as the exit hook, so there is nothing to unregister
    app.extensions.pop(EXIT_HOOK_KEY, None)
    shutdown_services(app)


if __name__ == "__main__":
    app = create_app()
    debug_mode = os.environ.get("FLASK_DEBUG", "1") == "1"
    # The reloader would start a second scheduler thread in the child process
    app.run(debug=debug_mode, use_reloader=False)
