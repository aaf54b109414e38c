"""
API routes.

Handles:
- /health - Health check endpoint with service status
"""

from flask import Blueprint, current_app

from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

api_bp = Blueprint("api", __name__)


@api_bp.route("/health", methods=["GET"])
def health():
    """Health check endpoint with service status."""
    health_status = {
        "status": "ok",
        "environment": current_app.config.get("ENVIRONMENT", "unknown"),
        "checks": {}
    }

    history_store = current_app.config.get("HISTORY_STORE")
    if history_store is not None:
        health_status["checks"]["history"] = {"ok": True, "entries": len(history_store)}
    else:
        health_status["checks"]["history"] = {"ok": False}
        health_status["status"] = "degraded"

    scheduler = current_app.config.get("STATUS_SCHEDULER")
    if scheduler and scheduler.is_running:
        health_status["checks"]["status_scheduler"] = "running"
    elif scheduler:
        health_status["checks"]["status_scheduler"] = "stopped"
        if current_app.config.get("START_STATUS_SCHEDULER", True):
            health_status["status"] = "degraded"
    else:
        health_status["checks"]["status_scheduler"] = "not_available"
        health_status["status"] = "degraded"

    wizard = current_app.config.get("ORDER_WIZARD")
    if wizard:
        health_status["checks"]["wizard"] = wizard.state.value
    else:
        health_status["checks"]["wizard"] = "not_available"
        health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code
