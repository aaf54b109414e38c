"""
Shared helpers for route handlers.

Services are registered on ``app.config`` by create_app(); routes fetch them
through get_service() so a missing registration fails with a clear error.
"""

from typing import Any, Dict

from flask import current_app, request

from core.exceptions import ServiceUnavailableError


def get_service(config_key: str) -> Any:
    """
    Look up a service registered on the current app.

    Raises:
        ServiceUnavailableError: If nothing is registered under config_key
    """
    service = current_app.config.get(config_key)
    if service is None:
        raise ServiceUnavailableError(config_key)
    return service


def get_wizard():
    return get_service("ORDER_WIZARD")


def request_payload() -> Dict[str, Any]:
    """JSON body if there is one, otherwise the submitted form fields."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()
