"""
Configuration for Quick Order.

Values are read from the environment (and a local .env file) once at import
time. Timing constants default to the behaviour of the original ordering
page: a 2 second simulated processing delay and a 30 second status tick.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file early so environment variables are available for Config class
# This must happen before the Config class is defined
load_dotenv(override=True)

# Base directory (where this file lives)
BASE_DIR = Path(__file__).resolve().parent


class Config:
    """Default configuration for the Flask application."""

    # Flask settings
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
    ENVIRONMENT = os.environ.get("FLASK_ENV", "development")

    # Debug mode
    DEBUG = os.environ.get("FLASK_DEBUG", "1") == "1"
    TESTING = False

    # ==========================================================================
    # Order History Persistence
    # ==========================================================================
    # HISTORY_BACKEND: "file" stores the history blob in HISTORY_FILE,
    #   "memory" keeps it for the life of the process only.
    # HISTORY_KEY: key of the history blob inside the store. Kept identical
    #   to the original application's storage key so exported data matches.
    # ==========================================================================
    HISTORY_BACKEND = os.environ.get("QUICK_ORDER_HISTORY_BACKEND", "file")
    HISTORY_FILE = os.environ.get(
        "QUICK_ORDER_HISTORY_FILE",
        str(BASE_DIR / "data" / "order_history.json")
    )
    HISTORY_KEY = "orderHistory"
    HISTORY_CAPACITY = int(os.environ.get("QUICK_ORDER_HISTORY_CAPACITY", "10"))

    # ==========================================================================
    # Order Lifecycle Timing
    # ==========================================================================
    # SUBMISSION_DELAY_SECONDS: simulated processing time for one order
    # STATUS_INTERVAL_SECONDS: period of the status advancement tick
    #   (confirmed -> preparing -> delivered)
    # ==========================================================================
    SUBMISSION_DELAY_SECONDS = float(
        os.environ.get("QUICK_ORDER_SUBMISSION_DELAY", "2.0")
    )
    STATUS_INTERVAL_SECONDS = float(
        os.environ.get("QUICK_ORDER_STATUS_INTERVAL", "30.0")
    )
    START_STATUS_SCHEDULER = True

    # Free-text form limits
    MAX_FIELD_LENGTH = 200
    MAX_INSTRUCTIONS_LENGTH = 1000


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = False
    TESTING = True
    HISTORY_BACKEND = "memory"
    SUBMISSION_DELAY_SECONDS = 0.0
    START_STATUS_SCHEDULER = False
