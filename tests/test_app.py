"""
Tests for the app factory and shutdown.
"""

import atexit

from app import EXIT_HOOK_KEY, create_app, shutdown_services
from config import ProductionConfig


class TestShutdown:

    def test_shutdown_releases_exit_hook(self, monkeypatch):
        registered = []
        unregistered = []
        monkeypatch.setattr(atexit, "register", registered.append)
        monkeypatch.setattr(atexit, "unregister", unregistered.append)

        app = create_app("config.TestingConfig")
        assert len(registered) == 1
        assert app.extensions[EXIT_HOOK_KEY] is registered[0]

        shutdown_services(app)
        shutdown_services(app)

        assert unregistered == registered
        assert EXIT_HOOK_KEY not in app.extensions

    def test_each_app_gets_its_own_exit_hook(self, monkeypatch):
        registered = []
        unregistered = []
        monkeypatch.setattr(atexit, "register", registered.append)
        monkeypatch.setattr(atexit, "unregister", unregistered.append)

        first = create_app("config.TestingConfig")
        second = create_app("config.TestingConfig")
        shutdown_services(first)

        assert unregistered == [registered[0]]
        assert second.extensions[EXIT_HOOK_KEY] is registered[1]
        shutdown_services(second)

    def test_exit_hook_stops_services(self, monkeypatch):
        registered = []
        monkeypatch.setattr(atexit, "register", registered.append)
        unregistered = []
        monkeypatch.setattr(atexit, "unregister", unregistered.append)

        app = create_app("config.TestingConfig")
        app.config["STATUS_SCHEDULER"].start()

        registered[0]()

        assert not app.config["STATUS_SCHEDULER"].is_running
        assert unregistered == []


class TestConfig:

    def test_production_sets_no_session_cookie_options(self):
        assert not [name for name in vars(ProductionConfig) if name.startswith("SESSION_")]
