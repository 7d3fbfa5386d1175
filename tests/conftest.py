"""Shared fixtures for the CWS panel tests."""

import pytest

from modules.log_store import LogStore
from modules.panel import PanelState
from web.app import create_app
from web.controller import Controller


class FakeListener:
    """Stands in for `HttpListener` without opening sockets."""

    created = []

    def __init__(self, app, host, port):
        self.app = app
        self.host = host
        self.port = port
        self.registered = False
        FakeListener.created.append(self)

    @property
    def bound_port(self):
        return self.port

    def register(self):
        self.registered = True

    def unregister(self):
        self.registered = False


@pytest.fixture(autouse=True)
def _reset_fake_listeners():
    FakeListener.created = []
    yield
    FakeListener.created = []


@pytest.fixture
def panel():
    return PanelState()


@pytest.fixture
def log_path(tmp_path):
    return tmp_path / "User" / "logfile.txt"


@pytest.fixture
def log_store(log_path):
    return LogStore(log_path)


@pytest.fixture
def controller(panel, log_store):
    return Controller(panel, "", log_store=log_store, host="127.0.0.1", port=0, listener_factory=FakeListener)


@pytest.fixture
def client(controller):
    app = create_app(controller.cws_path, controller.on_request)
    app.testing = True
    return app.test_client()
