"""Server start/stop tests for the CWS controller."""

import logging
import threading
import time
import urllib.request

import pytest

from core import Core, EventBus
from web.controller import Controller, ServerState
from web.errors import AlreadyRunningError, LifecycleError, NotRunningError

from .conftest import FakeListener


@pytest.fixture
def live_controller(panel, log_store):
    controller = Controller(panel, log_store=log_store, host="127.0.0.1", port=0)
    yield controller
    if controller.state is ServerState.RUNNING:
        controller.stop_server()


class TestRealListener:
    def test_serves_requests_until_stopped(self, live_controller, panel) -> None:
        panel.set_ushort(31, 65535)
        assert live_controller.start_server() is True
        assert live_controller.state is ServerState.RUNNING
        port = live_controller.listener.bound_port
        assert port

        with urllib.request.urlopen(f"http://127.0.0.1:{port}/getslider", timeout=5) as resp:
            assert resp.status == 200
            assert resp.read().decode() == '{"value": 100%}'

        assert live_controller.stop_server() is True
        assert live_controller.state is ServerState.STOPPED
        assert live_controller.listener is None

    def test_second_start_reports_already_running(self, live_controller, caplog) -> None:
        assert live_controller.start_server()
        listener = live_controller.listener
        with caplog.at_level(logging.ERROR, logger="cwspanel"):
            assert live_controller.start_server() is False
        assert isinstance(live_controller.last_error, AlreadyRunningError)
        assert "already running" in caplog.text
        assert live_controller.listener is listener
        assert live_controller.state is ServerState.RUNNING

    def test_restart_after_stop(self, live_controller) -> None:
        assert live_controller.start_server()
        assert live_controller.stop_server()
        assert live_controller.start_server()
        assert live_controller.state is ServerState.RUNNING


class TestStop:
    def test_stop_without_start_is_non_fatal(self, controller, caplog) -> None:
        with caplog.at_level(logging.ERROR, logger="cwspanel"):
            assert controller.stop_server() is False
        assert isinstance(controller.last_error, NotRunningError)
        assert "not running" in caplog.text
        assert controller.state is ServerState.STOPPED

    def test_stop_unregisters_listener(self, controller) -> None:
        controller.start_server()
        listener = controller.listener
        assert listener.registered
        controller.stop_server()
        assert not listener.registered


    def test_module_stop_when_idle_is_silent(self, controller, caplog) -> None:
        with caplog.at_level(logging.ERROR, logger="cwspanel"):
            controller.stop()
        assert controller.last_error is None
        assert "cws_stop_error" not in caplog.text

    def test_module_stop_waits_for_lock_before_checking_state(self, controller, caplog) -> None:
        controller.start_server()
        worker = threading.Thread(target=controller.stop)
        with caplog.at_level(logging.ERROR, logger="cwspanel"):
            with controller._lock:
                worker.start()
                time.sleep(0.1)
                # Another caller finished stopping while the worker waited.
                controller._listener.unregister()
                controller._listener = None
                controller._state = ServerState.STOPPED
            worker.join(timeout=5)
        assert not worker.is_alive()
        assert controller.last_error is None
        assert "cws_stop_error" not in caplog.text


class TestStartFailures:
    def test_register_failure_leaves_stopped(self, panel, log_store) -> None:
        class FailingListener(FakeListener):
            def register(self):
                raise OSError("address in use")

        controller = Controller(panel, log_store=log_store, listener_factory=FailingListener)
        assert controller.start_server() is False
        assert controller.state is ServerState.STOPPED
        assert controller.listener is None
        assert isinstance(controller.last_error, LifecycleError)
        assert "address in use" in str(controller.last_error)

    def test_concurrent_starts_create_one_listener(self, controller) -> None:
        results = []
        barrier = threading.Barrier(8)

        def worker() -> None:
            barrier.wait()
            results.append(controller.start_server())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 1
        assert len(FakeListener.created) == 1


def test_core_starts_and_stops_controller(panel, log_store) -> None:
    bus = EventBus()
    events = []
    bus.subscribe("cws_server", lambda _type, payload: events.append(payload["state"]))
    controller = Controller(panel, log_store=log_store, listener_factory=FakeListener)
    core = Core([controller], event_bus=bus)

    assert controller.state is ServerState.RUNNING
    assert core.commands == ["cws.start", "cws.status", "cws.stop"]
    assert core.dispatch("cws.status").payload["state"] == "running"
    assert core.dispatch("cws.start").payload is False

    core.shutdown()
    assert controller.state is ServerState.STOPPED
    assert events == ["running", "stopped"]
