"""
Unit tests for the lifecycle host.
"""

import pytest
from unittest.mock import MagicMock, patch

from cryptbox.core import lifecycle
from cryptbox.core.lifecycle import LifecycleEvent, LifecycleHost, get_host


@pytest.fixture
def host():
    return LifecycleHost()


def test_subscribe_and_emit(host):
    listener = MagicMock()
    host.subscribe(listener)
    host.emit(LifecycleEvent.SUSPEND)
    listener.assert_called_once_with(LifecycleEvent.SUSPEND)


def test_subscribe_is_idempotent(host):
    listener = MagicMock()
    host.subscribe(listener)
    host.subscribe(listener)
    assert host.listener_count == 1


def test_unsubscribe_stops_delivery(host):
    listener = MagicMock()
    host.subscribe(listener)
    host.unsubscribe(listener)
    host.emit(LifecycleEvent.EXIT)
    listener.assert_not_called()


def test_unsubscribe_unknown_listener_is_noop(host):
    host.unsubscribe(MagicMock())
    assert host.listener_count == 0


def test_failing_listener_does_not_block_others(host, caplog):
    bad = MagicMock(side_effect=RuntimeError("boom"))
    good = MagicMock()
    host.subscribe(bad)
    host.subscribe(good)

    host.emit(LifecycleEvent.EXIT)

    good.assert_called_once_with(LifecycleEvent.EXIT)
    assert "Lifecycle listener failed on exit" in caplog.text


def test_install_atexit_registers_once(host):
    with patch.object(lifecycle.atexit, "register") as register:
        host.install_atexit()
        host.install_atexit()
    register.assert_called_once_with(host.emit, LifecycleEvent.EXIT)


def test_default_set_sync_is_unsupported(host):
    assert host.set_sync("box.crypt", True) is None


def test_get_host_is_shared():
    assert get_host() is get_host()
