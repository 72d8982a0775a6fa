"""Unit tests for the CLI AppContext builder and config helpers."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from cryptbox.core.box import Box
from cryptbox.core.config import resolve_algorithm, resolve_storage_root
from cryptbox.core.lifecycle import LifecycleHost
from cryptbox.frontend.cli.context import build_context


@pytest.fixture
def host():
    h = MagicMock(spec=LifecycleHost)
    return h


def test_build_context_first_run(tmp_path, host, monkeypatch):
    """No file yet: first_run is set and the box is hooked to the host."""
    monkeypatch.delenv("CRYPTBOX_PASSWORD", raising=False)
    ctx = build_context("notes", storage_root=tmp_path, host=host)

    assert isinstance(ctx.box, Box)
    assert ctx.box.path == tmp_path / "notes.crypt"
    assert ctx.first_run is True
    assert ctx.password is None
    host.install_atexit.assert_called_once()
    host.subscribe.assert_called_once_with(ctx.box.handle_event)


def test_build_context_existing_box(tmp_path, host):
    (tmp_path / "notes.crypt").write_text("")
    ctx = build_context("notes", storage_root=tmp_path, host=host)
    assert ctx.first_run is False


def test_build_context_password_from_env(tmp_path, host, monkeypatch):
    monkeypatch.setenv("CRYPTBOX_PASSWORD", "hunter2")
    ctx = build_context("notes", storage_root=tmp_path, host=host)
    assert ctx.password == "hunter2"


def test_resolve_storage_root_precedence(tmp_path, monkeypatch):
    monkeypatch.setenv("CRYPTBOX_HOME", str(tmp_path / "env"))
    assert resolve_storage_root(tmp_path / "explicit") == tmp_path / "explicit"
    assert resolve_storage_root() == tmp_path / "env"

    monkeypatch.delenv("CRYPTBOX_HOME")
    assert resolve_storage_root() == Path.home() / ".cryptbox"


def test_resolve_algorithm(monkeypatch):
    monkeypatch.delenv("CRYPTBOX_ALGORITHM", raising=False)
    assert resolve_algorithm() == "aes-256-gcm"
    assert resolve_algorithm("AES-256-ECB") == "aes-256-ecb"
    monkeypatch.setenv("CRYPTBOX_ALGORITHM", "aes-128-gcm")
    assert resolve_algorithm() == "aes-128-gcm"
