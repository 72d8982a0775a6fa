"""Unit tests for the box Header record."""

import pytest

import cryptbox.core.header as header_mod
from cryptbox.core.config import FORMAT_VERSION
from cryptbox.core.header import Header


@pytest.fixture
def clock(monkeypatch):
    """Controllable replacement for the header clock."""
    state = {"now": 1000}
    monkeypatch.setattr(header_mod, "_now", lambda: state["now"])
    return state


def test_fresh_header_sets_created(clock):
    h = Header.fresh()
    assert h.created == 1000
    assert h.version == FORMAT_VERSION
    assert h.saved is None and h.loaded is None


def test_on_create_never_overwrites(clock):
    h = Header.fresh()
    clock["now"] = 2000
    h.on_create()
    assert h.created == 1000


def test_stamps_advance(clock):
    h = Header()
    h.on_save()
    h.on_load()
    h.on_access()
    h.on_modify()
    assert (h.saved, h.loaded, h.accessed, h.modified) == (1000, 1000, 1000, 1000)

    clock["now"] = 1500
    h.on_access()
    assert h.accessed == 1500
    # untouched stamps stay put
    assert h.modified == 1000


def test_stamps_never_go_backwards(clock):
    """A clock stepping back does not rewind any stamp."""
    h = Header()
    clock["now"] = 5000
    h.on_save()
    clock["now"] = 4000
    h.on_save()
    assert h.saved == 5000


def test_roundtrip_dict(clock):
    h = Header.fresh()
    h.on_save()
    assert Header.from_dict(h.to_dict()) == h
    assert set(h.to_dict()) == {"version", "created", "saved", "loaded", "accessed", "modified"}


def test_from_dict_tolerates_garbage():
    h = Header.from_dict({"version": "x", "created": "yesterday", "saved": True, "extra": 1, "loaded": 12.7})
    assert h.version == FORMAT_VERSION
    assert h.created is None
    assert h.saved is None
    assert h.loaded == 12


def test_from_dict_non_mapping_gives_empty_header():
    assert Header.from_dict(None) == Header()
    assert Header.from_dict([1, 2]) == Header()
