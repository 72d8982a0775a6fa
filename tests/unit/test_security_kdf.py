"""Unit tests for the key hashing module."""

import hashlib

import pytest

from cryptbox.core.exceptions import InvalidKeyError, MissingKeyError
from cryptbox.security.kdf import DIGEST_SIZE, derive_key, wipe_key


def test_derive_key_is_sha512_digest():
    """The digest is raw SHA-512 of the UTF-8 password."""
    key = derive_key("correct horse")
    assert key == hashlib.sha512(b"correct horse").digest()
    assert len(key) == DIGEST_SIZE


def test_derive_key_str_and_bytes_agree():
    """Passing the same password as string or bytes yields the same digest."""
    assert derive_key("pässword") == derive_key("pässword".encode("utf-8"))


def test_derive_key_is_deterministic():
    assert derive_key("abc") == derive_key("abc")


def test_different_passwords_differ():
    assert derive_key("k1") != derive_key("k2")


def test_blank_key_rejected():
    """Empty passwords are rejected, not hashed."""
    with pytest.raises(InvalidKeyError, match="Blank key"):
        derive_key("")

    with pytest.raises(InvalidKeyError):
        derive_key(b"")


def test_none_key_rejected():
    with pytest.raises(MissingKeyError, match="No key"):
        derive_key(None)


def test_invalid_key_is_a_missing_key_and_value_error():
    """InvalidKeyError can be caught as either parent."""
    assert issubclass(InvalidKeyError, MissingKeyError)
    assert issubclass(InvalidKeyError, ValueError)


def test_wipe_key_zeroes_bytearray():
    key = bytearray(b"\x01\x02\x03")
    wipe_key(key)
    assert key == bytearray(3)


def test_wipe_key_ignores_other_types():
    # bytes are immutable, None is the "no key" case; both are no-ops
    wipe_key(b"abc")
    wipe_key(None)
