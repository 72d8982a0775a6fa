from __future__ import annotations

import hashlib
from typing import Optional

from cryptbox.core.exceptions import InvalidKeyError, MissingKeyError


DIGEST_SIZE = 64  # SHA-512


def derive_key(password: Optional[str | bytes]) -> bytes:
    """
    Hash a password into the 64-byte SHA-512 digest a box keeps in memory.
    The raw password is never stored; callers should drop it after this call.
    """
    if password is None:
        raise MissingKeyError("No key supplied")
    if isinstance(password, str):
        password = password.encode("utf-8")
    if not password:
        raise InvalidKeyError("Blank key supplied")
    return hashlib.sha512(password).digest()


def wipe_key(key: Optional[bytearray | bytes]) -> None:
    """Best-effort overwrite of key material that lives in a bytearray."""
    if isinstance(key, bytearray):
        for i in range(len(key)):
            key[i] = 0
