"""Security helpers: key hashing and the cipher strategies boxes are sealed with.

This package provides:
- SHA-512 key digests (the only form a key is kept in)
- AES-GCM (default), AES-CBC and legacy AES-ECB ciphers
- an identity cipher used when encryption is unavailable or disabled
"""

from .kdf import derive_key, wipe_key
from .cipher import (
    HAS_CRYPTOGRAPHY,
    BoxCipher,
    IdentityCipher,
    available_algorithms,
    get_cipher,
)

__all__ = [
    "derive_key",
    "wipe_key",
    "HAS_CRYPTOGRAPHY",
    "BoxCipher",
    "IdentityCipher",
    "available_algorithms",
    "get_cipher",
]
