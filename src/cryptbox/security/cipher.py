"""Symmetric ciphers used to seal box files.

Every cipher takes the 64-byte password digest and derives its own
cipher-sized key from it with HKDF, so switching algorithms never reuses a
key across modes.

Blob layouts:
- GCM: 12-byte random nonce || ciphertext || 16-byte tag
- CBC: 16-byte random IV || PKCS7-padded ciphertext
- ECB: PKCS7-padded ciphertext (legacy; no IV, identical blocks leak)
- none: plaintext

If the ``cryptography`` package is missing, every algorithm resolves to the
identity cipher and boxes are stored unencrypted.
"""

import os
from typing import Dict, List, Tuple

from cryptbox.core.exceptions import DecryptError, UnsupportedAlgorithmError

# Optional import: boxes still persist (unencrypted) without it
try:
    from cryptography.exceptions import InvalidTag
    from cryptography.hazmat.primitives import hashes, padding
    from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
    from cryptography.hazmat.primitives.ciphers.aead import AESGCM
    from cryptography.hazmat.primitives.kdf.hkdf import HKDF
    HAS_CRYPTOGRAPHY = True
except ImportError:
    HAS_CRYPTOGRAPHY = False


NONCE_SIZE = 12
BLOCK_SIZE = 16
IDENTITY = "none"


def cipher_key(digest: bytes, algorithm: str, length: int) -> bytes:
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=length,
        salt=None,
        info=b"cryptbox-" + algorithm.encode("utf-8"),
    )
    return hkdf.derive(bytes(digest))


class BoxCipher:
    """Interface every cipher strategy implements."""

    name = IDENTITY
    # False only for the identity cipher
    encrypting = True

    def encrypt(self, plaintext: bytes, key: bytes) -> bytes:
        raise NotImplementedError

    def decrypt(self, ciphertext: bytes, key: bytes) -> bytes:
        raise NotImplementedError


class IdentityCipher(BoxCipher):
    encrypting = False

    def encrypt(self, plaintext: bytes, key: bytes) -> bytes:
        return plaintext

    def decrypt(self, ciphertext: bytes, key: bytes) -> bytes:
        return ciphertext


class AESGCMCipher(BoxCipher):
    def __init__(self, name: str, key_size: int):
        self.name = name
        self.key_size = key_size

    def encrypt(self, plaintext: bytes, key: bytes) -> bytes:
        aead = AESGCM(cipher_key(key, self.name, self.key_size))
        nonce = os.urandom(NONCE_SIZE)
        return nonce + aead.encrypt(nonce, plaintext, None)

    def decrypt(self, ciphertext: bytes, key: bytes) -> bytes:
        if len(ciphertext) < NONCE_SIZE + 16:
            raise DecryptError("Ciphertext too short to contain nonce and tag")
        aead = AESGCM(cipher_key(key, self.name, self.key_size))
        nonce, ct = ciphertext[:NONCE_SIZE], ciphertext[NONCE_SIZE:]
        try:
            return aead.decrypt(nonce, ct, None)
        except InvalidTag as e:
            raise DecryptError("Authentication failed (wrong key or corrupted data)") from e


class AESBlockCipher(BoxCipher):
    """AES in CBC or ECB mode with PKCS7 padding."""

    def __init__(self, name: str, key_size: int, mode: str):
        self.name = name
        self.key_size = key_size
        self.mode = mode

    def _cipher(self, key: bytes, iv: bytes = b"") -> "Cipher":
        aes = algorithms.AES(cipher_key(key, self.name, self.key_size))
        mode = modes.CBC(iv) if self.mode == "cbc" else modes.ECB()
        return Cipher(aes, mode)

    def encrypt(self, plaintext: bytes, key: bytes) -> bytes:
        iv = os.urandom(BLOCK_SIZE) if self.mode == "cbc" else b""
        padder = padding.PKCS7(BLOCK_SIZE * 8).padder()
        padded = padder.update(plaintext) + padder.finalize()
        encryptor = self._cipher(key, iv).encryptor()
        return iv + encryptor.update(padded) + encryptor.finalize()

    def decrypt(self, ciphertext: bytes, key: bytes) -> bytes:
        iv = b""
        if self.mode == "cbc":
            iv, ciphertext = ciphertext[:BLOCK_SIZE], ciphertext[BLOCK_SIZE:]
        if not ciphertext or len(ciphertext) % BLOCK_SIZE:
            raise DecryptError("Ciphertext is not a whole number of blocks")
        decryptor = self._cipher(key, iv).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(BLOCK_SIZE * 8).unpadder()
        try:
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            raise DecryptError("Bad padding (wrong key or corrupted data)") from e


# name -> (mode, key size in bytes)
_ALGORITHMS: Dict[str, Tuple[str, int]] = {
    "aes-256-gcm": ("gcm", 32),
    "aes-128-gcm": ("gcm", 16),
    "aes-256-cbc": ("cbc", 32),
    "aes-128-cbc": ("cbc", 16),
    "aes-256-ecb": ("ecb", 32),
    "aes-128-ecb": ("ecb", 16),
}


def available_algorithms() -> List[str]:
    if not HAS_CRYPTOGRAPHY:
        return [IDENTITY]
    return sorted(_ALGORITHMS) + [IDENTITY]


def get_cipher(algorithm: str) -> BoxCipher:
    """Return the cipher strategy for ``algorithm``.

    Raises ``UnsupportedAlgorithmError`` for unknown names.
    """
    name = (algorithm or "").strip().lower()
    if name == IDENTITY:
        return IdentityCipher()
    if name not in _ALGORITHMS:
        raise UnsupportedAlgorithmError(f"Unsupported algorithm: {algorithm!r}")
    if not HAS_CRYPTOGRAPHY:
        return IdentityCipher()

    mode, key_size = _ALGORITHMS[name]
    if mode == "gcm":
        return AESGCMCipher(name, key_size)
    return AESBlockCipher(name, key_size, mode)
