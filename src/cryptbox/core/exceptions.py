"""
Exceptions for CryptBox core module
This is placed such that there is a general error catcher
"""


class CryptBoxError(Exception):
    # general container for errors
    pass


class MissingNameError(CryptBoxError):
    # raised when a box is created without a name
    pass


class InvalidNameError(MissingNameError, ValueError):
    # raised when a name would leave the storage root
    pass


class MissingKeyError(CryptBoxError):
    # raised when an encrypting box has no key to work with
    pass


class InvalidKeyError(MissingKeyError, ValueError):
    # raised on a blank key
    pass


class UnsupportedAlgorithmError(CryptBoxError):
    # raised when the cipher name is not known
    pass


class CodecError(CryptBoxError):
    # serialization failures (both directions)
    pass


class EncodeError(CodecError):
    # raised when a value can't be represented as JSON
    pass


class DecodeError(CodecError):
    # raised on a malformed payload (json or base64)
    pass


class DecryptError(CryptBoxError):
    # wrong key or corrupted ciphertext
    pass


class StorageError(CryptBoxError):
    # raised if reading or writing the box file fails
    pass


class ReadError(StorageError):
    pass


class WriteError(StorageError):
    pass


class TypeMismatchError(CryptBoxError):
    # raised when a numeric op hits a non-numeric value
    pass


class KeyNotFoundError(CryptBoxError):
    # raised when a numeric op hits an absent key
    pass


class UseAfterDestroyError(CryptBoxError):
    # raised when a destroyed box is used again
    pass
