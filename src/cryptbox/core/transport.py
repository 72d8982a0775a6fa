""" Base64 transport encoding for box files. """

import base64
import binascii

from .exceptions import DecodeError


def encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def decode(text: str | bytes) -> bytes:
    # Line breaks and surrounding whitespace are tolerated, anything else is not.
    if isinstance(text, str):
        try:
            text = text.encode("ascii")
        except UnicodeEncodeError as e:
            raise DecodeError("Transport payload is not ASCII") from e
    compact = b"".join(text.split())
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64 payload: {e}") from e
