"""CryptBox: named, encrypted, persistent key-value boxes."""

from .core.box import Box, open_box
from .core.header import Header
from .core.lifecycle import LifecycleEvent, LifecycleHost, get_host
from .core.models import BoxState, ValueType

__all__ = [
    "Box",
    "open_box",
    "Header",
    "LifecycleEvent",
    "LifecycleHost",
    "get_host",
    "BoxState",
    "ValueType",
]
