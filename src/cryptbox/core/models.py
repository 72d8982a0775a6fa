"""
Base data models for box values and box state
"""

from enum import Enum


class ValueType(Enum):
    # Type tags for values stored in a box, mirrors what JSON can carry
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


class BoxState(Enum):
    # Lifecycle of a Box instance
    UNINITIALIZED = "uninitialized"
    UNLOADED = "unloaded"
    LOADED = "loaded"
    DESTROYED = "destroyed"
