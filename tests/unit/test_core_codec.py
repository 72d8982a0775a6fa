"""Unit tests for the canonical JSON codec and the base64 transport."""

import math

import pytest

from cryptbox.core import codec, transport
from cryptbox.core.exceptions import DecodeError, EncodeError
from cryptbox.core.models import ValueType


# ==============================================================================
# Tests: value_type
# ==============================================================================

@pytest.mark.parametrize(
    "value, expected",
    [
        (None, ValueType.NULL),
        (True, ValueType.BOOLEAN),
        (False, ValueType.BOOLEAN),
        (0, ValueType.NUMBER),
        (2.5, ValueType.NUMBER),
        ("", ValueType.STRING),
        ([1, "a"], ValueType.SEQUENCE),
        ((1, 2), ValueType.SEQUENCE),
        ({"a": 1}, ValueType.MAPPING),
    ],
)
def test_value_type_tags(value, expected):
    assert codec.value_type(value) is expected


def test_value_type_rejects_unsupported():
    with pytest.raises(EncodeError, match="Unsupported value type: set"):
        codec.value_type({1, 2})


@pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
def test_value_type_rejects_non_finite(value):
    with pytest.raises(EncodeError, match="Non-finite"):
        codec.value_type(value)


def test_is_number():
    assert codec.is_number(3)
    assert codec.is_number(3.0)
    assert not codec.is_number(True)
    assert not codec.is_number("3")
    assert not codec.is_number(object())


# ==============================================================================
# Tests: validate
# ==============================================================================

def test_validate_passes_plain_values_through():
    assert codec.validate(5) == 5
    assert codec.validate(None) is None
    assert codec.validate({"a": [1, {"b": "c"}]}) == {"a": [1, {"b": "c"}]}


def test_validate_turns_tuples_into_lists():
    """Tuples come back from disk as lists, so they are stored as lists."""
    value = {"pair": (1, (2, 3))}
    normalized = codec.validate(value)
    assert normalized == {"pair": [1, [2, 3]]}
    assert codec.decode(codec.encode({"v": normalized})) == {"v": normalized}


def test_validate_returns_a_copy():
    inner = [1, 2]
    out = codec.validate({"l": inner})
    inner.append(3)
    assert out == {"l": [1, 2]}


@pytest.mark.parametrize(
    "value, message",
    [
        ([math.nan], "Non-finite"),
        ({"a": {"b": [1, math.inf]}}, "Non-finite"),
        ({1: "a", "b": 2}, "keys must be strings"),
        ({"x": {None: 1}}, "keys must be strings"),
        ({"s": {1, 2}}, "Unsupported value type: set"),
        ([b"bytes"], "Unsupported value type: bytes"),
    ],
)
def test_validate_rejects_nested_bad_values(value, message):
    with pytest.raises(EncodeError, match=message):
        codec.validate(value)


def test_validate_rejects_circular_reference():
    loop = []
    loop.append(loop)
    with pytest.raises(EncodeError, match="Circular reference"):
        codec.validate(loop)


def test_validate_allows_shared_non_circular_values():
    shared = [1]
    assert codec.validate({"a": shared, "b": shared}) == {"a": [1], "b": [1]}


# ==============================================================================
# Tests: encode / decode
# ==============================================================================

def test_encode_is_canonical():
    """Key order does not change the output; separators are compact."""
    a = codec.encode({"b": 1, "a": [1, 2]})
    b = codec.encode({"a": [1, 2], "b": 1})
    assert a == b == b'{"a":[1,2],"b":1}'


def test_encode_keeps_unicode_as_utf8():
    assert codec.encode({"lock": "🔒"}) == '{"lock":"🔒"}'.encode("utf-8")


def test_roundtrip_preserves_types():
    data = {
        "null": None,
        "flag": True,
        "int": 42,
        "float": 1.5,
        "text": "hello",
        "list": [1, "two", 3.0, None],
        "nested": {"inner": {"deep": [False]}},
    }
    out = codec.decode(codec.encode(data))
    assert out == data
    assert isinstance(out["int"], int)
    assert isinstance(out["float"], float)


def test_encode_rejects_non_mapping():
    with pytest.raises(EncodeError, match="Expected a mapping"):
        codec.encode([1, 2])


def test_encode_rejects_unserializable_value():
    with pytest.raises(EncodeError, match="Unsupported value type: object"):
        codec.encode({"when": object()})


def test_encode_rejects_nan():
    with pytest.raises(EncodeError):
        codec.encode({"x": math.nan})


def test_encode_rejects_non_str_keys():
    """json.dumps would store 1 as "1"; the codec refuses instead."""
    with pytest.raises(EncodeError, match="keys must be strings"):
        codec.encode({"m": {1: "a", "b": 2}})


@pytest.mark.parametrize(
    "payload",
    [b"{not json", b"\xff\xfe", b"", b'{"a": 1'],
)
def test_decode_malformed_raises(payload):
    with pytest.raises(DecodeError, match="Malformed payload"):
        codec.decode(payload)


@pytest.mark.parametrize("payload", [b"[1, 2]", b'"text"', b"42", b"null"])
def test_decode_non_object_raises(payload):
    with pytest.raises(DecodeError, match="expected an object"):
        codec.decode(payload)


# ==============================================================================
# Tests: transport
# ==============================================================================

def test_transport_encode_is_ascii_base64():
    text = transport.encode(b"\x00\xffdata")
    assert text == "AP9kYXRh"
    assert transport.decode(text) == b"\x00\xffdata"


def test_transport_decode_ignores_line_breaks():
    assert transport.decode("AP9k\nYXRh\n") == b"\x00\xffdata"
    assert transport.decode(b"  AP9kYXRh  ") == b"\x00\xffdata"


@pytest.mark.parametrize("text", ["not base64!", "AP9kYXR", "ÄÖÜ"])
def test_transport_decode_invalid_raises(text):
    with pytest.raises(DecodeError):
        transport.decode(text)
