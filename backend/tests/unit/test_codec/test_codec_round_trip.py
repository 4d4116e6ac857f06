"""
Test that every format reads back exactly what it renders, and format detection
"""

import math

import pytest

from redisweb import codec
from redisweb.codec.quoting import from_bytes
from redisweb.domain.keys import Format, KeyType

BINARY = from_bytes(bytes(range(256)))

SAMPLES = {
    KeyType.STRING: [
        "",
        "plain",
        "multi\nline",
        '{"a": [1, 2]}',
        '"already quoted"',
        "  spaced  ",
        "ünïcödé ✓",
        BINARY,
    ],
    KeyType.HASH: [
        {},
        {"a": "1"},
        {"": "", "k: v": "x\ny", "ü": from_bytes(b"\x00\xff")},
    ],
    KeyType.LIST: [
        [],
        [""],
        ["a", "a", "b"],
        ["  x", '"', "1", "[1]"],
    ],
    KeyType.SET: [
        [],
        ["a", "b"],
        ["", "x: y", from_bytes(b"\xfe")],
    ],
    KeyType.ZSET: [
        [],
        [("a", 1.0)],
        [("b", -2.5), ("c", math.inf), ("d", 1e300), ("e", 0.1), ("", -math.inf)],
    ],
}

CASES = [
    (key_type, value)
    for key_type, values in SAMPLES.items()
    for value in values
]


@pytest.mark.parametrize("format", list(Format))
@pytest.mark.parametrize("key_type,value", CASES)
def test_decode_inverts_encode(key_type, value, format):
    text = codec.encode(key_type, format, value)

    assert codec.decode(key_type, format, text) == value


class TestDetectFormat:
    def test_collections_use_json(self):
        assert codec.detect_format(KeyType.HASH, {"a": "1"}) == Format.JSON
        assert codec.detect_format(KeyType.ZSET, []) == Format.JSON

    def test_json_string(self):
        assert codec.detect_format(KeyType.STRING, '{"a": 1}') == Format.JSON

    def test_text_string(self):
        assert codec.detect_format(KeyType.STRING, "hello world") == Format.STRING

    def test_empty_and_binary_strings_are_quoted(self):
        assert codec.detect_format(KeyType.STRING, "") == Format.QUOTED
        assert codec.detect_format(KeyType.STRING, BINARY) == Format.QUOTED
