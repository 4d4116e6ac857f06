"""
Test the String format codec
"""

import math

import pytest

from redisweb.codec.text import LineCodec, StringCodec
from redisweb.common.errors import MalformedQuotingError, TypeMismatchError
from redisweb.domain.keys import KeyType

codec = StringCodec()


def test_string_is_verbatim():
    assert codec.encode(KeyType.STRING, "hello\nworld") == "hello\nworld"
    assert codec.decode(KeyType.STRING, "hello\nworld") == "hello\nworld"


def test_hash_lines():
    value = {"name": "alice", "age": "30"}

    text = codec.encode(KeyType.HASH, value)

    assert text == "name: alice\nage: 30"
    assert codec.decode(KeyType.HASH, text) == value


def test_hash_ambiguous_elements_are_quoted():
    value = {"bio": "line1\nline2", "": "empty-field", "k: v": "x"}

    text = codec.encode(KeyType.HASH, value)

    assert text.split("\n") == [
        'bio: "line1\\nline2"',
        '"": empty-field',
        '"k: v": x',
    ]
    assert codec.decode(KeyType.HASH, text) == value


def test_hash_value_may_contain_separator():
    assert codec.decode(KeyType.HASH, "url: http://a: b") == {"url": "http://a: b"}


def test_list_tolerates_crlf_and_blank_lines():
    assert codec.decode(KeyType.LIST, "a\r\n\r\nb\r\n") == ["a", "b"]


def test_list_keeps_whitespace_via_quotes():
    value = ["", " padded ", '"q']

    text = codec.encode(KeyType.LIST, value)

    assert text == '""\n" padded "\n"\\"q"'
    assert codec.decode(KeyType.LIST, text) == value


def test_zset_scores():
    value = [("alice", 1.0), ("bob", 2.5), ("carol", math.inf)]

    text = codec.encode(KeyType.ZSET, value)

    assert text == "alice: 1\nbob: 2.5\ncarol: inf"
    assert codec.decode(KeyType.ZSET, text) == value


@pytest.mark.parametrize(
    "key_type,text",
    [
        (KeyType.HASH, "no separator here"),
        (KeyType.HASH, "f: 1\nf: 2"),
        (KeyType.HASH, '"abc"x: y'),
        (KeyType.SET, "a\na"),
        (KeyType.ZSET, "a: notanumber"),
        (KeyType.ZSET, "a: nan"),
        (KeyType.ZSET, "a: 1\na: 2"),
    ],
)
def test_type_mismatch(key_type, text):
    with pytest.raises(TypeMismatchError):
        codec.decode(key_type, text)


def test_unterminated_quote():
    with pytest.raises(MalformedQuotingError):
        codec.decode(KeyType.LIST, '"unterminated')


def test_line_codec_requires_token_methods():
    class Incomplete(LineCodec):
        format = None

        def encode_token(self, value, *, keyed=False):
            return value

    with pytest.raises(TypeError):
        LineCodec()
    with pytest.raises(TypeError, match="decode_token"):
        Incomplete()
