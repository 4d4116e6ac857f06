"""
Content Codec Module

Converts key values between their store-native form and the text shown in
the editor, for each supported `Format`.
"""

from redisweb.codec.base import Codec
from redisweb.codec.json_codec import JSONCodec, is_json_document
from redisweb.codec.quoting import is_text
from redisweb.codec.text import QuotedCodec, StringCodec
from redisweb.domain.keys import Format, KeyType, StoreValue

_CODECS: dict[Format, Codec] = {
    Format.STRING: StringCodec(),
    Format.JSON: JSONCodec(),
    Format.QUOTED: QuotedCodec(),
}


def get_codec(format: Format) -> Codec:
    """
    Get the codec for a format

    Args:
        format: Display format

    Returns:
        Codec: Shared stateless codec instance
    """
    return _CODECS[Format(format)]


def detect_format(key_type: KeyType, value: StoreValue) -> Format:
    """
    Choose the format a value is shown in when the caller did not ask for one

    Strings holding JSON are shown as JSON, readable text as String, and
    anything else (including the empty string) as Quoted. Collections are
    shown as JSON.
    """
    if KeyType(key_type).is_composite:
        return Format.JSON
    if not value:
        return Format.QUOTED
    if is_json_document(value):
        return Format.JSON
    if is_text(value):
        return Format.STRING
    return Format.QUOTED


def encode(key_type: KeyType, format: Format, value: StoreValue) -> str:
    return get_codec(format).encode(key_type, value)


def decode(key_type: KeyType, format: Format, text: str) -> StoreValue:
    return get_codec(format).decode(key_type, text)


__all__ = [
    "Codec",
    "JSONCodec",
    "QuotedCodec",
    "StringCodec",
    "decode",
    "detect_format",
    "encode",
    "get_codec",
]
