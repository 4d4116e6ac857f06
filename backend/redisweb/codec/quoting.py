"""
Quoted Token Grammar

A quoted token is a double-quoted ASCII string. Printable ASCII bytes other
than `"` and `\\` stand for themselves; `\\\\`, `\\"`, `\\n`, `\\r`, `\\t` and
`\\xNN` are the only escapes. Values are converted to bytes with UTF-8 and
`surrogateescape`, so arbitrary byte strings read from Redis survive the
trip through a quoted token unchanged.
"""

import string

from redisweb.common.errors import MalformedQuotingError

_ESCAPES = {
    0x5C: "\\\\",
    0x22: '\\"',
    0x0A: "\\n",
    0x0D: "\\r",
    0x09: "\\t",
}

_UNESCAPES = {
    "\\": 0x5C,
    '"': 0x22,
    "n": 0x0A,
    "r": 0x0D,
    "t": 0x09,
}

_HEX_DIGITS = frozenset(string.hexdigits)


def to_bytes(value: str) -> bytes:
    return value.encode("utf-8", "surrogateescape")


def from_bytes(raw: bytes) -> str:
    return raw.decode("utf-8", "surrogateescape")


def quote(value: str) -> str:
    """Render a value as a quoted token"""
    out = ['"']
    for byte in to_bytes(value):
        if byte in _ESCAPES:
            out.append(_ESCAPES[byte])
        elif 0x20 <= byte <= 0x7E:
            out.append(chr(byte))
        else:
            out.append(f"\\x{byte:02x}")
    out.append('"')
    return "".join(out)


def unquote(token: str) -> str:
    """
    Parse a complete quoted token back into its value

    Raises:
        MalformedQuotingError: Missing delimiters, an unknown or truncated
            escape, an unescaped quote, or a character that must be escaped
    """
    if len(token) < 2 or token[0] != '"' or token[-1] != '"':
        raise MalformedQuotingError(
            "Quoted value must start and end with a double quote",
            details={"token": token[:80]},
        )

    inner = token[1:-1]
    buf = bytearray()
    i = 0
    n = len(inner)
    while i < n:
        ch = inner[i]
        if ch == "\\":
            if i + 1 >= n:
                raise MalformedQuotingError(
                    "Dangling backslash at end of quoted value",
                    details={"position": i + 1},
                )
            esc = inner[i + 1]
            if esc in _UNESCAPES:
                buf.append(_UNESCAPES[esc])
                i += 2
            elif esc == "x":
                digits = inner[i + 2:i + 4]
                if len(digits) != 2 or not all(d in _HEX_DIGITS for d in digits):
                    raise MalformedQuotingError(
                        f"Invalid \\x escape {inner[i:i + 4]!r}, expected two hex digits",
                        details={"position": i + 1},
                    )
                buf.append(int(digits, 16))
                i += 4
            else:
                raise MalformedQuotingError(
                    f"Unknown escape sequence \\{esc}",
                    details={"position": i + 1},
                )
        elif ch == '"':
            raise MalformedQuotingError(
                "Unescaped double quote inside quoted value",
                details={"position": i + 1},
            )
        elif " " <= ch <= "~":
            buf.append(ord(ch))
            i += 1
        else:
            raise MalformedQuotingError(
                f"Character {ch!r} must be escaped in a quoted value",
                details={"position": i + 1},
            )
    return from_bytes(bytes(buf))


def split_quoted_prefix(text: str) -> tuple[str, str]:
    """
    Split a line that starts with a quoted token into (token, rest)

    Only locates the closing quote; the token itself is validated by `unquote`.
    """
    i = 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
        elif ch == '"':
            return text[:i + 1], text[i + 1:]
        else:
            i += 1
    raise MalformedQuotingError(
        "Unterminated quoted value",
        details={"token": text[:80]},
    )


def is_utf8(value: str) -> bool:
    """False when the value carries raw bytes that are not valid UTF-8"""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def is_text(value: str) -> bool:
    """Printable text, allowing tabs and line breaks"""
    return all(ch.isprintable() or ch in "\t\n\r" for ch in value)
