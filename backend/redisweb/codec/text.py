"""
Line-Oriented Codecs (String and Quoted formats)

Collections are shown one element per line; hashes as `field: value` and
sorted sets as `member: score`. The String format writes an element bare when
it reads unambiguously and falls back to a quoted token otherwise; the Quoted
format quotes every element.
"""

from abc import abstractmethod

from redisweb.codec.base import Codec, ensure_unique, format_score, parse_score
from redisweb.codec.quoting import quote, split_quoted_prefix, unquote
from redisweb.common.errors import MalformedQuotingError, TypeMismatchError
from redisweb.domain.keys import Format

SEPARATOR = ": "


def _lines(text: str) -> list[str]:
    return [line for line in text.splitlines() if line.strip()]


class LineCodec(Codec):
    """Shared line layout; subclasses decide how single elements are written"""

    @abstractmethod
    def encode_token(self, value: str, *, keyed: bool = False) -> str:
        pass

    @abstractmethod
    def decode_token(self, token: str) -> str:
        pass

    def _split_pair(self, line: str, what: str) -> tuple[str, str]:
        """Split `<token>: <rest>` where the first token may be quoted"""
        if line.startswith('"'):
            token, rest = split_quoted_prefix(line)
            if not rest.startswith(SEPARATOR):
                raise TypeMismatchError(
                    f"Expected '{SEPARATOR}' after {what} {token}",
                    details={"line": line[:80]},
                )
            return self.decode_token(token), rest[len(SEPARATOR):]

        index = line.find(SEPARATOR)
        if index < 0:
            raise TypeMismatchError(
                f"Line {line[:80]!r} is not of the form '{what}{SEPARATOR}...'",
                details={"line": line[:80]},
            )
        return self.decode_token(line[:index]), line[index + len(SEPARATOR):]

    def encode_hash(self, value: dict[str, str]) -> str:
        return "\n".join(
            f"{self.encode_token(field, keyed=True)}{SEPARATOR}{self.encode_token(item)}"
            for field, item in value.items()
        )

    def encode_list(self, value: list[str]) -> str:
        return "\n".join(self.encode_token(item) for item in value)

    def encode_set(self, value: list[str]) -> str:
        return self.encode_list(value)

    def encode_zset(self, value: list[tuple[str, float]]) -> str:
        return "\n".join(
            f"{self.encode_token(member, keyed=True)}{SEPARATOR}{format_score(score)}"
            for member, score in value
        )

    def decode_hash(self, text: str) -> dict[str, str]:
        pairs = []
        for line in _lines(text):
            field, rest = self._split_pair(line, "field")
            pairs.append((field, self.decode_token(rest)))
        ensure_unique((field for field, _ in pairs), "field")
        return dict(pairs)

    def decode_list(self, text: str) -> list[str]:
        return [self.decode_token(line) for line in _lines(text)]

    def decode_set(self, text: str) -> list[str]:
        members = self.decode_list(text)
        ensure_unique(members, "member")
        return members

    def decode_zset(self, text: str) -> list[tuple[str, float]]:
        entries = []
        for line in _lines(text):
            member, rest = self._split_pair(line, "member")
            entries.append((member, parse_score(rest, member)))
        ensure_unique((member for member, _ in entries), "member")
        return entries


class StringCodec(LineCodec):
    """Plain text: strings verbatim, collection elements bare where possible"""

    format = Format.STRING

    def encode_token(self, value: str, *, keyed: bool = False) -> str:
        if self.is_bare(value, keyed=keyed):
            return value
        return quote(value)

    def decode_token(self, token: str) -> str:
        if token.startswith('"'):
            return unquote(token)
        return token

    @staticmethod
    def is_bare(value: str, *, keyed: bool = False) -> bool:
        """Whether an element can be written without quotes and still read back unchanged"""
        if not value or value != value.strip() or value.startswith('"'):
            return False
        if not value.isprintable():
            return False
        if keyed and SEPARATOR in value:
            return False
        return True

    def encode_string(self, value: str) -> str:
        return value

    def decode_string(self, text: str) -> str:
        return text


class QuotedCodec(LineCodec):
    """Every value written as a quoted token with non-printable bytes escaped"""

    format = Format.QUOTED

    def encode_token(self, value: str, *, keyed: bool = False) -> str:
        return quote(value)

    def decode_token(self, token: str) -> str:
        if not token.startswith('"'):
            raise MalformedQuotingError(
                f"Expected a quoted value, got {token[:80]!r}",
                details={"token": token[:80]},
            )
        return unquote(token)

    def encode_string(self, value: str) -> str:
        return quote(value)

    def decode_string(self, text: str) -> str:
        # Editors tend to append a final newline
        return self.decode_token(text.strip())
