"""
Content Codec Interface

A codec turns a store-native value into display text for one `Format` and
parses edited text back. `decode(t, encode(t, v)) == v` must hold for every
value the store can hold; decoding is all-or-nothing.
"""

import math
from abc import ABC, abstractmethod
from typing import Iterable

from redisweb.common.errors import TypeMismatchError
from redisweb.domain.keys import Format, KeyType, StoreValue

# Largest magnitude below which every integral float is printed as an integer
_EXACT_INT_LIMIT = 2 ** 53


class Codec(ABC):
    """
    Content Codec Base Class

    Dispatches on the key type to `encode_<type>` / `decode_<type>`.
    """

    format: Format

    def encode(self, key_type: KeyType, value: StoreValue) -> str:
        """
        Render a store value as display text

        Args:
            key_type: Type of the key the value belongs to
            value: Store-native value

        Returns:
            str: Display text
        """
        return getattr(self, f"encode_{KeyType(key_type).value}")(value)

    def decode(self, key_type: KeyType, text: str) -> StoreValue:
        """
        Parse display text into a store value

        Args:
            key_type: Type the decoded value must have
            text: Display text

        Returns:
            StoreValue: Store-native value

        Raises:
            DecodeError: The text does not fit the format or the key type
        """
        return getattr(self, f"decode_{KeyType(key_type).value}")(text)

    @abstractmethod
    def encode_string(self, value: str) -> str:
        pass

    @abstractmethod
    def encode_hash(self, value: dict[str, str]) -> str:
        pass

    @abstractmethod
    def encode_list(self, value: list[str]) -> str:
        pass

    @abstractmethod
    def encode_set(self, value: list[str]) -> str:
        pass

    @abstractmethod
    def encode_zset(self, value: list[tuple[str, float]]) -> str:
        pass

    @abstractmethod
    def decode_string(self, text: str) -> str:
        pass

    @abstractmethod
    def decode_hash(self, text: str) -> dict[str, str]:
        pass

    @abstractmethod
    def decode_list(self, text: str) -> list[str]:
        pass

    @abstractmethod
    def decode_set(self, text: str) -> list[str]:
        pass

    @abstractmethod
    def decode_zset(self, text: str) -> list[tuple[str, float]]:
        pass


def format_score(score: float) -> str:
    """Sorted set score as text: integers without a fraction, infinities as inf/-inf"""
    if math.isinf(score):
        return "inf" if score > 0 else "-inf"
    if score.is_integer() and abs(score) < _EXACT_INT_LIMIT:
        return str(int(score))
    return repr(float(score))


def parse_score(text: str, member: str) -> float:
    """
    Parse a sorted set score

    Raises:
        TypeMismatchError: Not a number, or NaN
    """
    try:
        score = float(text.strip())
    except (TypeError, ValueError):
        raise TypeMismatchError(
            f"Score {text!r} of member {member!r} is not a number",
            details={"member": member},
        )
    if math.isnan(score):
        raise TypeMismatchError(
            f"Score of member {member!r} must not be NaN",
            details={"member": member},
        )
    return score


def ensure_unique(items: Iterable[str], what: str) -> None:
    """Reject duplicates among hash fields / set members / sorted set members"""
    seen = set()
    for item in items:
        if item in seen:
            raise TypeMismatchError(
                f"Duplicate {what} {item!r}",
                details={what: item},
            )
        seen.add(item)
