"""
TTL Expression Utilities

Parses the human TTL expressions typed into the "new key" form
("10s", "5m", "1h", "1d", "1h30m", "-1s") into a directive for the store,
and renders a remaining TTL back into the same notation.
"""

import re
from dataclasses import dataclass
from enum import Enum

from redisweb.common.errors import TTLParseError

UNIT_SECONDS = {
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
}

# Longest TTL accepted; Redis rejects expire times whose milliseconds overflow
MAX_TTL_SECONDS = 100 * 365 * UNIT_SECONDS["d"]

# Optional sign, then either bare digits or one or more <digits><unit> terms
_TTL_PATTERN = re.compile(r"^([+-]?)(?:(\d{1,15})|((?:\d{1,15}[smhd])+))$", re.IGNORECASE)
_TERM_PATTERN = re.compile(r"(\d{1,15})([smhd])", re.IGNORECASE)


class TTLKind(str, Enum):
    """What the store should do with a key's expiration"""

    UNCHANGED = "unchanged"
    NO_EXPIRY = "no_expiry"
    DURATION = "duration"
    EXPIRE_NOW = "expire_now"


@dataclass(frozen=True)
class TTLDirective:
    """Parsed outcome of a TTL expression"""

    kind: TTLKind
    # Only meaningful for DURATION
    seconds: int = 0

    @classmethod
    def duration(cls, seconds: int) -> "TTLDirective":
        return cls(TTLKind.DURATION, seconds)


UNCHANGED = TTLDirective(TTLKind.UNCHANGED)
NO_EXPIRY = TTLDirective(TTLKind.NO_EXPIRY)
EXPIRE_NOW = TTLDirective(TTLKind.EXPIRE_NOW)


def parse_ttl(expr: str, *, creating: bool = True) -> TTLDirective:
    """
    Parse a TTL expression

    Args:
        expr: Raw text, e.g. "10s", "1d", "1h30m", "90", "-1s" or ""
        creating: True for the create form (empty means no expiry),
            False for updates (empty means leave the TTL alone)

    Returns:
        TTLDirective: The parsed directive

    Raises:
        TTLParseError: The expression does not match the TTL grammar
    """
    text = (expr or "").strip()
    empty = NO_EXPIRY if creating else UNCHANGED
    if not text:
        return empty

    match = _TTL_PATTERN.match(text)
    if not match:
        raise TTLParseError(expr)

    sign, digits, terms = match.groups()
    if digits is not None:
        seconds = int(digits)
    else:
        seconds = sum(
            int(amount) * UNIT_SECONDS[unit.lower()]
            for amount, unit in _TERM_PATTERN.findall(terms)
        )

    if seconds == 0:
        return empty
    if sign == "-":
        return EXPIRE_NOW
    if seconds > MAX_TTL_SECONDS:
        raise TTLParseError(expr, "longer than 100 years")
    return TTLDirective.duration(seconds)


def format_ttl(seconds: int) -> str:
    """
    Render a remaining TTL as reported by the store

    Args:
        seconds: Result of the TTL command (-1 no expiry, -2 missing key)

    Returns:
        str: "no expiry", "" for a missing key, or compact text like "1d2h3m4s"
    """
    if seconds == -1:
        return "no expiry"
    if seconds < 0:
        return ""
    if seconds == 0:
        return "0s"

    parts = []
    remaining = seconds
    for unit in ("d", "h", "m", "s"):
        amount, remaining = divmod(remaining, UNIT_SECONDS[unit])
        if amount:
            parts.append(f"{amount}{unit}")
    return "".join(parts)
