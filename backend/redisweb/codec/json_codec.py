"""
JSON Codec

Strings that already hold a JSON document are shown as-is; anything else is
shown as a JSON string literal. Collections map onto JSON containers:
hash -> object, list/set -> array, zset -> array of {"member", "score"}.
"""

import json
import math
from typing import Any

from redisweb.codec.base import Codec, ensure_unique, format_score, parse_score
from redisweb.codec.quoting import is_utf8, to_bytes
from redisweb.common.errors import MalformedJSONError, TypeMismatchError
from redisweb.domain.keys import Format


class _JSONObject(list):
    """Ordered (key, value) pairs of a parsed JSON object, duplicates kept"""


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _check_strings(doc: Any) -> None:
    """Reject strings holding surrogates that map to no byte sequence"""
    stack = [doc]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            try:
                to_bytes(item)
            except UnicodeEncodeError:
                raise MalformedJSONError(
                    "Invalid JSON: string holds an unpaired surrogate escape",
                    details={"string": ascii(item)[:80]},
                )
        elif isinstance(item, _JSONObject):
            for key, value in item:
                stack.append(key)
                stack.append(value)
        elif isinstance(item, dict):
            stack.extend(item.keys())
            stack.extend(item.values())
        elif isinstance(item, list):
            stack.extend(item)


def _kind(doc: Any) -> str:
    if isinstance(doc, _JSONObject):
        return "object"
    if isinstance(doc, list):
        return "array"
    if isinstance(doc, str):
        return "string"
    if isinstance(doc, bool):
        return "boolean"
    if doc is None:
        return "null"
    return "number"


def _dumps(doc: Any, indent: int | None = None) -> str:
    text = json.dumps(doc, ensure_ascii=False, indent=indent)
    if not is_utf8(text):
        # Raw bytes that are not UTF-8 stay as \udcXX escapes
        text = json.dumps(doc, ensure_ascii=True, indent=indent)
    return text


def is_json_document(text: str) -> bool:
    """Whether text parses as strict JSON (NaN/Infinity rejected)"""
    try:
        _check_strings(json.loads(text, parse_constant=_reject_constant))
    except (ValueError, RecursionError, MalformedJSONError):
        return False
    return True


def _json_score(score: float) -> Any:
    if math.isinf(score):
        return format_score(score)
    if score.is_integer() and abs(score) < 2 ** 53:
        return int(score)
    return score


class JSONCodec(Codec):
    """JSON documents in both directions"""

    format = Format.JSON

    def _load(self, text: str) -> Any:
        try:
            doc = json.loads(
                text,
                object_pairs_hook=_JSONObject,
                parse_constant=_reject_constant,
            )
        except (ValueError, RecursionError) as e:
            raise MalformedJSONError(f"Invalid JSON: {e}")
        _check_strings(doc)
        return doc

    def _load_container(self, text: str, expected_kind: str, type_name: str) -> Any:
        doc = self._load(text)
        kind = _kind(doc)
        if kind == expected_kind:
            return doc
        if kind in ("object", "array"):
            raise TypeMismatchError(
                f"A {type_name} expects a JSON {expected_kind}, got an {kind}",
                details={"expected": expected_kind, "actual": kind},
            )
        raise MalformedJSONError(
            f"A {type_name} expects a JSON {expected_kind}, got a {kind}",
            details={"expected": expected_kind, "actual": kind},
        )

    @staticmethod
    def _element_text(item: Any, where: str) -> str:
        if isinstance(item, str):
            return item
        if isinstance(item, bool):
            return "true" if item else "false"
        if isinstance(item, (int, float)):
            return json.dumps(item)
        raise TypeMismatchError(
            f"{where} must be a string, got {_kind(item)}",
            details={"actual": _kind(item)},
        )

    # ============ string ============

    def encode_string(self, value: str) -> str:
        try:
            doc = self._load(value)
        except MalformedJSONError:
            return _dumps(value)
        if isinstance(doc, str):
            return _dumps(value)
        return value

    def decode_string(self, text: str) -> str:
        doc = self._load(text)
        if isinstance(doc, str):
            return doc
        return text

    # ============ collections ============

    def encode_hash(self, value: dict[str, str]) -> str:
        return _dumps(dict(value), indent=2)

    def encode_list(self, value: list[str]) -> str:
        return _dumps(list(value), indent=2)

    def encode_set(self, value: list[str]) -> str:
        return self.encode_list(value)

    def encode_zset(self, value: list[tuple[str, float]]) -> str:
        return _dumps(
            [{"member": member, "score": _json_score(score)} for member, score in value],
            indent=2,
        )

    def decode_hash(self, text: str) -> dict[str, str]:
        doc = self._load_container(text, "object", "hash")
        pairs = [
            (field, self._element_text(item, f"Value of field {field!r}"))
            for field, item in doc
        ]
        ensure_unique((field for field, _ in pairs), "field")
        return dict(pairs)

    def decode_list(self, text: str) -> list[str]:
        doc = self._load_container(text, "array", "list")
        return [
            self._element_text(item, f"Element {index}")
            for index, item in enumerate(doc)
        ]

    def decode_set(self, text: str) -> list[str]:
        doc = self._load_container(text, "array", "set")
        members = [
            self._element_text(item, f"Member {index}")
            for index, item in enumerate(doc)
        ]
        ensure_unique(members, "member")
        return members

    def decode_zset(self, text: str) -> list[tuple[str, float]]:
        doc = self._load_container(text, "array", "zset")
        entries = []
        for index, item in enumerate(doc):
            if not isinstance(item, _JSONObject):
                raise TypeMismatchError(
                    f"Entry {index} must be an object with member and score, got {_kind(item)}",
                    details={"index": index},
                )
            fields = dict(item)
            if len(item) != 2 or set(fields) != {"member", "score"}:
                raise TypeMismatchError(
                    f"Entry {index} must have exactly the keys member and score",
                    details={"index": index},
                )
            member = self._element_text(fields["member"], f"Member of entry {index}")
            entries.append((member, self._score(fields["score"], member)))
        ensure_unique((member for member, _ in entries), "member")
        return entries

    @staticmethod
    def _score(raw: Any, member: str) -> float:
        if isinstance(raw, str):
            return parse_score(raw, member)
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            try:
                return float(raw)
            except OverflowError:
                raise TypeMismatchError(
                    f"Score of member {member!r} is out of range",
                    details={"member": member},
                )
        raise TypeMismatchError(
            f"Score of member {member!r} must be a number, got {_kind(raw)}",
            details={"member": member},
        )
