"""Conversion of driver result records into JSON-safe response objects.

Each endpoint declares a field map ``{output_field: source_column}``. Every
output field appears in every response object, as ``None`` when the column is
missing from the record.

Integers are decoded in full. Values outside the range a JSON consumer can
represent exactly (|v| <= 2**53 - 1, the IEEE-754 double mantissa) are emitted
as decimal strings instead of numbers so no client silently rounds them.
Structured ``{"high": h, "low": l}`` 64-bit pairs, as produced by clients that
cannot hold 64-bit integers natively, are recombined from both words.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any

from neo4j.graph import Node, Relationship

MAX_SAFE_INTEGER = 2**53 - 1

_WORD_KEYS = frozenset({"high", "low"})

FieldMap = Mapping[str, str]


def decode_int64(high: int, low: int) -> int:
    """Combine the signed high and low 32-bit words of a 64-bit integer.

    ``low`` may arrive signed or unsigned; only its bit pattern is used.
    """
    if not -(2**31) <= high < 2**31:
        raise ValueError(f"high word out of 32-bit range: {high}")
    if not -(2**31) <= low < 2**32:
        raise ValueError(f"low word out of 32-bit range: {low}")
    return (high << 32) | (low & 0xFFFFFFFF)


def is_int64_words(value: Any) -> bool:
    """True for a ``{"high": int, "low": int}`` mapping."""
    return (
        isinstance(value, Mapping)
        and set(value.keys()) == _WORD_KEYS
        and all(isinstance(value[k], int) and not isinstance(value[k], bool) for k in _WORD_KEYS)
    )


def json_safe_int(value: int) -> int | str:
    """Return ``value`` as a number when exactly representable, else as a string."""
    if -MAX_SAFE_INTEGER <= value <= MAX_SAFE_INTEGER:
        return value
    return str(value)


def decode_value(value: Any) -> Any:
    """Recursively convert a driver-native value into a JSON-safe value."""
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, int):
        return json_safe_int(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return value
    if is_int64_words(value):
        return json_safe_int(decode_int64(value["high"], value["low"]))
    if isinstance(value, Node):
        properties = {key: decode_value(item) for key, item in value.items()}
        return {**properties, "labels": sorted(value.labels)}
    if isinstance(value, Relationship):
        properties = {key: decode_value(item) for key, item in value.items()}
        return {**properties, "type": value.type}
    if isinstance(value, Mapping):
        return {str(key): decode_value(item) for key, item in value.items()}
    if isinstance(value, (frozenset, set)):
        return sorted((decode_value(item) for item in value), key=str)
    if isinstance(value, (list, tuple)):
        return [decode_value(item) for item in value]
    # Temporal and spatial types have an ISO / WKT string form
    return str(value)


def normalize(record: Mapping[str, Any], field_map: FieldMap) -> dict[str, Any]:
    """Project one record onto ``field_map``; every output field is present."""
    return {
        output_field: decode_value(record.get(source_column))
        for output_field, source_column in field_map.items()
    }


def normalize_all(records: Iterable[Mapping[str, Any]], field_map: FieldMap) -> list[dict[str, Any]]:
    """Normalize each record, preserving order."""
    return [normalize(record, field_map) for record in records]


def normalize_first(records: Iterable[Mapping[str, Any]], field_map: FieldMap) -> dict[str, Any]:
    """Normalize the first record; with no records every field is ``None``."""
    for record in records:
        return normalize(record, field_map)
    return normalize({}, field_map)
