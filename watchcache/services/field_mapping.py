"""
Schema mapping from loosely-typed provider documents to model fields.

Every field the service reads from OpenWeatherMap is declared here with its
path and its fallback. A field that is absent or has an unexpected type takes
its kind's sentinel instead of failing the whole fetch, so one bad value
never blanks an otherwise usable reading.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from watchcache.models.weather import FLOAT32_MAX, MAX_CONDITION_CODE

PathKey = Union[str, int]

QUANTITY_SENTINEL = -999.0
TIMESTAMP_SENTINEL = 0
CONDITION_SENTINEL = 0

_MISSING = object()


class FieldKind(Enum):
    """Value kinds and their sentinels."""

    TIMESTAMP = "timestamp"
    QUANTITY = "quantity"
    CONDITION = "condition"

    @property
    def sentinel(self) -> Union[int, float]:
        if self is FieldKind.QUANTITY:
            return QUANTITY_SENTINEL
        if self is FieldKind.TIMESTAMP:
            return TIMESTAMP_SENTINEL
        return CONDITION_SENTINEL


@dataclass(frozen=True)
class FieldSpec:
    name: str
    path: Tuple[PathKey, ...]
    kind: FieldKind

    def extract(self, document: Any) -> Union[int, float]:
        value = lookup(document, self.path)
        coerced = coerce(value, self.kind)
        return self.kind.sentinel if coerced is None else coerced


CURRENT_CONDITIONS_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("timestamp", ("dt",), FieldKind.TIMESTAMP),
    FieldSpec("temperature", ("main", "temp"), FieldKind.QUANTITY),
    FieldSpec("humidity", ("main", "humidity"), FieldKind.QUANTITY),
    FieldSpec("condition_code", ("weather", 0, "id"), FieldKind.CONDITION),
)

# Shared by the one-call "current" object and every "hourly" element.
POINT_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("timestamp", ("dt",), FieldKind.TIMESTAMP),
    FieldSpec("temperature", ("temp",), FieldKind.QUANTITY),
    FieldSpec("humidity", ("humidity",), FieldKind.QUANTITY),
    FieldSpec("condition_code", ("weather", 0, "id"), FieldKind.CONDITION),
)

DAILY_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("timestamp", ("dt",), FieldKind.TIMESTAMP),
    FieldSpec("temperature", ("temp", "day"), FieldKind.QUANTITY),
    FieldSpec("temp_min", ("temp", "min"), FieldKind.QUANTITY),
    FieldSpec("temp_max", ("temp", "max"), FieldKind.QUANTITY),
    FieldSpec("humidity", ("humidity",), FieldKind.QUANTITY),
    FieldSpec("condition_code", ("weather", 0, "id"), FieldKind.CONDITION),
)


def lookup(document: Any, path: Iterable[PathKey]) -> Any:
    """
    Walk a decoded JSON document along path.

    String keys index objects and integer keys index arrays. Returns a
    private marker when any step is missing or lands on the wrong type.
    """
    node = document
    for key in path:
        if isinstance(key, int):
            if not isinstance(node, list) or not -len(node) <= key < len(node):
                return _MISSING
            node = node[key]
        else:
            if not isinstance(node, dict) or key not in node:
                return _MISSING
            node = node[key]
    return node


def coerce(value: Any, kind: FieldKind) -> Optional[Union[int, float]]:
    """Convert value to the type of kind, or None when it does not fit."""
    if value is _MISSING or isinstance(value, bool):
        return None

    if kind is FieldKind.QUANTITY:
        if not isinstance(value, (int, float)):
            return None
        try:
            number = float(value)
        except OverflowError:
            return None
        # Must survive packing as a 32-bit float.
        return number if math.isfinite(number) and abs(number) <= FLOAT32_MAX else None

    if not isinstance(value, int) or value < 0:
        return None
    if kind is FieldKind.CONDITION and value > MAX_CONDITION_CODE:
        return None
    return value


def map_fields(document: Any, specs: Iterable[FieldSpec]) -> Dict[str, Union[int, float]]:
    """Extract every declared field, applying sentinels where needed."""
    return {spec.name: spec.extract(document) for spec in specs}
