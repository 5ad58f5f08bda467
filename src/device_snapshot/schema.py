"""
Snapshot result types.

Defines the fixed field schema, the read-only SnapshotResult mapping,
and the ErrorResult returned when aggregation itself fails.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Union

Value = Union[str, int, float, bool]

# Ordered by probe group: identity, app, display, memory, storage, network
FIELD_TYPES: dict[str, type] = {
    "osVersion": str,
    "osName": str,
    "platform": str,
    "apiLevel": int,
    "buildNumber": str,
    "manufacturer": str,
    "brand": str,
    "product": str,
    "device": str,
    "hardware": str,
    "appVersion": str,
    "appVersionCode": int,
    "screenWidth": int,
    "screenHeight": int,
    "screenDensity": float,
    "screenDensityDpi": int,
    "totalMemory": int,
    "availableMemory": int,
    "usedMemory": int,
    "totalStorage": int,
    "availableStorage": int,
    "usedStorage": int,
    "isConnected": bool,
    "networkType": str,
}

SNAPSHOT_FIELDS: tuple[str, ...] = tuple(FIELD_TYPES)


class SnapshotError(Exception):
    """Raised when a snapshot mapping does not satisfy the field schema."""


def check_value(name: str, value: Any) -> None:
    """
    Check a single value against the schema type for its field.

    bool is a subclass of int, so integer fields reject booleans
    explicitly. Float fields accept ints.

    Raises:
        SnapshotError: If the field is unknown or the value has the wrong type.
    """
    if name not in FIELD_TYPES:
        raise SnapshotError(f"Unknown field: {name}")

    expected = FIELD_TYPES[name]
    if expected is bool:
        ok = isinstance(value, bool)
    elif expected is int:
        ok = isinstance(value, int) and not isinstance(value, bool)
    elif expected is float:
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
    else:
        ok = isinstance(value, expected)

    if not ok:
        raise SnapshotError(
            f"Field '{name}' expects {expected.__name__}, got {type(value).__name__}"
        )


class SnapshotResult(Mapping):
    """
    Immutable, ordered snapshot of device attributes.

    Construction validates that every schema field is present with the
    declared type and that no extra fields sneak in.
    """

    def __init__(self, fields: Mapping[str, Value]):
        missing = [name for name in SNAPSHOT_FIELDS if name not in fields]
        if missing:
            raise SnapshotError(f"Missing fields: {', '.join(missing)}")

        for name, value in fields.items():
            check_value(name, value)

        values: dict[str, Value] = {}
        for name in SNAPSHOT_FIELDS:
            value = fields[name]
            if FIELD_TYPES[name] is float:
                value = float(value)
            values[name] = value
        self._values = values

    def __getitem__(self, key: str) -> Value:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"SnapshotResult({self._values!r})"

    def to_dict(self) -> dict[str, Value]:
        """Return a plain dict copy of the snapshot."""
        return dict(self._values)

    def to_json(self, indent: int = 2) -> str:
        """Serialize snapshot to JSON string."""
        return json.dumps(self._values, indent=indent)


@dataclass(frozen=True)
class ErrorResult:
    """Terminal result when the collection machinery itself fails."""

    error: str

    def to_dict(self) -> dict[str, str]:
        return {"error": self.error}

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)
