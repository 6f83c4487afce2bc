"""
Per-timestamp row store for asset-frame.

A ``RowStore`` holds every value observed at one timestamp, keyed by
asset and then by feature::

    {asset: {feature: value}}

Writes are **first-write-wins**: once an ``(asset, feature)`` pair is
set, later ``set_data()`` calls for the same pair are ignored.  Reads
of missing pairs return the value type's default (``0.0`` for floats),
which callers cannot tell apart from a stored zero -- use ``lookup()``
when that distinction matters.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from types import MappingProxyType
from typing import Generic, TypeVar

T = TypeVar("T")


def format_value(value: object) -> str:
    """Human-readable rendering of a single value (floats use ``%g``)."""
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


class RowStore(Generic[T]):
    """Two-level ``asset -> feature -> value`` container.

    Attributes:
        value_type: Callable producing values of ``T``; ``value_type()``
            is the default returned for missing pairs.
    """

    def __init__(self, value_type: Callable[[], T] = float) -> None:
        self.value_type = value_type
        self._data: dict[str, dict[str, T]] = {}

    # -- Properties ---------------------------------------------------------

    @property
    def default(self) -> T:
        """The value returned for missing ``(asset, feature)`` pairs."""
        return self.value_type()

    @property
    def empty(self) -> bool:
        """``True`` when no asset has any value at this timestamp."""
        return not self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __contains__(self, asset: object) -> bool:
        return asset in self._data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RowStore):
            return NotImplemented
        return self.value_type is other.value_type and self._data == other._data

    def __repr__(self) -> str:
        return f"RowStore(assets={list(self._data)})"

    def __str__(self) -> str:
        return self.to_string()

    # -- Write side ---------------------------------------------------------

    def set_data(self, asset: str, feature: str, value: T) -> None:
        """Store *value* unless ``(asset, feature)`` is already present."""
        features = self._data.setdefault(asset, {})
        features.setdefault(feature, value)

    # -- Read side ----------------------------------------------------------

    def get_data(self, asset: str, feature: str) -> T:
        """Return the stored value, or ``self.default`` if absent."""
        value = self.lookup(asset, feature)
        if value is None:
            return self.default
        return value

    def lookup(self, asset: str, feature: str) -> T | None:
        """Return the stored value, or ``None`` if absent."""
        return self._data.get(asset, {}).get(feature)

    def features(self, asset: str) -> Mapping[str, T]:
        """Read-only view of one asset's ``feature -> value`` mapping.

        Raises:
            KeyError: If *asset* has no values here.
        """
        return MappingProxyType(self._data[asset])

    def items(self) -> Iterator[tuple[str, Mapping[str, T]]]:
        """Yield ``(asset, feature mapping)`` pairs.

        No ordering is promised; the current implementation yields
        assets in first-insertion order.
        """
        for asset, features in self._data.items():
            yield asset, MappingProxyType(features)

    def to_string(self) -> str:
        """Render every asset and its ``feature: value`` pairs."""
        parts: list[str] = []
        for asset, features in self._data.items():
            parts.append(f"\t{asset}:\n\t\t")
            for feature, value in features.items():
                parts.append(f"{feature}: {format_value(value)}\t")
            parts.append("\n")
        return "".join(parts)
