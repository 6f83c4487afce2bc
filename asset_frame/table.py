"""
Time-indexed table for asset-frame.

A ``Table`` maps timestamps to ``RowStore`` objects and keeps them in
ascending time order, whatever order rows were ingested in.  Each source
file contributes one *asset*; its header row declares the asset's
*features*.

Example acceptable source file (first cell ignored)::

    Date,Open,Close
    2020-01-02,11.0,11.4
    2020-01-01,10.5,10.9

Typical use::

    table = Table()
    table.add_date_format("%d-%m-%Y")
    table.from_csv("data/EUR_USD.csv")             # asset "EUR_USD"
    table.from_csv("data/other.csv", asset="CSV2")
    for ts, row in table.items():
        row.get_data("CSV2", "Open")

Design notes:
- **Sorted index**: a plain dict for O(1) lookups plus a sorted list of
  keys maintained with ``bisect.insort`` for ordered iteration.
- **Unparsed bucket**: rows whose date text matched no format go to
  ``Table.unparsed`` (under the default ``collect`` policy), one entry
  per row, instead of being merged under a made-up timestamp.
- **Default-on-absence**: ``get_data()`` returns the value type's
  default for missing keys; ``lookup()`` returns ``None`` instead.
"""

from __future__ import annotations

import copy
import logging
from bisect import insort
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Generic, TextIO

from asset_frame.dates import (
    DEFAULT_DATE_FORMATS,
    coerce_timestamp,
    day_of_week,
    format_timestamp,
)
from asset_frame.parsers.delimited import CsvSourceParser, derive_asset_name
from asset_frame.row_store import RowStore, T
from asset_frame.transforms.gaps import missing_timestamps
from asset_frame.transforms.pipeline import (
    UNPARSED_DATE_POLICIES,
    IngestPipeline,
    UnparsedDatePolicy,
)

if TYPE_CHECKING:
    import pandas as pd

logger = logging.getLogger(__name__)

TimestampLike = datetime | date | str


@dataclass
class UnparsedRow(Generic[T]):
    """One source row whose date text matched no format.

    Attributes:
        asset: Asset the row was ingested as.
        line_number: 1-based line number in the source file.
        date_text: The raw date cell.
        row: The row's values for *asset*.
    """
    asset: str
    line_number: int
    date_text: str
    row: RowStore[T]


class Table(Generic[T]):
    """Ordered ``timestamp -> RowStore`` map with an asset/feature index.

    Attributes:
        value_type: Type every ingested value is converted to.
        on_unparsed_date: Policy for rows whose date matches no format
            (``"collect"``, ``"skip"`` or ``"raise"``).
        unparsed: Rows kept under ``"collect"``, one entry per source
            row in ingestion order.
    """

    def __init__(
        self,
        value_type: Callable[..., T] = float,
        date_formats: Iterable[str] | None = None,
        on_unparsed_date: UnparsedDatePolicy = "collect",
    ) -> None:
        if on_unparsed_date not in UNPARSED_DATE_POLICIES:
            raise ValueError(f"Unknown on_unparsed_date policy: {on_unparsed_date!r}")
        self.value_type = value_type
        self.on_unparsed_date = on_unparsed_date
        self._formats: list[str] = list(DEFAULT_DATE_FORMATS)
        self._assets_to_features: dict[str, frozenset[str]] = {}
        self._data: dict[datetime, RowStore[T]] = {}
        self._dates: list[datetime] = []
        self.unparsed: list[UnparsedRow[T]] = []
        if date_formats is not None:
            self.add_date_formats(date_formats)

    # -- Container protocol -------------------------------------------------

    def __len__(self) -> int:
        return len(self._dates)

    @property
    def empty(self) -> bool:
        """``True`` when the table holds no timestamps."""
        return not self._dates

    def __iter__(self) -> Iterator[datetime]:
        return iter(list(self._dates))

    def __reversed__(self) -> Iterator[datetime]:
        return reversed(list(self._dates))

    def __contains__(self, ts: object) -> bool:
        if not isinstance(ts, (datetime, date, str)):
            return False
        return self.contains_date(ts)

    def __getitem__(self, ts: TimestampLike) -> RowStore[T]:
        return self._data[self._coerce(ts)]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Table):
            return NotImplemented
        return (
            self.value_type is other.value_type
            and self._formats == other._formats
            and self._assets_to_features == other._assets_to_features
            and self._dates == other._dates
            and self._data == other._data
            and self.unparsed == other.unparsed
        )

    def __repr__(self) -> str:
        return (
            f"Table(value_type={getattr(self.value_type, '__name__', self.value_type)}, "
            f"assets={list(self._assets_to_features)}, dates={len(self._dates)})"
        )

    def __str__(self) -> str:
        return self.to_string()

    def items(self) -> Iterator[tuple[datetime, RowStore[T]]]:
        """Yield ``(timestamp, RowStore)`` pairs in ascending time order."""
        for ts in list(self._dates):
            yield ts, self._data[ts]

    def reversed_items(self) -> Iterator[tuple[datetime, RowStore[T]]]:
        """Yield ``(timestamp, RowStore)`` pairs in descending time order."""
        for ts in reversed(list(self._dates)):
            yield ts, self._data[ts]

    def timestamps(self) -> list[datetime]:
        """All timestamps in ascending order (a copy)."""
        return list(self._dates)

    def copy(self) -> Table[T]:
        """Deep copy: nested RowStores are duplicated, not shared."""
        return copy.deepcopy(self)

    # -- Index queries ------------------------------------------------------

    @property
    def formats(self) -> tuple[str, ...]:
        """Registered date formats, in the order they are tried."""
        return tuple(self._formats)

    @property
    def assets_to_features(self) -> Mapping[str, frozenset[str]]:
        """Read-only ``asset -> feature set`` index."""
        return MappingProxyType(self._assets_to_features)

    def get_asset_and_features(self) -> Mapping[str, frozenset[str]]:
        """Return the read-only ``asset -> feature set`` index."""
        return self.assets_to_features

    def contains_asset(self, asset: str) -> bool:
        return asset in self._assets_to_features

    def contains_date(self, ts: TimestampLike) -> bool:
        try:
            return self._coerce(ts) in self._data
        except ValueError:
            return False

    # -- Date formats -------------------------------------------------------

    def add_date_format(self, fmt: str) -> None:
        """Register a ``strptime`` pattern, tried after all earlier ones.

        Example: ``"%d-%m-%Y"``.

        Raises:
            ValueError: If *fmt* is empty.
        """
        if not fmt:
            raise ValueError("Date format must be a non-empty string")
        self._formats.append(fmt)

    def add_date_formats(self, formats: Iterable[str]) -> None:
        """Register several patterns, in the given order."""
        for fmt in formats:
            self.add_date_format(fmt)

    # -- Ingestion ----------------------------------------------------------

    def from_csv(self, path: str | Path, asset: str | None = None) -> bool:
        """Ingest one source file as *asset*.

        When *asset* is ``None`` it is derived from the file name:
        ``"data/EUR_USD.csv"`` -> ``"EUR_USD"``.

        Returns:
            ``True`` if the file was ingested, ``False`` if the asset
            already existed (a warning is logged and nothing changes).

        Raises:
            SourceReadError: If the file cannot be opened or read.  The
                table is left unmodified.
            ParsingError: If a line cannot be tokenized, or a date cannot
                be parsed under the ``"raise"`` policy.  The table is left
                unmodified.
        """
        if asset is None:
            asset = derive_asset_name(path)

        if asset in self._assets_to_features:
            logger.warning("Asset %r already exists -- skipping %s", asset, path)
            return False

        # Parse everything before touching state
        parse_result = CsvSourceParser().parse(path)
        pipeline = IngestPipeline(
            self._formats,
            value_type=self.value_type,
            on_unparsed_date=self.on_unparsed_date,
        )
        pipeline_result = pipeline.run(parse_result)

        self._assets_to_features[asset] = frozenset(parse_result.features)
        for record in pipeline_result.records:
            if record.timestamp is None:
                row = RowStore(self.value_type)
                self.unparsed.append(
                    UnparsedRow(asset, record.line_number, record.date_text, row)
                )
            else:
                row = self.get_or_create(record.timestamp)
            for feature, value in record.values:
                row.set_data(asset, feature, value)

        logger.info(
            "Ingested asset %r from %s: %d row(s), table now has %d date(s)",
            asset, path, len(pipeline_result.records), len(self._dates),
        )
        return True

    def get_or_create(self, ts: TimestampLike) -> RowStore[T]:
        """Return the RowStore for *ts*, inserting an empty one if absent."""
        ts = self._coerce(ts)
        row = self._data.get(ts)
        if row is None:
            row = RowStore(self.value_type)
            self._data[ts] = row
            insort(self._dates, ts)
        return row

    # -- Cleanup ------------------------------------------------------------

    def remove_empty_dates(self) -> int:
        """Remove every timestamp whose RowStore holds no assets.

        Returns:
            Number of timestamps removed.
        """
        empty = [ts for ts in self._dates if self._data[ts].empty]
        for ts in empty:
            del self._data[ts]
        if empty:
            self._dates = [ts for ts in self._dates if ts in self._data]
        logger.debug("Removed %d empty date(s)", len(empty))
        return len(empty)

    def fill_in_gaps(self, freq: str = "D") -> int:
        """Insert an empty RowStore for every missing period.

        The calendar runs from the first to the last timestamp at *freq*
        (a pandas frequency alias such as ``"D"`` or ``"60min"``).

        Returns:
            Number of timestamps inserted.

        Raises:
            ValueError: If *freq* is not a valid pandas frequency.
        """
        missing = missing_timestamps(self._dates, self._data, freq=freq)
        for ts in missing:
            self.get_or_create(ts)
        logger.debug("Filled %d gap(s) at freq=%s", len(missing), freq)
        return len(missing)

    # -- Lookups ------------------------------------------------------------

    def get_data(self, ts: TimestampLike, asset: str, feature: str) -> T:
        """Return the value at ``(ts, asset, feature)``, or the default.

        The default (``value_type()``) is indistinguishable from a stored
        zero; use ``lookup()`` to tell them apart.
        """
        value = self.lookup(ts, asset, feature)
        if value is None:
            return self.value_type()
        return value

    def lookup(self, ts: TimestampLike, asset: str, feature: str) -> T | None:
        """Return the value at ``(ts, asset, feature)``, or ``None``."""
        row = self._data.get(self._coerce(ts))
        if row is None:
            return None
        return row.lookup(asset, feature)

    # -- Rendering ----------------------------------------------------------

    def to_string(self) -> str:
        """Render every timestamp and its RowStore as text."""
        return "".join(
            f"{format_timestamp(ts)}:\n{row.to_string()}\n" for ts, row in self.items()
        )

    def render(self, stream: TextIO) -> None:
        """Write ``to_string()`` to *stream*."""
        stream.write(self.to_string())

    def to_frame(self, include_unparsed: bool = False) -> pd.DataFrame:
        """Long-form DataFrame, see ``asset_frame.export.table_to_frame``."""
        from asset_frame.export import table_to_frame

        return table_to_frame(self, include_unparsed=include_unparsed)

    # -- Date utilities -----------------------------------------------------

    @staticmethod
    def get_date(ts: datetime | date) -> str:
        """ISO-8601 extended text, e.g. ``"2020-01-01T00:00:00"``."""
        return format_timestamp(ts)

    @staticmethod
    def get_day_of_week(ts: datetime | date) -> int:
        """Day of the week, 0 = Sunday ... 6 = Saturday."""
        return day_of_week(ts)

    # -- Private helpers ----------------------------------------------------

    def _coerce(self, ts: TimestampLike) -> datetime:
        return coerce_timestamp(ts, self._formats)
