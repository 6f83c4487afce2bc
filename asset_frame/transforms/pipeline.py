"""
Ingestion pipeline for asset-frame.

Turns a parser's ``ParseResult`` (all text) into typed records ready to
merge into a Table.  The steps are:

1. **Date parsing**: try each registered format on every row's date
   text; apply the ``on_unparsed_date`` policy to rows that match none.
2. **Value conversion**: convert each feature column to the value type
   (see transforms/values.py).  Short rows leave trailing cells missing,
   long rows have their extras dropped.

The pipeline is **stateless** -- it never touches the Table, so a
failure here leaves the Table exactly as it was.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from asset_frame.dates import parse_timestamp
from asset_frame.exceptions import ParsingError
from asset_frame.parsers.base import ParseResult
from asset_frame.transforms.values import convert_column

logger = logging.getLogger(__name__)

UnparsedDatePolicy = Literal["collect", "skip", "raise"]
UNPARSED_DATE_POLICIES: tuple[str, ...] = ("collect", "skip", "raise")


@dataclass
class Record:
    """One data row after date parsing and value conversion.

    Attributes:
        timestamp: Parsed timestamp, or ``None`` for an unparsed date
            kept under the ``collect`` policy.
        values: ``(feature, value)`` pairs in header order.  Features the
            row had no cell for are absent.
        line_number: 1-based source line the row came from.
        date_text: The raw date cell, kept for unparsed rows.
    """
    timestamp: datetime | None
    values: list[tuple[str, Any]] = field(default_factory=list)
    line_number: int = 0
    date_text: str = ""


@dataclass
class PipelineResult:
    """Output of the ingestion pipeline.

    Attributes:
        records: One Record per kept row, in file order.
        unparsed_dates: Rows whose date text matched no format.
        skipped_rows: Rows dropped under the ``skip`` policy.
        conversion_failures: Cells that fell back to the default value.
    """
    records: list[Record] = field(default_factory=list)
    unparsed_dates: int = 0
    skipped_rows: int = 0
    conversion_failures: int = 0


class IngestPipeline:
    """Parses dates and converts values for one source file.

    Attributes:
        formats: ``strptime`` patterns, tried in order.
        value_type: Target value type for every feature.
        on_unparsed_date: What to do with rows whose date text matches
            no format -- ``collect`` keeps them with ``timestamp=None``,
            ``skip`` drops them, ``raise`` raises ParsingError.
    """

    def __init__(
        self,
        formats: Sequence[str],
        value_type: Callable[..., Any] = float,
        on_unparsed_date: UnparsedDatePolicy = "collect",
    ) -> None:
        if on_unparsed_date not in UNPARSED_DATE_POLICIES:
            raise ValueError(f"Unknown on_unparsed_date policy: {on_unparsed_date!r}")
        self.formats = list(formats)
        self.value_type = value_type
        self.on_unparsed_date = on_unparsed_date

    def run(self, parse_result: ParseResult) -> PipelineResult:
        """Run date parsing and value conversion.

        Raises:
            ParsingError: Under the ``raise`` policy, for the first row
                whose date text matches no format.
        """
        result = PipelineResult()
        features = parse_result.features
        n_features = len(features)

        # -- Step 1: Date parsing -----------------------------------------
        kept_rows = []
        timestamps: list[datetime | None] = []
        for row in parse_result.rows:
            ts = parse_timestamp(row.date_text, self.formats)
            if ts is None:
                result.unparsed_dates += 1
                if self.on_unparsed_date == "raise":
                    raise ParsingError(
                        f"Unparseable date {row.date_text!r} at line {row.line_number} "
                        f"of {parse_result.source}; tried formats {self.formats}"
                    )
                if self.on_unparsed_date == "skip":
                    result.skipped_rows += 1
                    continue
            kept_rows.append(row)
            timestamps.append(ts)

        if result.unparsed_dates:
            logger.warning(
                "%d row(s) in %s have unparseable dates (policy=%s)",
                result.unparsed_dates, parse_result.source, self.on_unparsed_date,
            )

        # -- Step 2: Value conversion, one column at a time ---------------
        columns: list[list[Any]] = []
        for i in range(n_features):
            cells = [row.values[i] if i < len(row.values) else None for row in kept_rows]
            converted = convert_column(cells, self.value_type)
            result.conversion_failures += converted.failures
            columns.append(converted.values)

        if result.conversion_failures:
            logger.debug(
                "%d cell(s) in %s could not be converted to %s; stored default",
                result.conversion_failures,
                parse_result.source,
                getattr(self.value_type, "__name__", self.value_type),
            )

        # -- Step 3: Reassemble rows --------------------------------------
        for r, ts in enumerate(timestamps):
            values = [
                (features[i], columns[i][r])
                for i in range(n_features)
                if columns[i][r] is not None
            ]
            row = kept_rows[r]
            result.records.append(
                Record(
                    timestamp=ts,
                    values=values,
                    line_number=row.line_number,
                    date_text=row.date_text,
                )
            )

        return result
