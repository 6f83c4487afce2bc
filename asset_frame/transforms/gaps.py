"""
Gap detection transform for asset-frame.

Finds the timestamps missing from a regular calendar between the
earliest and latest existing timestamp, e.g. every absent day for
``freq="D"`` or every absent hour for ``freq="60min"``.  The calendar is
built with ``pd.date_range`` and anchored at the earliest timestamp, so
a daily range starting at ``10:30`` yields ``10:30`` on every day.

Used by ``Table.fill_in_gaps()``, which inserts an empty RowStore at
each returned timestamp.
"""

from __future__ import annotations

from collections.abc import Collection, Sequence
from datetime import datetime

import pandas as pd


def missing_timestamps(
    timestamps: Sequence[datetime],
    existing: Collection[datetime],
    freq: str = "D",
) -> list[datetime]:
    """Return the calendar timestamps absent from *existing*.

    Args:
        timestamps: Existing timestamps in ascending order.
        existing: The same timestamps, as a fast-membership collection.
        freq: A pandas frequency alias (``"D"``, ``"60min"``, ``"15min"``,
            ``"B"``, ...).

    Returns:
        Missing timestamps in ascending order.  Empty when fewer than two
        timestamps exist.

    Raises:
        ValueError: If *freq* is not a valid pandas frequency.
    """
    if len(timestamps) < 2:
        return []

    try:
        calendar = pd.date_range(timestamps[0], timestamps[-1], freq=freq)
    except ValueError as exc:
        raise ValueError(f"Invalid gap-filling frequency {freq!r}: {exc}") from exc

    return [ts for ts in calendar.to_pydatetime() if ts not in existing]
