"""
Date and time helpers for asset-frame.

Timestamps are naive ``datetime.datetime`` objects.  Source files may
carry dates in several layouts, so parsing tries an ordered list of
``strptime`` patterns and returns the first full match.  A failed parse
returns ``None`` -- never a real datetime -- so callers can keep
unparsed rows apart from genuine timestamps.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime

# Tried in this order before any caller-registered pattern
DEFAULT_DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
)

# Month offsets for the weekday congruence (Sakamoto's variant of Zeller)
_MONTH_OFFSETS = (0, 3, 2, 5, 0, 3, 5, 1, 4, 6, 2, 4)


def parse_timestamp(text: str, formats: Iterable[str]) -> datetime | None:
    """Parse *text* with the first matching format.

    Surrounding whitespace is ignored.  Each pattern must match the
    whole string, so ``"2020-01-01 10:30"`` is not swallowed by the
    date-only ``%Y-%m-%d`` pattern.

    Args:
        text: Raw date text from a source file.
        formats: ``strptime`` patterns, tried in order.

    Returns:
        The parsed ``datetime``, or ``None`` if no pattern matched.
    """
    text = text.strip()
    if not text:
        return None
    for fmt in formats:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def coerce_timestamp(
    value: datetime | date | str,
    formats: Iterable[str] = DEFAULT_DATE_FORMATS,
) -> datetime:
    """Turn a caller-supplied timestamp into a ``datetime``.

    ``date`` values map to midnight; text is parsed with *formats*.

    Raises:
        ValueError: If text matches none of the formats.
        TypeError: For any other input type.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        formats = list(formats)
        parsed = parse_timestamp(value, formats)
        if parsed is None:
            raise ValueError(
                f"Could not parse timestamp {value!r} with formats {formats}"
            )
        return parsed
    raise TypeError(
        f"Expected datetime, date or str, got {type(value).__name__}"
    )


def format_timestamp(ts: datetime | date) -> str:
    """Render a timestamp as ISO-8601 extended text.

    ``2020-01-01T00:00:00``; microseconds are appended only when
    non-zero.
    """
    return coerce_timestamp(ts).isoformat(sep="T")


def day_of_week(ts: datetime | date) -> int:
    """Return the day of the week, 0 = Sunday ... 6 = Saturday."""
    year, month, day = ts.year, ts.month, ts.day
    # January and February count as months 13 and 14 of the previous year
    if month < 3:
        year -= 1
    return (
        year + year // 4 - year // 100 + year // 400
        + _MONTH_OFFSETS[month - 1] + day
    ) % 7
