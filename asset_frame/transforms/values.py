"""
Value conversion transform for asset-frame.

Source cells arrive as text.  This transform converts one column of
cells to the table's value type:

- ``float`` / ``int``: strip whitespace, then
  ``pd.to_numeric(errors='coerce')``.  For ``int``, whole-number tokens
  are converted with ``int()`` directly so they stay exact whatever the
  rest of the column holds; other numbers truncate toward zero, so
  ``"10.7"`` becomes ``10``.
- ``str``: the stripped text.
- Any other callable type: applied to the stripped text directly
  (``TypeError``, ``ValueError`` and ``ArithmeticError`` count as failures).

Conversion is locale independent (``.`` is the decimal point, no
thousands separators).  A cell that fails to convert becomes the value
type's default (``value_type()``) instead of raising -- ingestion is
best-effort.  Missing cells (short rows) stay ``None`` so the caller
can leave those features unset.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

import pandas as pd

_NUMERIC_TYPES = (float, int)

_INT_RE = re.compile(r"[+-]?[0-9]+")


@dataclass
class ConversionResult:
    """Converted cells plus a count of cells that fell back to the default."""
    values: list[Any]
    failures: int


def _strip(value: object) -> object:
    return value.strip() if isinstance(value, str) else value


def _parse_int(value: object) -> int | None:
    if isinstance(value, str) and _INT_RE.fullmatch(value):
        return int(value)
    return None


def convert_column(
    cells: Sequence[str | None],
    value_type: Callable[..., Any] = float,
) -> ConversionResult:
    """Convert one column of raw cells to *value_type*.

    Args:
        cells: Raw text cells; ``None`` marks a cell the row did not have.
        value_type: Target type (``float``, ``int``, ``str`` or any
            callable accepting a string).

    Returns:
        ConversionResult whose ``values`` line up with *cells*.  ``None``
        inputs stay ``None``.
    """
    series = pd.Series(list(cells), dtype=object).map(_strip)
    present = series.notna()
    default = value_type()

    if value_type in _NUMERIC_TYPES:
        numeric = pd.to_numeric(series, errors="coerce")
        failed = present & numeric.isna()
        if value_type is int:
            # int() cannot represent infinities
            failed |= numeric.isin([float("inf"), float("-inf")])
            # Whole-number tokens bypass the float64 column
            exact = [_parse_int(cell) for cell in series]
        else:
            exact = [None] * len(series)

        values: list[Any] = []
        failures = 0
        for is_present, is_failed, number, whole in zip(present, failed, numeric, exact):
            if not is_present:
                values.append(None)
            elif whole is not None:
                values.append(whole)
            elif is_failed:
                values.append(default)
                failures += 1
            else:
                values.append(value_type(number))
        return ConversionResult(values=values, failures=failures)

    if value_type is str:
        return ConversionResult(
            values=[cell if is_present else None for cell, is_present in zip(series, present)],
            failures=0,
        )

    values = []
    failures = 0
    for cell, is_present in zip(series, present):
        if not is_present:
            values.append(None)
            continue
        try:
            values.append(value_type(cell))
        except (TypeError, ValueError, ArithmeticError):
            values.append(default)
            failures += 1
    return ConversionResult(values=values, failures=failures)
