"""
Read-back of exported tables for asset-frame.

Reads a long-form table written by ``export.export_table()`` with
optional filtering on assets, features and a date range.

Filtering strategy:
- **Parquet**: PyArrow predicate pushdown (``filters`` param) so only
  matching row groups are read.  ``date`` is stored as ISO-8601 text,
  so lexicographic comparison is semantically correct for ranges.
- **CSV**: Reads the full file then applies pandas-level filtering.
  Same interface, lower performance on large files.

Date bounds are normalised to the same ISO text before comparing, so
``date_to="2020-01-02"`` includes ``2020-01-02T00:00:00``.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path

import pandas as pd
import pyarrow.parquet as pq

from asset_frame.dates import DEFAULT_DATE_FORMATS, coerce_timestamp, format_timestamp

logger = logging.getLogger(__name__)

# Accepted for text bounds, in addition to the ingestion defaults
_BOUND_FORMATS = DEFAULT_DATE_FORMATS + ("%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M:%S.%f")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def read_table(
    output_dir: str | Path,
    table_name: str,
    output_format: str,
    *,
    assets: list[str] | None = None,
    features: list[str] | None = None,
    date_from: datetime | date | str | None = None,
    date_to: datetime | date | str | None = None,
) -> pd.DataFrame:
    """Read an exported table with optional filtering.

    Args:
        output_dir: Directory containing the exported file.
        table_name: Name of the table (e.g., ``"table"``).
        output_format: ``"parquet"`` or ``"csv"``.
        assets: Keep only these assets.
        features: Keep only these features.
        date_from: Inclusive lower bound.
        date_to: Inclusive upper bound.

    Returns:
        Filtered long-form ``pandas.DataFrame``.

    Raises:
        FileNotFoundError: If the table file does not exist.
        ValueError: If *output_format* is unsupported or a text bound
            cannot be parsed.
    """
    if output_format not in ("csv", "parquet"):
        raise ValueError(
            f"Unsupported output format: '{output_format}'. "
            "Supported formats: ['csv', 'parquet']"
        )
    file_path = _resolve_table_path(output_dir, table_name, output_format)
    lower = _normalize_bound(date_from)
    upper = _normalize_bound(date_to)

    if output_format == "parquet":
        return _read_parquet(file_path, assets, features, lower, upper)
    return _read_csv(file_path, assets, features, lower, upper)


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

def _resolve_table_path(
    output_dir: str | Path,
    table_name: str,
    output_format: str,
) -> Path:
    """Build and validate the file path for a table."""
    path = Path(output_dir) / f"{table_name}.{output_format}"
    if not path.exists():
        raise FileNotFoundError(
            f"Table file not found: {path}. "
            f"Has the table been exported? Check output_dir='{output_dir}'."
        )
    return path


def _normalize_bound(value: datetime | date | str | None) -> str | None:
    if value is None:
        return None
    return format_timestamp(coerce_timestamp(value, _BOUND_FORMATS))


def _read_parquet(
    path: Path,
    assets: list[str] | None,
    features: list[str] | None,
    lower: str | None,
    upper: str | None,
) -> pd.DataFrame:
    """Read a Parquet table with PyArrow-native filtering."""
    filters: list[tuple] = []
    if assets is not None:
        filters.append(("asset", "in", assets))
    if features is not None:
        filters.append(("feature", "in", features))
    if lower is not None:
        filters.append(("date", ">=", lower))
    if upper is not None:
        filters.append(("date", "<=", upper))

    logger.debug("Reading Parquet %s (filters=%s)", path.name, filters)
    table = pq.read_table(path, filters=filters or None)
    return table.to_pandas()


def _read_csv(
    path: Path,
    assets: list[str] | None,
    features: list[str] | None,
    lower: str | None,
    upper: str | None,
) -> pd.DataFrame:
    """Read a CSV table with post-load pandas filtering."""
    df = pd.read_csv(
        path,
        encoding="utf-8-sig",
        dtype={"date": str, "asset": str, "feature": str},
        keep_default_na=False,
    )

    if assets is not None:
        df = df[df["asset"].isin(assets)]
    if features is not None:
        df = df[df["feature"].isin(features)]
    if lower is not None:
        df = df[df["date"] >= lower]
    if upper is not None:
        df = df[df["date"] <= upper]

    return df.reset_index(drop=True)
