"""
Exporter for asset-frame.

Flattens a Table into a long-form pandas DataFrame and writes it to the
output directory as CSV or Parquet.

Long-form layout, one row per stored value::

    date                 asset    feature  value
    2020-01-01T00:00:00  EUR_USD  Open     10.5

``date`` is stored as ISO-8601 text so that lexicographic comparison
matches time order (used by reader.py for range filtering).

Output file naming convention:
  {table_name}.{format}  -- e.g., "table.parquet", "prices.csv"
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Literal

import pandas as pd

from asset_frame.dates import format_timestamp
from asset_frame.exceptions import ExportError

if TYPE_CHECKING:
    from asset_frame.table import Table

logger = logging.getLogger(__name__)

FRAME_COLUMNS = ["date", "asset", "feature", "value"]

_SUPPORTED_FORMATS = {"csv", "parquet"}


def table_to_frame(table: Table, include_unparsed: bool = False) -> pd.DataFrame:
    """Flatten a Table into a long-form DataFrame.

    Rows come out in ascending date order; within one date, assets and
    features keep their insertion order.

    Args:
        table: The Table to flatten.
        include_unparsed: If ``True``, every row from ``table.unparsed``
            is appended with ``date=None``, in ingestion order.

    Returns:
        DataFrame with columns ``date``, ``asset``, ``feature``, ``value``.
    """
    records: list[tuple[str | None, str, str, object]] = []
    for ts, row in table.items():
        date_text = format_timestamp(ts)
        for asset, features in row.items():
            for feature, value in features.items():
                records.append((date_text, asset, feature, value))

    if include_unparsed:
        for entry in table.unparsed:
            for asset, features in entry.row.items():
                for feature, value in features.items():
                    records.append((None, asset, feature, value))

    return pd.DataFrame.from_records(records, columns=FRAME_COLUMNS)


def _write_dataframe(
    df: pd.DataFrame,
    path: Path,
    output_format: str,
) -> None:
    """Write a single DataFrame to disk in the specified format.

    Raises:
        ExportError: If writing fails for any reason.
    """
    try:
        if output_format == "csv":
            df.to_csv(path, index=False, encoding="utf-8-sig")
        else:  # parquet
            df.to_parquet(path, index=False, engine="pyarrow")
    except Exception as exc:
        raise ExportError(
            f"Failed to write {path.name} as {output_format}: {exc}"
        ) from exc


def export_table(
    table: Table,
    output_dir: str | Path,
    output_format: Literal["csv", "parquet"] = "parquet",
    table_name: str = "table",
) -> str:
    """Write a Table to ``{output_dir}/{table_name}.{output_format}``.

    The output directory is created recursively if it does not exist.
    Unparsed rows are not exported.

    Returns:
        The path that was written, as a string.

    Raises:
        ExportError: If *output_format* is unsupported, or the write fails.
    """
    if output_format not in _SUPPORTED_FORMATS:
        raise ExportError(
            f"Unsupported output format: '{output_format}'. "
            f"Supported formats: {sorted(_SUPPORTED_FORMATS)}"
        )

    out = Path(output_dir)
    try:
        out.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ExportError(f"Cannot create output directory {out}: {exc}") from exc

    df = table_to_frame(table)
    file_path = out / f"{table_name}.{output_format}"
    _write_dataframe(df, file_path, output_format)
    logger.info(
        "Exported table '%s' -> %s (%d rows)",
        table_name, file_path.name, len(df),
    )
    return str(file_path)
