"""
Internal build orchestration for asset-frame.

Extracted from ``__init__.py`` so that the module-level ``open()``,
``init()`` and ``ingest()`` functions share the same
config -> ingest -> clean -> export sequence.

This module is **not** part of the public API.
"""

from __future__ import annotations

import logging

from asset_frame.config import FrameConfig
from asset_frame.export import export_table
from asset_frame.table import Table

logger = logging.getLogger(__name__)


def build_table(config: FrameConfig) -> Table:
    """Create a Table and ingest every configured source.

    Steps:
      1. Create the Table with the configured value type, extra date
         formats and unparsed-date policy.
      2. Ingest each source in order (duplicate assets are skipped with
         a warning by the Table itself).
      3. Fill gaps, then drop empty dates, if configured.  Running both
         leaves the table as it was before gap filling.

    Raises:
        SourceReadError: If a source file cannot be read.
        ParsingError: If a source cannot be tokenized.
    """
    parsing = config.parsing
    table: Table = Table(
        value_type=parsing.python_value_type,
        date_formats=parsing.date_formats,
        on_unparsed_date=parsing.on_unparsed_date,
    )

    for source in config.sources:
        table.from_csv(source.path, asset=source.asset)

    cleaning = config.cleaning
    if cleaning.fill_gaps:
        inserted = table.fill_in_gaps(cleaning.fill_gaps)
        logger.info("Filled %d gap(s) at freq=%s", inserted, cleaning.fill_gaps)
    if cleaning.drop_empty_dates:
        removed = table.remove_empty_dates()
        logger.info("Removed %d empty date(s)", removed)

    logger.info(
        "Built table: %d asset(s), %d date(s)",
        len(table.assets_to_features), len(table),
    )
    return table


def run_and_export(config: FrameConfig) -> tuple[Table, str | None]:
    """Build the table and export it when ``output.output_dir`` is set.

    Returns:
        ``(table, written_path)``; ``written_path`` is ``None`` when no
        export is configured.
    """
    table = build_table(config)
    output = config.output
    if output.output_dir is None:
        return table, None

    written = export_table(
        table,
        output_dir=output.output_dir,
        output_format=output.output_format,
        table_name=output.table_name,
    )
    logger.info("Pipeline complete: wrote %s", written)
    return table, written
