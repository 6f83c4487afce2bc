"""
asset-frame: in-memory time-indexed store for per-asset CSV time series.

Public API surface:

- ``Table`` -- ordered ``timestamp -> RowStore`` map.  Construct one,
  register extra date formats, and call ``from_csv()`` once per source
  file.  See asset_frame/table.py.

- ``RowStore`` -- per-timestamp ``asset -> feature -> value`` container.

- ``open(path, ...)`` -- **recommended entry point**. Polymorphic:
  accepts either a source file or an existing ``assetframe.yaml`` and
  returns a populated ``Table``.

- ``init(...)`` -- First-run workflow. Generates ``assetframe.yaml`` for
  a list of source files and optionally builds the table.

- ``ingest(...)`` -- Subsequent-run workflow. Loads and validates
  ``assetframe.yaml``, builds the table and exports it when configured.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Any

from asset_frame._pipeline import build_table, run_and_export
from asset_frame.config import generate_default_config, load_config, save_config
from asset_frame.exceptions import (
    AssetFrameError,
    ConfigValidationError,
    ExportError,
    ParsingError,
    SourceReadError,
)
from asset_frame.row_store import RowStore
from asset_frame.table import Table

__all__ = [
    "open",
    "init",
    "ingest",
    "Table",
    "RowStore",
    "AssetFrameError",
    "ConfigValidationError",
    "ExportError",
    "ParsingError",
    "SourceReadError",
]

logger = logging.getLogger(__name__)


def open(
    path: str | Path,
    asset: str | None = None,
    value_type: Callable[..., Any] = float,
    date_formats: Iterable[str] | None = None,
) -> Table:
    """Single entry point: open a source file or an existing config.

    Polymorphic behaviour based on the file extension of *path*:

    - **YAML file** (``.yaml`` / ``.yml``): Loads the config and builds
      the table it describes (no export).  The keyword arguments are
      ignored; the config is authoritative.

    - **Source file** (anything else): Creates a Table and ingests this
      one file.

    Args:
        path: Path to either a source file or an ``assetframe.yaml``.
        asset: Asset name for a source file; derived from the file name
            when ``None``.
        value_type: Value type for a source file (``float``, ``int``,
            ``str`` or any callable).
        date_formats: Extra date formats for a source file, tried after
            the defaults.

    Returns:
        A populated ``Table``.

    Examples::

        table = asset_frame.open("data/EUR_USD.csv")
        table.get_data("2020-01-01", "EUR_USD", "Open")

        table = asset_frame.open("assetframe.yaml")
    """
    p = Path(path)

    if p.suffix.lower() in (".yaml", ".yml"):
        logger.info("open() -- building table from config %s", path)
        return build_table(load_config(p))

    table: Table = Table(value_type=value_type, date_formats=date_formats)
    table.from_csv(p, asset=asset)
    return table


def init(
    input_paths: Sequence[str | Path],
    config_path: str | Path = "assetframe.yaml",
    output_dir: str | None = None,
    run_immediately: bool = True,
) -> Table | None:
    """First-run entry point: generate a config, optionally build the table.

    Orchestration:
      1. ``generate_default_config()`` -> ``FrameConfig``
      2. ``save_config()`` to *config_path*
      3. If *run_immediately* is True, ``run_and_export()``.

    Args:
        input_paths: Source files, one per asset.
        config_path: Where to write the generated assetframe.yaml.
        output_dir: Export directory written into the config (``None``
            disables export).
        run_immediately: If True, also build (and export) the table.

    Returns:
        The built ``Table``, or ``None`` when *run_immediately* is False.
    """
    logger.info("init() -- %d source(s), config_path=%s", len(input_paths), config_path)

    config = generate_default_config(input_paths, output_dir=output_dir)
    save_config(config, config_path)

    if not run_immediately:
        return None

    table, _ = run_and_export(config)
    return table


def ingest(config_path: str | Path = "assetframe.yaml") -> Table:
    """Subsequent-run entry point: load config, build, export.

    Raises:
        FileNotFoundError: If *config_path* does not exist.
        pydantic.ValidationError: If config fails Pydantic validation.
        ConfigValidationError: If the config file is empty.
        SourceReadError: If a source file cannot be read.
    """
    logger.info("ingest() -- config_path=%s", config_path)
    config = load_config(config_path)
    logger.info("Loaded config: %d source(s)", len(config.sources))
    table, _ = run_and_export(config)
    return table
