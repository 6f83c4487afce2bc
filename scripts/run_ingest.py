"""
Demo script: load per-asset CSV files into one Table and print it.

Usage:
    uv run python scripts/run_ingest.py data/Testing1.csv data/Testing2.csv
    uv run python scripts/run_ingest.py assetframe.yaml

With CSV paths, the first file's asset name is derived from its file name
and every later file is ingested as ``CSV2``, ``CSV3``, ...  The script
then prints the table and the sum of every ``Open`` value for ``CSV2``.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("run_ingest")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> None:
    import asset_frame

    paths = sys.argv[1:]
    if not paths:
        log.error("Usage: run_ingest.py SOURCE.csv [SOURCE.csv ...] | CONFIG.yaml")
        sys.exit(2)

    if Path(paths[0]).suffix.lower() in (".yaml", ".yml"):
        table = asset_frame.open(paths[0])
        table.render(sys.stdout)
        return

    table = asset_frame.Table()
    log.info("Empty table: %d date(s)", len(table))

    # Day-first dates in addition to the ISO defaults
    table.add_date_format("%d-%m-%Y")

    for i, path in enumerate(paths):
        if not Path(path).exists():
            log.warning("SKIP  %s  (file not found)", path)
            continue
        asset = None if i == 0 else f"CSV{i + 1}"
        table.from_csv(path, asset=asset)
        log.info("After %s: %d date(s)", path, len(table))
        table.render(sys.stdout)
        print()

    sum_open = sum(row.get_data("CSV2", "Open") for _, row in table.items())
    log.info("Sum of all Opens for asset CSV2: %s", sum_open)


if __name__ == "__main__":
    main()
