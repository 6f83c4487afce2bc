"""
Integration tests: config -> table -> export -> read-back.

Exercises the module-level ``open()``, ``init()`` and ``ingest()``
entry points against synthetic source files, with ``tmp_path`` for the
config and output directory.
"""

from __future__ import annotations

from datetime import datetime

import pytest

import asset_frame
from asset_frame.config import CleaningConfig, ParsingConfig, load_config, save_config
from asset_frame.reader import read_table
from tests.conftest import DAY_FIRST, EUR_USD, TWO_ROW_OPEN


@pytest.fixture()
def sources(write_source):
    """Two source files with overlapping dates."""
    return [
        write_source("inputs/EUR_USD.csv", EUR_USD),
        write_source("inputs/other.csv", TWO_ROW_OPEN),
    ]


@pytest.mark.integration
class TestOpen:
    """asset_frame.open() on source files and configs."""

    def test_open_source_file(self, sources):
        table = asset_frame.open(sources[0])
        assert isinstance(table, asset_frame.Table)
        assert table.contains_asset("EUR_USD")
        assert len(table) == 3

    def test_open_with_explicit_asset_and_formats(self, write_source):
        path = write_source("day_first.csv", DAY_FIRST)
        table = asset_frame.open(
            path, asset="CSV2", value_type=int, date_formats=["%d-%m-%Y"],
        )
        assert table.get_data("2020-01-04", "CSV2", "Volume") == 310

    def test_open_config_yaml_does_not_export(self, tmp_path, sources):
        config_path = tmp_path / "assetframe.yaml"
        asset_frame.init(
            sources, config_path=config_path,
            output_dir=str(tmp_path / "out"), run_immediately=False,
        )
        table = asset_frame.open(config_path)
        assert set(table.assets_to_features) == {"EUR_USD", "other"}
        assert not (tmp_path / "out").exists()


@pytest.mark.integration
class TestInitAndIngest:
    """First run with init(), later runs with ingest()."""

    def test_init_writes_config_and_exports(self, tmp_path, sources):
        config_path = tmp_path / "assetframe.yaml"
        out = tmp_path / "out"

        table = asset_frame.init(sources, config_path=config_path, output_dir=str(out))

        assert config_path.exists()
        assert table is not None
        assert len(table) == 3
        assert (out / "table.parquet").exists()

        df = read_table(out, "table", "parquet", assets=["other"])
        assert df["value"].tolist() == [10.5, 11.0]

    def test_init_without_run(self, tmp_path, sources):
        config_path = tmp_path / "assetframe.yaml"
        assert asset_frame.init(sources, config_path=config_path, run_immediately=False) is None
        cfg = load_config(config_path)
        assert [s.path for s in cfg.sources] == [str(p) for p in sources]

    def test_ingest_after_editing_config(self, tmp_path, sources, write_source):
        config_path = tmp_path / "assetframe.yaml"
        out = tmp_path / "out"
        asset_frame.init(sources, config_path=config_path, run_immediately=False)

        # Add a day-first source, switch to CSV output and fill gaps
        cfg = load_config(config_path)
        cfg.sources.append(
            cfg.sources[0].model_copy(update={
                "path": str(write_source("inputs/day_first.csv", DAY_FIRST)),
                "asset": "CSV3",
            })
        )
        cfg.parsing = ParsingConfig(date_formats=["%d-%m-%Y"])
        cfg.cleaning = CleaningConfig(fill_gaps="D")
        cfg.output.output_dir = str(out)
        cfg.output.output_format = "csv"
        save_config(cfg, config_path)

        table = asset_frame.ingest(config_path)

        # 2020-01-01 .. 2020-01-04, the 4th only from CSV3
        assert table.timestamps() == [datetime(2020, 1, d) for d in range(1, 5)]
        assert table.get_data("2020-01-04", "CSV3", "Volume") == 310.0

        df = read_table(
            out, "table", "csv", assets=["CSV3"], features=["Open"],
            date_from="2020-01-01", date_to="2020-01-03",
        )
        assert df["date"].tolist() == ["2020-01-02T00:00:00"]
        assert df["value"].tolist() == [20.0]

    def test_ingest_is_repeatable(self, tmp_path, sources):
        config_path = tmp_path / "assetframe.yaml"
        asset_frame.init(sources, config_path=config_path, output_dir=str(tmp_path / "out"))
        first = asset_frame.ingest(config_path)
        second = asset_frame.ingest(config_path)
        assert first == second

    def test_ingest_missing_source_raises(self, tmp_path, sources):
        config_path = tmp_path / "assetframe.yaml"
        asset_frame.init(
            sources + [tmp_path / "inputs" / "gone.csv"],
            config_path=config_path, run_immediately=False,
        )
        with pytest.raises(asset_frame.SourceReadError):
            asset_frame.ingest(config_path)

    def test_ingest_missing_config(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            asset_frame.ingest(tmp_path / "nope.yaml")
