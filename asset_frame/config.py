"""
Configuration models and YAML I/O for asset-frame.

This module defines the Pydantic models that map 1:1 to assetframe.yaml,
plus helper functions for loading, saving, and auto-generating the config.

Key models:
- FrameConfig: Top-level config (sources + parsing + cleaning + output).
- SourceConfig: One input file and its optional explicit asset name.
- ParsingConfig: Extra date formats, value type, unparsed-date policy.
- CleaningConfig: Post-ingestion cleanup toggles.
- OutputConfig: Export directory, format and table name.

Key functions:
- load_config(path) -> FrameConfig: Load and validate from YAML.
- save_config(config, path): Serialize to YAML.
- generate_default_config(...) -> FrameConfig: Build config from input paths.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Callable, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from asset_frame.exceptions import ConfigValidationError

logger = logging.getLogger(__name__)

# Names accepted for parsing.value_type -> Python type
VALUE_TYPES: dict[str, Callable[..., Any]] = {
    "float": float,
    "int": int,
    "str": str,
}


class SourceConfig(BaseModel):
    """One source file."""

    path: str = Field(..., description="Path to the delimited source file")
    asset: str | None = Field(
        None,
        description="Asset name; derived from the file name when omitted",
    )


class ParsingConfig(BaseModel):
    """How source text is turned into timestamps and values."""

    date_formats: list[str] = Field(
        default_factory=list,
        description="strptime patterns tried after the built-in defaults",
    )
    value_type: Literal["float", "int", "str"] = Field(
        "float", description="Type every value is converted to"
    )
    on_unparsed_date: Literal["collect", "skip", "raise"] = Field(
        "collect",
        description=(
            "Rows whose date matches no format: 'collect' into the unparsed "
            "bucket, 'skip' them, or 'raise' an error"
        ),
    )

    @field_validator("date_formats")
    @classmethod
    def _check_formats_not_empty(cls, formats: list[str]) -> list[str]:
        for fmt in formats:
            if not fmt:
                raise ValueError("date_formats entries must be non-empty strings")
        return formats

    @property
    def python_value_type(self) -> Callable[..., Any]:
        return VALUE_TYPES[self.value_type]


class CleaningConfig(BaseModel):
    """Post-ingestion cleanup."""

    fill_gaps: str | None = Field(
        None,
        description="pandas frequency alias (e.g. 'D'); insert empty dates for gaps",
    )
    drop_empty_dates: bool = Field(
        False, description="If True, remove dates that hold no data"
    )


class OutputConfig(BaseModel):
    """Export settings."""

    output_dir: str | None = Field(
        None, description="Directory for exported tables; no export when null"
    )
    output_format: Literal["csv", "parquet"] = Field(
        "parquet", description="Output format"
    )
    table_name: str = Field("table", description="Base name of the exported file")


class FrameConfig(BaseModel):
    """Top-level configuration for asset-frame.

    Maps 1:1 to assetframe.yaml.
    """

    sources: list[SourceConfig]
    parsing: ParsingConfig = Field(default_factory=ParsingConfig)
    cleaning: CleaningConfig = Field(default_factory=CleaningConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @model_validator(mode="after")
    def _check_sources(self) -> FrameConfig:
        """Validate that sources exist and explicit asset names are unique."""
        if not self.sources:
            raise ValueError("At least one source must be listed under 'sources'.")
        seen: set[str] = set()
        for source in self.sources:
            if source.asset is None:
                continue
            if source.asset in seen:
                raise ValueError(
                    f"Asset '{source.asset}' is claimed by more than one source."
                )
            seen.add(source.asset)
        return self


def load_config(path: str | Path) -> FrameConfig:
    """Load and validate assetframe.yaml into a FrameConfig model.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ConfigValidationError: If the file is empty.
        pydantic.ValidationError: If the YAML content fails schema validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raise ConfigValidationError(f"Config file is empty: {path}")
    logger.info("Loaded config from %s", path)
    return FrameConfig.model_validate(raw)


def save_config(config: FrameConfig, path: str | Path) -> None:
    """Serialize a FrameConfig to YAML.

    Writes a human-readable YAML file with a header comment.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json")
    with open(path, "w", encoding="utf-8") as f:
        f.write("# asset-frame configuration\n")
        f.write(
            "# Edit this file to add sources, date formats, cleanup and export.\n\n"
        )
        yaml.dump(
            data,
            f,
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )
    logger.info("Saved config to %s", path)


def generate_default_config(
    input_paths: Sequence[str | Path],
    output_dir: str | None = None,
    date_formats: Sequence[str] = (),
    value_type: Literal["float", "int", "str"] = "float",
) -> FrameConfig:
    """Build a FrameConfig listing *input_paths* (used on first run).

    Asset names are left unset so they are derived from file names.

    Raises:
        ConfigValidationError: If *input_paths* is empty.
    """
    if not input_paths:
        raise ConfigValidationError("At least one input path is required.")
    return FrameConfig(
        sources=[SourceConfig(path=str(p)) for p in input_paths],
        parsing=ParsingConfig(date_formats=list(date_formats), value_type=value_type),
        output=OutputConfig(output_dir=output_dir),
    )
