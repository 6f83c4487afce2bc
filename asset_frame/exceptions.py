"""
Custom exception hierarchy for asset-frame.

Callers can catch a specific failure (e.g., SourceReadError vs
ParsingError) without relying on generic OSError/ValueError.  Schema
errors in assetframe.yaml surface as ``pydantic.ValidationError`` and a
missing config file as ``FileNotFoundError``; everything else derives
from AssetFrameError.
"""


class AssetFrameError(Exception):
    """Base exception for all asset-frame errors."""


class SourceReadError(AssetFrameError):
    """Raised when a source file cannot be opened or read.

    This is the only ingestion failure that aborts loudly. The table is
    left untouched because the file is read in full before any state
    changes. The underlying ``OSError`` is chained as ``__cause__``.
    """


class ParsingError(AssetFrameError):
    """Raised when a source line cannot be tokenized.

    For example, an unknown escape sequence (``\\x``) or a line ending
    in a bare escape character.  Also raised for unparseable dates when
    the ``on_unparsed_date`` policy is ``"raise"``.
    """


class ConfigValidationError(AssetFrameError):
    """Raised when a configuration cannot be built or loaded.

    This can happen if:
    - The config file is empty.
    - ``generate_default_config()`` is given no input paths.

    Schema problems (no sources, duplicate explicit asset names, unknown
    value types) are reported by Pydantic as ``ValidationError``.
    """


class ExportError(AssetFrameError):
    """Raised when the exporter fails to write output files.

    For example, permission errors, disk full, or unsupported format.
    """
