"""
Base parser protocol / ABC for asset-frame.

All source parsers must implement this interface. The contract is:
1. parse() takes a file path and returns a ParseResult.
2. ParseResult carries the ordered feature names from the header and
   one RawRow per data line, still as text.  Date parsing and value
   conversion happen later in transforms/pipeline.py, so parsers never
   touch the Table.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class RawRow:
    """One tokenized data line.

    Attributes:
        line_number: 1-based line number in the source file.
        date_text: The first token (timestamp text).
        values: Remaining tokens, aligned with the header by position.
    """
    line_number: int
    date_text: str
    values: list[str] = field(default_factory=list)


@dataclass
class ParseResult:
    """Standardized output from any parser.

    Attributes:
        source: Path the rows were read from.
        features: Ordered feature names from the header row (the corner
            cell is already dropped).  May contain duplicates; alignment
            with ``RawRow.values`` is positional.
        rows: Tokenized data lines in file order (blank lines skipped).
    """
    source: Path
    features: list[str] = field(default_factory=list)
    rows: list[RawRow] = field(default_factory=list)


class BaseParser(ABC):
    """Abstract base class for asset-frame source parsers."""

    @abstractmethod
    def parse(self, path: str | Path) -> ParseResult:
        """Parse a source file.

        Args:
            path: Path to the source file.

        Returns:
            ParseResult with feature names and raw rows.

        Raises:
            SourceReadError: If the file cannot be opened or read.
            ParsingError: If a line cannot be tokenized.
        """
