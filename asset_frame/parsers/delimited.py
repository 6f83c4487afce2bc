"""
Delimited-text parser for asset-frame.

Input structure:
  - Line 1: header.  The first cell is ignored (corner cell); the
    remaining cells are feature names.
  - Lines 2+: data.  The first cell is the timestamp text; the remaining
    cells are values aligned with the header by column position.

Every line is first stripped of characters outside printable ASCII
(32..126) -- this removes ``\\r``, tabs, a UTF-8 BOM and any non-ASCII
text -- and then tokenized with an escaped-list grammar:

  - ``,`` separates cells (outside quotes).
  - ``"`` toggles quoting; the quote characters are dropped.
  - ``\\`` escapes the next character: ``\\"`` -> ``"``, ``\\\\`` -> ``\\``,
    ``\\n`` -> newline.  Anything else is a ParsingError.

Quoted cells cannot span lines: the file is split on ``\\n`` first.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from asset_frame.exceptions import ParsingError, SourceReadError
from asset_frame.parsers.base import BaseParser, ParseResult, RawRow

logger = logging.getLogger(__name__)

SEPARATOR = ","
QUOTE = '"'
ESCAPE = "\\"

# Anything outside printable ASCII
_NON_PRINTABLE_RE = re.compile(r"[^\x20-\x7e]")

# Directory separators for both POSIX and Windows paths
_PATH_SEP_RE = re.compile(r"[/\\]")


def sanitize(line: str) -> str:
    """Remove every character outside printable ASCII (32..126)."""
    return _NON_PRINTABLE_RE.sub("", line)


def tokenize(line: str, line_number: int | None = None) -> list[str]:
    """Split one sanitized line into cells.

    An empty line yields no tokens; a trailing separator yields a final
    empty token.

    Raises:
        ParsingError: On an unknown escape sequence or a trailing escape.
    """
    tokens: list[str] = []
    if not line:
        return tokens

    where = f" (line {line_number})" if line_number is not None else ""
    current: list[str] = []
    in_quote = False
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == ESCAPE:
            i += 1
            if i >= len(line):
                raise ParsingError(f"Line ends with an escape character{where}: {line!r}")
            nxt = line[i]
            if nxt == "n":
                current.append("\n")
            elif nxt in (QUOTE, ESCAPE):
                current.append(nxt)
            else:
                raise ParsingError(f"Unknown escape sequence '\\{nxt}'{where}: {line!r}")
        elif ch == QUOTE:
            in_quote = not in_quote
        elif ch == SEPARATOR and not in_quote:
            tokens.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1

    tokens.append("".join(current))
    return tokens


def derive_asset_name(path: str | Path) -> str:
    """Derive an asset name from a file path.

    Strips the directory (``/`` or ``\\``) and the last extension:
    ``"data/EUR_USD.csv"`` -> ``"EUR_USD"``, ``"a.b.csv"`` -> ``"a.b"``.
    """
    filename = _PATH_SEP_RE.split(str(path))[-1]
    if "." in filename:
        return filename.rsplit(".", 1)[0]
    return filename


def _read_lines(path: Path) -> list[str]:
    """Read the whole file and split it on ``\\n``.

    Reading up front means a failure half-way through never leaves a
    half-ingested table.
    """
    try:
        with open(path, "r", encoding="utf-8-sig", errors="replace", newline="") as f:
            text = f.read()
    except OSError as exc:
        raise SourceReadError(f"Error opening file: {path} ({exc})") from exc

    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


class CsvSourceParser(BaseParser):
    """Parser for one asset's delimited-text source file."""

    def parse(self, path: str | Path) -> ParseResult:
        path = Path(path)
        logger.debug("Parsing source file: %s", path)

        lines = _read_lines(path)
        result = ParseResult(source=path)

        if not lines:
            logger.warning("Source file is empty: %s", path)
            return result

        header = tokenize(sanitize(lines[0]), line_number=1)
        result.features = header[1:]

        skipped = 0
        for line_number, line in enumerate(lines[1:], start=2):
            clean = sanitize(line)
            if not clean:
                skipped += 1
                continue
            tokens = tokenize(clean, line_number=line_number)
            result.rows.append(
                RawRow(line_number=line_number, date_text=tokens[0], values=tokens[1:])
            )

        if skipped:
            logger.debug("Skipped %d blank line(s) in %s", skipped, path)
        logger.info(
            "Parsed %s: %d feature(s), %d row(s)",
            path.name, len(result.features), len(result.rows),
        )
        return result
