"""
Unit tests for the delimited-text parser (asset_frame.parsers.delimited).

Tests sanitization, the quote/escape tokenizer, asset-name derivation
and CsvSourceParser.parse() against small synthetic files.
"""

from __future__ import annotations

import pytest

from asset_frame.exceptions import ParsingError, SourceReadError
from asset_frame.parsers.delimited import (
    CsvSourceParser,
    derive_asset_name,
    sanitize,
    tokenize,
)


class TestSanitize:
    """Tests for sanitize()."""

    def test_strips_carriage_return(self):
        assert sanitize("a,b\r") == "a,b"

    def test_strips_tabs_and_control_chars(self):
        assert sanitize("a\t,\x00b\x7f") == "a,b"

    def test_strips_non_ascii(self):
        assert sanitize("\ufeffDate,Prix\u20ac") == "Date,Prix"

    def test_keeps_printable_ascii(self):
        text = "".join(chr(c) for c in range(32, 127))
        assert sanitize(text) == text


class TestTokenize:
    """Tests for tokenize()."""

    def test_simple_split(self):
        assert tokenize("a,b,c") == ["a", "b", "c"]

    def test_empty_line_has_no_tokens(self):
        assert tokenize("") == []

    def test_trailing_separator_yields_empty_token(self):
        assert tokenize("a,") == ["a", ""]

    def test_empty_cells(self):
        assert tokenize(",,") == ["", "", ""]

    def test_quoted_separator(self):
        assert tokenize('a,"b,c",d') == ["a", "b,c", "d"]

    def test_quotes_are_removed(self):
        assert tokenize('"Open"') == ["Open"]

    def test_escaped_quote(self):
        assert tokenize('say \\"hi\\"') == ['say "hi"']

    def test_escaped_escape(self):
        assert tokenize("a\\\\b") == ["a\\b"]

    def test_escaped_newline(self):
        assert tokenize("line\\nbreak") == ["line\nbreak"]

    def test_whitespace_preserved(self):
        assert tokenize(" a , b ") == [" a ", " b "]

    def test_unknown_escape_raises(self):
        with pytest.raises(ParsingError, match="Unknown escape"):
            tokenize("a\\tb", line_number=3)

    def test_trailing_escape_raises(self):
        with pytest.raises(ParsingError, match="line 7"):
            tokenize("abc\\", line_number=7)


class TestDeriveAssetName:
    """Tests for derive_asset_name()."""

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("EUR_USD.csv", "EUR_USD"),
            ("data/EUR_USD.csv", "EUR_USD"),
            ("C:\\data\\EUR_USD.csv", "EUR_USD"),
            ("data/prices.2020.csv", "prices.2020"),
            ("data/NOEXT", "NOEXT"),
        ],
    )
    def test_names(self, path, expected):
        assert derive_asset_name(path) == expected


class TestCsvSourceParser:
    """Tests for CsvSourceParser.parse()."""

    def test_header_and_rows(self, write_source):
        path = write_source("x.csv", "Date,Open,Close\n2020-01-01,1,2\n2020-01-02,3,4\n")
        result = CsvSourceParser().parse(path)
        assert result.features == ["Open", "Close"]
        assert [r.date_text for r in result.rows] == ["2020-01-01", "2020-01-02"]
        assert result.rows[0].values == ["1", "2"]
        assert result.rows[1].line_number == 3

    def test_crlf_line_endings(self, write_source):
        path = write_source("x.csv", "Date,Open\r\n2020-01-01,1\r\n")
        result = CsvSourceParser().parse(path)
        assert result.features == ["Open"]
        assert result.rows[0].values == ["1"]

    def test_no_trailing_newline(self, write_source):
        path = write_source("x.csv", "Date,Open\n2020-01-01,1")
        assert len(CsvSourceParser().parse(path).rows) == 1

    def test_blank_lines_skipped(self, write_source):
        path = write_source("x.csv", "Date,Open\n\n2020-01-01,1\n\r\n2020-01-02,2\n")
        result = CsvSourceParser().parse(path)
        assert [r.line_number for r in result.rows] == [3, 5]

    def test_ragged_rows_kept_as_is(self, write_source):
        path = write_source("x.csv", "Date,A,B\n2020-01-01,1\n2020-01-02,1,2,3\n")
        result = CsvSourceParser().parse(path)
        assert result.rows[0].values == ["1"]
        assert result.rows[1].values == ["1", "2", "3"]

    def test_duplicate_feature_names_kept_in_order(self, write_source):
        path = write_source("x.csv", "Date,Open,Open\n")
        assert CsvSourceParser().parse(path).features == ["Open", "Open"]

    def test_empty_file(self, write_source, caplog):
        path = write_source("x.csv", "")
        result = CsvSourceParser().parse(path)
        assert result.features == []
        assert result.rows == []
        assert "empty" in caplog.text

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(SourceReadError, match="Error opening file") as excinfo:
            CsvSourceParser().parse(tmp_path / "nope.csv")
        assert isinstance(excinfo.value.__cause__, OSError)

    def test_directory_raises(self, tmp_path):
        with pytest.raises(SourceReadError):
            CsvSourceParser().parse(tmp_path)

    def test_bad_escape_reports_line(self, write_source):
        path = write_source("x.csv", "Date,Open\n2020-01-01,\\q\n")
        with pytest.raises(ParsingError, match="line 2"):
            CsvSourceParser().parse(path)
