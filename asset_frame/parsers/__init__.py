"""
Parsers sub-package for asset-frame.

Converts raw source files into a standardized intermediate
representation (feature names + tokenized rows, all still text).

Design: Strategy Pattern
- base.py defines the BaseParser ABC (protocol) and ParseResult.
- delimited.py implements CsvSourceParser for comma-separated files
  with quote and backslash-escape support.

Date parsing and value conversion are deliberately left to
transforms/pipeline.py so parsers stay free of Table state.
"""
