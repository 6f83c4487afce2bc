"""
Transforms sub-package for asset-frame.

Contains the processing steps that sit between a parser and the Table.
Each transform is a plain function or small class that works on parsed
text or timestamps and never mutates Table state.

- pipeline.py: IngestPipeline -- date parsing + value conversion for one
  source file.
- values.py: Convert a column of text cells to the value type.
- gaps.py: Compute missing timestamps for a regular calendar.
"""
