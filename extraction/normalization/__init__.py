"""
Normalization Module - TSV to the fixed 12-key SOE row schema.

Column positions, not header text, decide the keys:
- COLUMN_MAPPING: declarative position -> key(s) table
- convert_tsv_to_rows: model-driven conversion, conformed onto SoeRow
- normalize_tsv: the same rules applied locally
"""

from .extractor import (
    convert_tsv_to_rows,
    normalize_tsv,
    conform_rows,
    split_tsv,
    split_header_rows,
)
from .prompts import build_schema_conversion_prompt, render_column_mapping
from .schema import COLUMN_MAPPING, PROTOCOL_SECTION_PATTERN

__all__ = [
    # Conversion
    "convert_tsv_to_rows",
    "normalize_tsv",
    "conform_rows",
    "split_tsv",
    "split_header_rows",
    # Prompts
    "build_schema_conversion_prompt",
    "render_column_mapping",
    # Schema
    "COLUMN_MAPPING",
    "PROTOCOL_SECTION_PATTERN",
]
