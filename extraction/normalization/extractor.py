"""
SOE Table Normalizer - TSV to fixed-schema rows.

Two routes produce the same closed 12-key row shape:
- convert_tsv_to_rows(): the model converts the TSV under the fixed
  schema prompt; its output is then conformed onto SoeRow
- normalize_tsv(): the same header and column-mapping rules applied
  locally, without a network call
"""

import logging
from typing import Any, List, Optional, Sequence, Tuple

from core.errors import InferenceError, SchemaConversionError
from core.json_utils import parse_llm_json
from core.llm_client import DocumentServiceClient
from core.logging_utils import truncate
from core.soe_types import SoeRow

from .prompts import build_schema_conversion_prompt
from .schema import COLUMN_MAPPING, PROTOCOL_SECTION_COLUMN, PROTOCOL_SECTION_PATTERN

_logger = logging.getLogger(__name__)


def conform_rows(data: Any) -> List[SoeRow]:
    """
    Conform parsed model output onto the fixed row schema.

    Raises:
        SchemaConversionError: If data is not an array of objects
    """
    if not isinstance(data, list):
        raise SchemaConversionError(
            "JSON conversion failed", f"expected an array, got {type(data).__name__}"
        )
    rows = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise SchemaConversionError(
                "JSON conversion failed", f"row {i} is {type(item).__name__}, not an object"
            )
        rows.append(SoeRow.from_dict(item))
    return rows


def convert_tsv_to_rows(
    client: DocumentServiceClient,
    tsv: str,
    logger: Optional[logging.Logger] = None,
) -> List[SoeRow]:
    """
    Convert extracted TSV into fixed-schema rows via the model.

    Args:
        client: Document service client
        tsv: Tabular text from the table extractor
        logger: Optional logger (defaults to this module's)

    Raises:
        SchemaConversionError: On call failure, empty output, unparseable
            output, or output that is not an array of objects
    """
    log = logger or _logger

    try:
        raw = client.infer(build_schema_conversion_prompt(tsv))
    except InferenceError as e:
        raise SchemaConversionError("JSON conversion failed", str(e)) from e

    parsed = parse_llm_json(raw, array=True)
    if not parsed.ok:
        log.warning(f"Unparseable conversion output: {truncate(raw)}")
        raise SchemaConversionError("JSON conversion failed", parsed.error)
    if parsed.strategy == "span":
        log.info("Conversion output was wrapped in prose; parsed the embedded array")

    rows = conform_rows(parsed.value)
    log.info(f"Converted TSV into {len(rows)} rows")
    return rows


def split_tsv(tsv: str) -> List[Tuple[str, ...]]:
    """Split TSV text into cell tuples, skipping blank lines."""
    rows = []
    for line in tsv.splitlines():
        if not line.strip():
            continue
        rows.append(tuple(line.split("\t")))
    return rows


def _is_section_row(cells: Sequence[str]) -> bool:
    if len(cells) <= PROTOCOL_SECTION_COLUMN:
        return False
    return bool(PROTOCOL_SECTION_PATTERN.match(cells[PROTOCOL_SECTION_COLUMN]))


def split_header_rows(
    rows: List[Tuple[str, ...]],
) -> Tuple[List[Tuple[str, ...]], List[Tuple[str, ...]]]:
    """
    Separate header rows from data rows.

    Headers are every row before the first row whose protocol section
    column holds a section number, plus any later exact repeat of one of
    those rows (page-break artifact).
    """
    first_data = next((i for i, cells in enumerate(rows) if _is_section_row(cells)), len(rows))
    headers = rows[:first_data]
    header_set = set(headers)
    data = [cells for cells in rows[first_data:] if cells not in header_set]
    return headers, data


def normalize_tsv(tsv: str, logger: Optional[logging.Logger] = None) -> List[SoeRow]:
    """
    Normalize TSV into fixed-schema rows locally.

    Short rows are padded with blanks, cells past the last mapped column
    are ignored.
    """
    log = logger or _logger

    headers, data = split_header_rows(split_tsv(tsv or ""))
    rows = [SoeRow.from_cells([c.strip() for c in cells], COLUMN_MAPPING) for cells in data]
    log.info(f"Normalized TSV locally: {len(headers)} header rows dropped, {len(rows)} data rows")
    return rows
