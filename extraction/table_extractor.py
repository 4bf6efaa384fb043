"""
Table Extractor - Pull the SOE grid out of a stored PDF as TSV text.

The output is returned verbatim; malformed rows are left for the schema
normalizer to cope with.

Usage:
    from extraction.table_extractor import extract_tsv

    tsv = extract_tsv(client, soe_file_id or file_id)
"""

import logging
from typing import Optional

from core.constants import TSV_COLUMN_COUNT
from core.errors import ExtractionError, InferenceError
from core.llm_client import DocumentServiceClient
from core.logging_utils import truncate

_logger = logging.getLogger(__name__)


TSV_EXTRACTION_PROMPT = f"""
You are given a PDF of a clinical trial Schedule of Events table (attached).
Extract the main rectangular table as raw TSV (tab-separated values) with EXACTLY {TSV_COLUMN_COUNT} columns per row.
Return ONLY the TSV text with rows separated by newlines. Do NOT add commentary or Markdown.
If the table spans multiple pages, include all rows and do not repeat identical header rows more than once.
""".strip()


def extract_tsv(
    client: DocumentServiceClient,
    file_id: str,
    logger: Optional[logging.Logger] = None,
) -> str:
    """
    Ask the model for the main SOE table of a stored PDF as TSV.

    Args:
        client: Document service client
        file_id: Reduced (preferred) or original file reference
        logger: Optional logger (defaults to this module's)

    Returns:
        Raw TSV text

    Raises:
        ExtractionError: If the call fails or the output is empty or not text
    """
    log = logger or _logger

    try:
        tsv = client.infer(TSV_EXTRACTION_PROMPT, [file_id])
    except InferenceError as e:
        raise ExtractionError("TSV extraction failed", str(e)) from e
    if not isinstance(tsv, str) or not tsv.strip():
        raise ExtractionError("TSV extraction failed", "empty model output")

    line_count = len([line for line in tsv.splitlines() if line.strip()])
    log.info(f"Extracted {line_count} TSV lines from {file_id}")
    log.debug(f"TSV preview: {truncate(tsv)}")
    return tsv
