"""
SOE Page Finder - Locate Schedule of Events pages in protocol PDFs.

The stored PDF is handed to the model, which reports the 0-based indices of
pages carrying the actual SOE grid. Model output is parsed best-effort: a
direct JSON parse first, then the first {...} span.

Usage:
    from extraction.soe_finder import detect_soe_pages

    detected = detect_soe_pages(client, file_id)
    print(f"SOE found on pages: {detected.pdf_indices}")
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from core.errors import DetectionError, InferenceError
from core.json_utils import parse_llm_json
from core.llm_client import DocumentServiceClient
from core.logging_utils import summarize_list, truncate

_logger = logging.getLogger(__name__)


SOE_PAGE_DETECTION_PROMPT = """
You are given a multi-page PDF (attached). Your task is to find the
0-based page indices where the actual Schedule of Events TABLE appears.
Instructions:
1. Examine EVERY page of the attached PDF in order (from index 0 to the end).
2. A valid Schedule of Events TABLE page MUST contain ALL of these:
   - A large rectangular grid with many rows and columns.
   - Column headers such as: "Protocol Section", "Screening",
     "Treatment Period", "Follow-up Period", "Day (D)".
   - Procedure names in the first column (e.g. "Informed consent",
     "Medical/Cancer history", "Physical examination").
   - Cells containing "X" marks and/or timing text.
3. The table may span multiple pages. If any part of the grid appears
   on a page, include that page index.
4. IGNORE pages where "Schedule of Events" is only mentioned in text,
   such as table-of-contents or references.
5. Use 0-based indexing (first PDF page = 0). Do NOT use printed page
   numbers if they differ from the file sequence.
Return ONLY strict JSON:
{"pdf_indices": [LIST_OF_0_BASED_PAGE_INDICES]}
""".strip()


@dataclass
class DetectionResult:
    """Pages the model identified as carrying the SOE grid."""
    file_id: str
    raw: str
    pdf_indices: List[int] = field(default_factory=list)


def _coerce_indices(value: Any) -> List[int]:
    """Keep integral, non-negative entries of a pdf_indices list."""
    if not isinstance(value, list):
        return []
    indices = []
    for item in value:
        if isinstance(item, bool):
            continue
        if isinstance(item, float) and item.is_integer():
            item = int(item)
        if isinstance(item, int) and item >= 0:
            indices.append(item)
    return indices


def parse_pdf_indices(raw: str) -> List[int]:
    """
    Parse {"pdf_indices": [...]} out of free-form model output.

    Returns an empty list when nothing usable is found.
    """
    parsed = parse_llm_json(raw)
    if not parsed.ok or not isinstance(parsed.value, dict):
        return []
    return _coerce_indices(parsed.value.get("pdf_indices"))


def detect_soe_pages(
    client: DocumentServiceClient,
    file_id: str,
    logger: Optional[logging.Logger] = None,
) -> DetectionResult:
    """
    Ask the model which pages of a stored PDF contain the SOE table.

    Args:
        client: Document service client
        file_id: Reference of the stored source PDF
        logger: Optional logger (defaults to this module's)

    Returns:
        DetectionResult with the raw model output and parsed indices

    Raises:
        DetectionError: If the call fails or no non-empty index list can be parsed
    """
    log = logger or _logger

    try:
        raw = client.infer(SOE_PAGE_DETECTION_PROMPT, [file_id])
    except InferenceError as e:
        raise DetectionError("Page detection call failed", str(e)) from e
    log.info(f"Page detection raw preview: {truncate(raw, 500)}")

    pdf_indices = parse_pdf_indices(raw)
    if not pdf_indices:
        raise DetectionError("No indices parsed from model output", truncate(raw, 200))

    log.info(f"Detected {len(pdf_indices)} SOE pages in {file_id}: "
             f"{summarize_list(pdf_indices, 30)}")
    return DetectionResult(file_id=file_id, raw=raw, pdf_indices=pdf_indices)
