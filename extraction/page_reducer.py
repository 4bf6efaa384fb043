"""
Page Reducer - Build an SOE-only copy of the source PDF.

Only the pages reported by the page finder are kept, in the order given.
The pipeline stores the reduced document with the document service so
later stages can reference it instead of the full protocol.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from core.constants import SOE_ONLY_FILE_NAME
from core.pdf_utils import select_pages, to_base64

_logger = logging.getLogger(__name__)


@dataclass
class ReducedPdf:
    """The in-memory SOE-only document."""
    data: bytes
    page_count: int
    file_name: str = SOE_ONLY_FILE_NAME

    def to_base64(self) -> str:
        return to_base64(self.data)


def build_soe_only_pdf(
    pdf_bytes: bytes,
    pdf_indices: Sequence[int],
    logger: Optional[logging.Logger] = None,
) -> ReducedPdf:
    """
    Copy exactly the named pages, in order, into a new PDF.

    Args:
        pdf_bytes: Original uploaded PDF
        pdf_indices: Non-empty list of 0-based page indices
        logger: Optional logger (defaults to this module's)

    Raises:
        ReductionError: If the source cannot be read or an index is out of range
    """
    log = logger or _logger

    pages: List[int] = list(pdf_indices)
    reduced = ReducedPdf(data=select_pages(pdf_bytes, pages), page_count=len(pages))
    log.info(f"Built {reduced.file_name} with {reduced.page_count} pages "
             f"({len(reduced.data)} bytes)")
    return reduced
