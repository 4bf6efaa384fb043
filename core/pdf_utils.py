"""
PDF Utility Functions.

Common PDF operations used across the pipeline, all working on in-memory
bytes since uploaded files are never written to disk.
"""

import base64
import logging
from typing import Sequence

import fitz  # PyMuPDF

from core.errors import ReductionError

logger = logging.getLogger(__name__)


def select_pages(pdf_bytes: bytes, pages: Sequence[int]) -> bytes:
    """
    Copy the given pages, in the given order, into a new PDF.

    Args:
        pdf_bytes: Source document
        pages: 0-indexed page numbers

    Returns:
        Serialized bytes of the new document

    Raises:
        ReductionError: If the source cannot be opened or an index is out of range
    """
    try:
        src = fitz.open(stream=pdf_bytes, filetype="pdf")
    except Exception as e:
        raise ReductionError("Could not open source PDF", str(e)) from e

    try:
        total_pages = len(src)
        for page_num in pages:
            if not isinstance(page_num, int) or page_num < 0 or page_num >= total_pages:
                raise ReductionError(
                    "Page index out of range",
                    f"{page_num} (document has {total_pages} pages)",
                )

        dst = fitz.open()
        try:
            for page_num in pages:
                dst.insert_pdf(src, from_page=page_num, to_page=page_num)
            data = dst.tobytes()
        finally:
            dst.close()
    finally:
        src.close()

    logger.info(f"Built {len(pages)}-page PDF from {total_pages}-page source")
    return data


def to_base64(data: bytes) -> str:
    """Base64-encode bytes for embedding in a JSON response."""
    return base64.b64encode(data).decode('ascii')
