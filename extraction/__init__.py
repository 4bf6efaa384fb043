"""
Extraction module for the SOE2Schedule pipeline.

This module contains the staged extraction logic:
- soe_finder: Locate SOE pages in a stored protocol PDF
- page_reducer: Build an SOE-only copy of the PDF
- table_extractor: Pull the SOE grid out as TSV
- normalization: Convert TSV into the fixed 12-key row schema
- pipeline: Orchestrates the flag-gated, failure-isolated workflow

Design Principle:
- Each stage consumes the previous stage's artifact
- A failed stage is recorded, not raised; the response is always returned
"""

from .soe_finder import (
    detect_soe_pages,
    parse_pdf_indices,
    DetectionResult,
    SOE_PAGE_DETECTION_PROMPT,
)
from .page_reducer import (
    build_soe_only_pdf,
    ReducedPdf,
)
from .table_extractor import (
    extract_tsv,
    TSV_EXTRACTION_PROMPT,
)
from .normalization import (
    convert_tsv_to_rows,
    normalize_tsv,
    COLUMN_MAPPING,
)
from .pipeline import (
    run_pipeline,
    PipelineFlags,
    PipelineConfig,
    PipelineResult,
)

__all__ = [
    # SOE Finder
    "detect_soe_pages",
    "parse_pdf_indices",
    "DetectionResult",
    "SOE_PAGE_DETECTION_PROMPT",
    # Page Reducer
    "build_soe_only_pdf",
    "ReducedPdf",
    # Table Extractor
    "extract_tsv",
    "TSV_EXTRACTION_PROMPT",
    # Normalization
    "convert_tsv_to_rows",
    "normalize_tsv",
    "COLUMN_MAPPING",
    # Pipeline
    "run_pipeline",
    "PipelineFlags",
    "PipelineConfig",
    "PipelineResult",
]
