"""
Core utilities for the SOE2Schedule pipeline.

This module consolidates shared functionality:
- Document service client (file storage + inference)
- JSON parsing of model output
- PDF page operations
- The fixed SOE row schema
- Error taxonomy and constants
"""

from .llm_client import (
    DocumentServiceClient,
    get_document_client,
    get_default_model,
    get_api_key,
    primary_output_text,
)
from .json_utils import (
    ParseResult,
    parse_llm_json,
    extract_json_span,
)
from .pdf_utils import (
    select_pages,
    to_base64,
)
from .soe_types import (
    SoeRow,
    SOE_HEADERS,
    MILESTONE_KEYS,
    MILESTONE_LABELS,
)
from .errors import (
    SoePipelineError,
    UploadError,
    InferenceError,
    DetectionError,
    ReductionError,
    ExtractionError,
    SchemaConversionError,
    MissingCredentialError,
)
from .constants import (
    SYSTEM_NAME,
    SYSTEM_VERSION,
    DEFAULT_MODEL,
)

__all__ = [
    # Document Service Client
    "DocumentServiceClient",
    "get_document_client",
    "get_default_model",
    "get_api_key",
    "primary_output_text",
    # JSON Utilities
    "ParseResult",
    "parse_llm_json",
    "extract_json_span",
    # PDF Utilities
    "select_pages",
    "to_base64",
    # SOE schema
    "SoeRow",
    "SOE_HEADERS",
    "MILESTONE_KEYS",
    "MILESTONE_LABELS",
    # Errors
    "SoePipelineError",
    "UploadError",
    "InferenceError",
    "DetectionError",
    "ReductionError",
    "ExtractionError",
    "SchemaConversionError",
    "MissingCredentialError",
    # Constants
    "SYSTEM_NAME",
    "SYSTEM_VERSION",
    "DEFAULT_MODEL",
]
