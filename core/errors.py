"""
Pipeline error taxonomy.

Each stage raises its own error type carrying the upstream diagnostic text
verbatim. The orchestrator converts them to per-stage diagnostic strings.
"""

from typing import Optional


class SoePipelineError(Exception):
    """Base class for stage failures."""
    stage: str = "pipeline"

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail

    def __str__(self) -> str:
        message = super().__str__()
        if self.detail:
            return f"{message}: {self.detail}"
        return message


class UploadError(SoePipelineError):
    """Storing a file with the document service failed."""
    stage = "upload"


class InferenceError(SoePipelineError):
    """The inference endpoint failed or returned no text output."""
    stage = "inference"


class DetectionError(SoePipelineError):
    """No SOE page indices could be parsed from the model output."""
    stage = "detect"


class ReductionError(SoePipelineError):
    """Building the SOE-only PDF failed."""
    stage = "reduce"


class ExtractionError(SoePipelineError):
    """Table extraction returned no usable text."""
    stage = "tsv"


class SchemaConversionError(SoePipelineError):
    """Tabular text could not be converted to fixed-schema rows."""
    stage = "json"


class MissingCredentialError(ValueError):
    """The document service API key is not configured."""
