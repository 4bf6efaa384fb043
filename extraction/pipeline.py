"""
SOE Processing Pipeline

Turns an uploaded Schedule of Events PDF into a dated visit schedule:
1. Upload the PDF to the document service
2. Detect the pages carrying the SOE grid
3. Reduce the PDF to those pages and upload the copy
4. Extract the grid as TSV
5. Normalize the TSV into fixed-schema rows
6. Compute schedule dates, visits and CSV renderings

Every stage is flag-gated and isolated: a failure is recorded on the result
and later stages run with whatever artifacts exist. The pipeline always
returns a result; it never raises for a stage failure.

Usage:
    from extraction.pipeline import run_pipeline, PipelineFlags

    result = run_pipeline(pdf_bytes, "protocol.pdf", PipelineFlags.all())
    print(result.to_dict()["visits"])
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Union

from core.llm_client import DocumentServiceClient, get_api_key, get_default_model, get_document_client
from core.soe_types import SOE_HEADERS, SoeRow
from processing.csv_export import rows_to_csv, rows_to_display_csv
from processing.schedule import compute_schedule_dates
from processing.visits import Visit, build_visits

from .normalization import convert_tsv_to_rows, normalize_tsv
from .page_reducer import build_soe_only_pdf
from .soe_finder import detect_soe_pages
from .table_extractor import extract_tsv

_logger = logging.getLogger(__name__)

NO_FILE_ERROR = "No file provided"
MISSING_KEY_ERROR = "Missing OPENAI_API_KEY"


@dataclass
class PipelineFlags:
    """Stage-selection flags for one request."""
    include_soe_pdf: bool = False
    run_upload: bool = False
    run_detect: bool = False
    run_reduce: bool = False
    run_tsv: bool = False
    run_json: bool = False

    # wire name -> attribute
    WIRE_NAMES = {
        "includeSoePdf": "include_soe_pdf",
        "runUpload": "run_upload",
        "runDetect": "run_detect",
        "runReduce": "run_reduce",
        "runTsv": "run_tsv",
        "runJson": "run_json",
    }

    @property
    def any_stage(self) -> bool:
        return any([self.run_upload, self.run_detect, self.run_reduce, self.run_tsv, self.run_json])

    @classmethod
    def all(cls, include_soe_pdf: bool = False) -> "PipelineFlags":
        return cls(include_soe_pdf, True, True, True, True, True)

    @classmethod
    def from_mapping(
        cls,
        query: Optional[Mapping[str, Any]] = None,
        form: Optional[Mapping[str, Any]] = None,
    ) -> "PipelineFlags":
        """
        Read flags from query parameters and form fields.

        A flag is on when either source carries the value "1".
        """
        query = query or {}
        form = form or {}

        def on(key: str) -> bool:
            return str(form.get(key)) == "1" or str(query.get(key)) == "1"

        return cls(**{attr: on(wire) for wire, attr in cls.WIRE_NAMES.items()})


@dataclass
class PipelineConfig:
    """Configuration for the processing pipeline."""
    model_name: Optional[str] = None
    normalizer: str = "llm"  # "llm" or "local"
    log_table_rows: int = 15


@dataclass
class PipelineResult:
    """Best-effort response payload; absent fields mean skipped or failed."""
    visits: List[Visit] = field(default_factory=list)
    csv: Optional[str] = None
    csv_display: Optional[str] = None

    file_id: Optional[str] = None
    upload_error: Optional[str] = None

    pdf_indices: Optional[List[int]] = None
    detect_raw: Optional[str] = None
    detect_error: Optional[str] = None

    soe_file_id: Optional[str] = None
    soe_pdf_base64: Optional[str] = None
    soe_file_name: Optional[str] = None
    reduce_error: Optional[str] = None

    tsv: Optional[str] = None
    tsv_error: Optional[str] = None

    table_data: Optional[List[SoeRow]] = None
    json_error: Optional[str] = None

    # attribute -> wire name (csv/csv_display keep their snake_case keys)
    WIRE_NAMES = {
        "csv": "csv",
        "csv_display": "csv_display",
        "file_id": "fileId",
        "upload_error": "uploadError",
        "pdf_indices": "pdfIndices",
        "detect_raw": "detectRaw",
        "detect_error": "detectError",
        "soe_file_id": "soeFileId",
        "soe_pdf_base64": "soePdfBase64",
        "soe_file_name": "soeFileName",
        "reduce_error": "reduceError",
        "tsv": "tsv",
        "tsv_error": "tsvError",
        "table_data": "tableData",
        "json_error": "jsonError",
    }

    @property
    def errors(self) -> Dict[str, str]:
        """Per-stage errors that were recorded."""
        stages = {
            "upload": self.upload_error,
            "detect": self.detect_error,
            "reduce": self.reduce_error,
            "tsv": self.tsv_error,
            "json": self.json_error,
        }
        return {stage: error for stage, error in stages.items() if error}

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"visits": [v.to_dict() for v in self.visits]}
        for attr, wire in self.WIRE_NAMES.items():
            value = getattr(self, attr)
            if value is None:
                continue
            if attr == "table_data":
                value = [row.to_dict() for row in value]
            data[wire] = value
        return data


def _log_table_columns(rows: List[SoeRow], max_rows: int, log: logging.Logger):
    """Log a column-wise sample of the normalized table."""
    if not rows:
        log.info("Table data empty")
        return
    n = min(len(rows), max_rows)
    log.debug(f"Table data by column (showing {n} rows):")
    for key in SOE_HEADERS:
        sample = [f"{i}: {rows[i].get(key)}" for i in range(n)]
        log.debug(f"  {key}: {sample}")


def run_pipeline(
    pdf_bytes: Optional[bytes],
    filename: str = "input.pdf",
    flags: Optional[PipelineFlags] = None,
    client: Optional[DocumentServiceClient] = None,
    config: Optional[PipelineConfig] = None,
    anchor: Optional[Union[date, datetime]] = None,
    logger: Optional[logging.Logger] = None,
) -> PipelineResult:
    """
    Run the SOE pipeline on one uploaded file.

    Pipeline steps:
    1. Preconditions: a file, at least one stage flag, a credential
    2. Upload → detect → reduce → extract → normalize (each flag-gated)
    3. Derived outputs from normalized rows (schedule, visits, CSV)

    Args:
        pdf_bytes: Uploaded file content (None when no file was sent)
        filename: Name reported to the document service
        flags: Stage-selection flags (default: all stages off)
        client: Document service client; built from the environment if None
        config: Pipeline configuration
        anchor: Schedule anchor; defaults to the current UTC time
        logger: Optional logger (defaults to this module's)

    Returns:
        PipelineResult, possibly partial
    """
    log = logger or _logger
    flags = flags or PipelineFlags()
    config = config or PipelineConfig()
    result = PipelineResult()

    log.info(f"Pipeline start: file={filename!r} has_file={bool(pdf_bytes)} flags={flags}")

    if not pdf_bytes:
        result.upload_error = NO_FILE_ERROR
        log.warning(result.upload_error)
        return result

    if not flags.any_stage:
        log.info("No stage selected; nothing to do")
        return result

    try:
        if client is None:
            api_key = get_api_key()
            if not api_key:
                result.upload_error = MISSING_KEY_ERROR
                log.warning(result.upload_error)
                return result
            client = get_document_client(
                model_name=config.model_name or get_default_model(),
                api_key=api_key,
            )

        _run_stages(result, pdf_bytes, filename, flags, client, config, log)

        # ═══════════════════════════════════════════════════════════════
        # Derived outputs: schedule dates, visits, CSV renderings
        # ═══════════════════════════════════════════════════════════════
        if result.table_data is not None:
            schedule = compute_schedule_dates(anchor)
            result.visits = build_visits(result.table_data, schedule)
            result.csv = rows_to_csv(result.table_data)
            result.csv_display = rows_to_display_csv(result.table_data, schedule)
            log.info(f"Derived {len(result.visits)} visits from {len(result.table_data)} rows")

    except Exception as e:
        result.upload_error = str(e)
        log.error(f"Unexpected error during processing: {e}")

    if result.errors:
        log.warning(f"Pipeline finished with errors: {result.errors}")
    else:
        log.info("Pipeline complete")
    return result


def _run_stages(
    result: PipelineResult,
    pdf_bytes: bytes,
    filename: str,
    flags: PipelineFlags,
    client: DocumentServiceClient,
    config: PipelineConfig,
    log: logging.Logger,
):
    # ═══════════════════════════════════════════════════════════════
    # STEP 1: Upload (every later stage needs the file id)
    # ═══════════════════════════════════════════════════════════════
    try:
        result.file_id = client.store(pdf_bytes, filename)
    except Exception as e:
        result.upload_error = str(e)
        log.error(f"Upload failed: {e}")

    # ═══════════════════════════════════════════════════════════════
    # STEP 2: Detect SOE pages
    # ═══════════════════════════════════════════════════════════════
    if result.file_id and flags.run_detect:
        try:
            detected = detect_soe_pages(client, result.file_id, logger=log)
            result.pdf_indices = detected.pdf_indices
            result.detect_raw = detected.raw
        except Exception as e:
            result.detect_error = str(e)
            log.warning(f"Page detection failed: {e}")

    # ═══════════════════════════════════════════════════════════════
    # STEP 3: Build and upload the SOE-only PDF
    # ═══════════════════════════════════════════════════════════════
    # Preview fields are set before the upload
    if result.file_id and flags.run_reduce and result.pdf_indices:
        try:
            reduced = build_soe_only_pdf(pdf_bytes, result.pdf_indices, logger=log)
            if flags.include_soe_pdf:
                result.soe_pdf_base64 = reduced.to_base64()
                result.soe_file_name = reduced.file_name
            result.soe_file_id = client.store(reduced.data, reduced.file_name)
        except Exception as e:
            result.reduce_error = str(e)
            log.warning(f"SOE-only PDF build/upload failed: {e}")

    # ═══════════════════════════════════════════════════════════════
    # STEP 4: Extract TSV (reduced document preferred)
    # ═══════════════════════════════════════════════════════════════
    target_file_id = result.soe_file_id or result.file_id
    if flags.run_tsv and target_file_id:
        try:
            result.tsv = extract_tsv(client, target_file_id, logger=log)
        except Exception as e:
            result.tsv_error = str(e)
            log.warning(f"TSV extraction failed: {e}")

    # ═══════════════════════════════════════════════════════════════
    # STEP 5: Normalize TSV into fixed-schema rows
    # ═══════════════════════════════════════════════════════════════
    if flags.run_json and result.tsv:
        try:
            if config.normalizer == "local":
                rows = normalize_tsv(result.tsv, logger=log)
            else:
                rows = convert_tsv_to_rows(client, result.tsv, logger=log)
            result.table_data = rows
            _log_table_columns(rows, config.log_table_rows, log)
        except Exception as e:
            result.json_error = str(e)
            log.warning(f"TSV→JSON conversion failed: {e}")
