#!/usr/bin/env python3
"""
SOE2Schedule - Schedule of Events PDF to visit schedule

Runs the staged pipeline on a local PDF:
- Upload, detect SOE pages, reduce to those pages
- Extract the grid as TSV and normalize it to the fixed row schema
- Compute dated visits and CSV renderings

Usage:
    python main.py protocol.pdf [--model gpt-4.1-mini] [--no-reduce]
"""

import argparse
import base64
import json
import logging
import os
import sys
from datetime import date
from pathlib import Path

# Load environment variables from .env
from dotenv import load_dotenv
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='[%(levelname)s] %(message)s'
)
logger = logging.getLogger(__name__)

from extraction import run_pipeline, PipelineConfig, PipelineFlags, PipelineResult
from core.constants import DEFAULT_MODEL, OUTPUT_FILES


def save_outputs(result: PipelineResult, output_dir: str) -> dict:
    """Write the response payload and any produced artifacts."""
    os.makedirs(output_dir, exist_ok=True)
    paths = {}

    response_path = os.path.join(output_dir, OUTPUT_FILES["response"])
    with open(response_path, 'w', encoding='utf-8') as f:
        json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)
    paths["response"] = response_path

    for key in ("csv", "csv_display"):
        content = getattr(result, key)
        if content is not None:
            path = os.path.join(output_dir, OUTPUT_FILES[key])
            with open(path, 'w', encoding='utf-8', newline='') as f:
                f.write(content)
            paths[key] = path

    if result.soe_pdf_base64:
        path = os.path.join(output_dir, OUTPUT_FILES["soe_pdf"])
        with open(path, 'wb') as f:
            f.write(base64.b64decode(result.soe_pdf_base64))
        paths["soe_pdf"] = path

    return paths


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Extract a dated visit schedule from a Schedule of Events PDF",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python main.py protocol.pdf                      # All stages
    python main.py protocol.pdf --no-detect          # Extract from the full PDF
    python main.py protocol.pdf --include-soe-pdf    # Also save soe_only.pdf
    python main.py protocol.pdf --anchor-date 2025-01-01
        """
    )

    parser.add_argument(
        "pdf_path",
        help="Path to the Schedule of Events PDF"
    )

    parser.add_argument(
        "--model", "-m",
        default=os.environ.get("OPENAI_MODEL", DEFAULT_MODEL),
        help=f"OpenAI model to use (default: {DEFAULT_MODEL})"
    )

    parser.add_argument(
        "--output-dir", "-o",
        help="Output directory (default: output/<protocol_name>)"
    )

    parser.add_argument(
        "--no-detect",
        action="store_true",
        help="Skip SOE page detection (and therefore reduction)"
    )

    parser.add_argument(
        "--no-reduce",
        action="store_true",
        help="Extract from the original PDF instead of an SOE-only copy"
    )

    parser.add_argument(
        "--no-tsv",
        action="store_true",
        help="Skip table extraction (and therefore normalization)"
    )

    parser.add_argument(
        "--no-json",
        action="store_true",
        help="Skip TSV normalization"
    )

    parser.add_argument(
        "--include-soe-pdf",
        action="store_true",
        help="Save the SOE-only PDF next to the other outputs"
    )

    parser.add_argument(
        "--local-normalizer",
        action="store_true",
        help="Normalize TSV locally instead of with the model"
    )

    parser.add_argument(
        "--anchor-date",
        type=date.fromisoformat,
        help="Anchor date (YYYY-MM-DD) for the schedule (default: today, UTC)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    pdf_path = Path(args.pdf_path)
    if not pdf_path.exists():
        logger.error(f"PDF not found: {pdf_path}")
        sys.exit(1)

    output_dir = args.output_dir or os.path.join("output", pdf_path.stem)

    flags = PipelineFlags(
        include_soe_pdf=args.include_soe_pdf,
        run_upload=True,
        run_detect=not args.no_detect,
        run_reduce=not args.no_reduce,
        run_tsv=not args.no_tsv,
        run_json=not args.no_json,
    )
    config = PipelineConfig(
        model_name=args.model,
        normalizer="local" if args.local_normalizer else "llm",
    )

    logger.info("=" * 60)
    logger.info(f"Processing: {pdf_path}")
    logger.info(f"Model: {args.model}")
    logger.info(f"Output: {output_dir}")
    logger.info("=" * 60)

    result = run_pipeline(
        pdf_path.read_bytes(),
        filename=pdf_path.name,
        flags=flags,
        config=config,
        anchor=args.anchor_date,
    )
    paths = save_outputs(result, output_dir)

    logger.info("\n" + "=" * 60)
    logger.info("PROCESSING COMPLETE")
    logger.info("=" * 60)
    for stage, error in result.errors.items():
        logger.info(f"{stage}: ✗ {error}")
    for visit in result.visits:
        logger.info(f"{visit.date}  {visit.label}: {len(visit.events)} events")
    for name, path in paths.items():
        logger.info(f"Saved {name}: {path}")
    logger.info("=" * 60)

    sys.exit(0 if result.visits else 1)


if __name__ == "__main__":
    main()
