"""
Centralized constants for the SOE2Schedule pipeline.

All pipeline-wide constants should be defined here to ensure consistency.
"""

# System Metadata
SYSTEM_NAME: str = "SOE2Schedule"
SYSTEM_VERSION: str = "0.1.0"

# Default Model Preference (override with OPENAI_MODEL)
DEFAULT_MODEL: str = "gpt-4.1-mini"

# Purpose tag sent with every stored file
FILE_PURPOSE: str = "assistants"

# Name of the reduced, SOE-only document
SOE_ONLY_FILE_NAME: str = "soe_only.pdf"

# Number of columns the table extractor is asked to produce
TSV_COLUMN_COUNT: int = 9

# Pipeline Output File Names (CLI)
OUTPUT_FILES = {
    "response": "response.json",
    "csv": "soe_table.csv",
    "csv_display": "soe_display.csv",
    "soe_pdf": SOE_ONLY_FILE_NAME,
}

# Human label for the first column of the display CSV
DISPLAY_FIRST_HEADER: str = "Procedure"

# Label of the synthetic schedule row in the display CSV
DATES_ROW_LABEL: str = "dates"
