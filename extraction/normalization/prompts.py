"""
LLM Prompts for SOE table normalization.

The key list and the column mapping sections are rendered from
COLUMN_MAPPING so the prompt and the local normalizer cannot drift apart.
"""

from core.constants import TSV_COLUMN_COUNT
from core.soe_types import SOE_HEADERS

from .schema import COLUMN_MAPPING, PROTOCOL_SECTION_COLUMN


SCHEMA_CONVERSION_PROMPT = """
You are given a TSV representation of a clinical trial Schedule of Events
table extracted with a PDF table-detection tool.

The TSV has:
- multiple header rows at the top
- possibly repeated header rows (because the table spans multiple pages)
- a rectangular grid of data rows below the headers
- {column_count} columns in every row

You must convert this TSV into a JSON array using a FIXED column schema.
You must NOT invent or change any field names.

TSV:
{tsv}

===============================================
IMPORTANT: DO NOT INFER NAMES FROM HEADERS
===============================================

- You may use the header rows ONLY to decide which rows are headers.
- You MUST NOT use the header text to construct or modify JSON key names.
- All JSON keys are FIXED and are given below.
- Use ONLY the exact key names specified. Do not shorten, expand,
  or add prefixes/suffixes.

===============================================
HEADER ROWS vs DATA ROWS
===============================================

Treat a row as a HEADER ROW if:
- It appears before the first row where column {section_column} (protocol section)
  contains a real protocol section number (e.g., "8.3.1", "11.3", "5"), OR
- It exactly matches a previous header row (because headers are repeated
  when the table spans multiple pages).

Ignore all HEADER ROWS when producing output.
Use only DATA ROWS (rows after the header block) in the JSON array.

===============================================
FIXED JSON SCHEMA (USE EXACTLY THESE KEYS)
===============================================

For every DATA row you must produce one JSON object with EXACTLY these keys:

{key_list}

Do NOT invent any additional keys.
Do NOT change these names.
Do NOT omit any of these keys.

===============================================
TSV COLUMN → JSON FIELD MAPPING
===============================================

Each TSV row has {column_count} columns, indexed 0 through {last_column}.
For every DATA row, map them as follows:

{mapping}

Under no circumstances should you create any other mapping or any other keys.

===============================================
RECTANGULAR OUTPUT
===============================================

- Every JSON row object must contain ALL keys listed in the fixed schema.
- If a value is blank, include the key with value "" (do not omit keys).

===============================================
OUTPUT FORMAT
===============================================

Output a single JSON array of row objects.
Return ONLY valid JSON. No comments, no explanations, no markdown.
"""


def render_column_mapping() -> str:
    """Render COLUMN_MAPPING as prompt instructions."""
    lines = []
    for position, keys in enumerate(COLUMN_MAPPING):
        if len(keys) == 1:
            lines.append(f'- Column {position} → "{keys[0]}"')
            continue
        lines.append(f"- Column {position} applies to ALL of these keys:")
        lines.append(f"    * Read the value from TSV column {position}.")
        lines.append("    * Put that value into EACH of:")
        for key in keys:
            lines.append(f'        "{key}"')
    return "\n".join(lines)


def build_schema_conversion_prompt(tsv: str) -> str:
    """Build the TSV → fixed-schema JSON prompt."""
    return SCHEMA_CONVERSION_PROMPT.format(
        column_count=TSV_COLUMN_COUNT,
        last_column=TSV_COLUMN_COUNT - 1,
        section_column=PROTOCOL_SECTION_COLUMN,
        tsv=tsv,
        key_list="\n".join(f'- "{key}"' for key in SOE_HEADERS),
        mapping=render_column_mapping(),
    ).strip()
