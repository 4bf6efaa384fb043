"""
JSON Utilities - best-effort parsing of JSON from LLM output.

Models are asked for strict JSON but are observed to sometimes wrap it in
prose. Parsing is therefore modelled as a result value, not an exception:

1. Direct parse of the full text
2. Regex-extract the first brace (or bracket) span and parse that

Usage:
    from core.json_utils import parse_llm_json

    result = parse_llm_json('Sure! {"pdf_indices": [3, 4]}')
    if result.ok:
        print(result.value["pdf_indices"])
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Optional


# First "{" through last "}" (greedy, spans newlines)
OBJECT_SPAN_PATTERN = re.compile(r'\{[\s\S]*\}')
# First "[" through last "]"
ARRAY_SPAN_PATTERN = re.compile(r'\[[\s\S]*\]')


@dataclass
class ParseResult:
    """Outcome of a best-effort JSON parse."""
    value: Any = None
    error: Optional[str] = None
    strategy: Optional[str] = None  # "direct" or "span"

    @property
    def ok(self) -> bool:
        return self.error is None


def extract_json_span(text: str, array: bool = False) -> Optional[str]:
    """
    Return the first JSON-looking span in text, or None.

    Args:
        text: Raw LLM output
        array: Look for a [...] span instead of {...}

    Example:
        >>> extract_json_span('Here you go: {"a": 1} thanks')
        '{"a": 1}'
    """
    if not text:
        return None
    pattern = ARRAY_SPAN_PATTERN if array else OBJECT_SPAN_PATTERN
    match = pattern.search(text)
    return match.group(0) if match else None


def parse_llm_json(text: Any, array: bool = False) -> ParseResult:
    """
    Parse JSON from LLM output with the two-attempt policy.

    Args:
        text: Raw LLM output text
        array: Whether the expected top-level value is an array (controls
            which span the fallback attempt extracts)

    Returns:
        ParseResult with either value or error set
    """
    if not isinstance(text, str) or not text.strip():
        return ParseResult(error="Empty or non-text model output")

    try:
        return ParseResult(value=json.loads(text), strategy="direct")
    except json.JSONDecodeError as e:
        direct_error = str(e)

    span = extract_json_span(text, array=array)
    if span is None:
        return ParseResult(error=f"No JSON found in model output ({direct_error})")

    try:
        return ParseResult(value=json.loads(span), strategy="span")
    except json.JSONDecodeError as e:
        return ParseResult(error=f"Could not parse JSON from model output: {e}")
