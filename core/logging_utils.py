"""
Helpers for keeping log lines short when they carry model output.
"""

from typing import Any, Sequence


def truncate(text: str, max_chars: int = 400) -> str:
    """Shorten text for logging, noting the original length."""
    if not text:
        return text
    if len(text) <= max_chars:
        return text
    return f"{text[:max_chars]}…({len(text)} chars)"


def summarize_list(items: Sequence[Any], max_items: int = 20) -> str:
    """Comma-join a list, eliding everything past max_items."""
    if not isinstance(items, (list, tuple)):
        return str(items)
    shown = ", ".join(str(i) for i in items[:max_items])
    if len(items) > max_items:
        return f"{shown}…(+{len(items) - max_items} more)"
    return shown
