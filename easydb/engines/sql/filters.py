"""
Value filters applied before values are bound.

These do not provide SQL safety (parameter binding does); they shape values:
``escape_for_output`` HTML-escapes strings that will later be rendered into a
page, ``like_pattern`` wraps a search term for a substring ``LIKE``.
"""

import html
from typing import Any


def escape_for_output(value: Any) -> Any:
    """
    HTML-escape ``&``, ``<``, ``>`` and both quote styles in strings.
    Non-string values pass through unchanged.
    """
    if isinstance(value, str):
        return html.escape(value, quote=True)
    return value


def escape_data(data: dict[str, Any]) -> dict[str, Any]:
    """Apply ``escape_for_output`` to every value of a column/value mapping."""
    return {k: escape_for_output(v) for k, v in data.items()}


def like_pattern(value: Any) -> str:
    """Substring match: ``abc`` -> ``%abc%``. Wildcards in *value* are kept."""
    return f"%{value}%"


def placeholders(count: int) -> str:
    """``?, ?, ?`` for *count* values."""
    return ", ".join("?" * count)
