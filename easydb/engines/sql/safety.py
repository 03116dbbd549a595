"""
Identifier validation — the only thing standing between caller-supplied
table/column names and the SQL text.

Identifiers cannot be bound as parameters, so they are checked against an
allow-list (``[A-Za-z0-9_.]+``) and quoted with backticks. Anything else is
rejected with ``InvalidIdentifier``; nothing is stripped or rewritten.

ORDER BY fragments get a slightly wider allow-list (whitespace, commas and a
trailing ``ASC``/``DESC``) and are passed through unchanged.

Usage::

    v = IdentifierValidator()
    v.validate_identifier("users")          # '`users`'
    v.validate_column_list("id, name")      # '`id`, `name`'
    v.validate_order_by("name DESC")        # 'name DESC'
"""

import re

from easydb.core.exceptions import InvalidIdentifier, InvalidOrderBy

_IDENTIFIER_PATTERN = re.compile(r"[a-zA-Z0-9_.]+")

_ORDER_BY_PATTERN = re.compile(r"[a-zA-Z0-9_.\s,]+(ASC|DESC)?", re.IGNORECASE)

# Raw projections: anything with whitespace, parentheses, commas or an alias.
_RAW_PROJECTION_PATTERN = re.compile(r"[\s(),]| AS ", re.IGNORECASE)

JOIN_TYPES = frozenset({"INNER", "LEFT", "RIGHT", "CROSS"})


def quote_identifier(name: str) -> str:
    """Wrap *name* in backticks, doubling embedded backticks."""
    return "`" + name.replace("`", "``") + "`"


def is_raw_projection(columns: str) -> bool:
    """True if *columns* looks like an expression (e.g. ``COUNT(*) AS total``)."""
    return bool(_RAW_PROJECTION_PATTERN.search(columns))


class IdentifierValidator:
    """Validates and quotes identifiers. Stateless; safe to reuse across statements."""

    def validate_identifier(self, raw: str) -> str:
        """Return the backtick-quoted form of *raw* or raise ``InvalidIdentifier``."""
        if not isinstance(raw, str):
            raise InvalidIdentifier(f"Invalid identifier: {raw!r}")
        if not _IDENTIFIER_PATTERN.fullmatch(raw):
            raise InvalidIdentifier(f"Invalid identifier: {raw!r}")
        return quote_identifier(raw)

    def validate_column_list(self, raw: str) -> str:
        """Validate each comma-separated part of *raw*; return them quoted and joined."""
        return ", ".join(self.validate_identifier(c.strip()) for c in raw.split(","))

    def validate_order_by(self, raw: str) -> str:
        if not isinstance(raw, str) or not _ORDER_BY_PATTERN.fullmatch(raw):
            raise InvalidOrderBy(f"Invalid ORDER BY clause: {raw!r}")
        return raw

    def validate_join_type(self, raw: str) -> str:
        join_type = raw.strip().upper() if isinstance(raw, str) else ""
        if join_type not in JOIN_TYPES:
            raise InvalidIdentifier(f"Invalid join type: {raw!r}")
        return join_type

    def reset(self) -> None:
        """No per-statement state to clear; kept so the facade can reset every component."""
