"""
SQL statement building.

Exports: IdentifierValidator, StatementBuilder, QuerySpec, RenderedStatement.
"""

from easydb.engines.sql.builder import QuerySpec, RenderedStatement, StatementBuilder
from easydb.engines.sql.safety import IdentifierValidator

__all__ = [
    "IdentifierValidator",
    "StatementBuilder",
    "QuerySpec",
    "RenderedStatement",
]
