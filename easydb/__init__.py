"""
easydb — fluent, parameterized MySQL statement builder and executor.
"""

from easydb.core.config import Settings, load_settings
from easydb.core.exceptions import (
    ConnectionFailure,
    EasyDBError,
    ExecutionFailure,
    InvalidIdentifier,
    InvalidOrderBy,
    InvalidValue,
    MissingTable,
)
from easydb.db import DB
from easydb.engines.sql import IdentifierValidator, QuerySpec, RenderedStatement, StatementBuilder

__all__ = [
    "DB",
    "Settings",
    "load_settings",
    "IdentifierValidator",
    "StatementBuilder",
    "QuerySpec",
    "RenderedStatement",
    "EasyDBError",
    "InvalidIdentifier",
    "InvalidOrderBy",
    "InvalidValue",
    "MissingTable",
    "ExecutionFailure",
    "ConnectionFailure",
]
