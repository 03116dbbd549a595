"""
Statement engines: SQL building (engines.sql) and execution (engines.executor).
"""

from easydb.engines.executor import MySQLExecutor, StatementExecutor

__all__ = [
    "MySQLExecutor",
    "StatementExecutor",
]
