"""
Statement executor.

``StatementExecutor`` is the contract the DB facade depends on:
``execute(sql, params, want_rows)`` returns rows (``want_rows=True``), ``True``
on success otherwise, and ``False`` on any failure; ``last_insert_id()`` is
valid right after a successful INSERT.

``MySQLExecutor`` implements it with pymysql via ``core.connect``. Driver
errors are wrapped in ``ExecutionFailure``, logged, and reported as ``False``;
the failure stays available on ``last_error``.
"""

import logging
from typing import Any, Protocol, Sequence

import pymysql

from easydb.core.config import Settings
from easydb.core.connect import connect, cursor_to_dicts, execute
from easydb.core.exceptions import ConnectionFailure, ExecutionFailure

_log = logging.getLogger(__name__)

Rows = list[dict[str, Any]]


class StatementExecutor(Protocol):
    def execute(
        self, sql: str, params: Sequence[Any] = (), want_rows: bool = False
    ) -> Rows | bool: ...

    def last_insert_id(self) -> int: ...

    def close(self) -> None: ...


class MySQLExecutor:
    """
    Runs rendered statements on one pymysql connection (autocommit).

    Opening the connection happens in ``__init__``; failure raises
    ``ConnectionFailure`` and leaves the decision to retry or abort to the caller.
    """

    def __init__(self, settings: Settings, *, connection: Any = None) -> None:
        self.debug = bool(settings.DB_DEBUG)
        self.statement_timeout = settings.DB_STATEMENT_TIMEOUT
        self.last_error: ExecutionFailure | None = None
        if connection is not None:
            self._conn = connection
            return
        try:
            self._conn = connect(settings)
        except ValueError as e:
            _log.error("DB configuration incomplete: %s", e)
            raise ConnectionFailure(f"DB connection failed: {e}") from e
        except pymysql.Error as e:
            _log.error("DB connection failed: %s", e)
            raise ConnectionFailure(f"DB connection failed: {e}") from e

    def _log_statement(self, sql: str, params: Sequence[Any]) -> None:
        level = logging.INFO if self.debug else logging.DEBUG
        _log.log(level, "SQL: %s | bindings: %r", sql, tuple(params))

    def _run(self, sql: str, params: Sequence[Any], want_rows: bool) -> Rows | bool:
        cur = None
        try:
            cur = execute(self._conn, sql, params, statement_timeout=self.statement_timeout)
            self._log_statement(sql, params)
            return cursor_to_dicts(cur) if want_rows else True
        except pymysql.Error as e:
            raise ExecutionFailure(str(e), sql=sql, params=tuple(params)) from e
        finally:
            if cur is not None:
                cur.close()

    def execute(
        self, sql: str, params: Sequence[Any] = (), want_rows: bool = False
    ) -> Rows | bool:
        """Run *sql*; rows, ``True`` or ``False`` on failure (see module docstring)."""
        self.last_error = None
        try:
            return self._run(sql, params, want_rows)
        except ExecutionFailure as e:
            self.last_error = e
            if self.debug:
                _log.error("SQL execution failed: %s. SQL: %s | bindings: %r", e, sql, tuple(params))
            else:
                _log.error("SQL execution failed: %s", e)
            return False

    def last_insert_id(self) -> int:
        return int(self._conn.insert_id())

    def close(self) -> None:
        try:
            self._conn.close()
        except pymysql.Error:
            _log.warning("Error while closing DB connection", exc_info=True)
