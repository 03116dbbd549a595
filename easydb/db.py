"""
Fluent DB facade.

    db = DB()
    rows = db.table("users").where("status", "active").order_by("name DESC").limit(10).run()

Every fluent call validates identifiers through ``IdentifierValidator`` and
records the clause on the ``StatementBuilder``. Terminal calls (``run``,
``first``, ``insert``, ``insert_get_id``, ``update``, ``delete``, the
aggregates, ``create_table``, ``drop_table``, ``paginate_json``) render the
statement, hand it to the executor and reset the builder, whether or not the
statement succeeded.

A validation error aborts the chain: it propagates and the partly built
statement is discarded.

Trust boundaries: ``select()`` with an expression (``COUNT(*) AS total``)
and the column definitions of ``create_table()`` are rendered as given.
"""

from __future__ import annotations

import functools
import json
import logging
from typing import Any, Callable, Mapping, TypeVar

from easydb.core.config import Settings, load_settings
from easydb.core.exceptions import EasyDBError, InvalidIdentifier
from easydb.engines.executor import MySQLExecutor, Rows, StatementExecutor
from easydb.engines.sql.builder import (
    RenderedStatement,
    StatementBuilder,
    aggregate_alias,
    render_create_table,
    render_drop_table,
)
from easydb.engines.sql.filters import escape_data
from easydb.engines.sql.safety import IdentifierValidator, is_raw_projection

_log = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _fluent(method: F) -> F:
    """Discard the statement under construction when a fluent call is rejected."""

    @functools.wraps(method)
    def wrapper(self: DB, *args: Any, **kwargs: Any) -> Any:
        try:
            return method(self, *args, **kwargs)
        except (EasyDBError, ValueError):
            self._reset_all()
            raise

    return wrapper  # type: ignore[return-value]


class DB:
    """
    Fluent MySQL statement builder and executor.

    - settings: connection settings; loaded from env / ``.env`` when omitted.
    - executor: anything implementing ``StatementExecutor``; a ``MySQLExecutor``
      is opened from *settings* when omitted (raises ``ConnectionFailure``).

    Not thread-safe. Use one instance per unit of work.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        executor: StatementExecutor | None = None,
    ) -> None:
        self.settings = settings if settings is not None else load_settings()
        self.debug = self.settings.DB_DEBUG
        self._validator = IdentifierValidator()
        self._builder = StatementBuilder()
        self._executor: StatementExecutor = (
            executor if executor is not None else MySQLExecutor(self.settings)
        )

    def _reset_all(self) -> None:
        self._builder.reset()
        self._validator.reset()

    def _execute(self, render: Callable[[], RenderedStatement], *, want_rows: bool = False) -> Any:
        try:
            stmt = render()
            return self._executor.execute(stmt.sql, stmt.params, want_rows)
        finally:
            self._reset_all()

    # ------------------------------------------------------------------
    # Fluent clauses
    # ------------------------------------------------------------------

    @_fluent
    def table(self, name: str) -> DB:
        self._builder.set_table(self._validator.validate_identifier(name))
        return self

    @_fluent
    def select(self, columns: str = "*") -> DB:
        """
        ``*``, a single column, or an expression.

        Anything containing whitespace, parentheses, commas or `` AS `` is an
        expression and is used as-is (``"id, name"``, ``"COUNT(*) AS total"``).
        """
        if not isinstance(columns, str):
            raise InvalidIdentifier(f"Invalid column list: {columns!r}")
        columns = columns.strip()
        if columns == "*":
            self._builder.set_columns("*")
        elif is_raw_projection(columns):
            self._builder.set_columns_raw(columns)
        else:
            self._builder.set_columns(self._validator.validate_column_list(columns))
        return self

    @_fluent
    def where(self, key: str | Mapping[str, Any], value: Any = None) -> DB:
        """``where("id", 1)`` or ``where({"id": 1, "status": "active"})``."""
        if isinstance(key, Mapping):
            for k, v in key.items():
                self._builder.add_where(self._validator.validate_identifier(k), v)
        else:
            self._builder.add_where(self._validator.validate_identifier(key), value)
        return self

    @_fluent
    def or_where(self, key: str, value: Any) -> DB:
        self._builder.add_or_where(self._validator.validate_identifier(key), value)
        return self

    @_fluent
    def where_in(self, column: str, values: list[Any] | tuple[Any, ...]) -> DB:
        self._builder.set_where_in(self._validator.validate_identifier(column), values)
        return self

    @_fluent
    def like(self, column: str, value: str) -> DB:
        """``column LIKE %value%``."""
        self._builder.set_like(self._validator.validate_identifier(column), value)
        return self

    @_fluent
    def between(self, column: str, start: Any, end: Any) -> DB:
        self._builder.set_between(self._validator.validate_identifier(column), start, end)
        return self

    @_fluent
    def group_by(self, column: str) -> DB:
        self._builder.set_group_by(self._validator.validate_identifier(column))
        return self

    @_fluent
    def order_by(self, column: str) -> DB:
        """e.g. ``"id DESC"`` or ``"name, created_at ASC"``."""
        self._builder.set_order_by(self._validator.validate_order_by(column))
        return self

    @_fluent
    def limit(self, limit: int) -> DB:
        self._builder.set_limit(limit)
        return self

    @_fluent
    def paginate(self, per_page: int, page: int) -> DB:
        """``LIMIT per_page OFFSET (page - 1) * per_page``; page is 1-based."""
        self._builder.set_pagination(per_page, page)
        return self

    @_fluent
    def join(self, table: str, main_key: str, foreign_key: str, type: str = "INNER") -> DB:
        v = self._validator
        self._builder.add_join(
            v.validate_identifier(table),
            v.validate_identifier(main_key),
            v.validate_identifier(foreign_key),
            v.validate_join_type(type),
        )
        return self

    def left_join(self, table: str, main_key: str, foreign_key: str) -> DB:
        return self.join(table, main_key, foreign_key, "LEFT")

    def right_join(self, table: str, main_key: str, foreign_key: str) -> DB:
        return self.join(table, main_key, foreign_key, "RIGHT")

    # ------------------------------------------------------------------
    # Terminal operations
    # ------------------------------------------------------------------

    def to_sql(self) -> RenderedStatement:
        """Render the current SELECT without running it or resetting state."""
        return self._builder.build_select()

    def run(self) -> Rows | bool:
        """Run the SELECT; rows, or ``False`` if execution failed."""
        return self._execute(self._builder.build_select, want_rows=True)

    def first(self) -> dict[str, Any] | None:
        self.limit(1)
        rows = self.run()
        return rows[0] if rows else None

    def _quote_data(self, data: Mapping[str, Any]) -> dict[str, Any]:
        escaped = escape_data(dict(data))
        return {self._validator.validate_identifier(k): v for k, v in escaped.items()}

    def insert(self, data: Mapping[str, Any]) -> bool:
        return self._execute(lambda: self._builder.build_insert(self._quote_data(data)))

    def insert_get_id(self, data: Mapping[str, Any]) -> int | None:
        """Insert and return the new row id, or ``None`` if the insert failed."""
        ok = self.insert(data)
        return self._executor.last_insert_id() if ok else None

    def update(self, data: Mapping[str, Any]) -> bool:
        """Update rows matching the WHERE clause."""
        return self._execute(lambda: self._builder.build_update(self._quote_data(data)))

    def delete(self) -> bool:
        return self._execute(self._builder.build_delete)

    def _aggregate(self, func: str, column: str) -> Any:
        def render() -> RenderedStatement:
            col = "*" if column == "*" else self._validator.validate_identifier(column)
            return self._builder.build_aggregate(func, col)

        rows = self._execute(render, want_rows=True)
        if not rows:
            return None
        return rows[0].get(aggregate_alias(func))

    def count(self, column: str = "*") -> int:
        value = self._aggregate("COUNT", column)
        return int(value) if value is not None else 0

    def sum(self, column: str) -> float:
        value = self._aggregate("SUM", column)
        return float(value) if value is not None else 0.0

    def avg(self, column: str) -> float:
        value = self._aggregate("AVG", column)
        return float(value) if value is not None else 0.0

    def min(self, column: str) -> float:
        value = self._aggregate("MIN", column)
        return float(value) if value is not None else 0.0

    def max(self, column: str) -> float:
        value = self._aggregate("MAX", column)
        return float(value) if value is not None else 0.0

    def create_table(self, table_name: str, columns_definition: Mapping[str, str]) -> bool:
        """``CREATE TABLE IF NOT EXISTS``; definitions such as ``INT PRIMARY KEY`` are trusted."""

        def render() -> RenderedStatement:
            v = self._validator
            definitions = {v.validate_identifier(c): d for c, d in columns_definition.items()}
            return render_create_table(v.validate_identifier(table_name), definitions)

        return self._execute(render)

    def drop_table(self, table_name: str) -> bool:
        return self._execute(
            lambda: render_drop_table(self._validator.validate_identifier(table_name))
        )

    def paginate_json(self) -> str:
        """JSON envelope ``{"page", "per_page", "results"}`` for the current SELECT."""
        spec = self._builder.spec
        results = self.run()
        return json.dumps(
            {"page": spec.page, "per_page": spec.per_page, "results": results},
            default=str,
        )

    def close(self) -> None:
        self._executor.close()
