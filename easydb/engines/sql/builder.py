"""
Statement builder: query specification + renderers.

A ``QuerySpec`` is an immutable description of the statement under
construction. The ``with_*`` helpers return a new spec; the ``render_*``
functions turn a spec into a ``RenderedStatement`` (SQL text with ``?``
placeholders plus the ordered parameter tuple).

Identifiers handed to this module must already be validated and quoted
(see ``engines.sql.safety``); values are coerced to ``SqlValue`` here.

Each WHERE fragment carries its own bound values. ``render_where`` collects
the values while it emits the fragments, so the parameter tuple always lines
up with the placeholders left to right, whatever order the fragments were
added in.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, NamedTuple

from easydb.core.exceptions import InvalidValue, MissingTable
from easydb.core.param_type import SqlValue, coerce_value, coerce_values
from easydb.engines.sql.filters import like_pattern, placeholders

AGGREGATE_FUNCTIONS = frozenset({"COUNT", "SUM", "AVG", "MIN", "MAX"})


class Predicate(NamedTuple):
    sql: str
    params: tuple[SqlValue, ...] = ()


class Join(NamedTuple):
    type: str
    table: str
    main_key: str
    foreign_key: str


class RenderedStatement(NamedTuple):
    sql: str
    params: tuple[SqlValue, ...] = ()


class QuerySpec(NamedTuple):
    table: str = ""
    columns: str = "*"
    where: tuple[Predicate, ...] = ()
    or_where: tuple[Predicate, ...] = ()
    where_in: Predicate | None = None
    like: Predicate | None = None
    between: Predicate | None = None
    joins: tuple[Join, ...] = ()
    group_by: str = ""
    order_by: str = ""
    limit: int | None = None
    offset: int | None = None
    page: int = 0
    per_page: int = 0


EMPTY_SPEC = QuerySpec()


# ---------------------------------------------------------------------------
# Spec transformations
# ---------------------------------------------------------------------------


def with_where(spec: QuerySpec, column: str, value: Any) -> QuerySpec:
    return spec._replace(where=spec.where + (Predicate(f"{column} = ?", (coerce_value(value),)),))


def with_or_where(spec: QuerySpec, column: str, value: Any) -> QuerySpec:
    return spec._replace(
        or_where=spec.or_where + (Predicate(f"{column} = ?", (coerce_value(value),)),)
    )


def with_where_in(spec: QuerySpec, column: str, values: Iterable[Any]) -> QuerySpec:
    params = coerce_values(values)
    if not params:
        # IN () is a syntax error; an empty list matches nothing.
        return spec._replace(where_in=Predicate("1 = 0"))
    return spec._replace(where_in=Predicate(f"{column} IN ({placeholders(len(params))})", params))


def with_like(spec: QuerySpec, column: str, value: Any) -> QuerySpec:
    term = coerce_value(value)
    if term is None or isinstance(term, (bool, bytes)):
        raise InvalidValue(f"LIKE pattern must be text or a number, got {type(term).__name__}")
    return spec._replace(like=Predicate(f"{column} LIKE ?", (like_pattern(term),)))


def with_between(spec: QuerySpec, column: str, start: Any, end: Any) -> QuerySpec:
    return spec._replace(
        between=Predicate(f"{column} BETWEEN ? AND ?", (coerce_value(start), coerce_value(end)))
    )


def with_limit(spec: QuerySpec, limit: int) -> QuerySpec:
    limit = int(limit)
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    return spec._replace(limit=limit, offset=None, page=0, per_page=0)


def with_pagination(spec: QuerySpec, per_page: int, page: int) -> QuerySpec:
    per_page, page = int(per_page), int(page)
    if per_page < 1:
        raise ValueError(f"per_page must be >= 1, got {per_page}")
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    return spec._replace(
        limit=per_page,
        offset=(page - 1) * per_page,
        page=page,
        per_page=per_page,
    )


def with_join(
    spec: QuerySpec, table: str, main_key: str, foreign_key: str, join_type: str = "INNER"
) -> QuerySpec:
    return spec._replace(joins=spec.joins + (Join(join_type, table, main_key, foreign_key),))


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------


def _require_table(spec: QuerySpec) -> str:
    if not spec.table:
        raise MissingTable("No table selected; call table() first")
    return spec.table


def render_where(spec: QuerySpec) -> RenderedStatement:
    """
    Build `` WHERE ...`` and its bindings.

    Order: AND terms, the OR group, IN, LIKE, BETWEEN; all joined with AND.
    Empty string and no params when nothing is set.
    """
    clauses: list[str] = []
    params: list[SqlValue] = []

    if spec.where:
        clauses.append(" AND ".join(p.sql for p in spec.where))
        params.extend(v for p in spec.where for v in p.params)

    extras = [p for p in (spec.where_in, spec.like, spec.between) if p is not None]

    if spec.or_where:
        group = " OR ".join(p.sql for p in spec.or_where)
        if len(spec.or_where) > 1 and (spec.where or extras):
            group = f"({group})"
        clauses.append(group)
        params.extend(v for p in spec.or_where for v in p.params)

    for p in extras:
        clauses.append(p.sql)
        params.extend(p.params)

    if not clauses:
        return RenderedStatement("")
    return RenderedStatement(" WHERE " + " AND ".join(clauses), tuple(params))


def render_joins(spec: QuerySpec) -> str:
    return "".join(
        f" {j.type} JOIN {j.table} ON {j.main_key} = {j.foreign_key}" for j in spec.joins
    )


def render_limit(spec: QuerySpec) -> str:
    if spec.limit is None:
        return ""
    if spec.offset is None:
        return f" LIMIT {spec.limit}"
    return f" LIMIT {spec.limit} OFFSET {spec.offset}"


def render_select(spec: QuerySpec) -> RenderedStatement:
    table = _require_table(spec)
    where = render_where(spec)
    group_by = f" GROUP BY {spec.group_by}" if spec.group_by else ""
    order_by = f" ORDER BY {spec.order_by}" if spec.order_by else ""
    sql = (
        f"SELECT {spec.columns} FROM {table} {render_joins(spec)}"
        f"{where.sql}{group_by}{order_by}{render_limit(spec)}"
    )
    return RenderedStatement(sql, where.params)


def render_insert(spec: QuerySpec, data: Mapping[str, Any]) -> RenderedStatement:
    """*data* keys are quoted identifiers; params follow the key order."""
    table = _require_table(spec)
    if not data:
        raise ValueError("insert requires at least one column")
    columns = ", ".join(data.keys())
    sql = f"INSERT INTO {table} ({columns}) VALUES ({placeholders(len(data))})"
    return RenderedStatement(sql, coerce_values(data.values()))


def render_update(spec: QuerySpec, data: Mapping[str, Any]) -> RenderedStatement:
    """SET values first, then WHERE bindings."""
    table = _require_table(spec)
    if not data:
        raise ValueError("update requires at least one column")
    updates = ", ".join(f"{k} = ?" for k in data.keys())
    where = render_where(spec)
    sql = f"UPDATE {table} SET {updates}{where.sql}"
    return RenderedStatement(sql, coerce_values(data.values()) + where.params)


def render_delete(spec: QuerySpec) -> RenderedStatement:
    table = _require_table(spec)
    where = render_where(spec)
    return RenderedStatement(f"DELETE FROM {table}{where.sql}", where.params)


def aggregate_alias(func: str) -> str:
    func = func.lower()
    return "total" if func == "count" else func


def render_aggregate(spec: QuerySpec, func: str, column: str) -> RenderedStatement:
    """``SELECT FUNC(column) AS alias FROM ...``; alias from ``aggregate_alias``."""
    func = func.upper()
    if func not in AGGREGATE_FUNCTIONS:
        raise ValueError(f"Unsupported aggregate function: {func}")
    table = _require_table(spec)
    where = render_where(spec)
    sql = (
        f"SELECT {func}({column}) AS {aggregate_alias(func)} FROM {table} "
        f"{render_joins(spec)}{where.sql}"
    )
    return RenderedStatement(sql, where.params)


def render_create_table(table: str, definitions: Mapping[str, str]) -> RenderedStatement:
    """
    *table* and the keys of *definitions* are quoted identifiers; the
    definitions themselves (``INT PRIMARY KEY`` etc.) are trusted and
    rendered as given.
    """
    if not definitions:
        raise ValueError("create_table requires at least one column definition")
    columns = ", ".join(f"{col} {definition}" for col, definition in definitions.items())
    return RenderedStatement(
        f"CREATE TABLE IF NOT EXISTS {table} ({columns}) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4"
    )


def render_drop_table(table: str) -> RenderedStatement:
    return RenderedStatement(f"DROP TABLE IF EXISTS {table}")


# ---------------------------------------------------------------------------
# Mutable holder used by the DB facade
# ---------------------------------------------------------------------------


class StatementBuilder:
    """
    Holds the current ``QuerySpec`` for one DB instance.

    Not thread-safe: use one builder (one DB) per unit of work.
    """

    def __init__(self) -> None:
        self.spec: QuerySpec = EMPTY_SPEC

    def reset(self) -> None:
        self.spec = EMPTY_SPEC

    def set_table(self, table: str) -> None:
        self.spec = self.spec._replace(table=table)

    def set_columns(self, columns: str) -> None:
        self.spec = self.spec._replace(columns=columns)

    def set_columns_raw(self, raw: str) -> None:
        # Trusted expression (e.g. "COUNT(*) AS total"): not validated.
        self.spec = self.spec._replace(columns=raw)

    def add_where(self, column: str, value: Any) -> None:
        self.spec = with_where(self.spec, column, value)

    def add_or_where(self, column: str, value: Any) -> None:
        self.spec = with_or_where(self.spec, column, value)

    def set_where_in(self, column: str, values: Iterable[Any]) -> None:
        self.spec = with_where_in(self.spec, column, values)

    def set_like(self, column: str, value: Any) -> None:
        self.spec = with_like(self.spec, column, value)

    def set_between(self, column: str, start: Any, end: Any) -> None:
        self.spec = with_between(self.spec, column, start, end)

    def set_group_by(self, group_by: str) -> None:
        self.spec = self.spec._replace(group_by=group_by)

    def set_order_by(self, order_by: str) -> None:
        self.spec = self.spec._replace(order_by=order_by)

    def set_limit(self, limit: int) -> None:
        self.spec = with_limit(self.spec, limit)

    def set_pagination(self, per_page: int, page: int) -> None:
        self.spec = with_pagination(self.spec, per_page, page)

    def add_join(self, table: str, main_key: str, foreign_key: str, join_type: str) -> None:
        self.spec = with_join(self.spec, table, main_key, foreign_key, join_type)

    def build_select(self) -> RenderedStatement:
        return render_select(self.spec)

    def build_insert(self, data: Mapping[str, Any]) -> RenderedStatement:
        return render_insert(self.spec, data)

    def build_update(self, data: Mapping[str, Any]) -> RenderedStatement:
        return render_update(self.spec, data)

    def build_delete(self) -> RenderedStatement:
        return render_delete(self.spec)

    def build_aggregate(self, func: str, column: str) -> RenderedStatement:
        return render_aggregate(self.spec, func, column)
