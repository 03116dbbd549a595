"""
MySQL connection helpers.

Uses pymysql. ``connect`` opens a connection from ``Settings`` (or a dict with
the same keys), ``execute`` runs one statement with positional parameters and
returns the cursor, ``cursor_to_dicts`` turns a result set into rows.
"""

from typing import Any, Sequence

import pymysql

from easydb.core.config import Settings


def _get(settings: Any, key: str) -> Any:
    """Get attribute or dict key from Settings, dict, or any object."""
    if isinstance(settings, dict):
        return settings.get(key)
    return getattr(settings, key, None)


def connect(settings: Settings | dict[str, Any]) -> Any:
    """
    Open a connection to the MySQL server described by *settings*.

    Requires DB_HOST, DB_NAME and DB_USER; DB_PASS defaults to empty.
    Raises ValueError when a required key is missing and lets pymysql errors
    propagate when the server cannot be reached.
    """
    host = _get(settings, "DB_HOST")
    database = _get(settings, "DB_NAME")
    username = _get(settings, "DB_USER")
    password = _get(settings, "DB_PASS")

    for name, val in [
        ("DB_HOST", host),
        ("DB_NAME", database),
        ("DB_USER", username),
    ]:
        if val is None:
            raise ValueError(f"settings must provide {name}")
    password = password if password is not None else ""

    return pymysql.connect(
        host=host,
        port=int(_get(settings, "DB_PORT") or 3306),
        database=database,
        user=username,
        password=password,
        charset=_get(settings, "DB_CHARSET") or "utf8mb4",
        connect_timeout=int(_get(settings, "DB_CONNECT_TIMEOUT") or 10),
        autocommit=True,
    )


def to_pyformat(sql: str) -> str:
    """
    Translate ``?`` placeholders into pymysql's ``%s`` and double literal ``%``.

    ``?`` inside quoted strings or backtick identifiers is left alone; ``%`` is
    doubled everywhere because pymysql formats the whole query string.
    """
    out: list[str] = []
    i = 0
    length = len(sql)

    while i < length:
        ch = sql[i]

        if ch in ("'", '"', "`"):
            quote = ch
            out.append(ch)
            i += 1
            while i < length:
                c = sql[i]
                if c == "%":
                    out.append("%%")
                    i += 1
                    continue
                out.append(c)
                if c == quote:
                    i += 1
                    break
                if c == "\\" and quote != "`" and i + 1 < length:
                    nxt = sql[i + 1]
                    out.append("%%" if nxt == "%" else nxt)
                    i += 2
                    continue
                i += 1
            continue

        if ch == "?":
            out.append("%s")
        elif ch == "%":
            out.append("%%")
        else:
            out.append(ch)
        i += 1

    return "".join(out)


def execute(
    conn: Any,
    sql: str,
    params: Sequence[Any] | None = None,
    *,
    statement_timeout: int | None = None,
) -> Any:
    """
    Execute *sql* with positional *params* and return the cursor.

    *sql* uses ``?`` placeholders. When *statement_timeout* (ms) is set it is
    applied with ``max_execution_time`` before the query and reset after.
    """
    if statement_timeout:
        cur_set = conn.cursor()
        try:
            cur_set.execute("SET SESSION max_execution_time = %s", (int(statement_timeout),))
        finally:
            cur_set.close()

    cur = conn.cursor()
    try:
        if params:
            cur.execute(to_pyformat(sql), tuple(params))
        else:
            cur.execute(sql)
    except BaseException:
        cur.close()
        raise
    finally:
        if statement_timeout:
            try:
                cur_reset = conn.cursor()
                cur_reset.execute("SET SESSION max_execution_time = 0")
                cur_reset.close()
            except pymysql.Error:
                pass

    return cur


def cursor_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert cursor result to list of dicts."""
    desc = cursor.description
    if not desc:
        return []
    names = [d[0] for d in desc]
    return [dict(zip(names, row, strict=True)) for row in cursor.fetchall()]
