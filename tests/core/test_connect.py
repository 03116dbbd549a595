"""Unit tests for core.connect — pymysql connection and execution helpers."""

from unittest.mock import MagicMock, call, patch

import pymysql
import pytest

from easydb.core.config import Settings
from easydb.core.connect import connect, cursor_to_dicts, execute, to_pyformat


def _settings(**overrides) -> Settings:
    values = {
        "DB_HOST": "localhost",
        "DB_NAME": "app",
        "DB_USER": "app",
        "DB_PASS": "secret",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestConnect:
    @patch("easydb.core.connect.pymysql.connect")
    def test_uses_settings(self, mock_connect: MagicMock) -> None:
        conn = connect(_settings(DB_PORT=3307))
        assert conn is mock_connect.return_value
        mock_connect.assert_called_once_with(
            host="localhost",
            port=3307,
            database="app",
            user="app",
            password="secret",
            charset="utf8mb4",
            connect_timeout=10,
            autocommit=True,
        )

    @patch("easydb.core.connect.pymysql.connect")
    def test_accepts_dict_and_defaults_password(self, mock_connect: MagicMock) -> None:
        connect({"DB_HOST": "h", "DB_NAME": "d", "DB_USER": "u"})
        kwargs = mock_connect.call_args.kwargs
        assert kwargs["password"] == ""
        assert kwargs["port"] == 3306

    @pytest.mark.parametrize("missing", ["DB_HOST", "DB_NAME", "DB_USER"])
    @patch("easydb.core.connect.pymysql.connect")
    def test_missing_required_key(self, mock_connect: MagicMock, missing: str) -> None:
        params = {"DB_HOST": "h", "DB_NAME": "d", "DB_USER": "u"}
        del params[missing]
        with pytest.raises(ValueError, match=missing):
            connect(params)
        mock_connect.assert_not_called()


class TestToPyformat:
    def test_placeholders(self):
        assert to_pyformat("SELECT * FROM t WHERE a = ? AND b = ?") == (
            "SELECT * FROM t WHERE a = %s AND b = %s"
        )

    def test_percent_doubled(self):
        assert to_pyformat("SELECT DATE_FORMAT(d, '%Y') FROM t WHERE a LIKE ?") == (
            "SELECT DATE_FORMAT(d, '%%Y') FROM t WHERE a LIKE %s"
        )

    def test_question_mark_in_string_literal_kept(self):
        assert to_pyformat("SELECT 'why?' FROM t WHERE a = ?") == "SELECT 'why?' FROM t WHERE a = %s"

    def test_question_mark_in_backticks_kept(self):
        assert to_pyformat("SELECT `a?` FROM t") == "SELECT `a?` FROM t"

    def test_escaped_quote_in_literal(self):
        assert to_pyformat("SELECT 'it\\'s?' , ?") == "SELECT 'it\\'s?' , %s"

    def test_doubled_quote_in_literal(self):
        assert to_pyformat("SELECT 'it''s?', ?") == "SELECT 'it''s?', %s"


class TestExecute:
    def test_with_params_translates_placeholders(self):
        conn = MagicMock()
        cur = execute(conn, "SELECT * FROM t WHERE a = ?", ("x",))
        assert cur is conn.cursor.return_value
        cur.execute.assert_called_once_with("SELECT * FROM t WHERE a = %s", ("x",))

    def test_without_params_runs_sql_unchanged(self):
        conn = MagicMock()
        cur = execute(conn, "DROP TABLE IF EXISTS `t`", ())
        cur.execute.assert_called_once_with("DROP TABLE IF EXISTS `t`")

    def test_statement_timeout_set_and_reset(self):
        conn = MagicMock()
        cur = conn.cursor.return_value
        execute(conn, "SELECT 1", None, statement_timeout=500)
        assert cur.execute.call_args_list == [
            call("SET SESSION max_execution_time = %s", (500,)),
            call("SELECT 1"),
            call("SET SESSION max_execution_time = 0"),
        ]

    def test_error_propagates(self):
        conn = MagicMock()
        conn.cursor.return_value.execute.side_effect = pymysql.err.ProgrammingError(1064, "syntax")
        with pytest.raises(pymysql.err.ProgrammingError):
            execute(conn, "SELEC 1")
        conn.cursor.return_value.close.assert_called_once()


class TestCursorToDicts:
    def test_rows(self):
        cur = MagicMock()
        cur.description = [("id",), ("name",)]
        cur.fetchall.return_value = [(1, "a"), (2, "b")]
        assert cursor_to_dicts(cur) == [{"id": 1, "name": "a"}, {"id": 2, "name": "b"}]

    def test_no_description(self):
        cur = MagicMock()
        cur.description = None
        assert cursor_to_dicts(cur) == []
