"""Unit tests for engines.sql.filters."""

from easydb.engines.sql.filters import escape_data, escape_for_output, like_pattern, placeholders


class TestEscapeForOutput:
    def test_html_and_quotes(self):
        assert escape_for_output("<b>\"x\" & 'y'</b>") == (
            "&lt;b&gt;&quot;x&quot; &amp; &#x27;y&#x27;&lt;/b&gt;"
        )

    def test_plain_string_unchanged(self):
        assert escape_for_output("hello") == "hello"

    def test_non_string_passthrough(self):
        assert escape_for_output(42) == 42
        assert escape_for_output(None) is None
        assert escape_for_output(b"<x>") == b"<x>"


def test_escape_data_keeps_keys_and_order():
    out = escape_data({"b": "<", "a": 1})
    assert list(out) == ["b", "a"]
    assert out == {"b": "&lt;", "a": 1}


def test_like_pattern():
    assert like_pattern("john") == "%john%"
    assert like_pattern("50%") == "%50%%"


def test_placeholders():
    assert placeholders(1) == "?"
    assert placeholders(3) == "?, ?, ?"
    assert placeholders(0) == ""
