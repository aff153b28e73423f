import pytest

from jsdocgen.errors import UnbalancedSyntax
from jsdocgen.lexer import (
    LineIndex,
    check_balanced,
    indentation_of,
    normalize_text,
    skip_trivia,
)
from jsdocgen.models import TextPosition


def test_line_index_round_trips_positions():
    text = "ab\r\n  cd\nlast"
    lines = LineIndex(text)

    assert lines.line_count == 3
    assert lines.line_text(0) == "ab"
    assert lines.line_text(1) == "  cd"
    assert lines.line_text(2) == "last"
    assert lines.position_at(text.index("cd")) == TextPosition(line=1, character=2)
    assert lines.offset_at(TextPosition(line=1, character=2)) == text.index("cd")
    # columns past the end of a line clamp to the line end
    assert lines.offset_at(TextPosition(line=0, character=99)) == 2


def test_skip_trivia_skips_comments_and_blank_lines():
    text = "  // one\n\n  /* two */\n  function f() {}"
    assert skip_trivia(text, 0) == text.index("function")
    assert skip_trivia("/* never closed", 0) == len("/* never closed")


def test_check_balanced_accepts_nested_and_quoted_brackets():
    text = "function f(a = foo(1, [2]), b = ')', { c } = {}) {"
    check_balanced(text, 0, text.index(" {", len(text) - 3))


@pytest.mark.parametrize(
    "header",
    [
        "function f(a, b {",
        "function f(a, b)) {",
        "function f(a, [b) {",
    ],
)
def test_check_balanced_rejects_broken_headers(header):
    with pytest.raises(UnbalancedSyntax):
        check_balanced(header, 0, len(header) - 1, line=3)


def test_text_helpers():
    assert indentation_of("\t  x = 1") == "\t  "
    assert normalize_text("  Record<\n  string,   number>\n") == "Record< string, number>"
    assert normalize_text("   ") is None
    assert normalize_text(None) is None


@pytest.mark.parametrize(
    "text, newline",
    [("a\r\nb\n", "\r\n"), ("a\nb\r\n", "\n"), ("single", "\n"), ("\r\n", "\r\n")],
)
def test_line_index_reports_the_documents_line_break(text, newline):
    assert LineIndex(text).newline == newline
