import threading
from pathlib import Path

import pytest

from jsdocgen.errors import NoActiveTarget, UnbalancedSyntax
from jsdocgen.generator import JsdocGenerator
from jsdocgen.scanner import (
    WORKSPACE_UNAVAILABLE,
    apply_edits,
    generate_for_file,
    generate_for_workspace,
)
from jsdocgen.settings import RenderConfig


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------
SAMPLES = Path(__file__).parent / "lang"

THREE_FUNCTIONS = """function first(a) {
  return a;
}

function second(b) {
  return b;
}

function third(c) {
  return c;
}
"""


def _sample(rel: str) -> str:
    return (SAMPLES / rel).read_text(encoding="utf-8")


class _FailingGenerator(JsdocGenerator):
    """Raises for one declaration name to simulate a malformed site."""

    def __init__(self, failing: str, **kw) -> None:
        super().__init__(**kw)
        self.failing = failing

    def build_edit(self, parser, site, **kw):
        edit = super().build_edit(parser, site, **kw)
        if edit.name == self.failing:
            raise UnbalancedSyntax("Declaration brackets never balance", line=site.line)
        return edit


class _CancelAfterFirst(JsdocGenerator):
    def __init__(self, event: threading.Event) -> None:
        super().__init__()
        self.event = event

    def build_edit(self, parser, site, **kw):
        edit = super().build_edit(parser, site, **kw)
        self.event.set()
        return edit


# ---------------------------------------------------------------------------
# tests
# ---------------------------------------------------------------------------
def test_generate_for_file_documents_every_declaration():
    result = generate_for_file(THREE_FUNCTIONS)

    assert [e.name for e in result.edits] == ["first", "second", "third"]
    assert result.skipped_count == 0
    assert result.cancelled is False

    documented = apply_edits(THREE_FUNCTIONS, result.edits)
    assert documented.count("/**") == 3
    assert " * @returns {*} [description]\n */\nfunction second(b) {" in documented


def test_edits_are_ordered_and_disjoint():
    text = _sample("typescript/samples/shapes.ts")
    edits = generate_for_file(text, path="shapes.ts").edits

    starts = [e.span.start_offset for e in edits]
    assert starts == sorted(starts)
    for prev, cur in zip(edits, edits[1:]):
        assert prev.span.end_offset <= cur.span.start_offset


@pytest.mark.parametrize(
    "rel, config",
    [
        ("typescript/samples/shapes.ts", {}),
        ("typescript/samples/shapes.ts", {"align_tags": True, "include_properties": True}),
        ("javascript/samples/cache.js", {}),
        ("javascript/samples/cache.js", {"document_throws": True, "single_line_trivial": True}),
    ],
)
def test_batch_generation_is_idempotent(rel, config):
    text = _sample(rel)
    cfg = RenderConfig(**config)

    once = apply_edits(text, generate_for_file(text, cfg, path=rel).edits)
    twice = apply_edits(once, generate_for_file(once, cfg, path=rel).edits)

    assert once != text
    assert twice == once


def test_failing_declarations_are_counted_as_skips():
    result = generate_for_file(THREE_FUNCTIONS, generator=_FailingGenerator("second"))

    assert [e.name for e in result.edits] == ["first", "third"]
    assert result.skipped_count == 1
    skipped = result.skipped[0]
    assert skipped.line == 4
    assert skipped.name == "second"
    assert skipped.reason == "UnbalancedSyntax"


def test_malformed_declaration_does_not_stop_the_batch():
    text = (
        "function good(a) {\n"
        "  return a;\n"
        "}\n"
        "\n"
        "function broken(a, b {\n"
        "  return a;\n"
        "}\n"
    )
    result = generate_for_file(text, path="broken.js")

    assert [e.name for e in result.edits] == ["good"]
    assert result.skipped_count == 1
    assert result.skipped[0].line == 4


def test_cancellation_returns_edits_so_far():
    event = threading.Event()
    result = generate_for_file(THREE_FUNCTIONS, cancel=event, generator=_CancelAfterFirst(event))

    assert result.cancelled is True
    assert [e.name for e in result.edits] == ["first"]

    event = threading.Event()
    event.set()
    assert generate_for_file(THREE_FUNCTIONS, cancel=event).edits == []


def test_declarations_sharing_a_line_are_skipped():
    text = "const a = 1; function f() {}\n"
    result = generate_for_file(text)

    assert [e.name for e in result.edits] == ["a"]
    assert result.skipped_count == 0


def test_apply_edits_rejects_overlaps():
    edits = generate_for_file(THREE_FUNCTIONS).edits
    with pytest.raises(ValueError):
        apply_edits(THREE_FUNCTIONS, [edits[0], edits[0]])


def test_no_text_and_workspace_stub():
    with pytest.raises(NoActiveTarget):
        generate_for_file(None)
    assert generate_for_workspace() == WORKSPACE_UNAVAILABLE


def test_nested_declarations_are_documented():
    text = (
        "function outer() {\n"
        "  function inner(a) {\n"
        "    return a;\n"
        "  }\n"
        "  return inner;\n"
        "}\n"
    )
    result = generate_for_file(text)

    assert [e.name for e in result.edits] == ["outer", "inner"]
    documented = apply_edits(text, result.edits)
    assert "   */\n  function inner(a) {" in documented


MALFORMED = (
    "function good(a) {\n"
    "  return a;\n"
    "}\n"
    "\n"
    "function broken(a, b {\n"
    "  return a;\n"
    "}\n"
)


@pytest.mark.parametrize(
    "text, path",
    [
        (THREE_FUNCTIONS, "three.js"),
        (MALFORMED, "malformed.js"),
        (_sample("javascript/samples/cache.js"), "cache.js"),
        (_sample("typescript/samples/shapes.ts"), "shapes.ts"),
    ],
)
def test_text_outside_edit_spans_is_unchanged(text, path):
    edits = generate_for_file(text, path=path).edits
    out = apply_edits(text, edits)

    pos = 0
    prev_end = 0
    for edit in edits:
        untouched = text[prev_end : edit.span.start_offset]
        assert out[pos : pos + len(untouched)] == untouched
        pos += len(untouched)
        assert out[pos : pos + len(edit.text)] == edit.text
        pos += len(edit.text)
        prev_end = edit.span.end_offset
    assert out[pos:] == text[prev_end:]


def test_malformed_file_keeps_the_broken_declaration_verbatim():
    result = generate_for_file(MALFORMED, path="malformed.js")
    out = apply_edits(MALFORMED, result.edits)

    assert result.skipped_count == 1
    assert out.endswith("\n\nfunction broken(a, b {\n  return a;\n}\n")
    assert out.count("/**") == 1


def test_crlf_documents_keep_their_line_breaks():
    text = (
        "function g() {}\r\n"
        "\r\n"
        "class K {\r\n"
        "  run(a) {\r\n"
        "    return a;\r\n"
        "  }\r\n"
        "}\r\n"
    )
    out = apply_edits(text, generate_for_file(text, path="k.js").edits)

    assert out.startswith("/**\r\n * [description]\r\n */\r\nfunction g() {}\r\n")
    assert "   */\r\n  run(a) {\r\n" in out
    assert "\n" not in out.replace("\r\n", "")
    assert apply_edits(out, generate_for_file(out, path="k.js").edits) == out
