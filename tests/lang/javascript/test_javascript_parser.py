import pytest
from pathlib import Path

from jsdocgen.errors import UnbalancedSyntax
from jsdocgen.lang.javascript import JavaScriptSignatureParser
from jsdocgen.models import DeclarationKind, Modifier

# ------------------------------------------------------------------ #
# helpers
# ------------------------------------------------------------------ #
SAMPLES = Path(__file__).parent / "samples"


def _parse_sample(name: str) -> JavaScriptSignatureParser:
    return JavaScriptSignatureParser((SAMPLES / name).read_text(encoding="utf-8"))


def _to_map(parser):
    return {
        sig.name: sig
        for sig in (parser.parse_signature(s) for s in parser.iter_declarations())
        if sig.name
    }

# ------------------------------------------------------------------ #
# tests
# ------------------------------------------------------------------ #
def test_javascript_parser_on_sample_file():
    parser = _parse_sample("cache.js")
    sigs = _to_map(parser)

    assert list(sigs) == [
        "path",
        "Cache",
        "#size",
        "constructor",
        "from",
        "size",
        "keysAsync",
        "load",
        "inner",
        "mixed",
        "helper",
        "VERSION",
    ]

    cache = sigs["Cache"]
    assert cache.kind == DeclarationKind.CLASS
    assert cache.heritage == ["Map"]

    field = sigs["#size"]
    assert field.kind == DeclarationKind.PROPERTY
    assert field.has(Modifier.PRIVATE)
    assert field.type_annotation == "number"

    ctor = sigs["constructor"]
    assert ctor.kind == DeclarationKind.CONSTRUCTOR
    (limit,) = ctor.parameters
    assert (limit.name, limit.type, limit.optional, limit.default_value) == (
        "limit",
        "number",
        True,
        "10",
    )

    assert sigs["from"].has(Modifier.STATIC)
    assert sigs["from"].returns_value is True
    assert sigs["size"].kind == DeclarationKind.GETTER
    assert sigs["keysAsync"].has(Modifier.GENERATOR)


def test_javascript_parser_functions():
    sigs = _to_map(_parse_sample("cache.js"))

    load = sigs["load"]
    assert load.kind == DeclarationKind.FUNCTION
    assert load.has(Modifier.ASYNC)
    assert load.returns_value is True
    # the RangeError is thrown by a nested arrow function
    assert load.throws_hints == ["TypeError"]
    url, options, rest = load.parameters
    assert url.name == "url" and url.type is None
    assert options.destructured is True
    assert options.name == "param1"
    assert options.optional is True
    assert [(m.name, m.default_value) for m in options.members] == [
        ("retries", "3"),
        ("timeout", None),
    ]
    assert rest.is_rest is True
    assert rest.name == "rest"

    mixed = sigs["mixed"]
    assert mixed.kind == DeclarationKind.FUNCTION
    assert len(mixed.parameters) == 3
    assert mixed.parameters[1].default_value == "foo(1, 2)"

    helper = sigs["helper"]
    assert helper.kind == DeclarationKind.ARROW_FUNCTION
    assert [p.name for p in helper.parameters] == ["value"]
    assert helper.returns_value is True

    version = sigs["VERSION"]
    assert version.kind == DeclarationKind.VARIABLE
    assert version.type_annotation == "string"
    assert version.has(Modifier.EXPORT)
    assert version.has(Modifier.CONST)


def test_javascript_parser_existing_comment_is_not_a_declaration():
    parser = _parse_sample("cache.js")
    text = parser.text

    site = parser.declaration_at(text.index("/**"))

    assert site.start_offset == text.index("class Cache")


def test_javascript_parser_reports_unbalanced_header():
    text = "function broken(a, b {\n  return a;\n}\n"
    parser = JavaScriptSignatureParser(text)

    with pytest.raises(UnbalancedSyntax):
        site = parser.declaration_at(0)
        parser.parse_signature(site)


def test_javascript_parser_finds_declarations_in_function_bodies():
    text = (
        "function outer() {\n"
        "  function inner(a) {\n"
        "    return a;\n"
        "  }\n"
        "  return inner;\n"
        "}\n"
        "\n"
        "class Queue {\n"
        "  drain() {\n"
        "    const step = (job) => job.run();\n"
        "    return step;\n"
        "  }\n"
        "}\n"
    )
    parser = JavaScriptSignatureParser(text)
    sigs = _to_map(parser)

    assert list(sigs) == ["outer", "inner", "Queue", "drain", "step"]
    assert sigs["inner"].owner is None
    assert sigs["step"].kind == DeclarationKind.ARROW_FUNCTION
    # nested returns stay with the nested function
    assert sigs["outer"].returns_value is True

    site = parser.declaration_at(text.index("  function inner"))
    assert site.start_offset == text.index("function inner")
