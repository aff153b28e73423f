import pytest

from jsdocgen.comments import parse_doc_comment
from jsdocgen.models import (
    DeclarationKind,
    DeclarationSignature,
    Modifier,
    ParameterInfo,
    TypeParameterInfo,
)
from jsdocgen.settings import CustomTag, DelimiterStyle, RenderConfig
from jsdocgen.synthesizer import CommentSynthesizer


def _add_signature() -> DeclarationSignature:
    return DeclarationSignature(
        kind=DeclarationKind.FUNCTION,
        name="add",
        parameters=[
            ParameterInfo(name="a", type="number"),
            ParameterInfo(name="b", type="number"),
        ],
        return_type="number",
    )


def _render(sig, existing=None, **config) -> str:
    return CommentSynthesizer(RenderConfig(**config)).render(sig, existing)


def test_add_function_default_config():
    assert _render(_add_signature()) == (
        "/**\n"
        " * [description]\n"
        " *\n"
        " * @param {number} a [description]\n"
        " * @param {number} b [description]\n"
        " * @returns {number} [description]\n"
        " */"
    )


def test_one_param_tag_per_parameter_in_order():
    sig = DeclarationSignature(
        kind=DeclarationKind.METHOD,
        name="m",
        parameters=[ParameterInfo(name=n) for n in ("z", "a", "m")],
    )
    block = _render(sig)
    params = [line for line in block.splitlines() if "@param" in line]

    assert params == [
        " * @param {*} z [description]",
        " * @param {*} a [description]",
        " * @param {*} m [description]",
    ]


def test_destructured_parameter_uses_placeholder_name():
    sig = DeclarationSignature(
        kind=DeclarationKind.FUNCTION,
        name="connect",
        parameters=[
            ParameterInfo(
                name="param0",
                type="Object",
                destructured=True,
                pattern="{ host, port = 1 }",
                members=[
                    ParameterInfo(name="host", type="string"),
                    ParameterInfo(name="port", optional=True, default_value="1"),
                ],
            )
        ],
    )
    block = _render(sig, destructured_param_name="options{index}")

    assert "{ host, port = 1 }" not in block
    assert " * @param {Object} options0 [description]" in block
    assert " * @param {string} options0.host [description]" in block
    assert " * @param {*} [options0.port=1] [description]" in block

    collapsed = _render(sig, expand_destructured=False)
    assert "param0.host" not in collapsed


def test_rest_optional_and_untyped_parameters():
    sig = DeclarationSignature(
        kind=DeclarationKind.FUNCTION,
        name="f",
        parameters=[
            ParameterInfo(name="a", optional=True),
            ParameterInfo(name="b", type="number", optional=True, default_value="2"),
            ParameterInfo(name="rest", type="Array<string>", is_rest=True),
        ],
    )
    block = _render(sig)
    assert " * @param {*} [a] [description]" in block
    assert " * @param {number} [b=2] [description]" in block
    assert " * @param {...string} rest [description]" in block

    plain = _render(sig, optional_brackets=False, include_param_types=False)
    assert " * @param a [description]" in plain
    assert " * @param b [description]" in plain


@pytest.mark.parametrize("return_type", ["void", "never", "Promise<void>"])
def test_no_returns_for_void(return_type):
    sig = _add_signature().model_copy(update={"return_type": return_type})
    assert "@returns" not in _render(sig)


def test_inferred_returns():
    sig = DeclarationSignature(
        kind=DeclarationKind.FUNCTION,
        name="load",
        modifiers={Modifier.ASYNC},
        returns_value=True,
    )
    assert " * @returns {Promise<*>} [description]" in _render(sig)
    assert "@returns" not in _render(sig, infer_returns=False)
    assert " * @returns [description]" in _render(sig, include_return_type=False)


def test_constructor_block_has_no_returns():
    sig = DeclarationSignature(
        kind=DeclarationKind.CONSTRUCTOR,
        name="constructor",
        owner="Cache",
        parameters=[ParameterInfo(name="limit", type="number")],
        return_type="Cache",
    )
    assert _render(sig) == (
        "/**\n"
        " * Creates an instance of Cache.\n"
        " *\n"
        " * @constructor\n"
        " * @param {number} limit [description]\n"
        " */"
    )


def test_class_kind_and_modifier_tags():
    sig = DeclarationSignature(
        kind=DeclarationKind.CLASS,
        name="Base",
        modifiers={Modifier.ABSTRACT, Modifier.EXPORT},
        type_parameters=[TypeParameterInfo(name="T", constraint="object")],
        heritage=["Readable"],
        implements=["Shape<number>"],
        parameters=[ParameterInfo(name="ignored")],
    )
    lines = _render(sig).splitlines()

    assert lines[3:] == [
        " * @class",
        " * @extends {Readable}",
        " * @implements {Shape<number>}",
        " * @template {object} T",
        " * @abstract",
        " * @export",
        " */",
    ]
    assert not any("@param" in line for line in lines)


def test_type_alias_and_property_members():
    sig = DeclarationSignature(
        kind=DeclarationKind.TYPE_ALIAS,
        name="Point",
        type_annotation="Object",
        type_parameters=[TypeParameterInfo(name="T", default="number")],
        members=[
            ParameterInfo(name="x", type="number"),
            ParameterInfo(name="y", type="number", optional=True),
        ],
    )
    assert "@property" not in _render(sig)
    block = _render(sig, include_properties=True)
    assert " * @typedef {Object} Point" in block
    assert " * @template [T=number]" in block
    assert " * @property {number} x [description]" in block
    assert " * @property {number} [y] [description]" in block


def test_throws_modifiers_author_and_custom_tags_order():
    sig = DeclarationSignature(
        kind=DeclarationKind.METHOD,
        name="run",
        modifiers={Modifier.STATIC, Modifier.PRIVATE, Modifier.ASYNC},
        throws_hints=["TypeError"],
    )
    block = _render(
        sig,
        document_throws=True,
        author="Jane",
        custom_tags=[CustomTag(tag="since", placeholder="1.0")],
    )
    assert block == (
        "/**\n"
        " * [description]\n"
        " *\n"
        " * @throws {TypeError} [description]\n"
        " * @async\n"
        " * @static\n"
        " * @access private\n"
        " * @author Jane\n"
        " * @since 1.0\n"
        " */"
    )
    quiet = _render(sig, include_static=False, include_access=False, include_async=False)
    assert "@static" not in quiet and "@access" not in quiet and "@async" not in quiet
    assert "@throws" not in _render(sig)


def test_aligned_columns_are_computed_per_block():
    block = _render(_add_signature(), align_tags=True)
    assert block.splitlines()[3:6] == [
        " * @param   {number} a [description]",
        " * @param   {number} b [description]",
        " * @returns {number}   [description]",
    ]


def test_delimiters_single_line_and_indent():
    variable = DeclarationSignature(
        kind=DeclarationKind.VARIABLE,
        name="VERSION",
        type_annotation="string",
    )
    assert _render(variable, description_placeholder="", single_line_trivial=True) == (
        "/** @type {string} */"
    )
    preserved = _render(_add_signature(), delimiter_style=DelimiterStyle.PRESERVED)
    assert preserved.startswith("/*!\n")

    indented = CommentSynthesizer().render(variable, indent="    ")
    assert indented.splitlines() == [
        "/**",
        "     * [description]",
        "     *",
        "     * @type {string}",
        "     */",
    ]


def test_existing_descriptions_are_preserved():
    existing = parse_doc_comment(
        "/**\n"
        " * Adds two numbers.\n"
        " *\n"
        " * @param {string} a - left operand\n"
        " * @param {number} c gone\n"
        " * @returns {number} the sum\n"
        " */"
    )
    block = _render(_add_signature(), existing)

    assert block == (
        "/**\n"
        " * Adds two numbers.\n"
        " *\n"
        " * @param {number} a - left operand\n"
        " * @param {number} b [description]\n"
        " * @returns {number} the sum\n"
        " */"
    )
    assert "Adds two numbers." not in _render(
        _add_signature(), existing, preserve_description=False
    )


@pytest.mark.parametrize(
    "config",
    [
        {},
        {"align_tags": True},
        {"single_line_trivial": True, "description_placeholder": ""},
        {"delimiter_style": "preserved", "document_throws": True},
    ],
)
def test_regeneration_is_idempotent(config):
    sig = DeclarationSignature(
        kind=DeclarationKind.FUNCTION,
        name="f",
        modifiers={Modifier.ASYNC, Modifier.EXPORT},
        type_parameters=[TypeParameterInfo(name="T", constraint="object", default="{}")],
        parameters=[
            ParameterInfo(name="a", type="Record<string, number>"),
            ParameterInfo(
                name="param1",
                destructured=True,
                type="Object",
                optional=True,
                default_value="{}",
                members=[ParameterInfo(name="x", optional=True, default_value="[1, 2]")],
            ),
            ParameterInfo(name="rest", is_rest=True),
        ],
        return_type="Promise<T>",
        throws_hints=["Error"],
    )
    synth = CommentSynthesizer(RenderConfig(**config))
    first = synth.render(sig)
    second = synth.render(sig, parse_doc_comment(first))

    assert second == first


def test_regeneration_takes_author_and_custom_tags_from_current_config():
    first = _render(
        _add_signature(),
        author="Bob",
        custom_tags=[CustomTag(tag="since", placeholder="1.0")],
    )
    again = _render(
        _add_signature(),
        parse_doc_comment(first),
        author="Alice",
        custom_tags=[CustomTag(tag="since", placeholder="2.0")],
    )

    assert " * @author Alice\n" in again
    assert " * @since 2.0\n" in again
    assert "Bob" not in again


def test_blocks_use_the_given_line_break():
    block = CommentSynthesizer().render(_add_signature(), indent="  ", newline="\r\n")

    assert block.split("\r\n") == [
        "/**",
        "   * [description]",
        "   *",
        "   * @param {number} a [description]",
        "   * @param {number} b [description]",
        "   * @returns {number} [description]",
        "   */",
    ]
