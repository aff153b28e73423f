from typing import Any, Callable, List, Optional
from enum import Enum

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

# Host configuration section; every RenderConfig field maps to
# "<section>.<camelCaseFieldName>".
CONFIG_SECTION = "jsdoc-generator"


class DelimiterStyle(str, Enum):
    STANDARD = "standard"  # /** ... */
    PRESERVED = "preserved"  # /*! ... */


class CustomTag(BaseModel):
    """A user supplied tag appended to every block."""

    tag: str = Field(description='Tag name without the "@".')
    placeholder: str = Field(default="", description="Text written after the tag.")


class RenderConfig(BaseSettings):
    """Immutable rendering options, read once per generation request."""

    model_config = SettingsConfigDict(
        env_prefix="JSDOC_GENERATOR_",
        frozen=True,
        extra="ignore",
    )

    description_placeholder: str = Field(
        default="[description]",
        description="Summary line written when no previous description is preserved.",
    )
    constructor_description: str = Field(
        default="Creates an instance of {name}.",
        description=(
            "Summary line for constructors; {name} is replaced by the class name. "
            "Empty string falls back to the description placeholder."
        ),
    )
    tag_placeholders: bool = Field(
        default=True,
        description="Write the description placeholder after @param, @property, @returns and @throws tags.",
    )
    include_param_types: bool = Field(
        default=True,
        description="Write {type} on @param, @property, @type, @typedef, @enum and @template tags.",
    )
    include_return_type: bool = Field(
        default=True, description="Write {type} on the @returns tag."
    )
    include_returns: bool = Field(
        default=True, description="Emit a @returns tag for value returning functions."
    )
    infer_returns: bool = Field(
        default=True,
        description=(
            "Emit @returns with the fallback type when a function has no return "
            "annotation but its body returns a value."
        ),
    )
    fallback_type: str = Field(
        default="*", description="Type text used where the source declares none."
    )
    include_properties: bool = Field(
        default=False,
        description="Document interface and object type-alias members with @property tags.",
    )
    include_kind_tags: bool = Field(
        default=True,
        description="Emit kind tags such as @class, @constructor, @interface, @enum, @typedef and @type.",
    )
    include_template: bool = Field(
        default=True, description="Emit one @template tag per generic parameter."
    )
    expand_destructured: bool = Field(
        default=True,
        description="Emit dotted @param tags for the properties of destructured parameters.",
    )
    destructured_param_name: str = Field(
        default="param{index}",
        description="Placeholder name of destructured parameters; {index} is the parameter position.",
    )
    optional_brackets: bool = Field(
        default=True,
        description="Wrap optional parameter names in brackets, including default values ([name=value]).",
    )
    align_tags: bool = Field(
        default=False,
        description="Align tag, type and name columns within each block.",
    )
    document_throws: bool = Field(
        default=False,
        description="Emit @throws tags for exceptions thrown in the function body.",
    )
    include_async: bool = Field(default=True, description="Emit @async.")
    include_generator: bool = Field(default=True, description="Emit @generator.")
    include_static: bool = Field(default=True, description="Emit @static.")
    include_abstract: bool = Field(default=True, description="Emit @abstract.")
    include_readonly: bool = Field(default=True, description="Emit @readonly.")
    include_access: bool = Field(
        default=True,
        description="Emit @access for explicitly public, protected or private members.",
    )
    include_export: bool = Field(
        default=True, description="Emit @export for exported declarations."
    )
    author: Optional[str] = Field(
        default=None, description="Author written in an @author tag."
    )
    custom_tags: List[CustomTag] = Field(
        default_factory=list,
        description="Additional tags appended to every block.",
    )
    delimiter_style: DelimiterStyle = Field(
        default=DelimiterStyle.STANDARD,
        description='Comment delimiters: "standard" (/** */) or "preserved" (/*! */).',
    )
    single_line_trivial: bool = Field(
        default=False,
        description="Render blocks with a single content line as /** text */.",
    )
    empty_line_after_description: bool = Field(
        default=True,
        description="Separate the description from the tags with an empty line.",
    )
    preserve_description: bool = Field(
        default=True,
        description=(
            "When regenerating over an existing block, keep its description and "
            "tag descriptions and rebuild only the tags."
        ),
    )


class ConfigOption(BaseModel):
    """One row of the option table."""

    key: str
    field: str
    default: Any
    description: str


def config_key(field_name: str) -> str:
    return f"{CONFIG_SECTION}.{to_camel(field_name)}"


def option_table() -> List[ConfigOption]:
    """
    Return the enumerated option table (host key -> default -> effect) in
    declaration order.
    """
    out: List[ConfigOption] = []
    for name, field in RenderConfig.model_fields.items():
        out.append(
            ConfigOption(
                key=config_key(name),
                field=name,
                default=field.get_default(call_default_factory=True),
                description=field.description or "",
            )
        )
    return out


def resolve_render_config(lookup: Callable[[str, Any], Any]) -> RenderConfig:
    """
    Build a RenderConfig snapshot from a flat host configuration.

    *lookup* is called as ``lookup(key, default)`` for every option and must
    return the configured value or the default.
    """
    values = {opt.field: lookup(opt.key, opt.default) for opt in option_table()}
    return RenderConfig(**values)
