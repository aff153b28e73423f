from pydantic import BaseModel, Field, model_validator
from enum import Enum
from typing import List, Optional, Set

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class DeclarationKind(str, Enum):
    FUNCTION = "function"
    ARROW_FUNCTION = "arrow-function"
    METHOD = "method"
    CONSTRUCTOR = "constructor"
    GETTER = "getter"
    SETTER = "setter"
    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    TYPE_ALIAS = "type-alias"
    PROPERTY = "property"
    VARIABLE = "variable"


FUNCTION_KINDS = frozenset(
    {
        DeclarationKind.FUNCTION,
        DeclarationKind.ARROW_FUNCTION,
        DeclarationKind.METHOD,
        DeclarationKind.CONSTRUCTOR,
        DeclarationKind.GETTER,
        DeclarationKind.SETTER,
    }
)

# Kinds that may list object members as @property tags.
MEMBER_KINDS = frozenset({DeclarationKind.INTERFACE, DeclarationKind.TYPE_ALIAS})


class Modifier(str, Enum):
    ASYNC = "async"
    STATIC = "static"
    ABSTRACT = "abstract"
    PUBLIC = "public"
    PRIVATE = "private"
    PROTECTED = "protected"
    READONLY = "readonly"
    GENERATOR = "generator"
    EXPORT = "export"
    DEFAULT = "default"
    CONST = "const"


ACCESS_MODIFIERS = (Modifier.PUBLIC, Modifier.PROTECTED, Modifier.PRIVATE)

# Placeholder name given to destructured parameters, formatted with the
# parameter position.
DESTRUCTURED_PARAM_NAME = "param{index}"


# ---------------------------------------------------------------------------
# Signature model
# ---------------------------------------------------------------------------


class TypeParameterInfo(BaseModel):
    name: str
    constraint: Optional[str] = None
    default: Optional[str] = None


class ParameterInfo(BaseModel):
    name: str
    type: Optional[str] = None
    optional: bool = False
    default_value: Optional[str] = None
    is_rest: bool = False

    destructured: bool = False
    pattern: Optional[str] = None  # raw destructuring pattern, never rendered
    members: List["ParameterInfo"] = Field(default_factory=list)


class DeclarationSignature(BaseModel):
    kind: DeclarationKind
    name: Optional[str] = None
    owner: Optional[str] = None  # enclosing class / interface name

    modifiers: Set[Modifier] = Field(default_factory=set)
    type_parameters: List[TypeParameterInfo] = Field(default_factory=list)
    parameters: List[ParameterInfo] = Field(default_factory=list)
    return_type: Optional[str] = None
    returns_value: bool = False
    throws_hints: List[str] = Field(default_factory=list)

    type_annotation: Optional[str] = None
    heritage: List[str] = Field(default_factory=list)
    implements: List[str] = Field(default_factory=list)
    members: List[ParameterInfo] = Field(default_factory=list)

    start_offset: int = 0
    end_offset: int = 0

    @model_validator(mode="after")
    def _drop_fields_foreign_to_kind(self) -> "DeclarationSignature":
        if self.kind in FUNCTION_KINDS:
            self.members = []
            if self.kind in (DeclarationKind.CONSTRUCTOR, DeclarationKind.SETTER):
                self.return_type = None
                self.returns_value = False
        else:
            self.parameters = []
            self.return_type = None
            self.returns_value = False
            self.throws_hints = []
            if self.kind not in MEMBER_KINDS:
                self.members = []
        return self

    @property
    def is_function_like(self) -> bool:
        return self.kind in FUNCTION_KINDS

    def has(self, modifier: Modifier) -> bool:
        return modifier in self.modifiers


# ---------------------------------------------------------------------------
# Edits
# ---------------------------------------------------------------------------


class TextPosition(BaseModel):
    line: int  # zero-based
    character: int  # zero-based


class EditSpan(BaseModel):
    start_offset: int
    end_offset: int  # exclusive
    insertion_position: TextPosition

    @model_validator(mode="after")
    def _ordered(self) -> "EditSpan":
        if self.end_offset < self.start_offset:
            raise ValueError("EditSpan end_offset precedes start_offset")
        return self

    @property
    def is_insertion(self) -> bool:
        return self.start_offset == self.end_offset


class DocEdit(BaseModel):
    span: EditSpan
    text: str
    name: Optional[str] = None
    kind: DeclarationKind
    line: int  # zero-based line of the declaration


class SkippedDeclaration(BaseModel):
    line: int
    reason: str
    message: str
    name: Optional[str] = None


class BatchResult(BaseModel):
    edits: List[DocEdit] = Field(default_factory=list)
    skipped: List[SkippedDeclaration] = Field(default_factory=list)
    cancelled: bool = False

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


class CompletionAffordance(BaseModel):
    """
    Plain description of the "generate" completion item; the host adapter
    turns it into whatever its completion API expects.
    """

    label: str = "/** Autogenerated JSDoc */"
    kind: str = "snippet"
    insert_text: str = ""
    sort_text: str = "\0"
    range_start: TextPosition
    range_end: TextPosition
    command: str = "jsdoc-generator.generateJsdoc"
    title: str = "Generate JSDoc"
