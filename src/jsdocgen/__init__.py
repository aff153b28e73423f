from jsdocgen.errors import JsdocError, NoActiveTarget, NotADeclaration, UnbalancedSyntax
from jsdocgen.generator import JsdocGenerator, apply_edit
from jsdocgen.models import (
    BatchResult,
    CompletionAffordance,
    DeclarationKind,
    DeclarationSignature,
    DocEdit,
    EditSpan,
    Modifier,
    ParameterInfo,
    TextPosition,
    TypeParameterInfo,
)
from jsdocgen.parsers import Dialect
from jsdocgen.scanner import apply_edits, generate_for_file, generate_for_workspace
from jsdocgen.settings import RenderConfig, resolve_render_config
from jsdocgen.synthesizer import CommentSynthesizer

__all__ = [
    "BatchResult",
    "CommentSynthesizer",
    "CompletionAffordance",
    "DeclarationKind",
    "DeclarationSignature",
    "Dialect",
    "DocEdit",
    "EditSpan",
    "JsdocError",
    "JsdocGenerator",
    "Modifier",
    "NoActiveTarget",
    "NotADeclaration",
    "ParameterInfo",
    "RenderConfig",
    "TextPosition",
    "TypeParameterInfo",
    "UnbalancedSyntax",
    "apply_edit",
    "apply_edits",
    "generate_for_file",
    "generate_for_workspace",
    "resolve_render_config",
]
