import re
from pathlib import Path
from typing import Optional, Tuple, Union

from jsdocgen import lang  # noqa: F401  registers the grammar parsers
from jsdocgen.comments import parse_doc_comment
from jsdocgen.errors import NoActiveTarget
from jsdocgen.lexer import LineIndex, indentation_of
from jsdocgen.logger import logger
from jsdocgen.models import CompletionAffordance, DocEdit, EditSpan, TextPosition
from jsdocgen.parsers import (
    DEFAULT_LOOKAHEAD_LINES,
    AbstractSignatureParser,
    DeclarationSite,
    Dialect,
    SignatureParserRegistry,
)
from jsdocgen.ranges import SpanMode, completion_range, find_typing_range, resolve_edit_span
from jsdocgen.settings import RenderConfig
from jsdocgen.synthesizer import CommentSynthesizer

NO_TARGET_MESSAGE = "Unable to generate JSDoc: no editor has been selected."

_NOT_LINE_BREAK = re.compile(r"[^\r\n]")

Position = Union[TextPosition, int]


def check_text(text) -> str:
    if text is None:
        raise NoActiveTarget(NO_TARGET_MESSAGE)
    if not isinstance(text, str):
        raise TypeError(f"Document text must be str, got {type(text).__name__}")
    return text


def apply_edit(text: str, edit: DocEdit) -> str:
    """Apply a single edit to *text* and return the new text."""
    span = edit.span
    return text[: span.start_offset] + edit.text + text[span.end_offset :]


class JsdocGenerator:
    """
    Generates documentation blocks for JavaScript and TypeScript declarations.

    A generator holds one immutable RenderConfig; construct a new one when the
    configuration changes.
    """

    def __init__(
        self,
        config: Optional[RenderConfig] = None,
        *,
        lookahead_lines: int = DEFAULT_LOOKAHEAD_LINES,
    ) -> None:
        self.config = config or RenderConfig()
        self.synthesizer = CommentSynthesizer(self.config)
        self.lookahead_lines = lookahead_lines

    def parser_for(
        self,
        text: str,
        *,
        dialect: Optional[Union[Dialect, str]] = None,
        path: Optional[Union[str, Path]] = None,
    ) -> AbstractSignatureParser:
        """Parse *text* with the grammar picked by *path* or *dialect* (TypeScript by default)."""
        if path is not None and dialect is None:
            parser_cls = SignatureParserRegistry.for_path(path)
        else:
            parser_cls = SignatureParserRegistry.for_dialect(dialect or Dialect.TYPESCRIPT)
        return parser_cls(text)

    def generate_at(
        self,
        text: Optional[str],
        position: Position,
        *,
        dialect: Optional[Union[Dialect, str]] = None,
        path: Optional[Union[str, Path]] = None,
    ) -> DocEdit:
        """
        Generate the edit documenting the declaration at or below the line of
        *position*.

        A comment being typed around the cursor (``/**`` ... ``*/``) is
        replaced by the block. Raises NotADeclaration, UnbalancedSyntax or
        NoActiveTarget.
        """
        text = check_text(text)
        lines = LineIndex(text)
        offset = _to_offset(lines, position)

        typing = find_typing_range(text, offset, lines)
        work = text
        if typing is not None:
            start, end = typing
            work = text[:start] + _NOT_LINE_BREAK.sub(" ", text[start:end]) + text[end:]

        parser = self.parser_for(work, dialect=dialect, path=path)
        anchor = lines.line_start(lines.line_of(offset))
        site = parser.declaration_at(anchor, lookahead_lines=self.lookahead_lines)
        return self.build_edit(parser, site, typing_range=typing)

    def complete_at(
        self, text: Optional[str], position: Position
    ) -> Optional[CompletionAffordance]:
        """
        Return the completion item offered while typing ``/**`` on an
        otherwise empty line, or None.
        """
        text = check_text(text)
        lines = LineIndex(text)
        offset = _to_offset(lines, position)
        rng = completion_range(text, offset, lines)
        if rng is None:
            return None
        return CompletionAffordance(
            range_start=lines.position_at(rng[0]),
            range_end=lines.position_at(rng[1]),
        )

    def build_edit(
        self,
        parser: AbstractSignatureParser,
        site: DeclarationSite,
        *,
        typing_range: Optional[Tuple[int, int]] = None,
    ) -> DocEdit:
        """Parse, resolve and render one declaration site into an edit."""
        sig = parser.parse_signature(site)
        resolved = resolve_edit_span(parser.text, site.start_offset, parser.lines)
        existing = (
            parse_doc_comment(resolved.existing)
            if resolved.mode == SpanMode.REPLACE and resolved.existing
            else None
        )

        span = resolved.span
        indent = resolved.indent
        trailer = ""
        if typing_range is not None:
            start, end = typing_range
            if resolved.mode == SpanMode.INSERT:
                line_start = parser.lines.line_start(parser.lines.line_of(start))
                indent = indentation_of(parser.text[line_start:start])
            else:
                start = min(start, span.start_offset)
                end = max(end, span.end_offset)
            span = EditSpan(
                start_offset=start,
                end_offset=end,
                insertion_position=span.insertion_position,
            )
        elif span.is_insertion:
            trailer = parser.lines.newline + indent

        block = self.synthesizer.render(
            sig, existing, indent=indent, newline=parser.lines.newline
        )
        logger.debug(
            "Generated doc block",
            name=sig.name,
            kind=sig.kind.value,
            line=site.line + 1,
            mode=resolved.mode.value,
        )
        return DocEdit(
            span=span,
            text=block + trailer,
            name=sig.name,
            kind=sig.kind,
            line=site.line,
        )


def _to_offset(lines: LineIndex, position: Position) -> int:
    if isinstance(position, TextPosition):
        return lines.offset_at(position)
    return min(max(position, 0), len(lines.text))
