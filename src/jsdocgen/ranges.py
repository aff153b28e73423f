import re
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel

from jsdocgen.lexer import LineIndex, indentation_of
from jsdocgen.models import EditSpan, TextPosition

# In-progress comment typed around the cursor: "/**" before it and "*/" after.
TYPING_PREFIX = re.compile(r"/\**\s*$")
TYPING_SUFFIX = re.compile(r"^\s*\**/")
# Line prefix that offers the completion item.
COMPLETION_TRIGGER = re.compile(r"^\s*/\*\*\s*$")

DOC_OPENERS = ("/**", "/*!")


class SpanMode(str, Enum):
    INSERT = "insert"  # no comment above the declaration
    REPLACE = "replace"  # well-formed adjacent doc block
    ABSORB = "absorb"  # malformed or unterminated block


class ResolvedSpan(BaseModel):
    span: EditSpan
    mode: SpanMode
    indent: str  # indentation for continuation lines of the block
    existing: Optional[str] = None


def resolve_edit_span(
    text: str, decl_offset: int, lines: Optional[LineIndex] = None
) -> ResolvedSpan:
    """
    Decide where the block for the declaration starting at *decl_offset* goes:
    over an adjacent doc block, over a malformed one, or as a fresh insertion
    at the declaration's indentation column.
    """
    lines = lines or LineIndex(text)
    decl_line = lines.line_of(decl_offset)
    indent = indentation_of(lines.line_text(decl_line))
    position = TextPosition(line=decl_line, character=len(indent))

    if decl_line > 0:
        prev = decl_line - 1
        prev_text = lines.line_text(prev).rstrip()
        if prev_text.endswith("*/"):
            resolved = _resolve_closed(text, lines, prev, prev_text, position)
            if resolved is not None:
                return resolved
        else:
            resolved = _resolve_unterminated(text, lines, prev, position)
            if resolved is not None:
                return resolved

    insert_at = lines.line_start(decl_line) + len(indent)
    return ResolvedSpan(
        span=EditSpan(
            start_offset=insert_at, end_offset=insert_at, insertion_position=position
        ),
        mode=SpanMode.INSERT,
        indent=indent,
    )


def _span(
    text: str,
    start: int,
    end: int,
    mode: SpanMode,
    indent: str,
    position: TextPosition,
) -> ResolvedSpan:
    return ResolvedSpan(
        span=EditSpan(start_offset=start, end_offset=end, insertion_position=position),
        mode=mode,
        indent=indent,
        existing=text[start:end],
    )


def _resolve_closed(
    text: str,
    lines: LineIndex,
    prev: int,
    prev_text: str,
    position: TextPosition,
) -> Optional[ResolvedSpan]:
    close_end = lines.line_start(prev) + len(prev_text)
    close_start = close_end - 2
    open_at = text.rfind("/*", 0, close_start)
    if open_at >= 0 and text.find("*/", open_at + 2, close_start) < 0:
        open_line = lines.line_of(open_at)
        lead = text[lines.line_start(open_line) : open_at]
        if not lead.strip() and text.startswith(DOC_OPENERS, open_at):
            return _span(text, open_at, close_end, SpanMode.REPLACE, lead, position)
        # plain block comment, or one opened after code; keep it and insert below
        return None

    # closing line without a proper opener: absorb the star lines above it
    first = prev
    while first > 0 and lines.line_text(first - 1).strip().startswith("*"):
        first -= 1
    if not lines.line_text(first).strip().startswith("*"):
        return None
    if first > 0:
        above = lines.line_text(first - 1).strip()
        if above.startswith("/*") and "*/" not in above:
            first -= 1
    first_text = lines.line_text(first)
    lead = indentation_of(first_text)
    start = lines.line_start(first) + len(lead)
    return _span(text, start, close_end, SpanMode.ABSORB, lead, position)


def _resolve_unterminated(
    text: str, lines: LineIndex, prev: int, position: TextPosition
) -> Optional[ResolvedSpan]:
    first = prev
    while first >= 0:
        stripped = lines.line_text(first).strip()
        if stripped.startswith(DOC_OPENERS) and "*/" not in stripped:
            break
        if not stripped.startswith("*") or stripped.endswith("*/"):
            return None
        first -= 1
    if first < 0:
        return None
    lead = indentation_of(lines.line_text(first))
    start = lines.line_start(first) + len(lead)
    end = lines.line_end(prev)
    return _span(text, start, end, SpanMode.ABSORB, lead, position)


def find_typing_range(
    text: str, offset: int, lines: Optional[LineIndex] = None
) -> Optional[Tuple[int, int]]:
    """
    Return the ``[start, end)`` range of a comment being typed around *offset*:
    the opener before the cursor on its line and the closer after it, on the
    same line or the next one. None when no opener precedes the cursor.
    """
    lines = lines or LineIndex(text)
    line = lines.line_of(offset)
    line_start = lines.line_start(line)
    line_end = lines.line_end(line)

    prefix = TYPING_PREFIX.search(text[line_start:offset])
    if prefix is None:
        return None
    start = line_start + prefix.start()

    after = text[offset:line_end]
    suffix = TYPING_SUFFIX.match(after)
    if suffix is not None:
        return start, offset + suffix.end()
    if not after.strip() and line + 1 < lines.line_count:
        next_start = lines.line_start(line + 1)
        suffix = TYPING_SUFFIX.match(lines.line_text(line + 1))
        if suffix is not None:
            return start, next_start + suffix.end()
    if after.strip():
        return start, offset
    # unterminated opener; take the trailing whitespace along
    return start, line_end


def completion_range(
    text: str, offset: int, lines: Optional[LineIndex] = None
) -> Optional[Tuple[int, int]]:
    """
    Range replaced by the completion item, or None when the line prefix does
    not offer it.
    """
    lines = lines or LineIndex(text)
    line_start = lines.line_start(lines.line_of(offset))
    if not COMPLETION_TRIGGER.match(text[line_start:offset]):
        return None
    return find_typing_range(text, offset, lines) or (offset, offset)
