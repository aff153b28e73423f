import re
from bisect import bisect_right
from typing import List, Optional

from jsdocgen.errors import UnbalancedSyntax
from jsdocgen.models import TextPosition

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")", "]", "}"}


class LineIndex:
    """
    Maps character offsets of a document to zero-based line/column positions
    and back.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.line_starts: List[int] = [0] + [
            m.end() for m in re.finditer("\n", text)
        ]

    @property
    def line_count(self) -> int:
        return len(self.line_starts)

    @property
    def newline(self) -> str:
        """Line break of the document, taken from its first line."""
        if len(self.line_starts) > 1 and self.text[: self.line_starts[1]].endswith("\r\n"):
            return "\r\n"
        return "\n"

    def line_of(self, offset: int) -> int:
        return bisect_right(self.line_starts, offset) - 1

    def line_start(self, line: int) -> int:
        return self.line_starts[line]

    def line_end(self, line: int) -> int:
        """Offset of the end of *line*, excluding the line break."""
        if line + 1 < len(self.line_starts):
            end = self.line_starts[line + 1] - 1
        else:
            end = len(self.text)
        if end > self.line_starts[line] and self.text[end - 1] == "\r":
            end -= 1
        return end

    def line_text(self, line: int) -> str:
        return self.text[self.line_start(line) : self.line_end(line)]

    def position_at(self, offset: int) -> TextPosition:
        line = self.line_of(offset)
        return TextPosition(line=line, character=offset - self.line_starts[line])

    def offset_at(self, position: TextPosition) -> int:
        line = min(max(position.line, 0), len(self.line_starts) - 1)
        start = self.line_start(line)
        return min(start + max(position.character, 0), self.line_end(line))


def indentation_of(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


def normalize_text(text: Optional[str]) -> Optional[str]:
    """
    Collapse runs of whitespace (including line breaks) so that type and
    default value text fits on a single tag line.
    """
    if text is None:
        return None
    out = " ".join(text.split())
    return out or None


def skip_trivia(text: str, offset: int) -> int:
    """
    Return the offset of the first character at or after *offset* that is
    neither whitespace nor part of a comment. An unterminated block comment
    swallows the rest of the text.
    """
    n = len(text)
    i = offset
    while i < n:
        ch = text[i]
        if ch.isspace():
            i += 1
            continue
        if text.startswith("//", i):
            nl = text.find("\n", i)
            i = n if nl < 0 else nl + 1
            continue
        if text.startswith("/*", i):
            close = text.find("*/", i + 2)
            i = n if close < 0 else close + 2
            continue
        break
    return i


def _skip_string(text: str, i: int) -> int:
    """Return the offset just past the string literal opening at *i*."""
    quote = text[i]
    n = len(text)
    i += 1
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        if ch == "\n" and quote != "`":
            # unterminated single line string; stop at the line break
            return i
        i += 1
    return n


def check_balanced(text: str, start: int, end: int, *, line: Optional[int] = None) -> None:
    """
    Verify that parens, brackets and braces in ``text[start:end]`` pair up,
    ignoring string literals and comments.

    Raises UnbalancedSyntax on a mismatched closer or when openers remain
    unclosed at *end*.
    """
    stack: List[str] = []
    i = start
    while i < end:
        ch = text[i]
        if ch in "\"'`":
            i = _skip_string(text, i)
            continue
        if text.startswith("//", i):
            nl = text.find("\n", i)
            i = end if nl < 0 else nl + 1
            continue
        if text.startswith("/*", i):
            close = text.find("*/", i + 2)
            i = end if close < 0 else close + 2
            continue
        if ch in _OPENERS:
            stack.append(_OPENERS[ch])
        elif ch in _CLOSERS:
            if not stack or stack.pop() != ch:
                raise UnbalancedSyntax(
                    f"Unexpected '{ch}' in declaration", line=line
                )
        i += 1
    if stack:
        raise UnbalancedSyntax(
            f"Declaration never closes '{stack[-1]}'", line=line
        )
