import re
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

# Tags whose first word after the type is a name.
NAMED_TAGS = {
    "param",
    "property",
    "template",
    "typedef",
    "callback",
    "function",
    "access",
}

# Synonyms folded onto one canonical tag when matching descriptions.
TAG_ALIASES = {
    "arg": "param",
    "argument": "param",
    "prop": "property",
    "return": "returns",
    "exception": "throws",
    "func": "function",
    "method": "function",
}

_TAG_LINE = re.compile(r"@([A-Za-z][\w-]*)")
_LINE_PREFIX = re.compile(r"^\s*\*? ?")
_OPENER = re.compile(r"^\s*/\*[*!]*")
_CLOSER = re.compile(r"\**/\s*$")
_WORD = re.compile(r"\S+")


class ExistingTag(BaseModel):
    tag: str
    type: Optional[str] = None
    name: Optional[str] = None
    description: str = ""  # verbatim, may span several lines

    @property
    def key(self) -> Tuple[str, str]:
        return tag_key(self.tag, self.name, self.type)


class ExistingComment(BaseModel):
    """An already present doc block, split into its description and tags."""

    text: str
    description: List[str] = Field(default_factory=list)
    tags: List[ExistingTag] = Field(default_factory=list)

    def tag_descriptions(self) -> Dict[Tuple[str, str], str]:
        out: Dict[Tuple[str, str], str] = {}
        for t in self.tags:
            if t.description and t.key not in out:
                out[t.key] = t.description
        return out


def canonical_tag(tag: str) -> str:
    return TAG_ALIASES.get(tag, tag)


def bare_name(name: Optional[str]) -> str:
    """Strip optional brackets and default values: ``[a=1]`` -> ``a``."""
    if not name:
        return ""
    name = name.strip()
    if name.startswith("[") and name.endswith("]"):
        name = name[1:-1]
        name = name.split("=", 1)[0]
    return name.strip()


def tag_key(tag: str, name: Optional[str], type_text: Optional[str]) -> Tuple[str, str]:
    tag = canonical_tag(tag)
    if tag in NAMED_TAGS:
        return tag, bare_name(name)
    if tag == "throws":
        return tag, type_text or ""
    return tag, ""


def _read_braced(text: str, start: int) -> Tuple[Optional[str], int]:
    """Read a ``{...}`` group opening at *start*; nested braces are allowed."""
    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start + 1 : i].strip(), i + 1
    return None, start


def _read_name(text: str, start: int) -> Tuple[Optional[str], int]:
    i = start
    while i < len(text) and text[i] in " \t":
        i += 1
    if i >= len(text):
        return None, i
    if text[i] == "[":
        depth = 0
        for j in range(i, len(text)):
            if text[j] == "[":
                depth += 1
            elif text[j] == "]":
                depth -= 1
                if depth == 0:
                    return text[i : j + 1], j + 1
        return None, start
    m = _WORD.match(text, i)
    return m.group(0), m.end()


def _parse_tag(first_line: str) -> ExistingTag:
    m = _TAG_LINE.match(first_line)
    tag = m.group(1)
    rest = first_line[m.end() :]
    stripped = rest.lstrip(" \t")
    pos = len(rest) - len(stripped)

    type_text = None
    if rest[pos : pos + 1] == "{":
        type_text, new_pos = _read_braced(rest, pos)
        if type_text is not None:
            pos = new_pos

    name = None
    if canonical_tag(tag) in NAMED_TAGS:
        name, pos = _read_name(rest, pos)

    return ExistingTag(
        tag=tag, type=type_text, name=name, description=rest[pos:].strip()
    )


def content_lines(block: str) -> List[str]:
    """Return the content lines of a comment block without delimiters and stars."""
    body = _OPENER.sub("", block, count=1)
    body = _CLOSER.sub("", body, count=1)
    lines = body.split("\n")
    out = []
    for idx, line in enumerate(lines):
        line = line.rstrip("\r")
        if idx == 0:
            out.append(line.strip())
        else:
            out.append(_LINE_PREFIX.sub("", line, count=1).rstrip())
    # drop the empty first line of "/**\n" and the empty last line before "*/"
    while out and not out[0].strip():
        out.pop(0)
    while out and not out[-1].strip():
        out.pop()
    return out


def parse_doc_comment(block: str) -> ExistingComment:
    """
    Split an existing documentation block into free text description lines
    and tags. Inline ``{@link ...}`` in descriptions is kept as text.
    """
    lines = content_lines(block)
    description: List[str] = []
    tags: List[ExistingTag] = []
    current: Optional[ExistingTag] = None
    extra: List[str] = []

    def flush() -> None:
        if current is None:
            return
        desc_lines = [current.description] if current.description else []
        tail = list(extra)
        while tail and not tail[-1].strip():
            tail.pop()
        if tail and not desc_lines:
            desc_lines.append("")
        current.description = "\n".join(desc_lines + tail)
        tags.append(current)

    for line in lines:
        if _TAG_LINE.match(line.lstrip()):
            flush()
            current = _parse_tag(line.lstrip())
            extra = []
        elif current is None:
            description.append(line)
        else:
            extra.append(line)
    flush()

    while description and not description[-1].strip():
        description.pop()
    return ExistingComment(text=block, description=description, tags=tags)
