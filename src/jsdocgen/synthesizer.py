import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from jsdocgen.comments import ExistingComment, tag_key
from jsdocgen.models import (
    DeclarationKind,
    DeclarationSignature,
    MEMBER_KINDS,
    Modifier,
    ParameterInfo,
)
from jsdocgen.settings import DelimiterStyle, RenderConfig

# Return types that never produce a @returns tag.
_NO_RETURN_TYPES = {"void", "never", "Promise<void>", "Promise<never>"}

# Tags that receive the description placeholder.
_PLACEHOLDER_TAGS = {"param", "property", "returns", "throws"}

_ARRAY_TYPE = re.compile(r"^(?:Array<(?P<generic>.+)>|(?P<short>.+)\[\])$")


@dataclass
class TagLine:
    tag: str
    type: Optional[str] = None
    name: Optional[str] = None
    description: str = ""


class CommentSynthesizer:
    """
    Renders documentation blocks from declaration signatures. Rendering is
    pure: the same signature, config and existing block always produce the
    same text.
    """

    def __init__(self, config: Optional[RenderConfig] = None) -> None:
        self.config = config or RenderConfig()

    def render(
        self,
        signature: DeclarationSignature,
        existing: Optional[ExistingComment] = None,
        *,
        indent: str = "",
        newline: str = "\n",
    ) -> str:
        """
        Render the block for *signature*. Lines after the first are prefixed
        with *indent* and separated by *newline*. Descriptions from *existing*
        are carried over when ``preserve_description`` is set.
        """
        cfg = self.config
        keep = existing if cfg.preserve_description else None

        summary = self.summary_lines(signature, keep)
        tags = self.tag_lines(signature)
        if keep is not None:
            self._apply_existing_descriptions(tags, keep)

        content: List[str] = list(summary)
        rendered_tags = self.format_tags(tags)
        if content and rendered_tags and cfg.empty_line_after_description:
            content.append("")
        content.extend(rendered_tags)
        return self._wrap(content, indent, newline)

    # --- summary ----------------------------------------------------------
    def summary_lines(
        self, sig: DeclarationSignature, existing: Optional[ExistingComment]
    ) -> List[str]:
        cfg = self.config
        if existing is not None and existing.description:
            return list(existing.description)
        if sig.kind == DeclarationKind.CONSTRUCTOR and cfg.constructor_description:
            class_name = sig.owner or ""
            if class_name:
                return [cfg.constructor_description.format(name=class_name)]
        if cfg.description_placeholder:
            return [cfg.description_placeholder]
        return []

    # --- tags -------------------------------------------------------------
    def tag_lines(self, sig: DeclarationSignature) -> List[TagLine]:
        """Return the tag lines of *sig* in their fixed order."""
        cfg = self.config
        tags: List[TagLine] = []
        if cfg.include_kind_tags:
            tags.extend(self._kind_tags(sig))
        if cfg.include_template:
            tags.extend(self._template_tags(sig))
        if cfg.include_properties and sig.kind in MEMBER_KINDS:
            tags.extend(self._member_tag("property", m) for m in sig.members)
        if sig.is_function_like:
            tags.extend(self._param_tags(sig))
            tags.extend(self._returns_tags(sig))
            if cfg.document_throws:
                tags.extend(
                    TagLine(
                        "throws",
                        type=self._typed(hint),
                        description=self._placeholder("throws"),
                    )
                    for hint in sig.throws_hints
                )
        tags.extend(self._modifier_tags(sig))
        if cfg.author:
            tags.append(TagLine("author", description=cfg.author))
        for custom in cfg.custom_tags:
            tags.append(TagLine(custom.tag.lstrip("@"), description=custom.placeholder))
        return tags

    def _typed(self, type_text: Optional[str]) -> Optional[str]:
        if not self.config.include_param_types:
            return None
        return type_text or self.config.fallback_type

    def _placeholder(self, tag: str) -> str:
        if self.config.tag_placeholders and tag in _PLACEHOLDER_TAGS:
            return self.config.description_placeholder
        return ""

    def _kind_tags(self, sig: DeclarationSignature) -> List[TagLine]:
        out: List[TagLine] = []
        kind = sig.kind
        if kind == DeclarationKind.CONSTRUCTOR:
            out.append(TagLine("constructor"))
        elif kind == DeclarationKind.CLASS:
            out.append(TagLine("class"))
            out.extend(TagLine("extends", type=h) for h in sig.heritage)
            out.extend(TagLine("implements", type=i) for i in sig.implements)
        elif kind == DeclarationKind.INTERFACE:
            out.append(TagLine("interface"))
            out.extend(TagLine("extends", type=h) for h in sig.heritage)
        elif kind == DeclarationKind.ENUM:
            out.append(TagLine("enum", type=self._typed(sig.type_annotation)))
        elif kind == DeclarationKind.TYPE_ALIAS:
            out.append(
                TagLine("typedef", type=self._typed(sig.type_annotation), name=sig.name)
            )
        elif kind == DeclarationKind.ARROW_FUNCTION and sig.name:
            out.append(TagLine("function", name=sig.name))
        elif kind in (DeclarationKind.PROPERTY, DeclarationKind.VARIABLE):
            type_text = self._typed(sig.type_annotation)
            if type_text is not None:
                out.append(TagLine("type", type=type_text))
            if sig.has(Modifier.CONST):
                out.append(TagLine("constant"))
        return out

    def _template_tags(self, sig: DeclarationSignature) -> List[TagLine]:
        out: List[TagLine] = []
        for tp in sig.type_parameters:
            name = f"[{tp.name}={tp.default}]" if tp.default else tp.name
            type_text = tp.constraint if self.config.include_param_types else None
            out.append(TagLine("template", type=type_text, name=name))
        return out

    def _display_name(self, name: str, optional: bool, default: Optional[str]) -> str:
        if not (optional and self.config.optional_brackets):
            return name
        if default:
            return f"[{name}={default}]"
        return f"[{name}]"

    def _member_tag(
        self, tag: str, member: ParameterInfo, prefix: Optional[str] = None
    ) -> TagLine:
        name = f"{prefix}.{member.name}" if prefix else member.name
        type_text = member.type
        if member.is_rest and type_text is None:
            type_text = "Object"
        return TagLine(
            tag,
            type=self._typed(type_text),
            name=self._display_name(name, member.optional, member.default_value),
            description=self._placeholder(tag),
        )

    def _param_tags(self, sig: DeclarationSignature) -> List[TagLine]:
        cfg = self.config
        out: List[TagLine] = []
        for index, p in enumerate(sig.parameters):
            name = p.name
            if p.destructured:
                name = cfg.destructured_param_name.format(index=index)
            if p.is_rest:
                type_text = self._typed(_rest_element_type(p.type))
                if type_text is not None:
                    type_text = f"...{type_text}"
                display = name
            else:
                type_text = self._typed(p.type)
                display = self._display_name(name, p.optional, p.default_value)
            out.append(
                TagLine(
                    "param",
                    type=type_text,
                    name=display,
                    description=self._placeholder("param"),
                )
            )
            if p.destructured and cfg.expand_destructured:
                out.extend(self._member_tag("param", m, prefix=name) for m in p.members)
        return out

    def _returns_tags(self, sig: DeclarationSignature) -> List[TagLine]:
        cfg = self.config
        if not cfg.include_returns:
            return []
        type_text = sig.return_type
        if type_text is not None:
            if type_text in _NO_RETURN_TYPES:
                return []
        elif cfg.infer_returns and sig.returns_value:
            type_text = cfg.fallback_type
            if sig.has(Modifier.ASYNC):
                type_text = f"Promise<{type_text}>"
        else:
            return []
        return [
            TagLine(
                "returns",
                type=type_text if cfg.include_return_type else None,
                description=self._placeholder("returns"),
            )
        ]

    def _modifier_tags(self, sig: DeclarationSignature) -> List[TagLine]:
        cfg = self.config
        out: List[TagLine] = []
        if cfg.include_async and sig.has(Modifier.ASYNC):
            out.append(TagLine("async"))
        if cfg.include_generator and sig.has(Modifier.GENERATOR):
            out.append(TagLine("generator"))
        if cfg.include_static and sig.has(Modifier.STATIC):
            out.append(TagLine("static"))
        if cfg.include_abstract and sig.has(Modifier.ABSTRACT):
            out.append(TagLine("abstract"))
        if cfg.include_readonly and sig.has(Modifier.READONLY):
            out.append(TagLine("readonly"))
        if cfg.include_access:
            for level in (Modifier.PUBLIC, Modifier.PROTECTED, Modifier.PRIVATE):
                if sig.has(level):
                    out.append(TagLine("access", name=level.value))
                    break
        if cfg.include_export and sig.has(Modifier.EXPORT):
            out.append(TagLine("export"))
        return out

    def _apply_existing_descriptions(
        self, tags: List[TagLine], existing: ExistingComment
    ) -> None:
        known: Dict[Tuple[str, str], str] = existing.tag_descriptions()
        for t in tags:
            # author and custom tag text always comes from the current config
            if t.tag not in _PLACEHOLDER_TAGS:
                continue
            desc = known.get(tag_key(t.tag, t.name, t.type))
            if desc:
                t.description = desc

    # --- layout -----------------------------------------------------------
    def format_tags(self, tags: List[TagLine]) -> List[str]:
        """
        Lay the tag lines out as text. With ``align_tags`` the tag, type and
        name columns are padded to the widest entry of this block.
        """
        if not tags:
            return []
        tag_w = type_w = name_w = 0
        if self.config.align_tags:
            tag_w = max(len(t.tag) + 1 for t in tags)
            type_w = max((len(t.type) + 2 for t in tags if t.type is not None), default=0)
            name_w = max((len(t.name) for t in tags if t.name), default=0)

        lines: List[str] = []
        for t in tags:
            first, *rest = t.description.split("\n") if t.description else [""]
            parts = [f"@{t.tag}".ljust(tag_w)]
            if t.type is not None:
                parts.append(f"{{{t.type}}}".ljust(type_w))
            elif type_w:
                parts.append(" " * type_w)
            if t.name:
                parts.append(t.name.ljust(name_w))
            elif name_w:
                parts.append(" " * name_w)
            parts.append(first)
            lines.append(" ".join(parts).rstrip())
            lines.extend(rest)
        return lines

    def _wrap(self, content: List[str], indent: str, newline: str = "\n") -> str:
        opener = "/*!" if self.config.delimiter_style == DelimiterStyle.PRESERVED else "/**"
        if not content:
            return f"{opener}{newline}{indent} */"
        if self.config.single_line_trivial and len(content) == 1 and content[0]:
            return f"{opener} {content[0]} */"
        body = "".join(
            f"{indent} * {line}{newline}" if line else f"{indent} *{newline}" for line in content
        )
        return f"{opener}{newline}{body}{indent} */"


def _rest_element_type(type_text: Optional[str]) -> Optional[str]:
    if type_text is None:
        return None
    m = _ARRAY_TYPE.match(type_text)
    if m is None:
        return type_text
    return m.group("generic") or m.group("short")
