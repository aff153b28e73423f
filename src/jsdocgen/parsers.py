import inspect
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set, Tuple, Type, Union

import tree_sitter as ts

from jsdocgen.errors import NotADeclaration, UnbalancedSyntax
from jsdocgen.lexer import LineIndex, check_balanced, normalize_text, skip_trivia
from jsdocgen.logger import logger
from jsdocgen.models import (
    DESTRUCTURED_PARAM_NAME,
    DeclarationKind,
    DeclarationSignature,
    Modifier,
    ParameterInfo,
    TypeParameterInfo,
)

# Number of lines the parser looks ahead of the anchor for a declaration.
DEFAULT_LOOKAHEAD_LINES = 20

# Keyword shapes that open a statement level declaration. Used to recognize
# constructs tree-sitter could not parse.
DECLARATION_START = re.compile(
    r"(?:(?:export|default|declare|abstract|async)\s+)*"
    r"(?:function\b|class\b|interface\b|enum\b|type\s+[A-Za-z_$]|const\b|let\b|var\b)"
)

# Member shapes inside class and interface bodies.
MEMBER_START = re.compile(
    r"(?:(?:public|private|protected|static|readonly|abstract|override|async|get|set|declare)\s+)*"
    r"\*?\s*#?[A-Za-z_$][\w$]*\s*(?:[<(]|[?!]?\s*[:=;])"
)

_TOKEN_MODIFIERS = {
    "async": Modifier.ASYNC,
    "static": Modifier.STATIC,
    "abstract": Modifier.ABSTRACT,
    "readonly": Modifier.READONLY,
    "*": Modifier.GENERATOR,
}

_ACCESS = {
    "public": Modifier.PUBLIC,
    "protected": Modifier.PROTECTED,
    "private": Modifier.PRIVATE,
}

_FUNCTION_VALUES = (
    "function_expression",
    "function",
    "generator_function",
)

_CLASS_VALUES = ("class", "class_declaration", "abstract_class_declaration")

# Nodes that open a new function scope; throw/return statements inside them do
# not belong to the enclosing declaration.
_NESTED_SCOPES = {
    "function_declaration",
    "generator_function_declaration",
    "function_expression",
    "function",
    "generator_function",
    "arrow_function",
    "method_definition",
    "class",
    "class_declaration",
    "abstract_class_declaration",
}


class Dialect(str, Enum):
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    TSX = "tsx"


@dataclass
class DeclarationSite:
    """
    A candidate declaration found by the structural walk.

    ``node`` carries the signature (function_declaration, variable_declarator,
    method_definition, ...); ``outer`` is the outermost node the comment
    documents (export statement, lexical declaration, first decorator).
    """

    node: ts.Node
    outer: ts.Node
    start_offset: int
    line: int
    owner: Optional[str] = None
    modifiers: Set[Modifier] = field(default_factory=set)
    broken: bool = False


# Abstract base parser class
class AbstractSignatureParser(ABC):
    """
    Abstract base class for declaration signature parsers. A parser instance
    wraps one parsed document.
    """

    dialect: Dialect
    extensions: List[str]

    def __init_subclass__(cls, **kw):
        super().__init_subclass__(**kw)
        if not inspect.isabstract(cls):
            if not hasattr(cls, "extensions") or not cls.extensions:
                raise ValueError(f"{cls.__name__} missing `extensions`")
            SignatureParserRegistry.register_parser(cls)

    def __init__(self, text: str) -> None:
        self.text = text
        self.source_bytes = text.encode("utf-8")
        self._ascii = len(self.source_bytes) == len(text)
        self.lines = LineIndex(text)
        self.tree = self._create_parser().parse(self.source_bytes)
        self.root = self.tree.root_node
        self._sites: Optional[List[DeclarationSite]] = None
        self._handlers: Dict[
            str, Callable[[ts.Node, DeclarationSite], DeclarationSignature]
        ] = {
            "function_declaration": self._handle_function,
            "generator_function_declaration": self._handle_function,
            "function_signature": self._handle_function,
            "function_expression": self._handle_function,
            "function": self._handle_function,
            "generator_function": self._handle_function,
            "arrow_function": self._handle_arrow_function,
            "class_declaration": self._handle_class,
            "abstract_class_declaration": self._handle_class,
            "class": self._handle_class,
            "interface_declaration": self._handle_interface,
            "enum_declaration": self._handle_enum,
            "type_alias_declaration": self._handle_type_alias,
            "variable_declarator": self._handle_declarator,
            "assignment_expression": self._handle_assignment,
            "method_definition": self._handle_method,
            "method_signature": self._handle_method,
            "abstract_method_signature": self._handle_method,
            "public_field_definition": self._handle_field,
            "field_definition": self._handle_field,
            "property_signature": self._handle_field,
        }

    @abstractmethod
    def _create_parser(self) -> ts.Parser: ...

    # --- offsets ------------------------------------------------------
    def _char_offset(self, byte_offset: int) -> int:
        if self._ascii:
            return byte_offset
        return len(self.source_bytes[:byte_offset].decode("utf-8", errors="replace"))

    def _byte_offset(self, char_offset: int) -> int:
        if self._ascii:
            return char_offset
        return len(self.text[:char_offset].encode("utf-8"))

    def _slice(self, start_byte: int, end_byte: int) -> str:
        return self.source_bytes[start_byte:end_byte].decode("utf-8")

    # --- locating declarations -----------------------------------------
    def iter_declarations(self) -> List[DeclarationSite]:
        """
        Enumerate declaration sites in document order. Class and interface
        members are listed after their container, independently of it.
        """
        if self._sites is None:
            sites: List[DeclarationSite] = []
            self._walk_statements(self.root, sites, owner=None)
            sites.sort(key=lambda s: s.start_offset)
            self._sites = sites
        return self._sites

    def declaration_at(
        self, offset: int, *, lookahead_lines: int = DEFAULT_LOOKAHEAD_LINES
    ) -> DeclarationSite:
        """
        Return the declaration starting at the first code token at or after
        *offset*, skipping blank lines and comments.
        """
        offset = min(max(offset, 0), len(self.text))
        anchor_line = self.lines.line_of(offset)
        start = skip_trivia(self.text, self._escape_comment(offset))
        if start >= len(self.text):
            raise NotADeclaration("Nothing to document here", line=anchor_line)
        start_line = self.lines.line_of(start)
        if start_line - anchor_line > lookahead_lines:
            raise NotADeclaration(
                f"No declaration within {lookahead_lines} lines", line=anchor_line
            )
        for site in self.iter_declarations():
            if site.start_offset == start:
                return site
        if self._looks_broken(start, start_line + lookahead_lines):
            raise UnbalancedSyntax(
                "Declaration brackets never balance", line=start_line
            )
        raise NotADeclaration("Nothing to document here", line=start_line)

    def _escape_comment(self, offset: int) -> int:
        b = self._byte_offset(offset)
        node = self.root.descendant_for_byte_range(b, b)
        if node is not None and node.type == "comment" and node.start_byte < b:
            return self._char_offset(node.end_byte)
        return offset

    def _looks_broken(self, start: int, last_line: int) -> bool:
        rest = self.text[start:]
        if not (DECLARATION_START.match(rest) or MEMBER_START.match(rest)):
            return False
        if not self.root.has_error:
            return False
        end_line = min(last_line, self.lines.line_count - 1)
        end = self._byte_offset(self.lines.line_end(end_line))
        return _has_error_between(self.root, self._byte_offset(start), end)

    # --- structural walk -------------------------------------------------
    def _make_site(
        self,
        node: ts.Node,
        outer: ts.Node,
        *,
        owner: Optional[str],
        modifiers: Optional[Set[Modifier]] = None,
        broken: bool = False,
    ) -> DeclarationSite:
        start = self._char_offset(outer.start_byte)
        return DeclarationSite(
            node=node,
            outer=outer,
            start_offset=start,
            line=outer.start_point[0],
            owner=owner,
            modifiers=set(modifiers or ()),
            broken=broken,
        )

    def _walk_statements(
        self, container: ts.Node, sites: List[DeclarationSite], owner: Optional[str]
    ) -> None:
        for child in container.named_children:
            if child.type == "comment":
                continue
            if child.type == "ERROR":
                if DECLARATION_START.match(get_node_text(child)):
                    sites.append(
                        self._make_site(child, child, owner=owner, broken=True)
                    )
                continue
            if child.type == "export_statement":
                inner = child.child_by_field_name(
                    "declaration"
                ) or child.child_by_field_name("value")
                if inner is None:
                    continue
                mods = {Modifier.EXPORT}
                if any(c.type == "default" for c in child.children):
                    mods.add(Modifier.DEFAULT)
                self._visit_statement(inner, child, sites, owner, mods)
                continue
            self._visit_statement(child, child, sites, owner, set())

    def _visit_statement(
        self,
        node: ts.Node,
        outer: ts.Node,
        sites: List[DeclarationSite],
        owner: Optional[str],
        mods: Set[Modifier],
    ) -> None:
        t = node.type
        if t in (
            "function_declaration",
            "generator_function_declaration",
            "function_signature",
            "function_expression",
            "function",
            "generator_function",
            "arrow_function",
            "enum_declaration",
            "type_alias_declaration",
        ):
            sites.append(self._site(node, outer, owner, mods))
            self._walk_local_declarations(node, sites)
        elif t in _CLASS_VALUES:
            site = self._site(node, outer, owner, mods)
            sites.append(site)
            self._walk_class_body(node, sites, get_node_text(node.child_by_field_name("name")) or None)
        elif t == "interface_declaration":
            sites.append(self._site(node, outer, owner, mods))
            self._walk_interface_body(
                node, sites, get_node_text(node.child_by_field_name("name")) or None
            )
        elif t in ("lexical_declaration", "variable_declaration"):
            declarator = next(
                (c for c in node.named_children if c.type == "variable_declarator"),
                None,
            )
            if declarator is None:
                return
            decl_mods = set(mods)
            kind_node = node.child_by_field_name("kind")
            keyword = get_node_text(kind_node) if kind_node is not None else ""
            if keyword == "const" or (
                not keyword and get_node_text(node).lstrip().startswith("const")
            ):
                decl_mods.add(Modifier.CONST)
            sites.append(self._site(declarator, outer, owner, decl_mods))
            self._walk_local_declarations(declarator, sites)
            value = declarator.child_by_field_name("value")
            if value is not None and value.type in _CLASS_VALUES:
                name = get_node_text(declarator.child_by_field_name("name")) or None
                self._walk_class_body(value, sites, name)
        elif t == "expression_statement":
            for ch in node.named_children:
                if ch.type == "assignment_expression":
                    rhs = ch.child_by_field_name("right")
                    if rhs is not None and (
                        rhs.type == "arrow_function"
                        or rhs.type in _FUNCTION_VALUES
                        or rhs.type in _CLASS_VALUES
                    ):
                        sites.append(self._site(ch, outer, owner, mods))
                        self._walk_local_declarations(ch, sites)
                        if rhs.type in _CLASS_VALUES:
                            lhs = get_node_text(ch.child_by_field_name("left"))
                            self._walk_class_body(rhs, sites, lhs.split(".")[-1] or None)
                elif ch.type in ("internal_module", "module"):
                    self._walk_namespace(ch, sites, owner)
        elif t in ("internal_module", "module"):
            self._walk_namespace(node, sites, owner)
        elif t == "ambient_declaration":
            for ch in node.named_children:
                if ch.type == "statement_block":
                    self._walk_statements(ch, sites, owner)
                else:
                    self._visit_statement(ch, outer, sites, owner, mods)

    def _walk_namespace(
        self, node: ts.Node, sites: List[DeclarationSite], owner: Optional[str]
    ) -> None:
        body = node.child_by_field_name("body") or next(
            (c for c in node.children if c.type == "statement_block"), None
        )
        if body is not None:
            self._walk_statements(body, sites, owner)

    def _walk_local_declarations(self, node: ts.Node, sites: List[DeclarationSite]) -> None:
        """Enumerate declarations inside the block body of a function-valued declaration."""
        if node.type in ("variable_declarator", "public_field_definition", "field_definition"):
            node = node.child_by_field_name("value")
        elif node.type == "assignment_expression":
            node = node.child_by_field_name("right")
        if node is None or node.type not in _NESTED_SCOPES or node.type in _CLASS_VALUES:
            return
        body = node.child_by_field_name("body")
        if body is not None and body.type == "statement_block":
            self._walk_statements(body, sites, owner=None)

    def _site(
        self,
        node: ts.Node,
        outer: ts.Node,
        owner: Optional[str],
        mods: Set[Modifier],
    ) -> DeclarationSite:
        return self._make_site(
            node,
            outer,
            owner=owner,
            modifiers=mods,
            broken=self._header_has_error(node),
        )

    def _walk_class_body(
        self, class_node: ts.Node, sites: List[DeclarationSite], owner: Optional[str]
    ) -> None:
        body = class_node.child_by_field_name("body") or next(
            (c for c in class_node.children if c.type == "class_body"), None
        )
        if body is None:
            return
        decorators: List[ts.Node] = []
        for member in body.named_children:
            if member.type == "comment":
                continue
            if member.type == "decorator":
                decorators.append(member)
                continue
            outer = decorators[0] if decorators else member
            decorators = []
            if member.type in (
                "method_definition",
                "method_signature",
                "abstract_method_signature",
                "public_field_definition",
                "field_definition",
            ):
                sites.append(
                    self._make_site(
                        member,
                        outer,
                        owner=owner,
                        broken=self._header_has_error(member),
                    )
                )
                self._walk_local_declarations(member, sites)
            elif member.type == "ERROR" and MEMBER_START.match(get_node_text(member)):
                sites.append(self._make_site(member, member, owner=owner, broken=True))

    def _walk_interface_body(
        self, node: ts.Node, sites: List[DeclarationSite], owner: Optional[str]
    ) -> None:
        body = node.child_by_field_name("body") or next(
            (c for c in node.children if c.type in ("interface_body", "object_type")),
            None,
        )
        if body is None:
            return
        for member in body.named_children:
            if member.type in ("method_signature", "property_signature"):
                sites.append(
                    self._make_site(
                        member,
                        member,
                        owner=owner,
                        broken=self._header_has_error(member),
                    )
                )

    # --- signature extraction -------------------------------------------
    def parse_signature(self, site: DeclarationSite) -> DeclarationSignature:
        """
        Build the DeclarationSignature for *site*.

        Raises UnbalancedSyntax when the declaration header is malformed and
        NotADeclaration when the node kind is not documentable.
        """
        if site.broken:
            raise UnbalancedSyntax(
                "Declaration brackets never balance", line=site.line
            )
        header_end = self._header_end(site.node)
        check_balanced(
            self.text,
            site.start_offset,
            self._char_offset(header_end),
            line=site.line,
        )
        handler = self._handlers.get(site.node.type)
        if handler is None:
            raise NotADeclaration(
                f"Unsupported declaration node {site.node.type}", line=site.line
            )
        try:
            sig = handler(site.node, site)
        except (NotADeclaration, UnbalancedSyntax):
            raise
        except Exception as ex:
            logger.warning(
                "Signature handler error",
                node_type=site.node.type,
                line=site.line + 1,
                error=str(ex),
            )
            raise NotADeclaration(
                f"Unable to read declaration: {ex}", line=site.line
            ) from ex
        return sig.model_copy(
            update={
                "start_offset": site.start_offset,
                "end_offset": self._char_offset(
                    max(site.outer.end_byte, site.node.end_byte)
                ),
            }
        )

    def _header_end(self, node: ts.Node) -> int:
        """Byte offset where the declaration header ends (its body starts)."""
        target = node
        if node.type in ("variable_declarator", "public_field_definition", "field_definition"):
            value = node.child_by_field_name("value")
            if value is None or not (
                value.type == "arrow_function"
                or value.type in _FUNCTION_VALUES
                or value.type in _CLASS_VALUES
            ):
                return node.start_byte
            target = value
        elif node.type == "assignment_expression":
            target = node.child_by_field_name("right") or node
        body = target.child_by_field_name("body")
        if body is not None:
            if body.type in ("statement_block", "class_body"):
                return body.start_byte
            # expression bodied arrow function
            return body.start_byte
        if node.type in ("enum_declaration", "type_alias_declaration", "interface_declaration"):
            return node.start_byte
        return target.end_byte

    def _header_has_error(self, node: ts.Node) -> bool:
        if not node.has_error:
            return False
        return _has_error_between(node, node.start_byte, self._header_end(node))

    def _base_signature(
        self,
        kind: DeclarationKind,
        site: DeclarationSite,
        *,
        name: Optional[str],
        modifiers: Optional[Set[Modifier]] = None,
        **kw,
    ) -> DeclarationSignature:
        mods = set(site.modifiers)
        if modifiers:
            mods |= modifiers
        return DeclarationSignature(
            kind=kind, name=name, owner=site.owner, modifiers=mods, **kw
        )

    def _function_like(
        self,
        node: ts.Node,
        site: DeclarationSite,
        kind: DeclarationKind,
        *,
        name: Optional[str],
        extra_modifiers: Optional[Set[Modifier]] = None,
    ) -> DeclarationSignature:
        mods = self._token_modifiers(node)
        if node.type in ("generator_function_declaration", "generator_function"):
            mods.add(Modifier.GENERATOR)
        if extra_modifiers:
            mods |= extra_modifiers
        params_node = node.child_by_field_name("parameters")
        if params_node is not None:
            params = self._parameters(params_node)
        else:
            single = node.child_by_field_name("parameter")
            params = (
                [ParameterInfo(name=get_node_text(single))] if single is not None else []
            )
        returns_value, throws = self._scan_body(node.child_by_field_name("body"))
        return self._base_signature(
            kind,
            site,
            name=name,
            modifiers=mods,
            type_parameters=self._type_parameters(node),
            parameters=params,
            return_type=self._return_type(node.child_by_field_name("return_type")),
            returns_value=returns_value,
            throws_hints=throws,
        )

    # --- handlers -------------------------------------------------------
    def _handle_function(
        self, node: ts.Node, site: DeclarationSite
    ) -> DeclarationSignature:
        name = get_node_text(node.child_by_field_name("name")) or None
        return self._function_like(node, site, DeclarationKind.FUNCTION, name=name)

    def _handle_arrow_function(
        self, node: ts.Node, site: DeclarationSite
    ) -> DeclarationSignature:
        return self._function_like(node, site, DeclarationKind.ARROW_FUNCTION, name=None)

    def _handle_class(
        self, node: ts.Node, site: DeclarationSite, *, name: Optional[str] = None
    ) -> DeclarationSignature:
        name = get_node_text(node.child_by_field_name("name")) or name
        mods = self._token_modifiers(node)
        if node.type == "abstract_class_declaration":
            mods.add(Modifier.ABSTRACT)
        heritage: List[str] = []
        implements: List[str] = []
        for ch in node.children:
            if ch.type != "class_heritage":
                continue
            for clause in ch.named_children:
                if clause.type == "extends_clause":
                    value = clause.child_by_field_name("value")
                    start = value.start_byte if value is not None else clause.start_byte
                    txt = normalize_text(self._slice(start, clause.end_byte))
                    if txt:
                        heritage.append(re.sub(r"^extends\s+", "", txt))
                elif clause.type == "implements_clause":
                    implements.extend(
                        normalize_text(get_node_text(t)) or ""
                        for t in clause.named_children
                        if t.type != "comment"
                    )
                elif clause.type != "comment":
                    # JavaScript grammar: `extends <expression>` without a clause node
                    txt = normalize_text(get_node_text(clause))
                    if txt:
                        heritage.append(txt)
        return self._base_signature(
            DeclarationKind.CLASS,
            site,
            name=name,
            modifiers=mods,
            type_parameters=self._type_parameters(node),
            heritage=heritage,
            implements=[i for i in implements if i],
        )

    def _handle_interface(
        self, node: ts.Node, site: DeclarationSite
    ) -> DeclarationSignature:
        name = get_node_text(node.child_by_field_name("name")) or None
        heritage: List[str] = []
        for ch in node.named_children:
            if ch.type == "extends_type_clause":
                heritage.extend(
                    normalize_text(get_node_text(t)) or ""
                    for t in ch.named_children
                    if t.type != "comment"
                )
        body = node.child_by_field_name("body") or next(
            (c for c in node.children if c.type in ("interface_body", "object_type")),
            None,
        )
        return self._base_signature(
            DeclarationKind.INTERFACE,
            site,
            name=name,
            type_parameters=self._type_parameters(node),
            heritage=[h for h in heritage if h],
            members=self._object_members(body),
        )

    def _handle_enum(
        self, node: ts.Node, site: DeclarationSite
    ) -> DeclarationSignature:
        name = get_node_text(node.child_by_field_name("name")) or None
        body = node.child_by_field_name("body") or next(
            (c for c in node.children if c.type == "enum_body"), None
        )
        value_type = "number"
        if body is not None:
            for member in body.named_children:
                if member.type != "enum_assignment":
                    continue
                value = member.child_by_field_name("value")
                if value is not None and value.type in ("string", "template_string"):
                    value_type = "string"
                    break
        return self._base_signature(
            DeclarationKind.ENUM, site, name=name, type_annotation=value_type
        )

    def _handle_type_alias(
        self, node: ts.Node, site: DeclarationSite
    ) -> DeclarationSignature:
        name = get_node_text(node.child_by_field_name("name")) or None
        value = node.child_by_field_name("value")
        members: List[ParameterInfo] = []
        if value is not None and value.type == "object_type":
            type_text: Optional[str] = "Object"
            members = self._object_members(value)
        else:
            type_text = normalize_text(get_node_text(value)) if value is not None else None
        return self._base_signature(
            DeclarationKind.TYPE_ALIAS,
            site,
            name=name,
            type_parameters=self._type_parameters(node),
            type_annotation=type_text,
            members=members,
        )

    def _handle_declarator(
        self, node: ts.Node, site: DeclarationSite
    ) -> DeclarationSignature:
        name = normalize_text(get_node_text(node.child_by_field_name("name")))
        value = node.child_by_field_name("value")
        if value is not None:
            if value.type == "arrow_function":
                return self._function_like(
                    value, site, DeclarationKind.ARROW_FUNCTION, name=name
                )
            if value.type in _FUNCTION_VALUES:
                return self._function_like(
                    value, site, DeclarationKind.FUNCTION, name=name
                )
            if value.type in _CLASS_VALUES:
                return self._handle_class(value, site, name=name)
        type_text = self._annotation_text(node.child_by_field_name("type"))
        if type_text is None and value is not None:
            type_text = _literal_type(value)
        return self._base_signature(
            DeclarationKind.VARIABLE, site, name=name, type_annotation=type_text
        )

    def _handle_assignment(
        self, node: ts.Node, site: DeclarationSite
    ) -> DeclarationSignature:
        lhs = get_node_text(node.child_by_field_name("left"))
        name = lhs.split(".")[-1].strip() or None
        rhs = node.child_by_field_name("right")
        if rhs is None:
            raise NotADeclaration("Assignment has no value", line=site.line)
        if rhs.type == "arrow_function":
            return self._function_like(
                rhs, site, DeclarationKind.ARROW_FUNCTION, name=name
            )
        if rhs.type in _FUNCTION_VALUES:
            return self._function_like(rhs, site, DeclarationKind.FUNCTION, name=name)
        if rhs.type in _CLASS_VALUES:
            return self._handle_class(rhs, site, name=name)
        raise NotADeclaration("Assignment is not a declaration", line=site.line)

    def _handle_method(
        self, node: ts.Node, site: DeclarationSite
    ) -> DeclarationSignature:
        name_node = node.child_by_field_name("name")
        name = get_node_text(name_node) or None
        extra: Set[Modifier] = set()
        if name_node is not None and name_node.type == "private_property_identifier":
            extra.add(Modifier.PRIVATE)
        if node.type == "abstract_method_signature":
            extra.add(Modifier.ABSTRACT)
        tokens = {c.type for c in node.children if not c.is_named}
        if name == "constructor":
            kind = DeclarationKind.CONSTRUCTOR
        elif "get" in tokens:
            kind = DeclarationKind.GETTER
        elif "set" in tokens:
            kind = DeclarationKind.SETTER
        else:
            kind = DeclarationKind.METHOD
        return self._function_like(node, site, kind, name=name, extra_modifiers=extra)

    def _handle_field(
        self, node: ts.Node, site: DeclarationSite
    ) -> DeclarationSignature:
        name_node = node.child_by_field_name("name") or node.child_by_field_name(
            "property"
        )
        name = get_node_text(name_node) or None
        mods = self._token_modifiers(node)
        if name_node is not None and name_node.type == "private_property_identifier":
            mods.add(Modifier.PRIVATE)
        value = node.child_by_field_name("value")
        if value is not None and value.type == "arrow_function":
            return self._function_like(
                value,
                site,
                DeclarationKind.ARROW_FUNCTION,
                name=name,
                extra_modifiers=mods,
            )
        if value is not None and value.type in _FUNCTION_VALUES:
            return self._function_like(
                value, site, DeclarationKind.FUNCTION, name=name, extra_modifiers=mods
            )
        type_text = self._annotation_text(node.child_by_field_name("type"))
        if type_text is None and value is not None:
            type_text = _literal_type(value)
        return self._base_signature(
            DeclarationKind.PROPERTY,
            site,
            name=name,
            modifiers=mods,
            type_annotation=type_text,
        )

    # --- pieces -----------------------------------------------------------
    def _token_modifiers(self, node: ts.Node) -> Set[Modifier]:
        mods: Set[Modifier] = set()
        for ch in node.children:
            if ch.type == "accessibility_modifier":
                access = _ACCESS.get(get_node_text(ch).strip())
                if access is not None:
                    mods.add(access)
            elif not ch.is_named and ch.type in _TOKEN_MODIFIERS:
                mods.add(_TOKEN_MODIFIERS[ch.type])
        return mods

    def _annotation_text(self, node: Optional[ts.Node]) -> Optional[str]:
        if node is None:
            return None
        txt = get_node_text(node).strip()
        if txt.startswith(":"):
            txt = txt[1:]
        return normalize_text(txt)

    def _return_type(self, node: Optional[ts.Node]) -> Optional[str]:
        if node is None:
            return None
        if node.type == "asserts_annotation":
            return None
        if node.type == "type_predicate_annotation":
            return "boolean"
        return self._annotation_text(node)

    def _type_parameters(self, node: ts.Node) -> List[TypeParameterInfo]:
        tp_node = node.child_by_field_name("type_parameters") or next(
            (c for c in node.children if c.type == "type_parameters"), None
        )
        if tp_node is None:
            return []
        out: List[TypeParameterInfo] = []
        for p in tp_node.named_children:
            if p.type != "type_parameter":
                continue
            name = get_node_text(p.child_by_field_name("name")).strip()
            if not name:
                continue
            constraint = None
            constraint_node = p.child_by_field_name("constraint")
            if constraint_node is not None:
                constraint = normalize_text(
                    re.sub(r"^(extends|:)\s*", "", get_node_text(constraint_node).strip())
                )
            default = None
            default_node = p.child_by_field_name("value")
            if default_node is not None:
                default = normalize_text(get_node_text(default_node).strip().lstrip("="))
            out.append(TypeParameterInfo(name=name, constraint=constraint, default=default))
        return out

    def _parameters(self, params_node: ts.Node) -> List[ParameterInfo]:
        out: List[ParameterInfo] = []
        for child in params_node.named_children:
            if child.type in ("comment", "decorator"):
                continue
            info = self._parameter(child, len(out))
            if info is not None:
                out.append(info)
        return out

    def _parameter(self, node: ts.Node, index: int) -> Optional[ParameterInfo]:
        pattern: Optional[ts.Node] = node
        type_node: Optional[ts.Node] = None
        value_node: Optional[ts.Node] = None
        optional = False
        if node.type in ("required_parameter", "optional_parameter"):
            pattern = node.child_by_field_name("pattern")
            type_node = node.child_by_field_name("type")
            value_node = node.child_by_field_name("value")
            optional = node.type == "optional_parameter"
        elif node.type == "assignment_pattern":
            pattern = node.child_by_field_name("left")
            value_node = node.child_by_field_name("right")
        if pattern is None or pattern.type == "this":
            return None

        is_rest = False
        if pattern.type == "rest_pattern":
            is_rest = True
            inner = next(
                (c for c in pattern.named_children if c.type != "type_annotation"), None
            )
            if inner is not None:
                pattern = inner

        type_text = self._annotation_text(type_node)
        default = None
        if value_node is not None:
            default = normalize_text(get_node_text(value_node))
            optional = True
            if type_text is None:
                type_text = _literal_type(value_node)

        if pattern.type in ("object_pattern", "array_pattern"):
            is_object = pattern.type == "object_pattern"
            return ParameterInfo(
                name=DESTRUCTURED_PARAM_NAME.format(index=index),
                type=type_text or ("Object" if is_object else "Array"),
                optional=optional,
                default_value=default,
                is_rest=is_rest,
                destructured=True,
                pattern=normalize_text(get_node_text(pattern)),
                members=self._pattern_members(pattern, type_node) if is_object else [],
            )
        return ParameterInfo(
            name=normalize_text(get_node_text(pattern)) or f"arg{index}",
            type=type_text,
            optional=optional,
            default_value=default,
            is_rest=is_rest,
        )

    def _pattern_members(
        self, pattern: ts.Node, type_node: Optional[ts.Node]
    ) -> List[ParameterInfo]:
        declared: Dict[str, ParameterInfo] = {}
        if type_node is not None:
            object_type = next(
                (c for c in type_node.named_children if c.type == "object_type"), None
            )
            for member in self._object_members(object_type):
                declared[member.name] = member
        out: List[ParameterInfo] = []
        for child in pattern.named_children:
            default = None
            is_rest = False
            if child.type == "shorthand_property_identifier_pattern":
                name = get_node_text(child)
            elif child.type == "object_assignment_pattern":
                name = get_node_text(child.child_by_field_name("left"))
                default = normalize_text(get_node_text(child.child_by_field_name("right")))
            elif child.type == "pair_pattern":
                name = get_node_text(child.child_by_field_name("key"))
                value = child.child_by_field_name("value")
                if value is not None and value.type == "assignment_pattern":
                    default = normalize_text(get_node_text(value.child_by_field_name("right")))
            elif child.type == "rest_pattern":
                inner = next(iter(child.named_children), None)
                name = get_node_text(inner)
                is_rest = True
            else:
                continue
            name = name.strip()
            if not name:
                continue
            known = declared.get(name)
            out.append(
                ParameterInfo(
                    name=name,
                    type=known.type if known is not None else None,
                    optional=default is not None or (known is not None and known.optional),
                    default_value=default,
                    is_rest=is_rest,
                )
            )
        return out

    def _object_members(self, body: Optional[ts.Node]) -> List[ParameterInfo]:
        if body is None:
            return []
        out: List[ParameterInfo] = []
        for member in body.named_children:
            if member.type != "property_signature":
                continue
            name = get_node_text(member.child_by_field_name("name")).strip()
            if not name:
                continue
            out.append(
                ParameterInfo(
                    name=name,
                    type=self._annotation_text(member.child_by_field_name("type")),
                    optional=any(c.type == "?" for c in member.children),
                )
            )
        return out

    def _scan_body(self, body: Optional[ts.Node]) -> Tuple[bool, List[str]]:
        """
        Return whether the body returns a value and the thrown type names,
        ignoring nested functions and classes.
        """
        if body is None:
            return False, []
        if body.type != "statement_block":
            # expression bodied arrow function
            return True, []
        returns_value = False
        throws: List[str] = []
        stack = list(reversed(body.named_children))
        while stack:
            n = stack.pop()
            if n.type in _NESTED_SCOPES:
                continue
            if n.type == "return_statement":
                if any(c.type != "comment" for c in n.named_children):
                    returns_value = True
            elif n.type == "throw_statement":
                hint = _thrown_type(n)
                if hint and hint not in throws:
                    throws.append(hint)
            stack.extend(reversed(n.named_children))
        return returns_value, throws


class SignatureParserRegistry:
    """
    Singleton registry mapping dialects and file extensions to parser classes.
    """

    _instance = None
    _parsers: List[Type[AbstractSignatureParser]] = []

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(SignatureParserRegistry, cls).__new__(cls)
        return cls._instance

    @classmethod
    def register_parser(cls, parser: Type[AbstractSignatureParser]) -> None:
        if parser not in cls._parsers:
            cls._parsers.append(parser)

    @classmethod
    def get_parsers(cls) -> List[Type[AbstractSignatureParser]]:
        return cls._parsers

    @classmethod
    def for_dialect(
        cls, dialect: Union[Dialect, str]
    ) -> Type[AbstractSignatureParser]:
        dialect = Dialect(dialect)
        for parser in cls._parsers:
            if parser.dialect == dialect:
                return parser
        raise ValueError(f"No parser registered for dialect {dialect.value}")

    @classmethod
    def for_path(cls, path: Union[str, Path]) -> Type[AbstractSignatureParser]:
        suffix = Path(path).suffix.lower()
        for parser in cls._parsers:
            if suffix in parser.extensions:
                return parser
        raise ValueError(f"No parser registered for extension {suffix or path}")


# Helpers
def get_node_text(node) -> str:
    """
    Get text of the tree sitter node
    """
    if not node or not node.text:
        return ""

    return node.text.decode("utf-8")


def _has_error_between(node: ts.Node, start_byte: int, end_byte: int) -> bool:
    if node.end_byte <= start_byte or node.start_byte >= end_byte:
        # zero width MISSING nodes sit exactly at a boundary
        if not (node.is_missing and start_byte <= node.start_byte <= end_byte):
            return False
    if node.type == "ERROR" or node.is_missing:
        return True
    if not node.has_error:
        return False
    return any(_has_error_between(c, start_byte, end_byte) for c in node.children)


def _literal_type(node: ts.Node) -> Optional[str]:
    t = node.type
    if t == "number":
        return "number"
    if t in ("string", "template_string"):
        return "string"
    if t in ("true", "false"):
        return "boolean"
    if t == "array":
        return "Array"
    if t == "object":
        return "Object"
    if t == "regex":
        return "RegExp"
    if t in ("arrow_function",) + _FUNCTION_VALUES:
        return "Function"
    if t == "new_expression":
        ctor = node.child_by_field_name("constructor")
        return normalize_text(get_node_text(ctor)) if ctor is not None else None
    return None


def _thrown_type(node: ts.Node) -> Optional[str]:
    expr = next((c for c in node.named_children if c.type != "comment"), None)
    if expr is None:
        return None
    if expr.type == "new_expression":
        ctor = expr.child_by_field_name("constructor")
        return normalize_text(get_node_text(ctor)) if ctor is not None else None
    if expr.type in ("string", "template_string"):
        return "string"
    return None
