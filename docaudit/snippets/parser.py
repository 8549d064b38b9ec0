"""Tree-sitter powered identifier extraction for example snippets."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

_LANGUAGE = Language(tree_sitter_typescript.language_typescript())

_IDENTIFIER_NODES = {
    "identifier",
    "type_identifier",
    "shorthand_property_identifier",
    "shorthand_property_identifier_pattern",
}

# Parent node types whose ``name`` field declares a binding.
_NAMED_DECLARATIONS = {
    "class_declaration",
    "abstract_class_declaration",
    "class",
    "function_declaration",
    "generator_function_declaration",
    "function_expression",
    "interface_declaration",
    "type_alias_declaration",
    "enum_declaration",
    "type_parameter",
}

_PARAMETER_NODES = {"required_parameter", "optional_parameter"}
_PATTERN_NODES = {"array_pattern", "rest_pattern"}


@dataclass(frozen=True)
class IdentifierUse:
    """One identifier occurrence and how it is used."""

    name: str
    context: str  # "call", "type" or "value"
    is_declaration: bool


@dataclass(frozen=True)
class SyntaxDiagnostic:
    message: str
    line: int
    column: int


@dataclass
class ParsedExample:
    identifiers: List[IdentifierUse] = field(default_factory=list)
    syntax_errors: List[SyntaxDiagnostic] = field(default_factory=list)


class ExampleParser:
    """Parses TypeScript/JavaScript snippets into identifier uses and syntax errors.

    Parser instances are kept per thread, so one ``ExampleParser`` can be shared
    by concurrent drift workers.
    """

    def __init__(self) -> None:
        self._local = threading.local()

    def parse(self, source: str) -> ParsedExample:
        source_bytes = source.encode("utf-8", errors="surrogatepass")
        tree = self._get_parser().parse(source_bytes)
        root = tree.root_node
        identifiers = list(self._collect_identifiers(root, source_bytes))
        errors: List[SyntaxDiagnostic] = []
        if root.has_error:
            diagnostic = self._first_diagnostic(root, source_bytes)
            errors.append(diagnostic or SyntaxDiagnostic(message="Invalid syntax.", line=1, column=1))
        return ParsedExample(identifiers=identifiers, syntax_errors=errors)

    def _get_parser(self) -> Parser:
        parser = getattr(self._local, "parser", None)
        if parser is None:
            parser = Parser(_LANGUAGE)
            self._local.parser = parser
        return parser

    @staticmethod
    def _node_text(node: Node, source_bytes: bytes) -> str:
        return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")

    def _collect_identifiers(self, root: Node, source_bytes: bytes) -> Iterator[IdentifierUse]:
        # Explicit stack: example nesting depth is unbounded.
        stack = list(reversed(root.children))
        while stack:
            node = stack.pop()
            if node.type in _IDENTIFIER_NODES and not node.is_missing:
                use = self._classify(node, source_bytes)
                if use is not None:
                    yield use
            stack.extend(reversed(node.children))

    def _classify(self, node: Node, source_bytes: bytes) -> Optional[IdentifierUse]:
        name = self._node_text(node, source_bytes)
        if not name:
            return None
        parent = node.parent
        if parent is None:
            return IdentifierUse(name=name, context="value", is_declaration=False)

        # ``ns.Type``: only the namespace part is a free reference.
        if parent.type == "nested_type_identifier" and _is_field(parent, "name", node):
            return None

        if _is_declaration(node, parent):
            return IdentifierUse(name=name, context="value", is_declaration=True)
        return IdentifierUse(name=name, context=_usage_context(node, parent), is_declaration=False)

    def _first_diagnostic(self, root: Node, source_bytes: bytes) -> Optional[SyntaxDiagnostic]:
        stack = [root]
        while stack:
            node = stack.pop()
            row, column = node.start_point
            if node.is_missing:
                return SyntaxDiagnostic(message=f"'{node.type}' expected.", line=row + 1, column=column + 1)
            if node.type == "ERROR":
                token = self._node_text(_first_leaf(node), source_bytes).strip()
                if not token:
                    token = self._node_text(node, source_bytes).strip()[:20]
                message = f"Unexpected token '{token}'." if token else "Unexpected end of input."
                return SyntaxDiagnostic(message=message, line=row + 1, column=column + 1)
            stack.extend(
                child for child in reversed(node.children) if child.has_error or child.is_missing
            )
        return None


def _is_field(parent: Node, field_name: str, node: Node) -> bool:
    candidate = parent.child_by_field_name(field_name)
    return candidate is not None and candidate.id == node.id


def _is_declaration(node: Node, parent: Node) -> bool:
    if node.type == "shorthand_property_identifier_pattern":
        return True
    kind = parent.type
    if kind in _NAMED_DECLARATIONS:
        return _is_field(parent, "name", node)
    if kind == "variable_declarator":
        return _is_field(parent, "name", node)
    if kind in _PARAMETER_NODES:
        return _is_field(parent, "pattern", node)
    if kind == "arrow_function":
        return _is_field(parent, "parameter", node)
    if kind == "catch_clause":
        return _is_field(parent, "parameter", node)
    if kind == "for_in_statement":
        return _is_field(parent, "left", node)
    if kind in _PATTERN_NODES:
        return True
    if kind == "pair_pattern":
        return _is_field(parent, "value", node)
    if kind in {"assignment_pattern", "object_assignment_pattern"}:
        return _is_field(parent, "left", node)
    if kind == "import_specifier":
        # ``import { a as b }`` binds ``b``; ``a`` is looked up.
        return _is_field(parent, "alias", node)
    if kind in {"namespace_import", "import_clause"}:
        return True
    return False


def _usage_context(node: Node, parent: Node) -> str:
    if parent.type == "call_expression" and _is_field(parent, "function", node):
        return "call"
    if parent.type == "new_expression" and _is_field(parent, "constructor", node):
        return "call"
    if node.type == "type_identifier":
        return "type"
    if parent.type in {"extends_clause", "implements_clause"}:
        return "type"
    return "value"


def _first_leaf(node: Node) -> Node:
    current = node
    while current.children:
        current = current.children[0]
    return current


__all__ = ["ExampleParser", "IdentifierUse", "ParsedExample", "SyntaxDiagnostic"]
