"""Tree-sitter front end for TypeScript / TSX sources.

Wraps the ``tree-sitter-typescript`` grammars behind a small
:class:`SyntaxParser` that picks the dialect from a file extension and
hands back a :class:`SyntaxTree` (tree + source bytes).  The helpers at the
bottom of the module are shared by the extractor, the usage resolver and
the chunker so they all agree on what a declaration looks like.
"""

from __future__ import annotations

import importlib
import logging
from pathlib import PurePath
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from .errors import GrammarUnavailableError, SourceParseError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Dialect <-> file-extension mapping
# ---------------------------------------------------------------------------
TYPESCRIPT = "typescript"
TSX = "tsx"

MARKUP_EXTENSIONS = {".tsx", ".jsx"}

# dialect -> (grammar module, language function)
_GRAMMARS: Dict[str, Tuple[str, str]] = {
    TYPESCRIPT: ("tree_sitter_typescript", "language_typescript"),
    TSX: ("tree_sitter_typescript", "language_tsx"),
}


def dialect_for_path(file_path: Union[str, PurePath]) -> str:
    """Return ``"tsx"`` for markup-flavoured extensions, else ``"typescript"``."""
    suffix = PurePath(str(file_path)).suffix.lower()
    return TSX if suffix in MARKUP_EXTENSIONS else TYPESCRIPT


# ===================================================================
# Syntax tree wrapper
# ===================================================================

class SyntaxTree:
    """A parsed tree together with the bytes it was parsed from."""

    def __init__(self, tree: Any, source: bytes, dialect: str) -> None:
        self.tree = tree
        self.source = source
        self.dialect = dialect

    @property
    def root(self) -> Any:
        return self.tree.root_node

    @property
    def has_error(self) -> bool:
        return bool(self.root.has_error)

    def top_level(self) -> List[Any]:
        """Named children of the root, comments excluded."""
        return [c for c in self.root.named_children if c.type != "comment"]

    def slice(self, start_byte: int, end_byte: int) -> str:
        return self.source[start_byte:end_byte].decode("utf-8")

    def text(self, node: Any) -> str:
        return self.slice(node.start_byte, node.end_byte)


# ===================================================================
# Parser
# ===================================================================

class SyntaxParser:
    """Lazily loads one tree-sitter parser per dialect.

    Instances are cheap but not thread-safe; give each worker its own.
    """

    def __init__(self) -> None:
        self._parsers: Dict[str, Any] = {}

    def _parser_for(self, dialect: str) -> Any:
        parser = self._parsers.get(dialect)
        if parser is not None:
            return parser

        grammar = _GRAMMARS.get(dialect)
        if grammar is None:
            raise GrammarUnavailableError(f"No grammar mapped for dialect '{dialect}'")
        mod_name, func_name = grammar

        from tree_sitter import Language, Parser as TSParser

        try:
            mod = importlib.import_module(mod_name)
        except ImportError as exc:
            raise GrammarUnavailableError(
                f"Grammar package '{mod_name}' is not installed. "
                f"Install with: pip install {mod_name.replace('_', '-')}"
            ) from exc

        parser = TSParser(Language(getattr(mod, func_name)()))
        self._parsers[dialect] = parser
        logger.debug("Loaded tree-sitter parser for %s", dialect)
        return parser

    def parse(self, source: str, dialect: str = TYPESCRIPT, strict: bool = True) -> SyntaxTree:
        """Parse *source* in *dialect*.

        With *strict* set, a tree containing syntax errors raises
        :class:`SourceParseError` pointing at the first error.
        """
        source_bytes = source.encode("utf-8")
        tree = SyntaxTree(self._parser_for(dialect).parse(source_bytes), source_bytes, dialect)
        if strict and tree.has_error:
            bad = _first_error(tree.root)
            line, column = (bad.start_point[0] + 1, bad.start_point[1] + 1) if bad else (0, 0)
            raise SourceParseError(
                f"Syntax error at line {line}, column {column} ({dialect})",
                line=line, column=column,
            )
        return tree

    def parse_for_path(
        self,
        source: str,
        file_path: Union[str, PurePath],
        strict: bool = True,
    ) -> SyntaxTree:
        return self.parse(source, dialect_for_path(file_path), strict=strict)


def _first_error(node: Any) -> Optional[Any]:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


# ===================================================================
# Shared Helpers
# ===================================================================

CLASS_DECLARATIONS = {"class_declaration", "abstract_class_declaration"}
FUNCTION_DECLARATIONS = {"function_declaration", "generator_function_declaration"}
VARIABLE_DECLARATIONS = {"lexical_declaration", "variable_declaration"}
# "function" is the pre-0.21 name of function_expression
FUNCTION_VALUES = {"arrow_function", "function_expression", "function", "generator_function"}
PARAMETER_NODES = {"required_parameter", "optional_parameter"}


def node_text(node: Any) -> str:
    return node.text.decode("utf-8")


def name_of(node: Any) -> Optional[str]:
    name_node = node.child_by_field_name("name")
    return node_text(name_node) if name_node is not None else None


def has_token(node: Any, token: str) -> bool:
    """True when *node* has a direct (anonymous) child token ``token``."""
    return any(child.type == token for child in node.children)


def is_async(node: Any) -> bool:
    return has_token(node, "async")


def unwrap_export(node: Any) -> Tuple[Optional[Any], bool, bool]:
    """Return ``(declaration, exported, default)`` for a top-level node.

    Plain declarations come back unchanged; ``export`` statements yield the
    wrapped declaration, or ``None`` when they export an expression or a
    clause instead.
    """
    if node.type != "export_statement":
        return node, False, False
    return node.child_by_field_name("declaration"), True, has_token(node, "default")


def unwrap_ambient(declaration: Optional[Any]) -> Optional[Any]:
    """The declaration inside a ``declare ...`` wrapper; others unchanged."""
    if declaration is not None and declaration.type == "ambient_declaration":
        inner = declaration.named_children
        return inner[0] if inner else None
    return declaration


def type_node(annotation: Optional[Any]) -> Optional[Any]:
    """Strip a ``type_annotation`` wrapper down to the type node itself."""
    if annotation is None:
        return None
    if annotation.type.endswith("annotation"):
        named = annotation.named_children
        return named[0] if named else None
    return annotation


def _heritage_head(type_node_: Any) -> str:
    if type_node_.type == "generic_type":
        inner = type_node_.child_by_field_name("name")
        if inner is not None:
            return node_text(inner)
    return node_text(type_node_)


def heritage_names(declaration: Any, include_implements: bool = True) -> List[str]:
    """Names referenced by ``extends`` / ``implements`` clauses, in order.

    Generic arguments are dropped, so ``extends Base<T>`` yields ``Base``.
    """
    names: List[str] = []
    for clause in _heritage_clauses(declaration):
        if clause.type == "extends_clause":
            values = clause.children_by_field_name("value")
            if not values:
                values = [c for c in clause.named_children if c.type != "type_arguments"]
            names.extend(_heritage_head(v) for v in values)
        elif clause.type == "extends_type_clause":
            names.extend(_heritage_head(t) for t in clause.named_children)
        elif clause.type == "implements_clause" and include_implements:
            names.extend(_heritage_head(t) for t in clause.named_children)
    return names


def _heritage_clauses(declaration: Any) -> Iterator[Any]:
    for child in declaration.children:
        if child.type == "class_heritage":
            yield from child.named_children
        elif child.type in ("extends_clause", "extends_type_clause", "implements_clause"):
            yield child


def parameter_nodes(function_node: Any) -> List[Any]:
    """Parameter nodes of a function-like node (``x => x`` included)."""
    params = function_node.child_by_field_name("parameters")
    if params is None:
        single = function_node.child_by_field_name("parameter")
        return [single] if single is not None else []
    return [p for p in params.named_children if p.type != "comment"]


def parameter_pattern(param: Any) -> Any:
    if param.type in PARAMETER_NODES:
        pattern = param.child_by_field_name("pattern")
        if pattern is not None:
            return pattern
    return param


def parameter_type_node(param: Any) -> Optional[Any]:
    if param.type in PARAMETER_NODES:
        return type_node(param.child_by_field_name("type"))
    return None


def variable_declarators(node: Any) -> List[Any]:
    if node.type not in VARIABLE_DECLARATIONS:
        return []
    return [c for c in node.named_children if c.type == "variable_declarator"]


def function_value(declarator: Any) -> Optional[Any]:
    """The function/arrow initializer of a declarator, if it has one."""
    value = declarator.child_by_field_name("value")
    while value is not None and value.type == "parenthesized_expression":
        inner = value.named_children
        value = inner[0] if inner else None
    if value is not None and value.type in FUNCTION_VALUES:
        return value
    return None


def string_content(node: Any) -> str:
    """Text of a string literal without its surrounding quotes."""
    return node_text(node).strip("'\"`")


def first_field(node: Any, *fields: str) -> Optional[Any]:
    """The first of *fields* present on *node*."""
    for field in fields:
        child = node.child_by_field_name(field)
        if child is not None:
            return child
    return None
