"""Structural extraction: top-level declarations -> :class:`StructuralModel`.

Only the direct children of the program node are classified.  Members of
classes and interfaces are summarized on their owner; nested functions are
never surfaced as entities of their own.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .models import (
    ANY,
    VOID,
    ArrayType,
    ClassEntity,
    ComponentEntity,
    EnumEntity,
    ExportEdge,
    FunctionEntity,
    ImportEdge,
    InterfaceEntity,
    LiteralType,
    MethodSignature,
    NamedType,
    Parameter,
    ShapeType,
    StructuralModel,
    TypeAliasEntity,
    TypeExpression,
    UnionType,
    ValueSummary,
)
from .parser import (
    CLASS_DECLARATIONS,
    FUNCTION_DECLARATIONS,
    FUNCTION_VALUES,
    VARIABLE_DECLARATIONS,
    SyntaxTree,
    first_field,
    function_value,
    has_token,
    heritage_names,
    is_async,
    name_of,
    node_text,
    parameter_nodes,
    parameter_pattern,
    parameter_type_node,
    string_content,
    type_node,
    unwrap_ambient,
    unwrap_export,
    variable_declarators,
)

logger = logging.getLogger(__name__)

MARKUP_NODES = {"jsx_element", "jsx_self_closing_element", "jsx_fragment"}
METHOD_NODES = {"method_definition", "method_signature", "abstract_method_signature"}
# Nodes whose return statements belong to someone else.
_NESTED_SCOPES = FUNCTION_VALUES | FUNCTION_DECLARATIONS | CLASS_DECLARATIONS | {
    "class", "method_definition",
}

_DECIMAL_INT = re.compile(r"^\d+$")


def _collapse(text: str) -> str:
    return " ".join(text.split())


def _unparen(node: Optional[Any]) -> Optional[Any]:
    while node is not None and node.type == "parenthesized_expression":
        inner = [c for c in node.named_children if c.type != "comment"]
        node = inner[0] if inner else None
    return node


# ===================================================================
# Type normalization
# ===================================================================

def normalize_type(node: Optional[Any]) -> TypeExpression:
    """Normalize a type node (or ``type_annotation``) to a TypeExpression.

    Missing types normalize to ``any``.
    """
    node = type_node(node)
    if node is None:
        return ANY

    kind = node.type
    if kind == "object_type":
        return shape_from_members(node)
    if kind == "generic_type":
        name_node = node.child_by_field_name("name")
        args_node = node.child_by_field_name("type_arguments")
        args = ()
        if args_node is not None:
            args = tuple(normalize_type(a) for a in args_node.named_children if a.type != "comment")
        name = node_text(name_node) if name_node is not None else node_text(node)
        return NamedType(name, args)
    if kind in ("type_identifier", "nested_type_identifier"):
        return NamedType(node_text(node))
    if kind == "array_type":
        named = node.named_children
        if named:
            return ArrayType(normalize_type(named[0]))
    if kind in ("union_type", "intersection_type"):
        return UnionType(tuple(_flatten(node, kind)), "|" if kind == "union_type" else "&")
    if kind == "parenthesized_type":
        named = node.named_children
        if named:
            return normalize_type(named[0])
    return LiteralType(_collapse(node_text(node)))


def _flatten(node: Any, kind: str) -> List[TypeExpression]:
    members: List[TypeExpression] = []
    for child in node.named_children:
        if child.type == kind:
            members.extend(_flatten(child, kind))
        elif child.type != "comment":
            members.append(normalize_type(child))
    return members


def shape_from_members(body: Any) -> ShapeType:
    """Property signatures of an object type or interface body, in order."""
    fields = []
    for member in body.named_children:
        if member.type != "property_signature":
            continue
        name = name_of(member)
        if name is None:
            continue
        fields.append((name, normalize_type(member.child_by_field_name("type"))))
    return ShapeType(tuple(fields))


def apparent_type(expr: Optional[Any]) -> TypeExpression:
    """Best guess at the type of an expression, read off its syntax."""
    expr = _unparen(expr)
    if expr is None:
        return ANY

    kind = expr.type
    if kind in ("string", "template_string"):
        return LiteralType("string")
    if kind == "number":
        return LiteralType("number")
    if kind in ("true", "false"):
        return LiteralType("boolean")
    if kind == "null":
        return LiteralType("null")
    if kind == "undefined" or (kind == "identifier" and node_text(expr) == "undefined"):
        return LiteralType("undefined")
    if kind in ("as_expression", "satisfies_expression"):
        named = [c for c in expr.named_children if c.type != "comment"]
        if len(named) >= 2:
            return normalize_type(named[-1])
        return apparent_type(named[0]) if named else ANY
    if kind == "new_expression":
        ctor = expr.child_by_field_name("constructor")
        args_node = expr.child_by_field_name("type_arguments")
        args = ()
        if args_node is not None:
            args = tuple(normalize_type(a) for a in args_node.named_children)
        if ctor is not None:
            return NamedType(node_text(ctor), args)
    if kind in MARKUP_NODES:
        return NamedType("JSX.Element")
    if kind == "array":
        elements = [c for c in expr.named_children if c.type != "comment"]
        return ArrayType(apparent_type(elements[0]) if elements else ANY)
    if kind == "object":
        fields = []
        for member in expr.named_children:
            if member.type == "pair":
                key = member.child_by_field_name("key")
                fields.append((_key_text(key), apparent_type(member.child_by_field_name("value"))))
            elif member.type == "shorthand_property_identifier":
                fields.append((node_text(member), ANY))
        return ShapeType(tuple(fields))
    return LiteralType(_collapse(node_text(expr)))


# ===================================================================
# Return-type inference
# ===================================================================

def infer_return_type(function_node: Any) -> TypeExpression:
    """Guess a return type for a function that declares none.

    This is a syntactic heuristic, not type inference: it takes the first
    ``return`` statement found depth-first in the body (not necessarily the
    first one executed), ignores every other return site and branch, and
    reads the apparent type off the returned expression.  A body with no
    ``return`` gives ``void``; an expression-bodied arrow uses its body.
    """
    body = function_node.child_by_field_name("body")
    if body is None:
        return VOID
    if body.type != "statement_block":
        return apparent_type(body)

    statement = find_return_statement(body)
    if statement is None:
        return VOID
    values = [c for c in statement.named_children if c.type != "comment"]
    return apparent_type(values[0]) if values else VOID


def find_return_statement(node: Any) -> Optional[Any]:
    for child in node.named_children:
        if child.type == "return_statement":
            return child
        if child.type in _NESTED_SCOPES:
            continue
        found = find_return_statement(child)
        if found is not None:
            return found
    return None


# ===================================================================
# Components
# ===================================================================

def is_markup(expr: Optional[Any]) -> bool:
    expr = _unparen(expr)
    return expr is not None and expr.type in MARKUP_NODES


def is_component(function_node: Any) -> bool:
    """True when the body returns markup at its top statement level."""
    body = function_node.child_by_field_name("body")
    if body is None:
        return False
    if body.type != "statement_block":
        return is_markup(body)
    for statement in body.named_children:
        if statement.type != "return_statement":
            continue
        values = [c for c in statement.named_children if c.type != "comment"]
        if values and is_markup(values[0]):
            return True
    return False


# ===================================================================
# Value summaries
# ===================================================================

def _key_text(key: Optional[Any]) -> str:
    if key is None:
        return ""
    if key.type == "string":
        return string_content(key)
    return node_text(key)


def parse_number(text: str) -> Optional[Any]:
    literal = text.replace("_", "").lower()
    if literal.endswith("n"):
        literal = literal[:-1]
    try:
        if literal.startswith(("0x", "0o", "0b")):
            return int(literal, 0)
        if _DECIMAL_INT.match(literal):
            return int(literal, 10)
        number = float(literal)
    except ValueError:
        return None
    # 1e3 -> 1000
    if "e" in literal and number.is_integer():
        return int(number)
    return number


# ===================================================================
# Extractor
# ===================================================================

class EntityExtractor:
    """Single pass over a tree's top-level nodes."""

    def __init__(self, tree: SyntaxTree) -> None:
        self.tree = tree
        self.model = StructuralModel()
        self._shapes: Dict[str, ShapeType] = {}

    def extract(self) -> StructuralModel:
        nodes = self.tree.top_level()
        self._shapes = collect_local_shapes(nodes)

        for node in nodes:
            declaration, exported, default = unwrap_export(node)
            declaration = unwrap_ambient(declaration)

            if declaration is not None:
                self._classify(declaration)

            if node.type == "import_statement":
                self._extract_import(node)
            elif exported:
                self._extract_exports(node, declaration, default)

        return self.model

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def _classify(self, node: Any) -> None:
        kind = node.type
        if kind in CLASS_DECLARATIONS:
            self._extract_class(node)
        elif kind == "interface_declaration":
            self._extract_interface(node)
        elif kind == "type_alias_declaration":
            name = name_of(node)
            value = node.child_by_field_name("value")
            if name and value is not None:
                _put(self.model.type_aliases, TypeAliasEntity(name, _collapse(node_text(value))))
        elif kind == "enum_declaration":
            self._extract_enum(node)
        elif kind in FUNCTION_DECLARATIONS:
            name = name_of(node)
            if not name:
                return
            if is_component(node):
                _put(self.model.components, self._component(name, node))
            _put(self.model.functions, self.function_entity(node, name))
        elif kind in VARIABLE_DECLARATIONS:
            for declarator in variable_declarators(node):
                value = function_value(declarator)
                name = name_of(declarator)
                if value is not None and name and is_component(value):
                    _put(self.model.components, self._component(name, value))
        else:
            logger.debug("Unclassified top-level node: %s", kind)

    def _extract_class(self, node: Any) -> None:
        name = name_of(node)
        if not name:
            logger.debug("Skipping anonymous class at byte %d", node.start_byte)
            return
        entity = ClassEntity(
            name=name,
            generic_parameters=generic_parameters(node),
            dependencies=heritage_names(node),
        )
        body = node.child_by_field_name("body")
        for member in body.named_children if body is not None else ():
            if member.type == "public_field_definition":
                prop = name_of(member)
                if prop is None:
                    continue
                declared = type_node(member.child_by_field_name("type"))
                entity.properties.append(
                    (prop, _collapse(node_text(declared)) if declared is not None else "any")
                )
            elif member.type in METHOD_NODES:
                method = self._method(member)
                if method is not None:
                    entity.methods.append(method)
        _put(self.model.classes, entity)

    def _extract_interface(self, node: Any) -> None:
        name = name_of(node)
        if not name:
            return
        entity = InterfaceEntity(
            name=name,
            generic_parameters=generic_parameters(node),
            dependencies=heritage_names(node, include_implements=False),
        )
        body = node.child_by_field_name("body")
        for member in body.named_children if body is not None else ():
            if member.type == "property_signature":
                prop = name_of(member)
                if prop is None:
                    continue
                declared = type_node(member.child_by_field_name("type"))
                entity.properties.append(
                    (prop, _collapse(node_text(declared)) if declared is not None else "any")
                )
            elif member.type in METHOD_NODES:
                method = self._method(member)
                if method is not None:
                    entity.methods.append(method)
        _put(self.model.interfaces, entity)

    def _extract_enum(self, node: Any) -> None:
        name = name_of(node)
        body = node.child_by_field_name("body")
        if not name or body is None:
            return
        members = []
        for member in body.named_children:
            if member.type == "enum_assignment":
                name_node = first_field(member, "name")
                member = name_node if name_node is not None else member.named_children[0]
            if member.type == "comment":
                continue
            members.append(string_content(member) if member.type == "string" else node_text(member))
        _put(self.model.enums, EnumEntity(name, members))

    def _method(self, node: Any) -> Optional[MethodSignature]:
        name = name_of(node)
        if name is None:
            return None
        declared = node.child_by_field_name("return_type")
        return MethodSignature(
            name=name,
            parameters=self.parameters(parameter_nodes(node)),
            return_type=normalize_type(declared) if declared is not None else VOID,
        )

    # ------------------------------------------------------------------
    # Functions, parameters and components
    # ------------------------------------------------------------------

    def function_entity(self, node: Any, name: str) -> FunctionEntity:
        declared = node.child_by_field_name("return_type")
        return FunctionEntity(
            name=name,
            parameters=self.parameters(parameter_nodes(node)),
            return_type=normalize_type(declared) if declared is not None else infer_return_type(node),
            generic_parameters=generic_parameters(node),
            is_async=is_async(node),
        )

    def parameters(self, params: Sequence[Any]) -> List[Parameter]:
        """Expand parameter nodes; destructured ones give one entry per field."""
        result: List[Parameter] = []
        for param in params:
            pattern = parameter_pattern(param)
            declared = parameter_type_node(param)
            declared_type = normalize_type(declared) if declared is not None else ANY

            if pattern.type == "object_pattern":
                shape = self._shape_for(declared_type)
                for field_name in bound_fields(pattern):
                    field_type = shape.field_type(field_name) if shape is not None else None
                    result.append(Parameter(field_name, field_type or ANY))
            else:
                result.append(Parameter(node_text(pattern), declared_type))
        return result

    def _shape_for(self, declared: TypeExpression) -> Optional[ShapeType]:
        if isinstance(declared, ShapeType):
            return declared
        if isinstance(declared, NamedType) and not declared.args:
            return self._shapes.get(declared.name)
        return None

    def _component(self, name: str, function_node: Any) -> ComponentEntity:
        params = parameter_nodes(function_node)
        if params and parameter_pattern(params[0]).type == "object_pattern":
            props = self.parameters(params[:1])
        else:
            props = self.parameters(params)
        return ComponentEntity(name, props, generic_parameters(function_node))

    # ------------------------------------------------------------------
    # Imports / exports
    # ------------------------------------------------------------------

    def _extract_import(self, node: Any) -> None:
        source = node.child_by_field_name("source")
        clause = next((c for c in node.named_children if c.type == "import_clause"), None)
        require = next((c for c in node.named_children if c.type == "import_require_clause"), None)
        if source is None and require is not None:
            source = require.child_by_field_name("source")
        if source is None:
            logger.debug("Import without module specifier at byte %d", node.start_byte)
            return

        edge = ImportEdge(path=string_content(source))
        if clause is not None:
            for binding in clause.named_children:
                if binding.type == "identifier":
                    edge.default_binding = node_text(binding)
                elif binding.type == "namespace_import":
                    ident = next((c for c in binding.named_children if c.type == "identifier"), None)
                    if ident is not None:
                        edge.imported_names.append(node_text(ident))
                elif binding.type == "named_imports":
                    for spec in binding.named_children:
                        if spec.type != "import_specifier":
                            continue
                        local = first_field(spec, "alias", "name")
                        if local is not None:
                            edge.imported_names.append(node_text(local))
        elif require is not None:
            ident = next((c for c in require.named_children if c.type == "identifier"), None)
            if ident is not None:
                edge.default_binding = node_text(ident)
        self.model.imports.append(edge)

    def _extract_exports(self, node: Any, declaration: Optional[Any], default: bool) -> None:
        exports = self.model.exports

        if declaration is not None:
            kind = _DECLARATION_EXPORT_KINDS.get(declaration.type)
            if default:
                exports.append(ExportEdge.default_export(kind or "variable"))
                return
            if declaration.type in VARIABLE_DECLARATIONS:
                for declarator in variable_declarators(declaration):
                    name_node = declarator.child_by_field_name("name")
                    if name_node is None:
                        continue
                    name = node_text(name_node)
                    value = self.summarize(declarator.child_by_field_name("value"), name)
                    exports.append(ExportEdge.variable(name, value))
                return
            name = name_of(declaration)
            if kind is None or not name:
                logger.debug("Unsupported exported declaration: %s", declaration.type)
            elif kind == "function":
                exports.append(ExportEdge.function(name, is_async(declaration)))
            else:
                exports.append(ExportEdge(kind=kind, name=name))
            return

        value = node.child_by_field_name("value")
        if value is None and has_token(node, "="):
            named = [c for c in node.named_children if c.type != "comment"]
            value = named[0] if named else None
        if value is not None:
            exports.append(ExportEdge.default_export(_default_kind(value)))
            return

        clause = next((c for c in node.named_children if c.type == "export_clause"), None)
        if clause is not None:
            for spec in clause.named_children:
                if spec.type != "export_specifier":
                    continue
                exported = first_field(spec, "alias", "name")
                if exported is not None:
                    exports.append(ExportEdge.variable(node_text(exported)))
            return

        source = node.child_by_field_name("source")
        if source is not None:
            exports.append(ExportEdge.variable(f"* as {string_content(source)}"))

    # ------------------------------------------------------------------
    # Value summaries
    # ------------------------------------------------------------------

    def summarize(self, node: Optional[Any], label: Optional[str] = None) -> Optional[ValueSummary]:
        """Summarize a literal-ish initializer; ``None`` when it is not one."""
        node = _unparen(node)
        if node is None:
            return None

        kind = node.type
        if kind in ("as_expression", "satisfies_expression", "non_null_expression"):
            named = node.named_children
            return self.summarize(named[0], label) if named else None
        if kind == "string":
            return ValueSummary("string", string_content(node))
        if kind == "template_string":
            if any(c.type == "template_substitution" for c in node.named_children):
                return None
            return ValueSummary("string", string_content(node))
        if kind == "number":
            number = parse_number(node_text(node))
            return ValueSummary("number", number) if number is not None else None
        if kind == "unary_expression":
            operator = node.child_by_field_name("operator")
            argument = _unparen(node.child_by_field_name("argument"))
            if operator is not None and argument is not None and argument.type == "number":
                number = parse_number(node_text(argument))
                op = node_text(operator)
                if number is not None and op in ("-", "+"):
                    return ValueSummary("number", -number if op == "-" else number)
            return None
        if kind in ("true", "false"):
            return ValueSummary("boolean", kind == "true")
        if kind in ("identifier", "undefined"):
            return ValueSummary("identifier", node_text(node))
        if kind == "array":
            elements = []
            for element in node.named_children:
                summary = self.summarize(element, label)
                if summary is not None:
                    elements.append(summary)
            return ValueSummary("array", elements)
        if kind == "object":
            fields: Dict[str, ValueSummary] = {}
            for member in node.named_children:
                if member.type == "pair":
                    summary = self.summarize(member.child_by_field_name("value"), label)
                    if summary is not None:
                        fields[_key_text(member.child_by_field_name("key"))] = summary
                elif member.type == "shorthand_property_identifier":
                    fields[node_text(member)] = ValueSummary("identifier", node_text(member))
            return ValueSummary("object", fields)
        if kind in FUNCTION_VALUES:
            return ValueSummary("function", self.function_entity(node, label or "anonymous"))
        return None


# ===================================================================
# Helpers
# ===================================================================

_DECLARATION_EXPORT_KINDS = {
    "class_declaration": "class",
    "abstract_class_declaration": "class",
    "function_declaration": "function",
    "generator_function_declaration": "function",
    "interface_declaration": "interface",
    "type_alias_declaration": "typeAlias",
    "enum_declaration": "enum",
    "lexical_declaration": "variable",
    "variable_declaration": "variable",
}


def _default_kind(value: Any) -> str:
    inner = _unparen(value)
    if inner is not None:
        value = inner
    if value.type in FUNCTION_VALUES or value.type == "call_expression":
        return "function"
    if value.type == "class":
        return "class"
    if value.type == "object":
        return "object"
    return "variable"


def _put(collection: List[Any], entity: Any) -> None:
    """Append *entity*, replacing an earlier entity of the same name."""
    for index, existing in enumerate(collection):
        if existing.name == entity.name:
            logger.debug("Duplicate entity name %s; keeping the later one", entity.name)
            collection[index] = entity
            return
    collection.append(entity)


def generic_parameters(node: Any) -> List[str]:
    params = node.child_by_field_name("type_parameters")
    if params is None:
        return []
    names = []
    for param in params.named_children:
        if param.type != "type_parameter":
            continue
        name = name_of(param)
        if name:
            names.append(name)
    return names


def bound_fields(pattern: Any) -> List[str]:
    """Field names bound by an object destructuring pattern."""
    names: List[str] = []
    for element in pattern.named_children:
        if element.type == "shorthand_property_identifier_pattern":
            names.append(node_text(element))
        elif element.type == "pair_pattern":
            names.append(_key_text(element.child_by_field_name("key")))
        elif element.type == "object_assignment_pattern":
            left = element.child_by_field_name("left")
            if left is not None:
                names.append(node_text(left))
        elif element.type == "rest_pattern":
            inner = element.named_children
            names.append(node_text(inner[0]) if inner else node_text(element))
    return names


def collect_local_shapes(nodes: Iterable[Any]) -> Mapping[str, ShapeType]:
    """Object shapes declared in the span, keyed by interface / alias name."""
    shapes: Dict[str, ShapeType] = {}
    for node in nodes:
        declaration, _, _ = unwrap_export(node)
        if declaration is None:
            continue
        name = name_of(declaration)
        if not name:
            continue
        if declaration.type == "interface_declaration":
            body = declaration.child_by_field_name("body")
            if body is not None:
                shapes[name] = shape_from_members(body)
        elif declaration.type == "type_alias_declaration":
            value = declaration.child_by_field_name("value")
            if value is not None and value.type == "object_type":
                shapes[name] = shape_from_members(value)
    return shapes


def extract(tree: SyntaxTree) -> StructuralModel:
    """Extract the structural model of *tree* (usages left unresolved)."""
    return EntityExtractor(tree).extract()
