"""Core data models produced by extraction, rendering, and chunking."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


# ---------------------------------------------------------------------------
# Type expressions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NamedType:
    """A type reference, optionally with generic arguments (``Map<K, V>``)."""

    name: str
    args: Tuple["TypeExpression", ...] = ()

    def __str__(self) -> str:
        if not self.args:
            return self.name
        return f"{self.name}<{', '.join(str(a) for a in self.args)}>"

    def to_json(self) -> Any:
        return str(self)


@dataclass(frozen=True)
class ArrayType:
    element: "TypeExpression"

    def __str__(self) -> str:
        if _needs_parens(self.element):
            return f"({self.element})[]"
        return f"{self.element}[]"

    def to_json(self) -> Any:
        return str(self)


@dataclass(frozen=True)
class ShapeType:
    """An inline object type, kept as ordered ``(field, type)`` pairs."""

    fields: Tuple[Tuple[str, "TypeExpression"], ...] = ()

    def field_type(self, name: str) -> Optional["TypeExpression"]:
        for field_name, field_type in self.fields:
            if field_name == name:
                return field_type
        return None

    def __str__(self) -> str:
        if not self.fields:
            return "{}"
        body = "; ".join(f"{name}: {type_}" for name, type_ in self.fields)
        return f"{{ {body} }}"

    def to_json(self) -> Any:
        return [{"name": name, "type": type_.to_json()} for name, type_ in self.fields]


@dataclass(frozen=True)
class UnionType:
    """Flattened union (``|``) or intersection (``&``) members."""

    members: Tuple["TypeExpression", ...]
    operator: str = "|"

    def __str__(self) -> str:
        return f" {self.operator} ".join(str(m) for m in self.members)

    def to_json(self) -> Any:
        return [m.to_json() for m in self.members]


@dataclass(frozen=True)
class LiteralType:
    """Fallback: the type's source text, whitespace collapsed."""

    text: str

    def __str__(self) -> str:
        return self.text

    def to_json(self) -> Any:
        return self.text


TypeExpression = Union[NamedType, ArrayType, ShapeType, UnionType, LiteralType]

ANY = LiteralType("any")
VOID = LiteralType("void")

_SIMPLE_LITERAL = re.compile(r"^[\w.$]+$")


def _needs_parens(element: TypeExpression) -> bool:
    """True when ``element[]`` would bind the brackets to part of the element."""
    if isinstance(element, (NamedType, ArrayType, ShapeType)):
        return False
    if isinstance(element, LiteralType):
        return not _SIMPLE_LITERAL.match(element.text)
    return True


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------

@dataclass
class Parameter:
    name: str
    type: TypeExpression = ANY

    def __str__(self) -> str:
        return f"{self.name}: {self.type}"

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.type.to_json()}


@dataclass
class MethodSignature:
    name: str
    parameters: List[Parameter] = field(default_factory=list)
    return_type: TypeExpression = VOID

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"{self.name}({params}) {self.return_type}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "parameters": [p.to_dict() for p in self.parameters],
            "returnType": self.return_type.to_json(),
        }


@dataclass
class ClassEntity:
    name: str
    generic_parameters: List[str] = field(default_factory=list)
    properties: List[Tuple[str, str]] = field(default_factory=list)
    methods: List[MethodSignature] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    usages: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "genericParameters": list(self.generic_parameters),
            "properties": [{"name": n, "type": t} for n, t in self.properties],
            "methods": [m.to_dict() for m in self.methods],
            "dependencies": list(self.dependencies),
            "usages": list(self.usages),
        }


@dataclass
class InterfaceEntity(ClassEntity):
    """Same shape as a class; ``dependencies`` only come from ``extends``."""


@dataclass
class TypeAliasEntity:
    name: str
    definition: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "definition": self.definition}


@dataclass
class EnumEntity:
    name: str
    members: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "members": list(self.members)}


@dataclass
class FunctionEntity:
    name: str
    parameters: List[Parameter] = field(default_factory=list)
    return_type: TypeExpression = VOID
    generic_parameters: List[str] = field(default_factory=list)
    is_async: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "parameters": [p.to_dict() for p in self.parameters],
            "returnType": self.return_type.to_json(),
            "genericParameters": list(self.generic_parameters),
            "isAsync": self.is_async,
        }


@dataclass
class ComponentEntity:
    name: str
    props: List[Parameter] = field(default_factory=list)
    generic_parameters: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "props": [p.to_dict() for p in self.props],
            "genericParameters": list(self.generic_parameters),
        }


# ---------------------------------------------------------------------------
# Edges
# ---------------------------------------------------------------------------

@dataclass
class ImportEdge:
    path: str
    imported_names: List[str] = field(default_factory=list)
    default_binding: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "importedNames": list(self.imported_names),
            "defaultBindingName": self.default_binding,
        }


@dataclass
class ValueSummary:
    """Literal summary of an initializer.

    ``value`` holds a str/int/float/bool for scalars, a list of summaries for
    arrays, a dict of summaries for objects and a :class:`FunctionEntity` for
    functions.
    """

    type: str
    value: Any

    def to_dict(self) -> Dict[str, Any]:
        value = self.value
        if self.type == "array":
            value = [v.to_dict() for v in value]
        elif self.type == "object":
            value = {k: v.to_dict() for k, v in value.items()}
        elif self.type == "function":
            value = value.to_dict()
        return {"type": self.type, "value": value}


@dataclass
class ExportEdge:
    """One exported binding.

    For ``kind == "default"`` the ``name`` is ``"default"`` and
    ``default_kind`` says what was exported (``class``, ``function``, ...).
    """

    kind: str
    name: str
    value: Optional[ValueSummary] = None
    is_async: bool = False
    default_kind: Optional[str] = None

    @classmethod
    def variable(cls, name: str, value: Optional[ValueSummary] = None) -> "ExportEdge":
        return cls(kind="variable", name=name, value=value)

    @classmethod
    def function(cls, name: str, is_async: bool = False) -> "ExportEdge":
        return cls(kind="function", name=name, is_async=is_async)

    @classmethod
    def default_export(cls, default_kind: str) -> "ExportEdge":
        return cls(kind="default", name="default", default_kind=default_kind)

    @property
    def label(self) -> str:
        if self.kind == "default":
            return f"default {self.default_kind}"
        if self.kind == "function" and self.is_async:
            return "async function"
        return self.kind

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"kind": self.kind, "name": self.name}
        if self.kind == "variable":
            payload["value"] = self.value.to_dict() if self.value else None
        elif self.kind == "function":
            payload["isAsync"] = self.is_async
        elif self.kind == "default":
            payload["defaultKind"] = self.default_kind
        return payload


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

@dataclass
class StructuralModel:
    classes: List[ClassEntity] = field(default_factory=list)
    interfaces: List[InterfaceEntity] = field(default_factory=list)
    type_aliases: List[TypeAliasEntity] = field(default_factory=list)
    enums: List[EnumEntity] = field(default_factory=list)
    functions: List[FunctionEntity] = field(default_factory=list)
    components: List[ComponentEntity] = field(default_factory=list)
    imports: List[ImportEdge] = field(default_factory=list)
    exports: List[ExportEdge] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not any((
            self.classes, self.interfaces, self.type_aliases, self.enums,
            self.functions, self.components, self.imports, self.exports,
        ))

    def find_class(self, name: str) -> Optional[ClassEntity]:
        return next((c for c in self.classes if c.name == name), None)

    def find_interface(self, name: str) -> Optional[InterfaceEntity]:
        return next((i for i in self.interfaces if i.name == name), None)

    def find_function(self, name: str) -> Optional[FunctionEntity]:
        return next((f for f in self.functions if f.name == name), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "classes": [c.to_dict() for c in self.classes],
            "interfaces": [i.to_dict() for i in self.interfaces],
            "typeAliases": [t.to_dict() for t in self.type_aliases],
            "enums": [e.to_dict() for e in self.enums],
            "functions": [f.to_dict() for f in self.functions],
            "components": [c.to_dict() for c in self.components],
            "imports": [i.to_dict() for i in self.imports],
            "exports": [e.to_dict() for e in self.exports],
        }


@dataclass(frozen=True)
class Chunk:
    """A contiguous slice of a file plus the graph of what it declares.

    ``source_text`` is the exact slice; concatenating every chunk of a file
    reproduces the file. ``code`` is the slice without surrounding whitespace.
    """

    source_text: str
    graph: str

    @property
    def code(self) -> str:
        return self.source_text.strip()


@dataclass
class ChunkRecord:
    file: str
    chunk: int
    code: str
    mermaid_markdown: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "chunk": self.chunk,
            "code": self.code,
            "mermaidMarkdown": self.mermaid_markdown,
        }
