"""Mermaid ``classDiagram`` rendering of a :class:`StructuralModel`.

Rendering is a pure function of the model: the same model always yields the
same text.  A model with nothing to draw renders to ``""``.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import (
    ClassEntity,
    ComponentEntity,
    EnumEntity,
    ExportEdge,
    FunctionEntity,
    ImportEdge,
    InterfaceEntity,
    Parameter,
    StructuralModel,
    TypeAliasEntity,
)

HEADER = "classDiagram"
EXPORT_NODE = "Export"

_SAFE_ID = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_]")


def render(model: StructuralModel) -> str:
    """Render *model* as Mermaid text, or ``""`` when it is empty."""
    if model.is_empty():
        return ""
    lines: List[str] = [HEADER]

    for cls in model.classes:
        _render_class(lines, cls)
    for iface in model.interfaces:
        _render_interface(lines, iface)
    for alias in model.type_aliases:
        _render_alias(lines, alias)
    for enum in model.enums:
        _render_enum(lines, enum)
    for func in model.functions:
        _render_function(lines, func)
    for imp in model.imports:
        _render_import(lines, imp)
    for exp in model.exports:
        _render_export(lines, exp)

    if model.components:
        lines.append("")
        lines.append("%% Components")
        for component in model.components:
            _render_component(lines, component)

    # a bare side-effect import draws nothing
    if len(lines) == 1:
        return ""
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Entity blocks
# ---------------------------------------------------------------------------

def _render_class(lines: List[str], cls: ClassEntity) -> None:
    members = [f"{name}: {type_}" for name, type_ in cls.properties]
    members.extend(str(m) for m in cls.methods)
    _block(lines, cls.name, cls.generic_parameters, None, members)
    node = node_id(cls.name)
    for dependency in cls.dependencies:
        lines.append(f"{node} --> {node_id(dependency)}")
    for usage in cls.usages:
        lines.append(f"{node} <.. {node_id(usage)}")


def _render_interface(lines: List[str], iface: InterfaceEntity) -> None:
    members = [f"+{name}: {type_}" for name, type_ in iface.properties]
    members.extend(f"+{m}" for m in iface.methods)
    _block(lines, iface.name, iface.generic_parameters, "interface", members)
    node = node_id(iface.name)
    for dependency in iface.dependencies:
        lines.append(f"{node} --|> {node_id(dependency)}")
    for usage in iface.usages:
        lines.append(f"{node} <.. {node_id(usage)}")


def _render_alias(lines: List[str], alias: TypeAliasEntity) -> None:
    _block(lines, alias.name, (), "type", [alias.definition])


def _render_enum(lines: List[str], enum: EnumEntity) -> None:
    _block(lines, enum.name, (), "enumeration", enum.members)


def _render_function(lines: List[str], func: FunctionEntity) -> None:
    stereotype = "async function" if func.is_async else "function"
    signature = f"+{func.name}({_params(func.parameters)}) {func.return_type}"
    _block(lines, func.name, func.generic_parameters, stereotype, [signature])


def _render_component(lines: List[str], component: ComponentEntity) -> None:
    props = [str(p) for p in component.props]
    _block(lines, component.name, component.generic_parameters, "component", props)


def _block(
    lines: List[str],
    name: str,
    generics: Sequence[str],
    stereotype: Optional[str],
    members: Iterable[str],
) -> None:
    suffix = f"~{', '.join(generics)}~" if generics else ""
    lines.append(f"class {node_id(name)}{suffix} {{")
    if stereotype:
        lines.append(f"  <<{stereotype}>>")
    for member in members:
        lines.append(f"  {_one_line(member)}")
    lines.append("}")


# ---------------------------------------------------------------------------
# Edges
# ---------------------------------------------------------------------------

def _render_import(lines: List[str], imp: ImportEdge) -> None:
    target = module_node_id(imp.path)
    for name in imp.imported_names:
        lines.append(f"{node_id(name)} ..> {target} : import")
    if imp.default_binding:
        lines.append(f"{node_id(imp.default_binding)} ..> {target} : import")


def _render_export(lines: List[str], exp: ExportEdge) -> None:
    lines.append(f"{node_id(exp.name)} --> {EXPORT_NODE} : {exp.label}")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def node_id(name: str) -> str:
    """A Mermaid-safe node identifier; odd names are back-tick quoted."""
    if _SAFE_ID.match(name):
        return name
    return "`" + name.replace("`", "'") + "`"


def module_node_id(path: str) -> str:
    """Node id for an import path: separators and punctuation become ``_``."""
    ident = _UNSAFE_CHARS.sub("_", path)
    if not ident or ident[0].isdigit():
        ident = f"m_{ident}"
    return ident


def _params(parameters: Sequence[Parameter]) -> str:
    return ", ".join(str(p) for p in parameters)


def _one_line(text: str) -> str:
    return " ".join(text.split())


def render_sections(model: StructuralModel) -> List[Tuple[str, int]]:
    """Entity counts per section, in emission order (used by the CLI)."""
    return [
        ("classes", len(model.classes)),
        ("interfaces", len(model.interfaces)),
        ("type aliases", len(model.type_aliases)),
        ("enums", len(model.enums)),
        ("functions", len(model.functions)),
        ("imports", len(model.imports)),
        ("exports", len(model.exports)),
        ("components", len(model.components)),
    ]
