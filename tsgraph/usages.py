"""Intra-file usage edges for classes and interfaces.

Matching is by identifier text only.  Nothing is resolved through imports,
so two same-named entities (or a same-named entity from another file) are
indistinguishable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List

from .models import ClassEntity, StructuralModel
from .parser import (
    CLASS_DECLARATIONS,
    FUNCTION_DECLARATIONS,
    SyntaxTree,
    function_value,
    heritage_names,
    name_of,
    node_text,
    parameter_nodes,
    parameter_type_node,
    unwrap_ambient,
    unwrap_export,
    variable_declarators,
)

logger = logging.getLogger(__name__)


@dataclass
class _Referrer:
    name: str
    heritage: List[str]
    parameter_types: List[str]


def _referrers(tree: SyntaxTree) -> List[_Referrer]:
    """Every top-level class, interface and function, with what it names."""
    referrers: List[_Referrer] = []
    for node in tree.top_level():
        declaration = unwrap_ambient(unwrap_export(node)[0])
        if declaration is None:
            continue
        kind = declaration.type
        if kind in CLASS_DECLARATIONS:
            name = name_of(declaration)
            if name:
                referrers.append(_Referrer(name, heritage_names(declaration), []))
        elif kind == "interface_declaration":
            name = name_of(declaration)
            if name:
                referrers.append(
                    _Referrer(name, heritage_names(declaration, include_implements=False), [])
                )
        elif kind in FUNCTION_DECLARATIONS:
            name = name_of(declaration)
            if name:
                referrers.append(_Referrer(name, [], _parameter_types(declaration)))
        else:
            for declarator in variable_declarators(declaration):
                value = function_value(declarator)
                name = name_of(declarator)
                if value is not None and name:
                    referrers.append(_Referrer(name, [], _parameter_types(value)))
    return referrers


def _parameter_types(function_node: Any) -> List[str]:
    types = []
    for param in parameter_nodes(function_node):
        declared = parameter_type_node(param)
        if declared is not None:
            types.append(node_text(declared))
    return types


def _usages_of(entity: ClassEntity, referrers: List[_Referrer]) -> List[str]:
    found: List[str] = []
    for ref in referrers:
        if ref.name == entity.name or ref.name in found:
            continue
        if entity.name in ref.heritage or entity.name in ref.parameter_types:
            found.append(ref.name)
    return found


def resolve_usages(model: StructuralModel, tree: SyntaxTree) -> StructuralModel:
    """Fill ``usages`` on every class and interface of *model*, in place.

    A referrer counts when it names the entity in an ``extends`` /
    ``implements`` clause, or types one of its parameters with exactly the
    entity's name.  An entity never lists itself.
    """
    referrers = _referrers(tree)
    for entity in [*model.classes, *model.interfaces]:
        entity.usages = _usages_of(entity, referrers)
        if entity.usages:
            logger.debug("%s is used by %s", entity.name, ", ".join(entity.usages))
    return model

