"""One-call analysis: parse, extract, resolve usages, render."""

from __future__ import annotations

from pathlib import PurePath
from typing import Optional, Tuple, Union

from .extractor import extract
from .mermaid import render
from .models import StructuralModel
from .parser import SyntaxParser, SyntaxTree
from .usages import resolve_usages


def analyze_tree(tree: SyntaxTree) -> StructuralModel:
    """Structural model of *tree* with usage edges filled in."""
    return resolve_usages(extract(tree), tree)


def analyze_source(
    source: str,
    file_path: Union[str, PurePath],
    parser: Optional[SyntaxParser] = None,
    strict: bool = True,
) -> Tuple[StructuralModel, str]:
    """Parse *source* in the dialect implied by *file_path*.

    Returns the model and its rendered Mermaid document.  Raises
    :class:`~tsgraph.errors.SourceParseError` on malformed input when
    *strict* is set.
    """
    parser = parser or SyntaxParser()
    model = analyze_tree(parser.parse_for_path(source, file_path, strict=strict))
    return model, render(model)
