"""Boundary-aware chunking of a source file.

The file is split only between top-level statements.  Each candidate chunk
is measured as ``len(code) + len(graph)`` where ``graph`` is the Mermaid
rendering of exactly that code, so the extractor and renderer are re-run
on every growth step.  Every chunk is a verbatim slice of the input:
joining the ``source_text`` of all chunks gives back the original file.
"""

from __future__ import annotations

import logging
from pathlib import PurePath
from typing import Any, Dict, List, Optional, Union

from .analysis import analyze_tree
from .mermaid import render
from .models import Chunk
from .parser import (
    CLASS_DECLARATIONS,
    FUNCTION_DECLARATIONS,
    SyntaxParser,
    dialect_for_path,
    unwrap_ambient,
    unwrap_export,
)

logger = logging.getLogger(__name__)

_SCOPE_CLOSERS = CLASS_DECLARATIONS | FUNCTION_DECLARATIONS


def next_token(node: Any) -> Optional[Any]:
    """The first token after *node* in document order, comments skipped."""
    current = node
    while current is not None:
        sibling = current.next_sibling
        while sibling is not None and sibling.type == "comment":
            sibling = sibling.next_sibling
        if sibling is not None:
            while sibling.child_count > 0:
                sibling = sibling.children[0]
            return sibling
        current = current.parent
    return None


def closes_scope(node: Any) -> bool:
    """True for a class/function declaration that ends its enclosing scope.

    The scope is closed when the next token does not share the node's
    parent.  Since the next token of a top-level statement sits inside the
    following statement, every top-level class or function closes its
    chunk.
    """
    declaration = unwrap_ambient(unwrap_export(node)[0])
    if declaration is None or declaration.type not in _SCOPE_CLOSERS:
        return False
    following = next_token(node)
    return following is None or following.parent is None or following.parent != node.parent


class BoundaryAwareChunker:
    """Packs top-level statements into chunks of at most ``max_size``.

    ``max_size`` is a soft limit: a single declaration larger than the
    budget still becomes one chunk of its own and is never cut.
    """

    def __init__(
        self,
        max_size: int,
        parser: Optional[SyntaxParser] = None,
        strict: bool = True,
    ) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self.max_size = max_size
        self.parser = parser or SyntaxParser()
        self.strict = strict

    def chunk(self, source: str, file_path: Union[str, PurePath]) -> List[Chunk]:
        dialect = dialect_for_path(file_path)
        tree = self.parser.parse(source, dialect, strict=self.strict)
        graphs: Dict[str, str] = {}
        chunks: List[Chunk] = []

        def graph_of(text: str) -> str:
            if text not in graphs:
                sub_tree = self.parser.parse(text, dialect, strict=False)
                graphs[text] = render(analyze_tree(sub_tree))
            return graphs[text]

        def emit(text: str) -> None:
            chunks.append(Chunk(source_text=text, graph=graph_of(text)))
            logger.debug("%s: chunk %d (%d chars)", file_path, len(chunks), len(text))

        items = tree.top_level()
        if not items:
            return [Chunk(source_text=source, graph=graph_of(source))] if source else []

        buffer = ""
        offset = 0
        for index, node in enumerate(items):
            end = len(tree.source) if index == len(items) - 1 else node.end_byte
            text = tree.slice(offset, end)
            offset = end

            if not buffer:
                buffer = text
            else:
                size = len(buffer) + len(text) + len(graph_of(buffer + text))
                if size <= self.max_size:
                    buffer += text
                else:
                    emit(buffer)
                    buffer = text

            if closes_scope(node):
                emit(buffer)
                buffer = ""

        if buffer:
            emit(buffer)
        return chunks


def chunk_source(
    source: str,
    file_path: Union[str, PurePath],
    max_size: int,
    parser: Optional[SyntaxParser] = None,
) -> List[Chunk]:
    """Split *source* into boundary-respecting chunks (see :class:`BoundaryAwareChunker`)."""
    return BoundaryAwareChunker(max_size, parser=parser).chunk(source, file_path)
