"""tsgraph: TypeScript structural extraction and boundary-aware chunking."""

from .analysis import analyze_source, analyze_tree
from .chunker import BoundaryAwareChunker, chunk_source
from .errors import GrammarUnavailableError, SourceParseError, TsGraphError
from .extractor import extract
from .mermaid import render
from .models import Chunk, StructuralModel
from .parser import SyntaxParser
from .usages import resolve_usages

__version__ = "0.1.0"

__all__ = [
    "BoundaryAwareChunker",
    "Chunk",
    "GrammarUnavailableError",
    "SourceParseError",
    "StructuralModel",
    "SyntaxParser",
    "TsGraphError",
    "analyze_source",
    "analyze_tree",
    "chunk_source",
    "extract",
    "render",
    "resolve_usages",
]
