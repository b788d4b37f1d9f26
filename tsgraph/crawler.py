"""Directory walking and JSONL output around the chunker.

Each file is an independent unit of work: a file that fails for any reason
is logged, counted and skipped; its siblings are still processed.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from .chunker import BoundaryAwareChunker
from .config import (
    DECLARATION_SUFFIX,
    DEFAULT_GRAPH_ONLY_DIRS,
    DEFAULT_IGNORE_PATHS,
    SUPPORTED_EXTENSIONS,
)
from .models import ChunkRecord
from .parser import SyntaxParser

logger = logging.getLogger(__name__)


@dataclass
class CrawlStats:
    files: int = 0
    chunks: int = 0
    failures: List[Tuple[str, str]] = field(default_factory=list)


class DirectoryCrawler:
    """Finds source files under a root and appends their chunks to a log."""

    def __init__(
        self,
        max_size: int,
        ignore_paths: Optional[Iterable[str]] = None,
        graph_only_dirs: Optional[Iterable[str]] = None,
        graph_only: bool = False,
        parser: Optional[SyntaxParser] = None,
    ) -> None:
        self.ignore_paths = set(DEFAULT_IGNORE_PATHS if ignore_paths is None else ignore_paths)
        self.graph_only_dirs = set(
            DEFAULT_GRAPH_ONLY_DIRS if graph_only_dirs is None else graph_only_dirs
        )
        self.graph_only = graph_only
        self.chunker = BoundaryAwareChunker(max_size, parser=parser or SyntaxParser())

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def iter_files(self, root: Path) -> Iterator[Tuple[Path, bool]]:
        """Yield ``(path, graph_only)`` for every analyzable file, sorted."""
        yield from self._walk(root, self.graph_only)

    def _walk(self, directory: Path, graph_only: bool) -> Iterator[Tuple[Path, bool]]:
        for entry in sorted(directory.iterdir()):
            if entry.name in self.ignore_paths:
                continue
            if entry.is_dir():
                yield from self._walk(entry, graph_only or entry.name in self.graph_only_dirs)
            elif entry.is_file() and self.is_source_file(entry):
                yield entry, graph_only

    @staticmethod
    def is_source_file(path: Path) -> bool:
        if path.name.endswith(DECLARATION_SUFFIX):
            return False
        return path.suffix in SUPPORTED_EXTENSIONS

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def records_for_file(self, path: Path, graph_only: bool = False) -> List[ChunkRecord]:
        """Chunk one file into output records (1-based chunk numbers)."""
        source = path.read_text(encoding="utf-8")
        chunks = self.chunker.chunk(source, path)
        return [
            ChunkRecord(
                file=str(path),
                chunk=index,
                code="" if graph_only else chunk.code,
                mermaid_markdown=chunk.graph,
            )
            for index, chunk in enumerate(chunks, start=1)
        ]

    def crawl(self, root: Path, output_file: Path) -> CrawlStats:
        """Process every file under *root*, appending records to *output_file*."""
        stats = CrawlStats()
        output_file.parent.mkdir(parents=True, exist_ok=True)
        with open(output_file, "a", encoding="utf-8") as out:
            for path, graph_only in self.iter_files(root):
                try:
                    records = self.records_for_file(path, graph_only)
                except Exception as exc:
                    logger.warning("Failed to process %s: %s", path, exc)
                    stats.failures.append((str(path), str(exc)))
                    continue
                for record in records:
                    out.write(json.dumps(record.to_dict()) + "\n")
                stats.files += 1
                stats.chunks += len(records)
                logger.debug("%s: %d chunk(s)", path, len(records))
        return stats
