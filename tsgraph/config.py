"""Defaults and paths for tsgraph."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

BASE_DIR = Path(os.environ.get("TSGRAPH_HOME", str(Path.home() / ".tsgraph"))).expanduser()

DEFAULT_MAX_CONTEXT_SIZE = 8000  # characters of code + diagram per chunk
DEFAULT_OUTPUT_FILE = "crawled.jsonl"
SUPPORTED_EXTENSIONS = {".ts", ".tsx", ".js", ".jsx"}
DECLARATION_SUFFIX = ".d.ts"
DEFAULT_IGNORE_PATHS = ["dist", ".next", ".git"]
# Directories below these are still analyzed, but emit graphs without code.
DEFAULT_GRAPH_ONLY_DIRS = ["node_modules"]


@dataclass
class ChunkerSettings:
    max_context_size: int = DEFAULT_MAX_CONTEXT_SIZE
    output_file: str = DEFAULT_OUTPUT_FILE
    ignore_paths: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_PATHS))
    graph_only_dirs: List[str] = field(default_factory=lambda: list(DEFAULT_GRAPH_ONLY_DIRS))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_context_size": self.max_context_size,
            "output_file": self.output_file,
            "ignore_paths": list(self.ignore_paths),
            "graph_only_dirs": list(self.graph_only_dirs),
        }

