"""Exceptions raised by the analysis core."""

from __future__ import annotations


class TsGraphError(Exception):
    """Base class for every error raised by tsgraph."""


class GrammarUnavailableError(TsGraphError):
    """A tree-sitter grammar package could not be loaded."""


class SourceParseError(TsGraphError):
    """Source text does not parse cleanly in the selected dialect."""

    def __init__(self, message: str, line: int = 0, column: int = 0) -> None:
        super().__init__(message)
        self.line = line
        self.column = column
