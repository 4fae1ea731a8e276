"""Exception types raised by pathseek."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class PathSeekError(Exception):
    """Base class for pathseek errors."""


class InvalidRoot(PathSeekError):
    """Raised when a requested search root is not a usable directory."""

    def __init__(self, path: str | Path, reason: str, hint: str = "") -> None:
        super().__init__(f"{reason}: {path}")
        self.path = str(path)
        self.reason = reason
        self.hint = hint


class SearchError(PathSeekError):
    """Base class for failures scoped to a single search."""


class ToolUnavailable(SearchError):
    """The external enumeration tool is missing or failed before producing output."""

    def __init__(self, tool: str, detail: Optional[str] = None) -> None:
        message = f"{tool} unavailable"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.tool = tool
        self.detail = detail or ""


class StaleResult(SearchError):
    """A newer request superseded this one. Never leaves the session."""

    def __init__(self, generation: int, active_generation: int) -> None:
        super().__init__(f"generation {generation} superseded by {active_generation}")
        self.generation = generation
        self.active_generation = active_generation
