from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class Backend(str, Enum):
    FD = "fd"
    RIPGREP = "ripgrep"


class SessionState(str, Enum):
    IDLE = "idle"
    SEARCHING = "searching"


class RequestOutcome(str, Enum):
    DELIVERED = "delivered"
    DISCARDED_STALE = "discarded_stale"
    FAILED = "failed"


class SearchConfig(BaseModel):
    """Static options for one search session.

    Trusted as already validated by the caller once constructed; the
    session never mutates it.
    """

    max_results: int = Field(default=50, gt=0)
    search_hidden: bool = Field(default=False)
    respect_gitignore: bool = Field(default=True)
    backend: Backend = Field(default=Backend.FD)

    # File-type filter by extension, without the leading dot.
    extensions: tuple[str, ...] = Field(default=())
    # Explicit tool binary; overrides the backend's default lookup.
    executable: Optional[str] = Field(default=None)
    # Seconds a cancelled process gets after SIGTERM before it is killed.
    terminate_timeout: float = Field(default=1.0, gt=0)

    model_config = {"frozen": True}

    @field_validator("extensions", mode="before")
    @classmethod
    def _strip_extension_dots(cls, value):
        if isinstance(value, str):
            value = [value]
        return tuple(str(v).strip().lstrip(".") for v in value if str(v).strip().lstrip("."))


@dataclass(frozen=True)
class SearchRoot:
    path: Path
    valid: bool


@dataclass(frozen=True)
class SearchRequest:
    query: str
    generation: int
    issued_at: float = field(default_factory=time.monotonic)


@dataclass(frozen=True)
class Candidate:
    absolute_path: Path
    display_path: str
    is_directory: bool
