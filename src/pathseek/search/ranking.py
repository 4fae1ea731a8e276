from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional

from pathseek.paths import display_path, to_absolute

from .models import Candidate


def _is_dir(path: Path) -> bool:
    try:
        return path.is_dir()
    except OSError:
        return False


class CandidateRanker:
    """Bounded accumulator that turns raw tool lines into candidates.

    Order is the tool's own output order unless ``sort_key`` is given, in
    which case a stable sort is applied to the accepted candidates.
    """

    def __init__(
        self,
        root: Path,
        max_results: int,
        reference: Optional[Path] = None,
        sort_key: Optional[Callable[[Candidate], Any]] = None,
    ):
        self.root = root
        self.max_results = max_results
        self.reference = reference or root
        self.sort_key = sort_key
        self._paths: list[Path] = []
        self._seen: set[Path] = set()

    @property
    def full(self) -> bool:
        return len(self._paths) >= self.max_results

    def __len__(self) -> int:
        return len(self._paths)

    def add(self, raw_line: str) -> bool:
        """Accept one raw line. Returns True once the cap is reached."""
        if self.full:
            return True
        line = raw_line.rstrip("\r\n")
        if not line or line in (".", "./"):
            return self.full
        path = to_absolute(line, self.root)
        if path not in self._seen:
            self._seen.add(path)
            self._paths.append(path)
        return self.full

    def candidates(self) -> list[Candidate]:
        out = [
            Candidate(
                absolute_path=p,
                display_path=display_path(p, self.reference),
                is_directory=_is_dir(p),
            )
            for p in self._paths
        ]
        if self.sort_key is not None:
            out.sort(key=self.sort_key)
        return out
