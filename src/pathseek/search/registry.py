from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from pathseek.errors import InvalidRoot
from pathseek.paths import normalize_path

from .models import SearchRoot

logger = logging.getLogger(__name__)


class RootRegistry:
    """Holds the current search root for one session.

    The stored root is only ever replaced as a whole. A failed ``set``
    leaves it untouched.
    """

    def __init__(self, cwd: Optional[Path] = None):
        """Initialize the registry at the working directory.

        Args:
            cwd: Working directory used for resets and relative paths
                (default: the process working directory at construction)
        """
        self.cwd = (cwd or Path.cwd()).resolve()
        self._lock = threading.Lock()
        self._root = SearchRoot(path=self.cwd, valid=True)

    @property
    def root(self) -> SearchRoot:
        return self._root

    def current(self) -> Path:
        return self._root.path

    def set(self, path: Optional[str]) -> Path:
        """Validate ``path`` and make it the current root.

        ``None`` or an empty string resets to the working directory.

        Raises:
            InvalidRoot: If the resolved path is missing, not a directory
                or cannot be inspected
        """
        if path is None or not str(path).strip():
            new_root = SearchRoot(path=self.cwd, valid=True)
        else:
            new_root = SearchRoot(path=self._validate(str(path).strip()), valid=True)

        with self._lock:
            self._root = new_root
        logger.debug(f"Search root set to {new_root.path}")
        return new_root.path

    def _validate(self, raw: str) -> Path:
        try:
            resolved = normalize_path(raw, base=self.cwd)
        except (OSError, RuntimeError) as e:
            # RuntimeError: symlink loop on older interpreters.
            raise InvalidRoot(raw, "Path cannot be resolved", hint=str(e)) from e

        try:
            exists = resolved.exists()
            is_dir = resolved.is_dir()
        except OSError as e:
            raise InvalidRoot(resolved, "Path cannot be inspected", hint=str(e)) from e

        if not exists:
            raise InvalidRoot(resolved, "Path does not exist", hint="Choose an existing directory.")
        if not is_dir:
            raise InvalidRoot(resolved, "Path is not a directory", hint="Choose a directory, not a file.")
        return resolved
