"""Argument templates for the external enumeration tools."""

from __future__ import annotations

import re
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from .models import Backend, SearchConfig

_GLOB_SPECIAL = re.compile(r"([\\*?\[\]{}])")
# Characters the fd (Rust) regex engine accepts escaped.
_REGEX_SPECIAL = re.compile(r"([\\.+*?()|\[\]{}^$#&\-~])")


def escape_glob(text: str) -> str:
    """Escape glob metacharacters so ``text`` matches literally."""
    return _GLOB_SPECIAL.sub(r"\\\1", text)


def escape_regex(text: str) -> str:
    """Escape regex metacharacters so ``text`` matches literally in fd."""
    return _REGEX_SPECIAL.sub(r"\\\1", text)


class EnumerationBackend(ABC):
    """One external tool and how to call it.

    Every backend lists files only, honors the hidden-file and gitignore
    flags and is run with the search root as its working directory.
    Queries match case-insensitively: against the file name, or against
    the root-relative path once the query contains a ``/``.
    """

    name: str = ""
    executables: tuple[str, ...] = ()
    ok_exit_codes: frozenset[int] = frozenset({0})

    @abstractmethod
    def build_args(self, query: str, config: SearchConfig, root: Path) -> list[str]:
        """Arguments, excluding the executable itself."""

    def accepts(self, line: str, query: str, config: SearchConfig) -> bool:
        """Whether an output line passes filters the tool cannot express."""
        return True

    def resolve_executable(self, config: SearchConfig) -> Optional[str]:
        if config.executable:
            return shutil.which(config.executable)
        for name in self.executables:
            found = shutil.which(name)
            if found:
                return found
        return None

    def command(self, query: str, config: SearchConfig, root: Path) -> Optional[list[str]]:
        executable = self.resolve_executable(config)
        if executable is None:
            return None
        return [executable, *self.build_args(query, config, root)]


class FdBackend(EnumerationBackend):
    name = "fd"
    # Debian and Ubuntu ship the binary as fdfind.
    executables = ("fd", "fdfind")

    def build_args(self, query: str, config: SearchConfig, root: Path) -> list[str]:
        args = ["--type", "f", "--color", "never"]
        if config.search_hidden:
            args.append("--hidden")
        if not config.respect_gitignore:
            args.append("--no-ignore")
        for ext in config.extensions:
            args.extend(["--extension", ext])
        if not query:
            return args
        args.append("--ignore-case")
        if "/" in query:
            # --full-path matches the absolute path; anchor at the root so
            # its own components never match.
            prefix = escape_regex(str(root).rstrip("/") + "/")
            args.extend(["--full-path", "--", f"^{prefix}.*{escape_regex(query)}"])
        else:
            args.extend(["--fixed-strings", "--", query])
        return args


class RipgrepBackend(EnumerationBackend):
    name = "ripgrep"
    executables = ("rg",)
    # rg exits 1 when it lists nothing.
    ok_exit_codes = frozenset({0, 1})

    def build_args(self, query: str, config: SearchConfig, root: Path) -> list[str]:
        args = ["--files", "--color", "never"]
        if config.search_hidden:
            args.append("--hidden")
        if not config.respect_gitignore:
            args.append("--no-ignore")
        if query:
            # A glob with a slash is matched against the root-relative path.
            args.extend(["--iglob", f"*{escape_glob(query)}*"])
        else:
            for ext in config.extensions:
                args.extend(["--glob", f"*.{escape_glob(ext)}"])
        return args

    def accepts(self, line: str, query: str, config: SearchConfig) -> bool:
        # rg ORs whitelist globs, so the extension check moves here once
        # the query occupies the glob.
        if not query or not config.extensions:
            return True
        name = line.rstrip("/").rsplit("/", 1)[-1]
        return any(name.endswith(f".{ext}") for ext in config.extensions)


_BACKENDS: dict[Backend, type[EnumerationBackend]] = {
    Backend.FD: FdBackend,
    Backend.RIPGREP: RipgrepBackend,
}


def get_backend(backend: Backend) -> EnumerationBackend:
    return _BACKENDS[Backend(backend)]()
