"""Path normalization and display helpers for pathseek."""

import os
from pathlib import Path, PurePath
from typing import Union

PathLike = Union[str, os.PathLike]


def normalize_path(raw: PathLike, *, base: Path) -> Path:
    """Convert a user-supplied path to canonical absolute form.

    Leading ``~`` is expanded, relative paths are joined to ``base`` and
    symlinks are resolved. The path does not need to exist.

    Args:
        raw: Absolute, relative or home-relative path
        base: Directory that relative paths are resolved against

    Returns:
        Absolute, symlink-resolved path
    """
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = base / path
    return path.resolve(strict=False)


def to_absolute(raw_line: str, root: Path) -> Path:
    """Absolute form of one line of enumeration output.

    Tools print paths relative to their working directory, sometimes with
    a ``./`` prefix. Symlinks are left as the tool reported them.
    """
    line = raw_line.rstrip("\r\n")
    while line.startswith("./"):
        line = line[2:]
    path = Path(line)
    if path.is_absolute():
        return path
    return root / path


def _anchor_depth(path: PurePath) -> int:
    return len(path.parts) - (1 if path.anchor else 0)


def display_path(path: PathLike, reference: PathLike) -> str:
    """Display form of ``path`` relative to ``reference``.

    Paths inside ``reference`` are shown relative to it. Paths that share
    an ancestor with ``reference`` below the filesystem root get a
    ``..``-relative form. Anything else falls back to the absolute path.

    Args:
        path: Absolute path to display
        reference: Directory the display form is relative to

    Returns:
        POSIX-style display string
    """
    target = PurePath(os.path.abspath(path))
    ref = PurePath(os.path.abspath(reference))

    try:
        return target.relative_to(ref).as_posix()
    except ValueError:
        pass

    try:
        common = PurePath(os.path.commonpath([str(target), str(ref)]))
    except ValueError:
        # Different drives on Windows.
        return target.as_posix()

    if _anchor_depth(common) == 0:
        return target.as_posix()

    return PurePath(os.path.relpath(str(target), str(ref))).as_posix()
