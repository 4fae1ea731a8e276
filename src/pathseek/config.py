"""Configuration management for pathseek."""

import os
from pathlib import Path
from typing import Any, Optional, Sequence

from pydantic import ValidationError

from .search.models import Backend, SearchConfig

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Python < 3.11


def _find_repo_root(start_dir: Path) -> Path:
    """Find repository root by walking upward looking for .git or pyproject.toml."""
    current_dir = start_dir

    while True:
        if (current_dir / ".git").exists() or (current_dir / "pyproject.toml").exists():
            return current_dir

        parent_dir = current_dir.parent

        # Stop if we reach filesystem root
        if parent_dir == current_dir:
            return start_dir

        current_dir = parent_dir


def _load_repo_config_data(repo_root: Path) -> Optional[dict]:
    """Load repo config data from .pathseek/config.toml if it exists."""
    config_file = repo_root / ".pathseek" / "config.toml"

    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        # If config file is malformed, ignore it
        return None


def _search_section(start_dir: Optional[Path] = None) -> dict:
    repo_root = _find_repo_root(start_dir or Path.cwd())
    data = _load_repo_config_data(repo_root) or {}
    section = data.get("search") if isinstance(data, dict) else {}
    if not isinstance(section, dict):
        return {}
    return section


def _as_int(value: Any, *, name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid config: {name} must be an int")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ValueError(f"Invalid config: {name} must be an int")


def _as_bool(value: Any, *, name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "y", "on"}:
            return True
        if lowered in {"0", "false", "no", "n", "off"}:
            return False
    raise ValueError(f"Invalid config: {name} must be a bool")


def _as_backend(value: Any, *, name: str) -> Backend:
    text = str(value).strip().lower()
    if text in {"rg", "ripgrep"}:
        return Backend.RIPGREP
    if text in {"fd", "fdfind"}:
        return Backend.FD
    raise ValueError(f"Invalid config: {name} must be one of fd, ripgrep (got {value!r})")


def _as_extensions(value: Any, *, name: str) -> list[str]:
    if isinstance(value, str):
        return [part for part in (p.strip() for p in value.split(",")) if part]
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        return list(value)
    raise ValueError(f"Invalid config: {name} must be a list of strings")


def load_search_config(
    *,
    cli_backend: Optional[str] = None,
    cli_max_results: Optional[int] = None,
    cli_hidden: Optional[bool] = None,
    cli_no_ignore: Optional[bool] = None,
    cli_extensions: Optional[Sequence[str]] = None,
    start_dir: Optional[Path] = None,
) -> SearchConfig:
    """Build the search config with the following precedence:

    1. CLI options (if provided)
    2. repo-local .pathseek/config.toml ``[search]`` table
    3. PATHSEEK_* environment variables
    4. Defaults

    Raises:
        ValueError: If any value has the wrong type or fails validation
    """
    section = _search_section(start_dir)
    values: dict[str, Any] = {}

    # Environment first; repo config and CLI overwrite it below.
    env_backend = os.environ.get("PATHSEEK_BACKEND")
    if env_backend:
        values["backend"] = _as_backend(env_backend, name="PATHSEEK_BACKEND")
    env_max = os.environ.get("PATHSEEK_MAX_RESULTS")
    if env_max:
        values["max_results"] = _as_int(env_max, name="PATHSEEK_MAX_RESULTS")
    if "PATHSEEK_HIDDEN" in os.environ:
        values["search_hidden"] = _as_bool(os.environ["PATHSEEK_HIDDEN"], name="PATHSEEK_HIDDEN")
    if "PATHSEEK_RESPECT_GITIGNORE" in os.environ:
        values["respect_gitignore"] = _as_bool(
            os.environ["PATHSEEK_RESPECT_GITIGNORE"], name="PATHSEEK_RESPECT_GITIGNORE"
        )

    if "backend" in section:
        values["backend"] = _as_backend(section["backend"], name="[search].backend")
    if "max_results" in section:
        values["max_results"] = _as_int(section["max_results"], name="[search].max_results")
    if "search_hidden" in section:
        values["search_hidden"] = _as_bool(section["search_hidden"], name="[search].search_hidden")
    if "respect_gitignore" in section:
        values["respect_gitignore"] = _as_bool(section["respect_gitignore"], name="[search].respect_gitignore")
    if "extensions" in section:
        values["extensions"] = _as_extensions(section["extensions"], name="[search].extensions")
    if "executable" in section:
        values["executable"] = str(section["executable"])

    if cli_backend is not None:
        values["backend"] = _as_backend(cli_backend, name="--backend")
    if cli_max_results is not None:
        values["max_results"] = cli_max_results
    if cli_hidden is not None:
        values["search_hidden"] = cli_hidden
    if cli_no_ignore is not None:
        values["respect_gitignore"] = not cli_no_ignore
    if cli_extensions:
        values["extensions"] = list(cli_extensions)

    try:
        return SearchConfig(**values)
    except ValidationError as e:
        raise ValueError(f"Invalid config: {e}") from e


def resolve_initial_root(cli_root: Optional[str] = None, *, start_dir: Optional[Path] = None) -> Optional[str]:
    """Pick the starting search root.

    Precedence: CLI --root, then ``[search].root`` in the repo config, then
    PATHSEEK_ROOT. ``None`` means the working directory. The value is not
    validated here; the session's registry does that.
    """
    if cli_root:
        return cli_root

    section = _search_section(start_dir)
    repo_root = section.get("root")
    if isinstance(repo_root, str) and repo_root.strip():
        return repo_root

    env_root = os.environ.get("PATHSEEK_ROOT")
    if env_root:
        return env_root

    return None
