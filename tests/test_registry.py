from pathlib import Path

import pytest

from pathseek.errors import InvalidRoot
from pathseek.search.registry import RootRegistry


def test_defaults_to_working_directory(tmp_path: Path):
    registry = RootRegistry(cwd=tmp_path)
    assert registry.current() == tmp_path.resolve()
    assert registry.root.valid


def test_set_relative_and_absolute(tmp_path: Path):
    (tmp_path / "proj").mkdir()
    registry = RootRegistry(cwd=tmp_path)

    assert registry.set("proj") == (tmp_path / "proj").resolve()
    assert registry.current() == (tmp_path / "proj").resolve()

    assert registry.set(str(tmp_path)) == tmp_path.resolve()


def test_round_trip_refers_to_same_directory(project: Path):
    registry = RootRegistry(cwd=Path("/"))
    registry.set(str(project) + "/")
    assert registry.current().is_absolute()
    assert registry.current().samefile(project)


def test_invalid_root_leaves_current_unchanged(tmp_path: Path, project: Path):
    registry = RootRegistry(cwd=tmp_path)
    registry.set(str(project))

    with pytest.raises(InvalidRoot) as excinfo:
        registry.set("/does/not/exist")
    assert excinfo.value.reason == "Path does not exist"
    assert registry.current() == project.resolve()


def test_file_is_not_a_valid_root(tmp_path: Path, project: Path):
    registry = RootRegistry(cwd=tmp_path)
    with pytest.raises(InvalidRoot) as excinfo:
        registry.set(str(project / "a.md"))
    assert "not a directory" in excinfo.value.reason
    assert registry.current() == tmp_path.resolve()


def test_reset_is_idempotent(tmp_path: Path, project: Path):
    registry = RootRegistry(cwd=tmp_path)
    registry.set(str(project))

    first = registry.set(None)
    assert registry.current() == first

    registry.set(str(project))
    second = registry.set("")
    assert first == second == tmp_path.resolve()
    assert registry.set("   ") == first


def test_home_relative_root(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    (tmp_path / "code").mkdir()
    registry = RootRegistry(cwd=Path("/"))
    assert registry.set("~/code") == (tmp_path / "code").resolve()
