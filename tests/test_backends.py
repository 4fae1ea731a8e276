from pathlib import Path

from pathseek.search.backends import FdBackend, RipgrepBackend, escape_glob, escape_regex, get_backend
from pathseek.search.models import Backend, SearchConfig

ROOT = Path("/srv/my.proj")


def test_get_backend_maps_every_variant():
    assert isinstance(get_backend(Backend.FD), FdBackend)
    assert isinstance(get_backend(Backend.RIPGREP), RipgrepBackend)
    assert isinstance(get_backend("ripgrep"), RipgrepBackend)


def test_fd_default_args():
    args = FdBackend().build_args("", SearchConfig(), ROOT)
    assert args == ["--type", "f", "--color", "never"]


def test_fd_flags_and_query():
    cfg = SearchConfig(search_hidden=True, respect_gitignore=False, extensions=[".md", "json"])
    args = FdBackend().build_args("read me", cfg, ROOT)
    assert args == [
        "--type", "f", "--color", "never",
        "--hidden",
        "--no-ignore",
        "--extension", "md",
        "--extension", "json",
        "--ignore-case",
        "--fixed-strings", "--", "read me",
    ]


def test_fd_query_starting_with_dash_stays_a_pattern():
    args = FdBackend().build_args("-x", SearchConfig(), ROOT)
    assert args[-2:] == ["--", "-x"]


def test_fd_query_with_slash_matches_path_below_root():
    args = FdBackend().build_args("sub/b", SearchConfig(), ROOT)
    assert args[-4:] == ["--ignore-case", "--full-path", "--", r"^/srv/my\.proj/.*sub/b"]
    assert "--fixed-strings" not in args


def test_fd_query_naming_a_directory_is_not_a_bare_pattern():
    # fd refuses a bare pattern that is an existing directory; --full-path
    # turns it into a path match instead.
    args = FdBackend().build_args("sub/", SearchConfig(), ROOT)
    assert "--full-path" in args
    assert args[-1] == r"^/srv/my\.proj/.*sub/"


def test_fd_slash_query_escapes_regex_metacharacters():
    args = FdBackend().build_args("a+b/(c)", SearchConfig(), Path("/"))
    assert args[-1] == r"^/.*a\+b/\(c\)"


def test_ripgrep_default_args():
    args = RipgrepBackend().build_args("", SearchConfig(backend=Backend.RIPGREP), ROOT)
    assert args == ["--files", "--color", "never"]


def test_ripgrep_flags_and_query():
    cfg = SearchConfig(backend=Backend.RIPGREP, search_hidden=True, respect_gitignore=False)
    args = RipgrepBackend().build_args("a*b", cfg, ROOT)
    assert args == ["--files", "--color", "never", "--hidden", "--no-ignore", "--iglob", "*a\\*b*"]


def test_ripgrep_query_with_slash_matches_path_below_root():
    args = RipgrepBackend().build_args("sub/b", SearchConfig(backend=Backend.RIPGREP), ROOT)
    assert args[-2:] == ["--iglob", "*sub/b*"]
    assert str(ROOT) not in " ".join(args)


def test_ripgrep_extensions_without_query_use_globs():
    cfg = SearchConfig(backend=Backend.RIPGREP, extensions=("md",))
    assert RipgrepBackend().build_args("", cfg, ROOT)[-2:] == ["--glob", "*.md"]


def test_ripgrep_extensions_with_query_filter_lines():
    cfg = SearchConfig(backend=Backend.RIPGREP, extensions=("md",))
    backend = RipgrepBackend()
    assert "--glob" not in backend.build_args("notes", cfg, ROOT)
    assert backend.accepts("docs/notes.md", "notes", cfg)
    assert not backend.accepts("docs/notes.txt", "notes", cfg)
    assert backend.accepts("docs/notes.txt", "", cfg)


def test_escape_glob():
    assert escape_glob("a[1]{x,y}?*") == "a\\[1\\]\\{x,y\\}\\?\\*"
    assert escape_glob("plain") == "plain"


def test_escape_regex():
    assert escape_regex("a.b|c-d^$") == r"a\.b\|c\-d\^\$"
    assert escape_regex("sub dir/x") == "sub dir/x"


def test_ok_exit_codes():
    assert FdBackend.ok_exit_codes == frozenset({0})
    assert 1 in RipgrepBackend.ok_exit_codes


def test_missing_executable_override_resolves_to_none():
    cfg = SearchConfig(executable="pathseek-no-such-tool")
    assert FdBackend().resolve_executable(cfg) is None
    assert FdBackend().command("", cfg, ROOT) is None
