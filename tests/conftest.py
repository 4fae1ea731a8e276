"""Pytest fixtures for pathseek tests."""

import sys
from pathlib import Path

import pytest

from pathseek.search.backends import EnumerationBackend
from pathseek.search.models import SearchConfig
from pathseek.search.process import ProcessInvoker

# Stand-in for fd/rg: lists files under its cwd whose name contains the
# query. A few magic queries change its behavior.
FAKE_TOOL = r'''
import os, sys, time
query = sys.argv[1] if len(sys.argv) > 1 else ""
if query.startswith("fail"):
    if query == "fail-slow":
        time.sleep(1.0)
    sys.stderr.write("fake tool exploded\n")
    sys.exit(3)
if query == "endless":
    i = 0
    while True:
        print("gen/file%06d.txt" % i, flush=True)
        i += 1
        time.sleep(0.001)
if query == "longline":
    sys.stdout.write("x" * (3 << 20) + "\n")
    print("./a.md", flush=True)
    sys.exit(0)
if query.startswith("slow"):
    time.sleep(float(os.environ.get("FAKE_TOOL_DELAY", "5")))
    query = query[len("slow"):]
for dirpath, dirnames, filenames in os.walk("."):
    dirnames.sort()
    for name in sorted(filenames):
        if query in name:
            print(os.path.join(dirpath, name).replace(os.sep, "/"), flush=True)
'''


class FakeToolBackend(EnumerationBackend):
    name = "fake"

    def build_args(self, query, config, root):
        return ["-c", FAKE_TOOL, query]

    def resolve_executable(self, config):
        return sys.executable


class RecordingInvoker(ProcessInvoker):
    """ProcessInvoker that remembers every handle it started."""

    def __init__(self, backend=None):
        super().__init__(backend or FakeToolBackend())
        self.handles = []

    async def start(self, root, query, config):
        handle = await super().start(root, query, config)
        self.handles.append(handle)
        return handle


@pytest.fixture
def project(tmp_path):
    """Create the sample project tree.

    Returns:
        Path to a project root containing a.md, sub/b.md and sub/c.json
    """
    root = tmp_path / "proj"
    (root / "sub").mkdir(parents=True)
    (root / "a.md").write_text("# a\n", encoding="utf-8")
    (root / "sub" / "b.md").write_text("# b\n", encoding="utf-8")
    (root / "sub" / "c.json").write_text("{}\n", encoding="utf-8")
    return root


@pytest.fixture
def config():
    return SearchConfig(max_results=5)


@pytest.fixture
def invoker():
    return RecordingInvoker()


@pytest.fixture
def fake_backend():
    return FakeToolBackend()
