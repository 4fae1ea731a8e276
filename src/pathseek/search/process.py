from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import AsyncGenerator, Optional

from pathseek.errors import ToolUnavailable

from .backends import EnumerationBackend, get_backend
from .models import SearchConfig

logger = logging.getLogger(__name__)

_STDERR_TAIL_BYTES = 4096
_LINE_LIMIT = 1 << 20


async def _discard_line(stream: asyncio.StreamReader) -> None:
    """Consume the stream up to and including the next newline (or EOF)."""
    while True:
        try:
            await stream.readuntil(b"\n")
            return
        except asyncio.LimitOverrunError as e:
            await stream.readexactly(e.consumed)
        except asyncio.IncompleteReadError:
            return


class EnumerationHandle:
    """One running enumeration process and its output stream."""

    def __init__(
        self,
        process: asyncio.subprocess.Process,
        *,
        backend: EnumerationBackend,
        query: str,
        config: SearchConfig,
        root: Path,
    ):
        self.process = process
        self.backend = backend
        self.query = query
        self.config = config
        self.root = root
        self.cancel_requested = False
        self.lines_read = 0
        self._stderr = bytearray()
        self._stderr_task = asyncio.ensure_future(self._drain_stderr())

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def running(self) -> bool:
        return self.process.returncode is None

    @property
    def stderr_tail(self) -> str:
        return bytes(self._stderr).decode("utf-8", errors="replace").strip()

    async def _drain_stderr(self) -> None:
        stream = self.process.stderr
        if stream is None:
            return
        while True:
            chunk = await stream.read(1024)
            if not chunk:
                return
            self._stderr.extend(chunk)
            if len(self._stderr) > _STDERR_TAIL_BYTES:
                del self._stderr[: len(self._stderr) - _STDERR_TAIL_BYTES]

    async def lines(self) -> AsyncGenerator[str, None]:
        """Yield output lines as the process writes them.

        Raises:
            ToolUnavailable: If the process exits with a failing status
                before producing any output and was not cancelled
        """
        stream = self.process.stdout
        if stream is None:
            raise ToolUnavailable(self.backend.name, "process has no stdout pipe")
        while True:
            try:
                raw = await stream.readuntil(b"\n")
            except asyncio.IncompleteReadError as e:
                # Last line without a newline, or b"" at EOF.
                raw = e.partial
            except asyncio.LimitOverrunError:
                logger.debug(f"Dropping {self.backend.name} line longer than {_LINE_LIMIT} bytes")
                await _discard_line(stream)
                continue
            if not raw:
                break
            line = raw.decode("utf-8", errors="surrogateescape").rstrip("\r\n")
            if not line:
                continue
            if not self.backend.accepts(line, self.query, self.config):
                continue
            self.lines_read += 1
            yield line

        returncode = await self.process.wait()
        await asyncio.wait([self._stderr_task])
        if self.cancel_requested or self.lines_read:
            return
        if returncode not in self.backend.ok_exit_codes:
            detail = self.stderr_tail or f"exit status {returncode}"
            logger.warning(f"{self.backend.name} failed in {self.root}: {detail}")
            raise ToolUnavailable(self.backend.name, detail)

    def cancel(self) -> None:
        """Ask the process to stop. Safe to call repeatedly or after exit."""
        self.cancel_requested = True
        if self.process.returncode is not None:
            return
        try:
            self.process.terminate()
            logger.debug(f"Sent SIGTERM to {self.backend.name} pid={self.pid}")
        except ProcessLookupError:
            pass

    async def aclose(self) -> Optional[int]:
        """Cancel if still running and wait for the process to exit."""
        if self.running:
            self.cancel()
            try:
                await asyncio.wait_for(self.process.wait(), timeout=self.config.terminate_timeout)
            except asyncio.TimeoutError:
                logger.debug(f"Killing {self.backend.name} pid={self.pid}")
                try:
                    self.process.kill()
                except ProcessLookupError:
                    pass
                await self.process.wait()
        if not self._stderr_task.done():
            self._stderr_task.cancel()
            await asyncio.wait([self._stderr_task])
        return self.process.returncode


class ProcessInvoker:
    """Launches enumeration processes for one backend."""

    def __init__(self, backend: Optional[EnumerationBackend] = None):
        self.backend = backend

    def backend_for(self, config: SearchConfig) -> EnumerationBackend:
        return self.backend or get_backend(config.backend)

    async def start(self, root: Path, query: str, config: SearchConfig) -> EnumerationHandle:
        """Spawn one enumeration process rooted at ``root``.

        Raises:
            ToolUnavailable: If the tool cannot be found or started
        """
        backend = self.backend_for(config)
        argv = backend.command(query, config, root)
        if argv is None:
            wanted = config.executable or " or ".join(backend.executables)
            raise ToolUnavailable(backend.name, f"executable not found: {wanted}")

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                cwd=str(root),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=_LINE_LIMIT,
            )
        except (OSError, ValueError) as e:
            # Missing binary, missing root directory, permission denied,
            # or an argument the OS cannot pass (embedded NUL).
            raise ToolUnavailable(backend.name, str(e)) from e

        logger.debug(f"Started {backend.name} pid={process.pid} in {root}: {argv[1:]}")
        return EnumerationHandle(process, backend=backend, query=query, config=config, root=root)
