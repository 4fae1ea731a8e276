"""Search sessions: one root, at most one live enumeration process."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Callable, Optional, Union

from pathseek.errors import StaleResult, ToolUnavailable
from pathseek.paths import normalize_path

from .models import Candidate, RequestOutcome, SearchConfig, SearchRequest, SessionState
from .process import EnumerationHandle, ProcessInvoker
from .ranking import CandidateRanker
from .registry import RootRegistry

logger = logging.getLogger(__name__)


class SearchSession:
    """Owns a search root and sequences searches against it.

    Every call to :meth:`search` gets a new generation number. Only the
    most recent generation ever delivers a result; older requests have
    their process terminated and resolve to ``None``.

    Sessions are independent: each has its own registry, generation
    counter and process handle.
    """

    def __init__(
        self,
        config: SearchConfig,
        *,
        root: Optional[str] = None,
        cwd: Optional[Path] = None,
        invoker: Optional[ProcessInvoker] = None,
        sort_key: Optional[Callable[[Candidate], Any]] = None,
    ):
        """Create a session.

        Args:
            config: Static search options, fixed for the session lifetime
            root: Initial search root (default: working directory)
            cwd: Working directory for resets and relative roots
            invoker: Process launcher (default: picks the backend from config)
            sort_key: Optional ordering applied to each result list

        Raises:
            InvalidRoot: If ``root`` is given and is not a directory
        """
        self.config = config
        self.registry = RootRegistry(cwd)
        if root:
            self.registry.set(root)
        self.invoker = invoker or ProcessInvoker()
        self.sort_key = sort_key
        self.last_outcome: Optional[RequestOutcome] = None

        self._lock = threading.Lock()
        self._active_generation = 0
        self._running: Optional[EnumerationHandle] = None
        self._in_flight: set[int] = set()

    async def __aenter__(self) -> "SearchSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def active_generation(self) -> int:
        return self._active_generation

    @property
    def state(self) -> SessionState:
        return SessionState.SEARCHING if self._in_flight else SessionState.IDLE

    def set_root(self, path: Optional[str]) -> Path:
        """Set the root used by the next search. See :meth:`RootRegistry.set`."""
        return self.registry.set(path)

    def get_root(self) -> Path:
        return self.registry.current()

    def _submit(self, query: str) -> SearchRequest:
        with self._lock:
            self._active_generation += 1
            request = SearchRequest(query=query, generation=self._active_generation)
            previous = self._running
        if previous is not None:
            logger.debug(f"Generation {request.generation} supersedes pid={previous.pid}")
            previous.cancel()
        return request

    def _check_current(self, request: SearchRequest) -> None:
        active = self._active_generation
        if request.generation != active:
            raise StaleResult(request.generation, active)

    async def search(
        self,
        query: str,
        *,
        reference: Union[str, Path, None] = None,
    ) -> Optional[list[Candidate]]:
        """Run one search against the current root.

        Args:
            query: Filename filter passed to the backend; empty lists everything
            reference: Directory display paths are relative to (default: root)

        Returns:
            Candidates in tool order, capped at ``config.max_results``, or
            ``None`` if a newer search superseded this one

        Raises:
            ToolUnavailable: If the tool is missing or failed and this is
                still the most recent request
        """
        request = self._submit(query)
        root = self.registry.current()
        ref = normalize_path(reference, base=root) if reference else root

        self._in_flight.add(request.generation)
        try:
            candidates = await self._run(request, root, ref)
            self._check_current(request)
        except StaleResult as e:
            logger.debug(f"Discarded stale result: {e}")
            self.last_outcome = RequestOutcome.DISCARDED_STALE
            return None
        except ToolUnavailable:
            if request.generation != self._active_generation:
                logger.debug(f"Discarded stale failure for generation {request.generation}")
                self.last_outcome = RequestOutcome.DISCARDED_STALE
                return None
            self.last_outcome = RequestOutcome.FAILED
            raise
        finally:
            self._in_flight.discard(request.generation)

        self.last_outcome = RequestOutcome.DELIVERED
        logger.debug(f"Generation {request.generation} delivered {len(candidates)} candidates for {query!r}")
        return candidates

    async def _run(self, request: SearchRequest, root: Path, reference: Path) -> list[Candidate]:
        handle = await self.invoker.start(root, request.query, self.config)

        previous = None
        with self._lock:
            stale = request.generation != self._active_generation
            if not stale:
                previous, self._running = self._running, handle
        if stale:
            # Superseded while spawning; the newer request never saw this handle.
            await handle.aclose()
            self._check_current(request)
        if previous is not None:
            previous.cancel()

        ranker = CandidateRanker(root, self.config.max_results, reference, self.sort_key)
        lines = handle.lines()
        try:
            async for line in lines:
                self._check_current(request)
                if ranker.add(line):
                    logger.debug(f"Result cap {self.config.max_results} reached, stopping pid={handle.pid}")
                    break
        finally:
            await lines.aclose()
            await handle.aclose()
            with self._lock:
                if self._running is handle:
                    self._running = None

        return ranker.candidates()

    async def close(self) -> None:
        """Terminate any running process and wait for it to exit.

        Searches still in flight resolve as superseded.
        """
        with self._lock:
            self._active_generation += 1
            handle, self._running = self._running, None
        if handle is not None:
            await handle.aclose()
