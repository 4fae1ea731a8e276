"""Asynchronous file-path search sessions backed by fd or ripgrep."""

from .backends import EnumerationBackend, FdBackend, RipgrepBackend, get_backend
from .models import Backend, Candidate, RequestOutcome, SearchConfig, SearchRoot, SessionState
from .process import EnumerationHandle, ProcessInvoker
from .ranking import CandidateRanker
from .registry import RootRegistry
from .session import SearchSession

__all__ = [
    "Backend",
    "Candidate",
    "CandidateRanker",
    "EnumerationBackend",
    "EnumerationHandle",
    "FdBackend",
    "ProcessInvoker",
    "RequestOutcome",
    "RipgrepBackend",
    "RootRegistry",
    "SearchConfig",
    "SearchRoot",
    "SearchSession",
    "SessionState",
    "get_backend",
]
