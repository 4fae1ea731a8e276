"""pathseek - asynchronous fuzzy file-path search sessions."""

__version__ = "0.1.0"
