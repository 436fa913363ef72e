"""Search package exports."""

from __future__ import annotations

from .matches import SearchMatch, SearchState, find_all

__all__ = [
    "SearchMatch",
    "SearchState",
    "find_all",
]
