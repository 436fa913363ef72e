"""In-buffer text search with a wrapping match cursor.

Matches are ``(start, end)`` string offsets found by a non-overlapping
forward scan, so ``"abc"`` in ``"abcabcabc"`` yields three matches.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

SearchMatch = tuple[int, int]


def find_all(text: str, query: str, case_sensitive: bool = False) -> list[SearchMatch]:
    """Return every non-overlapping occurrence of ``query`` in ``text``.

    Scanning resumes at the end of each match. Case-insensitive search
    compares lower-cased copies; when lower-casing would shift offsets
    (a few non-ASCII letters change length), an ``IGNORECASE`` regex scan
    with the same semantics runs on the original text instead.
    """
    if not query:
        return []

    if case_sensitive:
        haystack, needle = text, query
    else:
        haystack, needle = text.lower(), query.lower()
        if len(haystack) != len(text) or len(needle) != len(query):
            pattern = re.compile(re.escape(query), re.IGNORECASE)
            return [match.span() for match in pattern.finditer(text) if match.end() > match.start()]

    matches: list[SearchMatch] = []
    step = len(needle)
    cursor = 0
    while True:
        found = haystack.find(needle, cursor)
        if found < 0:
            break
        matches.append((found, found + step))
        cursor = found + step
    return matches


@dataclass
class SearchState:
    """Query, options, and match cursor for the search panel.

    Callers must call ``find_matches`` after every buffer edit while the
    panel is open; matches are never refreshed implicitly.
    """

    is_open: bool = False
    query: str = ""
    case_sensitive: bool = False
    current_match: int = 0
    matches: list[SearchMatch] = field(default_factory=list)

    def find_matches(self, text: str) -> list[SearchMatch]:
        self.matches = find_all(text, self.query, self.case_sensitive)
        self._clamp_cursor()
        return self.matches

    def set_query(self, query: str, case_sensitive: bool, text: str) -> list[SearchMatch]:
        """Replace query/options, recompute, and reset the cursor to the first match."""
        self.query = query
        self.case_sensitive = case_sensitive
        self.current_match = 0
        return self.find_matches(text)

    def set_case_sensitive(self, case_sensitive: bool, text: str) -> list[SearchMatch]:
        self.case_sensitive = case_sensitive
        return self.find_matches(text)

    def open(self, text: str) -> None:
        self.is_open = True
        self.find_matches(text)

    def close(self) -> None:
        self.is_open = False

    def _clamp_cursor(self) -> None:
        if not self.matches:
            self.current_match = 0
            return
        self.current_match = max(0, min(self.current_match, len(self.matches) - 1))

    def next_match(self) -> int:
        if self.matches:
            self.current_match = (self.current_match + 1) % len(self.matches)
        return self.current_match

    def prev_match(self) -> int:
        if self.matches:
            self.current_match = (self.current_match - 1) % len(self.matches)
        return self.current_match

    def current(self) -> SearchMatch | None:
        if not self.matches:
            return None
        return self.matches[self.current_match]

    def summary(self) -> str:
        """Status text such as ``"3 matches found (showing 1/3)"``."""
        count = len(self.matches)
        if not count:
            return f"{count} matches found"
        return f"{count} matches found (showing {self.current_match + 1}/{count})"
