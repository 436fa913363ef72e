"""Incremental highlight cache with debounced recomputation for large buffers.

Every redraw asks for spans of the live buffer. Unchanged buffers are served
from cache; small buffers are re-tokenized synchronously; buffers above the
line threshold render unstyled until they have been stable for the debounce
interval, then get tokenized once.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from pygments.lexer import Lexer

from ..config import EditorSettings
from .spans import HighlightSpan, plain_span
from .syntax import lexer_for_filename, normalize_style, tokenize_spans

logger = logging.getLogger(__name__)


def count_lines(text: str) -> int:
    """Logical line count, matching the gutter (an empty buffer has one line)."""
    return text.count("\n") + 1


class HighlightCache:
    """Own grammar selection and cached spans for one open document.

    Font size and style are read from ``settings`` on every call; a change in
    either invalidates the cached spans. ``clock`` must be monotonic.
    """

    def __init__(
        self,
        settings: EditorSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings if settings is not None else EditorSettings()
        self._clock = clock
        self.grammar: Lexer | None = None
        self.cached_spans: list[HighlightSpan] = []
        self.cached_source: str | None = None
        self._cached_key: tuple[float, str] | None = None
        self._pending_source: str | None = None
        self._dirty_since: float | None = None
        self.recompute_count = 0

    @property
    def theme(self) -> str:
        return normalize_style(self.settings.style)

    @property
    def is_dirty(self) -> bool:
        """True while a large buffer is waiting out its debounce interval."""
        return self._pending_source is not None

    def set_grammar(self, filename: str | Path | None) -> bool:
        """Select grammar by filename; returns whether one matched."""
        self.grammar = lexer_for_filename(filename)
        if self.grammar is None:
            logger.debug("no grammar for %s, highlighting as plain text", filename)
        self.invalidate()
        return self.grammar is not None

    def set_theme(self, style: str) -> str:
        """Switch Pygments style and return the name actually applied."""
        self.settings.style = normalize_style(style)
        self.invalidate()
        return self.settings.style

    def invalidate(self) -> None:
        """Drop cached source so the next read recomputes."""
        self.cached_source = None
        self._cached_key = None
        self._pending_source = None
        self._dirty_since = None

    def _settings_key(self) -> tuple[float, str]:
        return (float(self.settings.font_size), self.theme)

    def get_spans(self, text: str) -> list[HighlightSpan]:
        """Return spans covering ``text`` exactly.

        Large buffers that differ from the cache return one unstyled span
        until ``text`` has stayed unchanged for the debounce interval.
        """
        if self._cached_key != self._settings_key():
            self.cached_source = None

        if self.cached_source is not None and text == self.cached_source:
            return self.cached_spans

        if self.grammar is None:
            return self._recompute(text)

        if count_lines(text) <= self.settings.large_file_lines:
            return self._recompute(text)

        now = self._clock()
        if text != self._pending_source or self._dirty_since is None:
            self._pending_source = text
            self._dirty_since = now
            return [plain_span(text, self.settings.font_size)]

        if now - self._dirty_since < self.settings.debounce_seconds:
            return [plain_span(text, self.settings.font_size)]

        logger.debug("debounce elapsed, highlighting %d lines", count_lines(text))
        return self._recompute(text)

    def refresh(self, text: str) -> list[HighlightSpan]:
        """Recompute synchronously regardless of size (e.g. right after a save)."""
        return self._recompute(text)

    def _recompute(self, text: str) -> list[HighlightSpan]:
        key = self._settings_key()
        self.cached_spans = tokenize_spans(text, self.grammar, key[1], key[0])
        self.cached_source = text
        self._cached_key = key
        self._pending_source = None
        self._dirty_since = None
        self.recompute_count += 1
        return self.cached_spans
