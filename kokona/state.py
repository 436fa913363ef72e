"""Explicitly owned editor state composing the core components.

Every UI action goes through an ``EditorState`` method; there is no module
level mutable state. Highlight spans are computed before the search overlay
is merged on top of them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .config import EditorSettings
from .document import UNTITLED_FILENAME, load_document, status_line, write_text
from .highlight import HighlightCache, HighlightSpan, overlay_matches
from .line_index import LineIndexCache
from .search import SearchState
from .terminal import TerminalBridge

APP_TITLE = "Kokona"
UNSAVED_CHANGES_MESSAGE = "You have unsaved changes."


@dataclass
class EditorState:
    settings: EditorSettings = field(default_factory=EditorSettings)
    filename: str = ""
    text: str = ""
    modified: bool = False
    cursor: int | None = None
    highlighter: HighlightCache | None = None
    search: SearchState | None = None
    line_index: LineIndexCache = field(default_factory=LineIndexCache)
    terminal: TerminalBridge | None = None

    def __post_init__(self) -> None:
        if self.highlighter is None:
            self.highlighter = HighlightCache(self.settings)
        if self.terminal is None:
            self.terminal = TerminalBridge(self.settings)

    @property
    def has_document(self) -> bool:
        return bool(self.filename)

    def title(self) -> str:
        return f"{APP_TITLE} | MODIFIED" if self.modified else APP_TITLE

    def new_file(self) -> None:
        self._load(UNTITLED_FILENAME, "")

    def open_file(self, path: str | Path) -> str | None:
        """Load ``path``; on failure the current document stays as it was."""
        target = Path(path)
        text, error = load_document(target)
        if text is None:
            return error
        self._load(str(target), text)
        return None

    def _load(self, filename: str, text: str) -> None:
        self.filename = filename
        self.text = text
        self.modified = False
        self.cursor = None
        self.highlighter.set_grammar(filename)
        self.line_index.invalidate()
        if self.search is not None:
            self.search.find_matches(text)

    def save_file(self, path: str | Path | None = None) -> str | None:
        """Write the buffer to ``path`` (or the current file) and re-highlight."""
        target = Path(path) if path is not None else Path(self.filename or UNTITLED_FILENAME)
        error = write_text(target, self.text)
        if error is not None:
            return error
        if str(target) != self.filename:
            self.filename = str(target)
            self.highlighter.set_grammar(self.filename)
        self.modified = False
        self.highlighter.refresh(self.text)
        return None

    @property
    def has_unsaved_changes(self) -> bool:
        return self.modified

    def close_file(self, force: bool = False) -> str | None:
        """Drop the current document; a modified buffer needs ``force=True``."""
        if self.modified and not force:
            return UNSAVED_CHANGES_MESSAGE
        self.filename = ""
        self.text = ""
        self.modified = False
        self.cursor = None
        if self.search is not None:
            self.search.close()
            self.search.find_matches("")
        return None

    def edit(self, text: str, cursor: int | None = None) -> None:
        """Replace the buffer after a user edit and keep search matches current."""
        if text != self.text:
            self.modified = True
        self.text = text
        self.cursor = cursor
        if self.search is not None and self.search.is_open:
            self.search.find_matches(text)

    def open_search(self) -> SearchState:
        if self.search is None:
            self.search = SearchState()
        self.search.open(self.text)
        return self.search

    def compose_spans(self) -> list[HighlightSpan]:
        spans = self.highlighter.get_spans(self.text)
        if self.search is None or not self.search.is_open or not self.search.matches:
            return spans
        return overlay_matches(spans, self.search.matches, self.search.current_match)

    def line_labels(self, viewport_char_width: int) -> str:
        return self.line_index.get_line_labels(self.text, viewport_char_width)

    def status(self) -> str:
        return status_line(self.text, self.cursor)

    def toggle_terminal(self) -> str | None:
        return self.terminal.toggle(self.filename or None)

    def run_current_file(self) -> str | None:
        if not self.filename:
            return "No file to run."
        return self.terminal.run_file(self.filename)
