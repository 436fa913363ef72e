"""Document file I/O and cursor/status helpers.

File operations return an error message string instead of raising so the
UI layer decides how to surface failures.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

UNTITLED_FILENAME = "untitled.txt"


def read_text(path: Path) -> str:
    """Read text using tolerant encoding fallback order.

    Attempts UTF-8, UTF-8 with BOM, then latin-1; as a final fallback decodes
    raw bytes with UTF-8 replacement semantics.
    """
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_bytes().decode("utf-8", errors="replace")


def load_document(path: Path) -> tuple[str | None, str | None]:
    """Return ``(text, None)`` or ``(None, error)`` for ``path``."""
    try:
        return read_text(path), None
    except OSError as exc:
        logger.warning("failed to open %s: %s", path, exc)
        return None, f"Error opening file: {exc}"


def write_text(path: Path, text: str) -> str | None:
    """Write ``text`` as UTF-8; returns an error message on failure."""
    try:
        # newline="" keeps the buffer's own line terminators.
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(text)
    except OSError as exc:
        logger.warning("failed to save %s: %s", path, exc)
        return f"Error saving file: {exc}"
    logger.info("saved %s", path)
    return None


def cursor_position(text: str, offset: int | None = None) -> tuple[int, int]:
    """1-based ``(line, column)`` of ``offset`` (defaults to end of buffer)."""
    if offset is None:
        offset = len(text)
    offset = max(0, min(offset, len(text)))
    line = text.count("\n", 0, offset) + 1
    line_start = text.rfind("\n", 0, offset) + 1
    return line, offset - line_start + 1


def status_line(text: str, offset: int | None = None) -> str:
    line, column = cursor_position(text, offset)
    return f"Line {line}, Column {column} | Characters: {len(text)}"
