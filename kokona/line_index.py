"""Line-number gutter labels with soft-wrap continuation markers.

Labels are cached by logical line count only. A viewport width change that
keeps the line count returns the previous labels until the next edit that
adds or removes a line.
"""

from __future__ import annotations

CONTINUATION_MARKER = "·"


def wrapped_segments(line_length: int, viewport_char_width: int) -> int:
    """Number of display rows a line of ``line_length`` chars occupies."""
    if viewport_char_width <= 0 or line_length <= viewport_char_width:
        return 1
    return -(-line_length // viewport_char_width)


def build_line_labels(text: str, viewport_char_width: int) -> str:
    rows: list[str] = []
    for number, line in enumerate(text.split("\n"), start=1):
        rows.append(str(number))
        rows.extend([CONTINUATION_MARKER] * (wrapped_segments(len(line), viewport_char_width) - 1))
    return "\n".join(rows)


class LineIndexCache:
    def __init__(self) -> None:
        self._line_count: int | None = None
        self._labels = ""

    def get_line_labels(self, text: str, viewport_char_width: int) -> str:
        line_count = text.count("\n") + 1
        if line_count != self._line_count:
            self._labels = build_line_labels(text, viewport_char_width)
            self._line_count = line_count
        return self._labels

    def invalidate(self) -> None:
        self._line_count = None
