"""ANSI rendering of styled spans for terminal output.

Splits spans into display rows (hard line breaks, then soft wraps at the
viewport width) and pairs each row with its gutter label.
"""

from __future__ import annotations

from collections.abc import Sequence

from .highlight import HighlightSpan, SpanStyle

RESET = "\033[0m"


def span_sgr(style: SpanStyle) -> str:
    """Truecolor SGR prefix for ``style``; empty for default colors."""
    params: list[str] = []
    if style.foreground is not None:
        params.append("38;2;{};{};{}".format(*style.foreground))
    if style.background is not None:
        params.append("48;2;{};{};{}".format(*style.background))
    if not params:
        return ""
    return f"\033[{';'.join(params)}m"


def split_rows(spans: Sequence[HighlightSpan], width: int) -> list[list[HighlightSpan]]:
    """Break spans into rows of at most ``width`` characters.

    Newlines end a row and are dropped; ``width <= 0`` disables soft wrap.
    """
    rows: list[list[HighlightSpan]] = [[]]
    col = 0
    for span in spans:
        parts = span.text.split("\n")
        for part_idx, part in enumerate(parts):
            if part_idx > 0:
                rows.append([])
                col = 0
            while part:
                if width > 0 and col >= width:
                    rows.append([])
                    col = 0
                take = len(part) if width <= 0 else min(len(part), width - col)
                rows[-1].append(HighlightSpan(span.style, part[:take]))
                col += take
                part = part[take:]
    return rows


def render_row(row: Sequence[HighlightSpan], no_color: bool = False) -> str:
    out: list[str] = []
    for span in row:
        prefix = "" if no_color else span_sgr(span.style)
        if prefix:
            out.append(prefix + span.text + RESET)
        else:
            out.append(span.text)
    return "".join(out)


def render_document(
    spans: Sequence[HighlightSpan],
    labels: str,
    width: int,
    no_color: bool = False,
) -> str:
    """Render gutter labels and span rows side by side, one row per line."""
    rows = split_rows(spans, width)
    label_rows = labels.split("\n")
    gutter = max((len(label) for label in label_rows), default=1)
    out: list[str] = []
    for row_idx, row in enumerate(rows):
        label = label_rows[row_idx] if row_idx < len(label_rows) else ""
        out.append(f"{label.rjust(gutter)} │ {render_row(row, no_color)}\n")
    return "".join(out)
