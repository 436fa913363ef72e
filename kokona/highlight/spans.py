"""Styled span types and the search-overlay span merge.

A span sequence always covers its buffer exactly: joining every ``text``
reproduces the source. ``overlay_matches`` keeps that property while
splitting spans at search-match boundaries.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

Color = tuple[int, int, int]

CURRENT_MATCH_BG: Color = (255, 255, 0)
OTHER_MATCH_BG: Color = (255, 255, 180)
DEFAULT_FONT_FAMILY = "monospace"


@dataclass(frozen=True)
class FontDescriptor:
    family: str
    size: float


@dataclass(frozen=True)
class SpanStyle:
    """Visual style of one span; ``None`` colors mean the renderer's default."""

    font: FontDescriptor
    foreground: Color | None = None
    background: Color | None = None


@dataclass(frozen=True)
class HighlightSpan:
    style: SpanStyle
    text: str


def plain_style(font_size: float) -> SpanStyle:
    return SpanStyle(font=FontDescriptor(DEFAULT_FONT_FAMILY, float(font_size)))


def plain_span(text: str, font_size: float) -> HighlightSpan:
    """Single unstyled span covering ``text``."""
    return HighlightSpan(plain_style(font_size), text)


def spans_text(spans: Iterable[HighlightSpan]) -> str:
    return "".join(span.text for span in spans)


def hex_to_rgb(value: str | None) -> Color | None:
    """Convert a Pygments ``rrggbb``/``rgb`` color string into channels."""
    if not value:
        return None
    digits = value.lstrip("#")
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    if len(digits) != 6:
        return None
    try:
        return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
    except ValueError:
        return None


def overlay_matches(
    spans: Sequence[HighlightSpan],
    matches: Sequence[tuple[int, int]],
    current: int | None = None,
) -> list[HighlightSpan]:
    """Split ``spans`` at match boundaries and paint match backgrounds.

    A span partially covered by a match becomes up to three spans (pre-match,
    match, post-match). Non-match parts keep their original style; match
    parts keep the foreground and get ``CURRENT_MATCH_BG`` for the match at
    index ``current`` and ``OTHER_MATCH_BG`` for every other match.
    ``matches`` must be sorted and non-overlapping.
    """
    if not matches:
        return list(spans)

    out: list[HighlightSpan] = []
    match_idx = 0
    match_count = len(matches)
    offset = 0
    for span in spans:
        span_start = offset
        span_end = offset + len(span.text)
        offset = span_end
        if span_start == span_end:
            continue

        while match_idx < match_count and matches[match_idx][1] <= span_start:
            match_idx += 1

        cursor = span_start
        while match_idx < match_count and matches[match_idx][0] < span_end:
            match_start, match_end = matches[match_idx]
            if match_start > cursor:
                out.append(HighlightSpan(span.style, span.text[cursor - span_start : match_start - span_start]))
                cursor = match_start
            piece_end = min(span_end, match_end)
            if piece_end > cursor:
                background = CURRENT_MATCH_BG if match_idx == current else OTHER_MATCH_BG
                out.append(
                    HighlightSpan(
                        replace(span.style, background=background),
                        span.text[cursor - span_start : piece_end - span_start],
                    )
                )
                cursor = piece_end
            if match_end > span_end:
                # Match continues into the next span.
                break
            match_idx += 1

        if cursor < span_end:
            out.append(HighlightSpan(span.style, span.text[cursor - span_start :]))
    return out
