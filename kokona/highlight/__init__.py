"""Highlight package exports.

Combines grammar lookup, span types, and the debounced span cache in one
import surface.
"""

from __future__ import annotations

from .cache import HighlightCache, count_lines
from .spans import (
    CURRENT_MATCH_BG,
    OTHER_MATCH_BG,
    Color,
    FontDescriptor,
    HighlightSpan,
    SpanStyle,
    overlay_matches,
    plain_span,
    spans_text,
)
from .syntax import lexer_for_filename, normalize_style, tokenize_spans

__all__ = [
    "CURRENT_MATCH_BG",
    "Color",
    "FontDescriptor",
    "HighlightCache",
    "HighlightSpan",
    "OTHER_MATCH_BG",
    "SpanStyle",
    "count_lines",
    "lexer_for_filename",
    "normalize_style",
    "overlay_matches",
    "plain_span",
    "spans_text",
    "tokenize_spans",
]
