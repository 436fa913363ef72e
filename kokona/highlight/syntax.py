"""Grammar lookup and Pygments tokenization into styled spans.

Lookup misses and lexer failures degrade to unstyled text instead of raising.
Token offsets are checked against the source so spans always rebuild the
buffer exactly, including ``\\r\\n`` terminators Pygments would normalize.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from pygments.lexer import Lexer
from pygments.lexers import get_lexer_for_filename
from pygments.lexers.special import TextLexer
from pygments.styles import get_style_by_name
from pygments.token import _TokenType
from pygments.util import ClassNotFound

from .spans import DEFAULT_FONT_FAMILY, Color, FontDescriptor, HighlightSpan, SpanStyle, hex_to_rgb, plain_span

logger = logging.getLogger(__name__)

FALLBACK_STYLE = "monokai"

_VALID_STYLES: set[str] = set()
_INVALID_STYLES: set[str] = set()
_TOKEN_COLORS: dict[tuple[str, _TokenType], Color | None] = {}


def lexer_for_filename(filename: str | Path | None) -> Lexer | None:
    """Best-effort grammar lookup by filename; ``None`` when nothing matches.

    Plain-text lexers count as no match so unknown files render unstyled.
    """
    if not filename:
        return None
    name = Path(filename).name
    if not name:
        return None
    try:
        lexer = get_lexer_for_filename(name, stripnl=False, stripall=False, ensurenl=False)
    except ClassNotFound:
        return None
    except Exception:
        logger.debug("grammar lookup failed for %s", name, exc_info=True)
        return None
    if isinstance(lexer, TextLexer):
        return None
    return lexer


def normalize_style(style: str) -> str:
    """Validate/canonicalize requested style name with cache-backed checks."""
    if style in _VALID_STYLES:
        return style
    if style in _INVALID_STYLES:
        return FALLBACK_STYLE

    try:
        get_style_by_name(style)
    except ClassNotFound:
        _INVALID_STYLES.add(style)
        logger.warning("unknown highlight style %r, using %s", style, FALLBACK_STYLE)
        return FALLBACK_STYLE
    _VALID_STYLES.add(style)
    return style


def token_color(style: str, ttype: _TokenType) -> Color | None:
    """Return foreground RGB for ``ttype`` in ``style``, inheriting from parents."""
    key = (style, ttype)
    if key in _TOKEN_COLORS:
        return _TOKEN_COLORS[key]

    style_cls = get_style_by_name(style)
    lookup = ttype
    while not style_cls.styles_token(lookup) and lookup.parent is not None:
        lookup = lookup.parent
    try:
        color = hex_to_rgb(style_cls.style_for_token(lookup).get("color"))
    except KeyError:
        color = None
    _TOKEN_COLORS[key] = color
    return color


def _spans_from_tokens(
    source: str,
    tokens: Iterable[tuple[int, _TokenType, str]],
    style: str,
    font: FontDescriptor,
) -> list[HighlightSpan] | None:
    """Convert positioned tokens into merged spans.

    Returns ``None`` when the tokens do not tile ``source`` exactly.
    """
    out: list[HighlightSpan] = []
    cursor = 0
    for index, ttype, value in tokens:
        if not value:
            continue
        if index != cursor or not source.startswith(value, index):
            return None
        cursor += len(value)
        span_style = SpanStyle(font=font, foreground=token_color(style, ttype))
        if out and out[-1].style == span_style:
            out[-1] = HighlightSpan(span_style, out[-1].text + value)
        else:
            out.append(HighlightSpan(span_style, value))
    if cursor != len(source):
        return None
    return out


def _tokenize(source: str, lexer: Lexer, style: str, font: FontDescriptor) -> list[HighlightSpan] | None:
    try:
        return _spans_from_tokens(source, lexer.get_tokens_unprocessed(source), style, font)
    except Exception:
        logger.debug("lexer %s rejected input", lexer.name, exc_info=True)
        return None


def tokenize_spans(source: str, lexer: Lexer | None, style: str, font_size: float) -> list[HighlightSpan]:
    """Tokenize ``source`` into spans covering it exactly.

    The whole buffer is lexed first so multi-line constructs keep context.
    If that fails, each line (terminator included) is lexed on its own and a
    line the lexer rejects becomes one unstyled span.
    """
    if lexer is None:
        return [plain_span(source, font_size)]
    if not source:
        return []

    font = FontDescriptor(DEFAULT_FONT_FAMILY, float(font_size))
    style = normalize_style(style)
    spans = _tokenize(source, lexer, style, font)
    if spans is not None:
        return spans

    out: list[HighlightSpan] = []
    for line in source.splitlines(keepends=True):
        line_spans = _tokenize(line, lexer, style, font)
        if line_spans is None:
            out.append(plain_span(line, font_size))
        else:
            out.extend(line_spans)
    return out
