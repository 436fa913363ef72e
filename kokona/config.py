"""Persistent JSON config helpers.

Stores editor font size, highlight style, and highlight/terminal tuning.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "kokona"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

DEFAULT_FONT_SIZE = 12.0
DEFAULT_STYLE = "monokai"
DEFAULT_LARGE_FILE_LINES = 500
DEFAULT_DEBOUNCE_MS = 500


@dataclass
class EditorSettings:
    """Settings read by the highlight engine and terminal bridge on each call."""

    font_size: float = DEFAULT_FONT_SIZE
    style: str = DEFAULT_STYLE
    large_file_lines: int = DEFAULT_LARGE_FILE_LINES
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    shell: str | None = None

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Any filesystem/serialization error is ignored to keep runtime behavior
    non-fatal when config cannot be written.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except Exception:
        pass


def _coerce_positive_int(value: object, default: int) -> int:
    """Booleans, non-integers and values below 1 fall back to ``default``."""
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return value if value >= 1 else default


def load_font_size() -> float:
    """Return persisted font size, constrained to the open interval (0, 200)."""
    value = load_config().get("font_size")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_FONT_SIZE
    if value <= 0 or value >= 200:
        return DEFAULT_FONT_SIZE
    return float(value)


def save_font_size(font_size: float) -> None:
    if font_size <= 0:
        return
    config = load_config()
    config["font_size"] = round(float(font_size), 2)
    save_config(config)


def load_style_name() -> str:
    """Load persisted Pygments style name, returning the default when unset."""
    value = load_config().get("style")
    if not isinstance(value, str):
        return DEFAULT_STYLE
    stripped = value.strip()
    return stripped if stripped else DEFAULT_STYLE


def save_style_name(style: str) -> None:
    stripped = str(style).strip()
    if not stripped:
        return
    config = load_config()
    config["style"] = stripped
    save_config(config)


def load_settings() -> EditorSettings:
    """Build ``EditorSettings`` from persisted config with per-key validation."""
    data = load_config()
    shell = data.get("shell")
    return EditorSettings(
        font_size=load_font_size(),
        style=load_style_name(),
        large_file_lines=_coerce_positive_int(data.get("large_file_lines"), DEFAULT_LARGE_FILE_LINES),
        debounce_ms=_coerce_positive_int(data.get("debounce_ms"), DEFAULT_DEBOUNCE_MS),
        shell=shell.strip() if isinstance(shell, str) and shell.strip() else None,
    )
