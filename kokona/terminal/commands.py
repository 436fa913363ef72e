"""Child-process command selection for the embedded terminal.

Picks the interactive shell or a per-language run command and resolves the
working directory from the currently open file.
"""

from __future__ import annotations

import os
import shlex
from pathlib import Path

DEFAULT_SHELL = "/bin/sh"

RUN_COMMANDS: dict[str, tuple[str, ...]] = {
    ".rs": ("cargo", "run"),
    ".py": ("python3", "{file}"),
    ".js": ("node", "{file}"),
    ".go": ("go", "run", "{file}"),
    ".rb": ("ruby", "{file}"),
    ".sh": ("sh", "{file}"),
    ".lua": ("lua", "{file}"),
}


def shell_command(configured: str | None = None) -> list[str]:
    """Return argv for an interactive shell.

    Order: configured shell, ``$SHELL``, then ``/bin/sh``.
    """
    for candidate in (configured, os.environ.get("SHELL", "")):
        if not candidate or not candidate.strip():
            continue
        cmd = shlex.split(candidate)
        if cmd:
            return cmd
    return [DEFAULT_SHELL]


def run_command_for(path: str | Path) -> list[str] | None:
    """Return argv running ``path`` with its language tool, or ``None``."""
    target = Path(path)
    template = RUN_COMMANDS.get(target.suffix.lower())
    if template is None:
        return None
    return [part.replace("{file}", str(target)) for part in template]


def working_directory(current_file: str | Path | None) -> Path:
    """Parent directory of the open file, or the process cwd when unknown."""
    if current_file:
        parent = Path(current_file).expanduser().resolve().parent
        if parent.is_dir():
            return parent
    return Path.cwd()


def child_environment() -> dict[str, str]:
    """Inherited environment with ``TERM=dumb`` so children avoid escape sequences."""
    env = dict(os.environ)
    env["TERM"] = "dumb"
    return env
