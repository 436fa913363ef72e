"""Embedded terminal panel state: at most one PTY session at a time.

Lifecycle is ``CLOSED -> INITIALIZING -> RUNNING -> CLOSED``. Open requests
while a session runs are ignored, not queued, so a previous reader thread is
never orphaned. Failures roll back to ``CLOSED`` and return an error message.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from ..config import EditorSettings
from .commands import child_environment, run_command_for, shell_command, working_directory
from .session import PTY_COLS, PTY_ROWS, PtySession, spawn_pty_session

logger = logging.getLogger(__name__)

PROMPT_MARKER = "> "

SpawnSession = Callable[..., "tuple[PtySession | None, str | None]"]


class TerminalStatus(enum.Enum):
    CLOSED = "closed"
    INITIALIZING = "initializing"
    RUNNING = "running"


class TerminalBridge:
    """Own the terminal session, its output buffer, and the pending input line.

    Only the UI thread touches ``output``: it drains reader chunks in
    ``poll`` and appends echoed input in ``submit_input``.
    """

    def __init__(
        self,
        settings: EditorSettings | None = None,
        spawn: SpawnSession = spawn_pty_session,
    ) -> None:
        self.settings = settings if settings is not None else EditorSettings()
        self._spawn = spawn
        self.status = TerminalStatus.CLOSED
        self.session: PtySession | None = None
        self.output = ""
        self.input_line = ""
        self.last_error: str | None = None

    @property
    def is_running(self) -> bool:
        return self.status is TerminalStatus.RUNNING

    @property
    def writer(self):
        return self.session.writer if self.session is not None else None

    def toggle(self, current_file: str | Path | None = None) -> str | None:
        """Open a shell when closed, close the session when running."""
        if self.status is not TerminalStatus.CLOSED:
            self.close()
            return None
        return self.open_shell(current_file)

    def open_shell(self, current_file: str | Path | None = None) -> str | None:
        return self._start(shell_command(self.settings.shell), current_file)

    def run_file(self, path: str | Path) -> str | None:
        """Run ``path`` with its language tool in a new session."""
        if self.status is not TerminalStatus.CLOSED:
            logger.debug("run request for %s ignored: terminal session already active", path)
            return None
        argv = run_command_for(path)
        if argv is None:
            self.last_error = f"No run command for {Path(path).name or path}."
            return self.last_error
        return self._start(argv, path)

    def _start(self, argv: Sequence[str], current_file: str | Path | None) -> str | None:
        if self.status is not TerminalStatus.CLOSED:
            logger.debug("open request ignored: terminal session already active")
            return None

        self.status = TerminalStatus.INITIALIZING
        cwd = working_directory(current_file)
        session, error = self._spawn(argv, cwd, child_environment(), PTY_ROWS, PTY_COLS)
        if session is None:
            self._reset()
            self.last_error = error or "Failed to start terminal."
            logger.warning("terminal start failed: %s", self.last_error)
            return self.last_error

        self.session = session
        self.output = ""
        self.input_line = ""
        self.last_error = None
        self.status = TerminalStatus.RUNNING
        return None

    def poll(self) -> str:
        """Append any reader output to the buffer and return the whole buffer."""
        if self.session is not None:
            chunks = self.session.drain_output()
            if chunks:
                self.output += "".join(chunks)
        return self.output

    def submit_input(self) -> str | None:
        """Send ``input_line`` plus newline to the child and echo it locally."""
        if self.session is None:
            return "Terminal is not running."
        line = self.input_line
        error = self.session.writer.write((line + "\n").encode("utf-8"))
        if error is not None:
            self.last_error = error
            logger.warning("terminal input failed: %s", error)
            return error
        self.poll()
        self.output += f"{PROMPT_MARKER}{line}\n"
        self.input_line = ""
        return None

    def child_exited(self) -> bool:
        return self.session is None or self.session.child_exited()

    def close(self) -> None:
        """Tear the session down without waiting for the reader thread."""
        if self.session is not None:
            self.session.hangup()
        self._reset()

    def _reset(self) -> None:
        self.session = None
        self.output = ""
        self.input_line = ""
        self.status = TerminalStatus.CLOSED
