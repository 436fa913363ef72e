"""Terminal package exports."""

from __future__ import annotations

from .bridge import PROMPT_MARKER, TerminalBridge, TerminalStatus
from .commands import RUN_COMMANDS, child_environment, run_command_for, shell_command, working_directory
from .session import PTY_COLS, PTY_ROWS, READ_CHUNK_SIZE, PtySession, PtyWriter, decode_output, spawn_pty_session

__all__ = [
    "PROMPT_MARKER",
    "PTY_COLS",
    "PTY_ROWS",
    "PtySession",
    "PtyWriter",
    "READ_CHUNK_SIZE",
    "RUN_COMMANDS",
    "TerminalBridge",
    "TerminalStatus",
    "child_environment",
    "decode_output",
    "run_command_for",
    "shell_command",
    "spawn_pty_session",
    "working_directory",
]
