"""PTY-backed child process with a background output reader.

The reader thread is the only producer of output chunks; it hands them to
the UI thread through a ``Queue`` which ``drain_output`` empties. The reader
owns the PTY master descriptor and closes it when the child side reports
EOF or an error, so shutting a session down never joins the thread.
"""

from __future__ import annotations

import codecs
import fcntl
import logging
import os
import pty
import signal
import struct
import subprocess
import termios
import threading
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from queue import Empty, Queue

logger = logging.getLogger(__name__)

PTY_ROWS = 24
PTY_COLS = 80
READ_CHUNK_SIZE = 4096


def _set_winsize(fd: int, rows: int, cols: int) -> None:
    fcntl.ioctl(fd, termios.TIOCSWINSZ, struct.pack("HHHH", rows, cols, 0, 0))


def _disable_echo(fd: int) -> None:
    attrs = termios.tcgetattr(fd)
    attrs[3] &= ~termios.ECHO
    termios.tcsetattr(fd, termios.TCSANOW, attrs)


def _acquire_controlling_tty() -> None:
    # Runs in the child after setsid(); stdin is already the PTY slave.
    fcntl.ioctl(0, termios.TIOCSCTTY, 0)


def decode_output(chunks: Iterable[bytes]) -> Iterator[str]:
    """Decode UTF-8 chunks incrementally, replacing invalid bytes.

    A multi-byte character split across two reads is held back until its
    remaining bytes arrive.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    for data in chunks:
        text = decoder.decode(data)
        if text:
            yield text
    tail = decoder.decode(b"", final=True)
    if tail:
        yield tail


def _close_quietly(fd: int) -> None:
    try:
        os.close(fd)
    except OSError:
        pass


class PtyWriter:
    """Input side of a session, bound to a duplicate of the PTY master."""

    def __init__(self, fd: int) -> None:
        self._fd: int | None = fd

    @property
    def closed(self) -> bool:
        return self._fd is None

    def write(self, data: bytes) -> str | None:
        if self._fd is None:
            return "Terminal input is closed."
        try:
            view = memoryview(data)
            while view:
                written = os.write(self._fd, view)
                view = view[written:]
        except OSError as exc:
            return f"Failed to write to terminal: {exc}"
        return None

    def close(self) -> None:
        if self._fd is None:
            return
        _close_quietly(self._fd)
        self._fd = None


class PtySession:
    """One spawned child attached to a PTY pair."""

    def __init__(self, process: subprocess.Popen, master_fd: int, writer: PtyWriter) -> None:
        self.process = process
        self.writer = writer
        self._master_fd = master_fd
        self._output: Queue[str] = Queue()
        self._reader = threading.Thread(
            target=self._read_loop,
            name=f"kokona-pty-reader-{process.pid}",
            daemon=True,
        )

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def reader_alive(self) -> bool:
        return self._reader.is_alive()

    def start_reader(self) -> None:
        self._reader.start()

    def _read_chunks(self) -> Iterator[bytes]:
        while True:
            try:
                data = os.read(self._master_fd, READ_CHUNK_SIZE)
            except OSError:
                # Linux reports EIO once every slave handle is closed.
                return
            if not data:
                return
            yield data

    def _read_loop(self) -> None:
        try:
            for text in decode_output(self._read_chunks()):
                self._output.put(text)
        finally:
            _close_quietly(self._master_fd)
            logger.debug("pty reader for pid %s exited", self.process.pid)

    def drain_output(self) -> list[str]:
        """Drain all output chunks produced since the last call."""
        out: list[str] = []
        while True:
            try:
                out.append(self._output.get_nowait())
            except Empty:
                break
        return out

    def child_exited(self) -> bool:
        return self.process.poll() is not None

    def wait_reader(self, timeout: float | None = None) -> bool:
        """Block until the reader exits; returns whether it did."""
        self._reader.join(timeout)
        return not self._reader.is_alive()

    def hangup(self) -> None:
        """Release the writer and hang up the child's process group.

        The reader thread notices the closed slave side and exits by itself.
        """
        self.writer.close()
        if self.process.poll() is not None:
            return
        try:
            os.killpg(self.process.pid, signal.SIGHUP)
        except OSError:
            try:
                self.process.terminate()
            except OSError:
                pass


def spawn_pty_session(
    argv: Sequence[str],
    cwd: Path,
    env: dict[str, str],
    rows: int = PTY_ROWS,
    cols: int = PTY_COLS,
) -> tuple[PtySession | None, str | None]:
    """Allocate a PTY, spawn ``argv`` on it, and start the reader thread.

    Returns ``(session, None)`` on success or ``(None, error)`` after
    releasing anything allocated along the way.
    """
    try:
        master_fd, slave_fd = pty.openpty()
    except OSError as exc:
        return None, f"Failed to allocate terminal: {exc}"

    try:
        _set_winsize(slave_fd, rows, cols)
        # Submitted lines are echoed by the bridge, not by the line discipline.
        _disable_echo(slave_fd)
        process = subprocess.Popen(
            list(argv),
            stdin=slave_fd,
            stdout=slave_fd,
            stderr=slave_fd,
            cwd=str(cwd),
            env=env,
            start_new_session=True,
            preexec_fn=_acquire_controlling_tty,
            close_fds=True,
        )
    except (OSError, termios.error, subprocess.SubprocessError) as exc:
        _close_quietly(master_fd)
        _close_quietly(slave_fd)
        return None, f"Failed to start {argv[0] if argv else 'process'}: {exc}"
    _close_quietly(slave_fd)

    try:
        writer = PtyWriter(os.dup(master_fd))
    except OSError as exc:
        process.kill()
        _close_quietly(master_fd)
        return None, f"Failed to open terminal input: {exc}"

    session = PtySession(process, master_fd, writer)
    session.start_reader()
    logger.debug("spawned %s (pid %s) in %s", list(argv), process.pid, cwd)
    return session, None
