"""Tests for PTY spawning, the background reader, and run-command selection.

The PTY cases start short-lived real children (``/bin/sh``, ``cat``) and wait
on the reader thread with a timeout, so they run only on POSIX hosts.
"""

from __future__ import annotations

import os
import shutil
import tempfile
import time
import unittest
from pathlib import Path
from unittest import mock

from kokona.terminal import (
    PtySession,
    child_environment,
    decode_output,
    run_command_for,
    shell_command,
    spawn_pty_session,
    working_directory,
)

READER_TIMEOUT_SECONDS = 5.0


def _collect_until(session, needle: str, timeout: float = READER_TIMEOUT_SECONDS) -> str:
    deadline = time.monotonic() + timeout
    output = ""
    while time.monotonic() < deadline:
        output += "".join(session.drain_output())
        if needle in output:
            break
        time.sleep(0.02)
    return output


@unittest.skipUnless(os.name == "posix" and os.path.exists("/bin/sh"), "requires a POSIX pty")
class PtySessionTests(unittest.TestCase):
    def test_reader_streams_output_and_exits_when_child_finishes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            session, error = spawn_pty_session(
                ["/bin/sh", "-c", "printf 'h\\303\\251llo from %s\\n' \"$TERM\"; pwd"],
                Path(tmp),
                child_environment(),
            )
            self.assertIsNone(error)
            assert session is not None

            self.assertTrue(session.wait_reader(READER_TIMEOUT_SECONDS))
            output = "".join(session.drain_output())

        self.assertIn("héllo from dumb", output)
        self.assertIn(os.path.basename(tmp), output)
        self.assertFalse(session.reader_alive)

    def test_invalid_utf8_is_replaced_not_raised(self) -> None:
        session, error = spawn_pty_session(
            ["/bin/sh", "-c", "printf 'bad\\377byte\\n'"],
            Path.cwd(),
            child_environment(),
        )
        self.assertIsNone(error)
        assert session is not None

        self.assertTrue(session.wait_reader(READER_TIMEOUT_SECONDS))
        output = "".join(session.drain_output())

        self.assertIn("bad�byte", output)

    def test_child_owns_pty_as_controlling_terminal(self) -> None:
        session, error = spawn_pty_session(
            ["/bin/sh", "-c", "(exec 3</dev/tty) && echo HAS_CTTY || echo NO_CTTY"],
            Path.cwd(),
            child_environment(),
        )
        self.assertIsNone(error)
        assert session is not None

        self.assertTrue(session.wait_reader(READER_TIMEOUT_SECONDS))
        output = "".join(session.drain_output())

        self.assertIn("HAS_CTTY", output)
        self.assertNotIn("NO_CTTY", output)

    @unittest.skipUnless(shutil.which("stty"), "requires stty")
    def test_line_discipline_does_not_echo_input(self) -> None:
        session, error = spawn_pty_session([shutil.which("stty"), "-a"], Path.cwd(), child_environment())
        self.assertIsNone(error)
        assert session is not None

        self.assertTrue(session.wait_reader(READER_TIMEOUT_SECONDS))
        output = "".join(session.drain_output())

        self.assertRegex(output, r"(^|\s)-echo(\s|$)")

    @unittest.skipUnless(shutil.which("cat"), "requires cat")
    def test_writer_feeds_child_and_hangup_stops_reader(self) -> None:
        session, error = spawn_pty_session([shutil.which("cat")], Path.cwd(), child_environment())
        self.assertIsNone(error)
        assert session is not None

        self.assertIsNone(session.writer.write(b"ping\n"))
        output = _collect_until(session, "ping")
        self.assertIn("ping", output)
        time.sleep(0.2)
        output += "".join(session.drain_output())
        self.assertEqual(output.count("ping"), 1)

        session.hangup()

        self.assertTrue(session.writer.closed)
        self.assertIsNotNone(session.writer.write(b"late\n"))
        self.assertTrue(session.wait_reader(READER_TIMEOUT_SECONDS))

    def test_spawn_failure_for_missing_program(self) -> None:
        session, error = spawn_pty_session(["/nonexistent/kokona-test-binary"], Path.cwd(), child_environment())

        self.assertIsNone(session)
        self.assertIn("Failed to start", error or "")

    def test_pty_allocation_failure_is_reported(self) -> None:
        with mock.patch("kokona.terminal.session.pty.openpty", side_effect=OSError("out of ptys")):
            session, error = spawn_pty_session(["/bin/sh"], Path.cwd(), child_environment())

        self.assertIsNone(session)
        self.assertIn("out of ptys", error or "")


class DecodeOutputTests(unittest.TestCase):
    def test_character_split_across_reads_stays_whole(self) -> None:
        chunks = list(decode_output([b"h\xc3", b"\xa9llo"]))

        self.assertEqual("".join(chunks), "héllo")
        self.assertNotIn("�", "".join(chunks))
        self.assertEqual(chunks, ["h", "éllo"])

    def test_truncated_tail_is_replaced_at_end_of_stream(self) -> None:
        self.assertEqual("".join(decode_output([b"ok\xe2\x82"])), "ok�")

    def test_reader_decodes_split_character_from_descriptor(self) -> None:
        read_fd, write_fd = os.pipe()
        os.close(write_fd)
        reads = iter([b"h\xc3", b"\xa9llo", b""])
        session = PtySession(mock.Mock(pid=4242), read_fd, mock.Mock())

        with mock.patch("kokona.terminal.session.os.read", side_effect=lambda fd, size: next(reads)):
            session._read_loop()

        self.assertEqual("".join(session.drain_output()), "héllo")
        with self.assertRaises(OSError):
            os.fstat(read_fd)


class RunCommandTests(unittest.TestCase):
    def test_run_command_by_extension(self) -> None:
        self.assertEqual(run_command_for("/w/main.rs"), ["cargo", "run"])
        self.assertEqual(run_command_for("/w/app.py"), ["python3", "/w/app.py"])
        self.assertEqual(run_command_for("/w/App.JS"), ["node", "/w/App.JS"])
        self.assertIsNone(run_command_for("/w/readme.md"))

    def test_shell_command_prefers_config_then_environment(self) -> None:
        with mock.patch.dict("kokona.terminal.commands.os.environ", {"SHELL": "/bin/bash"}, clear=True):
            self.assertEqual(shell_command("fish"), ["fish"])
            self.assertEqual(shell_command(None), ["/bin/bash"])
        with mock.patch.dict("kokona.terminal.commands.os.environ", {}, clear=True):
            self.assertEqual(shell_command("  "), ["/bin/sh"])

    def test_child_environment_overrides_term(self) -> None:
        with mock.patch.dict("kokona.terminal.commands.os.environ", {"TERM": "xterm-256color", "HOME": "/h"}, clear=True):
            env = child_environment()
        self.assertEqual(env, {"TERM": "dumb", "HOME": "/h"})

    def test_working_directory_uses_parent_of_open_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "src" / "main.rs"
            target.parent.mkdir()
            self.assertEqual(working_directory(target), target.parent.resolve())


if __name__ == "__main__":
    unittest.main()
