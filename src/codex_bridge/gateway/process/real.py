"""Real codex process implementation using subprocess.Popen.

stdout and stderr are drained by background threads while the caller
consumes lines, so a chatty process can never fill an unread pipe and
deadlock. The deadline is checked between lines; when it fires the whole
process group is killed and the stream is closed after a short grace
period, even if a descendant still holds the pipe open.
"""

import logging
import os
import queue
import signal
import subprocess
import sys
import threading
import time
from collections.abc import Iterator, Sequence
from pathlib import Path

from codex_bridge.core.errors import CodexSpawnError
from codex_bridge.gateway.process.abc import CodexProcess

# Constants for process execution
KILL_GRACE_SECONDS = 5.0  # time allowed for the streams to close after kill/exit
_POLL_INTERVAL_SECONDS = 0.1

logger = logging.getLogger(__name__)


class RealCodexProcess(CodexProcess):
    """Production implementation backed by subprocess.Popen."""

    def __init__(self, *, kill_grace_seconds: float = KILL_GRACE_SECONDS) -> None:
        self._kill_grace_seconds = kill_grace_seconds
        self._process: subprocess.Popen[bytes] | None = None
        self._deadline = 0.0
        self._timed_out = False
        self._stdout_queue: queue.Queue[bytes | None] = queue.Queue()
        self._stderr_chunks: list[bytes] = []
        self._threads: list[threading.Thread] = []

    @property
    def timed_out(self) -> bool:
        return self._timed_out

    def start(self, args: Sequence[str], *, cwd: Path, timeout_seconds: float) -> None:
        cmd_args = list(args)
        logger.debug("Starting codex: %s (cwd=%s)", cmd_args, cwd)
        try:
            self._process = subprocess.Popen(
                cmd_args,
                cwd=cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                # Own process group so the deadline can kill descendants too
                start_new_session=sys.platform != "win32",
                creationflags=getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0),
            )
        except OSError as e:
            raise CodexSpawnError(
                f"Failed to start Codex CLI: {e}\nCommand: {' '.join(cmd_args)}",
                command=cmd_args,
            ) from e

        self._deadline = time.monotonic() + timeout_seconds
        logger.debug("codex started, pid=%d", self._process.pid)

        self._threads = [
            threading.Thread(target=self._pump_stdout, name="codex-stdout", daemon=True),
            threading.Thread(target=self._pump_stderr, name="codex-stderr", daemon=True),
        ]
        for thread in self._threads:
            thread.start()

    def iter_stdout_lines(self) -> Iterator[bytes]:
        process = self._require_process()
        drain_deadline: float | None = None
        while True:
            now = time.monotonic()
            if drain_deadline is None and now >= self._deadline:
                # A process that already exited is never a timeout, even if
                # its output is still queued
                if process.poll() is None:
                    self._expire()
                drain_deadline = now + self._kill_grace_seconds
            if drain_deadline is not None and now >= drain_deadline:
                for line in self._take_queued():
                    if line is None:
                        return
                    yield line
                logger.warning("codex stdout still open after grace period, giving up on it")
                return

            try:
                line = self._stdout_queue.get(timeout=_POLL_INTERVAL_SECONDS)
            except queue.Empty:
                # Process gone but a descendant may still hold the pipe open
                if drain_deadline is None and process.poll() is not None:
                    drain_deadline = time.monotonic() + self._kill_grace_seconds
                continue

            if line is None:
                return
            yield line

    def wait(self) -> int:
        process = self._require_process()
        remaining = max(self._deadline - time.monotonic(), 0.0)
        try:
            returncode = process.wait(timeout=remaining)
        except subprocess.TimeoutExpired:
            self._expire()
            try:
                returncode = process.wait(timeout=self._kill_grace_seconds)
            except subprocess.TimeoutExpired:
                logger.warning("codex pid %d did not exit after kill", process.pid)
                return -1
        logger.debug("codex exited with code %d", returncode)
        return returncode

    def read_stderr(self) -> str:
        stderr_thread = self._threads[1] if len(self._threads) > 1 else None
        if stderr_thread is not None:
            stderr_thread.join(timeout=self._kill_grace_seconds)
        return b"".join(self._stderr_chunks).decode("utf-8", errors="replace").strip()

    def kill(self) -> None:
        process = self._process
        if process is None:
            return
        if sys.platform == "win32":
            subprocess.run(
                ["taskkill", "/F", "/T", "/PID", str(process.pid)],
                capture_output=True,
                check=False,
            )
            if process.poll() is None:
                process.kill()
            return
        try:
            # start_new_session=True makes the pid the process group id
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
        except PermissionError:
            process.kill()

    def close(self) -> None:
        process = self._process
        if process is None:
            return
        readers_alive = any(thread.is_alive() for thread in self._threads)
        if process.poll() is None or readers_alive:
            # A live reader after exit means a descendant still holds a pipe;
            # killing the group releases it
            self.kill()
            try:
                process.wait(timeout=self._kill_grace_seconds)
            except subprocess.TimeoutExpired:
                logger.warning("codex pid %d did not exit after kill", process.pid)
        for thread in self._threads:
            thread.join(timeout=self._kill_grace_seconds)
        # Only close pipes whose reader has finished; closing under a blocked
        # reader can hang on the buffer lock.
        if process.stdout is not None and not self._threads[0].is_alive():
            process.stdout.close()
        if process.stderr is not None and not self._threads[1].is_alive():
            process.stderr.close()

    def _expire(self) -> None:
        if self._timed_out:
            return
        self._timed_out = True
        process = self._require_process()
        logger.warning("codex pid %d exceeded its deadline, killing", process.pid)
        self.kill()

    def _take_queued(self) -> Iterator[bytes | None]:
        while True:
            try:
                yield self._stdout_queue.get_nowait()
            except queue.Empty:
                return

    def _pump_stdout(self) -> None:
        stream = self._require_process().stdout
        try:
            if stream is not None:
                for line in iter(stream.readline, b""):
                    self._stdout_queue.put(line)
        except (OSError, ValueError) as e:
            logger.debug("stdout reader stopped: %s", e)
        finally:
            self._stdout_queue.put(None)

    def _pump_stderr(self) -> None:
        stream = self._require_process().stderr
        try:
            if stream is not None:
                for chunk in iter(stream.readline, b""):
                    self._stderr_chunks.append(chunk)
        except (OSError, ValueError) as e:
            logger.debug("stderr reader stopped: %s", e)

    def _require_process(self) -> "subprocess.Popen[bytes]":
        if self._process is None:
            raise RuntimeError("codex process has not been started")
        return self._process
