"""Fake CodexProcess implementation for testing.

FakeCodexProcess replays scripted stdout lines, stderr and an exit code
without spawning anything, enabling fast and deterministic tests.
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path

from codex_bridge.core.errors import CodexSpawnError
from codex_bridge.gateway.process.abc import CodexProcess

KILLED_EXIT_CODE = -9


@dataclass(frozen=True)
class ProcessStartCall:
    """Record of a start() call for test assertions."""

    args: tuple[str, ...]
    cwd: Path
    timeout_seconds: float


class FakeCodexProcess(CodexProcess):
    """In-memory fake that replays scripted output.

    This class has NO public setup methods. All behavior is provided via
    the constructor; calls are captured in read-only properties.
    """

    def __init__(
        self,
        *,
        stdout_lines: Sequence[str | bytes] = (),
        stderr: str = "",
        exit_code: int = 0,
        hang: bool = False,
        spawn_error: str | None = None,
    ) -> None:
        """Create FakeCodexProcess.

        Args:
            stdout_lines: Lines to emit on stdout; a trailing newline is added
                to str lines that lack one
            stderr: Text to report from read_stderr()
            exit_code: Exit code returned by wait()
            hang: Simulate a process that outlives its deadline: the
                scripted lines are emitted, then the deadline fires and the
                process is killed
            spawn_error: If set, start() raises CodexSpawnError with this message
        """
        self._stdout_lines = [_to_bytes(line) for line in stdout_lines]
        self._stderr = stderr
        self._exit_code = exit_code
        self._hang = hang
        self._spawn_error = spawn_error
        self._start_calls: list[ProcessStartCall] = []
        self._timed_out = False
        self._killed = False
        self._closed = False
        self._stdout_drained = False

    @property
    def start_calls(self) -> list[ProcessStartCall]:
        """Get the start calls that were made.

        This property is for test assertions only.
        """
        return list(self._start_calls)

    @property
    def last_args(self) -> tuple[str, ...] | None:
        """Command line of the last start() call, or None."""
        if not self._start_calls:
            return None
        return self._start_calls[-1].args

    @property
    def killed(self) -> bool:
        return self._killed

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def stdout_drained(self) -> bool:
        return self._stdout_drained

    @property
    def timed_out(self) -> bool:
        return self._timed_out

    def start(self, args: Sequence[str], *, cwd: Path, timeout_seconds: float) -> None:
        if self._spawn_error is not None:
            raise CodexSpawnError(self._spawn_error, command=list(args))
        self._start_calls.append(
            ProcessStartCall(args=tuple(args), cwd=cwd, timeout_seconds=timeout_seconds)
        )

    def iter_stdout_lines(self) -> Iterator[bytes]:
        yield from self._stdout_lines
        if self._hang:
            self._timed_out = True
            self.kill()
        self._stdout_drained = True

    def wait(self) -> int:
        if self._killed:
            return KILLED_EXIT_CODE
        return self._exit_code

    def read_stderr(self) -> str:
        return self._stderr

    def kill(self) -> None:
        self._killed = True

    def close(self) -> None:
        self._closed = True


def _to_bytes(line: str | bytes) -> bytes:
    if isinstance(line, bytes):
        return line
    if not line.endswith("\n"):
        line += "\n"
    return line.encode("utf-8")
