"""Codex process abstraction for testing.

This module provides an ABC for the codex subprocess so the runner and the
stream parser can be tested against scripted output without executing
the real CLI.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from pathlib import Path
from types import TracebackType


class CodexProcess(ABC):
    """Abstract handle on one codex subprocess.

    Lifecycle: start() once, drain iter_stdout_lines() once, then wait()
    and read_stderr(). Use as a context manager so close() releases the
    process on every exit path.
    """

    @abstractmethod
    def start(self, args: Sequence[str], *, cwd: Path, timeout_seconds: float) -> None:
        """Spawn the process with stdin closed and stdout/stderr captured.

        Args:
            args: Full command line, executable first
            cwd: Working directory for the process
            timeout_seconds: Deadline measured from spawn

        Raises:
            CodexSpawnError: If the executable could not be started
        """
        ...

    @abstractmethod
    def iter_stdout_lines(self) -> Iterator[bytes]:
        """Yield stdout lines as they arrive until the stream ends.

        Ends when the process closes stdout, or after the deadline fires
        and the process has been killed.
        """
        ...

    @abstractmethod
    def wait(self) -> int:
        """Wait for exit (bounded by the deadline) and return the exit code."""
        ...

    @abstractmethod
    def read_stderr(self) -> str:
        """Return everything captured from stderr."""
        ...

    @abstractmethod
    def kill(self) -> None:
        """Terminate the process and, best-effort, its descendants."""
        ...

    @property
    @abstractmethod
    def timed_out(self) -> bool:
        """True if the deadline fired before the process exited."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the process: kill it if still running and close pipes."""
        ...

    def __enter__(self) -> "CodexProcess":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
