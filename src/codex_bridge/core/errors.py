"""Exceptions surfaced to callers of the Codex runner.

Only these conditions fail an invocation. Everything else is recoverable
and attached to the result as a Diagnostic.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from codex_bridge.core.codex_output_parser import CodexParserState


class CodexBridgeError(RuntimeError):
    """Base class for all invocation failures."""

    kind = "error"

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "error_kind": self.kind, "error": str(self)}


class InvalidOptionsError(CodexBridgeError, ValueError):
    """Options were rejected before the process was started."""

    kind = "invalid_options"


class ConfigError(CodexBridgeError):
    """Configuration file could not be parsed."""

    kind = "config"


class CodexSpawnError(CodexBridgeError):
    """The codex executable could not be started."""

    kind = "spawn"

    def __init__(self, message: str, *, command: list[str]) -> None:
        super().__init__(message)
        self.command = command


class CodexTimeoutError(CodexBridgeError):
    """The process exceeded its deadline and was killed."""

    kind = "timeout"

    def __init__(
        self,
        message: str,
        *,
        timeout_seconds: float,
        state: CodexParserState,
        stderr: str,
    ) -> None:
        super().__init__(message)
        self.timeout_seconds = timeout_seconds
        self.state = state
        self.stderr = stderr

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["SESSION_ID"] = self.state.session_id or ""
        data["agent_messages"] = list(self.state.agent_messages)
        return data


class CodexProcessError(CodexBridgeError):
    """The process exited with a non-zero exit code."""

    kind = "process_failure"

    def __init__(
        self,
        message: str,
        *,
        exit_code: int,
        stderr: str,
        state: CodexParserState,
    ) -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr
        self.state = state

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["exit_code"] = self.exit_code
        return data


class SessionInitError(CodexBridgeError):
    """The process exited cleanly but never reported a thread id."""

    kind = "session_init"

    def __init__(self, message: str, *, state: CodexParserState, stderr: str) -> None:
        super().__init__(message)
        self.state = state
        self.stderr = stderr
