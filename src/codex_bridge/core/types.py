"""Result and diagnostic types returned by a Codex invocation."""

from dataclasses import dataclass
from typing import Any, Literal

DiagnosticKind = Literal[
    "context_load",
    "image_path",
    "empty_response",
    "decode",
    "stderr",
    "stream_error",
]


@dataclass(frozen=True)
class Diagnostic:
    """Non-fatal condition attached to a successful result.

    Attributes:
        kind: Which recoverable condition was hit
        message: Human-readable description
    """

    kind: DiagnosticKind
    message: str


@dataclass(frozen=True)
class CodexResult:
    """Outcome of a successful Codex invocation.

    Attributes:
        session_id: Thread id reported by Codex (used to resume the conversation)
        agent_messages: Agent message texts in arrival order
        raw_events: Every decoded stdout record, or None when full-trace
            capture was not requested
        exit_code: Exit code of the codex process
        duration_seconds: Wall-clock time of the invocation
        warnings: Recoverable diagnostics collected along the way
        stderr: Captured stderr text (may be empty)
        agent_messages_truncated: True if the message size cap was reached
        raw_events_truncated: True if the raw event limit was reached
    """

    session_id: str
    agent_messages: tuple[str, ...]
    raw_events: tuple[dict[str, Any], ...] | None
    exit_code: int
    duration_seconds: float
    warnings: tuple[Diagnostic, ...]
    stderr: str
    agent_messages_truncated: bool
    raw_events_truncated: bool

    @property
    def message(self) -> str:
        """All agent messages joined into a single text block."""
        return "\n".join(self.agent_messages)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict for the calling layer."""
        data: dict[str, Any] = {
            "success": True,
            "SESSION_ID": self.session_id,
            "message": self.message,
            "agent_messages": list(self.agent_messages),
            "exit_code": self.exit_code,
            "duration_seconds": round(self.duration_seconds, 3),
        }
        if self.agent_messages_truncated:
            data["agent_messages_truncated"] = True
        if self.raw_events is not None:
            data["all_messages"] = list(self.raw_events)
            if self.raw_events_truncated:
                data["all_messages_truncated"] = True
        if self.warnings:
            data["warnings"] = [{"kind": w.kind, "message": w.message} for w in self.warnings]
        return data
