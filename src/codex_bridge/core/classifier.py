"""Classification of a finished Codex invocation.

Infrastructure failures (timeout, non-zero exit) take precedence over
content-level anomalies (missing session id, no agent messages). The
decision table is evaluated in order and the first match wins:

1. deadline exceeded     -> CodexTimeoutError
2. non-zero exit code    -> CodexProcessError
3. empty session id      -> SessionInitError
4. no agent messages     -> success with an empty_response warning
5. otherwise             -> success
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from codex_bridge.core.codex_output_parser import CodexParserState
from codex_bridge.core.errors import CodexProcessError, CodexTimeoutError, SessionInitError
from codex_bridge.core.types import CodexResult, Diagnostic

EMPTY_RESPONSE_MESSAGE = (
    "No agent_messages returned; enable return_all_messages or check codex output for details."
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessOutcome:
    """How the codex process ended.

    Attributes:
        exit_code: Process exit code (negative for a signal on POSIX)
        timed_out: True if the deadline fired and the process was killed
        stderr: Captured stderr text
        duration_seconds: Wall-clock time from spawn to exit
    """

    exit_code: int
    timed_out: bool
    stderr: str
    duration_seconds: float


def classify_result(
    state: CodexParserState,
    outcome: ProcessOutcome,
    *,
    timeout_seconds: float,
    warnings: Sequence[Diagnostic],
) -> CodexResult:
    """Turn the drained accumulator and process outcome into a result.

    Args:
        state: Fully drained parser state
        outcome: Exit status of the process
        timeout_seconds: Deadline that applied to the invocation
        warnings: Diagnostics collected before the process ran

    Returns:
        CodexResult for a successful invocation.

    Raises:
        CodexTimeoutError: The deadline was exceeded.
        CodexProcessError: The process exited with a non-zero code.
        SessionInitError: No session id was reported.
    """
    if outcome.timed_out:
        raise CodexTimeoutError(
            f"Codex execution timed out after {_format_seconds(timeout_seconds)} seconds",
            timeout_seconds=timeout_seconds,
            state=state,
            stderr=outcome.stderr,
        )

    if outcome.exit_code != 0:
        if state.last_error is not None:
            message = state.last_error
        else:
            message = f"codex command failed with exit code: {outcome.exit_code}"
        if outcome.stderr:
            message += f"\nStderr: {outcome.stderr}"
        raise CodexProcessError(
            message,
            exit_code=outcome.exit_code,
            stderr=outcome.stderr,
            state=state,
        )

    if not state.session_id:
        message = "Failed to get SESSION_ID from the codex session."
        if state.last_error is not None:
            message += f"\n\n{state.last_error}"
        raise SessionInitError(message, state=state, stderr=outcome.stderr)

    all_warnings = list(warnings)
    all_warnings.extend(state.decode_warnings)
    if state.last_error is not None:
        all_warnings.append(Diagnostic(kind="stream_error", message=state.last_error))
    if outcome.stderr:
        all_warnings.append(Diagnostic(kind="stderr", message=outcome.stderr))
    if not state.agent_messages:
        logger.warning(EMPTY_RESPONSE_MESSAGE)
        all_warnings.append(Diagnostic(kind="empty_response", message=EMPTY_RESPONSE_MESSAGE))

    return CodexResult(
        session_id=state.session_id,
        agent_messages=tuple(state.agent_messages),
        raw_events=tuple(state.raw_events) if state.capture_raw_events else None,
        exit_code=outcome.exit_code,
        duration_seconds=outcome.duration_seconds,
        warnings=tuple(all_warnings),
        stderr=outcome.stderr,
        agent_messages_truncated=state.agent_messages_truncated,
        raw_events_truncated=state.raw_events_truncated,
    )


def _format_seconds(seconds: float) -> str:
    if float(seconds).is_integer():
        return str(int(seconds))
    return f"{seconds:g}"
