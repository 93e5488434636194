"""Parser for Codex CLI JSONL streaming output.

`codex exec --json` writes one JSON object per line. This module decodes
each line independently and folds it into CodexParserState:

- a top-level "thread_id" (thread.started) or {"type": "session", "id": ...}
  carries the session id; the first one wins
- an item of type "agent_message" (item.completed), or a top-level
  {"type": "agent_message", "text": ...}, carries message text
- any record whose type mentions "error" or "fail" (error, turn.failed)
  carries an error; the last one wins
- everything else (turn.started, item.started, ...) is ignored

A malformed line is recorded as a decode warning and skipped.
"""

import json
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from codex_bridge.core.options import DEFAULT_ALL_MESSAGES_LIMIT
from codex_bridge.core.types import Diagnostic

MAX_AGENT_MESSAGES_BYTES = 10 * 1024 * 1024  # 10 MiB
AGENT_MESSAGES_TRUNCATED_MARKER = "[... Agent messages truncated due to size limit ...]"
_LINE_PREVIEW_CHARS = 200
_PARTIAL_ITEM_TYPES = ("item.started", "item.updated")

logger = logging.getLogger(__name__)


# =============================================================================
# Typed stream events
# =============================================================================


@dataclass(frozen=True)
class SessionEvent:
    """Thread id announced by Codex."""

    session_id: str


@dataclass(frozen=True)
class AgentMessageEvent:
    """Agent message text."""

    text: str


@dataclass(frozen=True)
class ErrorEvent:
    """Error or failed turn reported in the stream."""

    message: str


@dataclass(frozen=True)
class UnknownEvent:
    """Well-formed record with no recognized payload."""

    event_type: str | None


StreamEvent = SessionEvent | AgentMessageEvent | ErrorEvent | UnknownEvent


@dataclass
class CodexParserState:
    """Mutable state accumulated across JSONL lines.

    This is explicitly NOT frozen: it is the parsing accumulator passed by
    reference across parse_codex_jsonl_line() calls. Merge rules live in the
    record_* methods.
    """

    capture_raw_events: bool = False
    raw_events_limit: int = DEFAULT_ALL_MESSAGES_LIMIT
    session_id: str | None = None
    agent_messages: list[str] = field(default_factory=list)
    agent_messages_truncated: bool = False
    raw_events: list[dict[str, Any]] = field(default_factory=list)
    raw_events_truncated: bool = False
    last_error: str | None = None
    decode_warnings: list[Diagnostic] = field(default_factory=list)
    line_count: int = 0
    _agent_messages_bytes: int = 0

    def record_session_id(self, session_id: str) -> None:
        """First wins: later session ids are ignored."""
        if self.session_id is None and session_id:
            self.session_id = session_id

    def record_agent_message(self, text: str) -> None:
        """Append in arrival order until the size cap is reached."""
        if self.agent_messages_truncated:
            return
        size = len(text.encode("utf-8"))
        if self._agent_messages_bytes + size > MAX_AGENT_MESSAGES_BYTES:
            self.agent_messages.append(AGENT_MESSAGES_TRUNCATED_MARKER)
            self.agent_messages_truncated = True
            logger.warning("Agent messages exceeded %d bytes, truncating", MAX_AGENT_MESSAGES_BYTES)
            return
        self._agent_messages_bytes += size
        self.agent_messages.append(text)

    def record_error(self, message: str) -> None:
        """Last wins: a later error replaces an earlier one."""
        self.last_error = message

    def record_raw_event(self, data: dict[str, Any]) -> None:
        if not self.capture_raw_events:
            return
        if len(self.raw_events) >= self.raw_events_limit:
            self.raw_events_truncated = True
            return
        self.raw_events.append(data)

    def record_decode_warning(self, message: str) -> None:
        logger.warning(message)
        self.decode_warnings.append(Diagnostic(kind="decode", message=message))


def parse_codex_stream(
    lines: Iterable[bytes | str],
    state: CodexParserState,
) -> Iterator[StreamEvent]:
    """Lazily parse a finite stream of stdout lines.

    Not restartable: drive it exactly once per invocation.

    Args:
        lines: Raw stdout lines (bytes from a pipe, or already-decoded str).
        state: Accumulator updated as lines are consumed.

    Yields:
        Recognized StreamEvents in arrival order.
    """
    for raw in lines:
        if isinstance(raw, bytes):
            try:
                line = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                state.line_count += 1
                state.record_decode_warning(f"Skipping stdout line that is not valid UTF-8: {e}")
                continue
        else:
            line = raw
        yield from parse_codex_jsonl_line(line, state)


def parse_codex_jsonl_line(line: str, state: CodexParserState) -> list[StreamEvent]:
    """Parse a single Codex JSONL line and fold it into state.

    Args:
        line: A single line from codex exec --json output.
        state: Mutable parser state accumulated across lines.

    Returns:
        List of StreamEvents (empty for blank or malformed lines).
    """
    stripped = line.strip()
    if not stripped:
        return []

    state.line_count += 1
    data = _safe_parse_json(stripped)
    if data is None:
        state.record_decode_warning(f"Skipping malformed JSON line: {_truncate(stripped)}")
        return []

    state.record_raw_event(data)
    events = classify_record(data)
    for event in events:
        _apply_event(event, state)
    return events


def classify_record(data: dict[str, Any]) -> list[StreamEvent]:
    """Extract every recognized payload from one decoded record.

    A single record may carry several payloads, e.g. a thread_id alongside
    an agent_message item.
    """
    events: list[StreamEvent] = []
    event_type = data.get("type")
    if not isinstance(event_type, str):
        event_type = None

    session_id = _extract_session_id(data, event_type)
    if session_id is not None:
        events.append(SessionEvent(session_id=session_id))

    text = _extract_agent_message(data, event_type)
    if text is not None:
        events.append(AgentMessageEvent(text=text))

    message = _extract_error(data, event_type)
    if message is not None:
        events.append(ErrorEvent(message=message))

    if not events:
        events.append(UnknownEvent(event_type=event_type))
    return events


def _apply_event(event: StreamEvent, state: CodexParserState) -> None:
    if isinstance(event, SessionEvent):
        state.record_session_id(event.session_id)
    elif isinstance(event, AgentMessageEvent):
        state.record_agent_message(event.text)
    elif isinstance(event, ErrorEvent):
        state.record_error(event.message)


def _safe_parse_json(text: str) -> dict[str, Any] | None:
    """Parse JSON text, returning None on failure or for non-object values.

    JSON parsing is one of the few places where exception handling is
    acceptable: there is no LBYL alternative for malformed JSON.
    """
    try:
        parsed = json.loads(text)
        if isinstance(parsed, dict):
            return parsed
    except json.JSONDecodeError:
        pass
    return None


def _extract_session_id(data: dict[str, Any], event_type: str | None) -> str | None:
    thread_id = data.get("thread_id")
    if isinstance(thread_id, str) and thread_id:
        return thread_id
    if event_type == "session":
        session_id = data.get("id")
        if isinstance(session_id, str) and session_id:
            return session_id
    return None


def _extract_agent_message(data: dict[str, Any], event_type: str | None) -> str | None:
    item = data.get("item")
    if isinstance(item, dict) and item.get("type") == "agent_message":
        # codex re-sends the growing text of an item on item.started/item.updated
        # and the final text once on item.completed; counting the partials would
        # duplicate the message
        if event_type in _PARTIAL_ITEM_TYPES:
            return None
        text = item.get("text")
    elif event_type == "agent_message":
        text = data.get("text")
    else:
        return None
    if not isinstance(text, str) or not text:
        return None
    return text


def _extract_error(data: dict[str, Any], event_type: str | None) -> str | None:
    item = data.get("item")
    if isinstance(item, dict) and item.get("type") == "error":
        message = item.get("message")
        return str(message) if message is not None else "Unknown item error"

    if event_type is None or not ("error" in event_type or "fail" in event_type):
        return None

    error = data.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return f"codex error: {error['message']}"
    if isinstance(data.get("message"), str):
        return f"codex error: {data['message']}"
    return f"codex error: {event_type}"


def _truncate(text: str) -> str:
    if len(text) <= _LINE_PREVIEW_CHARS:
        return text
    return text[: _LINE_PREVIEW_CHARS - 3] + "..."
