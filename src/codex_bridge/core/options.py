"""Invocation options and process-wide bridge configuration."""

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

DEFAULT_CODEX_BIN = "codex"
DEFAULT_TIMEOUT_SECONDS = 600.0  # 10 minutes
MAX_TIMEOUT_SECONDS = 3600.0  # 1 hour
DEFAULT_CONTEXT_FILENAME = "AGENTS.md"
MAX_CONTEXT_BYTES = 1024 * 1024  # 1 MiB
DEFAULT_ALL_MESSAGES_LIMIT = 10_000
MAX_ALL_MESSAGES_LIMIT = 50_000


def clamp_timeout(seconds: float | None) -> float:
    """Normalize a timeout: non-positive or missing means default, capped at one hour."""
    if seconds is None or seconds <= 0:
        return DEFAULT_TIMEOUT_SECONDS
    return min(float(seconds), MAX_TIMEOUT_SECONDS)


def clamp_all_messages_limit(limit: int | None) -> int:
    if limit is None or limit <= 0:
        return DEFAULT_ALL_MESSAGES_LIMIT
    return min(limit, MAX_ALL_MESSAGES_LIMIT)


@dataclass(frozen=True)
class BridgeConfig:
    """Configuration applied uniformly to every invocation.

    Built once at startup (see codex_bridge.cli.config) and passed
    explicitly to the runner.

    Attributes:
        codex_bin: Executable to run (overridable for tests and custom installs)
        additional_args: Extra CLI tokens inserted before resume/prompt
        timeout_seconds: Per-invocation deadline, already clamped
        context_filename: Project context file looked up in the working directory
        max_context_bytes: Cap on project context size
        all_messages_limit: Cap on raw events kept when full-trace capture is on
    """

    codex_bin: str
    additional_args: tuple[str, ...]
    timeout_seconds: float
    context_filename: str
    max_context_bytes: int
    all_messages_limit: int

    @staticmethod
    def default() -> "BridgeConfig":
        return BridgeConfig(
            codex_bin=DEFAULT_CODEX_BIN,
            additional_args=(),
            timeout_seconds=DEFAULT_TIMEOUT_SECONDS,
            context_filename=DEFAULT_CONTEXT_FILENAME,
            max_context_bytes=MAX_CONTEXT_BYTES,
            all_messages_limit=DEFAULT_ALL_MESSAGES_LIMIT,
        )


@dataclass(frozen=True)
class CodexOptions:
    """A single Codex invocation request.

    working_directory=None means the process cwd is used and no --cd flag
    is passed to codex.
    """

    prompt: str
    working_directory: Path | None = None
    session_id: str | None = None
    images: tuple[Path, ...] = ()
    additional_args: tuple[str, ...] = ()
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    return_all_messages: bool = False

    @staticmethod
    def from_config(
        config: BridgeConfig,
        *,
        prompt: str,
        working_directory: Path | None,
        session_id: str | None,
        images: Sequence[Path],
        return_all_messages: bool,
        timeout_seconds: float | None,
    ) -> "CodexOptions":
        """Build options, taking additional_args and timeout from the configuration.

        An explicit timeout_seconds overrides the configured one (still clamped).
        """
        timeout = config.timeout_seconds if timeout_seconds is None else timeout_seconds
        return CodexOptions(
            prompt=prompt,
            working_directory=working_directory,
            session_id=session_id,
            images=tuple(images),
            additional_args=config.additional_args,
            timeout_seconds=clamp_timeout(timeout),
            return_all_messages=return_all_messages,
        )

    def resolved_working_directory(self) -> Path:
        if self.working_directory is None:
            return Path.cwd()
        return self.working_directory

    def normalized_session_id(self) -> str | None:
        """Session id to resume, treating an empty string as absent."""
        if self.session_id is None or not self.session_id.strip():
            return None
        return self.session_id.strip()
