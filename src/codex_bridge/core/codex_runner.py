"""Codex CLI invocation.

CodexRunner maps a CodexOptions request onto `codex exec --json`, drains
the JSONL stream and classifies the outcome. Process handling goes
through the CodexProcess gateway so the whole flow runs against
FakeCodexProcess in tests.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from codex_bridge.core.classifier import ProcessOutcome, classify_result
from codex_bridge.core.codex_args import build_codex_exec_args, select_image_paths
from codex_bridge.core.codex_output_parser import CodexParserState, parse_codex_stream
from codex_bridge.core.errors import InvalidOptionsError
from codex_bridge.core.escaping import escape_prompt
from codex_bridge.core.options import BridgeConfig, CodexOptions, clamp_timeout
from codex_bridge.core.project_context import load_project_context
from codex_bridge.core.prompt_assembly import assemble_prompt
from codex_bridge.core.types import CodexResult, Diagnostic
from codex_bridge.gateway.process.abc import CodexProcess
from codex_bridge.gateway.process.real import RealCodexProcess

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedCommand:
    """Everything needed to spawn codex for one invocation."""

    command: list[str]
    cwd: Path
    warnings: tuple[Diagnostic, ...]


class CodexRunner:
    """Runs one codex subprocess per call to run()."""

    def __init__(
        self,
        config: BridgeConfig,
        *,
        process_factory: Callable[[], CodexProcess] | None = None,
    ) -> None:
        """Initialize CodexRunner.

        Args:
            config: Configuration applied to every invocation
            process_factory: Creates a fresh CodexProcess per invocation.
                If None, RealCodexProcess is used.
        """
        self._config = config
        self._process_factory = process_factory if process_factory is not None else RealCodexProcess

    @property
    def config(self) -> BridgeConfig:
        return self._config

    def prepare_command(self, options: CodexOptions) -> PreparedCommand:
        """Validate options and build the full command line.

        Nothing is spawned here, so a failure leaves no resources behind.

        Raises:
            InvalidOptionsError: Empty prompt or unusable working directory.
        """
        if not options.prompt.strip():
            raise InvalidOptionsError("PROMPT is required and must be a non-empty string")

        cwd = options.resolved_working_directory().resolve()
        if not cwd.is_dir():
            raise InvalidOptionsError(f"Working directory is not a directory: {cwd}")

        warnings: list[Diagnostic] = []

        context = load_project_context(
            cwd,
            filename=self._config.context_filename,
            max_bytes=self._config.max_context_bytes,
        )
        if context.warning is not None:
            warnings.append(context.warning)
        prompt = assemble_prompt(options.prompt, context.text)

        selection = select_image_paths(options.images, cwd)
        warnings.extend(selection.warnings)

        args = build_codex_exec_args(
            prompt=escape_prompt(prompt),
            working_directory=cwd if options.working_directory is not None else None,
            images=selection.valid,
            additional_args=options.additional_args,
            session_id=options.normalized_session_id(),
        )
        return PreparedCommand(
            command=[self._config.codex_bin, *args],
            cwd=cwd,
            warnings=tuple(warnings),
        )

    def run(self, options: CodexOptions) -> CodexResult:
        """Execute codex and return the classified result.

        Raises:
            InvalidOptionsError: Options rejected before spawning.
            CodexSpawnError: The executable could not be started.
            CodexTimeoutError: The deadline was exceeded.
            CodexProcessError: codex exited with a non-zero code.
            SessionInitError: codex never reported a thread id.
        """
        prepared = self.prepare_command(options)
        timeout_seconds = clamp_timeout(options.timeout_seconds)
        state = CodexParserState(
            capture_raw_events=options.return_all_messages,
            raw_events_limit=self._config.all_messages_limit,
        )

        start_time = time.monotonic()
        with self._process_factory() as process:
            process.start(
                prepared.command,
                cwd=prepared.cwd,
                timeout_seconds=timeout_seconds,
            )
            for event in parse_codex_stream(process.iter_stdout_lines(), state):
                logger.debug("codex event: %s", event)
            exit_code = process.wait()
            stderr = process.read_stderr()
            timed_out = process.timed_out
        duration = time.monotonic() - start_time

        logger.debug(
            "codex finished: exit_code=%d timed_out=%s lines=%d duration=%.2fs",
            exit_code,
            timed_out,
            state.line_count,
            duration,
        )
        outcome = ProcessOutcome(
            exit_code=exit_code,
            timed_out=timed_out,
            stderr=stderr,
            duration_seconds=duration,
        )
        return classify_result(
            state,
            outcome,
            timeout_seconds=timeout_seconds,
            warnings=prepared.warnings,
        )
