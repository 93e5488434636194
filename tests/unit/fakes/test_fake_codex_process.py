"""Tests for FakeCodexProcess."""

from pathlib import Path

import pytest

from codex_bridge.core.errors import CodexSpawnError
from codex_bridge.gateway.process.fake import KILLED_EXIT_CODE, FakeCodexProcess


def test_replays_lines_as_bytes() -> None:
    process = FakeCodexProcess(stdout_lines=["a", "b\n", b"c\n"], stderr="err", exit_code=3)
    process.start(["codex"], cwd=Path("/repo"), timeout_seconds=5)
    assert list(process.iter_stdout_lines()) == [b"a\n", b"b\n", b"c\n"]
    assert process.stdout_drained is True
    assert process.wait() == 3
    assert process.read_stderr() == "err"
    assert process.timed_out is False


def test_records_start_calls() -> None:
    process = FakeCodexProcess()
    process.start(["codex", "exec"], cwd=Path("/repo"), timeout_seconds=7)
    assert process.last_args == ("codex", "exec")
    assert process.start_calls[0].cwd == Path("/repo")
    assert process.start_calls[0].timeout_seconds == 7


def test_hang_times_out_and_kills() -> None:
    process = FakeCodexProcess(stdout_lines=["x"], hang=True)
    process.start(["codex"], cwd=Path("/repo"), timeout_seconds=1)
    assert list(process.iter_stdout_lines()) == [b"x\n"]
    assert process.timed_out is True
    assert process.killed is True
    assert process.wait() == KILLED_EXIT_CODE


def test_spawn_error() -> None:
    process = FakeCodexProcess(spawn_error="no such file")
    with pytest.raises(CodexSpawnError, match="no such file"):
        process.start(["codex"], cwd=Path("/repo"), timeout_seconds=1)
    assert process.start_calls == []


def test_context_manager_closes() -> None:
    with FakeCodexProcess() as process:
        pass
    assert isinstance(process, FakeCodexProcess)
    assert process.closed is True
