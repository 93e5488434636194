"""Tests for AGENTS.md project context loading."""

import os
import sys
from pathlib import Path

import pytest

from codex_bridge.core.project_context import load_project_context, truncate_utf8


def _load(directory: Path, max_bytes: int = 1024):
    return load_project_context(directory, filename="AGENTS.md", max_bytes=max_bytes)


class TestTruncateUtf8:
    """truncate_utf8 never cuts a multi-byte codepoint in half."""

    def test_short_data_is_unchanged(self) -> None:
        assert truncate_utf8(b"abc", 10) == b"abc"

    def test_exact_size_is_unchanged(self) -> None:
        assert truncate_utf8(b"abc", 3) == b"abc"

    def test_ascii_is_cut_at_limit(self) -> None:
        assert truncate_utf8(b"abcdef", 4) == b"abcd"

    def test_backs_off_to_codepoint_boundary(self) -> None:
        data = "aé€".encode()  # 1 + 2 + 3 bytes
        # A limit of 4 would land inside the 3-byte euro sign
        result = truncate_utf8(data, 4)
        assert result == "aé".encode()
        result.decode("utf-8")

    def test_every_limit_decodes(self) -> None:
        data = "日本語のテキスト🙂".encode()
        for limit in range(len(data) + 1):
            truncate_utf8(data, limit).decode("utf-8")


class TestLoadProjectContext:
    """load_project_context degrades to no context instead of failing."""

    def test_missing_file_means_no_context(self, tmp_path: Path) -> None:
        context = _load(tmp_path)
        assert context.text is None
        assert context.warning is None

    def test_empty_file_means_no_context(self, tmp_path: Path) -> None:
        (tmp_path / "AGENTS.md").write_text("", encoding="utf-8")
        context = _load(tmp_path)
        assert context.text is None
        assert context.warning is None

    def test_blank_file_means_no_context(self, tmp_path: Path) -> None:
        (tmp_path / "AGENTS.md").write_text("  \n\n", encoding="utf-8")
        assert _load(tmp_path).text is None

    def test_reads_content(self, tmp_path: Path) -> None:
        content = "# Project Instructions\nYou are a helpful coding assistant."
        (tmp_path / "AGENTS.md").write_text(content, encoding="utf-8")
        context = _load(tmp_path)
        assert context.text == content
        assert context.warning is None
        assert context.truncated is False

    def test_directory_named_like_context_file_is_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "AGENTS.md").mkdir()
        assert _load(tmp_path).text is None

    def test_oversized_file_is_truncated_with_warning(self, tmp_path: Path) -> None:
        (tmp_path / "AGENTS.md").write_text("x" * 100 + "€" * 10, encoding="utf-8")
        context = _load(tmp_path, max_bytes=101)
        assert context.text == "x" * 100
        assert context.truncated is True
        assert context.warning is not None
        assert context.warning.kind == "context_load"

    def test_invalid_utf8_degrades_with_warning(self, tmp_path: Path) -> None:
        (tmp_path / "AGENTS.md").write_bytes(b"valid start \xff\xfe invalid")
        context = _load(tmp_path)
        assert context.text is None
        assert context.warning is not None
        assert context.warning.kind == "context_load"
        assert "UTF-8" in context.warning.message

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_unreadable_file_degrades_with_warning(self, tmp_path: Path) -> None:
        if hasattr(os, "geteuid") and os.geteuid() == 0:
            pytest.skip("root ignores file permissions")
        path = tmp_path / "AGENTS.md"
        path.write_text("secret", encoding="utf-8")
        path.chmod(0)
        try:
            context = _load(tmp_path)
        finally:
            path.chmod(0o644)
        assert context.text is None
        assert context.warning is not None

    def test_is_read_fresh_each_time(self, tmp_path: Path) -> None:
        path = tmp_path / "AGENTS.md"
        path.write_text("first", encoding="utf-8")
        assert _load(tmp_path).text == "first"
        path.write_text("second", encoding="utf-8")
        assert _load(tmp_path).text == "second"
