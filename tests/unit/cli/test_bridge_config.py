"""Tests for codex-bridge.toml loading."""

from pathlib import Path

import pytest

from codex_bridge.cli.config import load_bridge_config
from codex_bridge.core.errors import ConfigError
from codex_bridge.core.options import BridgeConfig


def test_defaults_without_config_file(tmp_path: Path) -> None:
    config = load_bridge_config(None, cwd=tmp_path, env={})
    assert config == BridgeConfig.default()


def test_reads_default_file_from_cwd(tmp_path: Path) -> None:
    (tmp_path / "codex-bridge.toml").write_text(
        """
[codex]
bin = "/usr/local/bin/codex"
additional_args = ["--sandbox", "workspace-write"]
timeout_seconds = 900

[context]
filename = "CONTEXT.md"
max_bytes = 2048

[trace]
all_messages_limit = 500
""",
        encoding="utf-8",
    )
    config = load_bridge_config(None, cwd=tmp_path, env={})
    assert config.codex_bin == "/usr/local/bin/codex"
    assert config.additional_args == ("--sandbox", "workspace-write")
    assert config.timeout_seconds == 900
    assert config.context_filename == "CONTEXT.md"
    assert config.max_context_bytes == 2048
    assert config.all_messages_limit == 500


def test_timeout_is_clamped(tmp_path: Path) -> None:
    path = tmp_path / "cfg.toml"
    path.write_text("[codex]\ntimeout_seconds = 99999\n", encoding="utf-8")
    assert load_bridge_config(path, cwd=tmp_path, env={}).timeout_seconds == 3600


def test_env_overrides_file(tmp_path: Path) -> None:
    path = tmp_path / "cfg.toml"
    path.write_text('[codex]\nbin = "codex"\nadditional_args = ["--a"]\n', encoding="utf-8")
    env = {
        "CODEX_BIN": "/tmp/fake-codex.sh",
        "CODEX_BRIDGE_TIMEOUT": "15",
        "CODEX_BRIDGE_ARGS": "--profile 'my profile' --yolo",
    }
    config = load_bridge_config(path, cwd=tmp_path, env=env)
    assert config.codex_bin == "/tmp/fake-codex.sh"
    assert config.timeout_seconds == 15
    assert config.additional_args == ("--profile", "my profile", "--yolo")


def test_explicit_missing_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_bridge_config(tmp_path / "missing.toml", cwd=tmp_path, env={})


def test_malformed_toml_is_an_error(tmp_path: Path) -> None:
    path = tmp_path / "cfg.toml"
    path.write_text("[codex\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_bridge_config(path, cwd=tmp_path, env={})


@pytest.mark.parametrize(
    "content",
    [
        '[codex]\nadditional_args = "--yolo"\n',
        '[codex]\ntimeout_seconds = "soon"\n',
        "[codex]\ntimeout_seconds = true\n",
        "codex = 3\n",
        "[context]\nmax_bytes = 0\n",
    ],
)
def test_invalid_values_are_errors(tmp_path: Path, content: str) -> None:
    path = tmp_path / "cfg.toml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_bridge_config(path, cwd=tmp_path, env={})


def test_invalid_env_timeout_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_bridge_config(None, cwd=tmp_path, env={"CODEX_BRIDGE_TIMEOUT": "never"})
