import logging
import shlex
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from codex_bridge.core.errors import ConfigError
from codex_bridge.core.options import (
    DEFAULT_ALL_MESSAGES_LIMIT,
    DEFAULT_CODEX_BIN,
    DEFAULT_CONTEXT_FILENAME,
    DEFAULT_TIMEOUT_SECONDS,
    MAX_CONTEXT_BYTES,
    BridgeConfig,
    clamp_all_messages_limit,
    clamp_timeout,
)

CONFIG_FILENAME = "codex-bridge.toml"

# Environment overrides, applied on top of the config file
CODEX_BIN_ENV = "CODEX_BIN"
TIMEOUT_ENV = "CODEX_BRIDGE_TIMEOUT"
ADDITIONAL_ARGS_ENV = "CODEX_BRIDGE_ARGS"

logger = logging.getLogger(__name__)


def load_bridge_config(
    config_path: Path | None,
    *,
    cwd: Path,
    env: Mapping[str, str],
) -> BridgeConfig:
    """Load codex-bridge.toml and apply environment overrides.

    Example config:
      [codex]
      bin = "codex"
      additional_args = ["--sandbox", "workspace-write", "--skip-git-repo-check"]
      timeout_seconds = 900

      [context]
      filename = "AGENTS.md"
      max_bytes = 1048576

      [trace]
      all_messages_limit = 10000

    Args:
        config_path: Explicit config file. If None, codex-bridge.toml in cwd
            is used when present.
        cwd: Directory searched for the default config file
        env: Environment mapping (os.environ in production)

    Returns:
        BridgeConfig with defaults for anything not configured.

    Raises:
        ConfigError: If the file is missing (explicit path), unreadable or
            malformed.
    """
    data = _read_config_file(config_path, cwd=cwd)
    codex = _table(data, "codex")
    context = _table(data, "context")
    trace = _table(data, "trace")

    codex_bin = str(codex.get("bin", DEFAULT_CODEX_BIN))
    additional_args = codex.get("additional_args", [])
    if not isinstance(additional_args, list):
        raise ConfigError("[codex] additional_args must be a list of strings")
    args = tuple(str(x) for x in additional_args)
    timeout = _number(codex.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS), "timeout_seconds")

    if env.get(CODEX_BIN_ENV):
        codex_bin = env[CODEX_BIN_ENV]
    if env.get(TIMEOUT_ENV):
        timeout = _number(env[TIMEOUT_ENV], TIMEOUT_ENV)
    if env.get(ADDITIONAL_ARGS_ENV):
        args = tuple(shlex.split(env[ADDITIONAL_ARGS_ENV]))

    max_bytes = int(_number(context.get("max_bytes", MAX_CONTEXT_BYTES), "max_bytes"))
    if max_bytes <= 0:
        raise ConfigError("[context] max_bytes must be positive")
    limit = int(_number(trace.get("all_messages_limit", DEFAULT_ALL_MESSAGES_LIMIT), "limit"))

    return BridgeConfig(
        codex_bin=codex_bin,
        additional_args=args,
        timeout_seconds=clamp_timeout(timeout),
        context_filename=str(context.get("filename", DEFAULT_CONTEXT_FILENAME)),
        max_context_bytes=max_bytes,
        all_messages_limit=clamp_all_messages_limit(limit),
    )


def _read_config_file(config_path: Path | None, *, cwd: Path) -> dict[str, Any]:
    if config_path is None:
        default_path = cwd / CONFIG_FILENAME
        if not default_path.exists():
            return {}
        config_path = default_path
    elif not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    logger.debug("Loading config from %s", config_path)
    try:
        return tomllib.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to load {config_path}: {e}") from e


def _table(data: dict[str, Any], name: str) -> dict[str, Any]:
    table = data.get(name, {})
    if not isinstance(table, dict):
        raise ConfigError(f"[{name}] must be a table")
    return table


def _number(value: object, name: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be a number, got {value!r}")
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be a number, got {value!r}") from e
