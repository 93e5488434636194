"""Application context for the codex-bridge CLI."""

import os
from dataclasses import dataclass
from pathlib import Path

from codex_bridge.cli.config import load_bridge_config
from codex_bridge.core.codex_runner import CodexRunner
from codex_bridge.core.options import BridgeConfig
from codex_bridge.gateway.process.abc import CodexProcess


@dataclass(frozen=True)
class BridgeContext:
    """Immutable context holding all dependencies for CLI commands.

    Created at CLI entry point and threaded through commands via ctx.obj.
    """

    config: BridgeConfig
    runner: CodexRunner
    cwd: Path  # Current working directory at CLI invocation

    @staticmethod
    def for_test(
        *,
        process: CodexProcess,
        config: BridgeConfig | None = None,
        cwd: Path | None = None,
    ) -> "BridgeContext":
        """Create test context that hands out the given (fake) process.

        Args:
            process: Process returned for every invocation, typically a
                FakeCodexProcess
            config: Optional configuration. If None, BridgeConfig.default().
            cwd: Optional working directory. If None, Path("/test/default/cwd").
        """
        resolved_config = config if config is not None else BridgeConfig.default()
        return BridgeContext(
            config=resolved_config,
            runner=CodexRunner(resolved_config, process_factory=lambda: process),
            cwd=cwd if cwd is not None else Path("/test/default/cwd"),
        )


def create_context(*, config_path: Path | None) -> BridgeContext:
    """Create production context from the config file and environment.

    Raises:
        ConfigError: If the configuration cannot be loaded.
    """
    cwd = Path.cwd()
    config = load_bridge_config(config_path, cwd=cwd, env=os.environ)
    return BridgeContext(config=config, runner=CodexRunner(config), cwd=cwd)
