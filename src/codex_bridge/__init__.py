"""codex-bridge CLI entry point.

This package runs the Codex CLI non-interactively and turns its JSONL
stream into a structured result. See `codex-bridge --help` for details.
"""

from codex_bridge.cli.cli import cli


def main() -> None:
    """CLI entry point used by the `codex-bridge` console script."""
    cli()
