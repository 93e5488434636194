import logging
from pathlib import Path

import click

from codex_bridge.cli.commands.config import config_cmd
from codex_bridge.cli.commands.run import run_cmd
from codex_bridge.core.context import create_context
from codex_bridge.core.errors import ConfigError

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="codex-bridge")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Path to codex-bridge.toml (default: ./codex-bridge.toml if present)",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool, config_path: Path | None) -> None:
    """Run the Codex CLI non-interactively and report structured results."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        try:
            ctx.obj = create_context(config_path=config_path)
        except ConfigError as e:
            raise click.ClickException(str(e)) from e


cli.add_command(run_cmd)
cli.add_command(config_cmd)


def main() -> None:
    """CLI entry point used by the `codex-bridge` console script."""
    cli()
