"""Run command: execute a single Codex prompt."""

import json
from pathlib import Path

import click

from codex_bridge.core.context import BridgeContext
from codex_bridge.core.errors import CodexBridgeError
from codex_bridge.core.options import CodexOptions
from codex_bridge.core.types import CodexResult


def _echo_result(result: CodexResult) -> None:
    click.echo(result.message)
    for warning in result.warnings:
        label = f"warning ({warning.kind}): "
        click.echo(click.style(label, fg="yellow") + warning.message, err=True)
    click.echo(click.style(f"SESSION_ID: {result.session_id}", dim=True), err=True)


@click.command("run")
@click.argument("prompt")
@click.option(
    "--cd",
    "working_directory",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Working directory for codex (passed via --cd)",
)
@click.option(
    "--image",
    "images",
    multiple=True,
    type=click.Path(path_type=Path),
    help="Attach an image to the prompt (repeatable)",
)
@click.option("--session-id", default=None, help="Resume a previous session by its SESSION_ID")
@click.option(
    "--timeout",
    "timeout_seconds",
    type=float,
    default=None,
    help="Deadline in seconds (default from config, max 3600)",
)
@click.option("--all-messages", is_flag=True, help="Include every raw codex event in --json output")
@click.option("--json", "json_output", is_flag=True, help="Print the result as JSON")
@click.pass_obj
def run_cmd(
    ctx: BridgeContext,
    prompt: str,
    working_directory: Path | None,
    images: tuple[Path, ...],
    session_id: str | None,
    timeout_seconds: float | None,
    all_messages: bool,
    json_output: bool,
) -> None:
    """Execute a non-interactive Codex session.

    Examples:

    \b
      # Ask a question about the current project
      codex-bridge run "explain src/main.py"

    \b
      # Continue a previous conversation
      codex-bridge run "now add tests" --session-id 0199a2f1-...
    """
    if working_directory is not None and not working_directory.is_absolute():
        working_directory = ctx.cwd / working_directory

    options = CodexOptions.from_config(
        ctx.config,
        prompt=prompt,
        working_directory=working_directory,
        session_id=session_id,
        images=images,
        return_all_messages=all_messages,
        timeout_seconds=timeout_seconds,
    )

    try:
        result = ctx.runner.run(options)
    except CodexBridgeError as e:
        if json_output:
            click.echo(json.dumps(e.to_dict(), indent=2))
        else:
            click.echo(click.style("Error: ", fg="red") + str(e), err=True)
        raise SystemExit(1) from e

    if json_output:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _echo_result(result)
