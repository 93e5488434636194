import shlex

import click

from codex_bridge.core.context import BridgeContext


@click.command("config")
@click.pass_obj
def config_cmd(ctx: BridgeContext) -> None:
    """Show the resolved configuration."""
    cfg = ctx.config
    click.echo(f"codex_bin={cfg.codex_bin}")
    click.echo(f"additional_args={shlex.join(cfg.additional_args)}")
    click.echo(f"timeout_seconds={cfg.timeout_seconds:g}")
    click.echo(f"context_filename={cfg.context_filename}")
    click.echo(f"max_context_bytes={cfg.max_context_bytes}")
    click.echo(f"all_messages_limit={cfg.all_messages_limit}")
