"""Print shell completion scripts for the tsgen CLI."""

from __future__ import annotations

import click
from click.shell_completion import get_completion_class

_COMPLETE_VAR = "_TSGEN_COMPLETE"


@click.command("completions")
@click.argument("shell", type=click.Choice(["bash", "zsh", "fish"]))
@click.pass_context
def completions_cmd(ctx: click.Context, shell: str) -> None:
    """Print the completion script for SHELL.

    Example:

        eval "$(tsgen completions bash)"
    """
    completion_class = get_completion_class(shell)
    if completion_class is None:
        raise click.BadParameter(f"Unsupported shell: {shell}", param_hint="SHELL")
    root = ctx.find_root().command
    click.echo(completion_class(root, {}, "tsgen", _COMPLETE_VAR).source())


__all__ = ["completions_cmd"]
