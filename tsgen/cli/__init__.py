"""CLI command group for tsgen.

This module exposes the root Click command group `tsgen` which aggregates
subcommands implemented in sibling modules.

Example usage:

        tsgen constants -i src -o bindings/python
        tsgen wrapper --constants-module nodes
        tsgen graph --format yaml
        tsgen completions bash
"""

from __future__ import annotations

import logging

import click

from tsgen import __version__
from tsgen.config import LOG_LEVEL_ENV

from .completions import completions_cmd
from .generate import constants_cmd, wrapper_cmd
from .graph import graph_cmd

logger = logging.getLogger(__name__)

_LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def _configure_logging(log_level: str) -> None:
    level = getattr(logging, log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format=_LOG_FORMAT)
    # basicConfig is a no-op once handlers exist; force the level anyway.
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.setLevel(level)
    logger.debug("Set logging level to %s", log_level.upper())


@click.group()
@click.version_option(__version__, prog_name="tsgen")
@click.option(
    "--log-level",
    envvar=LOG_LEVEL_ENV,
    default="WARNING",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help=f"Set the logging level (env: {LOG_LEVEL_ENV})",
)
def tsgen(log_level: str):
    """Generate type-safe bindings for tree-sitter grammars."""
    _configure_logging(log_level)


# Register subcommands
tsgen.add_command(constants_cmd)
tsgen.add_command(wrapper_cmd)
tsgen.add_command(graph_cmd)
tsgen.add_command(completions_cmd)

__all__ = ["tsgen"]
