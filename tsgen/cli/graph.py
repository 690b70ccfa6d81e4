"""Graph command: print the resolved type graph for inspection.

Useful to check identifiers, closed supertype sets and field unions before
generating any file.
"""

from __future__ import annotations

import json
from pathlib import Path

import click
import yaml

from ..config import DEFAULT_INPUT_DIRECTORY, GeneratorConfig
from ..generate import load_graph
from .generate import run_generation


@click.command("graph")
@click.option(
    "-i",
    "--input-directory",
    type=click.Path(file_okay=False, path_type=Path),
    default=DEFAULT_INPUT_DIRECTORY,
    show_default=True,
    help="Directory containing node-types.json and grammar.json",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["json", "yaml"], case_sensitive=False),
    default="json",
    show_default=True,
    help="Output format for the graph summary",
)
def graph_cmd(input_directory: Path, fmt: str) -> None:
    """Print the resolved type graph as JSON or YAML."""
    config = GeneratorConfig(input_directory=input_directory)
    graph = run_generation(load_graph, config)
    summary = graph.summary()

    if fmt.lower() == "yaml":
        click.echo(
            yaml.safe_dump(
                summary, sort_keys=False, allow_unicode=True, default_flow_style=False
            )
        )
        return

    click.echo(json.dumps(summary, indent=2))


__all__ = ["graph_cmd"]
