"""Generation commands: `constants` and `wrapper`.

Both read description files from the input directory (default ``src``) and
write one module into the output directory (default ``bindings/<language>``).
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import click

from ..config import DEFAULT_INPUT_DIRECTORY, ForLanguage, GeneratorConfig
from ..errors import TsgenError
from ..generate import generate_constants, generate_wrapper


def generate_options(func):
    """Options shared by every generation command."""
    func = click.option(
        "-o",
        "--output-directory",
        type=click.Path(file_okay=False, path_type=Path),
        default=None,
        help="Override the binding directory (default: bindings/<language>)",
    )(func)
    func = click.option(
        "-i",
        "--input-directory",
        type=click.Path(file_okay=False, path_type=Path),
        default=DEFAULT_INPUT_DIRECTORY,
        show_default=True,
        help="Directory containing node-types.json and grammar.json",
    )(func)
    func = click.option(
        "-l",
        "--for-language",
        type=click.Choice([language.value for language in ForLanguage]),
        default=ForLanguage.PYTHON.value,
        show_default=True,
        help="Generate output for the specified language binding",
    )(func)
    return func


T = TypeVar("T")


def run_generation(
    action: Callable[[GeneratorConfig], T], config: GeneratorConfig
) -> T:
    """Run ``action``; report failures on stderr and exit with status 1."""
    try:
        return action(config)
    except (TsgenError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)


@click.command("constants")
@generate_options
def constants_cmd(for_language: str, input_directory: Path, output_directory: Path | None):
    """Create a constants module from node-types.json."""
    config = GeneratorConfig(
        input_directory=input_directory,
        output_directory=output_directory,
        for_language=ForLanguage(for_language),
    )
    result = run_generation(generate_constants, config)
    click.echo(f"Node constants file written to {result.path}")


@click.command("wrapper")
@generate_options
@click.option(
    "--constants-module",
    default="nodes",
    show_default=True,
    help="Module name of the constants file imported by the wrapper",
)
@click.option(
    "--wrapper-module",
    default="wrapper",
    show_default=True,
    help="Module name of the generated wrapper file",
)
@click.option(
    "--absolute-imports",
    is_flag=True,
    help="Import the constants module absolutely instead of relative to the package",
)
def wrapper_cmd(
    for_language: str,
    input_directory: Path,
    output_directory: Path | None,
    constants_module: str,
    wrapper_module: str,
    absolute_imports: bool,
):
    """Create a type-safe wrapper around the tree-sitter CST."""
    try:
        config = GeneratorConfig(
            input_directory=input_directory,
            output_directory=output_directory,
            for_language=ForLanguage(for_language),
            constants_module=constants_module,
            wrapper_module=wrapper_module,
            relative_imports=not absolute_imports,
        )
    except ValueError as e:
        raise click.BadParameter(str(e)) from e
    result = run_generation(generate_wrapper, config)
    click.echo(f"Node wrapper file written to {result.path}")


__all__ = ["constants_cmd", "wrapper_cmd", "generate_options", "run_generation"]
