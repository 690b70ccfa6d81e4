"""Generator configuration, built by the CLI before any graph exists."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from tsgen.schema.grammar import GRAMMAR_FILENAME
from tsgen.schema.node_types import NODE_TYPES_FILENAME

DEFAULT_INPUT_DIRECTORY = "src"
DEFAULT_BINDINGS_DIRECTORY = "bindings"
LOG_LEVEL_ENV = "TSGEN_LOG_LEVEL"


class ForLanguage(str, Enum):
    """Target language of the rendered artifacts."""

    PYTHON = "python"

    @property
    def file_extension(self) -> str:
        return {ForLanguage.PYTHON: "py"}[self]

    @property
    def output_dir(self) -> str:
        return {ForLanguage.PYTHON: "python"}[self]


@dataclass(frozen=True)
class GeneratorConfig:
    """Immutable settings for one generation run.

    Parameters
    ----------
    input_directory : Path
        Directory holding ``node-types.json`` and ``grammar.json``.
    output_directory : Path | None
        Where generated files go; ``None`` -> ``bindings/<language>``.
    for_language : ForLanguage
        Target language conventions and templates.
    constants_module : str
        Module name (without extension) of the constants file.
    wrapper_module : str
        Module name (without extension) of the wrapper file.
    relative_imports : bool
        Import the constants module relatively (``from . import nodes``).
    """

    input_directory: Path = field(default=Path(DEFAULT_INPUT_DIRECTORY))
    output_directory: Path | None = None
    for_language: ForLanguage = ForLanguage.PYTHON
    constants_module: str = "nodes"
    wrapper_module: str = "wrapper"
    relative_imports: bool = True

    def __post_init__(self):
        for name in ("constants_module", "wrapper_module"):
            value = getattr(self, name)
            if not value.isidentifier():
                raise ValueError(f"{name} must be a valid module name, got '{value}'")

    @property
    def node_types_path(self) -> Path:
        return Path(self.input_directory) / NODE_TYPES_FILENAME

    @property
    def grammar_path(self) -> Path:
        return Path(self.input_directory) / GRAMMAR_FILENAME

    @property
    def output_path(self) -> Path:
        if self.output_directory is not None:
            return Path(self.output_directory)
        return Path(DEFAULT_BINDINGS_DIRECTORY) / self.for_language.output_dir

    def _file(self, module: str) -> Path:
        return self.output_path / f"{module}.{self.for_language.file_extension}"

    @property
    def constants_path(self) -> Path:
        return self._file(self.constants_module)

    @property
    def wrapper_path(self) -> Path:
        return self._file(self.wrapper_module)


__all__ = [
    "DEFAULT_INPUT_DIRECTORY",
    "DEFAULT_BINDINGS_DIRECTORY",
    "LOG_LEVEL_ENV",
    "ForLanguage",
    "GeneratorConfig",
]
