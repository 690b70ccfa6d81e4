"""End-to-end generation: read description files, build, render, write.

Each run builds its own graph; nothing is shared between the constants and
wrapper runs of one CLI invocation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from tsgen.config import GeneratorConfig
from tsgen.constants import build_constants
from tsgen.emitter import emit_wrappers
from tsgen.graph import TypeGraph, build_type_graph
from tsgen.render import Renderer
from tsgen.schema.grammar import GrammarFile, load_grammar
from tsgen.schema.node_types import load_node_types
from tsgen.writer import write_output

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    path: Path
    text: str
    graph: TypeGraph


def load_graph(config: GeneratorConfig, use_grammar: bool = True) -> TypeGraph:
    """Load ``node-types.json`` (and ``grammar.json`` if present) and build."""
    document = load_node_types(config.node_types_path)
    grammar: GrammarFile | None = None
    if use_grammar:
        if config.grammar_path.exists():
            grammar = load_grammar(config.grammar_path)
        else:
            logger.info(
                "No grammar file at %s; generating without grammar metadata",
                config.grammar_path,
            )
    return build_type_graph(document, grammar)


def generate_constants(config: GeneratorConfig) -> GenerationResult:
    graph = load_graph(config)
    text = Renderer(config).render_constants(build_constants(graph))
    path = write_output(text, config.constants_path)
    return GenerationResult(path=path, text=text, graph=graph)


def generate_wrapper(config: GeneratorConfig) -> GenerationResult:
    graph = load_graph(config)
    text = Renderer(config).render_wrapper(emit_wrappers(graph))
    path = write_output(text, config.wrapper_path)
    return GenerationResult(path=path, text=text, graph=graph)


__all__ = ["GenerationResult", "load_graph", "generate_constants", "generate_wrapper"]
