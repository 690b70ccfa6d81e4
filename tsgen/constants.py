"""Name-to-constant table shared by the constants module and the wrappers.

Constant names come from the graph's identifier table, the same table the
wrapper emitter reads, so the generated kind-tag checks always refer to
constants that exist.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from tsgen.graph import TypeGraph, TypeGraphNode


@dataclass(frozen=True)
class Constant:
    name: str
    value: str
    named: bool | None = None


@dataclass(frozen=True)
class ConstantsTable:
    grammar_name: str | None
    supertypes: tuple[Constant, ...]
    regular: tuple[Constant, ...]
    terminal: tuple[Constant, ...]
    fields: tuple[Constant, ...]

    def __iter__(self) -> Iterator[Constant]:
        yield from self.supertypes
        yield from self.regular
        yield from self.terminal
        yield from self.fields


def _node_constant(node: TypeGraphNode) -> Constant:
    return Constant(node.identifiers.constant, node.name, node.named)


def build_constants(graph: TypeGraph) -> ConstantsTable:
    def ordered(nodes) -> tuple[Constant, ...]:
        return tuple(sorted((_node_constant(n) for n in nodes), key=lambda c: c.name))

    concrete = graph.concrete()
    return ConstantsTable(
        grammar_name=graph.grammar_name,
        supertypes=ordered(graph.supertypes()),
        regular=ordered(n for n in concrete if n.fields or n.children is not None),
        terminal=ordered(n for n in concrete if not n.fields and n.children is None),
        fields=tuple(
            Constant(ids.constant, ids.name)
            for ids in sorted(graph.identifiers.fields.values(), key=lambda f: f.constant)
        ),
    )


__all__ = ["Constant", "ConstantsTable", "build_constants"]
