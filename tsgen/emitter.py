"""Turn a :class:`~tsgen.graph.TypeGraph` into abstract wrapper declarations.

The emitter is a pure function: no text is produced here and nothing is
written. Each declaration refers to other declarations and to kind-tag
constants by their synthesized identifiers only, so the renderer never has to
consult the graph again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from graphlib import CycleError, TopologicalSorter

from tsgen.graph import ResolvedField, TypeGraph, TypeGraphNode

logger = logging.getLogger(__name__)


class Shape(str, Enum):
    """Result shape of an accessor, from ``(required, multiple)``."""

    SINGLE = "single"
    OPTIONAL = "optional"
    SEQUENCE = "sequence"

    @classmethod
    def of(cls, required: bool, multiple: bool) -> Shape:
        if multiple:
            return cls.SEQUENCE
        return cls.SINGLE if required else cls.OPTIONAL


@dataclass(frozen=True)
class KindRef:
    """A kind-tag check: the node constant to compare and the named flag."""

    constant: str
    named: bool


@dataclass(frozen=True)
class VariantRef:
    """One member of a closed union: its wrapper and its kind tag."""

    type_name: str
    kind: KindRef


@dataclass(frozen=True)
class AccessorDecl:
    """Typed accessor for one field (or the children slot) of a record.

    ``result_types`` is the declared union in document order; ``variants`` is
    the closed set of concrete wrappers checked at runtime. ``converter`` names
    the object whose ``cast`` performs that check: a record class, a
    supertype's variant table or the accessor's own table.
    """

    name: str
    field_name: str | None
    field_constant: str | None
    shape: Shape
    result_types: tuple[str, ...]
    variants: tuple[VariantRef, ...]
    converter: str
    owns_table: bool

    @property
    def is_children_slot(self) -> bool:
        return self.field_name is None


@dataclass(frozen=True)
class RecordDecl:
    """Wrapper for one concrete node type."""

    type_name: str
    grammar_name: str
    named: bool
    kind: KindRef
    accessors: tuple[AccessorDecl, ...]

    @property
    def is_terminal(self) -> bool:
        return not self.accessors


@dataclass(frozen=True)
class UnionDecl:
    """Closed union over a supertype's leaf subtypes, with its downcast."""

    type_name: str
    grammar_name: str
    table_name: str
    downcast_name: str
    variants: tuple[VariantRef, ...]


@dataclass(frozen=True)
class RootDecl:
    """Typed tree whose root node is wrapped by ``converter``."""

    type_name: str
    root_type: str
    converter: str


Declaration = RecordDecl | UnionDecl | RootDecl


@dataclass(frozen=True)
class WrapperModule:
    """Ordered declarations plus the extra kinds children slots skip."""

    grammar_name: str | None
    declarations: tuple[Declaration, ...]
    extras: tuple[KindRef, ...] = ()

    def records(self) -> tuple[RecordDecl, ...]:
        return tuple(d for d in self.declarations if isinstance(d, RecordDecl))

    def unions(self) -> tuple[UnionDecl, ...]:
        return tuple(d for d in self.declarations if isinstance(d, UnionDecl))

    def roots(self) -> tuple[RootDecl, ...]:
        return tuple(d for d in self.declarations if isinstance(d, RootDecl))

    def accessor_tables(self) -> tuple[AccessorDecl, ...]:
        """Accessors that need their own variant table."""
        return tuple(
            accessor
            for record in self.records()
            for accessor in record.accessors
            if accessor.owns_table
        )

    def find(self, type_name: str) -> Declaration:
        for decl in self.declarations:
            if decl.type_name == type_name:
                return decl
        raise KeyError(type_name)


class OrderingError(RuntimeError):
    """Raised when declarations cannot be ordered."""


class WrapperEmitter:
    def __init__(self, graph: TypeGraph):
        self.graph = graph

    def emit(self) -> WrapperModule:
        graph = self.graph
        by_name: dict[str, Declaration] = {}
        sorter: TopologicalSorter[str] = TopologicalSorter()

        for node in graph.concrete():
            record = self._record(node)
            by_name[record.type_name] = record
            sorter.add(record.type_name)
        for node in graph.supertypes():
            union = self._union(node)
            by_name[union.type_name] = union
            sorter.add(union.type_name, *(v.type_name for v in union.variants))

        root = graph.root_node
        if root is not None:
            decl = self._root(root)
            by_name[decl.type_name] = decl
            sorter.add(decl.type_name, root.identifier)

        try:
            order = list(sorter.static_order())
        except CycleError as e:
            raise OrderingError(f"Cycle detected between declarations: {e}") from e
        logger.debug("Emitted %d declarations", len(order))
        return WrapperModule(
            grammar_name=graph.grammar_name,
            declarations=tuple(by_name[name] for name in order),
            extras=tuple(self._kind(node) for node in graph.extra_nodes()),
        )

    def _kind(self, node: TypeGraphNode) -> KindRef:
        return KindRef(constant=node.identifiers.constant, named=node.named)

    def _variants(self, indices: tuple[int, ...]) -> tuple[VariantRef, ...]:
        return tuple(
            VariantRef(type_name=leaf.identifier, kind=self._kind(leaf))
            for leaf in self.graph.resolve(indices)
        )

    def _record(self, node: TypeGraphNode) -> RecordDecl:
        accessors = tuple(self._accessor(node, slot) for slot in node.slots())
        return RecordDecl(
            type_name=node.identifier,
            grammar_name=node.name,
            named=node.named,
            kind=self._kind(node),
            accessors=accessors,
        )

    def _accessor(self, owner: TypeGraphNode, slot: ResolvedField) -> AccessorDecl:
        types = self.graph.resolve(slot.types)
        if slot.identifiers is not None:
            name = slot.identifiers.accessor
            suffix = slot.identifiers.constant
        else:
            name = "children"
            suffix = "CHILDREN"
        owns_table = len(types) != 1
        if not owns_table:
            (only,) = types
            converter = (
                _table_name(only.identifiers.constant)
                if only.is_supertype
                else only.identifier
            )
        else:
            converter = f"_{owner.identifiers.constant}__{suffix}_VARIANTS"
        return AccessorDecl(
            name=name,
            field_name=slot.name,
            field_constant=slot.identifiers.constant if slot.identifiers else None,
            shape=Shape.of(slot.required, slot.multiple),
            result_types=tuple(t.identifier for t in types),
            variants=self._variants(slot.leaves),
            converter=converter,
            owns_table=owns_table,
        )

    def _union(self, node: TypeGraphNode) -> UnionDecl:
        return UnionDecl(
            type_name=node.identifier,
            grammar_name=node.name,
            table_name=_table_name(node.identifiers.constant),
            downcast_name=f"as_{node.identifiers.snake}",
            variants=self._variants(node.leaf_subtypes),
        )

    def _root(self, node: TypeGraphNode) -> RootDecl:
        grammar_name = self.graph.grammar_name or node.name
        converter = (
            _table_name(node.identifiers.constant) if node.is_supertype else node.identifier
        )
        return RootDecl(
            type_name=self.graph.identifiers.conventions.tree_identifier(grammar_name),
            root_type=node.identifier,
            converter=converter,
        )


def _table_name(node_constant: str) -> str:
    return f"_{node_constant}_VARIANTS"


def emit_wrappers(graph: TypeGraph) -> WrapperModule:
    """Produce the ordered declaration sequence for ``graph``."""
    return WrapperEmitter(graph).emit()


__all__ = [
    "Shape",
    "KindRef",
    "VariantRef",
    "AccessorDecl",
    "RecordDecl",
    "UnionDecl",
    "RootDecl",
    "Declaration",
    "WrapperModule",
    "OrderingError",
    "WrapperEmitter",
    "emit_wrappers",
]
