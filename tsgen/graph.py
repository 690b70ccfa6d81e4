"""Build the closed type graph from a node-types document.

The graph stores edges as node indices rather than object references, so a
concrete type that contains itself through its fields is plain recursion and
needs no special handling. Only supertype/subtype edges are walked for
cycles: a supertype may never be, directly or transitively, its own subtype.

Passes:

1. one node identity per declaration (forward references resolve regardless
   of declaration order);
2. identifier synthesis over every type reference and field name;
3. resolution of field, children and subtype references to indices;
4. closed leaf-subtype computation (depth-first, memoized, cycle-checked);
5. root selection.

Any failure aborts the build; there is no partial graph.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

from tsgen.errors import (
    DuplicateIdentifierError,
    SchemaError,
    SupertypeCycleError,
    UnresolvedTypeError,
)
from tsgen.naming import (
    PYTHON_CONVENTIONS,
    Conventions,
    FieldIdentifiers,
    IdentifierTable,
    TypeIdentifiers,
    synthesize,
)
from tsgen.schema.grammar import GrammarFile, SymbolRule
from tsgen.schema.node_types import FieldSpec, NodeTypesDocument, TypeRef

logger = logging.getLogger(__name__)


class NodeKind(str, Enum):
    CONCRETE = "concrete"
    SUPERTYPE = "supertype"


@dataclass(frozen=True)
class ResolvedField:
    """A field or children slot with its types resolved to node indices.

    ``name`` is ``None`` for the children slot. ``types`` keeps the declared
    union in document order; ``leaves`` is the closed set of concrete node
    indices the slot can hold.
    """

    name: str | None
    identifiers: FieldIdentifiers | None
    required: bool
    multiple: bool
    types: tuple[int, ...]
    leaves: tuple[int, ...]
    spans_named_and_anonymous: bool

    @property
    def is_union(self) -> bool:
        return len(self.types) > 1

    @property
    def is_children_slot(self) -> bool:
        return self.name is None


@dataclass(frozen=True)
class TypeGraphNode:
    index: int
    ref: TypeRef
    identifiers: TypeIdentifiers
    kind: NodeKind
    root: bool
    extra: bool
    subtypes: tuple[int, ...]
    leaf_subtypes: tuple[int, ...]
    fields: dict[str, ResolvedField]
    children: ResolvedField | None

    @property
    def name(self) -> str:
        return self.ref.name

    @property
    def named(self) -> bool:
        return self.ref.named

    @property
    def identifier(self) -> str:
        return self.identifiers.type_name

    @property
    def is_supertype(self) -> bool:
        return self.kind is NodeKind.SUPERTYPE

    def slots(self) -> Iterator[ResolvedField]:
        """Fields sorted by name, then the children slot if any."""
        for name in sorted(self.fields):
            yield self.fields[name]
        if self.children is not None:
            yield self.children


@dataclass(frozen=True)
class TypeGraph:
    nodes: tuple[TypeGraphNode, ...]
    identifiers: IdentifierTable
    root: int | None = None
    grammar_name: str | None = None
    extras: tuple[int, ...] = ()

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[TypeGraphNode]:
        return iter(self.nodes)

    def __getitem__(self, index: int) -> TypeGraphNode:
        return self.nodes[index]

    def node(self, ref: TypeRef) -> TypeGraphNode:
        for node in self.nodes:
            if node.ref == ref:
                return node
        raise KeyError(str(ref))

    def find(self, name: str, named: bool = True) -> TypeGraphNode:
        return self.node(TypeRef(name=name, named=named))

    def supertypes(self) -> tuple[TypeGraphNode, ...]:
        return tuple(node for node in self.nodes if node.is_supertype)

    def concrete(self) -> tuple[TypeGraphNode, ...]:
        return tuple(node for node in self.nodes if not node.is_supertype)

    def resolve(self, indices: tuple[int, ...]) -> tuple[TypeGraphNode, ...]:
        return tuple(self.nodes[index] for index in indices)

    @property
    def root_node(self) -> TypeGraphNode | None:
        return None if self.root is None else self.nodes[self.root]

    def extra_nodes(self) -> tuple[TypeGraphNode, ...]:
        """Node types that may appear anywhere in a tree (comments and the like)."""
        return self.resolve(self.extras)

    def field_names(self) -> list[str]:
        return sorted(self.identifiers.fields)

    def summary(self) -> dict[str, Any]:
        """Plain-data view of the graph for inspection output."""

        def ids(indices: tuple[int, ...]) -> list[str]:
            return [self.nodes[i].identifier for i in indices]

        def slot(resolved: ResolvedField) -> dict[str, Any]:
            data: dict[str, Any] = {
                "required": resolved.required,
                "multiple": resolved.multiple,
                "types": ids(resolved.types),
            }
            if resolved.identifiers is not None:
                data = {"accessor": resolved.identifiers.accessor, **data}
            return data

        types = []
        for node in self.nodes:
            entry: dict[str, Any] = {
                "type": node.name,
                "named": node.named,
                "identifier": node.identifier,
                "constant": node.identifiers.constant,
                "kind": node.kind.value,
            }
            if node.is_supertype:
                entry["subtypes"] = ids(node.subtypes)
                entry["leaf_subtypes"] = ids(node.leaf_subtypes)
            if node.fields:
                entry["fields"] = {
                    name: slot(resolved) for name, resolved in sorted(node.fields.items())
                }
            if node.children is not None:
                entry["children"] = slot(node.children)
            types.append(entry)
        root = self.root_node
        return {
            "grammar": self.grammar_name,
            "root": root.identifier if root is not None else None,
            "extras": ids(self.extras),
            "types": types,
        }


class TypeGraphBuilder:
    """Single-use builder turning a document into a :class:`TypeGraph`."""

    def __init__(
        self,
        document: NodeTypesDocument,
        grammar: GrammarFile | None = None,
        conventions: Conventions = PYTHON_CONVENTIONS,
    ):
        self.document = document
        self.grammar = grammar
        self.conventions = conventions
        self._index: dict[TypeRef, int] = {}
        self._subtypes: list[tuple[int, ...]] = []
        self._closed: dict[int, tuple[int, ...]] = {}

    def build(self) -> TypeGraph:
        decls = self.document.declarations

        for index, decl in enumerate(decls):
            self._index[decl.ref] = index
        logger.debug("Registered %d node types", len(decls))

        try:
            identifiers = synthesize(
                self._index, self.document.field_names(), self.conventions
            )
        except DuplicateIdentifierError as e:
            raise DuplicateIdentifierError(
                e.identifier, e.spellings, source=self.document.source
            ) from None

        self._subtypes = [
            tuple(
                _unique(self._lookup(decl.name, "subtypes", ref) for ref in decl.subtypes)
            )
            for decl in decls
        ]
        for index in range(len(decls)):
            self._close(index, [])
        logger.debug("Computed closed leaf-subtype sets for %d supertypes",
                     sum(1 for subs in self._subtypes if subs))

        nodes = []
        for index, decl in enumerate(decls):
            fields = {
                name: self._resolve_slot(decl.name, name, spec, identifiers.for_field(name))
                for name, spec in decl.fields.items()
            }
            children = (
                self._resolve_slot(decl.name, None, decl.children, None)
                if decl.children is not None
                else None
            )
            nodes.append(
                TypeGraphNode(
                    index=index,
                    ref=decl.ref,
                    identifiers=identifiers.for_type(decl.ref),
                    kind=NodeKind.SUPERTYPE if decl.is_supertype else NodeKind.CONCRETE,
                    root=decl.root,
                    extra=decl.extra,
                    subtypes=self._subtypes[index],
                    leaf_subtypes=self._closed[index] if decl.is_supertype else (),
                    fields=fields,
                    children=children,
                )
            )

        root = self._select_root()
        extras = self._select_extras()
        grammar_name = self.grammar.name if self.grammar is not None else None
        if self.grammar is not None:
            self._cross_check()
        logger.info(
            "Built type graph: %d types (%d supertypes), %d fields",
            len(nodes),
            sum(1 for node in nodes if node.is_supertype),
            len(identifiers.fields),
        )
        return TypeGraph(
            nodes=tuple(nodes),
            identifiers=identifiers,
            root=root,
            grammar_name=grammar_name,
            extras=extras,
        )

    def _lookup(self, referrer: str, slot: str, ref: TypeRef) -> int:
        try:
            return self._index[ref]
        except KeyError:
            raise UnresolvedTypeError(
                referrer, slot, ref.name, ref.named, source=self.document.source
            ) from None

    def _close(self, index: int, stack: list[int]) -> tuple[int, ...]:
        """Closed leaf-subtype set of ``index``, in document order."""
        if index in self._closed:
            return self._closed[index]
        subtypes = self._subtypes[index]
        if not subtypes:
            self._closed[index] = (index,)
            return self._closed[index]
        if index in stack:
            decls = self.document.declarations
            cycle = [decls[i].name for i in stack[stack.index(index) :]]
            raise SupertypeCycleError(
                [*cycle, decls[index].name], source=self.document.source
            )
        stack.append(index)
        leaves: set[int] = set()
        for subtype in subtypes:
            leaves.update(self._close(subtype, stack))
        stack.pop()
        self._closed[index] = tuple(sorted(leaves))
        return self._closed[index]

    def _resolve_slot(
        self,
        referrer: str,
        name: str | None,
        spec: FieldSpec,
        identifiers: FieldIdentifiers | None,
    ) -> ResolvedField:
        slot = name if name is not None else "children"
        types = tuple(_unique(self._lookup(referrer, slot, ref) for ref in spec.types))
        leaves: set[int] = set()
        for index in types:
            leaves.update(self._closed[index])
        named_flags = {ref.named for ref in spec.types}
        return ResolvedField(
            name=name,
            identifiers=identifiers,
            required=spec.required,
            multiple=spec.multiple,
            types=types,
            leaves=tuple(sorted(leaves)),
            spans_named_and_anonymous=len(named_flags) > 1,
        )

    def _select_root(self) -> int | None:
        decls = self.document.declarations
        flagged = [index for index, decl in enumerate(decls) if decl.root]
        if len(flagged) > 1:
            raise SchemaError(
                "more than one declaration is flagged as root: "
                + ", ".join(decls[i].name for i in flagged),
                source=self.document.source,
                index=flagged[1],
                name=decls[flagged[1]].name,
            )
        if flagged:
            return flagged[0]
        if self.grammar is not None and self.grammar.start_rule is not None:
            index = self._index.get(TypeRef(name=self.grammar.start_rule, named=True))
            if index is None:
                logger.warning(
                    "Start rule '%s' has no node type; no typed root is generated",
                    self.grammar.start_rule,
                )
            return index
        return None

    def _select_extras(self) -> tuple[int, ...]:
        """Indices of extra node types.

        Declarations flagged ``extra`` are used as is. Older node-types files
        carry no flag, so named ``SYMBOL`` entries of the grammar's ``extras``
        are added as well.
        """
        decls = self.document.declarations
        extras = {index for index, decl in enumerate(decls) if decl.extra}
        if self.grammar is not None:
            for rule in self.grammar.extras:
                if isinstance(rule, SymbolRule):
                    index = self._index.get(TypeRef(name=rule.name, named=True))
                    if index is not None:
                        extras.add(index)
        return tuple(sorted(extras))

    def _cross_check(self) -> None:
        declared = {decl.name for decl in self.document.supertype_declarations()}
        for name in self.grammar.supertypes:
            if name not in declared:
                logger.warning(
                    "Grammar '%s' declares supertype '%s' missing from node types",
                    self.grammar.name,
                    name,
                )
        unknown = set(self.document.field_names()) - self.grammar.field_names()
        for name in sorted(unknown):
            logger.warning("Field '%s' does not appear in grammar rules", name)


def build_type_graph(
    document: NodeTypesDocument,
    grammar: GrammarFile | None = None,
    conventions: Conventions = PYTHON_CONVENTIONS,
) -> TypeGraph:
    """Build the closed type graph for ``document``.

    Raises:
        UnresolvedTypeError: A field, children slot or subtype list names an
            undeclared type.
        SupertypeCycleError: A supertype reaches itself through subtypes.
        DuplicateIdentifierError: Identifier synthesis could not
            disambiguate two symbols.
        SchemaError: More than one declaration is flagged as root.
    """
    return TypeGraphBuilder(document, grammar, conventions).build()


def _unique(values):
    seen = set()
    for value in values:
        if value not in seen:
            seen.add(value)
            yield value


__all__ = [
    "NodeKind",
    "ResolvedField",
    "TypeGraphNode",
    "TypeGraph",
    "TypeGraphBuilder",
    "build_type_graph",
]
