"""Runtime support imported by generated wrapper modules.

Generated code subclasses :class:`TypedNode` once per concrete node type and
builds one :class:`VariantTable` per closed union. Everything here works on
the duck-typed :class:`SyntaxNode` protocol, which ``tree_sitter.Node``
satisfies, so this module does not import py-tree-sitter itself.
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Iterable, Iterator
from dataclasses import dataclass
from typing import Any, ClassVar, Protocol, Self

from tsgen.errors import MissingFieldError, UnknownVariantError


class SyntaxNode(Protocol):
    """The subset of ``tree_sitter.Node`` used by generated wrappers."""

    type: str
    is_named: bool
    start_byte: int
    end_byte: int
    start_point: Any
    end_point: Any
    text: bytes | None
    children: list[Any]

    def child_by_field_name(self, name: str, /) -> Any: ...

    def children_by_field_name(self, name: str, /) -> list[Any]: ...

    def field_name_for_child(self, child_index: int, /) -> str | None: ...


@dataclass(frozen=True)
class KindTag:
    """A node kind as reported by the tree: its spelling and named flag."""

    name: str
    named: bool

    @classmethod
    def of(cls, node: SyntaxNode) -> KindTag:
        return cls(node.type, node.is_named)

    def matches(self, node: SyntaxNode) -> bool:
        return node.type == self.name and node.is_named == self.named


class Converter(Protocol):
    def accepts(self, node: SyntaxNode) -> bool: ...

    def cast(self, node: SyntaxNode, source: bytes | None = None) -> Any: ...


class TypedNode:
    """Base class of every generated concrete node wrapper."""

    KIND: ClassVar[KindTag]

    __slots__ = ("_node", "_source")

    def __init__(self, node: SyntaxNode, source: bytes | None = None):
        self._node = node
        self._source = source

    @classmethod
    def accepts(cls, node: SyntaxNode) -> bool:
        return cls.KIND.matches(node)

    @classmethod
    def cast(cls, node: SyntaxNode, source: bytes | None = None) -> Self:
        """Wrap ``node``, checking that its kind is this wrapper's kind."""
        if not cls.KIND.matches(node):
            raise UnknownVariantError(cls.__name__, node.type, node.is_named)
        return cls(node, source)

    @property
    def node(self) -> SyntaxNode:
        return self._node

    @property
    def kind(self) -> KindTag:
        return self.KIND

    @property
    def text(self) -> str:
        """Source text covered by this node.

        Bytes that are not valid UTF-8 decode to U+FFFD.
        """
        if self._source is not None:
            raw = self._source[self._node.start_byte : self._node.end_byte]
        else:
            raw = self._node.text
        return raw.decode("utf-8", errors="replace") if raw is not None else ""

    @property
    def start_point(self) -> Any:
        return self._node.start_point

    @property
    def end_point(self) -> Any:
        return self._node.end_point

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._node == other._node

    def __hash__(self) -> int:
        return hash((type(self), self._node))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._node.start_point}-{self._node.end_point})"

    # Field access used by generated accessors ---------------------------------
    def _required(self, field: str, converter: Converter) -> Any:
        child = self._node.child_by_field_name(field)
        if child is None:
            raise MissingFieldError(type(self).__name__, field)
        return converter.cast(child, self._source)

    def _optional(self, field: str, converter: Converter) -> Any | None:
        child = self._node.child_by_field_name(field)
        if child is None:
            return None
        return converter.cast(child, self._source)

    def _sequence(self, field: str, converter: Converter) -> NodeSequence:
        return NodeSequence(
            lambda: self._node.children_by_field_name(field), converter, self._source
        )

    # Children slot: children without a field name. Anonymous tokens outside
    # the slot and extras are skipped; any other named child is handed to the
    # converter, which rejects kinds outside the closed set.
    def _slot(
        self, converter: Converter, extras: Collection[KindTag] = frozenset()
    ) -> Iterator[SyntaxNode]:
        node = self._node
        for index, child in enumerate(node.children):
            if node.field_name_for_child(index) is not None:
                continue
            if converter.accepts(child):
                yield child
            elif child.is_named and KindTag.of(child) not in extras:
                yield child

    def _slot_required(
        self, converter: Converter, extras: Collection[KindTag] = frozenset()
    ) -> Any:
        for child in self._slot(converter, extras):
            return converter.cast(child, self._source)
        raise MissingFieldError(type(self).__name__, "children")

    def _slot_optional(
        self, converter: Converter, extras: Collection[KindTag] = frozenset()
    ) -> Any | None:
        for child in self._slot(converter, extras):
            return converter.cast(child, self._source)
        return None

    def _slot_sequence(
        self, converter: Converter, extras: Collection[KindTag] = frozenset()
    ) -> NodeSequence:
        return NodeSequence(
            lambda: self._slot(converter, extras), converter, self._source
        )


class VariantTable:
    """Closed set of wrapper classes selected by kind tag."""

    def __init__(self, name: str, variants: Iterable[type[TypedNode]]):
        self.name = name
        self._by_kind: dict[KindTag, type[TypedNode]] = {
            variant.KIND: variant for variant in variants
        }

    @property
    def variants(self) -> tuple[type[TypedNode], ...]:
        return tuple(self._by_kind.values())

    def __contains__(self, kind: object) -> bool:
        return kind in self._by_kind

    def __iter__(self) -> Iterator[type[TypedNode]]:
        return iter(self._by_kind.values())

    def __len__(self) -> int:
        return len(self._by_kind)

    def __repr__(self) -> str:
        return f"VariantTable({self.name!r}, {len(self)} variants)"

    def accepts(self, node: SyntaxNode) -> bool:
        return KindTag.of(node) in self._by_kind

    def cast(self, node: SyntaxNode, source: bytes | None = None) -> TypedNode:
        """Return the typed wrapper for ``node``.

        Raises:
            UnknownVariantError: If the node's kind is not in this table.
        """
        variant = self._by_kind.get(KindTag.of(node))
        if variant is None:
            raise UnknownVariantError(self.name, node.type, node.is_named)
        return variant(node, source)


class NodeSequence[T]:
    """Lazy, restartable sequence of wrapped child nodes.

    Each iteration re-reads the underlying children, so iterating twice yields
    the same wrappers and an empty field simply yields nothing.
    """

    __slots__ = ("_children", "_converter", "_source")

    def __init__(
        self,
        children: Callable[[], Iterable[SyntaxNode]],
        converter: Converter,
        source: bytes | None = None,
    ):
        self._children = children
        self._converter = converter
        self._source = source

    def __iter__(self) -> Iterator[T]:
        for child in self._children():
            yield self._converter.cast(child, self._source)

    def __len__(self) -> int:
        return sum(1 for _ in self._children())

    def __bool__(self) -> bool:
        return any(True for _ in self._children())

    def __repr__(self) -> str:
        return f"NodeSequence({len(self)} items)"

    def to_list(self) -> list[T]:
        return list(self)


class TypedTree:
    """Typed view over a parsed tree whose root is :attr:`ROOT`."""

    ROOT: ClassVar[Converter]

    __slots__ = ("_tree", "_source")

    def __init__(self, tree: Any, source: bytes | None = None):
        self._tree = tree
        self._source = source

    @property
    def tree(self) -> Any:
        return self._tree

    @property
    def source(self) -> bytes | None:
        return self._source

    @property
    def root(self) -> Any:
        return self.ROOT.cast(self._tree.root_node, self._source)


__all__ = [
    "SyntaxNode",
    "KindTag",
    "TypedNode",
    "VariantTable",
    "NodeSequence",
    "TypedTree",
    "UnknownVariantError",
    "MissingFieldError",
]
