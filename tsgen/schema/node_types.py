"""Load and validate tree-sitter ``node-types.json`` documents.

The loader performs no semantic interpretation: it checks the shape of every
entry, rejects duplicate ``(type, named)`` pairs and hands back an immutable
:class:`NodeTypesDocument`. Resolution of type references happens later, in
:mod:`tsgen.graph`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    ValidationError,
    model_validator,
)

from tsgen.errors import SchemaError

logger = logging.getLogger(__name__)

NODE_TYPES_FILENAME = "node-types.json"


class TypeRef(BaseModel):
    """Reference to a node type by spelling and named flag."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    name: StrictStr = Field(alias="type", min_length=1)
    named: StrictBool

    @property
    def key(self) -> tuple[str, bool]:
        return (self.name, self.named)

    def __str__(self) -> str:
        return self.name if self.named else f'"{self.name}"'


class FieldSpec(BaseModel):
    """Multiplicity and type constraint on one child slot."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    multiple: StrictBool
    required: StrictBool
    types: tuple[TypeRef, ...]


class NodeTypeDecl(BaseModel):
    """One entry of ``node-types.json``."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    name: StrictStr = Field(alias="type", min_length=1)
    named: StrictBool
    root: StrictBool = False
    extra: StrictBool = False
    fields: dict[StrictStr, FieldSpec] = Field(default_factory=dict)
    children: FieldSpec | None = None
    subtypes: tuple[TypeRef, ...] = ()

    @model_validator(mode="after")
    def _check_shape(self) -> NodeTypeDecl:
        if any(not name for name in self.fields):
            raise ValueError("field names must be non-empty strings")
        if self.subtypes and (self.fields or self.children is not None):
            raise ValueError(
                "a supertype declaration cannot also declare fields or children"
            )
        return self

    @property
    def ref(self) -> TypeRef:
        return TypeRef(name=self.name, named=self.named)

    @property
    def is_supertype(self) -> bool:
        return bool(self.subtypes)

    @property
    def is_terminal(self) -> bool:
        return not self.subtypes and not self.fields and self.children is None

    @property
    def is_regular(self) -> bool:
        return not self.subtypes and not self.is_terminal


@dataclass(frozen=True)
class NodeTypesDocument:
    """Ordered, duplicate-free list of node type declarations."""

    declarations: tuple[NodeTypeDecl, ...]
    source: str = "<string>"

    def __len__(self) -> int:
        return len(self.declarations)

    def __iter__(self) -> Iterator[NodeTypeDecl]:
        return iter(self.declarations)

    def supertype_declarations(self) -> tuple[NodeTypeDecl, ...]:
        return tuple(d for d in self.declarations if d.is_supertype)

    def regular_declarations(self) -> tuple[NodeTypeDecl, ...]:
        return tuple(d for d in self.declarations if d.is_regular)

    def terminal_declarations(self) -> tuple[NodeTypeDecl, ...]:
        return tuple(d for d in self.declarations if d.is_terminal)

    def node_type_names(self) -> list[str]:
        return sorted({d.name for d in self.declarations})

    def field_names(self) -> list[str]:
        return sorted({name for d in self.declarations for name in d.fields})

    def find(self, name: str, named: bool = True) -> NodeTypeDecl | None:
        for decl in self.declarations:
            if decl.name == name and decl.named == named:
                return decl
        return None


def parse_node_types(text: str, source: str = "<string>") -> NodeTypesDocument:
    """Parse node-types JSON text into a :class:`NodeTypesDocument`.

    Raises:
        SchemaError: If the text is not JSON, is not an array of objects, or
            any entry is malformed or duplicated.
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaError(
            f"invalid JSON: {e.msg}",
            source=source,
            location=f"line {e.lineno}, column {e.colno}",
        ) from e
    if not isinstance(raw, list):
        raise SchemaError(
            f"expected a JSON array of node types, got {type(raw).__name__}",
            source=source,
        )

    declarations: list[NodeTypeDecl] = []
    seen: dict[tuple[str, bool], int] = {}
    for index, entry in enumerate(raw):
        decl = _validate_entry(entry, index, source)
        first = seen.get(decl.ref.key)
        if first is not None:
            raise SchemaError(
                f"duplicate declaration (first declared at entry {first})",
                source=source,
                index=index,
                name=decl.name,
            )
        seen[decl.ref.key] = index
        declarations.append(decl)

    logger.debug("Parsed %d node type declarations from %s", len(declarations), source)
    return NodeTypesDocument(declarations=tuple(declarations), source=source)


def load_node_types(path: str | Path) -> NodeTypesDocument:
    """Read and parse a ``node-types.json`` file."""
    path = Path(path)
    logger.info("Reading node types from %s", path)
    return parse_node_types(read_description(path), source=str(path))


def read_description(path: Path) -> str:
    """Read a description file as UTF-8 text.

    Raises:
        SchemaError: If the file is not valid UTF-8.
    """
    data = path.read_bytes()
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SchemaError(
            f"invalid UTF-8: {e.reason}", source=str(path), location=f"byte {e.start}"
        ) from e


def _validate_entry(entry: Any, index: int, source: str) -> NodeTypeDecl:
    if not isinstance(entry, Mapping):
        raise SchemaError(
            f"expected an object, got {type(entry).__name__}",
            source=source,
            index=index,
        )
    name = entry.get("type")
    name = name if isinstance(name, str) else None
    try:
        return NodeTypeDecl.model_validate(entry)
    except ValidationError as e:
        raise _schema_error(e, source=source, index=index, name=name) from e


def _schema_error(
    error: ValidationError,
    *,
    source: str,
    index: int | None = None,
    name: str | None = None,
) -> SchemaError:
    details = error.errors()
    first = details[0]
    location = ".".join(str(part) for part in first["loc"]) or None
    message = first["msg"]
    if len(details) > 1:
        message += f" (and {len(details) - 1} more problem(s))"
    return SchemaError(
        message, source=source, index=index, name=name, location=location
    )


__all__ = [
    "NODE_TYPES_FILENAME",
    "TypeRef",
    "FieldSpec",
    "NodeTypeDecl",
    "NodeTypesDocument",
    "parse_node_types",
    "load_node_types",
    "read_description",
]
