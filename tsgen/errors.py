"""Exception taxonomy for tsgen.

Build-time errors (``SchemaError``, ``UnresolvedTypeError``,
``SupertypeCycleError``, ``DuplicateIdentifierError``) abort a generation run.
``UnknownVariantError`` and ``MissingFieldError`` are only raised by generated
wrapper code, through :mod:`tsgen.runtime`.
"""

from __future__ import annotations

from collections.abc import Sequence


class TsgenError(Exception):
    """Base class for every error raised by tsgen or its generated code.

    Build-time errors set ``source`` to the description file being processed;
    it prefixes the message.
    """

    source: str | None = None

    def __str__(self) -> str:
        message = super().__str__()
        return f"{self.source}: {message}" if self.source else message


class SchemaError(TsgenError, ValueError):
    """Raised when a node-types or grammar document is malformed."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        index: int | None = None,
        name: str | None = None,
        location: str | None = None,
    ):
        self.source = source
        self.index = index
        self.name = name
        self.location = location
        super().__init__(message)

    def __str__(self) -> str:
        parts = []
        if self.source:
            parts.append(self.source)
        if self.index is not None:
            parts.append(f"entry {self.index}")
        if self.name is not None:
            parts.append(f"type '{self.name}'")
        if self.location:
            parts.append(self.location)
        prefix = ", ".join(parts)
        message = self.args[0]
        return f"{prefix}: {message}" if prefix else message


class UnresolvedTypeError(TsgenError, LookupError):
    """Raised when a field, children slot or subtype list names an unknown type."""

    def __init__(
        self,
        referrer: str,
        slot: str,
        name: str,
        named: bool,
        *,
        source: str | None = None,
    ):
        self.source = source
        self.referrer = referrer
        self.slot = slot
        self.name = name
        self.named = named
        flavour = "named" if named else "anonymous"
        super().__init__(
            f"Type '{referrer}' ({slot}) references unknown {flavour} type '{name}'"
        )


class SupertypeCycleError(TsgenError, ValueError):
    """Raised when a supertype is, directly or transitively, its own subtype."""

    def __init__(self, cycle: Sequence[str], *, source: str | None = None):
        self.source = source
        self.cycle = tuple(cycle)
        super().__init__(f"Supertype cycle detected: {' -> '.join(self.cycle)}")


class DuplicateIdentifierError(TsgenError, ValueError):
    """Raised when distinct grammar symbols cannot be given distinct identifiers."""

    def __init__(
        self, identifier: str, spellings: Sequence[str], *, source: str | None = None
    ):
        self.source = source
        self.identifier = identifier
        self.spellings = tuple(spellings)
        joined = ", ".join(repr(s) for s in self.spellings)
        super().__init__(
            f"Identifier '{identifier}' is synthesized for more than one symbol: {joined}"
        )


class UnknownVariantError(TsgenError, TypeError):
    """Raised by generated code when a tree node's kind is outside a closed set.

    This signals that the parsed tree and the schema used to generate the
    wrapper have drifted apart.
    """

    def __init__(self, expected: str, kind: str, named: bool):
        self.expected = expected
        self.kind = kind
        self.named = named
        flavour = "named" if named else "anonymous"
        super().__init__(
            f"Cannot wrap {flavour} node '{kind}' as {expected}: kind is not a known variant"
        )


class MissingFieldError(TsgenError, LookupError):
    """Raised by generated code when a required field is absent from the tree."""

    def __init__(self, owner: str, field: str):
        self.owner = owner
        self.field = field
        super().__init__(f"{owner} is missing required field '{field}'")


__all__ = [
    "TsgenError",
    "SchemaError",
    "UnresolvedTypeError",
    "SupertypeCycleError",
    "DuplicateIdentifierError",
    "UnknownVariantError",
    "MissingFieldError",
]
