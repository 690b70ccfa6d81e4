"""Load tree-sitter ``grammar.json`` documents.

Only grammar metadata is consumed by the generator (the grammar name, the
start rule and the declared supertypes); the rule tree is parsed in full so
malformed files are rejected rather than half-read.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tsgen.errors import SchemaError
from tsgen.schema.node_types import _schema_error, read_description

logger = logging.getLogger(__name__)

GRAMMAR_FILENAME = "grammar.json"
IDENTIFIER_PATTERN = r"^[a-zA-Z_]\w*$"

Identifier = Annotated[str, Field(pattern=IDENTIFIER_PATTERN)]
Precedence = int | str


class _Rule(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    def subrules(self) -> tuple[GrammarRule, ...]:
        """Direct sub-rules, in declaration order."""
        content = getattr(self, "content", None)
        if content is not None:
            return (content,)
        return tuple(getattr(self, "members", ()))


class SeqRule(_Rule):
    type: Literal["SEQ"]
    members: tuple[GrammarRule, ...]


class ChoiceRule(_Rule):
    type: Literal["CHOICE"]
    members: tuple[GrammarRule, ...]


class FieldRule(_Rule):
    type: Literal["FIELD"]
    name: Identifier
    content: GrammarRule


class TokenRule(_Rule):
    type: Literal["TOKEN"]
    content: GrammarRule


class ImmediateTokenRule(_Rule):
    type: Literal["IMMEDIATE_TOKEN"]
    content: GrammarRule


class RepeatRule(_Rule):
    type: Literal["REPEAT"]
    content: GrammarRule


class Repeat1Rule(_Rule):
    type: Literal["REPEAT1"]
    content: GrammarRule


class ReservedRule(_Rule):
    type: Literal["RESERVED"]
    context_name: Identifier
    content: GrammarRule


class PrecRule(_Rule):
    type: Literal["PREC", "PREC_LEFT", "PREC_RIGHT", "PREC_DYNAMIC"]
    value: Precedence
    content: GrammarRule


class StringRule(_Rule):
    type: Literal["STRING"]
    value: str


class PatternRule(_Rule):
    type: Literal["PATTERN"]
    value: str
    flags: str | None = None


class SymbolRule(_Rule):
    type: Literal["SYMBOL"]
    name: Identifier


class AliasRule(_Rule):
    type: Literal["ALIAS"]
    value: str
    named: bool
    content: GrammarRule


class BlankRule(_Rule):
    type: Literal["BLANK"]


GrammarRule = Annotated[
    SeqRule
    | ChoiceRule
    | FieldRule
    | TokenRule
    | ImmediateTokenRule
    | RepeatRule
    | Repeat1Rule
    | ReservedRule
    | PrecRule
    | StringRule
    | PatternRule
    | SymbolRule
    | AliasRule
    | BlankRule,
    Field(discriminator="type"),
]

for _model in (
    SeqRule,
    ChoiceRule,
    FieldRule,
    TokenRule,
    ImmediateTokenRule,
    RepeatRule,
    Repeat1Rule,
    ReservedRule,
    PrecRule,
    AliasRule,
):
    _model.model_rebuild()


class GrammarFile(BaseModel):
    """Structured ``grammar.json`` document."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    schema_uri: str | None = Field(default=None, alias="$schema")
    name: Identifier
    rules: dict[Identifier, GrammarRule]
    inherits: Identifier | None = None
    conflicts: tuple[tuple[Identifier, ...], ...] = ()
    externals: tuple[GrammarRule, ...] = ()
    extras: tuple[GrammarRule, ...] = ()
    inline: tuple[Identifier, ...] = ()
    precedences: tuple[tuple[GrammarRule, ...], ...] = ()
    reserved: dict[Identifier, tuple[GrammarRule, ...]] = Field(default_factory=dict)
    supertypes: tuple[Identifier, ...] = ()
    word: Identifier | None = None

    @property
    def start_rule(self) -> str | None:
        """The first rule of the grammar, which tree-sitter uses as the root."""
        return next(iter(self.rules), None)

    def walk(self) -> Iterator[tuple[str, GrammarRule]]:
        """Yield ``(rule name, rule)`` for every rule node, depth-first."""
        for rule_name, rule in self.rules.items():
            stack = [rule]
            while stack:
                current = stack.pop()
                yield rule_name, current
                stack.extend(reversed(current.subrules()))

    def field_names(self) -> set[str]:
        return {rule.name for _, rule in self.walk() if isinstance(rule, FieldRule)}

    def symbol_names(self) -> set[str]:
        return {rule.name for _, rule in self.walk() if isinstance(rule, SymbolRule)}


def parse_grammar(text: str, source: str = "<string>") -> GrammarFile:
    """Parse grammar JSON text into a :class:`GrammarFile`.

    Raises:
        SchemaError: If the text is not JSON or does not match the grammar
            format.
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaError(
            f"invalid JSON: {e.msg}",
            source=source,
            location=f"line {e.lineno}, column {e.colno}",
        ) from e
    if not isinstance(raw, dict):
        raise SchemaError(
            f"expected a JSON object, got {type(raw).__name__}", source=source
        )
    try:
        grammar = GrammarFile.model_validate(raw)
    except ValidationError as e:
        raise _schema_error(e, source=source) from e
    logger.debug("Parsed grammar '%s' with %d rules", grammar.name, len(grammar.rules))
    return grammar


def load_grammar(path: str | Path) -> GrammarFile:
    """Read and parse a ``grammar.json`` file."""
    path = Path(path)
    logger.info("Reading grammar from %s", path)
    return parse_grammar(read_description(path), source=str(path))


__all__ = [
    "GRAMMAR_FILENAME",
    "GrammarFile",
    "GrammarRule",
    "FieldRule",
    "SymbolRule",
    "AliasRule",
    "StringRule",
    "parse_grammar",
    "load_grammar",
]
