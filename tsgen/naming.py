"""Deterministic identifier synthesis for grammar symbols and field names.

Every ``(name, named)`` pair is first split into lower-case words. Alphanumeric
runs become words (camelCase and acronym boundaries included), ``_``, ``-``
and whitespace separate words, and everything else is spelled out through
:data:`SYMBOL_NAMES` with a codepoint fallback, so the mapping is total.

Words are then rendered by a :class:`Conventions` set into a type identifier,
a constant identifier and a snake_case form. Symbols whose identifiers
collide are disambiguated with a ``named``/``anon`` word; anything still
colliding raises :class:`~tsgen.errors.DuplicateIdentifierError`.
"""

from __future__ import annotations

import keyword
import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from tsgen.errors import DuplicateIdentifierError
from tsgen.schema.node_types import TypeRef

logger = logging.getLogger(__name__)

SYMBOL_NAMES: dict[str, str] = {
    "!": "Bang",
    "!=": "BangEq",
    "!==": "BangEqEq",
    '"': "DQuote",
    "#": "Hash",
    "$": "Dollar",
    "%": "Percent",
    "%=": "PercentEq",
    "&": "Amp",
    "&&": "AmpAmp",
    "&=": "AmpEq",
    "'": "SQuote",
    "(": "LParen",
    ")": "RParen",
    "*": "Star",
    "**": "StarStar",
    "*=": "StarEq",
    "*/": "StarSlash",
    "+": "Plus",
    "++": "PlusPlus",
    "+=": "PlusEq",
    ",": "Comma",
    "-": "Minus",
    "--": "MinusMinus",
    "-=": "MinusEq",
    "->": "Arrow",
    ".": "Dot",
    "..": "DotDot",
    "...": "Ellipsis",
    "/": "Slash",
    "//": "SlashSlash",
    "/*": "SlashStar",
    "/=": "SlashEq",
    ":": "Colon",
    "::": "ColonColon",
    ":=": "ColonEq",
    ";": "Semi",
    "<": "Lt",
    "<<": "LtLt",
    "<<=": "LtLtEq",
    "<=": "LtEq",
    "=": "Eq",
    "==": "EqEq",
    "===": "EqEqEq",
    "=>": "FatArrow",
    ">": "Gt",
    ">=": "GtEq",
    ">>": "GtGt",
    ">>=": "GtGtEq",
    "?": "Question",
    "?.": "QuestionDot",
    "??": "QuestionQuestion",
    "@": "At",
    "[": "LBracket",
    "\\": "Backslash",
    "]": "RBracket",
    "^": "Caret",
    "^=": "CaretEq",
    "_": "Underscore",
    "`": "Backtick",
    "{": "LBrace",
    "|": "Pipe",
    "|=": "PipeEq",
    "||": "PipePipe",
    "}": "RBrace",
    "~": "Tilde",
    " ": "Space",
    "\t": "Tab",
    "\n": "Newline",
    "\r": "CarriageReturn",
}

_LONGEST_SYMBOL = max(len(symbol) for symbol in SYMBOL_NAMES)
_RUNS = re.compile(r"[A-Za-z0-9]+|[_\-\s]+|[^A-Za-z0-9_\-\s]+")
_CAMEL = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|[0-9]+")


def split_words(name: str) -> tuple[str, ...]:
    """Split a grammar spelling into lower-case identifier words.

    >>> split_words("binary_expression")
    ('binary', 'expression')
    >>> split_words("(")
    ('l', 'paren')
    >>> split_words("#include")
    ('hash', 'include')
    """
    if not any(char.isascii() and char.isalnum() for char in name):
        return _symbol_words(name)
    words: list[str] = []
    for run in _RUNS.finditer(name):
        text = run.group()
        if text[0].isascii() and text[0].isalnum():
            words.extend(_camel_words(text))
        elif text[0] in "_-" or text[0].isspace():
            continue
        else:
            words.extend(_symbol_words(text))
    if words[0][0].isdigit():
        words.insert(0, "num")
    return tuple(words)


def _camel_words(text: str) -> list[str]:
    return [word.lower() for word in _CAMEL.findall(text)]


def _symbol_words(text: str) -> tuple[str, ...]:
    # Greedy longest match through the symbol table.
    words: list[str] = []
    i = 0
    while i < len(text):
        for size in range(min(_LONGEST_SYMBOL, len(text) - i), 0, -1):
            chunk = text[i : i + size]
            if chunk in SYMBOL_NAMES:
                words.extend(_camel_words(SYMBOL_NAMES[chunk]))
                i += size
                break
        else:
            words.append(f"u{ord(text[i]):04x}")
            i += 1
    return tuple(words)


@dataclass(frozen=True)
class Conventions:
    """How words are rendered into identifiers for one target language."""

    type_suffix: str = "Node"
    tree_suffix: str = "Tree"
    node_constant_prefix: str = "NODE_TYPE_"
    field_constant_prefix: str = "FIELD_"
    keywords: frozenset[str] = frozenset(keyword.kwlist)
    reserved_members: frozenset[str] = frozenset()

    def pascal(self, words: Iterable[str]) -> str:
        return "".join(word[:1].upper() + word[1:] for word in words)

    def snake(self, words: Iterable[str]) -> str:
        return "_".join(words)

    def type_identifier(self, words: Iterable[str]) -> str:
        return self.pascal(words) + self.type_suffix

    def tree_identifier(self, grammar_name: str) -> str:
        return self.pascal(split_words(grammar_name)) + self.tree_suffix

    def node_constant(self, words: Iterable[str]) -> str:
        return self.node_constant_prefix + "_".join(word.upper() for word in words)

    def field_constant(self, words: Iterable[str]) -> str:
        return self.field_constant_prefix + "_".join(word.upper() for word in words)

    def member_identifier(self, words: Iterable[str]) -> str:
        name = self.snake(words)
        if name in self.keywords or name in self.reserved_members:
            name += "_"
        return name


def _python_reserved_members() -> frozenset[str]:
    from tsgen.runtime import TypedNode

    public = {name for name in dir(TypedNode) if not name.startswith("_")}
    return frozenset(public | {"children"})


PYTHON_CONVENTIONS = Conventions(reserved_members=_python_reserved_members())


@dataclass(frozen=True)
class TypeIdentifiers:
    """Identifiers synthesized for one node type."""

    ref: TypeRef
    words: tuple[str, ...]
    type_name: str
    constant: str
    snake: str


@dataclass(frozen=True)
class FieldIdentifiers:
    """Identifiers synthesized for one field name."""

    name: str
    words: tuple[str, ...]
    accessor: str
    constant: str


@dataclass(frozen=True)
class IdentifierTable:
    """Result of one synthesis run; read-only."""

    types: Mapping[TypeRef, TypeIdentifiers]
    fields: Mapping[str, FieldIdentifiers]
    conventions: Conventions = field(default=PYTHON_CONVENTIONS)

    def for_type(self, ref: TypeRef) -> TypeIdentifiers:
        return self.types[ref]

    def for_field(self, name: str) -> FieldIdentifiers:
        return self.fields[name]


def synthesize(
    refs: Iterable[TypeRef],
    field_names: Iterable[str] = (),
    conventions: Conventions = PYTHON_CONVENTIONS,
) -> IdentifierTable:
    """Assign identifiers to every type reference and field name.

    The result depends only on the set of inputs, never on their order.

    Raises:
        DuplicateIdentifierError: If two symbols still share an identifier
            after disambiguation, or two field names collide.
    """
    ordered = sorted(set(refs), key=lambda ref: (ref.name, not ref.named))
    words = {ref: split_words(ref.name) for ref in ordered}

    def keys(ref: TypeRef) -> tuple[str, str]:
        return (
            conventions.type_identifier(words[ref]),
            conventions.node_constant(words[ref]),
        )

    for group in _collision_groups(ordered, keys):
        for ref in group:
            words[ref] = words[ref] + ("named" if ref.named else "anon")
        logger.debug(
            "Disambiguated colliding symbols: %s", ", ".join(str(r) for r in group)
        )

    types = {
        ref: TypeIdentifiers(
            ref=ref,
            words=words[ref],
            type_name=conventions.type_identifier(words[ref]),
            constant=conventions.node_constant(words[ref]),
            snake=conventions.snake(words[ref]),
        )
        for ref in ordered
    }
    _check_unique(
        ordered,
        lambda ref: (types[ref].type_name, types[ref].constant),
        str,
    )

    names = sorted(set(field_names))
    fields = {}
    for name in names:
        field_words = split_words(name)
        fields[name] = FieldIdentifiers(
            name=name,
            words=field_words,
            accessor=conventions.member_identifier(field_words),
            constant=conventions.field_constant(field_words),
        )
    _check_unique(
        names,
        lambda name: (fields[name].accessor, fields[name].constant),
        repr,
    )

    return IdentifierTable(types=types, fields=fields, conventions=conventions)


def _collision_groups(items, keys) -> list[list]:
    """Group items that share any key, transitively (union-find)."""
    parent = {item: item for item in items}

    def find(item):
        while parent[item] != item:
            parent[item] = parent[parent[item]]
            item = parent[item]
        return item

    owner = {}
    for item in items:
        for key in keys(item):
            if key in owner:
                parent[find(item)] = find(owner[key])
            else:
                owner[key] = item

    groups: dict = {}
    for item in items:
        groups.setdefault(find(item), []).append(item)
    return [group for group in groups.values() if len(group) > 1]


def _check_unique(items, keys, spell) -> None:
    owner = {}
    for item in items:
        for key in keys(item):
            if key in owner:
                raise DuplicateIdentifierError(
                    key, sorted([spell(owner[key]), spell(item)])
                )
            owner[key] = item


__all__ = [
    "SYMBOL_NAMES",
    "Conventions",
    "PYTHON_CONVENTIONS",
    "TypeIdentifiers",
    "FieldIdentifiers",
    "IdentifierTable",
    "split_words",
    "synthesize",
]
