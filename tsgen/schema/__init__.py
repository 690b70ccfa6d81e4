"""Readers for the tree-sitter description files (node-types and grammar).

Import-light: nothing here depends on the graph or on rendering.
"""

from __future__ import annotations

from .grammar import GRAMMAR_FILENAME, GrammarFile, load_grammar, parse_grammar
from .node_types import (
    NODE_TYPES_FILENAME,
    FieldSpec,
    NodeTypeDecl,
    NodeTypesDocument,
    TypeRef,
    load_node_types,
    parse_node_types,
)

__all__ = [
    "GRAMMAR_FILENAME",
    "NODE_TYPES_FILENAME",
    "FieldSpec",
    "GrammarFile",
    "NodeTypeDecl",
    "NodeTypesDocument",
    "TypeRef",
    "load_grammar",
    "load_node_types",
    "parse_grammar",
    "parse_node_types",
]
