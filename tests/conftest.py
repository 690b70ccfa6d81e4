"""Shared pytest fixtures for tsgen tests."""

import importlib
import json
import sys
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from tsgen.config import GeneratorConfig
from tsgen.generate import generate_constants, generate_wrapper
from tsgen.graph import build_type_graph
from tsgen.schema import load_grammar, load_node_types, parse_node_types

FIXTURES = Path(__file__).parent / "fixtures"


@dataclass(eq=False)
class FakeNode:
    """Minimal stand-in for ``tree_sitter.Node``.

    ``field_names`` runs parallel to ``children``; ``None`` marks a child
    without a field name.
    """

    type: str
    is_named: bool = True
    children: list = field(default_factory=list)
    field_names: list = field(default_factory=list)
    start_byte: int = 0
    end_byte: int = 0
    text: bytes | None = None

    @property
    def start_point(self):
        return (0, self.start_byte)

    @property
    def end_point(self):
        return (0, self.end_byte)

    def child_by_field_name(self, name):
        for child, child_field in zip(self.children, self.field_names):
            if child_field == name:
                return child
        return None

    def children_by_field_name(self, name):
        return [
            child
            for child, child_field in zip(self.children, self.field_names)
            if child_field == name
        ]

    def field_name_for_child(self, child_index):
        return self.field_names[child_index]


@dataclass
class FakeTree:
    root_node: FakeNode


def make_node(kind, *parts, named=True, text=None, start_byte=0, end_byte=0):
    """Build a FakeNode; ``parts`` are ``(field, child)`` pairs or bare children."""
    node = FakeNode(
        type=kind, is_named=named, text=text, start_byte=start_byte, end_byte=end_byte
    )
    for part in parts:
        if isinstance(part, tuple):
            field_name, child = part
        else:
            field_name, child = None, part
        node.children.append(child)
        node.field_names.append(field_name)
    return node


def node_types(*entries, source="<test>"):
    """Parse a node-types document from plain dict entries."""
    return parse_node_types(json.dumps(list(entries)), source=source)


def ref(name, named=True):
    return {"type": name, "named": named}


def slot(*types, required=True, multiple=False):
    return {"multiple": multiple, "required": required, "types": list(types)}


@pytest.fixture
def make():
    """Fixture providing the make_node helper."""
    return make_node


@pytest.fixture(scope="session")
def fixtures_dir() -> Path:
    return FIXTURES


@pytest.fixture(scope="session")
def calc_document():
    return load_node_types(FIXTURES / "node-types.json")


@pytest.fixture(scope="session")
def calc_grammar():
    return load_grammar(FIXTURES / "grammar.json")


@pytest.fixture(scope="session")
def calc_graph(calc_document, calc_grammar):
    return build_type_graph(calc_document, calc_grammar)


@pytest.fixture
def calc_input(tmp_path: Path) -> Path:
    """Copy of the calc fixtures laid out as a grammar's ``src`` directory."""
    src = tmp_path / "src"
    src.mkdir()
    for name in ("node-types.json", "grammar.json"):
        (src / name).write_text((FIXTURES / name).read_text(encoding="utf-8"), encoding="utf-8")
    return src


@pytest.fixture(scope="session")
def calc_bindings(tmp_path_factory):
    """Generate, then import, the calc constants and wrapper modules."""
    root = tmp_path_factory.mktemp("bindings")
    package = root / "calc_bindings"
    config = GeneratorConfig(input_directory=FIXTURES, output_directory=package)
    generate_constants(config)
    generate_wrapper(config)
    (package / "__init__.py").write_text("", encoding="utf-8")

    sys.path.insert(0, str(root))
    try:
        nodes = importlib.import_module("calc_bindings.nodes")
        wrapper = importlib.import_module("calc_bindings.wrapper")
        yield nodes, wrapper
    finally:
        sys.path.remove(str(root))
        for name in [m for m in sys.modules if m.split(".")[0] == "calc_bindings"]:
            del sys.modules[name]
