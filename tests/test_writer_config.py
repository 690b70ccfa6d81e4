from pathlib import Path

import pytest

from tsgen.config import ForLanguage, GeneratorConfig
from tsgen.writer import write_output


def test_default_paths():
    config = GeneratorConfig()
    assert config.node_types_path == Path("src/node-types.json")
    assert config.grammar_path == Path("src/grammar.json")
    assert config.constants_path == Path("bindings/python/nodes.py")
    assert config.wrapper_path == Path("bindings/python/wrapper.py")


def test_output_directory_override(tmp_path: Path):
    config = GeneratorConfig(output_directory=tmp_path, constants_module="kinds")
    assert config.constants_path == tmp_path / "kinds.py"
    assert config.for_language is ForLanguage.PYTHON


def test_module_names_must_be_identifiers():
    with pytest.raises(ValueError, match="constants_module"):
        GeneratorConfig(constants_module="bad-name")


def test_write_output_creates_parents(tmp_path: Path):
    target = tmp_path / "a" / "b" / "out.py"
    assert write_output("x = 1\n", target) == target
    assert target.read_text(encoding="utf-8") == "x = 1\n"
    assert list(target.parent.iterdir()) == [target]


def test_write_output_replaces_existing(tmp_path: Path):
    target = tmp_path / "out.py"
    target.write_text("old", encoding="utf-8")
    write_output("new", target)
    assert target.read_text(encoding="utf-8") == "new"
