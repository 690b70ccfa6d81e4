import json

import pytest

from tsgen.errors import SchemaError
from tsgen.schema import load_grammar, parse_grammar
from tsgen.schema.grammar import AliasRule, FieldRule, PrecRule, SymbolRule


def test_calc_grammar_metadata(calc_grammar):
    assert calc_grammar.name == "calc"
    assert calc_grammar.start_rule == "program"
    assert calc_grammar.word == "identifier"
    assert calc_grammar.supertypes == ("_expression", "_statement")


def test_field_and_symbol_names(calc_grammar):
    assert calc_grammar.field_names() == {
        "alternative",
        "arguments",
        "condition",
        "consequence",
        "function",
        "left",
        "operator",
        "right",
    }
    assert "_expression" in calc_grammar.symbol_names()
    assert "comment" not in calc_grammar.symbol_names()


def test_prec_rule_keeps_variant(calc_grammar):
    rule = calc_grammar.rules["binary_expression"]
    assert isinstance(rule, PrecRule)
    assert rule.type == "PREC_LEFT"
    assert rule.value == 1


def test_walk_is_depth_first(calc_grammar):
    kinds = [rule.type for name, rule in calc_grammar.walk() if name == "program"]
    assert kinds == ["REPEAT", "SYMBOL"]


def test_alias_and_named_precedence():
    grammar = parse_grammar(
        json.dumps(
            {
                "name": "tiny",
                "rules": {
                    "root": {
                        "type": "PREC_DYNAMIC",
                        "value": "high",
                        "content": {
                            "type": "ALIAS",
                            "value": "word",
                            "named": True,
                            "content": {"type": "SYMBOL", "name": "_ident"},
                        },
                    },
                    "_ident": {"type": "PATTERN", "value": "[a-z]+", "flags": "i"},
                },
            }
        )
    )
    rules = [rule for _, rule in grammar.walk()]
    assert any(isinstance(rule, AliasRule) and rule.value == "word" for rule in rules)
    assert any(isinstance(rule, SymbolRule) for rule in rules)
    assert not any(isinstance(rule, FieldRule) for rule in rules)


def test_unknown_rule_type_rejected():
    with pytest.raises(SchemaError):
        parse_grammar(
            json.dumps({"name": "bad", "rules": {"a": {"type": "LOOP", "content": {}}}})
        )


def test_invalid_rule_name_rejected():
    with pytest.raises(SchemaError):
        parse_grammar(
            json.dumps({"name": "bad", "rules": {"1a": {"type": "BLANK"}}})
        )


def test_grammar_must_be_object():
    with pytest.raises(SchemaError, match="expected a JSON object"):
        parse_grammar("[]")


def test_invalid_utf8_grammar_is_a_schema_error(tmp_path):
    path = tmp_path / "grammar.json"
    path.write_bytes(b'{"name": "\xfe"}')
    with pytest.raises(SchemaError, match="invalid UTF-8"):
        load_grammar(path)
