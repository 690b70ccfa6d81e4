import pytest

from tsgen.errors import DuplicateIdentifierError
from tsgen.naming import PYTHON_CONVENTIONS, split_words, synthesize
from tsgen.schema import TypeRef


def refs(*pairs):
    return [TypeRef(name=name, named=named) for name, named in pairs]


@pytest.mark.parametrize(
    "name, words",
    [
        ("binary_expression", ("binary", "expression")),
        ("_expression", ("expression",)),
        ("camelCaseHTTPServer", ("camel", "case", "http", "server")),
        ("kebab-case", ("kebab", "case")),
        ("+", ("plus",)),
        ("(", ("l", "paren")),
        ("!=", ("bang", "eq")),
        ("<=>", ("lt", "eq", "gt")),
        ("...", ("ellipsis",)),
        ("#include", ("hash", "include")),
        ("_", ("underscore",)),
        ("§", ("u00a7",)),
        ("2d_point", ("num", "2", "d", "point")),
    ],
)
def test_split_words(name, words):
    assert split_words(name) == words


def test_named_and_anonymous_if_are_disambiguated():
    table = synthesize(refs(("if", True), ("if", False)))
    named = table.for_type(TypeRef(name="if", named=True))
    anon = table.for_type(TypeRef(name="if", named=False))
    assert named.type_name == "IfNamedNode"
    assert anon.type_name == "IfAnonNode"
    assert named.constant == "NODE_TYPE_IF_NAMED"
    assert anon.constant == "NODE_TYPE_IF_ANON"


def test_unambiguous_symbol_is_not_suffixed():
    table = synthesize(refs(("+", False), ("if", False)))
    assert table.for_type(TypeRef(name="+", named=False)).type_name == "PlusNode"
    assert table.for_type(TypeRef(name="if", named=False)).type_name == "IfNode"


def test_synthesis_is_order_independent():
    pairs = [("if", True), ("if", False), ("+", False), ("binary_expression", True)]
    forward = synthesize(refs(*pairs), ["left", "right"])
    backward = synthesize(refs(*reversed(pairs)), ["right", "left"])
    assert forward.types == backward.types
    assert forward.fields == backward.fields


def test_identifiers_are_python_identifiers(calc_graph):
    for node in calc_graph:
        assert node.identifier.isidentifier()
        assert node.identifiers.constant.isidentifier()
    for ids in calc_graph.identifiers.fields.values():
        assert ids.accessor.isidentifier()


def test_undisambiguable_names_raise():
    with pytest.raises(DuplicateIdentifierError) as exc:
        synthesize(refs(("_expression", True), ("expression", True)))
    assert set(exc.value.spellings) == {"_expression", "expression"}


def test_field_accessors_avoid_keywords_and_reserved_members():
    table = synthesize([], ["class", "text", "children", "value"])
    assert table.for_field("class").accessor == "class_"
    assert table.for_field("text").accessor == "text_"
    assert table.for_field("children").accessor == "children_"
    assert table.for_field("value").accessor == "value"
    assert table.for_field("class").constant == "FIELD_CLASS"


def test_colliding_field_names_raise():
    with pytest.raises(DuplicateIdentifierError):
        synthesize([], ["fooBar", "foo_bar"])


def test_tree_identifier():
    assert PYTHON_CONVENTIONS.tree_identifier("calc") == "CalcTree"
    assert PYTHON_CONVENTIONS.tree_identifier("c_sharp") == "CSharpTree"


def test_identifiers_distinct_across_document(calc_graph):
    assert len({node.identifier for node in calc_graph}) == len(calc_graph)
    assert len({node.identifiers.constant for node in calc_graph}) == len(calc_graph)
    fields = calc_graph.identifiers.fields.values()
    assert len({ids.accessor for ids in fields}) == len(fields)
    assert len({ids.constant for ids in fields}) == len(fields)


def test_anonymous_plus_and_named_plus_are_distinct():
    table = synthesize(refs(("+", False), ("plus", True)))
    anon = table.for_type(TypeRef(name="+", named=False))
    named = table.for_type(TypeRef(name="plus", named=True))
    assert anon.type_name == "PlusAnonNode"
    assert named.type_name == "PlusNamedNode"
    assert anon.constant != named.constant
