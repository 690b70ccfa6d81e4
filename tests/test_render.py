import pytest

from conftest import FakeTree, make_node
from tsgen.config import GeneratorConfig
from tsgen.constants import build_constants
from tsgen.emitter import emit_wrappers
from tsgen.errors import MissingFieldError, UnknownVariantError
from tsgen.render import Renderer


@pytest.fixture(scope="module")
def renderer():
    return Renderer(GeneratorConfig())


def test_constants_module_compiles(renderer, calc_graph):
    text = renderer.render_constants(build_constants(calc_graph))
    compile(text, "nodes.py", "exec")
    assert "for the calc grammar" in text
    assert "NODE_TYPE_BINARY_EXPRESSION = 'binary_expression'" in text
    assert "FIELD_OPERATOR = 'operator'" in text
    assert text.index("# Supertypes") < text.index("# Node types") < text.index("# Fields")


def test_wrapper_module_compiles(renderer, calc_graph):
    text = renderer.render_wrapper(emit_wrappers(calc_graph))
    compile(text, "wrapper.py", "exec")
    assert "from . import nodes as _k" in text
    assert "class BinaryExpressionNode(_rt.TypedNode):" in text
    assert "def as_expression(" in text
    assert "class CalcTree(_rt.TypedTree):" in text


def test_absolute_constants_import(calc_graph):
    config = GeneratorConfig(constants_module="calc_nodes", relative_imports=False)
    text = Renderer(config).render_wrapper(emit_wrappers(calc_graph))
    assert "import calc_nodes as _k" in text
    assert "from . import" not in text


def test_constants_values(calc_bindings):
    nodes, _ = calc_bindings
    assert nodes.NODE_TYPE_PLUS == "+"
    assert nodes.NODE_TYPE_L_PAREN == "("
    assert nodes.FIELD_LEFT == "left"
    assert (nodes.NODE_TYPE_BINARY_EXPRESSION, True) in nodes.NODE_KINDS
    assert (nodes.NODE_TYPE_IF, False) in nodes.NODE_KINDS
    assert nodes.FIELD_NAMES == {
        "alternative",
        "arguments",
        "condition",
        "consequence",
        "function",
        "left",
        "operator",
        "right",
    }


def binary(make, left, op, right):
    return make(
        "binary_expression",
        ("left", left),
        ("operator", make(op, named=False)),
        ("right", right),
    )


def test_generated_accessors(calc_bindings, make):
    _, wrapper = calc_bindings
    expression = binary(make, make("number", text=b"1"), "+", make("identifier", text=b"x"))
    statement = make("expression_statement", expression, make(";", named=False))
    program = make("program", statement, make("comment", text=b"# done"))

    root = wrapper.CalcTree(FakeTree(program)).root
    assert isinstance(root, wrapper.ProgramNode)
    (only,) = root.children
    assert isinstance(only, wrapper.ExpressionStatementNode)
    node = only.children
    assert isinstance(node, wrapper.BinaryExpressionNode)
    assert isinstance(node.left, wrapper.NumberNode)
    assert isinstance(node.operator, wrapper.PlusNode)
    assert node.right.text == "x"


def test_generated_optional_and_sequence(calc_bindings, make):
    _, wrapper = calc_bindings
    call = wrapper.CallExpressionNode.cast(
        make("call_expression", ("function", make("identifier", text=b"f")))
    )
    assert call.function.text == "f"
    assert not call.arguments
    assert call.arguments.to_list() == []

    condition = make("parenthesized_expression", make("number"))
    statement = wrapper.IfStatementNode.cast(
        make("if_statement", make("if", named=False), ("condition", condition))
    )
    assert statement.alternative is None
    assert isinstance(statement.condition.children, wrapper.NumberNode)


def test_downcast_to_union(calc_bindings, make):
    _, wrapper = calc_bindings
    assert isinstance(wrapper.as_expression(make("string")), wrapper.StringNode)
    with pytest.raises(UnknownVariantError):
        wrapper.as_expression(make("program"))
    with pytest.raises(UnknownVariantError):
        wrapper.as_expression(make("string", named=False))


def test_generated_field_kind_mismatch(calc_bindings, make):
    _, wrapper = calc_bindings
    node = wrapper.BinaryExpressionNode.cast(
        binary(make, make("else_clause"), "+", make("number"))
    )
    with pytest.raises(UnknownVariantError):
        node.left
    with pytest.raises(MissingFieldError):
        wrapper.BinaryExpressionNode.cast(make("binary_expression")).right


def test_generated_union_alias(calc_bindings):
    _, wrapper = calc_bindings
    table = wrapper._NODE_TYPE_EXPRESSION_VARIANTS
    assert set(table.variants) == {
        wrapper.BinaryExpressionNode,
        wrapper.CallExpressionNode,
        wrapper.IdentifierNode,
        wrapper.NumberNode,
        wrapper.ParenthesizedExpressionNode,
        wrapper.StringNode,
    }


def test_generated_children_slot_rejects_drift(calc_bindings, make):
    _, wrapper = calc_bindings
    assert wrapper._EXTRAS == {wrapper.CommentNode.KIND}
    program = wrapper.ProgramNode.cast(
        make("program", make("comment"), make("block"), make(";", named=False))
    )
    with pytest.raises(UnknownVariantError) as exc:
        program.children.to_list()
    assert exc.value.kind == "block"
