"""
Quoter Test Suite
=================

Tests for turning syntax trees into constructor expressions and back.

The central property is fidelity: for every node N,

    evaluate(render(Quoter().quote(N))) == N

Test Organization
-----------------
- TestRoundTrip: every node of a corpus covering all node kinds
- TestCatalogs: every member of every enum catalog
- TestOrderAndOptionality: list order/length and absent children
- TestIdempotence: repeated quoting and fresh rebuilt trees
- TestDefects: cycles, wrong literal types, unhandled node kinds
- TestLiterals: scalar emitters
- TestRendering: compact and pretty output, namespaces
- TestNesting: bracket depth limits, subtree helpers, direct building
"""

import dataclasses
import math

import pytest
from glsl_quasiquote.errors import NestingError, QuoteError, UnhandledNodeError
from glsl_quasiquote.glsl import parse_source, syntax
from glsl_quasiquote.quote import (
    Call,
    ConstructorRenderer,
    Literal,
    Quoter,
    QuoterOptions,
    Reference,
    Sequence,
    Subtree,
    build,
    evaluate,
    render,
)
from glsl_quasiquote.quote.constructor import hoist, nesting, subtree_names
from glsl_quasiquote.quote.quoted import (
    NONE,
    quote_enum,
    quote_float,
    quote_int,
    quote_optional,
    quote_sequence,
    quote_uint,
)
from glsl_quasiquote.quote.tokenizer import CATALOG_ENUMS


# =============================================================================
# Corpus
# =============================================================================

CORPUS_SOURCE = """\
#version 450 core
#extension all : warn
#extension GL_ARB_gpu_shader_fp64 : enable
precision mediump float;
layout(std140, binding = 1, shared) uniform Lights {
    vec3 colors[4];
    float count;
} lights[];
invariant gl_Position;
subroutine(Shade) uniform int active;
precise out float depth;
struct Material { float shininess; } material;
Material fallback;
float weights[] = { 1.0, 2.0 }, bias = 0.5;
double scale = 2.0lf;
uint mask = 0xFFu;
vec4 shade(in vec3 n, float);
void main(void) {
    int i = 0, j;
    bool done = false;
    vec3 c = vec3(1.0, 2.0, 3.0);
    c.x += -c.y * 2.0;
    float k = done ? c[0] : c[i + 1];
    i++;
    j--;
    i = (j, 3);
    c.length();
    if (done) discard; else { }
    if (!done) ;
    switch (i) { case 1: break; default: continue; }
    while (bool go = i < 3) { i = i << 1; }
    do { j = ~j; } while (j != 0);
    for (int n = 0; n < 4; ++n) { }
    for (i = 0; ; ) { return; }
    return;
}
"""


def walk(value):
    """Yield every syntax node reachable from value, parents first."""
    if isinstance(value, list):
        for item in value:
            yield from walk(item)
    elif isinstance(value, syntax.Node):
        yield value
        for field in dataclasses.fields(value):
            yield from walk(getattr(value, field.name))


def concrete_node_classes() -> set:
    """All leaf node classes of the syntax module."""
    classes = set()
    pending = [syntax.Node]
    while pending:
        cls = pending.pop()
        subclasses = [c for c in cls.__subclasses__() if c.__module__ == syntax.__name__]
        if not subclasses and cls is not syntax.Node:
            classes.add(cls)
        pending.extend(subclasses)
    return classes


def round_trip(node, options=None):
    options = options or QuoterOptions()
    return evaluate(render(Quoter().quote(node), options), options.namespace)


@pytest.fixture(scope="module")
def corpus():
    return parse_source(CORPUS_SOURCE, "corpus.glsl")


# =============================================================================
# Round-Trip Tests
# =============================================================================

class TestRoundTrip:
    """quote -> render -> evaluate rebuilds an equal tree."""

    def test_corpus_covers_every_node_kind(self, corpus):
        """Every concrete node class appears somewhere in the corpus."""
        found = {type(node) for node in walk(corpus)}
        missing = concrete_node_classes() - found
        assert not missing, sorted(cls.__name__ for cls in missing)

    def test_whole_translation_unit(self, corpus):
        assert round_trip(corpus) == corpus

    def test_whole_translation_unit_compact(self, corpus):
        assert round_trip(corpus, QuoterOptions(pretty=False)) == corpus

    def test_every_node_individually(self, corpus):
        for node in walk(corpus):
            rebuilt = round_trip(node)
            assert rebuilt == node, type(node).__name__
            assert type(rebuilt) is type(node)

    def test_empty_translation_unit(self):
        assert round_trip([]) == []

    def test_hand_built_tree(self):
        node = syntax.FunctionDefinition(
            prototype=syntax.FunctionPrototype(
                ty=syntax.FullySpecifiedType(
                    qualifier=None,
                    ty=syntax.TypeSpecifier(ty=syntax.TypeSpecifierNonArray.INT),
                ),
                name="test",
                parameters=[],
            ),
            statement=syntax.CompoundStatement(statement_list=[
                syntax.ReturnStatement(expr=syntax.FloatConst(value=3.0)),
            ]),
        )
        assert round_trip([node]) == [node]

    def test_identifier_text_is_exact(self):
        node = syntax.Variable(ident="gl_FragCoord_x2")
        assert round_trip(node).ident == "gl_FragCoord_x2"

    def test_unusual_string_content(self):
        """Owned strings survive quoting characters."""
        node = syntax.SpecificExtension(name="it's \"quoted\"\\")
        assert round_trip(node) == node

    @pytest.mark.parametrize("value", [0, 1, -1, 2147483647, -2147483648])
    def test_int_values(self, value):
        assert round_trip(syntax.IntConst(value=value)).value == value

    @pytest.mark.parametrize("value", [0.0, -0.0, 0.1, 1e-30, 3.4028234663852886e38])
    def test_float_values_exact(self, value):
        rebuilt = round_trip(syntax.FloatConst(value=value))
        assert rebuilt.value == value
        assert math.copysign(1.0, rebuilt.value) == math.copysign(1.0, value)

    def test_infinities(self):
        assert round_trip(syntax.DoubleConst(value=float("inf"))).value == float("inf")
        assert round_trip(syntax.FloatConst(value=float("-inf"))).value == float("-inf")

    def test_nan(self):
        assert math.isnan(round_trip(syntax.FloatConst(value=float("nan"))).value)

    @pytest.mark.parametrize("source", [
        "float x[2] = float[2](1.0, 2.0);",
        "vec3 v[] = vec3[](vec3(0.0), vec3(1.0));",
        "Light ls[2] = Light[2](a, b);",
    ])
    def test_array_constructors(self, source):
        unit = parse_source(source)
        assert round_trip(unit) == unit

    def test_build_without_rendering(self, corpus):
        assert build(Quoter().quote(corpus)) == corpus

    def test_build_makes_fresh_nodes(self, corpus):
        expr = Quoter().quote(corpus)
        first, second = build(expr), build(expr)
        assert first == second
        assert first[0] is not second[0]


# =============================================================================
# Catalog Tests
# =============================================================================

def catalog_members():
    return [member for enum_type in CATALOG_ENUMS for member in enum_type]


class TestCatalogs:
    """Every enum member is reproduced as the same member."""

    @pytest.mark.parametrize("member", catalog_members(), ids=repr)
    def test_member_round_trip(self, member):
        assert round_trip(member) is member

    @pytest.mark.parametrize("member", list(syntax.TypeSpecifierNonArray), ids=repr)
    def test_builtin_type_in_tree(self, member):
        node = syntax.TypeSpecifier(ty=member, array_specifier=None)
        assert round_trip(node) == node

    @pytest.mark.parametrize("member", list(syntax.StorageQualifier), ids=repr)
    def test_storage_qualifier_in_tree(self, member):
        node = syntax.TypeQualifier(qualifiers=[member])
        assert round_trip(node) == node

    @pytest.mark.parametrize("op", list(syntax.BinaryOp), ids=repr)
    def test_binary_operator_in_tree(self, op):
        node = syntax.Binary(op=op, left=syntax.Variable(ident="a"), right=syntax.IntConst(value=1))
        assert round_trip(node) == node

    @pytest.mark.parametrize("op", list(syntax.AssignmentOp), ids=repr)
    def test_assignment_operator_in_tree(self, op):
        node = syntax.Assignment(target=syntax.Variable(ident="a"), op=op, value=syntax.IntConst(value=1))
        assert round_trip(node) == node

    @pytest.mark.parametrize("op", list(syntax.UnaryOp), ids=repr)
    def test_unary_operator_in_tree(self, op):
        node = syntax.Unary(op=op, expr=syntax.Variable(ident="a"))
        assert round_trip(node) == node

    def test_member_is_a_reference(self):
        expr = Quoter().quote(syntax.TypeSpecifierNonArray.VEC3)
        assert expr == Reference(("TypeSpecifierNonArray", "VEC3"))


# =============================================================================
# Order and Optionality Tests
# =============================================================================

class TestOrderAndOptionality:
    """Sequences keep order and length; absent stays absent."""

    @pytest.mark.parametrize("count", [0, 1, 5])
    def test_call_arguments(self, count):
        node = syntax.FunCall(
            fun=syntax.FunName(name="f"),
            args=[syntax.IntConst(value=i) for i in range(count)],
        )
        rebuilt = round_trip(node)
        assert [arg.value for arg in rebuilt.args] == list(range(count))

    @pytest.mark.parametrize("count", [0, 1, 4])
    def test_statements(self, count):
        node = syntax.CompoundStatement(statement_list=[
            syntax.ExpressionStatement(expr=syntax.Variable(ident=f"s{i}")) for i in range(count)
        ])
        rebuilt = round_trip(node)
        assert [s.expr.ident for s in rebuilt.statement_list] == [f"s{i}" for i in range(count)]

    def test_qualifier_order(self):
        node = syntax.TypeQualifier(qualifiers=[
            syntax.StorageQualifier.OUT,
            syntax.InterpolationQualifier.FLAT,
            syntax.PreciseQualifier(),
            syntax.StorageQualifier.IN,
        ])
        assert round_trip(node).qualifiers == node.qualifiers

    def test_absent_children(self):
        node = syntax.SingleDeclaration(
            ty=syntax.FullySpecifiedType(
                qualifier=None,
                ty=syntax.TypeSpecifier(ty=syntax.TypeSpecifierNonArray.FLOAT),
            ),
            name=None,
            array_specifier=None,
            initializer=None,
        )
        rebuilt = round_trip(node)
        assert rebuilt.name is None
        assert rebuilt.array_specifier is None
        assert rebuilt.initializer is None
        assert rebuilt.ty.qualifier is None

    def test_present_children(self):
        node = syntax.ReturnStatement(expr=syntax.BoolConst(value=True))
        assert round_trip(node).expr == syntax.BoolConst(value=True)

    def test_absent_rendered_as_none(self):
        expr = Quoter().quote(syntax.ReturnStatement(expr=None))
        assert isinstance(expr, Call)
        assert expr.callee == Reference(("ReturnStatement",))
        assert expr.arguments[0].value is NONE
        assert render(expr, QuoterOptions(pretty=False)) == "syntax.ReturnStatement(expr=None)"


# =============================================================================
# Idempotence Tests
# =============================================================================

class TestIdempotence:
    """Quoting has no hidden state."""

    def test_same_tree_same_output(self, corpus):
        quoter = Quoter()
        first = render(quoter.quote(corpus))
        second = render(quoter.quote(corpus))
        assert first == second

    def test_fresh_quoters_agree(self, corpus):
        assert Quoter().quote(corpus) == Quoter().quote(corpus)

    def test_each_evaluation_builds_a_new_tree(self, corpus):
        source = render(Quoter().quote(corpus))
        first = evaluate(source)
        second = evaluate(source)
        assert first == second
        assert first is not second
        assert first[0] is not second[0]

    def test_shared_subtree_is_not_a_cycle(self):
        shared = syntax.Variable(ident="a")
        node = syntax.Binary(op=syntax.BinaryOp.MULT, left=shared, right=shared)
        assert round_trip(node) == node


# =============================================================================
# Defect Tests
# =============================================================================

class TestDefects:
    """Malformed hand-built trees are rejected with QuoteError."""

    def test_cycle(self):
        node = syntax.Unary(op=syntax.UnaryOp.MINUS, expr=None)
        node.expr = node
        with pytest.raises(QuoteError, match="contains itself"):
            Quoter().quote(node)

    def test_statement_cycle(self):
        block = syntax.CompoundStatement(statement_list=[])
        loop = syntax.WhileStatement(
            condition=syntax.ConditionExpr(expr=syntax.BoolConst(value=True)),
            body=block,
        )
        block.statement_list.append(loop)
        with pytest.raises(QuoteError):
            Quoter().quote(block)

    def test_quoter_usable_after_cycle(self):
        quoter = Quoter()
        node = syntax.PostInc(expr=None)
        node.expr = node
        with pytest.raises(QuoteError):
            quoter.quote(node)
        assert quoter.quote(syntax.Variable(ident="x")) is not None

    @pytest.mark.parametrize("node", [
        syntax.IntConst(value=True),
        syntax.IntConst(value="3"),
        syntax.UIntConst(value=-1),
        syntax.BoolConst(value=1),
        syntax.FloatConst(value="1.0"),
        syntax.Variable(ident=3),
        syntax.Unary(op=syntax.BinaryOp.ADD, expr=syntax.Variable(ident="a")),
        syntax.FunCall(fun=syntax.FunName(name="f"), args="ab"),
    ], ids=repr)
    def test_wrong_literal_types(self, node):
        with pytest.raises(QuoteError):
            Quoter().quote(node)

    def test_unhandled_expression_kind(self):
        with pytest.raises(UnhandledNodeError) as exc_info:
            Quoter().quote(syntax.Expr())
        assert "no quoting case for expression node Expr" in str(exc_info.value)

    def test_unhandled_subclass(self):
        class Swizzle(syntax.Expr):
            pass

        node = syntax.ExpressionStatement(expr=Swizzle())
        with pytest.raises(UnhandledNodeError) as exc_info:
            Quoter().quote(node)
        assert exc_info.value.category == "expression"

    def test_not_a_syntax_value(self):
        with pytest.raises(UnhandledNodeError):
            Quoter().quote(object())

    def test_unhandled_is_a_quote_error(self):
        assert issubclass(UnhandledNodeError, QuoteError)


# =============================================================================
# Literal Emission Tests
# =============================================================================

class TestLiterals:
    """Scalar emitters and lifts."""

    def test_optional(self):
        assert quote_optional(None, quote_int) is NONE
        assert quote_optional(7, quote_int) == Literal("7")

    def test_sequence(self):
        assert quote_sequence([1, 2], quote_int) == Sequence((Literal("1"), Literal("2")))

    def test_sequence_rejects_non_list(self):
        with pytest.raises(QuoteError):
            quote_sequence({1, 2}, quote_int)

    def test_int_rejects_bool(self):
        with pytest.raises(QuoteError, match="bool"):
            quote_int(False)

    def test_uint_rejects_negative(self):
        with pytest.raises(QuoteError):
            quote_uint(-5)

    def test_float_specials(self):
        assert quote_float(float("nan")) == Literal("float('nan')")
        assert quote_float(float("inf")) == Literal("float('inf')")
        assert quote_float(float("-inf")) == Literal("float('-inf')")

    def test_float_repr(self):
        assert quote_float(0.1) == Literal("0.1")

    def test_enum_type_checked(self):
        with pytest.raises(QuoteError):
            quote_enum(syntax.UnaryOp.ADD, syntax.BinaryOp)


# =============================================================================
# Rendering Tests
# =============================================================================

class TestRendering:
    """Rendering constructor expressions to Python source."""

    def node(self):
        return syntax.Binary(
            op=syntax.BinaryOp.ADD,
            left=syntax.Variable(ident="a"),
            right=syntax.IntConst(value=1),
        )

    def test_compact(self):
        source = render(Quoter().quote(self.node()), QuoterOptions(pretty=False))
        assert source == (
            "syntax.Binary(op=syntax.BinaryOp.ADD, "
            "left=syntax.Variable(ident='a'), "
            "right=syntax.IntConst(value=1))"
        )

    def test_pretty_breaks_long_calls(self):
        source = render(Quoter().quote(self.node()), QuoterOptions(line_width=40))
        assert source == (
            "syntax.Binary(\n"
            "    op=syntax.BinaryOp.ADD,\n"
            "    left=syntax.Variable(ident='a'),\n"
            "    right=syntax.IntConst(value=1),\n"
            ")"
        )

    def test_pretty_keeps_short_calls_on_one_line(self):
        source = render(Quoter().quote(syntax.Variable(ident="a")))
        assert source == "syntax.Variable(ident='a')"

    def test_pretty_list(self):
        unit = [syntax.PreprocessorVersion(version=450, profile=None)] * 2
        source = render(Quoter().quote(unit), QuoterOptions(line_width=20, indent=2))
        lines = source.splitlines()
        assert lines[0] == "["
        assert lines[-1] == "]"
        assert all(line.startswith("  ") for line in lines[1:-1])
        assert evaluate(source) == unit

    def test_empty_list(self):
        assert render(Quoter().quote([])) == "[]"

    def test_custom_namespace(self):
        options = QuoterOptions(namespace="glsl_syntax", pretty=False)
        source = render(Quoter().quote(self.node()), options)
        assert source.startswith("glsl_syntax.Binary(")
        assert evaluate(source, "glsl_syntax") == self.node()

    def test_output_is_expression_only(self, corpus):
        """Rendered output compiles as a single Python expression."""
        compile(render(Quoter().quote(corpus)), "<test>", "eval")

    def test_invalid_namespace(self):
        with pytest.raises(ValueError):
            QuoterOptions(namespace="not valid")

    def test_negative_indent(self):
        with pytest.raises(ValueError):
            QuoterOptions(indent=-1)


# =============================================================================
# Nesting Tests
# =============================================================================

def chain(depth: int) -> syntax.Expr:
    """Left-nested 'a + a + ... + a' with depth Binary nodes."""
    expr = syntax.Variable(ident="a")
    for _ in range(depth):
        expr = syntax.Binary(op=syntax.BinaryOp.ADD, left=expr, right=syntax.Variable(ident="a"))
    return expr


def nested_lists(depth: int) -> Sequence:
    expr = Sequence(())
    for _ in range(depth - 1):
        expr = Sequence((expr, Literal("1", 1)))
    return expr


class TestNesting:
    """Bracket depth of rendered output and subtree helpers."""

    def test_nesting_depth(self):
        assert nesting(Literal("1", 1)) == 0
        assert nesting(Literal("'a(b'", "a(b")) == 0
        assert nesting(Literal("float('nan')", math.nan)) == 1
        assert nesting(Reference(("BinaryOp", "ADD"))) == 0
        assert nesting(Subtree("_glsl_subtree_0")) == 1
        assert nesting(nested_lists(5)) == 5

    def test_render_within_limit(self):
        expr = nested_lists(10)
        assert render(expr, QuoterOptions(max_nesting=10)).count("[") == 10

    def test_render_too_deep(self):
        options = QuoterOptions(max_nesting=10, filename="deep.frag")
        with pytest.raises(NestingError) as exc_info:
            render(nested_lists(11), options)
        assert exc_info.value.depth == 11
        assert exc_info.value.limit == 10
        assert str(exc_info.value).startswith("deep.frag:1:1: ")

    def test_nesting_error_is_quote_error(self):
        with pytest.raises(QuoteError):
            render(Quoter().quote(chain(150)))

    @pytest.mark.parametrize("limit", [2, 3, 7, 50])
    def test_hoisted_pieces_within_limit(self, limit):
        root, subtrees = hoist(Quoter().quote(chain(120)), limit, subtree_names())
        assert subtrees
        assert nesting(root) <= limit
        for _, subtree in subtrees:
            assert nesting(subtree) <= limit

    def test_shallow_tree_not_hoisted(self):
        expr = Quoter().quote(chain(3))
        root, subtrees = hoist(expr, 100, subtree_names())
        assert subtrees == []
        assert root == expr

    def test_helper_names_in_order(self):
        _, subtrees = hoist(nested_lists(10), 3, subtree_names("_h"))
        names = [name for name, _ in subtrees]
        assert names == [f"_h_{number}" for number in range(len(names))]

    def test_module_rendering_rebuilds_tree(self):
        node = chain(180)
        for pretty in (True, False):
            options = QuoterOptions(pretty=pretty, max_nesting=40)
            rendered = ConstructorRenderer(options).render_module(Quoter().quote(node))
            module = "\n\n".join(rendered.definitions) + f"\n\nRESULT = {rendered.expression}\n"
            namespace = {"syntax": syntax}
            exec(compile(module, "<module>", "exec"), namespace)
            assert namespace["RESULT"] == node

    def test_build_deep_tree(self):
        node = chain(180)
        assert build(Quoter().quote(node)) == node

    def test_build_rejects_subtree_calls(self):
        with pytest.raises(TypeError):
            build(Subtree("_glsl_subtree_0"))

    def test_pretty_measures_each_node_once(self):
        class CountingRenderer(ConstructorRenderer):
            measured = 0

            def _measure(self, expr):
                self.measured += 1
                return super()._measure(expr)

        expr = Quoter().quote(chain(90))
        renderer = CountingRenderer(QuoterOptions(line_width=60))
        renderer.render(expr)

        distinct = set()
        pending = [expr]
        while pending:
            node = pending.pop()
            if id(node) not in distinct:
                distinct.add(id(node))
                if isinstance(node, Call):
                    pending.extend(argument.value for argument in node.arguments)
                elif isinstance(node, Sequence):
                    pending.extend(node.items)
        assert renderer.measured <= len(distinct)

    @pytest.mark.parametrize("limit", [1, 201])
    def test_invalid_max_nesting(self, limit):
        with pytest.raises(ValueError):
            QuoterOptions(max_nesting=limit)
