"""
Quasiquote Driver Test Suite
============================

Tests for the two invocation surfaces, evaluation and the runtime
fallback.

Test Organization
-----------------
- TestScenarios: end-to-end fragments through both surfaces
- TestDirectTokens: token joining and the direct-token surface
- TestOpaqueString: literal stripping and the opaque-string surface
- TestFatalFailures: parse failures and malformed invocations
- TestEvaluation: evaluate() and glsl_str()
- TestDeepNesting: long operator chains and else-if ladders
"""

import io
import tokenize

import pytest
from glsl_quasiquote.errors import GLSLParseFailure, InvocationError, NestingError
from glsl_quasiquote.glsl import GLSLSyntaxError, parse_source, syntax
from glsl_quasiquote.quote import (
    QuoterOptions,
    evaluate,
    glsl_str,
    quote_module_source,
    quote_source,
    quote_string_literal,
    quote_tokens,
)
from glsl_quasiquote.quote.driver import join_tokens, strip_string_literal


T = syntax.TypeSpecifierNonArray


def full(member) -> syntax.FullySpecifiedType:
    return syntax.FullySpecifiedType(
        qualifier=None,
        ty=syntax.TypeSpecifier(ty=member, array_specifier=None),
    )


def empty_main() -> syntax.FunctionDefinition:
    """Tree of 'void main() {}'."""
    return syntax.FunctionDefinition(
        prototype=syntax.FunctionPrototype(
            ty=full(T.VOID),
            name="main",
            parameters=[],
        ),
        statement=syntax.CompoundStatement(statement_list=[]),
    )


def struct_s() -> syntax.FullySpecifiedType:
    """Type of 'struct S { float a, b, c; }'."""
    return syntax.FullySpecifiedType(
        qualifier=None,
        ty=syntax.TypeSpecifier(
            ty=syntax.StructSpecifier(
                name="S",
                fields=[
                    syntax.StructFieldSpecifier(
                        qualifier=None,
                        ty=syntax.TypeSpecifier(ty=T.FLOAT, array_specifier=None),
                        identifiers=[
                            syntax.ArrayedIdentifier(ident=name, array_spec=None)
                            for name in ("a", "b", "c")
                        ],
                    )
                ],
            ),
            array_specifier=None,
        ),
    )


def host_tokens(text: str) -> list:
    """Python tokens of host text, as a host build step would see them."""
    return list(tokenize.generate_tokens(io.StringIO(text).readline))


# =============================================================================
# Scenario Tests
# =============================================================================

class TestScenarios:
    """Complete fragments quoted and rebuilt."""

    def test_empty_main(self):
        unit = evaluate(quote_tokens("void main() {}"))
        assert unit == [empty_main()]

    def test_return_float(self):
        unit = evaluate(quote_tokens("int test() { return 3.; }"))
        definition = unit[0]
        assert definition.prototype.ty == full(T.INT)
        assert definition.prototype.name == "test"
        assert definition.statement.statement_list == [
            syntax.ReturnStatement(expr=syntax.FloatConst(value=3.0))
        ]

    def test_struct_declaration(self):
        unit = evaluate(quote_tokens("struct S { float a, b, c; };"))
        assert unit == [
            syntax.InitDeclaratorList(
                head=syntax.SingleDeclaration(ty=struct_s()),
                tail=[],
            )
        ]
        (field_specifier,) = unit[0].head.ty.ty.ty.fields
        assert [i.ident for i in field_specifier.identifiers] == ["a", "b", "c"]

    def test_struct_with_arrayed_instances(self):
        unit = evaluate(quote_tokens("struct S { float a, b, c; } foo[3], bar[12], zoo[];"))
        assert unit == [
            syntax.InitDeclaratorList(
                head=syntax.SingleDeclaration(
                    ty=struct_s(),
                    name="foo",
                    array_specifier=syntax.SizedArray(size=syntax.IntConst(value=3)),
                ),
                tail=[
                    syntax.SingleDeclarationNoType(
                        name="bar",
                        array_specifier=syntax.SizedArray(size=syntax.IntConst(value=12)),
                    ),
                    syntax.SingleDeclarationNoType(
                        name="zoo",
                        array_specifier=syntax.UnsizedArray(),
                    ),
                ],
            )
        ]

    def test_version_through_string_surface(self):
        text = '"""\n#version 330\nvoid main() {}\n"""'
        unit = evaluate(quote_string_literal(text))
        assert unit == [
            syntax.PreprocessorVersion(version=330, profile=None),
            empty_main(),
        ]

    def test_version_profile_through_string_surface(self):
        unit = evaluate(quote_string_literal('"""#version 330 core\n"""'))
        assert unit == [
            syntax.PreprocessorVersion(
                version=330,
                profile=syntax.PreprocessorVersionProfile.CORE,
            )
        ]

    def test_array_declarators(self):
        unit = evaluate(quote_tokens("float foo[3], bar[12], zoo[];"))
        declaration = unit[0]
        assert declaration.head.name == "foo"
        assert declaration.head.array_specifier == syntax.SizedArray(size=syntax.IntConst(value=3))
        assert [d.name for d in declaration.tail] == ["bar", "zoo"]
        assert declaration.tail[1].array_specifier == syntax.UnsizedArray()

    def test_surfaces_agree(self):
        source = "uniform vec4 tint; void main() { gl_FragColor = tint * 2.0; }"
        assert quote_tokens(source) == quote_string_literal(repr(source))

    def test_matches_parser(self):
        source = "vec3 f(vec3 v) { return normalize(v.xyz); }"
        assert evaluate(quote_source(source)) == parse_source(source)


# =============================================================================
# Direct-Token Surface Tests
# =============================================================================

class TestDirectTokens:
    """Host tokens re-rendered on one line."""

    def test_adjacent_tokens_stay_joined(self):
        tokens = host_tokens("x+ +y++")
        assert join_tokens(tokens) == "x+ +y++"

    def test_spacing_normalized(self):
        tokens = host_tokens("(a   =\n    b ;)")
        assert join_tokens(tokens) == "(a = b ;)"

    def test_accepts_token_list(self):
        tokens = host_tokens("float x = 1.0;")
        unit = evaluate(quote_tokens(tokens))
        assert unit[0].head.initializer == syntax.SimpleInitializer(
            expr=syntax.FloatConst(value=1.0)
        )

    def test_multi_line_fragment(self):
        fragment = """
            void main() {
                i++;
            }
        """
        unit = evaluate(quote_tokens(fragment))
        assert unit[0].statement.statement_list == [
            syntax.ExpressionStatement(expr=syntax.PostInc(expr=syntax.Variable(ident="i")))
        ]

    def test_block_comments_allowed(self):
        unit = evaluate(quote_tokens("float /* weight */ w;"))
        assert unit[0].head.name == "w"

    def test_host_comments_dropped(self):
        unit = evaluate(quote_tokens("float a; # host comment\nfloat b;"))
        assert [declaration.head.name for declaration in unit] == ["a", "b"]

    def test_host_comment_tokens_dropped(self):
        tokens = host_tokens("(vec2 p; # position\n)")[1:]
        assert join_tokens(tokens).startswith("vec2 p ;")

    def test_directive_fails(self):
        """Host line structure is lost, so #version has no newline."""
        with pytest.raises(GLSLParseFailure) as exc_info:
            quote_tokens("#version 450\nvoid main() {}")
        assert "newline" in str(exc_info.value)


# =============================================================================
# Opaque-String Surface Tests
# =============================================================================

class TestOpaqueString:
    """Exactly one string literal, interior passed through verbatim."""

    @pytest.mark.parametrize("literal,interior", [
        ('"abc"', "abc"),
        ("'abc'", "abc"),
        ('"""a\nb"""', "a\nb"),
        ("'''x'''", "x"),
        ('r"a\\nb"', "a\\nb"),
        ('u"abc"', "abc"),
        ('""', ""),
    ])
    def test_strip_string_literal(self, literal, interior):
        assert strip_string_literal(literal) == interior

    def test_escapes_not_processed(self):
        assert strip_string_literal('"a\\tb"') == "a\\tb"

    @pytest.mark.parametrize("literal", ['b"x"', 'f"x"', "x"])
    def test_strip_rejects(self, literal):
        with pytest.raises(ValueError):
            strip_string_literal(literal)

    def test_single_quoted_fragment(self):
        unit = evaluate(quote_string_literal('"precision highp float;"'))
        assert unit == [
            syntax.PrecisionDeclaration(
                qualifier=syntax.PrecisionQualifier.HIGH,
                ty=syntax.TypeSpecifier(ty=T.FLOAT, array_specifier=None),
            )
        ]

    def test_raw_string(self):
        unit = evaluate(quote_string_literal('r"float x;"'))
        assert unit[0].head.name == "x"

    def test_accepts_token_list(self):
        tokens = host_tokens('"void main() {}"')
        assert evaluate(quote_string_literal(tokens))[0].prototype.name == "main"

    def test_trailing_host_comment(self):
        unit = evaluate(quote_string_literal('"float x;"  # the shader'))
        assert unit[0].head.name == "x"

    def test_literals_outside_python_syntax(self):
        """1u and 1.0f only work through the string surface."""
        unit = evaluate(quote_string_literal('"uint a = 1u; float b = 1.0f;"'))
        assert unit[0].head.initializer.expr == syntax.UIntConst(value=1)
        assert unit[1].head.initializer.expr == syntax.FloatConst(value=1.0)


# =============================================================================
# Fatal Failure Tests
# =============================================================================

class TestFatalFailures:
    """Failures raise; nothing is returned."""

    def test_parse_failure_direct(self):
        with pytest.raises(GLSLParseFailure) as exc_info:
            quote_tokens("void main() { return }")
        error = exc_info.value
        assert str(error).startswith("GLSL error: ")
        assert isinstance(error.diagnostic, GLSLSyntaxError)
        assert error.__cause__ is error.diagnostic

    def test_parse_failure_string(self):
        with pytest.raises(GLSLParseFailure, match="GLSL error: "):
            quote_string_literal('"float x"')

    def test_filename_in_diagnostic(self):
        with pytest.raises(GLSLParseFailure) as exc_info:
            quote_source("float x", QuoterOptions(filename="lights.frag"))
        assert "lights.frag:1:" in str(exc_info.value)

    def test_no_string(self):
        with pytest.raises(InvocationError) as exc_info:
            quote_string_literal("")
        assert "single opaque string" in str(exc_info.value)
        assert "saw nothing" in str(exc_info.value)

    def test_two_strings(self):
        with pytest.raises(InvocationError, match="single opaque string"):
            quote_string_literal('"float x;" "float y;"')

    def test_tokens_instead_of_string(self):
        with pytest.raises(InvocationError) as exc_info:
            quote_string_literal("void main() {}")
        assert "'void'" in str(exc_info.value)

    def test_bytes_literal(self):
        with pytest.raises(InvocationError):
            quote_string_literal('b"void main() {}"')

    def test_f_string(self):
        with pytest.raises(InvocationError):
            quote_string_literal('f"void main() {}"')

    def test_invocation_error_has_location(self):
        with pytest.raises(InvocationError) as exc_info:
            quote_string_literal(host_tokens("x y"))
        assert exc_info.value.location is not None
        assert exc_info.value.location.line == 1


# =============================================================================
# Evaluation Tests
# =============================================================================

class TestEvaluation:
    """evaluate() and the runtime fallback."""

    def test_no_builtins(self):
        with pytest.raises(NameError):
            evaluate("__import__('os')")

    def test_custom_namespace(self):
        source = quote_source("float x;", QuoterOptions(namespace="gs"))
        assert evaluate(source, "gs") == parse_source("float x;")

    def test_glsl_str_runtime(self):
        source = "#version 450\nlayout(location = 0) out vec4 color;\nvoid main() {}\n"
        assert glsl_str(source) == parse_source(source)

    def test_glsl_str_fresh_trees(self):
        first = glsl_str("void main() {}")
        second = glsl_str("void main() {}")
        assert first == second
        assert first[0] is not second[0]

    def test_glsl_str_failure(self):
        with pytest.raises(GLSLParseFailure) as exc_info:
            glsl_str("void main() {", filename="broken.vert")
        assert "broken.vert" in str(exc_info.value)


# =============================================================================
# Deep Nesting Tests
# =============================================================================

def long_sum(terms: int) -> str:
    """A function returning 1.0 + 1.0 + ... with the given number of terms."""
    return "float f() { return " + " + ".join(["1.0"] * terms) + "; }"


def else_if_chain(branches: int) -> str:
    """An if statement followed by branches - 1 'else if' arms."""
    arms = [f"if (i == {k}) {{ x = {k}; }}" for k in range(branches)]
    return "void f(int i) { int x; " + " else ".join(arms) + " }"


class TestDeepNesting:
    """Trees deeper than a single Python expression can hold."""

    def test_glsl_str_long_sum(self):
        source = long_sum(200)
        assert glsl_str(source) == parse_source(source)

    def test_glsl_str_else_if_chain(self):
        source = else_if_chain(100)
        unit = glsl_str(source)
        assert unit == parse_source(source)
        selection = unit[0].statement.statement_list[1]
        assert isinstance(selection.rest, syntax.SelectionElse)

    def test_single_expression_refused(self):
        with pytest.raises(NestingError) as exc_info:
            quote_source(long_sum(200), QuoterOptions(filename="deep.frag"))
        assert str(exc_info.value).startswith("deep.frag:1:1: ")
        assert exc_info.value.depth > exc_info.value.limit

    @pytest.mark.parametrize("pretty", [True, False])
    def test_module_source_long_sum(self, pretty):
        source = long_sum(200)
        rendered = quote_module_source(source, QuoterOptions(pretty=pretty))
        assert rendered.definitions
        module = "\n\n".join(rendered.definitions) + f"\n\nRESULT = {rendered.expression}\n"
        namespace = {"syntax": syntax}
        exec(module, namespace)
        assert namespace["RESULT"] == parse_source(source)

    def test_module_source_else_if_chain(self):
        source = else_if_chain(100)
        rendered = quote_module_source(source)
        namespace = {"syntax": syntax}
        exec("\n\n".join(rendered.definitions) + f"\n\nRESULT = {rendered.expression}\n", namespace)
        assert namespace["RESULT"] == parse_source(source)

    def test_shallow_source_has_no_helpers(self):
        rendered = quote_module_source("void main() {}")
        assert rendered.definitions == []
        assert evaluate(rendered.expression) == [empty_main()]
