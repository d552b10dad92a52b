"""
Quasiquote Driver
=================

Entry surfaces that take an embedded GLSL fragment and return Python
source for the constructor expression of its translation unit.

Surfaces
--------
quote_tokens(tokens)
    Direct-token surface. Takes the Python tokens written inside a
    ``glsl(...)`` invocation (or host source text, which is tokenized
    first). The tokens are joined on a single line: neighbours that
    touched in the host stay joined, others get one space. Host ``#``
    comments are dropped. Host line structure is lost, so preprocessor
    directives (which must end with a newline) cannot be written through
    this surface, and ``//`` comments swallow the rest of the fragment;
    use ``/* */`` instead.

quote_string_literal(tokens)
    Opaque-string surface. Takes exactly one Python string literal
    token (``glsl_str("...")``), optionally followed by host comments.
    The prefix and quote delimiters are removed and the interior is
    handed to the parser unchanged. Escape sequences are not
    interpreted, so a triple-quoted literal keeps its real newlines and
    directives work.

Both surfaces are fatal on failure: a parse failure raises
GLSLParseFailure ("GLSL error: ..."), a malformed invocation raises
InvocationError. Nothing is returned in either case.

The surfaces return one expression and raise NestingError for trees too
deep to fit in it. quote_module_source() renders for module output
instead, where deep subtrees become helper functions.

Runtime Helpers
---------------
evaluate(source) evaluates rendered output with the syntax module bound.
glsl_str(text) is the runtime fallback for hosts without a build step:
it parses, quotes and builds the tree straight from the constructor
expression, so nesting depth is no concern there.
"""

from typing import Iterable, Iterator, Optional, Union
import io
import logging
import tokenize

from glsl_quasiquote.errors import GLSLParseFailure, InvocationError, SourceLocation
from glsl_quasiquote.glsl import syntax
from glsl_quasiquote.glsl.errors import GLSLError
from glsl_quasiquote.glsl.parser import parse_source
from glsl_quasiquote.quote.constructor import (
    ConstructorExpr,
    ConstructorRenderer,
    RenderedModule,
    build,
    render,
)
from glsl_quasiquote.quote.options import QuoterOptions
from glsl_quasiquote.quote.tokenizer import Quoter

logger = logging.getLogger(__name__)

HostTokens = Union[str, Iterable[tokenize.TokenInfo]]

# Token types that carry no GLSL text
LAYOUT_TOKENS = (
    tokenize.NEWLINE,
    tokenize.NL,
    tokenize.INDENT,
    tokenize.DEDENT,
    tokenize.COMMENT,
    tokenize.ENDMARKER,
    tokenize.ENCODING,
)

STRING_PREFIXES = ("", "r", "u")


# =============================================================================
# Host Token Handling
# =============================================================================

def tokenize_fragment(text: str, filename: str = "<host>") -> list[tokenize.TokenInfo]:
    """
    Tokenize host source text as the argument list of an invocation.

    The text is wrapped in parentheses so that indentation inside it is
    irrelevant, exactly as it is between the parentheses of a call.

    Raises:
        InvocationError: If the host tokenizer rejects the text
    """
    wrapped = "(" + text + "\n)"
    try:
        tokens = list(tokenize.generate_tokens(io.StringIO(wrapped).readline))
    except (tokenize.TokenError, SyntaxError) as e:
        raise InvocationError(
            f"host tokenizer rejected the fragment: {e}",
            SourceLocation(filename, 1, 1),
            hint="write the fragment as a single string literal instead",
        ) from e

    significant = [token for token in tokens if token.type not in LAYOUT_TOKENS]
    # Drop the wrapping parentheses
    return significant[1:-1]


def _significant_tokens(tokens: HostTokens, filename: str) -> list[tokenize.TokenInfo]:
    if isinstance(tokens, str):
        return tokenize_fragment(tokens, filename)
    return [token for token in tokens if token.type not in LAYOUT_TOKENS]


def join_tokens(tokens: Iterable[tokenize.TokenInfo]) -> str:
    """
    Render host tokens as GLSL source on a single line.

    Tokens that were adjacent in the host ('+' '+', '1' '.' '0') stay
    joined; all others are separated by exactly one space.
    """
    parts = []
    previous_end = None

    for token in tokens:
        if token.type in LAYOUT_TOKENS:
            continue
        if previous_end is not None and token.start != previous_end:
            parts.append(" ")
        parts.append(token.string)
        previous_end = token.end

    return "".join(parts)


def _describe_tokens(tokens: list[tokenize.TokenInfo]) -> str:
    if not tokens:
        return "nothing"
    return "[" + ", ".join(repr(token.string) for token in tokens) + "]"


def _token_location(tokens: list[tokenize.TokenInfo], filename: str) -> Optional[SourceLocation]:
    if not tokens:
        return None
    row, col = tokens[0].start
    return SourceLocation(filename, row, col + 1)


def strip_string_literal(text: str) -> str:
    """
    Return the interior of a Python string literal, verbatim.

    Raises:
        ValueError: If text is not a plain (optionally r/u prefixed)
            string literal
    """
    prefix_length = 0
    while prefix_length < len(text) and text[prefix_length] not in "'\"":
        prefix_length += 1
    prefix = text[:prefix_length].lower()

    if prefix not in STRING_PREFIXES:
        raise ValueError(f"unsupported string prefix {prefix!r}")

    body = text[prefix_length:]
    for quote in ('"""', "'''", '"', "'"):
        if len(body) >= 2 * len(quote) and body.startswith(quote) and body.endswith(quote):
            return body[len(quote):-len(quote)]

    raise ValueError(f"not a string literal: {text!r}")


# =============================================================================
# Fragment Extraction
# =============================================================================

def direct_token_source(tokens: HostTokens, options: Optional[QuoterOptions] = None) -> str:
    """
    GLSL source text of a direct-token invocation.

    Raises:
        InvocationError: If host text cannot be tokenized
    """
    options = options or QuoterOptions()
    source = join_tokens(_significant_tokens(tokens, options.filename))
    logger.debug(f"Direct-token fragment: {source!r}")
    return source


def string_literal_source(tokens: HostTokens, options: Optional[QuoterOptions] = None) -> str:
    """
    GLSL source text of an opaque-string invocation.

    Raises:
        InvocationError: If the input is not a single plain string literal
    """
    options = options or QuoterOptions()
    significant = _significant_tokens(tokens, options.filename)

    if len(significant) != 1 or significant[0].type != tokenize.STRING:
        raise InvocationError(
            "incorrect invocation, please use a single opaque string; "
            f"saw {_describe_tokens(significant)}",
            _token_location(significant, options.filename),
            hint="write the shader as glsl_str(\"\"\"...\"\"\")",
        )

    token = significant[0]
    try:
        source = strip_string_literal(token.string)
    except ValueError as e:
        raise InvocationError(
            f"incorrect invocation, please use a single opaque string; {e}",
            _token_location(significant, options.filename),
            hint="bytes and f-strings are not accepted",
        ) from e

    logger.debug(f"Opaque-string fragment of {len(source)} character(s)")
    return source


# =============================================================================
# Quoting
# =============================================================================

def _parse(source: str, filename: str) -> syntax.TranslationUnit:
    try:
        return parse_source(source, filename)
    except GLSLError as e:
        raise GLSLParseFailure(e) from e


def quote_translation_unit(unit: syntax.TranslationUnit) -> ConstructorExpr:
    """Quote a parsed translation unit."""
    return Quoter().quote_translation_unit(unit)


def quote_source(source: str, options: Optional[QuoterOptions] = None) -> str:
    """
    Parse GLSL source and return the rendered constructor expression.

    Raises:
        GLSLParseFailure: If the source does not parse
        NestingError: If the tree is too deep for a single expression
    """
    options = options or QuoterOptions()
    unit = _parse(source, options.filename)
    return render(quote_translation_unit(unit), options)


def quote_module_source(
    source: str,
    options: Optional[QuoterOptions] = None,
    names: Optional[Iterator[str]] = None,
) -> RenderedModule:
    """
    Parse GLSL source and render it for module output.

    Subtrees deeper than options.max_nesting are returned as helper
    function definitions that the expression calls.

    Raises:
        GLSLParseFailure: If the source does not parse
    """
    options = options or QuoterOptions()
    unit = _parse(source, options.filename)
    rendered = ConstructorRenderer(options).render_module(quote_translation_unit(unit), names)
    if rendered.definitions:
        logger.debug(f"Hoisted {len(rendered.definitions)} deep subtree(s) into helpers")
    return rendered


def quote_tokens(tokens: HostTokens, options: Optional[QuoterOptions] = None) -> str:
    """
    Direct-token surface.

    Args:
        tokens: Python tokens of the fragment, or host source text
        options: Quoter options

    Returns:
        Python source of the constructor expression

    Raises:
        GLSLParseFailure: If the fragment does not parse
        InvocationError: If host text cannot be tokenized
    """
    return quote_source(direct_token_source(tokens, options), options)


def quote_string_literal(tokens: HostTokens, options: Optional[QuoterOptions] = None) -> str:
    """
    Opaque-string surface.

    Args:
        tokens: Exactly one Python string-literal token, or host source
            text consisting of one string literal
        options: Quoter options

    Returns:
        Python source of the constructor expression

    Raises:
        InvocationError: If the input is not a single plain string literal
        GLSLParseFailure: If the string's content does not parse
    """
    return quote_source(string_literal_source(tokens, options), options)


# =============================================================================
# Evaluation
# =============================================================================

def evaluate(source: str, namespace: str = "syntax"):
    """
    Evaluate a rendered constructor expression.

    Only the syntax module (under ``namespace``) and ``float`` are
    visible to the expression.
    """
    scope = {"__builtins__": {}, "float": float, namespace: syntax}
    code = compile(source, "<glsl-quasiquote>", "eval")
    return eval(code, scope)


def glsl_str(text: str, filename: str = "<glsl>") -> syntax.TranslationUnit:
    """
    Runtime fallback for ``glsl_str("...")`` in unexpanded host code.

    Parses the text, quotes the result and builds the tree from the
    constructor expression, so every node is the fresh allocation an
    expanded module would make.

    Raises:
        GLSLParseFailure: If the text does not parse
    """
    unit = _parse(text, filename)
    return build(quote_translation_unit(unit))
