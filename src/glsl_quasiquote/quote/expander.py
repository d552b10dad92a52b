"""
Host Source Expansion
=====================

Build-time rewrite of Python host modules. Every call-shaped invocation
of the quasiquote names is replaced by the constructor expression of
its GLSL fragment:

    shader = glsl_str("void main() {}")

becomes

    from glsl_quasiquote.glsl import syntax
    shader = [syntax.FunctionDefinition(...)]

Recognised invocations
----------------------
- ``glsl(<tokens>)``: direct-token surface
- ``glsl_str(<string literal>)``: opaque-string surface

A name only counts when it is immediately followed by '(' and is not an
attribute access (``obj.glsl(...)``) or a definition (``def glsl(...)``).
Invocations are expanded in source order; the first failure aborts the
whole expansion.

Diagnostics name the host file. Positions in GLSL parse errors count
from the start of the fragment, not of the host file.

After expansion, ``from glsl_quasiquote.glsl import syntax`` is inserted
after the module docstring and any ``from __future__`` imports. Subtrees
too deep for one expression become module-level helper functions
(``_glsl_subtree_0`` ...) placed right after that import. Sources
without invocations are returned unchanged.
"""

from dataclasses import dataclass, replace
from typing import Iterator, Optional
import ast
import io
import logging
import tokenize

from glsl_quasiquote.errors import InvocationError, SourceLocation
from glsl_quasiquote.quote.constructor import subtree_names
from glsl_quasiquote.quote.driver import (
    direct_token_source,
    quote_module_source,
    string_literal_source,
)
from glsl_quasiquote.quote.options import QuoterOptions

logger = logging.getLogger(__name__)

SYNTAX_MODULE = "glsl_quasiquote.glsl"

# Tokens skipped when looking at an invocation's neighbours
TRIVIA = (
    tokenize.NL,
    tokenize.NEWLINE,
    tokenize.COMMENT,
    tokenize.INDENT,
    tokenize.DEDENT,
)


@dataclass
class Invocation:
    """
    One quasiquote invocation found in a host source.

    Attributes:
        name: Invocation name (direct-token or opaque-string surface)
        start: (row, col) of the name token
        end: (row, col) just past the closing parenthesis
        arguments: Tokens between the parentheses
    """
    name: str
    start: tuple[int, int]
    end: tuple[int, int]
    arguments: list[tokenize.TokenInfo]


class SourceExpander:
    """
    Expands quasiquote invocations in a Python host source.

    Usage:
        expander = SourceExpander(options, filename="shaders.pyg")
        expanded = expander.expand(source)
    """

    def __init__(self, options: Optional[QuoterOptions] = None, filename: str = "<host>"):
        self.options = options or QuoterOptions()
        self.filename = filename

    def expand(self, source: str) -> str:
        """
        Return source with every invocation replaced.

        Raises:
            InvocationError: On malformed invocations or host syntax errors
            GLSLParseFailure: If an embedded fragment does not parse
        """
        lines = io.StringIO(source).readlines()
        invocations = self.find_invocations(source)
        if not invocations:
            logger.debug(f"No quasiquote invocations in {self.filename}")
            return source

        offsets = [0]
        for line in lines:
            offsets.append(offsets[-1] + len(line))

        def offset(position: tuple[int, int]) -> int:
            row, col = position
            return offsets[row - 1] + col

        names = subtree_names()
        definitions: list[str] = []
        replacements = [
            self._expand_invocation(invocation, lines, names, definitions)
            for invocation in invocations
        ]

        expanded = source
        for invocation, replacement in reversed(list(zip(invocations, replacements))):
            expanded = (
                expanded[:offset(invocation.start)]
                + replacement
                + expanded[offset(invocation.end):]
            )

        logger.debug(f"Expanded {len(invocations)} invocation(s) in {self.filename}")
        return self._insert_import(expanded, definitions)

    # =========================================================================
    # Scanning
    # =========================================================================

    def _tokenize(self, source: str) -> list[tokenize.TokenInfo]:
        try:
            return list(tokenize.generate_tokens(io.StringIO(source).readline))
        except (tokenize.TokenError, SyntaxError) as e:
            lineno = getattr(e, "lineno", None) or 1
            raise InvocationError(
                f"cannot tokenize host source: {e}",
                SourceLocation(self.filename, lineno, 1),
            ) from e

    def find_invocations(self, source: str) -> list[Invocation]:
        """Locate all invocations, in source order."""
        tokens = self._tokenize(source)
        significant = [token for token in tokens if token.type not in TRIVIA]
        invocations = []

        index = 0
        while index < len(significant):
            token = significant[index]
            if self._is_invocation(significant, index):
                close = self._find_closing_paren(significant, index + 1, source)
                invocations.append(Invocation(
                    name=token.string,
                    start=token.start,
                    end=significant[close].end,
                    arguments=self._argument_tokens(tokens, significant[index + 1], significant[close]),
                ))
                logger.debug(
                    f"Found {token.string}(...) at {self.filename}:{token.start[0]}:{token.start[1] + 1}"
                )
                index = close + 1
            else:
                index += 1

        return invocations

    def _is_invocation(self, significant: list[tokenize.TokenInfo], index: int) -> bool:
        token = significant[index]
        if token.type != tokenize.NAME or token.string not in self.options.macro_names:
            return False

        following = significant[index + 1] if index + 1 < len(significant) else None
        if following is None or following.string != "(":
            return False

        if index > 0:
            previous = significant[index - 1]
            if previous.string == "." or previous.string in ("def", "class"):
                return False

        return True

    def _find_closing_paren(
        self, significant: list[tokenize.TokenInfo], open_index: int, source: str
    ) -> int:
        depth = 0
        for index in range(open_index, len(significant)):
            text = significant[index].string
            if significant[index].type != tokenize.OP:
                continue
            if text == "(":
                depth += 1
            elif text == ")":
                depth -= 1
                if depth == 0:
                    return index

        row, col = significant[open_index].start
        raise InvocationError(
            "unbalanced parentheses in invocation",
            SourceLocation(self.filename, row, col + 1),
            source_line=source.splitlines()[row - 1],
        )

    @staticmethod
    def _argument_tokens(
        tokens: list[tokenize.TokenInfo],
        open_paren: tokenize.TokenInfo,
        close_paren: tokenize.TokenInfo,
    ) -> list[tokenize.TokenInfo]:
        """Tokens strictly between the parentheses, comments included."""
        return [
            token for token in tokens
            if open_paren.end <= token.start and token.end <= close_paren.start
        ]

    # =========================================================================
    # Rewriting
    # =========================================================================

    def _expand_invocation(
        self,
        invocation: Invocation,
        lines: list[str],
        names: Iterator[str],
        definitions: list[str],
    ) -> str:
        """Return the replacement text; helper definitions go to definitions."""
        options = replace(self.options, filename=self.filename)
        direct_name = options.macro_names[0]
        if invocation.name == direct_name:
            fragment = direct_token_source(invocation.arguments, options)
        else:
            fragment = string_literal_source(invocation.arguments, options)

        rendered = quote_module_source(fragment, options, names)
        definitions.extend(rendered.definitions)

        # Continuation lines follow the indentation of the invocation's line
        line = lines[invocation.start[0] - 1]
        indent = line[:len(line) - len(line.lstrip())]
        return rendered.expression.replace("\n", "\n" + indent)

    def _insert_import(self, source: str, definitions: list[str]) -> str:
        """
        Insert the syntax import, followed by any subtree helpers, after
        the docstring and __future__ imports.
        """
        try:
            module = ast.parse(source, filename=self.filename)
        except SyntaxError as e:
            raise InvocationError(
                f"expanded module is not valid Python: {e.msg}",
                SourceLocation(self.filename, e.lineno or 1, e.offset or 1),
                source_line=e.text.rstrip("\n") if e.text else None,
            ) from e

        if self.options.namespace == "syntax":
            statement = f"from {SYNTAX_MODULE} import syntax\n"
        else:
            statement = f"from {SYNTAX_MODULE} import syntax as {self.options.namespace}\n"
        for definition in definitions:
            statement += f"\n\n{definition}\n"
        if definitions:
            statement += "\n\n"

        body = module.body
        index = 0
        if (
            body
            and isinstance(body[0], ast.Expr)
            and isinstance(body[0].value, ast.Constant)
            and isinstance(body[0].value.value, str)
        ):
            index = 1
        while (
            index < len(body)
            and isinstance(body[index], ast.ImportFrom)
            and body[index].module == "__future__"
        ):
            index += 1

        lines = io.StringIO(source).readlines()
        if index > 0:
            insert_at = body[index - 1].end_lineno
        else:
            first = body[0]
            decorators = getattr(first, "decorator_list", [])
            insert_at = min([first.lineno] + [d.lineno for d in decorators]) - 1

        if insert_at > 0 and not lines[insert_at - 1].endswith("\n"):
            lines[insert_at - 1] += "\n"
        lines.insert(insert_at, statement)
        return "".join(lines)


def expand_source(
    source: str,
    options: Optional[QuoterOptions] = None,
    filename: str = "<host>",
) -> str:
    """
    Expand every quasiquote invocation in a Python host source.

    Raises:
        InvocationError: On malformed invocations or host syntax errors
        GLSLParseFailure: If an embedded fragment does not parse
    """
    return SourceExpander(options, filename).expand(source)
