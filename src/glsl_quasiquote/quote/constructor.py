"""
Constructor Expressions
=======================

The quoter's output: a small tree describing a Python expression that,
when evaluated with the syntax module in scope, rebuilds a syntax tree.

Node Kinds
----------
- Literal: Python source for a scalar value (``42``, ``'main'``, ``None``)
  together with the value itself
- Reference: dotted name relative to the syntax namespace
  (``TypeSpecifierNonArray.VEC3``)
- Call: call of a referenced class with keyword arguments
- Sequence: list display, items in order
- Subtree: call of a module-level helper holding a hoisted subtree

Rendering
---------
``render(expr, options)`` turns the tree into Python source. Compact
mode writes everything on one line. Pretty mode breaks calls and lists
over several lines when their one-line form would not fit in
``options.line_width``:

    syntax.FunctionDefinition(
        prototype=syntax.FunctionPrototype(
            ty=syntax.FullySpecifiedType(qualifier=None, ty=...),
            name='main',
            parameters=[],
        ),
        statement=syntax.CompoundStatement(statement_list=[]),
    )

Nesting
-------
Every tree edge is one level of brackets, and Python refuses to parse
an expression nested more than 200 levels deep. A long chain of binary
operators or ``else if`` branches gets there easily. ``render`` raises
NestingError beyond ``options.max_nesting``; ``render_module`` instead
moves deep subtrees into helper functions, each within the limit:

    def _glsl_subtree_0():
        return syntax.Binary(...)

    TRANSLATION_UNIT = [syntax.FunctionDefinition(..., expr=_glsl_subtree_0())]

``build(expr)`` constructs the tree directly, without going through
Python source at all.
"""

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional
import itertools

from glsl_quasiquote.errors import NestingError, SourceLocation
from glsl_quasiquote.glsl import syntax
from glsl_quasiquote.quote.options import QuoterOptions

SUBTREE_PREFIX = "_glsl_subtree"


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class ConstructorExpr:
    """Base class for constructor expression nodes."""
    pass


@dataclass(frozen=True)
class Literal(ConstructorExpr):
    """Python source text of a scalar literal, and the value it denotes."""
    text: str
    value: Any = field(default=None, compare=False)


@dataclass(frozen=True)
class Reference(ConstructorExpr):
    """Dotted path relative to the syntax namespace."""
    path: tuple[str, ...]


@dataclass(frozen=True)
class Argument:
    """Keyword argument of a Call."""
    name: str
    value: ConstructorExpr


@dataclass(frozen=True)
class Call(ConstructorExpr):
    """Construction of a syntax class from keyword arguments."""
    callee: Reference
    arguments: tuple[Argument, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Sequence(ConstructorExpr):
    """List display."""
    items: tuple[ConstructorExpr, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Subtree(ConstructorExpr):
    """Call of the helper function that builds a hoisted subtree."""
    name: str


def _children(expr: ConstructorExpr) -> list[ConstructorExpr]:
    if isinstance(expr, Call):
        return [argument.value for argument in expr.arguments]
    if isinstance(expr, Sequence):
        return list(expr.items)
    return []


def _literal_nesting(literal: Literal) -> int:
    # float('nan') and friends carry one level of parentheses
    if literal.text[:1] in "'\"":
        return 0
    return literal.text.count("(")


def nesting(expr: ConstructorExpr) -> int:
    """Bracket nesting depth of the rendered expression."""
    if isinstance(expr, Literal):
        return _literal_nesting(expr)
    if isinstance(expr, Reference):
        return 0
    if isinstance(expr, Subtree):
        return 1

    deepest = 0
    for child in _children(expr):
        deepest = max(deepest, nesting(child))
    return deepest + 1


# =============================================================================
# Hoisting
# =============================================================================

def subtree_names(prefix: str = SUBTREE_PREFIX) -> Iterator[str]:
    """Endless supply of helper names: prefix_0, prefix_1, ..."""
    return (f"{prefix}_{number}" for number in itertools.count())


def hoist(
    expr: ConstructorExpr,
    limit: int,
    names: Iterator[str],
) -> tuple[ConstructorExpr, list[tuple[str, ConstructorExpr]]]:
    """
    Split an expression so that no piece nests deeper than limit.

    Args:
        expr: The expression to split
        limit: Maximum nesting of any piece (at least 2)
        names: Supply of helper names

    Returns:
        (root, subtrees): the root expression with hoisted children
        replaced by Subtree calls, and the (name, expression) pairs of
        the helpers, innermost first
    """
    subtrees: list[tuple[str, ConstructorExpr]] = []
    root, _ = _hoist(expr, limit, names, subtrees)
    return root, subtrees


def _hoist(
    expr: ConstructorExpr,
    limit: int,
    names: Iterator[str],
    subtrees: list[tuple[str, ConstructorExpr]],
) -> tuple[ConstructorExpr, int]:
    """Return the rewritten expression and its nesting depth."""
    if not isinstance(expr, (Call, Sequence)):
        return expr, nesting(expr)

    children = []
    for child in _children(expr):
        children.append(_hoist(child, limit, names, subtrees))

    deepest = 0
    rewritten = []
    for child, depth in children:
        # A child at the limit would push this node past it
        if depth >= limit:
            name = next(names)
            subtrees.append((name, child))
            child, depth = Subtree(name), 1
        rewritten.append(child)
        deepest = max(deepest, depth)

    if isinstance(expr, Call):
        arguments = tuple(
            Argument(argument.name, value)
            for argument, value in zip(expr.arguments, rewritten)
        )
        return Call(expr.callee, arguments), deepest + 1
    return Sequence(tuple(rewritten)), deepest + 1


# =============================================================================
# Direct Construction
# =============================================================================

def _resolve(namespace, path: tuple[str, ...]):
    target = namespace
    for name in path:
        target = getattr(target, name)
    return target


def build(expr: ConstructorExpr, namespace=syntax):
    """
    Construct the value an expression denotes, without rendering it.

    Every Call creates a fresh node, exactly as evaluating the rendered
    source would.
    """
    if isinstance(expr, Literal):
        return expr.value

    if isinstance(expr, Reference):
        return _resolve(namespace, expr.path)

    if isinstance(expr, Call):
        fields = {}
        for argument in expr.arguments:
            fields[argument.name] = build(argument.value, namespace)
        return _resolve(namespace, expr.callee.path)(**fields)

    if isinstance(expr, Sequence):
        items = []
        for item in expr.items:
            items.append(build(item, namespace))
        return items

    raise TypeError(f"cannot build {expr!r}")


# =============================================================================
# Rendering
# =============================================================================

@dataclass
class RenderedModule:
    """
    Module-level rendering of an expression.

    Attributes:
        definitions: Source of the helper functions, one entry each
        expression: Source of the root expression
    """
    definitions: list[str]
    expression: str


class ConstructorRenderer:
    """
    Renders constructor expressions to Python source.

    Usage:
        source = ConstructorRenderer(options).render(expr)
    """

    def __init__(self, options: Optional[QuoterOptions] = None):
        self.options = options or QuoterOptions()
        self._widths: dict[int, int] = {}

    def render(self, expr: ConstructorExpr) -> str:
        """
        Render an expression according to the options.

        Raises:
            NestingError: If the expression nests deeper than
                options.max_nesting
        """
        depth = nesting(expr)
        if depth > self.options.max_nesting:
            raise NestingError(
                depth,
                self.options.max_nesting,
                SourceLocation(self.options.filename, 1, 1),
            )
        return self._render(expr)

    def render_module(
        self,
        expr: ConstructorExpr,
        names: Optional[Iterator[str]] = None,
    ) -> RenderedModule:
        """
        Render for module output, hoisting deep subtrees into helpers.

        Args:
            expr: The expression to render
            names: Helper name supply, shared by all expressions that end
                up in the same module
        """
        if names is None:
            names = subtree_names()
        root, subtrees = hoist(expr, self.options.max_nesting, names)
        return RenderedModule(
            definitions=[self.render_definition(name, subtree) for name, subtree in subtrees],
            expression=self._render(root),
        )

    def render_definition(self, name: str, expr: ConstructorExpr) -> str:
        """Source of a helper function returning expr."""
        if not self.options.pretty:
            return f"def {name}(): return {self._render_compact(expr)}"
        self._widths = {}
        body = " " * self.options.indent
        return f"def {name}():\n{body}return {self._render_pretty(expr, 1)}"

    def _render(self, expr: ConstructorExpr) -> str:
        self._widths = {}
        if self.options.pretty:
            return self._render_pretty(expr, 0)
        return self._render_compact(expr)

    def _reference(self, reference: Reference) -> str:
        return ".".join((self.options.namespace,) + reference.path)

    def _render_compact(self, expr: ConstructorExpr) -> str:
        if isinstance(expr, Literal):
            return expr.text

        if isinstance(expr, Reference):
            return self._reference(expr)

        if isinstance(expr, Subtree):
            return f"{expr.name}()"

        if isinstance(expr, Call):
            arguments = ", ".join(
                f"{argument.name}={self._render_compact(argument.value)}"
                for argument in expr.arguments
            )
            return f"{self._reference(expr.callee)}({arguments})"

        if isinstance(expr, Sequence):
            items = ", ".join(self._render_compact(item) for item in expr.items)
            return f"[{items}]"

        raise TypeError(f"not a constructor expression: {expr!r}")

    def _width(self, expr: ConstructorExpr) -> int:
        """Length of the compact rendering, memoized per node."""
        key = id(expr)
        if key not in self._widths:
            self._widths[key] = self._measure(expr)
        return self._widths[key]

    def _measure(self, expr: ConstructorExpr) -> int:
        if isinstance(expr, Literal):
            return len(expr.text)

        if isinstance(expr, Reference):
            return len(self._reference(expr))

        if isinstance(expr, Subtree):
            return len(expr.name) + 2

        if isinstance(expr, Call):
            width = len(self._reference(expr.callee)) + 2
            for argument in expr.arguments:
                width += len(argument.name) + 1 + self._width(argument.value)
            return width + 2 * max(len(expr.arguments) - 1, 0)

        if isinstance(expr, Sequence):
            width = 2
            for item in expr.items:
                width += self._width(item)
            return width + 2 * max(len(expr.items) - 1, 0)

        raise TypeError(f"not a constructor expression: {expr!r}")

    def _render_pretty(self, expr: ConstructorExpr, level: int) -> str:
        """
        Render at a nesting level; the first line is assumed to be
        already indented by the caller.
        """
        margin = " " * (self.options.indent * level)
        if (
            isinstance(expr, (Literal, Reference, Subtree))
            or len(margin) + self._width(expr) <= self.options.line_width
        ):
            return self._render_compact(expr)

        inner = " " * (self.options.indent * (level + 1))

        if isinstance(expr, Call):
            lines = [f"{self._reference(expr.callee)}("]
            for argument in expr.arguments:
                value = self._render_pretty(argument.value, level + 1)
                lines.append(f"{inner}{argument.name}={value},")
            lines.append(f"{margin})")
            return "\n".join(lines)

        lines = ["["]
        for item in expr.items:
            lines.append(f"{inner}{self._render_pretty(item, level + 1)},")
        lines.append(f"{margin}]")
        return "\n".join(lines)


def render(expr: ConstructorExpr, options: Optional[QuoterOptions] = None) -> str:
    """Render a constructor expression to Python source."""
    return ConstructorRenderer(options).render(expr)
