"""
Lifts and Literal Emission
==========================

Building blocks shared by every quoting case.

Lifts
-----
- quote_optional: None becomes the literal ``None``; any other value is
  quoted with the supplied function.
- quote_sequence: a list becomes a list display with items in order.
- quote_indirect: quotes an owned, recursive sub-tree. The constructor
  call it produces is the fresh allocation; the lift also tracks the
  nodes on the current path so that a node containing itself is
  reported instead of recursing forever.

Literals
--------
Each scalar kind has its own emitter that checks the value's type, so a
hand-built tree holding, say, a bool where an int belongs is rejected
rather than silently rebuilt as something else.

Identifiers and owned strings are both emitted as Python string
literals: Python strings are immutable values, so a referenced
identifier and an owned copy rebuild to the same object.
"""

from enum import Enum
from typing import Any, Callable, Iterable, Optional, TypeVar
import math

from glsl_quasiquote.errors import QuoteError
from glsl_quasiquote.quote.constructor import ConstructorExpr, Literal, Reference, Sequence

T = TypeVar("T")

Quote = Callable[[T], ConstructorExpr]

NONE = Literal("None", None)


# =============================================================================
# Lifts
# =============================================================================

def quote_optional(value: Optional[T], quote: Quote) -> ConstructorExpr:
    """Quote an optional value: absent stays absent."""
    if value is None:
        return NONE
    return quote(value)


def quote_sequence(items: Iterable[T], quote: Quote) -> Sequence:
    """Quote every item, preserving order and length."""
    if not isinstance(items, (list, tuple)):
        raise QuoteError(f"expected a list, got {type(items).__name__}")
    return Sequence(tuple(quote(item) for item in items))


def quote_indirect(node: T, quote: Quote, active: set[int]) -> ConstructorExpr:
    """
    Quote a recursive child.

    Args:
        node: The child node
        quote: Quoting function for the child's category
        active: ids of the nodes on the current recursion path

    Raises:
        QuoteError: If the node is already on the path (a cycle)
    """
    key = id(node)
    if key in active:
        raise QuoteError(f"{type(node).__name__} node contains itself")

    active.add(key)
    try:
        return quote(node)
    finally:
        active.discard(key)


# =============================================================================
# Literal Emission
# =============================================================================

def _check_type(value: Any, kinds: tuple, what: str) -> None:
    # bool is an int subclass but never a valid int literal here
    if isinstance(value, bool) and bool not in kinds:
        raise QuoteError(f"expected {what}, got bool {value!r}")
    if not isinstance(value, kinds):
        raise QuoteError(f"expected {what}, got {type(value).__name__} {value!r}")


def quote_int(value: int) -> Literal:
    """Signed integer literal."""
    _check_type(value, (int,), "an int")
    return Literal(repr(value), value)


def quote_uint(value: int) -> Literal:
    """Unsigned integer literal."""
    _check_type(value, (int,), "an unsigned int")
    if value < 0:
        raise QuoteError(f"expected an unsigned int, got {value}")
    return Literal(repr(value), value)


def quote_bool(value: bool) -> Literal:
    _check_type(value, (bool,), "a bool")
    return Literal("True" if value else "False", value)


def _quote_real(value: float, what: str) -> Literal:
    _check_type(value, (float, int), what)
    if isinstance(value, float):
        if math.isnan(value):
            return Literal("float('nan')", value)
        if math.isinf(value):
            return Literal("float('inf')" if value > 0 else "float('-inf')", value)
    return Literal(repr(value), value)


def quote_float(value: float) -> Literal:
    """Single-precision literal; repr round-trips the stored value exactly."""
    return _quote_real(value, "a float")


def quote_double(value: float) -> Literal:
    """Double-precision literal."""
    return _quote_real(value, "a double")


def quote_string(value: str) -> Literal:
    """Owned string, e.g. a struct or extension name."""
    _check_type(value, (str,), "a string")
    return Literal(repr(value), value)


def quote_identifier(value: str) -> Literal:
    """Identifier reference, e.g. a variable or function name."""
    _check_type(value, (str,), "an identifier")
    return Literal(repr(value), value)


def quote_enum(member: Enum, enum_type: type[Enum]) -> Reference:
    """
    Reference to a catalog member, e.g. ``TypeSpecifierNonArray.VEC3``.

    Raises:
        QuoteError: If member does not belong to enum_type
    """
    if not isinstance(member, enum_type):
        raise QuoteError(f"expected a {enum_type.__name__} member, got {member!r}")
    return Reference((enum_type.__name__, member.name))
