"""
GLSL Quasiquote Error Hierarchy
===============================

This module defines the exception hierarchy for the whole package.
All exceptions inherit from GLSLQuasiquoteError, allowing callers to
catch every package-related error with a single except clause.

Exception Hierarchy
-------------------
GLSLQuasiquoteError (base)
├── GLSLError (glsl.errors) - lexer and parser diagnostics
│   └── GLSLSyntaxError - invalid GLSL source
├── GLSLParseFailure - fatal: the parser rejected an embedded fragment
├── InvocationError - fatal: a quasiquote surface was invoked wrongly
└── QuoteError - the quoter was handed something it cannot rebuild
    ├── UnhandledNodeError - a syntax node kind with no quoting case
    └── NestingError - too deep to render as a single Python expression

Error Message Format
--------------------
Errors that know where they happened follow the same format:

    filename:line:column: error: description
        source_line_text
            ^ (pointer to error location)
    hint: suggestion for fixing

Failures of the two quasiquote surfaces are fatal to the build step
that requested them: no partial constructor expression is ever
returned alongside one of these errors.
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class GLSLQuasiquoteError(Exception):
    """
    Base exception for all glsl_quasiquote errors.

        try:
            unit = glsl_str(source)
        except GLSLQuasiquoteError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Used for GLSL source positions as well as for positions of
    quasiquote invocations inside Python host files.

    Attributes:
        filename: Name of the source file (or "<glsl>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Located Errors
# =============================================================================

class LocatedError(GLSLQuasiquoteError):
    """
    Base for errors that carry a location, source context and a hint.

    Attributes:
        message: The error description
        location: Where the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            shader.frag:3:14: error: expected ';' after declaration
                float x = 1.0
                             ^
            hint: add a semicolon
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Quasiquote Surface Failures
# =============================================================================

class GLSLParseFailure(GLSLQuasiquoteError):
    """
    Raised when an embedded GLSL fragment does not parse.

    The message is "GLSL error: " followed by the parser's diagnostic.
    The original parser exception is kept as ``diagnostic`` and is also
    chained as ``__cause__``.
    """

    def __init__(self, diagnostic: Exception):
        self.diagnostic = diagnostic
        super().__init__(f"GLSL error: {diagnostic}")


class InvocationError(LocatedError):
    """
    Raised when a quasiquote surface receives input of the wrong shape.

    The opaque-string surface accepts exactly one string literal; anything
    else (zero tokens, several tokens, a non-string token, a bytes or
    f-string literal) is reported with this error.
    """
    pass


# =============================================================================
# Quoter Defects
# =============================================================================

class QuoteError(GLSLQuasiquoteError):
    """
    Raised when a syntax tree cannot be turned into a constructor expression.

    Apart from NestingError, trees produced by the parser never trigger
    this. It signals a tree built by hand with a value of the wrong type,
    or a node that contains itself.
    """
    pass


class UnhandledNodeError(QuoteError):
    """
    Raised when the quoter meets a syntax node kind it has no case for.

    This is an internal defect: every node kind of the syntax module must
    be covered by an explicit quoting case.
    """

    def __init__(self, node: object, category: str):
        self.node = node
        self.category = category
        super().__init__(
            f"no quoting case for {category} node {type(node).__name__}"
        )


class NestingError(QuoteError):
    """
    Raised when a constructor expression nests more brackets than a
    single Python expression may hold.

    Module output (generated shader modules and expanded hosts) never
    raises this: deep subtrees are moved into helper functions there.
    """

    def __init__(self, depth: int, limit: int, location: Optional[SourceLocation] = None):
        self.depth = depth
        self.limit = limit
        self.location = location
        message = f"constructor expression nests {depth} levels deep, above the limit of {limit}"
        if location:
            message = f"{location}: {message}"
        super().__init__(message)
