"""
GLSL Parser Error Hierarchy
===========================

Errors raised by the bundled GLSL lexer and parser. All inherit from
GLSLError, which itself inherits from the package-wide error base so a
single except clause can catch everything.

Exception Hierarchy
-------------------
GLSLError (base for all GLSL front-end errors)
└── GLSLSyntaxError - lexer and parser syntax errors
    ├── InvalidCharacterError - character that cannot start a token
    ├── UnexpectedTokenError - token that does not fit the grammar
    └── MissingTokenError - required token absent

The parser stops at the first error; there is no error recovery.
"""

from typing import Optional

from glsl_quasiquote.errors import LocatedError, SourceLocation


class GLSLError(LocatedError):
    """Base exception for all GLSL lexer and parser errors."""
    pass


class GLSLSyntaxError(GLSLError):
    """
    Syntax error in GLSL source code.

    Examples:
        - Unterminated block comment
        - Missing semicolon after a declaration
        - Directive not terminated by a newline
        - Integer literal out of range
    """
    pass


class InvalidCharacterError(GLSLSyntaxError):
    """
    Invalid character in GLSL source code.

    Raised when the lexer encounters a character that cannot start any
    GLSL token (for example '$' or '@').
    """

    def __init__(
        self,
        char: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.char = char
        super().__init__(
            f"invalid character '{char}' (0x{ord(char):02X})",
            location=location,
            source_line=source_line,
        )


class UnexpectedTokenError(GLSLSyntaxError):
    """
    Unexpected token during parsing.

    Raised when the parser encounters a token that doesn't match
    the expected grammar rule.
    """

    def __init__(
        self,
        found: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected

        hint = None
        if expected:
            hint = f"expected {expected}"

        super().__init__(
            f"unexpected token '{found}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MissingTokenError(GLSLSyntaxError):
    """
    Required token is missing.

    Raised when a required token (like ';' or ')') is not found
    where expected.
    """

    def __init__(
        self,
        expected: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.expected = expected
        super().__init__(
            f"expected '{expected}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )
