"""
GLSL Lexer (Tokenizer)
======================

This module converts GLSL source text into a stream of tokens for the
parser.

Token Categories
----------------
- Keywords: struct, precision, layout, if, for, return, etc.
- Built-in type names: float, vec3, mat4x3, sampler2DShadow, ...
  (one BUILTIN_TYPE token type; the value is the catalog member)
- Qualifiers: storage, precision and interpolation keywords
  (the value is the matching syntax enum member)
- Identifiers
- Literals: integers, unsigned integers, floats, doubles, booleans
- Operators and delimiters, including GLSL's logical xor '^^'
- Directive tokens: '#' and the NEWLINE that ends a directive line

Number Formats
--------------
| Format      | Example      | Token        | Value        |
|-------------|--------------|--------------|--------------|
| Decimal     | 42           | INT_CONST    | 42           |
| Hexadecimal | 0x1F         | INT_CONST    | 31           |
| Octal       | 017          | INT_CONST    | 15           |
| Unsigned    | 3u, 0xFFu    | UINT_CONST   | 3, 255       |
| Float       | 1.5, 3., .5  | FLOAT_CONST  | 1.5, 3.0, .5 |
| Exponent    | 1e3, 2.5e-2f | FLOAT_CONST  | 1000.0, ...  |
| Double      | 1.0lf        | DOUBLE_CONST | 1.0          |

Integer literals must fit in 32 bits. Signed literals between 2^31 and
2^32 - 1 (typically hex bit patterns such as 0xFFFFFFFF) are stored as
their two's complement value.

Preprocessor Lines
------------------
Only #version and #extension are understood by the parser. A directive
line is terminated by a newline, so while a directive is open the lexer
reports the end of the line as a NEWLINE token. Everywhere else newlines
are ordinary whitespace.

Example Usage
-------------
>>> from glsl_quasiquote.glsl.lexer import GLSLLexer
>>> for token in GLSLLexer("void main() {}").tokenize():
...     print(token)
Token(BUILTIN_TYPE, 'void', 1:1)
Token(IDENTIFIER, 'main', 1:6)
Token(LPAREN, '(', 1:10)
Token(RPAREN, ')', 1:11)
Token(LBRACE, '{', 1:13)
Token(RBRACE, '}', 1:14)
Token(EOF, 1:15)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional, Union
import string

from glsl_quasiquote.errors import SourceLocation
from glsl_quasiquote.glsl import syntax
from glsl_quasiquote.glsl.errors import GLSLSyntaxError, InvalidCharacterError


# =============================================================================
# Token Type Enumeration
# =============================================================================

class GLSLTokenType(Enum):
    """
    Token types for GLSL.

    Closed keyword families (built-in types, storage, precision and
    interpolation qualifiers) share one token type per family; the token
    value tells the members apart.
    """

    # === Structural Tokens ===
    EOF = auto()            # End of input
    NEWLINE = auto()        # End of a directive line
    HASH = auto()           # # (directive start)

    # === Identifiers and Literals ===
    IDENTIFIER = auto()
    INT_CONST = auto()
    UINT_CONST = auto()
    FLOAT_CONST = auto()
    DOUBLE_CONST = auto()
    BOOL_CONST = auto()     # true / false

    # === Keyword Families ===
    BUILTIN_TYPE = auto()   # value: syntax.TypeSpecifierNonArray
    STORAGE = auto()        # value: syntax.StorageQualifier
    PRECISION_QUALIFIER = auto()    # value: syntax.PrecisionQualifier
    INTERPOLATION = auto()  # value: syntax.InterpolationQualifier

    # === Keywords - Declarations ===
    STRUCT = auto()         # struct
    PRECISION = auto()      # precision
    LAYOUT = auto()         # layout
    SUBROUTINE = auto()     # subroutine
    INVARIANT = auto()      # invariant
    PRECISE = auto()        # precise

    # === Keywords - Control Flow ===
    IF = auto()
    ELSE = auto()
    SWITCH = auto()
    CASE = auto()
    DEFAULT = auto()
    WHILE = auto()
    DO = auto()
    FOR = auto()
    CONTINUE = auto()
    BREAK = auto()
    DISCARD = auto()
    RETURN = auto()

    # === Arithmetic Operators ===
    PLUS = auto()           # +
    MINUS = auto()          # -
    STAR = auto()           # *
    SLASH = auto()          # /
    PERCENT = auto()        # %

    # === Increment/Decrement ===
    INCREMENT = auto()      # ++
    DECREMENT = auto()      # --

    # === Comparison Operators ===
    EQ = auto()             # ==
    NE = auto()             # !=
    LT = auto()             # <
    GT = auto()             # >
    LE = auto()             # <=
    GE = auto()             # >=

    # === Logical Operators ===
    AND = auto()            # &&
    OR = auto()             # ||
    XOR = auto()            # ^^
    NOT = auto()            # !

    # === Bitwise Operators ===
    AMPERSAND = auto()      # &
    PIPE = auto()           # |
    CARET = auto()          # ^
    TILDE = auto()          # ~
    LSHIFT = auto()         # <<
    RSHIFT = auto()         # >>

    # === Assignment Operators ===
    ASSIGN = auto()         # =
    PLUS_ASSIGN = auto()    # +=
    MINUS_ASSIGN = auto()   # -=
    STAR_ASSIGN = auto()    # *=
    SLASH_ASSIGN = auto()   # /=
    PERCENT_ASSIGN = auto() # %=
    AND_ASSIGN = auto()     # &=
    OR_ASSIGN = auto()      # |=
    XOR_ASSIGN = auto()     # ^=
    LSHIFT_ASSIGN = auto()  # <<=
    RSHIFT_ASSIGN = auto()  # >>=

    # === Delimiters ===
    LPAREN = auto()         # (
    RPAREN = auto()         # )
    LBRACE = auto()         # {
    RBRACE = auto()         # }
    LBRACKET = auto()       # [
    RBRACKET = auto()       # ]
    SEMICOLON = auto()      # ;
    COMMA = auto()          # ,
    COLON = auto()          # :
    QUESTION = auto()       # ?
    DOT = auto()            # .


# =============================================================================
# Keyword Mapping
# =============================================================================

KEYWORDS: dict[str, GLSLTokenType] = {
    # Declarations
    "struct": GLSLTokenType.STRUCT,
    "precision": GLSLTokenType.PRECISION,
    "layout": GLSLTokenType.LAYOUT,
    "subroutine": GLSLTokenType.SUBROUTINE,
    "invariant": GLSLTokenType.INVARIANT,
    "precise": GLSLTokenType.PRECISE,

    # Control flow
    "if": GLSLTokenType.IF,
    "else": GLSLTokenType.ELSE,
    "switch": GLSLTokenType.SWITCH,
    "case": GLSLTokenType.CASE,
    "default": GLSLTokenType.DEFAULT,
    "while": GLSLTokenType.WHILE,
    "do": GLSLTokenType.DO,
    "for": GLSLTokenType.FOR,
    "continue": GLSLTokenType.CONTINUE,
    "break": GLSLTokenType.BREAK,
    "discard": GLSLTokenType.DISCARD,
    "return": GLSLTokenType.RETURN,
}

# Built-in type keywords, plus the square-matrix spellings GLSL accepts
# as aliases (mat2x2 is mat2).
BUILTIN_TYPES: dict[str, syntax.TypeSpecifierNonArray] = {
    member.value: member for member in syntax.TypeSpecifierNonArray
}
BUILTIN_TYPES.update({
    "mat2x2": syntax.TypeSpecifierNonArray.MAT2,
    "mat3x3": syntax.TypeSpecifierNonArray.MAT3,
    "mat4x4": syntax.TypeSpecifierNonArray.MAT4,
    "dmat2x2": syntax.TypeSpecifierNonArray.DMAT2,
    "dmat3x3": syntax.TypeSpecifierNonArray.DMAT3,
    "dmat4x4": syntax.TypeSpecifierNonArray.DMAT4,
})

# Keyword families whose token value is an enum member
QUALIFIER_KEYWORDS: dict[str, tuple[GLSLTokenType, Enum]] = {}
for _member in syntax.StorageQualifier:
    QUALIFIER_KEYWORDS[_member.value] = (GLSLTokenType.STORAGE, _member)
for _member in syntax.PrecisionQualifier:
    QUALIFIER_KEYWORDS[_member.value] = (GLSLTokenType.PRECISION_QUALIFIER, _member)
for _member in syntax.InterpolationQualifier:
    QUALIFIER_KEYWORDS[_member.value] = (GLSLTokenType.INTERPOLATION, _member)
del _member

BOOL_LITERALS = {"true": True, "false": False}

INT32_MAX = 0x7FFFFFFF
UINT32_MAX = 0xFFFFFFFF


# =============================================================================
# Token Data Class
# =============================================================================

TokenValue = Union[str, int, float, bool, Enum, None]


@dataclass(frozen=True)
class GLSLToken:
    """
    Represents a single token of GLSL source.

    Attributes:
        type: The GLSLTokenType classification
        value: Decoded value (str for identifiers and operators, int/float/
            bool for literals, an enum member for keyword families)
        text: The exact source spelling
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: GLSLTokenType
    value: TokenValue
    text: str
    line: int
    column: int
    filename: str

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if self.type == GLSLTokenType.EOF:
            return f"Token(EOF, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.text!r}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def describe(self) -> str:
        """Short human description used in diagnostics."""
        if self.type == GLSLTokenType.EOF:
            return "end of input"
        if self.type == GLSLTokenType.NEWLINE:
            return "end of line"
        return self.text


# =============================================================================
# Lexer Implementation
# =============================================================================

class GLSLLexer:
    """
    Tokenizes GLSL source code.

    Usage:
        lexer = GLSLLexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    IDENT_START = string.ascii_letters + "_"
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    def __init__(self, source: str, filename: str = "<glsl>"):
        """
        Initialize the lexer with source code.

        Args:
            source: The GLSL source code to tokenize
            filename: Name of the source file (for error messages)
        """
        self.source = source
        self.filename = filename

        self._pos = 0
        self._line = 1
        self._column = 1
        self._line_start_pos = 0

        # True between a '#' and the end of its line
        self._in_directive = False

    def tokenize(self) -> Iterator[GLSLToken]:
        """
        Generate tokens from the source code.

        Yields:
            GLSLToken objects, always ending with EOF

        Raises:
            GLSLSyntaxError: If invalid syntax is encountered
        """
        while not self._at_end():
            self._skip_whitespace_and_comments()

            if self._at_end():
                break

            if self._in_directive and self._peek() == "\n":
                token = self._make_token(GLSLTokenType.NEWLINE, "\n", "\n")
                self._advance()
                self._in_directive = False
                yield token
                continue

            yield self._scan_token()

        yield self._make_token(GLSLTokenType.EOF, None, "")

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """Look ahead without advancing; empty string past the end."""
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """Consume and return the current character, tracking lines."""
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    def _match(self, expected: str) -> bool:
        """Consume next character if it matches expected."""
        if self._peek() == expected:
            self._advance()
            return True
        return False

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: GLSLTokenType,
        value: TokenValue,
        text: str,
        start_line: Optional[int] = None,
        start_column: Optional[int] = None,
    ) -> GLSLToken:
        return GLSLToken(
            type=token_type,
            value=value,
            text=text,
            line=start_line or self._line,
            column=start_column or self._column,
            filename=self.filename,
        )

    def _error(
        self,
        message: str,
        hint: Optional[str] = None,
        start_line: Optional[int] = None,
        start_column: Optional[int] = None,
    ) -> GLSLSyntaxError:
        """Create a syntax error at the current (or given) location."""
        location = SourceLocation(
            self.filename,
            start_line or self._line,
            start_column or self._column,
        )
        return GLSLSyntaxError(
            message, location, hint=hint, source_line=self._get_current_line()
        )

    def _get_current_line(self) -> str:
        """Get the current line of source text for error reporting."""
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end]

    # =========================================================================
    # Whitespace and Comment Handling
    # =========================================================================

    def _skip_whitespace_and_comments(self) -> None:
        """
        Skip whitespace and comments.

        Inside a directive the terminating newline is left in place so
        tokenize() can report it; a backslash-newline continues the line.
        """
        while not self._at_end():
            char = self._peek()

            if char == "\n" and self._in_directive:
                break

            if char in " \t\n\r\f\v":
                self._advance()
                continue

            if char == "\\" and self._in_directive and self._peek(1) == "\n":
                self._advance()
                self._advance()
                continue

            if char == "/" and self._peek(1) == "/":
                self._skip_single_line_comment()
                continue

            if char == "/" and self._peek(1) == "*":
                self._skip_multi_line_comment()
                continue

            break

    def _skip_single_line_comment(self) -> None:
        """Skip a // comment up to, but not including, the newline."""
        self._advance()
        self._advance()

        while not self._at_end() and self._peek() != "\n":
            self._advance()

    def _skip_multi_line_comment(self) -> None:
        """
        Skip a /* ... */ comment.

        Raises:
            GLSLSyntaxError: If the comment is not terminated
        """
        start_line = self._line
        start_col = self._column

        self._advance()
        self._advance()

        while not self._at_end():
            if self._peek() == "*" and self._peek(1) == "/":
                self._advance()
                self._advance()
                return
            self._advance()

        raise GLSLSyntaxError(
            "unterminated multi-line comment",
            SourceLocation(self.filename, start_line, start_col),
            hint="add closing */ to terminate the comment",
        )

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> GLSLToken:
        start_line = self._line
        start_column = self._column

        char = self._peek()

        if char in self.IDENT_START:
            return self._scan_identifier(start_line, start_column)

        if char.isdigit() or (char == "." and self._peek(1).isdigit()):
            return self._scan_number(start_line, start_column)

        return self._scan_operator(start_line, start_column)

    def _scan_identifier(self, start_line: int, start_column: int) -> GLSLToken:
        """
        Scan an identifier, keyword, built-in type name or boolean literal.
        """
        chars = []
        while self._peek() and self._peek() in self.IDENT_CHARS:
            chars.append(self._advance())

        name = "".join(chars)

        if name in KEYWORDS:
            return self._make_token(KEYWORDS[name], name, name, start_line, start_column)

        if name in BUILTIN_TYPES:
            return self._make_token(
                GLSLTokenType.BUILTIN_TYPE, BUILTIN_TYPES[name], name,
                start_line, start_column,
            )

        if name in QUALIFIER_KEYWORDS:
            token_type, member = QUALIFIER_KEYWORDS[name]
            return self._make_token(token_type, member, name, start_line, start_column)

        if name in BOOL_LITERALS:
            return self._make_token(
                GLSLTokenType.BOOL_CONST, BOOL_LITERALS[name], name,
                start_line, start_column,
            )

        return self._make_token(GLSLTokenType.IDENTIFIER, name, name, start_line, start_column)

    def _scan_number(self, start_line: int, start_column: int) -> GLSLToken:
        """
        Scan an integer or floating-point literal with its suffix.

        Handles:
        - Decimal, octal (leading 0) and hexadecimal (0x) integers
        - The 'u'/'U' unsigned suffix
        - Floats with fraction and/or exponent, 'f'/'F' suffix
        - Doubles with the 'lf'/'LF' suffix
        """
        start_pos = self._pos

        if self._peek() == "0" and self._peek(1) in ("x", "X"):
            self._advance()
            self._advance()
            digits = []
            while self._peek() and self._peek() in string.hexdigits:
                digits.append(self._advance())
            if not digits:
                raise self._error("expected hexadecimal digits after '0x'")
            return self._finish_integer(int("".join(digits), 16), start_pos, start_line, start_column)

        digits = []
        while self._peek().isdigit():
            digits.append(self._advance())

        is_float = False
        if self._peek() == ".":
            is_float = True
            self._advance()
            while self._peek().isdigit():
                self._advance()

        if self._peek() in ("e", "E") and self._exponent_follows():
            is_float = True
            self._advance()
            if self._peek() in ("+", "-"):
                self._advance()
            while self._peek().isdigit():
                self._advance()

        if is_float:
            return self._finish_float(start_pos, start_line, start_column)

        text = "".join(digits)
        if len(text) > 1 and text.startswith("0"):
            if any(digit in "89" for digit in text):
                raise self._error(
                    f"invalid digit in octal literal '{text}'",
                    start_line=start_line,
                    start_column=start_column,
                )
            value = int(text, 8)
        else:
            value = int(text)

        return self._finish_integer(value, start_pos, start_line, start_column)

    def _exponent_follows(self) -> bool:
        """Check that an 'e' starts a real exponent (digits, maybe signed)."""
        after = self._peek(1)
        if after in ("+", "-"):
            after = self._peek(2)
        return after.isdigit()

    def _finish_integer(
        self, value: int, start_pos: int, start_line: int, start_column: int
    ) -> GLSLToken:
        unsigned = self._match("u") or self._match("U")
        self._reject_trailing_identifier(start_line, start_column)
        text = self.source[start_pos:self._pos]

        if value > UINT32_MAX:
            raise self._error(
                f"integer literal '{text}' does not fit in 32 bits",
                start_line=start_line,
                start_column=start_column,
            )

        if unsigned:
            return self._make_token(GLSLTokenType.UINT_CONST, value, text, start_line, start_column)

        if value > INT32_MAX:
            value -= UINT32_MAX + 1
        return self._make_token(GLSLTokenType.INT_CONST, value, text, start_line, start_column)

    def _finish_float(self, start_pos: int, start_line: int, start_column: int) -> GLSLToken:
        number_text = self.source[start_pos:self._pos]
        value = float(number_text)

        if self.source.startswith(("lf", "LF"), self._pos):
            self._advance()
            self._advance()
            token_type = GLSLTokenType.DOUBLE_CONST
        else:
            if self._peek() in ("f", "F"):
                self._advance()
            token_type = GLSLTokenType.FLOAT_CONST

        self._reject_trailing_identifier(start_line, start_column)
        text = self.source[start_pos:self._pos]
        return self._make_token(token_type, value, text, start_line, start_column)

    def _reject_trailing_identifier(self, start_line: int, start_column: int) -> None:
        """Numbers may not run into identifier characters ('12abc')."""
        if self._peek() and self._peek() in self.IDENT_CHARS:
            raise self._error(
                f"invalid suffix '{self._peek()}' on numeric literal",
                hint="valid suffixes are u, f and lf",
                start_line=start_line,
                start_column=start_column,
            )

    def _scan_operator(self, start_line: int, start_column: int) -> GLSLToken:
        """
        Scan an operator or delimiter.

        Handles single, double, and triple character operators.
        """
        char = self._advance()

        def token(token_type: GLSLTokenType, text: str) -> GLSLToken:
            return self._make_token(token_type, text, text, start_line, start_column)

        if char == "+":
            if self._match("+"):
                return token(GLSLTokenType.INCREMENT, "++")
            if self._match("="):
                return token(GLSLTokenType.PLUS_ASSIGN, "+=")
            return token(GLSLTokenType.PLUS, "+")

        if char == "-":
            if self._match("-"):
                return token(GLSLTokenType.DECREMENT, "--")
            if self._match("="):
                return token(GLSLTokenType.MINUS_ASSIGN, "-=")
            return token(GLSLTokenType.MINUS, "-")

        if char == "*":
            if self._match("="):
                return token(GLSLTokenType.STAR_ASSIGN, "*=")
            return token(GLSLTokenType.STAR, "*")

        if char == "/":
            if self._match("="):
                return token(GLSLTokenType.SLASH_ASSIGN, "/=")
            return token(GLSLTokenType.SLASH, "/")

        if char == "%":
            if self._match("="):
                return token(GLSLTokenType.PERCENT_ASSIGN, "%=")
            return token(GLSLTokenType.PERCENT, "%")

        if char == "&":
            if self._match("&"):
                return token(GLSLTokenType.AND, "&&")
            if self._match("="):
                return token(GLSLTokenType.AND_ASSIGN, "&=")
            return token(GLSLTokenType.AMPERSAND, "&")

        if char == "|":
            if self._match("|"):
                return token(GLSLTokenType.OR, "||")
            if self._match("="):
                return token(GLSLTokenType.OR_ASSIGN, "|=")
            return token(GLSLTokenType.PIPE, "|")

        if char == "^":
            if self._match("^"):
                return token(GLSLTokenType.XOR, "^^")
            if self._match("="):
                return token(GLSLTokenType.XOR_ASSIGN, "^=")
            return token(GLSLTokenType.CARET, "^")

        if char == "=":
            if self._match("="):
                return token(GLSLTokenType.EQ, "==")
            return token(GLSLTokenType.ASSIGN, "=")

        if char == "!":
            if self._match("="):
                return token(GLSLTokenType.NE, "!=")
            return token(GLSLTokenType.NOT, "!")

        if char == "<":
            if self._match("<"):
                if self._match("="):
                    return token(GLSLTokenType.LSHIFT_ASSIGN, "<<=")
                return token(GLSLTokenType.LSHIFT, "<<")
            if self._match("="):
                return token(GLSLTokenType.LE, "<=")
            return token(GLSLTokenType.LT, "<")

        if char == ">":
            if self._match(">"):
                if self._match("="):
                    return token(GLSLTokenType.RSHIFT_ASSIGN, ">>=")
                return token(GLSLTokenType.RSHIFT, ">>")
            if self._match("="):
                return token(GLSLTokenType.GE, ">=")
            return token(GLSLTokenType.GT, ">")

        if char == "#":
            self._in_directive = True
            return token(GLSLTokenType.HASH, "#")

        single_tokens = {
            "(": GLSLTokenType.LPAREN,
            ")": GLSLTokenType.RPAREN,
            "{": GLSLTokenType.LBRACE,
            "}": GLSLTokenType.RBRACE,
            "[": GLSLTokenType.LBRACKET,
            "]": GLSLTokenType.RBRACKET,
            ";": GLSLTokenType.SEMICOLON,
            ",": GLSLTokenType.COMMA,
            ":": GLSLTokenType.COLON,
            "?": GLSLTokenType.QUESTION,
            "~": GLSLTokenType.TILDE,
            ".": GLSLTokenType.DOT,
        }

        if char in single_tokens:
            return token(single_tokens[char], char)

        raise InvalidCharacterError(
            char,
            SourceLocation(self.filename, start_line, start_column),
            self._get_current_line(),
        )
