"""
GLSL Recursive Descent Parser
=============================

This module implements a recursive descent parser for GLSL. It takes
a stream of tokens from the lexer and builds the syntax tree defined in
glsl_quasiquote.glsl.syntax.

Grammar (Simplified EBNF)
-------------------------
translation_unit ::= external_decl*
external_decl    ::= preprocessor | function_def | declaration
preprocessor     ::= '#' 'version' INT profile? NEWLINE
                   | '#' 'extension' IDENT (':' behavior)? NEWLINE
function_def     ::= prototype compound
declaration      ::= prototype ';'
                   | init_decl_list ';'
                   | 'precision' precision_qual type_spec ';'
                   | qualifier IDENT '{' struct_field+ '}' arrayed_ident? ';'
                   | qualifier (IDENT (',' IDENT)*)? ';'
prototype        ::= full_type IDENT '(' (param (',' param)*)? ')'
init_decl_list   ::= full_type (declarator (',' declarator)*)?
declarator       ::= IDENT array_spec? ('=' initializer)?
full_type        ::= qualifier? type_spec
type_spec        ::= (BUILTIN_TYPE | struct_spec | IDENT) array_spec?
struct_spec      ::= 'struct' IDENT? '{' struct_field+ '}'
array_spec       ::= '[' expr? ']'

statement        ::= compound | simple
compound         ::= '{' statement* '}'
simple           ::= declaration | expr? ';' | if | switch | case_label
                   | while | do_while | for | jump

Expression Precedence (lowest to highest)
-----------------------------------------
1.  comma          ,
2.  assignment     = += -= *= /= %= <<= >>= &= ^= |=
3.  conditional    ?:
4.  logical_or     ||
5.  logical_xor    ^^
6.  logical_and    &&
7.  bitwise_or     |
8.  bitwise_xor    ^
9.  bitwise_and    &
10. equality       == !=
11. relational     < > <= >=
12. shift          << >>
13. additive       + -
14. multiplicative * / %
15. unary          ++ -- + - ! ~
16. postfix        [] () . ++ --
17. primary        IDENT, literals, '(' expr ')',
                   BUILTIN_TYPE array_spec '(' args ')'   (array constructor)

Declarations versus expressions are told apart with a short lookahead:
a statement starting with a qualifier, 'struct', a built-in type not
used as a constructor or an identifier followed by another identifier
is a declaration.

The parser stops at the first error. It never returns a partial tree.

Example Usage
-------------
>>> from glsl_quasiquote.glsl.parser import parse_source
>>> unit = parse_source("void main() {}")
>>> type(unit[0]).__name__
'FunctionDefinition'
"""

from typing import Callable, Optional
import logging

from glsl_quasiquote.glsl import syntax
from glsl_quasiquote.glsl.errors import (
    GLSLSyntaxError,
    MissingTokenError,
    UnexpectedTokenError,
)
from glsl_quasiquote.glsl.lexer import GLSLLexer, GLSLToken, GLSLTokenType

logger = logging.getLogger(__name__)

T = GLSLTokenType


# =============================================================================
# Operator Tables
# =============================================================================

ASSIGNMENT_OPERATORS: dict[GLSLTokenType, syntax.AssignmentOp] = {
    T.ASSIGN: syntax.AssignmentOp.EQUAL,
    T.STAR_ASSIGN: syntax.AssignmentOp.MULT,
    T.SLASH_ASSIGN: syntax.AssignmentOp.DIV,
    T.PERCENT_ASSIGN: syntax.AssignmentOp.MOD,
    T.PLUS_ASSIGN: syntax.AssignmentOp.ADD,
    T.MINUS_ASSIGN: syntax.AssignmentOp.SUB,
    T.LSHIFT_ASSIGN: syntax.AssignmentOp.LSHIFT,
    T.RSHIFT_ASSIGN: syntax.AssignmentOp.RSHIFT,
    T.AND_ASSIGN: syntax.AssignmentOp.AND,
    T.XOR_ASSIGN: syntax.AssignmentOp.XOR,
    T.OR_ASSIGN: syntax.AssignmentOp.OR,
}

UNARY_OPERATORS: dict[GLSLTokenType, syntax.UnaryOp] = {
    T.INCREMENT: syntax.UnaryOp.INC,
    T.DECREMENT: syntax.UnaryOp.DEC,
    T.PLUS: syntax.UnaryOp.ADD,
    T.MINUS: syntax.UnaryOp.MINUS,
    T.NOT: syntax.UnaryOp.NOT,
    T.TILDE: syntax.UnaryOp.COMPLEMENT,
}

# Binary precedence levels, lowest first
BINARY_LEVELS: list[dict[GLSLTokenType, syntax.BinaryOp]] = [
    {T.OR: syntax.BinaryOp.OR},
    {T.XOR: syntax.BinaryOp.XOR},
    {T.AND: syntax.BinaryOp.AND},
    {T.PIPE: syntax.BinaryOp.BIT_OR},
    {T.CARET: syntax.BinaryOp.BIT_XOR},
    {T.AMPERSAND: syntax.BinaryOp.BIT_AND},
    {T.EQ: syntax.BinaryOp.EQUAL, T.NE: syntax.BinaryOp.NON_EQUAL},
    {
        T.LT: syntax.BinaryOp.LT,
        T.GT: syntax.BinaryOp.GT,
        T.LE: syntax.BinaryOp.LTE,
        T.GE: syntax.BinaryOp.GTE,
    },
    {T.LSHIFT: syntax.BinaryOp.LSHIFT, T.RSHIFT: syntax.BinaryOp.RSHIFT},
    {T.PLUS: syntax.BinaryOp.ADD, T.MINUS: syntax.BinaryOp.SUB},
    {
        T.STAR: syntax.BinaryOp.MULT,
        T.SLASH: syntax.BinaryOp.DIV,
        T.PERCENT: syntax.BinaryOp.MOD,
    },
]

# Tokens that can start a type qualifier
QUALIFIER_START = (
    T.STORAGE,
    T.SUBROUTINE,
    T.LAYOUT,
    T.PRECISION_QUALIFIER,
    T.INTERPOLATION,
    T.INVARIANT,
    T.PRECISE,
)

VERSION_PROFILES = {
    member.value: member for member in syntax.PreprocessorVersionProfile
}
EXTENSION_BEHAVIORS = {
    member.value: member for member in syntax.PreprocessorExtensionBehavior
}


# =============================================================================
# Parser Implementation
# =============================================================================

class GLSLParser:
    """
    Parses a stream of GLSL tokens into a translation unit.

    Usage:
        tokens = list(GLSLLexer(source, filename).tokenize())
        unit = GLSLParser(tokens, filename, source.splitlines()).parse()

    Attributes:
        tokens: List of tokens to parse (ending with EOF)
        filename: Source filename for error reporting
        source_lines: Original source lines for error context
    """

    def __init__(
        self,
        tokens: list[GLSLToken],
        filename: str = "<glsl>",
        source_lines: Optional[list[str]] = None,
    ):
        self.tokens = tokens
        self.filename = filename
        self.source_lines = source_lines or []

        self._pos = 0

    def parse(self) -> syntax.TranslationUnit:
        """
        Parse the token stream into a translation unit.

        Returns:
            List of external declarations in source order (possibly empty)

        Raises:
            GLSLSyntaxError: On the first syntax error
        """
        unit = []

        while not self._at_end():
            unit.append(self._parse_external_declaration())

        logger.debug(f"Parsed {len(unit)} external declaration(s) from {self.filename}")
        return unit

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._peek().type == T.EOF

    def _peek(self, offset: int = 0) -> GLSLToken:
        """Look at token at current position + offset."""
        pos = self._pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[pos]

    def _advance(self) -> GLSLToken:
        """Consume and return the current token."""
        if not self._at_end():
            token = self.tokens[self._pos]
            self._pos += 1
            return token
        return self.tokens[-1]

    def _check(self, *types: GLSLTokenType) -> bool:
        return self._peek().type in types

    def _match(self, *types: GLSLTokenType) -> Optional[GLSLToken]:
        """Consume current token if it matches one of the types."""
        if self._check(*types):
            return self._advance()
        return None

    def _expect(
        self,
        token_type: GLSLTokenType,
        expected: str,
        hint: Optional[str] = None,
    ) -> GLSLToken:
        """
        Expect and consume a specific token type.

        Args:
            token_type: The expected token type
            expected: How to name the missing token in the message
            hint: Optional hint for fixing

        Raises:
            MissingTokenError: If the expected token is not found
        """
        if self._check(token_type):
            return self._advance()

        current = self._peek()
        raise MissingTokenError(
            expected,
            current.location,
            self._get_source_line(current.line),
            hint=hint or f"found {current.describe()!r}",
        )

    def _unexpected(self, expected: str) -> UnexpectedTokenError:
        current = self._peek()
        return UnexpectedTokenError(
            current.describe(),
            expected,
            current.location,
            self._get_source_line(current.line),
        )

    def _get_source_line(self, line: int) -> Optional[str]:
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    # =========================================================================
    # Top-Level Parsing
    # =========================================================================

    def _parse_external_declaration(self) -> syntax.ExternalDeclaration:
        if self._check(T.HASH):
            return self._parse_preprocessor()
        return self._parse_declaration(allow_definition=True)

    def _parse_preprocessor(self) -> syntax.Preprocessor:
        """
        Parse a #version or #extension directive.

        Both must be terminated by a newline: a directive squeezed onto a
        line together with other code is a syntax error.
        """
        hash_token = self._advance()
        directive = self._peek()

        if directive.type == T.IDENTIFIER and directive.value == "version":
            self._advance()
            version = self._expect(T.INT_CONST, "version number").value
            profile = None
            if self._check(T.IDENTIFIER):
                profile_token = self._advance()
                profile = VERSION_PROFILES.get(profile_token.value)
                if profile is None:
                    raise UnexpectedTokenError(
                        profile_token.text,
                        "'core', 'compatibility' or 'es'",
                        profile_token.location,
                        self._get_source_line(profile_token.line),
                    )
            self._expect_directive_end("#version")
            return syntax.PreprocessorVersion(version=version, profile=profile)

        if directive.type == T.IDENTIFIER and directive.value == "extension":
            self._advance()
            name_token = self._expect(T.IDENTIFIER, "extension name")
            if name_token.value == "all":
                name = syntax.AllExtensions()
            else:
                name = syntax.SpecificExtension(name=name_token.value)

            behavior = None
            if self._match(T.COLON):
                behavior_token = self._expect(T.IDENTIFIER, "extension behavior")
                behavior = EXTENSION_BEHAVIORS.get(behavior_token.value)
                if behavior is None:
                    raise UnexpectedTokenError(
                        behavior_token.text,
                        "'require', 'enable', 'warn' or 'disable'",
                        behavior_token.location,
                        self._get_source_line(behavior_token.line),
                    )
            self._expect_directive_end("#extension")
            return syntax.PreprocessorExtension(name=name, behavior=behavior)

        raise GLSLSyntaxError(
            f"unsupported preprocessor directive '#{directive.describe()}'",
            hash_token.location,
            hint="only #version and #extension are supported",
            source_line=self._get_source_line(hash_token.line),
        )

    def _expect_directive_end(self, directive: str) -> None:
        # A directive on the last line needs its newline too
        self._expect(
            T.NEWLINE,
            "newline",
            hint=f"{directive} must be on its own line, terminated by a newline",
        )

    # =========================================================================
    # Declarations
    # =========================================================================

    def _parse_declaration(self, allow_definition: bool = False) -> syntax.ExternalDeclaration:
        """
        Parse any declaration, or a function definition at top level.

        Args:
            allow_definition: Accept a function body after a prototype
        """
        if self._check(T.PRECISION):
            return self._parse_precision_declaration()

        qualifier = self._parse_type_qualifier()
        if qualifier is not None:
            if self._match(T.SEMICOLON):
                return syntax.GlobalDeclaration(qualifier=qualifier, identifiers=[])
            if self._check(T.IDENTIFIER) and self._peek(1).type == T.LBRACE:
                return self._parse_block(qualifier)
            if self._check(T.IDENTIFIER) and self._peek(1).type in (T.COMMA, T.SEMICOLON):
                return self._parse_global_declaration(qualifier)

        ty = syntax.FullySpecifiedType(
            qualifier=qualifier,
            ty=self._parse_type_specifier(),
        )

        if self._match(T.SEMICOLON):
            head = syntax.SingleDeclaration(ty=ty)
            return syntax.InitDeclaratorList(head=head, tail=[])

        name = self._expect(T.IDENTIFIER, "identifier").value

        if self._check(T.LPAREN):
            prototype = self._parse_function_prototype(ty, name)
            if allow_definition and self._check(T.LBRACE):
                return syntax.FunctionDefinition(
                    prototype=prototype,
                    statement=self._parse_compound_statement(),
                )
            self._expect(T.SEMICOLON, ";", hint="add ';' after the function prototype")
            return prototype

        return self._parse_init_declarator_list(ty, name)

    def _parse_precision_declaration(self) -> syntax.PrecisionDeclaration:
        """Parse 'precision highp float;'."""
        self._advance()
        qualifier = self._match(T.PRECISION_QUALIFIER)
        if qualifier is None:
            raise self._unexpected("'highp', 'mediump' or 'lowp'")
        ty = self._parse_type_specifier()
        self._expect(T.SEMICOLON, ";")
        return syntax.PrecisionDeclaration(qualifier=qualifier.value, ty=ty)

    def _parse_block(self, qualifier: syntax.TypeQualifier) -> syntax.Block:
        """Parse an interface block after its qualifier."""
        name = self._advance().value
        fields = self._parse_struct_body()

        identifier = None
        if self._check(T.IDENTIFIER):
            ident = self._advance().value
            identifier = syntax.ArrayedIdentifier(
                ident=ident,
                array_spec=self._parse_optional_array_specifier(),
            )

        self._expect(T.SEMICOLON, ";", hint="interface blocks end with ';'")
        return syntax.Block(
            qualifier=qualifier,
            name=name,
            fields=fields,
            identifier=identifier,
        )

    def _parse_global_declaration(self, qualifier: syntax.TypeQualifier) -> syntax.GlobalDeclaration:
        """Parse 'invariant gl_Position, other;'."""
        identifiers = [self._advance().value]
        while self._match(T.COMMA):
            identifiers.append(self._expect(T.IDENTIFIER, "identifier").value)
        self._expect(T.SEMICOLON, ";")
        return syntax.GlobalDeclaration(qualifier=qualifier, identifiers=identifiers)

    def _parse_init_declarator_list(
        self, ty: syntax.FullySpecifiedType, name: str
    ) -> syntax.InitDeclaratorList:
        """Parse the declarators after the type and first name."""
        array_specifier = self._parse_optional_array_specifier()
        initializer = None
        if self._match(T.ASSIGN):
            initializer = self._parse_initializer()

        head = syntax.SingleDeclaration(
            ty=ty,
            name=name,
            array_specifier=array_specifier,
            initializer=initializer,
        )

        tail = []
        while self._match(T.COMMA):
            tail_name = self._expect(T.IDENTIFIER, "identifier").value
            tail_array = self._parse_optional_array_specifier()
            tail_init = None
            if self._match(T.ASSIGN):
                tail_init = self._parse_initializer()
            tail.append(syntax.SingleDeclarationNoType(
                name=tail_name,
                array_specifier=tail_array,
                initializer=tail_init,
            ))

        self._expect(T.SEMICOLON, ";", hint="add ';' after the declaration")
        return syntax.InitDeclaratorList(head=head, tail=tail)

    def _parse_initializer(self) -> syntax.Initializer:
        """Parse '= expr' or '= { init, ... }' (after the '=')."""
        if not self._match(T.LBRACE):
            return syntax.SimpleInitializer(expr=self._parse_assignment())

        initializers = [self._parse_initializer()]
        while self._match(T.COMMA):
            if self._check(T.RBRACE):
                break
            initializers.append(self._parse_initializer())
        self._expect(T.RBRACE, "}")
        return syntax.ListInitializer(initializers=initializers)

    def _parse_function_prototype(
        self, ty: syntax.FullySpecifiedType, name: str
    ) -> syntax.FunctionPrototype:
        self._expect(T.LPAREN, "(")

        parameters = []
        if not self._check(T.RPAREN):
            parameters.append(self._parse_parameter())
            while self._match(T.COMMA):
                parameters.append(self._parse_parameter())

        self._expect(T.RPAREN, ")", hint="close the parameter list")
        return syntax.FunctionPrototype(ty=ty, name=name, parameters=parameters)

    def _parse_parameter(self) -> syntax.FunctionParameterDeclaration:
        """Parse one parameter; '(void)' yields an unnamed void parameter."""
        qualifier = self._parse_type_qualifier()
        ty = self._parse_type_specifier()

        if not self._check(T.IDENTIFIER):
            return syntax.UnnamedParameter(qualifier=qualifier, ty=ty)

        name = self._advance().value
        declarator = syntax.FunctionParameterDeclarator(
            ty=ty,
            name=name,
            array_spec=self._parse_optional_array_specifier(),
        )
        return syntax.NamedParameter(qualifier=qualifier, declarator=declarator)

    # =========================================================================
    # Qualifiers
    # =========================================================================

    def _parse_type_qualifier(self) -> Optional[syntax.TypeQualifier]:
        """Parse a run of qualifiers; None if there are none."""
        qualifiers = []

        while self._check(*QUALIFIER_START):
            token = self._advance()

            if token.type == T.SUBROUTINE:
                qualifiers.append(self._parse_subroutine_rest())
            elif token.type == T.LAYOUT:
                qualifiers.append(self._parse_layout_rest())
            elif token.type == T.INVARIANT:
                qualifiers.append(syntax.InvariantQualifier())
            elif token.type == T.PRECISE:
                qualifiers.append(syntax.PreciseQualifier())
            else:
                # Storage, precision and interpolation tokens carry their enum member
                qualifiers.append(token.value)

        if not qualifiers:
            return None
        return syntax.TypeQualifier(qualifiers=qualifiers)

    def _parse_subroutine_rest(self) -> syntax.SubroutineQualifier:
        type_names = []
        if self._match(T.LPAREN):
            type_names.append(self._expect(T.IDENTIFIER, "subroutine type name").value)
            while self._match(T.COMMA):
                type_names.append(self._expect(T.IDENTIFIER, "subroutine type name").value)
            self._expect(T.RPAREN, ")")
        return syntax.SubroutineQualifier(type_names=type_names)

    def _parse_layout_rest(self) -> syntax.LayoutQualifier:
        self._expect(T.LPAREN, "(", hint="layout qualifiers are written layout(...)")

        ids = [self._parse_layout_id()]
        while self._match(T.COMMA):
            ids.append(self._parse_layout_id())

        self._expect(T.RPAREN, ")")
        return syntax.LayoutQualifier(ids=ids)

    def _parse_layout_id(self) -> syntax.LayoutQualifierSpec:
        token = self._peek()
        if token.type == T.STORAGE and token.value == syntax.StorageQualifier.SHARED:
            self._advance()
            return syntax.LayoutShared()

        name = self._expect(T.IDENTIFIER, "layout qualifier name").value
        value = None
        if self._match(T.ASSIGN):
            value = self._parse_conditional()
        return syntax.LayoutIdentifier(name=name, value=value)

    # =========================================================================
    # Types
    # =========================================================================

    def _parse_type_specifier(self) -> syntax.TypeSpecifier:
        ty = self._parse_type_specifier_non_array()
        return syntax.TypeSpecifier(
            ty=ty,
            array_specifier=self._parse_optional_array_specifier(),
        )

    def _parse_type_specifier_non_array(self) -> syntax.NonArrayType:
        token = self._peek()

        if token.type == T.BUILTIN_TYPE:
            self._advance()
            return token.value

        if token.type == T.STRUCT:
            return self._parse_struct_specifier()

        if token.type == T.IDENTIFIER:
            self._advance()
            return syntax.TypeName(name=token.value)

        raise self._unexpected("a type specifier")

    def _parse_struct_specifier(self) -> syntax.StructSpecifier:
        """Parse 'struct [Name] { fields }'."""
        self._advance()
        name = None
        if self._check(T.IDENTIFIER):
            name = self._advance().value
        fields = self._parse_struct_body()
        return syntax.StructSpecifier(name=name, fields=fields)

    def _parse_struct_body(self) -> list[syntax.StructFieldSpecifier]:
        """Parse '{ field; field; ... }' with at least one field."""
        self._expect(T.LBRACE, "{")

        fields = [self._parse_struct_field()]
        while not self._check(T.RBRACE) and not self._at_end():
            fields.append(self._parse_struct_field())

        self._expect(T.RBRACE, "}")
        return fields

    def _parse_struct_field(self) -> syntax.StructFieldSpecifier:
        qualifier = self._parse_type_qualifier()
        ty = self._parse_type_specifier()

        identifiers = [self._parse_arrayed_identifier()]
        while self._match(T.COMMA):
            identifiers.append(self._parse_arrayed_identifier())

        self._expect(T.SEMICOLON, ";", hint="struct fields end with ';'")
        return syntax.StructFieldSpecifier(
            qualifier=qualifier,
            ty=ty,
            identifiers=identifiers,
        )

    def _parse_arrayed_identifier(self) -> syntax.ArrayedIdentifier:
        ident = self._expect(T.IDENTIFIER, "field name").value
        return syntax.ArrayedIdentifier(
            ident=ident,
            array_spec=self._parse_optional_array_specifier(),
        )

    def _parse_optional_array_specifier(self) -> Optional[syntax.ArraySpecifier]:
        if self._check(T.LBRACKET):
            return self._parse_array_specifier()
        return None

    def _parse_array_specifier(self) -> syntax.ArraySpecifier:
        """Parse '[]' or '[expr]'."""
        self._expect(T.LBRACKET, "[")
        if self._match(T.RBRACKET):
            return syntax.UnsizedArray()
        size = self._parse_expression()
        self._expect(T.RBRACKET, "]")
        return syntax.SizedArray(size=size)

    def _parse_fully_specified_type(self) -> syntax.FullySpecifiedType:
        qualifier = self._parse_type_qualifier()
        return syntax.FullySpecifiedType(
            qualifier=qualifier,
            ty=self._parse_type_specifier(),
        )

    def _is_declaration_start(self) -> bool:
        """
        Decide whether the statement at the cursor is a declaration.

        'vec3(1.0);' and 'a[2] = x;' are expressions; 'vec3 v;',
        'Light l;' and 'Light[2] ls;' are declarations.
        """
        token = self._peek()

        if token.type in QUALIFIER_START or token.type in (T.PRECISION, T.STRUCT):
            return True

        if token.type == T.BUILTIN_TYPE:
            following = self._peek(1)
            if following.type == T.LBRACKET:
                # float[2](...) constructs, float[2] x declares
                close = self._find_closing_bracket(self._pos + 1)
                return close is None or self._peek(close - self._pos + 1).type != T.LPAREN
            return following.type != T.LPAREN

        if token.type == T.IDENTIFIER:
            following = self._peek(1)
            if following.type == T.IDENTIFIER:
                return True
            if following.type == T.LBRACKET:
                close = self._find_closing_bracket(self._pos + 1)
                return close is not None and self._peek(close - self._pos + 1).type == T.IDENTIFIER

        return False

    def _find_closing_bracket(self, open_pos: int) -> Optional[int]:
        """Return the index of the ']' matching the '[' at open_pos."""
        depth = 0
        for index in range(open_pos, len(self.tokens)):
            token_type = self.tokens[index].type
            if token_type == T.LBRACKET:
                depth += 1
            elif token_type == T.RBRACKET:
                depth -= 1
                if depth == 0:
                    return index
            elif token_type in (T.SEMICOLON, T.LBRACE, T.RBRACE, T.EOF):
                return None
        return None

    # =========================================================================
    # Statements
    # =========================================================================

    def _parse_statement(self) -> syntax.Statement:
        if self._check(T.LBRACE):
            return self._parse_compound_statement()
        return self._parse_simple_statement()

    def _parse_compound_statement(self) -> syntax.CompoundStatement:
        self._expect(T.LBRACE, "{")

        statements = []
        while not self._check(T.RBRACE) and not self._at_end():
            statements.append(self._parse_statement())

        self._expect(T.RBRACE, "}", hint="unclosed block")
        return syntax.CompoundStatement(statement_list=statements)

    def _parse_simple_statement(self) -> syntax.SimpleStatement:
        token = self._peek()

        if token.type == T.IF:
            return self._parse_selection_statement()
        if token.type == T.SWITCH:
            return self._parse_switch_statement()
        if token.type == T.CASE:
            self._advance()
            expr = self._parse_expression()
            self._expect(T.COLON, ":", hint="case labels end with ':'")
            return syntax.Case(expr=expr)
        if token.type == T.DEFAULT:
            self._advance()
            self._expect(T.COLON, ":")
            return syntax.DefaultCase()
        if token.type == T.WHILE:
            return self._parse_while_statement()
        if token.type == T.DO:
            return self._parse_do_while_statement()
        if token.type == T.FOR:
            return self._parse_for_statement()
        if token.type in (T.CONTINUE, T.BREAK, T.DISCARD, T.RETURN):
            return self._parse_jump_statement()

        if self._is_declaration_start():
            return syntax.DeclarationStatement(declaration=self._parse_declaration())

        if self._match(T.SEMICOLON):
            return syntax.ExpressionStatement(expr=None)

        expr = self._parse_expression()
        self._expect(T.SEMICOLON, ";", hint="add ';' after the expression")
        return syntax.ExpressionStatement(expr=expr)

    def _parse_selection_statement(self) -> syntax.SelectionStatement:
        """Parse 'if (cond) stmt [else stmt]'."""
        self._advance()
        self._expect(T.LPAREN, "(")
        cond = self._parse_expression()
        self._expect(T.RPAREN, ")")

        then_statement = self._parse_statement()
        if self._match(T.ELSE):
            rest = syntax.SelectionElse(
                then_statement=then_statement,
                else_statement=self._parse_statement(),
            )
        else:
            rest = syntax.SelectionThen(statement=then_statement)

        return syntax.SelectionStatement(cond=cond, rest=rest)

    def _parse_switch_statement(self) -> syntax.SwitchStatement:
        self._advance()
        self._expect(T.LPAREN, "(")
        head = self._parse_expression()
        self._expect(T.RPAREN, ")")
        self._expect(T.LBRACE, "{")

        body = []
        while not self._check(T.RBRACE) and not self._at_end():
            body.append(self._parse_statement())

        self._expect(T.RBRACE, "}")
        return syntax.SwitchStatement(head=head, body=body)

    def _parse_condition(self) -> syntax.Condition:
        """Parse a loop condition: an expression or 'type name = init'."""
        if not self._is_declaration_start():
            return syntax.ConditionExpr(expr=self._parse_expression())

        ty = self._parse_fully_specified_type()
        name = self._expect(T.IDENTIFIER, "identifier").value
        self._expect(T.ASSIGN, "=", hint="a declaring condition needs an initializer")
        return syntax.ConditionAssignment(
            ty=ty,
            name=name,
            initializer=self._parse_initializer(),
        )

    def _parse_while_statement(self) -> syntax.WhileStatement:
        self._advance()
        self._expect(T.LPAREN, "(")
        condition = self._parse_condition()
        self._expect(T.RPAREN, ")")
        return syntax.WhileStatement(condition=condition, body=self._parse_statement())

    def _parse_do_while_statement(self) -> syntax.DoWhileStatement:
        self._advance()
        body = self._parse_statement()
        self._expect(T.WHILE, "while", hint="do loops end with 'while (cond);'")
        self._expect(T.LPAREN, "(")
        condition = self._parse_expression()
        self._expect(T.RPAREN, ")")
        self._expect(T.SEMICOLON, ";")
        return syntax.DoWhileStatement(body=body, condition=condition)

    def _parse_for_statement(self) -> syntax.ForStatement:
        """Parse 'for (init; cond; post) body'."""
        self._advance()
        self._expect(T.LPAREN, "(")

        if self._match(T.SEMICOLON):
            init = syntax.ForInitExpression(expr=None)
        elif self._is_declaration_start():
            init = syntax.ForInitDeclaration(declaration=self._parse_declaration())
        else:
            init_expr = self._parse_expression()
            self._expect(T.SEMICOLON, ";")
            init = syntax.ForInitExpression(expr=init_expr)

        condition = None
        if not self._check(T.SEMICOLON):
            condition = self._parse_condition()
        self._expect(T.SEMICOLON, ";")

        post_expr = None
        if not self._check(T.RPAREN):
            post_expr = self._parse_expression()
        self._expect(T.RPAREN, ")")

        return syntax.ForStatement(
            init=init,
            rest=syntax.ForRestStatement(condition=condition, post_expr=post_expr),
            body=self._parse_statement(),
        )

    def _parse_jump_statement(self) -> syntax.JumpStatement:
        token = self._advance()

        if token.type == T.RETURN:
            expr = None
            if not self._check(T.SEMICOLON):
                expr = self._parse_expression()
            self._expect(T.SEMICOLON, ";", hint="add ';' after the return statement")
            return syntax.ReturnStatement(expr=expr)

        self._expect(T.SEMICOLON, ";")
        if token.type == T.CONTINUE:
            return syntax.ContinueStatement()
        if token.type == T.BREAK:
            return syntax.BreakStatement()
        return syntax.DiscardStatement()

    # =========================================================================
    # Expressions
    # =========================================================================

    def _parse_expression(self) -> syntax.Expr:
        """Parse a full expression, including the comma operator."""
        expr = self._parse_assignment()
        while self._match(T.COMMA):
            expr = syntax.Comma(left=expr, right=self._parse_assignment())
        return expr

    def _parse_assignment(self) -> syntax.Expr:
        """Parse assignment (right-associative)."""
        expr = self._parse_conditional()

        if self._peek().type in ASSIGNMENT_OPERATORS:
            op = ASSIGNMENT_OPERATORS[self._advance().type]
            value = self._parse_assignment()
            return syntax.Assignment(target=expr, op=op, value=value)

        return expr

    def _parse_conditional(self) -> syntax.Expr:
        """Parse 'cond ? a : b'."""
        cond = self._parse_binary_level(0)

        if self._match(T.QUESTION):
            then_expr = self._parse_expression()
            self._expect(T.COLON, ":", hint="conditional expressions need ':'")
            else_expr = self._parse_assignment()
            return syntax.Ternary(cond=cond, then_expr=then_expr, else_expr=else_expr)

        return cond

    def _parse_binary_level(self, level: int) -> syntax.Expr:
        if level == len(BINARY_LEVELS):
            return self._parse_unary()
        return self._parse_binary(
            lambda: self._parse_binary_level(level + 1),
            BINARY_LEVELS[level],
        )

    def _parse_binary(
        self,
        operand_parser: Callable[[], syntax.Expr],
        operators: dict[GLSLTokenType, syntax.BinaryOp],
    ) -> syntax.Expr:
        """
        Generic left-associative binary expression parser.

        Args:
            operand_parser: Function to parse operands
            operators: Map of token types to binary operators
        """
        expr = operand_parser()

        while self._peek().type in operators:
            op_token = self._advance()
            right = operand_parser()
            expr = syntax.Binary(op=operators[op_token.type], left=expr, right=right)

        return expr

    def _parse_unary(self) -> syntax.Expr:
        """Parse prefix unary expression (++ -- + - ! ~)."""
        token = self._peek()
        if token.type in UNARY_OPERATORS:
            self._advance()
            return syntax.Unary(op=UNARY_OPERATORS[token.type], expr=self._parse_unary())
        return self._parse_postfix()

    def _parse_postfix(self) -> syntax.Expr:
        """Parse postfix operators: indexing, calls, field access, ++ and --."""
        expr = self._parse_primary()

        while True:
            if self._check(T.LBRACKET):
                expr = syntax.Bracket(expr=expr, array_spec=self._parse_array_specifier())
            elif self._check(T.LPAREN):
                expr = syntax.FunCall(
                    fun=syntax.FunExpr(expr=expr),
                    args=self._parse_call_arguments(),
                )
            elif self._match(T.DOT):
                field = self._expect(T.IDENTIFIER, "field name").value
                expr = syntax.Dot(expr=expr, field=field)
            elif self._match(T.INCREMENT):
                expr = syntax.PostInc(expr=expr)
            elif self._match(T.DECREMENT):
                expr = syntax.PostDec(expr=expr)
            else:
                break

        return expr

    def _parse_primary(self) -> syntax.Expr:
        token = self._peek()

        if token.type in (T.IDENTIFIER, T.BUILTIN_TYPE) and self._peek(1).type == T.LPAREN:
            self._advance()
            return syntax.FunCall(
                fun=syntax.FunName(name=token.text),
                args=self._parse_call_arguments(),
            )

        if token.type == T.BUILTIN_TYPE and self._peek(1).type == T.LBRACKET:
            # Array constructor: float[2](1.0, 2.0), vec3[](a, b)
            self._advance()
            callee = syntax.Bracket(
                expr=syntax.Variable(ident=token.text),
                array_spec=self._parse_array_specifier(),
            )
            if not self._check(T.LPAREN):
                raise self._unexpected("'(' after an array constructor type")
            return syntax.FunCall(
                fun=syntax.FunExpr(expr=callee),
                args=self._parse_call_arguments(),
            )

        if token.type == T.IDENTIFIER:
            self._advance()
            return syntax.Variable(ident=token.value)

        if token.type == T.INT_CONST:
            self._advance()
            return syntax.IntConst(value=token.value)

        if token.type == T.UINT_CONST:
            self._advance()
            return syntax.UIntConst(value=token.value)

        if token.type == T.BOOL_CONST:
            self._advance()
            return syntax.BoolConst(value=token.value)

        if token.type == T.FLOAT_CONST:
            self._advance()
            return syntax.FloatConst(value=token.value)

        if token.type == T.DOUBLE_CONST:
            self._advance()
            return syntax.DoubleConst(value=token.value)

        if self._match(T.LPAREN):
            expr = self._parse_expression()
            self._expect(T.RPAREN, ")", hint="unbalanced parentheses")
            return expr

        raise self._unexpected("an expression")

    def _parse_call_arguments(self) -> list[syntax.Expr]:
        """Parse '(args)'; '()' and '(void)' are both empty."""
        self._expect(T.LPAREN, "(")

        if self._match(T.RPAREN):
            return []

        token = self._peek()
        if (
            token.type == T.BUILTIN_TYPE
            and token.value == syntax.TypeSpecifierNonArray.VOID
            and self._peek(1).type == T.RPAREN
        ):
            self._advance()
            self._advance()
            return []

        args = [self._parse_assignment()]
        while self._match(T.COMMA):
            args.append(self._parse_assignment())

        self._expect(T.RPAREN, ")", hint="close the argument list")
        return args


# =============================================================================
# Convenience Function
# =============================================================================

def parse_source(source: str, filename: str = "<glsl>") -> syntax.TranslationUnit:
    """
    Parse GLSL source code into a translation unit.

    This is a convenience function that combines lexing and parsing.

    Args:
        source: The GLSL source code
        filename: Source filename for error messages

    Returns:
        List of external declarations in source order

    Raises:
        GLSLSyntaxError: If lexing or parsing fails
    """
    lexer = GLSLLexer(source, filename)
    tokens = list(lexer.tokenize())
    parser = GLSLParser(tokens, filename, source.splitlines())
    return parser.parse()
