"""
GLSL Front End
==============

A lexer and recursive descent parser for the OpenGL Shading Language,
producing the syntax tree defined in :mod:`glsl_quasiquote.glsl.syntax`.

The quoter treats this subpackage as a black box: source text goes in,
a translation unit (a list of external declarations) or a
GLSLSyntaxError comes out.

Components
----------
- syntax: Node dataclasses and catalog enums
- lexer: Source text to tokens
- parser: Tokens to translation unit
- errors: Lexer and parser diagnostics

Example
-------
>>> from glsl_quasiquote.glsl import parse_source, syntax
>>> unit = parse_source("precision highp float;")
>>> unit[0].qualifier is syntax.PrecisionQualifier.HIGH
True
"""

from glsl_quasiquote.glsl import syntax
from glsl_quasiquote.glsl.errors import (
    GLSLError,
    GLSLSyntaxError,
    InvalidCharacterError,
    MissingTokenError,
    UnexpectedTokenError,
)
from glsl_quasiquote.glsl.lexer import GLSLLexer, GLSLToken, GLSLTokenType
from glsl_quasiquote.glsl.parser import GLSLParser, parse_source

__all__ = [
    "syntax",
    "GLSLLexer",
    "GLSLToken",
    "GLSLTokenType",
    "GLSLParser",
    "parse_source",
    "GLSLError",
    "GLSLSyntaxError",
    "InvalidCharacterError",
    "MissingTokenError",
    "UnexpectedTokenError",
]
