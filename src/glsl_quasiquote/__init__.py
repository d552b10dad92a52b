"""
GLSL Quasiquote - Embedded Shaders as Python Syntax Trees
=========================================================

This package lets Python programs embed GLSL (OpenGL Shading Language)
source and obtain a fully structured syntax tree for it. At build time
the shader is parsed and the resulting tree is written back out as a
Python constructor expression; evaluating that expression rebuilds the
exact tree, with no GLSL parsing left to do at runtime.

Main Components
---------------
- **glsl**: GLSL front end
    Lexer, recursive descent parser and the syntax tree dataclasses

- **quote**: Quasiquoting
    The Quoter (syntax tree to constructor expression), rendering to
    Python source, the two invocation surfaces and host expansion

- **cli**: Command-line tool (glslq)
    Turns shader files into Python modules and expands host templates

Invocation Surfaces
-------------------
Direct tokens, written in a host template and expanded by glslq:
    shader = glsl(void main() { gl_FragColor = vec4(1.0); })

Opaque string, which also works unexpanded through the runtime fallback:
    shader = glsl_str(\"\"\"
    #version 330 core
    void main() {}
    \"\"\")

Quick Start
-----------
Quote a shader and rebuild it:
    >>> from glsl_quasiquote import evaluate, quote_source
    >>> source = quote_source("void main() {}")
    >>> unit = evaluate(source)
    >>> unit[0].prototype.name
    'main'

Or use the command-line tool:
    $ glslq shader.frag                 # writes shader_glsl.py
    $ glslq shaders.pyg                 # expands to shaders.py
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from glsl_quasiquote.errors import (
    GLSLQuasiquoteError,
    GLSLParseFailure,
    InvocationError,
    NestingError,
    QuoteError,
    SourceLocation,
    UnhandledNodeError,
)
from glsl_quasiquote.glsl import GLSLSyntaxError, parse_source, syntax
from glsl_quasiquote.quote import (
    Quoter,
    QuoterOptions,
    evaluate,
    expand_source,
    glsl_str,
    quote_module_source,
    quote_source,
    quote_string_literal,
    quote_tokens,
    quote_translation_unit,
    render,
)

__all__ = [
    "__version__",
    # Errors
    "GLSLQuasiquoteError",
    "GLSLParseFailure",
    "GLSLSyntaxError",
    "InvocationError",
    "NestingError",
    "QuoteError",
    "SourceLocation",
    "UnhandledNodeError",
    # Front end
    "parse_source",
    "syntax",
    # Quoting
    "Quoter",
    "QuoterOptions",
    "evaluate",
    "expand_source",
    "glsl_str",
    "quote_module_source",
    "quote_source",
    "quote_string_literal",
    "quote_tokens",
    "quote_translation_unit",
    "render",
]
