"""
Quasiquoting
============

Turns GLSL syntax trees into Python constructor expressions and exposes
the two invocation surfaces.

Components
----------
- constructor: Output expression tree and its rendering to Python source
- quoted: Optional/indirection lifts and literal emission
- tokenizer: The Quoter, one case per syntax node kind
- driver: Direct-token and opaque-string surfaces, evaluation
- expander: Build-time rewrite of host modules
- options: QuoterOptions
"""

from glsl_quasiquote.quote.constructor import (
    Argument,
    Call,
    ConstructorExpr,
    ConstructorRenderer,
    Literal,
    Reference,
    RenderedModule,
    Sequence,
    Subtree,
    build,
    render,
)
from glsl_quasiquote.quote.driver import (
    evaluate,
    glsl_str,
    quote_module_source,
    quote_source,
    quote_string_literal,
    quote_tokens,
    quote_translation_unit,
)
from glsl_quasiquote.quote.expander import SourceExpander, expand_source
from glsl_quasiquote.quote.options import QuoterOptions
from glsl_quasiquote.quote.tokenizer import Quoter

__all__ = [
    "Argument",
    "Call",
    "ConstructorExpr",
    "ConstructorRenderer",
    "Literal",
    "Reference",
    "RenderedModule",
    "Sequence",
    "Subtree",
    "build",
    "render",
    "evaluate",
    "glsl_str",
    "quote_module_source",
    "quote_source",
    "quote_string_literal",
    "quote_tokens",
    "quote_translation_unit",
    "SourceExpander",
    "expand_source",
    "QuoterOptions",
    "Quoter",
]
