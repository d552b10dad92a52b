"""
Quoter configuration.
"""

from dataclasses import dataclass


@dataclass
class QuoterOptions:
    """
    Configuration options for quoting and rendering.

    Attributes:
        namespace: Name under which syntax classes are referenced in the
            rendered expression (``syntax.Variable(...)``)
        pretty: Render over several indented lines instead of one
        indent: Spaces per nesting level in pretty output
        line_width: In pretty output, calls and lists whose one-line form
            fits in this width stay on one line
        max_nesting: Deepest bracket nesting allowed in one rendered
            expression. Python's parser stops at 200 levels, and an
            expanded invocation may itself sit inside host brackets.
        filename: Name used for GLSL fragments in parser diagnostics
        macro_names: Invocation names recognised in host sources, as
            (direct-token surface, opaque-string surface)
    """
    namespace: str = "syntax"
    pretty: bool = True
    indent: int = 4
    line_width: int = 88
    max_nesting: int = 100
    filename: str = "<glsl>"
    macro_names: tuple[str, str] = ("glsl", "glsl_str")

    def __post_init__(self) -> None:
        if not self.namespace.isidentifier():
            raise ValueError(f"namespace must be a Python identifier, got {self.namespace!r}")
        if self.indent < 0:
            raise ValueError(f"indent must be non-negative, got {self.indent}")
        if not 2 <= self.max_nesting <= 200:
            raise ValueError(f"max_nesting must be between 2 and 200, got {self.max_nesting}")
