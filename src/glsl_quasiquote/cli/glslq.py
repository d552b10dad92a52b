"""
glslq - GLSL Quasiquote Command-Line Interface
==============================================

Build step for projects that embed GLSL. It works in two modes,
chosen by the input file's extension.

Shader Mode
-----------
A GLSL source file (.glsl .vert .frag .geom .comp .tesc .tese) becomes a
Python module defining TRANSLATION_UNIT, the syntax tree of the shader:

    $ glslq shader.frag                  # writes shader_glsl.py
    $ glslq shader.frag -o shaders/main.py

Host Mode
---------
A Python host template (.pyg) is expanded: every glsl(...) and
glsl_str(...) invocation is replaced by its constructor expression:

    $ glslq shaders.pyg                  # writes shaders.py
    $ glslq app.py -o app_expanded.py    # .py input needs a distinct -o

Options
-------
    --compact            Render each expression on one line
    --namespace NAME     Name the syntax module is imported under
    -v, --verbose        Debug logging
"""

import logging
from pathlib import Path
from typing import Optional

import click

from glsl_quasiquote import __version__
from glsl_quasiquote.cli.errors import handle_cli_exception
from glsl_quasiquote.quote import QuoterOptions, expand_source, quote_module_source

logger = logging.getLogger(__name__)

SHADER_SUFFIXES = (".glsl", ".vert", ".frag", ".geom", ".comp", ".tesc", ".tese")
TEMPLATE_SUFFIX = ".pyg"

MODULE_TEMPLATE = '''"""
GLSL syntax tree generated by glslq from {source_name}.

Do not edit: regenerate with `glslq {source_name}`.
"""

from glsl_quasiquote.glsl import syntax{alias}
{definitions}
TRANSLATION_UNIT = {expression}
'''


def default_output(input_file: Path) -> Path:
    """
    Work out the output path when -o is not given.

    Raises:
        click.BadParameter: For unsupported input extensions
    """
    suffix = input_file.suffix.lower()
    if suffix in SHADER_SUFFIXES:
        return input_file.with_name(f"{input_file.stem}_glsl.py")
    if suffix == TEMPLATE_SUFFIX:
        return input_file.with_suffix(".py")
    if suffix == ".py":
        raise click.BadParameter(
            "a .py host file needs an explicit, different --output",
            param_hint="'-o' / '--output'",
        )
    raise click.BadParameter(
        f"unsupported input extension '{input_file.suffix}' "
        f"(expected one of {', '.join(SHADER_SUFFIXES + (TEMPLATE_SUFFIX, '.py'))})",
        param_hint="'INPUT_FILE'",
    )


def generate_shader_module(source: str, source_name: str, options: QuoterOptions) -> str:
    """Build the text of a Python module holding a shader's syntax tree."""
    alias = "" if options.namespace == "syntax" else f" as {options.namespace}"
    rendered = quote_module_source(source, options)
    definitions = "".join(f"\n\n{definition}\n" for definition in rendered.definitions)
    if definitions:
        definitions += "\n"
    return MODULE_TEMPLATE.format(
        source_name=source_name,
        alias=alias,
        definitions=definitions,
        expression=rendered.expression,
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output Python file (default: <stem>_glsl.py or <stem>.py)",
)
@click.option(
    "--compact",
    is_flag=True,
    help="Render each constructor expression on a single line",
)
@click.option(
    "--namespace",
    default="syntax",
    show_default=True,
    help="Name the syntax module is referenced under in generated code",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="glslq")
def main(
    input_file: Path,
    output: Optional[Path],
    compact: bool,
    namespace: str,
    verbose: bool,
) -> None:
    """
    Quote GLSL into Python syntax-tree constructors.

    INPUT_FILE is a GLSL shader (.glsl, .vert, .frag, ...) or a Python
    host template (.pyg, or .py with -o).

    \b
    Examples:
        glslq shader.frag               # Outputs shader_glsl.py
        glslq shader.frag -o tree.py    # Specify output file
        glslq shaders.pyg               # Expand host template to shaders.py
        glslq --compact shader.vert     # One-line expressions
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")

    try:
        if output is None:
            output = default_output(input_file)
        elif output.resolve() == input_file.resolve():
            raise click.BadParameter(
                "output would overwrite the input file",
                param_hint="'-o' / '--output'",
            )

        if not namespace.isidentifier():
            raise click.BadParameter(
                f"{namespace!r} is not a Python identifier",
                param_hint="'--namespace'",
            )

        options = QuoterOptions(
            namespace=namespace,
            pretty=not compact,
            filename=str(input_file),
        )
        logger.debug(f"Options: {options}")

        source = input_file.read_text()

        if input_file.suffix.lower() in SHADER_SUFFIXES:
            if verbose:
                click.echo(f"Quoting shader {input_file}...")
            result = generate_shader_module(source, input_file.name, options)
        else:
            if verbose:
                click.echo(f"Expanding host module {input_file}...")
            result = expand_source(source, options, filename=str(input_file))

        output.write_text(result)

        if verbose:
            click.echo(f"Wrote {len(result)} bytes to {output}")

        click.echo(f"Quoted {input_file} -> {output}")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Quote")


if __name__ == "__main__":
    main()
