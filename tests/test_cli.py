"""
glslq Command-Line Test Suite
=============================

Tests for the glslq tool in shader mode and host mode, its error
reporting and its exit codes.
"""

import pytest
from glsl_quasiquote.cli.errors import ExitCode
from glsl_quasiquote.glsl import parse_source


SHADER = """\
#version 330 core
uniform float time;
out vec4 color;
void main() {
    color = vec4(sin(time), 0.0, 0.0, 1.0);
}
"""


def load_module(path) -> dict:
    namespace = {}
    exec(compile(path.read_text(), str(path), "exec"), namespace)
    return namespace


# =============================================================================
# Basic Options
# =============================================================================

class TestBasicOptions:
    """Help and version output."""

    def test_cli_help(self):
        from click.testing import CliRunner
        from glsl_quasiquote.cli.glslq import main

        runner = CliRunner()
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "Quote GLSL into Python" in result.output
        assert "--compact" in result.output

    def test_cli_version(self):
        from click.testing import CliRunner
        from glsl_quasiquote.cli.glslq import main

        runner = CliRunner()
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert "glslq" in result.output
        assert "1.0.0" in result.output


# =============================================================================
# Shader Mode
# =============================================================================

class TestShaderMode:
    """GLSL files become Python modules."""

    def test_default_output(self, tmp_path):
        from click.testing import CliRunner
        from glsl_quasiquote.cli.glslq import main

        shader = tmp_path / "wave.frag"
        shader.write_text(SHADER)

        runner = CliRunner()
        result = runner.invoke(main, [str(shader)])

        assert result.exit_code == 0, result.output
        output = tmp_path / "wave_glsl.py"
        assert output.exists()
        assert "Quoted" in result.output
        assert load_module(output)["TRANSLATION_UNIT"] == parse_source(SHADER)

    def test_explicit_output(self, tmp_path):
        from click.testing import CliRunner
        from glsl_quasiquote.cli.glslq import main

        shader = tmp_path / "basic.vert"
        shader.write_text("void main() {}\n")
        output = tmp_path / "tree.py"

        runner = CliRunner()
        result = runner.invoke(main, [str(shader), "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert load_module(output)["TRANSLATION_UNIT"] == parse_source("void main() {}")

    def test_generated_module_docstring(self, tmp_path):
        from click.testing import CliRunner
        from glsl_quasiquote.cli.glslq import main

        shader = tmp_path / "basic.glsl"
        shader.write_text("void main() {}\n")

        runner = CliRunner()
        runner.invoke(main, [str(shader)])

        text = (tmp_path / "basic_glsl.py").read_text()
        assert text.startswith('"""')
        assert "basic.glsl" in text
        assert "from glsl_quasiquote.glsl import syntax\n" in text

    def test_compact(self, tmp_path):
        from click.testing import CliRunner
        from glsl_quasiquote.cli.glslq import main

        shader = tmp_path / "wave.frag"
        shader.write_text(SHADER)

        runner = CliRunner()
        result = runner.invoke(main, [str(shader), "--compact"])

        assert result.exit_code == 0, result.output
        text = (tmp_path / "wave_glsl.py").read_text()
        assignment = [line for line in text.splitlines() if line.startswith("TRANSLATION_UNIT")]
        assert len(assignment) == 1
        assert assignment[0].endswith("]")

    def test_namespace(self, tmp_path):
        from click.testing import CliRunner
        from glsl_quasiquote.cli.glslq import main

        shader = tmp_path / "wave.frag"
        shader.write_text(SHADER)

        runner = CliRunner()
        result = runner.invoke(main, [str(shader), "--namespace", "gs"])

        assert result.exit_code == 0, result.output
        output = tmp_path / "wave_glsl.py"
        assert "import syntax as gs" in output.read_text()
        assert load_module(output)["TRANSLATION_UNIT"] == parse_source(SHADER)

    def test_verbose(self, tmp_path):
        from click.testing import CliRunner
        from glsl_quasiquote.cli.glslq import main

        shader = tmp_path / "basic.comp"
        shader.write_text("layout(local_size_x = 8) in;\nvoid main() {}\n")

        runner = CliRunner()
        result = runner.invoke(main, [str(shader), "-v"])

        assert result.exit_code == 0, result.output
        assert "Quoting shader" in result.output
        assert "Wrote" in result.output

    @pytest.mark.parametrize("extra", [[], ["--compact"]])
    def test_deep_shader(self, tmp_path, extra):
        from click.testing import CliRunner
        from glsl_quasiquote.cli.glslq import main

        source = "float f() { return " + " + ".join(["1.0"] * 200) + "; }\n"
        shader = tmp_path / "sum.frag"
        shader.write_text(source)
        output = tmp_path / "sum_glsl.py"

        runner = CliRunner()
        result = runner.invoke(main, [str(shader), "-o", str(output)] + extra)

        assert result.exit_code == 0, result.output
        assert "def _glsl_subtree_0()" in output.read_text()
        assert load_module(output)["TRANSLATION_UNIT"] == parse_source(source)


# =============================================================================
# Host Mode
# =============================================================================

class TestHostMode:
    """Host templates are expanded."""

    def test_template_expansion(self, tmp_path):
        from click.testing import CliRunner
        from glsl_quasiquote.cli.glslq import main

        template = tmp_path / "shaders.pyg"
        template.write_text(
            '"""Shaders."""\n'
            'VERTEX = glsl(void main() { gl_Position = vec4(0.0); })\n'
            'FRAGMENT = glsl_str("""\n#version 330\nvoid main() {}\n""")\n'
        )

        runner = CliRunner()
        result = runner.invoke(main, [str(template)])

        assert result.exit_code == 0, result.output
        module = load_module(tmp_path / "shaders.py")
        assert module["VERTEX"] == parse_source("void main() { gl_Position = vec4(0.0); }")
        assert module["FRAGMENT"][0].version == 330

    def test_python_input_needs_output(self, tmp_path):
        from click.testing import CliRunner
        from glsl_quasiquote.cli.glslq import main

        host = tmp_path / "app.py"
        host.write_text('X = glsl_str("float x;")\n')

        runner = CliRunner()
        result = runner.invoke(main, [str(host)])

        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "--output" in result.output

    def test_python_input_with_output(self, tmp_path):
        from click.testing import CliRunner
        from glsl_quasiquote.cli.glslq import main

        host = tmp_path / "app.py"
        host.write_text('X = glsl_str("float x;")\n')
        output = tmp_path / "app_expanded.py"

        runner = CliRunner()
        result = runner.invoke(main, [str(host), "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert load_module(output)["X"] == parse_source("float x;")

    def test_refuses_to_overwrite_input(self, tmp_path):
        from click.testing import CliRunner
        from glsl_quasiquote.cli.glslq import main

        host = tmp_path / "app.py"
        host.write_text('X = glsl_str("float x;")\n')

        runner = CliRunner()
        result = runner.invoke(main, [str(host), "-o", str(host)])

        assert result.exit_code == ExitCode.INVALID_ARGS
        assert host.read_text() == 'X = glsl_str("float x;")\n'


# =============================================================================
# Errors and Exit Codes
# =============================================================================

class TestErrors:
    """Error reporting and exit codes."""

    def test_parse_error(self, tmp_path):
        from click.testing import CliRunner
        from glsl_quasiquote.cli.glslq import main

        shader = tmp_path / "broken.frag"
        shader.write_text("void main() {\n    float x\n}\n")

        runner = CliRunner()
        result = runner.invoke(main, [str(shader)])

        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "GLSL error:" in result.output
        assert "broken.frag:3:1" in result.output
        assert not (tmp_path / "broken_glsl.py").exists()

    def test_invocation_error(self, tmp_path):
        from click.testing import CliRunner
        from glsl_quasiquote.cli.glslq import main

        template = tmp_path / "bad.pyg"
        template.write_text("X = glsl_str(1, 2)\n")

        runner = CliRunner()
        result = runner.invoke(main, [str(template)])

        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "single opaque string" in result.output

    def test_unsupported_extension(self, tmp_path):
        from click.testing import CliRunner
        from glsl_quasiquote.cli.glslq import main

        notes = tmp_path / "notes.txt"
        notes.write_text("void main() {}")

        runner = CliRunner()
        result = runner.invoke(main, [str(notes)])

        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "unsupported input extension" in result.output

    def test_invalid_namespace(self, tmp_path):
        from click.testing import CliRunner
        from glsl_quasiquote.cli.glslq import main

        shader = tmp_path / "basic.frag"
        shader.write_text("void main() {}")

        runner = CliRunner()
        result = runner.invoke(main, [str(shader), "--namespace", "not-valid"])

        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_missing_input(self, tmp_path):
        from click.testing import CliRunner
        from glsl_quasiquote.cli.glslq import main

        runner = CliRunner()
        result = runner.invoke(main, [str(tmp_path / "absent.frag")])

        assert result.exit_code == 2

    @pytest.mark.parametrize("code,value", [
        (ExitCode.SUCCESS, 0),
        (ExitCode.BUILD_ERROR, 1),
        (ExitCode.INVALID_ARGS, 2),
        (ExitCode.INTERNAL_ERROR, 3),
    ])
    def test_exit_code_values(self, code, value):
        assert code == value

    def test_nesting_error_is_build_error(self, capsys):
        from glsl_quasiquote.cli.errors import handle_cli_exception
        from glsl_quasiquote.errors import NestingError, SourceLocation

        error = NestingError(150, 100, SourceLocation("deep.frag", 1, 1))
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_exception(error)

        assert exc_info.value.code == ExitCode.BUILD_ERROR
        assert "deep.frag:1:1: " in capsys.readouterr().err
