"""Tests for the yarrlox CLI, config, and diagnostic rendering."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from yarrlox.cli import main
from yarrlox.config import discover_config, find_config, load_config
from yarrlox.errors import (
    Diagnostic,
    DiagnosticLabel,
    DiagnosticRenderer,
    Severity,
)
from yarrlox.source import SourceText, Span


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def script(tmp_path):
    """Write a script into a temp dir and return its path."""

    def write(source: str, name: str = "main.lox"):
        path = tmp_path / name
        path.write_text(source)
        return str(path)

    return write


# --- CLI tests ---


class TestCLI:
    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "run" in result.output
        assert "repl" in result.output
        assert "tokens" in result.output
        assert "view" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestRun:
    def test_prints_output_and_final_value(self, runner, script):
        result = runner.invoke(main, ["run", script('print "hi"; return 1 + 1;')])
        assert result.exit_code == 0
        assert result.output == '"hi"\n2\n'

    def test_nil_final_value_not_echoed(self, runner, script):
        result = runner.invoke(main, ["run", script("print 1;")])
        assert result.exit_code == 0
        assert result.output == "1\n"

    def test_syntax_error_exit_code(self, runner, script):
        result = runner.invoke(main, ["--no-color", "run", script("var y x;\nvar x =;\n")])
        assert result.exit_code == 65
        assert result.output.count("error[E101]") == 2
        assert "main.lox:1:7" in result.output

    def test_resolution_error_exit_code(self, runner, script):
        result = runner.invoke(main, ["--no-color", "run", script("{ var a = a; }")])
        assert result.exit_code == 66
        assert "error[E201]" in result.output

    def test_runtime_error_exit_code(self, runner, script):
        result = runner.invoke(
            main, ["--no-color", "run", script('print 1; "x"(); print 2;')],
        )
        assert result.exit_code == 70
        assert "error[E303]" in result.output
        assert "1\n" in result.output
        assert "2\n" in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["run", str(tmp_path / "nope.lox")])
        assert result.exit_code == 2

    def test_verbose(self, runner, script):
        result = runner.invoke(main, ["-v", "run", script("print 1;")])
        assert result.exit_code == 0

    def test_no_color_flag(self, runner, script):
        result = runner.invoke(main, ["--no-color", "run", script("-nil;")], color=True)
        assert result.exit_code == 70
        assert "\033[" not in result.output

    def test_color_by_default(self, runner, script):
        result = runner.invoke(main, ["run", script("-nil;")], color=True)
        assert "\033[1;31m" in result.output

    def test_config_disables_color(self, runner, script, tmp_path):
        (tmp_path / "yarrlox.toml").write_text("[diagnostics]\ncolor = false\n")
        result = runner.invoke(main, ["run", script("-nil;")], color=True)
        assert result.exit_code == 70
        assert "\033[" not in result.output


class TestRepl:
    def test_lines_share_globals(self, runner, tmp_path):
        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(main, ["repl"], input="var a = 20;\nreturn a + 1;\n")
        assert result.exit_code == 0
        assert "21\n" in result.output
        assert result.output.startswith("> ")

    def test_default_command_is_repl(self, runner, tmp_path):
        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(main, [], input="print 3;\n")
        assert result.exit_code == 0
        assert "3\n" in result.output

    def test_errors_do_not_end_session(self, runner, tmp_path):
        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(
                main, ["--no-color", "repl"], input='1 +;\nprint "still here";\n',
            )
        assert result.exit_code == 0
        assert "error[E101]" in result.output
        assert '"still here"' in result.output

    def test_prompt_from_config(self, runner, tmp_path):
        with runner.isolated_filesystem(temp_dir=tmp_path):
            with open("yarrlox.toml", "w") as f:
                f.write('[repl]\nprompt = "lox> "\n')
            result = runner.invoke(main, ["repl"], input="1;\n")
        assert result.output.startswith("lox> ")


class TestTokens:
    def test_dumps_tokens(self, runner, script):
        result = runner.invoke(main, ["tokens", script('var x = "s";')])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert len(lines) == 5
        assert "VAR" in lines[0]
        assert lines[0].split()[0] == "0..3"
        assert lines[3].split()[-1] == "s"

    def test_shows_invalid_tokens(self, runner, script):
        result = runner.invoke(main, ["tokens", script("@")])
        assert "INVALID" in result.output


class TestView:
    def test_dumps_ast(self, runner, script):
        result = runner.invoke(main, ["view", script("print 1 + 2;")])
        assert result.exit_code == 0
        assert "PrintStmt" in result.output
        assert "BinaryExpr" in result.output
        assert "NumberLit" in result.output

    def test_shows_operators_and_references(self, runner, script):
        result = runner.invoke(main, ["view", script("var a = 1; print a + 2;")])
        assert result.exit_code == 0
        assert result.output.splitlines() == [
            "VarDecl name='a'",
            "  initializer:",
            "    NumberLit value='1'",
            "PrintStmt",
            "  expr:",
            "    BinaryExpr op=+",
            "      left:",
            "        IdentifierExpr reference=a#0",
            "      right:",
            "        NumberLit value='2'",
        ]

    def test_syntax_error(self, runner, script):
        result = runner.invoke(main, ["--no-color", "view", script("print ;")])
        assert result.exit_code == 65
        assert "error[E101]" in result.output


# --- Config tests ---


class TestConfig:
    def test_load(self, tmp_path):
        path = tmp_path / "yarrlox.toml"
        path.write_text('[repl]\nprompt = ">> "\n[diagnostics]\ncolor = false\n')
        config = load_config(path)
        assert config.repl.prompt == ">> "
        assert config.diagnostics.color is False

    def test_defaults_for_missing_sections(self, tmp_path):
        path = tmp_path / "yarrlox.toml"
        path.write_text("")
        config = load_config(path)
        assert config.repl.prompt == "> "
        assert config.diagnostics.color is True

    def test_find_walks_up(self, tmp_path):
        (tmp_path / "yarrlox.toml").write_text("")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config(nested) == (tmp_path / "yarrlox.toml").resolve()

    def test_find_from_file(self, tmp_path):
        (tmp_path / "yarrlox.toml").write_text("")
        script = tmp_path / "main.lox"
        script.write_text("")
        assert find_config(script) == (tmp_path / "yarrlox.toml").resolve()

    def test_find_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            find_config(tmp_path)

    def test_discover_falls_back_to_defaults(self, tmp_path):
        config = discover_config(tmp_path)
        assert config.repl.prompt == "> "


# --- Diagnostic rendering tests ---


class TestDiagnostics:
    def _diag(self) -> Diagnostic:
        return Diagnostic(
            severity=Severity.ERROR,
            code="E101",
            message="expected expression, found ';'",
            labels=[DiagnosticLabel(span=Span(20, 21), message="")],
        )

    def test_render_with_source(self):
        source = SourceText("var x = 1;\nprint y +;\n", "t.lox")
        output = DiagnosticRenderer(color=False).render(self._diag(), source)
        lines = output.splitlines()
        assert lines[0] == "error[E101]: expected expression, found ';'"
        assert lines[1] == "  --> t.lox:2:10"
        assert "print y +;" in lines[3]
        assert lines[4] == "     | " + " " * 9 + "^"

    def test_render_without_source(self):
        output = DiagnosticRenderer(color=False).render(self._diag())
        assert "--> 20..21" in output

    def test_render_color(self):
        output = DiagnosticRenderer(color=True).render(self._diag())
        assert "\033[1;31m" in output

    def test_notes(self):
        diag = self._diag()
        diag.notes.append("statements end with ';'")
        output = DiagnosticRenderer(color=False).render(diag)
        assert "= note: statements end with ';'" in output

    def test_label_message(self):
        diag = Diagnostic(
            severity=Severity.WARNING,
            code="E000",
            message="look here",
            labels=[DiagnosticLabel(span=Span(0, 3), message="this one")],
        )
        output = DiagnosticRenderer(color=False).render(diag, SourceText("abc"))
        assert output.startswith("warning[E000]")
        assert "this one" in output
        assert "<stdin>:1:1" in output
