"""yarrlox command line interface."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, is_dataclass
from enum import Enum
from pathlib import Path

import click

from yarrlox import __version__
from yarrlox.api import Reporter, evaluate
from yarrlox.ast_nodes import Reference
from yarrlox.config import discover_config
from yarrlox.errors import Diagnostic, DiagnosticRenderer, LoxError, SyntaxErrors
from yarrlox.interpreter import Interpreter
from yarrlox.lexer import Lexer
from yarrlox.parser import Parser
from yarrlox.source import SourceText
from yarrlox.values import stringify


@dataclass
class _Options:
    no_color: bool = False


def _renderer(opts: _Options, start: Path | None) -> DiagnosticRenderer:
    config = discover_config(start)
    return DiagnosticRenderer(color=config.diagnostics.color and not opts.no_color)


def _stderr_reporter(renderer: DiagnosticRenderer, text: SourceText) -> Reporter:
    def report(diag: Diagnostic) -> None:
        click.echo(renderer.render(diag, text), err=True)

    return report


@click.group(invoke_without_command=True)
@click.version_option(__version__, prog_name="yarrlox")
@click.option("-v", "--verbose", is_flag=True, help="Log pipeline stages to stderr.")
@click.option("--no-color", is_flag=True, help="Render diagnostics without ANSI colors.")
@click.pass_context
def main(ctx: click.Context, verbose: bool, no_color: bool) -> None:
    """The yarrlox interpreter. Starts a REPL when no command is given."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s",
        )
    ctx.obj = _Options(no_color=no_color)
    if ctx.invoked_subcommand is None:
        ctx.invoke(repl)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def run(opts: _Options, file: str) -> None:
    """Run a script and print its final value."""
    path = Path(file)
    source = path.read_text()
    text = SourceText(source, str(path))
    renderer = _renderer(opts, path)

    try:
        value = evaluate(source, Interpreter(), _stderr_reporter(renderer, text))
    except LoxError as e:
        raise SystemExit(e.exit_code)

    if value is not None:
        click.echo(stringify(value))


@main.command()
@click.pass_obj
def repl(opts: _Options) -> None:
    """Read and evaluate lines interactively, sharing globals between them."""
    config = discover_config()
    renderer = _renderer(opts, None)
    prompt = config.repl.prompt
    interpreter = Interpreter()

    click.echo(prompt, nl=False)
    for line in click.get_text_stream("stdin"):
        text = SourceText(line, "<repl>")
        try:
            value = evaluate(line, interpreter, _stderr_reporter(renderer, text))
        except LoxError:
            pass  # diagnostics already went to stderr
        else:
            click.echo(stringify(value))
        click.echo(prompt, nl=False)
    click.echo()


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def tokens(file: str) -> None:
    """Dump the token stream of a source file."""
    source = Path(file).read_text()
    for tok in Lexer(source):
        click.echo(f"{tok.span.start:>5}..{tok.span.end:<5} {tok.kind.name:<26} {tok.lexeme}")


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def view(opts: _Options, file: str) -> None:
    """View the AST of a source file."""
    path = Path(file)
    source = path.read_text()

    try:
        stmts = Parser(source).parse()
    except SyntaxErrors as e:
        report = _stderr_reporter(_renderer(opts, path), SourceText(source, str(path)))
        for diag in e.diagnostics():
            report(diag)
        raise SystemExit(e.exit_code)

    for stmt in stmts:
        _dump_ast(stmt, 0)


def _describe(value: object) -> str:
    if isinstance(value, Reference):
        return f"{value.name}#{value.id}"
    if isinstance(value, Enum):
        return str(value.value)
    return repr(value)


def _is_subtree(value: object) -> bool:
    if isinstance(value, list):
        return bool(value) and is_dataclass(value[0])
    return is_dataclass(value) and not isinstance(value, Reference)


def _dump_ast(node: object, depth: int) -> None:
    """Print a node with its scalar fields inline and its subtrees indented below."""
    indent = "  " * depth
    inline: list[str] = []
    subtrees: list[tuple[str, object]] = []
    for f in fields(node):  # type: ignore[arg-type]
        if f.name == "span":
            continue
        value = getattr(node, f.name)
        if _is_subtree(value):
            subtrees.append((f.name, value))
        elif value is not None:
            inline.append(f"{f.name}={_describe(value)}")

    click.echo(" ".join([f"{indent}{type(node).__name__}", *inline]))
    for name, value in subtrees:
        click.echo(f"{indent}  {name}:")
        for child in value if isinstance(value, list) else [value]:
            _dump_ast(child, depth + 2)
