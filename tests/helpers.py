"""Shared test helpers for the yarrlox test suite."""

from __future__ import annotations

import io
from dataclasses import dataclass

import pytest

from yarrlox.api import evaluate
from yarrlox.ast_nodes import Stmt
from yarrlox.errors import (
    LoxError,
    LoxRuntimeError,
    ParseErrorKind,
    ResolutionError,
    RuntimeErrors,
    SyntaxErrors,
)
from yarrlox.interpreter import Interpreter
from yarrlox.parser import Parser
from yarrlox.values import Value


@dataclass
class RunResult:
    value: Value
    output: str
    error: LoxError | None = None

    @property
    def lines(self) -> list[str]:
        return self.output.splitlines()


def run(source: str, interpreter: Interpreter | None = None) -> RunResult:
    """Evaluate source with captured output; errors are returned, not raised."""
    out = io.StringIO()
    if interpreter is None:
        interpreter = Interpreter(out)
    try:
        value = evaluate(source, interpreter)
    except LoxError as e:
        return RunResult(None, out.getvalue(), e)
    return RunResult(value, out.getvalue())


def run_ok(source: str) -> RunResult:
    """Evaluate source, asserting it succeeds."""
    result = run(source)
    assert result.error is None, f"Unexpected failure: {result.error}"
    return result


def parse(source: str) -> list[Stmt]:
    """Parse source, asserting there are no syntax errors."""
    return Parser(source).parse()


def syntax_error_kinds(source: str) -> list[ParseErrorKind]:
    """Parse source, asserting it fails, and return the error kinds in order."""
    with pytest.raises(SyntaxErrors) as excinfo:
        Parser(source).parse()
    return [e.kind for e in excinfo.value.errors]


def resolution_error(source: str) -> ResolutionError:
    result = run(source)
    assert isinstance(result.error, ResolutionError), (
        f"Expected a resolution error but got: {result.error or 'no error'}"
    )
    return result.error


def runtime_errors(source: str) -> tuple[list[LoxRuntimeError], RunResult]:
    """Evaluate source, asserting it fails at run time."""
    result = run(source)
    assert isinstance(result.error, RuntimeErrors), (
        f"Expected runtime errors but got: {result.error or 'no error'}"
    )
    return result.error.errors, result
