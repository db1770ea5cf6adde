"""Single entry point running source text through the whole pipeline."""

from __future__ import annotations

import logging
from collections.abc import Callable

from yarrlox.errors import Diagnostic, LoxError
from yarrlox.interpreter import Interpreter
from yarrlox.parser import Parser
from yarrlox.resolver import resolve
from yarrlox.values import Value

logger = logging.getLogger(__name__)

Reporter = Callable[[Diagnostic], None]


def evaluate(
    source: str,
    interpreter: Interpreter | None = None,
    reporter: Reporter | None = None,
) -> Value:
    """Parse, resolve and run `source`, returning the program's final value.

    Raises SyntaxErrors, ResolutionError or RuntimeErrors; before raising,
    each diagnostic of the failure is handed to `reporter`. Pass the same
    interpreter across calls to keep global state between them.
    """
    if interpreter is None:
        interpreter = Interpreter()

    try:
        parser = Parser(source)
        stmts = parser.parse()
        logger.debug("parsed %d statements, %d references", len(stmts), parser.reference_count)
        locals = resolve(stmts, parser.reference_count)
        return interpreter.interpret(stmts, locals)
    except LoxError as e:
        logger.debug("evaluation failed: %s", e)
        if reporter is not None:
            for diag in e.diagnostics():
                reporter(diag)
        raise
