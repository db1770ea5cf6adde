"""Callable values: user-defined closures and native builtins."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from yarrlox.ast_nodes import FunctionDecl
    from yarrlox.environment import Environment
    from yarrlox.interpreter import Interpreter
    from yarrlox.resolver import Locals
    from yarrlox.values import Value


class LoxCallable:
    """Base of the closed set of callable kinds: LoxFunction and Clock."""

    def arity(self) -> int:
        raise NotImplementedError

    def call(self, interpreter: Interpreter, args: list[Value]) -> Value:
        raise NotImplementedError


class LoxFunction(LoxCallable):
    """A user function paired with the environment it was declared in.

    The resolver table the declaration was resolved under travels with the
    function, so it can still be called after a later program (e.g. the next
    REPL line) has replaced the interpreter's table.
    """

    def __init__(self, declaration: FunctionDecl, closure: Environment, locals: Locals) -> None:
        self.declaration = declaration
        self.closure = closure
        self.locals = locals

    @property
    def name(self) -> str:
        return self.declaration.name

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: Interpreter, args: list[Value]) -> Value:
        env = self.closure.child()
        for param, arg in zip(self.declaration.params, args):
            env.define(param, arg)
        return interpreter.execute_function_body(self, env)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LoxFunction):
            return NotImplemented
        return self.declaration is other.declaration

    def __hash__(self) -> int:
        return id(self.declaration)

    def __str__(self) -> str:
        return f"<fn {self.name}>"

    def __repr__(self) -> str:
        return f"LoxFunction({self.name!r}, arity={self.arity()})"


class Clock(LoxCallable):
    """Native `clock()`: wall-clock seconds since the epoch."""

    def arity(self) -> int:
        return 0

    def call(self, interpreter: Interpreter, args: list[Value]) -> Value:
        return time.time()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LoxCallable):
            return NotImplemented
        return isinstance(other, Clock)

    def __hash__(self) -> int:
        return hash(Clock)

    def __str__(self) -> str:
        return "<native fn clock>"

    def __repr__(self) -> str:
        return "Clock()"


BUILTINS: dict[str, LoxCallable] = {
    "clock": Clock(),
}
