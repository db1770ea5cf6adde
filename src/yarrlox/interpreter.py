"""Tree-walking evaluator for resolved yarrlox programs."""

from __future__ import annotations

import logging
import math
import operator
import sys
from collections.abc import Callable
from dataclasses import dataclass
from typing import TextIO, Union

from yarrlox.ast_nodes import (
    AssignExpr,
    BinaryExpr,
    BinaryOp,
    BlockStmt,
    BooleanLit,
    BreakStmt,
    CallExpr,
    Expr,
    ExprStmt,
    FunctionDecl,
    GroupingExpr,
    IdentifierExpr,
    IfStmt,
    NilLit,
    NumberLit,
    PrintStmt,
    Reference,
    ReturnStmt,
    Stmt,
    StringLit,
    UnaryExpr,
    UnaryOp,
    VarDecl,
    WhileStmt,
)
from yarrlox.callables import BUILTINS, LoxCallable, LoxFunction
from yarrlox.environment import Environment
from yarrlox.errors import (
    ArityMismatchError,
    LoxRuntimeError,
    NotCallableError,
    OperandTypeError,
    RuntimeErrors,
)
from yarrlox.resolver import Locals
from yarrlox.source import Span
from yarrlox.values import LoxType, Value, is_truthy, stringify, type_of, values_equal

logger = logging.getLogger(__name__)


# ── Control signals ──────────────────────────────────────────────


class _Break:
    """Signal: unwind to the nearest enclosing loop."""

    def __repr__(self) -> str:
        return "BREAK"


BREAK = _Break()


@dataclass(frozen=True)
class Returned:
    """Signal: unwind to the nearest function call carrying `value`."""

    value: Value


# None means the statement completed normally.
ExecResult = Union[None, _Break, Returned]


def _divide(left: float, right: float) -> float:
    """IEEE-754 division; Python raises on a zero divisor instead."""
    if right == 0.0:
        if left == 0.0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


# Every yarrlox call nests several Python frames.
RECURSION_LIMIT = 20_000

_NUMERIC_OPS: dict[BinaryOp, Callable[[float, float], Value]] = {
    BinaryOp.SUB: operator.sub,
    BinaryOp.MUL: operator.mul,
    BinaryOp.DIV: _divide,
    BinaryOp.GREATER: operator.gt,
    BinaryOp.GREATER_EQUAL: operator.ge,
    BinaryOp.LESS: operator.lt,
    BinaryOp.LESS_EQUAL: operator.le,
}


class Interpreter:
    """Executes resolved programs against a persistent global environment.

    `print` output goes to `output` (any object with a `write` method),
    falling back to whatever `sys.stdout` is at write time.
    """

    def __init__(self, output: TextIO | None = None) -> None:
        if sys.getrecursionlimit() < RECURSION_LIMIT:
            sys.setrecursionlimit(RECURSION_LIMIT)
        self._output = output
        self.globals = Environment()
        for name, builtin in BUILTINS.items():
            self.globals.define(name, builtin)
        self._environment = self.globals
        self._locals: Locals = []

    @property
    def output(self) -> TextIO:
        return self._output if self._output is not None else sys.stdout

    # ── Public API ──────────────────────────────────────────────

    def interpret(self, stmts: list[Stmt], locals: Locals) -> Value:
        """Run each top-level statement, collecting one error per failing statement.

        Returns the value of a top-level `return` (nil if there is none).
        Raises RuntimeErrors if any statement failed.
        """
        self._locals = locals
        self._environment = self.globals
        errors: list[LoxRuntimeError] = []
        result: Value = None

        for stmt in stmts:
            try:
                signal = self.execute(stmt)
            except LoxRuntimeError as e:
                logger.debug("statement at %s failed: %s", stmt.span, e.message)
                errors.append(e)
                continue
            if isinstance(signal, Returned):
                result = signal.value
                break

        if errors:
            raise RuntimeErrors(errors)
        return result

    # ── Statements ───────────────────────────────────────────────

    def execute(self, stmt: Stmt) -> ExecResult:
        if isinstance(stmt, ExprStmt):
            self.evaluate(stmt.expr)
        elif isinstance(stmt, PrintStmt):
            value = self.evaluate(stmt.expr)
            self.output.write(stringify(value) + "\n")
        elif isinstance(stmt, VarDecl):
            value = None
            if stmt.initializer is not None:
                value = self.evaluate(stmt.initializer)
            self._environment.define(stmt.name, value)
        elif isinstance(stmt, BlockStmt):
            return self.execute_block(stmt.stmts, self._environment.child())
        elif isinstance(stmt, IfStmt):
            if is_truthy(self.evaluate(stmt.condition)):
                return self.execute(stmt.then_branch)
            if stmt.else_branch is not None:
                return self.execute(stmt.else_branch)
        elif isinstance(stmt, WhileStmt):
            while is_truthy(self.evaluate(stmt.condition)):
                signal = self.execute(stmt.body)
                if signal is BREAK:
                    break
                if signal is not None:
                    return signal
        elif isinstance(stmt, BreakStmt):
            return BREAK
        elif isinstance(stmt, ReturnStmt):
            value = None
            if stmt.value is not None:
                value = self.evaluate(stmt.value)
            return Returned(value)
        elif isinstance(stmt, FunctionDecl):
            function = LoxFunction(stmt, self._environment, self._locals)
            self._environment.define(stmt.name, function)
        else:
            raise TypeError(f"unknown statement node: {type(stmt).__name__}")
        return None

    def execute_block(self, stmts: list[Stmt], env: Environment) -> ExecResult:
        """Run `stmts` in `env`, restoring the current environment on every exit."""
        previous = self._environment
        self._environment = env
        try:
            for stmt in stmts:
                signal = self.execute(stmt)
                if signal is not None:
                    return signal
        finally:
            self._environment = previous
        return None

    def execute_function_body(self, function: LoxFunction, env: Environment) -> Value:
        previous_locals = self._locals
        self._locals = function.locals
        try:
            signal = self.execute_block(function.declaration.body, env)
        finally:
            self._locals = previous_locals
        if isinstance(signal, Returned):
            return signal.value
        return None

    # ── Expressions ──────────────────────────────────────────────

    def evaluate(self, expr: Expr) -> Value:
        if isinstance(expr, StringLit):
            return expr.value
        if isinstance(expr, NumberLit):
            return float(expr.value)
        if isinstance(expr, BooleanLit):
            return expr.value
        if isinstance(expr, NilLit):
            return None
        if isinstance(expr, IdentifierExpr):
            return self._look_up(expr.reference)
        if isinstance(expr, AssignExpr):
            return self._assign(expr)
        if isinstance(expr, GroupingExpr):
            return self.evaluate(expr.expr)
        if isinstance(expr, UnaryExpr):
            return self._unary(expr)
        if isinstance(expr, BinaryExpr):
            return self._binary(expr)
        if isinstance(expr, CallExpr):
            return self._call(expr)
        raise TypeError(f"unknown expression node: {type(expr).__name__}")

    def _look_up(self, reference: Reference) -> Value:
        distance = self._locals[reference.id]
        if distance is None:
            return self.globals.get(reference.name)
        return self._environment.get_at(distance, reference.name)

    def _assign(self, expr: AssignExpr) -> Value:
        value = self.evaluate(expr.value)
        distance = self._locals[expr.target.id]
        try:
            if distance is None:
                self.globals.assign(expr.target.name, value)
            else:
                self._environment.assign_at(distance, expr.target.name, value)
        except LoxRuntimeError as e:
            raise e.with_span(expr.span)
        return value

    def _unary(self, expr: UnaryExpr) -> Value:
        right = self.evaluate(expr.right)
        if expr.op is UnaryOp.NOT:
            return not is_truthy(right)
        _check_number(right, expr.right.span)
        return -right  # type: ignore[operator]

    def _binary(self, expr: BinaryExpr) -> Value:
        op = expr.op
        if op is BinaryOp.OR or op is BinaryOp.AND:
            left = self.evaluate(expr.left)
            # The deciding operand itself is the result, not a coerced bool.
            if is_truthy(left) == (op is BinaryOp.OR):
                return left
            return self.evaluate(expr.right)

        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)

        if op is BinaryOp.EQUAL:
            return values_equal(left, right)
        if op is BinaryOp.NOT_EQUAL:
            return not values_equal(left, right)
        if op is BinaryOp.ADD:
            return _add(left, right, expr.span)

        # A bad right operand is reported before a bad left one.
        _check_number(right, expr.right.span)
        _check_number(left, expr.left.span)
        return _NUMERIC_OPS[op](left, right)  # type: ignore[arg-type]

    def _call(self, expr: CallExpr) -> Value:
        callee = self.evaluate(expr.callee)
        args = [self.evaluate(arg) for arg in expr.args]

        if not isinstance(callee, LoxCallable):
            raise NotCallableError(type_of(callee), expr.span)
        if len(args) != callee.arity():
            raise ArityMismatchError(callee.arity(), len(args), expr.span)
        return callee.call(self, args)


def _check_number(value: Value, span: Span) -> None:
    found = type_of(value)
    if found is not LoxType.NUMBER:
        raise OperandTypeError((LoxType.NUMBER,), found, span)


def _add(left: Value, right: Value, span: Span) -> Value:
    left_ty, right_ty = type_of(left), type_of(right)
    if left_ty is LoxType.NUMBER:
        if right_ty is not LoxType.NUMBER:
            raise OperandTypeError((LoxType.NUMBER,), right_ty, span)
        return left + right  # type: ignore[operator]
    if left_ty is LoxType.STRING:
        if right_ty is not LoxType.STRING:
            raise OperandTypeError((LoxType.STRING,), right_ty, span)
        return left + right  # type: ignore[operator]
    raise OperandTypeError((LoxType.NUMBER, LoxType.STRING), left_ty, span)
