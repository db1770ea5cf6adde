"""Static scope resolution for the yarrlox language.

Walks the AST once before execution and records, for every variable
reference, how many lexical scopes separate it from its binding. The result
is a dense table indexed by `Reference.id`; `None` marks a global that is
looked up by name at run time, so globals may be declared after the code
that reads them.
"""

from __future__ import annotations

import logging

from yarrlox.ast_nodes import (
    AssignExpr,
    BinaryExpr,
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
    VarDecl,
    WhileStmt,
)
from yarrlox.errors import MultipleDeclarationError, SelfInitializeError
from yarrlox.source import Span

logger = logging.getLogger(__name__)

Locals = list[int | None]


def resolve(stmts: list[Stmt], reference_count: int) -> Locals:
    """Resolve a parsed program. Raises the first ResolutionError found."""
    resolver = Resolver(reference_count)
    resolver.resolve(stmts)
    logger.debug(
        "resolved %d references (%d local)",
        reference_count,
        sum(1 for d in resolver.locals if d is not None),
    )
    return resolver.locals


class Resolver:
    """Computes scope distances for every reference in a program."""

    def __init__(self, reference_count: int) -> None:
        self.locals: Locals = [None] * reference_count
        # Innermost scope last; the global scope is never pushed.
        self._scopes: list[dict[str, bool]] = []

    # ── Scopes ───────────────────────────────────────────────────

    def _begin_scope(self) -> None:
        self._scopes.append({})

    def _end_scope(self) -> None:
        self._scopes.pop()

    def _declare(self, name: str, span: Span) -> None:
        if not self._scopes:
            return
        scope = self._scopes[-1]
        if name in scope:
            raise MultipleDeclarationError(name, span)
        scope[name] = False

    def _define(self, name: str) -> None:
        if self._scopes:
            self._scopes[-1][name] = True

    def _resolve_local(self, reference: Reference) -> None:
        for distance, scope in enumerate(reversed(self._scopes)):
            if reference.name in scope:
                self.locals[reference.id] = distance
                return
        self.locals[reference.id] = None

    # ── Statements ───────────────────────────────────────────────

    def resolve(self, stmts: list[Stmt]) -> None:
        for stmt in stmts:
            self._resolve_stmt(stmt)

    def _resolve_stmt(self, stmt: Stmt) -> None:
        if isinstance(stmt, BlockStmt):
            self._begin_scope()
            try:
                self.resolve(stmt.stmts)
            finally:
                self._end_scope()
        elif isinstance(stmt, ExprStmt):
            self._resolve_expr(stmt.expr)
        elif isinstance(stmt, FunctionDecl):
            self._declare(stmt.name, stmt.span)
            self._define(stmt.name)
            self._resolve_function(stmt)
        elif isinstance(stmt, IfStmt):
            self._resolve_expr(stmt.condition)
            self._resolve_stmt(stmt.then_branch)
            if stmt.else_branch is not None:
                self._resolve_stmt(stmt.else_branch)
        elif isinstance(stmt, PrintStmt):
            self._resolve_expr(stmt.expr)
        elif isinstance(stmt, ReturnStmt):
            if stmt.value is not None:
                self._resolve_expr(stmt.value)
        elif isinstance(stmt, VarDecl):
            self._declare(stmt.name, stmt.span)
            if stmt.initializer is not None:
                self._resolve_expr(stmt.initializer)
            self._define(stmt.name)
        elif isinstance(stmt, WhileStmt):
            self._resolve_expr(stmt.condition)
            self._resolve_stmt(stmt.body)
        elif isinstance(stmt, BreakStmt):
            pass
        else:
            raise TypeError(f"unknown statement node: {type(stmt).__name__}")

    def _resolve_function(self, fun: FunctionDecl) -> None:
        """Parameters and body statements share one scope."""
        self._begin_scope()
        try:
            for param in fun.params:
                self._declare(param, fun.span)
                self._define(param)
            self.resolve(fun.body)
        finally:
            self._end_scope()

    # ── Expressions ──────────────────────────────────────────────

    def _resolve_expr(self, expr: Expr) -> None:
        if isinstance(expr, IdentifierExpr):
            if self._scopes and self._scopes[-1].get(expr.name) is False:
                raise SelfInitializeError(expr.name, expr.span)
            self._resolve_local(expr.reference)
        elif isinstance(expr, AssignExpr):
            self._resolve_expr(expr.value)
            self._resolve_local(expr.target)
        elif isinstance(expr, BinaryExpr):
            self._resolve_expr(expr.left)
            self._resolve_expr(expr.right)
        elif isinstance(expr, UnaryExpr):
            self._resolve_expr(expr.right)
        elif isinstance(expr, GroupingExpr):
            self._resolve_expr(expr.expr)
        elif isinstance(expr, CallExpr):
            self._resolve_expr(expr.callee)
            for arg in expr.args:
                self._resolve_expr(arg)
        elif isinstance(expr, (StringLit, NumberLit, BooleanLit, NilLit)):
            pass
        else:
            raise TypeError(f"unknown expression node: {type(expr).__name__}")
