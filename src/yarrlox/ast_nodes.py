"""AST node definitions for the yarrlox language."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from yarrlox.source import Span

# ── References ───────────────────────────────────────────────────


@dataclass(frozen=True, eq=False)
class Reference:
    """One syntactic occurrence of a variable name.

    Two references to the same name are distinct: equality and hashing only
    look at `id`, which indexes the resolver's distance table.
    """

    id: int
    name: str

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Reference):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


# ── Operators ────────────────────────────────────────────────────


class BinaryOp(Enum):
    OR = "or"
    AND = "and"
    EQUAL = "=="
    NOT_EQUAL = "!="
    GREATER = ">"
    GREATER_EQUAL = ">="
    LESS = "<"
    LESS_EQUAL = "<="
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"


class UnaryOp(Enum):
    NOT = "!"
    NEGATE = "-"


# ── Expressions ──────────────────────────────────────────────────


@dataclass(frozen=True)
class StringLit:
    value: str
    span: Span


@dataclass(frozen=True)
class NumberLit:
    value: str
    span: Span


@dataclass(frozen=True)
class BooleanLit:
    value: bool
    span: Span


@dataclass(frozen=True)
class NilLit:
    span: Span


@dataclass(frozen=True)
class IdentifierExpr:
    reference: Reference
    span: Span

    @property
    def name(self) -> str:
        return self.reference.name


@dataclass(frozen=True)
class AssignExpr:
    target: Reference
    value: Expr
    span: Span


@dataclass(frozen=True)
class BinaryExpr:
    left: Expr
    op: BinaryOp
    right: Expr
    span: Span


@dataclass(frozen=True)
class UnaryExpr:
    op: UnaryOp
    right: Expr
    span: Span


@dataclass(frozen=True)
class GroupingExpr:
    expr: Expr
    span: Span


@dataclass(frozen=True)
class CallExpr:
    callee: Expr
    args: list[Expr]
    span: Span


Literal = Union[StringLit, NumberLit, BooleanLit, NilLit, IdentifierExpr]

Expr = Union[
    Literal,
    AssignExpr,
    BinaryExpr,
    UnaryExpr,
    GroupingExpr,
    CallExpr,
]


# ── Statements ───────────────────────────────────────────────────


@dataclass(frozen=True)
class BlockStmt:
    stmts: list[Stmt]
    span: Span


@dataclass(frozen=True)
class ExprStmt:
    expr: Expr
    span: Span


@dataclass(frozen=True, eq=False)
class FunctionDecl:
    """A named function declaration.

    Compared by identity: every closure made from this node shares it, and
    two closures are the same function exactly when their declarations are.
    """

    name: str
    params: list[str]
    body: list[Stmt]
    span: Span


@dataclass(frozen=True)
class IfStmt:
    condition: Expr
    then_branch: Stmt
    else_branch: Stmt | None
    span: Span


@dataclass(frozen=True)
class PrintStmt:
    expr: Expr
    span: Span


@dataclass(frozen=True)
class ReturnStmt:
    value: Expr | None
    span: Span


@dataclass(frozen=True)
class VarDecl:
    name: str
    initializer: Expr | None
    span: Span


@dataclass(frozen=True)
class WhileStmt:
    condition: Expr
    body: Stmt
    span: Span


@dataclass(frozen=True)
class BreakStmt:
    span: Span


Stmt = Union[
    BlockStmt,
    ExprStmt,
    FunctionDecl,
    IfStmt,
    PrintStmt,
    ReturnStmt,
    VarDecl,
    WhileStmt,
    BreakStmt,
]
