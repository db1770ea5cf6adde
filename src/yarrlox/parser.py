"""Parser for the yarrlox language.

Consumes the lexer's token stream with recursive descent for declarations
and statements and precedence climbing for binary expressions. Every
identifier read gets a fresh `Reference` id, so the resolver can store its
results in a dense table instead of a map.
"""

from __future__ import annotations

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
from yarrlox.errors import ParseError, ParseErrorKind, SyntaxErrors
from yarrlox.lexer import Lexer
from yarrlox.source import Span
from yarrlox.tokens import EOF_SENTINELS, STATEMENT_START, Token, TokenKind

MAX_ARGS = 255

# ── Binding table for precedence climbing ───────────────────────

# All binary operators are left associative.
_BINARY_OPS: dict[TokenKind, tuple[BinaryOp, int]] = {
    TokenKind.OR: (BinaryOp.OR, 0),
    TokenKind.AND: (BinaryOp.AND, 1),
    TokenKind.EQUAL_EQUAL: (BinaryOp.EQUAL, 2),
    TokenKind.BANG_EQUAL: (BinaryOp.NOT_EQUAL, 2),
    TokenKind.GREATER: (BinaryOp.GREATER, 3),
    TokenKind.GREATER_EQUAL: (BinaryOp.GREATER_EQUAL, 3),
    TokenKind.LESS: (BinaryOp.LESS, 3),
    TokenKind.LESS_EQUAL: (BinaryOp.LESS_EQUAL, 3),
    TokenKind.PLUS: (BinaryOp.ADD, 4),
    TokenKind.MINUS: (BinaryOp.SUB, 4),
    TokenKind.STAR: (BinaryOp.MUL, 5),
    TokenKind.SLASH: (BinaryOp.DIV, 5),
}

_UNARY_OPS: dict[TokenKind, UnaryOp] = {
    TokenKind.BANG: UnaryOp.NOT,
    TokenKind.MINUS: UnaryOp.NEGATE,
}


class Parser:
    """Parses yarrlox source into a list of statements."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.lexer = Lexer(source)
        self.errors: list[ParseError] = []
        self.reference_count = 0
        self._loop_depth = 0
        self._block_depth = 0
        self._reported_eof = False
        self._previous: Token | None = None

    # ── Token access ─────────────────────────────────────────────

    def _current(self) -> Token | None:
        return self.lexer.peek()

    def _at(self, kind: TokenKind) -> bool:
        tok = self._current()
        return tok is not None and tok.kind == kind

    def _at_any(self, *kinds: TokenKind) -> bool:
        tok = self._current()
        return tok is not None and tok.kind in kinds

    def _advance(self) -> Token:
        self._previous = next(self.lexer)
        return self._previous

    def _expect(self, kind: TokenKind, what: str) -> Token:
        if self._at(kind):
            return self._advance()
        raise self._unexpected(what)

    def _current_span(self) -> Span:
        tok = self._current()
        if tok is None:
            return Span(len(self.source), len(self.source))
        return tok.span

    def _error(self, kind: ParseErrorKind, message: str, span: Span) -> None:
        if kind is ParseErrorKind.UNEXPECTED_EOF:
            # Once the input is exhausted, every later complaint is the same one.
            if self._reported_eof:
                return
            self._reported_eof = True
        self.errors.append(ParseError(kind, message, span))

    def _unexpected(self, what: str) -> _ParseError:
        """Record an error for the current token and return the unwinding exception."""
        tok = self._current()
        if tok is None:
            self._error(
                ParseErrorKind.UNEXPECTED_EOF,
                f"expected {what}, found end of input",
                self._current_span(),
            )
        elif tok.kind in EOF_SENTINELS:
            unterminated = (
                "string" if tok.kind == TokenKind.UNTERMINATED_STRING else "block comment"
            )
            self._error(
                ParseErrorKind.UNEXPECTED_EOF,
                f"expected {what}, found end of input inside unterminated {unterminated}",
                tok.span,
            )
        elif tok.kind == TokenKind.INVALID:
            self._error(
                ParseErrorKind.UNEXPECTED_TOKEN,
                f"expected {what}, found invalid token {tok.lexeme!r}",
                tok.span,
            )
        else:
            self._error(
                ParseErrorKind.UNEXPECTED_TOKEN,
                f"expected {what}, found {tok.lexeme!r}",
                tok.span,
            )
        return _ParseError()

    def _synchronize(self) -> None:
        """Discard tokens until a statement boundary."""
        while self._current() is not None:
            # Leave a block's closing brace for the block itself.
            if self._block_depth > 0 and self._at(TokenKind.RIGHT_BRACE):
                return
            tok = self._advance()
            if tok.kind == TokenKind.SEMICOLON:
                return
            if self._at_any(*STATEMENT_START):
                return

    def _reference(self, name: str) -> Reference:
        ref = Reference(self.reference_count, name)
        self.reference_count += 1
        return ref

    # ── Top-level parsing ────────────────────────────────────────

    def parse(self) -> list[Stmt]:
        """Parse the entire source. Raises SyntaxErrors listing every error found."""
        stmts: list[Stmt] = []
        while self._current() is not None:
            stmt = self._declaration()
            if stmt is not None:
                stmts.append(stmt)

        if self.errors:
            raise SyntaxErrors(self.errors)
        return stmts

    def _declaration(self) -> Stmt | None:
        try:
            if self._at(TokenKind.FUN):
                return self._function_decl()
            if self._at(TokenKind.VAR):
                return self._var_decl()
            return self._statement()
        except _ParseError:
            self._synchronize()
            return None

    def _function_decl(self) -> FunctionDecl:
        self._advance()  # 'fun'
        name_tok = self._expect(TokenKind.IDENTIFIER, "function name")
        self._expect(TokenKind.LEFT_PAREN, "'(' after function name")

        params: list[str] = []
        if not self._at(TokenKind.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGS:
                    self._error(
                        ParseErrorKind.TOO_MANY_ARGS,
                        f"can't have more than {MAX_ARGS} parameters",
                        self._current_span(),
                    )
                params.append(self._expect(TokenKind.IDENTIFIER, "parameter name").lexeme)
                if not self._at(TokenKind.COMMA):
                    break
                self._advance()
        self._expect(TokenKind.RIGHT_PAREN, "')' after parameters")
        self._expect(TokenKind.LEFT_BRACE, "'{' before function body")

        # A loop outside the function does not make `break` legal inside it.
        enclosing_depth = self._loop_depth
        self._loop_depth = 0
        try:
            body = self._block()
        finally:
            self._loop_depth = enclosing_depth
        return FunctionDecl(name_tok.lexeme, params, body, name_tok.span)

    def _var_decl(self) -> VarDecl:
        self._advance()  # 'var'
        name_tok = self._expect(TokenKind.IDENTIFIER, "variable name")
        initializer = None
        if self._at(TokenKind.EQUAL):
            self._advance()
            initializer = self._expression()
        self._expect(TokenKind.SEMICOLON, "';' after variable declaration")
        return VarDecl(name_tok.lexeme, initializer, name_tok.span)

    # ── Statements ───────────────────────────────────────────────

    def _statement(self) -> Stmt:
        tok = self._current()
        kind = tok.kind if tok is not None else None

        if kind == TokenKind.FOR:
            return self._for_stmt()
        if kind == TokenKind.IF:
            return self._if_stmt()
        if kind == TokenKind.PRINT:
            start = self._advance()
            expr = self._expression()
            self._expect(TokenKind.SEMICOLON, "';' after value")
            return PrintStmt(expr, start.span.to(expr.span))
        if kind == TokenKind.RETURN:
            start = self._advance()
            value = None
            if not self._at(TokenKind.SEMICOLON):
                value = self._expression()
            end = self._expect(TokenKind.SEMICOLON, "';' after return value")
            return ReturnStmt(value, start.span.to(end.span))
        if kind == TokenKind.WHILE:
            return self._while_stmt()
        if kind == TokenKind.BREAK:
            start = self._advance()
            if self._loop_depth == 0:
                self._error(
                    ParseErrorKind.BREAK_OUTSIDE_LOOP,
                    "can't use 'break' outside of a loop",
                    start.span,
                )
            self._expect(TokenKind.SEMICOLON, "';' after 'break'")
            return BreakStmt(start.span)
        if kind == TokenKind.LEFT_BRACE:
            start = self._advance()
            stmts = self._block()
            return BlockStmt(stmts, start.span.to(self._previous.span))

        expr = self._expression()
        self._expect(TokenKind.SEMICOLON, "';' after expression")
        return ExprStmt(expr, expr.span)

    def _block(self) -> list[Stmt]:
        """Parse declarations up to the closing brace; the '{' is already consumed."""
        stmts: list[Stmt] = []
        self._block_depth += 1
        try:
            while not self._at(TokenKind.RIGHT_BRACE) and self._current() is not None:
                stmt = self._declaration()
                if stmt is not None:
                    stmts.append(stmt)
        finally:
            self._block_depth -= 1
        self._expect(TokenKind.RIGHT_BRACE, "'}' after block")
        return stmts

    def _loop_body(self) -> Stmt:
        self._loop_depth += 1
        try:
            return self._statement()
        finally:
            self._loop_depth -= 1

    def _if_stmt(self) -> IfStmt:
        start = self._advance()  # 'if'
        self._expect(TokenKind.LEFT_PAREN, "'(' after 'if'")
        condition = self._expression()
        self._expect(TokenKind.RIGHT_PAREN, "')' after if condition")
        then_branch = self._statement()
        else_branch = None
        if self._at(TokenKind.ELSE):
            self._advance()
            else_branch = self._statement()
        end = else_branch if else_branch is not None else then_branch
        return IfStmt(condition, then_branch, else_branch, start.span.to(end.span))

    def _while_stmt(self) -> WhileStmt:
        start = self._advance()  # 'while'
        self._expect(TokenKind.LEFT_PAREN, "'(' after 'while'")
        condition = self._expression()
        self._expect(TokenKind.RIGHT_PAREN, "')' after condition")
        body = self._loop_body()
        return WhileStmt(condition, body, start.span.to(body.span))

    def _for_stmt(self) -> BlockStmt:
        """Parse a `for` loop, desugared into a block holding a `while` loop."""
        start = self._advance()  # 'for'
        self._expect(TokenKind.LEFT_PAREN, "'(' after 'for'")

        initializer: Stmt | None
        if self._at(TokenKind.SEMICOLON):
            self._advance()
            initializer = None
        elif self._at(TokenKind.VAR):
            initializer = self._var_decl()
        else:
            expr = self._expression()
            self._expect(TokenKind.SEMICOLON, "';' after loop initializer")
            initializer = ExprStmt(expr, expr.span)

        condition: Expr | None = None
        if not self._at(TokenKind.SEMICOLON):
            condition = self._expression()
        self._expect(TokenKind.SEMICOLON, "';' after loop condition")

        increment: Expr | None = None
        if not self._at(TokenKind.RIGHT_PAREN):
            increment = self._expression()
        self._expect(TokenKind.RIGHT_PAREN, "')' after for clauses")

        body = self._loop_body()
        span = start.span.to(body.span)

        inner: list[Stmt] = [body]
        if increment is not None:
            inner.append(ExprStmt(increment, increment.span))
        if condition is None:
            condition = BooleanLit(True, start.span)
        loop = WhileStmt(condition, BlockStmt(inner, body.span), span)

        outer: list[Stmt] = [loop] if initializer is None else [initializer, loop]
        return BlockStmt(outer, span)

    # ── Expressions ──────────────────────────────────────────────

    def _expression(self) -> Expr:
        return self._assignment()

    def _assignment(self) -> Expr:
        expr = self._binary(0)
        if self._at(TokenKind.EQUAL):
            equals = self._advance()
            value = self._assignment()
            if isinstance(expr, IdentifierExpr):
                return AssignExpr(expr.reference, value, expr.span.to(value.span))
            self._error(
                ParseErrorKind.INVALID_LVALUE, "invalid assignment target", equals.span,
            )
        return expr

    def _binary(self, min_prec: int) -> Expr:
        """Precedence climbing over the binary operator table."""
        left = self._unary()

        while True:
            tok = self._current()
            if tok is None or tok.kind not in _BINARY_OPS:
                break
            op, prec = _BINARY_OPS[tok.kind]
            if prec < min_prec:
                break
            self._advance()
            right = self._binary(prec + 1)
            left = BinaryExpr(left, op, right, left.span.to(right.span))

        return left

    def _unary(self) -> Expr:
        prefix: list[Token] = []
        while self._at_any(*_UNARY_OPS):
            prefix.append(self._advance())

        expr = self._call()
        for tok in reversed(prefix):
            expr = UnaryExpr(_UNARY_OPS[tok.kind], expr, tok.span.to(expr.span))
        return expr

    def _call(self) -> Expr:
        expr = self._primary()

        while self._at(TokenKind.LEFT_PAREN):
            self._advance()
            args: list[Expr] = []
            if not self._at(TokenKind.RIGHT_PAREN):
                while True:
                    if len(args) >= MAX_ARGS:
                        self._error(
                            ParseErrorKind.TOO_MANY_ARGS,
                            f"can't have more than {MAX_ARGS} arguments",
                            self._current_span(),
                        )
                    args.append(self._expression())
                    if not self._at(TokenKind.COMMA):
                        break
                    self._advance()
            close = self._expect(TokenKind.RIGHT_PAREN, "')' after arguments")
            expr = CallExpr(expr, args, expr.span.to(close.span))

        return expr

    def _primary(self) -> Expr:
        tok = self._current()
        if tok is None:
            raise self._unexpected("expression")

        if tok.kind == TokenKind.TRUE:
            self._advance()
            return BooleanLit(True, tok.span)
        if tok.kind == TokenKind.FALSE:
            self._advance()
            return BooleanLit(False, tok.span)
        if tok.kind == TokenKind.NIL:
            self._advance()
            return NilLit(tok.span)
        if tok.kind == TokenKind.NUMBER:
            self._advance()
            return NumberLit(tok.lexeme, tok.span)
        if tok.kind == TokenKind.STRING:
            self._advance()
            return StringLit(tok.lexeme, tok.span)
        if tok.kind == TokenKind.IDENTIFIER:
            self._advance()
            return IdentifierExpr(self._reference(tok.lexeme), tok.span)
        if tok.kind == TokenKind.LEFT_PAREN:
            self._advance()
            inner = self._expression()
            close = self._expect(TokenKind.RIGHT_PAREN, "')' after expression")
            return GroupingExpr(inner, tok.span.to(close.span))

        raise self._unexpected("expression")


class _ParseError(Exception):
    """Internal exception for parser error recovery."""
