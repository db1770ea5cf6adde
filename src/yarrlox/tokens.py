"""Token kinds and token representation for the yarrlox lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from yarrlox.source import Span


class TokenKind(Enum):
    # Single-character tokens
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()
    LEFT_BRACE = auto()
    RIGHT_BRACE = auto()
    COMMA = auto()
    DOT = auto()
    MINUS = auto()
    PLUS = auto()
    SEMICOLON = auto()
    SLASH = auto()
    STAR = auto()

    # One or two character tokens
    BANG = auto()
    BANG_EQUAL = auto()
    EQUAL = auto()
    EQUAL_EQUAL = auto()
    GREATER = auto()
    GREATER_EQUAL = auto()
    LESS = auto()
    LESS_EQUAL = auto()

    # Literals
    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()

    # Keywords
    AND = auto()
    BREAK = auto()
    CLASS = auto()
    ELSE = auto()
    FALSE = auto()
    FUN = auto()
    FOR = auto()
    IF = auto()
    NIL = auto()
    OR = auto()
    PRINT = auto()
    RETURN = auto()
    SUPER = auto()
    THIS = auto()
    TRUE = auto()
    VAR = auto()
    WHILE = auto()

    # Error sentinels
    INVALID = auto()
    UNTERMINATED_BLOCK_COMMENT = auto()
    UNTERMINATED_STRING = auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    span: Span
    lexeme: str = ""


KEYWORDS: dict[str, TokenKind] = {
    "and": TokenKind.AND,
    "break": TokenKind.BREAK,
    "class": TokenKind.CLASS,
    "else": TokenKind.ELSE,
    "false": TokenKind.FALSE,
    "fun": TokenKind.FUN,
    "for": TokenKind.FOR,
    "if": TokenKind.IF,
    "nil": TokenKind.NIL,
    "or": TokenKind.OR,
    "print": TokenKind.PRINT,
    "return": TokenKind.RETURN,
    "super": TokenKind.SUPER,
    "this": TokenKind.THIS,
    "true": TokenKind.TRUE,
    "var": TokenKind.VAR,
    "while": TokenKind.WHILE,
}

SINGLE_CHAR_TOKENS: dict[str, TokenKind] = {
    "(": TokenKind.LEFT_PAREN,
    ")": TokenKind.RIGHT_PAREN,
    "{": TokenKind.LEFT_BRACE,
    "}": TokenKind.RIGHT_BRACE,
    ",": TokenKind.COMMA,
    ".": TokenKind.DOT,
    "-": TokenKind.MINUS,
    "+": TokenKind.PLUS,
    ";": TokenKind.SEMICOLON,
    "/": TokenKind.SLASH,
    "*": TokenKind.STAR,
    "!": TokenKind.BANG,
    "=": TokenKind.EQUAL,
    ">": TokenKind.GREATER,
    "<": TokenKind.LESS,
}

TWO_CHAR_TOKENS: dict[str, TokenKind] = {
    "!=": TokenKind.BANG_EQUAL,
    "==": TokenKind.EQUAL_EQUAL,
    ">=": TokenKind.GREATER_EQUAL,
    "<=": TokenKind.LESS_EQUAL,
}

# Tokens the parser may resynchronize on after a syntax error.
STATEMENT_START: frozenset[TokenKind] = frozenset({
    TokenKind.CLASS,
    TokenKind.FUN,
    TokenKind.VAR,
    TokenKind.FOR,
    TokenKind.IF,
    TokenKind.WHILE,
    TokenKind.PRINT,
    TokenKind.RETURN,
    TokenKind.BREAK,
})

# Sentinels that mean the lexer ran into the end of input mid-token.
EOF_SENTINELS: frozenset[TokenKind] = frozenset({
    TokenKind.UNTERMINATED_BLOCK_COMMENT,
    TokenKind.UNTERMINATED_STRING,
})
