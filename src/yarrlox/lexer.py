"""Lexer for the yarrlox language.

Produces a lazy stream of spanned tokens from source text. Malformed input
never stops the stream: it is reported through sentinel tokens so the
parser can keep going and collect several errors in one pass.
"""

from __future__ import annotations

from collections.abc import Iterator

from yarrlox.source import Span
from yarrlox.tokens import (
    KEYWORDS,
    SINGLE_CHAR_TOKENS,
    TWO_CHAR_TOKENS,
    Token,
    TokenKind,
)

_WHITESPACE = frozenset(" \t\n\r\f")

_NOT_PEEKED = object()


class Lexer:
    """Tokenizes yarrlox source code on demand.

    Iterating a lexer (or calling `lex()`) always scans from the start of the
    source; `peek()` and `next()` continue the current scan.
    """

    def __init__(self, source: str) -> None:
        self.source = source
        self.pos = 0
        self._stream = self._scan()
        self._peeked: object = _NOT_PEEKED

    def __iter__(self) -> Iterator[Token]:
        self.reset()
        return self

    def __next__(self) -> Token:
        if self._peeked is not _NOT_PEEKED:
            tok, self._peeked = self._peeked, _NOT_PEEKED
            if tok is None:
                raise StopIteration
            return tok  # type: ignore[return-value]
        return next(self._stream)

    def reset(self) -> None:
        """Restart scanning from the beginning of the source."""
        self.pos = 0
        self._stream = self._scan()
        self._peeked = _NOT_PEEKED

    def peek(self) -> Token | None:
        """Return the next token without consuming it, or None at end of input."""
        if self._peeked is _NOT_PEEKED:
            self._peeked = next(self._stream, None)
        return self._peeked  # type: ignore[return-value]

    def lex(self) -> list[Token]:
        """Tokenize the entire source and return the token list."""
        return list(self)

    # ── Helpers ───────────────────────────────────────────────────

    def _peek_char(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def _token(self, kind: TokenKind, start: int, lexeme: str = "") -> Token:
        return Token(kind, Span(start, self.pos), lexeme)

    # ── Scanning ─────────────────────────────────────────────────

    def _scan(self) -> Iterator[Token]:
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch in _WHITESPACE:
                self.pos += 1
            elif ch == '/' and self._peek_char(1) == '/':
                self._skip_line_comment()
            elif ch == '/' and self._peek_char(1) == '*':
                tok = self._skip_block_comment()
                if tok is not None:
                    yield tok
            elif ch == '"':
                yield self._lex_string()
            elif _is_digit(ch):
                yield self._lex_number()
            elif _is_ident_start(ch):
                yield self._lex_identifier()
            else:
                yield self._lex_operator_or_punct()

    # ── Comments ─────────────────────────────────────────────────

    def _skip_line_comment(self) -> None:
        while self.pos < len(self.source) and self.source[self.pos] != '\n':
            self.pos += 1

    def _skip_block_comment(self) -> Token | None:
        start = self.pos
        close = self.source.find("*/", self.pos + 2)
        if close == -1:
            self.pos = len(self.source)
            return self._token(TokenKind.UNTERMINATED_BLOCK_COMMENT, start)
        self.pos = close + 2
        return None

    # ── Literals ─────────────────────────────────────────────────

    def _lex_string(self) -> Token:
        start = self.pos
        self.pos += 1  # opening "
        while self.pos < len(self.source) and self.source[self.pos] != '"':
            if self.source[self.pos] == '\\':
                self.pos += 1
            self.pos += 1
        if self.pos >= len(self.source):
            self.pos = len(self.source)
            return self._token(TokenKind.UNTERMINATED_STRING, start)
        self.pos += 1  # closing "
        return self._token(TokenKind.STRING, start, self.source[start + 1:self.pos - 1])

    def _lex_number(self) -> Token:
        start = self.pos
        while _is_digit(self._peek_char()):
            self.pos += 1
        # A fractional part needs a digit after the dot; `1.` leaves the dot alone.
        if self._peek_char() == '.' and _is_digit(self._peek_char(1)):
            self.pos += 1
            while _is_digit(self._peek_char()):
                self.pos += 1
        return self._token(TokenKind.NUMBER, start, self.source[start:self.pos])

    def _lex_identifier(self) -> Token:
        start = self.pos
        while _is_ident_char(self._peek_char()):
            self.pos += 1
        word = self.source[start:self.pos]
        return self._token(KEYWORDS.get(word, TokenKind.IDENTIFIER), start, word)

    # ── Operators and Punctuation ────────────────────────────────

    def _lex_operator_or_punct(self) -> Token:
        start = self.pos
        two = self.source[self.pos:self.pos + 2]
        if two in TWO_CHAR_TOKENS:
            self.pos += 2
            return self._token(TWO_CHAR_TOKENS[two], start, two)

        ch = self.source[self.pos]
        self.pos += 1
        kind = SINGLE_CHAR_TOKENS.get(ch, TokenKind.INVALID)
        return self._token(kind, start, ch)


def _is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'


def _is_ident_start(ch: str) -> bool:
    return ('a' <= ch <= 'z') or ('A' <= ch <= 'Z') or ch == '_'


def _is_ident_char(ch: str) -> bool:
    return _is_ident_start(ch) or _is_digit(ch)
