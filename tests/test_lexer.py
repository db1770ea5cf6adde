"""Tests for the yarrlox lexer."""

from __future__ import annotations

from yarrlox.lexer import Lexer
from yarrlox.source import Span
from yarrlox.tokens import TokenKind


def lex(source: str) -> list[tuple[TokenKind, str]]:
    """Helper: lex source and return (kind, lexeme) pairs."""
    return [(t.kind, t.lexeme) for t in Lexer(source).lex()]


def kinds(source: str) -> list[TokenKind]:
    """Helper: lex source and return just the token kinds."""
    return [t.kind for t in Lexer(source).lex()]


class TestLexerBasic:
    def test_empty_source(self):
        assert Lexer("").lex() == []

    def test_whitespace_only(self):
        assert Lexer(" \t\n\r\f  ").lex() == []

    def test_identifier(self):
        assert lex("hello") == [(TokenKind.IDENTIFIER, "hello")]

    def test_identifier_with_digits_and_underscores(self):
        assert lex("_my_var_123") == [(TokenKind.IDENTIFIER, "_my_var_123")]

    def test_keywords(self):
        for kw in ["and", "break", "class", "else", "false", "fun", "for",
                   "if", "nil", "or", "print", "return", "super", "this",
                   "true", "var", "while"]:
            result = lex(kw)
            assert len(result) == 1, f"keyword {kw} should lex to one token"
            assert result[0][0] != TokenKind.IDENTIFIER
            assert result[0][1] == kw

    def test_keyword_prefix_is_identifier(self):
        assert lex("orchid variable") == [
            (TokenKind.IDENTIFIER, "orchid"),
            (TokenKind.IDENTIFIER, "variable"),
        ]

    def test_spans_are_offsets(self):
        tokens = Lexer("var x = 10;").lex()
        assert [t.span for t in tokens] == [
            Span(0, 3), Span(4, 5), Span(6, 7), Span(8, 10), Span(10, 11),
        ]


class TestLexerLiterals:
    def test_integer(self):
        assert lex("42") == [(TokenKind.NUMBER, "42")]

    def test_decimal(self):
        assert lex("3.14") == [(TokenKind.NUMBER, "3.14")]

    def test_trailing_dot_is_separate_token(self):
        assert lex("1.") == [(TokenKind.NUMBER, "1"), (TokenKind.DOT, ".")]

    def test_leading_dot_is_separate_token(self):
        assert lex(".5") == [(TokenKind.DOT, "."), (TokenKind.NUMBER, "5")]

    def test_only_one_fraction(self):
        assert lex("1.2.3") == [
            (TokenKind.NUMBER, "1.2"),
            (TokenKind.DOT, "."),
            (TokenKind.NUMBER, "3"),
        ]

    def test_string_strips_quotes(self):
        assert lex('"asd"') == [(TokenKind.STRING, "asd")]

    def test_string_escapes_are_not_interpreted(self):
        result = lex(r'"as \n\\n \"d\""')
        assert result == [(TokenKind.STRING, r'as \n\\n \"d\"')]

    def test_string_span_includes_quotes(self):
        [tok] = Lexer('  "hi"').lex()
        assert tok.span == Span(2, 6)

    def test_multiline_string(self):
        assert lex('"a\nb"') == [(TokenKind.STRING, "a\nb")]

    def test_strings_in_statements(self):
        assert kinds('var foo = "asd"; var bar = "dsa";') == [
            TokenKind.VAR, TokenKind.IDENTIFIER, TokenKind.EQUAL,
            TokenKind.STRING, TokenKind.SEMICOLON,
            TokenKind.VAR, TokenKind.IDENTIFIER, TokenKind.EQUAL,
            TokenKind.STRING, TokenKind.SEMICOLON,
        ]


class TestLexerOperators:
    def test_single_char(self):
        assert kinds("(){},.-+;*/!<>=") == [
            TokenKind.LEFT_PAREN, TokenKind.RIGHT_PAREN,
            TokenKind.LEFT_BRACE, TokenKind.RIGHT_BRACE,
            TokenKind.COMMA, TokenKind.DOT, TokenKind.MINUS, TokenKind.PLUS,
            TokenKind.SEMICOLON, TokenKind.STAR, TokenKind.SLASH,
            TokenKind.BANG, TokenKind.LESS, TokenKind.GREATER_EQUAL,
        ]

    def test_two_char(self):
        assert kinds("!= == <= >=") == [
            TokenKind.BANG_EQUAL, TokenKind.EQUAL_EQUAL,
            TokenKind.LESS_EQUAL, TokenKind.GREATER_EQUAL,
        ]

    def test_bang_and_equal_separated(self):
        assert kinds("! =") == [TokenKind.BANG, TokenKind.EQUAL]

    def test_triple_equal(self):
        assert kinds("===") == [TokenKind.EQUAL_EQUAL, TokenKind.EQUAL]


class TestLexerComments:
    def test_line_comment(self):
        assert kinds("1 // one\n2") == [TokenKind.NUMBER, TokenKind.NUMBER]

    def test_line_comment_at_end(self):
        assert kinds("x // trailing") == [TokenKind.IDENTIFIER]

    def test_block_comment(self):
        assert lex("a /* skip\n me */ b") == [
            (TokenKind.IDENTIFIER, "a"),
            (TokenKind.IDENTIFIER, "b"),
        ]

    def test_block_comment_does_not_nest(self):
        assert kinds("/* a /* b */ c */") == [
            TokenKind.IDENTIFIER, TokenKind.STAR, TokenKind.SLASH,
        ]

    def test_unterminated_block_comment(self):
        tokens = Lexer("x /* never closed\nvar y = 1;").lex()
        assert [t.kind for t in tokens] == [
            TokenKind.IDENTIFIER, TokenKind.UNTERMINATED_BLOCK_COMMENT,
        ]
        assert tokens[1].span == Span(2, 28)

    def test_slash_alone_is_division(self):
        assert kinds("a / b") == [TokenKind.IDENTIFIER, TokenKind.SLASH, TokenKind.IDENTIFIER]


class TestLexerErrors:
    def test_invalid_character_does_not_stop_stream(self):
        assert lex("a @ b") == [
            (TokenKind.IDENTIFIER, "a"),
            (TokenKind.INVALID, "@"),
            (TokenKind.IDENTIFIER, "b"),
        ]

    def test_each_invalid_character_is_a_token(self):
        assert kinds("#$") == [TokenKind.INVALID, TokenKind.INVALID]

    def test_non_ascii_letter_is_invalid(self):
        assert kinds("é") == [TokenKind.INVALID]

    def test_unterminated_string(self):
        tokens = Lexer('print "abc').lex()
        assert [t.kind for t in tokens] == [TokenKind.PRINT, TokenKind.UNTERMINATED_STRING]
        assert tokens[1].span == Span(6, 10)

    def test_unterminated_string_with_trailing_backslash(self):
        assert kinds('"abc\\') == [TokenKind.UNTERMINATED_STRING]


class TestLexerStream:
    def test_peek_does_not_consume(self):
        lexer = Lexer("a b")
        first = lexer.peek()
        assert first is not None and first.lexeme == "a"
        assert lexer.peek() is first
        assert next(lexer) is first
        assert next(lexer).lexeme == "b"
        assert lexer.peek() is None

    def test_restartable(self):
        lexer = Lexer("a b c")
        next(lexer)
        next(lexer)
        assert [t.lexeme for t in lexer] == ["a", "b", "c"]
        assert [t.lexeme for t in lexer] == ["a", "b", "c"]

    def test_lazy(self):
        lexer = Lexer("a " + "@" * 10_000)
        assert next(lexer).lexeme == "a"
        assert lexer.pos == 1
