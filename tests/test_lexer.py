from expr_lexer import Lexer, Token, TokenType


def kinds(source):
    return [token.type for token in Lexer(source).tokenize()]


def test_operators_and_identifiers():
    assert kinds("id << id >> (x + y) - z") == [
        TokenType.ID, TokenType.LEFT_SHIFT, TokenType.ID, TokenType.RIGHT_SHIFT,
        TokenType.LPAREN, TokenType.ID, TokenType.PLUS, TokenType.ID, TokenType.RPAREN,
        TokenType.MINUS, TokenType.ID, TokenType.EOF,
    ]


def test_identifier_value_and_start_column():
    tokens = Lexer("foo_1 bar").tokenize()
    assert (tokens[0].value, tokens[0].column) == ("foo_1", 1)
    assert (tokens[1].value, tokens[1].column) == ("bar", 7)


def test_identifier_must_start_with_letter():
    tokens = Lexer("_x 9").tokenize()
    assert [(t.type, t.value) for t in tokens] == [
        (TokenType.ERROR, "_"), (TokenType.ID, "x"), (TokenType.ERROR, "9"), (TokenType.EOF, ""),
    ]


def test_lone_angle_brackets_are_errors_and_scanning_continues():
    tokens = Lexer("< > <>").tokenize()
    assert [(t.type, t.value) for t in tokens] == [
        (TokenType.ERROR, "<"), (TokenType.ERROR, ">"),
        (TokenType.ERROR, "<"), (TokenType.ERROR, ">"),
        (TokenType.EOF, ""),
    ]


def test_unknown_character():
    tokens = Lexer("a @ b").tokenize()
    assert tokens[1].type == TokenType.ERROR
    assert tokens[1].value == "@"
    assert tokens[1].column == 3


def test_newline_tracking():
    tokens = Lexer("a\n  b\n\tc").tokenize()
    assert [(t.value, t.line, t.column) for t in tokens[:3]] == [("a", 1, 1), ("b", 2, 3), ("c", 3, 2)]


def test_empty_input_has_single_eof():
    tokens = Lexer("").tokenize()
    assert len(tokens) == 1
    assert tokens[0] == Token(TokenType.EOF, "", 1, 1)


def test_exactly_one_eof_and_repeatable():
    lexer = Lexer("a + b  ")
    first = lexer.tokenize()
    second = lexer.tokenize()
    assert first == second
    assert [t.type for t in first].count(TokenType.EOF) == 1
    assert first[-1].type == TokenType.EOF


def test_cursor_api():
    lexer = Lexer("a<<b")
    assert lexer.current_token.type == TokenType.ID
    assert lexer.next_token().type == TokenType.LEFT_SHIFT
    assert lexer.current_token.value == "<<"
    assert lexer.next_token().value == "b"
    assert lexer.next_token().type == TokenType.EOF
    # stays at EOF
    assert lexer.next_token().type == TokenType.EOF


def test_iter_tokens_is_lazy():
    tokens = Lexer("a + b").iter_tokens()
    assert next(tokens).value == "a"
    assert next(tokens).type == TokenType.PLUS


def test_eof_describes_itself():
    assert Token(TokenType.EOF, "", 1, 1).describe() == "end of input"
    assert Token(TokenType.ID, "x", 1, 1).describe() == "x"
