"""
Lexical Analyzer for Shift/Additive Expressions

Cursor-based scanner producing identifiers, ``+ - << >>`` and parentheses.
Unrecognized characters become ERROR tokens instead of aborting the scan, so
the parser decides how to report them.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Iterator, Optional

logger = logging.getLogger(__name__)


class TokenType(Enum):
    """Token kinds recognized by the expression lexer."""
    ID = "identifier"
    PLUS = "+"
    MINUS = "-"
    LEFT_SHIFT = "<<"
    RIGHT_SHIFT = ">>"
    LPAREN = "("
    RPAREN = ")"
    EOF = "end of input"
    ERROR = "error"


SINGLE_CHAR_TOKENS = {
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    '+': TokenType.PLUS,
    '-': TokenType.MINUS,
}

# first character -> token type when the character is doubled
DOUBLE_CHAR_TOKENS = {
    '<': TokenType.LEFT_SHIFT,
    '>': TokenType.RIGHT_SHIFT,
}


@dataclass
class Token:
    """Represents a token produced by the lexical analyzer."""
    type: TokenType
    value: str  # Actual text value, empty for EOF
    line: int = 1
    column: int = 1

    def describe(self) -> str:
        """Human-readable form used in diagnostics."""
        if self.type == TokenType.EOF:
            return "end of input"
        return self.value

    def __str__(self) -> str:
        return f"Token({self.type.name}, '{self.value}', line={self.line}, column={self.column})"

    def __repr__(self) -> str:
        return self.__str__()


class Lexer:
    """
    Scans source text into tokens, one at a time.

    The first token is read on construction and is available as
    ``current_token``; ``next_token()`` advances the cursor.
    """

    def __init__(self, source: str):
        self.source = source
        self.position = 0
        self.line = 1
        self.column = 1
        self.current_token: Optional[Token] = None
        self.next_token()

    def next_token(self) -> Token:
        """Advance to the next token and return it."""
        self._skip_whitespace()

        if self.position >= len(self.source):
            self.current_token = Token(TokenType.EOF, "", self.line, self.column)
            return self.current_token

        ch = self.source[self.position]
        line, column = self.line, self.column

        if ch in SINGLE_CHAR_TOKENS:
            self.current_token = Token(SINGLE_CHAR_TOKENS[ch], ch, line, column)
            self._advance()
        elif ch in DOUBLE_CHAR_TOKENS:
            if self._peek(1) == ch:
                self.current_token = Token(DOUBLE_CHAR_TOKENS[ch], ch * 2, line, column)
                self._advance()
                self._advance()
            else:
                # A lone '<' or '>' is not an operator
                self.current_token = self._error_token(ch, line, column)
                self._advance()
        elif ch.isalpha():
            start = self.position
            while self.position < len(self.source) and self._is_identifier_char(self.source[self.position]):
                self._advance()
            self.current_token = Token(TokenType.ID, self.source[start:self.position], line, column)
        else:
            self.current_token = self._error_token(ch, line, column)
            self._advance()

        return self.current_token

    def tokenize(self) -> List[Token]:
        """Scan the whole source from the beginning; the list ends with exactly one EOF token."""
        return list(self.iter_tokens())

    def iter_tokens(self) -> Iterator[Token]:
        """Lazily yield every token from the beginning of the source, EOF last."""
        self.position = 0
        self.line = 1
        self.column = 1
        token = self.next_token()
        while token.type != TokenType.EOF:
            yield token
            token = self.next_token()
        yield token

    def _skip_whitespace(self):
        while self.position < len(self.source):
            ch = self.source[self.position]
            if ch == ' ' or ch == '\t':
                self._advance()
            elif ch == '\n':
                self._advance()
                self.line += 1
                self.column = 1
            else:
                break

    def _advance(self):
        self.position += 1
        self.column += 1

    def _peek(self, offset: int) -> str:
        pos = self.position + offset
        if pos >= len(self.source):
            return ''
        return self.source[pos]

    @staticmethod
    def _is_identifier_char(ch: str) -> bool:
        return ch.isalnum() or ch == '_'

    @staticmethod
    def _error_token(ch: str, line: int, column: int) -> Token:
        logger.debug("Unrecognized character %r at line %d, column %d", ch, line, column)
        return Token(TokenType.ERROR, ch, line, column)
