"""
Recursive Descent Parser for Shift/Additive Expressions

Parses the grammar::

    E → E << T | E >> T | T
    T → T + F | T - F | F
    F → ( E ) | id

Left recursion is eliminated before parsing::

    E  → T E'
    E' → << T E' | >> T E' | ε
    T  → F T'
    T' → + F T' | - F T' | ε
    F  → ( E ) | id

The primed rules are realized as loops that fold operators to the left, so
``a << b << c`` parses as ``((a << b) << c)``. The first syntax error aborts
the parse; there is no recovery.
"""

import logging
from typing import List, Optional

from expr_ast import ExpressionNode, IdentifierNode, BinaryOperationNode, ParenthesizedNode
from expr_lexer import Lexer, Token, TokenType

logger = logging.getLogger(__name__)

SHIFT_OPERATORS = (TokenType.LEFT_SHIFT, TokenType.RIGHT_SHIFT)
ADDITIVE_OPERATORS = (TokenType.PLUS, TokenType.MINUS)


class ParseError(Exception):
    """An unmet parser expectation at a specific token."""

    def __init__(self, message: str, token: Token):
        super().__init__(message)
        self.message = message
        self.token = token

    def __str__(self) -> str:
        return f"Error at line {self.token.line}, column {self.token.column}: {self.message}"


class Parser:
    """
    Builds an expression AST from source text.

    Usage::

        parser = Parser("a << (b + c)")
        tree = parser.parse()      # None on a syntax error
        parser.get_errors()        # '' or one formatted message
    """

    def __init__(self, source: str):
        self.lexer = Lexer(source)
        self.current_token: Token = self.lexer.current_token
        self.errors: List[str] = []

    def parse(self) -> Optional[ExpressionNode]:
        """
        Parse the whole input as one expression.

        Returns:
            The AST root, or None if a syntax error was recorded
        """
        try:
            result = self._parse_expression()
            if self.current_token.type != TokenType.EOF:
                raise ParseError(f"Expected end of input, but found: {self.current_token.describe()}",
                                 self.current_token)
            return result
        except ParseError as e:
            self._add_error(e)
            return None
        except RecursionError:
            self._add_error(ParseError("Expression is nested too deeply", self.current_token))
            return None

    def get_errors(self) -> str:
        """All syntax errors as text, one per line."""
        return "".join(f"{error}\n" for error in self.errors)

    def _add_error(self, error: ParseError):
        logger.debug("Syntax error: %s", error)
        self.errors.append(str(error))

    def _consume(self, token_type: TokenType) -> Token:
        token = self.current_token
        if token.type != token_type:
            raise ParseError(f"Expected '{token_type.value}', found '{token.describe()}'", token)
        self.current_token = self.lexer.next_token()
        return token

    # E → T E'
    # E' → << T E' | >> T E' | ε
    def _parse_expression(self) -> ExpressionNode:
        left = self._parse_term()
        while self.current_token.type in SHIFT_OPERATORS:
            operator_token = self._consume(self.current_token.type)
            right = self._parse_term()
            left = BinaryOperationNode(left, operator_token, right)
        return left

    # T → F T'
    # T' → + F T' | - F T' | ε
    def _parse_term(self) -> ExpressionNode:
        left = self._parse_factor()
        while self.current_token.type in ADDITIVE_OPERATORS:
            operator_token = self._consume(self.current_token.type)
            right = self._parse_factor()
            left = BinaryOperationNode(left, operator_token, right)
        return left

    # F → ( E ) | id
    def _parse_factor(self) -> ExpressionNode:
        token = self.current_token

        if token.type == TokenType.LPAREN:
            self._consume(TokenType.LPAREN)
            expression = self._parse_expression()
            if self.current_token.type != TokenType.RPAREN:
                raise ParseError(f"Expected ')', found: {self.current_token.describe()}", self.current_token)
            self._consume(TokenType.RPAREN)
            return ParenthesizedNode(expression)

        if token.type == TokenType.ID:
            self._consume(TokenType.ID)
            return IdentifierNode(token.value, token)

        if token.type == TokenType.ERROR:
            raise ParseError(f"Invalid token: {token.value}", token)

        raise ParseError(f"Expected '(' or identifier, found: {token.describe()}", token)
