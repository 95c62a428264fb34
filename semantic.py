"""
Semantic Analysis - Symbol Table and Type Resolution

Walks an expression AST, declares identifiers in a symbol table and annotates
every node with a resolved type. Semantic problems never abort the walk: they
are collected as diagnostics and the offending node resolves to TYPE_ERROR.
"""

import logging
from dataclasses import dataclass
from typing import List, Dict, Optional, Mapping, Callable

from config import AnalyzerConfig
from expr_ast import (
    ExpressionNode, IdentifierNode, BinaryOperationNode, ParenthesizedNode, NodeKind, SymbolKey,
    iter_post_order,
)

logger = logging.getLogger(__name__)

TYPE_INT = "int"
TYPE_FLOAT = "float"
TYPE_UNKNOWN = "unknown"
TYPE_ERROR = "error_type"

NUMERIC_TYPES = (TYPE_INT, TYPE_FLOAT)
SHIFT_OPERATORS = ("<<", ">>")
ADDITIVE_OPERATORS = ("+", "-")

GLOBAL_SCOPE = "global"


@dataclass
class SymbolEntry:
    """A declared name together with its type and declaration site."""
    name: str
    type: str
    scope: str
    line: int
    column: int

    @property
    def key(self) -> SymbolKey:
        return (self.name, self.scope)


class SymbolTable:
    """
    Maps names to their declarations across a stack of scopes.

    The stack always has the global scope at the bottom. The expression
    grammar has no block constructs, so only the global scope is ever
    populated by the analyzer; ``enter_scope``/``exit_scope`` are kept for
    callers that need nesting.
    """

    def __init__(self, global_scope: str = GLOBAL_SCOPE):
        self._table: Dict[str, List[SymbolEntry]] = {}
        self._global_scope = global_scope
        self._scopes: List[str] = [global_scope]

    @property
    def current_scope(self) -> str:
        return self._scopes[-1]

    @property
    def global_scope(self) -> str:
        return self._global_scope

    def enter_scope(self, scope_name: str):
        self._scopes.append(scope_name)

    def exit_scope(self) -> str:
        """Leave the innermost scope; the global scope is never left."""
        if len(self._scopes) == 1:
            return self.current_scope
        return self._scopes.pop()

    def add_symbol(self, entry: SymbolEntry):
        self._table.setdefault(entry.name, []).append(entry)

    def lookup(self, name: str, scope: Optional[str] = None) -> Optional[SymbolEntry]:
        """
        Find the entry visible for a name.

        Searches the given scope (default: the current one), then the
        enclosing scopes on the stack, then the global scope.
        """
        entries = self._table.get(name)
        if not entries:
            return None

        search_order = [scope] if scope is not None else []
        search_order.extend(reversed(self._scopes))
        search_order.append(self._global_scope)

        for scope_name in search_order:
            for entry in entries:
                if entry.scope == scope_name:
                    return entry
        return None

    def resolve(self, key: SymbolKey) -> Optional[SymbolEntry]:
        """Fetch the exact entry referenced by a (name, scope) key."""
        name, scope = key
        for entry in self._table.get(name, []):
            if entry.scope == scope:
                return entry
        return None

    def is_declared(self, name: str, scope: Optional[str] = None) -> bool:
        return self.lookup(name, scope) is not None

    def is_declared_in_current_scope(self, name: str) -> bool:
        return any(entry.scope == self.current_scope for entry in self._table.get(name, []))

    def entries(self, name: str) -> List[SymbolEntry]:
        return list(self._table.get(name, []))

    def names(self) -> List[str]:
        return list(self._table)

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._table.values())

    def __str__(self) -> str:
        lines = ["SymbolTable:"]
        for name, entries in self._table.items():
            lines.append(f"  {name}:")
            for entry in entries:
                lines.append(f"    {entry}")
        return "\n".join(lines) + "\n"


class SemanticAnalyzer:
    """
    Resolves types over an expression AST and builds its symbol table.

    Identifiers seen for the first time are declared implicitly with the
    configured default type, since the expression language has no
    declaration syntax. Callers can pre-declare names with other types
    through ``declarations``.

    Args:
        declarations: Optional mapping of name to type declared globally
            before the walk
        config: Analyzer settings (default type, global scope name)
    """

    def __init__(self, declarations: Optional[Mapping[str, str]] = None,
                 config: Optional[AnalyzerConfig] = None):
        self.config = config or AnalyzerConfig()
        self.symbol_table = SymbolTable(self.config.global_scope)
        self.errors: List[str] = []
        self._visitors: Dict[NodeKind, Callable[[ExpressionNode], None]] = {
            NodeKind.IDENTIFIER: self._visit_identifier,
            NodeKind.BINARY_OPERATION: self._visit_binary_operation,
            NodeKind.PARENTHESIZED: self._visit_parenthesized,
        }

        for name, type_name in (declarations or {}).items():
            self.declare(name, type_name)

    def declare(self, name: str, type_name: str, line: int = 0, column: int = 0) -> SymbolEntry:
        """Explicitly declare a name in the current scope."""
        entry = SymbolEntry(name, type_name, self.symbol_table.current_scope, line, column)
        self.symbol_table.add_symbol(entry)
        return entry

    def analyze(self, node: Optional[ExpressionNode]) -> List[str]:
        """
        Annotate the tree rooted at ``node``.

        Returns:
            The accumulated diagnostics (also available as ``errors``)
        """
        self._visit(node)
        return self.errors

    def _visit(self, root: Optional[ExpressionNode]):
        # Post-order: children are typed before their parent's rule runs
        if root is None:
            return
        for node in iter_post_order(root):
            visitor = self._visitors.get(node.kind)
            if visitor is None:
                raise TypeError(f"No semantic rule for node kind {node.kind!r}")
            visitor(node)

    def _add_error(self, message: str, line: int, column: int):
        self.errors.append(f"Semantic Error (line {line}, col {column}): {message}")

    def _visit_identifier(self, node: IdentifierNode):
        entry = self.symbol_table.lookup(node.name)
        if entry is None:
            line = node.token.line if node.token else 0
            column = node.token.column if node.token else 0
            entry = self.declare(node.name, self.config.default_type, line, column)
            logger.debug("Implicitly declared identifier '%s' as %s in scope '%s' at line %d",
                         node.name, entry.type, entry.scope, line)
        else:
            logger.debug("Identifier '%s' found in symbol table. Type: %s, Scope: %s",
                         node.name, entry.type, entry.scope)

        node.resolved_type = entry.type
        node.symbol_key = entry.key

    def _visit_binary_operation(self, node: BinaryOperationNode):
        left_type = node.left.resolved_type
        right_type = node.right.resolved_type
        operator = node.operator
        line = node.operator_token.line
        col = node.operator_token.column

        # Errors below this node were already reported
        if TYPE_ERROR in (left_type, right_type):
            node.resolved_type = TYPE_ERROR
            return

        if TYPE_UNKNOWN in (left_type, right_type):
            self._add_error(f"Cannot perform operation '{operator}' on operands with unknown types "
                            f"('{left_type}', '{right_type}').", line, col)
            node.resolved_type = TYPE_ERROR
            return

        if operator in SHIFT_OPERATORS:
            node.resolved_type = self._shift_result(operator, left_type, right_type, line, col)
        elif operator in ADDITIVE_OPERATORS:
            node.resolved_type = self._additive_result(operator, left_type, right_type, line, col)
        else:
            self._add_error(f"Unsupported operator: {operator}", line, col)
            node.resolved_type = TYPE_ERROR

        logger.debug("BinaryOp '%s' [L%d,C%d] with types %s, %s -> result type: %s",
                     operator, line, col, left_type, right_type, node.resolved_type)

    def _shift_result(self, operator: str, left_type: str, right_type: str, line: int, col: int) -> str:
        if left_type == TYPE_INT and right_type == TYPE_INT:
            return TYPE_INT
        self._add_error(f"Type mismatch for operator '{operator}'. Expected two integers, "
                        f"but got {left_type} and {right_type}.", line, col)
        return TYPE_ERROR

    def _additive_result(self, operator: str, left_type: str, right_type: str, line: int, col: int) -> str:
        if left_type in NUMERIC_TYPES and right_type in NUMERIC_TYPES:
            # int op int stays int; any float operand widens the result
            if left_type == TYPE_INT and right_type == TYPE_INT:
                return TYPE_INT
            return TYPE_FLOAT
        self._add_error(f"Type mismatch for operator '{operator}'. Expected numeric operands, "
                        f"but got {left_type} and {right_type}.", line, col)
        return TYPE_ERROR

    def _visit_parenthesized(self, node: ParenthesizedNode):
        node.resolved_type = node.expression.resolved_type
