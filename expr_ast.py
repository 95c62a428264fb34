"""
Abstract Syntax Tree for Shift/Additive Expressions

Nodes are a closed set of variants tagged by ``NodeKind``. Each node carries a
``resolved_type`` slot that stays ``None`` until semantic analysis fills it.

Long operator chains fold into left-deep trees, so every walk here uses an
explicit stack instead of recursion.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from expr_lexer import Token

LEFT_BRANCH = "  ├─ "
LAST_BRANCH = "  └─ "

# (name, scope) key into a SymbolTable
SymbolKey = Tuple[str, str]


class NodeKind(Enum):
    IDENTIFIER = "identifier"
    BINARY_OPERATION = "binary_operation"
    PARENTHESIZED = "parenthesized"


@dataclass(eq=False)
class ExpressionNode:
    """Base class for every expression node."""
    resolved_type: Optional[str] = field(default=None, init=False)

    kind = None  # set by each variant

    def to_tree_string(self, indent: str = "") -> str:
        """Render the subtree, one line per node, each line ending in a newline."""
        return render_tree(self, indent)

    def label(self) -> str:
        """Text of this node's own line in the tree rendering."""
        raise NotImplementedError

    def children(self) -> List['ExpressionNode']:
        return []

    def _type_info(self) -> str:
        return f" [type: {self.resolved_type}]" if self.resolved_type is not None else ""


@dataclass(eq=False)
class IdentifierNode(ExpressionNode):
    name: str = ""
    token: Optional[Token] = None
    symbol_key: Optional[SymbolKey] = field(default=None, init=False)

    kind = NodeKind.IDENTIFIER

    def label(self) -> str:
        sym_info = f" (sym: {self.symbol_key[0]})" if self.symbol_key is not None else ""
        return f"ID({self.name}){self._type_info()}{sym_info}"


@dataclass(eq=False)
class BinaryOperationNode(ExpressionNode):
    left: Optional[ExpressionNode] = None
    operator_token: Optional[Token] = None
    right: Optional[ExpressionNode] = None

    kind = NodeKind.BINARY_OPERATION

    @property
    def operator(self) -> str:
        return self.operator_token.value

    def children(self) -> List[ExpressionNode]:
        return [self.left, self.right]

    def label(self) -> str:
        return f"BinaryOp({self.operator}){self._type_info()}"


@dataclass(eq=False)
class ParenthesizedNode(ExpressionNode):
    expression: Optional[ExpressionNode] = None

    kind = NodeKind.PARENTHESIZED

    def children(self) -> List[ExpressionNode]:
        return [self.expression]

    def label(self) -> str:
        return "Parenthesized"


def render_tree(root: ExpressionNode, indent: str = "") -> str:
    """
    Render a tree as indented text.

    Every child line is prefixed with its parent's prefix plus a branch marker:
    ``├─`` for all but the last child, ``└─`` for the last.
    """
    lines = []
    stack = [(root, indent)]
    while stack:
        node, prefix = stack.pop()
        lines.append(f"{prefix}{node.label()}\n")
        children = node.children()
        for position in range(len(children) - 1, -1, -1):
            branch = LAST_BRANCH if position == len(children) - 1 else LEFT_BRANCH
            stack.append((children[position], prefix + branch))
    return "".join(lines)


def iter_nodes(root: ExpressionNode):
    """Pre-order walk over a tree."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children()))


def iter_post_order(root: ExpressionNode):
    """Post-order walk: every node comes after all of its children."""
    stack = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded:
            yield node
            continue
        stack.append((node, True))
        stack.extend((child, False) for child in reversed(node.children()))
