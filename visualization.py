"""
Visualization and Output Formatting Module

This module renders analyzer output for the web layer: HTML tables for
FIRST/FOLLOW sets, DOT graphs for expression ASTs, and HTML blocks for
syntax and semantic diagnostics.
"""

from typing import Dict, List, Tuple, Optional
from dataclasses import dataclass
import html
import itertools

from expr_ast import ExpressionNode, IdentifierNode, BinaryOperationNode, NodeKind


@dataclass
class VisualizationConfig:
    """Configuration options for visualization output."""
    table_css_classes: str = "first-follow-table"
    error_css_classes: str = "error-message"
    include_inline_styles: bool = True
    compact_mode: bool = False


class HTMLTableGenerator:
    """Generates HTML tables for FIRST/FOLLOW sets."""

    def __init__(self, config: Optional[VisualizationConfig] = None):
        self.config = config or VisualizationConfig()

    def generate_first_follow_html(self,
                                   first_sets: Dict[str, str],
                                   follow_sets: Dict[str, str]) -> str:
        """
        Generate an HTML table with one row per non-terminal.

        Args:
            first_sets: Rendered sets keyed like ``FIRST(E)``
            follow_sets: Rendered sets keyed like ``FOLLOW(E)``

        Returns:
            HTML string containing the table
        """
        rows = self._collect_rows(first_sets, follow_sets)
        if not rows:
            return self._generate_empty_table_html("No non-terminals found")

        html_lines = []

        if self.config.include_inline_styles:
            html_lines.append(self._generate_table_styles())

        html_lines.append(f'<table class="grammar-table {self.config.table_css_classes}" role="table" aria-label="FIRST and FOLLOW sets">')
        html_lines.append('<thead>')
        html_lines.append('<tr>')
        html_lines.append('<th class="grammar-table-header grammar-table-header-primary" scope="col">Non-terminal</th>')
        html_lines.append('<th class="grammar-table-header" scope="col">FIRST</th>')
        html_lines.append('<th class="grammar-table-header" scope="col">FOLLOW</th>')
        html_lines.append('</tr>')
        html_lines.append('</thead>')
        html_lines.append('<tbody>')

        for name, first, follow in rows:
            html_lines.append('<tr>')
            html_lines.append(f'<th class="grammar-table-cell grammar-table-cell-primary" scope="row">{html.escape(name)}</th>')
            html_lines.append(f'<td class="grammar-table-cell">{html.escape(first)}</td>')
            html_lines.append(f'<td class="grammar-table-cell">{html.escape(follow)}</td>')
            html_lines.append('</tr>')

        html_lines.append('</tbody>')
        html_lines.append('</table>')

        return '\n'.join(html_lines)

    @staticmethod
    def _collect_rows(first_sets: Dict[str, str], follow_sets: Dict[str, str]) -> List[Tuple[str, str, str]]:
        names = []
        for label in list(first_sets) + list(follow_sets):
            # FIRST(E) / FOLLOW(E) -> E
            name = label[label.index('(') + 1:-1] if '(' in label else label
            if name not in names:
                names.append(name)
        return [
            (name, first_sets.get(f"FIRST({name})", "{ }"), follow_sets.get(f"FOLLOW({name})", "{ }"))
            for name in names
        ]

    def _generate_empty_table_html(self, message: str) -> str:
        """Generate HTML for an empty table with a message."""
        html_lines = []
        html_lines.append(f'<div class="{self.config.error_css_classes}">')
        html_lines.append(f'<p>{html.escape(message)}</p>')
        html_lines.append('</div>')
        return '\n'.join(html_lines)

    def _generate_table_styles(self) -> str:
        """Generate inline CSS styles for the table."""
        return """
<style>
.first-follow-table {
    border-collapse: collapse;
    font-family: 'Courier New', monospace;
    font-size: 12px;
}

.first-follow-table th, .first-follow-table td {
    border: 1px solid #374151;
    padding: 6px 10px;
    text-align: left;
}
</style>"""


class DOTGenerator:
    """Generates DOT format output for expression ASTs."""

    def __init__(self, config: Optional[VisualizationConfig] = None):
        self.config = config or VisualizationConfig()

    def generate_ast_dot(self, root: Optional[ExpressionNode], title: str = "Syntax Tree") -> str:
        """
        Generate DOT format representation of an expression AST.

        Args:
            root: Root node of the tree, or None
            title: Title for the graph

        Returns:
            DOT format string
        """
        if root is None:
            return self._generate_empty_tree_dot(title, "Syntax tree is empty")

        lines = []

        lines.append(f'digraph "{self._escape_dot_string(title)}" {{')
        lines.append('  rankdir=TB;')
        lines.append('  node [fontname="Arial", fontsize=12];')
        lines.append('  edge [fontsize=9, color="#333333"];')
        lines.append('  bgcolor=white;')

        lines.extend(self._generate_tree_dot(root))

        lines.append('}')

        return '\n'.join(lines)

    def _generate_tree_dot(self, root: ExpressionNode) -> List[str]:
        """
        Generate node and edge statements for a whole tree.

        Node ids are handed out in pre-order from a counter local to this call.
        """
        lines = []
        node_ids = itertools.count()
        stack: List[Tuple[ExpressionNode, Optional[int]]] = [(root, None)]

        while stack:
            node, parent_id = stack.pop()
            current_id = next(node_ids)
            escaped_label = self._escape_dot_string(self._node_label(node))

            if node.kind == NodeKind.IDENTIFIER:
                # Leaves: blue boxes
                lines.append(f'  node{current_id} [label="{escaped_label}", shape=box, style=filled, fillcolor="#e3f2fd", color="#1976d2", fontname="Courier New"];')
            else:
                lines.append(f'  node{current_id} [label="{escaped_label}", shape=ellipse, style=filled, fillcolor="#e8f5e8", color="#388e3c"];')

            if parent_id is not None:
                lines.append(f'  node{parent_id} -> node{current_id} [color="#666666"];')

            stack.extend((child, current_id) for child in reversed(node.children()))

        return lines

    def _node_label(self, node: ExpressionNode) -> str:
        if isinstance(node, IdentifierNode):
            label = node.name
        elif isinstance(node, BinaryOperationNode):
            label = node.operator
        else:
            label = "( )"
        if node.resolved_type is not None and not self.config.compact_mode:
            label += f"\n{node.resolved_type}"
        return label

    def _generate_empty_tree_dot(self, title: str, message: str) -> str:
        """Generate DOT for an empty or error tree."""
        lines = []
        lines.append(f'digraph "{self._escape_dot_string(title)}" {{')
        lines.append('  rankdir=TB;')
        lines.append('  node [fontname="Arial"];')
        lines.append(f'  empty [label="{self._escape_dot_string(message)}", shape=box, color=red];')
        lines.append('}')
        return '\n'.join(lines)

    def _escape_dot_string(self, text: str) -> str:
        """Escape a string for use in DOT format."""
        if not text:
            return ""

        text = str(text)
        text = text.replace('\\', '\\\\')
        text = text.replace('"', '\\"')
        text = text.replace('\n', '\\n')
        text = text.replace('\t', '\\t')
        text = text.replace('\r', '\\r')

        return text


class ErrorMessageFormatter:
    """Formats diagnostics as HTML."""

    def __init__(self, config: Optional[VisualizationConfig] = None):
        self.config = config or VisualizationConfig()

    def format_diagnostics(self, syntax_errors: List[str], semantic_errors: List[str]) -> str:
        """
        Format syntax and semantic diagnostics as HTML sections.

        Args:
            syntax_errors: Formatted parser messages
            semantic_errors: Formatted semantic messages

        Returns:
            HTML report, or a short notice when there is nothing to report
        """
        if not syntax_errors and not semantic_errors:
            return '<div class="no-errors">No errors found.</div>'

        html_lines = []

        if self.config.include_inline_styles:
            html_lines.append(self._generate_error_styles())

        html_lines.append(f'<div class="{self.config.error_css_classes}">')
        if syntax_errors:
            html_lines.append(self._format_section("Parser Errors", syntax_errors))
        if semantic_errors:
            html_lines.append(self._format_section("Semantic Errors", semantic_errors))
        html_lines.append('</div>')

        return '\n'.join(html_lines)

    def format_parse_error(self, error_message: str) -> str:
        """Format a single error message, e.g. an invalid request payload."""
        html_lines = []

        if self.config.include_inline_styles:
            html_lines.append(self._generate_error_styles())

        html_lines.append(f'<div class="{self.config.error_css_classes}">')
        html_lines.append('<h4>Error</h4>')
        html_lines.append(f'<p class="error-text">{html.escape(error_message)}</p>')
        html_lines.append('</div>')

        return '\n'.join(html_lines)

    def _format_section(self, title: str, messages: List[str]) -> str:
        html_lines = [f'<h4>{html.escape(title)} ({len(messages)} found)</h4>', '<ul>']
        for message in messages:
            html_lines.append(f'<li class="error-text">{html.escape(message)}</li>')
        html_lines.append('</ul>')
        return '\n'.join(html_lines)

    def _generate_error_styles(self) -> str:
        """Generate inline CSS styles for error messages."""
        return """
<style>
.error-message {
    color: #cc0000;
    background-color: #ffeeee;
    border: 1px solid #cc0000;
    border-radius: 4px;
    padding: 10px;
    margin: 10px 0;
    font-family: Arial, sans-serif;
}

.error-text {
    font-weight: bold;
    margin: 5px 0;
}
</style>"""


class VisualizationGenerator:
    """Main visualization generator that combines all formatting capabilities."""

    def __init__(self, config: Optional[VisualizationConfig] = None):
        self.config = config or VisualizationConfig()
        self.table_generator = HTMLTableGenerator(self.config)
        self.dot_generator = DOTGenerator(self.config)
        self.error_formatter = ErrorMessageFormatter(self.config)

    def generate_first_follow_html(self, first_sets: Dict[str, str], follow_sets: Dict[str, str]) -> str:
        return self.table_generator.generate_first_follow_html(first_sets, follow_sets)

    def generate_ast_dot(self, root: Optional[ExpressionNode], title: str = "Syntax Tree") -> str:
        return self.dot_generator.generate_ast_dot(root, title)

    def format_diagnostics(self, syntax_errors: List[str], semantic_errors: List[str]) -> str:
        return self.error_formatter.format_diagnostics(syntax_errors, semantic_errors)

    def format_error_message(self, error_message: str) -> str:
        return self.error_formatter.format_parse_error(error_message)
