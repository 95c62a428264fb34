"""
Expression Analysis Pipeline

Runs source text through the lexer, parser and semantic analyzer and
packages the outcome in the serialized form shown to users.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Dict, Optional, Mapping, Any

from config import AnalyzerConfig
from expr_ast import ExpressionNode
from expr_parser import Parser
from semantic import SemanticAnalyzer

logger = logging.getLogger(__name__)

PARSER_ERRORS_HEADER = "Parser Errors:"
SEMANTIC_ERRORS_HEADER = "Semantic Errors:"


@dataclass
class AnalysisResult:
    """Outcome of analyzing one source string."""
    success: bool
    syntax_tree: Optional[str]
    errors: str
    symbol_table: Optional[str]
    syntax_errors: List[str] = field(default_factory=list)
    semantic_errors: List[str] = field(default_factory=list)
    ast: Optional[ExpressionNode] = field(default=None, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'syntax_tree': self.syntax_tree,
            'errors': self.errors,
            'symbol_table': self.symbol_table,
            'syntax_errors': self.syntax_errors,
            'semantic_errors': self.semantic_errors,
        }


def format_errors(syntax_errors: List[str], semantic_errors: List[str]) -> str:
    """Concatenate diagnostics under their section headers; empty when there are none."""
    sections = []
    if syntax_errors:
        sections.append(PARSER_ERRORS_HEADER + "\n" + "".join(f"{e}\n" for e in syntax_errors))
    if semantic_errors:
        sections.append(SEMANTIC_ERRORS_HEADER + "\n" + "".join(f"{e}\n" for e in semantic_errors))
    return "".join(sections)


def analyze_source(source: str,
                   declarations: Optional[Mapping[str, str]] = None,
                   config: Optional[AnalyzerConfig] = None) -> AnalysisResult:
    """
    Parse and type-check one expression.

    Syntax errors stop the pipeline before semantic analysis; semantic
    errors are all collected.

    Args:
        source: Raw expression text
        declarations: Optional name -> type pre-declarations
        config: Analyzer settings

    Returns:
        AnalysisResult with tree text, diagnostics and symbol table text
    """
    parser = Parser(source)
    ast = parser.parse()
    syntax_errors = list(parser.errors)

    if ast is None:
        logger.debug("Parsing failed with %d error(s)", len(syntax_errors))
        return AnalysisResult(
            success=False,
            syntax_tree=None,
            errors=format_errors(syntax_errors, []),
            symbol_table=None,
            syntax_errors=syntax_errors,
        )

    analyzer = SemanticAnalyzer(declarations=declarations, config=config)
    semantic_errors = list(analyzer.analyze(ast))

    return AnalysisResult(
        success=not syntax_errors and not semantic_errors,
        syntax_tree=ast.to_tree_string(),
        errors=format_errors(syntax_errors, semantic_errors),
        symbol_table=str(analyzer.symbol_table),
        syntax_errors=syntax_errors,
        semantic_errors=semantic_errors,
        ast=ast,
    )


class ExpressionAnalysisService:
    """
    Entry point used by the web layer.

    Holds the analyzer configuration; every call builds a fresh lexer,
    parser, analyzer and symbol table.
    """

    def __init__(self, config: Optional[AnalyzerConfig] = None):
        self.config = config or AnalyzerConfig()

    def analyze(self, source: str, declarations: Optional[Mapping[str, str]] = None) -> AnalysisResult:
        return analyze_source(source, declarations=declarations, config=self.config)
