from analysis import ExpressionAnalysisService, analyze_source, format_errors
from config import AnalyzerConfig


def test_successful_analysis():
    result = analyze_source("a << b")
    assert result.success
    assert result.errors == ""
    assert result.syntax_tree == (
        "BinaryOp(<<) [type: int]\n"
        "  ├─ ID(a) [type: int] (sym: a)\n"
        "  └─ ID(b) [type: int] (sym: b)\n"
    )
    assert result.symbol_table.startswith("SymbolTable:\n  a:\n")


def test_syntax_error_skips_semantic_analysis():
    result = analyze_source("a + + b")
    assert not result.success
    assert result.syntax_tree is None
    assert result.symbol_table is None
    assert result.semantic_errors == []
    assert result.errors == (
        "Parser Errors:\n"
        "Error at line 1, column 5: Expected '(' or identifier, found: +\n"
    )


def test_semantic_errors_section():
    result = analyze_source("f << a", declarations={"f": "float"})
    assert not result.success
    assert result.syntax_tree is not None
    assert result.syntax_tree.startswith("BinaryOp(<<) [type: error_type]\n")
    assert result.errors.startswith("Semantic Errors:\nSemantic Error (line 1, col 3): Type mismatch")
    assert "  f:\n    SymbolEntry(name='f', type='float', scope='global', line=0, column=0)" in result.symbol_table


def test_widening_succeeds():
    result = analyze_source("a + f", declarations={"f": "float"})
    assert result.success
    assert result.syntax_tree.startswith("BinaryOp(+) [type: float]\n")


def test_format_errors_with_both_sections():
    text = format_errors(["Error at line 1, column 1: x"], ["Semantic Error (line 1, col 1): y"])
    assert text == (
        "Parser Errors:\nError at line 1, column 1: x\n"
        "Semantic Errors:\nSemantic Error (line 1, col 1): y\n"
    )
    assert format_errors([], []) == ""


def test_analysis_is_deterministic():
    first = analyze_source("(a + b) << c >> d", declarations={"d": "float"})
    second = analyze_source("(a + b) << c >> d", declarations={"d": "float"})
    assert first.to_dict() == second.to_dict()


def test_service_builds_fresh_state_per_call():
    service = ExpressionAnalysisService(AnalyzerConfig())
    service.analyze("a")
    result = service.analyze("b")
    assert "a:" not in result.symbol_table
    assert result.to_dict()["success"] is True


def test_long_chain_renders_tree():
    result = analyze_source(" - ".join(["x"] * 2000))
    assert result.success
    lines = result.syntax_tree.splitlines()
    assert len(lines) == 3999
    assert lines[0] == "BinaryOp(-) [type: int]"
    assert lines[-1].endswith("└─ ID(x) [type: int] (sym: x)")
