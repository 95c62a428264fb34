import logging
import sys
import traceback
from flask import Flask, request, jsonify

from analysis import ExpressionAnalysisService
from config import AnalyzerConfig, ServerConfig
from first_follow import build_report, build_shift_expression_report
from grammar_model import Grammar, GrammarError
from visualization import VisualizationGenerator

app = Flask(__name__)

# --- Shared state, built once at startup ---
# The solved report is immutable, so every request can read it
GRAMMAR_REPORT, _ = build_shift_expression_report()
ANALYSIS_SERVICE = ExpressionAnalysisService(AnalyzerConfig.from_env())
VIZ = VisualizationGenerator()

# --- HTML Escape Helper ---
def escapeHtml(unsafe):
    if unsafe is None: return ''
    unsafe = str(unsafe)
    return unsafe.replace('&', '&amp;').replace('<', '&lt;').replace('>', '&gt;').replace('"', '&quot;').replace("'", '&#039;')

def bad_request(message, **extra):
    """400 response carrying the message as text and as an HTML block."""
    payload = {"error": message, "errorHtml": VIZ.format_error_message(message)}
    payload.update(extra)
    return jsonify(payload), 400

# --- Flask Endpoints ---

@app.route('/')
def index():
    """Report the built-in shift expression grammar with its FIRST and FOLLOW sets."""
    response = jsonify({
        "grammar": GRAMMAR_REPORT.productions,
        "firstSets": GRAMMAR_REPORT.first_sets,
        "followSets": GRAMMAR_REPORT.follow_sets,
        "expectedFirstSets": GRAMMAR_REPORT.expected_first,
        "expectedFollowSets": GRAMMAR_REPORT.expected_follow,
        "matchesExpected": GRAMMAR_REPORT.matches_expected,
        "setsTableHtml": VIZ.generate_first_follow_html(GRAMMAR_REPORT.first_sets, GRAMMAR_REPORT.follow_sets),
        "showParserLink": True,
    })
    response.headers['Cache-Control'] = 'no-cache, no-store, must-revalidate'
    return response

@app.route('/first-follow', methods=['POST'])
def first_follow():
    """
    Compute FIRST and FOLLOW sets for a grammar supplied as JSON.

    The body lists non-terminals, terminals, productions and the start symbol
    explicitly (see Grammar.from_dict).
    """
    data = request.get_json(silent=True)
    if not data:
        return bad_request("No grammar provided")

    try:
        grammar = Grammar.from_dict(data)
    except GrammarError as e:
        print(f"--- Grammar Construction FAILED: {e} ---", file=sys.stderr)
        return bad_request(str(e), success=False)

    try:
        print(f"--- Solving FIRST/FOLLOW for {len(grammar.productions)} productions ---", file=sys.stderr)
        report, computer = build_report(grammar)
        print(f"--- Converged: {dict(computer.pass_counts)} ---", file=sys.stderr)

        return jsonify({
            "success": True,
            "grammar": report.productions,
            "firstSets": report.first_sets,
            "followSets": report.follow_sets,
            "setsTableHtml": VIZ.generate_first_follow_html(report.first_sets, report.follow_sets),
        })

    except Exception as e:
        print(f"--- UNEXPECTED Python Error: {e} ---", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
        error_message = f"Unexpected server error: {escapeHtml(str(e))}"
        return jsonify({"error": error_message}), 500

@app.route('/parser', methods=['POST'])
def analyze_expression():
    """
    Parse and type-check one expression.

    Accepts ``{"input": "...", "declarations": {"x": "float"}}``; the
    declarations are optional.
    """
    data = request.get_json(silent=True) or {}
    string_input = data.get('input')
    declarations = data.get('declarations') or {}

    if string_input is None:
        return bad_request("No input string provided")
    if not isinstance(string_input, str):
        return bad_request("Input must be a string")
    if not isinstance(declarations, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in declarations.items()):
        return bad_request("Declarations must map names to type names")

    try:
        print(f"--- Analyzing Input String: '{string_input}' ---", file=sys.stderr)
        result = ANALYSIS_SERVICE.analyze(string_input, declarations=declarations)

        if result.success:
            print("--- Analysis SUCCEEDED ---", file=sys.stderr)
        else:
            print("--- Analysis FAILED ---", file=sys.stderr)
            print(result.errors, file=sys.stderr)

        payload = result.to_dict()
        payload["input"] = string_input
        payload["treeDot"] = VIZ.generate_ast_dot(result.ast)
        payload["errorsHtml"] = VIZ.format_diagnostics(result.syntax_errors, result.semantic_errors)
        return jsonify(payload)

    except Exception as e:
        print(f"--- UNEXPECTED Python Error: {e} ---", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
        error_message = f"Unexpected server error: {escapeHtml(str(e))}"
        return jsonify({"error": error_message}), 500

# --- Main Execution ---
if __name__ == '__main__':
    server_config = ServerConfig.from_env()
    logging.basicConfig(level=server_config.log_level,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    print("--- Grammar Analyzer Server ---")
    print(f"FIRST/FOLLOW sets match expected values: {GRAMMAR_REPORT.matches_expected}")
    print(f"Running on http://{server_config.host}:{server_config.port}")
    print("-" * 34)
    app.run(host=server_config.host, port=server_config.port, debug=server_config.debug)
