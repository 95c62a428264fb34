import pytest

from first_follow import (
    FirstFollowComputer, format_set, format_sets, build_report, build_shift_expression_report,
)
from grammar_model import Grammar, NonTerminal, Terminal, EPSILON, EOF


def names(symbols):
    return {symbol.name for symbol in symbols}


def eliminated_grammar():
    return Grammar.from_dict({
        "non_terminals": ["E", "E'", "T", "T'", "F"],
        "terminals": ["<<", ">>", "+", "-", "(", ")", "id"],
        "productions": [
            {"lhs": "E", "rhs": ["T", "E'"]},
            {"lhs": "E'", "rhs": ["<<", "T", "E'"]},
            {"lhs": "E'", "rhs": [">>", "T", "E'"]},
            {"lhs": "E'", "rhs": []},
            {"lhs": "T", "rhs": ["F", "T'"]},
            {"lhs": "T'", "rhs": ["+", "F", "T'"]},
            {"lhs": "T'", "rhs": ["-", "F", "T'"]},
            {"lhs": "T'", "rhs": []},
            {"lhs": "F", "rhs": ["(", "E", ")"]},
            {"lhs": "F", "rhs": ["id"]},
        ],
        "start": "E",
    })


def test_first_sets_of_shift_grammar(solver):
    for name in ("E", "T", "F"):
        assert names(solver.first_sets[NonTerminal(name)]) == {"(", "id"}


def test_follow_sets_of_shift_grammar(solver):
    assert names(solver.follow_of("E")) == {")", "<<", ">>", "$"}
    assert names(solver.follow_of("T")) == {"+", "-", ")", "<<", ">>", "$"}
    assert names(solver.follow_of("F")) == {"+", "-", ")", "<<", ">>", "$"}


def test_first_of_terminal_is_itself(solver):
    assert solver.first_of("id") == {Terminal("id")}
    assert solver.first_of(Terminal("<<")) == {Terminal("<<")}


def test_empty_sequence_derives_epsilon(solver):
    assert solver.first_of_sequence([]) == {EPSILON}
    assert names(solver.first_of_sequence(["T", "+"])) == {"(", "id"}


def test_epsilon_propagation():
    grammar = Grammar.from_dict({
        "non_terminals": ["S", "A", "B"],
        "terminals": ["a", "b", "c"],
        "productions": [
            {"lhs": "S", "rhs": ["A", "B", "c"]},
            {"lhs": "S", "rhs": ["A", "B"]},
            {"lhs": "A", "rhs": ["a", "A"]},
            {"lhs": "A", "rhs": []},
            {"lhs": "B", "rhs": ["b"]},
            {"lhs": "B", "rhs": []},
        ],
        "start": "S",
    })
    computer = FirstFollowComputer(grammar)

    assert computer.first_of("A") == {Terminal("a"), EPSILON}
    assert names(computer.first_sets[NonTerminal("A")]) == {"a"}
    assert names(computer.first_sets[NonTerminal("S")]) == {"a", "b", "c"}
    assert EPSILON in computer.internal_first_sets[NonTerminal("S")]

    assert names(computer.follow_of("S")) == {"$"}
    assert names(computer.follow_of("A")) == {"b", "c", "$"}
    assert names(computer.follow_of("B")) == {"c", "$"}


def test_left_recursion_eliminated_grammar():
    computer = FirstFollowComputer(eliminated_grammar())

    assert names(computer.first_sets[NonTerminal("E'")]) == {"<<", ">>"}
    assert computer.first_of("T'") == {Terminal("+"), Terminal("-"), EPSILON}
    assert names(computer.follow_of("E")) == {")", "$"}
    assert names(computer.follow_of("E'")) == {")", "$"}
    assert names(computer.follow_of("T")) == {"<<", ">>", ")", "$"}
    assert names(computer.follow_of("T'")) == {"<<", ">>", ")", "$"}
    assert names(computer.follow_of("F")) == {"+", "-", "<<", ">>", ")", "$"}


def test_sets_only_grow_between_passes(solver):
    for history in (solver.first_history, solver.follow_history):
        assert history
        for before, after in zip(history, history[1:]):
            for non_terminal, members in before.items():
                assert members <= after[non_terminal]


def test_last_pass_changes_nothing(solver):
    assert dict(solver.first_history[-1]) == dict(solver.first_history[-2])
    assert dict(solver.follow_history[-1]) == dict(solver.follow_history[-2])


def test_resolving_twice_is_idempotent(shift_grammar):
    first = FirstFollowComputer(shift_grammar)
    second = FirstFollowComputer(shift_grammar)
    assert dict(first.internal_first_sets) == dict(second.internal_first_sets)
    assert dict(first.follow_sets) == dict(second.follow_sets)


def test_solver_does_not_touch_the_grammar(shift_grammar):
    productions = shift_grammar.productions
    FirstFollowComputer(shift_grammar)
    assert shift_grammar.productions == productions


def test_results_are_read_only(solver):
    E = NonTerminal("E")
    with pytest.raises(TypeError):
        solver.follow_sets[E] = frozenset()
    assert isinstance(solver.follow_sets[E], frozenset)


def test_unknown_symbol_lookup(solver):
    with pytest.raises(KeyError):
        solver.first_of("nope")
    with pytest.raises(KeyError):
        solver.follow_of("id")


def test_cache_is_used(solver):
    stats = solver.get_cache_stats()
    assert stats['cache_hits'] > 0
    assert stats['cache_misses'] > 0
    assert solver.pass_counts['first'] >= 2
    assert solver.pass_counts['follow'] >= 2


def test_start_symbol_follow_has_eof():
    grammar = Grammar.from_dict({
        "non_terminals": ["S"],
        "terminals": ["a"],
        "productions": [{"lhs": "S", "rhs": ["a"]}],
        "start": "S",
    })
    computer = FirstFollowComputer(grammar)
    assert computer.follow_of("S") == {EOF}


def test_format_set():
    assert format_set([]) == "{ }"
    assert format_set([Terminal("id"), Terminal("(")]) == "{ (, id }"


def test_format_sets_sorted_by_non_terminal(solver):
    formatted = format_sets(solver.first_sets, "FIRST")
    assert list(formatted) == ["FIRST(E)", "FIRST(F)", "FIRST(T)"]
    assert formatted["FIRST(E)"] == "{ (, id }"


def test_shift_expression_report_matches_expected():
    report, _ = build_shift_expression_report()
    assert report.matches_expected is True
    assert report.productions[0] == "E → E << T"
    assert report.to_dict()['matches_expected'] is True


def test_report_without_expectations(shift_grammar):
    report, _ = build_report(shift_grammar)
    assert report.matches_expected is None


def test_report_detects_mismatch(shift_grammar):
    report, _ = build_report(shift_grammar, expected_first={"FIRST(E)": "{ id }"})
    assert report.matches_expected is False
