"""
FIRST/FOLLOW Set Computation

This module computes FIRST and FOLLOW sets for a context-free grammar by
fixed-point iteration and renders them for display. The solver owns all of
its derived state; the grammar objects it reads are never modified.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import List, Dict, Tuple, Optional, Mapping, FrozenSet, Iterable, Sequence, Union

from grammar_model import (
    Grammar, Symbol, Terminal, NonTerminal, EPSILON, EOF, build_shift_expression_grammar,
)

logger = logging.getLogger(__name__)

SetMap = Mapping[NonTerminal, FrozenSet[Terminal]]


def _freeze(sets: Dict[NonTerminal, set]) -> SetMap:
    return MappingProxyType({nt: frozenset(members) for nt, members in sets.items()})


class FirstFollowComputer:
    """
    Computes FIRST and FOLLOW sets for grammar symbols with sequence caching.

    Both fixed points are reached inside the constructor; afterwards every
    read returns an immutable snapshot, so a solved instance can be shared
    freely between readers.

    Args:
        grammar: The grammar to analyze
        record_history: Keep a snapshot of all sets after every pass
    """

    def __init__(self, grammar: Grammar, record_history: bool = False):
        self.grammar = grammar
        self._first: Dict[NonTerminal, set] = {nt: set() for nt in grammar.non_terminals}
        self._follow: Dict[NonTerminal, set] = {nt: set() for nt in grammar.non_terminals}

        # FIRST of RHS sequences, valid for the current FIRST snapshot only
        self._first_string_cache: Dict[Tuple[Symbol, ...], FrozenSet[Terminal]] = {}
        self._cache_hits = 0
        self._cache_misses = 0

        self._record_history = record_history
        self.first_history: List[SetMap] = []
        self.follow_history: List[SetMap] = []
        self._passes = {'first': 0, 'follow': 0}

        self._compute_first_sets()
        self._compute_follow_sets()

        self._internal_first_view = _freeze(self._first)
        self._first_view = MappingProxyType(
            {nt: members - {EPSILON} for nt, members in self._internal_first_view.items()}
        )
        self._follow_view = _freeze(self._follow)

        logger.debug("FIRST converged after %d passes, FOLLOW after %d passes",
                     self._passes['first'], self._passes['follow'])

    # --- FIRST ---

    def _compute_first_sets(self):
        """
        Compute FIRST sets for all non-terminals.

        For every production A -> X1 X2 ... Xn the FIRST set of the sequence
        is unioned into FIRST(A). Full passes repeat until no set grows.
        """
        changed = True
        while changed:
            changed = False
            self._passes['first'] += 1
            for production in self.grammar.productions:
                current = self._first[production.lhs]
                before_size = len(current)
                current.update(self._compute_first_of_string(production.rhs))
                if len(current) > before_size:
                    changed = True
                    # Cached sequences may depend on the set that just grew
                    self._first_string_cache.clear()
            if self._record_history:
                self.first_history.append(_freeze(self._first))

    def _first_of_symbol(self, symbol: Symbol) -> FrozenSet[Terminal]:
        """
        FIRST set for a single symbol.

        Rules:
        1. If X is terminal, FIRST(X) = {X}
        2. If X is non-terminal, FIRST(X) is whatever has accumulated so far,
           which is what makes recursive productions converge
        """
        if symbol.is_terminal:
            return frozenset((symbol,))
        return frozenset(self._first.get(symbol, ()))

    def _compute_first_of_string(self, symbols: Sequence[Symbol]) -> FrozenSet[Terminal]:
        """
        Compute FIRST set of a string of symbols with caching.

        FIRST(X1 X2 ... Xn):
        - Add FIRST(X1) - {epsilon}
        - If epsilon in FIRST(X1), add FIRST(X2) - {epsilon}
        - Continue until Xi where epsilon not in FIRST(Xi)
        - If epsilon in FIRST(Xi) for all i (or n = 0), add epsilon
        """
        cache_key = tuple(symbols)
        cached = self._first_string_cache.get(cache_key)
        if cached is not None:
            self._cache_hits += 1
            return cached

        self._cache_misses += 1
        first_set = set()
        derives_epsilon = True

        for symbol in cache_key:
            symbol_first = self._first_of_symbol(symbol)
            first_set.update(symbol_first - {EPSILON})
            if EPSILON not in symbol_first:
                derives_epsilon = False
                break

        if derives_epsilon:
            first_set.add(EPSILON)

        result = frozenset(first_set)
        self._first_string_cache[cache_key] = result
        return result

    # --- FOLLOW ---

    def _compute_follow_sets(self):
        """
        Compute FOLLOW sets for all non-terminals.

        FOLLOW(A) is the set of terminals that can appear immediately
        to the right of A in some sentential form.
        """
        # Add $ to FOLLOW of start symbol
        self._follow[self.grammar.start_symbol].add(EOF)

        # Iterate until no changes (fixed point)
        changed = True
        while changed:
            changed = False
            self._passes['follow'] += 1
            for production in self.grammar.productions:
                for i, symbol in enumerate(production.rhs):
                    if not symbol.is_non_terminal:
                        continue

                    beta = production.rhs[i + 1:]
                    first_beta = self._compute_first_of_string(beta)
                    follow_b = self._follow[symbol]
                    before_size = len(follow_b)

                    # Add FIRST(beta) - {epsilon} to FOLLOW(symbol)
                    follow_b.update(first_beta - {EPSILON})

                    # If beta can vanish, whatever follows A can follow B
                    if EPSILON in first_beta:
                        follow_b.update(self._follow[production.lhs])

                    if len(follow_b) > before_size:
                        changed = True
            if self._record_history:
                self.follow_history.append(_freeze(self._follow))

    # --- Reads ---

    @property
    def first_sets(self) -> SetMap:
        """FIRST sets for every non-terminal, without epsilon (display form)."""
        return self._first_view

    @property
    def internal_first_sets(self) -> SetMap:
        """FIRST sets for every non-terminal, including epsilon where derivable."""
        return self._internal_first_view

    @property
    def follow_sets(self) -> SetMap:
        return self._follow_view

    @property
    def pass_counts(self) -> Mapping[str, int]:
        return MappingProxyType(dict(self._passes))

    def first_of(self, symbol: Union[Symbol, str]) -> FrozenSet[Terminal]:
        """Get the FIRST set (with epsilon) of a symbol or symbol name."""
        resolved = self._resolve(symbol)
        if resolved.is_terminal:
            return frozenset((resolved,))
        return self._internal_first_view[resolved]

    def follow_of(self, non_terminal: Union[NonTerminal, str]) -> FrozenSet[Terminal]:
        resolved = self._resolve(non_terminal)
        if resolved.is_terminal:
            raise KeyError(f"FOLLOW is only defined for non-terminals, got terminal '{resolved}'")
        return self._follow_view[resolved]

    def first_of_sequence(self, symbols: Iterable[Union[Symbol, str]]) -> FrozenSet[Terminal]:
        """Get the FIRST set of an arbitrary symbol sequence."""
        return self._compute_first_of_string([self._resolve(s) for s in symbols])

    def _resolve(self, symbol: Union[Symbol, str]) -> Symbol:
        if isinstance(symbol, Symbol):
            if symbol not in self.grammar.all_symbols():
                raise KeyError(f"Unknown symbol '{symbol}'")
            return symbol
        resolved = self.grammar.non_terminal(symbol) or self.grammar.terminal(symbol)
        if resolved is None:
            raise KeyError(f"Unknown symbol '{symbol}'")
        return resolved

    def get_cache_stats(self) -> Dict[str, Union[int, float]]:
        """Get cache performance statistics."""
        total_requests = self._cache_hits + self._cache_misses
        hit_rate = (self._cache_hits / total_requests * 100) if total_requests > 0 else 0
        return {
            'cache_hits': self._cache_hits,
            'cache_misses': self._cache_misses,
            'hit_rate_percent': round(hit_rate, 2),
            'cached_strings': len(self._first_string_cache)
        }


def format_set(members: Iterable[Symbol]) -> str:
    """Render a set as ``{ }`` or ``{ a, b }`` with members sorted by name."""
    names = sorted(symbol.name for symbol in members)
    if not names:
        return "{ }"
    return "{ " + ", ".join(names) + " }"


def format_sets(sets: SetMap, set_name: str) -> Dict[str, str]:
    """Map ``FIRST(A)``-style labels to rendered sets, ordered by non-terminal name."""
    formatted = {}
    for non_terminal in sorted(sets, key=lambda nt: nt.name):
        formatted[f"{set_name}({non_terminal.name})"] = format_set(sets[non_terminal])
    return formatted


# Known-good values for the built-in shift expression grammar
EXPECTED_FIRST = {
    "FIRST(F)": "{ (, id }",
    "FIRST(T)": "{ (, id }",
    "FIRST(E)": "{ (, id }",
}

EXPECTED_FOLLOW = {
    "FOLLOW(E)": format_set(Terminal(name) for name in (")", "<<", ">>", "$")),
    "FOLLOW(T)": format_set(Terminal(name) for name in ("+", "-", ")", "<<", ">>", "$")),
    "FOLLOW(F)": format_set(Terminal(name) for name in ("+", "-", ")", "<<", ">>", "$")),
}


@dataclass
class GrammarReport:
    """Display-ready summary of a grammar and its FIRST/FOLLOW sets."""
    productions: List[str]
    first_sets: Dict[str, str]
    follow_sets: Dict[str, str]
    expected_first: Dict[str, str] = field(default_factory=dict)
    expected_follow: Dict[str, str] = field(default_factory=dict)

    @property
    def matches_expected(self) -> Optional[bool]:
        """Whether the calculated sets agree with the expected ones, None if none are known."""
        if not self.expected_first and not self.expected_follow:
            return None
        for label, rendered in self.expected_first.items():
            if self.first_sets.get(label) != rendered:
                return False
        for label, rendered in self.expected_follow.items():
            if self.follow_sets.get(label) != rendered:
                return False
        return True

    def to_dict(self) -> Dict[str, object]:
        return {
            'productions': self.productions,
            'first_sets': self.first_sets,
            'follow_sets': self.follow_sets,
            'expected_first': self.expected_first,
            'expected_follow': self.expected_follow,
            'matches_expected': self.matches_expected,
        }


def build_report(grammar: Grammar,
                 expected_first: Optional[Dict[str, str]] = None,
                 expected_follow: Optional[Dict[str, str]] = None) -> Tuple[GrammarReport, FirstFollowComputer]:
    """
    Solve a grammar and summarize it for display.

    Args:
        grammar: Grammar to solve
        expected_first: Optional known FIRST values keyed like ``FIRST(E)``
        expected_follow: Optional known FOLLOW values keyed like ``FOLLOW(E)``

    Returns:
        Tuple of (report, solver)
    """
    computer = FirstFollowComputer(grammar)
    report = GrammarReport(
        productions=[str(p) for p in grammar.productions],
        first_sets=format_sets(computer.first_sets, "FIRST"),
        follow_sets=format_sets(computer.follow_sets, "FOLLOW"),
        expected_first=dict(expected_first or {}),
        expected_follow=dict(expected_follow or {}),
    )
    return report, computer


def build_shift_expression_report() -> Tuple[GrammarReport, FirstFollowComputer]:
    """Solve the built-in shift expression grammar and compare against the known sets."""
    return build_report(build_shift_expression_grammar(), EXPECTED_FIRST, EXPECTED_FOLLOW)
