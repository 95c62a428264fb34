"""
Grammar Model - Symbols, Productions and Grammar Container

This module implements the value objects used to describe a context-free
grammar: terminal and non-terminal symbols, productions and the grammar
itself. Everything here is immutable once built; derived data such as FIRST
and FOLLOW sets lives in the solver, never on these objects.
"""

from dataclasses import dataclass
from typing import List, Set, Dict, Tuple, Optional, Iterable, Any, FrozenSet


class GrammarError(ValueError):
    """Raised when a grammar is constructed from inconsistent parts."""


@dataclass(frozen=True)
class Symbol:
    """A grammar symbol identified by its textual name."""
    name: str

    @property
    def is_terminal(self) -> bool:
        return False

    @property
    def is_non_terminal(self) -> bool:
        return not self.is_terminal

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Terminal(Symbol):
    """A terminal symbol (token kind)."""

    @property
    def is_terminal(self) -> bool:
        return True


@dataclass(frozen=True)
class NonTerminal(Symbol):
    """A non-terminal symbol."""


# Sentinels shared by every grammar
EPSILON = Terminal("ε")
EOF = Terminal("$")


@dataclass(frozen=True)
class Production:
    """Represents a single production rule in a context-free grammar."""
    lhs: NonTerminal  # Left-hand side non-terminal
    rhs: Tuple[Symbol, ...] = ()  # Right-hand side symbols, empty for epsilon

    def __post_init__(self):
        # Accept any iterable for the RHS but store it as a tuple
        if not isinstance(self.rhs, tuple):
            object.__setattr__(self, 'rhs', tuple(self.rhs))

    @property
    def is_epsilon(self) -> bool:
        return len(self.rhs) == 0

    def __str__(self) -> str:
        if self.is_epsilon:
            return f"{self.lhs} → {EPSILON}"
        return f"{self.lhs} → {' '.join(str(symbol) for symbol in self.rhs)}"


class Grammar:
    """
    Represents a context-free grammar.

    The constructor validates that every symbol used by a production (and the
    start symbol) has been declared, and implicitly adds EOF to the terminal
    set.

    Args:
        non_terminals: Declared non-terminal symbols
        terminals: Declared terminal symbols (EPSILON and EOF are added implicitly)
        productions: Ordered production list
        start_symbol: Designated start non-terminal

    Raises:
        GrammarError: If any part references an undeclared symbol
    """

    def __init__(self,
                 non_terminals: Iterable[NonTerminal],
                 terminals: Iterable[Terminal],
                 productions: Iterable[Production],
                 start_symbol: NonTerminal):
        self._non_terminals: FrozenSet[NonTerminal] = frozenset(non_terminals)
        self._terminals: FrozenSet[Terminal] = frozenset(terminals) | {EPSILON, EOF}
        self._productions: Tuple[Production, ...] = tuple(productions)

        if start_symbol is None:
            raise GrammarError("Start symbol cannot be None")
        if start_symbol not in self._non_terminals:
            raise GrammarError(f"Start symbol '{start_symbol}' must be one of the non-terminals")
        self._start_symbol = start_symbol

        self._validate_productions()

    def _validate_productions(self):
        for production in self._productions:
            if production.lhs not in self._non_terminals:
                raise GrammarError(f"Production '{production}' has undeclared left-hand side '{production.lhs}'")
            for symbol in production.rhs:
                if symbol in (EPSILON, EOF):
                    raise GrammarError(f"Production '{production}' may not use the reserved symbol '{symbol}'")
                if symbol not in self._terminals and symbol not in self._non_terminals:
                    raise GrammarError(f"Production '{production}' references undeclared symbol '{symbol}'")

    @property
    def non_terminals(self) -> FrozenSet[NonTerminal]:
        return self._non_terminals

    @property
    def terminals(self) -> FrozenSet[Terminal]:
        return self._terminals

    @property
    def productions(self) -> Tuple[Production, ...]:
        return self._productions

    @property
    def start_symbol(self) -> NonTerminal:
        return self._start_symbol

    def productions_for(self, non_terminal: NonTerminal) -> List[Production]:
        """Get the productions whose left-hand side is the given non-terminal."""
        return [p for p in self._productions if p.lhs == non_terminal]

    def all_symbols(self) -> Set[Symbol]:
        return set(self._non_terminals) | set(self._terminals)

    def terminal(self, name: str) -> Optional[Terminal]:
        for terminal in self._terminals:
            if terminal.name == name:
                return terminal
        return None

    def non_terminal(self, name: str) -> Optional[NonTerminal]:
        for non_terminal in self._non_terminals:
            if non_terminal.name == name:
                return non_terminal
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Grammar':
        """
        Build a grammar from a JSON-style description.

        Expected shape::

            {
                "non_terminals": ["E", "T"],
                "terminals": ["+", "id"],
                "productions": [{"lhs": "E", "rhs": ["E", "+", "T"]}, ...],
                "start": "E"
            }

        Every name used in a production must be declared in one of the two
        symbol lists; an empty ``rhs`` is an epsilon production.

        Raises:
            GrammarError: If the description is malformed
        """
        if not isinstance(data, dict):
            raise GrammarError("Grammar description must be an object")

        try:
            nt_names = list(data['non_terminals'])
            t_names = list(data['terminals'])
            raw_productions = list(data['productions'])
            start_name = data['start']
        except KeyError as e:
            raise GrammarError(f"Grammar description is missing '{e.args[0]}'") from e
        except TypeError as e:
            raise GrammarError(f"Grammar description has an invalid field: {e}") from e

        overlap = set(nt_names) & set(t_names)
        if overlap:
            raise GrammarError(f"Symbols declared as both terminal and non-terminal: {sorted(overlap)}")

        non_terminals = {name: NonTerminal(name) for name in nt_names}
        terminals = {name: Terminal(name) for name in t_names}

        def resolve(name: str) -> Symbol:
            if name in non_terminals:
                return non_terminals[name]
            if name in terminals:
                return terminals[name]
            raise GrammarError(f"Undeclared symbol '{name}'")

        productions = []
        for raw in raw_productions:
            if not isinstance(raw, dict) or 'lhs' not in raw:
                raise GrammarError(f"Invalid production entry: {raw!r}")
            lhs = non_terminals.get(raw['lhs'])
            if lhs is None:
                raise GrammarError(f"Undeclared left-hand side '{raw['lhs']}'")
            rhs = tuple(resolve(name) for name in raw.get('rhs', []))
            productions.append(Production(lhs, rhs))

        start = non_terminals.get(start_name)
        if start is None:
            raise GrammarError(f"Start symbol '{start_name}' must be one of the non-terminals")

        return cls(non_terminals.values(), terminals.values(), productions, start)

    def __str__(self) -> str:
        lines = [f"Start Symbol: {self._start_symbol}"]
        lines.append(f"Terminals: {sorted(t.name for t in self._terminals)}")
        lines.append(f"Non-terminals: {sorted(nt.name for nt in self._non_terminals)}")
        lines.append("Productions:")
        for prod in self._productions:
            lines.append(f"  {prod}")
        return "\n".join(lines)


def build_shift_expression_grammar() -> Grammar:
    """
    Build the shift/additive expression grammar::

        E → E << T | E >> T | T
        T → T + F | T - F | F
        F → ( E ) | id
    """
    E = NonTerminal("E")
    T = NonTerminal("T")
    F = NonTerminal("F")

    plus = Terminal("+")
    minus = Terminal("-")
    shift_left = Terminal("<<")
    shift_right = Terminal(">>")
    open_paren = Terminal("(")
    close_paren = Terminal(")")
    ident = Terminal("id")

    productions = [
        Production(E, (E, shift_left, T)),
        Production(E, (E, shift_right, T)),
        Production(E, (T,)),
        Production(T, (T, plus, F)),
        Production(T, (T, minus, F)),
        Production(T, (F,)),
        Production(F, (open_paren, E, close_paren)),
        Production(F, (ident,)),
    ]

    return Grammar(
        non_terminals=[E, T, F],
        terminals=[plus, minus, shift_left, shift_right, open_paren, close_paren, ident],
        productions=productions,
        start_symbol=E,
    )
