"""
SMARTS pattern compiler.

This module turns SMARTS text into a `QueryGraph` of atom and bond
predicates.

Supported features:
    - Unbracketed atoms: organic subset (aliphatic and aromatic), *, a, A
    - Bracket primitives: element symbols, #n, *, a, A, R<n>, r<n>, x<n>,
      X<n>, D<n>, v<n>, H<n>, h<n>, charges, isotopes, $(...) recursion
    - Logical operators: ! (not), & and juxtaposition (high-precedence
      and), `,` (or), `;` (low-precedence and)
    - Bond primitives: - = # : ~ @ / \\ with the same operators
    - Branches, ring closures and `.` separated components

Chirality (@, @@) and atom classes (:n) are accepted and ignored.

Example:
    >>> query = compile_smarts("[C;R]=O")
    >>> query.num_atoms, query.num_bonds
    (2, 1)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Final

from chiraquery.elements import Element
from chiraquery.exceptions import QueryCompilationError
from chiraquery.parser import _Tokenizer, read_ring_index
from chiraquery.query.graph import QueryGraph
from chiraquery.query.predicates import (
    AnyAtom,
    AnyBond,
    AromaticBond,
    AromaticityAtom,
    AtomPredicate,
    BondPredicate,
    ChargeAtom,
    ConnectivityAtom,
    DegreeAtom,
    ElementAtom,
    HydrogenCountAtom,
    ImplicitHydrogenAtom,
    IsotopeAtom,
    LogicalAtom,
    LogicalBond,
    LogicalOperator,
    OrderBond,
    RecursiveAtom,
    RingBond,
    RingConnectivityAtom,
    RingCountAtom,
    RingSizeAtom,
    SingleOrAromaticBond,
    ValenceAtom,
)

logger = logging.getLogger(__name__)

# Atoms allowed outside brackets: symbol -> (atomic_number, aromatic)
_ORGANIC_ATOMS: Final[dict[str, tuple[int, bool]]] = {
    "B": (5, False), "C": (6, False), "N": (7, False), "O": (8, False),
    "P": (15, False), "S": (16, False), "F": (9, False), "Cl": (17, False),
    "Br": (35, False), "I": (53, False),
    "b": (5, True), "c": (6, True), "n": (7, True), "o": (8, True),
    "p": (15, True), "s": (16, True),
}

# Lowercase aromatic symbols allowed in brackets, longest first
_AROMATIC_BRACKET_SYMBOLS: Final[tuple[str, ...]] = ("se", "as", "b", "c", "n", "o", "p", "s")

_BOND_PRIMITIVES: Final[str] = "-=#:~@/\\"

_MAX_TWO_LETTER_ELEMENT: Final[int] = 103


@dataclass
class _CompilerState:
    """Mutable state for the SMARTS compiler."""

    # ring_index -> (atom_idx, bond predicate written at the opening, position)
    open_rings: dict[int, tuple[int, BondPredicate | None, int]] = field(default_factory=dict)

    branch_stack: list[int] = field(default_factory=list)

    prev_atom: int | None = None
    pending_bond: BondPredicate | None = None
    pending_bond_pos: int = 0


@dataclass(frozen=True)
class _Grammar:
    """Hooks that specialize the shared operator parser to atoms or bonds."""

    primitive: Callable[[], object]
    starts_primitive: Callable[[str | None], bool]
    combine: Callable[..., object]


class SmartsCompiler:
    """SMARTS pattern compiler.

    Example:
        >>> query = SmartsCompiler("c1ccccc1").compile()
        >>> query.num_atoms
        6

    For convenience, use the module-level `compile_smarts()` function.
    """

    def __init__(self, smarts: str) -> None:
        self._smarts = smarts
        self._tokenizer = _Tokenizer(smarts)
        self._query = QueryGraph(smarts=smarts)
        self._state = _CompilerState()
        self._bracket_start = 0

        self._atom_grammar = _Grammar(
            primitive=self._parse_atom_primitive,
            starts_primitive=lambda c: c is not None and c not in ",;]:&)",
            combine=LogicalAtom,
        )
        self._bond_grammar = _Grammar(
            primitive=self._parse_bond_primitive,
            starts_primitive=lambda c: c is not None and c in _BOND_PRIMITIVES,
            combine=LogicalBond,
        )

    def _error(self, message: str, position: int | None = None) -> QueryCompilationError:
        if position is None:
            position = self._tokenizer.position
        return QueryCompilationError(message, self._smarts, position)

    def compile(self) -> QueryGraph:
        """Compile the SMARTS text into a QueryGraph.

        Raises:
            QueryCompilationError: If the pattern is malformed.
        """
        tok = self._tokenizer
        state = self._state

        if not self._smarts.strip():
            raise self._error("Empty SMARTS pattern", 0)

        while not tok.is_eof():
            char = tok.peek()

            if char == ".":
                if state.pending_bond is not None:
                    raise self._error("Bond before '.'")
                tok.next()
                state.prev_atom = None
                continue

            if char in _BOND_PRIMITIVES or char == "!":
                if state.prev_atom is None:
                    raise self._error("Bond without preceding atom")
                if state.pending_bond is not None:
                    raise self._error("Two consecutive bonds")
                state.pending_bond_pos = tok.position
                state.pending_bond = self._parse_expression(self._bond_grammar)
                continue

            if char == "(":
                if state.prev_atom is None:
                    raise self._error("Branch without preceding atom")
                if state.pending_bond is not None:
                    raise self._error("Bond before branch")
                tok.next()
                state.branch_stack.append(state.prev_atom)
                continue

            if char == ")":
                if not state.branch_stack:
                    raise self._error("Unbalanced ')'")
                if state.pending_bond is not None:
                    raise self._error("Bond at end of branch")
                tok.next()
                state.prev_atom = state.branch_stack.pop()
                continue

            if char.isdigit() or char == "%":
                self._parse_ring_closure()
                continue

            if char == "[":
                self._add_atom(self._parse_bracket_atom())
                continue

            self._add_atom(self._parse_organic_atom())

        if state.pending_bond is not None:
            raise self._error("Bond at end of pattern", state.pending_bond_pos)
        if state.branch_stack:
            raise self._error("Unclosed branch")
        if state.open_rings:
            ring_idx = min(state.open_rings)
            raise self._error(f"Unclosed ring {ring_idx}", state.open_rings[ring_idx][2])

        if self._query.num_atoms > 1:
            for atom_idx in range(self._query.num_atoms):
                if self._query.degree(atom_idx) == 0:
                    raise self._error(f"Query atom {atom_idx} has no bonds", 0)

        return self._query

    def _add_atom(self, predicate: AtomPredicate) -> None:
        """Add an atom and bond it to the previous atom."""
        state = self._state
        atom_idx = self._query.add_atom(predicate)
        if state.prev_atom is not None:
            bond = state.pending_bond or SingleOrAromaticBond()
            self._query.add_bond(state.prev_atom, atom_idx, bond)
        state.pending_bond = None
        state.prev_atom = atom_idx

    def _parse_ring_closure(self) -> None:
        tok = self._tokenizer
        state = self._state
        start = tok.position

        if state.prev_atom is None:
            raise self._error("Ring closure without preceding atom")

        ring_idx = read_ring_index(tok, QueryCompilationError)

        if ring_idx in state.open_rings:
            other, opening_bond, _ = state.open_rings.pop(ring_idx)
            if other == state.prev_atom or self._query.get_bond_between(other, state.prev_atom):
                raise self._error(f"Ring closure {ring_idx} duplicates a bond", start)
            bond = state.pending_bond or opening_bond or SingleOrAromaticBond()
            self._query.add_bond(other, state.prev_atom, bond)
        else:
            state.open_rings[ring_idx] = (state.prev_atom, state.pending_bond, start)

        state.pending_bond = None

    def _parse_organic_atom(self) -> AtomPredicate:
        """Parse an atom written outside brackets."""
        tok = self._tokenizer
        start = tok.position
        char = tok.next()

        if char == "*":
            return AnyAtom()
        if char == "a":
            return AromaticityAtom(True)
        if char == "A":
            return AromaticityAtom(False)

        symbol = char
        if char in ("C", "B") and tok.peek() in ("l", "r"):
            candidate = char + tok.peek()
            if candidate in _ORGANIC_ATOMS:
                tok.next()
                symbol = candidate

        if symbol not in _ORGANIC_ATOMS:
            raise self._error(f"Unexpected character '{char}'", start)

        atomic_number, aromatic = _ORGANIC_ATOMS[symbol]
        return ElementAtom(atomic_number, aromatic)

    def _parse_bracket_atom(self) -> AtomPredicate:
        """Parse a bracket atom expression such as [C,N;R] or [$(CO);!H0]."""
        tok = self._tokenizer
        tok.expect("[", QueryCompilationError)
        self._bracket_start = tok.position

        if tok.peek() == "]":
            raise self._error("Empty bracket atom")

        predicate = self._parse_expression(self._atom_grammar)

        if tok.peek() == ":":
            tok.next()
            if tok.read_number() is None:
                raise self._error("Expected atom class number")

        if tok.peek() != "]":
            if tok.is_eof():
                raise self._error("Unclosed bracket atom")
            raise self._error(f"Unexpected character '{tok.peek()}' in bracket atom")
        tok.next()
        return predicate

    # -----------------------------------------------------------------------
    # Operator precedence: ';' < ',' < '&' and juxtaposition < '!'
    # -----------------------------------------------------------------------

    def _parse_expression(self, grammar: _Grammar):
        tok = self._tokenizer
        left = self._parse_or(grammar)
        while tok.peek() == ";":
            tok.next()
            left = grammar.combine(LogicalOperator.AND, left, self._parse_or(grammar))
        return left

    def _parse_or(self, grammar: _Grammar):
        tok = self._tokenizer
        left = self._parse_and(grammar)
        while tok.peek() == ",":
            tok.next()
            left = grammar.combine(LogicalOperator.OR, left, self._parse_and(grammar))
        return left

    def _parse_and(self, grammar: _Grammar):
        tok = self._tokenizer
        left = self._parse_not(grammar)
        while True:
            char = tok.peek()
            if char == "&":
                tok.next()
            elif char != "!" and not grammar.starts_primitive(char):
                break
            left = grammar.combine(LogicalOperator.AND, left, self._parse_not(grammar))
        return left

    def _parse_not(self, grammar: _Grammar):
        tok = self._tokenizer
        if tok.peek() == "!":
            tok.next()
            return grammar.combine(LogicalOperator.NOT, self._parse_not(grammar))
        return grammar.primitive()

    # -----------------------------------------------------------------------
    # Primitives
    # -----------------------------------------------------------------------

    def _parse_bond_primitive(self) -> BondPredicate:
        tok = self._tokenizer
        char = tok.next()

        if char == "-":
            return OrderBond(1)
        if char == "=":
            return OrderBond(2)
        if char == "#":
            return OrderBond(3)
        if char == ":":
            return AromaticBond()
        if char == "~":
            return AnyBond()
        if char == "@":
            return RingBond()
        if char in "/\\":
            logger.debug("Ignoring directional bond '%s' in %s", char, self._smarts)
            return OrderBond(1)

        raise self._error(
            "Expected bond primitive" if char is not None else "Unexpected end of pattern",
            tok.position - 1 if char is not None else tok.position,
        )

    def _read_count(self, default: int | None) -> int | None:
        num = self._tokenizer.read_number()
        return default if num is None else num

    def _parse_atom_primitive(self) -> AtomPredicate:
        tok = self._tokenizer
        start = tok.position
        char = tok.peek()

        if char is None:
            raise self._error("Unclosed bracket atom")

        if char == "*":
            tok.next()
            return AnyAtom()

        if char == "#":
            tok.next()
            num = tok.read_number()
            if num is None:
                raise self._error("Expected atomic number after '#'")
            return ElementAtom(num, None)

        if char == "$":
            return self._parse_recursive()

        if char in "+-":
            return ChargeAtom(self._parse_charge())

        if char == "@":
            tok.next()
            if tok.peek() == "@":
                tok.next()
            logger.debug("Ignoring chirality at position %d in %s", start, self._smarts)
            return AnyAtom()

        if char.isdigit():
            return IsotopeAtom(tok.read_number())

        if char.isupper():
            return self._parse_uppercase_primitive()

        if char.islower():
            return self._parse_lowercase_primitive()

        raise self._error(f"Unexpected character '{char}' in bracket atom")

    def _parse_uppercase_primitive(self) -> AtomPredicate:
        tok = self._tokenizer
        start = tok.position
        char = tok.next()

        # Two-letter element symbols take precedence over H, R, X, D, A.
        # Superheavy symbols (Nh, Hs, Cn, ...) would shadow common pairs
        # such as [Nh] and are not read as elements.
        nxt = tok.peek()
        if nxt is not None and nxt.islower():
            element = Element.from_exact_symbol(char + nxt)
            if element is not None and element.atomic_number <= _MAX_TWO_LETTER_ELEMENT:
                tok.next()
                return ElementAtom(element.atomic_number, False)

        if char == "H":
            if self._hydrogen_is_element(start):
                return ElementAtom(1, None)
            return HydrogenCountAtom(self._read_count(1))
        if char == "R":
            return RingCountAtom(self._read_count(None))
        if char == "X":
            return ConnectivityAtom(self._read_count(1))
        if char == "D":
            return DegreeAtom(self._read_count(1))
        if char == "A":
            return AromaticityAtom(False)

        element = Element.from_exact_symbol(char)
        if element is None:
            raise self._error(f"Unknown element '{char}'", start)
        return ElementAtom(element.atomic_number, False)

    def _hydrogen_is_element(self, h_pos: int) -> bool:
        """`H` is the element when only an isotope precedes it in the
        bracket and a charge, atom class or the closing bracket follows."""
        prefix = self._smarts[self._bracket_start:h_pos]
        if prefix and not prefix.isdigit():
            return False
        return self._tokenizer.peek() in ("]", "+", "-", ":")

    def _parse_lowercase_primitive(self) -> AtomPredicate:
        tok = self._tokenizer
        start = tok.position

        for symbol in _AROMATIC_BRACKET_SYMBOLS:
            if self._smarts.startswith(symbol, start):
                tok.skip(len(symbol))
                element = Element.from_symbol(symbol)
                assert element is not None
                return ElementAtom(element.atomic_number, True)

        char = tok.next()
        if char == "a":
            return AromaticityAtom(True)
        if char == "r":
            return RingSizeAtom(self._read_count(None))
        if char == "x":
            return RingConnectivityAtom(self._read_count(None))
        if char == "v":
            return ValenceAtom(self._read_count(1))
        if char == "h":
            return ImplicitHydrogenAtom(self._read_count(None))

        raise self._error(f"Unknown primitive '{char}'", start)

    def _parse_charge(self) -> int:
        """Parse charge (+, -, ++, --, +2, -3, etc.)."""
        tok = self._tokenizer
        char = tok.next()
        sign = 1 if char == "+" else -1

        num = tok.read_number()
        if num is not None:
            return sign * num

        count = 1
        while tok.peek() == char:
            tok.next()
            count += 1
        return sign * count

    def _parse_recursive(self) -> RecursiveAtom:
        """Parse $(...) and compile the embedded pattern."""
        tok = self._tokenizer
        tok.expect("$", QueryCompilationError)
        if tok.peek() != "(":
            raise self._error("Expected '(' after '$'")
        tok.next()

        content_start = tok.position
        paren_depth = 1
        bracket_depth = 0
        while True:
            char = tok.next()
            if char is None:
                raise self._error("Unclosed recursive SMARTS", content_start - 2)
            if char == "[":
                bracket_depth += 1
            elif char == "]":
                bracket_depth -= 1
            elif char == "(" and bracket_depth == 0:
                paren_depth += 1
            elif char == ")" and bracket_depth == 0:
                paren_depth -= 1
                if paren_depth == 0:
                    break

        content = self._smarts[content_start:tok.position - 1]
        try:
            nested = SmartsCompiler(content).compile()
        except QueryCompilationError as exc:
            offset = content_start + (exc.position or 0)
            raise self._error(exc.message, offset) from exc

        return RecursiveAtom(query=nested, smarts=content)


def compile_smarts(smarts: str) -> QueryGraph:
    """Compile a SMARTS pattern into a QueryGraph.

    Args:
        smarts: SMARTS pattern text.

    Returns:
        Compiled query graph.

    Raises:
        QueryCompilationError: If the pattern is malformed.

    Example:
        >>> query = compile_smarts("O=C-O")
        >>> query.num_atoms
        3
    """
    return SmartsCompiler(smarts).compile()
