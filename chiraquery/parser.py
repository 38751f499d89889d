"""
SMILES string parser.

This module converts SMILES strings into Molecule objects that serve as
targets for SMARTS queries.

Supported features:
    - Organic subset atoms and aromatic lowercase atoms
    - Bracket atoms with isotopes, chirality, hydrogens, charges, classes
    - Single, double, triple, quadruple and aromatic bonds
    - Ring closures (1-9, %10-99, %(100+))
    - Branches and multi-component molecules (dot separator)
    - Bond stereochemistry markers (/ and \\)

The low-level `_Tokenizer` is shared with the SMARTS compiler.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Final

from chiraquery.elements import (
    AROMATIC_SUBSET,
    TWO_LETTER_ORGANIC,
    Element,
    is_aromatic_symbol,
)
from chiraquery.exceptions import ParseError, RingError
from chiraquery.types import Molecule


class _Tokenizer:
    """Low-level character tokenizer.

    Provides character-by-character access to a line notation string with
    lookahead capability.
    """

    __slots__ = ("_string", "_pos")

    def __init__(self, string: str) -> None:
        self._string = string
        self._pos = 0

    @property
    def position(self) -> int:
        """Current position in the string."""
        return self._pos

    @property
    def string(self) -> str:
        """The full string being tokenized."""
        return self._string

    def peek(self, offset: int = 0) -> str | None:
        """Look at character at current position + offset without consuming.

        Args:
            offset: Positions ahead to look (default 0 = current).

        Returns:
            Character at position, or None if past end.
        """
        pos = self._pos + offset
        if pos >= len(self._string):
            return None
        return self._string[pos]

    def next(self) -> str | None:
        """Consume and return the next character.

        Returns:
            Next character, or None if at end.
        """
        if self._pos >= len(self._string):
            return None
        char = self._string[self._pos]
        self._pos += 1
        return char

    def skip(self, count: int = 1) -> None:
        """Skip forward by count characters."""
        self._pos += count

    def read_while(self, predicate: Callable[[str], bool]) -> str:
        """Read characters while predicate is true.

        Args:
            predicate: Function(char) -> bool.

        Returns:
            String of consumed characters.
        """
        start = self._pos
        while self._pos < len(self._string) and predicate(self._string[self._pos]):
            self._pos += 1
        return self._string[start:self._pos]

    def read_number(self) -> int | None:
        """Read and return an integer, or None if no digits present."""
        digits = self.read_while(str.isdigit)
        return int(digits) if digits else None

    def is_eof(self) -> bool:
        """Check if at end of string."""
        return self._pos >= len(self._string)

    def expect(self, char: str, error: type[ParseError] = ParseError) -> None:
        """Consume expected character or raise error.

        Args:
            char: Expected character.
            error: ParseError subclass to raise on mismatch.

        Raises:
            ParseError: If next character doesn't match.
        """
        actual = self.next()
        if actual != char:
            raise error(
                f"Expected '{char}', got '{actual}'",
                self._string,
                self._pos - 1,
            )


def read_ring_index(tok: _Tokenizer, error: type[ParseError] = ParseError) -> int:
    """Read a ring closure index (1-9, %nn, %(n))."""
    if tok.peek() == "%":
        tok.next()

        if tok.peek() == "(":
            tok.next()
            num = tok.read_number()
            if num is None:
                raise error("Empty ring index in %()", tok.string, tok.position)
            tok.expect(")", error)
            return num

        d1 = tok.next()
        d2 = tok.next()
        if not (d1 and d1.isdigit() and d2 and d2.isdigit()):
            raise error("Expected two digits after %", tok.string, tok.position)
        return int(d1 + d2)

    char = tok.next()
    if not char or not char.isdigit():
        raise error("Invalid ring index", tok.string, tok.position)
    return int(char)


@dataclass
class _ParserState:
    """Mutable state for the SMILES parser."""

    # ring_index -> (atom_idx, pending_bond_order, pending_aromatic)
    open_rings: dict[int, tuple[int, int | None, bool | None]] = field(default_factory=dict)

    branch_stack: list[int] = field(default_factory=list)

    prev_atom: int | None = None
    pending_bond_order: int | None = None
    pending_bond_aromatic: bool | None = None
    pending_bond_stereo: str | None = None


class SmilesParser:
    """SMILES string parser.

    Example:
        >>> parser = SmilesParser("CCO")
        >>> mol = parser.parse()
        >>> len(mol.atoms)
        3

    For convenience, use the module-level `parse()` function:
        >>> from chiraquery import parse
        >>> mol = parse("CCO")
    """

    # Bond character mapping: char -> (order, aromatic)
    _BOND_CHARS: Final[dict[str, tuple[int, bool]]] = {
        "-": (1, False),
        "=": (2, False),
        "#": (3, False),
        "$": (5, False),
        ":": (1, True),
    }

    def __init__(self, smiles: str) -> None:
        self._smiles = smiles
        self._tokenizer = _Tokenizer(smiles)
        self._mol = Molecule()
        self._state = _ParserState()

    def parse(self) -> Molecule:
        """Parse the SMILES string into a Molecule.

        Returns:
            Parsed Molecule object.

        Raises:
            ParseError: If SMILES syntax is invalid.
            RingError: If ring closures are invalid.
        """
        tok = self._tokenizer

        while not tok.is_eof():
            char = tok.peek()

            if char == ".":
                tok.next()
                self._state.prev_atom = None
                self._reset_bond_state()
                continue

            if char in self._BOND_CHARS or char in "/\\":
                self._parse_bond()
                continue

            if char == "(":
                tok.next()
                if self._state.prev_atom is None:
                    raise ParseError("Branch without preceding atom", self._smiles, tok.position - 1)
                self._state.branch_stack.append(self._state.prev_atom)
                continue

            if char == ")":
                tok.next()
                if not self._state.branch_stack:
                    raise ParseError("Unbalanced ')'", self._smiles, tok.position - 1)
                self._state.prev_atom = self._state.branch_stack.pop()
                continue

            if char.isdigit() or char == "%":
                self._parse_ring_closure()
                continue

            if char == "*":
                tok.next()
                self._add_atom("*")
                continue

            if char == "[":
                self._parse_bracket_atom()
                continue

            if char.isalpha():
                self._parse_organic_atom()
                continue

            raise ParseError(
                f"Unexpected character: '{char}'",
                self._smiles,
                tok.position,
            )

        if self._state.branch_stack:
            raise ParseError("Unclosed branch", self._smiles, tok.position)

        if self._state.open_rings:
            unclosed = sorted(self._state.open_rings.keys())
            raise RingError(
                f"Unclosed ring indices: {unclosed}",
                ring_index=unclosed[0],
            )

        return self._mol

    def _parse_bond(self) -> None:
        """Parse a bond symbol or stereo marker."""
        char = self._tokenizer.next()

        if char in "/\\":
            self._state.pending_bond_stereo = char
            return

        order, aromatic = self._BOND_CHARS[char]
        self._state.pending_bond_order = order
        self._state.pending_bond_aromatic = aromatic

    def _parse_ring_closure(self) -> None:
        """Parse a ring closure digit."""
        tok = self._tokenizer
        ring_idx = read_ring_index(tok)

        if self._state.prev_atom is None:
            raise ParseError(
                "Ring closure without preceding atom",
                self._smiles,
                tok.position,
            )

        if ring_idx in self._state.open_rings:
            atom1, order1, aromatic1 = self._state.open_rings.pop(ring_idx)
            atom2 = self._state.prev_atom

            if atom1 == atom2 or self._mol.get_bond_between(atom1, atom2) is not None:
                raise RingError(
                    f"Ring closure {ring_idx} duplicates an existing bond",
                    ring_index=ring_idx,
                )

            order = self._state.pending_bond_order or order1 or 1
            aromatic = self._state.pending_bond_aromatic
            if aromatic is None:
                aromatic = aromatic1
            if aromatic is None:
                aromatic = (
                    self._mol.atoms[atom1].is_aromatic and
                    self._mol.atoms[atom2].is_aromatic
                )

            self._mol.add_bond(
                atom1,
                atom2,
                order=1 if aromatic else order,
                is_aromatic=aromatic,
            )
        else:
            self._state.open_rings[ring_idx] = (
                self._state.prev_atom,
                self._state.pending_bond_order,
                self._state.pending_bond_aromatic,
            )

        self._reset_bond_state()

    def _parse_organic_atom(self) -> None:
        """Parse an organic subset atom (not in brackets)."""
        tok = self._tokenizer
        start = tok.position

        symbol = tok.next()
        assert symbol is not None

        char2 = tok.peek()
        if char2 and char2.islower():
            candidate = symbol + char2
            if candidate in TWO_LETTER_ORGANIC:
                tok.next()
                symbol = candidate
            elif candidate in AROMATIC_SUBSET:
                tok.next()
                symbol = candidate

        if Element.from_symbol(symbol) is None or not (
            symbol in ("B", "C", "N", "O", "P", "S", "F", "I")
            or symbol in TWO_LETTER_ORGANIC
            or is_aromatic_symbol(symbol)
        ):
            raise ParseError(
                f"Atom '{symbol}' must be written in brackets",
                self._smiles,
                start,
            )

        self._add_atom(symbol, is_aromatic=is_aromatic_symbol(symbol))

    def _parse_bracket_atom(self) -> None:
        """Parse a bracket atom such as [13CH3+] or [nH] or [C@@H:1]."""
        tok = self._tokenizer
        tok.expect("[")

        isotope = tok.read_number()

        start = tok.position
        char1 = tok.next()
        if char1 is None:
            raise ParseError("Unclosed bracket atom", self._smiles, start)

        if char1 == "*":
            symbol = "*"
        elif char1.isalpha():
            symbol = char1
            char2 = tok.peek()
            if char2 and char2.islower():
                candidate = char1 + char2
                if char1.isupper() and Element.from_exact_symbol(candidate) is not None:
                    tok.next()
                    symbol = candidate
                elif candidate in AROMATIC_SUBSET:
                    tok.next()
                    symbol = candidate
            if Element.from_symbol(symbol) is None:
                raise ParseError(f"Unknown element '{symbol}'", self._smiles, start)
        else:
            raise ParseError("Expected element symbol", self._smiles, start)

        chirality: str | None = None
        if tok.peek() == "@":
            tok.next()
            chirality = "@"
            if tok.peek() == "@":
                tok.next()
                chirality = "@@"

        hydrogens = 0
        if tok.peek() == "H":
            tok.next()
            h_count = tok.read_number()
            hydrogens = h_count if h_count is not None else 1

        charge = self._parse_charge()

        atom_class: int | None = None
        if tok.peek() == ":":
            tok.next()
            atom_class = tok.read_number()
            if atom_class is None:
                raise ParseError("Expected atom class number", self._smiles, tok.position)

        tok.expect("]")

        self._add_atom(
            symbol,
            charge=charge,
            explicit_hydrogens=hydrogens,
            is_aromatic=symbol != "*" and symbol.islower(),
            isotope=isotope,
            chirality=chirality,
            atom_class=atom_class,
            no_implicit_hydrogens=True,
        )

    def _parse_charge(self) -> int:
        """Parse optional charge (+, -, ++, --, +2, -3, etc.)."""
        tok = self._tokenizer
        char = tok.peek()
        if char not in ("+", "-"):
            return 0

        sign = 1 if char == "+" else -1
        count = 0
        while tok.peek() == char:
            tok.next()
            count += 1

        num = tok.read_number()
        if num is not None:
            return sign * num
        return sign * count

    def _add_atom(self, symbol: str, **props) -> None:
        """Add an atom and bond it to the previous atom."""
        atom_idx = self._mol.add_atom(symbol, **props)
        self._add_bond_to_previous(atom_idx)
        self._state.prev_atom = atom_idx

    def _add_bond_to_previous(self, atom_idx: int) -> None:
        """Add bond from previous atom to new atom."""
        prev = self._state.prev_atom
        if prev is None:
            self._reset_bond_state()
            return

        if self._state.pending_bond_order is not None:
            order = self._state.pending_bond_order
            aromatic = bool(self._state.pending_bond_aromatic)
        else:
            # Implicit bond between aromatic atoms is aromatic
            aromatic = self._mol.atoms[prev].is_aromatic and self._mol.atoms[atom_idx].is_aromatic
            order = 1

        self._mol.add_bond(
            prev,
            atom_idx,
            order=1 if aromatic else order,
            is_aromatic=aromatic,
            stereo=self._state.pending_bond_stereo,
        )
        self._reset_bond_state()

    def _reset_bond_state(self) -> None:
        """Reset all pending bond state."""
        self._state.pending_bond_order = None
        self._state.pending_bond_aromatic = None
        self._state.pending_bond_stereo = None


def parse(smiles: str) -> Molecule:
    """Parse a SMILES string into a Molecule.

    Args:
        smiles: SMILES string to parse.

    Returns:
        Parsed Molecule object.

    Raises:
        ParseError: If SMILES syntax is invalid.

    Example:
        >>> mol = parse("CCO")
        >>> len(mol.atoms)
        3
    """
    return SmilesParser(smiles).parse()
