"""Query graph: predicate atoms connected by predicate bonds."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from chiraquery.exceptions import QueryGraphError
from chiraquery.query.predicates import AtomPredicate, BondPredicate


@dataclass(slots=True)
class QueryBond:
    """An edge of a query graph.

    Attributes:
        idx: Index of this bond in the query.
        atom1_idx: Index of the first query atom.
        atom2_idx: Index of the second query atom.
        predicate: Test applied to the target bond.
    """

    idx: int
    atom1_idx: int
    atom2_idx: int
    predicate: BondPredicate

    def other_atom(self, atom_idx: int) -> int:
        if atom_idx == self.atom1_idx:
            return self.atom2_idx
        if atom_idx == self.atom2_idx:
            return self.atom1_idx
        raise ValueError(f"Atom {atom_idx} not in query bond {self.idx}")


@dataclass
class QueryGraph:
    """A compiled SMARTS pattern.

    Atoms are indexed in the order they appear in the pattern text, so
    atom 0 is the first atom written.

    Attributes:
        atoms: Predicate per query atom.
        bonds: Query bonds.
        smarts: Pattern text this graph was compiled from.
    """

    atoms: list[AtomPredicate] = field(default_factory=list)
    bonds: list[QueryBond] = field(default_factory=list)
    smarts: str = ""

    def __len__(self) -> int:
        return len(self.atoms)

    def __iter__(self) -> Iterator[AtomPredicate]:
        return iter(self.atoms)

    @property
    def num_atoms(self) -> int:
        return len(self.atoms)

    @property
    def num_bonds(self) -> int:
        return len(self.bonds)

    def add_atom(self, predicate: AtomPredicate) -> int:
        """Add a query atom and return its index."""
        self.atoms.append(predicate)
        return len(self.atoms) - 1

    def add_bond(self, atom1_idx: int, atom2_idx: int, predicate: BondPredicate) -> int:
        """Add a query bond and return its index.

        Raises:
            QueryGraphError: If an endpoint does not exist, the bond is a
                self-loop, or the two atoms are already bonded.
        """
        n = len(self.atoms)
        if not (0 <= atom1_idx < n and 0 <= atom2_idx < n):
            raise QueryGraphError(f"Query bond references missing atom: {atom1_idx}, {atom2_idx}")
        if atom1_idx == atom2_idx:
            raise QueryGraphError(f"Query bond from atom {atom1_idx} to itself")
        if self.get_bond_between(atom1_idx, atom2_idx) is not None:
            raise QueryGraphError(f"Query atoms {atom1_idx} and {atom2_idx} already bonded")

        idx = len(self.bonds)
        self.bonds.append(QueryBond(idx, atom1_idx, atom2_idx, predicate))
        return idx

    def get_bond_between(self, atom1_idx: int, atom2_idx: int) -> QueryBond | None:
        for bond in self.bonds:
            if {bond.atom1_idx, bond.atom2_idx} == {atom1_idx, atom2_idx}:
                return bond
        return None

    def degree(self, atom_idx: int) -> int:
        """Number of query bonds touching an atom."""
        return sum(1 for bond in self.bonds if atom_idx in (bond.atom1_idx, bond.atom2_idx))

    def validate(self) -> None:
        """Check structural consistency.

        Raises:
            QueryGraphError: On dangling or duplicate bonds, or a bond
                whose stored index disagrees with its position.
        """
        n = len(self.atoms)
        seen: set[frozenset[int]] = set()
        for position, bond in enumerate(self.bonds):
            if bond.idx != position:
                raise QueryGraphError(f"Query bond at position {position} has index {bond.idx}")
            if not (0 <= bond.atom1_idx < n and 0 <= bond.atom2_idx < n):
                raise QueryGraphError(
                    f"Query bond {bond.idx} references missing atom "
                    f"({bond.atom1_idx}, {bond.atom2_idx}); query has {n} atoms"
                )
            key = frozenset((bond.atom1_idx, bond.atom2_idx))
            if len(key) != 2 or key in seen:
                raise QueryGraphError(f"Query bond {bond.idx} is a self-loop or duplicate")
            seen.add(key)
