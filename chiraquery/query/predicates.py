"""
Query atom and bond predicates.

Every node of a query graph is an atom predicate and every edge carries a
bond predicate. A predicate is a boolean test against a target atom (or
bond) and its annotation record.

Most predicates only read the record. Two kinds depend on the target as
a whole and must be bound to it before evaluation:

- `RecursiveAtom` ($(...)) runs its embedded query against the target
- `HydrogenCountAtom` (H<n>) reads the target's annotated hydrogen counts

Binding is forwarded through `LogicalAtom` trees, so a bound query can
be evaluated atom by atom by the matcher.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from chiraquery.exceptions import UnboundPredicateError

if TYPE_CHECKING:
    from chiraquery.annotate import AnnotatedMolecule, AtomRecord, BondRecord
    from chiraquery.query.graph import QueryGraph
    from chiraquery.types import Atom, Bond


class LogicalOperator(Enum):
    """Operators combining predicates."""

    AND = "and"
    OR = "or"
    NOT = "not"


# ---------------------------------------------------------------------------
# Atom predicates
# ---------------------------------------------------------------------------

class AtomPredicate:
    """Base class for query atoms."""

    def matches(self, atom: Atom, record: AtomRecord) -> bool:
        """Test a target atom against this predicate."""
        raise NotImplementedError

    def bind(self, target: AnnotatedMolecule) -> int:
        """Attach the target this predicate is evaluated against.

        Returns:
            Number of context-dependent predicates bound (0 for static ones).
        """
        return 0


@dataclass
class AnyAtom(AtomPredicate):
    """Wildcard `*`."""

    def matches(self, atom: Atom, record: AtomRecord) -> bool:
        return True


@dataclass
class ElementAtom(AtomPredicate):
    """Element test.

    Attributes:
        atomic_number: Required atomic number.
        aromatic: True for lowercase symbols, False for uppercase, None
            for `#n` (aromaticity not tested).
    """

    atomic_number: int
    aromatic: bool | None = None

    def matches(self, atom: Atom, record: AtomRecord) -> bool:
        if atom.atomic_number != self.atomic_number:
            return False
        return self.aromatic is None or record.is_aromatic == self.aromatic


@dataclass
class AromaticityAtom(AtomPredicate):
    """`a` (aromatic) or `A` (aliphatic)."""

    aromatic: bool

    def matches(self, atom: Atom, record: AtomRecord) -> bool:
        return record.is_aromatic == self.aromatic


@dataclass
class RingCountAtom(AtomPredicate):
    """`R<n>`: number of SSSR rings containing the atom.

    A count of None (bare `R`) means "in any ring".
    """

    count: int | None = None

    def matches(self, atom: Atom, record: AtomRecord) -> bool:
        if self.count is None:
            return record.in_ring
        if self.count == 0:
            return not record.in_ring
        return len(record.smallest_rings) == self.count


@dataclass
class RingSizeAtom(AtomPredicate):
    """`r<n>`: atom is in a ring of size n.

    Sizes come from the exhaustive ring set. None (bare `r`) means "in
    any ring", 0 means "in no ring".
    """

    size: int | None = None

    def matches(self, atom: Atom, record: AtomRecord) -> bool:
        if self.size is None:
            return record.in_ring
        if self.size == 0:
            return not record.in_ring
        return self.size in record.ring_sizes


@dataclass
class RingConnectivityAtom(AtomPredicate):
    """`x<n>`: number of ring atoms bonded to the atom.

    None (bare `x`) means at least one.
    """

    count: int | None = None

    def matches(self, atom: Atom, record: AtomRecord) -> bool:
        if self.count is None:
            return record.ring_connections > 0
        return record.ring_connections == self.count


@dataclass
class ConnectivityAtom(AtomPredicate):
    """`X<n>`: total connections, hydrogens included."""

    count: int = 1

    def matches(self, atom: Atom, record: AtomRecord) -> bool:
        return record.total_connections == self.count


@dataclass
class DegreeAtom(AtomPredicate):
    """`D<n>`: explicit connections."""

    count: int = 1

    def matches(self, atom: Atom, record: AtomRecord) -> bool:
        return record.degree == self.count


@dataclass
class ValenceAtom(AtomPredicate):
    """`v<n>`: annotated valence."""

    valence: int = 1

    def matches(self, atom: Atom, record: AtomRecord) -> bool:
        return record.valence == self.valence


@dataclass
class ImplicitHydrogenAtom(AtomPredicate):
    """`h<n>`: implicit hydrogen count. None (bare `h`) means at least one."""

    count: int | None = None

    def matches(self, atom: Atom, record: AtomRecord) -> bool:
        if self.count is None:
            return record.implicit_hydrogen_count > 0
        return record.implicit_hydrogen_count == self.count


@dataclass
class ChargeAtom(AtomPredicate):
    """Formal charge test."""

    charge: int

    def matches(self, atom: Atom, record: AtomRecord) -> bool:
        return atom.charge == self.charge


@dataclass
class IsotopeAtom(AtomPredicate):
    """Mass number test."""

    mass: int

    def matches(self, atom: Atom, record: AtomRecord) -> bool:
        return atom.isotope == self.mass


@dataclass
class LogicalAtom(AtomPredicate):
    """Binary combination of atom predicates. `right` is None for NOT."""

    op: LogicalOperator
    left: AtomPredicate
    right: AtomPredicate | None = None

    def matches(self, atom: Atom, record: AtomRecord) -> bool:
        if self.op is LogicalOperator.NOT:
            return not self.left.matches(atom, record)
        assert self.right is not None
        if self.op is LogicalOperator.AND:
            return self.left.matches(atom, record) and self.right.matches(atom, record)
        return self.left.matches(atom, record) or self.right.matches(atom, record)

    def bind(self, target: AnnotatedMolecule) -> int:
        bound = self.left.bind(target)
        if self.right is not None:
            bound += self.right.bind(target)
        return bound


@dataclass(eq=False)
class HydrogenCountAtom(AtomPredicate):
    """`H<n>`: total hydrogen count, read from the bound target."""

    count: int = 1
    target: AnnotatedMolecule | None = field(default=None, repr=False)

    def matches(self, atom: Atom, record: AtomRecord) -> bool:
        if self.target is None:
            raise UnboundPredicateError(f"H{self.count} evaluated before binding")
        return self.target.atoms[atom.idx].total_hydrogen_count == self.count

    def bind(self, target: AnnotatedMolecule) -> int:
        self.target = target
        return 1


@dataclass(eq=False)
class RecursiveAtom(AtomPredicate):
    """`$(...)`: atom is the first atom of a match of an embedded query.

    The set of anchor atoms is computed once per binding.
    """

    query: QueryGraph
    smarts: str = ""
    target: AnnotatedMolecule | None = field(default=None, repr=False)
    _anchors: frozenset[int] | None = field(default=None, init=False, repr=False)

    def matches(self, atom: Atom, record: AtomRecord) -> bool:
        if self.target is None:
            raise UnboundPredicateError(f"$({self.smarts}) evaluated before binding")
        if self._anchors is None:
            # Deferred import: the matcher evaluates predicates from this module
            from chiraquery.match.matcher import anchor_atoms
            self._anchors = frozenset(anchor_atoms(self.target, self.query))
        return atom.idx in self._anchors

    def bind(self, target: AnnotatedMolecule) -> int:
        self.target = target
        self._anchors = None
        return 1 + sum(pred.bind(target) for pred in self.query.atoms)


# ---------------------------------------------------------------------------
# Bond predicates
# ---------------------------------------------------------------------------

class BondPredicate:
    """Base class for query bonds."""

    def matches(self, bond: Bond, record: BondRecord) -> bool:
        """Test a target bond against this predicate."""
        raise NotImplementedError


@dataclass
class OrderBond(BondPredicate):
    """`-`, `=`, `#`: bond order, excluding aromatic bonds."""

    order: int

    def matches(self, bond: Bond, record: BondRecord) -> bool:
        return not record.is_aromatic and bond.order == self.order


@dataclass
class AromaticBond(BondPredicate):
    """`:`"""

    def matches(self, bond: Bond, record: BondRecord) -> bool:
        return record.is_aromatic


@dataclass
class AnyBond(BondPredicate):
    """`~`"""

    def matches(self, bond: Bond, record: BondRecord) -> bool:
        return True


@dataclass
class RingBond(BondPredicate):
    """`@`"""

    def matches(self, bond: Bond, record: BondRecord) -> bool:
        return record.in_ring


@dataclass
class SingleOrAromaticBond(BondPredicate):
    """Implicit bond between two atoms written side by side."""

    def matches(self, bond: Bond, record: BondRecord) -> bool:
        return record.is_aromatic or bond.order == 1


@dataclass
class LogicalBond(BondPredicate):
    """Binary combination of bond predicates. `right` is None for NOT."""

    op: LogicalOperator
    left: BondPredicate
    right: BondPredicate | None = None

    def matches(self, bond: Bond, record: BondRecord) -> bool:
        if self.op is LogicalOperator.NOT:
            return not self.left.matches(bond, record)
        assert self.right is not None
        if self.op is LogicalOperator.AND:
            return self.left.matches(bond, record) and self.right.matches(bond, record)
        return self.left.matches(bond, record) or self.right.matches(bond, record)
