"""
Ring detection algorithms.

This module finds rings (simple cycles) in molecular structures. Two ring
sets are produced:

- the exhaustive set of every simple cycle, used for per-atom ring sizes
  and ring bond flags;
- the Smallest Set of Smallest Rings (SSSR), used for ring counts.

Exhaustive enumeration is exponential on dense cage structures, so it is
bounded by a ring count limit and a wall-clock timeout.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator

from chiraquery.exceptions import RingPerceptionError

if TYPE_CHECKING:
    from chiraquery.types import Molecule

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Ring:
    """A simple cycle in a molecule.

    Attributes:
        atoms: Atom indices in cycle order, starting at the lowest index
            and walking towards its lower-indexed neighbor.
        bonds: Indices of the bonds closing the cycle.
    """

    atoms: tuple[int, ...]
    bonds: frozenset[int]

    @property
    def size(self) -> int:
        """Number of atoms (and bonds) in the ring."""
        return len(self.atoms)


class RingSet:
    """An ordered collection of rings with membership lookups."""

    __slots__ = ("_rings", "_by_atom", "_by_bond")

    def __init__(self, rings: list[Ring] | None = None) -> None:
        self._rings: list[Ring] = list(rings or [])
        self._by_atom: dict[int, list[Ring]] = {}
        self._by_bond: dict[int, list[Ring]] = {}
        for ring in self._rings:
            for atom_idx in ring.atoms:
                self._by_atom.setdefault(atom_idx, []).append(ring)
            for bond_idx in ring.bonds:
                self._by_bond.setdefault(bond_idx, []).append(ring)

    def __len__(self) -> int:
        return len(self._rings)

    def __iter__(self) -> Iterator[Ring]:
        return iter(self._rings)

    def __getitem__(self, idx: int) -> Ring:
        return self._rings[idx]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RingSet):
            return NotImplemented
        return self._rings == other._rings

    def __repr__(self) -> str:
        return f"RingSet({[ring.atoms for ring in self._rings]!r})"

    def rings_containing_atom(self, atom_idx: int) -> list[Ring]:
        """Rings that contain the given atom, in ring set order."""
        return list(self._by_atom.get(atom_idx, ()))

    def rings_containing_bond(self, bond_idx: int) -> list[Ring]:
        """Rings that contain the given bond, in ring set order."""
        return list(self._by_bond.get(bond_idx, ()))

    def contains_atom(self, atom_idx: int) -> bool:
        return atom_idx in self._by_atom

    def contains_bond(self, bond_idx: int) -> bool:
        return bond_idx in self._by_bond

    @property
    def bonds(self) -> frozenset[int]:
        """Indices of every bond in at least one ring."""
        return frozenset(self._by_bond)


def _build_adjacency(mol: "Molecule") -> dict[int, list[tuple[int, int]]]:
    """Adjacency list of (neighbor, bond_idx), sorted by neighbor index."""
    adj: dict[int, list[tuple[int, int]]] = {i: [] for i in range(mol.num_atoms)}
    for bond in mol.bonds:
        adj[bond.atom1_idx].append((bond.atom2_idx, bond.idx))
        adj[bond.atom2_idx].append((bond.atom1_idx, bond.idx))
    for neighbors in adj.values():
        neighbors.sort()
    return adj


def _canonical_cycle(path: list[int]) -> tuple[int, ...]:
    """Orient a cycle starting at its lowest atom (path[0]).

    The direction is chosen so the second atom is the smaller of the two
    ring neighbors of the start atom.
    """
    if path[1] > path[-1]:
        return (path[0],) + tuple(reversed(path[1:]))
    return tuple(path)


def find_all_rings(
    mol: "Molecule",
    max_rings: int | None = None,
    timeout: float | None = None,
    max_ring_size: int | None = None,
) -> RingSet:
    """Find every simple cycle in the molecule.

    Each cycle is discovered by a depth-first walk from its lowest-indexed
    atom that only visits higher-indexed atoms. Cycles are deduplicated on
    their bond sets and ordered by size, then by atom tuple.

    Args:
        mol: Molecule to analyze.
        max_rings: Raise once more than this many rings are found.
        timeout: Raise once the search runs longer than this (seconds).
        max_ring_size: Skip cycles longer than this.

    Returns:
        RingSet of all simple cycles.

    Raises:
        RingPerceptionError: If max_rings or timeout is exceeded.

    Example:
        >>> mol = parse("c1ccc2ccccc2c1")  # naphthalene
        >>> [ring.size for ring in find_all_rings(mol)]
        [6, 6, 10]
    """
    n = mol.num_atoms
    if n == 0 or not mol.bonds:
        return RingSet()

    adj = _build_adjacency(mol)
    deadline = time.monotonic() + timeout if timeout is not None else None

    found: dict[frozenset[int], tuple[int, ...]] = {}

    def check_limits() -> None:
        if deadline is not None and time.monotonic() > deadline:
            raise RingPerceptionError(
                f"Ring search timed out after {timeout}s",
                rings_found=len(found),
            )
        if max_rings is not None and len(found) > max_rings:
            raise RingPerceptionError(
                f"Too many rings (more than {max_rings})",
                rings_found=len(found),
            )

    for start in range(n):
        # Only atoms with two or more higher-indexed neighbors can start a ring
        if sum(1 for nbr, _ in adj[start] if nbr > start) < 2:
            continue

        check_limits()
        path = [start]
        path_bonds: list[int] = []
        visited = {start}
        # One neighbor iterator per atom on the current path
        stack = [iter(adj[start])]

        while stack:
            step = next(stack[-1], None)
            if step is None:
                stack.pop()
                if path_bonds:
                    visited.remove(path.pop())
                    path_bonds.pop()
                continue

            neighbor, bond_idx = step
            if neighbor == start:
                if len(path) >= 3 and bond_idx != path_bonds[-1]:
                    key = frozenset(path_bonds) | {bond_idx}
                    if key not in found:
                        found[key] = _canonical_cycle(path)
            elif neighbor > start and neighbor not in visited:
                if max_ring_size is not None and len(path) >= max_ring_size:
                    continue
                visited.add(neighbor)
                path.append(neighbor)
                path_bonds.append(bond_idx)
                stack.append(iter(adj[neighbor]))
                check_limits()

    check_limits()

    rings = [Ring(atoms=atoms, bonds=bonds) for bonds, atoms in found.items()]
    rings.sort(key=lambda ring: (ring.size, ring.atoms))

    logger.debug("Found %d rings in %d atoms", len(rings), n)
    return RingSet(rings)


def _bond_mask(ring: Ring) -> int:
    """Encode a ring's bond set as a bit vector over GF(2)."""
    mask = 0
    for bond_idx in ring.bonds:
        mask |= 1 << bond_idx
    return mask


def find_sssr(mol: "Molecule", all_rings: RingSet | None = None) -> RingSet:
    """Find the Smallest Set of Smallest Rings (SSSR).

    The SSSR is a linearly independent basis of cycles where:
    - The number of rings equals the cyclomatic number (E - V + C)
    - Larger rings that can be expressed as combinations of smaller rings are excluded

    Rings are taken smallest first and kept when their bond vector is
    independent over GF(2) (XOR as addition) of the rings already kept.

    Args:
        mol: Molecule to analyze.
        all_rings: Precomputed exhaustive ring set. Computed without
            limits when omitted.

    Returns:
        RingSet holding the SSSR, in selection order.

    Example:
        >>> mol = parse("c1ccc2ccccc2c1")  # naphthalene
        >>> len(find_sssr(mol))
        2
    """
    if mol.num_atoms == 0:
        return RingSet()

    if all_rings is None:
        all_rings = find_all_rings(mol)

    mu = mol.num_bonds - mol.num_atoms + len(mol.connected_components())
    if mu <= 0 or len(all_rings) == 0:
        return RingSet()

    # Pivot bit -> reduced basis vector
    basis: dict[int, int] = {}
    selected: list[Ring] = []

    for ring in sorted(all_rings, key=lambda r: (r.size, r.atoms)):
        if len(selected) >= mu:
            break

        vec = _bond_mask(ring)
        while vec:
            pivot = vec.bit_length() - 1
            if pivot not in basis:
                basis[pivot] = vec
                selected.append(ring)
                break
            vec ^= basis[pivot]

    logger.debug("SSSR: %d of %d rings (cyclomatic number %d)", len(selected), len(all_rings), mu)
    return RingSet(selected)
