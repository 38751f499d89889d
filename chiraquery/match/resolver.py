"""Conversion of bond mappings into atom index lists."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from chiraquery.match.matcher import BondMapping
    from chiraquery.types import Molecule

AtomMapping = list[int]


def resolve(bond_mappings: Sequence[BondMapping], mol: Molecule) -> list[AtomMapping]:
    """Turn bond mappings into atom mappings.

    Each mapping yields the distinct target atoms of its bonds in the
    order they are first seen. A one-bond mapping between two atoms of
    the same element yields the same atoms a second time, since the
    pattern also matches with its two ends swapped.

    Args:
        bond_mappings: Output of the bond-level matcher.
        mol: Target molecule the mappings refer to.

    Returns:
        Atom mappings, in input order.

    Example:
        >>> resolve([[(0, 0)]], parse("CC"))
        [[0, 1], [0, 1]]
    """
    atom_mappings: list[AtomMapping] = []

    for mapping in bond_mappings:
        atoms: AtomMapping = []
        for _, bond_idx in mapping:
            bond = mol.bonds[bond_idx]
            for atom_idx in (bond.atom1_idx, bond.atom2_idx):
                if atom_idx not in atoms:
                    atoms.append(atom_idx)
        atom_mappings.append(atoms)

        if len(mapping) == 1:
            bond = mol.bonds[mapping[0][1]]
            if mol.atoms[bond.atom1_idx].atomic_number == mol.atoms[bond.atom2_idx].atomic_number:
                atom_mappings.append(list(atoms))

    return atom_mappings


def unique_of(atom_mappings: Sequence[AtomMapping]) -> list[AtomMapping]:
    """Drop mappings covering the same atoms as an earlier one.

    Inputs are not modified. Each returned mapping is a sorted copy.

    Example:
        >>> unique_of([[0, 1], [1, 0], [2, 3]])
        [[0, 1], [2, 3]]
    """
    seen: set[tuple[int, ...]] = set()
    unique: list[AtomMapping] = []

    for mapping in atom_mappings:
        key = tuple(sorted(mapping))
        if key not in seen:
            seen.add(key)
            unique.append(list(key))

    return unique
