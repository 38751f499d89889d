"""
Target graph annotation.

SMARTS primitives test properties that are not stored on the molecule
itself: ring membership and sizes, ring connectivity, total hydrogen and
connection counts, valence and perceived aromaticity. This module derives
those properties into a side table (`AnnotatedMolecule`) indexed by atom
and bond index. The molecule is never modified.

Annotation runs in a fixed order:

1. exhaustive ring search
2. SSSR extraction
3. per-atom ring membership, ring sizes and SSSR rings
4. per-atom connection and hydrogen counts, and valence
5. per-bond ring membership
6. per-atom ring connection counts
7. aromaticity, typed over the exhaustive ring set and combined over the SSSR

Example:
    >>> mol = parse("c1ccccc1O")  # phenol
    >>> ann = annotate(mol)
    >>> ann.atoms[0].ring_sizes
    (6,)
    >>> ann.atoms[6].in_ring
    False
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from chiraquery.config import DEFAULT_CONFIG, AnnotatorConfig
from chiraquery.elements import get_standard_valence
from chiraquery.rings import Ring, RingSet, find_all_rings, find_sssr
from chiraquery.transform import AromaticityPerceiver

if TYPE_CHECKING:
    from chiraquery.types import Molecule

logger = logging.getLogger(__name__)


@dataclass
class AtomRecord:
    """Derived properties of one target atom.

    Attributes:
        in_ring: Atom belongs to at least one ring.
        ring_sizes: Size of every ring (exhaustive set) containing the atom.
        smallest_rings: SSSR rings containing the atom.
        ring_connections: Number of neighbors that are ring atoms.
        total_connections: Attached hydrogens plus explicit neighbors.
        total_hydrogen_count: Attached hydrogens plus hydrogen neighbors.
        implicit_hydrogen_count: Hydrogens implied by valence, not written.
        degree: Number of explicit neighbors.
        valence: Group-based valence minus formal charge, or None for
            elements outside the valence table.
        is_aromatic: Perceived aromaticity.
    """

    in_ring: bool = False
    ring_sizes: tuple[int, ...] = ()
    smallest_rings: tuple[Ring, ...] = ()
    ring_connections: int = 0
    total_connections: int = 0
    total_hydrogen_count: int = 0
    implicit_hydrogen_count: int = 0
    degree: int = 0
    valence: int | None = None
    is_aromatic: bool = False


@dataclass
class BondRecord:
    """Derived properties of one target bond."""

    in_ring: bool = False
    is_aromatic: bool = False


@dataclass
class AnnotatedMolecule:
    """A molecule together with its derived annotation records.

    Attributes:
        mol: The annotated molecule.
        atoms: One record per atom, indexed like mol.atoms.
        bonds: One record per bond, indexed like mol.bonds.
        all_rings: Exhaustive ring set.
        sssr: Smallest set of smallest rings.
    """

    mol: Molecule
    atoms: list[AtomRecord] = field(default_factory=list)
    bonds: list[BondRecord] = field(default_factory=list)
    all_rings: RingSet = field(default_factory=RingSet)
    sssr: RingSet = field(default_factory=RingSet)

    @property
    def num_atoms(self) -> int:
        return len(self.atoms)


def annotate(mol: Molecule, config: AnnotatorConfig | None = None) -> AnnotatedMolecule:
    """Derive ring, connectivity and aromaticity annotations.

    Args:
        mol: Molecule to annotate (not modified).
        config: Search limits. DEFAULT_CONFIG when omitted.

    Returns:
        AnnotatedMolecule with one record per atom and bond.

    Raises:
        RingPerceptionError: If ring search exceeds its limits.
        AromaticityError: If aromaticity perception exceeds its limits.
    """
    if config is None:
        config = DEFAULT_CONFIG

    all_rings = find_all_rings(
        mol,
        max_rings=config.max_rings,
        timeout=config.ring_search_timeout,
        max_ring_size=config.max_ring_size,
    )
    sssr = find_sssr(mol, all_rings)

    atoms = [AtomRecord() for _ in mol.atoms]
    bonds = [BondRecord() for _ in mol.bonds]

    for atom in mol.atoms:
        record = atoms[atom.idx]

        containing = all_rings.rings_containing_atom(atom.idx)
        if containing:
            record.in_ring = True
            record.ring_sizes = tuple(ring.size for ring in containing)
            record.smallest_rings = tuple(sssr.rings_containing_atom(atom.idx))

        h_count = atom.total_hydrogens(mol)
        neighbors = list(atom.neighbors(mol))
        record.degree = len(neighbors)
        record.implicit_hydrogen_count = h_count - atom.explicit_hydrogens
        record.total_connections = h_count + len(neighbors)
        record.total_hydrogen_count = h_count + sum(
            1 for nbr in neighbors if mol.atoms[nbr].atomic_number == 1
        )

        standard = get_standard_valence(atom.symbol)
        if standard is not None:
            record.valence = standard - atom.charge

    for bond in mol.bonds:
        bonds[bond.idx].in_ring = all_rings.contains_bond(bond.idx)

    for atom in mol.atoms:
        atoms[atom.idx].ring_connections = sum(
            1 for nbr in atom.neighbors(mol) if atoms[nbr].in_ring
        )

    perceiver = AromaticityPerceiver(config.max_aromatic_combinations)
    aromatic_atoms, aromatic_bonds = perceiver.perceive(mol, all_rings, sssr)
    for atom_idx in aromatic_atoms:
        atoms[atom_idx].is_aromatic = True
    for bond_idx in aromatic_bonds:
        bonds[bond_idx].is_aromatic = True

    logger.debug(
        "Annotated %d atoms: %d rings, %d in SSSR, %d aromatic atoms",
        len(atoms), len(all_rings), len(sssr), len(aromatic_atoms),
    )
    return AnnotatedMolecule(mol=mol, atoms=atoms, bonds=bonds, all_rings=all_rings, sssr=sssr)
