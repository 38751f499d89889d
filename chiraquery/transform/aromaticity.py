"""
Aromaticity perception.

This module detects aromatic atoms and bonds in molecular structures
based on Hückel's rule (4n+2 π electrons) applied to ring systems, with
handling of:
- Fused ring systems (checks combinations of rings)
- Heteroatoms (N, O, S, etc.)
- Exocyclic double bonds (electron stealing by electronegative atoms)
- Charged atoms (cations, anions)
- ElectronDonorType classification

Perception never modifies the molecule. Results are returned as sets of
atom and bond indices so callers can record them wherever they keep
derived properties.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from itertools import combinations
from typing import TYPE_CHECKING

from chiraquery.elements import (
    ELECTRONEGATIVITY,
    OUTER_ELECTRONS,
    get_default_valence,
)
from chiraquery.exceptions import AromaticityError
from chiraquery.rings import find_sssr

if TYPE_CHECKING:
    from chiraquery.rings import Ring, RingSet
    from chiraquery.types import Atom, Molecule

logger = logging.getLogger(__name__)


class ElectronDonorType(IntEnum):
    """Electron donor type for aromaticity classification.

    Each atom in a potential aromatic ring is classified by how many
    electrons it can donate to the π system.
    """
    VACANT = 0      # 0 electrons (empty p orbital)
    ONE = 1         # contributes 1 electron
    TWO = 2         # contributes 2 electrons
    ONE_OR_TWO = 3  # ambiguous 1 or 2
    ANY = 4         # can be any (dummy atom)
    NONE = 5        # cannot participate


_CANDIDATE_DONORS = frozenset({
    ElectronDonorType.VACANT,
    ElectronDonorType.ONE,
    ElectronDonorType.TWO,
    ElectronDonorType.ONE_OR_TWO,
    ElectronDonorType.ANY,
})


def is_more_electronegative(atom1_num: int, atom2_num: int) -> bool:
    """Check if atom1 is more electronegative than atom2.

    Elements missing from the table are taken as 2.0.
    """
    en1 = ELECTRONEGATIVITY.get(atom1_num, 2.0)
    en2 = ELECTRONEGATIVITY.get(atom2_num, 2.0)
    return en1 > en2


def _get_atom_valence(atom: Atom, mol: Molecule) -> int:
    """Sum of bond orders, aromatic bonds counting as 1 (sigma only)."""
    valence = 0
    for bond in atom.get_bonds(mol):
        valence += 1 if bond.is_aromatic else bond.order
    return valence


def _exocyclic_multiple_bond_partner(
    atom_idx: int,
    mol: Molecule,
    ring_bonds: frozenset[int],
) -> int | None:
    """Return the atom across a non-ring multiple bond, if any."""
    for bond in mol.atoms[atom_idx].get_bonds(mol):
        if bond.idx not in ring_bonds and bond.order >= 2 and not bond.is_aromatic:
            return bond.other_atom(atom_idx)
    return None


def _has_incident_cyclic_multiple_bond(
    atom_idx: int,
    mol: Molecule,
    ring_bonds: frozenset[int],
) -> bool:
    """Check if atom has a double, triple or aromatic ring bond."""
    for bond in mol.atoms[atom_idx].get_bonds(mol):
        if bond.idx in ring_bonds and (bond.order >= 2 or bond.is_aromatic):
            return True
    return False


def _has_incident_multiple_bond(atom_idx: int, mol: Molecule) -> bool:
    """Check if atom has any double, triple or aromatic bond."""
    for bond in mol.atoms[atom_idx].get_bonds(mol):
        if bond.order >= 2 or bond.is_aromatic:
            return True
    return False


def _has_empty_p_orbital(atom_idx: int, mol: Molecule) -> bool:
    """Check if an atom has no electrons left over for the pi system.

    Aromatic bonds are not counted as multiple bonds, so the aromatic and
    Kekulé spellings of a carbocation agree.
    """
    atom = mol.atoms[atom_idx]
    for bond in atom.get_bonds(mol):
        if bond.order >= 2 and not bond.is_aromatic:
            return False
    degree = atom.degree + atom.total_hydrogens(mol)
    return OUTER_ELECTRONS.get(atom.atomic_number, 0) - atom.charge - degree == 0


def count_atom_elec(atom_idx: int, mol: Molecule) -> int:
    """Count electrons available for the pi system.

    Formula: electrons = (default_valence - degree) + lone_pairs

    Where:
    - degree includes attached hydrogens
    - lone_pairs = outer_electrons - default_valence - charge

    Returns:
        Number of electrons available, or -1 if the atom cannot be aromatic.
    """
    atom = mol.atoms[atom_idx]
    atomic_num = atom.atomic_number

    dv = get_default_valence(atomic_num)
    if dv is None or dv <= 1:
        return -1

    degree = atom.degree + atom.total_hydrogens(mol)
    if degree > 3:
        return -1

    outer_e = OUTER_ELECTRONS.get(atomic_num, 0)
    if outer_e == 0:
        return -1

    nlp = max(outer_e - dv - atom.charge, 0)
    res = (dv - degree) + nlp

    if res > 1:
        # C=C=C style cumulated unsaturation only donates one electron
        bond_order_sum = sum(
            1.5 if bond.is_aromatic else bond.order
            for bond in atom.get_bonds(mol)
        )
        if int(round(bond_order_sum)) - atom.degree > 1:
            res = 1

    return res


def get_atom_donor_type(
    atom_idx: int,
    mol: Molecule,
    ring_bonds: frozenset[int],
    exocyclic_bonds_steal_electrons: bool = True,
) -> ElectronDonorType:
    """Get electron donor type for an atom.

    Args:
        atom_idx: Atom index.
        mol: Parent molecule.
        ring_bonds: Indices of bonds in any ring.
        exocyclic_bonds_steal_electrons: If True, exocyclic bonds to more
            electronegative atoms reduce electron count.

    Returns:
        ElectronDonorType classification.
    """
    atom = mol.atoms[atom_idx]
    atomic_num = atom.atomic_number

    if atomic_num == 0:
        if _has_incident_cyclic_multiple_bond(atom_idx, mol, ring_bonds):
            return ElectronDonorType.ONE
        return ElectronDonorType.ANY

    nelec = count_atom_elec(atom_idx, mol)
    if nelec < 0:
        return ElectronDonorType.NONE

    partner = _exocyclic_multiple_bond_partner(atom_idx, mol, ring_bonds)
    steals = (
        partner is not None
        and exocyclic_bonds_steal_electrons
        and is_more_electronegative(mol.atoms[partner].atomic_number, atomic_num)
    )

    if nelec == 0:
        if partner is not None:
            return ElectronDonorType.VACANT
        if _has_incident_cyclic_multiple_bond(atom_idx, mol, ring_bonds):
            return ElectronDonorType.ONE
        return ElectronDonorType.NONE

    if nelec == 1:
        if partner is not None:
            return ElectronDonorType.VACANT if steals else ElectronDonorType.ONE
        # Tropylium / cyclopropenyl cation
        if atom.charge == 1 and _has_empty_p_orbital(atom_idx, mol):
            return ElectronDonorType.VACANT
        if _has_incident_multiple_bond(atom_idx, mol):
            return ElectronDonorType.ONE
        if atom.charge == 1:
            return ElectronDonorType.VACANT
        return ElectronDonorType.NONE

    if steals:
        nelec -= 1

    if nelec % 2 == 1:
        return ElectronDonorType.ONE
    return ElectronDonorType.TWO


def is_atom_cand_for_arom(
    atom_idx: int,
    mol: Molecule,
    edon: ElectronDonorType,
) -> bool:
    """Check if atom can be an aromaticity candidate.

    Candidates are limited to the first three rows plus Se and Te, must
    have a usable donor type and may not exceed their default valence
    (adjusted by charge) or carry more than one multiple bond.
    """
    atom = mol.atoms[atom_idx]
    atomic_num = atom.atomic_number

    if atomic_num > 18 and atomic_num not in (34, 52):
        return False

    if edon not in _CANDIDATE_DONORS:
        return False

    valence = _get_atom_valence(atom, mol)

    dv = get_default_valence(atomic_num)
    if dv is not None and dv > 0 and valence > dv + atom.charge:
        return False

    if valence - atom.degree > 1:
        n_mult = sum(1 for bond in atom.get_bonds(mol) if bond.order in (2, 3) and not bond.is_aromatic)
        if n_mult > 1:
            return False

    return True


def _get_min_max_elec(dtype: ElectronDonorType) -> tuple[int, int]:
    """Get min and max electrons for donor type."""
    if dtype in (ElectronDonorType.ANY, ElectronDonorType.ONE_OR_TWO):
        return 1, 2
    if dtype == ElectronDonorType.ONE:
        return 1, 1
    if dtype == ElectronDonorType.TWO:
        return 2, 2
    return 0, 0


def apply_huckel(
    ring_atoms: list[int],
    edon: dict[int, ElectronDonorType],
) -> bool:
    """Apply Hückel rule to a ring or ring combination.

    Hückel rule: (4n + 2) pi electrons for aromaticity.
    At most one ANY donor atom is allowed per ring.

    Args:
        ring_atoms: Atom indices in the ring.
        edon: Donor type per atom index.

    Returns:
        True if ring satisfies Hückel.
    """
    rlw = 0
    rup = 0
    n_any = 0

    for idx in ring_atoms:
        dtype = edon.get(idx, ElectronDonorType.NONE)
        if dtype == ElectronDonorType.ANY:
            n_any += 1
            if n_any > 1:
                return False
        atlw, atup = _get_min_max_elec(dtype)
        rlw += atlw
        rup += atup

    # (4n + 2) = 2, 6, 10, 14, ...
    if rup >= 6:
        return any((rie - 2) % 4 == 0 for rie in range(rlw, rup + 1))
    return rup == 2


def _make_ring_neighbor_map(
    rings: list[Ring],
    max_size: int = 0,
) -> dict[int, list[int]]:
    """Map each ring index to the indices of rings sharing a bond with it."""
    neigh_map: dict[int, list[int]] = {i: [] for i in range(len(rings))}

    for i in range(len(rings)):
        if max_size and rings[i].size > max_size:
            continue
        for j in range(i + 1, len(rings)):
            if max_size and rings[j].size > max_size:
                continue
            if rings[i].bonds & rings[j].bonds:
                neigh_map[i].append(j)
                neigh_map[j].append(i)

    return neigh_map


def _pick_fused_rings(
    start: int,
    neigh_map: dict[int, list[int]],
    done: set[int],
) -> list[int]:
    """Collect every ring index reachable from start through shared bonds."""
    result: list[int] = []
    stack = [start]

    while stack:
        curr = stack.pop()
        if curr in done:
            continue
        done.add(curr)
        result.append(curr)
        stack.extend(neigh for neigh in neigh_map.get(curr, []) if neigh not in done)

    return sorted(result)


def _check_fused(ring_ids: tuple[int, ...], neigh_map: dict[int, list[int]]) -> bool:
    """Check if a set of rings forms a connected fused system."""
    if len(ring_ids) <= 1:
        return True

    ring_set = set(ring_ids)
    visited: set[int] = set()
    stack = [ring_ids[0]]

    while stack:
        curr = stack.pop()
        if curr in visited:
            continue
        visited.add(curr)
        stack.extend(n for n in neigh_map.get(curr, []) if n in ring_set and n not in visited)

    return len(visited) == len(ring_ids)


class AromaticityPerceiver:
    """Hückel-based aromaticity perception.

    1. For each atom in a ring, compute electron donor type
    2. Check if atom is a candidate for aromaticity
    3. Keep SSSR rings made only of candidate atoms
    4. For each fused system, test ring combinations of increasing
       size against the Hückel rule

    A ring (or combination) passing the rule makes its atoms aromatic and
    the bonds it contains exactly once aromatic.
    """

    # Maximum ring size for fused aromaticity
    MAX_FUSED_RING_SIZE = 24

    def __init__(
        self,
        max_combinations: int = 100000,
        exocyclic_bonds_steal_electrons: bool = True,
    ) -> None:
        """Initialize perceiver.

        Args:
            max_combinations: Ring combinations tried per fused system
                before raising AromaticityError.
            exocyclic_bonds_steal_electrons: Whether exocyclic multiple
                bonds to more electronegative atoms remove an electron.
        """
        self._max_combinations = max_combinations
        self._steal = exocyclic_bonds_steal_electrons

    def perceive(
        self,
        mol: Molecule,
        rings: RingSet,
        sssr: RingSet | None = None,
    ) -> tuple[frozenset[int], frozenset[int]]:
        """Perceive aromaticity.

        Donor types and candidacy are judged against every ring bond, but
        only rings of the SSSR are combined. Envelope rings of a fused
        system would otherwise pass on their own, as in pentalene.

        Args:
            mol: Molecule to analyze (not modified).
            rings: Ring context, usually the exhaustive ring set.
            sssr: Smallest set of smallest rings. Derived from rings
                when omitted.

        Returns:
            Tuple of (aromatic atom indices, aromatic bond indices).

        Raises:
            AromaticityError: If a fused system needs more combinations
                than allowed.
        """
        if len(rings) == 0:
            return frozenset(), frozenset()

        if sssr is None:
            sssr = find_sssr(mol, rings)

        ring_bonds = rings.bonds

        ring_atoms: set[int] = set()
        for ring in rings:
            ring_atoms.update(ring.atoms)

        edon: dict[int, ElectronDonorType] = {}
        acands: dict[int, bool] = {}
        for atom_idx in sorted(ring_atoms):
            edon[atom_idx] = get_atom_donor_type(atom_idx, mol, ring_bonds, self._steal)
            acands[atom_idx] = is_atom_cand_for_arom(atom_idx, mol, edon[atom_idx])

        # All atoms must be candidates, and not every atom may be a dummy
        candidate_rings = [
            ring for ring in sssr
            if all(acands.get(i, False) for i in ring.atoms)
            and any(mol.atoms[i].atomic_number != 0 for i in ring.atoms)
        ]
        if not candidate_rings:
            return frozenset(), frozenset()

        neigh_map = _make_ring_neighbor_map(candidate_rings, self.MAX_FUSED_RING_SIZE)

        done_rings: set[int] = set()
        aromatic_ring_ids: set[int] = set()
        aromatic_bonds: set[int] = set()

        for start in range(len(candidate_rings)):
            if start in done_rings:
                continue
            fused = _pick_fused_rings(start, neigh_map, done_rings)
            self._apply_huckel_to_fused(
                candidate_rings, fused, edon, neigh_map,
                aromatic_ring_ids, aromatic_bonds,
            )

        aromatic_atoms: set[int] = set()
        for ring_idx in aromatic_ring_ids:
            aromatic_atoms.update(candidate_rings[ring_idx].atoms)

        logger.debug(
            "Aromaticity: %d of %d candidate rings, %d atoms, %d bonds",
            len(aromatic_ring_ids), len(candidate_rings),
            len(aromatic_atoms), len(aromatic_bonds),
        )
        return frozenset(aromatic_atoms), frozenset(aromatic_bonds)

    def _apply_huckel_to_fused(
        self,
        rings: list[Ring],
        fused_ids: list[int],
        edon: dict[int, ElectronDonorType],
        neigh_map: dict[int, list[int]],
        aromatic_ring_ids: set[int],
        aromatic_bonds: set[int],
    ) -> None:
        """Apply Hückel rule to a fused ring system.

        Try increasing sizes of ring combinations until all bonds are
        covered or every combination has been tried.
        """
        all_fused_bonds: set[int] = set()
        for rid in fused_ids:
            all_fused_bonds |= rings[rid].bonds

        tried = 0
        for size in range(1, len(fused_ids) + 1):
            if all_fused_bonds <= aromatic_bonds:
                break

            for combo in combinations(fused_ids, size):
                tried += 1
                if tried > self._max_combinations:
                    raise AromaticityError(
                        f"Fused system of {len(fused_ids)} rings needs more than "
                        f"{self._max_combinations} ring combinations"
                    )

                if size > 1 and not _check_fused(combo, neigh_map):
                    continue

                atom_ring_count: dict[int, int] = {}
                for rid in combo:
                    for atom_idx in rings[rid].atoms:
                        atom_ring_count[atom_idx] = atom_ring_count.get(atom_idx, 0) + 1

                # Atoms shared by more than two rings are left out
                union_atoms = [idx for idx, count in atom_ring_count.items() if count <= 2]

                if apply_huckel(union_atoms, edon):
                    bond_count: dict[int, int] = {}
                    for rid in combo:
                        for bond_idx in rings[rid].bonds:
                            bond_count[bond_idx] = bond_count.get(bond_idx, 0) + 1
                    aromatic_bonds.update(b for b, count in bond_count.items() if count == 1)
                    aromatic_ring_ids.update(combo)


def detect_aromaticity(
    mol: Molecule,
    rings: RingSet,
    max_combinations: int = 100000,
    sssr: RingSet | None = None,
) -> tuple[frozenset[int], frozenset[int]]:
    """Detect aromatic atoms and bonds using the default perceiver.

    Example:
        >>> mol = parse("C1=CC=CC=C1")  # Benzene with explicit double bonds
        >>> atoms, bonds = detect_aromaticity(mol, find_all_rings(mol))
        >>> sorted(atoms)
        [0, 1, 2, 3, 4, 5]
    """
    return AromaticityPerceiver(max_combinations).perceive(mol, rings, sssr)
