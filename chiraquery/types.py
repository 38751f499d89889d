"""
Core molecular data types.

This module defines the target graph structures searched by the query
tool: Atom, Bond and Molecule. Indices are stable and assigned in
insertion order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from .elements import (
    BondOrder,
    get_atomic_number,
    get_default_valence,
)


@dataclass(slots=True)
class Bond:
    """Represents a chemical bond between two atoms.

    Attributes:
        idx: Unique index of this bond in the molecule.
        atom1_idx: Index of the first atom.
        atom2_idx: Index of the second atom.
        order: Bond order (1=single, 2=double, 3=triple, 5=quadruple).
        is_aromatic: Whether this bond was written as aromatic.
        stereo: Stereochemistry marker ('/' or '\\' for E/Z).
    """

    idx: int
    atom1_idx: int
    atom2_idx: int
    order: int = BondOrder.SINGLE
    is_aromatic: bool = False
    stereo: str | None = None

    def other_atom(self, atom_idx: int) -> int:
        """Get the index of the atom on the other end of this bond.

        Args:
            atom_idx: Index of one atom in the bond.

        Returns:
            Index of the other atom.

        Raises:
            ValueError: If atom_idx is not part of this bond.
        """
        if atom_idx == self.atom1_idx:
            return self.atom2_idx
        if atom_idx == self.atom2_idx:
            return self.atom1_idx
        raise ValueError(f"Atom {atom_idx} not in bond {self.idx}")


@dataclass(slots=True)
class Atom:
    """Represents an atom in a molecule.

    Attributes:
        idx: Unique index of this atom in the molecule.
        symbol: Element symbol (e.g., "C", "N", "Cl"); lowercase when
            written aromatic, "*" for a dummy atom.
        charge: Formal charge.
        explicit_hydrogens: Hydrogen count from bracket notation.
        is_aromatic: Whether this atom was written as aromatic.
        isotope: Mass number (isotope), or None for natural abundance.
        chirality: Stereochemistry marker ('@' or '@@').
        atom_class: Atom class number from SMILES (for reaction mapping).
        no_implicit_hydrogens: Hydrogen count is exactly explicit_hydrogens
            (set for bracket atoms).
        bond_indices: Indices of bonds connected to this atom.
    """

    idx: int
    symbol: str
    charge: int = 0
    explicit_hydrogens: int = 0
    is_aromatic: bool = False
    isotope: int | None = None
    chirality: str | None = None
    atom_class: int | None = None
    no_implicit_hydrogens: bool = False
    bond_indices: list[int] = field(default_factory=list)

    @property
    def atomic_number(self) -> int:
        """Get the atomic number for this element."""
        return get_atomic_number(self.symbol)

    @property
    def default_valence(self) -> int | None:
        """Get the default valence for this element."""
        return get_default_valence(self.atomic_number)

    @property
    def degree(self) -> int:
        """Number of explicit bonds to this atom."""
        return len(self.bond_indices)

    def neighbors(self, mol: "Molecule") -> Iterator[int]:
        """Iterate over indices of neighboring atoms.

        Args:
            mol: Parent molecule.

        Yields:
            Indices of atoms bonded to this atom.
        """
        for bond_idx in self.bond_indices:
            bond = mol.bonds[bond_idx]
            yield bond.other_atom(self.idx)

    def get_bonds(self, mol: "Molecule") -> Iterator[Bond]:
        """Iterate over bonds connected to this atom."""
        for bond_idx in self.bond_indices:
            yield mol.bonds[bond_idx]

    def total_hydrogens(self, mol: "Molecule") -> int:
        """Calculate attached hydrogen count (bracket + implicit).

        Hydrogens present as separate atoms in the graph are not counted
        here; the annotator adds those.

        Args:
            mol: Parent molecule.

        Returns:
            Number of hydrogens carried by this atom.
        """
        default_val = self.default_valence
        if default_val is None or self.no_implicit_hydrogens:
            return self.explicit_hydrogens

        bond_order_sum = 0.0
        for bond in self.get_bonds(mol):
            if bond.is_aromatic:
                bond_order_sum += 1.5
            else:
                bond_order_sum += bond.order

        # Implicit H = default_valence - bond_order + charge - explicit_H
        implicit = max(
            0,
            default_val - int(round(bond_order_sum)) + self.charge - self.explicit_hydrogens
        )
        return self.explicit_hydrogens + implicit


@dataclass
class Molecule:
    """Represents a molecular structure.

    Attributes:
        atoms: List of atoms in the molecule.
        bonds: List of bonds in the molecule.
        name: Optional molecule name/identifier.

    Example:
        >>> mol = Molecule()
        >>> c1 = mol.add_atom("C")
        >>> c2 = mol.add_atom("C")
        >>> mol.add_bond(c1, c2)
        0
        >>> len(mol)
        2
    """

    atoms: list[Atom] = field(default_factory=list)
    bonds: list[Bond] = field(default_factory=list)
    name: str | None = None

    def __len__(self) -> int:
        """Return number of atoms."""
        return len(self.atoms)

    def __iter__(self) -> Iterator[Atom]:
        """Iterate over atoms."""
        return iter(self.atoms)

    def __getitem__(self, idx: int) -> Atom:
        """Get atom by index."""
        return self.atoms[idx]

    def add_atom(
        self,
        symbol: str,
        *,
        charge: int = 0,
        explicit_hydrogens: int = 0,
        is_aromatic: bool = False,
        isotope: int | None = None,
        chirality: str | None = None,
        atom_class: int | None = None,
        no_implicit_hydrogens: bool = False,
    ) -> int:
        """Add an atom to the molecule.

        Returns:
            Index of the newly added atom.
        """
        idx = len(self.atoms)
        self.atoms.append(Atom(
            idx=idx,
            symbol=symbol,
            charge=charge,
            explicit_hydrogens=explicit_hydrogens,
            is_aromatic=is_aromatic,
            isotope=isotope,
            chirality=chirality,
            atom_class=atom_class,
            no_implicit_hydrogens=no_implicit_hydrogens,
        ))
        return idx

    def add_bond(
        self,
        atom1_idx: int,
        atom2_idx: int,
        *,
        order: int = BondOrder.SINGLE,
        is_aromatic: bool = False,
        stereo: str | None = None,
    ) -> int:
        """Add a bond between two atoms.

        Args:
            atom1_idx: Index of the first atom.
            atom2_idx: Index of the second atom.
            order: Bond order.
            is_aromatic: Whether bond is aromatic.
            stereo: Stereochemistry marker.

        Returns:
            Index of the newly added bond.

        Raises:
            IndexError: If atom indices are out of bounds.
        """
        if not (0 <= atom1_idx < len(self.atoms) and 0 <= atom2_idx < len(self.atoms)):
            raise IndexError(f"Atom index out of bounds: {atom1_idx}, {atom2_idx}")

        idx = len(self.bonds)
        self.bonds.append(Bond(
            idx=idx,
            atom1_idx=atom1_idx,
            atom2_idx=atom2_idx,
            order=order,
            is_aromatic=is_aromatic,
            stereo=stereo,
        ))
        self.atoms[atom1_idx].bond_indices.append(idx)
        self.atoms[atom2_idx].bond_indices.append(idx)
        return idx

    def get_bond_between(self, atom1_idx: int, atom2_idx: int) -> Bond | None:
        """Find the bond between two atoms, or None if not bonded."""
        for bond_idx in self.atoms[atom1_idx].bond_indices:
            bond = self.bonds[bond_idx]
            if bond.other_atom(atom1_idx) == atom2_idx:
                return bond
        return None

    def connected_components(self) -> list[list[int]]:
        """Find connected components in the molecule.

        Returns:
            List of components, each being a sorted list of atom indices.
        """
        visited: set[int] = set()
        components: list[list[int]] = []

        for start in range(len(self.atoms)):
            if start in visited:
                continue

            component: list[int] = []
            stack = [start]
            visited.add(start)

            while stack:
                atom_idx = stack.pop()
                component.append(atom_idx)

                for neighbor in self.atoms[atom_idx].neighbors(self):
                    if neighbor not in visited:
                        visited.add(neighbor)
                        stack.append(neighbor)

            components.append(sorted(component))

        return components

    @property
    def num_atoms(self) -> int:
        """Number of atoms in the molecule."""
        return len(self.atoms)

    @property
    def num_bonds(self) -> int:
        """Number of bonds in the molecule."""
        return len(self.bonds)
