"""Test configuration and fixtures for chiraquery tests."""

from __future__ import annotations

import pytest

from chiraquery import Molecule, SmartsQueryTool, annotate, parse
from chiraquery.annotate import AnnotatedMolecule


def permute(mol: Molecule, order: list[int]) -> tuple[Molecule, dict[int, int]]:
    """Rebuild a molecule with its atoms renumbered.

    Args:
        mol: Source molecule.
        order: Old atom indices in their new order.

    Returns:
        The renumbered molecule and the old -> new index map.
    """
    new_index = {old: new for new, old in enumerate(order)}
    out = Molecule()
    for old in order:
        atom = mol.atoms[old]
        out.add_atom(
            atom.symbol,
            charge=atom.charge,
            explicit_hydrogens=atom.explicit_hydrogens,
            is_aromatic=atom.is_aromatic,
            isotope=atom.isotope,
            no_implicit_hydrogens=atom.no_implicit_hydrogens,
        )
    for bond in reversed(mol.bonds):
        out.add_bond(
            new_index[bond.atom2_idx],
            new_index[bond.atom1_idx],
            order=bond.order,
            is_aromatic=bond.is_aromatic,
        )
    return out, new_index


def run_query(smarts: str, smiles: str) -> SmartsQueryTool:
    """Compile a pattern and match it against a SMILES target."""
    tool = SmartsQueryTool(smarts)
    tool.matches(parse(smiles))
    return tool


@pytest.fixture
def annotated():
    """Factory annotating a SMILES string."""
    def _annotate(smiles: str) -> AnnotatedMolecule:
        return annotate(parse(smiles))
    return _annotate


@pytest.fixture
def aromatic_smiles() -> list[str]:
    """Aromatic SMILES strings."""
    return [
        "c1ccccc1",
        "c1ccncc1",
        "c1cc[nH]c1",
        "c1ccoc1",
        "c1ccsc1",
        "c1ccc2ccccc2c1",
        "c1ccc2[nH]ccc2c1",
    ]


@pytest.fixture
def non_aromatic_ring_smiles() -> list[str]:
    """Rings that must not be perceived as aromatic."""
    return [
        "C1CCCCC1",
        "C1=CCC=CC1",
        "C1=CCC=C1",
        "C1CCOC1",
    ]
