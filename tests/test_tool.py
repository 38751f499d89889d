"""
Tests for the SMARTS query tool.

End-to-end matching, the results API, pattern replacement and
agreement with RDKit substructure search.
"""

from __future__ import annotations

import pytest

from chiraquery import AnnotatorConfig, SmartsQueryTool, parse
from chiraquery.exceptions import QueryCompilationError, RingPerceptionError
from conftest import permute, run_query


class TestEndToEnd:
    """Matching patterns against molecules."""

    def test_anhydride_acyl_groups(self) -> None:
        """O=C-O occurs twice in acetic anhydride."""
        tool = run_query("O=C-O", "CC(=O)OC(=O)C")
        assert tool.count_matches() == 2
        assert sorted(tool.get_matching_atoms()) == [[1, 2, 3], [4, 5, 3]]
        assert sorted(tool.get_unique_matching_atoms()) == [[1, 2, 3], [3, 4, 5]]

    def test_ethane_symmetry(self) -> None:
        """A homonuclear one-bond pattern is reported in both orientations."""
        tool = run_query("CC", "CC")
        assert tool.get_matching_atoms() == [[0, 1], [0, 1]]
        assert tool.get_unique_matching_atoms() == [[0, 1]]

    def test_explicit_single_bond_symmetry(self) -> None:
        tool = run_query("C-C", "CC")
        assert tool.count_matches() == 2

    def test_heteronuclear_bond(self) -> None:
        assert run_query("C-O", "CO").count_matches() == 1
        assert run_query("C=O", "C=O").count_matches() == 1

    def test_order_mismatch(self) -> None:
        tool = run_query("C=O", "CO")
        assert tool.count_matches() == 0
        assert tool.get_matching_atoms() == []

    def test_benzene(self) -> None:
        """Benzene matches itself twelve ways, all on the same atoms."""
        tool = run_query("c1ccccc1", "c1ccccc1")
        assert tool.count_matches() == 12
        assert tool.get_unique_matching_atoms() == [[0, 1, 2, 3, 4, 5]]

    def test_kekule_benzene_is_aromatic(self) -> None:
        """Kekulé input is matched as aromatic."""
        assert run_query("c1ccccc1", "C1=CC=CC=C1").count_matches() == 12
        assert run_query("C=C", "C1=CC=CC=C1").count_matches() == 0

    def test_recursive_pattern(self) -> None:
        """Carbon next to a carbonyl carbon."""
        tool = run_query("[CH3][$(C=O)]", "CC(=O)OCC")
        assert tool.get_unique_matching_atoms() == [[0, 1]]

    def test_negated_recursion(self) -> None:
        tool = run_query("[O;!$(O=*)]", "CC(=O)O")
        assert tool.get_matching_atoms() == [[3]]

    def test_ring_primitives(self) -> None:
        tool = run_query("[r6]!@[OH]", "c1ccccc1O")
        assert tool.get_unique_matching_atoms() == [[5, 6]]

    def test_ring_size_counts_every_ring(self) -> None:
        """Indole fusion atoms lie in a six ring, so they match [r6]."""
        tool = run_query("[r6]", "c1ccc2[nH]ccc2c1")
        assert tool.get_unique_matching_atoms() == [[0], [1], [2], [3], [7], [8]]
        assert sorted(tool.annotations.atoms[3].ring_sizes) == [5, 6, 9]
        assert sorted(tool.annotations.atoms[7].ring_sizes) == [5, 6, 9]
        assert run_query("[r5]", "c1ccc2[nH]ccc2c1").get_unique_matching_atoms() == [[3], [4], [5], [6], [7]]

    def test_match_returns_bool(self) -> None:
        tool = SmartsQueryTool("N")
        assert tool.matches(parse("CN")) is True
        assert tool.matches(parse("CC")) is False


class TestSingleAtomShortcut:
    """One-atom patterns skip the bond matcher."""

    def test_each_atom_its_own_match(self) -> None:
        tool = run_query("C", "CCO")
        assert tool.get_matching_atoms() == [[0], [1]]

    def test_bond_matcher_not_called(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fail(*args, **kwargs):
            raise AssertionError("bond matcher used for a one-atom pattern")

        monkeypatch.setattr("chiraquery.tool.find_all", fail)
        tool = run_query("[OX2H]", "CCO")
        assert tool.get_matching_atoms() == [[2]]


class TestResultsState:
    """Results before and between matches."""

    def test_before_any_match(self) -> None:
        tool = SmartsQueryTool("CC")
        assert tool.count_matches() == 0
        assert tool.get_matching_atoms() == []
        assert tool.get_unique_matching_atoms() == []
        assert tool.annotations is None

    def test_repeated_match_same_result(self) -> None:
        tool = SmartsQueryTool("O=C-O")
        mol = parse("CC(=O)OC(=O)C")
        tool.matches(mol)
        first = tool.get_matching_atoms()
        tool.matches(mol)
        assert tool.get_matching_atoms() == first

    def test_results_are_copies(self) -> None:
        tool = run_query("CC", "CCC")
        tool.get_matching_atoms()[0].append(42)
        tool.get_unique_matching_atoms()[0].append(42)
        assert all(42 not in m for m in tool.get_matching_atoms())

    def test_modified_molecule_reannotated(self) -> None:
        """Changes made between calls are seen."""
        tool = SmartsQueryTool("CO")
        mol = parse("CC")
        assert not tool.matches(mol)
        mol.add_atom("O")
        mol.add_bond(1, 2)
        assert tool.matches(mol)

    def test_annotations_kept(self) -> None:
        tool = run_query("c", "c1ccccc1")
        assert tool.annotations is not None
        assert tool.annotations.num_atoms == 6

    def test_config_limits_apply(self) -> None:
        tool = SmartsQueryTool("C", AnnotatorConfig(max_rings=1))
        with pytest.raises(RingPerceptionError):
            tool.matches(parse("c1ccc2ccccc2c1"))


class TestSetSmarts:
    """Replacing the pattern."""

    def test_replace_resets_results(self) -> None:
        tool = run_query("CC", "CCC")
        tool.set_smarts("O")
        assert tool.smarts == "O"
        assert tool.count_matches() == 0
        tool.matches(parse("CCO"))
        assert tool.get_matching_atoms() == [[2]]

    def test_property_setter(self) -> None:
        tool = SmartsQueryTool("C")
        tool.smarts = "N"
        assert tool.query.num_atoms == 1
        assert repr(tool) == "SmartsQueryTool('N')"

    def test_failed_replace_keeps_state(self) -> None:
        tool = run_query("CC", "CCC")
        with pytest.raises(QueryCompilationError):
            tool.set_smarts("C(")
        assert tool.smarts == "CC"
        assert tool.count_matches() == 4

    def test_query_ready_after_construction(self) -> None:
        """The compiled graph is available before any match."""
        tool = SmartsQueryTool("CC")
        assert tool.query.smarts == "CC"
        assert tool.query.num_atoms == 2

    def test_bad_initial_pattern(self) -> None:
        with pytest.raises(QueryCompilationError):
            SmartsQueryTool("[C")


class TestRelabeling:
    """Match sets do not depend on atom numbering."""

    @pytest.mark.parametrize("smarts,smiles,order", [
        ("O=C-O", "CC(=O)OC(=O)C", [6, 5, 4, 3, 2, 1, 0]),
        ("c1ccccc1", "c1ccccc1O", [6, 3, 1, 5, 0, 2, 4]),
        ("[$(C=O)]O", "CC(=O)OCC", [5, 0, 3, 1, 4, 2]),
        ("[R]", "C1CCC1CC", [4, 0, 5, 2, 1, 3]),
    ])
    def test_permuted_target(self, smarts: str, smiles: str, order: list[int]) -> None:
        mol = parse(smiles)
        permuted, new_index = permute(mol, order)

        original = SmartsQueryTool(smarts)
        original.matches(mol)
        relabeled = SmartsQueryTool(smarts)
        relabeled.matches(permuted)

        expected = {
            frozenset(new_index[i] for i in mapping)
            for mapping in original.get_unique_matching_atoms()
        }
        assert {frozenset(m) for m in relabeled.get_unique_matching_atoms()} == expected
        assert relabeled.count_matches() == original.count_matches()


class TestRecursiveEquivalence:
    """A one-atom recursive pattern matches like its inner primitive."""

    @pytest.mark.parametrize("recursive,plain,smiles", [
        ("[$([R])]", "[R]", "C1CC1CCc1ccccc1"),
        ("[$([!R])]", "[!R]", "C1CC1CCc1ccccc1"),
        ("[$([r5])]", "[r5]", "C1CCCC1CCc1ccccc1"),
        ("[$([r5])]", "[r5]", "c1ccc2[nH]ccc2c1"),
    ])
    def test_same_atoms(self, recursive: str, plain: str, smiles: str) -> None:
        expected = run_query(plain, smiles).get_matching_atoms()
        assert expected
        assert run_query(recursive, smiles).get_matching_atoms() == expected

    def test_ring_atoms_of_cyclopropyl_chain(self) -> None:
        """[$([R])] picks the three cyclopropane and six benzene atoms."""
        tool = run_query("[$([R])]", "C1CC1CCc1ccccc1")
        assert tool.get_matching_atoms() == [[0], [1], [2], [5], [6], [7], [8], [9], [10]]


class TestRDKitAgreement:
    """Unique match counts agree with RDKit substructure search."""

    PATTERNS = [
        "C=O", "[OX2H]", "c", "[#7]", "[R]", "[!R]", "C(=O)O", "a:a",
        "[CH2]", "cO", "[$(C=O)]", "[D3]", "[X4]",
    ]
    MOLECULES = [
        "CCO",
        "CC(=O)O",
        "CC(=O)Oc1ccccc1C(=O)O",
        "c1ccncc1",
        "c1ccc2[nH]ccc2c1",
        "c1ccc2ccccc2c1",
        "c1ccccc1O",
        "OC1CCCCC1",
    ]

    @pytest.mark.parametrize("smarts", PATTERNS)
    def test_unique_counts(self, smarts: str) -> None:
        pytest.importorskip("rdkit")
        from rdkit import Chem

        pattern = Chem.MolFromSmarts(smarts)
        tool = SmartsQueryTool(smarts)
        for smiles in self.MOLECULES:
            expected = len(Chem.MolFromSmiles(smiles).GetSubstructMatches(pattern))
            tool.matches(parse(smiles))
            assert len(tool.get_unique_matching_atoms()) == expected, smiles

    def test_aspirin_ring_split(self) -> None:
        """Six ring atoms and seven chain atoms in aspirin."""
        smiles = "CC(=O)Oc1ccccc1C(=O)O"
        assert len(run_query("[R]", smiles).get_unique_matching_atoms()) == 6
        assert len(run_query("[!R]", smiles).get_unique_matching_atoms()) == 7
