"""
Tests for the SMARTS compiler.

Covers predicate trees built from atom and bond expressions, operator
precedence, ring closures, recursion and malformed patterns.
"""

from __future__ import annotations

import pytest

from chiraquery.exceptions import QueryCompilationError
from chiraquery.query import compile_smarts
from chiraquery.query.predicates import (
    AnyAtom,
    AnyBond,
    AromaticBond,
    AromaticityAtom,
    ChargeAtom,
    ConnectivityAtom,
    DegreeAtom,
    ElementAtom,
    HydrogenCountAtom,
    ImplicitHydrogenAtom,
    IsotopeAtom,
    LogicalAtom,
    LogicalBond,
    LogicalOperator,
    OrderBond,
    RecursiveAtom,
    RingBond,
    RingConnectivityAtom,
    RingCountAtom,
    RingSizeAtom,
    SingleOrAromaticBond,
    ValenceAtom,
)

AND = LogicalOperator.AND
OR = LogicalOperator.OR
NOT = LogicalOperator.NOT


def atom(smarts: str):
    """Compile a single-atom pattern and return its predicate."""
    query = compile_smarts(smarts)
    assert query.num_atoms == 1
    return query.atoms[0]


def bond(smarts: str):
    """Compile a two-atom pattern and return its bond predicate."""
    query = compile_smarts(smarts)
    assert query.num_bonds == 1
    return query.bonds[0].predicate


class TestOrganicAtoms:
    """Atoms written outside brackets."""

    @pytest.mark.parametrize("smarts,expected", [
        ("C", ElementAtom(6, False)),
        ("c", ElementAtom(6, True)),
        ("N", ElementAtom(7, False)),
        ("o", ElementAtom(8, True)),
        ("Cl", ElementAtom(17, False)),
        ("Br", ElementAtom(35, False)),
        ("*", AnyAtom()),
        ("a", AromaticityAtom(True)),
        ("A", AromaticityAtom(False)),
    ])
    def test_organic(self, smarts: str, expected) -> None:
        """Organic subset symbols and wildcards."""
        assert atom(smarts) == expected

    def test_atoms_in_text_order(self) -> None:
        """Query atoms are numbered as written."""
        query = compile_smarts("OCN")
        assert [p.atomic_number for p in query.atoms] == [8, 6, 7]


class TestBracketPrimitives:
    """Primitives inside brackets."""

    @pytest.mark.parametrize("smarts,expected", [
        ("[#6]", ElementAtom(6, None)),
        ("[C]", ElementAtom(6, False)),
        ("[c]", ElementAtom(6, True)),
        ("[se]", ElementAtom(34, True)),
        ("[as]", ElementAtom(33, True)),
        ("[Na]", ElementAtom(11, False)),
        ("[Cl]", ElementAtom(17, False)),
        ("[*]", AnyAtom()),
        ("[a]", AromaticityAtom(True)),
        ("[A]", AromaticityAtom(False)),
        ("[R]", RingCountAtom(None)),
        ("[R0]", RingCountAtom(0)),
        ("[R2]", RingCountAtom(2)),
        ("[r]", RingSizeAtom(None)),
        ("[r6]", RingSizeAtom(6)),
        ("[x]", RingConnectivityAtom(None)),
        ("[x2]", RingConnectivityAtom(2)),
        ("[X]", ConnectivityAtom(1)),
        ("[X4]", ConnectivityAtom(4)),
        ("[D]", DegreeAtom(1)),
        ("[D3]", DegreeAtom(3)),
        ("[v]", ValenceAtom(1)),
        ("[v4]", ValenceAtom(4)),
        ("[h]", ImplicitHydrogenAtom(None)),
        ("[h2]", ImplicitHydrogenAtom(2)),
        ("[+]", ChargeAtom(1)),
        ("[++]", ChargeAtom(2)),
        ("[-]", ChargeAtom(-1)),
        ("[-2]", ChargeAtom(-2)),
        ("[13]", IsotopeAtom(13)),
    ])
    def test_primitive(self, smarts: str, expected) -> None:
        """Each primitive compiles to its predicate."""
        assert atom(smarts) == expected

    def test_hydrogen_count(self) -> None:
        """H after an element is a hydrogen count."""
        predicate = atom("[CH2]")
        assert predicate.op is AND
        assert predicate.left == ElementAtom(6, False)
        assert isinstance(predicate.right, HydrogenCountAtom)
        assert predicate.right.count == 2

    def test_bare_h_count_defaults_to_one(self) -> None:
        """[OH] means one hydrogen."""
        predicate = atom("[OH]")
        assert isinstance(predicate.right, HydrogenCountAtom)
        assert predicate.right.count == 1

    @pytest.mark.parametrize("smarts", ["[H]", "[H+]", "[H:1]"])
    def test_hydrogen_element(self, smarts: str) -> None:
        """A lone H in brackets is the element."""
        predicate = atom(smarts)
        if isinstance(predicate, LogicalAtom):
            predicate = predicate.left
        assert predicate == ElementAtom(1, None)

    def test_deuterium(self) -> None:
        """[2H] is hydrogen with mass 2."""
        assert atom("[2H]") == LogicalAtom(AND, IsotopeAtom(2), ElementAtom(1, None))

    def test_superheavy_pair_not_element(self) -> None:
        """[Nh] reads as nitrogen with implicit hydrogens."""
        assert atom("[Nh]") == LogicalAtom(AND, ElementAtom(7, False), ImplicitHydrogenAtom(None))

    def test_atom_class_ignored(self) -> None:
        """[C:1] is plain carbon."""
        assert atom("[C:1]") == ElementAtom(6, False)

    def test_chirality_ignored(self) -> None:
        """Chirality marks compile to wildcards."""
        predicate = atom("[C@@]")
        assert predicate == LogicalAtom(AND, ElementAtom(6, False), AnyAtom())


class TestOperators:
    """Logical operators and precedence."""

    def test_not(self) -> None:
        assert atom("[!C]") == LogicalAtom(NOT, ElementAtom(6, False))

    def test_double_not(self) -> None:
        assert atom("[!!C]") == LogicalAtom(NOT, LogicalAtom(NOT, ElementAtom(6, False)))

    def test_or(self) -> None:
        assert atom("[C,N]") == LogicalAtom(OR, ElementAtom(6, False), ElementAtom(7, False))

    def test_low_and(self) -> None:
        assert atom("[C;R]") == LogicalAtom(AND, ElementAtom(6, False), RingCountAtom(None))

    def test_implicit_and(self) -> None:
        """Juxtaposed primitives are joined by high-precedence and."""
        assert atom("[CR]") == atom("[C&R]")

    def test_high_and_binds_tighter_than_or(self) -> None:
        """[C&!R,N] is (C and not R) or N."""
        expected = LogicalAtom(
            OR,
            LogicalAtom(AND, ElementAtom(6, False), LogicalAtom(NOT, RingCountAtom(None))),
            ElementAtom(7, False),
        )
        assert atom("[C&!R,N]") == expected

    def test_or_binds_tighter_than_low_and(self) -> None:
        """[C,N;R] is (C or N) and R."""
        expected = LogicalAtom(
            AND,
            LogicalAtom(OR, ElementAtom(6, False), ElementAtom(7, False)),
            RingCountAtom(None),
        )
        assert atom("[C,N;R]") == expected

    def test_left_associative(self) -> None:
        """Chains of one operator group to the left."""
        expected = LogicalAtom(
            OR,
            LogicalAtom(OR, ElementAtom(6, False), ElementAtom(7, False)),
            ElementAtom(8, False),
        )
        assert atom("[C,N,O]") == expected


class TestBonds:
    """Bond expressions."""

    @pytest.mark.parametrize("smarts,expected", [
        ("CC", SingleOrAromaticBond()),
        ("C-C", OrderBond(1)),
        ("C=C", OrderBond(2)),
        ("C#C", OrderBond(3)),
        ("c:c", AromaticBond()),
        ("C~C", AnyBond()),
        ("C@C", RingBond()),
        ("C/C", OrderBond(1)),
        ("C\\C", OrderBond(1)),
    ])
    def test_primitive(self, smarts: str, expected) -> None:
        assert bond(smarts) == expected

    def test_bond_operators(self) -> None:
        """Bond expressions share the atom operator grammar."""
        assert bond("C-,=C") == LogicalBond(OR, OrderBond(1), OrderBond(2))
        assert bond("C!@C") == LogicalBond(NOT, RingBond())
        assert bond("C-;@C") == LogicalBond(AND, OrderBond(1), RingBond())
        assert bond("C-@C") == LogicalBond(AND, OrderBond(1), RingBond())

    def test_bond_endpoints(self) -> None:
        """Bonds join consecutive atoms."""
        query = compile_smarts("CO")
        assert (query.bonds[0].atom1_idx, query.bonds[0].atom2_idx) == (0, 1)


class TestStructure:
    """Branches, rings and components."""

    def test_branches(self) -> None:
        """Branch atoms bond to the branch point."""
        query = compile_smarts("CC(C)C")
        pairs = [(b.atom1_idx, b.atom2_idx) for b in query.bonds]
        assert pairs == [(0, 1), (1, 2), (1, 3)]

    def test_nested_branches(self) -> None:
        query = compile_smarts("C(C(C)C)C")
        pairs = [(b.atom1_idx, b.atom2_idx) for b in query.bonds]
        assert pairs == [(0, 1), (1, 2), (1, 3), (0, 4)]

    def test_ring_closure(self) -> None:
        """Ring closure digits bond back to the opening atom."""
        query = compile_smarts("C1CC1")
        assert query.num_bonds == 3
        assert query.get_bond_between(0, 2) is not None

    def test_ring_closure_bond_at_opening(self) -> None:
        query = compile_smarts("C=1CC1")
        assert query.get_bond_between(0, 2).predicate == OrderBond(2)

    def test_ring_closure_bond_at_closing(self) -> None:
        query = compile_smarts("C1CC=1")
        assert query.get_bond_between(0, 2).predicate == OrderBond(2)

    def test_percent_ring_closure(self) -> None:
        assert compile_smarts("C%12CC%12").num_bonds == 3

    def test_benzene(self) -> None:
        query = compile_smarts("c1ccccc1")
        assert query.num_atoms == 6
        assert query.num_bonds == 6
        assert all(b.predicate == SingleOrAromaticBond() for b in query.bonds)

    def test_dot_separated_components(self) -> None:
        """Components each need at least one bond."""
        query = compile_smarts("CC.OO")
        assert query.num_atoms == 4
        assert query.num_bonds == 2
        assert query.get_bond_between(1, 2) is None

    def test_pattern_text_kept(self) -> None:
        assert compile_smarts("C=O").smarts == "C=O"


class TestRecursion:
    """Recursive $(...) primitives."""

    def test_recursive(self) -> None:
        predicate = atom("[$(CO)]")
        assert isinstance(predicate, RecursiveAtom)
        assert predicate.smarts == "CO"
        assert predicate.query.num_atoms == 2
        assert predicate.query.num_bonds == 1

    def test_recursive_with_brackets_and_branches(self) -> None:
        predicate = atom("[$(C(=O)[OH])]")
        assert predicate.smarts == "C(=O)[OH]"
        assert predicate.query.num_atoms == 3

    def test_nested_recursion(self) -> None:
        predicate = atom("[$([$(C=O)]O)]")
        inner = predicate.query.atoms[0]
        assert isinstance(inner, RecursiveAtom)
        assert inner.smarts == "C=O"

    def test_recursive_in_expression(self) -> None:
        predicate = atom("[C;!$(C=O)]")
        assert predicate.op is AND
        assert predicate.right.op is NOT
        assert isinstance(predicate.right.left, RecursiveAtom)


class TestErrors:
    """Malformed patterns raise QueryCompilationError."""

    @pytest.mark.parametrize("smarts", [
        "",
        "   ",
        "C(",
        "C)",
        "(C)",
        "C1CC",
        "C11",
        "[C",
        "[]",
        "[Q]",
        "[#]",
        "C=",
        "=C",
        "C(=)C",
        "C=.C",
        "[$(C]",
        "[$C]",
        "C.C",
        "Xy",
    ])
    def test_malformed(self, smarts: str) -> None:
        with pytest.raises(QueryCompilationError):
            compile_smarts(smarts)

    def test_error_position(self) -> None:
        """Errors carry the offending position."""
        with pytest.raises(QueryCompilationError) as exc_info:
            compile_smarts("CC)")
        assert exc_info.value.position == 2
        assert exc_info.value.smiles == "CC)"

    def test_nested_error_position(self) -> None:
        """Errors inside $(...) point into the outer pattern."""
        with pytest.raises(QueryCompilationError) as exc_info:
            compile_smarts("[$(Q)]")
        assert exc_info.value.position == 3

    def test_unclosed_ring_reported(self) -> None:
        with pytest.raises(QueryCompilationError, match="Unclosed ring 1"):
            compile_smarts("C1CC")
