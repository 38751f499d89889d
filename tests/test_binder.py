"""
Tests for binding context-dependent predicates to a target.
"""

from __future__ import annotations

import pytest

from chiraquery.exceptions import UnboundPredicateError
from chiraquery.match import bind_recursive_predicates
from chiraquery.query import HydrogenCountAtom, RecursiveAtom, compile_smarts


class TestBindCounts:
    """The binder reports how many predicates it bound."""

    @pytest.mark.parametrize("smarts,expected", [
        ("CC", 0),
        ("[C;R]", 0),
        ("[$(CO)]", 1),
        ("[!$(CO)]", 1),
        ("[CH2][$(C=O)]", 2),
        ("[$([CH3])]", 2),
        ("[$([$(C=O)]O)]", 2),
        ("[OH]", 1),
    ])
    def test_count(self, smarts: str, expected: int, annotated) -> None:
        query = compile_smarts(smarts)
        assert bind_recursive_predicates(query, annotated("CC(=O)O")) == expected

    def test_rebinding_counts_again(self, annotated) -> None:
        """Binding is repeated in full for each new target."""
        query = compile_smarts("[$(CO)]")
        assert bind_recursive_predicates(query, annotated("CO")) == 1
        assert bind_recursive_predicates(query, annotated("CCO")) == 1


class TestBoundState:
    """Bound predicates see the target they were bound to."""

    def test_recursive_target_attached(self, annotated) -> None:
        query = compile_smarts("[$(CO)]")
        target = annotated("CCO")
        bind_recursive_predicates(query, target)
        assert query.atoms[0].target is target

    def test_nested_recursive_bound(self, annotated) -> None:
        """Atoms of embedded queries are bound too."""
        query = compile_smarts("[$([$(C=O)]O)]")
        target = annotated("CC(=O)O")
        bind_recursive_predicates(query, target)
        inner = query.atoms[0].query.atoms[0]
        assert isinstance(inner, RecursiveAtom)
        assert inner.target is target

    def test_hydrogen_count_bound_through_logic(self, annotated) -> None:
        query = compile_smarts("[C;H3]")
        target = annotated("CC")
        bind_recursive_predicates(query, target)
        h_count = query.atoms[0].right
        assert isinstance(h_count, HydrogenCountAtom)
        assert h_count.target is target

    def test_rebinding_replaces_target(self, annotated) -> None:
        """A second bind clears anchors computed for the first target."""
        query = compile_smarts("[$(CO)]")
        first = annotated("CO")
        bind_recursive_predicates(query, first)
        predicate = query.atoms[0]
        assert predicate.matches(first.mol.atoms[0], first.atoms[0])

        second = annotated("CC")
        bind_recursive_predicates(query, second)
        assert not predicate.matches(second.mol.atoms[0], second.atoms[0])


class TestUnbound:
    """Evaluating before binding is an error."""

    def test_recursive(self, annotated) -> None:
        target = annotated("CO")
        predicate = compile_smarts("[$(CO)]").atoms[0]
        with pytest.raises(UnboundPredicateError):
            predicate.matches(target.mol.atoms[0], target.atoms[0])

    def test_hydrogen_count(self, annotated) -> None:
        target = annotated("C")
        predicate = compile_smarts("[H4]").atoms[0]
        with pytest.raises(UnboundPredicateError):
            predicate.matches(target.mol.atoms[0], target.atoms[0])
