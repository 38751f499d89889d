"""Substructure matching: predicate binding, subgraph search, result mapping."""

from chiraquery.match.binder import bind_recursive_predicates
from chiraquery.match.matcher import (
    BondMapping,
    anchor_atoms,
    find_all,
    find_atom_maps,
    match_single_atom,
)
from chiraquery.match.resolver import AtomMapping, resolve, unique_of

__all__ = [
    "AtomMapping",
    "BondMapping",
    "anchor_atoms",
    "bind_recursive_predicates",
    "find_all",
    "find_atom_maps",
    "match_single_atom",
    "resolve",
    "unique_of",
]
