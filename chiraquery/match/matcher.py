"""
Subgraph matching of query graphs against annotated targets.

Multi-atom queries are matched with the VF2 subgraph monomorphism search
from networkx: every query atom maps to a distinct target atom, every
query bond maps onto a target bond, and all atom and bond predicates hold.
Target bonds without a query counterpart are allowed (the match is not
induced).

Single-atom queries have no bonds to map and are answered by testing the
predicate against each target atom directly.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import networkx as nx
from networkx.algorithms import isomorphism

from chiraquery.exceptions import QueryGraphError

if TYPE_CHECKING:
    from chiraquery.annotate import AnnotatedMolecule
    from chiraquery.query.graph import QueryGraph

logger = logging.getLogger(__name__)

BondMapping = list[tuple[int, int]]
"""(query bond index, target bond index) pairs ordered by query bond."""


def _target_graph(target: AnnotatedMolecule) -> nx.Graph:
    """Build a networkx graph carrying target atoms, bonds and records."""
    mol = target.mol
    graph = nx.Graph()
    for atom in mol.atoms:
        graph.add_node(atom.idx, atom=atom, record=target.atoms[atom.idx])
    for bond in mol.bonds:
        graph.add_edge(bond.atom1_idx, bond.atom2_idx, bond=bond, record=target.bonds[bond.idx])
    return graph


def _query_graph(query: QueryGraph) -> nx.Graph:
    """Build a networkx graph carrying query predicates."""
    graph = nx.Graph()
    for idx, predicate in enumerate(query.atoms):
        graph.add_node(idx, predicate=predicate)
    for bond in query.bonds:
        graph.add_edge(bond.atom1_idx, bond.atom2_idx, predicate=bond.predicate)
    return graph


def _node_match(target_attrs: dict, query_attrs: dict) -> bool:
    return query_attrs["predicate"].matches(target_attrs["atom"], target_attrs["record"])


def _edge_match(target_attrs: dict, query_attrs: dict) -> bool:
    return query_attrs["predicate"].matches(target_attrs["bond"], target_attrs["record"])


def match_single_atom(target: AnnotatedMolecule, query: QueryGraph) -> list[int]:
    """Indices of target atoms satisfying a one-atom query, in index order.

    Raises:
        QueryGraphError: If the query does not have exactly one atom.
    """
    if query.num_atoms != 1:
        raise QueryGraphError(f"Single-atom matching needs a one-atom query, got {query.num_atoms}")

    predicate = query.atoms[0]
    mol = target.mol
    return [atom.idx for atom in mol.atoms if predicate.matches(atom, target.atoms[atom.idx])]


def find_atom_maps(target: AnnotatedMolecule, query: QueryGraph) -> list[dict[int, int]]:
    """Enumerate every query atom -> target atom embedding.

    Args:
        target: Annotated target, with context-dependent predicates of
            the query already bound to it.
        query: Query graph.

    Returns:
        One dict per embedding, mapping query atom index to target atom
        index. The order is deterministic for a given target and query.

    Raises:
        QueryGraphError: If the query graph is structurally invalid.
    """
    query.validate()
    if query.num_atoms == 0:
        return []

    matcher = isomorphism.GraphMatcher(
        _target_graph(target),
        _query_graph(query),
        node_match=_node_match,
        edge_match=_edge_match,
    )
    maps = [
        {q: t for t, q in mapping.items()}
        for mapping in matcher.subgraph_monomorphisms_iter()
    ]
    logger.debug("Query %r: %d atom maps", query.smarts, len(maps))
    return maps


def anchor_atoms(target: AnnotatedMolecule, query: QueryGraph) -> list[int]:
    """Target atoms that the first query atom maps to in some match.

    Used to evaluate recursive $(...) predicates.
    """
    if query.num_atoms == 1:
        return match_single_atom(target, query)
    return sorted({mapping[0] for mapping in find_atom_maps(target, query)})


def find_all(target: AnnotatedMolecule, query: QueryGraph) -> list[BondMapping]:
    """Enumerate the distinct bond-level occurrences of a query.

    Atom embeddings that map every query bond onto the same target bond
    collapse into one bond mapping. Mappings are returned in first-seen
    order.

    Raises:
        QueryGraphError: If the query has no bonds or is structurally
            invalid.
    """
    if query.num_bonds == 0:
        raise QueryGraphError("Bond-based matching needs a query with at least one bond")

    mol = target.mol
    seen: set[tuple[tuple[int, int], ...]] = set()
    mappings: list[BondMapping] = []

    for atom_map in find_atom_maps(target, query):
        pairs: BondMapping = []
        for qbond in query.bonds:
            tbond = mol.get_bond_between(atom_map[qbond.atom1_idx], atom_map[qbond.atom2_idx])
            if tbond is None:
                raise QueryGraphError(f"Query bond {qbond.idx} has no target bond in an embedding")
            pairs.append((qbond.idx, tbond.idx))

        key = tuple(pairs)
        if key not in seen:
            seen.add(key)
            mappings.append(pairs)

    logger.debug("Query %r: %d bond mappings", query.smarts, len(mappings))
    return mappings
