"""Binding of context-dependent query predicates to a target."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chiraquery.annotate import AnnotatedMolecule
    from chiraquery.query.graph import QueryGraph

logger = logging.getLogger(__name__)


def bind_recursive_predicates(query: QueryGraph, target: AnnotatedMolecule) -> int:
    """Bind recursive and hydrogen-count predicates to a target.

    Every query atom is visited in index order. Logical predicates forward
    the target to their left operand, then their right one; recursive
    predicates also bind the atoms of their embedded query. Other
    predicates ignore the call.

    Must run after `annotate` and before matching, once per target.

    Args:
        query: Compiled query graph (modified in place).
        target: Annotated target molecule.

    Returns:
        Number of predicates that were bound.
    """
    bound = sum(predicate.bind(target) for predicate in query.atoms)
    logger.debug("Bound %d predicates of %r", bound, query.smarts)
    return bound
