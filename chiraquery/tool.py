"""
SMARTS query tool.

`SmartsQueryTool` holds one compiled pattern and matches it against any
number of target molecules:

    >>> tool = SmartsQueryTool("O=C-O")
    >>> tool.matches(parse("CC(=O)OC(=O)C"))
    True
    >>> tool.count_matches()
    2
    >>> tool.get_unique_matching_atoms()
    [[1, 2, 3], [3, 4, 5]]

Every call to `matches` re-annotates the target, so results always
reflect the molecule as passed, including changes made since the
previous call. A tool instance is not safe to share between threads.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from chiraquery.annotate import AnnotatedMolecule, annotate
from chiraquery.config import AnnotatorConfig
from chiraquery.match import (
    AtomMapping,
    bind_recursive_predicates,
    find_all,
    match_single_atom,
    resolve,
    unique_of,
)
from chiraquery.query import QueryGraph, compile_smarts

if TYPE_CHECKING:
    from chiraquery.types import Molecule

logger = logging.getLogger(__name__)


class SmartsQueryTool:
    """Match a SMARTS pattern against molecules and report atom mappings.

    Args:
        smarts: SMARTS pattern.
        config: Annotation limits. Defaults apply when omitted.

    Raises:
        QueryCompilationError: If the pattern is malformed.
    """

    def __init__(self, smarts: str, config: AnnotatorConfig | None = None) -> None:
        self._config = config
        self._query: QueryGraph = compile_smarts(smarts)
        self._smarts = smarts
        self._matches: list[AtomMapping] | None = None
        self._annotations: AnnotatedMolecule | None = None

    @property
    def smarts(self) -> str:
        """The current SMARTS pattern."""
        return self._smarts

    @smarts.setter
    def smarts(self, smarts: str) -> None:
        self.set_smarts(smarts)

    @property
    def query(self) -> QueryGraph:
        """The compiled query graph."""
        return self._query

    @property
    def annotations(self) -> AnnotatedMolecule | None:
        """Annotation table of the most recent target, or None."""
        return self._annotations

    def set_smarts(self, smarts: str) -> None:
        """Replace the pattern.

        The new pattern is compiled before anything is changed, so a
        malformed pattern leaves the tool as it was. Previous match
        results are discarded.

        Raises:
            QueryCompilationError: If the pattern is malformed.
        """
        query = compile_smarts(smarts)
        self._smarts = smarts
        self._query = query
        self._matches = None
        self._annotations = None

    def matches(self, mol: Molecule) -> bool:
        """Search the molecule for the pattern.

        Results are kept for `count_matches`, `get_matching_atoms` and
        `get_unique_matching_atoms`.

        Returns:
            True if the pattern occurs at least once.

        Raises:
            RingPerceptionError: If ring search exceeds its limits.
            AromaticityError: If aromaticity perception exceeds its limits.
        """
        query = self.query
        target = annotate(mol, self._config)
        bind_recursive_predicates(query, target)

        if query.num_atoms == 1:
            found = [[atom_idx] for atom_idx in match_single_atom(target, query)]
        else:
            found = resolve(find_all(target, query), mol)

        self._annotations = target
        self._matches = found
        logger.debug("%r matched %d times", self._smarts, len(found))
        return len(found) > 0

    def count_matches(self) -> int:
        """Number of matches found by the last `matches` call (0 before any)."""
        if self._matches is None:
            return 0
        return len(self._matches)

    def get_matching_atoms(self) -> list[AtomMapping]:
        """Atom indices of each match, in match order.

        A one-bond pattern matching two atoms of the same element is
        reported twice, once per orientation.
        """
        if self._matches is None:
            return []
        return [list(mapping) for mapping in self._matches]

    def get_unique_matching_atoms(self) -> list[AtomMapping]:
        """Matches with duplicate atom sets removed, each sorted."""
        if self._matches is None:
            return []
        return unique_of(self._matches)

    def __repr__(self) -> str:
        return f"SmartsQueryTool({self._smarts!r})"
