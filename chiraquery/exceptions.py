"""Custom exceptions for chiraquery."""

from __future__ import annotations


class ChemError(Exception):
    """Base exception for chemistry-related errors."""
    pass


class ParseError(ChemError):
    """Error during SMILES parsing."""

    def __init__(self, message: str, smiles: str | None = None, position: int | None = None):
        self.message = message
        self.smiles = smiles
        self.position = position

        if smiles is not None and position is not None:
            super().__init__(f"{message}\n  {smiles}\n  {' ' * position}^")
        elif smiles is not None:
            super().__init__(f"{message} in: {smiles}")
        else:
            super().__init__(message)


class QueryCompilationError(ParseError):
    """Malformed SMARTS pattern text."""
    pass


class RingError(ChemError):
    """Invalid ring closure."""

    def __init__(self, message: str, ring_index: int | None = None):
        self.ring_index = ring_index
        super().__init__(message)


class PerceptionError(ChemError):
    """Structural annotation of a target molecule failed."""
    pass


class RingPerceptionError(PerceptionError):
    """Exhaustive ring search exceeded its limits."""

    def __init__(self, message: str, rings_found: int = 0):
        self.rings_found = rings_found
        super().__init__(message)


class AromaticityError(PerceptionError):
    """Error during aromaticity perception."""
    pass


class QueryGraphError(RuntimeError):
    """A query graph violates the matcher's structural contract.

    Raised for bugs in query graph construction (dangling atom
    references, duplicate bonds), never for malformed pattern text.
    """
    pass


class UnboundPredicateError(QueryGraphError):
    """A context-dependent predicate was evaluated before being bound."""
    pass
