"""
Chiraquery - SMARTS substructure search in Python.

Parses SMILES targets, compiles SMARTS patterns and enumerates every
occurrence of a pattern in a molecule.

    >>> from chiraquery import parse, SmartsQueryTool
    >>> tool = SmartsQueryTool("[OX2H]")
    >>> tool.matches(parse("CCO"))
    True
    >>> tool.get_matching_atoms()
    [[2]]

Submodules:
    chiraquery.rings     - Ring detection (all rings, SSSR)
    chiraquery.transform - Aromaticity perception
    chiraquery.query     - SMARTS compilation and predicates
    chiraquery.match     - Predicate binding, subgraph matching, mappings
"""

__version__ = "0.1.0"

# Core types
from chiraquery.types import Atom, Bond, Molecule

# Parsing
from chiraquery.parser import parse, SmilesParser

# Exceptions
from chiraquery.exceptions import (
    AromaticityError,
    ChemError,
    ParseError,
    PerceptionError,
    QueryCompilationError,
    QueryGraphError,
    RingError,
    RingPerceptionError,
    UnboundPredicateError,
)

# Element data
from chiraquery.elements import Element, BondOrder, ORGANIC_SUBSET, AROMATIC_SUBSET

# Annotation and configuration
from chiraquery.config import AnnotatorConfig, DEFAULT_CONFIG
from chiraquery.annotate import AnnotatedMolecule, AtomRecord, BondRecord, annotate

# Queries
from chiraquery.query import QueryGraph, compile_smarts
from chiraquery.tool import SmartsQueryTool

# Submodules
from chiraquery import rings, transform, query, match

__all__ = [
    # Types
    "Atom", "Bond", "Molecule",
    # Parsing
    "parse", "SmilesParser",
    # Exceptions
    "ChemError", "ParseError", "QueryCompilationError", "RingError",
    "PerceptionError", "RingPerceptionError", "AromaticityError",
    "QueryGraphError", "UnboundPredicateError",
    # Elements
    "Element", "BondOrder", "ORGANIC_SUBSET", "AROMATIC_SUBSET",
    # Annotation
    "AnnotatorConfig", "DEFAULT_CONFIG",
    "AnnotatedMolecule", "AtomRecord", "BondRecord", "annotate",
    # Queries
    "QueryGraph", "compile_smarts", "SmartsQueryTool",
    # Submodules
    "rings", "transform", "query", "match",
]
