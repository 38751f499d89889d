"""SMARTS query compilation and query graph types."""

from chiraquery.query.compiler import SmartsCompiler, compile_smarts
from chiraquery.query.graph import QueryBond, QueryGraph
from chiraquery.query.predicates import (
    AnyAtom,
    AnyBond,
    AromaticBond,
    AromaticityAtom,
    AtomPredicate,
    BondPredicate,
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

__all__ = [
    "SmartsCompiler",
    "compile_smarts",
    "QueryBond",
    "QueryGraph",
    # Atom predicates
    "AtomPredicate",
    "AnyAtom",
    "AromaticityAtom",
    "ChargeAtom",
    "ConnectivityAtom",
    "DegreeAtom",
    "ElementAtom",
    "HydrogenCountAtom",
    "ImplicitHydrogenAtom",
    "IsotopeAtom",
    "LogicalAtom",
    "RecursiveAtom",
    "RingConnectivityAtom",
    "RingCountAtom",
    "RingSizeAtom",
    "ValenceAtom",
    # Bond predicates
    "BondPredicate",
    "AnyBond",
    "AromaticBond",
    "LogicalBond",
    "OrderBond",
    "RingBond",
    "SingleOrAromaticBond",
    "LogicalOperator",
]
