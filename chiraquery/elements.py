"""
Chemical elements and constants.

This module provides element data, periodic table information, and the
lookup tables consumed by ring/aromaticity perception and by the SMARTS
atom predicates.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Final, FrozenSet


class BondOrder(IntEnum):
    """Bond order enumeration."""
    
    SINGLE = 1
    DOUBLE = 2
    TRIPLE = 3
    QUADRUPLE = 5
    
    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True, slots=True)
class Element:
    """Immutable element data.
    
    Attributes:
        atomic_number: Atomic number (proton count).
        symbol: Element symbol (e.g., "C", "Cl").
        name: Full element name.
        default_valence: Common valence for organic chemistry.
    """
    
    atomic_number: int
    symbol: str
    name: str
    default_valence: int | None = None
    
    # Class-level registry
    _by_symbol: ClassVar[dict[str, "Element"]] = {}
    _by_number: ClassVar[dict[int, "Element"]] = {}
    
    def __post_init__(self) -> None:
        Element._by_symbol[self.symbol] = self
        Element._by_symbol[self.symbol.lower()] = self  # Aromatic lowercase
        Element._by_number[self.atomic_number] = self
    
    @classmethod
    def from_symbol(cls, symbol: str) -> "Element | None":
        """Look up element by symbol (case-insensitive for single letters)."""
        if symbol in cls._by_symbol:
            return cls._by_symbol[symbol]
        # "cl" -> "Cl"
        capitalized = symbol.capitalize()
        return cls._by_symbol.get(capitalized)
    
    @classmethod
    def from_exact_symbol(cls, symbol: str) -> "Element | None":
        """Look up element by its properly capitalized symbol only."""
        elem = cls._by_symbol.get(symbol)
        if elem is None or elem.symbol != symbol:
            return None
        return elem
    
    @classmethod
    def from_atomic_number(cls, num: int) -> "Element | None":
        """Look up element by atomic number."""
        return cls._by_number.get(num)


# Common organic chemistry elements with default valences
_ELEMENTS_DATA: Final[list[tuple[int, str, str, int | None]]] = [
    # (atomic_number, symbol, name, default_valence)
    (1, "H", "Hydrogen", 1),
    (2, "He", "Helium", None),
    (3, "Li", "Lithium", 1),
    (4, "Be", "Beryllium", 2),
    (5, "B", "Boron", 3),
    (6, "C", "Carbon", 4),
    (7, "N", "Nitrogen", 3),
    (8, "O", "Oxygen", 2),
    (9, "F", "Fluorine", 1),
    (10, "Ne", "Neon", None),
    (11, "Na", "Sodium", 1),
    (12, "Mg", "Magnesium", 2),
    (13, "Al", "Aluminum", 3),
    (14, "Si", "Silicon", 4),
    (15, "P", "Phosphorus", 3),
    (16, "S", "Sulfur", 2),
    (17, "Cl", "Chlorine", 1),
    (18, "Ar", "Argon", None),
    (19, "K", "Potassium", 1),
    (20, "Ca", "Calcium", 2),
    (21, "Sc", "Scandium", None),
    (22, "Ti", "Titanium", None),
    (23, "V", "Vanadium", None),
    (24, "Cr", "Chromium", None),
    (25, "Mn", "Manganese", None),
    (26, "Fe", "Iron", None),
    (27, "Co", "Cobalt", None),
    (28, "Ni", "Nickel", None),
    (29, "Cu", "Copper", None),
    (30, "Zn", "Zinc", 2),
    (31, "Ga", "Gallium", 3),
    (32, "Ge", "Germanium", 4),
    (33, "As", "Arsenic", 3),
    (34, "Se", "Selenium", 2),
    (35, "Br", "Bromine", 1),
    (36, "Kr", "Krypton", None),
    (37, "Rb", "Rubidium", 1),
    (38, "Sr", "Strontium", 2),
    (39, "Y", "Yttrium", None),
    (40, "Zr", "Zirconium", None),
    (41, "Nb", "Niobium", None),
    (42, "Mo", "Molybdenum", None),
    (43, "Tc", "Technetium", None),
    (44, "Ru", "Ruthenium", None),
    (45, "Rh", "Rhodium", None),
    (46, "Pd", "Palladium", None),
    (47, "Ag", "Silver", 1),
    (48, "Cd", "Cadmium", 2),
    (49, "In", "Indium", 3),
    (50, "Sn", "Tin", 4),
    (51, "Sb", "Antimony", 3),
    (52, "Te", "Tellurium", 2),
    (53, "I", "Iodine", 1),
    (54, "Xe", "Xenon", None),
    (55, "Cs", "Cesium", 1),
    (56, "Ba", "Barium", 2),
    (57, "La", "Lanthanum", None),
    (58, "Ce", "Cerium", None),
    (59, "Pr", "Praseodymium", None),
    (60, "Nd", "Neodymium", None),
    (61, "Pm", "Promethium", None),
    (62, "Sm", "Samarium", None),
    (63, "Eu", "Europium", None),
    (64, "Gd", "Gadolinium", None),
    (65, "Tb", "Terbium", None),
    (66, "Dy", "Dysprosium", None),
    (67, "Ho", "Holmium", None),
    (68, "Er", "Erbium", None),
    (69, "Tm", "Thulium", None),
    (70, "Yb", "Ytterbium", None),
    (71, "Lu", "Lutetium", None),
    (72, "Hf", "Hafnium", None),
    (73, "Ta", "Tantalum", None),
    (74, "W", "Tungsten", None),
    (75, "Re", "Rhenium", None),
    (76, "Os", "Osmium", None),
    (77, "Ir", "Iridium", None),
    (78, "Pt", "Platinum", None),
    (79, "Au", "Gold", 1),
    (80, "Hg", "Mercury", 2),
    (81, "Tl", "Thallium", 3),
    (82, "Pb", "Lead", 4),
    (83, "Bi", "Bismuth", 3),
    (84, "Po", "Polonium", 2),
    (85, "At", "Astatine", 1),
    (86, "Rn", "Radon", None),
    (87, "Fr", "Francium", 1),
    (88, "Ra", "Radium", 2),
    (89, "Ac", "Actinium", None),
    (90, "Th", "Thorium", None),
    (91, "Pa", "Protactinium", None),
    (92, "U", "Uranium", None),
    (93, "Np", "Neptunium", None),
    (94, "Pu", "Plutonium", None),
    (95, "Am", "Americium", None),
    (96, "Cm", "Curium", None),
    (97, "Bk", "Berkelium", None),
    (98, "Cf", "Californium", None),
    (99, "Es", "Einsteinium", None),
    (100, "Fm", "Fermium", None),
    (101, "Md", "Mendelevium", None),
    (102, "No", "Nobelium", None),
    (103, "Lr", "Lawrencium", None),
    (104, "Rf", "Rutherfordium", None),
    (105, "Db", "Dubnium", None),
    (106, "Sg", "Seaborgium", None),
    (107, "Bh", "Bohrium", None),
    (108, "Hs", "Hassium", None),
    (109, "Mt", "Meitnerium", None),
    (110, "Ds", "Darmstadtium", None),
    (111, "Rg", "Roentgenium", None),
    (112, "Cn", "Copernicium", None),
    (113, "Nh", "Nihonium", None),
    (114, "Fl", "Flerovium", None),
    (115, "Mc", "Moscovium", None),
    (116, "Lv", "Livermorium", None),
    (117, "Ts", "Tennessine", None),
    (118, "Og", "Oganesson", None),
]


ELEMENTS: Final[tuple[Element, ...]] = tuple(
    Element(num, sym, name, valence)
    for num, sym, name, valence in _ELEMENTS_DATA
)

# Daylight "organic subset" - atoms that can appear without brackets
ORGANIC_SUBSET: Final[FrozenSet[str]] = frozenset({
    "B", "C", "N", "O", "P", "S", "F", "Cl", "Br", "I",
})

# Aromatic element symbols allowed in lowercase form
AROMATIC_SUBSET: Final[FrozenSet[str]] = frozenset({
    "b", "c", "n", "o", "p", "s", "as", "se",
})

# Two-letter elements in organic subset (need special handling in parser)
TWO_LETTER_ORGANIC: Final[FrozenSet[str]] = frozenset({"Cl", "Br"})

# Default valences for implicit hydrogen calculation
DEFAULT_VALENCES: Final[dict[int, int]] = {
    1: 1,   # H
    5: 3,   # B
    6: 4,   # C
    7: 3,   # N
    8: 2,   # O
    9: 1,   # F
    15: 3,  # P
    16: 2,  # S
    17: 1,  # Cl
    35: 1,  # Br
    53: 1,  # I
}

# Group-based valence table used for the per-atom `valence` annotation.
# Main group elements take their group number (mod 10 for groups 13-17);
# Cu, Mn and Co are the only transition metals listed.
STANDARD_VALENCES: Final[dict[str, int]] = {
    "H": 1, "Li": 1, "Na": 1, "K": 1, "Rb": 1, "Cs": 1, "Fr": 1,
    "Be": 2, "Mg": 2, "Ca": 2, "Sr": 2, "Ba": 2, "Ra": 2,
    "B": 3, "Al": 3, "Ga": 3, "In": 3, "Tl": 3,
    "C": 4, "Si": 4, "Ge": 4, "Sn": 4, "Pb": 4,
    "N": 5, "P": 5, "As": 5, "Sb": 5, "Bi": 5,
    "O": 6, "S": 6, "Se": 6, "Te": 6, "Po": 6,
    "F": 7, "Cl": 7, "Br": 7, "I": 7, "At": 7,
    "Cu": 2, "Mn": 2, "Co": 2,
}

# Outer (valence shell) electrons, used for pi electron counting
OUTER_ELECTRONS: Final[dict[int, int]] = {
    # Group 13
    5: 3, 13: 3, 31: 3, 49: 3, 81: 3,
    # Group 14
    6: 4, 14: 4, 32: 4, 50: 4, 82: 4,
    # Group 15
    7: 5, 15: 5, 33: 5, 51: 5, 83: 5,
    # Group 16
    8: 6, 16: 6, 34: 6, 52: 6, 84: 6,
    # Group 17 (halogens - not aromatic)
    9: 7, 17: 7, 35: 7, 53: 7, 85: 7,
}

# Pauling electronegativities, used to decide whether an exocyclic
# multiple bond pulls electrons out of a ring atom
ELECTRONEGATIVITY: Final[dict[int, float]] = {
    1: 2.20,   # H
    5: 2.04,   # B
    6: 2.55,   # C
    7: 3.04,   # N
    8: 3.44,   # O
    9: 3.98,   # F
    14: 1.90,  # Si
    15: 2.19,  # P
    16: 2.58,  # S
    17: 3.16,  # Cl
    33: 2.18,  # As
    34: 2.55,  # Se
    35: 2.96,  # Br
    52: 2.10,  # Te
    53: 2.66,  # I
}


def get_atomic_number(symbol: str) -> int:
    """Get atomic number for an element symbol.
    
    Args:
        symbol: Element symbol (e.g., "C", "cl", "Cl").
    
    Returns:
        Atomic number, or 0 if not found (wildcard/dummy atoms).
    """
    elem = Element.from_symbol(symbol)
    return elem.atomic_number if elem else 0


def get_default_valence(atomic_num: int) -> int | None:
    """Get default valence for an element.
    
    Args:
        atomic_num: Atomic number.
    
    Returns:
        Default valence, or None if not applicable.
    """
    return DEFAULT_VALENCES.get(atomic_num)


def get_standard_valence(symbol: str) -> int | None:
    """Get the group-based valence used for atom annotation.
    
    Aromatic lowercase symbols are normalized first, so "c" and "C"
    give the same answer.
    """
    elem = Element.from_symbol(symbol)
    if elem is None:
        return None
    return STANDARD_VALENCES.get(elem.symbol)


def is_aromatic_symbol(symbol: str) -> bool:
    """Check if symbol represents an aromatic atom."""
    return symbol in AROMATIC_SUBSET
