"""Ring detection and analysis."""

from chiraquery.rings.detection import (
    Ring,
    RingSet,
    find_all_rings,
    find_sssr,
)

__all__ = [
    "Ring",
    "RingSet",
    "find_all_rings",
    "find_sssr",
]
