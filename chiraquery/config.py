"""Configuration for target annotation.

The limits here bound the exhaustive ring search and the fused-ring
aromaticity pass, the two steps whose cost grows combinatorially with
ring density.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class AnnotatorConfig:
    """Limits applied while annotating a target molecule."""

    max_rings: int | None = 10000
    """Abort exhaustive ring search once more rings than this are found."""

    ring_search_timeout: float | None = 10.0
    """Wall-clock seconds allowed for ring search. None disables the check."""

    max_ring_size: int | None = None
    """Ignore cycles longer than this. None keeps every simple cycle."""

    max_aromatic_combinations: int = 100000
    """Ring combinations tried per fused system before giving up."""

    def __post_init__(self) -> None:
        if self.max_rings is not None and self.max_rings < 1:
            raise ValueError(f"max_rings must be positive, got {self.max_rings}")
        if self.ring_search_timeout is not None and self.ring_search_timeout <= 0:
            raise ValueError(
                f"ring_search_timeout must be positive, got {self.ring_search_timeout}"
            )
        if self.max_ring_size is not None and self.max_ring_size < 3:
            raise ValueError(f"max_ring_size must be at least 3, got {self.max_ring_size}")
        if self.max_aromatic_combinations < 1:
            raise ValueError(
                f"max_aromatic_combinations must be positive, got {self.max_aromatic_combinations}"
            )

    def with_overrides(self, **changes) -> "AnnotatorConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


DEFAULT_CONFIG = AnnotatorConfig()
