"""Aromaticity perception."""

from chiraquery.transform.aromaticity import (
    AromaticityPerceiver,
    ElectronDonorType,
    detect_aromaticity,
)

__all__ = [
    "AromaticityPerceiver",
    "ElectronDonorType",
    "detect_aromaticity",
]
