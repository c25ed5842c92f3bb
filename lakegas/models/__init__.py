"""Closed-form dissolved-gas formulas."""

from .formulas import (
    dissolved_concentration,
    equilibrium_concentration,
    headspace_mole_fraction,
    mims_concentration,
    mims_signal_ratio,
    saturation_ratio,
    temperature_factor,
)

__all__ = [
    "dissolved_concentration",
    "equilibrium_concentration",
    "headspace_mole_fraction",
    "mims_concentration",
    "mims_signal_ratio",
    "saturation_ratio",
    "temperature_factor",
]
