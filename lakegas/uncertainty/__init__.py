"""
Monte Carlo uncertainty propagation for dissolved-gas measurements.

This package holds the value objects shared by the simulation engine and
the summarizer:
- Scenario: which quantity, instrument tier, thermometer tier, headspace mode
  and mixing ratio to simulate, and which inputs to perturb
- SimulationResult: the simulated distribution and its summary statistics
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple

import numpy as np

from ..config import (
    AMBIENT_AIR,
    DEFAULT_DRAW_COUNT,
    EQUILIBRIUM,
    HEADSPACE_INSTRUMENTS,
    HEADSPACE_MODES,
    INSTRUMENT_TIERS,
    MIMS_INSTRUMENTS,
    QUANTITIES,
    SATURATION_RATIO,
    THERMOMETER_TIERS,
    VARIABLES,
)
from ..exceptions import ConfigurationError


@dataclass(frozen=True)
class Scenario:
    quantity: str = SATURATION_RATIO
    instrument_tier: str = "standard"
    thermometer_tier: str = "standard"
    headspace_mode: Optional[str] = AMBIENT_AIR
    mixing_ratio: Optional[float] = 0.25
    perturbed: Optional[FrozenSet[str]] = None
    draw_count: int = DEFAULT_DRAW_COUNT
    seed: Optional[int] = None

    @property
    def is_mims(self) -> bool:
        return self.instrument_tier in MIMS_INSTRUMENTS

    @property
    def uses_headspace(self) -> bool:
        return not self.is_mims and self.quantity != EQUILIBRIUM

    @property
    def key(self) -> str:
        if self.uses_headspace:
            setup = f"{self.headspace_mode}/rm={self.mixing_ratio:g}"
        elif self.is_mims:
            setup = "mims"
        else:
            setup = "air"
        key = f"{self.quantity}/{self.instrument_tier}/thermometer={self.thermometer_tier}/{setup}"
        if self.perturbed is not None:
            key += "/perturb=" + ",".join(sorted(self.perturbed))
        return key

    def relevant_variables(self) -> Tuple[str, ...]:
        """Inputs the scenario's formula reads, in canonical order."""
        if self.quantity == EQUILIBRIUM:
            names = {"pressure", "temperature", "air_mole_fraction"}
        elif self.is_mims:
            names = {
                "pressure",
                "temperature",
                "air_mole_fraction",
                "sample_pressure",
                "sample_temperature",
                "ratio_sample",
                "ratio_standard",
            }
        else:
            names = {"pressure", "temperature", "water_volume", "headspace_mole_fraction"}
            if self.headspace_mode == AMBIENT_AIR or self.quantity == SATURATION_RATIO:
                names.add("air_mole_fraction")
        return tuple(name for name in VARIABLES if name in names)

    def active_variables(self) -> Tuple[str, ...]:
        relevant = self.relevant_variables()
        if self.perturbed is None:
            return relevant
        return tuple(name for name in relevant if name in self.perturbed)

    def validate(self) -> None:
        if self.quantity not in QUANTITIES:
            raise ConfigurationError(f"Unknown quantity '{self.quantity}'.")
        if self.instrument_tier not in INSTRUMENT_TIERS:
            raise ConfigurationError(f"Unknown instrument tier '{self.instrument_tier}'.")
        if self.thermometer_tier not in THERMOMETER_TIERS:
            raise ConfigurationError(f"Unknown thermometer tier '{self.thermometer_tier}'.")
        if isinstance(self.draw_count, bool) or not isinstance(self.draw_count, int) or self.draw_count <= 0:
            raise ConfigurationError("draw_count must be a positive integer.")
        if self.quantity == EQUILIBRIUM and self.is_mims:
            raise ConfigurationError("Equilibrium concentration is simulated with GC tiers only.")
        if self.uses_headspace:
            if self.instrument_tier not in HEADSPACE_INSTRUMENTS:
                raise ConfigurationError(f"'{self.instrument_tier}' is not a headspace instrument.")
            if self.headspace_mode not in HEADSPACE_MODES:
                raise ConfigurationError(f"Unknown headspace mode '{self.headspace_mode}'.")
            if self.mixing_ratio is None or not 0.0 < self.mixing_ratio < 1.0:
                raise ConfigurationError("mixing_ratio must be between 0 and 1 (exclusive).")
        if self.perturbed is not None:
            unknown = sorted(name for name in self.perturbed if name not in VARIABLES)
            if unknown:
                raise ConfigurationError(f"Unknown perturbed variables: {unknown}")


@dataclass
class SimulationResult:
    """Container for one scenario's simulated distribution and its summary."""

    scenario_key: str
    quantity: str
    true_value: float
    simulated: np.ndarray
    absolute_error: np.ndarray
    sd: float
    normal_half_width: float
    normal_interval: Tuple[float, float]
    empirical_offsets: Tuple[float, float]
    empirical_interval: Tuple[float, float]
    mean_error: float
    skewness: float
    draw_count: int
    perturbed: Tuple[str, ...] = field(default_factory=tuple)
    unit: str = ""

    @property
    def threshold(self) -> float:
        """97.5th percentile absolute error, used as the classification half-width."""
        return self.empirical_offsets[1]


__all__ = [
    "Scenario",
    "SimulationResult",
]
