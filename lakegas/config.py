"""Configuration defaults for lakegas."""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import yaml

from .exceptions import ConfigurationError

AMBIENT_AIR = "ambient_air"
PURE_GAS = "pure_gas"
HEADSPACE_MODES = [AMBIENT_AIR, PURE_GAS]

HEADSPACE_INSTRUMENTS = ["standard", "high_precision_gc"]
MIMS_INSTRUMENTS = ["mims_standard_gc", "mims_high_precision_gc"]
INSTRUMENT_TIERS = HEADSPACE_INSTRUMENTS + MIMS_INSTRUMENTS

# GC tier that calibrates the air reading for each instrument tier.
GC_TIER: Dict[str, str] = {
    "standard": "standard",
    "high_precision_gc": "high_precision",
    "mims_standard_gc": "standard",
    "mims_high_precision_gc": "high_precision",
}

THERMOMETER_TIERS = ["standard", "high_precision"]

CONCENTRATION = "concentration"
EQUILIBRIUM = "equilibrium"
SATURATION_RATIO = "saturation_ratio"
QUANTITIES = [CONCENTRATION, EQUILIBRIUM, SATURATION_RATIO]

DEFAULT_MIXING_RATIOS = [0.1, 0.25, 0.5, 0.9]
DEFAULT_DRAW_COUNT = 100_000

VARIABLES = [
    "pressure",
    "temperature",
    "water_volume",
    "headspace_mole_fraction",
    "air_mole_fraction",
    "sample_pressure",
    "sample_temperature",
    "ratio_sample",
    "ratio_standard",
]


@dataclass
class Config:
    draw_count: int = DEFAULT_DRAW_COUNT
    headspace_modes: List[str] = field(default_factory=lambda: HEADSPACE_MODES.copy())
    instrument_tiers: List[str] = field(default_factory=lambda: INSTRUMENT_TIERS.copy())
    thermometer_tiers: List[str] = field(default_factory=lambda: THERMOMETER_TIERS.copy())
    mixing_ratios: List[float] = field(default_factory=lambda: DEFAULT_MIXING_RATIOS.copy())
    quantities: List[str] = field(default_factory=lambda: [CONCENTRATION, SATURATION_RATIO])
    perturbed_variables: Optional[List[str]] = None
    random_state: Optional[int] = None
    paired_draws: bool = False
    workers: int = 1
    calibration_path: str = ""

    def validate(self) -> None:
        if isinstance(self.draw_count, bool) or not isinstance(self.draw_count, int):
            raise ConfigurationError("draw_count must be an integer.")
        if self.draw_count <= 0:
            raise ConfigurationError("draw_count must be positive.")
        if not self.headspace_modes:
            raise ConfigurationError("headspace_modes must not be empty.")
        if any(mode not in HEADSPACE_MODES for mode in self.headspace_modes):
            raise ConfigurationError("headspace_modes must be a subset of {'ambient_air','pure_gas'}.")
        if any(tier not in INSTRUMENT_TIERS for tier in self.instrument_tiers):
            raise ConfigurationError(f"instrument_tiers must be a subset of {INSTRUMENT_TIERS}.")
        if any(tier not in THERMOMETER_TIERS for tier in self.thermometer_tiers):
            raise ConfigurationError(f"thermometer_tiers must be a subset of {THERMOMETER_TIERS}.")
        if any(not 0.0 < ratio < 1.0 for ratio in self.mixing_ratios):
            raise ConfigurationError("mixing_ratios must be between 0 and 1 (exclusive).")
        if any(quantity not in QUANTITIES for quantity in self.quantities):
            raise ConfigurationError(f"quantities must be a subset of {QUANTITIES}.")
        if self.perturbed_variables is not None:
            unknown = [name for name in self.perturbed_variables if name not in VARIABLES]
            if unknown:
                raise ConfigurationError(f"Unknown perturbed variables: {unknown}")
        if self.workers < 1:
            raise ConfigurationError("workers must be at least 1.")


def default_config() -> Config:
    return Config()


def config_from_mapping(data: Mapping[str, object]) -> Config:
    known = {item.name for item in fields(Config)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys: {unknown}")
    config = Config(**dict(data))
    config.validate()
    return config


def load_config(path: str) -> Config:
    target = Path(path)
    if not target.exists():
        raise ConfigurationError(f"Configuration file not found: {target}")
    with open(target, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Configuration file {target} must contain a mapping.")
    return config_from_mapping(data)
