"""Error model registry: instrument precision per measured variable and tier."""

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np
import yaml

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CALIBRATION_PATH = Path(__file__).parent / "calibration.yaml"

SUPPORTED_DISTRIBUTIONS = {"normal"}
DISPERSION_KEYS = ("sd", "cv", "replicate_sd")


@dataclass(frozen=True)
class ErrorSpec:
    """Gaussian measurement error of one variable at one instrument tier."""

    variable: str
    tier: str
    sd: Optional[float] = None
    cv: Optional[float] = None
    replicate_sd: Tuple[float, ...] = ()
    distribution: str = "normal"
    unit: str = ""

    def validate(self) -> None:
        if self.distribution not in SUPPORTED_DISTRIBUTIONS:
            raise ConfigurationError(
                f"{self.variable}/{self.tier}: unsupported distribution '{self.distribution}'."
            )
        given = [
            key
            for key, value in (("sd", self.sd), ("cv", self.cv), ("replicate_sd", self.replicate_sd))
            if value not in (None, ())
        ]
        if len(given) != 1:
            raise ConfigurationError(
                f"{self.variable}/{self.tier}: exactly one of sd, cv, replicate_sd is required."
            )
        values = [self.sd, self.cv, *self.replicate_sd]
        for value in values:
            if value is None:
                continue
            if not math.isfinite(value) or value < 0:
                raise ConfigurationError(
                    f"{self.variable}/{self.tier}: dispersion must be a non-negative number."
                )

    def sd_at(self, center: float) -> float:
        if self.sd is not None:
            return float(self.sd)
        if self.cv is not None:
            return float(self.cv) * abs(center)
        return float(np.mean(self.replicate_sd))

    def draw(self, center: float, z: np.ndarray) -> np.ndarray:
        """Scale standard-normal draws ``z`` to this error model around ``center``."""
        return center + self.sd_at(center) * np.asarray(z, dtype=float)


@dataclass
class ErrorRegistry:
    specs: Dict[Tuple[str, str], ErrorSpec] = field(default_factory=dict)
    source: str = ""

    def add(self, spec: ErrorSpec) -> None:
        spec.validate()
        self.specs[(spec.variable, spec.tier)] = spec

    def lookup(self, variable: str, tier: str = "standard") -> ErrorSpec:
        try:
            return self.specs[(variable, tier)]
        except KeyError:
            raise ConfigurationError(
                f"No error model for variable '{variable}' at tier '{tier}'."
            ) from None

    def tiers(self, variable: str) -> List[str]:
        return sorted(tier for name, tier in self.specs if name == variable)

    def variables(self) -> List[str]:
        return sorted({name for name, _ in self.specs})

    @classmethod
    def from_mapping(cls, data: Mapping[str, object], source: str = "") -> "ErrorRegistry":
        registry = cls(source=source)
        meta = data.get("meta") or {}
        distribution = str(meta.get("distribution", "normal")) if isinstance(meta, Mapping) else "normal"
        for variable, tiers in data.items():
            if variable == "meta":
                continue
            if not isinstance(tiers, Mapping):
                raise ConfigurationError(f"Error model for '{variable}' must map tiers to settings.")
            for tier, settings in tiers.items():
                if not isinstance(settings, Mapping):
                    raise ConfigurationError(f"Error model {variable}/{tier} must be a mapping.")
                registry.add(_spec_from_settings(variable, str(tier), settings, distribution))
        logger.debug("Loaded %d error models from %s", len(registry.specs), source or "mapping")
        return registry


def _spec_from_settings(
    variable: str,
    tier: str,
    settings: Mapping[str, object],
    distribution: str,
) -> ErrorSpec:
    unknown = set(settings) - {*DISPERSION_KEYS, "unit", "distribution"}
    if unknown:
        raise ConfigurationError(f"Error model {variable}/{tier} has unknown keys: {sorted(unknown)}")
    replicate = settings.get("replicate_sd") or ()
    if not isinstance(replicate, Iterable):
        raise ConfigurationError(f"{variable}/{tier}: replicate_sd must be a list.")
    try:
        return ErrorSpec(
            variable=variable,
            tier=tier,
            sd=_optional_float(settings.get("sd")),
            cv=_optional_float(settings.get("cv")),
            replicate_sd=tuple(float(item) for item in replicate),
            distribution=str(settings.get("distribution", distribution)),
            unit=str(settings.get("unit", "")),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{variable}/{tier}: {exc}") from exc


def _optional_float(value: object) -> Optional[float]:
    if value is None:
        return None
    return float(value)


def load_registry(path: Optional[str] = None) -> ErrorRegistry:
    target = Path(path) if path else DEFAULT_CALIBRATION_PATH
    if not target.exists():
        raise ConfigurationError(f"Calibration file not found: {target}")
    with open(target, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Calibration file {target} must contain a mapping.")
    return ErrorRegistry.from_mapping(data, source=str(target))
