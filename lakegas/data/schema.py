"""Physical setup of a measurement and observation record helpers."""

import math
from dataclasses import dataclass, replace
from typing import Iterable, List, Mapping, Optional

from ..exceptions import ConfigurationError, DataShapeError
from ..models import formulas

AIR_SOURCE_VALUES = {"air", "ambient_air", "atmosphere", "atm"}


@dataclass(frozen=True)
class PhysicalSample:
    """
    True (unperturbed) inputs shared by every scenario.

    Defaults describe the headspace equilibration used in the field survey:
    35 mL of gas over 105 mL of water, 99 kPa, 23 C, ambient N2O at 0.310 ppm
    and a dissolved concentration of 7.7 nmol/L.
    """

    pressure_kpa: float = 99.0
    temperature_c: float = 23.0
    total_volume_ml: float = 140.0
    mixing_ratio: float = 0.25
    air_mole_fraction: float = 0.310
    henry_constant: float = formulas.N2O_HENRY_CONSTANT
    reaction_constant: float = formulas.N2O_REACTION_CONSTANT
    target_concentration_nmol: float = 7.7
    carrier_mole_fraction: float = formulas.AR_MOLE_FRACTION_PPM
    carrier_henry_constant: float = formulas.AR_HENRY_CONSTANT
    carrier_reaction_constant: float = formulas.AR_REACTION_CONSTANT
    standard_signal_ratio: float = 1.0e-3

    @property
    def gas_volume_ml(self) -> float:
        return self.mixing_ratio * self.total_volume_ml

    @property
    def water_volume_ml(self) -> float:
        return self.total_volume_ml - self.gas_volume_ml

    @property
    def target_concentration_mol(self) -> float:
        return self.target_concentration_nmol / formulas.NMOL_PER_MOL

    def with_mixing_ratio(self, mixing_ratio: float) -> "PhysicalSample":
        return replace(self, mixing_ratio=mixing_ratio)

    def validate(self) -> None:
        if not 0.0 < self.mixing_ratio < 1.0:
            raise ConfigurationError("mixing_ratio must be between 0 and 1 (exclusive).")
        if self.total_volume_ml <= 0:
            raise ConfigurationError("total_volume_ml must be positive.")
        if self.pressure_kpa <= 0:
            raise ConfigurationError("pressure_kpa must be positive.")
        if self.temperature_c <= -formulas.KELVIN_OFFSET:
            raise ConfigurationError("temperature_c must be above absolute zero.")
        if self.standard_signal_ratio <= 0:
            raise ConfigurationError("standard_signal_ratio must be positive.")
        for name in ("henry_constant", "carrier_henry_constant", "air_mole_fraction", "carrier_mole_fraction"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive.")


def required_fields(ratio_key: str = "saturation_ratio", site_key: str = "site_id") -> List[str]:
    return [site_key, ratio_key]


def is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, float):
        return math.isnan(value)
    return isinstance(value, str) and not value.strip()


def missing_fields(record: Mapping[str, object], fields: Iterable[str]) -> List[str]:
    return [key for key in fields if key not in record or is_blank(record[key])]


def is_dissolved_sample(record: Mapping[str, object], source_key: str = "sample_source") -> bool:
    """
    Only air samples are excluded from classification.

    Any other source code, including survey codes such as ``DG`` and a blank
    source, is a dissolved-gas record.
    """
    value = record.get(source_key)
    if is_blank(value):
        return True
    return str(value).strip().lower() not in AIR_SOURCE_VALUES


def saturation_ratio_value(
    record: Mapping[str, object],
    ratio_key: str = "saturation_ratio",
    site_key: str = "site_id",
) -> float:
    missing = missing_fields(record, required_fields(ratio_key, site_key))
    if missing:
        raise DataShapeError(f"record is missing fields: {missing}", reason=f"missing_{missing[-1]}")
    try:
        value = float(record[ratio_key])  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise DataShapeError(
            f"{ratio_key} is not numeric: {record[ratio_key]!r}", reason=f"non_numeric_{ratio_key}"
        ) from exc
    if not math.isfinite(value):
        raise DataShapeError(f"{ratio_key} is not finite: {value}", reason=f"non_finite_{ratio_key}")
    return value


def optional_int(value: object) -> Optional[int]:
    if is_blank(value):
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number)
