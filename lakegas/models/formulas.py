"""
Henry's-law formulas for dissolved gas measured by headspace GC or MIMS.

Every function accepts scalars or equal-length numpy arrays and evaluates
element-wise, so element i of the output only depends on element i of each
input. Mole fractions are in ppm, pressure in kPa, temperature in degrees C,
Henry's-law constants in mol m-3 Pa-1. Concentrations are returned in mol/L;
multiply by NMOL_PER_MOL for nmol/L.
"""

from typing import Optional

import numpy as np

from ..exceptions import DomainError

GAS_CONSTANT = 8.3144598
KELVIN_OFFSET = 273.15
REFERENCE_TEMPERATURE_K = 298.15
PPM_KPA_TO_MOL_L = 1e-6
NMOL_PER_MOL = 1e9

N2O_HENRY_CONSTANT = 0.00024
N2O_REACTION_CONSTANT = 2700.0
AR_HENRY_CONSTANT = 1.4e-5
AR_REACTION_CONSTANT = 1500.0
AR_MOLE_FRACTION_PPM = 9340.0


def _require_nonzero(name: str, values) -> None:
    if np.any(np.asarray(values) == 0):
        raise DomainError(f"{name} must be non-zero.")


def _as_float(values):
    arr = np.asarray(values, dtype=float)
    return arr if arr.ndim else float(arr)


def kelvin(temp_c):
    return np.asarray(temp_c, dtype=float) + KELVIN_OFFSET


def temperature_factor(temp_c, reaction_constant: float):
    """van 't Hoff correction of a Henry's-law constant from 25 C to ``temp_c``."""
    temp_k = kelvin(temp_c)
    _require_nonzero("absolute temperature", temp_k)
    return np.exp(reaction_constant * (1.0 / temp_k - 1.0 / REFERENCE_TEMPERATURE_K))


def dissolved_concentration(
    pressure,
    gas_volume,
    headspace_fraction,
    reference_fraction,
    water_volume,
    temp_c,
    henry_constant: float,
    reaction_constant: float,
):
    """
    Dissolved concentration (mol/L) from a headspace equilibration.

    C = 1e-6 * B * (Vg * (Mh - Mr) / (R * T * Vw) + H * f(T) * Mh)

    The first term is the gas moved into the headspace, the second the gas
    left in the water at equilibrium with it.
    """
    _require_nonzero("water_volume", water_volume)
    temp_k = kelvin(temp_c)
    _require_nonzero("absolute temperature", temp_k)
    pressure = np.asarray(pressure, dtype=float)
    headspace_fraction = np.asarray(headspace_fraction, dtype=float)
    headspace_term = (
        np.asarray(gas_volume, dtype=float)
        * (headspace_fraction - np.asarray(reference_fraction, dtype=float))
        / (GAS_CONSTANT * temp_k * np.asarray(water_volume, dtype=float))
    )
    water_term = henry_constant * temperature_factor(temp_c, reaction_constant) * headspace_fraction
    return _as_float(PPM_KPA_TO_MOL_L * pressure * (headspace_term + water_term))


def equilibrium_concentration(
    pressure,
    air_fraction,
    henry_constant: float,
    temp_c,
    reaction_constant: float,
):
    """Concentration (mol/L) of water at equilibrium with air holding ``air_fraction`` ppm."""
    factor = temperature_factor(temp_c, reaction_constant)
    return _as_float(
        PPM_KPA_TO_MOL_L
        * np.asarray(pressure, dtype=float)
        * np.asarray(air_fraction, dtype=float)
        * henry_constant
        * factor
    )


def saturation_ratio(dissolved, equilibrium):
    _require_nonzero("equilibrium concentration", equilibrium)
    return _as_float(np.asarray(dissolved, dtype=float) / np.asarray(equilibrium, dtype=float))


def mims_concentration(
    ratio_sample,
    ratio_standard,
    pressure,
    analyte_fraction,
    analyte_henry: float,
    temp_c,
    analyte_reaction_constant: float,
    carrier_fraction: float,
    carrier_henry: float,
    carrier_reaction_constant: float,
    *,
    carrier_pressure=None,
    carrier_temperature=None,
):
    """
    Dissolved analyte concentration (mol/L) from a MIMS signal ratio.

    C = (Rx_sample / Rx_standard) * Ceq_analyte(std) / Ceq_carrier(std) * Ceq_carrier(sample)

    The standard's equilibrium concentrations use ``pressure`` and ``temp_c``.
    The sample's carrier concentration uses ``carrier_pressure`` and
    ``carrier_temperature``, which default to the standard's conditions. The
    factors are kept separate so each one can carry its own perturbed inputs.
    """
    _require_nonzero("ratio_standard", ratio_standard)
    if carrier_pressure is None:
        carrier_pressure = pressure
    if carrier_temperature is None:
        carrier_temperature = temp_c
    analyte_standard = equilibrium_concentration(
        pressure, analyte_fraction, analyte_henry, temp_c, analyte_reaction_constant
    )
    carrier_standard = equilibrium_concentration(
        pressure, carrier_fraction, carrier_henry, temp_c, carrier_reaction_constant
    )
    _require_nonzero("carrier equilibrium concentration", carrier_standard)
    carrier_sample = equilibrium_concentration(
        carrier_pressure,
        carrier_fraction,
        carrier_henry,
        carrier_temperature,
        carrier_reaction_constant,
    )
    signal = np.asarray(ratio_sample, dtype=float) / np.asarray(ratio_standard, dtype=float)
    return _as_float(
        signal * np.asarray(analyte_standard) / np.asarray(carrier_standard) * np.asarray(carrier_sample)
    )


def headspace_mole_fraction(
    concentration: float,
    pressure: float,
    gas_volume: float,
    reference_fraction: float,
    water_volume: float,
    temp_c: float,
    henry_constant: float,
    reaction_constant: float,
) -> float:
    """
    Headspace reading (ppm) that reproduces ``concentration`` (mol/L).

    Solves ``dissolved_concentration`` for Mh:

        Mh = (C / (1e-6 * B) + Mr * a) / (a + H * f(T)),  a = Vg / (R * T * Vw)
    """
    _require_nonzero("water_volume", water_volume)
    _require_nonzero("pressure", pressure)
    temp_k = float(kelvin(temp_c))
    _require_nonzero("absolute temperature", temp_k)
    volume_term = gas_volume / (GAS_CONSTANT * temp_k * water_volume)
    water_term = henry_constant * float(temperature_factor(temp_c, reaction_constant))
    denom = volume_term + water_term
    _require_nonzero("headspace solution denominator", denom)
    scaled = concentration / (PPM_KPA_TO_MOL_L * pressure)
    return (scaled + reference_fraction * volume_term) / denom


def mims_signal_ratio(
    concentration: float,
    ratio_standard: float,
    pressure: float,
    analyte_fraction: float,
    analyte_henry: float,
    temp_c: float,
    analyte_reaction_constant: float,
    carrier_fraction: float = AR_MOLE_FRACTION_PPM,
    carrier_henry: float = AR_HENRY_CONSTANT,
    carrier_reaction_constant: float = AR_REACTION_CONSTANT,
    carrier_pressure: Optional[float] = None,
    carrier_temperature: Optional[float] = None,
) -> float:
    """Sample signal ratio that makes ``mims_concentration`` return ``concentration``."""
    per_unit_ratio = mims_concentration(
        1.0,
        ratio_standard,
        pressure,
        analyte_fraction,
        analyte_henry,
        temp_c,
        analyte_reaction_constant,
        carrier_fraction,
        carrier_henry,
        carrier_reaction_constant,
        carrier_pressure=carrier_pressure,
        carrier_temperature=carrier_temperature,
    )
    _require_nonzero("MIMS concentration per unit ratio", per_unit_ratio)
    return float(concentration / per_unit_ratio)
