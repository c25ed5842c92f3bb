"""
Monte Carlo error propagation through the dissolved-gas formulas.

Every perturbed input gets its own vector of N Gaussian draws; inputs that
are not perturbed stay at their true value. The formula is evaluated
element-wise, so draw i of the output combines draw i of every input.
"""

import logging
from typing import Dict, Optional, Union

import numpy as np

from . import Scenario, SimulationResult
from .summary import summarize
from ..config import AMBIENT_AIR, CONCENTRATION, EQUILIBRIUM, GC_TIER, VARIABLES
from ..data.registry import ErrorRegistry, ErrorSpec
from ..data.schema import PhysicalSample
from ..models import formulas

logger = logging.getLogger(__name__)

Values = Union[float, np.ndarray]


def error_spec_for(variable: str, scenario: Scenario, registry: ErrorRegistry) -> ErrorSpec:
    """Error model of ``variable`` under the scenario's instrument and thermometer tiers."""
    if variable in ("pressure", "sample_pressure"):
        return registry.lookup("pressure", "standard")
    if variable in ("temperature", "sample_temperature"):
        return registry.lookup("temperature", scenario.thermometer_tier)
    if variable == "water_volume":
        return registry.lookup("water_volume", "standard")
    if variable in ("headspace_mole_fraction", "air_mole_fraction"):
        return registry.lookup("gas_mole_fraction", GC_TIER[scenario.instrument_tier])
    if variable in ("ratio_sample", "ratio_standard"):
        return registry.lookup("signal_ratio", "standard")
    raise KeyError(f"No error model mapping for variable '{variable}'")


def true_inputs(scenario: Scenario, sample: PhysicalSample) -> Dict[str, float]:
    """
    Unperturbed inputs of a scenario.

    The headspace reading is solved from the target concentration so every
    mixing ratio and headspace mode describes the same water. Under pure gas
    the reference reading is zero, which gives a lower headspace reading than
    under ambient air.

    Solving from the target moves the reading off the rounded 0.307 ppm, so
    the true saturation ratio of the default sample is 0.9834 rather than the
    0.985 obtained by plugging Mh = 0.307 into the dissolved formula.
    """
    inputs = {
        "pressure": sample.pressure_kpa,
        "temperature": sample.temperature_c,
        "air_mole_fraction": sample.air_mole_fraction,
        "sample_pressure": sample.pressure_kpa,
        "sample_temperature": sample.temperature_c,
    }
    if scenario.uses_headspace:
        setup = sample.with_mixing_ratio(scenario.mixing_ratio)
        setup.validate()
        reference = sample.air_mole_fraction if scenario.headspace_mode == AMBIENT_AIR else 0.0
        inputs["water_volume"] = setup.water_volume_ml
        inputs["headspace_mole_fraction"] = formulas.headspace_mole_fraction(
            sample.target_concentration_mol,
            sample.pressure_kpa,
            setup.gas_volume_ml,
            reference,
            setup.water_volume_ml,
            sample.temperature_c,
            sample.henry_constant,
            sample.reaction_constant,
        )
    elif scenario.is_mims:
        sample.validate()
        inputs["ratio_standard"] = sample.standard_signal_ratio
        inputs["ratio_sample"] = formulas.mims_signal_ratio(
            sample.target_concentration_mol,
            sample.standard_signal_ratio,
            sample.pressure_kpa,
            sample.air_mole_fraction,
            sample.henry_constant,
            sample.temperature_c,
            sample.reaction_constant,
            sample.carrier_mole_fraction,
            sample.carrier_henry_constant,
            sample.carrier_reaction_constant,
        )
    return inputs


def draw_inputs(
    scenario: Scenario,
    registry: ErrorRegistry,
    truths: Dict[str, float],
    rng: np.random.Generator,
) -> Dict[str, Values]:
    """
    Perturbed input vectors for one run.

    One standard-normal vector is drawn per canonical variable in a fixed
    order, perturbed or not, so two scenarios seeded alike share the draws of
    every variable they have in common.
    """
    active = set(scenario.active_variables())
    inputs: Dict[str, Values] = {}
    for name in VARIABLES:
        z = rng.standard_normal(scenario.draw_count)
        if name not in truths:
            continue
        if name in active:
            inputs[name] = error_spec_for(name, scenario, registry).draw(truths[name], z)
        else:
            inputs[name] = truths[name]
    return inputs


def _equilibrium(sample: PhysicalSample, pressure: Values, temp_c: Values, air_fraction: Values) -> Values:
    return formulas.equilibrium_concentration(
        pressure, air_fraction, sample.henry_constant, temp_c, sample.reaction_constant
    )


def evaluate(scenario: Scenario, sample: PhysicalSample, inputs: Dict[str, Values]) -> Values:
    """Scenario quantity (nmol/L for concentrations, unitless for ratios)."""
    if scenario.quantity == EQUILIBRIUM:
        equilibrium = _equilibrium(
            sample, inputs["pressure"], inputs["temperature"], inputs["air_mole_fraction"]
        )
        return equilibrium * formulas.NMOL_PER_MOL

    if scenario.is_mims:
        dissolved = formulas.mims_concentration(
            inputs["ratio_sample"],
            inputs["ratio_standard"],
            inputs["pressure"],
            inputs["air_mole_fraction"],
            sample.henry_constant,
            inputs["temperature"],
            sample.reaction_constant,
            sample.carrier_mole_fraction,
            sample.carrier_henry_constant,
            sample.carrier_reaction_constant,
            carrier_pressure=inputs["sample_pressure"],
            carrier_temperature=inputs["sample_temperature"],
        )
        field_pressure, field_temp = inputs["sample_pressure"], inputs["sample_temperature"]
    else:
        setup = sample.with_mixing_ratio(scenario.mixing_ratio)
        reference = inputs["air_mole_fraction"] if scenario.headspace_mode == AMBIENT_AIR else 0.0
        dissolved = formulas.dissolved_concentration(
            inputs["pressure"],
            setup.gas_volume_ml,
            inputs["headspace_mole_fraction"],
            reference,
            inputs["water_volume"],
            inputs["temperature"],
            sample.henry_constant,
            sample.reaction_constant,
        )
        field_pressure, field_temp = inputs["pressure"], inputs["temperature"]

    if scenario.quantity == CONCENTRATION:
        return dissolved * formulas.NMOL_PER_MOL
    equilibrium = _equilibrium(sample, field_pressure, field_temp, inputs["air_mole_fraction"])
    return formulas.saturation_ratio(dissolved, equilibrium)


def simulate(
    scenario: Scenario,
    registry: ErrorRegistry,
    sample: Optional[PhysicalSample] = None,
    rng: Optional[np.random.Generator] = None,
) -> SimulationResult:
    """
    Run one scenario.

    Parameters
    ----------
    scenario : Scenario
        What to simulate and which inputs to perturb
    registry : ErrorRegistry
        Instrument error models
    sample : Optional[PhysicalSample]
        True physical setup; defaults to the field survey setup
    rng : Optional[np.random.Generator]
        Random generator; defaults to one seeded with ``scenario.seed``

    Returns
    -------
    SimulationResult

    Raises
    ------
    ConfigurationError
        Invalid scenario or missing error model, before any draw is made
    DomainError
        A drawn or true input makes a formula undefined
    """
    scenario.validate()
    sample = sample if sample is not None else PhysicalSample()
    specs = {name: error_spec_for(name, scenario, registry) for name in scenario.active_variables()}

    truths = true_inputs(scenario, sample)
    true_value = float(evaluate(scenario, sample, truths))

    generator = rng if rng is not None else np.random.default_rng(scenario.seed)
    inputs = draw_inputs(scenario, registry, truths, generator)
    outputs = np.broadcast_to(
        np.asarray(evaluate(scenario, sample, inputs), dtype=float), (scenario.draw_count,)
    ).copy()

    logger.debug(
        "Simulated %s with %d draws perturbing %s",
        scenario.key,
        scenario.draw_count,
        ", ".join(specs) or "nothing",
    )
    unit = "nmol/L" if scenario.quantity in (CONCENTRATION, EQUILIBRIUM) else ""
    return summarize(
        true_value,
        outputs,
        scenario_key=scenario.key,
        quantity=scenario.quantity,
        perturbed=tuple(specs),
        unit=unit,
    )
