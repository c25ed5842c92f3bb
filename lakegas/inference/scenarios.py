"""Scenario enumeration, batch runs and error-source attribution."""

import logging
import zlib
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from .classify import ClassifiedObservation, classify_observations
from ..config import (
    EQUILIBRIUM,
    HEADSPACE_INSTRUMENTS,
    MIMS_INSTRUMENTS,
    SATURATION_RATIO,
    Config,
)
from ..data.registry import ErrorRegistry, load_registry
from ..data.schema import PhysicalSample
from ..exceptions import ConfigurationError, DomainError, ScenarioError
from ..uncertainty import Scenario, SimulationResult
from ..uncertainty.propagation import simulate
from ..uncertainty.summary import variance_shares

logger = logging.getLogger(__name__)

Observations = Union[pd.DataFrame, Iterable[dict]]


@dataclass
class ScenarioBatch:
    results: Dict[str, SimulationResult] = field(default_factory=dict)
    failures: Dict[str, ScenarioError] = field(default_factory=dict)
    classifications: Dict[str, List[ClassifiedObservation]] = field(default_factory=dict)

    def by_quantity(self, quantity: str) -> Dict[str, SimulationResult]:
        return {key: result for key, result in self.results.items() if result.quantity == quantity}


@dataclass
class Attribution:
    """Contribution of each error source to one scenario's uncertainty."""

    scenario_key: str
    combined: SimulationResult
    by_source: Dict[str, SimulationResult]
    shares: Dict[str, float]


def derive_seed(base: Optional[int], key: str) -> Optional[int]:
    """Independent, reproducible seed per scenario key."""
    if base is None:
        return None
    sequence = np.random.SeedSequence([base, zlib.crc32(key.encode("utf-8"))])
    return int(sequence.generate_state(1)[0])


def enumerate_scenarios(config: Config) -> List[Scenario]:
    """
    Physically meaningful combinations of the configured tiers.

    Headspace GC tiers span headspace mode x thermometer x mixing ratio. MIMS
    tiers have neither headspace mode nor mixing ratio. Equilibrium
    concentration depends only on the GC and thermometer tiers.
    """
    perturbed = frozenset(config.perturbed_variables) if config.perturbed_variables is not None else None
    headspace = [tier for tier in config.instrument_tiers if tier in HEADSPACE_INSTRUMENTS]
    mims = [tier for tier in config.instrument_tiers if tier in MIMS_INSTRUMENTS]

    scenarios: List[Scenario] = []
    for quantity in config.quantities:
        for instrument in headspace:
            for thermometer in config.thermometer_tiers:
                if quantity == EQUILIBRIUM:
                    scenarios.append(
                        Scenario(quantity, instrument, thermometer, None, None, perturbed, config.draw_count)
                    )
                    continue
                for mode in config.headspace_modes:
                    for ratio in config.mixing_ratios:
                        scenarios.append(
                            Scenario(quantity, instrument, thermometer, mode, ratio, perturbed, config.draw_count)
                        )
        if quantity == EQUILIBRIUM:
            continue
        for instrument in mims:
            for thermometer in config.thermometer_tiers:
                scenarios.append(
                    Scenario(quantity, instrument, thermometer, None, None, perturbed, config.draw_count)
                )

    if config.paired_draws:
        base = config.random_state if config.random_state is not None else np.random.SeedSequence().entropy
        return [replace(scenario, seed=base) for scenario in scenarios]
    return [replace(scenario, seed=derive_seed(config.random_state, scenario.key)) for scenario in scenarios]


def run_scenario(
    scenario: Scenario,
    registry: ErrorRegistry,
    sample: Optional[PhysicalSample] = None,
) -> SimulationResult:
    """Simulate one scenario, tagging any failure with its key."""
    try:
        return simulate(scenario, registry, sample)
    except (ConfigurationError, DomainError) as exc:
        raise ScenarioError(scenario.key, exc) from exc


def _run_safely(
    scenario: Scenario,
    registry: ErrorRegistry,
    sample: Optional[PhysicalSample],
) -> Tuple[str, Optional[SimulationResult], Optional[ScenarioError]]:
    try:
        return scenario.key, run_scenario(scenario, registry, sample), None
    except ScenarioError as exc:
        return scenario.key, None, exc


def run_scenarios(
    config: Config,
    registry: Optional[ErrorRegistry] = None,
    sample: Optional[PhysicalSample] = None,
    observations: Optional[Observations] = None,
    scenarios: Optional[Iterable[Scenario]] = None,
) -> ScenarioBatch:
    """
    Run every scenario and optionally classify observations against each
    saturation-ratio result.

    A failing scenario is recorded in ``failures`` and does not stop the
    others.
    """
    config.validate()
    if registry is None:
        registry = load_registry(config.calibration_path or None)
    if sample is None:
        sample = PhysicalSample()
    plan = list(scenarios) if scenarios is not None else enumerate_scenarios(config)
    keys = [scenario.key for scenario in plan]
    duplicates = sorted({key for key in keys if keys.count(key) > 1})
    if duplicates:
        raise ConfigurationError(f"Scenario keys must be unique; repeated: {duplicates}")
    logger.info("Running %d scenarios with %d draws each", len(plan), config.draw_count)

    outcomes: Dict[str, Tuple[Optional[SimulationResult], Optional[ScenarioError]]] = {}
    if config.workers > 1 and len(plan) > 1:
        with ProcessPoolExecutor(max_workers=config.workers) as ex:
            futures = {ex.submit(_run_safely, scenario, registry, sample): scenario for scenario in plan}
            for future in as_completed(futures):
                key, result, error = future.result()
                outcomes[key] = (result, error)
    else:
        for scenario in plan:
            key, result, error = _run_safely(scenario, registry, sample)
            outcomes[key] = (result, error)

    batch = ScenarioBatch()
    for scenario in plan:
        result, error = outcomes[scenario.key]
        if error is not None:
            logger.warning("%s", error)
            batch.failures[scenario.key] = error
        else:
            batch.results[scenario.key] = result

    if observations is not None:
        records = observations.to_dict("records") if isinstance(observations, pd.DataFrame) else list(observations)
        for key, result in batch.by_quantity(SATURATION_RATIO).items():
            batch.classifications[key] = classify_observations(records, result)

    logger.info("Finished %d scenarios, %d failed", len(batch.results), len(batch.failures))
    return batch


def attribute_error_sources(
    scenario: Scenario,
    registry: Optional[ErrorRegistry] = None,
    sample: Optional[PhysicalSample] = None,
) -> Attribution:
    """
    Rerun ``scenario`` perturbing one input at a time.

    Every run uses the scenario's seed, so each single-source run reuses the
    draws that source gets in the all-source run.
    """
    if registry is None:
        registry = load_registry()
    if scenario.seed is None:
        scenario = replace(scenario, seed=int(np.random.SeedSequence().generate_state(1)[0]))
    combined = run_scenario(replace(scenario, perturbed=None), registry, sample)
    by_source = {
        name: run_scenario(replace(scenario, perturbed=frozenset([name])), registry, sample)
        for name in scenario.relevant_variables()
    }
    return Attribution(
        scenario_key=replace(scenario, perturbed=None).key,
        combined=combined,
        by_source=by_source,
        shares=variance_shares(by_source),
    )
