"""Scenario orchestration and source/sink classification."""

from .classify import (
    ClassifiedObservation,
    annotate_dataframe,
    classify_observations,
    classify_ratio,
    status_counts,
)
from .scenarios import (
    Attribution,
    ScenarioBatch,
    attribute_error_sources,
    enumerate_scenarios,
    run_scenario,
    run_scenarios,
)

__all__ = [
    "Attribution",
    "ClassifiedObservation",
    "ScenarioBatch",
    "annotate_dataframe",
    "attribute_error_sources",
    "classify_observations",
    "classify_ratio",
    "enumerate_scenarios",
    "run_scenario",
    "run_scenarios",
    "status_counts",
]
