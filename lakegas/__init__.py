"""lakegas package entry points."""

from .config import Config, default_config, load_config
from .data.registry import ErrorRegistry, ErrorSpec, load_registry
from .data.schema import PhysicalSample
from .exceptions import (
    ConfigurationError,
    DataShapeError,
    DomainError,
    LakegasError,
    ScenarioError,
)
from .inference.classify import (
    ClassifiedObservation,
    annotate_dataframe,
    classify_observations,
    classify_ratio,
)
from .inference.scenarios import (
    ScenarioBatch,
    attribute_error_sources,
    enumerate_scenarios,
    run_scenarios,
)
from .models.formulas import (
    dissolved_concentration,
    equilibrium_concentration,
    headspace_mole_fraction,
    mims_concentration,
    saturation_ratio,
)
from .uncertainty import Scenario, SimulationResult
from .uncertainty.propagation import simulate
from .uncertainty.summary import summarize

__all__ = [
    "Config",
    "default_config",
    "load_config",
    "ErrorRegistry",
    "ErrorSpec",
    "load_registry",
    "PhysicalSample",
    "ConfigurationError",
    "DataShapeError",
    "DomainError",
    "LakegasError",
    "ScenarioError",
    "ClassifiedObservation",
    "annotate_dataframe",
    "classify_observations",
    "classify_ratio",
    "ScenarioBatch",
    "attribute_error_sources",
    "enumerate_scenarios",
    "run_scenarios",
    "dissolved_concentration",
    "equilibrium_concentration",
    "headspace_mole_fraction",
    "mims_concentration",
    "saturation_ratio",
    "Scenario",
    "SimulationResult",
    "simulate",
    "summarize",
]

__version__ = "0.1.0"
