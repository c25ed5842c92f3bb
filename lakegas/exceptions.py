"""
Exception hierarchy for lakegas.

- LakegasError: base class for every error raised by the package
- ConfigurationError: invalid scenario, error model or configuration value
- DomainError: a formula evaluated outside its mathematical domain
- DataShapeError: an observation record cannot be classified
- ScenarioError: a failure tagged with the scenario that produced it
"""

__all__ = [
    "ConfigurationError",
    "DataShapeError",
    "DomainError",
    "LakegasError",
    "ScenarioError",
]


class LakegasError(Exception):
    """Base exception for all lakegas errors."""


class ConfigurationError(LakegasError, ValueError):
    """Raised before simulation when a scenario or error model is invalid."""


class DomainError(LakegasError, ArithmeticError):
    """Raised when a formula input makes the result undefined (division by zero)."""


class DataShapeError(LakegasError, ValueError):
    """Raised for an observation record missing a field or holding a non-finite ratio."""

    def __init__(self, message: str, reason: str = "invalid_record") -> None:
        super().__init__(message)
        self.reason = reason


class ScenarioError(LakegasError):
    """
    A scenario failed.

    Parameters
    ----------
    scenario_key
        Identity of the failed scenario.
    cause
        The underlying ConfigurationError or DomainError.
    """

    def __init__(self, scenario_key: str, cause: Exception) -> None:
        super().__init__(f"scenario {scenario_key} failed: {cause}")
        self.scenario_key = scenario_key
        self.cause = cause

    def __reduce__(self):
        return (self.__class__, (self.scenario_key, self.cause))
