"""Summary statistics of a simulated distribution."""

from typing import Dict, Iterable, Mapping, Sequence

import numpy as np
from scipy import stats

from . import SimulationResult

NORMAL_Z = 1.96
LOWER_PERCENTILE = 2.5
UPPER_PERCENTILE = 97.5


def summarize(
    true_value: float,
    simulated: Sequence[float],
    scenario_key: str = "",
    quantity: str = "",
    perturbed: Iterable[str] = (),
    unit: str = "",
) -> SimulationResult:
    """
    Summarize a simulated distribution against its true value.

    Parameters
    ----------
    true_value : float
        Formula output with every input at its true value
    simulated : Sequence[float]
        Monte Carlo outputs, one per draw
    scenario_key, quantity, perturbed, unit
        Labels copied onto the result

    Returns
    -------
    SimulationResult

    Mathematical Implementation
    ---------------------------
    e_i = y_i - y_true
    sd = sqrt(sum((y_i - mean(y))^2) / (N - 1))
    normal interval    = y_true +- 1.96 * sd
    empirical offsets  = (P2.5(e), P97.5(e))
    empirical interval = y_true + empirical offsets
    """
    values = np.asarray(simulated, dtype=float)
    if values.ndim != 1 or values.size == 0:
        raise ValueError("simulated must be a non-empty one-dimensional sequence.")
    errors = values - true_value

    sd = float(np.std(values, ddof=1)) if values.size > 1 else 0.0
    half_width = NORMAL_Z * sd
    low, high = np.percentile(errors, [LOWER_PERCENTILE, UPPER_PERCENTILE])
    skewness = float(stats.skew(errors)) if values.size > 2 and sd > 0 else 0.0

    return SimulationResult(
        scenario_key=scenario_key,
        quantity=quantity,
        true_value=float(true_value),
        simulated=values,
        absolute_error=errors,
        sd=sd,
        normal_half_width=half_width,
        normal_interval=(true_value - half_width, true_value + half_width),
        empirical_offsets=(float(low), float(high)),
        empirical_interval=(float(true_value + low), float(true_value + high)),
        mean_error=float(np.mean(errors)),
        skewness=skewness,
        draw_count=int(values.size),
        perturbed=tuple(perturbed),
        unit=unit,
    )


def mean_error_bound(result: SimulationResult, n_sigma: float = 3.0) -> float:
    """Tolerance on the mean error expected from sampling noise alone."""
    if result.draw_count <= 1:
        return 0.0
    return n_sigma * result.sd / np.sqrt(result.draw_count)


def variance_shares(results: Mapping[str, SimulationResult]) -> Dict[str, float]:
    """
    Fraction of the summed single-source variances owed to each source.

    With independent inputs and a near-linear response the single-source
    variances add up to the all-source variance.
    """
    variances = {name: result.sd**2 for name, result in results.items()}
    total = sum(variances.values())
    if total <= 0:
        return {name: 0.0 for name in variances}
    return {name: value / total for name, value in variances.items()}
