"""Tabular output helpers."""

import json
from typing import Iterable, List, Mapping

from ..inference.classify import ClassifiedObservation
from ..inference.scenarios import Attribution
from ..uncertainty import SimulationResult


def simulation_results_table(results: Mapping[str, SimulationResult]) -> List[dict]:
    rows = []
    for key, result in results.items():
        rows.append(
            {
                "scenario": key,
                "quantity": result.quantity,
                "unit": result.unit,
                "true_value": result.true_value,
                "sd": result.sd,
                "normal_half_width": result.normal_half_width,
                "normal_low": result.normal_interval[0],
                "normal_high": result.normal_interval[1],
                "empirical_offset_low": result.empirical_offsets[0],
                "empirical_offset_high": result.empirical_offsets[1],
                "empirical_low": result.empirical_interval[0],
                "empirical_high": result.empirical_interval[1],
                "mean_error": result.mean_error,
                "skewness": result.skewness,
                "draw_count": result.draw_count,
                "perturbed": ",".join(result.perturbed),
            }
        )
    return rows


def failures_table(failures: Mapping[str, Exception]) -> List[dict]:
    return [{"scenario": key, "error": str(getattr(exc, "cause", exc))} for key, exc in failures.items()]


def classification_table(observations: Iterable[ClassifiedObservation]) -> List[dict]:
    return [
        {
            "scenario": obs.scenario_key,
            "site_id": obs.site_id,
            "visit_no": obs.visit_no,
            "saturation_ratio": obs.saturation_ratio,
            "threshold": obs.threshold,
            "status": obs.status,
            "flags": ",".join(obs.flags),
        }
        for obs in observations
    ]


def attribution_table(attribution: Attribution) -> List[dict]:
    rows = [
        {
            "scenario": attribution.scenario_key,
            "source": name,
            "sd": result.sd,
            "empirical_offset_high": result.empirical_offsets[1],
            "variance_share": attribution.shares.get(name, 0.0),
        }
        for name, result in attribution.by_source.items()
    ]
    rows.append(
        {
            "scenario": attribution.scenario_key,
            "source": "all",
            "sd": attribution.combined.sd,
            "empirical_offset_high": attribution.combined.empirical_offsets[1],
            "variance_share": 1.0,
        }
    )
    return rows


def rows_to_json(rows: List[dict]) -> str:
    return json.dumps(rows, indent=2)
