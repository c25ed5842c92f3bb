"""Source/sink classification of field saturation ratios."""

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Union

import pandas as pd

from ..data.schema import is_blank, is_dissolved_sample, optional_int, saturation_ratio_value
from ..exceptions import ConfigurationError, DataShapeError
from ..uncertainty import SimulationResult

logger = logging.getLogger(__name__)

SOURCE = "source"
SINK = "sink"
UNDETERMINED = "undetermined"
STATUSES = (SOURCE, SINK, UNDETERMINED)


@dataclass
class ClassifiedObservation:
    site_id: Optional[str]
    visit_no: Optional[int]
    saturation_ratio: Optional[float]
    status: Optional[str]
    scenario_key: str = ""
    threshold: float = 0.0
    flags: List[str] = field(default_factory=list)


def _threshold(reference: Union[SimulationResult, float]) -> float:
    value = reference.threshold if isinstance(reference, SimulationResult) else float(reference)
    if not math.isfinite(value) or value < 0:
        raise ConfigurationError("classification threshold must be a non-negative number.")
    return value


def classify_ratio(ratio: float, threshold: float) -> str:
    """
    Status of one saturation ratio.

    Ratios within ``threshold`` of 1 (boundary included) cannot be told
    apart from equilibrium and are undetermined.
    """
    deviation = abs(ratio - 1.0)
    if deviation <= threshold or math.isclose(deviation, threshold, rel_tol=1e-9, abs_tol=0.0):
        return UNDETERMINED
    return SOURCE if ratio > 1.0 else SINK


def classify_observations(
    records: Union[pd.DataFrame, Iterable[Mapping[str, object]]],
    reference: Union[SimulationResult, float],
    ratio_key: str = "saturation_ratio",
    site_key: str = "site_id",
    visit_key: str = "visit_no",
    source_key: str = "sample_source",
    scenario_key: Optional[str] = None,
) -> List[ClassifiedObservation]:
    """
    Classify every dissolved-gas record against one scenario's error half-width.

    Records are read, never modified, so classifying the same records against
    another scenario always starts from the raw saturation ratio. Records
    with a missing or non-finite ratio are kept with ``status=None`` and a flag.
    """
    threshold = _threshold(reference)
    if scenario_key is None:
        scenario_key = reference.scenario_key if isinstance(reference, SimulationResult) else ""
    rows = records.to_dict("records") if isinstance(records, pd.DataFrame) else records

    observations: List[ClassifiedObservation] = []
    skipped = 0
    for record in rows:
        if not is_dissolved_sample(record, source_key):
            continue
        site = record.get(site_key)
        observation = ClassifiedObservation(
            site_id=None if is_blank(site) else str(site),
            visit_no=optional_int(record.get(visit_key)),
            saturation_ratio=None,
            status=None,
            scenario_key=scenario_key,
            threshold=threshold,
        )
        try:
            ratio = saturation_ratio_value(record, ratio_key, site_key)
        except DataShapeError as exc:
            observation.flags.append(exc.reason)
            skipped += 1
            logger.debug("Skipping record %s: %s", observation.site_id, exc)
        else:
            observation.saturation_ratio = ratio
            observation.status = classify_ratio(ratio, threshold)
        observations.append(observation)

    if skipped:
        logger.warning("%d of %d records could not be classified for %s", skipped, len(observations), scenario_key)
    return observations


def annotate_dataframe(
    frame: pd.DataFrame,
    references: Mapping[str, Union[SimulationResult, float]],
    ratio_key: str = "saturation_ratio",
    site_key: str = "site_id",
    source_key: str = "sample_source",
    prefix: str = "status_",
) -> pd.DataFrame:
    """
    Copy of ``frame`` with one status column per labelled scenario.

    Air samples and unclassifiable records get an empty status.
    """
    annotated = frame.copy()
    for label, reference in references.items():
        threshold = _threshold(reference)
        statuses: List[Optional[str]] = []
        for record in frame.to_dict("records"):
            if not is_dissolved_sample(record, source_key):
                statuses.append(None)
                continue
            try:
                ratio = saturation_ratio_value(record, ratio_key, site_key)
            except DataShapeError:
                statuses.append(None)
                continue
            statuses.append(classify_ratio(ratio, threshold))
        annotated[f"{prefix}{label}"] = pd.Series(statuses, index=frame.index, dtype=object)
    return annotated


def status_counts(observations: Iterable[ClassifiedObservation]) -> Dict[str, int]:
    counts = Counter(obs.status if obs.status is not None else "skipped" for obs in observations)
    return {name: counts.get(name, 0) for name in (*STATUSES, "skipped")}
