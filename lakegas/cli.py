"""Command-line interface for lakegas."""

import argparse
import logging
from typing import List, Optional

import pandas as pd

from .config import SATURATION_RATIO, Config, load_config
from .data.registry import load_registry
from .data.schema import PhysicalSample
from .inference.classify import status_counts
from .inference.scenarios import attribute_error_sources, run_scenarios
from .outputs.export import export_rows
from .outputs.tables import (
    attribution_table,
    classification_table,
    failures_table,
    rows_to_json,
    simulation_results_table,
)
from .uncertainty import Scenario

logger = logging.getLogger(__name__)


def _build_config(args: argparse.Namespace) -> Config:
    config = load_config(args.config) if args.config else Config()
    if args.draws is not None:
        config.draw_count = args.draws
    if args.seed is not None:
        config.random_state = args.seed
    if args.paired:
        config.paired_draws = True
    if args.mixing_ratio:
        config.mixing_ratios = args.mixing_ratio
    if args.perturb:
        config.perturbed_variables = args.perturb
    if args.workers is not None:
        config.workers = args.workers
    if args.calibration:
        config.calibration_path = args.calibration
    config.validate()
    return config


def _log_counts(batch) -> None:
    for key, observations in batch.classifications.items():
        counts = status_counts(observations)
        summary = ", ".join(f"{name}={count}" for name, count in counts.items())
        logger.info("%s: %s", key, summary)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Monte Carlo uncertainty of dissolved N2O measurements.")
    parser.add_argument("--config", help="YAML configuration file.")
    parser.add_argument("--calibration", help="YAML error-model file (defaults to the packaged one).")
    parser.add_argument("--draws", type=int, help="Monte Carlo draws per scenario.")
    parser.add_argument("--seed", type=int, help="Base random seed.")
    parser.add_argument("--paired", action="store_true", help="Share draws across scenarios.")
    parser.add_argument(
        "--mixing-ratio",
        type=float,
        action="append",
        default=[],
        help="Headspace mixing ratio (repeatable).",
    )
    parser.add_argument(
        "--perturb",
        action="append",
        default=[],
        help="Perturb only this input (repeatable); default perturbs all.",
    )
    parser.add_argument("--workers", type=int, help="Worker processes for scenario runs.")
    parser.add_argument("--observations", help="CSV of site records with saturation ratios.")
    parser.add_argument("--output", help="Scenario summary output path (stdout when omitted).")
    parser.add_argument("--classified-output", help="Classification output path.")
    parser.add_argument("--format", choices=["json", "csv"], default="json")
    parser.add_argument(
        "--attribution",
        action="store_true",
        help="Attribute the standard saturation-ratio uncertainty to each error source and exit.",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose > 1 else logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = _build_config(args)
    registry = load_registry(config.calibration_path or None)
    sample = PhysicalSample()

    if args.attribution:
        scenario = Scenario(SATURATION_RATIO, draw_count=config.draw_count, seed=config.random_state)
        rows = attribution_table(attribute_error_sources(scenario, registry, sample))
        if args.output:
            export_rows(rows, args.output, args.format)
        else:
            print(rows_to_json(rows))
        return 0

    observations = pd.read_csv(args.observations) if args.observations else None
    batch = run_scenarios(config, registry, sample, observations)

    rows = simulation_results_table(batch.results)
    if args.output:
        export_rows(rows, args.output, args.format)
    else:
        print(rows_to_json(rows))

    if batch.classifications:
        if args.classified_output:
            classified = [obs for items in batch.classifications.values() for obs in items]
            export_rows(classification_table(classified), args.classified_output, args.format)
        _log_counts(batch)

    if batch.failures:
        for row in failures_table(batch.failures):
            logger.error("Scenario %s failed: %s", row["scenario"], row["error"])
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
