"""
CLI to run outage-detection simulations across multiple seeds.

Reads experiments/experiments.yml, runs one full simulation per seed, and
produces per-run rows plus a pooled per-detector summary with confidence
bounds on each detector's accuracy.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Sequence
import argparse
import csv
import logging
import time
from concurrent.futures import ProcessPoolExecutor, as_completed

import yaml

from constellation import SatelliteProfile
from orchestrator.certificates.bernoulli import make_certificate
from simulation import GROUND_DETECTOR, PowerGridDetectionSimulation, detector_names

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = Path(__file__).parent / "experiments" / "experiments.yml"


@dataclass(frozen=True)
class SimulationConfig:
    seed: int = 12345
    seed_count: int = 1
    rounds: int = 5
    outages_per_round: int = 50
    step_minutes: float = 60.0
    sensor_stride: int = 5
    certificate: str = "clopper_pearson"
    alpha: float = 0.05

    def seeds(self) -> List[int]:
        return [self.seed + offset for offset in range(self.seed_count)]


def load_config(path: Path) -> SimulationConfig:
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found at: {path.resolve()}")

    data = yaml.safe_load(path.read_text()) or {}
    known = {f.name: f.type for f in fields(SimulationConfig)}
    unknown = set(data) - set(known)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

    defaults = SimulationConfig()
    cfg = SimulationConfig(
        seed=int(data.get("seed", defaults.seed)),
        seed_count=int(data.get("seed_count", defaults.seed_count)),
        rounds=int(data.get("rounds", defaults.rounds)),
        outages_per_round=int(data.get("outages_per_round", defaults.outages_per_round)),
        step_minutes=float(data.get("step_minutes", defaults.step_minutes)),
        sensor_stride=int(data.get("sensor_stride", defaults.sensor_stride)),
        certificate=str(data.get("certificate", defaults.certificate)),
        alpha=float(data.get("alpha", defaults.alpha)),
    )
    if cfg.seed_count <= 0:
        raise ValueError("seed_count must be positive")
    if cfg.rounds <= 0:
        raise ValueError("rounds must be positive")
    if cfg.outages_per_round < 0:
        raise ValueError("outages_per_round must be non-negative")
    # Fail fast on a bad certificate name or alpha.
    make_certificate(cfg.certificate, cfg.alpha)
    return cfg


def run_experiments(
    config_path: Path,
    runs_csv: Path | None = None,
    summary_csv: Path | None = None,
    max_workers: int | None = None,
    use_processes: bool = True,
) -> List[Dict[str, object]]:
    """
    Run one simulation per configured seed and return one row per
    (seed, detector), ordered by seed then detector.
    """
    cfg = load_config(config_path)
    start = time.time()
    seeds = cfg.seeds()
    logger.info("[run] queued %d seeds", len(seeds))

    by_seed: Dict[int, List[Dict[str, object]]] = {}
    if use_processes and len(seeds) > 1:
        try:
            with ProcessPoolExecutor(max_workers=max_workers) as executor:
                future_to_seed = {
                    executor.submit(_run_task, asdict(cfg), seed): seed for seed in seeds
                }
                for future in as_completed(future_to_seed):
                    seed = future_to_seed[future]
                    by_seed[seed] = future.result()
                    logger.info("[run] completed seed=%d", seed)
        except (PermissionError, NotImplementedError, OSError) as exc:
            logger.warning("[run] process pool unavailable (%s), falling back to sequential execution", exc)
            by_seed.clear()

    for seed in seeds:
        if seed not in by_seed:
            by_seed[seed] = _run_task(asdict(cfg), seed)
            logger.info("[run] completed seed=%d", seed)

    rows = [row for seed in seeds for row in by_seed[seed]]
    if runs_csv:
        write_runs_csv(rows, runs_csv)
    if summary_csv:
        write_summary_csv(aggregate_by_detector(rows, cfg.certificate, cfg.alpha), summary_csv)

    logger.info("[run] completed %d runs in %.2fs", len(seeds), time.time() - start)
    return rows


def _run_task(cfg_dict: Dict[str, object], seed: int) -> List[Dict[str, object]]:
    cfg = SimulationConfig(**cfg_dict)  # type: ignore[arg-type]
    start_run = time.time()
    sim = PowerGridDetectionSimulation(
        seed,
        sensor_stride=cfg.sensor_stride,
        step_minutes=cfg.step_minutes,
    )
    summary = sim.run(cfg.rounds, cfg.outages_per_round)
    duration = time.time() - start_run

    rows: List[Dict[str, object]] = []
    for name, s in summary.items():
        rows.append(
            {
                "seed": seed,
                "detector": name,
                "sensors": len(sim.sensors),
                "trials": s.trials,
                "successes": s.successes,
                "accuracy": s.accuracy,
                "outcomes": s.outcomes,
                "duration_sec": duration,
            }
        )
    return rows


def aggregate_by_detector(
    rows: Iterable[Mapping[str, object]],
    certificate: str = "clopper_pearson",
    alpha: float = 0.05,
) -> Dict[str, Dict[str, float]]:
    """
    Pool trials and successes per detector across seeds and attach
    confidence bounds on the pooled accuracy.
    """
    cert = make_certificate(certificate, alpha)
    pooled: Dict[str, Dict[str, float]] = {}
    for row in rows:
        bucket = pooled.setdefault(
            str(row["detector"]), {"runs": 0.0, "trials": 0.0, "successes": 0.0}
        )
        bucket["runs"] += 1
        bucket["trials"] += int(row["trials"])  # type: ignore[arg-type]
        bucket["successes"] += int(row["successes"])  # type: ignore[arg-type]

    for bucket in pooled.values():
        n = int(bucket["trials"])
        s = int(bucket["successes"])
        bucket["accuracy"] = s / n if n else 0.0
        bucket["lower_bound"] = cert.lower_confidence_bound(s, n)
        bucket["upper_bound"] = cert.upper_confidence_bound(s, n)
    return pooled


def compare_detectors(
    aggregated: Mapping[str, Mapping[str, float]],
    baseline: str = GROUND_DETECTOR,
) -> Dict[str, object]:
    """
    Rank detectors against the ground baseline.

    Returns the best detector, its accuracy, the percentage-point
    difference of every detector against the baseline, the fleet size the
    winner needs when it is a satellite profile, and which detectors beat
    the baseline with non-overlapping confidence bounds.
    """
    best_name = max(aggregated, key=lambda name: aggregated[name]["accuracy"])
    base = aggregated.get(baseline, {"accuracy": 0.0, "upper_bound": 1.0})
    deltas = {
        name: (stats["accuracy"] - base["accuracy"]) * 100.0
        for name, stats in aggregated.items()
        if name != baseline
    }
    credible = sorted(
        name
        for name, stats in aggregated.items()
        if name != baseline and stats["lower_bound"] > base["upper_bound"]
    )

    fleet_size = None
    if best_name != baseline:
        fleet_size = SatelliteProfile.from_description(best_name).fleet_size

    return {
        "best": best_name,
        "best_accuracy": aggregated[best_name]["accuracy"],
        "delta_pp": deltas,
        "credibly_better": credible,
        "fleet_size": fleet_size,
    }


RUN_FIELDS: Sequence[str] = (
    "seed",
    "detector",
    "sensors",
    "trials",
    "successes",
    "accuracy",
    "duration_sec",
)

SUMMARY_FIELDS: Sequence[str] = (
    "detector",
    "runs",
    "trials",
    "successes",
    "accuracy",
    "lower_bound",
    "upper_bound",
)


def write_runs_csv(rows: Iterable[Mapping[str, object]], path: Path) -> None:
    """
    Write per-run detector rows to CSV. Outcome sequences stay in memory.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(RUN_FIELDS), extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow(row)


def write_summary_csv(aggregated: Mapping[str, Mapping[str, float]], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(SUMMARY_FIELDS))
        writer.writeheader()
        for name in sorted(aggregated, key=_detector_order):
            stats = aggregated[name]
            writer.writerow({"detector": name, **{k: stats[k] for k in SUMMARY_FIELDS[1:]}})


def _detector_order(name: str) -> int:
    order = detector_names()
    return order.index(name) if name in order else len(order)


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG)
    parser.add_argument("--out-dir", type=Path, default=Path(__file__).parent / "experiments" / "results")
    parser.add_argument("--sequential", action="store_true", help="disable the process pool")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cfg = load_config(args.config)
    runs_csv = args.out_dir / "runs.csv"
    summary_csv = args.out_dir / "summary.csv"
    rows = run_experiments(
        args.config,
        runs_csv=runs_csv,
        summary_csv=summary_csv,
        use_processes=not args.sequential,
    )

    aggregated = aggregate_by_detector(rows, cfg.certificate, cfg.alpha)
    for name in sorted(aggregated, key=_detector_order):
        stats = aggregated[name]
        print(
            f"{name:<26} trials={int(stats['trials']):<6} successes={int(stats['successes']):<6} "
            f"accuracy={stats['accuracy']:.2%} [{stats['lower_bound']:.3f}, {stats['upper_bound']:.3f}]"
        )

    comparison = compare_detectors(aggregated)
    print(f"Best overall performer: {comparison['best']} ({comparison['best_accuracy']:.2%})")
    for name, delta in comparison["delta_pp"].items():  # type: ignore[union-attr]
        print(f"{name} vs {GROUND_DETECTOR}: {delta:+.2f} percentage points")
    if comparison["fleet_size"] is not None:
        print(f"{comparison['best']} requires {comparison['fleet_size']} satellites for global coverage")
    print(f"Wrote runs to {runs_csv} and summary to {summary_csv}")


if __name__ == "__main__":
    main()
