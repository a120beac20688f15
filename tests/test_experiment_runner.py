import csv
from pathlib import Path

import pytest

from experiment_runner import (
    SimulationConfig,
    aggregate_by_detector,
    compare_detectors,
    load_config,
    main,
    run_experiments,
)
from simulation import GROUND_DETECTOR, detector_names


def _write(tmp_path: Path, body: str) -> Path:
    cfg = tmp_path / "exp.yml"
    cfg.write_text(body)
    return cfg


def test_load_config_defaults_and_overrides(tmp_path: Path):
    cfg = load_config(_write(tmp_path, "rounds: 2\noutages_per_round: 7\n"))
    assert cfg == SimulationConfig(rounds=2, outages_per_round=7)
    assert cfg.seeds() == [12345]


def test_load_config_rejects_bad_input(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yml")
    with pytest.raises(ValueError):
        load_config(_write(tmp_path, "rounds: 1\nwarp_speed: 9\n"))
    with pytest.raises(ValueError):
        load_config(_write(tmp_path, "rounds: 0\n"))
    with pytest.raises(ValueError):
        load_config(_write(tmp_path, "certificate: bayes\n"))


def test_shipped_config_loads():
    cfg = load_config(Path(__file__).parent.parent / "experiments" / "experiments.yml")
    assert cfg.seed == 12345
    assert cfg.rounds == 5
    assert cfg.outages_per_round == 50


def test_run_experiments_multiple_seeds(tmp_path: Path):
    """Smoke-test: two seeds, one short round each, sequential execution."""
    cfg = _write(
        tmp_path,
        """
seed: 3
seed_count: 2
rounds: 1
outages_per_round: 5
""",
    )
    runs_csv = tmp_path / "out" / "runs.csv"
    summary_csv = tmp_path / "out" / "summary.csv"

    rows = run_experiments(cfg, runs_csv=runs_csv, summary_csv=summary_csv, use_processes=False)

    assert len(rows) == 2 * len(detector_names())
    assert [r["seed"] for r in rows[: len(detector_names())]] == [3] * len(detector_names())
    for row in rows:
        assert row["trials"] == 5
        assert 0 <= row["successes"] <= row["trials"]

    aggregated = aggregate_by_detector(rows)
    assert set(aggregated) == set(detector_names())
    for stats in aggregated.values():
        assert stats["runs"] == 2.0
        assert stats["trials"] == 10.0
        assert stats["lower_bound"] <= stats["accuracy"] <= stats["upper_bound"]

    with runs_csv.open() as f:
        run_rows = list(csv.DictReader(f))
    assert len(run_rows) == len(rows)
    assert "outcomes" not in run_rows[0]

    with summary_csv.open() as f:
        summary_rows = list(csv.DictReader(f))
    assert [r["detector"] for r in summary_rows] == detector_names()


def test_runs_are_reproducible(tmp_path: Path):
    cfg = _write(tmp_path, "seed: 11\nrounds: 1\noutages_per_round: 8\n")
    a = run_experiments(cfg, use_processes=False)
    b = run_experiments(cfg, use_processes=False)
    assert [r["outcomes"] for r in a] == [r["outcomes"] for r in b]


def test_compare_detectors_against_ground():
    aggregated = {
        GROUND_DETECTOR: {"accuracy": 0.40, "lower_bound": 0.30, "upper_bound": 0.50},
        "MEO 2000km": {"accuracy": 0.55, "lower_bound": 0.45, "upper_bound": 0.65},
        "GEO 35786km (GOES-like)": {"accuracy": 0.80, "lower_bound": 0.70, "upper_bound": 0.88},
    }
    result = compare_detectors(aggregated)

    assert result["best"] == "GEO 35786km (GOES-like)"
    assert result["best_accuracy"] == 0.80
    assert result["fleet_size"] == 3
    assert result["credibly_better"] == ["GEO 35786km (GOES-like)"]
    assert result["delta_pp"]["MEO 2000km"] == pytest.approx(15.0)


def test_compare_detectors_ground_wins():
    aggregated = {
        GROUND_DETECTOR: {"accuracy": 0.9, "lower_bound": 0.8, "upper_bound": 0.95},
        "HEO Molniya": {"accuracy": 0.5, "lower_bound": 0.4, "upper_bound": 0.6},
    }
    result = compare_detectors(aggregated)
    assert result["best"] == GROUND_DETECTOR
    assert result["fleet_size"] is None
    assert result["credibly_better"] == []


def test_main_writes_outputs(tmp_path: Path, capsys):
    cfg = _write(tmp_path, "seed: 5\nrounds: 1\noutages_per_round: 4\n")
    out_dir = tmp_path / "results"

    main(["--config", str(cfg), "--out-dir", str(out_dir), "--sequential", "--log-level", "WARNING"])

    assert (out_dir / "runs.csv").exists()
    assert (out_dir / "summary.csv").exists()
    printed = capsys.readouterr().out
    assert "Best overall performer" in printed
    assert GROUND_DETECTOR in printed
