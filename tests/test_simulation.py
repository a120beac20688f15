"""
Integration tests for the round loop: draw ordering, determinism and the
aggregate invariants every run must satisfy.
"""

import random

import pytest

from constellation import SatelliteProfile
from sensors import SensorNetwork
from simulation import GROUND_DETECTOR, PowerGridDetectionSimulation, detector_names


def test_every_detector_scores_every_outage():
    sim = PowerGridDetectionSimulation(12345)
    summary = sim.run(rounds=2, outages_per_round=10)

    assert list(summary) == detector_names()
    for name, s in summary.items():
        assert s.trials == 20, name
        assert 0 <= s.successes <= s.trials
        assert len(s.outcomes) == s.trials
        assert s.accuracy == pytest.approx(s.successes / s.trials)
    assert sim.rounds_completed == 2


def test_same_seed_reproduces_outcome_sequences():
    a = PowerGridDetectionSimulation(12345).run(rounds=3, outages_per_round=20)
    b = PowerGridDetectionSimulation(12345).run(rounds=3, outages_per_round=20)

    assert {k: v.outcomes for k, v in a.items()} == {k: v.outcomes for k, v in b.items()}
    assert {k: v.accuracy for k, v in a.items()} == {k: v.accuracy for k, v in b.items()}


def test_explicit_stream_matches_seeded_construction():
    a = PowerGridDetectionSimulation(77)
    b = PowerGridDetectionSimulation(0, rng=random.Random(77))

    assert len(a.sensors) == len(b.sensors)
    assert a.run(1, 15) == b.run(1, 15)


def test_world_is_built_once_with_expected_shape():
    sim = PowerGridDetectionSimulation(12345)

    assert sim.grid.shape == (180, 360)
    assert 1000 <= len(sim.sensors) <= 1200
    assert {p: len(s) for p, s in sim.constellations.items()} == {
        p: p.fleet_size for p in SatelliteProfile
    }


def test_satellites_advance_once_per_round():
    sim = PowerGridDetectionSimulation(12345)
    geo = sim.constellations[SatelliteProfile.GEO_35786KM]
    molniya = sim.constellations[SatelliteProfile.HEO_MOLNIYA]
    assert geo[0].lon == 0.0

    sim.run_round(5)
    assert geo[0].lon == pytest.approx(15.0)
    assert molniya[0].lon == pytest.approx(30.0)

    sim.run_round(5)
    assert geo[0].lon == pytest.approx(30.0)


def test_custom_step_minutes():
    sim = PowerGridDetectionSimulation(12345, step_minutes=120)
    sim.run_round(1)
    assert sim.constellations[SatelliteProfile.GEO_35786KM][1].lon == pytest.approx(150.0)


def test_score_outage_follows_profile_order():
    sim = PowerGridDetectionSimulation(12345)
    from outages import generate_outages

    outage = generate_outages(sim.grid, sim.rng, 1)[0]
    assert list(sim.score_outage(outage)) == detector_names()


def test_empty_sensor_network_forces_ground_misses():
    sim = PowerGridDetectionSimulation(12345)
    sim.sensors = SensorNetwork()
    summary = sim.run(rounds=1, outages_per_round=25)

    assert summary[GROUND_DETECTOR].trials == 25
    assert summary[GROUND_DETECTOR].successes == 0
    assert summary[GROUND_DETECTOR].accuracy == 0.0


def test_zero_outage_rounds_still_advance():
    sim = PowerGridDetectionSimulation(12345)
    summary = sim.run(rounds=2, outages_per_round=0)

    assert all(s.trials == 0 and s.accuracy == 0.0 for s in summary.values())
    assert sim.constellations[SatelliteProfile.GEO_35786KM][0].lon == pytest.approx(30.0)


def test_invalid_round_count():
    with pytest.raises(ValueError):
        PowerGridDetectionSimulation(12345).run(rounds=0)
