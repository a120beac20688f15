"""
Monte Carlo driver comparing ground sensors with satellite constellations.

The simulation owns the single random stream and every piece of mutable
state. Construction builds the world in a fixed order (terrain grid, ground
sensors, constellations); each round then generates a batch of outages,
scores every outage against the ground network and each constellation in
profile enumeration order, and finally advances every satellite. Reordering
any of these steps changes every subsequent draw.
"""

from __future__ import annotations

from typing import Dict, List, Optional
import logging
import random

from constellation import (
    Satellite,
    SatelliteProfile,
    advance_constellation,
    deploy_constellations,
)
from detection import detect_by_constellation, detect_by_ground
from orchestrator.risk import DetectionResults, DetectorSummary
from outages import Outage, generate_outages
from sensors import DEFAULT_STRIDE, SensorNetwork, deploy_ground_sensors
from terrain import DEFAULT_SEED, TerrainGrid, generate_terrain_grid

logger = logging.getLogger(__name__)

GROUND_DETECTOR = "Ground Sensors"

DEFAULT_ROUNDS = 5
DEFAULT_OUTAGES_PER_ROUND = 50
DEFAULT_STEP_MINUTES = 60


def detector_names() -> List[str]:
    """Ground detector first, then one per profile in enumeration order."""
    return [GROUND_DETECTOR] + [p.description for p in SatelliteProfile]


class PowerGridDetectionSimulation:
    def __init__(
        self,
        seed: int = DEFAULT_SEED,
        *,
        sensor_stride: int = DEFAULT_STRIDE,
        step_minutes: float = DEFAULT_STEP_MINUTES,
        rng: Optional[random.Random] = None,
    ):
        self.seed = seed
        self.rng = rng or random.Random(seed)
        self.step_minutes = float(step_minutes)

        self.grid: TerrainGrid = generate_terrain_grid(self.rng)
        self.sensors: SensorNetwork = deploy_ground_sensors(self.grid, self.rng, sensor_stride)
        self.constellations: Dict[SatelliteProfile, List[Satellite]] = deploy_constellations(self.rng)

        self.results = DetectionResults()
        for name in detector_names():
            self.results.register(name)
        self.rounds_completed = 0

    def score_outage(self, outage: Outage) -> Dict[str, bool]:
        """Score one outage against every detector, in fixed order."""
        outcomes = {GROUND_DETECTOR: detect_by_ground(self.sensors, outage, self.rng)}
        for profile, satellites in self.constellations.items():
            outcomes[profile.description] = detect_by_constellation(
                satellites, profile, outage, self.rng
            )
        return outcomes

    def advance(self, minutes: Optional[float] = None) -> None:
        step = self.step_minutes if minutes is None else float(minutes)
        for satellites in self.constellations.values():
            advance_constellation(satellites, step)

    def run_round(self, outage_count: int = DEFAULT_OUTAGES_PER_ROUND) -> List[Outage]:
        outages = generate_outages(self.grid, self.rng, outage_count)
        for outage in outages:
            for name, detected in self.score_outage(outage).items():
                self.results.record(name, detected)
        self.advance()
        self.rounds_completed += 1
        return outages

    def run(
        self,
        rounds: int = DEFAULT_ROUNDS,
        outages_per_round: int = DEFAULT_OUTAGES_PER_ROUND,
    ) -> Dict[str, DetectorSummary]:
        if rounds <= 0:
            raise ValueError("rounds must be positive")

        for r in range(1, rounds + 1):
            logger.info("Running simulation round %d/%d (seed=%d)", r, rounds, self.seed)
            self.run_round(outages_per_round)
        return self.results.summary()
