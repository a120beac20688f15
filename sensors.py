"""
Ground sensor network deployment and nearest-sensor lookup.

Candidate sites are taken on a regular stride over the terrain grid. Each
candidate consumes one draw from the shared stream and gets a sensor when
the draw falls below its terrain's deployment probability, so populated
terrain ends up densely instrumented while ocean and arctic cells stay
sparse.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple
import logging
import random

import numpy as np

from terrain import TerrainCategory, TerrainGrid

logger = logging.getLogger(__name__)

DEFAULT_STRIDE = 5


@dataclass(frozen=True)
class GroundSensor:
    """
    Point sensor fixed to one grid cell.

    Accuracy is inherited from the terrain at deployment time and never
    changes afterwards.
    """

    id: str
    lat: int
    lon: int
    terrain: TerrainCategory
    accuracy: float

    @classmethod
    def at(cls, lat: int, lon: int, terrain: TerrainCategory) -> "GroundSensor":
        return cls(
            id=sensor_id(lat, lon),
            lat=lat,
            lon=lon,
            terrain=terrain,
            accuracy=terrain.sensor_accuracy,
        )


def sensor_id(lat: int, lon: int) -> str:
    return f"GS_{lat}_{lon}"


class SensorNetwork:
    """
    Mapping from sensor id to GroundSensor.

    Iteration follows deployment order. Nearest-sensor queries run against
    cached coordinate arrays; ties resolve to the earliest deployed sensor.
    """

    def __init__(self) -> None:
        self._sensors: Dict[str, GroundSensor] = {}
        self._coords: Optional[np.ndarray] = None
        self._ordered: Tuple[GroundSensor, ...] = ()

    def add(self, sensor: GroundSensor) -> None:
        if sensor.id in self._sensors:
            raise ValueError(f"Sensor '{sensor.id}' is already deployed.")
        self._sensors[sensor.id] = sensor
        self._coords = None

    def __len__(self) -> int:
        return len(self._sensors)

    def __iter__(self) -> Iterator[GroundSensor]:
        return iter(self._sensors.values())

    def __contains__(self, sid: object) -> bool:
        return sid in self._sensors

    def __getitem__(self, sid: str) -> GroundSensor:
        return self._sensors[sid]

    def ids(self) -> list[str]:
        return list(self._sensors)

    def _coordinates(self) -> np.ndarray:
        if self._coords is None:
            self._ordered = tuple(self._sensors.values())
            self._coords = np.array(
                [(s.lat, s.lon) for s in self._ordered], dtype=float
            ).reshape(-1, 2)
        return self._coords

    def nearest(self, lat: float, lon: float) -> Optional[Tuple[GroundSensor, float]]:
        """
        Return the closest sensor and its planar distance in grid degrees,
        or None when the network is empty.
        """
        if not self._sensors:
            return None
        coords = self._coordinates()
        distances = np.sqrt((coords[:, 0] - lat) ** 2 + (coords[:, 1] - lon) ** 2)
        # argmin returns the first minimum, i.e. the earliest deployed sensor.
        idx = int(np.argmin(distances))
        return self._ordered[idx], float(distances[idx])

    def by_terrain(self) -> Dict[TerrainCategory, int]:
        counts: Dict[TerrainCategory, int] = {cat: 0 for cat in TerrainCategory}
        for sensor in self._sensors.values():
            counts[sensor.terrain] += 1
        return counts

    def __repr__(self) -> str:
        return f"SensorNetwork(sensors={len(self)})"


def deploy_ground_sensors(
    grid: TerrainGrid,
    rng: random.Random,
    stride: int = DEFAULT_STRIDE,
) -> SensorNetwork:
    """
    Deploy sensors over the grid at the given stride.

    One draw is consumed per candidate site, in latitude-major order.

    Raises:
        ValueError: if stride is not positive.
    """
    if stride <= 0:
        raise ValueError("Sensor stride must be positive.")

    network = SensorNetwork()
    for lat in range(0, grid.height, stride):
        for lon in range(0, grid.width, stride):
            terrain = grid.category_at(lat, lon)
            if rng.random() < terrain.deployment_probability:
                network.add(GroundSensor.at(lat, lon, terrain))

    logger.info("Deployed %d ground sensors globally", len(network))
    return network
