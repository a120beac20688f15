# outages.py

from __future__ import annotations

from dataclasses import dataclass
from typing import List
import random

from terrain import TerrainCategory, TerrainGrid


@dataclass(frozen=True)
class Outage:
    """A single power outage; lives only for the trial that scores it."""

    lat: int
    lon: int
    terrain: TerrainCategory


def generate_outages(grid: TerrainGrid, rng: random.Random, count: int) -> List[Outage]:
    """
    Draw `count` independent outages uniformly over the grid.

    Each outage consumes two draws: latitude index, then longitude index.
    There is no spatial clustering and no memory of earlier batches.
    """
    if count < 0:
        raise ValueError("Outage count must be non-negative.")

    outages: List[Outage] = []
    for _ in range(count):
        lat = rng.randrange(grid.height)
        lon = rng.randrange(grid.width)
        outages.append(Outage(lat, lon, grid.category_at(lat, lon)))
    return outages
