"""
Synthetic terrain grid generation.

The planet is modelled as a 180 x 360 matrix with one cell per integer
latitude/longitude degree. Latitude index 90 sits on the equator. Every cell
carries exactly one TerrainCategory; the category's coefficients (ground
sensor accuracy, sensor deployment probability and satellite terrain factor)
live in a fixed lookup table rather than on subclasses.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Sequence, Tuple
import logging
import random

import numpy as np

logger = logging.getLogger(__name__)

GRID_HEIGHT = 180  # latitude indices
GRID_WIDTH = 360   # longitude indices

DEFAULT_SEED = 12345

# Cells further than this from the equator are always Arctic.
POLAR_LATITUDE_OFFSET = 75

# Simulated ocean block (exclusive bounds on both axes).
OCEAN_LON_RANGE: Tuple[int, int] = (140, 160)
OCEAN_LAT_RANGE: Tuple[int, int] = (20, 50)


class TerrainCategory(Enum):
    URBAN = "urban"
    SUBURBAN = "suburban"
    RURAL = "rural"
    FOREST = "forest"
    MOUNTAIN = "mountain"
    DESERT = "desert"
    OCEAN = "ocean"
    ARCTIC = "arctic"

    @property
    def coefficients(self) -> "TerrainCoefficients":
        return TERRAIN_TABLE[self]

    @property
    def sensor_accuracy(self) -> float:
        return TERRAIN_TABLE[self].sensor_accuracy

    @property
    def deployment_probability(self) -> float:
        return TERRAIN_TABLE[self].deployment_probability

    @property
    def satellite_factor(self) -> float:
        return TERRAIN_TABLE[self].satellite_factor

    @property
    def description(self) -> str:
        return TERRAIN_TABLE[self].description


@dataclass(frozen=True)
class TerrainCoefficients:
    """
    Fixed per-terrain coefficients.

    sensor_accuracy:        base accuracy of a ground sensor sited on this terrain
    deployment_probability: chance a candidate site on this terrain gets a sensor
    satellite_factor:       multiplier applied to satellite detection probability
    """

    description: str
    sensor_accuracy: float
    deployment_probability: float
    satellite_factor: float


# Ground accuracies follow smart-grid SCADA/PMU field studies; satellite
# factors capture light pollution, canopy, shadowing and weather effects.
TERRAIN_TABLE: Mapping[TerrainCategory, TerrainCoefficients] = {
    TerrainCategory.URBAN: TerrainCoefficients("Urban/City", 0.934, 0.95, 0.95),
    TerrainCategory.SUBURBAN: TerrainCoefficients("Suburban", 0.912, 0.80, 1.00),
    TerrainCategory.RURAL: TerrainCoefficients("Rural", 0.856, 0.60, 1.05),
    TerrainCategory.FOREST: TerrainCoefficients("Forest", 0.798, 0.30, 0.85),
    TerrainCategory.MOUNTAIN: TerrainCoefficients("Mountain", 0.743, 0.25, 0.80),
    TerrainCategory.DESERT: TerrainCoefficients("Desert", 0.821, 0.20, 1.10),
    TerrainCategory.OCEAN: TerrainCoefficients("Ocean", 0.623, 0.05, 0.70),
    TerrainCategory.ARCTIC: TerrainCoefficients("Arctic", 0.687, 0.10, 0.75),
}

# Cumulative thresholds applied to the per-cell draw outside the override
# regions. Anything at or above the last threshold is Ocean.
TERRAIN_THRESHOLDS: Sequence[Tuple[float, TerrainCategory]] = (
    (0.15, TerrainCategory.URBAN),
    (0.30, TerrainCategory.SUBURBAN),
    (0.50, TerrainCategory.RURAL),
    (0.65, TerrainCategory.FOREST),
    (0.75, TerrainCategory.MOUNTAIN),
    (0.85, TerrainCategory.DESERT),
)

_CATEGORIES: Tuple[TerrainCategory, ...] = tuple(TerrainCategory)
_CODES: Dict[TerrainCategory, int] = {cat: i for i, cat in enumerate(_CATEGORIES)}


class TerrainGrid:
    """
    Read-only latitude/longitude matrix of terrain categories.

    Categories are stored as small integer codes in a numpy array; callers
    only ever see TerrainCategory values.
    """

    def __init__(self, codes: np.ndarray):
        if codes.shape != (GRID_HEIGHT, GRID_WIDTH):
            raise ValueError(
                f"Terrain grid must be {GRID_HEIGHT}x{GRID_WIDTH}, got {codes.shape}"
            )
        self._codes = codes.copy()
        self._codes.setflags(write=False)

    @classmethod
    def filled(cls, category: TerrainCategory) -> "TerrainGrid":
        """Uniform grid, mostly useful for controlled experiments."""
        return cls(np.full((GRID_HEIGHT, GRID_WIDTH), _CODES[category], dtype=np.uint8))

    @property
    def height(self) -> int:
        return self._codes.shape[0]

    @property
    def width(self) -> int:
        return self._codes.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.height, self.width

    def category_at(self, lat: int, lon: int) -> TerrainCategory:
        return _CATEGORIES[int(self._codes[lat, lon])]

    def counts(self) -> Dict[TerrainCategory, int]:
        """Number of cells per category (every category present as a key)."""
        totals = np.bincount(self._codes.ravel(), minlength=len(_CATEGORIES))
        return {cat: int(totals[_CODES[cat]]) for cat in _CATEGORIES}

    def __repr__(self) -> str:
        return f"TerrainGrid({self.height}x{self.width})"


def classify_cell(lat: int, lon: int, draw: float) -> TerrainCategory:
    """
    Apply the fixed geographic rules to one cell.

    The polar override is checked first, then the simulated ocean block,
    and only then is the uniform draw mapped through the cumulative
    thresholds.
    """
    if abs(lat - GRID_HEIGHT // 2) > POLAR_LATITUDE_OFFSET:
        return TerrainCategory.ARCTIC
    if (
        OCEAN_LON_RANGE[0] < lon < OCEAN_LON_RANGE[1]
        and OCEAN_LAT_RANGE[0] < lat < OCEAN_LAT_RANGE[1]
    ):
        return TerrainCategory.OCEAN
    for threshold, category in TERRAIN_THRESHOLDS:
        if draw < threshold:
            return category
    return TerrainCategory.OCEAN


def generate_terrain_grid(rng: random.Random) -> TerrainGrid:
    """
    Populate the full grid from the shared random stream.

    Scan order is latitude-major, longitude-minor, and exactly one uniform
    draw is taken per cell (including cells decided by an override), so
    the stream always advances by GRID_HEIGHT * GRID_WIDTH draws.
    """
    codes = np.empty((GRID_HEIGHT, GRID_WIDTH), dtype=np.uint8)
    for lat in range(GRID_HEIGHT):
        for lon in range(GRID_WIDTH):
            draw = rng.random()
            codes[lat, lon] = _CODES[classify_cell(lat, lon, draw)]

    grid = TerrainGrid(codes)
    logger.debug("Generated terrain grid %s: %s", grid, grid.counts())
    return grid
