"""
Satellite constellation deployment and position updates.

Each SatelliteProfile describes one constellation type (altitude tier,
orbital period, fleet size needed for global coverage and a base detection
accuracy drawn from nighttime-imagery outage studies). Constellations are
lists of Satellite instances spread over latitude bands and evenly over
longitude, then drifted eastward once per simulated round.

Orbits are deliberately simplified: circular orbits keep their latitude and
only drift in longitude; the eccentric Molniya-type profile additionally
swings in latitude to mimic its high-latitude dwell.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from math import radians, sin, sqrt
from typing import Dict, Iterable, List, Mapping, Optional
import logging
import random

logger = logging.getLogger(__name__)

# Coverage radius model, in planar grid degrees.
COVERAGE_BASE_DEG = 50.0
COVERAGE_KM_PER_DEG = 1000.0
MAX_COVERAGE_DEG = 180.0

# Per-instance accuracy jitter: base * (JITTER_FLOOR + JITTER_SPAN * U).
JITTER_FLOOR = 0.95
JITTER_SPAN = 0.1

# Amplitude of the eccentric profile's latitude swing.
ECCENTRIC_LAT_AMPLITUDE_DEG = 60.0


@dataclass(frozen=True)
class ProfileSpec:
    """
    Fixed constellation parameters.

    base_accuracy:   detection accuracy of a nominal instrument
    altitude_km:     orbital altitude (apogee for the eccentric profile)
    orbit_period_min: minutes per revolution
    fleet_size:      satellites required for global coverage
    eccentric:       whether latitude oscillates with longitude
    """

    base_accuracy: float
    altitude_km: int
    description: str
    orbit_period_min: int
    fleet_size: int
    eccentric: bool = False


class SatelliteProfile(Enum):
    LEO_400KM = "leo_400km"
    LEO_800KM = "leo_800km"
    MEO_2000KM = "meo_2000km"
    MEO_10000KM = "meo_10000km"
    HEO_MOLNIYA = "heo_molniya"
    GEO_35786KM = "geo_35786km"

    @property
    def spec(self) -> ProfileSpec:
        return PROFILE_TABLE[self]

    @property
    def base_accuracy(self) -> float:
        return PROFILE_TABLE[self].base_accuracy

    @property
    def altitude_km(self) -> int:
        return PROFILE_TABLE[self].altitude_km

    @property
    def description(self) -> str:
        return PROFILE_TABLE[self].description

    @property
    def orbit_period_min(self) -> int:
        return PROFILE_TABLE[self].orbit_period_min

    @property
    def fleet_size(self) -> int:
        return PROFILE_TABLE[self].fleet_size

    @property
    def eccentric(self) -> bool:
        return PROFILE_TABLE[self].eccentric

    @property
    def coverage_radius(self) -> float:
        return coverage_radius(self.altitude_km)

    @classmethod
    def from_description(cls, description: str) -> "SatelliteProfile":
        for profile in cls:
            if profile.description == description:
                return profile
        raise ValueError(f"Unknown satellite profile description: {description!r}")


PROFILE_TABLE: Mapping[SatelliteProfile, ProfileSpec] = {
    SatelliteProfile.LEO_400KM: ProfileSpec(0.847, 400, "LEO 400km (VIIRS-like)", 90, 180),
    SatelliteProfile.LEO_800KM: ProfileSpec(0.876, 800, "LEO 800km (Landsat-like)", 100, 150),
    SatelliteProfile.MEO_2000KM: ProfileSpec(0.892, 2000, "MEO 2000km", 120, 90),
    SatelliteProfile.MEO_10000KM: ProfileSpec(0.915, 10000, "MEO 10000km", 360, 45),
    # 12-hour eccentric orbit
    SatelliteProfile.HEO_MOLNIYA: ProfileSpec(0.883, 26560, "HEO Molniya", 720, 12, eccentric=True),
    SatelliteProfile.GEO_35786KM: ProfileSpec(0.932, 35786, "GEO 35786km (GOES-like)", 1440, 3),
}


def coverage_radius(altitude_km: float) -> float:
    """Planar detection radius in degrees; grows with altitude, capped at global reach."""
    return min(COVERAGE_BASE_DEG + altitude_km / COVERAGE_KM_PER_DEG, MAX_COVERAGE_DEG)


@dataclass
class Satellite:
    """
    One orbiting detector.

    Position is mutated by advance(); accuracy is sampled once at creation.
    """

    profile: SatelliteProfile
    index: int
    accuracy: float
    lat: float = 0.0
    lon: float = 0.0
    id: str = field(default="")

    def __post_init__(self) -> None:
        if not self.id:
            self.id = f"{self.profile.name}-{self.index}"

    @property
    def coverage_radius(self) -> float:
        return self.profile.coverage_radius

    def distance_to(self, lat: float, lon: float) -> float:
        return sqrt((self.lat - lat) ** 2 + (self.lon - lon) ** 2)

    def can_detect(self, lat: float, lon: float) -> bool:
        return self.distance_to(lat, lon) <= self.coverage_radius

    def advance(self, minutes: float) -> None:
        """Drift eastward by the profile's angular speed over `minutes`."""
        degrees_per_minute = 360.0 / self.profile.orbit_period_min
        self.lon = (self.lon + degrees_per_minute * minutes) % 360
        if self.profile.eccentric:
            self.lat = ECCENTRIC_LAT_AMPLITUDE_DEG * sin(radians(self.lon * 2))


def initial_position(index: int, fleet_size: int) -> tuple[float, float]:
    """
    Spread satellites over latitude bands of 10 degrees (-90..80) and
    evenly over longitude.
    """
    lat = float((index % 18 - 9) * 10)
    lon = (360.0 / fleet_size) * index
    return lat, lon


def sample_accuracy(base_accuracy: float, rng: random.Random) -> float:
    """Per-instance accuracy, never below JITTER_FLOOR of the base."""
    return base_accuracy * (JITTER_FLOOR + JITTER_SPAN * rng.random())


def deploy_constellation(profile: SatelliteProfile, rng: random.Random) -> List[Satellite]:
    """
    Build the full fleet for one profile.

    One draw per satellite is consumed, in index order, for its accuracy
    jitter.
    """
    satellites: List[Satellite] = []
    for i in range(profile.fleet_size):
        lat, lon = initial_position(i, profile.fleet_size)
        satellites.append(
            Satellite(
                profile=profile,
                index=i,
                accuracy=sample_accuracy(profile.base_accuracy, rng),
                lat=lat,
                lon=lon,
            )
        )
    return satellites


def deploy_constellations(
    rng: random.Random,
    profiles: Optional[Iterable[SatelliteProfile]] = None,
) -> Dict[SatelliteProfile, List[Satellite]]:
    """
    Deploy one constellation per profile, in enumeration order.

    Args:
        rng: Shared random stream.
        profiles: Profiles to deploy. Defaults to every SatelliteProfile.

    Returns:
        Mapping of profile to its satellites, keyed in deployment order.
    """
    constellations: Dict[SatelliteProfile, List[Satellite]] = {}
    for profile in (list(SatelliteProfile) if profiles is None else profiles):
        constellations[profile] = deploy_constellation(profile, rng)
        logger.info("Deployed %d %s satellites", profile.fleet_size, profile.description)
    return constellations


def advance_constellation(satellites: Iterable[Satellite], minutes: float) -> None:
    for sat in satellites:
        sat.advance(minutes)
