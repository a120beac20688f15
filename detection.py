"""
Per-outage detection models for ground sensors and satellite constellations.

Ground path:
    Only the nearest deployed sensor is consulted. Its accuracy decays
    exponentially with planar distance (decay constant 10 grid degrees):

        P(detect) = accuracy * exp(-distance / 10)

Satellite path:
    Every satellite whose coverage radius reaches the outage gets one
    independent attempt with

        P(detect) = satellite.accuracy * terrain_factor(terrain, profile)

    The first successful attempt ends the evaluation for that profile. This
    is an OR across the constellation evaluated in deployment order, not a
    best-of, and it determines how many draws each outage consumes.

Each attempt consumes exactly one draw from the shared stream; satellites
out of range and empty sensor networks consume none.
"""

from __future__ import annotations

from math import exp
from typing import Iterable
import logging
import random

from constellation import Satellite, SatelliteProfile
from outages import Outage
from sensors import SensorNetwork
from terrain import TerrainCategory

logger = logging.getLogger(__name__)

GROUND_DECAY_DEG = 10.0

# Above this altitude terrain matters less to detection.
HIGH_ALTITUDE_KM = 10000
DAMPED_FACTOR_FLOOR = 0.8
DAMPED_FACTOR_WEIGHT = 0.2


def ground_detection_probability(accuracy: float, distance: float) -> float:
    return accuracy * exp(-distance / GROUND_DECAY_DEG)


def terrain_factor(terrain: TerrainCategory, profile: SatelliteProfile) -> float:
    factor = terrain.satellite_factor
    if profile.altitude_km > HIGH_ALTITUDE_KM:
        factor = DAMPED_FACTOR_FLOOR + DAMPED_FACTOR_WEIGHT * factor
    return factor


def detect_by_ground(network: SensorNetwork, outage: Outage, rng: random.Random) -> bool:
    nearest = network.nearest(outage.lat, outage.lon)
    if nearest is None:
        # Degenerate but valid: nothing deployed, nothing detected.
        return False

    sensor, distance = nearest
    prob = ground_detection_probability(sensor.accuracy, distance)
    detected = rng.random() < prob
    logger.debug(
        "ground outage=(%d,%d) sensor=%s d=%.2f p=%.3f -> %s",
        outage.lat, outage.lon, sensor.id, distance, prob, detected,
    )
    return detected


def detect_by_constellation(
    satellites: Iterable[Satellite],
    profile: SatelliteProfile,
    outage: Outage,
    rng: random.Random,
) -> bool:
    factor = terrain_factor(outage.terrain, profile)
    for sat in satellites:
        if not sat.can_detect(outage.lat, outage.lon):
            continue
        prob = sat.accuracy * factor
        if rng.random() < prob:
            logger.debug(
                "%s outage=(%d,%d) detected by %s p=%.3f",
                profile.name, outage.lat, outage.lon, sat.id, prob,
            )
            return True
    return False
