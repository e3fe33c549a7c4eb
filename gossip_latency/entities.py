"""Random people and cities."""

import numpy as np
from dataclasses import dataclass


# Car owners cover ~100 km a day, everyone else ~12 km by bike.
CAR_RADIUS = 100
BIKE_RADIUS = 12


@dataclass(frozen=True)
class Coordinate:
    """A point on the map (decorative, no distance weighting)."""

    x: int
    y: int


@dataclass(frozen=True)
class Person:
    """A simulated individual, stored as a graph node payload."""

    id: int
    home: Coordinate
    has_car: bool
    has_net_now: bool


@dataclass(frozen=True)
class City:
    """A logical partition of residents."""

    id: int
    center: Coordinate
    radius: int


def _random_uint(rng: np.random.RandomState, n_bytes: int) -> int:
    return int.from_bytes(rng.bytes(n_bytes), "little")


def _random_coordinate(rng: np.random.RandomState) -> Coordinate:
    return Coordinate(x=_random_uint(rng, 8), y=_random_uint(rng, 8))


def new_person(
    rng: np.random.RandomState,
    p_car: float = 0.5,
    p_net: float = 0.9,
) -> Person:
    """
    Generate a person with independently sampled attributes.

    Args:
        rng: Random state
        p_car: Probability of owning a car
        p_net: Probability of being online right now

    Returns:
        New Person with a 128-bit id
    """
    return Person(
        id=_random_uint(rng, 16),
        home=_random_coordinate(rng),
        has_car=bool(rng.rand() < p_car),
        has_net_now=bool(rng.rand() < p_net),
    )


def new_city(rng: np.random.RandomState) -> City:
    """Generate a city whose radius is CAR_RADIUS or BIKE_RADIUS with equal odds."""
    city_id = _random_uint(rng, 16)
    center = _random_coordinate(rng)
    d = rng.rand()
    return City(
        id=city_id,
        center=center,
        radius=CAR_RADIUS if d <= 0.5 else BIKE_RADIUS,
    )
