"""Repeated relay trials between two cities."""

import numpy as np
from dataclasses import dataclass, asdict
from typing import Callable, List, Optional
from loguru import logger

from gossip_latency.config import Config
from gossip_latency.errors import DestinationNotReachedError
from gossip_latency.relay import RelayEstimator
from gossip_latency.world import World


@dataclass
class TrialResult:
    """One start/destination relay and its outcome."""

    trial: int
    start: int
    destination: int
    delivered: bool
    hours: Optional[int] = None
    rounds: Optional[int] = None

    def to_dict(self) -> dict:
        return asdict(self)


def format_trial(start: int, destination: int, hours: int) -> str:
    return f"Sending a message from {start} to {destination} took {hours} hours"


def run_trials(
    world: World,
    config: Config,
    rng: Optional[np.random.RandomState] = None,
    report: Optional[Callable[[str], None]] = None,
) -> List[TrialResult]:
    """
    Relay messages between random residents of the source and destination cities.

    Trials that hit the configured round or time bound are recorded as not
    delivered. A NoIncidentEdgeError from the relay propagates.

    Args:
        world: Built world
        config: Configuration object
        rng: Random state shared by sampling and relaying
        report: Callback receiving one line per delivered trial

    Returns:
        List of trial results, in trial order
    """
    if rng is None:
        rng = np.random.RandomState(config.seed)

    exp = config.experiment
    source_city = world.city_at(exp.source_city)
    destination_city = world.city_at(exp.destination_city)
    estimator = RelayEstimator(world.graph, config, rng)

    logger.info(
        f"Running {exp.trials} trials: city {exp.source_city} -> city {exp.destination_city}"
    )

    results = []
    for trial in range(exp.trials):
        start = world.sample_resident(source_city, rng)
        destination = world.sample_resident(destination_city, rng)
        try:
            outcome = estimator.run(start, destination)
        except DestinationNotReachedError as e:
            logger.warning(f"Trial {trial}: {e}")
            results.append(TrialResult(trial, start, destination, delivered=False, rounds=e.rounds))
            continue

        line = format_trial(start, destination, outcome.elapsed)
        logger.info(line)
        if report is not None:
            report(line)
        results.append(
            TrialResult(
                trial,
                start,
                destination,
                delivered=True,
                hours=outcome.elapsed,
                rounds=outcome.rounds,
            )
        )

    return results
