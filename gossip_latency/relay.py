"""Randomized frontier relay: estimate how long a message takes to arrive.

Algorithm:

0. Start with ``state = {start: 0}``.
1. If the destination is in ``state``, return its recorded time.
2. Every node in ``state`` (old holders included) forwards along one incident
   edge picked uniformly at random, proposing ``(other end, t + weight)``.
3. Merge the proposals into ``state`` by overwriting, then go to 1.

The merge keeps the last proposal rather than the smallest, so a node's
recorded time can grow when it is revisited along a slower path. Whether
that models message staleness or is an estimator bug is an open question;
the behavior is kept as is.

Nothing guarantees termination. ``max_rounds`` and ``max_seconds`` are
opt-in bounds that raise ``DestinationNotReachedError`` instead of looping.
"""

import time
import numpy as np
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from loguru import logger

from gossip_latency.config import Config
from gossip_latency.errors import DestinationNotReachedError, NoIncidentEdgeError
from gossip_latency.graph import ContactGraph


@dataclass
class RelayResult:
    """Outcome of a single delivered relay."""

    start: int
    destination: int
    elapsed: int
    rounds: int
    holders: int

    def to_dict(self) -> dict:
        return {
            "start": self.start,
            "destination": self.destination,
            "elapsed": self.elapsed,
            "rounds": self.rounds,
            "holders": self.holders,
        }


def relay_round(
    graph: ContactGraph, state: Dict[int, int], rng: np.random.RandomState
) -> List[Tuple[int, int]]:
    """
    Let every holder forward the message along one random incident edge.

    Args:
        graph: Contact graph (read only)
        state: Current holder -> recorded time mapping
        rng: Random state

    Returns:
        Proposed (node, time) records, in holder order
    """
    proposals = []
    for node, t in state.items():
        edges = graph.incident_edges(node)
        if not edges:
            raise NoIncidentEdgeError(node)
        edge_id = edges[rng.randint(len(edges))]
        proposals.append((graph.other_endpoint(edge_id, node), t + graph.weight(edge_id)))
    return proposals


def run_relay(
    graph: ContactGraph,
    start: int,
    destination: int,
    rng: np.random.RandomState,
    max_rounds: Optional[int] = None,
    max_seconds: Optional[float] = None,
) -> RelayResult:
    """Relay from ``start`` until ``destination`` holds the message."""
    state: Dict[int, int] = {start: 0}
    rounds = 0
    deadline = time.monotonic() + max_seconds if max_seconds is not None else None

    while destination not in state:
        if max_rounds is not None and rounds >= max_rounds:
            raise DestinationNotReachedError(destination, rounds, state)
        if deadline is not None and time.monotonic() >= deadline:
            raise DestinationNotReachedError(destination, rounds, state)

        state.update(relay_round(graph, state, rng))
        rounds += 1
        logger.debug(f"Round {rounds}: {len(state)} holders")

    return RelayResult(
        start=start,
        destination=destination,
        elapsed=state[destination],
        rounds=rounds,
        holders=len(state),
    )


def transmit(
    graph: ContactGraph,
    start: int,
    destination: int,
    rng: np.random.RandomState,
    max_rounds: Optional[int] = None,
    max_seconds: Optional[float] = None,
) -> int:
    """
    Estimate hours for a message to travel from ``start`` to ``destination``.

    Args:
        graph: Contact graph (read only)
        start: Handle of the sender
        destination: Handle of the recipient
        rng: Random state
        max_rounds: Optional cap on relay rounds
        max_seconds: Optional wall-time cap

    Returns:
        Recorded arrival time at the destination, in hours

    Raises:
        NoIncidentEdgeError: A holder had no edge to forward along
        DestinationNotReachedError: A bound was hit before delivery
    """
    return run_relay(graph, start, destination, rng, max_rounds, max_seconds).elapsed


class RelayEstimator:
    """Runs relays over one graph with a shared random state and bounds."""

    def __init__(
        self,
        graph: ContactGraph,
        config: Optional[Config] = None,
        rng: Optional[np.random.RandomState] = None,
    ):
        """
        Initialize relay estimator.

        Args:
            graph: Built contact graph
            config: Configuration object (bounds come from config.experiment)
            rng: Random state (default: seeded from config.seed)
        """
        self.graph = graph
        self.config = config or Config()
        self.rng = rng if rng is not None else np.random.RandomState(self.config.seed)
        self.max_rounds = self.config.experiment.max_rounds
        self.max_seconds = self.config.experiment.max_seconds

        logger.info(
            f"Initialized RelayEstimator: nodes={graph.node_count}, "
            f"edges={graph.edge_count}, max_rounds={self.max_rounds}, "
            f"max_seconds={self.max_seconds}"
        )

    def run(self, start: int, destination: int) -> RelayResult:
        return run_relay(
            self.graph, start, destination, self.rng, self.max_rounds, self.max_seconds
        )

    def transmit(self, start: int, destination: int) -> int:
        return self.run(start, destination).elapsed
