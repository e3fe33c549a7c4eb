"""Exceptions raised by the relay estimator."""

from typing import Dict, Optional


class GossipLatencyError(Exception):
    """Base class for package errors."""


class NoIncidentEdgeError(GossipLatencyError):
    """A node holding the message has no edge to relay it along."""

    def __init__(self, node: int):
        self.node = node
        super().__init__(f"Node {node} holds the message but has no incident edges")


class DestinationNotReachedError(GossipLatencyError):
    """The relay hit its round or time bound before reaching the destination."""

    def __init__(self, destination: int, rounds: int, state: Optional[Dict[int, int]] = None):
        self.destination = destination
        self.rounds = rounds
        self.state = dict(state or {})
        super().__init__(
            f"Destination {destination} not reached after {rounds} rounds "
            f"({len(self.state)} holders)"
        )
