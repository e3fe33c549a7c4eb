"""
Gossip Latency Package

Builds a synthetic social-contact graph split into cities and estimates how
long a message takes to travel between distant people when every holder
keeps forwarding it to a random contact.
"""

__version__ = "0.1.0"
__author__ = "Author"

from gossip_latency.config import Config
from gossip_latency.errors import DestinationNotReachedError, NoIncidentEdgeError
from gossip_latency.graph import ContactGraph
from gossip_latency.world import World, build_world
from gossip_latency.relay import RelayEstimator, transmit
from gossip_latency.experiment import run_trials
from gossip_latency.metrics import TransitStatsCollector

__all__ = [
    "Config",
    "ContactGraph",
    "World",
    "build_world",
    "transmit",
    "RelayEstimator",
    "run_trials",
    "TransitStatsCollector",
    "NoIncidentEdgeError",
    "DestinationNotReachedError",
]
