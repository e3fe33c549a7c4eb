"""Metrics collection and analysis."""

import numpy as np
import networkx as nx
from collections import Counter
from typing import List, Dict
from loguru import logger

from gossip_latency.experiment import TrialResult
from gossip_latency.world import World


class TransitStatsCollector:
    """Collects trial results and aggregates transit times."""

    def __init__(self):
        self.trials: List[TrialResult] = []

    def add_trial(self, result: TrialResult) -> None:
        """Add a single trial result."""
        self.trials.append(result)

    def add_trials(self, results: List[TrialResult]) -> None:
        self.trials.extend(results)

    def compute_aggregate_metrics(self) -> dict:
        """
        Compute aggregate metrics across all trials.

        Returns:
            Dictionary of aggregate metrics (empty when no trials were added)
        """
        if not self.trials:
            return {}

        hours = [t.hours for t in self.trials if t.delivered]
        rounds = [t.rounds for t in self.trials if t.delivered]

        aggregate = {
            "num_trials": len(self.trials),
            "delivered": len(hours),
            "delivery_rate": len(hours) / len(self.trials),
            "mean_hours": float(np.mean(hours)) if hours else None,
            "median_hours": float(np.median(hours)) if hours else None,
            "std_hours": float(np.std(hours)) if hours else None,
            "min_hours": int(min(hours)) if hours else None,
            "max_hours": int(max(hours)) if hours else None,
            "mean_rounds": float(np.mean(rounds)) if rounds else None,
        }
        return aggregate


def graph_summary(world: World) -> Dict:
    """
    Describe the structure of a built world.

    Args:
        world: Built world

    Returns:
        Dictionary with node/edge counts, weight histogram, and per-city stats
    """
    graph = world.graph
    weight_counts = Counter(graph.weights())

    cities = []
    for k, city in enumerate(world.cities):
        residents = world.residents(city)
        cities.append(
            {
                "index": k,
                "radius": city.radius,
                "residents": len(residents),
                "car_owners": sum(1 for p, _ in residents if p.has_car),
                "online": sum(1 for p, _ in residents if p.has_net_now),
                "entry_point": world.entry_point(city),
            }
        )

    components = nx.number_connected_components(graph.to_networkx())
    if components > 1:
        logger.warning(f"Graph has {components} connected components")

    return {
        "num_nodes": graph.node_count,
        "num_edges": graph.edge_count,
        "edge_weights": {str(w): c for w, c in sorted(weight_counts.items())},
        "connected_components": components,
        "cities": cities,
    }
