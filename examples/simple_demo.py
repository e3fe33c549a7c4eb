#!/usr/bin/env python
"""Simple demonstration of gossip relay latency."""

import numpy as np
from pathlib import Path
import sys

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from gossip_latency.config import Config
from gossip_latency.entities import Coordinate, Person
from gossip_latency.graph import ContactGraph
from gossip_latency.world import build_world
from gossip_latency.relay import transmit
from gossip_latency.experiment import run_trials
from gossip_latency.metrics import TransitStatsCollector, graph_summary
from gossip_latency.viz import plot_transit_time_distribution


def demo_toy_path():
    """Demonstrate relay on a three-node path."""
    print("\n" + "=" * 60)
    print("DEMO 1: Toy Path A-B (2h) -C (5h)")
    print("=" * 60)

    graph = ContactGraph()
    for i in range(3):
        graph.add_node(Person(id=i, home=Coordinate(0, 0), has_car=False, has_net_now=False))
    graph.add_edge(0, 1, 2)
    graph.add_edge(1, 2, 5)

    rng = np.random.RandomState(42)
    hours = [transmit(graph, 0, 2, rng) for _ in range(20)]
    print(f"Transit times: {sorted(hours)}")
    print("Every result is 7 plus some number of 4-hour A-B round trips")


def demo_toy_world():
    """Demonstrate trials on a tiny world."""
    print("\n" + "=" * 60)
    print("DEMO 2: Toy World (3 cities)")
    print("=" * 60)

    config = Config.toy()
    rng = np.random.RandomState(config.seed)
    world = build_world(config, rng)

    summary = graph_summary(world)
    print(f"World built: {summary['num_nodes']} nodes, {summary['num_edges']} edges")
    print(f"Edges by weight: {summary['edge_weights']}")

    results = run_trials(world, config, rng, report=print)

    collector = TransitStatsCollector()
    collector.add_trials(results)
    aggregate = collector.compute_aggregate_metrics()
    print(f"Delivered: {aggregate['delivered']}/{aggregate['num_trials']}")
    if aggregate["mean_hours"] is not None:
        print(f"Mean transit time: {aggregate['mean_hours']:.1f} hours")

        output_dir = Path("runs/demo")
        plot_transit_time_distribution(
            [r.hours for r in results if r.delivered],
            output_path=output_dir / "transit_time_distribution.html",
        )
        print(f"Saved plot to {output_dir}")


if __name__ == "__main__":
    demo_toy_path()
    demo_toy_world()
