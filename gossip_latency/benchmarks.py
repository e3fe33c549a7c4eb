"""Performance benchmarking utilities.

Compare exhaustive vs sampled wiring strategies.
"""

import time
import numpy as np
from typing import Dict
from loguru import logger
import psutil
import os

from gossip_latency.config import Config
from gossip_latency.world import build_world


class WiringBenchmark:
    """Benchmark world construction under each wiring strategy."""

    def __init__(self):
        """Initialize benchmark."""
        self.results = {}
        self.process = psutil.Process(os.getpid())

    def get_memory_usage(self) -> float:
        """Get current memory usage in MB."""
        return self.process.memory_info().rss / 1024 / 1024

    def benchmark_build(self, config: Config, strategy: str) -> Dict:
        """Benchmark world construction.

        Args:
            config: Configuration (the wiring strategy is overridden)
            strategy: "exhaustive" or "sampled"

        Returns:
            Benchmark results
        """
        config = config.model_copy(
            update={"wiring": config.wiring.model_copy(update={"strategy": strategy})}
        )
        logger.info(f"Benchmarking world build: cities={config.n_cities}, strategy={strategy}")

        mem_before = self.get_memory_usage()
        start_time = time.time()

        world = build_world(config, np.random.RandomState(config.seed))

        elapsed = time.time() - start_time
        mem_used = self.get_memory_usage() - mem_before

        result = {
            "strategy": strategy,
            "n_cities": config.n_cities,
            "nodes": world.graph.node_count,
            "edges": world.graph.edge_count,
            "time_seconds": elapsed,
            "memory_mb": mem_used,
        }
        self.results[strategy] = result

        logger.info(
            f"World build ({strategy}): {elapsed:.2f}s, {mem_used:.1f}MB, "
            f"{world.graph.edge_count} edges"
        )

        return result

    def compare_strategies(self, config: Config) -> Dict:
        """Compare exhaustive vs sampled wiring on the same config.

        Returns:
            Comparison results
        """
        exhaustive = self.benchmark_build(config, "exhaustive")
        sampled = self.benchmark_build(config, "sampled")

        speedup = exhaustive["time_seconds"] / max(sampled["time_seconds"], 1e-9)
        logger.info(f"Sampled wiring speedup: {speedup:.1f}x")

        return {
            "exhaustive": exhaustive,
            "sampled": sampled,
            "speedup": speedup,
        }
