"""Command-line interface using Typer."""

import sys
import typer
import numpy as np
from pathlib import Path
from typing import Optional
import json
from loguru import logger

from gossip_latency.config import Config, ExperimentConfig, PopulationConfig, WiringConfig
from gossip_latency.world import build_world
from gossip_latency.experiment import run_trials
from gossip_latency.metrics import TransitStatsCollector, graph_summary
from gossip_latency.benchmarks import WiringBenchmark
from gossip_latency.viz import plot_edge_weight_histogram, plot_transit_time_distribution

app = typer.Typer(help="Gossip Latency Simulation CLI")


def _configure_logging(log_level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=log_level.upper())


@app.command()
def run(
    seed: int = typer.Option(42, help="Random seed"),
    n_cities: int = typer.Option(10, help="Number of cities"),
    small: int = typer.Option(10_000, help="Residents in a small city"),
    large: int = typer.Option(300_000, help="Residents in a large city"),
    p_net: float = typer.Option(0.9, help="Probability a person is online"),
    strategy: str = typer.Option("exhaustive", help="Wiring: 'exhaustive' or 'sampled'"),
    trials: int = typer.Option(100, help="Number of relay trials"),
    source_city: int = typer.Option(0, help="Index of the source city"),
    destination_city: int = typer.Option(-1, help="Index of the destination city"),
    max_rounds: Optional[int] = typer.Option(None, help="Round cap per relay (default: unbounded)"),
    output_dir: str = typer.Option("runs/exp001", help="Output directory"),
    export_dot: bool = typer.Option(False, help="Write graph.dot"),
    plots: bool = typer.Option(False, help="Write plots"),
    log_level: str = typer.Option("INFO", help="Log level"),
) -> None:
    """Build a world and relay messages between two of its cities."""
    _configure_logging(log_level)

    config = Config(
        seed=seed,
        n_cities=n_cities,
        population=PopulationConfig(small=small, large=large, p_net=p_net),
        wiring=WiringConfig(strategy=strategy),
        experiment=ExperimentConfig(
            trials=trials,
            source_city=source_city,
            destination_city=destination_city,
            max_rounds=max_rounds,
        ),
        output_dir=output_dir,
        export_dot=export_dot,
    )

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    config.save(output_path / "config.json")
    logger.info(f"Saved config to {output_path / 'config.json'}")

    rng = np.random.RandomState(config.seed)
    world = build_world(config, rng)

    summary = graph_summary(world)
    with open(output_path / "graph_summary.json", "w") as f:
        json.dump(summary, f, indent=2)

    if config.export_dot:
        (output_path / "graph.dot").write_text(world.graph.to_dot())
        logger.info(f"Saved graph to {output_path / 'graph.dot'}")

    results = run_trials(world, config, rng, report=typer.echo)

    collector = TransitStatsCollector()
    collector.add_trials(results)
    aggregate = collector.compute_aggregate_metrics()

    with open(output_path / "trials.json", "w") as f:
        json.dump([r.to_dict() for r in results], f, indent=2)
    with open(output_path / "aggregate_metrics.json", "w") as f:
        json.dump(aggregate, f, indent=2)

    logger.info(f"Aggregate metrics: {aggregate}")

    if plots:
        _write_plots(output_path, summary, [r.hours for r in results if r.delivered])


def _write_plots(output_path: Path, summary: dict, hours: list) -> None:
    plot_edge_weight_histogram(
        summary["edge_weights"],
        output_path=output_path / "edge_weights.png",
    )
    if hours:
        plot_transit_time_distribution(
            hours,
            output_path=output_path / "transit_time_distribution.html",
        )


@app.command()
def plot(
    run_id: str = typer.Option("runs/exp001", help="Run ID (output directory)"),
) -> None:
    """Generate plots from a completed run."""
    logger.info(f"Generating plots for run: {run_id}")

    run_path = Path(run_id)
    if not run_path.exists():
        logger.error(f"Run directory not found: {run_path}")
        raise FileNotFoundError(f"Run directory not found: {run_path}")

    summary_file = run_path / "graph_summary.json"
    trials_file = run_path / "trials.json"
    if not (summary_file.exists() and trials_file.exists()):
        logger.error(f"Results not found in {run_path}")
        raise typer.Exit(code=1)

    with open(summary_file, "r") as f:
        summary = json.load(f)
    with open(trials_file, "r") as f:
        trials = json.load(f)

    _write_plots(run_path, summary, [t["hours"] for t in trials if t["delivered"]])
    logger.info("Plots generated successfully")


@app.command()
def benchmark(
    n_cities: int = typer.Option(3, help="Number of cities"),
    small: int = typer.Option(200, help="Residents in a small city"),
    large: int = typer.Option(400, help="Residents in a large city"),
    seed: int = typer.Option(42, help="Random seed"),
) -> None:
    """Time exhaustive vs sampled wiring on a small world."""
    config = Config(
        seed=seed,
        n_cities=n_cities,
        population=PopulationConfig(small=small, large=large),
    )
    comparison = WiringBenchmark().compare_strategies(config)
    typer.echo(json.dumps(comparison, indent=2))


if __name__ == "__main__":
    app()
