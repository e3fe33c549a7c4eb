"""Visualization utilities."""

import matplotlib.pyplot as plt
import plotly.graph_objects as go
from typing import Dict, List, Optional
from pathlib import Path
from loguru import logger


def plot_transit_time_distribution(
    hours: List[int],
    title: str = "Distribution of Message Transit Time",
    output_path: Optional[Path] = None,
) -> None:
    """
    Plot distribution of transit times across trials.

    Args:
        hours: Transit time of each delivered trial
        title: Plot title
        output_path: Path to save figure (HTML)
    """
    fig = go.Figure(
        data=[
            go.Histogram(
                x=hours,
                nbinsx=max(10, len(set(hours))),
                name="Transit Time",
            )
        ]
    )

    fig.update_layout(
        title=title,
        xaxis_title="Transit Time (hours)",
        yaxis_title="Frequency",
        height=500,
        width=800,
    )

    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.write_html(str(output_path))
        logger.info(f"Saved distribution plot to {output_path}")
    else:
        fig.show()


def plot_edge_weight_histogram(
    edge_weights: Dict[str, int],
    title: str = "Edges by Transit Delay",
    output_path: Optional[Path] = None,
) -> None:
    """
    Bar chart of edge counts per weight.

    Args:
        edge_weights: Mapping of weight (as string) to edge count
        title: Plot title
        output_path: Path to save figure (PNG)
    """
    labels = sorted(edge_weights, key=int)
    counts = [edge_weights[w] for w in labels]

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.bar([f"{w}h" for w in labels], counts, color="steelblue")
    ax.set_xlabel("Edge weight")
    ax.set_ylabel("Number of edges")
    ax.set_yscale("log")
    ax.set_title(title)
    ax.grid(True, axis="y", alpha=0.3)

    plt.tight_layout()

    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        plt.savefig(output_path, dpi=150, bbox_inches="tight")
        logger.info(f"Saved plot to {output_path}")
    else:
        plt.show()

    plt.close()
