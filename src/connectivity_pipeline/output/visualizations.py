"""Visualization of binned connectivity scores."""

import logging
from pathlib import Path

import matplotlib
import numpy as np
import polars as pl

# Use Agg backend (non-interactive, safe for headless/CLI use)
matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import seaborn as sns  # noqa: E402

logger = logging.getLogger(__name__)


def plot_score_histogram(buckets: list[dict], output_path: Path) -> Path:
    """
    Plot 1-D or 2-D histogram buckets of Zhang scores.

    Args:
        buckets: Output of bin_1d (keys lower, upper, count) or bin_2d
            (keys x_bin, y_bin, y_lower, y_upper, count)
        output_path: Path where PNG will be saved

    Returns:
        Path to the saved PNG file

    Raises:
        ValueError: If buckets is empty
    """
    if not buckets:
        raise ValueError("No histogram buckets to plot")

    df = pl.DataFrame(buckets)
    sns.set_theme(style="whitegrid", context="paper")

    if "x_bin" in df.columns:
        fig, ax = _plot_2d(df)
    else:
        fig, ax = _plot_1d(df)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=300, bbox_inches="tight")

    # Close figure to release memory
    plt.close(fig)

    logger.info(f"Saved score histogram plot to {output_path}")
    return output_path


def _plot_1d(df: pl.DataFrame):
    fig, ax = plt.subplots(figsize=(10, 6))
    widths = (df["upper"] - df["lower"]).to_numpy()
    ax.bar(
        df["lower"].to_numpy(),
        df["count"].to_numpy(),
        width=widths,
        align="edge",
        color="#3498db",
        edgecolor="white",
    )
    ax.set_xlabel("Zhang Score")
    ax.set_ylabel("Sample Count")
    ax.set_title("Connectivity Score Distribution")
    return fig, ax


def _plot_2d(df: pl.DataFrame):
    n_x = df["x_bin"].max() + 1
    n_y = df["y_bin"].max() + 1
    grid = np.zeros((n_y, n_x), dtype=np.int64)
    for row in df.iter_rows(named=True):
        grid[row["y_bin"], row["x_bin"]] = row["count"]

    y_labels = [
        f"{lower:.2f}"
        for lower in df.filter(pl.col("x_bin") == 0).sort("y_bin")["y_lower"].to_list()
    ]

    fig, ax = plt.subplots(figsize=(10, 6))
    # Highest scores on top
    sns.heatmap(
        grid[::-1],
        cmap="viridis",
        yticklabels=y_labels[::-1],
        cbar_kws={"label": "Sample Count"},
        ax=ax,
    )
    ax.set_xlabel("Rank Bucket")
    ax.set_ylabel("Zhang Score (bucket lower bound)")
    ax.set_title("Ranked Connectivity Scores")
    return fig, ax
