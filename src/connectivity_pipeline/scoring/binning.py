"""Histogram bucketing of connectivity scores."""

from typing import Sequence

import numpy as np

# Zhang scores are bounded
SCORE_RANGE = (-1.0, 1.0)


def _check_bins(name: str, n: int) -> None:
    if n < 1:
        raise ValueError(f"{name} must be >= 1, got {n}")


def bin_1d(scores: Sequence[float], bins: int) -> list[dict]:
    """Count scores in equal-width buckets over [-1, 1].

    Args:
        scores: Connectivity scores
        bins: Number of buckets

    Returns:
        Exactly `bins` dicts with keys bin, lower, upper, count (ordered by
        increasing score); counts sum to len(scores)
    """
    _check_bins("bins", bins)

    values = np.clip(np.asarray(scores, dtype=np.float64), *SCORE_RANGE)
    counts, edges = np.histogram(values, bins=bins, range=SCORE_RANGE)

    return [
        {
            "bin": i,
            "lower": float(edges[i]),
            "upper": float(edges[i + 1]),
            "count": int(counts[i]),
        }
        for i in range(bins)
    ]


def bin_2d(scores: Sequence[float], bins_x: int, bins_y: int) -> list[dict]:
    """Count scores on a (rank position x score) grid.

    Scores are sorted in descending order; x is the position of a score in
    that order over [0, N) and y is the score over [-1, 1]. The result is a
    density map of the ranked score curve.

    Returns:
        Exactly bins_x * bins_y dicts with keys x_bin, y_bin, x_lower,
        x_upper, y_lower, y_upper, count (x-major order); counts sum to
        len(scores)
    """
    _check_bins("bins_x", bins_x)
    _check_bins("bins_y", bins_y)

    values = np.clip(np.asarray(scores, dtype=np.float64), *SCORE_RANGE)
    values = -np.sort(-values, kind="stable")
    positions = np.arange(len(values), dtype=np.float64)

    x_range = (0.0, float(max(len(values), 1)))
    counts, x_edges, y_edges = np.histogram2d(
        positions,
        values,
        bins=[bins_x, bins_y],
        range=[x_range, SCORE_RANGE],
    )

    return [
        {
            "x_bin": i,
            "y_bin": j,
            "x_lower": float(x_edges[i]),
            "x_upper": float(x_edges[i + 1]),
            "y_lower": float(y_edges[j]),
            "y_upper": float(y_edges[j + 1]),
            "count": int(counts[i, j]),
        }
        for i in range(bins_x)
        for j in range(bins_y)
    ]
