"""Connectivity scoring and score histograms."""

from connectivity_pipeline.scoring.zhang import (
    connection_score,
    connection_strength,
    max_connection_strength,
    rank_vector,
)
from connectivity_pipeline.scoring.scorer import (
    ScoredRow,
    rank_database,
    rank_row,
    score_database,
    score_row,
    score_rows,
)
from connectivity_pipeline.scoring.binning import (
    SCORE_RANGE,
    bin_1d,
    bin_2d,
)

__all__ = [
    "connection_score",
    "connection_strength",
    "max_connection_strength",
    "rank_vector",
    "ScoredRow",
    "rank_database",
    "rank_row",
    "score_database",
    "score_row",
    "score_rows",
    "SCORE_RANGE",
    "bin_1d",
    "bin_2d",
]
