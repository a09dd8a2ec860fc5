"""Output generation: response files and score histogram plots."""

from connectivity_pipeline.output.visualizations import plot_score_histogram
from connectivity_pipeline.output.writers import records_to_frame, write_query_output

__all__ = [
    "plot_score_histogram",
    "records_to_frame",
    "write_query_output",
]
