"""Final ordering of scored samples and histogram routing."""

from typing import Any, Sequence

import structlog

from connectivity_pipeline.query.features import extract_resolved, resolve_features
from connectivity_pipeline.scoring import ScoredRow, bin_1d, bin_2d

logger = structlog.get_logger(__name__)


def sort_by_score(scored_rows: Sequence[ScoredRow]) -> list[ScoredRow]:
    """Sort by descending score; equal scores keep their database order."""
    return sorted(scored_rows, key=lambda entry: -entry[0])


def assemble_records(
    scored_rows: Sequence[ScoredRow],
    features: Sequence[str],
) -> list[dict[str, Any]]:
    """Feature records of the scored samples, highest score first."""
    resolved = resolve_features(features)
    records = [extract_resolved(entry, resolved) for entry in sort_by_score(scored_rows)]

    logger.info(
        "assemble_records_complete",
        records=len(records),
        features=len(resolved),
    )

    return records


def assemble_histogram(
    scores: Sequence[float],
    bins_x: int,
    bins_y: int = 0,
) -> list[dict]:
    """Bucket raw scores: 1-D when bins_y <= 0, otherwise 2-D."""
    if bins_y > 0:
        buckets = bin_2d(scores, bins_x, bins_y)
    else:
        buckets = bin_1d(scores, bins_x)

    logger.info(
        "assemble_histogram_complete",
        scores=len(scores),
        bins_x=bins_x,
        bins_y=max(bins_y, 0),
        buckets=len(buckets),
    )

    return buckets
