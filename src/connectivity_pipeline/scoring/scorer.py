"""Per-sample connectivity scoring against a query rank vector."""

from typing import Iterable, Iterator

import numpy as np
import structlog

from connectivity_pipeline.database import Database, DbRow, SampleAnnotations
from connectivity_pipeline.scoring.zhang import connection_score, rank_vector

logger = structlog.get_logger(__name__)

ScoredRow = tuple[float, DbRow]


def score_row(row: DbRow, query: np.ndarray) -> float | None:
    """Zhang score of one sample, or None if the sample cannot be scored.

    A sample is not scored when it has no rank vector or when its rank
    vector differs in length from the query.
    """
    ranks = row.sample_annotations.r
    if ranks is None or len(ranks) != len(query):
        return None
    return connection_score(ranks, query)


def score_rows(rows: Iterable[DbRow], query: np.ndarray) -> Iterator[ScoredRow]:
    """Yield (score, row) for every scorable row, in input order."""
    for row in rows:
        score = score_row(row, query)
        if score is not None:
            yield score, row


def score_database(
    database: Database,
    query: np.ndarray,
    workers: int = 1,
) -> list[ScoredRow]:
    """Score every sample of the database against the query vector.

    Samples without a rank vector, or with one of the wrong length, are left
    out of the result.

    Args:
        database: Partitioned sample database
        query: Ordered rank vector of the signature
        workers: Number of threads scanning partitions

    Returns:
        List of (score, row) in database order
    """
    scored = database.flat_map(lambda row: score_rows((row,), query), workers=workers)

    without_ranks = sum(1 for row in database if row.sample_annotations.r is None)
    length_mismatch = len(database) - len(scored) - without_ranks

    logger.info(
        "score_database_complete",
        total_samples=len(database),
        scored_samples=len(scored),
        skipped_without_ranks=without_ranks,
        skipped_length_mismatch=length_mismatch,
        signature_genes=int(np.count_nonzero(query)),
    )
    if length_mismatch:
        logger.warning(
            "rank_vector_length_mismatch",
            samples=length_mismatch,
            query_length=len(query),
        )

    return scored


def rank_row(row: DbRow) -> DbRow:
    """Fill a missing rank vector from the sample's t-statistics.

    Rows that already carry ranks, or have no t-statistics, are returned
    unchanged.
    """
    annotations = row.sample_annotations
    if annotations.r is not None or annotations.t is None:
        return row

    ranked = SampleAnnotations(
        sample=annotations.sample,
        t=annotations.t,
        p=annotations.p,
        r=rank_vector(annotations.t),
    )
    return row.model_copy(update={"sample_annotations": ranked})


def rank_database(database: Database, workers: int = 1) -> Database:
    """Database with rank vectors derived from t-statistics where missing.

    Partitioning and row order are preserved.
    """
    ranked = database.map(rank_row, workers=workers)

    filled = sum(
        1 for before, after in zip(database, ranked)
        if before.sample_annotations.r is None and after.sample_annotations.r is not None
    )
    logger.info("rank_database_complete", total_samples=len(database), ranked_from_t=filled)

    return ranked
