"""Zhang connectivity score on signed rank vectors.

Reference: Zhang & Gant (2008), "A simple and robust method for connecting
small-molecule drugs using gene-expression signatures", BMC Bioinformatics.
"""

import numpy as np


def rank_vector(t_stats: np.ndarray) -> np.ndarray:
    """Signed ranks of a t-statistic vector.

    The gene with the largest absolute t value gets rank L (the vector
    length), the smallest gets 1; each rank carries the sign of its t value.
    Zero t values keep rank 0. Ties are broken by position.
    """
    t = np.asarray(t_stats, dtype=np.float64)
    order = np.argsort(np.abs(t), kind="stable")
    ranks = np.empty(len(t), dtype=np.float64)
    ranks[order] = np.arange(1, len(t) + 1, dtype=np.float64)
    return np.sign(t) * ranks


def connection_strength(reference: np.ndarray, query: np.ndarray) -> float:
    """Dot product of a reference rank vector and a query vector."""
    return float(np.dot(reference, query))


def max_connection_strength(max_rank: int, signature_length: int) -> float:
    """Largest strength a signature of signature_length genes can reach.

    Attained when the k query genes occupy the k highest reference ranks in
    the same order: sum over j < k of (max_rank - j) * (k - j).
    """
    j = np.arange(signature_length, dtype=np.float64)
    return float(np.sum((max_rank - j) * (signature_length - j)))


def connection_score(reference: np.ndarray, query: np.ndarray) -> float:
    """Zhang score in [-1, 1] of a query vector against a reference rank vector.

    Returns 0.0 for a query without any non-zero position.

    Raises:
        ValueError: If the vectors differ in length
    """
    if len(reference) != len(query):
        raise ValueError(
            f"Rank vector length {len(reference)} does not match query length {len(query)}"
        )

    signature_length = int(np.count_nonzero(query))
    if signature_length == 0:
        return 0.0

    return connection_strength(reference, query) / max_connection_strength(
        len(reference), signature_length
    )
