"""Tests for the Zhang connectivity score and per-sample scoring."""

import numpy as np
import pytest

from connectivity_pipeline.database import Database
from connectivity_pipeline.scoring import (
    connection_score,
    max_connection_strength,
    rank_database,
    rank_row,
    rank_vector,
    score_database,
    score_row,
)

# Query vector for the signature "GENE0 GENE1" over six genes
QUERY = np.array([2.0, 1.0, 0.0, 0.0, 0.0, 0.0])


def test_rank_vector_signed_ranks():
    """Test ranks order by absolute t value and carry its sign."""
    ranks = rank_vector(np.array([0.5, -2.0, 1.0]))

    np.testing.assert_array_equal(ranks, [1.0, -3.0, 2.0])


def test_rank_vector_zero_stays_zero():
    ranks = rank_vector(np.array([0.0, 3.0, -1.0]))
    assert ranks[0] == 0.0
    assert ranks[1] == 3.0
    assert ranks[2] == -2.0


def test_max_connection_strength():
    """Test sum over j < k of (L - j)(k - j)."""
    assert max_connection_strength(6, 2) == 17.0
    assert max_connection_strength(6, 1) == 6.0
    assert max_connection_strength(6, 0) == 0.0


def test_connection_score_perfect_match():
    """Test signature on the top ranks in the same order scores 1."""
    reference = np.array([6.0, 5.0, 4.0, 3.0, 2.0, 1.0])

    assert connection_score(reference, QUERY) == pytest.approx(1.0)
    assert connection_score(-reference, QUERY) == pytest.approx(-1.0)


def test_connection_score_partial():
    reference = np.array([1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
    assert connection_score(reference, QUERY) == pytest.approx(4 / 17)


def test_connection_score_empty_query():
    """Test a query without signal scores 0."""
    reference = np.array([6.0, 5.0, 4.0, 3.0, 2.0, 1.0])
    assert connection_score(reference, np.zeros(6)) == 0.0


def test_connection_score_length_mismatch():
    with pytest.raises(ValueError, match="does not match"):
        connection_score(np.arange(5, dtype=float), QUERY)


def test_connection_score_bounded():
    """Test scores stay in [-1, 1] for random rank vectors and signatures."""
    rng = np.random.default_rng(42)
    length = 50

    for _ in range(100):
        reference = rng.permutation(np.arange(1, length + 1)) * rng.choice([-1, 1], length)
        k = int(rng.integers(1, 10))
        query = np.zeros(length)
        positions = rng.choice(length, size=k, replace=False)
        signs = rng.choice([-1, 1], k)
        query[positions] = signs * np.arange(k, 0, -1)

        score = connection_score(reference.astype(float), query)
        assert -1.0 - 1e-12 <= score <= 1.0 + 1e-12


def test_score_row_without_ranks(make_sample):
    """Test samples without rank vector are not scored."""
    row = make_sample("NO_RANKS", t=[0.1] * 6)
    assert score_row(row, QUERY) is None


def test_score_database_skips_unranked(database):
    """Test scoring keeps database order and drops rows without ranks."""
    scored = score_database(database, QUERY)

    assert [row.pwid for _, row in scored] == ["DRUG_A_001", "DRUG_A_002", "DRUG_B_001"]
    assert [score for score, _ in scored] == pytest.approx([1.0, -1.0, 4 / 17])


def test_score_database_workers_deterministic(rows):
    """Test parallel scoring gives the same result as sequential scoring."""
    sequential = score_database(Database.from_rows(rows, partition_size=1), QUERY)
    parallel = score_database(Database.from_rows(rows, partition_size=1), QUERY, workers=3)

    assert [(s, r.pwid) for s, r in parallel] == [(s, r.pwid) for s, r in sequential]


def test_score_row_length_mismatch(make_sample):
    """Test a rank vector of the wrong length is not scored."""
    row = make_sample("SHORT_001", r=[1, 2, 3])
    assert score_row(row, QUERY) is None


def test_score_database_skips_length_mismatch(rows, make_sample):
    """Test one malformed sample does not stop the others from scoring."""
    database = Database.from_rows(rows + [make_sample("SHORT_001", r=[1, 2, 3])])

    scored = score_database(database, QUERY)

    assert [row.pwid for _, row in scored] == ["DRUG_A_001", "DRUG_A_002", "DRUG_B_001"]


def test_rank_row_from_t_statistics(make_sample):
    row = make_sample("T_ONLY", t=[3.0, 2.0, 1.0, 0.5, 0.2, 0.1])

    ranked = rank_row(row)

    np.testing.assert_array_equal(ranked.sample_annotations.r, [6, 5, 4, 3, 2, 1])
    np.testing.assert_array_equal(ranked.sample_annotations.t, row.sample_annotations.t)
    assert ranked.pwid == "T_ONLY"
    assert score_row(ranked, QUERY) == pytest.approx(1.0)


def test_rank_row_keeps_existing_ranks(make_sample):
    """Test rows with ranks, or without t-statistics, are left unchanged."""
    ranked = make_sample("RANKED", r=[1, 2, 3, 4, 5, 6], t=[0.1] * 6)
    bare = make_sample("BARE")

    assert rank_row(ranked) is ranked
    assert rank_row(bare) is bare


def test_rank_database_keeps_partitioning(database):
    ranked = rank_database(database, workers=2)

    assert [len(p) for p in ranked.partitions] == [len(p) for p in database.partitions]
    assert [row.pwid for row in ranked] == [row.pwid for row in database]
    assert all(row.sample_annotations.r is not None for row in ranked)
    np.testing.assert_array_equal(ranked.partitions[1][1].sample_annotations.r, [1, 2, 3, 4, 5, 6])
