"""Tests for the DuckDB store and loading query sessions from it."""

import polars as pl
import pytest

from connectivity_pipeline.persistence import PipelineStore
from connectivity_pipeline.query import annotated_pwids, submit
from connectivity_pipeline.session import QuerySession


@pytest.fixture
def populated_store(config, genes_df, database):
    """Store holding the gene table and sample database of the fixtures."""
    store = PipelineStore.from_config(config)
    store.save_dataframe(genes_df, config.tables.genes, source="test genes")
    store.save_dataframe(database.to_frame(), config.tables.samples, source="test samples")
    yield store
    store.close()


# ============================================================================
# DuckDB Store Tests
# ============================================================================

def test_store_creates_database(tmp_path):
    """Test that PipelineStore creates .duckdb file at specified path."""
    db_path = tmp_path / "nested" / "test.duckdb"
    assert not db_path.exists()

    store = PipelineStore(db_path)
    store.close()

    assert db_path.exists()


def test_save_and_load_polars(tmp_path):
    """Test saving and loading a polars DataFrame."""
    df = pl.DataFrame({
        "probesetid": ["p0", "p1", "p2"],
        "index": [0, 1, 2],
    })

    with PipelineStore(tmp_path / "test.duckdb") as store:
        store.save_dataframe(df, "genes", source="three genes")
        loaded = store.load_dataframe("genes")

    assert loaded is not None
    assert loaded.shape == (3, 2)
    assert loaded["probesetid"].to_list() == ["p0", "p1", "p2"]


def test_load_missing_table(tmp_path):
    with PipelineStore(tmp_path / "test.duckdb") as store:
        assert store.load_dataframe("nope") is None


def test_table_registry(tmp_path):
    """Test stored tables are registered, listed and dropped."""
    df = pl.DataFrame({"a": [1, 2]})

    with PipelineStore(tmp_path / "test.duckdb") as store:
        assert store.has_table("t1") is False

        store.save_dataframe(df, "t1", source="first")
        assert store.has_table("t1") is True

        entries = store.list_tables()
        assert entries[0]["table_name"] == "t1"
        assert entries[0]["row_count"] == 2
        assert entries[0]["source"] == "first"

        store.drop_table("t1")
        assert store.has_table("t1") is False
        assert store.load_dataframe("t1") is None


def test_save_append(tmp_path):
    df = pl.DataFrame({"a": [1, 2]})

    with PipelineStore(tmp_path / "test.duckdb") as store:
        store.save_dataframe(df, "t1")
        store.save_dataframe(df, "t1", replace=False)
        assert store.load_dataframe("t1").height == 4
        assert store.list_tables()[0]["row_count"] == 4


def test_table_names_are_quoted(tmp_path):
    """Test table names with spaces or quotes round-trip."""
    df = pl.DataFrame({"a": [1]})

    with PipelineStore(tmp_path / "test.duckdb") as store:
        store.save_dataframe(df, 'genes "v2"')
        assert store.load_dataframe('genes "v2"')["a"].to_list() == [1]


def test_save_rejects_non_polars(tmp_path):
    with PipelineStore(tmp_path / "test.duckdb") as store:
        with pytest.raises(ValueError):
            store.save_dataframe([{"a": 1}], "t1")


def test_export_parquet(tmp_path):
    df = pl.DataFrame({"a": [1, 2, 3]})
    output_path = tmp_path / "export" / "t1.parquet"

    with PipelineStore(tmp_path / "test.duckdb") as store:
        store.save_dataframe(df, "t1")
        store.export_parquet("t1", output_path)

    assert output_path.exists()
    assert pl.read_parquet(output_path)["a"].to_list() == [1, 2, 3]


def test_list_columns_survive_storage(populated_store, config):
    """Test rank vectors and targets are stored as list columns."""
    samples = populated_store.load_dataframe(config.tables.samples)

    assert samples.height == 4
    first = samples.row(0, named=True)
    assert first["r"] == [6.0, 5.0, 4.0, 3.0, 2.0, 1.0]
    assert first["targets"] == ["PTGS1", "PTGS2"]


# ============================================================================
# Session Tests
# ============================================================================

def test_session_from_store(populated_store, config):
    """Test the session rebuilds gene table and database from DuckDB."""
    session = QuerySession.from_store(populated_store, config)

    assert len(session.database) == 4
    assert session.vector_length == 6
    assert session.genes.symbol_to_probeset["GENE2"] == "p2"
    assert session.workers == 1


def test_session_from_store_matches_memory(populated_store, config, session):
    """Test queries answer identically on stored and in-memory data."""
    stored = QuerySession.from_store(populated_store, config)
    params = {"query": "GENE0 GENE1"}

    assert submit(annotated_pwids, stored, params) == submit(annotated_pwids, session, params)


def test_session_missing_genes_table(config):
    with PipelineStore.from_config(config) as store:
        with pytest.raises(ValueError, match="Run setup first"):
            QuerySession.from_store(store, config)


def test_session_missing_samples_table(config, genes_df):
    with PipelineStore.from_config(config) as store:
        store.save_dataframe(genes_df, config.tables.genes)
        with pytest.raises(ValueError, match="Samples table"):
            QuerySession.from_store(store, config)


def test_session_rejects_vector_length_mismatch(config, genes_df, database):
    """Test samples built for another gene table cannot be queried."""
    with PipelineStore.from_config(config) as store:
        store.save_dataframe(genes_df.head(4), config.tables.genes)
        store.save_dataframe(database.to_frame(), config.tables.samples)

        with pytest.raises(ValueError, match="Run setup again"):
            QuerySession.from_store(store, config)


def test_session_vector_length_computed_once(populated_store, config):
    session = QuerySession.from_store(populated_store, config)

    assert session.vector_length == 6
    assert session.__dict__["vector_length"] == 6


def test_session_from_config(populated_store, config):
    """Test the session can be opened from the configuration alone."""
    populated_store.close()

    session = QuerySession.from_config(config)

    assert len(session.database) == 4
