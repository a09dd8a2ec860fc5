"""Shared fixtures: a small gene table and sample database."""

import polars as pl
import pytest

from connectivity_pipeline.config.schema import PipelineConfig
from connectivity_pipeline.database import (
    Compound,
    CompoundAnnotations,
    Database,
    DbRow,
    Sample,
    SampleAnnotations,
)
from connectivity_pipeline.gene_mapping import GeneTable
from connectivity_pipeline.session import QuerySession

N_GENES = 6


@pytest.fixture
def genes_df() -> pl.DataFrame:
    """Six probesets p0..p5 with symbols GENE0..GENE5 and Entrez/Ensembl aliases."""
    return pl.DataFrame({
        "index": list(range(N_GENES)),
        "probesetid": [f"p{i}" for i in range(N_GENES)],
        "symbol": [f"GENE{i}" for i in range(N_GENES)],
        "entrezid": [str(1000 + i) for i in range(N_GENES)],
        "ensemblid": [f"ENSG{i:011d}" for i in range(N_GENES)],
    })


@pytest.fixture
def gene_table(genes_df) -> GeneTable:
    return GeneTable.from_frame(genes_df)


def make_row(pwid, r=None, t=None, name=None, batch=None, targets=None) -> DbRow:
    """Build a sample with optional rank vector and a few annotations."""
    return DbRow(
        pwid=pwid,
        compound_annotations=CompoundAnnotations(
            compound=Compound(jnjs=f"JNJ-{pwid}" if pwid else None, name=name),
            known_targets=frozenset(targets) if targets is not None else None,
        ),
        sample_annotations=SampleAnnotations(
            sample=Sample(batch=batch, plateid="PLATE1", well="A01"),
            t=t,
            r=r,
        ),
    )


@pytest.fixture
def rows() -> list[DbRow]:
    """Four samples; the last one has t-statistics but no rank vector.

    Against the signature "GENE0 GENE1" the Zhang scores are
    DRUG_A_001: 1.0, DRUG_A_002: -1.0, DRUG_B_001: 4/17.
    """
    return [
        make_row("DRUG_A_001", r=[6, 5, 4, 3, 2, 1], name="aspirin", batch="B1",
                 targets=["PTGS2", "PTGS1"]),
        make_row("DRUG_A_002", r=[-6, -5, -4, -3, -2, -1], name="aspirin"),
        make_row("DRUG_B_001", r=[1, 2, 3, 4, 5, 6], batch="B2", targets=[]),
        make_row("XDRUG_A_001", t=[0.1, 0.2, 0.3, 0.4, 0.5, 0.6]),
    ]


@pytest.fixture
def database(rows) -> Database:
    return Database.from_rows(rows, partition_size=2)


@pytest.fixture
def config(tmp_path) -> PipelineConfig:
    return PipelineConfig(
        data_dir=tmp_path / "data",
        duckdb_path=tmp_path / "reference.duckdb",
    )


@pytest.fixture
def session(gene_table, database, config) -> QuerySession:
    return QuerySession(genes=gene_table, database=database, config=config)


@pytest.fixture
def make_sample():
    """Factory fixture for single samples."""
    return make_row
