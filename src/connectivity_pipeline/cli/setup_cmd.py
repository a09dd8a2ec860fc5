"""Setup command: store the materialized reference data in DuckDB.

Orchestrates the setup flow:
1. Load config
2. Create PipelineStore
3. Check for existing tables
4. Read gene table and samples (Parquet or TSV)
5. Validate the gene table
6. Build the sample database and derive missing rank vectors from t-statistics
7. Save both tables to DuckDB
"""

import logging
import sys
from pathlib import Path

import click
import polars as pl

from connectivity_pipeline.config.loader import load_config
from connectivity_pipeline.database import Database
from connectivity_pipeline.gene_mapping import GeneTable, validate_gene_table
from connectivity_pipeline.persistence import PipelineStore
from connectivity_pipeline.scoring import rank_database

logger = logging.getLogger(__name__)


def read_table(path: Path) -> pl.DataFrame:
    """Read a Parquet file, or a tab-separated file for any other suffix."""
    if path.suffix == ".parquet":
        return pl.read_parquet(path)
    return pl.read_csv(path, separator="\t")


@click.command('setup')
@click.option(
    '--genes',
    'genes_path',
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help='Gene annotations (index, probesetid, symbol[, entrezid, ensemblid])'
)
@click.option(
    '--samples',
    'samples_path',
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help='Samples with annotations and t/p/r vectors (Parquet)'
)
@click.option(
    '--force',
    is_flag=True,
    help='Replace reference tables even if they exist'
)
@click.pass_context
def setup(ctx, genes_path, samples_path, force):
    """Store the gene table and sample database for querying.

    Validates the gene table and saves both inputs to DuckDB.
    Skips work if the tables already exist (use --force to replace).
    """
    config_path = ctx.obj['config_path']
    click.echo(click.style("=== Connectivity Pipeline Setup ===", bold=True))
    click.echo()

    store = None
    try:
        # 1. Load config
        click.echo("Loading configuration...")
        config = load_config(config_path)
        click.echo(click.style(f"  Config loaded: {config_path}", fg='green'))
        click.echo(f"  DuckDB Path: {config.duckdb_path}")
        click.echo()

        # 2. Create PipelineStore
        store = PipelineStore.from_config(config)
        genes_table = config.tables.genes
        samples_table = config.tables.samples

        # 3. Check existing tables
        if store.has_table(genes_table) and store.has_table(samples_table) and not force:
            click.echo(click.style(
                "Reference tables exist. Skipping setup (use --force to replace).",
                fg='yellow'
            ))
            for entry in store.list_tables():
                click.echo(f"  {entry['table_name']}: {entry['row_count']} rows ({entry['source']})")
            click.echo()
            click.echo(click.style("Setup complete (used existing tables)", fg='green'))
            return

        # 4. Read inputs
        click.echo("Reading reference data...")
        genes_df = read_table(genes_path)
        samples_df = read_table(samples_path)
        click.echo(f"  Genes: {genes_df.height} rows from {genes_path}")
        click.echo(f"  Samples: {samples_df.height} rows from {samples_path}")
        click.echo()

        # 5. Validate gene table
        click.echo("Validating gene table...")
        validation = validate_gene_table(genes_df)

        for msg in validation.messages:
            if 'FAILED' in msg:
                click.echo(click.style(f"  {msg}", fg='red'))
            elif 'WARNING' in msg:
                click.echo(click.style(f"  {msg}", fg='yellow'))
            else:
                click.echo(f"  {msg}")

        if not validation.passed:
            click.echo()
            click.echo(click.style("Gene table validation failed", fg='red'), err=True)
            sys.exit(1)

        genes = GeneTable.from_frame(genes_df)
        click.echo(click.style("  Validation passed", fg='green'))
        click.echo()

        # 6. Check samples and rank them
        click.echo("Checking samples...")
        database = Database.from_frame(samples_df, partition_size=config.execution.partition_size)
        unranked = sum(1 for row in database if row.sample_annotations.r is None)
        database = rank_database(database, workers=config.execution.workers)
        ranked = sum(1 for row in database if row.sample_annotations.r is not None)
        derived = ranked - (len(database) - unranked)
        vector_length = database.vector_length
        click.echo(f"  Samples with rank vectors: {ranked}/{len(database)}")
        click.echo(f"  Rank vectors derived from t-statistics: {derived}")
        if vector_length is not None and vector_length != genes.vector_length:
            click.echo(click.style(
                f"  Vector length {vector_length} differs from gene count {genes.vector_length}",
                fg='red'
            ), err=True)
            sys.exit(1)
        click.echo()

        # 7. Save to DuckDB
        click.echo("Saving reference tables to DuckDB...")
        store.save_dataframe(
            genes_df,
            genes_table,
            source=f"Gene annotations from {genes_path.name}",
        )
        samples_df = database.to_frame()
        store.save_dataframe(
            samples_df,
            samples_table,
            source=f"Samples from {samples_path.name}",
        )
        click.echo(click.style(
            f"  Saved '{genes_table}' ({genes_df.height} rows) and "
            f"'{samples_table}' ({samples_df.height} rows)",
            fg='green'
        ))
        click.echo()
        click.echo(click.style("Setup complete!", fg='green', bold=True))

    except Exception as e:
        click.echo(click.style(f"Setup failed: {e}", fg='red'), err=True)
        logger.exception("Setup command failed")
        sys.exit(1)
    finally:
        if store is not None:
            store.close()
