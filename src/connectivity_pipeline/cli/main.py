"""Main CLI entry point for connectivity-pipeline.

Provides command group with global options and subcommands for setup and queries.
"""

import logging
from pathlib import Path

import click
import structlog

from connectivity_pipeline import __version__
from connectivity_pipeline.config.loader import load_config
from connectivity_pipeline.persistence import PipelineStore
from connectivity_pipeline.cli.setup_cmd import setup
from connectivity_pipeline.cli.query_cmd import annotate, histogram, check_signature


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# structlog events go through stdlib logging; stdout carries query output only
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.processors.KeyValueRenderer(key_order=["event"]),
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
)


@click.group()
@click.option(
    '--config',
    type=click.Path(exists=True, path_type=Path),
    default='config/default.yaml',
    help='Path to pipeline configuration YAML file'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Enable verbose logging (DEBUG level)'
)
@click.pass_context
def cli(ctx, config, verbose):
    """connectivity-pipeline: query gene signatures against a rank-ordered sample database.

    Scores every sample against a signature with the Zhang connectivity score,
    returns annotated top samples, or bins the score distribution.
    """
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")


@cli.command()
@click.pass_context
def info(ctx):
    """Display pipeline information and configuration summary."""
    config_path = ctx.obj['config_path']

    click.echo(f"Connectivity Pipeline v{__version__}")
    click.echo(f"Config: {config_path}")
    click.echo()

    try:
        config = load_config(config_path)

        config_hash = config.config_hash()
        click.echo(f"Config Hash: {config_hash[:16]}...")
        click.echo()

        click.echo(click.style("Paths:", bold=True))
        click.echo(f"  Data Directory: {config.data_dir}")
        click.echo(f"  DuckDB Path: {config.duckdb_path}")
        click.echo(f"  Gene Table: {config.tables.genes}")
        click.echo(f"  Samples Table: {config.tables.samples}")
        click.echo()

        click.echo(click.style("Query Defaults:", bold=True))
        click.echo(f"  Version: {config.query.version}")
        click.echo(f"  Limit: {config.query.limit}")
        click.echo(f"  Bins: {config.query.bins_x} x {config.query.bins_y}")
        click.echo()

        click.echo(click.style("Execution:", bold=True))
        click.echo(f"  Workers: {config.execution.workers}")
        click.echo(f"  Partition Size: {config.execution.partition_size}")

    except Exception as e:
        click.echo(click.style(f"Error loading config: {e}", fg='red'), err=True)
        ctx.exit(1)

    click.echo()
    click.echo(click.style("Reference Tables:", bold=True))
    if not config.duckdb_path.exists():
        click.echo(click.style("  Not set up (run 'setup' first)", fg='yellow'))
        return

    with PipelineStore.from_config(config, read_only=True) as store:
        entries = {entry['table_name']: entry for entry in store.list_tables()}

    for table in (config.tables.genes, config.tables.samples):
        entry = entries.get(table)
        if entry is None:
            click.echo(click.style(f"  {table}: missing", fg='yellow'))
        else:
            click.echo(f"  {table}: {entry['row_count']} rows, stored {entry['stored_at']:%Y-%m-%d %H:%M}")


# Register commands
cli.add_command(setup)
cli.add_command(annotate)
cli.add_command(histogram)
cli.add_command(check_signature)


if __name__ == '__main__':
    cli()
