"""Query commands: annotated samples, binned scores and signature checks.

Each command builds the request parameters from its options, runs the
endpoint against a session loaded from DuckDB and prints the response (or
writes it to --output-dir).
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any

import click

from connectivity_pipeline.config.loader import load_config
from connectivity_pipeline.output import plot_score_histogram, write_query_output
from connectivity_pipeline.query import (
    InvalidRequestError,
    annotated_pwids,
    binned_zhang,
    check_signature_endpoint,
    submit,
)
from connectivity_pipeline.query.endpoints import Endpoint
from connectivity_pipeline.session import QuerySession

logger = logging.getLogger(__name__)


def run_query(
    ctx: click.Context,
    endpoint: Endpoint,
    params: dict[str, Any],
    output_dir: Path | None,
) -> dict[str, Any]:
    """Load the session, submit the request and print or write the response.

    Exits with status 1 when the request is invalid or the query fails.
    """
    config_path = ctx.obj['config_path']

    try:
        config = load_config(config_path)
        session = QuerySession.from_config(config)
        response = submit(endpoint, session, params)
    except InvalidRequestError as e:
        click.echo(click.style("Invalid request:", fg='red'), err=True)
        for message in e.messages:
            click.echo(click.style(f"  {message}", fg='red'), err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(click.style(f"Query failed: {e}", fg='red'), err=True)
        logger.exception("Query command failed")
        sys.exit(1)

    if output_dir is None:
        click.echo(json.dumps(response, indent=2, default=str))
        return response

    paths = write_query_output(
        response,
        output_dir,
        filename_base=endpoint.name,
        extra_metadata={
            "endpoint": endpoint.name,
            "parameters": params,
            "config_hash": config.config_hash(),
        },
    )
    click.echo(click.style(f"{response['info']}", bold=True))
    click.echo(f"Rows: {len(response['data'])}")
    for kind, path in paths.items():
        click.echo(click.style(f"  {kind}: {path}", fg='green'))
    return response


@click.command('annotate', context_settings={'ignore_unknown_options': True})
@click.argument('query', nargs=-1)
@click.option('--limit', type=int, default=None, help='Samples returned when no pwids are given')
@click.option('--pwids', multiple=True, help='Regular expression selecting samples by pwid (repeatable)')
@click.option('--features', multiple=True, help='Feature to return (repeatable, default: all)')
@click.option('--version', 'api_version', default=None, help='API version (v1 or v2)')
@click.option(
    '--output-dir',
    type=click.Path(path_type=Path),
    default=None,
    help='Write JSON/TSV output here instead of printing'
)
@click.pass_context
def annotate(ctx, query, limit, pwids, features, api_version, output_dir):
    """Annotated samples ranked by Zhang score against QUERY.

    QUERY is a gene signature (symbols, probesets, Entrez or Ensembl ids);
    prefix a gene with '-' for down-regulation. Without QUERY all scores are 0.

    Examples:

        connectivity-pipeline annotate MELK -BRCA1 --limit 5

        connectivity-pipeline annotate --pwids 'PLATE1_.*' --features id --features batch
    """
    params: dict[str, Any] = {}
    if query:
        params['query'] = list(query)
    if limit is not None:
        params['limit'] = limit
    if pwids:
        params['pwids'] = list(pwids)
    if features:
        params['features'] = list(features)
    if api_version:
        params['version'] = api_version

    run_query(ctx, annotated_pwids, params, output_dir)


@click.command('histogram', context_settings={'ignore_unknown_options': True})
@click.argument('query', nargs=-1, required=True)
@click.option('--bins-x', type=int, default=None, help='Number of buckets')
@click.option('--bins-y', type=int, default=None, help='Buckets along the score axis (0 = 1-D)')
@click.option(
    '--output-dir',
    type=click.Path(path_type=Path),
    default=None,
    help='Write JSON output here instead of printing'
)
@click.option('--plot', is_flag=True, help='Also save a PNG plot (requires --output-dir)')
@click.pass_context
def histogram(ctx, query, bins_x, bins_y, output_dir, plot):
    """Distribution of Zhang scores of QUERY over all samples."""
    params: dict[str, Any] = {'query': list(query)}
    if bins_x is not None:
        params['bins_x'] = bins_x
    if bins_y is not None:
        params['bins_y'] = bins_y

    response = run_query(ctx, binned_zhang, params, output_dir)

    if plot:
        if output_dir is None:
            click.echo(click.style("--plot requires --output-dir", fg='yellow'), err=True)
            return
        plot_path = plot_score_histogram(response['data'], output_dir / f"{binned_zhang.name}.png")
        click.echo(click.style(f"  plot: {plot_path}", fg='green'))


@click.command('check-signature', context_settings={'ignore_unknown_options': True})
@click.argument('query', nargs=-1, required=True)
@click.pass_context
def check_signature(ctx, query):
    """Report how each gene of QUERY resolves against the gene table."""
    run_query(ctx, check_signature_endpoint, {'query': list(query)}, None)
