"""JSON+TSV writer for query responses with provenance sidecar."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import polars as pl
import yaml


def records_to_frame(records: list[dict[str, Any]]) -> pl.DataFrame:
    """Tabulate feature records; list values are joined with ';'."""
    rows = [
        {
            key: ";".join(str(v) for v in value) if isinstance(value, list) else str(value)
            for key, value in record.items()
        }
        for record in records
    ]
    if not rows:
        return pl.DataFrame()
    return pl.from_dicts(rows, infer_schema_length=None)


def write_query_output(
    response: dict[str, Any],
    output_dir: Path,
    filename_base: str = "query",
    extra_metadata: dict[str, Any] | None = None,
) -> dict:
    """
    Write a query response to JSON (and TSV for tables) with a provenance sidecar.

    Args:
        response: Endpoint payload with info, header and data keys
        output_dir: Directory to write output files (created if doesn't exist)
        filename_base: Base filename without extension (default: "query")
        extra_metadata: Additional entries for the provenance sidecar
            (e.g. request parameters, config hash)

    Returns:
        Dictionary with output file paths:
        {
            "json": Path to JSON file,
            "tsv": Path to TSV file (only when data is a list of records),
            "provenance": Path to YAML provenance sidecar
        }

    Notes:
        - TSV uses tab separator with header, one row per record
        - Provenance YAML includes generated_at, output_files,
          statistics (row count), info and header
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    json_path = output_dir / f"{filename_base}.json"
    provenance_path = output_dir / f"{filename_base}.provenance.yaml"
    paths = {"json": json_path}

    with open(json_path, "w") as f:
        json.dump(response, f, indent=2, default=str)

    data = response.get("data", [])
    if data and all(isinstance(entry, dict) for entry in data):
        tsv_path = output_dir / f"{filename_base}.tsv"
        records_to_frame(data).write_csv(tsv_path, separator="\t", include_header=True)
        paths["tsv"] = tsv_path

    provenance = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "output_files": [p.name for p in paths.values()],
        "statistics": {
            "row_count": len(data),
        },
        "info": response.get("info", ""),
        "header": response.get("header", ""),
    }
    if extra_metadata:
        provenance.update(extra_metadata)

    with open(provenance_path, "w") as f:
        yaml.dump(provenance, f, default_flow_style=False, sort_keys=False)

    paths["provenance"] = provenance_path
    return paths
