"""Pydantic models for pipeline configuration."""

import hashlib
import json
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class TableNames(BaseModel):
    """DuckDB table names holding the materialized reference data."""

    genes: str = Field(
        default="genes",
        description="Table with the gene annotations (index, probesetid, symbol, ...)",
    )
    samples: str = Field(
        default="samples",
        description="Table with one row per sample (annotations and rank vectors)",
    )


class QueryDefaults(BaseModel):
    """Defaults applied to request parameters that the caller omits."""

    version: str = Field(
        default="v1",
        description="API version reported for requests without an explicit version",
    )
    limit: int = Field(
        default=10,
        ge=1,
        description="Number of samples returned when no pwids are requested",
    )
    bins_x: int = Field(
        default=20,
        ge=1,
        description="Number of histogram buckets along the first dimension",
    )
    bins_y: int = Field(
        default=0,
        description="Number of histogram buckets along the score axis (<= 0 gives a 1-D histogram)",
    )


class ExecutionConfig(BaseModel):
    """How the sample database is partitioned and scanned."""

    workers: int = Field(
        default=1,
        ge=1,
        description="Number of threads used to score partitions (1 = sequential)",
    )
    partition_size: int = Field(
        default=10000,
        ge=1,
        description="Maximum number of samples per database partition",
    )


class PipelineConfig(BaseModel):
    """Main pipeline configuration."""

    data_dir: Path = Field(
        ...,
        description="Directory for query output and plots",
    )
    duckdb_path: Path = Field(
        ...,
        description="Path to DuckDB database file with the reference data",
    )
    tables: TableNames = Field(
        default_factory=TableNames,
        description="Names of the reference data tables",
    )
    query: QueryDefaults = Field(
        default_factory=QueryDefaults,
        description="Default request parameters",
    )
    execution: ExecutionConfig = Field(
        default_factory=ExecutionConfig,
        description="Database scan settings",
    )

    @field_validator("data_dir")
    @classmethod
    def create_directory(cls, v: Path) -> Path:
        """Create directory if it doesn't exist."""
        v.mkdir(parents=True, exist_ok=True)
        return v

    def config_hash(self) -> str:
        """
        Compute SHA-256 hash of the configuration.

        Returns a deterministic hash based on all config values,
        useful for tagging query output with the settings that produced it.
        """
        config_dict = self.model_dump(mode="python")
        # Path objects are serialized as strings
        config_json = json.dumps(
            config_dict,
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(config_json.encode()).hexdigest()
