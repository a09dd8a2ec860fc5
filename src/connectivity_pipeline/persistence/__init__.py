"""Persistence layer for the materialized reference data."""

from connectivity_pipeline.persistence.duckdb_store import PipelineStore

__all__ = ["PipelineStore"]
