"""Reference sample database: row models and the partitioned collection."""

from connectivity_pipeline.database.models import (
    SAMPLE_COLUMNS,
    Compound,
    CompoundAnnotations,
    DbRow,
    Sample,
    SampleAnnotations,
)
from connectivity_pipeline.database.collection import Database

__all__ = [
    "SAMPLE_COLUMNS",
    "Compound",
    "CompoundAnnotations",
    "DbRow",
    "Sample",
    "SampleAnnotations",
    "Database",
]
