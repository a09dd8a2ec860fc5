"""Partitioned, read-only collection of database rows.

Per-row transformations run partition by partition, optionally on a thread
pool. Partition results are concatenated in partition order, so the output of
every scan is deterministic regardless of the number of workers.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from itertools import chain
from typing import Callable, Iterable, Iterator, TypeVar

import polars as pl

from connectivity_pipeline.database.models import SAMPLE_COLUMNS, DbRow

logger = logging.getLogger(__name__)

T = TypeVar("T")

Partition = tuple[DbRow, ...]


@dataclass(frozen=True)
class Database:
    """Immutable sample database split into partitions.

    Attributes:
        partitions: Tuple of partitions, each a tuple of DbRow
    """
    partitions: tuple[Partition, ...]

    def __iter__(self) -> Iterator[DbRow]:
        return chain.from_iterable(self.partitions)

    def __len__(self) -> int:
        return sum(len(p) for p in self.partitions)

    @property
    def vector_length(self) -> int | None:
        """Length of the per-gene vectors, taken from the first profiled row.

        Rows with t-statistics are preferred; rank vectors are used when no
        row carries t-statistics. Returns None for a database without any
        per-gene vectors.
        """
        for row in self:
            if row.sample_annotations.t is not None:
                return len(row.sample_annotations.t)
        for row in self:
            if row.sample_annotations.r is not None:
                return len(row.sample_annotations.r)
        return None

    def filter(self, predicate: Callable[[DbRow], bool]) -> "Database":
        """Keep the rows matching predicate, preserving partitioning."""
        return Database(tuple(
            tuple(row for row in partition if predicate(row))
            for partition in self.partitions
        ))

    def _scan(self, run_partition: Callable[[Partition], T], workers: int) -> list[T]:
        """Run run_partition over every partition, results in partition order."""
        if workers <= 1 or len(self.partitions) <= 1:
            return [run_partition(p) for p in self.partitions]
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(run_partition, self.partitions))

    def flat_map(
        self,
        fn: Callable[[DbRow], Iterable[T]],
        workers: int = 1,
    ) -> list[T]:
        """Apply fn to every row and concatenate the results.

        Args:
            fn: Pure function from a row to zero or more results
            workers: Number of threads; partitions are processed concurrently
                when greater than 1

        Returns:
            Results in database order
        """
        def run_partition(partition: Partition) -> list[T]:
            return [item for row in partition for item in fn(row)]

        return list(chain.from_iterable(self._scan(run_partition, workers)))

    def map(self, fn: Callable[[DbRow], DbRow], workers: int = 1) -> "Database":
        """Replace every row by fn(row), keeping the partitioning."""
        def run_partition(partition: Partition) -> Partition:
            return tuple(fn(row) for row in partition)

        return Database(tuple(self._scan(run_partition, workers)))

    @classmethod
    def from_rows(cls, rows: Iterable[DbRow], partition_size: int = 10000) -> "Database":
        """Partition rows into chunks of at most partition_size."""
        if partition_size < 1:
            raise ValueError(f"partition_size must be >= 1, got {partition_size}")

        rows = list(rows)
        partitions = tuple(
            tuple(rows[i:i + partition_size])
            for i in range(0, len(rows), partition_size)
        )
        return cls(partitions)

    @classmethod
    def from_frame(cls, df: pl.DataFrame, partition_size: int = 10000) -> "Database":
        """Build the database from a samples DataFrame.

        Columns not present in df are treated as NULL for every row.
        """
        unknown = [c for c in df.columns if c not in SAMPLE_COLUMNS]
        if unknown:
            logger.debug(f"Ignoring unknown sample columns: {unknown}")

        rows = [DbRow.from_record(record) for record in df.iter_rows(named=True)]
        database = cls.from_rows(rows, partition_size=partition_size)

        ranked = sum(1 for row in rows if row.sample_annotations.r is not None)
        logger.info(
            f"Loaded {len(rows)} samples in {len(database.partitions)} partitions "
            f"({ranked} with rank vectors)"
        )
        return database

    def to_frame(self) -> pl.DataFrame:
        """Flatten the database into a samples DataFrame."""
        schema = {
            "pwid": pl.Utf8,
            "jnjs": pl.Utf8,
            "jnjb": pl.Utf8,
            "smiles": pl.Utf8,
            "inchikey": pl.Utf8,
            "compound_name": pl.Utf8,
            "compound_type": pl.Utf8,
            "targets": pl.List(pl.Utf8),
            "batch": pl.Utf8,
            "plateid": pl.Utf8,
            "well": pl.Utf8,
            "protocolname": pl.Utf8,
            "concentration": pl.Utf8,
            "year": pl.Utf8,
            "t": pl.List(pl.Float64),
            "p": pl.List(pl.Float64),
            "r": pl.List(pl.Float64),
        }
        records = [row.to_record() for row in self]
        if not records:
            return pl.DataFrame(schema=schema)
        return pl.from_dicts(records, schema=schema)
