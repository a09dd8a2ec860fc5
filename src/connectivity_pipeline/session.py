"""Query session: reference data loaded once and shared by all requests."""

import logging
from dataclasses import dataclass
from functools import cached_property

from connectivity_pipeline.config.schema import PipelineConfig
from connectivity_pipeline.database import Database
from connectivity_pipeline.gene_mapping import GeneTable
from connectivity_pipeline.persistence import PipelineStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuerySession:
    """Read-only handle on the gene table and sample database.

    The session owns the reference data; endpoints only borrow it.

    Attributes:
        genes: Gene dictionaries for signature translation
        database: Partitioned sample database
        config: Pipeline configuration (query defaults, scan settings)
    """
    genes: GeneTable
    database: Database
    config: PipelineConfig

    @cached_property
    def vector_length(self) -> int:
        """Length of the query rank vector, computed once per session.

        Taken from the database vectors; the gene table size is used for a
        database without any per-gene vectors.
        """
        length = self.database.vector_length
        return length if length is not None else self.genes.vector_length

    @property
    def workers(self) -> int:
        return self.config.execution.workers

    @classmethod
    def from_store(cls, store: PipelineStore, config: PipelineConfig) -> "QuerySession":
        """Load the gene table and sample database from a PipelineStore.

        Raises:
            ValueError: If a reference table is missing from the store, or the
                sample vectors do not match the gene table in length
        """
        genes_df = store.load_dataframe(config.tables.genes)
        if genes_df is None:
            raise ValueError(
                f"Gene table '{config.tables.genes}' not found in {store.db_path}. "
                "Run setup first."
            )

        samples_df = store.load_dataframe(config.tables.samples)
        if samples_df is None:
            raise ValueError(
                f"Samples table '{config.tables.samples}' not found in {store.db_path}. "
                "Run setup first."
            )

        genes = GeneTable.from_frame(genes_df)
        database = Database.from_frame(
            samples_df, partition_size=config.execution.partition_size
        )

        vector_length = database.vector_length
        if vector_length not in (None, genes.vector_length):
            raise ValueError(
                f"Sample vectors have length {vector_length} but the gene "
                f"table holds {genes.vector_length} probesets. Run setup again."
            )

        session = cls(genes=genes, database=database, config=config)
        logger.info(
            f"Query session ready: {len(database)} samples, "
            f"vector length {session.vector_length}"
        )
        return session

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "QuerySession":
        """Open the configured DuckDB store and load the session from it."""
        with PipelineStore.from_config(config) as store:
            return cls.from_store(store, config)
