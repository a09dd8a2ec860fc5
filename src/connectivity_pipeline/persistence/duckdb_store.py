"""DuckDB-based storage for the materialized reference data."""

from pathlib import Path
from typing import TYPE_CHECKING, Optional

import duckdb
import polars as pl

if TYPE_CHECKING:
    from connectivity_pipeline.config.schema import PipelineConfig

# Registry of stored tables, written alongside every save
REGISTRY_TABLE = "_reference_tables"


def _quote(identifier: str) -> str:
    """Quote a table name for interpolation into SQL."""
    return '"' + identifier.replace('"', '""') + '"'


class PipelineStore:
    """
    DuckDB-backed store for the gene table and sample database.

    Setup writes each reference table once; query sessions read them back as
    polars DataFrames. The registry table records when each table was stored,
    its row count and where it came from.
    """

    def __init__(self, db_path: Path, read_only: bool = False):
        """
        Open (or create) the DuckDB file.

        Args:
            db_path: Location of the DuckDB file; missing parent directories
                are created
            read_only: Open without write access (registry is not created)
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self.conn = duckdb.connect(str(self.db_path), read_only=read_only)

        if not read_only:
            self.conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {REGISTRY_TABLE} (
                    table_name VARCHAR PRIMARY KEY,
                    stored_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    row_count BIGINT,
                    source VARCHAR
                )
            """)

    def save_dataframe(
        self,
        df: pl.DataFrame,
        table_name: str,
        source: str = "",
        replace: bool = True,
    ) -> None:
        """
        Store a polars DataFrame as a DuckDB table and register it.

        Args:
            df: Reference data to store; list columns (rank vectors,
                targets) are kept as DuckDB LIST columns
            table_name: Target table
            source: Where the data came from (kept in the registry)
            replace: Replace an existing table; append to it when False
        """
        if not isinstance(df, pl.DataFrame):
            raise ValueError("df must be polars.DataFrame")

        target = _quote(table_name)
        self.conn.register("_incoming", df.to_arrow())
        try:
            if replace:
                self.conn.execute(f"CREATE OR REPLACE TABLE {target} AS SELECT * FROM _incoming")
            else:
                self.conn.execute(f"INSERT INTO {target} SELECT * FROM _incoming")
        finally:
            self.conn.unregister("_incoming")

        row_count = self.conn.execute(f"SELECT COUNT(*) FROM {target}").fetchone()[0]
        self.conn.execute(f"""
            INSERT OR REPLACE INTO {REGISTRY_TABLE} (table_name, row_count, source, stored_at)
            VALUES (?, ?, ?, CURRENT_TIMESTAMP)
        """, [table_name, row_count, source])

    def load_dataframe(self, table_name: str) -> Optional[pl.DataFrame]:
        """
        Read a stored table back as a polars DataFrame.

        Returns:
            The table in storage order, or None if it was never stored
        """
        try:
            return self.conn.execute(f"SELECT * FROM {_quote(table_name)}").pl()
        except duckdb.CatalogException:
            return None

    def has_table(self, table_name: str) -> bool:
        """True if the table is listed in the registry."""
        (count,) = self.conn.execute(
            f"SELECT COUNT(*) FROM {REGISTRY_TABLE} WHERE table_name = ?",
            [table_name],
        ).fetchone()
        return count > 0

    def list_tables(self) -> list[dict]:
        """
        Registry entries, most recently stored first.

        Returns:
            Dicts with keys table_name, stored_at, row_count, source
        """
        cursor = self.conn.execute(f"""
            SELECT table_name, stored_at, row_count, source
            FROM {REGISTRY_TABLE}
            ORDER BY stored_at DESC, table_name
        """)
        columns = [description[0] for description in cursor.description]
        return [dict(zip(columns, values)) for values in cursor.fetchall()]

    def drop_table(self, table_name: str) -> None:
        """Remove a stored table and its registry entry."""
        self.conn.execute(f"DROP TABLE IF EXISTS {_quote(table_name)}")
        self.conn.execute(
            f"DELETE FROM {REGISTRY_TABLE} WHERE table_name = ?",
            [table_name],
        )

    def export_parquet(self, table_name: str, output_path: Path) -> None:
        """Write a stored table to a Parquet file (parent directories created)."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        escaped = str(output_path).replace("'", "''")
        self.conn.execute(
            f"COPY {_quote(table_name)} TO '{escaped}' (FORMAT PARQUET)"
        )

    def close(self) -> None:
        """Close the DuckDB connection (safe to call twice)."""
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def __enter__(self) -> "PipelineStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @classmethod
    def from_config(cls, config: "PipelineConfig", read_only: bool = False) -> "PipelineStore":
        """Open the store at config.duckdb_path."""
        return cls(config.duckdb_path, read_only=read_only)
