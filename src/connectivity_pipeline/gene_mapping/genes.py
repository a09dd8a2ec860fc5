"""Gene dictionaries bridging external gene identifiers and the rank-vector index.

The gene table is built once per session from the materialized gene annotations
and is shared read-only by every query.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

import polars as pl

logger = logging.getLogger(__name__)

REQUIRED_GENE_COLUMNS = ("index", "probesetid", "symbol")
ALIAS_COLUMNS = ("entrezid", "ensemblid")


@dataclass(frozen=True)
class GeneTable:
    """Immutable lookup tables for signature translation.

    Attributes:
        symbol_to_probeset: Gene symbol -> probeset id (ambiguous symbols removed)
        probeset_to_index: Probeset id -> dense 0-based index into rank vectors
        alias_to_probeset: Entrez/Ensembl id -> probeset id
        probeset_to_symbol: Probeset id -> gene symbol (when known)
        ambiguous_symbols: Symbols mapping to more than one probeset
    """
    symbol_to_probeset: Mapping[str, str]
    probeset_to_index: Mapping[str, int]
    alias_to_probeset: Mapping[str, str] = field(default_factory=dict)
    probeset_to_symbol: Mapping[str, str] = field(default_factory=dict)
    ambiguous_symbols: frozenset[str] = frozenset()

    @property
    def vector_length(self) -> int:
        """Length of the rank vectors indexed by this table."""
        return len(self.probeset_to_index)

    def id_type(self, identifier: str) -> str:
        """Name the identifier system an identifier belongs to.

        Returns one of "probesetid", "symbol", "ensemblid", "entrezid" or
        "unknown". Aliases with an "ENS" prefix are Ensembl ids, all other
        aliases are Entrez ids.
        """
        if identifier in self.probeset_to_index:
            return "probesetid"
        if identifier in self.symbol_to_probeset:
            return "symbol"
        if identifier in self.alias_to_probeset:
            return "ensemblid" if identifier.startswith("ENS") else "entrezid"
        return "unknown"

    def to_probeset(self, identifier: str) -> str | None:
        """Translate an identifier in any supported format to a probeset id."""
        if identifier in self.probeset_to_index:
            return identifier
        probeset = self.symbol_to_probeset.get(identifier)
        if probeset is not None:
            return probeset
        return self.alias_to_probeset.get(identifier)

    @classmethod
    def from_frame(cls, df: pl.DataFrame) -> "GeneTable":
        """Build the gene dictionaries from a gene annotation DataFrame.

        Args:
            df: DataFrame with columns index (int), probesetid (str) and
                symbol (str, nullable); entrezid and ensemblid are optional.

        Returns:
            GeneTable with read-only dictionaries

        Raises:
            ValueError: If required columns are missing, probesets are
                duplicated or indices fall outside [0, number of genes)
        """
        missing = [c for c in REQUIRED_GENE_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(f"Gene table is missing required columns: {missing}")

        n_genes = df.height
        probeset_to_index: dict[str, int] = {}
        probeset_to_symbol: dict[str, str] = {}
        symbol_candidates: dict[str, set[str]] = defaultdict(set)
        alias_to_probeset: dict[str, str] = {}

        alias_columns = [c for c in ALIAS_COLUMNS if c in df.columns]

        for row in df.iter_rows(named=True):
            probeset = row["probesetid"]
            index = row["index"]

            if probeset is None or index is None:
                raise ValueError(f"Gene table row without probesetid or index: {row}")
            if probeset in probeset_to_index:
                raise ValueError(f"Duplicate probesetid in gene table: {probeset}")
            if not 0 <= index < n_genes:
                raise ValueError(
                    f"Index {index} for probeset {probeset} outside [0, {n_genes})"
                )

            probeset_to_index[probeset] = int(index)

            symbol = row["symbol"]
            if symbol:
                probeset_to_symbol[probeset] = symbol
                symbol_candidates[symbol].add(probeset)

            for column in alias_columns:
                alias = row[column]
                if alias is not None and alias != "":
                    alias_to_probeset.setdefault(str(alias), probeset)

        symbol_to_probeset = {
            symbol: next(iter(probesets))
            for symbol, probesets in symbol_candidates.items()
            if len(probesets) == 1
        }
        ambiguous = frozenset(
            symbol for symbol, probesets in symbol_candidates.items()
            if len(probesets) > 1
        )

        if ambiguous:
            logger.warning(
                f"Dropped {len(ambiguous)} ambiguous symbols mapping to several "
                f"probesets (first 10: {sorted(ambiguous)[:10]})"
            )

        logger.info(
            f"Built gene table: {n_genes} probesets, "
            f"{len(symbol_to_probeset)} symbols, {len(alias_to_probeset)} aliases"
        )

        return cls(
            symbol_to_probeset=MappingProxyType(symbol_to_probeset),
            probeset_to_index=MappingProxyType(probeset_to_index),
            alias_to_probeset=MappingProxyType(alias_to_probeset),
            probeset_to_symbol=MappingProxyType(probeset_to_symbol),
            ambiguous_symbols=ambiguous,
        )
