"""Validation gates for gene annotation tables.

Checks a gene table before it is stored, so that every query session can rely
on dense indices and unique probesets.
"""

import logging
from dataclasses import dataclass, field

import polars as pl

from connectivity_pipeline.gene_mapping.genes import REQUIRED_GENE_COLUMNS

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation check.

    Attributes:
        passed: Whether validation passed
        messages: List of validation messages (warnings, errors)
        symbol_rate: Fraction of probesets with a symbol (0-1)
    """
    passed: bool
    messages: list[str] = field(default_factory=list)
    symbol_rate: float = 0.0


def validate_gene_table(df: pl.DataFrame, min_symbol_rate: float = 0.5) -> ValidationResult:
    """Validate gene annotation data quality.

    Checks:
    - Required columns (index, probesetid, symbol) are present
    - Indices are exactly 0..n-1 (dense, no duplicates)
    - No duplicate probeset ids
    - Fraction of probesets with a symbol is at least min_symbol_rate
    - Symbols shared by several probesets (reported as warning only)

    Args:
        df: Gene annotation DataFrame
        min_symbol_rate: Minimum fraction of probesets with a symbol

    Returns:
        ValidationResult with validation status and messages
    """
    messages: list[str] = []

    missing = [c for c in REQUIRED_GENE_COLUMNS if c not in df.columns]
    if missing:
        messages.append(f"FAILED: Missing required columns: {missing}")
        logger.info("Gene table validation: FAILED (missing columns)")
        return ValidationResult(passed=False, messages=messages)

    passed = True
    gene_count = df.height

    if gene_count == 0:
        messages.append("FAILED: Gene table is empty")
        return ValidationResult(passed=False, messages=messages)

    # Dense indices
    indices = df["index"].drop_nulls().sort().to_list()
    if indices != list(range(gene_count)):
        messages.append(
            f"FAILED: Indices are not a dense range 0..{gene_count - 1} "
            f"({df['index'].n_unique()} unique, {df['index'].null_count()} null)"
        )
        passed = False
    else:
        messages.append(f"Indices form a dense range 0..{gene_count - 1}")

    # Unique probesets
    duplicates = gene_count - df["probesetid"].n_unique()
    if duplicates > 0 or df["probesetid"].null_count() > 0:
        messages.append(
            f"FAILED: Found {duplicates} duplicate and "
            f"{df['probesetid'].null_count()} missing probeset ids"
        )
        passed = False
    else:
        messages.append("No duplicate probeset ids found")

    # Symbol coverage
    symbols = df.filter(pl.col("symbol").is_not_null() & (pl.col("symbol") != ""))
    symbol_rate = symbols.height / gene_count
    if symbol_rate < min_symbol_rate:
        messages.append(
            f"FAILED: Only {symbol_rate:.1%} of probesets have a symbol "
            f"(minimum {min_symbol_rate:.1%})"
        )
        passed = False
    else:
        messages.append(f"{symbol_rate:.1%} of probesets have a symbol")

    # Ambiguous symbols are dropped from the symbol dictionary, not fatal
    ambiguous = (
        symbols.group_by("symbol")
        .agg(pl.col("probesetid").n_unique().alias("n"))
        .filter(pl.col("n") > 1)
    )
    if ambiguous.height > 0:
        examples = sorted(ambiguous["symbol"].to_list())[:5]
        messages.append(
            f"WARNING: {ambiguous.height} symbols map to several probesets and "
            f"will not resolve (examples: {examples})"
        )

    logger.info(
        f"Gene table validation: {'PASSED' if passed else 'FAILED'} "
        f"({gene_count} probesets)"
    )

    return ValidationResult(
        passed=passed,
        messages=messages,
        symbol_rate=symbol_rate,
    )
