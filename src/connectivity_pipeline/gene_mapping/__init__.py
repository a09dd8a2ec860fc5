"""Gene ID mapping module.

Provides the gene dictionaries, signature translation to the rank-vector
index space, and validation gates for gene annotation tables.
"""

from connectivity_pipeline.gene_mapping.genes import GeneTable
from connectivity_pipeline.gene_mapping.signature import (
    SignatureGene,
    check_signature,
    ordered_rank_vector,
    parse_signature,
    resolve_signature,
    translate_to_indices,
)
from connectivity_pipeline.gene_mapping.validator import (
    ValidationResult,
    validate_gene_table,
)

__all__ = [
    "GeneTable",
    "SignatureGene",
    "check_signature",
    "ordered_rank_vector",
    "parse_signature",
    "resolve_signature",
    "translate_to_indices",
    "ValidationResult",
    "validate_gene_table",
]
