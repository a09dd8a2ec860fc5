"""Signature parsing, translation and conversion to an ordered rank vector.

A signature is an ordered list of gene identifiers typed by a user. Genes are
given in decreasing order of importance; a leading "-" marks a gene that is
expected to be down-regulated.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from connectivity_pipeline.gene_mapping.genes import GeneTable

logger = logging.getLogger(__name__)

DOWN_PREFIX = "-"


@dataclass(frozen=True)
class SignatureGene:
    """One signature entry after stripping the direction prefix.

    Attributes:
        identifier: Gene identifier as typed (without the "-" prefix)
        sign: +1 for up-regulated, -1 for down-regulated
    """
    identifier: str
    sign: int = 1


def parse_signature(raw: str | Iterable[str]) -> tuple[SignatureGene, ...]:
    """Split a raw signature into signed genes.

    Args:
        raw: Whitespace-delimited string or sequence of tokens

    Returns:
        Tuple of SignatureGene in input order

    Raises:
        ValueError: If the signature contains no genes
    """
    tokens = raw.split() if isinstance(raw, str) else [t for t in raw if t and t.strip()]

    genes = []
    for token in tokens:
        token = token.strip()
        if token.startswith(DOWN_PREFIX) and len(token) > 1:
            genes.append(SignatureGene(identifier=token[1:], sign=-1))
        else:
            genes.append(SignatureGene(identifier=token))

    if not genes:
        raise ValueError("Signature is empty")

    return tuple(genes)


def translate_to_indices(
    signature: Sequence[SignatureGene],
    gene_table: GeneTable,
) -> list[tuple[int, int]]:
    """Translate signature genes to (index, sign) pairs.

    Identifiers are looked up as probeset id, symbol, then Entrez/Ensembl
    alias. Unresolvable identifiers are dropped with a warning. When the same
    index appears twice, only the first occurrence is kept.
    """
    translated: list[tuple[int, int]] = []
    seen: set[int] = set()
    unresolved: list[str] = []

    for gene in signature:
        probeset = gene_table.to_probeset(gene.identifier)
        index = gene_table.probeset_to_index.get(probeset) if probeset else None
        if index is None:
            unresolved.append(gene.identifier)
            continue
        if index in seen:
            continue
        seen.add(index)
        translated.append((index, gene.sign))

    if unresolved:
        logger.warning(
            f"Dropped {len(unresolved)}/{len(signature)} signature genes "
            f"not found in gene table: {unresolved[:10]}"
        )

    return translated


def ordered_rank_vector(
    indexed_signature: Sequence[tuple[int, int]],
    vector_length: int,
) -> np.ndarray:
    """Expand (index, sign) pairs into a full-length ordered rank vector.

    The first of n genes gets weight n, the last weight 1, each multiplied by
    its sign. Positions outside the signature are zero.
    """
    vector = np.zeros(vector_length, dtype=np.float64)
    n = len(indexed_signature)
    for i, (index, sign) in enumerate(indexed_signature):
        if not 0 <= index < vector_length:
            raise ValueError(f"Signature index {index} outside [0, {vector_length})")
        vector[index] = sign * (n - i)
    return vector


def resolve_signature(
    raw_signature: str | Iterable[str],
    gene_table: GeneTable,
    vector_length: int,
) -> np.ndarray:
    """Turn a raw signature into an ordered rank vector of length vector_length.

    A signature in which no gene resolves yields an all-zero vector; scoring
    against it produces 0.0 for every sample.

    Raises:
        ValueError: If the signature is empty
    """
    signature = parse_signature(raw_signature)
    indexed = translate_to_indices(signature, gene_table)

    if not indexed:
        logger.warning(
            f"None of the {len(signature)} signature genes resolved; "
            "query vector carries no signal"
        )

    return ordered_rank_vector(indexed, vector_length)


def check_signature(
    raw_signature: str | Iterable[str],
    gene_table: GeneTable,
) -> list[dict]:
    """Report how each signature gene resolves against the gene table.

    Returns:
        One dict per gene with keys:
        - query: identifier as typed (direction prefix included)
        - inL1000: whether the gene resolves to a probeset
        - probesetid: resolved probeset id or "NA"
        - symbol: gene symbol of the resolved probeset or "NA"
        - dataType: identifier system of the query
    """
    report = []
    for gene in parse_signature(raw_signature):
        probeset = gene_table.to_probeset(gene.identifier)
        query = gene.identifier if gene.sign > 0 else f"{DOWN_PREFIX}{gene.identifier}"
        report.append({
            "query": query,
            "inL1000": probeset is not None,
            "probesetid": probeset if probeset is not None else "NA",
            "symbol": gene_table.probeset_to_symbol.get(probeset, "NA") if probeset else "NA",
            "dataType": gene_table.id_type(gene.identifier),
        })
    return report
