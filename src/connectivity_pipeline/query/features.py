"""Feature selection on scored samples.

Requested feature names are resolved through a table of accepted spellings to
a FeatureKind, once per request. Each kind has one extractor. Missing values
become human-readable sentinels here and nowhere else; names that resolve to
no feature yield FEATURE_NOT_FOUND instead of failing the request.
"""

from enum import Enum
from typing import Any, Callable, Sequence

from connectivity_pipeline.scoring import ScoredRow

FEATURE_NOT_FOUND = "Feature not found"


class FeatureKind(Enum):
    ZHANG = "zhang"
    PWID = "pwid"
    JNJS = "jnjs"
    JNJB = "jnjb"
    SMILES = "smiles"
    INCHIKEY = "inchikey"
    COMPOUND_NAME = "compoundname"
    TYPE = "type"
    TARGETS = "targets"
    BATCH = "batch"
    PLATEID = "plateid"
    WELL = "well"
    PROTOCOL_NAME = "protocolname"
    CONCENTRATION = "concentration"
    YEAR = "year"
    UNKNOWN = "unknown"


_ALIAS_SETS: dict[FeatureKind, set[str]] = {
    FeatureKind.ZHANG: {"zhang", "similarity", "Zhang", "Similarity"},
    FeatureKind.PWID: {"id", "pwid"},
    FeatureKind.JNJS: {"jnjs", "Jnjs"},
    FeatureKind.JNJB: {"jnjb", "Jnjb"},
    FeatureKind.SMILES: {"Smiles", "smiles", "SMILES"},
    FeatureKind.INCHIKEY: {"inchikey", "Inchikey"},
    FeatureKind.COMPOUND_NAME: {"compoundname", "CompoundName", "Compoundname", "name", "Name"},
    FeatureKind.TYPE: {"Type", "type"},
    FeatureKind.TARGETS: {"targets", "knownTargets", "Targets"},
    FeatureKind.BATCH: {"batch", "Batch"},
    FeatureKind.PLATEID: {"plateid", "PlateId"},
    FeatureKind.WELL: {"well", "Well"},
    FeatureKind.PROTOCOL_NAME: {"protocolname", "cellline", "CellLine", "ProtocolName"},
    FeatureKind.CONCENTRATION: {"concentration", "Concentration"},
    FeatureKind.YEAR: {"year", "Year"},
}

# Accepted spelling -> feature kind
FEATURE_ALIASES: dict[str, FeatureKind] = {
    alias: kind
    for kind, aliases in _ALIAS_SETS.items()
    for alias in aliases
}

# Features returned when the request selects none
DEFAULT_FEATURES = [
    "zhang",
    "id",
    "jnjs",
    "jnjb",
    "smiles",
    "inchikey",
    "compoundname",
    "Type",
    "targets",
    "batch",
    "plateid",
    "well",
    "protocolname",
    "concentration",
    "year",
]


def _or(value: Any, sentinel: str) -> Any:
    return sentinel if value is None else value


def _compound(r: ScoredRow):
    return r[1].compound_annotations.compound


def _sample(r: ScoredRow):
    return r[1].sample_annotations.sample


_EXTRACTORS: dict[FeatureKind, Callable[[ScoredRow], Any]] = {
    FeatureKind.ZHANG: lambda r: r[0],
    FeatureKind.PWID: lambda r: _or(r[1].pwid, "No PWID"),
    FeatureKind.JNJS: lambda r: _or(_compound(r).jnjs, "No Jnjs"),
    FeatureKind.JNJB: lambda r: _or(_compound(r).jnjb, "No Jnjb"),
    FeatureKind.SMILES: lambda r: _or(_compound(r).smiles, "No Smiles"),
    FeatureKind.INCHIKEY: lambda r: _or(_compound(r).inchikey, "No Inchikey"),
    FeatureKind.COMPOUND_NAME: lambda r: _or(_compound(r).name, "No Compound Name"),
    FeatureKind.TYPE: lambda r: _or(_compound(r).ctype, "No Compound Type"),
    FeatureKind.TARGETS: lambda r: r[1].compound_annotations.get_known_targets(),
    FeatureKind.BATCH: lambda r: _or(_sample(r).batch, "No Batch id"),
    FeatureKind.PLATEID: lambda r: _or(_sample(r).plateid, "No Plate id"),
    FeatureKind.WELL: lambda r: _or(_sample(r).well, "No Well id"),
    FeatureKind.PROTOCOL_NAME: lambda r: _or(_sample(r).protocolname, "No Protocol"),
    FeatureKind.CONCENTRATION: lambda r: _or(_sample(r).concentration, "No Concentration"),
    FeatureKind.YEAR: lambda r: _or(_sample(r).year, "No Year"),
    FeatureKind.UNKNOWN: lambda r: FEATURE_NOT_FOUND,
}


def resolve_feature(name: str) -> FeatureKind:
    """Feature kind for a requested name (UNKNOWN if not recognised)."""
    return FEATURE_ALIASES.get(name, FeatureKind.UNKNOWN)


def resolve_features(names: Sequence[str]) -> list[tuple[str, FeatureKind]]:
    """Pair each requested name with its feature kind, keeping request order."""
    return [(name, resolve_feature(name)) for name in names]


def extract_resolved(
    scored_row: ScoredRow,
    resolved: Sequence[tuple[str, FeatureKind]],
) -> dict[str, Any]:
    """Build the feature record of one scored sample from resolved features."""
    return {name: _EXTRACTORS[kind](scored_row) for name, kind in resolved}


def extract_features(scored_row: ScoredRow, names: Sequence[str]) -> dict[str, Any]:
    """Feature record {name: value} of one scored sample, in request order."""
    return extract_resolved(scored_row, resolve_features(names))
