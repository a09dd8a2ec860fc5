"""Data models for samples in the reference database."""

import numpy as np
from pydantic import BaseModel, ConfigDict, field_validator

# Columns of the samples table, in storage order
SAMPLE_COLUMNS = [
    "pwid",
    "jnjs",
    "jnjb",
    "smiles",
    "inchikey",
    "compound_name",
    "compound_type",
    "targets",
    "batch",
    "plateid",
    "well",
    "protocolname",
    "concentration",
    "year",
    "t",
    "p",
    "r",
]


class Compound(BaseModel):
    """Compound applied to a sample.

    Attributes:
        jnjs: Compound identifier (JNJ structure id)
        jnjb: Compound batch identifier (JNJ batch id)
        smiles: SMILES structure
        inchikey: InChIKey structure hash
        name: Compound name
        ctype: Compound type
    """

    model_config = ConfigDict(frozen=True)

    jnjs: str | None = None
    jnjb: str | None = None
    smiles: str | None = None
    inchikey: str | None = None
    name: str | None = None
    ctype: str | None = None


class CompoundAnnotations(BaseModel):
    """Compound metadata and its known biological targets."""

    model_config = ConfigDict(frozen=True)

    compound: Compound = Compound()
    known_targets: frozenset[str] | None = None

    def get_known_targets(self) -> list[str]:
        """Known targets as a sorted list (empty when none are recorded)."""
        return sorted(self.known_targets) if self.known_targets else []


class Sample(BaseModel):
    """Experimental metadata of a sample."""

    model_config = ConfigDict(frozen=True)

    batch: str | None = None
    plateid: str | None = None
    well: str | None = None
    protocolname: str | None = None
    concentration: str | None = None
    year: str | None = None


class SampleAnnotations(BaseModel):
    """Sample metadata with its per-gene statistics.

    Attributes:
        sample: Experimental metadata
        t: t-statistics per gene (NULL if the sample was not profiled)
        p: p-values per gene
        r: signed rank vector per gene (NULL until ranks are computed)

    A sample only takes part in connectivity scoring when r is present.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    sample: Sample = Sample()
    t: np.ndarray | None = None
    p: np.ndarray | None = None
    r: np.ndarray | None = None

    @field_validator("t", "p", "r", mode="before")
    @classmethod
    def to_array(cls, v):
        """Store statistics as read-only float64 arrays."""
        if v is None:
            return None
        array = np.array(v, dtype=np.float64)
        array.setflags(write=False)
        return array


class DbRow(BaseModel):
    """One sample (plate well) of the reference database."""

    model_config = ConfigDict(frozen=True)

    pwid: str | None = None
    compound_annotations: CompoundAnnotations = CompoundAnnotations()
    sample_annotations: SampleAnnotations = SampleAnnotations()

    @classmethod
    def from_record(cls, record: dict) -> "DbRow":
        """Build a DbRow from a flat samples-table record."""
        targets = record.get("targets")
        return cls(
            pwid=record.get("pwid"),
            compound_annotations=CompoundAnnotations(
                compound=Compound(
                    jnjs=record.get("jnjs"),
                    jnjb=record.get("jnjb"),
                    smiles=record.get("smiles"),
                    inchikey=record.get("inchikey"),
                    name=record.get("compound_name"),
                    ctype=record.get("compound_type"),
                ),
                known_targets=frozenset(targets) if targets is not None else None,
            ),
            sample_annotations=SampleAnnotations(
                sample=Sample(
                    batch=_as_text(record.get("batch")),
                    plateid=_as_text(record.get("plateid")),
                    well=_as_text(record.get("well")),
                    protocolname=_as_text(record.get("protocolname")),
                    concentration=_as_text(record.get("concentration")),
                    year=_as_text(record.get("year")),
                ),
                t=record.get("t"),
                p=record.get("p"),
                r=record.get("r"),
            ),
        )

    def to_record(self) -> dict:
        """Flatten into a samples-table record (inverse of from_record)."""
        compound = self.compound_annotations.compound
        sample = self.sample_annotations.sample
        targets = self.compound_annotations.known_targets
        return {
            "pwid": self.pwid,
            "jnjs": compound.jnjs,
            "jnjb": compound.jnjb,
            "smiles": compound.smiles,
            "inchikey": compound.inchikey,
            "compound_name": compound.name,
            "compound_type": compound.ctype,
            "targets": sorted(targets) if targets is not None else None,
            "batch": sample.batch,
            "plateid": sample.plateid,
            "well": sample.well,
            "protocolname": sample.protocolname,
            "concentration": sample.concentration,
            "year": sample.year,
            "t": _as_list(self.sample_annotations.t),
            "p": _as_list(self.sample_annotations.p),
            "r": _as_list(self.sample_annotations.r),
        }


def _as_text(value) -> str | None:
    return None if value is None else str(value)


def _as_list(array: np.ndarray | None) -> list[float] | None:
    return None if array is None else array.tolist()
