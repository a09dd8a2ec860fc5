"""Tests for pwid selection, limiting, feature extraction and ordering."""

import pytest

from connectivity_pipeline.database import Database
from connectivity_pipeline.query import (
    DEFAULT_FEATURES,
    FEATURE_NOT_FOUND,
    FeatureKind,
    assemble_histogram,
    assemble_records,
    extract_features,
    filter_by_pwids,
    is_specified,
    limit_rows,
    resolve_feature,
    sort_by_score,
)


# Test pwid selection

def test_is_specified():
    assert is_specified(["DRUG_A.*"]) is True
    assert is_specified([".*"]) is False
    assert is_specified([]) is False
    assert is_specified(None) is False


def test_filter_by_pwids_full_match(database):
    """Test patterns must match the whole pwid, not a substring."""
    filtered = filter_by_pwids(database, ["DRUG_A.*"])

    assert [row.pwid for row in filtered] == ["DRUG_A_001", "DRUG_A_002"]


def test_filter_by_pwids_any_pattern(database):
    filtered = filter_by_pwids(database, ["DRUG_B_001", "XDRUG.*"])

    assert [row.pwid for row in filtered] == ["DRUG_B_001", "XDRUG_A_001"]


def test_filter_by_pwids_wildcard(database):
    """Test the wildcard leaves the database untouched."""
    assert filter_by_pwids(database, [".*"]) is database


def test_filter_by_pwids_without_pwid(make_sample):
    database = Database.from_rows([make_sample(None), make_sample("P1")])
    filtered = filter_by_pwids(database, ["P.*"])

    assert [row.pwid for row in filtered] == ["P1"]


def test_limit_rows():
    """Test limit keeps the first rows unless pwids were requested."""
    rows = list(range(10))

    assert limit_rows(rows, 3, pwids_specified=False) == [0, 1, 2]
    assert limit_rows(rows, 3, pwids_specified=True) == rows
    assert limit_rows(rows, 20, pwids_specified=False) == rows


# Test feature extraction

def test_resolve_feature_aliases():
    assert resolve_feature("similarity") is FeatureKind.ZHANG
    assert resolve_feature("id") is FeatureKind.PWID
    assert resolve_feature("cellline") is FeatureKind.PROTOCOL_NAME
    assert resolve_feature("knownTargets") is FeatureKind.TARGETS
    assert resolve_feature("Name") is FeatureKind.COMPOUND_NAME
    assert resolve_feature("colour") is FeatureKind.UNKNOWN


def test_default_features_all_resolve():
    assert all(resolve_feature(name) is not FeatureKind.UNKNOWN for name in DEFAULT_FEATURES)


def test_extract_features_values(rows):
    """Test present values are returned and targets sorted."""
    record = extract_features((0.5, rows[0]), ["zhang", "id", "compoundname", "targets", "plateid"])

    assert record == {
        "zhang": 0.5,
        "id": "DRUG_A_001",
        "compoundname": "aspirin",
        "targets": ["PTGS1", "PTGS2"],
        "plateid": "PLATE1",
    }


def test_extract_features_sentinels(rows):
    """Test missing values become readable sentinels."""
    record = extract_features(
        (0.0, rows[1]),
        ["jnjb", "smiles", "inchikey", "Type", "targets", "batch", "protocolname",
         "concentration", "year"],
    )

    assert record == {
        "jnjb": "No Jnjb",
        "smiles": "No Smiles",
        "inchikey": "No Inchikey",
        "Type": "No Compound Type",
        "targets": [],
        "batch": "No Batch id",
        "protocolname": "No Protocol",
        "concentration": "No Concentration",
        "year": "No Year",
    }


def test_extract_features_missing_pwid(make_sample):
    record = extract_features((0.0, make_sample(None)), ["id", "jnjs"])
    assert record == {"id": "No PWID", "jnjs": "No Jnjs"}


def test_extract_features_unknown_name(rows):
    """Test an unknown feature name is reported, not fatal."""
    record = extract_features((0.0, rows[0]), ["id", "colour"])

    assert list(record) == ["id", "colour"]
    assert record["colour"] == FEATURE_NOT_FOUND


# Test assembly

def test_sort_by_score_descending_stable(rows):
    """Test descending order with ties kept in input order."""
    scored = [(0.1, rows[0]), (0.9, rows[1]), (0.1, rows[2]), (-0.5, rows[3])]

    ordered = sort_by_score(scored)

    assert [row.pwid for _, row in ordered] == [
        "DRUG_A_002", "DRUG_A_001", "DRUG_B_001", "XDRUG_A_001",
    ]


def test_assemble_records(rows):
    records = assemble_records([(0.2, rows[2]), (0.8, rows[0])], ["id", "zhang"])

    assert records == [
        {"id": "DRUG_A_001", "zhang": 0.8},
        {"id": "DRUG_B_001", "zhang": 0.2},
    ]


def test_assemble_histogram_dimensions():
    """Test bins_y selects between 1-D and 2-D bucketing."""
    scores = [0.1, -0.3, 0.8]

    one_d = assemble_histogram(scores, bins_x=5)
    two_d = assemble_histogram(scores, bins_x=5, bins_y=3)

    assert len(one_d) == 5
    assert "bin" in one_d[0]
    assert len(two_d) == 15
    assert "x_bin" in two_d[0]
