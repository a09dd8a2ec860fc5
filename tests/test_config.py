"""Tests for configuration loading and validation."""

import pytest
from pydantic import ValidationError

from connectivity_pipeline.config import load_config, load_config_with_overrides
from connectivity_pipeline.config.schema import PipelineConfig


def test_load_valid_config():
    """Test loading valid default configuration."""
    config = load_config("config/default.yaml")

    assert isinstance(config, PipelineConfig)
    assert config.tables.genes == "genes"
    assert config.tables.samples == "samples"
    assert config.query.limit == 10
    assert config.query.bins_x == 20
    assert config.query.bins_y == 0
    assert config.execution.workers == 1


def test_invalid_config_missing_field(tmp_path):
    """Test that missing required field raises ValidationError."""
    invalid_config = tmp_path / "invalid.yaml"
    invalid_config.write_text(f"""
data_dir: {tmp_path}/data
query:
  limit: 5
""")

    with pytest.raises(ValidationError) as exc_info:
        load_config(invalid_config)

    assert "duckdb_path" in str(exc_info.value)


def test_invalid_workers(tmp_path):
    """Test that workers < 1 raises ValidationError."""
    invalid_config = tmp_path / "invalid_workers.yaml"
    invalid_config.write_text(f"""
data_dir: {tmp_path}/data
duckdb_path: {tmp_path}/reference.duckdb
execution:
  workers: 0
""")

    with pytest.raises(ValidationError) as exc_info:
        load_config(invalid_config)

    assert "workers" in str(exc_info.value)


def test_negative_bins_y_accepted(tmp_path):
    """Test that a negative bins_y default is kept (it selects 1-D histograms)."""
    config_path = tmp_path / "one_d.yaml"
    config_path.write_text(f"""
data_dir: {tmp_path}/data
duckdb_path: {tmp_path}/reference.duckdb
query:
  bins_y: -1
""")

    config = load_config(config_path)

    assert config.query.bins_y == -1


def test_invalid_bins_x(tmp_path):
    """Test that a non-positive bins_x default is rejected."""
    invalid_config = tmp_path / "invalid_bins.yaml"
    invalid_config.write_text(f"""
data_dir: {tmp_path}/data
duckdb_path: {tmp_path}/reference.duckdb
query:
  bins_x: 0
""")

    with pytest.raises(ValidationError):
        load_config(invalid_config)


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_config_hash_deterministic():
    """Test that config hash is deterministic and changes with config."""
    config1 = load_config("config/default.yaml")
    config2 = load_config("config/default.yaml")

    assert config1.config_hash() == config2.config_hash()
    assert len(config1.config_hash()) == 64

    config3 = load_config_with_overrides("config/default.yaml", {"query.limit": 50})
    assert config3.config_hash() != config1.config_hash()


def test_config_overrides():
    """Test dotted and top-level overrides are applied and re-validated."""
    config = load_config_with_overrides(
        "config/default.yaml",
        {"execution.workers": 4, "query.bins_y": 10},
    )

    assert config.execution.workers == 4
    assert config.query.bins_y == 10
    assert config.query.limit == 10


def test_config_overrides_revalidated():
    with pytest.raises(ValidationError):
        load_config_with_overrides("config/default.yaml", {"query.limit": 0})


def test_data_dir_created(tmp_path):
    """Test that data_dir is created on load."""
    data_dir = tmp_path / "new" / "data"
    assert not data_dir.exists()

    PipelineConfig(data_dir=data_dir, duckdb_path=tmp_path / "reference.duckdb")

    assert data_dir.is_dir()


def test_config_override_unknown_section():
    with pytest.raises(KeyError, match="nope"):
        load_config_with_overrides("config/default.yaml", {"nope.limit": 1})
