"""Configuration loading with YAML parsing and validation."""

from pathlib import Path
from typing import Any

import pydantic_yaml

from .schema import PipelineConfig


def load_config(config_path: Path | str) -> PipelineConfig:
    """
    Read a pipeline configuration YAML file into a validated PipelineConfig.

    Args:
        config_path: YAML file with paths, table names, query defaults and
            execution settings

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If a value is missing or out of range
    """
    config_path = Path(config_path)
    if not config_path.is_file():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    return pydantic_yaml.parse_yaml_raw_as(PipelineConfig, config_path.read_text())


def _set_dotted(target: dict[str, Any], key: str, value: Any) -> None:
    """Assign value at a dotted path such as "query.limit"."""
    *sections, leaf = key.split(".")
    for section in sections:
        if not isinstance(target.get(section), dict):
            raise KeyError(f"Unknown config section in override '{key}': {section}")
        target = target[section]
    target[leaf] = value


def load_config_with_overrides(
    config_path: Path | str,
    overrides: dict[str, Any],
) -> PipelineConfig:
    """
    Load a configuration file and replace selected values.

    Overrides come from CLI flags; dotted keys address nested sections
    (e.g. {"execution.workers": 4, "query.limit": 50}). The merged result is
    validated again, so overrides obey the same constraints as the file.

    Raises:
        FileNotFoundError: If the file does not exist
        KeyError: If an override names an unknown section
        pydantic.ValidationError: If the merged configuration is invalid
    """
    merged = load_config(config_path).model_dump()
    for key, value in overrides.items():
        _set_dotted(merged, key, value)

    return PipelineConfig.model_validate(merged)
