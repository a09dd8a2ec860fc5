from .loader import load_config, load_config_with_overrides
from .schema import PipelineConfig, TableNames, QueryDefaults, ExecutionConfig

__all__ = [
    "load_config",
    "load_config_with_overrides",
    "PipelineConfig",
    "TableNames",
    "QueryDefaults",
    "ExecutionConfig",
]
