"""Configuration management for designbridge.

Provides hierarchical YAML-based configuration with:
- System-level config (/etc/designbridge/ or %PROGRAMDATA%)
- User-level config (~/.designbridge/ or %APPDATA%)
- Project-level config ($root/.designbridge/)
- Environment variable overrides (highest priority)

Example usage:
    from designbridge.config import load_config

    config = load_config(root="/path/to/project")
    print(config.bridge.port)
"""

from designbridge.config.loader import (
    deep_merge,
    get_config,
    load_config,
    reset_config,
)
from designbridge.config.paths import get_config_paths
from designbridge.config.schema import (
    BridgeConfig,
    Config,
    LoggingConfig,
    WorkerConfig,
)

__all__ = [
    "BridgeConfig",
    "Config",
    "LoggingConfig",
    "WorkerConfig",
    "deep_merge",
    "get_config",
    "get_config_paths",
    "load_config",
    "reset_config",
]
