"""Configuration file loading and caching.

Handles:
- YAML file parsing
- Deep merging of system, user and project files
- Environment variable overrides
- Conversion from dict to typed Config dataclass
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from designbridge.config.paths import get_config_paths
from designbridge.config.schema import BridgeConfig, Config, LoggingConfig, WorkerConfig

_log = logging.getLogger("designbridge.config")

_cached_config: Config | None = None

# Environment variable -> (section, key, converter)
_ENV_VARS: dict[str, tuple[str, str, type]] = {
    "DESIGNBRIDGE_HOST": ("bridge", "host", str),
    "DESIGNBRIDGE_PORT": ("bridge", "port", int),
    "DESIGNBRIDGE_TIMEOUT": ("bridge", "request_timeout", float),
    "DESIGNBRIDGE_WORKER_URL": ("worker", "url", str),
    "DESIGNBRIDGE_LOG": ("logging", "file", str),
}


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Nested dicts merge recursively, lists and scalars are replaced, and None
    in ``override`` never replaces a base value.
    """
    result = base.copy()
    for key, value in override.items():
        if value is None:
            continue
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value)
        else:
            result[key] = value
    return result


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning empty dict if not found or invalid."""
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except yaml.YAMLError as e:
        _log.warning("Invalid YAML in %s: %s", path, e)
        return {}
    except PermissionError:
        _log.debug("Permission denied reading %s", path)
        return {}
    except OSError as e:
        _log.warning("Error reading %s: %s", path, e)
        return {}


def env_overrides() -> dict[str, Any]:
    """Build config dict from DESIGNBRIDGE_* environment variables."""
    overrides: dict[str, Any] = {}
    for var, (section, key, convert) in _ENV_VARS.items():
        raw = os.environ.get(var)
        if not raw:
            continue
        try:
            value = convert(raw)
        except ValueError:
            _log.warning("Ignoring %s=%r: expected %s", var, raw, convert.__name__)
            continue
        overrides.setdefault(section, {})[key] = value
    return overrides


_TRUE = frozenset({"true", "yes", "on", "1"})
_FALSE = frozenset({"false", "no", "off", "0"})


def boolean(value: Any) -> bool:
    """Strict bool: YAML booleans or true/false, yes/no, on/off, 1/0 strings."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _value(section: str, data: dict[str, Any], key: str, convert: Any, default: Any) -> Any:
    """Convert ``data[key]``, keeping ``default`` when it is missing or malformed."""
    raw = data.get(key)
    if raw is None:
        return default
    try:
        return convert(raw)
    except (TypeError, ValueError):
        _log.warning("Ignoring %s.%s=%r: expected %s", section, key, raw, convert.__name__)
        return default


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name)
    return value if isinstance(value, dict) else {}


def dict_to_config(data: dict[str, Any]) -> Config:
    """Convert merged dict to typed Config dataclass."""
    bridge_data = _section(data, "bridge")
    defaults = BridgeConfig()
    bridge = BridgeConfig(
        host=_value("bridge", bridge_data, "host", str, defaults.host),
        port=_value("bridge", bridge_data, "port", int, defaults.port),
        request_timeout=_value(
            "bridge", bridge_data, "request_timeout", float, defaults.request_timeout
        ),
        heartbeat_interval=_value(
            "bridge", bridge_data, "heartbeat_interval", float, defaults.heartbeat_interval
        ),
        fail_pending_on_disconnect=_value(
            "bridge",
            bridge_data,
            "fail_pending_on_disconnect",
            boolean,
            defaults.fail_pending_on_disconnect,
        ),
    )

    worker_data = _section(data, "worker")
    worker = WorkerConfig(
        url=_value("worker", worker_data, "url", str, f"ws://{bridge.host}:{bridge.port}/"),
        reconnect_delay=_value(
            "worker", worker_data, "reconnect_delay", float, WorkerConfig().reconnect_delay
        ),
    )

    log_data = _section(data, "logging")
    logging_config = LoggingConfig(
        level=_value("logging", log_data, "level", str, None),
        verbose=_value("logging", log_data, "verbose", int, None),
        file=_value("logging", log_data, "file", str, None),
    )

    known_keys = {"bridge", "worker", "logging"}
    extra = {k: v for k, v in data.items() if k not in known_keys}

    return Config(bridge=bridge, worker=worker, logging=logging_config, extra=extra)


def load_config(root: str | None = None, reload: bool = False) -> Config:
    """Load and merge config from all sources.

    Priority order (highest to lowest):
    1. Environment variables
    2. Project config ($root/.designbridge/config.yaml)
    3. User config
    4. System config

    Args:
        root: Project directory for project-level config.
        reload: Force reload even if cached.
    """
    global _cached_config

    if _cached_config is not None and not reload and root is None:
        return _cached_config

    merged: dict[str, Any] = {}
    for path in get_config_paths(root):
        config_data = load_yaml_file(path)
        if config_data:
            _log.debug("Loaded config from %s", path)
            merged = deep_merge(merged, config_data)

    merged = deep_merge(merged, env_overrides())
    config = dict_to_config(merged)

    if root is None:
        _cached_config = config

    return config


def get_config() -> Config:
    """Get the cached global config, loading it on first use."""
    if _cached_config is None:
        return load_config()
    return _cached_config


def reset_config() -> None:
    """Reset cached config."""
    global _cached_config
    _cached_config = None
