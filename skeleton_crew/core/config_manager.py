# CREW_FEAT: config-manager-001
"""
Skeleton Crew - Configuration Manager
=====================================

File-based configuration for hosts embedding the runtime.

Features:
- YAML/JSON configuration loading
- Environment variable overrides (CREW_ prefix, "__" for nesting)
- Configuration validation

File layout:
    runtime:
      log_level: INFO
      enable_performance_monitoring: false
      plugin_paths: [plugins/]
      plugin_packages: []
    config:        # handed to plugins as context.config
      theme: dark
    host:          # handed to plugins as context.host
      app_name: demo

Author: Skeleton Crew Development Team
Version: 1.0.0
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

logger = logging.getLogger("CREW_ConfigManager")

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_READERS = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.load,
}


@dataclass
class RuntimeSettings:
    """Settings consumed by the runtime itself."""

    log_level: str = "INFO"
    enable_performance_monitoring: bool = False
    plugin_paths: List[str] = field(default_factory=list)
    plugin_packages: List[str] = field(default_factory=list)


def env_scalar(value: str) -> Any:
    """Type an environment value the way YAML types a scalar."""
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError:
        return value
    if parsed is None or isinstance(parsed, (dict, list)):
        return value
    return parsed


class ConfigManager:
    """
    Configuration manager for the runtime host.

    Example:
        config_manager = ConfigManager()
        config_manager.load("crew.yaml")

        level = config_manager.get("runtime.log_level")
        runtime = Runtime.from_config(config_manager)
    """

    def __init__(self, config_path: Optional[Path] = None, env_prefix: str = "CREW_"):
        self._env_prefix = env_prefix
        self._data: Dict[str, Any] = {}
        self._settings = RuntimeSettings()

        if config_path:
            self.load(config_path)

    def load(self, path: Union[str, Path]) -> bool:
        """
        Load configuration from a YAML or JSON file.

        Returns:
            True if loaded successfully
        """
        path = Path(path)
        reader = _READERS.get(path.suffix)

        if reader is None:
            logger.error(f"Unsupported config format: {path.suffix or path.name}")
            return False

        try:
            with path.open("r") as f:
                data = reader(f) or {}
        except FileNotFoundError:
            logger.warning(f"Config file not found: {path}")
            return False
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Failed to load config {path}: {e}")
            return False

        if not isinstance(data, dict):
            logger.error(f"Config root must be a mapping: {path}")
            return False

        self.load_dict(data)
        logger.info(f"Configuration loaded from: {path}")
        return True

    def load_dict(self, data: Dict[str, Any]) -> None:
        """Load configuration from an in-memory mapping."""
        self._data = dict(data)

        prefix = self._env_prefix
        for name in sorted(os.environ):
            if name.startswith(prefix) and len(name) > len(prefix):
                path = name[len(prefix):].lower().split("__")
                self._assign(path, env_scalar(os.environ[name]))

        self._settings = self._build_settings(self._data.get("runtime") or {})

    def _assign(self, path: List[str], value: Any) -> None:
        *parents, leaf = path
        node = self._data
        for part in parents:
            child = node.get(part)
            if not isinstance(child, dict):
                # Overrides never mutate the caller's mapping
                child = {}
            else:
                child = dict(child)
            node[part] = child
            node = child
        node[leaf] = value

    @staticmethod
    def _build_settings(section: Dict[str, Any]) -> RuntimeSettings:
        return RuntimeSettings(
            log_level=str(section.get("log_level", "INFO")).upper(),
            enable_performance_monitoring=bool(section.get("enable_performance_monitoring", False)),
            plugin_paths=_as_list(section.get("plugin_paths")),
            plugin_packages=_as_list(section.get("plugin_packages")),
        )

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key, e.g. ``"config.theme"``."""
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    @property
    def settings(self) -> RuntimeSettings:
        return self._settings

    @property
    def app_config(self) -> Dict[str, Any]:
        """Application config handed to plugins."""
        return dict(self._data.get("config") or {})

    @property
    def host_context(self) -> Dict[str, Any]:
        """Host context values handed to plugins."""
        return dict(self._data.get("host") or {})

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if self._settings.log_level not in VALID_LOG_LEVELS:
            errors.append(f"runtime.log_level must be one of {', '.join(VALID_LOG_LEVELS)}")

        for key in ("plugin_paths", "plugin_packages"):
            if not all(isinstance(p, str) and p for p in getattr(self._settings, key)):
                errors.append(f"runtime.{key} must be a list of non-empty strings")

        for section in ("config", "host"):
            value = self._data.get(section)
            if value is not None and not isinstance(value, dict):
                errors.append(f"{section} must be a mapping")

        return errors


def _as_list(value: Any) -> List[Any]:
    # Env overrides arrive as scalars; "a,b" becomes ["a", "b"]
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "RuntimeSettings",
    "ConfigManager",
    "env_scalar",
]
