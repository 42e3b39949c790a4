# CREW_FEAT: plugin-loader-001
"""
Skeleton Crew - Plugin Loader
=============================

Plugin discovery from files, directories and importable packages.

Features:
- Single .py files or recursive directory scans
- Importable packages / modules by dotted name
- Module-level ``plugin``, ``PLUGINS`` list, or concrete ``Plugin`` subclasses
- Failures are logged and skipped, never raised to the runtime

Author: Skeleton Crew Development Team
Version: 1.0.0
"""

import hashlib
import importlib
import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Iterable, List, Optional, Protocol, Union

from .plugin_base import Plugin, PluginDefinition, as_definition


class PluginLoader(Protocol):
    """Anything that can supply plugin definitions to a runtime."""

    async def load_plugins(
        self, plugin_paths: List[str], plugin_packages: List[str]
    ) -> List[PluginDefinition]:
        ...


class DirectoryPluginLoader:
    """
    Loads plugins from the filesystem and from importable packages.

    Example:
        loader = DirectoryPluginLoader()
        plugins = await loader.load_plugins(["plugins/"], ["crew_extras.audit"])
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("CREW_PluginLoader")

    async def load_plugins(
        self,
        plugin_paths: Optional[Iterable[Union[str, Path]]] = None,
        plugin_packages: Optional[Iterable[str]] = None,
    ) -> List[PluginDefinition]:
        """
        Load plugin definitions.

        Args:
            plugin_paths: Files or directories to scan
            plugin_packages: Dotted module names to import

        Returns:
            Plugin definitions in discovery order
        """
        plugins: List[PluginDefinition] = []

        for path in plugin_paths or []:
            try:
                plugins.extend(self._load_from_path(Path(path)))
            except Exception as e:
                self._logger.error(f'Failed to load plugins from path "{path}": {e!r}')

        for package in plugin_packages or []:
            try:
                module = importlib.import_module(package)
                plugins.extend(self._extract(module, package))
            except Exception as e:
                self._logger.error(f'Failed to load plugin package "{package}": {e!r}')

        self._logger.info(f"Loaded {len(plugins)} plugins via DirectoryPluginLoader")
        return plugins

    def _load_from_path(self, path: Path) -> List[PluginDefinition]:
        path = path.expanduser().resolve()

        if not path.exists():
            raise FileNotFoundError(path)

        if path.is_file():
            return self._load_file(path)

        plugins: List[PluginDefinition] = []
        for py_file in sorted(path.glob("**/*.py")):
            if self._is_skipped(py_file):
                continue
            try:
                plugins.extend(self._load_file(py_file))
            except Exception as e:
                self._logger.warning(f"Failed to load {py_file}: {e!r}")

        return plugins

    @staticmethod
    def _is_skipped(py_file: Path) -> bool:
        name = py_file.name
        return name.startswith("_") or name.startswith("test_") or name.endswith("_test.py")

    def _load_file(self, file_path: Path) -> List[PluginDefinition]:
        """Import a file under a path-unique module name."""
        digest = hashlib.sha1(str(file_path).encode()).hexdigest()[:10]
        module_name = f"crew_plugin_{file_path.stem}_{digest}"

        spec = importlib.util.spec_from_file_location(module_name, file_path)
        if not spec or not spec.loader:
            raise ImportError(f"Cannot import {file_path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(module_name, None)
            raise

        return self._extract(module, str(file_path))

    def _extract(self, module: ModuleType, source: str) -> List[PluginDefinition]:
        """Find plugin definitions exported by a module."""
        candidates: List[Any] = []

        exported = getattr(module, "plugin", None)
        if exported is not None:
            candidates.append(exported)
        candidates.extend(getattr(module, "PLUGINS", None) or [])

        if not candidates:
            # Fall back to concrete Plugin subclasses defined in the module itself
            for attr in vars(module).values():
                if (
                    isinstance(attr, type)
                    and issubclass(attr, Plugin)
                    and not inspect.isabstract(attr)
                    and attr.__module__ == module.__name__
                ):
                    candidates.append(attr)

        definitions: List[PluginDefinition] = []
        for candidate in candidates:
            try:
                if isinstance(candidate, type) and issubclass(candidate, Plugin):
                    candidate = candidate()
                if isinstance(candidate, (PluginDefinition, Plugin)):
                    definitions.append(as_definition(candidate))
                    self._logger.debug(f"Loaded plugin from {source}: {definitions[-1].name}")
                else:
                    self._logger.warning(f'"{source}" does not export a valid plugin: {candidate!r}')
            except Exception as e:
                self._logger.warning(f'Failed to instantiate plugin from "{source}": {e!r}')

        if not definitions:
            self._logger.warning(f'"{source}" does not export a valid plugin')

        return definitions


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "PluginLoader",
    "DirectoryPluginLoader",
]
