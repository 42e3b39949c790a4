# CREW_FEAT: plugin-registry-001
"""
Skeleton Crew - Plugin Registry
===============================

Dependency-ordered plugin lifecycle management.

Features:
- Duplicate-safe registration
- Stable topological ordering (ties break by registration order)
- Cycle and missing dependency detection before any setup runs
- Plugins registered during setup are queued behind the current plugin
- All-or-nothing initialization: rollback in reverse order on failure
- Reverse-order disposal with per-plugin fault isolation

Author: Skeleton Crew Development Team
Version: 1.0.0
"""

import logging
from collections import deque
from typing import Any, Deque, Dict, Iterable, List, Optional, Set, Union

from .exceptions import (
    DependencyCycleError,
    DuplicateRegistrationError,
    MissingDependencyError,
    PluginConfigValidationError,
    PluginSetupError,
    RuntimeStateError,
    ValidationError,
)
from .plugin_base import (
    ConfigValidationResult,
    Plugin,
    PluginDefinition,
    PluginState,
    as_definition,
    maybe_await,
)


class PluginRegistry:
    """
    Plugin registry and lifecycle driver for one runtime instance.

    Example:
        registry = PluginRegistry()
        registry.register_plugin(storage_plugin)
        registry.register_plugin(api_plugin)   # depends on "storage"

        await registry.initialize_all(context)  # storage, then api
        await registry.dispose_all(context)     # api, then storage
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("CREW_PluginRegistry")
        self._plugins: Dict[str, PluginDefinition] = {}
        self._states: Dict[str, PluginState] = {}
        self._initialized: List[str] = []
        # Registered but not yet placed in an initialization order
        self._queued: List[str] = []
        self._initializing = False
        self._completed = False

    @property
    def is_initializing(self) -> bool:
        return self._initializing

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register_plugin(self, plugin: Union[PluginDefinition, Plugin]) -> PluginDefinition:
        """
        Register a plugin.

        During an initialization pass the plugin is initialized after the
        plugin whose setup registered it.

        Raises:
            ValidationError: Definition is malformed
            DuplicateRegistrationError: Name already registered
            RuntimeStateError: Initialization already completed
        """
        if self._completed and not self._initializing:
            raise RuntimeStateError(
                "Plugins can only be registered before or during initialization"
            )

        definition = as_definition(plugin)
        self._validate(definition)

        if definition.name in self._plugins:
            raise DuplicateRegistrationError("Plugin", definition.name)

        self._plugins[definition.name] = definition
        self._states[definition.name] = PluginState.REGISTERED
        self._queued.append(definition.name)

        self._logger.debug(f'Plugin registered: {definition.name} v{definition.version}')
        return definition

    def _validate(self, definition: Any) -> None:
        if not isinstance(definition, PluginDefinition):
            raise ValidationError("Plugin", "definition")

        name = definition.name
        if not isinstance(name, str) or not name:
            raise ValidationError("Plugin", "name")
        if not isinstance(definition.version, str) or not definition.version:
            raise ValidationError("Plugin", "version", name)
        if not callable(definition.setup):
            raise ValidationError("Plugin", "setup", name)
        if definition.dispose is not None and not callable(definition.dispose):
            raise ValidationError("Plugin", "dispose", name)
        if definition.validate_config is not None and not callable(definition.validate_config):
            raise ValidationError("Plugin", "validate_config", name)
        if isinstance(definition.dependencies, str) or not all(
            isinstance(dep, str) and dep for dep in definition.dependencies
        ):
            raise ValidationError("Plugin", "dependencies", name)

    # -------------------------------------------------------------------------
    # Ordering
    # -------------------------------------------------------------------------

    def resolve_order(self, names: Iterable[str], satisfied: Iterable[str] = ()) -> List[str]:
        """
        Order plugins so each follows its dependencies.

        Args:
            names: Plugin names to order, in registration order
            satisfied: Names already initialized or placed ahead of ``names``

        Raises:
            MissingDependencyError: A dependency is not registered
            DependencyCycleError: The dependencies form a cycle
        """
        remaining = list(names)
        placed: Set[str] = set(satisfied)
        candidates = set(remaining)

        for name in remaining:
            for dep in self._plugins[name].dependencies:
                if dep not in self._plugins or (dep not in placed and dep not in candidates):
                    raise MissingDependencyError(name, dep)

        order: List[str] = []
        while remaining:
            for name in remaining:
                if all(dep in placed for dep in self._plugins[name].dependencies):
                    break
            else:
                raise DependencyCycleError(self._find_cycle(remaining))

            remaining.remove(name)
            placed.add(name)
            order.append(name)

        return order

    def _find_cycle(self, blocked: List[str]) -> List[str]:
        """Walk unresolved dependencies until a name repeats."""
        pending = set(blocked)
        path: List[str] = []
        seen: Dict[str, int] = {}

        node = blocked[0]
        while node not in seen:
            seen[node] = len(path)
            path.append(node)
            node = next(dep for dep in self._plugins[node].dependencies if dep in pending)

        return path[seen[node]:] + [node]

    def _take_queued(self, satisfied: Iterable[str]) -> List[str]:
        names, self._queued = self._queued, []
        return self.resolve_order(names, satisfied)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def initialize_all(self, context: Any) -> List[str]:
        """
        Run setup for every registered plugin not yet initialized.

        Plugins run sequentially in dependency order. If one fails, every
        plugin initialized by this pass is disposed in reverse order and the
        failure is re-raised.

        Returns:
            Names initialized by this pass, in order

        Raises:
            MissingDependencyError, DependencyCycleError: Before any setup runs
            PluginConfigValidationError: A plugin rejected the config
            PluginSetupError: A plugin setup raised
        """
        if self._initializing:
            raise RuntimeStateError("Plugin initialization already in progress")

        self._initializing = True
        initialized_now: List[str] = []

        try:
            queue: Deque[str] = deque(self._take_queued(self._initialized))

            while queue:
                name = queue.popleft()
                await self._initialize_one(name, context)
                initialized_now.append(name)
                self._initialized.append(name)

                # Plugins registered by that setup run after everything already queued
                if self._queued:
                    queue.extend(self._take_queued([*self._initialized, *queue]))

        except BaseException:
            await self._rollback(initialized_now, context)
            raise

        finally:
            self._initializing = False

        self._completed = True
        self._logger.info(f"Initialized {len(initialized_now)} plugins")
        return initialized_now

    async def _initialize_one(self, name: str, context: Any) -> None:
        plugin = self._plugins[name]
        self._states[name] = PluginState.INITIALIZING

        if plugin.validate_config is not None:
            await self._validate_config(plugin, context)

        try:
            await maybe_await(plugin.setup(context))
        except Exception as e:
            self._states[name] = PluginState.FAILED
            self._logger.error(f'Plugin "{name}" setup failed: {e!r}')
            raise PluginSetupError(name, e) from e

        self._states[name] = PluginState.READY
        self._logger.debug(f"Plugin initialized: {name}")

    async def _validate_config(self, plugin: PluginDefinition, context: Any) -> None:
        config = getattr(context, "config", {})
        cause: Optional[Exception] = None

        try:
            outcome = await maybe_await(plugin.validate_config(config))
        except Exception as e:
            cause = e
            outcome = ConfigValidationResult(valid=False, errors=[str(e) or type(e).__name__])

        if isinstance(outcome, ConfigValidationResult):
            valid, errors = outcome.valid, outcome.errors
        else:
            valid, errors = bool(outcome), []

        if not valid:
            self._states[plugin.name] = PluginState.FAILED
            self._logger.error(f'Plugin "{plugin.name}" config validation failed: {errors}')
            raise PluginConfigValidationError(plugin.name, errors) from cause

    async def _rollback(self, names: List[str], context: Any) -> None:
        if not names:
            return

        self._logger.error(f"Plugin setup failed, rolling back {len(names)} initialized plugins")

        for name in reversed(names):
            self._initialized.remove(name)
            await self._dispose_one(name, context, PluginState.ROLLED_BACK)
            self._logger.debug(f"Rolled back plugin: {name}")

    async def dispose_all(self, context: Any) -> List[str]:
        """
        Dispose every initialized plugin in reverse initialization order.

        Dispose failures are logged and do not stop the remaining disposals.

        Returns:
            Names disposed, in disposal order
        """
        names = list(reversed(self._initialized))
        self._initialized = []

        for name in names:
            await self._dispose_one(name, context, PluginState.DISPOSED)

        self._logger.info(f"Disposed {len(names)} plugins")
        return names

    async def _dispose_one(self, name: str, context: Any, final_state: PluginState) -> None:
        plugin = self._plugins[name]

        if plugin.dispose is not None:
            try:
                await maybe_await(plugin.dispose(context))
                self._logger.debug(f"Disposed plugin: {name}")
            except Exception as e:
                self._logger.error(f'Plugin "{name}" dispose failed: {e!r}')

        self._states[name] = final_state

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_plugin(self, name: str) -> Optional[PluginDefinition]:
        """Get a plugin definition by name."""
        return self._plugins.get(name)

    def get_all_plugins(self) -> List[PluginDefinition]:
        """Get all plugin definitions in registration order."""
        return list(self._plugins.values())

    def get_initialized_plugins(self) -> List[str]:
        """Get initialized plugin names in initialization order."""
        return list(self._initialized)

    def get_plugin_state(self, name: str) -> Optional[PluginState]:
        return self._states.get(name)

    def get_stats(self) -> Dict[str, Any]:
        """Get registry statistics."""
        states: Dict[str, int] = {}
        for state in self._states.values():
            states[state.name] = states.get(state.name, 0) + 1

        return {
            "registered": len(self._plugins),
            "initialized": len(self._initialized),
            "states": states,
        }

    def clear(self) -> None:
        """Forget every plugin. Used during shutdown."""
        self._plugins.clear()
        self._states.clear()
        self._initialized.clear()
        self._queued.clear()


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "PluginRegistry",
]
