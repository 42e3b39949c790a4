# CREW_FEAT: orchestrator-001
"""
Skeleton Crew - Runtime Orchestrator
====================================

Owns one plugin registry, action engine, event bus and supporting
registries, and drives them through the runtime lifecycle.

States:
    UNINITIALIZED -> INITIALIZING -> INITIALIZED -> SHUTTING_DOWN -> SHUTDOWN
                                  \\-> FAILED (terminal, after rollback)

Features:
- All-or-nothing plugin initialization
- Lifecycle events (runtime:initialized, runtime:shutdown)
- Idempotent shutdown
- Strict instance isolation: no state shared between runtimes

Author: Skeleton Crew Development Team
Version: 1.0.0
"""

import json
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from .action_engine import ActionEngine
from .config_manager import ConfigManager
from .context import RuntimeContext, freeze
from .event_bus import RUNTIME_INITIALIZED, RUNTIME_SHUTDOWN, EventBus
from .exceptions import (
    ConfigurationError,
    NotInitializedError,
    RuntimeStateError,
    ScreenNotFoundError,
)
from .performance import create_performance_monitor
from .plugin_base import Plugin, PluginDefinition
from .plugin_loader import DirectoryPluginLoader, PluginLoader
from .plugin_registry import PluginRegistry
from .screen_registry import ScreenRegistry
from .service_registry import ServiceRegistry
from .ui_bridge import UIBridge

# Host context values above this serialized size trigger a warning
HOST_CONTEXT_WARN_BYTES = 1024 * 1024


class RuntimeState(Enum):
    """Runtime lifecycle state."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    INITIALIZED = "initialized"
    SHUTTING_DOWN = "shutting_down"
    SHUTDOWN = "shutdown"
    FAILED = "failed"


class Runtime:
    """
    Plugin runtime orchestrator.

    Example:
        runtime = Runtime(config={"theme": "dark"}, host_context={"app": "demo"})
        runtime.register_plugin(storage_plugin)
        runtime.register_plugin(api_plugin)

        await runtime.initialize()
        ctx = runtime.get_context()
        result = await ctx.actions.run_action("api:status")

        await runtime.shutdown()
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        host_context: Optional[Mapping[str, Any]] = None,
        config: Optional[Mapping[str, Any]] = None,
        enable_performance_monitoring: bool = False,
        plugin_paths: Optional[Iterable[str]] = None,
        plugin_packages: Optional[Iterable[str]] = None,
        plugin_loader: Optional[PluginLoader] = None,
    ):
        self._logger = logger or logging.getLogger("CREW_Runtime")
        self._state = RuntimeState.UNINITIALIZED
        self._config = freeze(dict(config or {}))
        self._started_at: Optional[datetime] = None

        host_context = dict(host_context or {})
        self._check_host_context(host_context)

        self._performance = create_performance_monitor(enable_performance_monitoring)
        self._plugin_loader = plugin_loader or DirectoryPluginLoader(logger)
        self._plugin_paths = list(plugin_paths or [])
        self._plugin_packages = list(plugin_packages or [])

        # Subsystems fall back to their own named loggers unless one was injected
        self._plugins = PluginRegistry(logger)
        self._screens = ScreenRegistry(logger)
        self._actions = ActionEngine(logger)
        self._events = EventBus(logger)
        self._services = ServiceRegistry(logger)
        self._ui = UIBridge(logger)

        self._context = RuntimeContext(
            runtime=self,
            screens=self._screens,
            actions=self._actions,
            plugins=self._plugins,
            events=self._events,
            services=self._services,
            host_context=host_context,
            logger=self._logger,
        )
        self._actions.set_context(self._context)

    @classmethod
    def from_config(cls, config_manager: ConfigManager, **overrides) -> "Runtime":
        """Build a runtime from a loaded ``ConfigManager``."""
        settings = config_manager.settings
        options: Dict[str, Any] = {
            "config": config_manager.app_config,
            "host_context": config_manager.host_context,
            "enable_performance_monitoring": settings.enable_performance_monitoring,
            "plugin_paths": settings.plugin_paths,
            "plugin_packages": settings.plugin_packages,
        }
        options.update(overrides)
        return cls(**options)

    def _check_host_context(self, host_context: Dict[str, Any]) -> None:
        for key, value in host_context.items():
            if callable(value):
                self._logger.warning(
                    f'Host context key "{key}" is a function. Consider wrapping it in an object.'
                )
                continue
            try:
                size = len(json.dumps(value))
            except (TypeError, ValueError):
                self._logger.debug(f'Host context key "{key}" could not be serialized for size check')
                continue
            if size > HOST_CONTEXT_WARN_BYTES:
                self._logger.warning(f'Host context key "{key}" is large ({size} bytes)')

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> RuntimeState:
        return self._state

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def is_initialized(self) -> bool:
        return self._state == RuntimeState.INITIALIZED

    def accepts_events(self) -> bool:
        """Whether events emitted through the context are delivered."""
        return self._state in (
            RuntimeState.INITIALIZING,
            RuntimeState.INITIALIZED,
            RuntimeState.SHUTTING_DOWN,
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def register_plugin(self, plugin: Union[PluginDefinition, Plugin]) -> PluginDefinition:
        """
        Register a plugin before initialization.

        Raises:
            RuntimeStateError: Initialization already started
            ValidationError, DuplicateRegistrationError: Invalid or duplicate plugin
        """
        if self._state != RuntimeState.UNINITIALIZED:
            raise RuntimeStateError(
                "Cannot register plugins after initialization started. "
                "Plugins may still register others through context.plugins during setup."
            )
        return self._plugins.register_plugin(plugin)

    async def initialize(self) -> None:
        """
        Initialize every registered plugin.

        On failure the registry has already rolled back, every subsystem is
        cleared and the runtime moves to the terminal FAILED state.

        Raises:
            RuntimeStateError: Not in UNINITIALIZED state
            ConfigurationError: Missing dependency, cycle, invalid plugin config
            PluginSetupError: A plugin setup raised
        """
        if self._state != RuntimeState.UNINITIALIZED:
            raise RuntimeStateError(f"Runtime cannot initialize from state: {self._state.value}")

        self._logger.info("Initializing runtime...")
        self._state = RuntimeState.INITIALIZING
        stop_timer = self._performance.start_timer("runtime:initialize")

        try:
            await self._load_discovered_plugins()
            await self._plugins.initialize_all(self._context)
        except BaseException as e:
            self._logger.error(f"Runtime initialization failed: {e}")
            self._state = RuntimeState.FAILED
            await self._teardown()
            stop_timer()
            raise

        self._state = RuntimeState.INITIALIZED
        self._started_at = datetime.now(timezone.utc)
        stop_timer()

        self._logger.info(
            f"Runtime initialized: {len(self._plugins.get_initialized_plugins())} plugins"
        )
        await self._events.emit_async(RUNTIME_INITIALIZED, {"context": self._context})

    async def _load_discovered_plugins(self) -> None:
        if not self._plugin_paths and not self._plugin_packages:
            return

        self._logger.info("Loading plugins via plugin loader...")
        try:
            discovered = await self._plugin_loader.load_plugins(
                self._plugin_paths, self._plugin_packages
            )
        except Exception as e:
            self._logger.error(f"Plugin loader failed: {e!r}")
            return

        for plugin in discovered:
            try:
                self._plugins.register_plugin(plugin)
            except ConfigurationError as e:
                self._logger.error(f"Skipping discovered plugin: {e}")

    async def shutdown(self) -> None:
        """
        Dispose plugins in reverse order and release every subsystem.

        Safe to call more than once; a no-op unless the runtime is INITIALIZED.

        Raises:
            RuntimeStateError: Called while initialization is in progress
        """
        if self._state == RuntimeState.INITIALIZING:
            raise RuntimeStateError("Cannot shut down while initialization is in progress")

        if self._state != RuntimeState.INITIALIZED:
            self._logger.debug(f"Shutdown ignored in state: {self._state.value}")
            return

        self._logger.info("Shutting down runtime...")
        self._state = RuntimeState.SHUTTING_DOWN
        stop_timer = self._performance.start_timer("runtime:shutdown")

        await self._events.emit_async(RUNTIME_SHUTDOWN, {"context": self._context})
        await self._plugins.dispose_all(self._context)
        await self._teardown()

        self._state = RuntimeState.SHUTDOWN
        stop_timer()
        self._logger.info("Runtime shutdown complete")

    async def _teardown(self) -> None:
        await self._ui.shutdown()
        self._screens.clear()
        self._actions.clear()
        self._events.clear()
        self._services.clear()
        self._plugins.clear()
        self._actions.set_context(None)

    def get_context(self) -> RuntimeContext:
        """
        Get the coordination facade.

        Raises:
            NotInitializedError: Runtime is not INITIALIZING or INITIALIZED
        """
        if self._state not in (RuntimeState.INITIALIZING, RuntimeState.INITIALIZED):
            raise NotInitializedError(f"Runtime not initialized (state: {self._state.value})")
        return self._context

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def get_config(self) -> Mapping[str, Any]:
        """Get the read-only configuration snapshot."""
        return self._config

    def update_config(self, config: Mapping[str, Any]) -> Mapping[str, Any]:
        """Merge ``config`` into a new read-only snapshot."""
        self._config = freeze({**self._config, **config})
        self._logger.debug(f"Config updated: {sorted(config)}")
        return self._config

    # -------------------------------------------------------------------------
    # UI
    # -------------------------------------------------------------------------

    def set_ui_provider(self, provider: Any) -> None:
        self._ui.set_provider(provider)

    def get_ui_provider(self) -> Any:
        return self._ui.get_provider()

    async def mount_ui(self, target: Any) -> None:
        """Mount the UI provider; requires an initialized runtime."""
        await self._ui.mount(target, self.get_context())

    def render_screen(self, screen_id: str) -> Any:
        """Render a registered screen with the UI provider."""
        screen = self._screens.get_screen(screen_id)
        if screen is None:
            raise ScreenNotFoundError(screen_id)
        return self._ui.render_screen(screen)

    # -------------------------------------------------------------------------
    # Metrics
    # -------------------------------------------------------------------------

    def _get_uptime(self) -> float:
        """Get uptime in seconds."""
        if not self._started_at:
            return 0.0
        return (datetime.now(timezone.utc) - self._started_at).total_seconds()

    def get_metrics(self) -> Dict[str, Any]:
        """Get runtime metrics."""
        return {
            "state": self._state.value,
            "uptime_seconds": self._get_uptime(),
            "plugins": self._plugins.get_stats(),
            "actions": self._actions.get_stats(),
            "events": self._events.get_stats(),
            "screens": len(self._screens.get_all_screens()),
            "services": len(self._services.list()),
            "timings_ms": self._performance.get_metrics(),
        }


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "RuntimeState",
    "Runtime",
]
