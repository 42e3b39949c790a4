# CREW_FEAT: runtime-context-001
"""
Skeleton Crew - Runtime Context
===============================

The coordination facade handed to every plugin and handler.

Exposes:
- screens, actions, plugins, events, services sub-facades
- read-only logger, config and host snapshots
- introspection (metadata only, never callables)

Author: Skeleton Crew Development Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, List, Mapping, Optional, Tuple, Union

from .action_engine import ActionDefinition, ActionEngine
from .event_bus import EventBus, EventHandler
from .exceptions import NotInitializedError, RuntimeStateError
from .plugin_base import Plugin, PluginDefinition, PluginState
from .plugin_registry import PluginRegistry
from .screen_registry import ScreenDefinition, ScreenRegistry
from .service_registry import ServiceRegistry

if TYPE_CHECKING:
    from .orchestrator import Runtime

RUNTIME_VERSION = "1.0.0"


def freeze(value: Any) -> Any:
    """Deep read-only copy: mappings become proxies, sequences become tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(freeze(item) for item in value)
    return value


# =============================================================================
# INTROSPECTION METADATA
# =============================================================================


@dataclass(frozen=True)
class ActionMetadata:
    id: str
    timeout_ms: Optional[float] = None


@dataclass(frozen=True)
class PluginMetadata:
    name: str
    version: str
    dependencies: Tuple[str, ...] = ()
    config_keys: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ScreenMetadata:
    id: str
    title: str
    component: str


@dataclass(frozen=True)
class IntrospectionMetadata:
    runtime_version: str
    total_actions: int
    total_plugins: int
    total_screens: int


# =============================================================================
# SUB-FACADES
# =============================================================================


class ScreensAPI:
    """Screen registration and lookup."""

    def __init__(self, registry: ScreenRegistry):
        self._registry = registry

    def register_screen(self, screen: ScreenDefinition) -> Callable[[], None]:
        return self._registry.register_screen(screen)

    def get_screen(self, screen_id: str) -> Optional[ScreenDefinition]:
        return self._registry.get_screen(screen_id)

    def get_all_screens(self) -> List[ScreenDefinition]:
        return self._registry.get_all_screens()


class ActionsAPI:
    """Action registration and invocation."""

    def __init__(self, engine: ActionEngine, runtime: "Runtime"):
        self._engine = engine
        self._runtime = runtime

    def register_action(self, action: ActionDefinition) -> Callable[[], None]:
        return self._engine.register_action(action)

    async def run_action(self, action_id: str, params: Any = None) -> Any:
        """Run an action. Only valid while the runtime is initialized."""
        if not self._runtime.is_initialized():
            raise NotInitializedError(
                f'Cannot run action "{action_id}": runtime is {self._runtime.state.value}'
            )
        return await self._engine.run_action(action_id, params)


class PluginsAPI:
    """Plugin registration and lookup."""

    def __init__(self, registry: PluginRegistry):
        self._registry = registry

    def register_plugin(self, plugin: Union[PluginDefinition, Plugin]) -> None:
        """Register a plugin from inside another plugin's setup."""
        if not self._registry.is_initializing:
            raise RuntimeStateError(
                "Plugins can only be registered through the context during initialization"
            )
        self._registry.register_plugin(plugin)

    def get_plugin(self, name: str) -> Optional[PluginDefinition]:
        return self._registry.get_plugin(name)

    def get_all_plugins(self) -> List[PluginDefinition]:
        return self._registry.get_all_plugins()

    def get_initialized_plugins(self) -> List[str]:
        return self._registry.get_initialized_plugins()

    def get_plugin_state(self, name: str) -> Optional[PluginState]:
        return self._registry.get_plugin_state(name)


class EventsAPI:
    """Event subscription and emission."""

    def __init__(self, bus: EventBus, runtime: "Runtime"):
        self._bus = bus
        self._runtime = runtime

    def on(self, event: str, handler: EventHandler) -> Callable[[], None]:
        return self._bus.on(event, handler)

    def emit(self, event: str, data: Any = None) -> None:
        if self._accepts_events(event):
            self._bus.emit(event, data)

    async def emit_async(self, event: str, data: Any = None) -> None:
        if self._accepts_events(event):
            await self._bus.emit_async(event, data)

    def _accepts_events(self, event: str) -> bool:
        if self._runtime.accepts_events():
            return True
        self._runtime.logger.debug(
            f'Event "{event}" dropped: runtime is {self._runtime.state.value}'
        )
        return False


class ServicesAPI:
    """Service locator."""

    def __init__(self, registry: ServiceRegistry):
        self._registry = registry

    def register(self, name: str, service: Any) -> None:
        self._registry.register(name, service)

    def get(self, name: str) -> Any:
        return self._registry.get(name)

    def has(self, name: str) -> bool:
        return self._registry.has(name)

    def list(self) -> List[str]:
        return self._registry.list()


class IntrospectionAPI:
    """Read-only metadata about registered actions, plugins and screens."""

    def __init__(self, actions: ActionEngine, plugins: PluginRegistry, screens: ScreenRegistry):
        self._actions = actions
        self._plugins = plugins
        self._screens = screens

    def list_actions(self) -> List[str]:
        return [action.id for action in self._actions.get_all_actions()]

    def get_action_definition(self, action_id: str) -> Optional[ActionMetadata]:
        action = self._actions.get_action(action_id)
        if action is None:
            return None
        return ActionMetadata(id=action.id, timeout_ms=action.timeout_ms)

    def list_plugins(self) -> List[str]:
        return [plugin.name for plugin in self._plugins.get_all_plugins()]

    def get_plugin_definition(self, name: str) -> Optional[PluginMetadata]:
        plugin = self._plugins.get_plugin(name)
        if plugin is None:
            return None
        return PluginMetadata(
            name=plugin.name,
            version=plugin.version,
            dependencies=tuple(plugin.dependencies),
            config_keys=tuple(plugin.config_keys),
        )

    def list_screens(self) -> List[str]:
        return [screen.id for screen in self._screens.get_all_screens()]

    def get_screen_definition(self, screen_id: str) -> Optional[ScreenMetadata]:
        screen = self._screens.get_screen(screen_id)
        if screen is None:
            return None
        return ScreenMetadata(id=screen.id, title=screen.title, component=screen.component)

    def get_metadata(self) -> IntrospectionMetadata:
        return IntrospectionMetadata(
            runtime_version=RUNTIME_VERSION,
            total_actions=len(self._actions.get_all_actions()),
            total_plugins=len(self._plugins.get_all_plugins()),
            total_screens=len(self._screens.get_all_screens()),
        )


# =============================================================================
# RUNTIME CONTEXT
# =============================================================================


class RuntimeContext:
    """
    Coordination facade for one runtime instance.

    The same context object is passed to every plugin setup/dispose and
    every action handler of its runtime.

    Example:
        async def setup(ctx: RuntimeContext):
            ctx.screens.register_screen(ScreenDefinition("home", "Home", "HomeView"))
            ctx.events.on("user:login", on_login)
            ctx.logger.info(f"Theme: {ctx.config.get('theme')}")
    """

    def __init__(
        self,
        runtime: "Runtime",
        screens: ScreenRegistry,
        actions: ActionEngine,
        plugins: PluginRegistry,
        events: EventBus,
        services: ServiceRegistry,
        host_context: Mapping[str, Any],
        logger: logging.Logger,
    ):
        self._runtime = runtime
        self._logger = logger
        self._host = freeze(dict(host_context))

        self._screens_api = ScreensAPI(screens)
        self._actions_api = ActionsAPI(actions, runtime)
        self._plugins_api = PluginsAPI(plugins)
        self._events_api = EventsAPI(events, runtime)
        self._services_api = ServicesAPI(services)
        self._introspection = IntrospectionAPI(actions, plugins, screens)

    @property
    def screens(self) -> ScreensAPI:
        return self._screens_api

    @property
    def actions(self) -> ActionsAPI:
        return self._actions_api

    @property
    def plugins(self) -> PluginsAPI:
        return self._plugins_api

    @property
    def events(self) -> EventsAPI:
        return self._events_api

    @property
    def services(self) -> ServicesAPI:
        return self._services_api

    @property
    def introspect(self) -> IntrospectionAPI:
        return self._introspection

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @property
    def config(self) -> Mapping[str, Any]:
        """Current runtime configuration (read-only)."""
        return self._runtime.get_config()

    @property
    def host(self) -> Mapping[str, Any]:
        """Host context injected at construction (read-only)."""
        return self._host

    def get_runtime(self) -> "Runtime":
        return self._runtime


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "RUNTIME_VERSION",
    "freeze",
    "ActionMetadata",
    "PluginMetadata",
    "ScreenMetadata",
    "IntrospectionMetadata",
    "ScreensAPI",
    "ActionsAPI",
    "PluginsAPI",
    "EventsAPI",
    "ServicesAPI",
    "IntrospectionAPI",
    "RuntimeContext",
]
