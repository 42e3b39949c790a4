# Skeleton Crew Core Infrastructure
"""
Core infrastructure components for Skeleton Crew.

Modules:
    exceptions: Structured error hierarchy
    plugin_base: Plugin definitions and class-based plugins
    plugin_registry: Dependency-ordered plugin lifecycle
    action_engine: Named actions with deadlines
    event_bus: Per-runtime publish/subscribe
    screen_registry, service_registry, ui_bridge: Supporting registries
    context: Coordination facade handed to plugins
    plugin_loader: Plugin discovery from paths and packages
    config_manager: File-based configuration
    orchestrator: Runtime lifecycle state machine
"""

from .action_engine import ActionDefinition, ActionEngine
from .config_manager import ConfigManager, RuntimeSettings
from .context import RuntimeContext
from .event_bus import RUNTIME_INITIALIZED, RUNTIME_SHUTDOWN, EventBus
from .orchestrator import Runtime, RuntimeState
from .plugin_base import ConfigValidationResult, Plugin, PluginDefinition, PluginState
from .plugin_loader import DirectoryPluginLoader, PluginLoader
from .plugin_registry import PluginRegistry
from .screen_registry import ScreenDefinition, ScreenRegistry
from .service_registry import ServiceRegistry

__all__ = [
    "ActionDefinition",
    "ActionEngine",
    "ConfigManager",
    "RuntimeSettings",
    "RuntimeContext",
    "RUNTIME_INITIALIZED",
    "RUNTIME_SHUTDOWN",
    "EventBus",
    "Runtime",
    "RuntimeState",
    "ConfigValidationResult",
    "Plugin",
    "PluginDefinition",
    "PluginState",
    "DirectoryPluginLoader",
    "PluginLoader",
    "PluginRegistry",
    "ScreenDefinition",
    "ScreenRegistry",
    "ServiceRegistry",
]
