# Skeleton Crew - Embeddable Plugin Runtime
"""
Skeleton Crew: minimal embeddable plugin runtime.

Core Components:
    - Plugin Registry: Dependency-ordered setup with rollback
    - Action Engine: Named actions with optional deadlines
    - Event Bus: Fault-isolated pub/sub
    - Runtime: Lifecycle state machine and coordination context

Example:
    from skeleton_crew import Runtime, PluginDefinition, ActionDefinition

    async def setup(ctx):
        ctx.actions.register_action(ActionDefinition("ping", lambda params, ctx: "pong"))

    runtime = Runtime()
    runtime.register_plugin(PluginDefinition(name="ping", version="1.0.0", setup=setup))
    await runtime.initialize()
    await runtime.get_context().actions.run_action("ping")
    await runtime.shutdown()

Author: Skeleton Crew Development Team
Version: 1.0.0
"""

from skeleton_crew.core.action_engine import ActionDefinition, ActionEngine
from skeleton_crew.core.config_manager import ConfigManager
from skeleton_crew.core.context import RuntimeContext
from skeleton_crew.core.event_bus import RUNTIME_INITIALIZED, RUNTIME_SHUTDOWN, EventBus
from skeleton_crew.core.exceptions import (
    ActionExecutionError,
    ActionNotFoundError,
    ActionTimeoutError,
    ConfigurationError,
    CrewError,
    DependencyCycleError,
    DuplicateRegistrationError,
    MissingDependencyError,
    NotInitializedError,
    PluginSetupError,
    RuntimeStateError,
    ValidationError,
)
from skeleton_crew.core.orchestrator import Runtime, RuntimeState
from skeleton_crew.core.plugin_base import (
    ConfigValidationResult,
    Plugin,
    PluginDefinition,
    PluginState,
)
from skeleton_crew.core.plugin_loader import DirectoryPluginLoader
from skeleton_crew.core.screen_registry import ScreenDefinition

__version__ = "1.0.0"
__author__ = "Skeleton Crew Development Team"

__all__ = [
    # Runtime
    "Runtime",
    "RuntimeState",
    "RuntimeContext",
    "ConfigManager",
    "DirectoryPluginLoader",
    # Definitions
    "PluginDefinition",
    "Plugin",
    "PluginState",
    "ConfigValidationResult",
    "ActionDefinition",
    "ScreenDefinition",
    # Subsystems
    "ActionEngine",
    "EventBus",
    "RUNTIME_INITIALIZED",
    "RUNTIME_SHUTDOWN",
    # Errors
    "CrewError",
    "ConfigurationError",
    "ValidationError",
    "DuplicateRegistrationError",
    "MissingDependencyError",
    "DependencyCycleError",
    "PluginSetupError",
    "ActionNotFoundError",
    "ActionExecutionError",
    "ActionTimeoutError",
    "RuntimeStateError",
    "NotInitializedError",
]
