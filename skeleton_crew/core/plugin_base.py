# CREW_FEAT: plugin-base-001
"""
Skeleton Crew - Plugin Base Classes
===================================

Plugin definitions and the class-based plugin authoring interface.

A plugin is either a ``PluginDefinition`` built directly from callables or a
``Plugin`` subclass. Both carry:
- A unique name and informational version
- Declared dependencies (plugin names that must finish setup first)
- A setup procedure and an optional dispose procedure
- An optional config validation hook run before setup

Author: Skeleton Crew Development Team
Version: 1.0.0
"""

import inspect
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    List,
    Mapping,
    Optional,
    Tuple,
    Union,
)

if TYPE_CHECKING:
    from .context import RuntimeContext


class PluginState(Enum):
    """Plugin lifecycle state, tracked by the registry."""

    REGISTERED = auto()
    INITIALIZING = auto()
    READY = auto()
    FAILED = auto()
    ROLLED_BACK = auto()
    DISPOSED = auto()


@dataclass
class ConfigValidationResult:
    """Detailed result of a plugin config validation hook."""

    valid: bool
    errors: List[str] = field(default_factory=list)


ValidationOutcome = Union[bool, ConfigValidationResult]
SetupFn = Callable[["RuntimeContext"], Optional[Awaitable[None]]]
ValidateConfigFn = Callable[[Mapping[str, Any]], Union[ValidationOutcome, Awaitable[ValidationOutcome]]]


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


@dataclass(frozen=True)
class PluginDefinition:
    """
    Immutable plugin definition.

    Example:
        async def setup(ctx):
            ctx.actions.register_action(ActionDefinition("greet", greet))

        plugin = PluginDefinition(
            name="greeter",
            version="1.0.0",
            setup=setup,
            dependencies=["logging"],
        )
    """

    name: str
    version: str
    setup: SetupFn
    dispose: Optional[SetupFn] = None
    dependencies: Tuple[str, ...] = ()
    config_keys: Tuple[str, ...] = ()
    validate_config: Optional[ValidateConfigFn] = None

    def __post_init__(self):
        # Accept lists from callers but store tuples so the definition stays immutable
        if isinstance(self.dependencies, (list, set)):
            object.__setattr__(self, "dependencies", tuple(self.dependencies))
        if isinstance(self.config_keys, (list, set)):
            object.__setattr__(self, "config_keys", tuple(self.config_keys))

    def to_dict(self) -> dict:
        """Convert metadata to dictionary (no callables)."""
        return {
            "name": self.name,
            "version": self.version,
            "dependencies": list(self.dependencies),
            "config_keys": list(self.config_keys),
            "has_dispose": self.dispose is not None,
            "has_config_validation": self.validate_config is not None,
        }


class Plugin(ABC):
    """
    Base class for class-based plugins.

    Subclasses declare identity as class attributes and implement ``setup``.
    The registry converts instances with ``to_definition()``.

    Lifecycle:
        1. validate_config() - Optional check of the runtime config
        2. setup() - Register actions, screens, events, services
        3. dispose() - Release resources (reverse dependency order)

    Example:
        class Clock(Plugin):
            name = "clock"
            version = "1.0.0"
            dependencies = ["scheduler"]

            async def setup(self, context):
                context.events.on("tick", self._on_tick)
    """

    name: str = ""
    version: str = "1.0.0"
    dependencies: Tuple[str, ...] = ()
    config_keys: Tuple[str, ...] = ()

    def __init__(self):
        self._logger = logging.getLogger(f"CREW_{self.name or self.__class__.__name__}")

    @abstractmethod
    async def setup(self, context: "RuntimeContext") -> None:
        """Contribute capabilities to the runtime. Must be implemented by subclasses."""
        pass

    async def dispose(self, context: "RuntimeContext") -> None:
        """Release resources acquired in setup. Override if needed."""
        pass

    def validate_config(self, config: Mapping[str, Any]) -> ValidationOutcome:
        """Validate the runtime config before setup. Override if needed."""
        return True

    def _overrides(self, method_name: str) -> bool:
        return getattr(type(self), method_name) is not getattr(Plugin, method_name)

    def to_definition(self) -> PluginDefinition:
        """Build the immutable definition the registry stores."""
        return PluginDefinition(
            name=self.name,
            version=self.version,
            setup=self.setup,
            dispose=self.dispose if self._overrides("dispose") else None,
            dependencies=tuple(self.dependencies),
            config_keys=tuple(self.config_keys),
            validate_config=self.validate_config if self._overrides("validate_config") else None,
        )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name} v{self.version}>"


def as_definition(plugin: Union[PluginDefinition, Plugin]) -> PluginDefinition:
    """Normalize a plugin instance or definition to a ``PluginDefinition``."""
    if isinstance(plugin, Plugin):
        return plugin.to_definition()
    return plugin


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "PluginState",
    "ConfigValidationResult",
    "PluginDefinition",
    "Plugin",
    "as_definition",
    "maybe_await",
]
