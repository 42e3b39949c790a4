# CREW_FEAT: exceptions-001
"""
Skeleton Crew - Exception Hierarchy
===================================

Structured exception types raised by the runtime core.

Exception Categories:
    - ConfigurationError: Invalid definitions, duplicates, dependency problems
    - PluginError: Plugin setup failures
    - ActionError: Missing actions, handler failures, timeouts
    - RuntimeStateError: Operations attempted in the wrong lifecycle state
    - Lookup errors: Unknown screens and services, missing UI provider

Author: Skeleton Crew Development Team
Version: 1.0.0
"""

from typing import Any, Dict, List, Optional, Sequence


class CrewError(Exception):
    """
    Base exception for all runtime errors.

    Attributes:
        message: Human-readable error description
        code: Optional error code for programmatic handling
        details: Optional dict with additional context
        recoverable: Whether the caller can retry the operation
    """

    recoverable: bool = True

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigurationError(CrewError):
    """Base exception for configuration errors."""

    recoverable: bool = False


class ValidationError(ConfigurationError):
    """A definition is missing a required field or has an invalid one."""

    def __init__(
        self,
        resource_type: str,
        field: str,
        resource_id: Optional[str] = None,
        **kwargs,
    ):
        label = f' "{resource_id}"' if resource_id else ""
        super().__init__(
            f'Validation failed for {resource_type}{label}: missing or invalid field "{field}"',
            **kwargs,
        )
        self.resource_type = resource_type
        self.field = field
        self.resource_id = resource_id


class DuplicateRegistrationError(ConfigurationError):
    """A resource with the same identifier is already registered."""

    def __init__(self, resource_type: str, identifier: str, **kwargs):
        super().__init__(
            f'{resource_type} with identifier "{identifier}" is already registered',
            **kwargs,
        )
        self.resource_type = resource_type
        self.identifier = identifier


class MissingDependencyError(ConfigurationError):
    """A plugin declares a dependency that is not registered."""

    def __init__(self, plugin_name: str, dependency: str, **kwargs):
        super().__init__(
            f'Plugin "{plugin_name}" requires missing dependency "{dependency}"',
            **kwargs,
        )
        self.plugin_name = plugin_name
        self.dependency = dependency


class DependencyCycleError(ConfigurationError):
    """The plugin dependency graph contains a cycle."""

    def __init__(self, cycle: Sequence[str], **kwargs):
        super().__init__(
            f"Plugin dependency cycle detected: {' -> '.join(cycle)}",
            **kwargs,
        )
        self.cycle = list(cycle)


class PluginConfigValidationError(ConfigurationError):
    """A plugin rejected the runtime configuration before setup."""

    def __init__(self, plugin_name: str, errors: Optional[List[str]] = None, **kwargs):
        self.errors = list(errors or [])
        suffix = f": {'; '.join(self.errors)}" if self.errors else ""
        super().__init__(
            f'Plugin "{plugin_name}" config validation failed{suffix}',
            **kwargs,
        )
        self.plugin_name = plugin_name


# =============================================================================
# PLUGIN ERRORS
# =============================================================================


class PluginError(CrewError):
    """Base exception for plugin lifecycle errors."""

    pass


class PluginSetupError(PluginError):
    """A plugin setup procedure raised."""

    def __init__(self, plugin_name: str, cause: BaseException, **kwargs):
        super().__init__(f'Plugin "{plugin_name}" setup failed: {cause}', **kwargs)
        self.plugin_name = plugin_name
        self.cause = cause


# =============================================================================
# ACTION ERRORS
# =============================================================================


class ActionError(CrewError):
    """Base exception for action errors."""

    def __init__(self, message: str, action_id: str, **kwargs):
        super().__init__(message, **kwargs)
        self.action_id = action_id


class ActionNotFoundError(ActionError):
    """No handler is registered under the requested id."""

    def __init__(self, action_id: str, suggestions: Optional[List[str]] = None, **kwargs):
        self.suggestions = list(suggestions or [])
        message = f'Action with id "{action_id}" not found'
        if self.suggestions:
            message += f". Did you mean: {', '.join(self.suggestions)}?"
        super().__init__(message, action_id, **kwargs)


class ActionExecutionError(ActionError):
    """An action handler raised."""

    def __init__(self, action_id: str, cause: BaseException, **kwargs):
        super().__init__(f'Action "{action_id}" execution failed: {cause}', action_id, **kwargs)
        self.cause = cause


class ActionTimeoutError(ActionError):
    """An action handler did not finish before its deadline."""

    def __init__(self, action_id: str, timeout_ms: float, **kwargs):
        super().__init__(
            f'Action "{action_id}" timed out after {timeout_ms:g}ms',
            action_id,
            **kwargs,
        )
        self.timeout_ms = timeout_ms


# =============================================================================
# STATE & LOOKUP ERRORS
# =============================================================================


class RuntimeStateError(CrewError):
    """Operation is not valid in the current runtime state."""

    pass


class NotInitializedError(RuntimeStateError):
    """Runtime is not initialized."""

    pass


class ScreenNotFoundError(CrewError):
    """No screen is registered under the requested id."""

    def __init__(self, screen_id: str, **kwargs):
        super().__init__(f'Screen with id "{screen_id}" not found', **kwargs)
        self.screen_id = screen_id


class ServiceNotFoundError(CrewError):
    """No service is registered under the requested name."""

    def __init__(self, name: str, **kwargs):
        super().__init__(
            f'Service "{name}" not found. Ensure the providing plugin is initialized.',
            **kwargs,
        )
        self.name = name


class UIProviderError(CrewError):
    """UI provider is missing or failed."""

    pass


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def is_recoverable(error: Exception) -> bool:
    """
    Determine if an error is potentially recoverable.

    Configuration errors are never recoverable; the definitions must change.
    """
    if hasattr(error, "recoverable"):
        return error.recoverable

    return not isinstance(error, (SystemExit, KeyboardInterrupt, MemoryError))


def is_configuration_error(error: Exception) -> bool:
    """Check whether an error was caused by plugin or action definitions."""
    if isinstance(error, ConfigurationError):
        return True
    if isinstance(error, PluginSetupError):
        return isinstance(error.cause, ConfigurationError)
    return False


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    # Base
    "CrewError",
    # Configuration
    "ConfigurationError",
    "ValidationError",
    "DuplicateRegistrationError",
    "MissingDependencyError",
    "DependencyCycleError",
    "PluginConfigValidationError",
    # Plugin
    "PluginError",
    "PluginSetupError",
    # Action
    "ActionError",
    "ActionNotFoundError",
    "ActionExecutionError",
    "ActionTimeoutError",
    # State & lookup
    "RuntimeStateError",
    "NotInitializedError",
    "ScreenNotFoundError",
    "ServiceNotFoundError",
    "UIProviderError",
    # Helpers
    "is_recoverable",
    "is_configuration_error",
]
