# CREW_FEAT: config-plugin-001
"""
Skeleton Crew - Config Plugin
=============================

Exposes the runtime configuration through actions.

Actions:
- config:get       Whole config, or one key when params is a key name
- config:set       Merge a mapping into the config, returns the new snapshot
- config:validate  Run the host's ``config_validator`` if one was injected

Author: Skeleton Crew Development Team
Version: 1.0.0
"""

from collections.abc import Mapping
from typing import Any, Dict

from skeleton_crew.core.action_engine import ActionDefinition
from skeleton_crew.core.exceptions import ValidationError
from skeleton_crew.core.plugin_base import Plugin, maybe_await

# Host context key holding an optional validator callable
VALIDATOR_KEY = "config_validator"


class ConfigPlugin(Plugin):
    """
    Config Plugin.

    Example:
        runtime = Runtime(config={"theme": "dark"})
        runtime.register_plugin(config_plugin)
        await runtime.initialize()

        ctx = runtime.get_context()
        await ctx.actions.run_action("config:get", "theme")      # "dark"
        await ctx.actions.run_action("config:set", {"lang": "en"})
    """

    name = "config"
    version = "1.0.0"

    async def setup(self, context) -> None:
        context.actions.register_action(ActionDefinition("config:get", self._get))
        context.actions.register_action(ActionDefinition("config:set", self._set))
        context.actions.register_action(ActionDefinition("config:validate", self._validate))
        self._logger.debug("Config actions registered")

    async def _get(self, key: Any, context) -> Any:
        config = context.config
        if key:
            return config.get(key)
        return self._thaw(config)

    async def _set(self, payload: Any, context) -> Dict[str, Any]:
        if not isinstance(payload, Mapping):
            raise ValidationError("Action", "params", "config:set")
        snapshot = context.get_runtime().update_config(payload)
        self._logger.info(f"Config updated: {', '.join(sorted(payload))}")
        return self._thaw(snapshot)

    async def _validate(self, params: Any, context) -> bool:
        validator = context.host.get(VALIDATOR_KEY)
        if not callable(validator):
            return True
        return bool(await maybe_await(validator(context.config)))

    @classmethod
    def _thaw(cls, value: Any) -> Any:
        """Plain-dict copy of a frozen snapshot."""
        if isinstance(value, Mapping):
            return {key: cls._thaw(item) for key, item in value.items()}
        if isinstance(value, tuple):
            return [cls._thaw(item) for item in value]
        return value


config_plugin = ConfigPlugin()


__all__ = [
    "ConfigPlugin",
    "config_plugin",
]
