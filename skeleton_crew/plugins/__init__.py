# Skeleton Crew Plugins
"""
Plugins bundled with Skeleton Crew.

Available Plugins:
    - config: Read, merge and validate the runtime configuration
"""

from .config_plugin import ConfigPlugin, config_plugin

__all__ = [
    "ConfigPlugin",
    "config_plugin",
]
