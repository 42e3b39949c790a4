# CREW_FEAT: ui-bridge-001
"""
Skeleton Crew - UI Bridge
=========================

Optional connection between the runtime and a UI provider.

A provider exposes ``mount(target, context)`` and ``render_screen(screen)``,
and optionally ``unmount()``. Each may be sync or async.
"""

import logging
from typing import Any, Optional

from .exceptions import DuplicateRegistrationError, UIProviderError, ValidationError
from .plugin_base import maybe_await
from .screen_registry import ScreenDefinition


class UIBridge:
    """Holds at most one UI provider per runtime instance."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("CREW_UIBridge")
        self._provider: Any = None

    def set_provider(self, provider: Any) -> None:
        """
        Register the UI provider.

        Raises:
            DuplicateRegistrationError: A provider is already registered
            ValidationError: Provider lacks ``mount`` or ``render_screen``
        """
        if self._provider is not None:
            raise DuplicateRegistrationError("UIProvider", "default")

        for method in ("mount", "render_screen"):
            if not callable(getattr(provider, method, None)):
                raise ValidationError("UIProvider", method)

        self._provider = provider
        self._logger.debug(f"UI provider registered: {type(provider).__name__}")

    def get_provider(self) -> Any:
        return self._provider

    def _require_provider(self) -> Any:
        if self._provider is None:
            raise UIProviderError("No UI provider registered")
        return self._provider

    async def mount(self, target: Any, context: Any) -> None:
        """Mount the provider onto a host-specific target."""
        await maybe_await(self._require_provider().mount(target, context))

    def render_screen(self, screen: ScreenDefinition) -> Any:
        """Render a screen with the registered provider."""
        return self._require_provider().render_screen(screen)

    async def shutdown(self) -> None:
        """Unmount the provider if it supports it, then drop it."""
        unmount = getattr(self._provider, "unmount", None)
        if callable(unmount):
            try:
                await maybe_await(unmount())
                self._logger.debug("UI provider unmounted")
            except Exception as e:
                self._logger.error(f"UI provider unmount failed: {e!r}")
        self._provider = None


__all__ = ["UIBridge"]
