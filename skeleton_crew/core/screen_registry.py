# CREW_FEAT: screen-registry-001
"""
Skeleton Crew - Screen Registry
===============================

Identifier-to-definition map for screens contributed by plugins.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .exceptions import DuplicateRegistrationError, ValidationError


@dataclass
class ScreenDefinition:
    """Screen definition rendered by a UI provider."""

    id: str
    title: str
    component: str


class ScreenRegistry:
    """Screen storage for one runtime instance."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("CREW_ScreenRegistry")
        self._screens: Dict[str, ScreenDefinition] = {}

    def register_screen(self, screen: ScreenDefinition) -> Callable[[], None]:
        """
        Register a screen.

        Returns:
            Idempotent unregister function
        """
        # Validate everything before touching state
        for field_name in ("id", "title", "component"):
            value = getattr(screen, field_name, None)
            if not isinstance(value, str) or not value:
                resource_id = getattr(screen, "id", None) if field_name != "id" else None
                raise ValidationError("Screen", field_name, resource_id)

        if screen.id in self._screens:
            raise DuplicateRegistrationError("Screen", screen.id)

        self._screens[screen.id] = screen
        self._logger.debug(f'Screen "{screen.id}" registered')

        def unregister() -> None:
            if self._screens.get(screen.id) is screen:
                del self._screens[screen.id]

        return unregister

    def get_screen(self, screen_id: str) -> Optional[ScreenDefinition]:
        """Get a screen by id."""
        return self._screens.get(screen_id)

    def get_all_screens(self) -> List[ScreenDefinition]:
        """Get all screens in registration order."""
        return list(self._screens.values())

    def clear(self) -> None:
        self._screens.clear()


__all__ = [
    "ScreenDefinition",
    "ScreenRegistry",
]
