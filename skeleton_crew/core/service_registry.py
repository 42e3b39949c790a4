# CREW_FEAT: service-registry-001
"""
Skeleton Crew - Service Registry
================================

Service locator so plugins can share typed objects with plugins that
depend on them.
"""

import logging
from typing import Any, Dict, List, Optional

from .exceptions import DuplicateRegistrationError, ServiceNotFoundError, ValidationError


class ServiceRegistry:
    """Named services for one runtime instance."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("CREW_ServiceRegistry")
        self._services: Dict[str, Any] = {}

    def register(self, name: str, service: Any) -> None:
        """
        Register a service.

        Raises:
            DuplicateRegistrationError: Name already taken
        """
        if not isinstance(name, str) or not name:
            raise ValidationError("Service", "name")
        if name in self._services:
            raise DuplicateRegistrationError("Service", name)

        self._services[name] = service
        self._logger.debug(f'Service "{name}" registered')

    def get(self, name: str) -> Any:
        """Get a service, raising ``ServiceNotFoundError`` if absent."""
        if name not in self._services:
            raise ServiceNotFoundError(name)
        return self._services[name]

    def has(self, name: str) -> bool:
        return name in self._services

    def list(self) -> List[str]:
        """List registered service names."""
        return list(self._services)

    def clear(self) -> None:
        self._services.clear()


__all__ = ["ServiceRegistry"]
