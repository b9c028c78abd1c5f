"""Exception types raised by the janitor."""

from __future__ import annotations

from typing import Optional


class JanitorError(Exception):
    """Base class for janitor errors."""


class ConfigurationError(JanitorError):
    """Raised when the configuration file or a configuration value is invalid."""


class NotificationError(JanitorError):
    """Raised when an email could not be delivered.

    Attributes:
        address: Destination address of the failed email
    """

    def __init__(self, message: str, address: Optional[str] = None) -> None:
        super().__init__(message)
        self.address = address


class CleanupError(JanitorError):
    """Raised when a single resource could not be cleaned up.

    Attributes:
        resource_id: Identifier of the resource
        resource_type: Type name of the resource
    """

    def __init__(self, message: str, resource_id: str, resource_type: str) -> None:
        super().__init__(message)
        self.resource_id = resource_id
        self.resource_type = resource_type
