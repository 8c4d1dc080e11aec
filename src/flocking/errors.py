from __future__ import annotations


class FlockingError(Exception):
    """Base class for errors raised by the flocking package."""


class ConfigurationError(FlockingError):
    """Raised when behavior or spawn parameters are invalid."""

    def __init__(self, param_name: str | None = None, reason: str | None = None):
        if param_name and reason:
            message = f"Invalid configuration for '{param_name}': {reason}"
            self.param_name = param_name
        else:
            message = param_name if param_name else "Invalid configuration"
            self.param_name = None
        super().__init__(message)
