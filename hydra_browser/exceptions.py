"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class HydraError(Exception):
    """Base exception for all application-specific errors."""


class InvalidPartitionError(HydraError, ValueError):
    """Raised when a partition identifier is not a single letter A-Z."""


class HostError(HydraError):
    """Raised by a host implementation when it cannot fulfil a request."""


class UnknownCommandError(HydraError):
    """Raised when a presentation command names no registered handler."""
