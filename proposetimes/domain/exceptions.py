"""
Domain-specific exception hierarchy for the proposetimes application.
"""


class ProposeTimesError(Exception):
    """Base class for all application-level errors."""


class ProviderConfigError(ProposeTimesError):
    """Raised when provider settings are missing or invalid."""


class ProviderAPIError(ProposeTimesError):
    """Raised when availability data cannot be fetched or parsed."""
