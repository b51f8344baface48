"""
Exception classes for the favorite picker.

Centralized location for all custom exceptions to avoid circular imports.
"""


class ValidationError(Exception):
    """Base exception for validation-related errors."""
    pass


class ConfigurationError(Exception):
    """Base exception for configuration-related errors."""
    pass
