"""
Exception classes for cloneeval.
"""


class CloneEvalError(Exception):
    """Base exception for all cloneeval errors."""
    pass


class StoreError(CloneEvalError):
    """Exception raised when the clone store cannot be read."""
    pass


class ValidationError(CloneEvalError):
    """Exception raised for invalid records or unknown identifiers."""
    pass


class ConfigurationError(CloneEvalError):
    """Exception raised for malformed matcher or evaluation configuration."""
    pass


class RangeError(CloneEvalError, ValueError):
    """Exception raised for an inverted or out-of-bounds similarity band."""
    pass
