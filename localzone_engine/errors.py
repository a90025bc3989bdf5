"""
Error taxonomy for the timezone engine.

All errors are returned to the immediate caller; none are retried or
swallowed internally.
"""


class LocalZoneError(Exception):
    """Base class for engine errors."""


class OutOfRangeError(LocalZoneError, ValueError):
    """Raised when latitude exceeds 90 degrees or longitude exceeds 180 degrees."""


class ParseError(LocalZoneError, ValueError):
    """Raised when a boundary dataset is malformed or cannot be decoded."""


class NoZoneFoundError(LocalZoneError, LookupError):
    """Raised when no zone corresponds to a point and no fallback applies."""
