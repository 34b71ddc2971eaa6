"""
Exception types for the personalization service.

Storage problems are absorbed at the store boundary and only logged; the
remaining errors signal caller mistakes and are allowed to propagate.
"""


class PersonalizationError(Exception):
    """Base class for personalization errors."""


class StorageUnavailable(PersonalizationError):
    """Persisted storage could not be read or written."""


class MalformedRecord(PersonalizationError):
    """A persisted record is not valid JSON or has the wrong shape."""


class InvalidPreferences(PersonalizationError, ValueError):
    """A preferences patch failed validation."""
