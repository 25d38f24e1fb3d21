"""
Typed I/O errors raised by readers and writers.
"""


class DataFetchError(RuntimeError):
    """Raised when observations or lookups cannot be loaded from a data store."""


class DataWriteError(RuntimeError):
    """Raised when results cannot be persisted to a data store."""
