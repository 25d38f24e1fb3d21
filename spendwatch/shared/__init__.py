"""
Shared helpers used across readers, writers, detectors and notifiers.
"""

from .mixins import TransformableMixin
from .exceptions import DataFetchError, DataWriteError

__all__ = ["TransformableMixin", "DataFetchError", "DataWriteError"]
