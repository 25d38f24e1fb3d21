"""
Data writers for various destinations.
"""

from .base import DataWriter

__all__ = ["DataWriter"]
