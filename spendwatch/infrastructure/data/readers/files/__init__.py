"""
File-based data readers.
"""

from .csv import CSVDataReader

__all__ = ["CSVDataReader"]
