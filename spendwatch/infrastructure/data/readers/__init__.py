"""
Data readers for various sources.
"""

from .base import DataReader
from .dataframe_reader import DataFrameDataReader

__all__ = [
    'DataReader',
    'DataFrameDataReader'
]
