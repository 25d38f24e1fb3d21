"""
DataFrame row filters.
"""

from .base import DataFrameFilter
from .value_filter import ValueFilter

__all__ = [
    'DataFrameFilter',
    'ValueFilter'
]
