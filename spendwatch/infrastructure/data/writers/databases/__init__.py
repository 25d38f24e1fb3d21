"""
Database data writers.
"""

from .bigquery import BigQueryDataWriter
from .sqlite import SQLiteDataWriter

__all__ = ["BigQueryDataWriter", "SQLiteDataWriter"]
