"""
Database data readers.
"""

from .bigquery import BigQueryDataReader
from .sqlite import SQLiteDataReader
from .queries import build_observation_query

__all__ = ["BigQueryDataReader", "SQLiteDataReader", "build_observation_query"]
