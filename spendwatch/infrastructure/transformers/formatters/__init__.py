"""
DataFrame formatters.

Formatters reshape column values for the next consumer and can be attached
to any component stage.
"""

from .base import DataFrameFormatter
from .anomaly_records import AnomalyRecordFormatter
from .column_formatter import ColumnFormatter
from .column_selector import ColumnSelector

__all__ = ["DataFrameFormatter", "AnomalyRecordFormatter", "ColumnFormatter", "ColumnSelector"]
