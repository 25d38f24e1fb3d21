"""
Data transformers - DataFrame filters and formatters.

All transformers can be attached to readers, detectors, writers and
notifiers through their ``transformers`` argument.
"""

from . import filters
from . import formatters

__all__ = [
    'filters',
    'formatters'
]
