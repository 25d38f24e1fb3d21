"""
Notification components.
"""

from .base import Notifier
from .slack import SlackNotifier

__all__ = ["Notifier", "SlackNotifier"]
