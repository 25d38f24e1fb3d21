"""
Workflow orchestrators.
"""

from .anomaly_detection_workflow import DeviationDetectionWorkflow
from .notification_workflow import NotificationWorkflow

__all__ = ["DeviationDetectionWorkflow", "NotificationWorkflow"]
