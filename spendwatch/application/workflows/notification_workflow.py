"""
Notification workflow orchestrator.
"""

import logging
import pandas as pd
from typing import List, Optional
from ...domain.statistics import DeviationStatistics
from ...infrastructure.notifiers.base import Notifier

logger = logging.getLogger(__name__)


class NotificationWorkflow:
    """
    Main orchestrator class for the notification workflow.

    This workflow orchestrates the notification process:
    1. Receive classified deviations (as DataFrame)
    2. Prepare notification payload
    3. Send notifications via all configured notifiers

    Args:
        anomalies_data: DataFrame with detection results
        notifiers: List of notifier instances
        statistics: Optional summary to include in the payload

    Example:
        from spendwatch.application.workflows import NotificationWorkflow
        from spendwatch.infrastructure.notifiers import SlackNotifier
        from spendwatch.infrastructure.transformers.filters import ValueFilter

        results_df = detection_workflow.run()

        slack_notifier = SlackNotifier(
            recipient="C01234ABCD",
            template_path="templates/slack/spend_alert.json",
            transformers={
                'before': [
                    ValueFilter('tier', values=['L2', 'L3'], mode='include')
                ]
            }
        )

        NotificationWorkflow(
            anomalies_data=results_df,
            notifiers=[slack_notifier],
            statistics=detection_workflow.statistics,
        ).run()
    """

    def __init__(
        self,
        anomalies_data: pd.DataFrame,
        notifiers: List[Notifier],
        statistics: Optional[DeviationStatistics] = None,
    ):
        if not isinstance(anomalies_data, pd.DataFrame):
            raise TypeError(
                f"anomalies_data must be a DataFrame, got {type(anomalies_data).__name__}"
            )

        if anomalies_data.empty:
            raise ValueError("anomalies_data cannot be empty")

        if not isinstance(notifiers, list):
            raise TypeError(
                f"notifiers must be a list, got {type(notifiers).__name__}"
            )

        if not notifiers:
            raise ValueError("notifiers list cannot be empty")

        for i, notifier in enumerate(notifiers):
            if not isinstance(notifier, Notifier):
                raise TypeError(
                    f"notifiers[{i}] must be a Notifier instance, "
                    f"got {type(notifier).__name__}"
                )

        if statistics is not None and not isinstance(statistics, DeviationStatistics):
            raise TypeError(
                f"statistics must be a DeviationStatistics or None, "
                f"got {type(statistics).__name__}"
            )

        self.anomalies_data = anomalies_data
        self.notifiers = notifiers
        self.statistics = statistics

    def run(self) -> None:
        """
        Execute the complete notification workflow.

        Each notifier may apply its own transformers (e.g., filters)
        before sending, so different notifiers may receive different
        subsets of the data.

        Raises:
            RuntimeError: If notification fails
        """
        payload = {"anomalies": self.anomalies_data}
        if self.statistics is not None:
            payload["statistics"] = self.statistics.to_dict()

        for notifier in self.notifiers:
            notifier_name = type(notifier).__name__
            try:
                notifier.notify(payload)
            except Exception as e:
                raise RuntimeError(
                    f"Failed to send notification via {notifier_name}: {str(e)}"
                ) from e
            logger.debug("Notification sent via %s", notifier_name)
