"""
Example: Tiered Slack alerts for spend deviations

This example demonstrates how to:
1. Detect deviations from CSV exports of spend and forecasts
2. Format spend and percentage columns for display
3. Post one Slack message per run, escalating by the highest tier present

Requires SLACK_BOT_TOKEN (xoxb-...) in the environment or a .env file.
"""

import spendwatch
from spendwatch.application.workflows import DeviationDetectionWorkflow, NotificationWorkflow
from spendwatch.infrastructure.anomaly_detectors import ForecastActualDeviationDetector
from spendwatch.infrastructure.data.readers.files import CSVDataReader
from spendwatch.infrastructure.notifiers import SlackNotifier
from spendwatch.infrastructure.transformers.filters import ValueFilter
from spendwatch.infrastructure.transformers.formatters import ColumnFormatter


def main():
    spendwatch.configure()

    workflow = DeviationDetectionWorkflow(
        performance_reader=CSVDataReader("data/spend.csv", date_column="timestamp"),
        forecast_reader=CSVDataReader("data/forecast.csv", date_column="timestamp"),
        detector=ForecastActualDeviationDetector.from_env(),
    )
    results = workflow.run()

    if not results["is_anomaly"].any():
        print("No deviations above L1.")
        return

    slack_notifier = SlackNotifier(
        recipient="C01234ABCD",
        template_path="examples/templates/slack/spend_alert.json",
        escalation={
            "L1": {"contacts": ["<@U0ANALYST>"], "sla": "5 min"},
            "L2": {"contacts": ["<@U0LEAD>"], "sla": "15 min"},
            "L3": {"contacts": ["<@U0LEAD>", "<@U0DIRECTOR>"], "sla": "30 min"},
        },
        template_variables={"dashboard_url": "https://ads.example.com/anomalies"},
        transformers={
            "before": [
                ValueFilter("is_anomaly", values=[True]),
                ColumnFormatter.currency(["actual_spend", "forecast_spend"]),
                ColumnFormatter.percentage("percentage_difference"),
            ]
        },
    )

    NotificationWorkflow(
        anomalies_data=results,
        notifiers=[slack_notifier],
        statistics=workflow.statistics,
    ).run()

    print("Slack alert sent.")


if __name__ == "__main__":
    main()
