"""
Example: Spend deviation detection from SQLite

This example demonstrates how to:
1. Read hourly actual spend for one campaign from SQLite
2. Read the matching hourly forecasts
3. Classify each hour into tiers L1/L2/L3 (15/30/50% by default)
4. Append anomaly records, labelled with campaign names, to recent_anomalies
"""

from datetime import datetime

import spendwatch
from spendwatch.application.workflows import DeviationDetectionWorkflow
from spendwatch.infrastructure.anomaly_detectors import ForecastActualDeviationDetector
from spendwatch.infrastructure.data.campaigns import CampaignDirectory
from spendwatch.infrastructure.data.readers.databases import SQLiteDataReader
from spendwatch.infrastructure.data.writers.databases import SQLiteDataWriter
from spendwatch.infrastructure.transformers.formatters import AnomalyRecordFormatter


def main():
    # Thresholds and missing-forecast policy come from .env when set
    spendwatch.configure(log_level="INFO")

    start = datetime(2024, 3, 1, 0, 0)
    end = datetime(2024, 3, 1, 23, 0)

    # Step 1: Actual spend, renamed to the detector's default columns
    performance_reader = SQLiteDataReader(
        database_path="data/ads.db",
        query="""
            SELECT campaign_id AS entity_id, timestamp, spend AS actual_spend
            FROM ad_spend_metrics
            WHERE campaign_id = :campaign_id
              AND timestamp BETWEEN :start AND :end
            ORDER BY timestamp
        """,
        params={
            "campaign_id": 7,
            "start": start.strftime("%Y-%m-%d %H:%M:%S"),
            "end": end.strftime("%Y-%m-%d %H:%M:%S"),
        },
        date_column="timestamp",
    )

    # Step 2: Forecasts through the query builder
    forecast_reader = SQLiteDataReader.for_observations(
        "data/ads.db",
        "hourly_forecasts",
        columns=["entity_id", "timestamp", "forecast_spend"],
        entity_id=7,
        start=start,
        end=end,
    )

    # Step 3: Detector configured from SPENDWATCH_* environment variables
    detector = ForecastActualDeviationDetector.from_env()

    # Step 4: Anomaly records labelled with campaign names
    campaigns = CampaignDirectory.from_reader(
        SQLiteDataReader("data/ads.db", "SELECT id, name FROM campaigns")
    )
    data_writer = SQLiteDataWriter(
        database_path="data/ads.db",
        table_name="recent_anomalies",
        transformers={"before": [AnomalyRecordFormatter(campaigns)]},
    )

    workflow = DeviationDetectionWorkflow(
        performance_reader=performance_reader,
        forecast_reader=forecast_reader,
        detector=detector,
        data_writer=data_writer,
    )

    results = workflow.run()

    print(f"Hours analyzed: {len(results)}")
    print("\nTier Summary:")
    print(results["tier"].value_counts())

    stats = workflow.statistics
    print(f"\nAnomalies: {stats.total_anomalies} "
          f"(high={stats.high_severity}, medium={stats.medium_severity}, low={stats.low_severity})")
    print(f"Total deviation: {stats.total_deviation_magnitude:,.2f}")


if __name__ == "__main__":
    main()
