"""
Anomaly record formatter - turns detector results into display records.
"""

import pandas as pd
from typing import Hashable, Mapping, Optional, Union
from .base import DataFrameFormatter
from spendwatch.infrastructure.data.campaigns import CampaignDirectory


class AnomalyRecordFormatter(DataFrameFormatter):
    """
    Keep anomalous rows and reshape them into anomaly records.

    Anomaly records are the append-only history shown on the dashboard:
    they copy the values they need and keep no reference back to the source
    observations.

    Output columns: campaign, time, value, expected, severity, created_at.

    Args:
        campaigns: CampaignDirectory or plain mapping of entity id to name.
            Without it, every record is labelled 'Campaign <id>'.
        time_format: strftime pattern for the 'time' column
            (default: '%Y-%m-%d %H:%M')
        created_at: Fixed creation timestamp; defaults to the current UTC
            time at formatting

    Example:
        writer = SQLiteDataWriter(
            'ads.db', 'recent_anomalies',
            transformers={'before': [AnomalyRecordFormatter(directory)]},
        )
    """

    RECORD_COLUMNS = ["campaign", "time", "value", "expected", "severity", "created_at"]

    def __init__(
        self,
        campaigns: Optional[Union[CampaignDirectory, Mapping[Hashable, str]]] = None,
        time_format: str = "%Y-%m-%d %H:%M",
        created_at: Optional[pd.Timestamp] = None,
    ):
        if campaigns is None:
            campaigns = CampaignDirectory()
        elif isinstance(campaigns, Mapping):
            campaigns = CampaignDirectory(campaigns)
        elif not isinstance(campaigns, CampaignDirectory):
            raise TypeError(
                f"campaigns must be a CampaignDirectory or mapping, "
                f"got {type(campaigns).__name__}"
            )

        if not time_format:
            raise ValueError("time_format cannot be empty")

        self.campaigns: CampaignDirectory = campaigns
        self.time_format: str = time_format
        self.created_at: Optional[pd.Timestamp] = created_at

    def format(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Build anomaly records from detector results.

        Args:
            df: Detector result DataFrame

        Returns:
            pd.DataFrame: One record per anomaly, possibly empty

        Raises:
            ValueError: If a required detector column is missing
        """
        if df.empty:
            return pd.DataFrame(columns=self.RECORD_COLUMNS)

        required = ["entity_id", "timestamp", "actual_spend", "forecast_spend", "severity", "is_anomaly"]
        missing = [col for col in required if col not in df.columns]
        if missing:
            raise ValueError(
                f"Required columns not found in DataFrame: {missing}. "
                f"Available columns: {list(df.columns)}"
            )

        anomalies = df[df["is_anomaly"].astype(bool)]
        if anomalies.empty:
            return pd.DataFrame(columns=self.RECORD_COLUMNS)

        created_at = self.created_at if self.created_at is not None else pd.Timestamp.now(tz="UTC")

        records = pd.DataFrame(
            {
                "campaign": [self.campaigns.label_for(e) for e in anomalies["entity_id"]],
                "time": pd.to_datetime(anomalies["timestamp"]).dt.strftime(self.time_format).values,
                "value": anomalies["actual_spend"].astype(float).values,
                "expected": anomalies["forecast_spend"].astype(float).values,
                "severity": anomalies["severity"].values,
            }
        )
        records["created_at"] = pd.Timestamp(created_at).isoformat()

        return records[self.RECORD_COLUMNS]
