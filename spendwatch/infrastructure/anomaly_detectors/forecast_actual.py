"""
Forecast vs actual spend deviation detection over DataFrames.
"""

import warnings
import pandas as pd
from typing import Optional, List, Dict, Callable
from .base import AnomalyDetector
from spendwatch.domain.deviation import (
    NEGATIVE_SPEND_POLICIES,
    ThresholdSet,
)
from spendwatch.domain.matching import (
    MISSING_FORECAST_ZERO,
    classify_pair,
    index_forecasts,
    missing_forecast_policy_from_env,
    validate_missing_forecast_policy,
)
from spendwatch.domain.observations import ForecastObservation, PerformanceObservation
from spendwatch.shared import TransformableMixin


class ForecastActualDeviationDetector(AnomalyDetector, TransformableMixin):
    """
    Classifies every performance row against the forecast with the same
    entity and exact timestamp.

    Both inputs are long-format DataFrames with one row per (entity, time
    bucket). Timestamps on both sides are parsed as UTC before matching, so
    equal instants written in different notations still match; there is no
    tolerance window.

    Args:
        thresholds: Tier cutoffs (default: 15/30/50 percent)
        missing_forecast: 'zero' treats an absent forecast as 0 spend (never
            anomalous), 'unknown' marks the row with has_forecast=False
        negative_spend: 'accept', 'reject' or 'clamp' (see classify())
        invalid_rows: 'raise' (default) propagates errors for malformed
            performance rows, 'skip' drops them with a warning
        entity_column: Entity id column in both inputs (default: 'entity_id')
        timestamp_column: Timestamp column in both inputs (default: 'timestamp')
        actual_column: Actual spend column in performance_df (default: 'actual_spend')
        forecast_column: Forecast spend column in forecast_df (default: 'forecast_spend')
        transformers: Optional dict of transformer lists to apply after detection
    """

    RESULT_COLUMNS = [
        "entity_id",
        "timestamp",
        "actual_spend",
        "forecast_spend",
        "difference",
        "percentage_difference",
        "tier",
        "severity",
        "is_anomaly",
        "has_forecast",
    ]

    INVALID_ROW_POLICIES = ("raise", "skip")

    def __init__(
        self,
        thresholds: Optional[ThresholdSet] = None,
        missing_forecast: str = MISSING_FORECAST_ZERO,
        negative_spend: str = "accept",
        invalid_rows: str = "raise",
        entity_column: str = "entity_id",
        timestamp_column: str = "timestamp",
        actual_column: str = "actual_spend",
        forecast_column: str = "forecast_spend",
        transformers: Optional[Dict[str, List[Callable]]] = None,
    ):
        if thresholds is not None and not isinstance(thresholds, ThresholdSet):
            raise TypeError(
                f"thresholds must be a ThresholdSet, got {type(thresholds).__name__}"
            )
        if negative_spend not in NEGATIVE_SPEND_POLICIES:
            raise ValueError(
                f"Invalid negative_spend policy: '{negative_spend}'. "
                f"Must be one of: {list(NEGATIVE_SPEND_POLICIES)}"
            )
        if invalid_rows not in self.INVALID_ROW_POLICIES:
            raise ValueError(
                f"Invalid invalid_rows policy: '{invalid_rows}'. "
                f"Must be one of: {list(self.INVALID_ROW_POLICIES)}"
            )
        for name, value in (
            ("entity_column", entity_column),
            ("timestamp_column", timestamp_column),
            ("actual_column", actual_column),
            ("forecast_column", forecast_column),
        ):
            if not value:
                raise ValueError(f"{name} cannot be empty")

        self.thresholds: ThresholdSet = thresholds or ThresholdSet()
        self.missing_forecast: str = validate_missing_forecast_policy(missing_forecast)
        self.negative_spend: str = negative_spend
        self.invalid_rows: str = invalid_rows
        self.entity_column: str = entity_column
        self.timestamp_column: str = timestamp_column
        self.actual_column: str = actual_column
        self.forecast_column: str = forecast_column
        self.transformers: dict[str, list[Callable]] = transformers or {}

    @classmethod
    def from_env(cls, **kwargs) -> "ForecastActualDeviationDetector":
        """
        Build a detector from SPENDWATCH_THRESHOLD_L1/L2/L3 and
        SPENDWATCH_MISSING_FORECAST. Explicit keyword arguments win.
        """
        kwargs.setdefault("thresholds", ThresholdSet.from_env())
        kwargs.setdefault("missing_forecast", missing_forecast_policy_from_env())
        return cls(**kwargs)

    @property
    def _result_schema(self) -> dict[str, str]:
        """
        Column names mapped to pandas dtypes for the result DataFrame.
        """
        return {
            "entity_id": "object",
            "timestamp": "datetime64[ns, UTC]",
            "actual_spend": "float64",
            "forecast_spend": "float64",
            "difference": "float64",
            "percentage_difference": "float64",
            "tier": "object",
            "severity": "object",
            "is_anomaly": "bool",
            "has_forecast": "bool",
        }

    def detect(
        self, performance_df: pd.DataFrame, forecast_df: pd.DataFrame
    ) -> pd.DataFrame:
        """
        Classify every performance row against its forecast.

        Args:
            performance_df: Actual spend observations
            forecast_df: Forecast spend observations (may be empty; every row
                then falls under the missing-forecast policy)

        Returns:
            pd.DataFrame: One row per kept performance row, in input order,
                with RESULT_COLUMNS

        Raises:
            TypeError: If inputs are not DataFrames
            ValueError: If performance_df is empty, a required column is
                missing, timestamps cannot be parsed, or a row is malformed
                and invalid_rows='raise'
        """
        self._validate_inputs(performance_df, forecast_df)

        performances = self._performance_observations(performance_df)
        forecasts = self._forecast_observations(forecast_df)
        results = self._classify_all(performances, forecasts)

        if not results:
            empty_df = self._get_empty_result_dataframe()
            return self._apply_transformers(empty_df, "after")

        result_df = pd.DataFrame(results, columns=self.RESULT_COLUMNS)
        # Unit inference differs across pandas versions; match the empty schema
        result_df["timestamp"] = result_df["timestamp"].dt.as_unit("ns")
        result_df["is_anomaly"] = result_df["is_anomaly"].astype(bool)
        result_df["has_forecast"] = result_df["has_forecast"].astype(bool)

        return self._apply_transformers(result_df, "after")

    def _validate_inputs(
        self, performance_df: pd.DataFrame, forecast_df: pd.DataFrame
    ) -> None:
        if not isinstance(performance_df, pd.DataFrame):
            raise TypeError(
                f"Expected pandas DataFrame for performance_df, "
                f"got {type(performance_df).__name__}"
            )
        if not isinstance(forecast_df, pd.DataFrame):
            raise TypeError(
                f"Expected pandas DataFrame for forecast_df, "
                f"got {type(forecast_df).__name__}"
            )
        if performance_df.empty:
            raise ValueError("Performance DataFrame is empty")

        self._require_columns(
            performance_df,
            [self.entity_column, self.timestamp_column, self.actual_column],
            "performance_df",
        )
        if not forecast_df.empty:
            self._require_columns(
                forecast_df,
                [self.entity_column, self.timestamp_column, self.forecast_column],
                "forecast_df",
            )

    @staticmethod
    def _require_columns(df: pd.DataFrame, columns: List[str], name: str) -> None:
        missing = [col for col in columns if col not in df.columns]
        if missing:
            raise ValueError(
                f"Required columns not found in {name}: {missing}. "
                f"Available columns: {list(df.columns)}"
            )

    def _parse_timestamps(self, df: pd.DataFrame, name: str) -> pd.Series:
        try:
            return pd.to_datetime(df[self.timestamp_column], utc=True)
        except (ValueError, TypeError) as e:
            raise ValueError(
                f"Failed to parse '{self.timestamp_column}' in {name} "
                f"as datetime: {str(e)}"
            ) from e

    def _performance_observations(
        self, performance_df: pd.DataFrame
    ) -> list[PerformanceObservation]:
        timestamps = self._parse_timestamps(performance_df, "performance_df")
        return [
            PerformanceObservation(entity_id, timestamp, actual)
            for entity_id, timestamp, actual in zip(
                performance_df[self.entity_column],
                timestamps,
                performance_df[self.actual_column],
            )
        ]

    def _forecast_observations(
        self, forecast_df: pd.DataFrame
    ) -> list[ForecastObservation]:
        if forecast_df.empty:
            return []

        # A NaN forecast is no forecast at all.
        usable = forecast_df[forecast_df[self.forecast_column].notna()]
        if usable.empty:
            return []

        timestamps = self._parse_timestamps(usable, "forecast_df")
        return [
            ForecastObservation(entity_id, timestamp, forecast)
            for entity_id, timestamp, forecast in zip(
                usable[self.entity_column],
                timestamps,
                usable[self.forecast_column],
            )
        ]

    def _classify_all(
        self,
        performances: list[PerformanceObservation],
        forecasts: list[ForecastObservation],
    ) -> list[dict]:
        index = index_forecasts(forecasts)
        results = []
        skipped = 0

        for performance in performances:
            forecast = index.get((performance.entity_id, performance.timestamp))
            try:
                deviation = classify_pair(
                    performance,
                    forecast,
                    self.thresholds,
                    missing_forecast=self.missing_forecast,
                    negative_spend=self.negative_spend,
                )
            except (TypeError, ValueError) as e:
                if self.invalid_rows == "raise":
                    raise ValueError(
                        f"Invalid observation for entity '{performance.entity_id}' "
                        f"at {performance.timestamp}: {str(e)}"
                    ) from e
                skipped += 1
                continue

            results.append(deviation.to_dict())

        if skipped:
            warnings.warn(
                f"Skipped {skipped} invalid performance row(s).", UserWarning
            )

        return results

    def _get_empty_result_dataframe(self) -> pd.DataFrame:
        """
        Create an empty DataFrame with the result schema.
        """
        schema = {
            col: pd.Series(dtype=dtype)
            for col, dtype in self._result_schema.items()
        }
        return pd.DataFrame(schema)
