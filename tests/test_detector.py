"""
Tests for ForecastActualDeviationDetector.
"""

from decimal import Decimal
import pytest
import pandas as pd
from spendwatch.domain.deviation import ThresholdSet
from spendwatch.infrastructure.anomaly_detectors import ForecastActualDeviationDetector
from spendwatch.infrastructure.transformers.filters import ValueFilter


def make_performance(rows):
    return pd.DataFrame(rows, columns=["entity_id", "timestamp", "actual_spend"])


def make_forecast(rows):
    return pd.DataFrame(rows, columns=["entity_id", "timestamp", "forecast_spend"])


@pytest.fixture
def scenario_frames():
    """The reference scenarios for one campaign over five hours."""
    performance_df = make_performance(
        [
            (1, "2024-01-15 10:00", 115.0),
            (1, "2024-01-15 11:00", 145.0),
            (1, "2024-01-15 12:00", 200.0),
            (1, "2024-01-15 13:00", 105.0),
            (1, "2024-01-15 14:00", 50.0),
        ]
    )
    forecast_df = make_forecast(
        [
            (1, "2024-01-15 10:00", 100.0),
            (1, "2024-01-15 11:00", 100.0),
            (1, "2024-01-15 12:00", 100.0),
            (1, "2024-01-15 13:00", 100.0),
            (1, "2024-01-15 14:00", 0.0),
        ]
    )
    return performance_df, forecast_df


class TestDetection:
    """Tests for the classification result"""

    def test_scenarios(self, scenario_frames):
        detector = ForecastActualDeviationDetector()

        result = detector.detect(*scenario_frames)

        assert list(result.columns) == ForecastActualDeviationDetector.RESULT_COLUMNS
        assert list(result["tier"]) == ["L1", "L2", "L3", "none", "none"]
        assert list(result["percentage_difference"]) == [15.0, 45.0, 100.0, 5.0, 0.0]
        assert list(result["severity"]) == ["low", "medium", "high", "low", "low"]
        assert list(result["is_anomaly"]) == [True, True, True, False, False]

    def test_result_dtypes(self, scenario_frames):
        result = ForecastActualDeviationDetector().detect(*scenario_frames)

        assert str(result["timestamp"].dtype) == "datetime64[ns, UTC]"
        assert result["is_anomaly"].dtype == bool
        assert result["has_forecast"].dtype == bool

    def test_result_dtypes_match_empty_schema(self, scenario_frames):
        detector = ForecastActualDeviationDetector()

        filled = detector.detect(*scenario_frames)
        empty = detector._get_empty_result_dataframe()

        assert filled["timestamp"].dtype == empty["timestamp"].dtype

    def test_decimal_spend_values(self):
        performance_df = make_performance([(1, "2024-01-01 10:00", Decimal("115.00"))])
        forecast_df = make_forecast([(1, "2024-01-01 10:00", Decimal("100.00"))])

        result = ForecastActualDeviationDetector().detect(performance_df, forecast_df)

        assert result["tier"].iloc[0] == "L1"
        assert result["percentage_difference"].iloc[0] == 15.0
        assert result["actual_spend"].iloc[0] == 115.0

    def test_output_order_follows_performance(self):
        performance_df = make_performance(
            [(2, "2024-01-15 11:00", 200.0), (1, "2024-01-15 10:00", 100.0)]
        )
        forecast_df = make_forecast(
            [(1, "2024-01-15 10:00", 100.0), (2, "2024-01-15 11:00", 100.0)]
        )

        result = ForecastActualDeviationDetector().detect(performance_df, forecast_df)

        assert list(result["entity_id"]) == [2, 1]
        assert list(result["tier"]) == ["L3", "none"]

    def test_custom_thresholds(self, scenario_frames):
        detector = ForecastActualDeviationDetector(thresholds=ThresholdSet(5, 10, 20))

        result = detector.detect(*scenario_frames)

        assert list(result["tier"]) == ["L2", "L3", "L3", "L1", "none"]

    def test_after_transformers(self, scenario_frames):
        detector = ForecastActualDeviationDetector(
            transformers={"after": [ValueFilter("is_anomaly", values=[True])]}
        )

        result = detector.detect(*scenario_frames)

        assert len(result) == 3


class TestMatching:
    """Tests for the exact entity/timestamp join"""

    def test_timestamps_in_different_notation_match(self):
        performance_df = make_performance([(1, "2024-01-15T10:00:00Z", 200.0)])
        forecast_df = make_forecast([(1, pd.Timestamp("2024-01-15 10:00"), 100.0)])

        result = ForecastActualDeviationDetector().detect(performance_df, forecast_df)

        assert result["tier"].iloc[0] == "L3"
        assert result["forecast_spend"].iloc[0] == 100.0

    def test_no_tolerance_window(self):
        performance_df = make_performance([(1, "2024-01-15 10:00", 200.0)])
        forecast_df = make_forecast([(1, "2024-01-15 10:01", 100.0)])

        result = ForecastActualDeviationDetector().detect(performance_df, forecast_df)

        assert result["forecast_spend"].iloc[0] == 0.0
        assert result["tier"].iloc[0] == "none"

    def test_unknown_policy(self):
        performance_df = make_performance(
            [(1, "2024-01-15 10:00", 200.0), (2, "2024-01-15 10:00", 200.0)]
        )
        forecast_df = make_forecast([(1, "2024-01-15 10:00", 100.0)])

        detector = ForecastActualDeviationDetector(missing_forecast="unknown")
        result = detector.detect(performance_df, forecast_df)

        assert list(result["has_forecast"]) == [True, False]
        assert pd.isna(result["forecast_spend"].iloc[1])
        assert pd.isna(result["difference"].iloc[1])

    def test_nan_forecast_is_missing(self):
        performance_df = make_performance([(1, "2024-01-15 10:00", 200.0)])
        forecast_df = make_forecast([(1, "2024-01-15 10:00", float("nan"))])

        result = ForecastActualDeviationDetector().detect(performance_df, forecast_df)

        assert result["forecast_spend"].iloc[0] == 0.0
        assert result["is_anomaly"].iloc[0] == False  # noqa: E712

    def test_empty_forecast_uses_missing_policy(self):
        performance_df = make_performance([(1, "2024-01-15 10:00", 200.0)])

        result = ForecastActualDeviationDetector().detect(performance_df, pd.DataFrame())

        assert len(result) == 1
        assert result["tier"].iloc[0] == "none"

    def test_duplicate_forecasts_warn(self):
        performance_df = make_performance([(1, "2024-01-15 10:00", 200.0)])
        forecast_df = make_forecast(
            [(1, "2024-01-15 10:00", 10.0), (1, "2024-01-15 10:00", 100.0)]
        )

        with pytest.warns(UserWarning, match="duplicate forecast"):
            result = ForecastActualDeviationDetector().detect(performance_df, forecast_df)

        assert result["forecast_spend"].iloc[0] == 100.0

    def test_custom_column_names(self):
        performance_df = pd.DataFrame(
            {"campaign_id": [5], "hour": ["2024-01-15 10:00"], "spend": [130.0]}
        )
        forecast_df = pd.DataFrame(
            {"campaign_id": [5], "hour": ["2024-01-15 10:00"], "predicted": [100.0]}
        )

        detector = ForecastActualDeviationDetector(
            entity_column="campaign_id",
            timestamp_column="hour",
            actual_column="spend",
            forecast_column="predicted",
        )
        result = detector.detect(performance_df, forecast_df)

        assert result["entity_id"].iloc[0] == 5
        assert result["tier"].iloc[0] == "L2"


class TestValidation:
    """Tests for input validation"""

    def test_performance_not_dataframe(self):
        with pytest.raises(TypeError, match="performance_df"):
            ForecastActualDeviationDetector().detect([1, 2], pd.DataFrame())

    def test_forecast_not_dataframe(self):
        performance_df = make_performance([(1, "2024-01-15 10:00", 1.0)])
        with pytest.raises(TypeError, match="forecast_df"):
            ForecastActualDeviationDetector().detect(performance_df, None)

    def test_empty_performance(self):
        with pytest.raises(ValueError, match="Performance DataFrame is empty"):
            ForecastActualDeviationDetector().detect(pd.DataFrame(), pd.DataFrame())

    def test_missing_performance_column(self):
        performance_df = pd.DataFrame({"entity_id": [1], "timestamp": ["2024-01-15"]})

        with pytest.raises(ValueError, match="Required columns not found in performance_df"):
            ForecastActualDeviationDetector().detect(performance_df, pd.DataFrame())

    def test_missing_forecast_column(self):
        performance_df = make_performance([(1, "2024-01-15 10:00", 1.0)])
        forecast_df = pd.DataFrame({"entity_id": [1], "timestamp": ["2024-01-15 10:00"]})

        with pytest.raises(ValueError, match="Required columns not found in forecast_df"):
            ForecastActualDeviationDetector().detect(performance_df, forecast_df)

    def test_unparseable_timestamp(self):
        performance_df = make_performance([(1, "not a date", 1.0)])

        with pytest.raises(ValueError, match="Failed to parse 'timestamp'"):
            ForecastActualDeviationDetector().detect(performance_df, pd.DataFrame())

    def test_invalid_row_raises(self):
        performance_df = make_performance([(1, "2024-01-15 10:00", float("nan"))])

        with pytest.raises(ValueError, match="Invalid observation for entity '1'"):
            ForecastActualDeviationDetector().detect(performance_df, pd.DataFrame())

    def test_invalid_row_skipped(self):
        performance_df = make_performance(
            [(1, "2024-01-15 10:00", float("nan")), (2, "2024-01-15 10:00", 5.0)]
        )

        detector = ForecastActualDeviationDetector(invalid_rows="skip")
        with pytest.warns(UserWarning, match="Skipped 1 invalid performance row"):
            result = detector.detect(performance_df, pd.DataFrame())

        assert list(result["entity_id"]) == [2]

    def test_all_rows_skipped_returns_schema(self):
        performance_df = make_performance([(1, "2024-01-15 10:00", float("nan"))])

        detector = ForecastActualDeviationDetector(invalid_rows="skip")
        with pytest.warns(UserWarning):
            result = detector.detect(performance_df, pd.DataFrame())

        assert result.empty
        assert list(result.columns) == ForecastActualDeviationDetector.RESULT_COLUMNS

    def test_negative_spend_reject(self):
        performance_df = make_performance([(1, "2024-01-15 10:00", -5.0)])

        detector = ForecastActualDeviationDetector(negative_spend="reject")
        with pytest.raises(ValueError, match="must be non-negative"):
            detector.detect(performance_df, pd.DataFrame())


class TestConstruction:
    """Tests for constructor validation and configuration"""

    def test_invalid_thresholds_type(self):
        with pytest.raises(TypeError, match="ThresholdSet"):
            ForecastActualDeviationDetector(thresholds=(15, 30, 50))

    def test_invalid_missing_forecast(self):
        with pytest.raises(ValueError, match="Invalid missing_forecast policy"):
            ForecastActualDeviationDetector(missing_forecast="drop")

    def test_invalid_negative_spend(self):
        with pytest.raises(ValueError, match="Invalid negative_spend policy"):
            ForecastActualDeviationDetector(negative_spend="ignore")

    def test_invalid_rows_policy(self):
        with pytest.raises(ValueError, match="Invalid invalid_rows policy"):
            ForecastActualDeviationDetector(invalid_rows="drop")

    def test_empty_column_name(self):
        with pytest.raises(ValueError, match="actual_column cannot be empty"):
            ForecastActualDeviationDetector(actual_column="")

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SPENDWATCH_THRESHOLD_L1", "10")
        monkeypatch.setenv("SPENDWATCH_MISSING_FORECAST", "unknown")

        detector = ForecastActualDeviationDetector.from_env()

        assert detector.thresholds.l1 == 10.0
        assert detector.missing_forecast == "unknown"

    def test_from_env_explicit_kwargs_win(self, monkeypatch):
        monkeypatch.setenv("SPENDWATCH_MISSING_FORECAST", "unknown")

        detector = ForecastActualDeviationDetector.from_env(missing_forecast="zero")

        assert detector.missing_forecast == "zero"
