"""
Tests for threshold-tiered deviation classification.
"""

import math
from dataclasses import FrozenInstanceError
from decimal import Decimal
import pytest
from spendwatch.domain.deviation import (
    ClassifiedDeviation,
    DEFAULT_THRESHOLDS,
    SEVERITY_HIGH,
    SEVERITY_LOW,
    SEVERITY_MEDIUM,
    TIER_L1,
    TIER_L2,
    TIER_L3,
    TIER_NONE,
    ThresholdSet,
    classify,
    percentage_difference,
    tier_rank,
)


class TestClassifyScenarios:
    """Tests for the reference spend scenarios"""

    def test_low_overspend_is_l1(self):
        result = classify(115, 100)

        assert result.tier == TIER_L1
        assert result.percentage_difference == 15.0
        assert result.difference == 15.0
        assert result.severity == SEVERITY_LOW
        assert result.is_anomaly is True

    def test_medium_overspend_is_l2(self):
        result = classify(145, 100)

        assert result.tier == TIER_L2
        assert result.percentage_difference == 45.0
        assert result.severity == SEVERITY_MEDIUM
        assert result.is_anomaly is True

    def test_double_spend_is_l3(self):
        result = classify(200, 100)

        assert result.tier == TIER_L3
        assert result.percentage_difference == 100.0
        assert result.severity == SEVERITY_HIGH
        assert result.is_anomaly is True

    def test_small_deviation_is_not_anomaly(self):
        result = classify(105, 100)

        assert result.tier == TIER_NONE
        assert result.percentage_difference == 5.0
        assert result.is_anomaly is False

    def test_zero_forecast_is_never_anomaly(self):
        result = classify(50, 0)

        assert result.tier == TIER_NONE
        assert result.percentage_difference == 0.0
        assert result.difference == 50.0
        assert result.is_anomaly is False

    def test_underspend_uses_absolute_deviation(self):
        """Spending less than forecast is flagged the same way."""
        result = classify(40, 100)

        assert result.difference == -60.0
        assert result.percentage_difference == 60.0
        assert result.tier == TIER_L3

    def test_exact_match(self):
        result = classify(100, 100)

        assert result.difference == 0.0
        assert result.percentage_difference == 0.0
        assert result.tier == TIER_NONE


class TestBoundaries:
    """Boundary values belong to the threshold's tier"""

    @pytest.mark.parametrize(
        "actual, expected_tier",
        [
            (114.99, TIER_NONE),
            (115, TIER_L1),
            (130, TIER_L2),
            (150, TIER_L3),
        ],
    )
    def test_threshold_boundaries(self, actual, expected_tier):
        assert classify(actual, 100).tier == expected_tier

    def test_tiers_are_monotonic(self):
        ranks = [tier_rank(classify(100 + step, 100).tier) for step in range(0, 120)]
        assert ranks == sorted(ranks)

    def test_classify_is_idempotent(self):
        assert classify(137.5, 80) == classify(137.5, 80)

    def test_custom_thresholds(self):
        thresholds = ThresholdSet(5, 10, 20)

        assert classify(105, 100, thresholds).tier == TIER_L1
        assert classify(112, 100, thresholds).tier == TIER_L2
        assert classify(121, 100, thresholds).tier == TIER_L3

    def test_equal_thresholds_pick_highest_tier(self):
        thresholds = ThresholdSet(20, 20, 20)
        assert classify(120, 100, thresholds).tier == TIER_L3


class TestPercentageDifference:
    """Tests for percentage_difference"""

    def test_relative_to_forecast(self):
        assert percentage_difference(75, 50) == 50.0

    def test_zero_forecast(self):
        assert percentage_difference(1000, 0) == 0.0

    def test_zero_both(self):
        assert percentage_difference(0, 0) == 0.0

    def test_fractional(self):
        assert percentage_difference(10.5, 10) == pytest.approx(5.0)


class TestInputValidation:
    """Tests for spend value validation"""

    def test_nan_actual_raises(self):
        with pytest.raises(ValueError, match="actual_spend must be finite"):
            classify(float("nan"), 100)

    def test_infinite_forecast_raises(self):
        with pytest.raises(ValueError, match="forecast_spend must be finite"):
            classify(100, math.inf)

    def test_string_raises_type_error(self):
        with pytest.raises(TypeError, match="actual_spend must be a number"):
            classify("100", 100)

    def test_bool_raises_type_error(self):
        with pytest.raises(TypeError):
            classify(True, 100)

    def test_none_raises_type_error(self):
        with pytest.raises(TypeError):
            classify(100, None)

    def test_complex_raises_type_error(self):
        with pytest.raises(TypeError, match="forecast_spend must be a number"):
            classify(100, complex(100, 1))

    def test_decimal_values_accepted(self):
        result = classify(Decimal("115.00"), Decimal("100.00"))

        assert result.tier == TIER_L1
        assert result.actual_spend == 115.0
        assert isinstance(result.forecast_spend, float)

    def test_decimal_nan_raises(self):
        with pytest.raises(ValueError, match="actual_spend must be finite"):
            classify(Decimal("NaN"), 100)

    def test_invalid_negative_spend_policy(self):
        with pytest.raises(ValueError, match="Invalid negative_spend policy"):
            classify(100, 100, negative_spend="ignore")


class TestNegativeSpend:
    """Tests for negative spend policies"""

    def test_accept_keeps_value(self):
        result = classify(-10, 100)

        assert result.actual_spend == -10.0
        assert result.difference == -110.0
        assert result.tier == TIER_L3

    def test_reject_raises(self):
        with pytest.raises(ValueError, match="must be non-negative"):
            classify(-10, 100, negative_spend="reject")

    def test_clamp_uses_zero(self):
        result = classify(100, -50, negative_spend="clamp")

        assert result.forecast_spend == 0.0
        assert result.percentage_difference == 0.0
        assert result.tier == TIER_NONE

    def test_negative_forecast_accepted_is_not_anomaly(self):
        result = classify(100, -50)
        assert result.percentage_difference == 0.0
        assert result.is_anomaly is False


class TestCarriedFields:
    """Tests for identity fields and serialization"""

    def test_entity_and_timestamp_carried_through(self):
        result = classify(115, 100, entity_id="cmp-1", timestamp="2024-01-01 10:00")

        assert result.entity_id == "cmp-1"
        assert result.timestamp == "2024-01-01 10:00"

    def test_to_dict(self):
        result = classify(200, 100, entity_id=7).to_dict()

        assert result["entity_id"] == 7
        assert result["tier"] == TIER_L3
        assert result["severity"] == SEVERITY_HIGH
        assert result["has_forecast"] is True

    def test_without_forecast(self):
        result = ClassifiedDeviation.without_forecast(80.0, entity_id="a")

        assert result.has_forecast is False
        assert result.forecast_spend is None
        assert result.difference is None
        assert result.tier == TIER_NONE
        assert result.is_anomaly is False

    def test_result_is_frozen(self):
        result = classify(115, 100)
        with pytest.raises(FrozenInstanceError):
            result.tier = TIER_L3


class TestThresholdSet:
    """Tests for ThresholdSet validation and configuration"""

    def test_defaults(self):
        assert DEFAULT_THRESHOLDS == ThresholdSet(15, 30, 50)
        assert DEFAULT_THRESHOLDS.l1 == 15.0

    def test_descending_raises(self):
        with pytest.raises(ValueError, match="ascending"):
            ThresholdSet(30, 15, 50)

    def test_negative_raises(self):
        with pytest.raises(ValueError, match="non-negative"):
            ThresholdSet(-1, 30, 50)

    def test_nan_raises(self):
        with pytest.raises(ValueError):
            ThresholdSet(15, float("nan"), 50)

    def test_non_number_raises(self):
        with pytest.raises(TypeError, match="must be a number"):
            ThresholdSet("15", 30, 50)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SPENDWATCH_THRESHOLD_L1", "10")
        monkeypatch.setenv("SPENDWATCH_THRESHOLD_L2", "20")
        monkeypatch.delenv("SPENDWATCH_THRESHOLD_L3", raising=False)

        thresholds = ThresholdSet.from_env()

        assert thresholds == ThresholdSet(10, 20, 50)

    def test_from_env_invalid_value(self, monkeypatch):
        monkeypatch.setenv("SPENDWATCH_THRESHOLD_L1", "ten")

        with pytest.raises(ValueError, match="SPENDWATCH_THRESHOLD_L1"):
            ThresholdSet.from_env()

    def test_tier_for(self):
        assert DEFAULT_THRESHOLDS.tier_for(0) == TIER_NONE
        assert DEFAULT_THRESHOLDS.tier_for(49.9) == TIER_L2
        assert DEFAULT_THRESHOLDS.tier_for(500) == TIER_L3


class TestTierRank:
    """Tests for tier_rank"""

    def test_order(self):
        assert tier_rank(TIER_NONE) < tier_rank(TIER_L1) < tier_rank(TIER_L2) < tier_rank(TIER_L3)

    def test_unknown_tier(self):
        with pytest.raises(ValueError, match="Unknown tier"):
            tier_rank("L4")
