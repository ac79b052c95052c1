"""Tests for configuration, exceptions and metrics export."""

import warnings

import pytest

from fairwatch.core.config import DimensionPolicy, Settings
from fairwatch.core.exceptions import (
    ConcurrencyError,
    ErrorCode,
    InsufficientDataWarning,
    PersistenceError,
    SampleProviderError,
)
from fairwatch.core.metrics import export_metrics
from fairwatch.governance.schemas import BiasDimension


class TestSettings:
    """Tests for Settings defaults and overrides."""

    def test_defaults(self, settings):
        assert settings.assessment_interval_days == 30
        assert settings.assessment_grace_period_days == 5
        assert settings.min_samples_for_assessment == 100
        assert settings.trend_window == 3
        assert settings.accuracy_proxy == 85.0
        assert settings.realtime_baseline_confidence == 0.8
        assert settings.subpopulation_canonical_groups == 10
        assert settings.threshold_inclusive is False

    @pytest.mark.parametrize("dimension,threshold,cutoff,min_samples", [
        (BiasDimension.DEMOGRAPHIC, 0.15, 0.30, 50),
        (BiasDimension.CONTENT_TYPE, 0.20, 0.40, 30),
        (BiasDimension.SOURCE, 0.25, 0.50, 40),
        (BiasDimension.TEMPORAL, 0.10, 0.20, 100),
        (BiasDimension.GEOGRAPHIC, 0.18, 0.35, 60),
    ])
    def test_dimension_policies(self, settings, dimension, threshold, cutoff, min_samples):
        policy = settings.policy_for(dimension)
        assert policy.threshold == threshold
        assert policy.high_severity_cutoff == cutoff
        assert policy.min_samples == min_samples

    def test_policy_lookup_by_plain_string(self, settings):
        assert settings.policy_for("source") == settings.policy_for(BiasDimension.SOURCE)

    def test_partial_policy_override_falls_back(self):
        settings = Settings(
            _env_file=None,
            dimension_policies={
                "source": DimensionPolicy(threshold=0.3, high_severity_cutoff=0.6, min_samples=10),
            },
        )
        assert settings.policy_for(BiasDimension.SOURCE).threshold == 0.3
        assert settings.policy_for(BiasDimension.DEMOGRAPHIC).threshold == 0.15

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("FAIRWATCH_MIN_SAMPLES", "25")
        monkeypatch.setenv("FAIRWATCH_THRESHOLD_INCLUSIVE", "true")

        settings = Settings(_env_file=None)

        assert settings.min_samples_for_assessment == 25
        assert settings.threshold_inclusive is True

    def test_exceeds_strict_and_inclusive(self, settings, inclusive_settings):
        assert settings.exceeds(0.10, 0.10) is False
        assert settings.exceeds(0.11, 0.10) is True
        assert inclusive_settings.exceeds(0.10, 0.10) is True
        assert inclusive_settings.exceeds(0.09, 0.10) is False


class TestExceptions:
    """Tests for exception payloads."""

    def test_concurrency_error(self):
        error = ConcurrencyError()
        assert error.code == ErrorCode.ASSESSMENT_IN_PROGRESS
        assert error.to_dict()["message"] == "Bias assessment already in progress"

    def test_persistence_error_details(self):
        error = PersistenceError("boom", operation="store", details={"key": "k"})
        assert error.to_dict() == {
            "code": "E4000",
            "message": "boom",
            "details": {"operation": "store", "key": "k"},
        }
        assert error.result is None

    def test_sample_provider_error(self):
        assert SampleProviderError("down").code == ErrorCode.SAMPLE_FETCH_FAILED

    def test_insufficient_data_warning(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            warnings.warn(InsufficientDataWarning(10, 100))

        assert caught[0].category is InsufficientDataWarning
        assert "10 samples, 100 required" in str(caught[0].message)
        assert caught[0].message.code == ErrorCode.INSUFFICIENT_DATA

    def test_every_error_code_is_distinct(self):
        values = [code.value for code in ErrorCode]
        assert len(values) == len(set(values))
        assert ErrorCode.RESULT_KEY_CONFLICT.value == "E4002"


class TestMetrics:

    def test_export_contains_engine_metrics(self):
        output = export_metrics().decode("utf-8")
        assert "fairwatch_assessment_duration_seconds" in output
        assert "fairwatch_realtime_alerts_total" in output
