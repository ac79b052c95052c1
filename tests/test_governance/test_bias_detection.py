"""Tests for per-dimension bias detection.

Tests cover:
- Group-range bias scoring
- Threshold indicators and severity
- Confidence from sample counts
- Trends against prior assessments
"""

import pytest

from fairwatch.governance.bias_detection import (
    BiasDetector,
    calculate_trend,
    group_bias_score,
    group_samples,
)
from fairwatch.governance.schemas import BiasDimension, BiasSeverity


@pytest.fixture
def detector(settings) -> BiasDetector:
    return BiasDetector(settings)


# ============================================================================
# GROUPING
# ============================================================================


class TestGrouping:
    """Tests for group keys and the group range."""

    def test_demographic_key_combines_region_and_language(self, sample_factory):
        samples = [
            sample_factory(50, region="eu", language="en"),
            sample_factory(50, region="eu", language="fr"),
            sample_factory(50, region=None, language=None),
        ]
        groups = group_samples(samples, BiasDimension.DEMOGRAPHIC)
        assert set(groups) == {"eu_en", "eu_fr", "unknown_unknown"}

    def test_missing_content_type_groups_as_unknown(self, sample_factory):
        groups = group_samples([sample_factory(50, content_type=None)], BiasDimension.CONTENT_TYPE)
        assert list(groups) == ["unknown"]

    def test_single_group_has_no_bias(self, sample_factory):
        groups = {"a.com": [sample_factory(10), sample_factory(90)]}
        assert group_bias_score(groups) == 0.0

    def test_empty_groups_are_ignored(self, sample_factory):
        groups = {"a.com": [sample_factory(80)], "b.com": []}
        assert group_bias_score(groups) == 0.0


# ============================================================================
# DIMENSION SCORING
# ============================================================================


class TestDimensionScoring:
    """Tests for BiasDetector.detect on grouped dimensions."""

    def test_source_scenario_medium_indicator(self, detector, sample_factory):
        samples = [
            sample_factory(80, domain="a.com"),
            sample_factory(80, domain="a.com"),
            sample_factory(40, domain="b.com"),
            sample_factory(40, domain="b.com"),
        ]
        metric = detector.detect(BiasDimension.SOURCE, samples)

        assert metric.score == pytest.approx(60.0)
        assert len(metric.indicators) == 1
        indicator = metric.indicators[0]
        assert indicator.metric == "source_bias"
        assert indicator.value == pytest.approx(0.4)
        assert indicator.threshold == 0.25
        assert indicator.severity == BiasSeverity.MEDIUM

    @pytest.mark.parametrize("dimension", [
        BiasDimension.DEMOGRAPHIC,
        BiasDimension.CONTENT_TYPE,
        BiasDimension.SOURCE,
        BiasDimension.GEOGRAPHIC,
    ])
    def test_identical_groups_score_100(self, detector, balanced_factory, dimension):
        metric = detector.detect(dimension, balanced_factory())
        assert metric.score == 100.0
        assert metric.indicators == ()

    @pytest.mark.parametrize("delta", [0, 10, 15, 16, 30, 31, 50, 100])
    def test_two_group_delta_for_demographic(self, detector, sample_factory, delta):
        samples = [
            sample_factory(100, region="eu", language="en"),
            sample_factory(100 - delta, region="us", language="en"),
        ]
        metric = detector.detect(BiasDimension.DEMOGRAPHIC, samples)

        assert metric.score == pytest.approx(100 - delta)
        assert bool(metric.indicators) == (delta / 100 > 0.15)
        if metric.indicators:
            expected = BiasSeverity.HIGH if delta / 100 > 0.30 else BiasSeverity.MEDIUM
            assert metric.indicators[0].severity == expected

    def test_geographic_high_severity(self, detector, sample_factory):
        samples = [
            sample_factory(95, region="eu"),
            sample_factory(45, region="apac"),
        ]
        metric = detector.detect(BiasDimension.GEOGRAPHIC, samples)

        assert metric.indicators[0].metric == "geographic_bias"
        assert metric.indicators[0].severity == BiasSeverity.HIGH

    def test_empty_snapshot_scores_100_with_zero_confidence(self, detector):
        for dimension in BiasDimension:
            metric = detector.detect(dimension, [])
            assert metric.score == 100.0
            assert metric.confidence == 0.0


class TestConfidence:
    """Tests for sample-count confidence."""

    def test_confidence_scales_with_min_samples(self, detector):
        assert detector.confidence(25, BiasDimension.DEMOGRAPHIC) == pytest.approx(50.0)
        assert detector.confidence(15, BiasDimension.CONTENT_TYPE) == pytest.approx(50.0)

    def test_confidence_caps_at_100(self, detector):
        assert detector.confidence(10_000, BiasDimension.TEMPORAL) == 100.0


# ============================================================================
# TRENDS
# ============================================================================


class TestTrend:
    """Tests for calculate_trend."""

    def test_fewer_than_two_priors_defaults_to_improving(self):
        trend = calculate_trend(50.0, [90.0])
        assert trend.improving is True
        assert trend.direction == 0.0

    def test_compares_against_oldest_prior(self):
        # Most recent first: the oldest is 60
        trend = calculate_trend(80.0, [95.0, 70.0, 60.0])
        assert trend.improving is True
        assert trend.direction == pytest.approx(0.2)

    def test_worsening_trend(self):
        trend = calculate_trend(40.0, [50.0, 90.0])
        assert trend.improving is False
        assert trend.direction == pytest.approx(-0.5)

    def test_unchanged_score_is_not_improving(self):
        trend = calculate_trend(70.0, [70.0, 70.0])
        assert trend.improving is False
        assert trend.direction == 0.0

    def test_detect_passes_prior_scores_to_trend(self, detector, balanced_factory):
        metric = detector.detect(BiasDimension.SOURCE, balanced_factory(), [90.0, 80.0])
        assert metric.trend.improving is True
        assert metric.trend.direction == pytest.approx(0.2)
