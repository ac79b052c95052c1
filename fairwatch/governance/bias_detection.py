"""
Bias Detection.

Scores each fairness dimension independently:
- Demographic: groups by region + language
- Content type: groups by content type
- Source: groups by domain
- Geographic: groups by region
- Temporal: regression drift of daily averages (see drift.py)

For the grouped dimensions the bias score is the normalized range of
group average credibility scores. With fewer than two non-empty groups
there is no contrast and therefore no penalty.

Thresholds, high-severity cutoffs and minimum sample counts are
per-dimension and come from configuration.
"""

from typing import Optional, List, Dict, Sequence, Callable

import structlog

from fairwatch.core.config import Settings, get_settings
from fairwatch.governance.drift import DriftAnalysis, DriftDetector
from fairwatch.governance.schemas import (
    BiasDimension,
    BiasIndicator,
    BiasMetric,
    BiasSeverity,
    BiasTrend,
    DataSample,
    clamp_score,
)

logger = structlog.get_logger(__name__)


UNKNOWN = "unknown"


def _demographic_key(sample: DataSample) -> str:
    return f"{sample.region or UNKNOWN}_{sample.language or UNKNOWN}"


def _content_type_key(sample: DataSample) -> str:
    return sample.content_type or UNKNOWN


def _source_key(sample: DataSample) -> str:
    return sample.domain or UNKNOWN


def _geographic_key(sample: DataSample) -> str:
    return sample.region or UNKNOWN


GROUP_KEYS: Dict[BiasDimension, Callable[[DataSample], str]] = {
    BiasDimension.DEMOGRAPHIC: _demographic_key,
    BiasDimension.CONTENT_TYPE: _content_type_key,
    BiasDimension.SOURCE: _source_key,
    BiasDimension.GEOGRAPHIC: _geographic_key,
}


# Indicator metric name and description per dimension
INDICATOR_TEMPLATES: Dict[BiasDimension, tuple] = {
    BiasDimension.DEMOGRAPHIC: (
        "score_difference",
        "Significant differences in credibility scores across demographic groups",
    ),
    BiasDimension.CONTENT_TYPE: (
        "content_type_bias",
        "AI system shows bias towards certain content types",
    ),
    BiasDimension.SOURCE: (
        "source_bias",
        "Systematic bias detected across different content sources",
    ),
    BiasDimension.TEMPORAL: (
        "temporal_drift",
        "AI system performance drifting over time",
    ),
    BiasDimension.GEOGRAPHIC: (
        "geographic_bias",
        "Performance varies significantly across geographic regions",
    ),
}


def group_samples(
    samples: Sequence[DataSample],
    dimension: BiasDimension,
) -> Dict[str, List[DataSample]]:
    """Partition samples by the dimension's categorical key."""
    key_fn = GROUP_KEYS[dimension]
    groups: Dict[str, List[DataSample]] = {}
    for sample in samples:
        groups.setdefault(key_fn(sample), []).append(sample)
    return groups


def group_bias_score(groups: Dict[str, List[DataSample]]) -> float:
    """Normalized spread (0-1) between the best and worst group averages."""
    averages = [
        sum(s.credibility_score for s in members) / len(members)
        for members in groups.values()
        if members
    ]
    if len(averages) < 2:
        return 0.0
    return (max(averages) - min(averages)) / 100


def calculate_trend(current_score: float, prior_scores: Sequence[float]) -> BiasTrend:
    """
    Trend of a dimension relative to prior assessments.

    Args:
        current_score: This run's score for the dimension
        prior_scores: Same-dimension scores of prior runs, most recent first

    Returns:
        Improving when the current score beats the oldest prior score
    """
    if len(prior_scores) < 2:
        return BiasTrend(improving=True, direction=0.0)

    oldest = prior_scores[-1]
    delta = current_score - oldest
    return BiasTrend(
        improving=delta > 0,
        direction=max(-1.0, min(1.0, delta / 100)),
    )


class BiasDetector:
    """
    Detects disparities in credibility scores across fairness dimensions.

    Each dimension is scored from the same immutable snapshot with no
    shared state, so dimensions may be evaluated concurrently.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        drift_detector: Optional[DriftDetector] = None,
    ):
        self.settings = settings or get_settings()
        self.drift_detector = drift_detector or DriftDetector()

    def confidence(self, sample_count: int, dimension: BiasDimension) -> float:
        """Confidence grows linearly with sample count up to the dimension minimum."""
        min_samples = self.settings.policy_for(dimension).min_samples
        if min_samples <= 0:
            return 100.0
        return min(100.0, sample_count / min_samples * 100)

    def build_metric(
        self,
        dimension: BiasDimension,
        bias_score: float,
        sample_count: int,
        prior_scores: Sequence[float] = (),
    ) -> BiasMetric:
        """Turn a raw 0-1 bias score into a BiasMetric with indicators and trend."""
        policy = self.settings.policy_for(dimension)
        indicators: List[BiasIndicator] = []

        if self.settings.exceeds(bias_score, policy.threshold):
            metric_name, description = INDICATOR_TEMPLATES[dimension]
            severity = (
                BiasSeverity.HIGH
                if self.settings.exceeds(bias_score, policy.high_severity_cutoff)
                else BiasSeverity.MEDIUM
            )
            indicators.append(BiasIndicator(
                dimension_type=dimension,
                metric=metric_name,
                value=bias_score,
                threshold=policy.threshold,
                severity=severity,
                description=description,
            ))

        score = clamp_score(100 - bias_score * 100)

        return BiasMetric(
            score=score,
            confidence=clamp_score(self.confidence(sample_count, dimension)),
            indicators=indicators,
            trend=calculate_trend(score, prior_scores),
        )

    def detect(
        self,
        dimension: BiasDimension,
        samples: Sequence[DataSample],
        prior_scores: Sequence[float] = (),
    ) -> BiasMetric:
        """Score one dimension over the snapshot."""
        if dimension == BiasDimension.TEMPORAL:
            return self.detect_temporal(samples, prior_scores)

        groups = group_samples(samples, dimension)
        bias_score = group_bias_score(groups)
        metric = self.build_metric(dimension, bias_score, len(samples), prior_scores)

        logger.debug(
            "dimension_bias_scored",
            dimension=dimension.value,
            groups=len(groups),
            bias_score=round(bias_score, 4),
            score=round(metric.score, 2),
            indicators=len(metric.indicators),
        )

        return metric

    def detect_temporal(
        self,
        samples: Sequence[DataSample],
        prior_scores: Sequence[float] = (),
    ) -> BiasMetric:
        """Score temporal bias from regression drift."""
        drift: DriftAnalysis = self.drift_detector.analyze(samples)
        metric = self.build_metric(
            BiasDimension.TEMPORAL,
            drift.drift_magnitude,
            len(samples),
            prior_scores,
        )

        logger.debug(
            "dimension_bias_scored",
            dimension=BiasDimension.TEMPORAL.value,
            buckets=drift.bucket_count,
            bias_score=round(drift.drift_magnitude, 4),
            score=round(metric.score, 2),
            indicators=len(metric.indicators),
        )

        return metric
