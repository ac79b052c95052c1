"""
Data Quality Assessment.

Scores the sample snapshot before any bias is measured:
- Representativeness: normalized Shannon entropy of a field's distribution
- Completeness: share of required fields present per sample
- Accuracy: configurable proxy (no ground truth is available yet)
- Relevance: share of samples inside the recency window

Every function is total: empty input yields 0, never a division error.
"""

import math
from collections import Counter
from datetime import datetime, timedelta
from typing import Optional, List, Dict, Sequence

import structlog

from fairwatch.core.config import Settings, get_settings
from fairwatch.governance.schemas import (
    BiasDimension,
    BiasIndicator,
    BiasSeverity,
    DataQualityAssessment,
    DataSample,
    clamp_score,
)

logger = structlog.get_logger(__name__)


REQUIRED_FIELDS = ("url", "domain", "content_type", "credibility_score", "timestamp")
UNKNOWN = "unknown"


def value_distribution(samples: Sequence[DataSample], field: str) -> Dict[str, int]:
    """Count occurrences of each value of ``field``; missing values count as 'unknown'."""
    counts: Counter = Counter()
    for sample in samples:
        value = getattr(sample, field, None)
        counts[str(value) if value not in (None, "") else UNKNOWN] += 1
    return dict(counts)


def representativeness(samples: Sequence[DataSample], field: str) -> float:
    """
    Normalized entropy of the value distribution for ``field``, on 0-100.

    Returns 0 when there are no samples or fewer than two distinct values.
    """
    distribution = value_distribution(samples, field)
    total = sum(distribution.values())
    if total == 0 or len(distribution) < 2:
        return 0.0

    entropy = 0.0
    for count in distribution.values():
        p = count / total
        entropy -= p * math.log2(p)

    max_entropy = math.log2(len(distribution))
    return clamp_score(entropy / max_entropy * 100)


def completeness(samples: Sequence[DataSample]) -> float:
    """Mean fraction of required fields present, on 0-100."""
    if not samples:
        return 0.0

    total = 0.0
    for sample in samples:
        present = sum(1 for f in REQUIRED_FIELDS if getattr(sample, f, None) is not None)
        total += present / len(REQUIRED_FIELDS)

    return clamp_score(total / len(samples) * 100)


def relevance(samples: Sequence[DataSample], now: datetime, window_days: int = 7) -> float:
    """Share of samples scored within the recency window, on 0-100."""
    if not samples:
        return 0.0

    window = timedelta(days=window_days)
    recent = sum(1 for s in samples if now - s.timestamp < window)
    return min(100.0, recent / len(samples) * 100)


class DataQualityAssessor:
    """Assesses data quality and flags quality-driven bias risks."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def assess(self, samples: Sequence[DataSample], now: datetime) -> DataQualityAssessment:
        """Assess the snapshot and emit indicators for weak representativeness or completeness."""
        indicators: List[BiasIndicator] = []

        rep = representativeness(samples, "domain")
        if rep < self.settings.representativeness_threshold:
            indicators.append(BiasIndicator(
                dimension_type=BiasDimension.SOURCE,
                metric="domain_representativeness",
                value=rep,
                threshold=self.settings.representativeness_threshold,
                severity=(
                    BiasSeverity.HIGH
                    if rep < self.settings.representativeness_high_cutoff
                    else BiasSeverity.MEDIUM
                ),
                description="Data sources may not be sufficiently representative",
            ))

        comp = completeness(samples)
        if comp < self.settings.completeness_threshold:
            indicators.append(BiasIndicator(
                dimension_type=BiasDimension.CONTENT_TYPE,
                metric="data_completeness",
                value=comp,
                threshold=self.settings.completeness_threshold,
                severity=(
                    BiasSeverity.HIGH
                    if comp < self.settings.completeness_high_cutoff
                    else BiasSeverity.MEDIUM
                ),
                description="Missing data fields may introduce bias",
            ))

        assessment = DataQualityAssessment(
            representativeness=rep,
            completeness=comp,
            accuracy=clamp_score(self.settings.accuracy_proxy),
            relevance=relevance(samples, now, self.settings.relevance_window_days),
            bias_indicators=indicators,
        )

        logger.debug(
            "data_quality_assessed",
            samples=len(samples),
            representativeness=round(rep, 2),
            completeness=round(comp, 2),
            indicator_count=len(indicators),
        )

        return assessment
