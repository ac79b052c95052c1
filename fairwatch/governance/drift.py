"""
Temporal Drift Detection.

Buckets samples by UTC day, averages each bucket, and fits an ordinary
least-squares line through the daily averages (x = bucket index). The
absolute slope, normalized to 0-1, is the drift magnitude that feeds the
temporal BiasMetric.
"""

from typing import List, Dict, Sequence

from pydantic import BaseModel, Field
import structlog

from fairwatch.governance.schemas import DataSample

logger = structlog.get_logger(__name__)


SECONDS_PER_DAY = 24 * 60 * 60


class DriftAnalysis(BaseModel):
    """Regression of daily average score against day order."""

    bucket_count: int = Field(ge=0)
    daily_averages: List[float] = Field(default_factory=list)
    slope: float = Field(default=0.0, description="Score points per day")
    drift_magnitude: float = Field(default=0.0, ge=0, description="|slope| / 100")


def day_bucket(sample: DataSample) -> int:
    """Day number since the epoch for a sample's timestamp."""
    return int(sample.timestamp.timestamp() // SECONDS_PER_DAY)


def bucket_by_day(samples: Sequence[DataSample]) -> Dict[int, List[DataSample]]:
    buckets: Dict[int, List[DataSample]] = {}
    for sample in samples:
        buckets.setdefault(day_bucket(sample), []).append(sample)
    return buckets


def ols_slope(values: Sequence[float]) -> float:
    """
    Least-squares slope of ``values`` against their index.

    slope = (nΣxy - ΣxΣy) / (nΣx² - (Σx)²); returns 0 for fewer than two
    points or a zero denominator.
    """
    n = len(values)
    if n < 2:
        return 0.0

    sum_x = sum(range(n))
    sum_y = sum(values)
    sum_xy = sum(i * y for i, y in enumerate(values))
    sum_xx = sum(i * i for i in range(n))

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return 0.0

    return (n * sum_xy - sum_x * sum_y) / denominator


class DriftDetector:
    """Detects systematic change in average score over time."""

    def analyze(self, samples: Sequence[DataSample]) -> DriftAnalysis:
        buckets = bucket_by_day(samples)
        if len(buckets) < 2:
            return DriftAnalysis(
                bucket_count=len(buckets),
                daily_averages=[
                    sum(s.credibility_score for s in group) / len(group)
                    for group in buckets.values()
                ],
            )

        averages = [
            sum(s.credibility_score for s in buckets[day]) / len(buckets[day])
            for day in sorted(buckets)
        ]
        slope = ols_slope(averages)

        logger.debug(
            "temporal_drift_computed",
            buckets=len(buckets),
            slope=round(slope, 4),
        )

        return DriftAnalysis(
            bucket_count=len(buckets),
            daily_averages=averages,
            slope=slope,
            drift_magnitude=abs(slope) / 100,
        )
