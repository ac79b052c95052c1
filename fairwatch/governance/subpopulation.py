"""
Subpopulation Fairness Analysis.

Groups samples by (region, language, content type) and measures the
spread of average scores between the best and worst groups. A single
group has nothing to be compared against, so it is fair by definition.
"""

from typing import Optional, List, Dict, Sequence, Tuple

import structlog

from fairwatch.core.config import Settings, get_settings
from fairwatch.governance.schemas import (
    BiasSeverity,
    DataSample,
    DisparityMetric,
    PopulationGroup,
    SubpopulationAnalysis,
    SubpopulationIssue,
)

logger = structlog.get_logger(__name__)


UNKNOWN = "unknown"
CRITERIA = ("region", "language", "content_type")

GroupKey = Tuple[str, str, str]


def group_key(sample: DataSample) -> GroupKey:
    return (
        sample.region or UNKNOWN,
        sample.language or UNKNOWN,
        sample.content_type or UNKNOWN,
    )


def group_id(key: GroupKey) -> str:
    """
    Readable id such as "eu_en_article".

    Underscores and percent signs inside a value are percent-escaped so
    distinct keys never share an id.
    """
    return "_".join(
        part.replace("%", "%25").replace("_", "%5F") for part in key
    )


class SubpopulationAnalyzer:
    """Detects disparities between fine-grained subpopulations."""

    # Mid-scale reference used to pick out affected groups
    NEUTRAL_SCORE = 50.0

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def identify_groups(self, samples: Sequence[DataSample]) -> List[PopulationGroup]:
        buckets: Dict[GroupKey, List[DataSample]] = {}
        for sample in samples:
            buckets.setdefault(group_key(sample), []).append(sample)

        total = len(samples)
        expected_size = total / self.settings.subpopulation_canonical_groups
        full_confidence = self.settings.subpopulation_full_confidence_size

        groups = []
        for key, members in buckets.items():
            size = len(members)
            groups.append(PopulationGroup(
                group_id=group_id(key),
                criteria=dict(zip(CRITERIA, key)),
                sample_size=size,
                average_score=sum(s.credibility_score for s in members) / size,
                confidence=min(1.0, size / full_confidence),
                representativeness=(
                    min(100.0, size / expected_size * 100) if expected_size > 0 else 0.0
                ),
            ))
        return groups

    def disparity_severity(self, value: float) -> BiasSeverity:
        if self.settings.exceeds(value, self.settings.subpopulation_critical_cutoff):
            return BiasSeverity.CRITICAL
        if self.settings.exceeds(value, self.settings.subpopulation_disparity_threshold):
            return BiasSeverity.HIGH
        return BiasSeverity.LOW

    def disparity_metrics(self, groups: List[PopulationGroup]) -> List[DisparityMetric]:
        if len(groups) < 2:
            return []

        averages = [g.average_score for g in groups]
        disparity = (max(averages) - min(averages)) / 100

        return [DisparityMetric(
            metric_name="score_disparity",
            value=disparity,
            threshold=self.settings.subpopulation_disparity_threshold,
            groups=[g.group_id for g in groups],
            severity=self.disparity_severity(disparity),
            description=(
                f"Score disparity of {disparity * 100:.1f}% detected across subpopulations"
            ),
        )]

    def violated(self, metric: DisparityMetric) -> bool:
        return self.settings.exceeds(metric.value, metric.threshold)

    def overall_fairness(self, metrics: List[DisparityMetric]) -> float:
        """100 minus the summed excess over threshold of violated metrics."""
        penalty = sum(m.excess * 100 for m in metrics if self.violated(m))
        return max(0.0, 100 - penalty)

    def recommendations(self, metrics: List[DisparityMetric]) -> List[str]:
        recommended: List[str] = []
        for metric in metrics:
            if self.violated(metric):
                recommended.append(
                    f"Address {metric.metric_name} disparity through targeted data collection"
                )
                recommended.append("Implement fairness-aware model training techniques")
        return list(dict.fromkeys(recommended))

    def detect_issues(
        self,
        metrics: List[DisparityMetric],
        groups: List[PopulationGroup],
    ) -> List[SubpopulationIssue]:
        issues = []
        for metric in metrics:
            if metric.severity not in (BiasSeverity.HIGH, BiasSeverity.CRITICAL):
                continue
            affected = [
                g.group_id for g in groups
                if abs(g.average_score - self.NEUTRAL_SCORE)
                > self.settings.subpopulation_deviation_points
            ]
            issues.append(SubpopulationIssue(
                issue_type=metric.metric_name,
                affected_groups=affected,
                magnitude=metric.value,
                description=metric.description,
                recommended_action=f"Targeted bias mitigation for {len(affected)} subpopulations",
            ))
        return issues

    def analyze(self, samples: Sequence[DataSample]) -> SubpopulationAnalysis:
        """
        Analyze fairness across subpopulations.

        Args:
            samples: Samples to group; may be empty

        Returns:
            SubpopulationAnalysis with groups, disparities and issues
        """
        groups = self.identify_groups(samples)
        metrics = self.disparity_metrics(groups)
        analysis = SubpopulationAnalysis(
            population_groups=groups,
            disparity_metrics=metrics,
            overall_fairness=self.overall_fairness(metrics),
            recommendations=self.recommendations(metrics),
            detected_issues=self.detect_issues(metrics, groups),
        )

        logger.info(
            "subpopulation_analysis_completed",
            group_count=len(groups),
            overall_fairness=round(analysis.overall_fairness, 2),
            issue_count=len(analysis.detected_issues),
        )

        return analysis
