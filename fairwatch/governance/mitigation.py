"""
Mitigation Advisor.

Lists the baseline measures the platform always has in place and
recommends targeted measures for each dimension scoring below 70.
"""

from typing import List, Dict, Tuple

from fairwatch.governance.schemas import (
    BiasDetectionResult,
    BiasDimension,
    MitigationMeasures,
    clamp_score,
)


IMPLEMENTED_MEASURES: Tuple[str, ...] = (
    "Data diversity monitoring",
    "Regular bias assessment schedule",
    "User feedback integration",
    "Local AI processing preference",
    "Transparent scoring methodology",
)

RECOMMENDATIONS: Dict[BiasDimension, Tuple[str, str]] = {
    BiasDimension.DEMOGRAPHIC: (
        "Expand data collection across demographic groups",
        "Implement demographic-aware training procedures",
    ),
    BiasDimension.CONTENT_TYPE: (
        "Balance training data across content types",
        "Content-type specific model calibration",
    ),
    BiasDimension.SOURCE: (
        "Diversify content sources in training data",
        "Source-agnostic feature engineering",
    ),
    BiasDimension.TEMPORAL: (
        "Implement model retraining schedule",
        "Temporal drift detection system",
    ),
    BiasDimension.GEOGRAPHIC: (
        "Expand geographic coverage in data collection",
        "Region-specific model validation",
    ),
}

RECOMMENDATION_SCORE = 70.0


def dedupe(items: List[str]) -> List[str]:
    """Drop repeated strings, keeping first-seen order."""
    return list(dict.fromkeys(items))


class MitigationAdvisor:
    """Derives mitigation measures from dimension scores."""

    def advise(self, bias: BiasDetectionResult) -> MitigationMeasures:
        recommended: List[str] = []
        for dimension, metric in bias.items():
            if metric.score < RECOMMENDATION_SCORE:
                recommended.extend(RECOMMENDATIONS[dimension])

        return MitigationMeasures(
            implemented=list(IMPLEMENTED_MEASURES),
            recommended=dedupe(recommended),
            effectiveness=clamp_score(bias.average_score),
        )
