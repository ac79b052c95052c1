"""
Risk Classification.

Maps the five dimension scores onto the EU AI Act risk tiers.
Tiers are evaluated worst-first and the first match wins, so the
classification is monotone: lowering any score never lowers the tier.
"""

from typing import List, Dict

import structlog

from fairwatch.governance.schemas import (
    AIRiskLevel,
    BiasDetectionResult,
    BiasDimension,
    BiasSeverity,
    RiskAssessment,
)

logger = structlog.get_logger(__name__)


# Score below which a dimension counts as a risk factor
RISK_FACTOR_SCORE = 70.0

RISK_FACTOR_LABELS: Dict[BiasDimension, str] = {
    BiasDimension.DEMOGRAPHIC: "Demographic bias detected",
    BiasDimension.CONTENT_TYPE: "Content type bias detected",
    BiasDimension.SOURCE: "Source bias detected",
    BiasDimension.TEMPORAL: "Temporal drift detected",
    BiasDimension.GEOGRAPHIC: "Geographic bias detected",
}


class RiskClassifier:
    """Classifies an assessment into a risk tier with supporting flags."""

    # (tier, min_score below, avg_score below); first match wins
    TIER_RULES = [
        (AIRiskLevel.UNACCEPTABLE, 30.0, None),
        (AIRiskLevel.HIGH, 50.0, 60.0),
        (AIRiskLevel.LIMITED, 70.0, 80.0),
    ]

    def classify_level(self, min_score: float, avg_score: float) -> AIRiskLevel:
        for level, min_below, avg_below in self.TIER_RULES:
            if min_score < min_below:
                return level
            if avg_below is not None and avg_score < avg_below:
                return level
        return AIRiskLevel.MINIMAL

    def classify(self, bias: BiasDetectionResult) -> RiskAssessment:
        min_score = bias.min_score
        avg_score = bias.average_score
        level = self.classify_level(min_score, avg_score)

        severe_indicator = any(
            indicator.severity in (BiasSeverity.HIGH, BiasSeverity.CRITICAL)
            for _, metric in bias.items()
            for indicator in metric.indicators
        )

        risk_factors: List[str] = [
            RISK_FACTOR_LABELS[dimension]
            for dimension, metric in bias.items()
            if metric.score < RISK_FACTOR_SCORE
        ]

        assessment = RiskAssessment(
            overall_risk_level=level,
            impact_on_fundamental_rights=min_score < 50 or severe_indicator,
            potential_discrimination=(
                bias.demographic.score < RISK_FACTOR_SCORE
                or bias.geographic.score < RISK_FACTOR_SCORE
            ),
            risk_factors=risk_factors,
        )

        logger.debug(
            "risk_classified",
            risk_level=level.value,
            min_score=round(min_score, 2),
            avg_score=round(avg_score, 2),
            risk_factors=len(risk_factors),
        )

        return assessment
