"""
Explainability Reports.

Turns an AssessmentResult into a human-readable account of how it was
reached: the decision path, which features mattered, what the confidence
rests on, and a plain-language sentence per dimension.

Reports are derived purely from the result; nothing here reads storage.
"""

import time
from typing import Optional, List, Dict, Tuple

import structlog

from fairwatch.core.config import Settings, get_settings
from fairwatch.governance.schemas import (
    AssessmentResult,
    BiasDimension,
    BiasExplanation,
    BiasSeverity,
    ConfidenceFactor,
    DecisionStep,
    ExplainableReport,
    FeatureImpact,
    FeatureWeight,
    TechnicalDetails,
)

logger = structlog.get_logger(__name__)


DETECTION_SCORE = 70.0

# feature name, dimension, weight, impact when score is not above 70, explanation
FEATURES: List[Tuple[str, BiasDimension, float, FeatureImpact, str]] = [
    (
        "demographic_diversity", BiasDimension.DEMOGRAPHIC, 0.25, FeatureImpact.NEGATIVE,
        "Impact of demographic representation on bias assessment",
    ),
    (
        "source_reliability", BiasDimension.SOURCE, 0.20, FeatureImpact.NEGATIVE,
        "Influence of content source diversity",
    ),
    (
        "temporal_stability", BiasDimension.TEMPORAL, 0.18, FeatureImpact.NEUTRAL,
        "Consistency of AI performance over time",
    ),
    (
        "content_coverage", BiasDimension.CONTENT_TYPE, 0.22, FeatureImpact.NEGATIVE,
        "Balance across different content types",
    ),
    (
        "geographic_reach", BiasDimension.GEOGRAPHIC, 0.15, FeatureImpact.NEUTRAL,
        "Geographic distribution of data sources",
    ),
]

CONFIDENCE_FACTORS: List[Tuple[str, float, str]] = [
    ("sample_size", 0.30, "Sufficient data samples for statistical significance"),
    ("data_quality", 0.25, "High quality, complete dataset"),
    ("methodology_robustness", 0.25, "Comprehensive multi-dimensional analysis"),
    ("regulatory_alignment", 0.20, "EU AI Act compliant assessment framework"),
]

EXPLANATION_TEMPLATES: Dict[BiasDimension, str] = {
    BiasDimension.DEMOGRAPHIC: (
        "Demographic bias analysis shows {score}% fairness across different user groups"
    ),
    BiasDimension.CONTENT_TYPE: (
        "Content type analysis reveals {score}% consistency across different media types"
    ),
    BiasDimension.SOURCE: (
        "Source diversity assessment indicates {score}% balance across information sources"
    ),
    BiasDimension.TEMPORAL: (
        "Temporal analysis shows {score}% stability in AI performance over time"
    ),
    BiasDimension.GEOGRAPHIC: (
        "Geographic analysis demonstrates {score}% fairness across different regions"
    ),
}


def severity_for_score(score: float) -> BiasSeverity:
    """Map a 0-100 fairness score to a severity band."""
    if score < 30:
        return BiasSeverity.CRITICAL
    if score < 50:
        return BiasSeverity.HIGH
    if score < 70:
        return BiasSeverity.MEDIUM
    return BiasSeverity.LOW


def _format_score(score: float) -> str:
    return f"{score:g}" if score == int(score) else f"{score:.1f}"


class ExplainabilityReporter:
    """Builds ExplainableReport objects from assessment results."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def decision_path(self, result: AssessmentResult) -> List[DecisionStep]:
        return [
            DecisionStep(
                step=1,
                description="Data Quality Assessment",
                input="Raw credibility data samples",
                output=(
                    "Quality score: "
                    f"{_format_score(result.data_quality.representativeness)}%"
                ),
                confidence=0.90,
                reasoning="Evaluated data representativeness, completeness, and accuracy",
            ),
            DecisionStep(
                step=2,
                description="Multi-dimensional Bias Detection",
                input="Quality-validated data",
                output=f"Bias metrics across {len(BiasDimension)} dimensions",
                confidence=0.85,
                reasoning="Analyzed demographic, content, source, temporal, and geographic bias",
            ),
            DecisionStep(
                step=3,
                description="Risk Classification",
                input="Bias detection results",
                output=f"Risk level: {result.risk_assessment.overall_risk_level.value}",
                confidence=0.88,
                reasoning="Applied EU AI Act risk classification framework",
            ),
            DecisionStep(
                step=4,
                description="Compliance Assessment",
                input="Risk classification",
                output=(
                    "EU AI Act compliant: "
                    f"{str(result.compliance.eu_ai_act_compliant).lower()}"
                ),
                confidence=0.92,
                reasoning="Evaluated against regulatory requirements",
            ),
        ]

    def feature_importance(self, result: AssessmentResult) -> List[FeatureWeight]:
        weights = []
        for feature, dimension, weight, fallback, explanation in FEATURES:
            score = result.bias_detection.metric_for(dimension).score
            weights.append(FeatureWeight(
                feature=feature,
                weight=weight,
                impact=FeatureImpact.POSITIVE if score > DETECTION_SCORE else fallback,
                explanation=explanation,
            ))
        return weights

    def bias_factors(self, result: AssessmentResult) -> List[BiasExplanation]:
        factors = []
        for dimension, metric in result.bias_detection.items():
            detected = metric.score < DETECTION_SCORE
            factors.append(BiasExplanation(
                bias_type=dimension,
                detected=detected,
                severity=severity_for_score(metric.score),
                score=metric.score,
                explanation=EXPLANATION_TEMPLATES[dimension].format(
                    score=_format_score(metric.score)
                ),
                mitigation_applied=(
                    "Bias mitigation strategies recommended" if detected else None
                ),
            ))
        return factors

    def overall_explanation(self, result: AssessmentResult) -> str:
        risk_level = result.risk_assessment.overall_risk_level.value
        average = round(result.bias_detection.average_score)
        eu_clause = (
            "The system meets" if result.compliance.eu_ai_act_compliant
            else "The system does not meet"
        )
        gdpr_clause = (
            "GDPR requirements are satisfied." if result.compliance.gdpr_compliant
            else "GDPR compliance is at risk."
        )
        return (
            f"This AI system has been assessed as {risk_level} risk with "
            f"{average}% overall bias mitigation score. "
            f"{eu_clause} EU AI Act compliance requirements. "
            f"{gdpr_clause} "
            "Assessment includes comprehensive analysis of demographic, content, "
            "source, temporal, and geographic bias factors."
        )

    def generate(self, result: AssessmentResult) -> ExplainableReport:
        """
        Generate the explainable report for an assessment.

        Args:
            result: A completed assessment

        Returns:
            ExplainableReport with decision path, features and narrative
        """
        started = time.perf_counter()

        decision_path = self.decision_path(result)
        feature_importance = self.feature_importance(result)
        confidence_factors = [
            ConfidenceFactor(factor=name, contribution=weight, description=description)
            for name, weight, description in CONFIDENCE_FACTORS
        ]
        bias_factors = self.bias_factors(result)
        overall = self.overall_explanation(result)

        elapsed_ms = (time.perf_counter() - started) * 1000

        logger.debug(
            "explainable_report_generated",
            assessment_id=result.assessment_id,
            detected=sum(1 for f in bias_factors if f.detected),
        )

        return ExplainableReport(
            assessment_id=result.assessment_id,
            decision_path=decision_path,
            feature_importance=feature_importance,
            confidence_factors=confidence_factors,
            bias_factors=bias_factors,
            overall_explanation=overall,
            technical_details=TechnicalDetails(
                model_version=result.version,
                data_quality_score=result.data_quality.representativeness,
                processing_time_ms=elapsed_ms,
            ),
        )
