"""
Compliance Evaluation.

Derives EU AI Act and GDPR compliance flags from the risk assessment:
- Unacceptable risk is the only tier that breaks EU AI Act compliance
- High risk with fundamental-rights impact adds oversight obligations
- Potential discrimination or rights impact breaks GDPR compliance
- An assessment older than the interval plus grace period is overdue
"""

from datetime import datetime, timedelta
from typing import Optional, List

import structlog

from fairwatch.core.config import Settings, get_settings
from fairwatch.governance.schemas import (
    AIRiskLevel,
    AssessmentSummary,
    ComplianceStatus,
    RiskAssessment,
)

logger = structlog.get_logger(__name__)


class ComplianceEvaluator:
    """Evaluates regulatory compliance for one assessment run."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def is_overdue(self, previous: Optional[AssessmentSummary], now: datetime) -> bool:
        """True when the previous assessment is older than interval + grace."""
        if previous is None:
            return False
        allowed = timedelta(
            days=self.settings.assessment_interval_days
            + self.settings.assessment_grace_period_days
        )
        return now - previous.timestamp > allowed

    def evaluate(
        self,
        risk: RiskAssessment,
        previous: Optional[AssessmentSummary],
        now: datetime,
    ) -> ComplianceStatus:
        issues: List[str] = []
        recommendations: List[str] = []
        eu_ai_act_compliant = True

        if risk.overall_risk_level == AIRiskLevel.UNACCEPTABLE:
            eu_ai_act_compliant = False
            issues.append("AI system classified as unacceptable risk under EU AI Act")
            recommendations.append("Immediate system review and bias mitigation required")

        if (
            risk.overall_risk_level == AIRiskLevel.HIGH
            and risk.impact_on_fundamental_rights
        ):
            issues.append("High-risk AI system may impact fundamental rights")
            recommendations.append("Implement human oversight mechanisms")
            recommendations.append("Enhanced transparency and explainability required")

        if risk.potential_discrimination:
            issues.append("Potential discrimination detected in AI outputs")
            recommendations.append("Implement bias mitigation measures immediately")

        gdpr_compliant = not (
            risk.impact_on_fundamental_rights or risk.potential_discrimination
        )
        if not gdpr_compliant:
            issues.append("GDPR compliance at risk due to bias issues")
            recommendations.append("Review data processing lawfulness under GDPR")

        if self.is_overdue(previous, now):
            issues.append("Bias assessment overdue per EU AI Act requirements")
            recommendations.append("Maintain monthly bias assessment schedule")

        if issues:
            logger.info(
                "compliance_issues_found",
                eu_ai_act_compliant=eu_ai_act_compliant,
                gdpr_compliant=gdpr_compliant,
                issue_count=len(issues),
            )

        return ComplianceStatus(
            eu_ai_act_compliant=eu_ai_act_compliant,
            gdpr_compliant=gdpr_compliant,
            issues=issues,
            recommendations=recommendations,
        )
