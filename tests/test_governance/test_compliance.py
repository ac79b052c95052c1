"""Tests for EU AI Act and GDPR compliance evaluation."""

import pytest
from datetime import datetime, timedelta, timezone

from fairwatch.governance.compliance import ComplianceEvaluator
from fairwatch.governance.schemas import AIRiskLevel, AssessmentSummary, RiskAssessment


NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def evaluator(settings) -> ComplianceEvaluator:
    return ComplianceEvaluator(settings)


def summary_at(timestamp: datetime) -> AssessmentSummary:
    return AssessmentSummary(
        assessment_id="bias_prev",
        timestamp=timestamp,
        risk_level=AIRiskLevel.MINIMAL,
        compliant=True,
        next_due=timestamp + timedelta(days=30),
    )


class TestComplianceEvaluator:
    """Tests for compliance flags and issues."""

    def test_minimal_risk_is_fully_compliant(self, evaluator):
        status = evaluator.evaluate(
            RiskAssessment(overall_risk_level=AIRiskLevel.MINIMAL), None, NOW
        )
        assert status.eu_ai_act_compliant is True
        assert status.gdpr_compliant is True
        assert status.issues == ()
        assert status.recommendations == ()

    def test_unacceptable_risk_breaks_eu_ai_act(self, evaluator):
        status = evaluator.evaluate(
            RiskAssessment(
                overall_risk_level=AIRiskLevel.UNACCEPTABLE,
                impact_on_fundamental_rights=True,
            ),
            None,
            NOW,
        )
        assert status.eu_ai_act_compliant is False
        assert status.gdpr_compliant is False
        assert "AI system classified as unacceptable risk under EU AI Act" in status.issues
        assert "Immediate system review and bias mitigation required" in status.recommendations

    def test_high_risk_with_rights_impact_stays_compliant(self, evaluator):
        status = evaluator.evaluate(
            RiskAssessment(
                overall_risk_level=AIRiskLevel.HIGH,
                impact_on_fundamental_rights=True,
            ),
            None,
            NOW,
        )
        assert status.eu_ai_act_compliant is True
        assert "High-risk AI system may impact fundamental rights" in status.issues
        assert "Implement human oversight mechanisms" in status.recommendations
        assert "Enhanced transparency and explainability required" in status.recommendations

    def test_discrimination_breaks_gdpr(self, evaluator):
        status = evaluator.evaluate(
            RiskAssessment(
                overall_risk_level=AIRiskLevel.LIMITED,
                potential_discrimination=True,
            ),
            None,
            NOW,
        )
        assert status.eu_ai_act_compliant is True
        assert status.gdpr_compliant is False
        assert status.issues == (
            "Potential discrimination detected in AI outputs",
            "GDPR compliance at risk due to bias issues",
        )


class TestOverdue:
    """Tests for the overdue check (interval 30 days + 5 days grace)."""

    def test_no_previous_assessment_is_not_overdue(self, evaluator):
        assert evaluator.is_overdue(None, NOW) is False

    def test_within_grace_period(self, evaluator):
        assert evaluator.is_overdue(summary_at(NOW - timedelta(days=34)), NOW) is False

    def test_past_grace_period(self, evaluator):
        previous = summary_at(NOW - timedelta(days=36))
        status = evaluator.evaluate(
            RiskAssessment(overall_risk_level=AIRiskLevel.MINIMAL), previous, NOW
        )
        assert status.issues == ("Bias assessment overdue per EU AI Act requirements",)
        assert status.recommendations == ("Maintain monthly bias assessment schedule",)
        assert status.eu_ai_act_compliant is True
