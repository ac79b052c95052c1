"""
FAIRWATCH Bias Governance.

Periodic fairness audit of an upstream credibility scoring system.

This module provides:
- Data quality assessment (representativeness, completeness, relevance)
- Bias detection across demographic, content type, source, temporal
  and geographic dimensions
- EU AI Act risk classification and GDPR compliance evaluation
- Mitigation recommendations and explainability reports
- Subpopulation fairness analysis and real-time drift alerts
"""

from fairwatch.governance.schemas import (
    AIRiskLevel,
    AlertLevel,
    AssessmentResult,
    AssessmentSummary,
    BiasAlertResult,
    BiasDetectionResult,
    BiasDimension,
    BiasIndicator,
    BiasMetric,
    BiasSeverity,
    DataSample,
    Demographics,
    ExplainableReport,
    RealtimeScore,
    SubpopulationAnalysis,
)

from fairwatch.governance.data_quality import DataQualityAssessor
from fairwatch.governance.bias_detection import BiasDetector
from fairwatch.governance.drift import DriftAnalysis, DriftDetector
from fairwatch.governance.risk import RiskClassifier
from fairwatch.governance.compliance import ComplianceEvaluator
from fairwatch.governance.mitigation import MitigationAdvisor
from fairwatch.governance.explainability import ExplainabilityReporter
from fairwatch.governance.subpopulation import SubpopulationAnalyzer
from fairwatch.governance.monitoring import RealtimeMonitor
from fairwatch.governance.engine import BiasAssessmentEngine


__all__ = [
    # Schemas
    "AIRiskLevel",
    "AlertLevel",
    "AssessmentResult",
    "AssessmentSummary",
    "BiasAlertResult",
    "BiasDetectionResult",
    "BiasDimension",
    "BiasIndicator",
    "BiasMetric",
    "BiasSeverity",
    "DataSample",
    "Demographics",
    "ExplainableReport",
    "RealtimeScore",
    "SubpopulationAnalysis",
    # Components
    "DataQualityAssessor",
    "BiasDetector",
    "DriftAnalysis",
    "DriftDetector",
    "RiskClassifier",
    "ComplianceEvaluator",
    "MitigationAdvisor",
    "ExplainabilityReporter",
    "SubpopulationAnalyzer",
    "RealtimeMonitor",
    "BiasAssessmentEngine",
]
