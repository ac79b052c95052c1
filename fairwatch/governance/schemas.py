"""
Bias Assessment Schemas.

Pydantic models for every artifact of an assessment run:
- Input samples (frozen snapshots from the sample provider)
- Per-dimension bias metrics and indicators
- Data quality, mitigation, risk and compliance sections
- The aggregate AssessmentResult and its stored summary
- Subpopulation analysis, real-time alerts, and explainability reports

All scores and confidences live on a 0-100 scale and are clamped there.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, List, Dict, Any, Tuple
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


# ============================================================================
# ENUMS
# ============================================================================


class BiasDimension(str, Enum):
    """Dimensions along which fairness is measured."""
    DEMOGRAPHIC = "demographic"
    CONTENT_TYPE = "content_type"
    SOURCE = "source"
    TEMPORAL = "temporal"
    GEOGRAPHIC = "geographic"


class BiasSeverity(str, Enum):
    """Severity of a detected bias."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AIRiskLevel(str, Enum):
    """
    EU AI Act risk classification.

    Ordered: minimal < limited < high < unacceptable.
    """
    MINIMAL = "minimal"
    LIMITED = "limited"
    HIGH = "high"
    UNACCEPTABLE = "unacceptable"

    @property
    def rank(self) -> int:
        return _RISK_ORDER.index(self)

    def __lt__(self, other: "AIRiskLevel") -> bool:
        if not isinstance(other, AIRiskLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: "AIRiskLevel") -> bool:
        if not isinstance(other, AIRiskLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: "AIRiskLevel") -> bool:
        if not isinstance(other, AIRiskLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: "AIRiskLevel") -> bool:
        if not isinstance(other, AIRiskLevel):
            return NotImplemented
        return self.rank >= other.rank


_RISK_ORDER = [
    AIRiskLevel.MINIMAL,
    AIRiskLevel.LIMITED,
    AIRiskLevel.HIGH,
    AIRiskLevel.UNACCEPTABLE,
]


class AlertLevel(str, Enum):
    """Real-time monitoring alert level."""
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class FeatureImpact(str, Enum):
    """Polarity of a feature in the explainability table."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


def clamp_score(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp a score into [low, high]."""
    return max(low, min(high, value))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Naive datetimes are taken as UTC; aware ones are converted to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ============================================================================
# INPUT SAMPLES
# ============================================================================


class Demographics(BaseModel):
    """Audience attributes attached to a scored item, when known."""

    model_config = ConfigDict(frozen=True)

    region: Optional[str] = None
    language: Optional[str] = None
    device_type: Optional[str] = None


class DataSample(BaseModel):
    """One scored content item, as supplied by the sample provider."""

    model_config = ConfigDict(frozen=True)

    url: Optional[str] = None
    domain: Optional[str] = None
    content_type: Optional[str] = None
    credibility_score: float = Field(ge=0, le=100, description="Upstream credibility score")
    timestamp: datetime = Field(description="When the item was scored")
    demographics: Optional[Demographics] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @property
    def region(self) -> Optional[str]:
        return self.demographics.region if self.demographics else None

    @property
    def language(self) -> Optional[str]:
        return self.demographics.language if self.demographics else None


# ============================================================================
# BIAS METRICS
# ============================================================================


class BiasIndicator(BaseModel):
    """A computed value that crossed its threshold."""

    model_config = ConfigDict(frozen=True)

    dimension_type: BiasDimension
    metric: str = Field(description="Metric that triggered the indicator")
    value: float = Field(description="Observed metric value")
    threshold: float = Field(description="Threshold that was crossed")
    severity: BiasSeverity
    description: str


class BiasTrend(BaseModel):
    """Direction of a dimension's score relative to prior assessments."""

    model_config = ConfigDict(frozen=True)

    improving: bool = True
    direction: float = Field(default=0.0, ge=-1.0, le=1.0, description="Negative is getting worse")


class BiasMetric(BaseModel):
    """Fairness result for one dimension in one run."""

    model_config = ConfigDict(frozen=True)

    score: float = Field(ge=0, le=100, description="100 = completely unbiased")
    confidence: float = Field(ge=0, le=100, description="Confidence in the score")
    indicators: Tuple[BiasIndicator, ...] = ()
    trend: BiasTrend = Field(default_factory=BiasTrend)


class BiasDetectionResult(BaseModel):
    """The five per-dimension metrics of a run."""

    model_config = ConfigDict(frozen=True)

    demographic: BiasMetric
    content_type: BiasMetric
    source: BiasMetric
    temporal: BiasMetric
    geographic: BiasMetric

    def metric_for(self, dimension: BiasDimension) -> BiasMetric:
        return getattr(self, dimension.value)

    def items(self) -> List[Tuple[BiasDimension, BiasMetric]]:
        """Metrics in canonical dimension order."""
        return [(d, self.metric_for(d)) for d in BiasDimension]

    def scores(self) -> Dict[BiasDimension, float]:
        return {d: m.score for d, m in self.items()}

    @computed_field
    @property
    def average_score(self) -> float:
        """Mean of the five dimension scores."""
        values = [m.score for _, m in self.items()]
        return sum(values) / len(values)

    @computed_field
    @property
    def min_score(self) -> float:
        return min(m.score for _, m in self.items())


# ============================================================================
# ASSESSMENT SECTIONS
# ============================================================================


class DataQualityAssessment(BaseModel):
    """Representativeness, completeness, accuracy and relevance of the snapshot."""

    model_config = ConfigDict(frozen=True)

    representativeness: float = Field(ge=0, le=100)
    completeness: float = Field(ge=0, le=100)
    accuracy: float = Field(ge=0, le=100)
    relevance: float = Field(ge=0, le=100)
    bias_indicators: Tuple[BiasIndicator, ...] = ()


class MitigationMeasures(BaseModel):
    """Baseline measures in place and recommendations derived from scores."""

    model_config = ConfigDict(frozen=True)

    implemented: Tuple[str, ...] = ()
    recommended: Tuple[str, ...] = ()
    effectiveness: float = Field(ge=0, le=100)


class RiskAssessment(BaseModel):
    """EU AI Act risk classification of a run."""

    model_config = ConfigDict(frozen=True)

    overall_risk_level: AIRiskLevel
    impact_on_fundamental_rights: bool = False
    potential_discrimination: bool = False
    risk_factors: Tuple[str, ...] = ()


class ComplianceStatus(BaseModel):
    """Regulatory compliance flags with supporting issues."""

    model_config = ConfigDict(frozen=True)

    eu_ai_act_compliant: bool = True
    gdpr_compliant: bool = True
    issues: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()


# ============================================================================
# ASSESSMENT RESULT
# ============================================================================


class AssessmentResult(BaseModel):
    """
    Complete output of one assessment run.

    Immutable once produced; the next run supersedes it.
    """

    model_config = ConfigDict(frozen=True)

    assessment_id: str
    timestamp: datetime
    version: str
    sample_count: int = Field(ge=0)
    insufficient_data: bool = False

    data_quality: DataQualityAssessment
    bias_detection: BiasDetectionResult
    mitigation_measures: MitigationMeasures
    risk_assessment: RiskAssessment
    compliance: ComplianceStatus

    next_assessment_due: datetime
    valid_until: datetime

    @classmethod
    def due_after(cls, timestamp: datetime, interval_days: int) -> datetime:
        return timestamp + timedelta(days=interval_days)

    def summary(self) -> "AssessmentSummary":
        return AssessmentSummary(
            assessment_id=self.assessment_id,
            timestamp=self.timestamp,
            risk_level=self.risk_assessment.overall_risk_level,
            compliant=self.compliance.eu_ai_act_compliant,
            next_due=self.next_assessment_due,
        )


class AssessmentSummary(BaseModel):
    """Pointer to the latest stored assessment."""

    model_config = ConfigDict(frozen=True)

    assessment_id: str
    timestamp: datetime
    risk_level: AIRiskLevel
    compliant: bool
    next_due: datetime


# ============================================================================
# SUBPOPULATION ANALYSIS
# ============================================================================


class PopulationGroup(BaseModel):
    """A (region, language, content type) subpopulation."""

    group_id: str
    criteria: Dict[str, str]
    sample_size: int = Field(ge=0)
    average_score: float = Field(ge=0, le=100)
    confidence: float = Field(ge=0, le=1)
    representativeness: float = Field(ge=0, le=100)


class DisparityMetric(BaseModel):
    """Spread between best- and worst-scoring subpopulations."""

    metric_name: str
    value: float
    threshold: float
    groups: List[str]
    severity: BiasSeverity
    description: str

    @property
    def excess(self) -> float:
        """Amount by which the value exceeds its threshold (0 when it does not)."""
        return max(0.0, self.value - self.threshold)


class SubpopulationIssue(BaseModel):
    """A high-severity disparity with the groups it affects."""

    issue_type: str
    affected_groups: List[str]
    magnitude: float
    description: str
    recommended_action: str


class SubpopulationAnalysis(BaseModel):
    """Fairness across fine-grained subpopulations."""

    population_groups: List[PopulationGroup] = Field(default_factory=list)
    disparity_metrics: List[DisparityMetric] = Field(default_factory=list)
    overall_fairness: float = Field(ge=0, le=100)
    recommendations: List[str] = Field(default_factory=list)
    detected_issues: List[SubpopulationIssue] = Field(default_factory=list)


# ============================================================================
# REAL-TIME MONITORING
# ============================================================================


class RealtimeScore(BaseModel):
    """A single new output of the upstream scoring system."""

    score: float = Field(ge=0, le=100)
    confidence: float = Field(ge=0, le=1)
    timestamp: datetime = Field(default_factory=utcnow)
    source: Optional[str] = None
    region: Optional[str] = None
    language: Optional[str] = None
    content_type: Optional[str] = None

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    def as_sample(self) -> DataSample:
        """View this score as a one-item sample for subpopulation analysis."""
        demographics = None
        if self.region or self.language:
            demographics = Demographics(region=self.region, language=self.language)
        return DataSample(
            url="current",
            domain="current",
            content_type=self.content_type or "current",
            credibility_score=self.score,
            timestamp=self.timestamp,
            demographics=demographics,
            metadata={"source": self.source} if self.source else {},
        )


class BiasAlertResult(BaseModel):
    """Outcome of a real-time drift check."""

    alert_level: AlertLevel
    message: str
    drift_score: Optional[float] = None
    score_drift: Optional[float] = None
    confidence_drift: Optional[float] = None
    subpopulation_issues: List[str] = Field(default_factory=list)
    recommended_actions: List[str] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=utcnow)


# ============================================================================
# EXPLAINABILITY
# ============================================================================


class DecisionStep(BaseModel):
    """One step of the assessment decision path."""

    step: int
    description: str
    input: str
    output: str
    confidence: float = Field(ge=0, le=1)
    reasoning: str


class FeatureWeight(BaseModel):
    """Relative influence of a named feature on the assessment."""

    feature: str
    weight: float = Field(ge=0, le=1)
    impact: FeatureImpact
    explanation: str


class ConfidenceFactor(BaseModel):
    """Contribution of a factor to overall confidence in the assessment."""

    factor: str
    contribution: float = Field(ge=0, le=1)
    description: str


class BiasExplanation(BaseModel):
    """Plain-language explanation of one dimension's result."""

    bias_type: BiasDimension
    detected: bool
    severity: BiasSeverity
    score: float = Field(ge=0, le=100)
    explanation: str
    mitigation_applied: Optional[str] = None


class TechnicalDetails(BaseModel):
    model_version: str
    data_quality_score: float
    processing_time_ms: float = Field(ge=0)


class ExplainableReport(BaseModel):
    """Human-readable account of how an assessment reached its conclusions."""

    assessment_id: str
    decision_path: List[DecisionStep]
    feature_importance: List[FeatureWeight]
    confidence_factors: List[ConfidenceFactor]
    bias_factors: List[BiasExplanation]
    overall_explanation: str
    technical_details: TechnicalDetails
