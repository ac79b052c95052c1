"""
Pytest Configuration and Fixtures.

Provides reusable fixtures for testing FAIRWATCH components:
- Deterministic settings and a controllable clock
- Sample and assessment result factories
- In-memory sample provider, result store and engine
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, List

import pytest

from fairwatch.core.config import Settings
from fairwatch.governance.engine import BiasAssessmentEngine
from fairwatch.governance.schemas import (
    AIRiskLevel,
    AssessmentResult,
    BiasDetectionResult,
    BiasDimension,
    BiasMetric,
    ComplianceStatus,
    DataQualityAssessment,
    DataSample,
    Demographics,
    MitigationMeasures,
    RiskAssessment,
)
from fairwatch.storage.memory import InMemorySampleProvider, KeyValueResultStore


NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# CLOCK & SETTINGS
# ============================================================================


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FixedClock:
    """Clock pinned to NOW."""
    return FixedClock()


@pytest.fixture
def settings() -> Settings:
    """Default settings, ignoring any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def inclusive_settings() -> Settings:
    """Settings treating value == threshold as a violation."""
    return Settings(_env_file=None, threshold_inclusive=True)


# ============================================================================
# FACTORIES
# ============================================================================


def make_sample(
    score: float,
    *,
    days_ago: float = 0,
    domain: Optional[str] = "news.example",
    content_type: Optional[str] = "article",
    region: Optional[str] = "eu",
    language: Optional[str] = "en",
    url: Optional[str] = "https://news.example/item",
    now: datetime = NOW,
) -> DataSample:
    demographics = None
    if region is not None or language is not None:
        demographics = Demographics(region=region, language=language)
    return DataSample(
        url=url,
        domain=domain,
        content_type=content_type,
        credibility_score=score,
        timestamp=now - timedelta(days=days_ago),
        demographics=demographics,
    )


def balanced_samples(count: int = 120, score: float = 75.0) -> List[DataSample]:
    """Samples spread evenly over two values of every grouping field."""
    samples = []
    for i in range(count):
        samples.append(make_sample(
            score,
            days_ago=i % 6,
            domain=("alpha.example", "beta.example")[i % 2],
            content_type=("article", "video")[(i // 2) % 2],
            region=("eu", "us")[(i // 4) % 2],
            language=("en", "de")[(i // 8) % 2],
            url=f"https://example.org/{i}",
        ))
    return samples


def make_metric(score: float) -> BiasMetric:
    return BiasMetric(score=score, confidence=100.0)


def make_bias(
    default: float = 100.0,
    **scores: float,
) -> BiasDetectionResult:
    """BiasDetectionResult with every dimension at ``default`` unless overridden."""
    return BiasDetectionResult(**{
        d.value: make_metric(scores.get(d.value, default)) for d in BiasDimension
    })


def make_result(
    default: float = 100.0,
    *,
    timestamp: datetime = NOW,
    assessment_id: Optional[str] = None,
    risk_level: AIRiskLevel = AIRiskLevel.MINIMAL,
    eu_ai_act_compliant: bool = True,
    gdpr_compliant: bool = True,
    scores: Optional[Dict[str, float]] = None,
) -> AssessmentResult:
    """A stored-shape AssessmentResult with chosen dimension scores."""
    due = AssessmentResult.due_after(timestamp, 30)
    return AssessmentResult(
        assessment_id=assessment_id or f"bias_{int(timestamp.timestamp() * 1000)}_test",
        timestamp=timestamp,
        version="2025.1",
        sample_count=120,
        data_quality=DataQualityAssessment(
            representativeness=90.0,
            completeness=100.0,
            accuracy=85.0,
            relevance=100.0,
        ),
        bias_detection=make_bias(default, **(scores or {})),
        mitigation_measures=MitigationMeasures(effectiveness=default),
        risk_assessment=RiskAssessment(overall_risk_level=risk_level),
        compliance=ComplianceStatus(
            eu_ai_act_compliant=eu_ai_act_compliant,
            gdpr_compliant=gdpr_compliant,
        ),
        next_assessment_due=due,
        valid_until=due,
    )


@pytest.fixture
def sample_factory():
    """Factory for single DataSample objects."""
    return make_sample


@pytest.fixture
def balanced_factory():
    """Factory for balanced, bias-free sample sets."""
    return balanced_samples


@pytest.fixture
def result_factory():
    """Factory for AssessmentResult objects."""
    return make_result


@pytest.fixture
def bias_factory():
    """Factory for BiasDetectionResult objects."""
    return make_bias


# ============================================================================
# STORAGE & ENGINE
# ============================================================================


@pytest.fixture
def result_store() -> KeyValueResultStore:
    """Unencrypted result store over a plain dict."""
    return KeyValueResultStore()


@pytest.fixture
def sample_provider() -> InMemorySampleProvider:
    """Provider holding a balanced, bias-free sample set."""
    return InMemorySampleProvider(balanced_samples())


@pytest.fixture
def engine(sample_provider, result_store, settings, clock) -> BiasAssessmentEngine:
    """Engine wired to in-memory collaborators and the fixed clock."""
    return BiasAssessmentEngine(
        sample_provider=sample_provider,
        result_store=result_store,
        settings=settings,
        clock=clock,
    )
