"""
Bias Assessment Engine.

Orchestrates a full assessment run:
1. Fetch a snapshot of recent samples from the sample provider
2. Score data quality and the five bias dimensions concurrently
3. Classify risk, derive mitigation measures and compliance status
4. Persist the immutable result and move the latest pointer

Only one run may be in flight at a time; a second concurrent call is
rejected with ConcurrencyError rather than queued. Persistence is a
separate step: if it fails, the computed result travels on the
PersistenceError so the host can retry with persist_result().

The periodic trigger lives in the host, which polls is_assessment_due().
"""

import asyncio
import json
import time
import uuid
import warnings
from datetime import datetime
from typing import Optional, List, Dict, Sequence, Callable

import structlog

from fairwatch.core.config import Settings, get_settings
from fairwatch.core.exceptions import (
    ConcurrencyError,
    InsufficientDataWarning,
    PersistenceError,
    SampleProviderError,
)
from fairwatch.core.metrics import AssessmentMetrics, MonitoringMetrics
from fairwatch.governance.bias_detection import BiasDetector
from fairwatch.governance.compliance import ComplianceEvaluator
from fairwatch.governance.data_quality import DataQualityAssessor
from fairwatch.governance.explainability import ExplainabilityReporter
from fairwatch.governance.mitigation import MitigationAdvisor
from fairwatch.governance.monitoring import RealtimeMonitor
from fairwatch.governance.risk import RiskClassifier
from fairwatch.governance.schemas import (
    AssessmentResult,
    AssessmentSummary,
    BiasAlertResult,
    BiasDetectionResult,
    BiasDimension,
    DataSample,
    ExplainableReport,
    RealtimeScore,
    SubpopulationAnalysis,
    ensure_utc,
    utcnow,
)
from fairwatch.governance.subpopulation import SubpopulationAnalyzer
from fairwatch.storage.base import ResultStore, SampleProvider

logger = structlog.get_logger(__name__)


def new_assessment_id(now: datetime) -> str:
    """Unique id of the form bias_<epoch_ms>_<random>."""
    return f"bias_{int(now.timestamp() * 1000)}_{uuid.uuid4().hex[:9]}"


class BiasAssessmentEngine:
    """
    Periodic fairness audit of upstream credibility scores.

    All collaborators are injected; the engine holds no global state.
    """

    def __init__(
        self,
        sample_provider: SampleProvider,
        result_store: ResultStore,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the engine.

        Args:
            sample_provider: Source of recent scored samples
            result_store: Where results and the latest pointer are kept
            settings: Engine settings; the cached global settings when omitted
            clock: Returns the current UTC time; injectable for tests
        """
        self.sample_provider = sample_provider
        self.result_store = result_store
        self.settings = settings or get_settings()
        self.clock = clock or utcnow

        self.quality_assessor = DataQualityAssessor(self.settings)
        self.bias_detector = BiasDetector(self.settings)
        self.risk_classifier = RiskClassifier()
        self.mitigation_advisor = MitigationAdvisor()
        self.compliance_evaluator = ComplianceEvaluator(self.settings)
        self.reporter = ExplainabilityReporter(self.settings)
        self.subpopulation_analyzer = SubpopulationAnalyzer(self.settings)
        self.monitor = RealtimeMonitor(
            result_store,
            settings=self.settings,
            subpopulation_analyzer=self.subpopulation_analyzer,
            clock=self.clock,
        )

        self._assessment_in_progress = False

    @property
    def assessment_in_progress(self) -> bool:
        return self._assessment_in_progress

    # =========================================================================
    # FULL ASSESSMENT
    # =========================================================================

    async def run_assessment_now(self) -> AssessmentResult:
        """
        Run a complete bias assessment and persist it.

        Returns:
            The stored AssessmentResult

        Raises:
            ConcurrencyError: A run is already in flight
            SampleProviderError: Samples could not be fetched
            PersistenceError: The result was computed but not stored;
                ``error.result`` holds it
        """
        if self._assessment_in_progress:
            logger.warning("assessment_rejected", reason="already_in_progress")
            raise ConcurrencyError()

        self._assessment_in_progress = True
        started = time.perf_counter()
        try:
            result = await self._compute()
            await self.persist_result(result)
            AssessmentMetrics.assessment_duration.observe(time.perf_counter() - started)
            return result
        finally:
            self._assessment_in_progress = False

    async def _compute(self) -> AssessmentResult:
        now = ensure_utc(self.clock())
        assessment_id = new_assessment_id(now)

        logger.info("assessment_started", assessment_id=assessment_id)

        snapshot = tuple(await self._fetch_samples())
        insufficient = len(snapshot) < self.settings.min_samples_for_assessment
        if insufficient:
            self._warn_insufficient(assessment_id, len(snapshot))

        history = await self._load_history()
        previous = await self._load_previous_summary()
        prior_scores: Dict[BiasDimension, List[float]] = {
            dimension: [r.bias_detection.metric_for(dimension).score for r in history]
            for dimension in BiasDimension
        }

        dimensions = list(BiasDimension)
        data_quality, *metrics = await asyncio.gather(
            asyncio.to_thread(self.quality_assessor.assess, snapshot, now),
            *(
                asyncio.to_thread(
                    self.bias_detector.detect, dimension, snapshot, prior_scores[dimension]
                )
                for dimension in dimensions
            ),
        )
        bias = BiasDetectionResult(
            **{dimension.value: metric for dimension, metric in zip(dimensions, metrics)}
        )

        risk = self.risk_classifier.classify(bias)
        mitigation = self.mitigation_advisor.advise(bias)
        compliance = self.compliance_evaluator.evaluate(risk, previous, now)
        due = AssessmentResult.due_after(now, self.settings.assessment_interval_days)

        result = AssessmentResult(
            assessment_id=assessment_id,
            timestamp=now,
            version=self.settings.assessment_version,
            sample_count=len(snapshot),
            insufficient_data=insufficient,
            data_quality=data_quality,
            bias_detection=bias,
            mitigation_measures=mitigation,
            risk_assessment=risk,
            compliance=compliance,
            next_assessment_due=due,
            valid_until=due,
        )

        AssessmentMetrics.assessments_completed.labels(
            risk_level=risk.overall_risk_level.value,
        ).inc()
        for dimension, metric in bias.items():
            AssessmentMetrics.dimension_score.labels(dimension=dimension.value).set(metric.score)

        logger.info(
            "assessment_completed",
            assessment_id=assessment_id,
            sample_count=len(snapshot),
            risk_level=risk.overall_risk_level.value,
            eu_ai_act_compliant=compliance.eu_ai_act_compliant,
            gdpr_compliant=compliance.gdpr_compliant,
            average_score=round(bias.average_score, 2),
        )

        return result

    async def _fetch_samples(self) -> List[DataSample]:
        try:
            return await self.sample_provider.fetch_recent_samples(
                self.settings.sample_fetch_limit
            )
        except SampleProviderError:
            AssessmentMetrics.assessments_failed.labels(reason="sample_fetch").inc()
            raise
        except Exception as e:
            AssessmentMetrics.assessments_failed.labels(reason="sample_fetch").inc()
            logger.error("sample_fetch_failed", error=str(e), error_type=type(e).__name__)
            raise SampleProviderError(
                "Failed to fetch samples for bias assessment",
                details={"error": str(e)},
            ) from e

    def _warn_insufficient(self, assessment_id: str, sample_count: int) -> None:
        required = self.settings.min_samples_for_assessment
        AssessmentMetrics.insufficient_data_runs.inc()
        logger.warning(
            "insufficient_data",
            assessment_id=assessment_id,
            sample_count=sample_count,
            required=required,
        )
        warnings.warn(InsufficientDataWarning(sample_count, required), stacklevel=3)

    async def _load_history(self) -> List[AssessmentResult]:
        """Prior results for trends; an unreadable history means no trend."""
        try:
            return await self.result_store.list_recent(self.settings.trend_window)
        except Exception as e:
            logger.warning("assessment_history_unavailable", error=str(e))
            return []

    async def _load_previous_summary(self) -> Optional[AssessmentSummary]:
        """Previous summary for the overdue check; unreadable means none."""
        try:
            return await self.result_store.get_latest_summary()
        except Exception as e:
            logger.warning("previous_assessment_unavailable", error=str(e))
            return None

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    async def persist_result(self, result: AssessmentResult) -> None:
        """
        Store a computed result.

        Safe to call again with ``error.result`` after a PersistenceError.
        """
        try:
            await self.result_store.store(result.assessment_id, result)
        except Exception as e:
            operation = getattr(e, "operation", "store")
            MonitoringMetrics.persistence_failures.labels(operation=operation).inc()
            AssessmentMetrics.assessments_failed.labels(reason="persistence").inc()
            logger.error(
                "assessment_persist_failed",
                assessment_id=result.assessment_id,
                operation=operation,
                error=str(e),
            )
            raise PersistenceError(
                f"Assessment {result.assessment_id} computed but not stored",
                operation=operation,
                result=result,
                details={"error": str(e)},
            ) from e

    # =========================================================================
    # HOST ENTRY POINTS
    # =========================================================================

    async def is_assessment_due(self) -> bool:
        """True when nothing is stored or the latest result has expired."""
        summary = await self.result_store.get_latest_summary()
        if summary is None:
            return True
        return ensure_utc(self.clock()) >= summary.next_due

    async def get_latest_assessment(self) -> Optional[AssessmentResult]:
        summary = await self.result_store.get_latest_summary()
        if summary is None:
            return None
        return await self.result_store.get_by_timestamp(summary.timestamp)

    def generate_explainable_report(self, result: AssessmentResult) -> ExplainableReport:
        return self.reporter.generate(result)

    async def check_realtime_drift(self, score: RealtimeScore) -> BiasAlertResult:
        return await self.monitor.check(score)

    def perform_subpopulation_analysis(
        self,
        samples: Sequence[DataSample],
    ) -> SubpopulationAnalysis:
        return self.subpopulation_analyzer.analyze(samples)

    async def generate_assessment_report(self) -> str:
        """
        JSON compliance report of the latest assessment.

        Returns a plain message when no assessment has been stored yet.
        """
        latest = await self.get_latest_assessment()
        if latest is None:
            return "No bias assessment available. Run assessment first."

        report = {
            "title": "AI Bias Assessment Report - EU AI Act Compliance",
            "assessment_id": latest.assessment_id,
            "timestamp": latest.timestamp.isoformat(),
            "summary": {
                "risk_level": latest.risk_assessment.overall_risk_level.value,
                "eu_ai_act_compliant": latest.compliance.eu_ai_act_compliant,
                "gdpr_compliant": latest.compliance.gdpr_compliant,
                "next_assessment_due": latest.next_assessment_due.isoformat(),
            },
            "data_quality": latest.data_quality.model_dump(mode="json"),
            "bias_analysis": latest.bias_detection.model_dump(mode="json"),
            "risk_assessment": latest.risk_assessment.model_dump(mode="json"),
            "compliance": latest.compliance.model_dump(mode="json"),
            "recommendations": list(latest.mitigation_measures.recommended),
        }
        return json.dumps(report, indent=2)
