"""
Real-time Bias Monitoring.

Compares each new upstream score against the last persisted assessment.
The monitor only reads the stored baseline; it never waits on or touches
an assessment run in progress.
"""

from datetime import datetime
from typing import Optional, List, Callable

import structlog

from fairwatch.core.config import Settings, get_settings
from fairwatch.core.metrics import MonitoringMetrics
from fairwatch.governance.schemas import (
    AlertLevel,
    AssessmentResult,
    BiasAlertResult,
    RealtimeScore,
    utcnow,
)
from fairwatch.governance.subpopulation import SubpopulationAnalyzer
from fairwatch.storage.base import ResultStore

logger = structlog.get_logger(__name__)


class RealtimeMonitor:
    """Raises drift alerts for individual scores against a stored baseline."""

    def __init__(
        self,
        result_store: ResultStore,
        settings: Optional[Settings] = None,
        subpopulation_analyzer: Optional[SubpopulationAnalyzer] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.result_store = result_store
        self.settings = settings or get_settings()
        self.subpopulation = subpopulation_analyzer or SubpopulationAnalyzer(self.settings)
        self.clock = clock or utcnow

    async def load_baseline(self) -> Optional[AssessmentResult]:
        summary = await self.result_store.get_latest_summary()
        if summary is None:
            return None
        return await self.result_store.get_by_timestamp(summary.timestamp)

    def drift_components(self, score: RealtimeScore, baseline: AssessmentResult) -> tuple:
        """Return (score_drift, confidence_drift, drift_score)."""
        baseline_avg = baseline.bias_detection.average_score
        score_drift = abs(score.score - baseline_avg) / 100
        confidence_drift = abs(score.confidence - self.settings.realtime_baseline_confidence)
        return score_drift, confidence_drift, (score_drift + confidence_drift) / 2

    async def check(self, score: RealtimeScore) -> BiasAlertResult:
        """
        Check one score for bias drift.

        Args:
            score: A new upstream output

        Returns:
            BiasAlertResult; loading failures yield a warning, never an exception
        """
        try:
            baseline = await self.load_baseline()
        except Exception as e:
            logger.error(
                "realtime_baseline_load_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return self._record(BiasAlertResult(
                alert_level=AlertLevel.WARNING,
                message="Real-time monitoring failed - manual review recommended",
                recommended_actions=["Schedule bias assessment"],
                timestamp=self.clock(),
            ))

        if baseline is None:
            return self._record(BiasAlertResult(
                alert_level=AlertLevel.INFO,
                message="No baseline assessment for comparison",
                timestamp=self.clock(),
            ))

        score_drift, confidence_drift, drift_score = self.drift_components(score, baseline)

        alert_level = AlertLevel.INFO
        message = "Real-time monitoring: No significant bias detected"
        recommended_actions: List[str] = []
        subpopulation_issues: List[str] = []

        if self.settings.exceeds(drift_score, self.settings.realtime_critical_threshold):
            alert_level = AlertLevel.CRITICAL
            message = "Critical bias drift detected in AI outputs"
            recommended_actions.extend([
                "Immediate model retraining required",
                "Pause automated processing",
            ])
        elif self.settings.exceeds(drift_score, self.settings.realtime_warning_threshold):
            alert_level = AlertLevel.WARNING
            message = "Moderate bias drift detected"
            recommended_actions.extend([
                "Schedule bias assessment",
                "Review recent changes",
            ])

        analysis = self.subpopulation.analyze([score.as_sample()])
        if analysis.overall_fairness < self.settings.realtime_fairness_floor:
            if alert_level == AlertLevel.INFO:
                alert_level = AlertLevel.WARNING
            subpopulation_issues.extend(i.description for i in analysis.detected_issues)
            recommended_actions.extend(analysis.recommendations)

        logger.info(
            "realtime_check_completed",
            drift_score=round(drift_score, 4),
            alert_level=alert_level.value,
            fairness_score=analysis.overall_fairness,
            baseline_id=baseline.assessment_id,
        )

        return self._record(BiasAlertResult(
            alert_level=alert_level,
            message=message,
            drift_score=drift_score,
            score_drift=score_drift,
            confidence_drift=confidence_drift,
            subpopulation_issues=subpopulation_issues,
            recommended_actions=recommended_actions,
            timestamp=self.clock(),
        ))

    def _record(self, alert: BiasAlertResult) -> BiasAlertResult:
        MonitoringMetrics.realtime_alerts.labels(alert_level=alert.alert_level.value).inc()
        return alert
