"""
Metrics Module.

Prometheus metrics for the bias assessment engine:
- Assessment runs by risk level, failures by reason
- Run latency
- Latest per-dimension bias scores
- Real-time drift alerts
- Persistence failures
"""

from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    CollectorRegistry,
    generate_latest,
)


# ============================================================================
# REGISTRY
# ============================================================================

# Dedicated registry so several engines in one process never collide
REGISTRY = CollectorRegistry(auto_describe=True)


# ============================================================================
# ASSESSMENT METRICS
# ============================================================================


class AssessmentMetrics:
    """Metrics emitted by full assessment runs."""

    assessments_completed = Counter(
        "fairwatch_assessments_completed_total",
        "Bias assessments completed",
        ["risk_level"],
        registry=REGISTRY,
    )

    assessments_failed = Counter(
        "fairwatch_assessments_failed_total",
        "Bias assessments that did not complete",
        ["reason"],
        registry=REGISTRY,
    )

    assessment_duration = Histogram(
        "fairwatch_assessment_duration_seconds",
        "Wall time of a full assessment run",
        buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10],
        registry=REGISTRY,
    )

    dimension_score = Gauge(
        "fairwatch_dimension_score",
        "Latest bias score per dimension (100 = unbiased)",
        ["dimension"],
        registry=REGISTRY,
    )

    insufficient_data_runs = Counter(
        "fairwatch_insufficient_data_runs_total",
        "Runs that proceeded with fewer samples than required",
        registry=REGISTRY,
    )


# ============================================================================
# MONITORING METRICS
# ============================================================================


class MonitoringMetrics:
    """Metrics emitted by real-time monitoring and storage."""

    realtime_alerts = Counter(
        "fairwatch_realtime_alerts_total",
        "Real-time drift checks by alert level",
        ["alert_level"],
        registry=REGISTRY,
    )

    persistence_failures = Counter(
        "fairwatch_persistence_failures_total",
        "Result store failures by operation",
        ["operation"],
        registry=REGISTRY,
    )


def export_metrics() -> bytes:
    """Render the registry in Prometheus text format."""
    return generate_latest(REGISTRY)
