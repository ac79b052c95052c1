"""
Configuration Module.

Pydantic Settings v2, loaded from .env and environment variables.

Every constant the assessment engine uses is exposed here so hosts can
tune thresholds without code changes. Per-dimension policies can be
overridden with a JSON object in FAIRWATCH_DIMENSION_POLICIES.
"""

from typing import Dict
from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
import structlog

logger = structlog.get_logger(__name__)


class DimensionPolicy(BaseModel):
    """Disparity thresholds for one bias dimension."""

    threshold: float = Field(ge=0.0, le=1.0, description="Bias score that raises an indicator")
    high_severity_cutoff: float = Field(
        ge=0.0,
        le=1.0,
        description="Bias score above which the indicator is high severity",
    )
    min_samples: int = Field(gt=0, description="Samples needed for full confidence")


def _default_dimension_policies() -> Dict[str, DimensionPolicy]:
    # Keyed by BiasDimension value
    return {
        "demographic": DimensionPolicy(
            threshold=0.15, high_severity_cutoff=0.30, min_samples=50,
        ),
        "content_type": DimensionPolicy(
            threshold=0.20, high_severity_cutoff=0.40, min_samples=30,
        ),
        "source": DimensionPolicy(
            threshold=0.25, high_severity_cutoff=0.50, min_samples=40,
        ),
        "temporal": DimensionPolicy(
            threshold=0.10, high_severity_cutoff=0.20, min_samples=100,
        ),
        "geographic": DimensionPolicy(
            threshold=0.18, high_severity_cutoff=0.35, min_samples=60,
        ),
    }


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ========================================================================
    # APPLICATION
    # ========================================================================

    app_name: str = "FAIRWATCH"
    environment: str = Field(default="development", alias="FAIRWATCH_ENVIRONMENT")
    assessment_version: str = Field(default="2025.1", alias="FAIRWATCH_ASSESSMENT_VERSION")

    # ========================================================================
    # SCHEDULE
    # ========================================================================

    assessment_interval_days: int = Field(
        default=30,
        ge=1,
        alias="FAIRWATCH_ASSESSMENT_INTERVAL_DAYS",
    )
    assessment_grace_period_days: int = Field(
        default=5,
        ge=0,
        alias="FAIRWATCH_ASSESSMENT_GRACE_DAYS",
    )

    # ========================================================================
    # SAMPLING
    # ========================================================================

    min_samples_for_assessment: int = Field(
        default=100,
        ge=1,
        alias="FAIRWATCH_MIN_SAMPLES",
    )
    sample_fetch_limit: int = Field(default=1000, ge=1, alias="FAIRWATCH_SAMPLE_LIMIT")
    relevance_window_days: int = Field(default=7, ge=1, alias="FAIRWATCH_RELEVANCE_WINDOW_DAYS")
    trend_window: int = Field(
        default=3,
        ge=1,
        alias="FAIRWATCH_TREND_WINDOW",
        description="Prior assessments consulted for per-dimension trends",
    )

    # ========================================================================
    # DATA QUALITY
    # ========================================================================

    accuracy_proxy: float = Field(
        default=85.0,
        ge=0.0,
        le=100.0,
        alias="FAIRWATCH_ACCURACY_PROXY",
        description="Placeholder accuracy until a ground-truth comparison exists",
    )
    representativeness_threshold: float = Field(default=70.0, alias="FAIRWATCH_REPRESENTATIVENESS_MIN")
    representativeness_high_cutoff: float = Field(default=50.0)
    completeness_threshold: float = Field(default=80.0, alias="FAIRWATCH_COMPLETENESS_MIN")
    completeness_high_cutoff: float = Field(default=60.0)

    # ========================================================================
    # BIAS DIMENSIONS
    # ========================================================================

    dimension_policies: Dict[str, DimensionPolicy] = Field(
        default_factory=_default_dimension_policies,
        alias="FAIRWATCH_DIMENSION_POLICIES",
    )
    threshold_inclusive: bool = Field(
        default=False,
        alias="FAIRWATCH_THRESHOLD_INCLUSIVE",
        description="Treat a value equal to its threshold as a violation",
    )

    # ========================================================================
    # SUBPOPULATIONS
    # ========================================================================

    subpopulation_disparity_threshold: float = Field(default=0.15, ge=0.0, le=1.0)
    subpopulation_critical_cutoff: float = Field(default=0.30, ge=0.0, le=1.0)
    subpopulation_canonical_groups: int = Field(
        default=10,
        ge=1,
        alias="FAIRWATCH_CANONICAL_GROUPS",
        description="Expected group count used to judge group representativeness",
    )
    subpopulation_full_confidence_size: int = Field(default=30, ge=1)
    subpopulation_deviation_points: float = Field(default=15.0, ge=0.0)

    # ========================================================================
    # REAL-TIME MONITORING
    # ========================================================================

    realtime_baseline_confidence: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        alias="FAIRWATCH_REALTIME_BASELINE_CONFIDENCE",
    )
    realtime_warning_threshold: float = Field(default=0.08, ge=0.0)
    realtime_critical_threshold: float = Field(default=0.15, ge=0.0)
    realtime_fairness_floor: float = Field(default=70.0, ge=0.0, le=100.0)

    # ========================================================================
    # SECURITY
    # ========================================================================

    encryption_key: str = Field(
        default="",
        alias="FAIRWATCH_ENCRYPTION_KEY",
        description="Fernet key for persisted assessment payloads",
    )

    # ========================================================================
    # OBSERVABILITY
    # ========================================================================

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")  # json or console

    def policy_for(self, dimension: str) -> DimensionPolicy:
        """Policy for a dimension (enum member or value), falling back to the default."""
        key = getattr(dimension, "value", dimension)
        policy = self.dimension_policies.get(key)
        if policy is None:
            policy = _default_dimension_policies()[key]
        return policy

    def exceeds(self, value: float, threshold: float) -> bool:
        """Threshold comparison honoring the configured boundary convention."""
        if self.threshold_inclusive:
            return value >= threshold
        return value > threshold


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    settings = Settings()
    logger.info(
        "settings_loaded",
        environment=settings.environment,
        interval_days=settings.assessment_interval_days,
        min_samples=settings.min_samples_for_assessment,
        threshold_inclusive=settings.threshold_inclusive,
    )
    return settings
