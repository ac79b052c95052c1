"""Configuration, errors, logging, metrics and encryption."""

from fairwatch.core.config import DimensionPolicy, Settings, get_settings
from fairwatch.core.exceptions import (
    ConcurrencyError,
    ErrorCode,
    FairwatchError,
    InsufficientDataWarning,
    PersistenceError,
    SampleProviderError,
)

__all__ = [
    "DimensionPolicy",
    "Settings",
    "get_settings",
    "ConcurrencyError",
    "ErrorCode",
    "FairwatchError",
    "InsufficientDataWarning",
    "PersistenceError",
    "SampleProviderError",
]
