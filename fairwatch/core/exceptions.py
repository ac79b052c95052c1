"""
Exceptions Module.

Centralized exception definitions with:
- Error codes for host-side handling
- Structured details for logging
- A warning category for non-fatal data shortfalls

Only the two I/O-adjacent steps of an assessment run (sample fetch and
result persistence) raise. Every scoring function between them is total.
"""

from typing import Optional, Dict, Any, TYPE_CHECKING
from enum import Enum

if TYPE_CHECKING:
    from fairwatch.governance.schemas import AssessmentResult


# ============================================================================
# ERROR CODES
# ============================================================================


class ErrorCode(str, Enum):
    """Fairwatch error codes."""

    # General errors (1xxx)
    INTERNAL_ERROR = "E1000"

    # Scheduling errors (2xxx)
    ASSESSMENT_IN_PROGRESS = "E2000"

    # Data errors (3xxx)
    INSUFFICIENT_DATA = "E3000"
    SAMPLE_FETCH_FAILED = "E3001"

    # Persistence errors (4xxx)
    PERSISTENCE_FAILED = "E4000"
    DECRYPTION_FAILED = "E4001"
    RESULT_KEY_CONFLICT = "E4002"


# ============================================================================
# BASE EXCEPTION
# ============================================================================


class FairwatchError(Exception):
    """Base exception for the bias assessment engine."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for structured logs and host error payloads."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


# ============================================================================
# SPECIFIC EXCEPTIONS
# ============================================================================


class ConcurrencyError(FairwatchError):
    """A full assessment is already running; the call is rejected."""

    def __init__(self, message: str = "Bias assessment already in progress"):
        super().__init__(
            message=message,
            code=ErrorCode.ASSESSMENT_IN_PROGRESS,
        )


class SampleProviderError(FairwatchError):
    """The sample provider could not supply a snapshot."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code=ErrorCode.SAMPLE_FETCH_FAILED,
            details=details,
        )


class PersistenceError(FairwatchError):
    """
    Storing or retrieving an assessment failed.

    When raised from a run, ``result`` holds the fully computed assessment
    so the host can retry persistence without recomputing it.
    """

    def __init__(
        self,
        message: str,
        operation: str,
        result: Optional["AssessmentResult"] = None,
        code: ErrorCode = ErrorCode.PERSISTENCE_FAILED,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.operation = operation
        self.result = result
        super().__init__(
            message=message,
            code=code,
            details={"operation": operation, **(details or {})},
        )


# ============================================================================
# WARNINGS
# ============================================================================


class InsufficientDataWarning(UserWarning):
    """Fewer samples than the configured minimum; confidence is reduced."""

    def __init__(self, sample_count: int, required: int):
        self.sample_count = sample_count
        self.required = required
        self.code = ErrorCode.INSUFFICIENT_DATA
        super().__init__(
            f"Insufficient data for bias assessment: {sample_count} samples, "
            f"{required} required"
        )
