"""
Storage Interfaces.

The engine talks to its collaborators only through these protocols:
- SampleProvider supplies recent scored samples
- ResultStore persists assessments and the latest-summary pointer
- PayloadCipher encrypts payloads at the storage boundary
"""

from datetime import datetime
from typing import Optional, List, Protocol, TYPE_CHECKING, runtime_checkable

if TYPE_CHECKING:
    from fairwatch.governance.schemas import (
        AssessmentResult,
        AssessmentSummary,
        DataSample,
    )


# ============================================================================
# PROTOCOLS
# ============================================================================


@runtime_checkable
class SampleProvider(Protocol):
    """Protocol for the source of historical samples."""

    async def fetch_recent_samples(self, limit: int) -> List["DataSample"]: ...


@runtime_checkable
class ResultStore(Protocol):
    """Protocol for assessment persistence."""

    async def store(self, assessment_id: str, result: "AssessmentResult") -> None: ...

    async def get_latest_summary(self) -> Optional["AssessmentSummary"]: ...

    async def get_by_timestamp(self, timestamp: datetime) -> Optional["AssessmentResult"]: ...

    async def list_recent(self, n: int) -> List["AssessmentResult"]: ...


@runtime_checkable
class PayloadCipher(Protocol):
    """Protocol for symmetric payload encryption."""

    def encrypt(self, plaintext: bytes) -> bytes: ...

    def decrypt(self, ciphertext: bytes) -> bytes: ...
