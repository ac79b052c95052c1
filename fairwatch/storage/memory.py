"""
In-process Storage Implementations.

KeyValueResultStore works over any mutable mapping, so the same code
backs a plain dict in tests and a dict-like document store in a host.
Payloads are JSON, optionally encrypted by an injected cipher.

Keys:
- bias_assessment_<epoch_ms>: one full AssessmentResult per run
- latest_bias_assessment: AssessmentSummary of the most recent run
"""

from datetime import datetime
from typing import Optional, List, MutableMapping, Sequence, Type, TypeVar, Union

import structlog
from pydantic import BaseModel, ValidationError

from fairwatch.core.exceptions import ErrorCode, PersistenceError
from fairwatch.governance.schemas import (
    AssessmentResult,
    AssessmentSummary,
    DataSample,
)
from fairwatch.storage.base import PayloadCipher

logger = structlog.get_logger(__name__)


RESULT_KEY_PREFIX = "bias_assessment_"
LATEST_KEY = "latest_bias_assessment"

Payload = Union[str, bytes]
M = TypeVar("M", bound=BaseModel)


def epoch_ms(timestamp: datetime) -> int:
    return int(timestamp.timestamp() * 1000)


def result_key(timestamp: datetime) -> str:
    return f"{RESULT_KEY_PREFIX}{epoch_ms(timestamp)}"


# ============================================================================
# RESULT STORE
# ============================================================================


class KeyValueResultStore:
    """
    ResultStore over a key/value mapping.

    Every backend failure surfaces as PersistenceError naming the
    operation, so callers handle one exception type.
    """

    def __init__(
        self,
        backend: Optional[MutableMapping[str, Payload]] = None,
        cipher: Optional[PayloadCipher] = None,
    ):
        """
        Initialize the store.

        Args:
            backend: Mapping to persist into; a new dict when omitted
            cipher: Optional cipher applied to every payload
        """
        self._backend = backend if backend is not None else {}
        self._cipher = cipher

    # =========================================================================
    # ENCODING
    # =========================================================================

    def _encode(self, model: BaseModel) -> Payload:
        data = model.model_dump_json().encode("utf-8")
        if self._cipher is None:
            return data.decode("utf-8")
        return self._cipher.encrypt(data)

    def _decode_bytes(self, payload: Payload) -> bytes:
        data = payload.encode("utf-8") if isinstance(payload, str) else payload
        if self._cipher is None:
            return data
        return self._cipher.decrypt(data)

    # =========================================================================
    # WRITES
    # =========================================================================

    async def store(self, assessment_id: str, result: AssessmentResult) -> None:
        """
        Store the result and move the latest pointer to it.

        Storing the same assessment again is idempotent. A different
        assessment with the same millisecond timestamp is rejected.
        """
        key = result_key(result.timestamp)
        existing = self._load(key, AssessmentResult, "store")
        if existing is not None and existing.assessment_id != assessment_id:
            logger.error(
                "assessment_key_conflict",
                assessment_id=assessment_id,
                existing_id=existing.assessment_id,
                key=key,
            )
            raise PersistenceError(
                f"Key {key} already holds assessment {existing.assessment_id}",
                operation="store",
                code=ErrorCode.RESULT_KEY_CONFLICT,
                details={"key": key, "existing_id": existing.assessment_id},
            )

        try:
            self._backend[key] = self._encode(result)
            self._backend[LATEST_KEY] = self._encode(result.summary())
        except Exception as e:
            logger.error(
                "assessment_store_failed",
                assessment_id=assessment_id,
                key=key,
                error=str(e),
            )
            raise PersistenceError(
                f"Failed to store assessment {assessment_id}",
                operation="store",
                details={"key": key, "error": str(e)},
            ) from e

        logger.info("assessment_stored", assessment_id=assessment_id, key=key)

    # =========================================================================
    # READS
    # =========================================================================

    def _read(self, key: str, operation: str) -> Optional[bytes]:
        try:
            payload = self._backend.get(key)
        except Exception as e:
            raise PersistenceError(
                f"Failed to read {key}",
                operation=operation,
                details={"key": key, "error": str(e)},
            ) from e
        if payload is None:
            return None
        return self._decode_bytes(payload)

    def _load(self, key: str, model: Type[M], operation: str) -> Optional[M]:
        data = self._read(key, operation)
        if data is None:
            return None
        try:
            return model.model_validate_json(data)
        except ValidationError as e:
            raise PersistenceError(
                f"Corrupt payload at {key}",
                operation=operation,
                details={"key": key, "error": str(e)},
            ) from e

    async def get_latest_summary(self) -> Optional[AssessmentSummary]:
        return self._load(LATEST_KEY, AssessmentSummary, "get_latest_summary")

    async def get_by_timestamp(self, timestamp: datetime) -> Optional[AssessmentResult]:
        return self._load(result_key(timestamp), AssessmentResult, "get_by_timestamp")

    async def list_recent(self, n: int) -> List[AssessmentResult]:
        """
        Most recent stored results, newest first.

        Entries that fail to decrypt or parse are skipped with a warning,
        as are keys whose suffix is not an epoch timestamp.
        """
        if n <= 0:
            return []

        try:
            keys = list(self._backend.keys())
        except Exception as e:
            raise PersistenceError(
                "Failed to list stored assessments",
                operation="list_recent",
                details={"error": str(e)},
            ) from e

        stamped = [
            (int(key[len(RESULT_KEY_PREFIX):]), key)
            for key in keys
            if key.startswith(RESULT_KEY_PREFIX) and key[len(RESULT_KEY_PREFIX):].isdigit()
        ]
        stamped.sort(reverse=True)

        results: List[AssessmentResult] = []
        for _, key in stamped:
            if len(results) >= n:
                break
            try:
                result = self._load(key, AssessmentResult, "list_recent")
            except PersistenceError as e:
                logger.warning("stored_assessment_skipped", key=key, error=str(e))
                continue
            if result is not None:
                results.append(result)

        return results


# ============================================================================
# SAMPLE PROVIDER
# ============================================================================


class InMemorySampleProvider:
    """
    In-memory sample provider for development and testing.

    NOT FOR PRODUCTION USE - samples live only in this process.
    """

    def __init__(self, samples: Optional[Sequence[DataSample]] = None):
        self._samples: List[DataSample] = list(samples or [])

    def add(self, *samples: DataSample) -> None:
        self._samples.extend(samples)

    async def fetch_recent_samples(self, limit: int) -> List[DataSample]:
        """The ``limit`` most recently scored samples, oldest first."""
        if limit <= 0:
            return []
        ordered = sorted(self._samples, key=lambda s: s.timestamp)
        return ordered[-limit:]
