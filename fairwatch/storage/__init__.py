"""Storage protocols and in-process implementations."""

from fairwatch.storage.base import PayloadCipher, ResultStore, SampleProvider
from fairwatch.storage.memory import InMemorySampleProvider, KeyValueResultStore

__all__ = [
    "PayloadCipher",
    "ResultStore",
    "SampleProvider",
    "InMemorySampleProvider",
    "KeyValueResultStore",
]
