"""Ledger package.

Public API:
- RecommendationLedger: status-lifecycle ledger with success-rate analytics.
- PartitionedLedger: generic base shared by every journal.
- JsonFileStore / MemoryStore: whole-document persistence strategies.
"""

from .base import PartitionedLedger  # re-export
from .errors import LedgerError, RecordNotFound, StorageFailure
from .model import Recommendation, RecommendationStats, RecommendationSummary, Status, SuccessTiers
from .recommendations import RecommendationLedger
from .store import DocumentStore, JsonFileStore, MemoryStore

__all__ = [
    "DocumentStore",
    "JsonFileStore",
    "LedgerError",
    "MemoryStore",
    "PartitionedLedger",
    "Recommendation",
    "RecommendationLedger",
    "RecommendationStats",
    "RecommendationSummary",
    "RecordNotFound",
    "Status",
    "StorageFailure",
    "SuccessTiers",
]
