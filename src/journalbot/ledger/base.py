"""
Generic partitioned ledger shared by every journal.

What it does:
- Holds records (pydantic models) in named, ordered partitions.
- Loads the whole document from a `DocumentStore` once at construction and
  rewrites the whole document after every mutation.
- Keeps a small pydantic stats model next to the partitions; subclasses update
  it incrementally.

Where it is used:
- Subclassed by `RecommendationLedger`, `LearningLog`, `KnowledgeBase` and
  `SelfMonitor`.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, Tuple, Type, TypeVar

import pandas as pd
from pydantic import BaseModel

from ..logs.event_log import log_ledger_event
from ..metrics.ledger import inc_added, inc_lookup_miss
from .errors import RecordNotFound, StorageFailure
from .store import DocumentStore

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)

STATS_KEY = "stats"

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO date or datetime; naive values are taken as UTC.

    Returns None for empty or unparseable input.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class EmptyStats(BaseModel):
    pass


class PartitionedLedger(Generic[R]):
    journal: str = "journal"
    record_model: Type[BaseModel]
    stats_model: Type[BaseModel] = EmptyStats
    partitions: Tuple[str, ...] = ()
    # When True, unknown partition names are created on first use
    dynamic_partitions: bool = False

    def __init__(self, store: DocumentStore, clock: Optional[Clock] = None):
        self._store = store
        self._clock = clock or utcnow
        self._partitions: Dict[str, List[R]] = {name: [] for name in self.partitions}
        self.stats = self.stats_model()
        self.load()

    # ---- persistence ----

    def load(self) -> None:
        doc = self._store.load()
        if doc is None:
            return
        doc = self._upgrade(doc)
        if not isinstance(doc, dict):
            where = getattr(self._store, "path", repr(self._store))
            raise StorageFailure(where, f"expected a JSON object, got {type(doc).__name__}")
        for name, items in doc.items():
            if name == STATS_KEY:
                continue
            if name not in self._partitions and not self.dynamic_partitions:
                logger.warning(f"{self.journal}: ignoring unknown partition {name!r}")
                continue
            model = self._record_model(name)
            self._partitions[name] = [model.model_validate(item) for item in items]
        self.stats = self.stats_model.model_validate(doc.get(STATS_KEY) or {})

    def persist(self) -> None:
        self._store.save(self.to_document())

    def to_document(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {
            name: [rec.model_dump(mode="json", by_alias=True) for rec in records]
            for name, records in self._partitions.items()
        }
        doc[STATS_KEY] = self.stats.model_dump(mode="json", by_alias=True)
        return doc

    def _upgrade(self, doc: Any) -> Dict[str, Any]:
        """Hook for subclasses that can read older document layouts."""
        return doc

    def _record_model(self, partition: str) -> Type[BaseModel]:
        return self.record_model

    # ---- access ----

    def now(self) -> datetime:
        return self._clock()

    def partition(self, name: str) -> List[R]:
        """Snapshot of one partition in insertion order."""
        return list(self._partitions.get(name, []))

    def partition_names(self) -> List[str]:
        return list(self._partitions.keys())

    def records(self) -> Iterator[R]:
        for records in self._partitions.values():
            yield from records

    def __len__(self) -> int:
        return sum(len(records) for records in self._partitions.values())

    def find(self, record_id: str) -> Tuple[str, R]:
        for name, records in self._partitions.items():
            for rec in records:
                if getattr(rec, "id", None) == record_id:
                    return name, rec
        inc_lookup_miss(self.journal)
        log_ledger_event("record_not_found", self.journal, record_id, level=logging.WARNING)
        raise RecordNotFound(record_id, self.journal)

    def get(self, record_id: str) -> R:
        return self.find(record_id)[1]

    def to_frame(self) -> pd.DataFrame:
        rows = []
        for name, records in self._partitions.items():
            for rec in records:
                row = rec.model_dump(mode="json", by_alias=True)
                row["partition"] = name
                rows.append(row)
        return pd.DataFrame(rows)

    # ---- mutation helpers (callers persist) ----

    def _append(self, partition: str, record: R) -> None:
        self._attach(partition, record)
        inc_added(self.journal)

    def _detach(self, partition: str, record_id: str) -> None:
        self._partitions[partition] = [r for r in self._partitions[partition] if getattr(r, "id", None) != record_id]

    def _attach(self, partition: str, record: R) -> None:
        if partition == STATS_KEY:
            raise ValueError(f"{STATS_KEY!r} is reserved and cannot name a partition")
        if partition not in self._partitions:
            if not self.dynamic_partitions:
                raise ValueError(f"{self.journal}: unknown partition {partition!r}")
            self._partitions[partition] = []
        self._partitions[partition].append(record)
