"""
Knowledge base: categorized learnings, cross-linked and searchable.

Categories come from an ordered keyword rule table (first match wins, fallback
`personal`). Two entries are related when their topics share at least two
words.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..ledger.base import Clock, PartitionedLedger, new_id
from ..ledger.store import DocumentStore
from ..logs.event_log import log_ledger_event

CATEGORIES = ("technical", "business", "personal", "preferences", "self_improvement")
FALLBACK_CATEGORY = "personal"
MIN_SHARED_WORDS = 2


class CategoryRule(BaseModel):
    category: str
    keywords: List[str]


DEFAULT_RULES: List[CategoryRule] = [
    CategoryRule(category="technical", keywords=["code", "script", "api", "automation"]),
    CategoryRule(category="business", keywords=["business", "marketing", "revenue", "strategy"]),
    CategoryRule(category="preferences", keywords=["preference", "prefers", "like", "dislike"]),
    CategoryRule(category="self_improvement", keywords=["improve", "better", "learn"]),
]


class KnowledgeEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    created_at: datetime = Field(validation_alias=AliasChoices("createdAt", "timestamp"), serialization_alias="createdAt")
    topic: str
    insight: str
    source: str = "observation"
    confidence: int = 7
    used: int = 0
    related: List[str] = Field(default_factory=list)


class KnowledgeStats(BaseModel):
    total: int = 0


def shared_words(a: str, b: str) -> int:
    return len(set(a.lower().split()) & set(b.lower().split()))


class KnowledgeBase(PartitionedLedger[KnowledgeEntry]):
    journal = "knowledge_base"
    record_model = KnowledgeEntry
    stats_model = KnowledgeStats
    partitions = CATEGORIES

    def __init__(
        self,
        store: DocumentStore,
        rules: Optional[Sequence[CategoryRule]] = None,
        clock: Optional[Clock] = None,
    ):
        self.rules = list(rules) if rules is not None else list(DEFAULT_RULES)
        for rule in self.rules:
            if rule.category not in CATEGORIES:
                raise ValueError(f"unknown knowledge category {rule.category!r}")
        super().__init__(store, clock=clock)

    def categorize(self, topic: str) -> str:
        lowered = topic.lower()
        for rule in self.rules:
            if any(k.lower() in lowered for k in rule.keywords):
                return rule.category
        return FALLBACK_CATEGORY

    def add_learning(self, topic: str, insight: str, source: str = "observation", confidence: int = 7) -> str:
        category = self.categorize(topic)
        entry = KnowledgeEntry(
            id=new_id(),
            created_at=self.now(),
            topic=topic,
            insight=insight,
            source=source,
            confidence=confidence,
        )
        self._append(category, entry)
        self.stats.total += 1
        links = self.link_related()
        self.persist()
        log_ledger_event("learning_added", self.journal, entry.id, category=category, new_links=links)
        return entry.id

    def link_related(self) -> int:
        """Add symmetric links between related entries; returns links added."""
        entries = list(self.records())
        added = 0
        for i, entry in enumerate(entries):
            for other in entries[i + 1:]:
                if shared_words(entry.topic, other.topic) < MIN_SHARED_WORDS:
                    continue
                if other.id not in entry.related:
                    entry.related.append(other.id)
                    added += 1
                if entry.id not in other.related:
                    other.related.append(entry.id)
                    added += 1
        return added

    def search(self, query: str) -> List[KnowledgeEntry]:
        needle = query.lower()
        return [e for e in self.records() if needle in e.topic.lower() or needle in e.insight.lower()]

    def mark_used(self, entry_id: str) -> None:
        entry = self.get(entry_id)
        entry.used += 1
        self.persist()
        log_ledger_event("learning_used", self.journal, entry_id, used=entry.used)
