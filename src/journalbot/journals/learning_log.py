"""
Learning log: insights with impact scores and application tracking.

Insights are partitioned by category (partitions appear on first use). The
older flat-list document layout is upgraded on load.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..ledger.base import PartitionedLedger, new_id
from ..logs.event_log import log_ledger_event


class Insight(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: str
    created_at: datetime = Field(validation_alias=AliasChoices("createdAt", "timestamp"), serialization_alias="createdAt")
    category: str
    insight: str
    source: str = "observation"
    impact: int = 5
    related_topics: List[str] = Field(default_factory=list, validation_alias=AliasChoices("relatedTopics"), serialization_alias="relatedTopics")
    applied: bool = False
    application_count: int = Field(default=0, validation_alias=AliasChoices("applicationCount"), serialization_alias="applicationCount")
    last_applied: Optional[datetime] = Field(default=None, validation_alias=AliasChoices("lastApplied"), serialization_alias="lastApplied")


class LearningStats(BaseModel):
    total: int = 0
    applied: int = 0


@dataclass
class LearningSummary:
    day: date
    todays: List[Insight]
    total: int
    to_apply: List[Insight]
    category_counts: Dict[str, int]
    least_covered: Optional[Tuple[str, int]]
    unused_count: int


@dataclass
class StudyGuide:
    topic: str
    groups: Dict[str, List[Insight]] = field(default_factory=dict)

    @property
    def count(self) -> int:
        return sum(len(items) for items in self.groups.values())


class LearningLog(PartitionedLedger[Insight]):
    journal = "learning_log"
    record_model = Insight
    stats_model = LearningStats
    dynamic_partitions = True

    def _upgrade(self, doc: Any) -> Dict[str, Any]:
        if not isinstance(doc, list):
            return doc
        grouped: Dict[str, Any] = {}
        for item in doc:
            grouped.setdefault(item.get("category", "uncategorized"), []).append(item)
        grouped["stats"] = {
            "total": len(doc),
            "applied": sum(1 for item in doc if item.get("applied")),
        }
        return grouped

    def log_insight(
        self,
        category: str,
        insight: str,
        source: str,
        impact: int,
        related_topics: Sequence[str] = (),
    ) -> str:
        entry = Insight(
            id=new_id(),
            created_at=self.now(),
            category=category,
            insight=insight,
            source=source,
            impact=impact,
            related_topics=list(related_topics),
        )
        self._append(category, entry)
        self.stats.total += 1
        self.persist()
        log_ledger_event("insight_logged", self.journal, entry.id, category=category, impact=impact)
        return entry.id

    def mark_applied(self, insight_id: str) -> None:
        entry = self.get(insight_id)
        if not entry.applied:
            self.stats.applied += 1
        entry.applied = True
        entry.application_count += 1
        entry.last_applied = self.now()
        self.persist()
        log_ledger_event("insight_applied", self.journal, insight_id, count=entry.application_count)

    def find_by_topic(self, topic: str) -> List[Insight]:
        needle = topic.lower()
        return [
            i for i in self.records()
            if needle in i.insight.lower() or any(needle in t.lower() for t in i.related_topics)
        ]

    def unused_insights(self) -> List[Insight]:
        """Not-yet-applied insights, highest impact first."""
        return sorted((i for i in self.records() if not i.applied), key=lambda i: i.impact, reverse=True)

    def daily_summary(self, day: Optional[date] = None) -> LearningSummary:
        day = day or self.now().date()
        todays = [i for i in self.records() if i.created_at.date() == day]
        counts = {name: len(self._partitions[name]) for name in self._partitions if self._partitions[name]}
        least = min(counts.items(), key=lambda kv: kv[1]) if counts else None
        unused = self.unused_insights()
        return LearningSummary(
            day=day,
            todays=todays,
            total=len(self),
            to_apply=unused[:3],
            category_counts=counts,
            least_covered=least,
            unused_count=len(unused),
        )

    def study_guide(self, topic: str) -> StudyGuide:
        guide = StudyGuide(topic=topic)
        for entry in self.find_by_topic(topic):
            guide.groups.setdefault(entry.category, []).append(entry)
        return guide
