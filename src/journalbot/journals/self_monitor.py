"""
Self monitor: one session document per day.

What it does:
- Logs interactions, recommendations and learnings into three partitions of
  the day's session document.
- Derives session metrics (success rate, type breakdown, mood trend) and a list
  of improvement suggestions from them.

Where it is used:
- `journalbot.main monitor ...` and the daily run, which renders the self
  assessment report from `metrics()` and `improvements()`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Type

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..ledger.base import Clock, PartitionedLedger, new_id
from ..ledger.store import DocumentStore
from ..logs.event_log import log_ledger_event

SUCCESS_RATE_FLOOR = 80.0
PENDING_CEILING = 5
CODING_SHARE_CEILING = 0.7


class Interaction(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    created_at: datetime = Field(validation_alias=AliasChoices("createdAt", "timestamp"), serialization_alias="createdAt")
    type: str
    topic: str
    outcome: str
    notes: str = ""


class SessionRecommendation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    created_at: datetime = Field(validation_alias=AliasChoices("createdAt", "timestamp"), serialization_alias="createdAt")
    what: str
    context: str = ""
    expected_impact: str = Field(default="", validation_alias=AliasChoices("expectedImpact"), serialization_alias="expectedImpact")
    time_frame: str = Field(default="short_term", validation_alias=AliasChoices("timeFrame"), serialization_alias="timeFrame")
    status: str = "pending"
    reaction: Optional[str] = None


class SessionLearning(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    created_at: datetime = Field(validation_alias=AliasChoices("createdAt", "timestamp"), serialization_alias="createdAt")
    topic: str
    source: str
    insight: str
    applicability: str = "future"
    used: bool = False


class SessionStats(BaseModel):
    date: str = ""
    mood: str = "positive"


@dataclass
class SessionMetrics:
    total_interactions: int
    successful_interactions: int
    success_rate: float
    recommendations_made: int
    recommendations_pending: int
    learnings: int
    interaction_types: Dict[str, int]
    mood_trend: str


@dataclass
class Improvement:
    area: str
    issue: str
    suggestion: str
    action: str


def mood_trend(successful: int, failed: int) -> str:
    if successful > failed * 2:
        return "very_positive"
    if successful > failed:
        return "positive"
    if failed > successful:
        return "needs_improvement"
    return "neutral"


class SelfMonitor(PartitionedLedger[BaseModel]):
    journal = "self_monitor"
    stats_model = SessionStats
    partitions = ("interactions", "recommendations", "learnings")
    _models: Dict[str, Type[BaseModel]] = {
        "interactions": Interaction,
        "recommendations": SessionRecommendation,
        "learnings": SessionLearning,
    }

    def __init__(self, store: DocumentStore, mood: str = "positive", clock: Optional[Clock] = None):
        super().__init__(store, clock=clock)
        if not self.stats.date:
            self.stats.date = self.now().date().isoformat()
            self.stats.mood = mood

    def _record_model(self, partition: str) -> Type[BaseModel]:
        return self._models[partition]

    def log_interaction(self, type: str, topic: str, outcome: str, notes: str = "") -> str:
        rec = Interaction(id=new_id(), created_at=self.now(), type=type, topic=topic, outcome=outcome, notes=notes)
        return self._log("interactions", rec)

    def log_recommendation(self, what: str, context: str, expected_impact: str, time_frame: str) -> str:
        rec = SessionRecommendation(
            id=new_id(),
            created_at=self.now(),
            what=what,
            context=context,
            expected_impact=expected_impact,
            time_frame=time_frame,
        )
        return self._log("recommendations", rec)

    def log_learning(self, topic: str, source: str, insight: str, applicability: str) -> str:
        rec = SessionLearning(
            id=new_id(),
            created_at=self.now(),
            topic=topic,
            source=source,
            insight=insight,
            applicability=applicability,
        )
        return self._log("learnings", rec)

    def _log(self, partition: str, rec: BaseModel) -> str:
        self._append(partition, rec)
        self.persist()
        log_ledger_event("session_logged", self.journal, rec.id, partition=partition)
        return rec.id

    def metrics(self) -> SessionMetrics:
        interactions: List[Interaction] = self._partitions["interactions"]
        recommendations: List[SessionRecommendation] = self._partitions["recommendations"]
        successful = sum(1 for i in interactions if i.outcome == "successful")
        failed = sum(1 for i in interactions if i.outcome == "failed")
        types: Dict[str, int] = {}
        for i in interactions:
            types[i.type] = types.get(i.type, 0) + 1
        rate = round(successful / len(interactions) * 100, 1) if interactions else 0.0
        return SessionMetrics(
            total_interactions=len(interactions),
            successful_interactions=successful,
            success_rate=rate,
            recommendations_made=len(recommendations),
            recommendations_pending=sum(1 for r in recommendations if r.status == "pending"),
            learnings=len(self._partitions["learnings"]),
            interaction_types=types,
            mood_trend=mood_trend(successful, failed),
        )

    def improvements(self, metrics: Optional[SessionMetrics] = None) -> List[Improvement]:
        m = metrics or self.metrics()
        out: List[Improvement] = []
        if m.success_rate < SUCCESS_RATE_FLOOR:
            out.append(Improvement(
                area="Success Rate",
                issue=f"Currently at {m.success_rate}%",
                suggestion="Understand requirements more deeply before acting",
                action="Ask clarifying questions and confirm understanding",
            ))
        if m.recommendations_pending > PENDING_CEILING:
            out.append(Improvement(
                area="Follow-up",
                issue=f"{m.recommendations_pending} recommendations pending feedback",
                suggestion="Check in on past recommendations",
                action="Weekly review of pending recommendations",
            ))
        if m.learnings == 0:
            out.append(Improvement(
                area="Learning",
                issue="No new learnings recorded today",
                suggestion="Extract a lesson from each significant interaction",
                action="After each task, note what was learned",
            ))
        total = sum(m.interaction_types.values())
        if total and m.interaction_types.get("coding", 0) > total * CODING_SHARE_CEILING:
            out.append(Improvement(
                area="Balance",
                issue="Heavy focus on technical tasks",
                suggestion="Leave room for strategic thinking and support",
                action="Check in on how things are going, not just on tasks",
            ))
        return out
