"""
Recommendation tracker: a status-lifecycle ledger with derived analytics.

Records move between four partitions (pending, implemented, rejected, unknown).
Every mutation rewrites the whole backing document. Counters are maintained
incrementally; the success rate is recomputed from them after each mutation.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Union

from ..logs.event_log import log_ledger_event
from ..metrics.ledger import inc_transition, set_success_rate
from .base import Clock, PartitionedLedger, new_id, parse_timestamp
from .model import Recommendation, RecommendationStats, RecommendationSummary, Status, SuccessTiers
from .outcomes import OutcomeComparator, get_comparator, implemented_lesson, rejected_lesson
from .store import DocumentStore

FEEDBACK_PREFIX_LEN = 20
TOP_CONTEXTS = 3


def success_rate(implemented: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round(implemented / total * 100, 1)


class RecommendationLedger(PartitionedLedger[Recommendation]):
    journal = "recommendations"
    record_model = Recommendation
    stats_model = RecommendationStats
    partitions = tuple(s.value for s in Status)

    def __init__(
        self,
        store: DocumentStore,
        comparator: Union[str, OutcomeComparator] = "lexicographic",
        tiers: Optional[SuccessTiers] = None,
        clock: Optional[Clock] = None,
    ):
        self.compare = get_comparator(comparator) if isinstance(comparator, str) else comparator
        self.tiers = tiers or SuccessTiers()
        super().__init__(store, clock=clock)

    @property
    def pending(self) -> List[Recommendation]:
        return self.partition(Status.PENDING.value)

    @property
    def implemented(self) -> List[Recommendation]:
        return self.partition(Status.IMPLEMENTED.value)

    @property
    def rejected(self) -> List[Recommendation]:
        return self.partition(Status.REJECTED.value)

    @property
    def unknown(self) -> List[Recommendation]:
        return self.partition(Status.UNKNOWN.value)

    def add(
        self,
        body: str,
        context: str,
        rationale: str,
        expected_outcome: Optional[str],
        follow_up_at: Optional[Union[str, datetime]] = None,
    ) -> str:
        """Track a new pending recommendation and return its id.

        `follow_up_at` may be a datetime or text; it is stored as text and
        parsed when follow-ups are checked.
        """
        if isinstance(follow_up_at, datetime):
            follow_up_at = follow_up_at.isoformat()
        rec = Recommendation(
            id=new_id(),
            created_at=self.now(),
            body=body,
            context=context,
            rationale=rationale,
            expected_outcome=expected_outcome,
            follow_up_at=follow_up_at,
        )
        self._append(Status.PENDING.value, rec)
        self.stats.total += 1
        self._refresh_success_rate()
        self.persist()
        log_ledger_event("recommendation_added", self.journal, rec.id, body=body[:50])
        return rec.id

    def transition(
        self,
        record_id: str,
        new_status: Union[str, Status],
        feedback: Optional[str] = None,
        actual_outcome: Optional[str] = None,
    ) -> None:
        """Move a record to `new_status`.

        Raises RecordNotFound (ledger untouched) if the id is unknown and
        ValueError if the status is not one of the four partitions.
        """
        status = Status(new_status)
        current, rec = self.find(record_id)

        self._detach(current, record_id)
        rec.status = status
        # Returning to pending leaves the earlier feedback and outcome as they were
        if status is not Status.PENDING:
            rec.feedback = feedback
            rec.actual_outcome = actual_outcome
        rec.updated_at = self.now()
        self._attach(status.value, rec)

        # A record leaving a terminal partition no longer counts towards it
        if current == Status.IMPLEMENTED.value:
            self.stats.implemented = max(0, self.stats.implemented - 1)
        elif current == Status.REJECTED.value:
            self.stats.rejected = max(0, self.stats.rejected - 1)

        if status is Status.IMPLEMENTED:
            self.stats.implemented += 1
            rec.lesson_learned = implemented_lesson(actual_outcome, rec.expected_outcome, self.compare)
        elif status is Status.REJECTED:
            self.stats.rejected += 1
            rec.lesson_learned = rejected_lesson(feedback)
        else:
            rec.lesson_learned = None

        self._refresh_success_rate()
        inc_transition(self.journal, status.value)
        self.persist()
        log_ledger_event("recommendation_transition", self.journal, record_id, source=current, target=status.value)

    def due_for_follow_up(self, now: Optional[datetime] = None) -> List[Recommendation]:
        """Pending records whose follow-up date has passed, oldest-added first.

        Records with a missing or unparseable follow-up date are never due.
        """
        cutoff = parse_timestamp(now or self.now())
        due = []
        for rec in self._partitions[Status.PENDING.value]:
            when = parse_timestamp(rec.follow_up_at)
            if when is not None and when <= cutoff:
                due.append(rec)
        return due

    def report(self) -> RecommendationSummary:
        stats = self.stats
        return RecommendationSummary(
            total=stats.total,
            implemented=stats.implemented,
            success_rate=stats.success_rate,
            rejected=stats.rejected,
            pending=len(self._partitions[Status.PENDING.value]),
            unknown=len(self._partitions[Status.UNKNOWN.value]),
            tier=self.tiers.label(stats.success_rate),
            top_contexts=self._top_contexts(),
            common_rejection=self._common_rejection(),
        )

    def _refresh_success_rate(self) -> None:
        self.stats.success_rate = success_rate(self.stats.implemented, self.stats.total)
        set_success_rate(self.journal, self.stats.success_rate)

    def _top_contexts(self) -> List[tuple]:
        counts: Dict[str, int] = {}
        for rec in self._partitions[Status.IMPLEMENTED.value]:
            counts[rec.context] = counts.get(rec.context, 0) + 1
        # sorted() is stable, so ties keep first-seen order
        return sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:TOP_CONTEXTS]

    def _common_rejection(self) -> Optional[str]:
        counts: Dict[str, int] = {}
        for rec in self._partitions[Status.REJECTED.value]:
            if rec.feedback:
                key = rec.feedback.lower()[:FEEDBACK_PREFIX_LEN]
                counts[key] = counts.get(key, 0) + 1
        if not counts:
            return None
        return max(counts.items(), key=lambda kv: kv[1])[0]
