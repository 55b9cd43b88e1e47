from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Status(str, Enum):
    PENDING = "pending"
    IMPLEMENTED = "implemented"
    REJECTED = "rejected"
    UNKNOWN = "unknown"

    @property
    def is_terminal(self) -> bool:
        return self in (Status.IMPLEMENTED, Status.REJECTED)


def _field(name: str, *legacy: str, default=None):
    """Camel-cased persisted name, plus older names accepted on load."""
    return Field(
        default=default,
        validation_alias=AliasChoices(name, *legacy),
        serialization_alias=name,
    )


class Recommendation(BaseModel):
    """One tracked suggestion.

    Persisted names are camelCase; older tracker documents using
    `what`, `timestamp`, `followupDate`, `earthResponse` and `lessons` still load.
    """

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: str
    created_at: datetime = _field("createdAt", "timestamp", default=...)
    body: str = _field("body", "what", default="")
    context: str = ""
    rationale: str = ""
    expected_outcome: Optional[str] = _field("expectedOutcome")
    follow_up_at: Optional[str] = _field("followUpAt", "followupDate")
    status: Status = Status.PENDING
    feedback: Optional[str] = _field("feedback", "earthResponse")
    actual_outcome: Optional[str] = _field("actualOutcome")
    lesson_learned: Optional[str] = _field("lessonLearned", "lessons")
    updated_at: Optional[datetime] = _field("updatedAt")


class RecommendationStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int = 0
    implemented: int = 0
    rejected: int = 0
    success_rate: float = _field("successRate", default=0.0)


@dataclass
class SuccessTiers:
    strong: float = 70.0
    good: float = 50.0

    def label(self, rate: float) -> str:
        if rate >= self.strong:
            return "strong"
        if rate >= self.good:
            return "good"
        return "needs calibration"


@dataclass
class RecommendationSummary:
    """Structured analytics handed to the report renderer.

    Attributes:
        total: Recommendations ever added
        implemented: Implemented counter
        success_rate: implemented / total * 100, one decimal
        rejected: Rejected counter
        pending: Records currently in the pending partition
        unknown: Records currently in the unknown partition
        tier: "strong" | "good" | "needs calibration"
        top_contexts: Up to three (context, count) pairs among implemented records
        common_rejection: Most frequent lower-cased 20-char feedback prefix, or None
    """

    total: int
    implemented: int
    success_rate: float
    rejected: int
    pending: int
    unknown: int
    tier: str
    top_contexts: List[Tuple[str, int]] = field(default_factory=list)
    common_rejection: Optional[str] = None
