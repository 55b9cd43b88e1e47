"""
Render journal summaries as Markdown reports.

Usage (venv):
  python -m journalbot.main daily

Each `render_*` function takes the structured data a journal produces and
returns Markdown text; `write_report` stores it under the reports directory.
"""

from __future__ import annotations

import os
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..journals.knowledge_base import KnowledgeEntry
from ..journals.learning_log import LearningSummary, StudyGuide
from ..journals.self_monitor import Improvement, SessionMetrics
from ..ledger.errors import StorageFailure
from ..ledger.model import Recommendation, RecommendationSummary

PENDING_PREVIEW = 5


def clip(text: Optional[str], length: int) -> str:
    text = text or ""
    return text if len(text) <= length else text[:length] + "..."


def skill_bar(level: int, width: int = 10) -> str:
    level = max(0, min(width, int(level)))
    return "█" * level + "░" * (width - level)


def _template_env(template_dir: str) -> Environment:
    env = Environment(
        loader=FileSystemLoader(template_dir),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["clip"] = clip
    env.filters["skill_bar"] = skill_bar
    env.filters["day"] = lambda ts: ts.strftime("%Y-%m-%d") if ts else ""
    env.filters["stamp"] = lambda ts: ts.strftime("%Y-%m-%d %H:%M UTC") if ts else ""
    return env


_env: Optional[Environment] = None


def _render(template: str, **context: Any) -> str:
    global _env
    if _env is None:
        _env = _template_env(os.path.join(os.path.dirname(__file__), "templates"))
    return _env.get_template(template).render(**context)


def render_recommendation_report(
    summary: RecommendationSummary,
    pending: Sequence[Recommendation],
    generated_at: datetime,
) -> str:
    return _render(
        "recommendations.md.j2",
        summary=summary,
        pending=list(pending)[:PENDING_PREVIEW],
        pending_more=max(0, len(pending) - PENDING_PREVIEW),
        generated_at=generated_at,
    )


def render_follow_up_reminder(due: Sequence[Recommendation], generated_at: datetime) -> Optional[str]:
    """Return the reminder text, or None when nothing is due."""
    if not due:
        return None
    return _render("follow_up.md.j2", due=list(due), generated_at=generated_at)


def render_learning_summary(summary: LearningSummary, skills: Optional[Dict[str, Any]] = None) -> str:
    return _render("learning_summary.md.j2", summary=summary, skills=skills or {})


def render_study_guide(guide: StudyGuide) -> str:
    return _render("study_guide.md.j2", guide=guide)


def render_knowledge_base(sections: Dict[str, List[KnowledgeEntry]], generated_at: datetime) -> str:
    total = sum(len(entries) for entries in sections.values())
    return _render("knowledge_base.md.j2", sections=sections, total=total, generated_at=generated_at)


def render_self_assessment(
    metrics: SessionMetrics,
    improvements: Sequence[Improvement],
    mood: str,
    generated_at: datetime,
) -> str:
    return _render(
        "self_assessment.md.j2",
        metrics=metrics,
        improvements=list(improvements),
        mood=mood,
        generated_at=generated_at,
    )


def write_report(out_dir: str, name: str, text: str) -> str:
    """Write one report file; I/O errors surface as StorageFailure."""
    path = os.path.join(out_dir, name)
    try:
        os.makedirs(out_dir, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
    except OSError as e:
        raise StorageFailure(path, f"write failed: {e}") from e
    return path
