from datetime import datetime, timezone

import pytest

from journalbot.journals.knowledge_base import KnowledgeBase
from journalbot.journals.learning_log import LearningLog
from journalbot.journals.self_monitor import SelfMonitor
from journalbot.config.loader import SkillConfig
from journalbot.ledger import MemoryStore, RecommendationLedger
from journalbot.reports import render


NOW = datetime(2026, 2, 6, 12, 0, tzinfo=timezone.utc)


def test_clip_and_skill_bar():
    assert render.clip("abcdef", 3) == "abc..."
    assert render.clip("abc", 3) == "abc"
    assert render.clip(None, 3) == ""
    assert render.skill_bar(3) == "███░░░░░░░"
    assert render.skill_bar(15) == "█" * 10
    assert render.skill_bar(-1) == "░" * 10


def test_recommendation_report_sections():
    led = RecommendationLedger(MemoryStore(), clock=lambda: NOW)
    ids = [led.add(f"Recommendation number {i}", "inbox", "why", "x") for i in range(8)]
    for rid in ids[:6]:
        led.transition(rid, "implemented", actual_outcome="x")
    text = render.render_recommendation_report(led.report(), led.pending, NOW)
    assert text.startswith("# Recommendation Analysis")
    assert "- Implemented: 6 (75.0%)" in text
    assert "Strong track record" in text
    assert "- **inbox:** 6 implemented" in text
    assert "What to Improve" not in text
    assert "2 recommendations awaiting feedback" in text


def test_recommendation_report_empty_ledger():
    led = RecommendationLedger(MemoryStore(), clock=lambda: NOW)
    text = render.render_recommendation_report(led.report(), led.pending, NOW)
    assert "- Total Recommendations: 0" in text
    assert "Success Analysis" not in text
    assert "Pending Follow-Up" not in text


def test_pending_preview_is_capped():
    led = RecommendationLedger(MemoryStore(), clock=lambda: NOW)
    for i in range(7):
        led.add(f"rec {i}", "ctx", "why", "x")
    text = render.render_recommendation_report(led.report(), led.pending, NOW)
    assert "- rec 4 (2026-02-06)" in text
    assert "- rec 5 " not in text
    assert "... and 2 more" in text


def test_rejection_reason_in_report():
    led = RecommendationLedger(MemoryStore(), clock=lambda: NOW)
    rid = led.add("a", "ctx", "why", "x")
    led.transition(rid, "rejected", feedback="Not a priority right now")
    text = render.render_recommendation_report(led.report(), led.pending, NOW)
    assert "Needs calibration" in text
    assert "Common reason: not a priority right..." in text


def test_follow_up_reminder_none_when_nothing_due():
    assert render.render_follow_up_reminder([], NOW) is None


def test_follow_up_reminder_lists_due():
    led = RecommendationLedger(MemoryStore(), clock=lambda: NOW)
    led.add("Write the SEO guide", "learning", "why", "better SEO", "2026-02-01")
    text = render.render_follow_up_reminder(led.due_for_follow_up(), NOW)
    assert "# Follow-Up Reminder" in text
    assert "**Recommendations to check on:** 1" in text
    assert "## 1. Write the SEO guide" in text
    assert "- **Follow up from:** 2026-02-01" in text


def test_learning_summary_with_skills():
    log = LearningLog(MemoryStore(), clock=lambda: NOW)
    log.log_insight("technical", "Cache responses", "mistake", 8)
    skills = {"api_integration": SkillConfig(level=6, learning=["retries"])}
    text = render.render_learning_summary(log.daily_summary(), skills)
    assert "**New Insights:** 1" in text
    assert "### 1. TECHNICAL" in text
    assert "- **api integration:** ██████░░░░ 6/10" in text
    assert "Currently learning: retries" in text
    assert "1 learnings waiting to be used" in text


def test_study_guide_empty_and_filled():
    log = LearningLog(MemoryStore(), clock=lambda: NOW)
    assert 'No insights found for "etsy" yet.' in render.render_study_guide(log.study_guide("etsy"))
    log.log_insight("business", "Etsy tags matter", "research", 7)
    text = render.render_study_guide(log.study_guide("etsy"))
    assert text.startswith("# Study Guide: etsy")
    assert "**Based on 1 insights**" in text
    assert "## BUSINESS" in text


def test_knowledge_base_sections():
    kb = KnowledgeBase(MemoryStore(), clock=lambda: NOW)
    kb.add_learning("API automation", "Cron plus scripts")
    sections = {name: kb.partition(name) for name in kb.partition_names()}
    text = render.render_knowledge_base(sections, NOW)
    assert "**Total Insights:** 1" in text
    assert "## Technical Skills" in text
    assert "### API automation" in text
    assert "_Nothing recorded yet._" in text


def test_self_assessment():
    mon = SelfMonitor(MemoryStore(), clock=lambda: NOW)
    mon.log_interaction("coding", "x", "successful")
    metrics = mon.metrics()
    text = render.render_self_assessment(metrics, mon.improvements(metrics), "positive", NOW)
    assert "# Daily Self-Assessment" in text
    assert "- coding: 1" in text
    assert "### 1. Learning" in text


def test_write_report(tmp_path):
    path = render.write_report(str(tmp_path / "out"), "r.md", "# hi\n")
    with open(path, encoding="utf-8") as f:
        assert f.read() == "# hi\n"


def test_write_report_unwritable_dir_raises_storage_failure(tmp_path):
    from journalbot.ledger import StorageFailure

    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(StorageFailure):
        render.write_report(str(blocker / "reports"), "r.md", "# hi\n")
