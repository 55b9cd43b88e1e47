from datetime import date, datetime, timezone

import pytest

from journalbot.journals.learning_log import LearningLog
from journalbot.ledger import MemoryStore, RecordNotFound


class _Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def _log(store=None, clock=None):
    return LearningLog(store or MemoryStore(), clock=clock or _Clock(datetime(2026, 2, 5, 8, tzinfo=timezone.utc)))


def test_log_insight_partitions_by_category():
    log = _log()
    a = log.log_insight("technical", "Spawning agents with varied models diversifies output", "success", 9, ["agents"])
    b = log.log_insight("business", "Long-tail keywords beat broad ones", "research", 8, ["seo", "keywords"])
    assert log.partition("technical")[0].id == a
    assert log.partition("business")[0].id == b
    assert log.stats.total == 2


def test_reserved_category_rejected():
    with pytest.raises(ValueError):
        _log().log_insight("stats", "nope", "observation", 1)


def test_mark_applied_counts_and_stamps():
    clock = _Clock(datetime(2026, 2, 5, 8, tzinfo=timezone.utc))
    log = _log(clock=clock)
    rid = log.log_insight("technical", "x", "observation", 5)
    clock.now = datetime(2026, 2, 6, 8, tzinfo=timezone.utc)
    log.mark_applied(rid)
    log.mark_applied(rid)
    entry = log.get(rid)
    assert entry.applied is True
    assert entry.application_count == 2
    assert entry.last_applied == clock.now
    assert log.stats.applied == 1


def test_mark_applied_unknown_id():
    with pytest.raises(RecordNotFound):
        _log().mark_applied("missing")


def test_find_by_topic_matches_text_and_related_topics():
    log = _log()
    a = log.log_insight("business", "Etsy listings need long-tail keywords", "research", 8)
    b = log.log_insight("technical", "Cache the API responses", "mistake", 6, ["ETSY api"])
    log.log_insight("technical", "Unrelated", "observation", 3)
    assert {i.id for i in log.find_by_topic("etsy")} == {a, b}


def test_unused_insights_sorted_by_impact():
    log = _log()
    low = log.log_insight("a", "low", "observation", 2)
    high = log.log_insight("b", "high", "observation", 9)
    mid = log.log_insight("a", "mid", "observation", 5)
    applied = log.log_insight("c", "done", "observation", 10)
    log.mark_applied(applied)
    assert [i.id for i in log.unused_insights()] == [high, mid, low]


def test_daily_summary():
    clock = _Clock(datetime(2026, 2, 4, 23, tzinfo=timezone.utc))
    log = _log(clock=clock)
    log.log_insight("technical", "yesterday", "observation", 4)
    clock.now = datetime(2026, 2, 5, 9, tzinfo=timezone.utc)
    t1 = log.log_insight("technical", "today one", "observation", 7)
    t2 = log.log_insight("interpersonal", "today two", "observation", 9)

    s = log.daily_summary()
    assert s.day == date(2026, 2, 5)
    assert [i.id for i in s.todays] == [t1, t2]
    assert s.total == 3
    assert s.to_apply[0].id == t2
    assert s.category_counts == {"technical": 2, "interpersonal": 1}
    assert s.least_covered == ("interpersonal", 1)
    assert s.unused_count == 3


def test_study_guide_groups_by_category():
    log = _log()
    log.log_insight("business", "Etsy SEO basics", "research", 8)
    log.log_insight("technical", "Etsy API quirks", "mistake", 6)
    log.log_insight("business", "Pricing", "research", 5)
    guide = log.study_guide("etsy")
    assert guide.count == 2
    assert set(guide.groups) == {"business", "technical"}
    assert log.study_guide("quantum").count == 0


def test_legacy_flat_list_upgraded():
    legacy = [
        {"id": "1", "timestamp": "2026-02-01T10:00:00Z", "category": "technical", "insight": "a",
         "source": "success", "impact": 9, "relatedTopics": ["x"], "applied": True, "applicationCount": 1},
        {"id": "2", "timestamp": "2026-02-01T11:00:00Z", "category": "business", "insight": "b",
         "source": "research", "impact": 8, "relatedTopics": [], "applied": False, "applicationCount": 0},
    ]
    store = MemoryStore(legacy)
    log = LearningLog(store)
    assert log.stats.total == 2
    assert log.stats.applied == 1
    assert log.get("2").category == "business"
    log.log_insight("business", "c", "observation", 3)
    assert isinstance(store.doc, dict)
    assert len(store.doc["business"]) == 2
