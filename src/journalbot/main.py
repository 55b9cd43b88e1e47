"""
Main entrypoint for journalbot.

What it does:
- Loads runtime settings from `config/config.yaml` (see `journalbot.config.loader`).
- Builds the requested journal over its JSON document under `data_dir`.
- Runs one sub-command (add/transition/log entries, or render reports) and exits.

Where it is used:
- Invoked by `python -m journalbot.main <command>` or the `journalbot` console
  script. A cron entry running `journalbot daily` once a day replaces the old
  shell wrapper.

Key related modules:
- `journalbot.ledger.RecommendationLedger`
- `journalbot.journals` (LearningLog, KnowledgeBase, SelfMonitor)
- `journalbot.reports.render`
"""

import argparse
import logging
import os
import sys
from datetime import datetime, timezone
from typing import List, Optional

from journalbot.config.loader import Settings, load_settings
from journalbot.journals.knowledge_base import KnowledgeBase
from journalbot.journals.learning_log import LearningLog
from journalbot.journals.self_monitor import SelfMonitor
from journalbot.ledger import JsonFileStore, LedgerError, RecommendationLedger, StorageFailure, SuccessTiers
from journalbot.metrics.core import start_server_safe
from journalbot.reports import render

log = logging.getLogger("journalbot.main")


def build_recommendations(settings: Settings) -> RecommendationLedger:
    cfg = settings.recommendations
    return RecommendationLedger(
        JsonFileStore(settings.data_path(cfg.file)),
        comparator=cfg.outcome_comparison,
        tiers=SuccessTiers(strong=cfg.strong_threshold, good=cfg.good_threshold),
    )


def build_learning_log(settings: Settings) -> LearningLog:
    return LearningLog(JsonFileStore(settings.data_path(settings.learning_log.file)))


def build_knowledge_base(settings: Settings) -> KnowledgeBase:
    cfg = settings.knowledge_base
    return KnowledgeBase(JsonFileStore(settings.data_path(cfg.file)), rules=cfg.rules)


def build_self_monitor(settings: Settings, day: Optional[str] = None) -> SelfMonitor:
    day = day or datetime.now(timezone.utc).date().isoformat()
    return SelfMonitor(JsonFileStore(settings.session_path(day)), mood=settings.self_monitor.mood)


# ---- recommendation commands ----

def cmd_recommend_add(settings: Settings, args: argparse.Namespace) -> int:
    ledger = build_recommendations(settings)
    rec_id = ledger.add(args.body, args.context, args.rationale, args.expected, args.follow_up)
    print(rec_id)
    return 0


def cmd_recommend_status(settings: Settings, args: argparse.Namespace) -> int:
    ledger = build_recommendations(settings)
    ledger.transition(args.id, args.status, feedback=args.feedback, actual_outcome=args.actual)
    rec = ledger.get(args.id)
    print(f"{rec.id} -> {rec.status.value}")
    if rec.lesson_learned:
        print(rec.lesson_learned)
    return 0


def cmd_recommend_report(settings: Settings, args: argparse.Namespace) -> int:
    ledger = build_recommendations(settings)
    text = render.render_recommendation_report(ledger.report(), ledger.pending, ledger.now())
    path = render.write_report(settings.reports_dir, "recommendation-analysis.md", text)
    log.info(f"Analysis report saved: {path}")
    return 0


def cmd_recommend_followups(settings: Settings, args: argparse.Namespace) -> int:
    ledger = build_recommendations(settings)
    text = render.render_follow_up_reminder(ledger.due_for_follow_up(), ledger.now())
    if text is None:
        log.info("No recommendations due for follow-up")
        return 0
    path = render.write_report(settings.reports_dir, "follow-up-reminder.md", text)
    log.info(f"Follow-up reminder created: {path}")
    return 0


def cmd_recommend_export(settings: Settings, args: argparse.Namespace) -> int:
    ledger = build_recommendations(settings)
    try:
        os.makedirs(os.path.dirname(os.path.abspath(args.out)), exist_ok=True)
        ledger.to_frame().to_csv(args.out, index=False)
    except OSError as e:
        raise StorageFailure(args.out, f"export failed: {e}") from e
    log.info(f"Exported {len(ledger)} recommendations to {args.out}")
    return 0


# ---- learning log commands ----

def cmd_learn_log(settings: Settings, args: argparse.Namespace) -> int:
    learning = build_learning_log(settings)
    print(learning.log_insight(args.category, args.insight, args.source, args.impact, args.topic))
    return 0


def cmd_learn_applied(settings: Settings, args: argparse.Namespace) -> int:
    build_learning_log(settings).mark_applied(args.id)
    return 0


def cmd_learn_summary(settings: Settings, args: argparse.Namespace) -> int:
    learning = build_learning_log(settings)
    summary = learning.daily_summary()
    text = render.render_learning_summary(summary, settings.learning_log.skills)
    path = render.write_report(settings.reports_dir, f"daily-summary-{summary.day.isoformat()}.md", text)
    log.info(f"Daily summary saved: {path}")
    return 0


def cmd_learn_guide(settings: Settings, args: argparse.Namespace) -> int:
    guide = build_learning_log(settings).study_guide(args.topic)
    slug = "-".join(args.topic.lower().split())
    path = render.write_report(settings.reports_dir, f"study-guide-{slug}.md", render.render_study_guide(guide))
    log.info(f"Study guide created: {path}")
    return 0


# ---- knowledge base commands ----

def cmd_kb_add(settings: Settings, args: argparse.Namespace) -> int:
    kb = build_knowledge_base(settings)
    print(kb.add_learning(args.topic, args.insight, args.source, args.confidence))
    return 0


def cmd_kb_search(settings: Settings, args: argparse.Namespace) -> int:
    for entry in build_knowledge_base(settings).search(args.query):
        print(f"{entry.id}\t{entry.topic}\t{entry.insight}")
    return 0


def cmd_kb_build(settings: Settings, args: argparse.Namespace) -> int:
    kb = build_knowledge_base(settings)
    sections = {name: kb.partition(name) for name in kb.partition_names()}
    path = render.write_report(settings.reports_dir, "knowledge-base.md", render.render_knowledge_base(sections, kb.now()))
    log.info(f"Knowledge base updated: {path}")
    return 0


# ---- self monitor commands ----

def cmd_monitor_interaction(settings: Settings, args: argparse.Namespace) -> int:
    build_self_monitor(settings).log_interaction(args.type, args.topic, args.outcome, args.notes)
    return 0


def cmd_monitor_recommendation(settings: Settings, args: argparse.Namespace) -> int:
    build_self_monitor(settings).log_recommendation(args.what, args.context, args.impact, args.time_frame)
    return 0


def cmd_monitor_learning(settings: Settings, args: argparse.Namespace) -> int:
    build_self_monitor(settings).log_learning(args.topic, args.source, args.insight, args.applicability)
    return 0


def cmd_monitor_report(settings: Settings, args: argparse.Namespace) -> int:
    monitor = build_self_monitor(settings)
    metrics = monitor.metrics()
    text = render.render_self_assessment(metrics, monitor.improvements(metrics), monitor.stats.mood, monitor.now())
    path = render.write_report(settings.reports_dir, f"self-assessment-{monitor.stats.date}.md", text)
    log.info(f"Self-assessment saved: {path} (success rate {metrics.success_rate}%)")
    return 0


def cmd_daily(settings: Settings, args: argparse.Namespace) -> int:
    """Produce every report; each step runs even if an earlier one failed."""
    steps = [
        ("self-monitor", cmd_monitor_report),
        ("knowledge base", cmd_kb_build),
        ("recommendation report", cmd_recommend_report),
        ("follow-up reminder", cmd_recommend_followups),
        ("learning summary", cmd_learn_summary),
    ]
    failures = 0
    for name, step in steps:
        log.info(f"Running {name}...")
        try:
            step(settings, args)
        except LedgerError as e:
            failures += 1
            log.error(f"{name} failed: {e}")
    log.info("Daily reflection complete" if not failures else f"Daily reflection finished with {failures} failures")
    return 1 if failures else 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="journalbot", description="Personal journaling ledgers and reports")
    p.add_argument("--config", default="", help="Path to config YAML (default: config/config.yaml)")
    p.add_argument("-v", "--verbose", action="store_true")
    sub = p.add_subparsers(dest="command", required=True)

    rec = sub.add_parser("recommend", help="Recommendation tracker").add_subparsers(dest="action", required=True)
    a = rec.add_parser("add")
    a.add_argument("body")
    a.add_argument("--context", default="")
    a.add_argument("--rationale", default="")
    a.add_argument("--expected", default=None)
    a.add_argument("--follow-up", dest="follow_up", default=None, help="ISO date to follow up on")
    a.set_defaults(func=cmd_recommend_add)
    s = rec.add_parser("status")
    s.add_argument("id")
    s.add_argument("status", choices=["pending", "implemented", "rejected", "unknown"])
    s.add_argument("--feedback", default=None)
    s.add_argument("--actual", default=None)
    s.set_defaults(func=cmd_recommend_status)
    rec.add_parser("report").set_defaults(func=cmd_recommend_report)
    rec.add_parser("followups").set_defaults(func=cmd_recommend_followups)
    e = rec.add_parser("export")
    e.add_argument("--out", default="reports/recommendations.csv")
    e.set_defaults(func=cmd_recommend_export)

    learn = sub.add_parser("learn", help="Learning log").add_subparsers(dest="action", required=True)
    a = learn.add_parser("log")
    a.add_argument("category")
    a.add_argument("insight")
    a.add_argument("--source", default="observation")
    a.add_argument("--impact", type=int, default=5)
    a.add_argument("--topic", action="append", default=[])
    a.set_defaults(func=cmd_learn_log)
    a = learn.add_parser("applied")
    a.add_argument("id")
    a.set_defaults(func=cmd_learn_applied)
    learn.add_parser("summary").set_defaults(func=cmd_learn_summary)
    a = learn.add_parser("guide")
    a.add_argument("topic")
    a.set_defaults(func=cmd_learn_guide)

    kb = sub.add_parser("kb", help="Knowledge base").add_subparsers(dest="action", required=True)
    a = kb.add_parser("add")
    a.add_argument("topic")
    a.add_argument("insight")
    a.add_argument("--source", default="observation")
    a.add_argument("--confidence", type=int, default=7)
    a.set_defaults(func=cmd_kb_add)
    a = kb.add_parser("search")
    a.add_argument("query")
    a.set_defaults(func=cmd_kb_search)
    kb.add_parser("build").set_defaults(func=cmd_kb_build)

    mon = sub.add_parser("monitor", help="Daily self monitor").add_subparsers(dest="action", required=True)
    a = mon.add_parser("interaction")
    a.add_argument("type")
    a.add_argument("topic")
    a.add_argument("outcome", choices=["successful", "partial", "needs_followup", "failed"])
    a.add_argument("--notes", default="")
    a.set_defaults(func=cmd_monitor_interaction)
    a = mon.add_parser("recommendation")
    a.add_argument("what")
    a.add_argument("--context", default="")
    a.add_argument("--impact", default="")
    a.add_argument("--time-frame", dest="time_frame", default="short_term",
                   choices=["immediate", "short_term", "long_term"])
    a.set_defaults(func=cmd_monitor_recommendation)
    a = mon.add_parser("learning")
    a.add_argument("topic")
    a.add_argument("insight")
    a.add_argument("--source", default="observation")
    a.add_argument("--applicability", default="future", choices=["immediate", "future", "theoretical"])
    a.set_defaults(func=cmd_monitor_learning)
    mon.add_parser("report").set_defaults(func=cmd_monitor_report)

    sub.add_parser("daily", help="Render every report").set_defaults(func=cmd_daily)
    return p


def _daily_log_handler(settings: Settings) -> logging.Handler:
    os.makedirs(settings.logs_dir, exist_ok=True)
    day = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    handler = logging.FileHandler(os.path.join(settings.logs_dir, f"daily-{day}.log"), encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    return handler


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )
    settings = load_settings(args.config)
    handler = _daily_log_handler(settings) if args.command == "daily" else None
    if handler is not None:
        logging.getLogger().addHandler(handler)
    if settings.metrics.enabled:
        start_server_safe(settings.metrics.port)
    try:
        return args.func(settings, args)
    except LedgerError as e:
        log.error(str(e))
        return 1
    finally:
        if handler is not None:
            logging.getLogger().removeHandler(handler)
            handler.close()


if __name__ == "__main__":
    sys.exit(main())
